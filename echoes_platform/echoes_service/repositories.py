"""
Credential and message stores over a SQLAlchemy session.
"""
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .errors import DuplicateUsername
from .models import Message, User


class CredentialStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def insert(self, username: str, password_hash: str) -> User:
        """
        Persist a new credential.

        Raises:
            DuplicateUsername: if the username is already taken
        """
        if self.find_by_username(username) is not None:
            raise DuplicateUsername()

        user = User(username=username, password=password_hash)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration
            self.db.rollback()
            raise DuplicateUsername() from e
        self.db.refresh(user)
        return user


class MessageStore:
    def __init__(self, db: Session):
        self.db = db

    def save(self, username: str, user_text: str, gpt_reply: str) -> Message:
        message = Message(username=username, user_text=user_text, gpt_reply=gpt_reply)
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        return message

    def list_for(self, username: str, limit: int = 50, offset: int = 0) -> List[Message]:
        return (
            self.db.query(Message)
            .filter(Message.username == username)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def get_for(self, username: str, message_id: int) -> Optional[Message]:
        return (
            self.db.query(Message)
            .filter(Message.id == message_id, Message.username == username)
            .first()
        )
