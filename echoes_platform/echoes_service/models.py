from sqlalchemy import Column, Integer, String, DateTime, Text, Enum, Index, JSON
from datetime import datetime
from .db import Base
import uuid


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    # password hash, never the plaintext and never returned by the API
    password = Column(String, nullable=False)

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"


class Message(Base):
    __tablename__ = "messages"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, nullable=False, index=True)
    user_text = Column(Text, nullable=False)
    gpt_reply = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def formatted(self) -> str:
        return f"{self.username}: {self.user_text} (GPT Reply: {self.gpt_reply})"


class AuthEvent(Base):
    __tablename__ = "auth_events"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String, nullable=False)
    event_type = Column(
        Enum("register", "login_success", "login_failure", name="auth_event_type"),
        nullable=False
    )
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)
    event_metadata = Column(JSON, nullable=True)

    __table_args__ = (
        Index('ix_auth_events_username', 'username'),
        Index('ix_auth_events_timestamp', 'timestamp'),
        Index('ix_auth_events_username_timestamp', 'username', 'timestamp'),
    )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "username": self.username,
            "event_type": self.event_type,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "metadata": self.event_metadata or {}
        }
