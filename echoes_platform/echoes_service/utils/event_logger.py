"""
Event logger utility for authentication events.
"""
from datetime import datetime
from typing import Optional
from fastapi import Request
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging

from ..models import AuthEvent

logger = logging.getLogger(__name__)


ALLOWED_EVENT_TYPES = {
    "register",
    "login_success",
    "login_failure",
}


def client_ip(request: Request) -> Optional[str]:
    if request.client and request.client.host:
        return request.client.host

    # X-Forwarded-For can contain multiple IPs, take the first one
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return None


def log_auth_event(
    event_type: str,
    username: str,
    request: Request,
    db: Session,
    metadata: dict = None
) -> None:
    """
    Record an authentication event in the database and the log.

    Args:
        event_type: One of: register, login_success, login_failure
        username: Username the event is about (may not exist for failures)
        request: FastAPI Request object
        db: Database session
        metadata: Optional dictionary of additional context

    Raises:
        ValueError: If event_type is invalid
    """
    if event_type not in ALLOWED_EVENT_TYPES:
        raise ValueError(
            f"Invalid event_type '{event_type}'. Must be one of: {', '.join(sorted(ALLOWED_EVENT_TYPES))}"
        )

    ip_address = client_ip(request)
    user_agent = request.headers.get("user-agent")

    try:
        auth_event = AuthEvent(
            username=username,
            event_type=event_type,
            ip_address=ip_address,
            user_agent=user_agent,
            timestamp=datetime.utcnow(),
            event_metadata=metadata or {}
        )
        db.add(auth_event)
        db.commit()

        logger.info("AUTH %s username=%s ip=%s", event_type, username, ip_address)

    except SQLAlchemyError as e:
        # Recording failure must not break the auth flow
        logger.warning(
            "Failed to log auth event - username=%s, event_type=%s, error=%s",
            username, event_type, e
        )
        db.rollback()
