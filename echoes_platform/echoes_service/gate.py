"""
Access gate for protected endpoints.

The gate reads the ``Authorization`` header, requires the ``Bearer`` scheme,
validates the token and hands a typed ``RequestContext`` to the handler.
Any validator failure is reported to the client as the same generic 401;
the specific reason only goes to the log.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
import logging

from fastapi import Depends, Header, HTTPException, status

from .auth import Identity, TokenValidator
from .config import Settings, get_settings
from .errors import (
    AuthorizationHeaderMissing,
    GateError,
    InvalidAuthorizationFormat,
    InvalidToken,
    MissingSecret,
    TokenError,
)

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class RequestContext:
    """Per-request context passed to handlers behind the gate."""
    identity: Identity

    @property
    def username(self) -> str:
        return self.identity.subject


class AccessGate:
    def __init__(self, validator: TokenValidator):
        self.validator = validator

    def admit(self, authorization: Optional[str], now: Optional[datetime] = None) -> RequestContext:
        """
        Admit a request carrying ``authorization`` or raise a GateError.

        Raises:
            AuthorizationHeaderMissing: no header
            InvalidAuthorizationFormat: header without the Bearer prefix
            InvalidToken: token failed validation for any reason
            MissingSecret: the validator has no signing secret
        """
        if not authorization:
            logger.info("Authorization header is missing")
            raise AuthorizationHeaderMissing()

        if not authorization.startswith(BEARER_PREFIX):
            logger.info("Authorization header format is invalid")
            raise InvalidAuthorizationFormat()

        token = authorization[len(BEARER_PREFIX):]
        try:
            identity = self.validator.validate(token, now)
        except TokenError as e:
            logger.info("Rejected token: %s (%s)", e.code, e)
            raise InvalidToken() from e

        return RequestContext(identity=identity)


def get_token_validator(settings: Settings = Depends(get_settings)) -> TokenValidator:
    return TokenValidator(settings.JWT_SECRET)


def require_identity(
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    validator: TokenValidator = Depends(get_token_validator),
) -> RequestContext:
    """FastAPI dependency guarding every protected route."""
    gate = AccessGate(validator)
    try:
        return gate.admit(authorization)
    except MissingSecret as e:
        logger.error("Cannot validate tokens: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server authentication is not configured"
        ) from e
    except GateError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail=e.detail,
            headers={"WWW-Authenticate": "Bearer"}
        ) from e
