from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from passlib.context import CryptContext
import jwt

from .errors import (
    HashingError,
    InvalidSignature,
    MalformedToken,
    MissingSecret,
    TokenExpired,
)

logger = logging.getLogger(__name__)

TOKEN_ISSUER = "echoes"
ALGORITHM = "HS256"
# Only the HMAC family is accepted on validation; "none" and asymmetric algs are refused
ACCEPTED_ALGORITHMS = ["HS256", "HS384", "HS512"]
ACCESS_TOKEN_EXPIRE_HOURS = 24
REQUIRED_CLAIMS = ["iss", "sub", "iat", "exp"]

# Use pbkdf2_sha256 to avoid external bcrypt backend issues in some environments
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    try:
        return pwd_context.hash(password)
    except (ValueError, TypeError, OSError) as e:
        logger.error("Password hashing failed: %s", type(e).__name__)
        raise HashingError() from e


def verify_password(plain_password: str, hashed_password: str) -> bool:
    # A malformed or unknown hash reads the same as a wrong password
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


@dataclass(frozen=True)
class Identity:
    """Identity recovered from a valid token."""
    subject: str
    issued_at: datetime
    expires_at: datetime
    issuer: str = TOKEN_ISSUER


def _utc(moment: Optional[datetime]) -> datetime:
    if moment is None:
        return datetime.now(timezone.utc)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _from_timestamp(value) -> datetime:
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def create_access_token(username: str, secret: str, now: Optional[datetime] = None) -> str:
    """
    Issue a signed token for ``username``.

    The result depends only on (username, secret, now): two calls in the
    same second with the same inputs return the same token.

    Raises:
        MissingSecret: if ``secret`` is empty
        ValueError: if ``username`` is empty
    """
    if not secret:
        raise MissingSecret()
    if not username:
        raise ValueError("username must not be empty")

    issued_at = _utc(now)
    payload = {
        "iss": TOKEN_ISSUER,
        "sub": username,
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=ACCESS_TOKEN_EXPIRE_HOURS),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def decode_access_token(token: str, secret: str, now: Optional[datetime] = None) -> Identity:
    """
    Validate ``token`` and return the identity it asserts.

    Checks, in order: structure, declared algorithm, signature, expiry.
    A token issued in the future is accepted. There is no revocation
    lookup, so a token stays valid for its whole lifetime.

    Raises:
        MissingSecret: if ``secret`` is empty
        MalformedToken: token cannot be parsed or lacks a required claim
        InvalidSignature: wrong algorithm or signature mismatch
        TokenExpired: ``now`` is past the token's ``exp``
    """
    if not secret:
        raise MissingSecret()
    if not token:
        raise MalformedToken("Empty token")

    try:
        # Expiry is checked below against the caller's clock, not PyJWT's
        data = jwt.decode(
            token,
            secret,
            algorithms=ACCEPTED_ALGORITHMS,
            options={
                "verify_exp": False,
                "verify_iat": False,
                "verify_nbf": False,
                "require": REQUIRED_CLAIMS,
            },
        )
    except jwt.InvalidAlgorithmError as e:
        raise InvalidSignature(str(e)) from e
    except jwt.InvalidSignatureError as e:
        raise InvalidSignature(str(e)) from e
    except jwt.InvalidTokenError as e:
        raise MalformedToken(str(e)) from e

    subject = data.get("sub")
    if not isinstance(subject, str) or not subject:
        raise MalformedToken("Token subject must be a non-empty string")

    try:
        issued_at = _from_timestamp(data["iat"])
        expires_at = _from_timestamp(data["exp"])
    except (TypeError, ValueError, OverflowError, OSError) as e:
        raise MalformedToken("Token timestamps are not numeric") from e

    if _utc(now) > expires_at:
        raise TokenExpired("Token has expired")

    return Identity(
        subject=subject,
        issued_at=issued_at,
        expires_at=expires_at,
        issuer=data.get("iss", TOKEN_ISSUER),
    )


class PasswordHasher:
    """Thin object form of hash_password/verify_password for injection."""

    def hash(self, password: str) -> str:
        return hash_password(password)

    def verify(self, password: str, hashed: str) -> bool:
        return verify_password(password, hashed)


class TokenIssuer:
    def __init__(self, secret: str):
        self.secret = secret

    def issue(self, username: str, now: Optional[datetime] = None) -> str:
        return create_access_token(username, self.secret, now)


class TokenValidator:
    def __init__(self, secret: str):
        self.secret = secret

    def validate(self, token: str, now: Optional[datetime] = None) -> Identity:
        return decode_access_token(token, self.secret, now)
