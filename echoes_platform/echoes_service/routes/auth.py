"""
Registration and login endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from ..auth import PasswordHasher, TokenIssuer
from ..config import Settings, get_settings
from ..db import get_db
from ..errors import ConfigError, DuplicateUsername, HashingError
from ..repositories import CredentialStore
from ..schemas import RegisterResponse, TokenResponse, UserCredentials
from ..utils.event_logger import log_auth_event

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"


def get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


def get_token_issuer(settings: Settings = Depends(get_settings)) -> TokenIssuer:
    return TokenIssuer(settings.JWT_SECRET)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: UserCredentials,
    request: Request,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    try:
        hashed_pw = hasher.hash(payload.password)
    except HashingError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail) from e

    try:
        CredentialStore(db).insert(payload.username, hashed_pw)
    except DuplicateUsername as e:
        logger.info("Registration rejected, username taken: %s", payload.username)
        raise HTTPException(status_code=e.status_code, detail=e.detail) from e
    except SQLAlchemyError as e:
        logger.exception("Failed to insert user into DB: %s", payload.username)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to register user"
        ) from e

    log_auth_event("register", payload.username, request, db)
    logger.info("User registered successfully: %s", payload.username)
    return RegisterResponse()


@router.post("/login", response_model=TokenResponse)
def login(
    credentials: UserCredentials,
    request: Request,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    user = CredentialStore(db).find_by_username(credentials.username)
    # Unknown user and wrong password get the same answer
    if not user or not hasher.verify(credentials.password, user.password):
        log_auth_event("login_failure", credentials.username, request, db)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    try:
        token = issuer.issue(user.username)
    except ConfigError as e:
        logger.error("Failed to generate token: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate token"
        ) from e

    log_auth_event("login_success", user.username, request, db)
    logger.info("User logged in successfully: %s", user.username)
    return TokenResponse(token=token)
