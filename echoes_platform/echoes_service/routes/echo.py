"""
Protected relay endpoints: forward text to the completion API and read history.
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
import logging

from ..completion import CompletionClient
from ..config import Settings, get_settings
from ..db import get_db
from ..errors import CompletionError, ConfigError
from ..gate import RequestContext, require_identity
from ..repositories import MessageStore
from ..schemas import EchoRequest, EchoResponse, IdentityResponse, MessageResponse

router = APIRouter(prefix="/api", tags=["echo"])
logger = logging.getLogger(__name__)


def get_completion_client(settings: Settings = Depends(get_settings)) -> CompletionClient:
    return CompletionClient(
        api_key=settings.OPENAI_API_KEY,
        api_url=settings.OPENAI_API_URL,
        model=settings.OPENAI_MODEL,
        timeout=settings.COMPLETION_TIMEOUT_SECONDS,
    )


@router.post("/echo", response_model=EchoResponse)
def echo(
    payload: EchoRequest,
    ctx: RequestContext = Depends(require_identity),
    db: Session = Depends(get_db),
    client: CompletionClient = Depends(get_completion_client),
):
    # The reply is fetched first so a failed call leaves no half-written row
    try:
        reply = client.complete(payload.user_text)
    except ConfigError as e:
        logger.error("Completion client not configured: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Completion service is not configured"
        ) from e
    except CompletionError as e:
        logger.warning("Completion failed for user %s: %s", ctx.username, e)
        raise HTTPException(status_code=e.status_code, detail=e.detail) from e

    message = MessageStore(db).save(ctx.username, payload.user_text, reply)
    return EchoResponse(
        username=ctx.username,
        user_text=message.user_text,
        gpt_reply=message.gpt_reply,
        formatted_message=message.formatted(),
    )


@router.get("/messages", response_model=List[MessageResponse])
def list_messages(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    ctx: RequestContext = Depends(require_identity),
    db: Session = Depends(get_db),
):
    return MessageStore(db).list_for(ctx.username, limit=limit, offset=offset)


@router.get("/messages/{message_id}", response_model=MessageResponse)
def get_message(
    message_id: int,
    ctx: RequestContext = Depends(require_identity),
    db: Session = Depends(get_db),
):
    message = MessageStore(db).get_for(ctx.username, message_id)
    if message is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    return message


@router.get("/me", response_model=IdentityResponse)
def whoami(ctx: RequestContext = Depends(require_identity)):
    return IdentityResponse(
        username=ctx.username,
        issued_at=ctx.identity.issued_at,
        expires_at=ctx.identity.expires_at,
    )
