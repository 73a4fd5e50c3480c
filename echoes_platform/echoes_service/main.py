"""
Echoes API - authenticated relay to a chat completion endpoint
"""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .db import init_db
from .log import configure_logging
from .routes import auth, echo, health

configure_logging(settings.LOG_LEVEL, settings.LOG_DIR)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Initialize database on startup"""
    if not settings.JWT_SECRET:
        logger.warning("JWT_SECRET is not set; login and protected routes will fail")
    if not settings.OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY is not set; /api/echo will fail")
    init_db()
    yield


app = FastAPI(
    title="Echoes API",
    description="Authenticated relay to a chat completion endpoint",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def invalid_input_handler(request: Request, exc: RequestValidationError):
    logger.info("Invalid input on %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid input", "errors": jsonable_encoder(exc.errors())},
    )


app.include_router(health.router)
app.include_router(auth.router)
app.include_router(echo.router)
