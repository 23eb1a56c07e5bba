"""
PrepTrack - Main FastAPI Application
Exam practice tracker with public chat, conversations and presence.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
import time

from .config import settings
from .database import init_db, close_db
from .exceptions import PrepTrackError, preptrack_exception_handler, general_exception_handler
from .routers import (
    auth_router,
    chat_router,
    conversations_router,
    presence_router,
    users_router,
    sheets_router,
    moderator_router
)


logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(f"Starting {settings.APP_NAME} {settings.APP_VERSION}")
    await init_db()

    yield

    logger.info("Shutting down")
    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Exam practice tracker with public chat, private conversations and presence",
    lifespan=lifespan
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    logger.info(f"{request.method} {request.url.path} - {response.status_code} - {process_time:.3f}s")
    return response


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.add_exception_handler(PrepTrackError, preptrack_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)


# Include routers
app.include_router(auth_router)
app.include_router(chat_router)
app.include_router(conversations_router)
app.include_router(presence_router)
app.include_router(users_router)
app.include_router(sheets_router)
app.include_router(moderator_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION
    }


@app.get("/api")
async def api_info():
    """API information endpoint, with the polling cadence clients should use."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "endpoints": {
            "auth": "/api/auth",
            "chat": "/api/chat/messages",
            "conversations": "/api/conversations",
            "presence": "/api/presence/heartbeat",
            "online_users": "/api/online-users",
            "typing": "/api/typing",
            "users": "/api/users",
            "activity": "/api/activity",
            "sheets": "/api/sheets",
            "chapters": "/api/chapters",
            "recommendations": "/api/recommendations",
            "moderator": "/api/moderator"
        },
        "presence": {
            "heartbeat_interval_seconds": settings.PRESENCE_HEARTBEAT_INTERVAL_SECONDS,
            "offline_timeout_seconds": settings.PRESENCE_OFFLINE_TIMEOUT_SECONDS,
            "typing_timeout_seconds": settings.TYPING_TIMEOUT_SECONDS
        },
        "message_max_length": settings.MESSAGE_MAX_LENGTH
    }
