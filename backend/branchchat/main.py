"""
BranchChat - Main FastAPI Application
A multi-provider chat backend with branching conversation history.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from .config import settings
from .database import init_db, close_db
from .exceptions import BranchChatError
from .utils.logging_config import setup_logging
from .routers import (
    chat_router,
    conversations_router,
    credentials_router,
    settings_router
)


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging(settings.LOG_LEVEL)
    await init_db()
    logger.info("%s %s started", settings.APP_NAME, settings.APP_VERSION)

    yield

    # Shutdown
    await close_db()
    logger.info("Application shutdown complete")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Multi-provider chat with branching conversation history",
    lifespan=lifespan
)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BranchChatError)
async def branchchat_error_handler(request: Request, exc: BranchChatError):
    """Render domain errors as typed JSON failures."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.message,
            "error": exc.code,
            "category": exc.category
        }
    )


# Include routers
app.include_router(chat_router)
app.include_router(conversations_router)
app.include_router(credentials_router)
app.include_router(settings_router)


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
    """API information endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "endpoints": {
            "chat": "/api/chat",
            "conversations": "/api/conversations",
            "credentials": "/api/credentials",
            "settings": "/api/settings"
        }
    }
