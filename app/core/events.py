"""
Application lifecycle events
Handles startup and shutdown tasks
"""

from fastapi import FastAPI
import logging
from contextlib import asynccontextmanager

from .database import init_db, close_db
from .logging import setup_logging
from .config import settings

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager
    Handles startup and shutdown events
    """
    # Startup
    try:
        setup_logging()
        logger.info(f"Starting {settings.APP_NAME} {settings.APP_VERSION} ({settings.ENVIRONMENT})")

        # Tests create their own schema per database
        if settings.ENVIRONMENT != "test":
            await init_db()
            logger.info("Database initialized")

        yield

    finally:
        # Shutdown
        logger.info(f"Shutting down {settings.APP_NAME}...")
        await close_db()
