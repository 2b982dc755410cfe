"""
mdshare Note Service

FastAPI application entrypoint with async lifespan management.
Serves the note REST API consumed by the mdshare client.

Start locally:
    uvicorn mdshare.main:app --host 0.0.0.0 --port 8000 --reload
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from mdshare.api.v1.notes import router as notes_router
from mdshare.core.config import settings
from mdshare.core.database import dispose_engine, ping_database
from mdshare.core.errors import register_exception_handlers
from mdshare.core.logging import setup_logging

# Initialize logging before any log statements
setup_logging()
logger = logging.getLogger(__name__)


async def wait_for_db(retries: int = 10, delay: int = 1) -> bool:
    """
    Wait for PostgreSQL to become available.

    Useful in containerized environments where the database may start
    after the application. Implements retry logic with fixed delay.

    Args:
        retries: Maximum connection attempts.
        delay: Seconds between attempts.

    Returns:
        True if connection established, False if all retries exhausted.
    """
    for i in range(retries):
        if await ping_database():
            logger.info("Postgres connection established")
            return True
        logger.warning("Waiting for Postgres (%d/%d)...", i + 1, retries)
        await asyncio.sleep(delay)
    return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
        - Validates database connectivity (required, blocks startup on failure)

    Shutdown:
        - Disposes the database engine
    """
    logger.info("Starting %s...", settings.PROJECT_NAME)
    logger.info("Log Level: %s", settings.LOG_LEVEL)

    if not await wait_for_db(retries=settings.DB_CONNECT_RETRIES):
        logger.critical("Could not connect to Postgres. Shutting down.")
        raise RuntimeError("Database connection failed")

    yield  # Application runs here

    await dispose_engine()
    logger.info("Shutting down %s...", settings.PROJECT_NAME)


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
register_exception_handlers(app)

app.include_router(notes_router, prefix="/api/notes", tags=["Notes"])


@app.get("/health")
async def health_check():
    """
    Health check endpoint for load balancers and orchestrators.

    Runs a live database probe: 200 when the database answers,
    503 otherwise.
    """
    db_up = await ping_database()
    body = {
        "status": "healthy" if db_up else "unhealthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "services": {"database": "up" if db_up else "down", "api": "up"},
    }
    return JSONResponse(status_code=200 if db_up else 503, content=body)
