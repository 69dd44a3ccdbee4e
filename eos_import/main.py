"""EOS Data Import Service — FastAPI application entry point.

Initializes the Redis connection and the import pipeline on startup and
registers API routers.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from eos_import.api import health, imports
from eos_import.core import redis_client
from eos_import.core.config import settings
from eos_import.core.import_engine import ImportOrchestrator
from eos_import.core.record_store import RedisRecordStore
from eos_import.core.upload_store import RedisTicketStore, UploadStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize service connections on startup, close on shutdown."""
    logger.info("Starting EOS import service...")

    # Initialize Redis client
    try:
        redis_client.init_redis_client()
    except Exception as e:
        logger.error(f"Failed to connect to Redis: {e}")

    # Upload directory, tickets and record store
    upload_store = UploadStore(
        upload_dir=settings.resolve_path(settings.upload_dir),
        tickets=RedisTicketStore(),
        ttl_seconds=settings.upload_ttl_seconds,
        max_bytes=settings.max_upload_bytes,
    )
    upload_store.ensure_dir()
    try:
        upload_store.purge_stale()
    except Exception as e:
        logger.error(f"Failed to purge stale uploads: {e}")

    app.state.orchestrator = ImportOrchestrator(
        upload_store=upload_store,
        record_store=RedisRecordStore(),
        preview_rows=settings.preview_rows,
        reject_invalid_imports=settings.reject_invalid_imports,
    )
    logger.info(f"Import pipeline initialized (uploads in {upload_store.upload_dir})")

    logger.info("EOS import service ready")
    yield

    # Shutdown
    logger.info("Shutting down EOS import service...")
    redis_client.close_redis_client()
    logger.info("EOS import service stopped")


app = FastAPI(
    title="EOS Data Import Service",
    version="0.1.0",
    description="Bulk CSV and Excel import of users, scorecards, rocks, to-dos, "
                "issues, meetings and processes.",
    lifespan=lifespan,
)

app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(imports.router, prefix="/api/csv", tags=["imports"])


def run() -> None:
    """Serve the app with uvicorn on the configured host and port."""
    uvicorn.run(app, host=settings.backend_host, port=settings.backend_port)
