"""Health check endpoint — verifies the service and its Redis connection."""

from fastapi import APIRouter

from eos_import.core import redis_client

router = APIRouter()


@router.get("/health")
async def health_check():
    """Check service status and connectivity to Redis."""
    redis_ok = redis_client.check_connection()

    return {
        "status": "ok" if redis_ok else "degraded",
        "services": {
            "redis": "ok" if redis_ok else "error",
        }
    }
