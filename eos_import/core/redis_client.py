"""Redis client wrapper for upload tickets and the record store."""

import logging
from typing import Optional

import redis as redis_lib

from eos_import.core.config import settings

logger = logging.getLogger(__name__)

_client: Optional[redis_lib.Redis] = None


def init_redis_client() -> redis_lib.Redis:
    """Connect to Redis and verify it answers.

    Raises redis.RedisError if the server is unreachable; the client is left
    unset in that case so get_redis_client() keeps failing loudly.
    """
    global _client
    client = redis_lib.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.redis_db,
        password=settings.redis_password,
        socket_timeout=settings.redis_socket_timeout,
        decode_responses=True,
    )
    client.ping()
    _client = client
    logger.info(f"Redis client initialized ({settings.redis_host}:{settings.redis_port}/{settings.redis_db})")
    return _client


def get_redis_client() -> redis_lib.Redis:
    if _client is None:
        raise RuntimeError("Redis client not initialized.")
    return _client


def close_redis_client() -> None:
    global _client
    if _client:
        _client.close()
        _client = None
        logger.info("Redis client closed")


def check_connection() -> bool:
    """True when the client exists and the server answers PING."""
    if _client is None:
        return False
    try:
        return bool(_client.ping())
    except redis_lib.RedisError as e:
        logger.warning(f"Redis ping failed: {e}")
        return False
