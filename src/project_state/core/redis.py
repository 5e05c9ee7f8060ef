"""Redis client for the key-value storage backend.

The key-value adapter is only selected when ``get_redis`` hands back a live
client. If Redis is not configured or unreachable it returns None and backend
selection moves on to the next capability. A failed attempt is remembered
until ``close_redis`` or ``reset_redis_state`` runs.
"""

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from src.project_state.core.config import Settings, get_settings
from src.project_state.core.logging import get_logger

logger = get_logger(__name__)

_pool: ConnectionPool | None = None
_redis: Redis | None = None
_connection_attempted: bool = False


def _create_pool(url: str, settings: Settings) -> ConnectionPool:
    return ConnectionPool.from_url(
        url,
        max_connections=settings.redis_pool_size,
        socket_connect_timeout=settings.redis_connect_timeout,
        decode_responses=True,  # Project records are JSON text
    )


async def _discard() -> None:
    global _pool, _redis
    if _redis is not None:
        await _redis.aclose()
    if _pool is not None:
        await _pool.disconnect()
    _redis = None
    _pool = None


async def get_redis() -> Redis | None:
    """Return the shared client, connecting on first call.

    Returns:
        A client that answered PING, or None when Redis is not configured
        or the connection attempt failed.
    """
    global _pool, _redis, _connection_attempted

    if _redis is not None:
        return _redis
    if _connection_attempted:
        return None
    _connection_attempted = True

    settings = get_settings()
    if not settings.redis_url:
        logger.info("Redis not configured, key-value storage disabled")
        return None

    _pool = _create_pool(settings.redis_url, settings)
    _redis = Redis(connection_pool=_pool)
    try:
        await _redis.ping()  # type: ignore[misc]
    except (RedisError, OSError) as e:
        logger.warning(
            "Redis connection failed, key-value storage disabled",
            error=str(e),
            error_type=type(e).__name__,
        )
        await _discard()
        return None

    logger.info("Redis connected", pool_size=settings.redis_pool_size)
    return _redis


async def close_redis() -> None:
    """Close the pool and allow the next ``get_redis`` call to reconnect."""
    global _connection_attempted
    connected = _redis is not None
    await _discard()
    _connection_attempted = False
    if connected:
        logger.info("Redis connection closed")


def reset_redis_state() -> None:
    """Forget the client without closing it. For tests."""
    global _pool, _redis, _connection_attempted
    _redis = None
    _pool = None
    _connection_attempted = False
