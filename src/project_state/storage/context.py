"""Runtime context: which storage capabilities this process has."""

from dataclasses import dataclass, field
from pathlib import Path

from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncEngine

from src.project_state.core.config import get_settings
from src.project_state.core.db import dispose_engine, get_engine
from src.project_state.core.redis import close_redis, get_redis
from src.project_state.models.enums import StorageKind
from src.project_state.storage.memory import MemoryStore


@dataclass
class RuntimeContext:
    """Capabilities handed to the backend selector.

    Attributes:
        engine: Async SQLAlchemy engine, if a relational store is reachable.
        redis: Connected Redis client, if a key-value store is reachable.
        local_store_path: Path of the local JSON document store, if any.
        memory_store: Backing map for the in-process store.
        preferred_storage: Backend to use when it is available.
        kv_chunk_size: Chunk threshold for the key-value store.
        redis_key_prefix: Prefix for every key-value store key.
    """

    engine: AsyncEngine | None = None
    redis: Redis | None = None
    local_store_path: str | Path | None = None
    memory_store: MemoryStore = field(default_factory=MemoryStore)
    preferred_storage: StorageKind | None = None
    kv_chunk_size: int = 512 * 1024
    redis_key_prefix: str = ""

    @classmethod
    async def from_settings(cls, memory_store: MemoryStore | None = None) -> "RuntimeContext":
        """Build a context from configuration, connecting to Redis if configured."""
        settings = get_settings()
        return cls(
            engine=get_engine(),
            redis=await get_redis(),
            local_store_path=settings.local_store_path,
            memory_store=memory_store if memory_store is not None else MemoryStore(),
            preferred_storage=(
                StorageKind(settings.preferred_storage) if settings.preferred_storage else None
            ),
            kv_chunk_size=settings.kv_chunk_size,
            redis_key_prefix=settings.redis_key_prefix,
        )


async def close_runtime() -> None:
    """Release the Redis pool and database engine opened by ``from_settings``.

    Should be called during application shutdown.
    """
    await close_redis()
    await dispose_engine()
