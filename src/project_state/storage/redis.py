"""Redis key-value storage.

Records are stored in enhanced form. The project list index is a Redis hash
(one field per project id) so concurrent saves update it atomically, and file
contents longer than the chunk size are split across content-versioned
``file:`` chunk keys.
"""

import re

from redis.asyncio import Redis
from redis.exceptions import RedisError

from src.project_state.models.enums import StorageKind
from src.project_state.models.project import ProjectState
from src.project_state.schemas.pagination import ProjectListEntry
from src.project_state.storage.keys import PROJECT_INDEX_KEY
from src.project_state.storage.keyvalue import KeyValueStorageAdapter

DEFAULT_CHUNK_SIZE = 512 * 1024
SCAN_BATCH_SIZE = 500

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def escape_glob(value: str) -> str:
    """Escape Redis MATCH pattern metacharacters in ``value``."""
    return _GLOB_SPECIAL.sub(r"\\\1", value)


class RedisStorageAdapter(KeyValueStorageAdapter):
    """Project storage on a shared ``redis.asyncio`` client.

    The client must be created with ``decode_responses=True``. It is owned by
    the connection layer (``core.redis``).

    Args:
        client: Connected Redis client.
        chunk_size: Characters per chunk for large file contents.
        key_prefix: Prepended to every key, for sharing a database.
    """

    kind = StorageKind.KEY_VALUE
    io_errors = (RedisError, OSError)

    def __init__(
        self,
        client: Redis,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        key_prefix: str = "",
    ):
        super().__init__(enhanced=True, chunk_size=chunk_size)
        self.client = client
        self.key_prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def _get(self, key: str) -> str | None:
        return await self.client.get(self._key(key))

    async def _set(self, key: str, value: str) -> None:
        await self.client.set(self._key(key), value)

    async def _set_many(self, items: dict[str, str]) -> None:
        if not items:
            return
        pipe = self.client.pipeline()
        for key, value in items.items():
            pipe.set(self._key(key), value)
        await pipe.execute()

    async def _delete(self, key: str) -> bool:
        return bool(await self.client.delete(self._key(key)))

    async def _delete_many(self, keys: set[str]) -> None:
        await self.client.delete(*(self._key(key) for key in keys))

    async def _delete_prefix(self, prefix: str) -> int:
        pattern = escape_glob(self._key(prefix)) + "*"
        keys = [key async for key in self.client.scan_iter(match=pattern, count=SCAN_BATCH_SIZE)]
        if not keys:
            return 0
        return await self.client.delete(*keys)

    async def load_index(self) -> list[ProjectListEntry]:
        with self.translate_errors("load_index"):
            rows = await self.client.hgetall(self._key(PROJECT_INDEX_KEY))  # type: ignore[misc]
            return [ProjectListEntry.model_validate_json(raw) for raw in rows.values()]

    async def _index_put(self, project: ProjectState) -> None:
        entry = ProjectListEntry.from_project(project)
        await self.client.hset(  # type: ignore[misc]
            self._key(PROJECT_INDEX_KEY), project.id, entry.to_json()
        )

    async def _index_remove(self, project_id: str) -> None:
        await self.client.hdel(self._key(PROJECT_INDEX_KEY), project_id)  # type: ignore[misc]
