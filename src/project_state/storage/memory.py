"""In-process storage. Always available; contents are lost on process exit."""

from dataclasses import dataclass, field

from src.project_state.models.enums import StorageKind
from src.project_state.storage.keyvalue import KeyValueStorageAdapter


@dataclass
class MemoryStore:
    """String map backing the memory adapter.

    Owned by the runtime context rather than the adapter, so adapters rebuilt
    from the same context share data.
    """

    values: dict[str, str] = field(default_factory=dict)

    def clear(self) -> None:
        self.values.clear()


class MemoryStorageAdapter(KeyValueStorageAdapter):
    kind = StorageKind.MEMORY

    def __init__(self, store: MemoryStore | None = None):
        super().__init__(enhanced=False)
        self.store = store if store is not None else MemoryStore()

    async def _get(self, key: str) -> str | None:
        return self.store.values.get(key)

    async def _set(self, key: str, value: str) -> None:
        self.store.values[key] = value

    async def _delete(self, key: str) -> bool:
        return self.store.values.pop(key, None) is not None

    async def _delete_prefix(self, prefix: str) -> int:
        keys = [k for k in self.store.values if k.startswith(prefix)]
        for key in keys:
            del self.store.values[key]
        return len(keys)
