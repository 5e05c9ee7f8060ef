"""Storage adapters, backend selection and the enhanced-state converter."""

from src.project_state.storage.base import StorageAdapter
from src.project_state.storage.context import RuntimeContext, close_runtime
from src.project_state.storage.converter import from_enhanced, to_enhanced
from src.project_state.storage.local import LocalFileStorageAdapter
from src.project_state.storage.memory import MemoryStorageAdapter, MemoryStore
from src.project_state.storage.redis import RedisStorageAdapter
from src.project_state.storage.relational import RelationalStorageAdapter
from src.project_state.storage.selector import SELECTION_ORDER, select_adapter

__all__ = [
    "SELECTION_ORDER",
    "LocalFileStorageAdapter",
    "MemoryStorageAdapter",
    "MemoryStore",
    "RedisStorageAdapter",
    "RelationalStorageAdapter",
    "RuntimeContext",
    "StorageAdapter",
    "close_runtime",
    "from_enhanced",
    "select_adapter",
    "to_enhanced",
]
