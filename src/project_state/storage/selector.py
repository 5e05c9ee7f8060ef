"""Backend selection.

Picks the richest storage the runtime context can support, in fixed order:
relational, key-value, local, memory.
"""

from collections.abc import Callable

from src.project_state.core.exceptions import StorageUnavailableError
from src.project_state.core.logging import get_logger
from src.project_state.models.enums import StorageKind
from src.project_state.storage.base import StorageAdapter
from src.project_state.storage.context import RuntimeContext
from src.project_state.storage.local import LocalFileStorageAdapter
from src.project_state.storage.memory import MemoryStorageAdapter
from src.project_state.storage.redis import RedisStorageAdapter
from src.project_state.storage.relational import RelationalStorageAdapter

logger = get_logger(__name__)

AdapterFactory = Callable[[RuntimeContext], StorageAdapter]

SELECTION_ORDER: tuple[StorageKind, ...] = (
    StorageKind.RELATIONAL,
    StorageKind.KEY_VALUE,
    StorageKind.LOCAL,
    StorageKind.MEMORY,
)


def _missing(kind: StorageKind, capability: str) -> StorageUnavailableError:
    return StorageUnavailableError(
        f"Runtime context has no {capability}", backend=kind.value, attempted=[kind.value]
    )


def _relational(context: RuntimeContext) -> StorageAdapter:
    if context.engine is None:
        raise _missing(StorageKind.RELATIONAL, "database engine")
    return RelationalStorageAdapter(context.engine)


def _key_value(context: RuntimeContext) -> StorageAdapter:
    if context.redis is None:
        raise _missing(StorageKind.KEY_VALUE, "Redis client")
    return RedisStorageAdapter(
        context.redis,
        chunk_size=context.kv_chunk_size,
        key_prefix=context.redis_key_prefix,
    )


def _local(context: RuntimeContext) -> StorageAdapter:
    if not context.local_store_path:
        raise _missing(StorageKind.LOCAL, "local store path")
    return LocalFileStorageAdapter(context.local_store_path)


def _memory(context: RuntimeContext) -> StorageAdapter:
    return MemoryStorageAdapter(context.memory_store)


FACTORIES: dict[StorageKind, AdapterFactory] = {
    StorageKind.RELATIONAL: _relational,
    StorageKind.KEY_VALUE: _key_value,
    StorageKind.LOCAL: _local,
    StorageKind.MEMORY: _memory,
}


def available_kinds(context: RuntimeContext) -> list[StorageKind]:
    """Backends the context has capabilities for, in selection order."""
    capabilities = {
        StorageKind.RELATIONAL: context.engine is not None,
        StorageKind.KEY_VALUE: context.redis is not None,
        StorageKind.LOCAL: bool(context.local_store_path),
        StorageKind.MEMORY: True,
    }
    return [kind for kind in SELECTION_ORDER if capabilities[kind]]


def select_adapter(
    context: RuntimeContext,
    factories: dict[StorageKind, AdapterFactory] | None = None,
) -> StorageAdapter:
    """Construct the adapter for the richest available backend.

    A preferred backend is tried first when the context has its capability.
    Factories that raise are logged and skipped.

    Raises:
        StorageUnavailableError: If no adapter could be constructed.
    """
    factories = factories or FACTORIES
    candidates = available_kinds(context)
    if context.preferred_storage is not None:
        if context.preferred_storage in candidates:
            candidates.remove(context.preferred_storage)
            candidates.insert(0, context.preferred_storage)
        else:
            logger.warning(
                "Preferred storage unavailable, falling back",
                preferred=context.preferred_storage.value,
            )

    for kind in candidates:
        factory = factories.get(kind)
        if factory is None:
            continue
        try:
            adapter = factory(context)
        except Exception as e:
            logger.warning(
                "Storage adapter construction failed",
                backend=kind.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            continue
        logger.info("Storage adapter selected", backend=kind.value)
        return adapter

    raise StorageUnavailableError(
        "No storage adapter could be constructed",
        attempted=[kind.value for kind in candidates],
    )
