"""Read-through cache for project records.

A short-TTL, size-bounded in-process map keyed by project id. Entries are
deep copies, so callers mutating a returned record never corrupt the cache.
Tenant checks are applied by the manager after a hit, never stored here.
"""

import time
from collections import OrderedDict
from collections.abc import Callable

from src.project_state.models.project import ProjectState

DEFAULT_TTL_SECONDS = 60.0
DEFAULT_MAX_ENTRIES = 1000


class ProjectCache:
    """TTL cache with oldest-first eviction.

    Args:
        ttl_seconds: Lifetime of an entry.
        max_entries: Capacity; the oldest entry is evicted when exceeded.
        clock: Monotonic seconds source, injectable for tests.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, ProjectState]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, project_id: str) -> ProjectState | None:
        """Return a copy of the cached record, or None if absent or expired."""
        item = self._entries.get(project_id)
        if item is None:
            return None
        expires_at, project = item
        if self._clock() >= expires_at:
            del self._entries[project_id]
            return None
        return project.model_copy(deep=True)

    def put(self, project: ProjectState) -> None:
        self._entries.pop(project.id, None)
        self._entries[project.id] = (
            self._clock() + self.ttl_seconds,
            project.model_copy(deep=True),
        )
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def invalidate(self, project_id: str) -> None:
        self._entries.pop(project_id, None)

    def clear(self) -> None:
        self._entries.clear()
