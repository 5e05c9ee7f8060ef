"""Tests for the read-through project cache (src/project_state/core/cache.py)."""

import pytest

from src.project_state.core.cache import ProjectCache
from src.project_state.services.project_state_manager import ProjectStateManager
from src.project_state.storage.context import RuntimeContext
from tests.factories import ProjectStateFactory

pytestmark = pytest.mark.unit


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


class TestProjectCache:
    """Tests for ProjectCache."""

    def test_put_then_get(self, fake_clock: FakeClock) -> None:
        cache = ProjectCache(clock=fake_clock)
        project = ProjectStateFactory.build()

        cache.put(project)

        assert cache.get(project.id) == project
        assert cache.get("other") is None

    def test_entries_expire(self, fake_clock: FakeClock) -> None:
        cache = ProjectCache(ttl_seconds=10, clock=fake_clock)
        project = ProjectStateFactory.build()
        cache.put(project)

        fake_clock.now = 9.9
        assert cache.get(project.id) is not None

        fake_clock.now = 10.0
        assert cache.get(project.id) is None
        assert len(cache) == 0

    def test_oldest_entry_evicted(self, fake_clock: FakeClock) -> None:
        cache = ProjectCache(max_entries=2, clock=fake_clock)
        first, second, third = ProjectStateFactory.batch(3)

        cache.put(first)
        cache.put(second)
        cache.put(first)  # re-put makes it the newest
        cache.put(third)

        assert cache.get(second.id) is None
        assert cache.get(first.id) is not None
        assert cache.get(third.id) is not None

    def test_stores_copies(self, fake_clock: FakeClock) -> None:
        cache = ProjectCache(clock=fake_clock)
        project = ProjectStateFactory.build()
        cache.put(project)

        project.name = "mutated after put"
        fetched = cache.get(project.id)
        assert fetched is not None
        fetched.files.clear()

        again = cache.get(project.id)
        assert again is not None
        assert again.name != "mutated after put"
        assert again.files

    def test_invalidate_and_clear(self, fake_clock: FakeClock) -> None:
        cache = ProjectCache(clock=fake_clock)
        first, second = ProjectStateFactory.batch(2)
        cache.put(first)
        cache.put(second)

        cache.invalidate(first.id)
        cache.invalidate("never-cached")
        assert cache.get(first.id) is None
        assert len(cache) == 1

        cache.clear()
        assert len(cache) == 0


class TestManagerCaching:
    """How the manager uses the cache."""

    async def test_reads_served_from_cache(self, memory_manager: ProjectStateManager) -> None:
        project = await memory_manager.create_project({"name": "Cached"})
        memory_manager.context.memory_store.clear()

        assert await memory_manager.get_project(project.id) == project

    async def test_tenant_check_applies_to_cached_records(
        self, memory_manager: ProjectStateManager
    ) -> None:
        project = await memory_manager.create_project({"name": "Scoped", "tenantId": "t1"})

        assert memory_manager.cache is not None
        assert memory_manager.cache.get(project.id) is not None
        assert await memory_manager.get_project(project.id, "t2") is None

    async def test_delete_invalidates(self, memory_manager: ProjectStateManager) -> None:
        project = await memory_manager.create_project({"name": "Gone"})

        await memory_manager.delete_project(project.id)

        assert memory_manager.cache is not None
        assert memory_manager.cache.get(project.id) is None

    async def test_cache_disabled(self, test_settings) -> None:
        settings = test_settings.model_copy(update={"cache_enabled": False})
        manager = ProjectStateManager(RuntimeContext(), settings=settings)
        project = await manager.create_project({"name": "Uncached"})
        manager.context.memory_store.clear()

        assert manager.cache is None
        assert await manager.get_project(project.id) is None
