"""Root test fixtures shared across all test modules.

Backend fixtures build each storage capability without external services:
fakeredis for the key-value store, in-memory SQLite (aiosqlite) for the
relational store, and a temporary JSON document for the local store.
"""

import os

# Set APP_ENV to testing before any project imports
os.environ.setdefault("APP_ENV", "testing")

# ruff: noqa: E402 - Imports must be after env var setup
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from fakeredis import aioredis as fakeredis_aio
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from src.project_state.core import redis as redis_core
from src.project_state.core.config import Settings, get_settings
from src.project_state.models.base import MonotonicClock
from src.project_state.models.enums import StorageKind
from src.project_state.services.project_state_manager import (
    ProjectStateManager,
    reset_project_state_manager,
)
from src.project_state.services.tenant_access import TenantPolicy
from src.project_state.storage.context import RuntimeContext

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()

ALL_BACKENDS = [kind.value for kind in StorageKind]


@pytest.fixture
def test_settings() -> Settings:
    """Settings with library defaults, ignoring any local .env file."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        database_url=None,
        redis_url=None,
        local_store_path=None,
        preferred_storage=None,
    )


@pytest.fixture(autouse=True)
def reset_singletons():
    """Drop the process-wide manager between tests."""
    reset_project_state_manager()
    yield
    reset_project_state_manager()


# --- Redis Test Fixtures ---


@pytest.fixture
async def fake_redis() -> AsyncGenerator[Redis]:
    """Provides a fakeredis client for testing.

    Returns an in-memory Redis implementation that behaves like
    a real Redis server but doesn't require external dependencies.
    """
    client = fakeredis_aio.FakeRedis(decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
async def mock_redis(fake_redis: Redis, monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[Redis]:
    """Patches get_redis() to return the fakeredis client.

    Patches both the connection module and the runtime context module,
    which imports get_redis directly.
    """
    redis_core.reset_redis_state()

    async def _get_fake_redis() -> Redis:
        return fake_redis

    monkeypatch.setattr("src.project_state.core.redis.get_redis", _get_fake_redis)
    monkeypatch.setattr("src.project_state.storage.context.get_redis", _get_fake_redis)
    yield fake_redis
    redis_core.reset_redis_state()


@pytest.fixture
async def mock_redis_unavailable(monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[None]:
    """Patches get_redis() to return None (simulates Redis unavailable)."""
    redis_core.reset_redis_state()

    async def _get_none() -> None:
        return None

    monkeypatch.setattr("src.project_state.core.redis.get_redis", _get_none)
    monkeypatch.setattr("src.project_state.storage.context.get_redis", _get_none)
    yield
    redis_core.reset_redis_state()


# --- Relational and local store fixtures ---


@pytest.fixture
async def sqlite_engine() -> AsyncGenerator[AsyncEngine]:
    """In-memory SQLite engine shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    yield engine
    await engine.dispose()


@pytest.fixture
def local_store_path(tmp_path: Path) -> Path:
    return tmp_path / "store" / "projects.json"


# --- Backend matrix ---


@pytest.fixture(params=ALL_BACKENDS)
def storage_kind(request: pytest.FixtureRequest) -> StorageKind:
    return StorageKind(request.param)


@pytest.fixture
def runtime_context(
    storage_kind: StorageKind,
    request: pytest.FixtureRequest,
    local_store_path: Path,
) -> RuntimeContext:
    """A context offering exactly one storage capability."""
    if storage_kind == StorageKind.RELATIONAL:
        engine = request.getfixturevalue("sqlite_engine")
        return RuntimeContext(engine=engine)
    if storage_kind == StorageKind.KEY_VALUE:
        client = request.getfixturevalue("fake_redis")
        # Small chunks so ordinary test files exercise chunking
        return RuntimeContext(redis=client, kv_chunk_size=16)
    if storage_kind == StorageKind.LOCAL:
        return RuntimeContext(local_store_path=local_store_path)
    return RuntimeContext()


@pytest.fixture
def clock() -> MonotonicClock:
    return MonotonicClock()


@pytest.fixture
def manager(
    runtime_context: RuntimeContext,
    test_settings: Settings,
    clock: MonotonicClock,
) -> ProjectStateManager:
    """A manager on each backend with the default (strict) tenant policy."""
    return ProjectStateManager(runtime_context, settings=test_settings, clock=clock)


@pytest.fixture
def memory_manager(test_settings: Settings) -> ProjectStateManager:
    return ProjectStateManager(RuntimeContext(), settings=test_settings)


@pytest.fixture
def lenient_policy() -> TenantPolicy:
    """Unscoped projects visible to tenants, tenant projects visible to unscoped callers."""
    return TenantPolicy(strict_validation=False, allow_unscoped_access=True)
