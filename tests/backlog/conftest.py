"""Shared fixtures for backlog tests."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient

from planboard.backlog.app import app
from planboard.backlog.deps import get_store
from planboard.backlog.managers.todos import TodoManager
from planboard.backlog.managers.workspaces import WorkspaceManager
from planboard.backlog.store.base import KeyValueStore, StorageWriteError
from planboard.backlog.store.local import LocalKeyValueStore
from planboard.backlog.store.memory import MemoryKeyValueStore


class FlakyStore(MemoryKeyValueStore):
    """Memory store whose writes fail while ``failing`` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.failing = False

    def write(self, key: str, value: str) -> None:
        if self.failing:
            msg = f"quota exceeded writing {key}"
            raise StorageWriteError(msg)
        super().write(key, value)


@pytest.fixture
def store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def flaky_store() -> FlakyStore:
    return FlakyStore()


@pytest.fixture
def todos(store: MemoryKeyValueStore) -> TodoManager:
    return TodoManager(store)


@pytest.fixture
def workspaces(store: MemoryKeyValueStore) -> WorkspaceManager:
    return WorkspaceManager(store)


@pytest.fixture
def api_store(tmp_path) -> KeyValueStore:
    return LocalKeyValueStore(tmp_path / "api")


@pytest.fixture
async def client(api_store: KeyValueStore) -> AsyncIterator[AsyncClient]:
    """Async HTTP client wired to the app with a temp-dir store.

    The app lifespan does NOT run under ``ASGITransport``, so the store
    dependency is overridden directly.
    """
    app.dependency_overrides[get_store] = lambda: api_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
