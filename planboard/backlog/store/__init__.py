"""Key-value store implementations for backlog persistence."""

from planboard.backlog.store.base import (
    ACTIVE_WORKSPACE_KEY,
    LEGACY_TODOS_KEY,
    WORKSPACES_KEY,
    KeyValueStore,
    StorageWriteError,
    read_json_list,
    todos_key,
)
from planboard.backlog.store.local import LocalKeyValueStore
from planboard.backlog.store.memory import MemoryKeyValueStore

__all__ = [
    "ACTIVE_WORKSPACE_KEY",
    "LEGACY_TODOS_KEY",
    "WORKSPACES_KEY",
    "KeyValueStore",
    "LocalKeyValueStore",
    "MemoryKeyValueStore",
    "StorageWriteError",
    "read_json_list",
    "todos_key",
]
