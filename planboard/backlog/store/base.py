"""Key-value store interface for backlog persistence.

The backlog keeps everything as JSON strings under a handful of keys, the
same shape browser local storage would hold::

    workspaces                      -> [Workspace, ...]
    active_workspace                -> "<workspace id>" (plain string)
    todos_workspace_<workspace id>  -> [Todo, ...]

Writes replace the whole value.  There is no schema versioning; readers
treat a malformed value as empty.
"""

from __future__ import annotations

import json
from typing import Protocol, runtime_checkable

from loguru import logger

WORKSPACES_KEY = "workspaces"
ACTIVE_WORKSPACE_KEY = "active_workspace"
LEGACY_TODOS_KEY = "todos_data"
"""Single-list key used before workspaces existed."""


def todos_key(workspace_id: str) -> str:
    return f"todos_workspace_{workspace_id}"


class StorageWriteError(OSError):
    """Raised by a backend when a value could not be written."""


@runtime_checkable
class KeyValueStore(Protocol):
    """Synchronous protocol for reading and writing string values by key."""

    def read(self, key: str) -> str | None:
        """Return the stored value, or ``None`` if the key is absent."""
        ...

    def write(self, key: str, value: str) -> None:
        """Replace the value for ``key``.  Raises ``StorageWriteError`` on failure."""
        ...

    def delete(self, key: str) -> None:
        """Remove ``key``.  No-op if not found."""
        ...

    def keys(self) -> list[str]:
        """Return all stored keys, sorted."""
        ...


def read_json_list(store: KeyValueStore, key: str) -> list | None:
    """Read a JSON array stored under ``key``.

    Returns ``None`` when the key is absent.  Undecodable bytes, malformed JSON
    or a non-list value is logged and read as an empty list.
    """
    try:
        raw = store.read(key)
        if raw is None:
            return None
        parsed = json.loads(raw)
    except ValueError as exc:
        # Undecodable bytes and invalid JSON both land here.
        logger.error("Failed to parse {} from storage: {}", key, exc)
        return []
    if not isinstance(parsed, list):
        logger.error("Expected a JSON array under {}, got {}", key, type(parsed).__name__)
        return []
    return parsed
