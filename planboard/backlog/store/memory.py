"""In-process key-value store.

Used for ``PLANBOARD_STORAGE=memory`` and throughout the tests.  Nothing
survives the process.
"""

from __future__ import annotations


class MemoryKeyValueStore:
    """Dict-backed implementation of the KeyValueStore protocol."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)
