"""Write-through persistence shared by the managers."""

from __future__ import annotations

from loguru import logger

from planboard.backlog.store.base import KeyValueStore, StorageWriteError


class PersistingManager:
    """Base for managers that mirror their state into a key-value store.

    A failed write does not roll back the in-memory change.  The manager
    flips ``persistence_degraded`` and keeps serving from memory; the flag
    clears once a persist writes every one of its keys.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self.persistence_degraded = False

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def _write(self, key: str, value: str) -> bool:
        return self._write_many({key: value})

    def _write_many(self, values: dict[str, str]) -> bool:
        """Write each key in turn; a failure on one does not stop the rest."""
        failed: list[str] = []
        for key, value in values.items():
            try:
                self._store.write(key, value)
            except StorageWriteError as exc:
                if not self.persistence_degraded and not failed:
                    logger.warning("Storage write failed, keeping changes in memory only: {}", exc)
                failed.append(key)

        if failed:
            self.persistence_degraded = True
            return False
        if self.persistence_degraded:
            logger.info("Storage writes recovered ({})", ", ".join(values))
            self.persistence_degraded = False
        return True
