"""Local filesystem key-value store.

Stores each key as a JSON file under a unified data root with optional
namespace prefix::

    {data_root}/{prefix}/storage/{key}.json

When prefix is None, the path collapses to::

    {data_root}/storage/{key}.json

Writes are atomic: data is written to a temporary file in the same directory,
then renamed to the target path.  A crash mid-write never leaves a truncated
value behind; concurrent writers from other processes resolve to whichever
rename lands last.
"""

from __future__ import annotations

import contextlib
import os
import re
import tempfile
from pathlib import Path

from planboard.backlog.store.base import StorageWriteError

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class LocalKeyValueStore:
    """Local filesystem implementation of the KeyValueStore protocol.

    Layout::

        {base}/storage/{key}.json

    Where ``base`` is ``data_root / prefix`` (or just ``data_root`` if no prefix).
    """

    def __init__(self, data_root: str | Path, prefix: str | None = None) -> None:
        base = Path(data_root)
        if prefix:
            base = base / prefix
        self._base = base / "storage"

    @property
    def path(self) -> Path:
        return self._base

    def _key_path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            msg = f"Invalid storage key: {key!r}"
            raise ValueError(msg)
        return self._base / f"{key}.json"

    # -- Write -----------------------------------------------------------------

    def write(self, key: str, value: str) -> None:
        path = self._key_path(key)
        try:
            _atomic_write(path, value)
        except OSError as exc:
            raise StorageWriteError(f"Failed to write {path}: {exc}") from exc

    # -- Read ------------------------------------------------------------------

    def read(self, key: str) -> str | None:
        path = self._key_path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    # -- Utilities -------------------------------------------------------------

    def delete(self, key: str) -> None:
        with contextlib.suppress(FileNotFoundError):
            self._key_path(key).unlink()

    def keys(self) -> list[str]:
        if not self._base.is_dir():
            return []
        return sorted(p.stem for p in self._base.glob("*.json"))


def _atomic_write(path: Path, data: str) -> None:
    """Write data atomically: temp file + rename.

    The temp file is created in the same directory so ``os.replace`` is
    atomic on POSIX.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise
