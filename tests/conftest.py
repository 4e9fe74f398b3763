"""Shared test fixtures.

Every test gets its own data root under ``tmp_path`` and a fresh settings
cache, so CLI invocations and the app never touch a real data directory.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from loguru import logger

from planboard.backlog.settings import get_settings


@pytest.fixture(autouse=True)
def planboard_env(tmp_path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Point PLANBOARD_* settings at a temporary data root."""
    monkeypatch.setenv("PLANBOARD_DATA_ROOT", str(tmp_path / "data"))
    monkeypatch.setenv("PLANBOARD_STORAGE", "local")
    monkeypatch.setenv("PLANBOARD_LOG_LEVEL", "WARNING")
    monkeypatch.delenv("PLANBOARD_DATA_PREFIX", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    # CLI runs bind the sink to a captured stream that is closed afterwards
    logger.remove()
