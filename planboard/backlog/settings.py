"""Service configuration loaded from PLANBOARD_* environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class PlanboardSettings(BaseSettings):
    """Planboard settings.

    All fields are read from environment variables with the ``PLANBOARD_``
    prefix.  For example, ``PLANBOARD_LOG_LEVEL=DEBUG`` maps to ``log_level``.
    """

    model_config = SettingsConfigDict(
        env_prefix="PLANBOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"

    # -- Data storage ----------------------------------------------------------
    data_root: str = "./data"
    """Root directory for the key-value storage files."""

    data_prefix: str | None = None
    """Optional namespace prefix inserted into all data paths.

    When set, storage lives under ``{data_root}/{data_prefix}/storage``.
    Useful for keeping several people's backlogs side by side.
    """

    storage: Literal["local", "memory"] = "local"
    """``memory`` keeps everything in-process; nothing survives a restart."""

    # -- Server ----------------------------------------------------------------
    host: str = "127.0.0.1"
    port: int = 8000


@lru_cache(maxsize=1)
def get_settings() -> PlanboardSettings:
    """Return a cached settings instance.

    Call ``get_settings.cache_clear()`` in tests to force a re-read after
    overriding env vars.
    """
    return PlanboardSettings()
