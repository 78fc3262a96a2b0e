"""Environment-driven settings for spinecache.

All fields can be set through ``SPINECACHE_*`` environment variables (e.g.
``SPINECACHE_AUTO_INIT_COUNTERS=true``) or a ``.env`` file. Unknown
variables are ignored.

Tags:
    settings, configuration, pydantic, environment, spinecache
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheSettings(BaseSettings):
    """Configuration for stores built by :func:`spinecache.create_cache`.

    Fields
    ──────
    background_expiry   : Run the sweeper thread that removes expired entries
    auto_init_counters  : ``incr`` on a missing key starts from 0
    log_level           : Structlog log level
    log_format          : ``json``, ``console`` or ``auto`` (json unless tty)
    service_name        : ``service.name`` field on every log line
    """

    model_config = SettingsConfigDict(
        env_prefix="SPINECACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Expiration ───────────────────────────────────────────────
    background_expiry: bool = Field(default=True)

    # ── Counters ─────────────────────────────────────────────────
    auto_init_counters: bool = Field(
        default=False,
        description="Treat a missing key as 0 in incr instead of failing",
    )

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console", "auto"] = Field(default="auto")
    service_name: str = Field(default="spinecache")

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unsupported log level: {value!r}")
        return level

    @property
    def json_logs(self) -> bool | None:
        """Map ``log_format`` to the ``json_format`` flag of configure_logging."""
        return {"json": True, "console": False}.get(self.log_format)


__all__ = ["CacheSettings"]
