"""
Factory that builds a cache from settings.

Callers depend on :class:`~spinecache.contract.CacheContract`; this is the
one place that decides which implementation backs it.
"""

from __future__ import annotations

from spinecache.logging import configure_logging, get_logger
from spinecache.memory import InMemoryStore
from spinecache.settings import CacheSettings

logger = get_logger(__name__)


def create_cache(
    settings: CacheSettings | None = None,
    *,
    configure_logs: bool = False,
) -> InMemoryStore:
    """Create an in-memory cache configured from *settings*.

    Args:
        settings: Explicit settings; read from the environment when omitted.
        configure_logs: Also apply the logging section of *settings*.
    """
    settings = settings or CacheSettings()

    if configure_logs:
        configure_logging(
            level=settings.log_level,
            json_format=settings.json_logs,
            service=settings.service_name,
        )

    store = InMemoryStore(
        background_expiry=settings.background_expiry,
        auto_init_counters=settings.auto_init_counters,
    )
    logger.debug(
        "cache_created",
        backend="memory",
        background_expiry=settings.background_expiry,
        auto_init_counters=settings.auto_init_counters,
    )
    return store


__all__ = ["create_cache"]
