"""spinecache -- process-local key/value cache with per-entry expiration.

Module Map
----------
  contract   CacheContract protocol shared by every backend
  memory     InMemoryStore (thread-safe, insertion-bound TTLs)
  expiry     ExpirySweeper (deadline heap + one daemon thread)
  codec      JSON marshal/unmarshal + strict int64 parsing
  errors     CacheError hierarchy
  logging    structlog configuration
  settings   CacheSettings (SPINECACHE_* environment)
  factory    create_cache(settings)
"""

from spinecache.contract import CacheContract
from spinecache.errors import (
    CacheError,
    DeserializationError,
    ErrorCategory,
    NotAnIntegerError,
    NotFoundError,
    SerializationError,
)
from spinecache.factory import create_cache
from spinecache.logging import configure_logging, get_logger
from spinecache.memory import InMemoryStore, in_memory
from spinecache.settings import CacheSettings

__version__ = "0.1.0"

__all__ = [
    # contract
    "CacheContract",
    # implementations
    "InMemoryStore",
    "in_memory",
    "create_cache",
    # errors
    "CacheError",
    "ErrorCategory",
    "NotFoundError",
    "SerializationError",
    "DeserializationError",
    "NotAnIntegerError",
    # config / logging
    "CacheSettings",
    "configure_logging",
    "get_logger",
]
