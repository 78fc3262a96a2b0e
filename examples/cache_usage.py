#!/usr/bin/env python3
"""Cache Usage: One Contract, Expiring Entries, Counters and Prefix Invalidation.

================================================================================
WHY A CACHE CONTRACT?
================================================================================

Application code talks to ``CacheContract``. In production that contract may
be backed by a remote cache; in tests and single-process deployments it is
backed by ``InMemoryStore``::

    def remember_login(cache: CacheContract, user_id: str) -> int:
        cache.set_if_not_exist(f"logins:{user_id}", "0", ttl_seconds=86400)
        return cache.incr(f"logins:{user_id}")

================================================================================
BEST PRACTICES
================================================================================

1. **Namespace keys** so ``remove_prefix`` can invalidate a family::

       cache.set("user:42:profile", ...)
       cache.remove_prefix("user:42:")

2. **Use set_if_not_exist for locks and counters' first write**; it is atomic.

3. **Close the store** (or use it as a context manager) to stop the
   expiration thread.

Run this example:
    python examples/cache_usage.py
"""

import time

from pydantic import BaseModel

from spinecache import CacheContract, CacheSettings, NotAnIntegerError, configure_logging, create_cache


class Session(BaseModel):
    user_id: int
    roles: list[str]


def example_basic(cache: CacheContract) -> None:
    print("=== Basic get/set ===\n")
    cache.set("greeting", "hello")
    print(f"greeting = {cache.get('greeting')!r}")
    print(f"missing  = {cache.get('missing', 'n/a')!r}")


def example_expiry(cache: CacheContract) -> None:
    print("\n=== Expiring entries ===\n")
    cache.set("session:abc", "token", ttl_seconds=1)
    print(f"exists now:       {cache.exists('session:abc')}")
    time.sleep(1.1)
    print(f"exists after 1s:  {cache.exists('session:abc')}")


def example_counters(cache: CacheContract) -> None:
    print("\n=== Counters ===\n")
    cache.set_if_not_exist("visits", "0")
    for _ in range(3):
        cache.incr("visits")
    print(f"visits = {cache.get_int64('visits', 0)}")

    try:
        cache.incr("never-set")
    except NotAnIntegerError as e:
        print(f"incr on missing key -> {e.to_dict()}")


def example_structured(cache: CacheContract) -> None:
    print("\n=== Structured values ===\n")
    cache.set_marshal("session:42", Session(user_id=42, roles=["admin"]), ttl_seconds=60)
    session = cache.get_marshal("session:42", Session)
    print(f"decoded: {session!r}")


def example_prefix(cache: CacheContract) -> None:
    print("\n=== Prefix invalidation ===\n")
    for key in ("user:1", "user:2", "order:1"):
        cache.set(key, "x")
    cache.remove_prefix("user:")
    print({key: cache.exists(key) for key in ("user:1", "user:2", "order:1")})


if __name__ == "__main__":
    configure_logging(level="INFO", json_format=False)
    cache = create_cache(CacheSettings())
    try:
        example_basic(cache)
        example_expiry(cache)
        example_counters(cache)
        example_structured(cache)
        example_prefix(cache)
    finally:
        cache.close()
