"""
Value codecs layered over raw string entries.

The store only holds strings. Structured values go through ``marshal`` /
``unmarshal`` (compact JSON via pydantic-core), counters through the strict
base-10 int64 parser.

Features:
    - **marshal:** JSON-native values, pydantic models, dataclasses,
      datetimes, UUIDs, enums, sets
    - **unmarshal:** plain JSON, or validated into any type a pydantic
      ``TypeAdapter`` accepts (``list[int]``, a ``BaseModel``, a dataclass)
    - **parse_int64:** sign + ASCII digits, signed 64-bit range only

Tags:
    serialization, json, pydantic, codec, spinecache
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any

from pydantic import PydanticUserError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, from_json, to_json

from spinecache.errors import DeserializationError, SerializationError

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


def marshal(value: Any) -> str:
    """Encode ``value`` as compact JSON text.

    Raises:
        SerializationError: If the value has no JSON representation.
    """
    try:
        encoded = to_json(value).decode("utf-8")
        # NaN/Infinity constants are not JSON; quoted occurrences parse fine
        if "NaN" in encoded or "Infinity" in encoded:
            from_json(encoded, allow_inf_nan=False)
    except (PydanticSerializationError, ValueError, TypeError) as exc:
        raise SerializationError(
            f"cannot marshal value of type {type(value).__name__}",
            cause=exc,
        ) from exc
    return encoded


@lru_cache(maxsize=256)
def _adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def unmarshal(raw: str, into: Any = None, *, key: str | None = None) -> Any:
    """Decode JSON text, optionally validating it into ``into``.

    Raises:
        DeserializationError: If ``raw`` is not valid JSON or does not fit
            the requested shape.
    """
    if into is None:
        try:
            return from_json(raw, allow_inf_nan=False)
        except (ValueError, RecursionError) as exc:
            raise DeserializationError(
                f"stored value is not valid JSON: {exc}", key=key, cause=exc
            ) from exc

    try:
        try:
            hash(into)
        except TypeError:
            adapter = TypeAdapter(into)
        else:
            adapter = _adapter(into)
    except PydanticUserError as exc:
        raise DeserializationError(
            f"cannot decode into {into!r}", key=key, cause=exc
        ) from exc

    try:
        return adapter.validate_json(raw)
    except ValidationError as exc:
        raise DeserializationError(
            f"stored value does not match {into!r}",
            key=key,
            cause=exc,
        ).with_context(errors=exc.error_count()) from exc


def parse_int64(text: str) -> int | None:
    """Parse a base-10 signed 64-bit integer; ``None`` if ``text`` is not one."""
    if not _INT_PATTERN.fullmatch(text):
        return None
    value = int(text)
    if value < INT64_MIN or value > INT64_MAX:
        return None
    return value


__all__ = ["marshal", "unmarshal", "parse_int64", "INT64_MIN", "INT64_MAX"]
