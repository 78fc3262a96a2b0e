"""Tests for spinecache.errors module."""

import json

import pytest

from spinecache.errors import (
    CacheError,
    DeserializationError,
    ErrorCategory,
    NotAnIntegerError,
    NotFoundError,
    SerializationError,
)


class TestErrorCategory:
    def test_string_values(self):
        assert ErrorCategory.NOT_FOUND.value == "NOT_FOUND"
        assert ErrorCategory.SERIALIZATION == "SERIALIZATION"


class TestCacheError:
    def test_default_category(self):
        err = CacheError("boom")
        assert err.category == ErrorCategory.INTERNAL
        assert err.key is None
        assert str(err) == "boom"

    def test_cause_is_chained(self):
        cause = ValueError("bad")
        err = CacheError("wrapped", cause=cause)
        assert err.__cause__ is cause
        assert err.to_dict()["cause"] == "bad"

    def test_with_context_is_fluent(self):
        err = CacheError("boom").with_context(backend="memory", attempt=1)
        assert err.context == {"backend": "memory", "attempt": 1}

    def test_to_dict_is_json_serializable(self):
        err = NotFoundError("user:1").with_context(backend="memory")
        payload = json.loads(json.dumps(err.to_dict()))
        assert payload == {
            "error_type": "NotFoundError",
            "message": "data not found: 'user:1'",
            "category": "NOT_FOUND",
            "key": "user:1",
            "context": {"backend": "memory"},
        }

    def test_repr(self):
        assert repr(CacheError("boom")) == "CacheError('boom', category=INTERNAL)"


class TestSubclasses:
    @pytest.mark.parametrize(
        ("cls", "category"),
        [
            (SerializationError, ErrorCategory.SERIALIZATION),
            (DeserializationError, ErrorCategory.SERIALIZATION),
        ],
    )
    def test_codec_categories(self, cls, category):
        err = cls("failed")
        assert isinstance(err, CacheError)
        assert err.category == category

    def test_not_found_carries_key(self):
        err = NotFoundError("k")
        assert err.key == "k"
        assert err.category == ErrorCategory.NOT_FOUND

    def test_not_an_integer(self):
        err = NotAnIntegerError("counter", value="abc")
        assert err.sentinel == -1
        assert err.category == ErrorCategory.VALUE
        d = err.to_dict()
        assert d["sentinel"] == -1
        assert d["value"] == "'abc'"

    def test_category_override(self):
        err = NotFoundError("k", category=ErrorCategory.INTERNAL)
        assert err.category == ErrorCategory.INTERNAL

    def test_catch_as_base(self):
        with pytest.raises(CacheError):
            raise NotAnIntegerError("k")
