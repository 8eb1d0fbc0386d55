"""Unit tests for the reference-counted string pool."""

import pytest

from hanami_search.search.string_pool import StringPool


@pytest.mark.unit
class TestStringPool:
    """Equal text is stored once and freed with its last owner."""

    def test_intern_returns_shared_instance(self):
        pool = StringPool()
        first = pool.intern("".join(["smi", "le"]))
        second = pool.intern("".join(["sm", "ile"]))

        assert first == second == "smile"
        assert first is second
        assert len(pool) == 1
        assert pool.refcount("smile") == 2

    def test_release_frees_after_last_reference(self):
        pool = StringPool()
        pool.intern("joy")
        pool.intern("joy")

        assert pool.release("joy") is False
        assert "joy" in pool
        assert pool.release("joy") is True
        assert "joy" not in pool
        assert pool.refcount("joy") == 0

    def test_release_unknown_is_noop(self):
        pool = StringPool()

        assert pool.release("missing") is False
        assert len(pool) == 0

    def test_clear_drops_everything(self):
        pool = StringPool()
        pool.intern("a")
        pool.intern("b")

        pool.clear()

        assert len(pool) == 0
        assert pool.refcount("a") == 0
