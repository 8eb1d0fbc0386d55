"""Unit tests for the document store."""

import pytest

from hanami_search.search.document_store import DocumentStore
from hanami_search.search.string_pool import StringPool


@pytest.fixture
def pool():
    return StringPool()


@pytest.fixture
def store(pool):
    return DocumentStore(pool)


@pytest.mark.unit
class TestInsertAndRemove:
    def test_insert_assigns_increasing_seq(self, store):
        first = store.insert("smile", ["happy"])
        second = store.insert("cat", [])

        assert (first.seq, second.seq) == (0, 1)
        assert [doc.id for doc in store] == ["smile", "cat"]
        assert "smile" in store
        assert len(store) == 2

    def test_insert_existing_id_raises(self, store):
        store.insert("smile", [])

        with pytest.raises(KeyError):
            store.insert("smile", ["again"])

    def test_strings_are_interned(self, store, pool):
        store.insert("smile", ["joy"])
        store.insert("laugh", ["joy"])

        assert pool.refcount("joy") == 2
        assert store.get("smile").aliases[0] is store.get("laugh").aliases[0]

    def test_remove_reports_orphaned_texts(self, store, pool):
        store.insert("smile", ["joy", "happy"])
        store.insert("laugh", ["joy"])

        document, orphaned = store.remove("smile")

        assert document.id == "smile"
        assert sorted(orphaned) == ["happy", "smile"]
        assert "joy" in pool
        assert "happy" not in pool

    def test_remove_missing(self, store):
        assert store.remove("ghost") is None

    def test_seq_is_not_reused(self, store):
        store.insert("a", [])
        store.remove("a")

        assert store.insert("a", []).seq == 1


@pytest.mark.unit
class TestReplaceAliases:
    def test_keeps_seq_and_position(self, store):
        store.insert("smile", ["happy"])
        store.insert("cat", [])

        updated, orphaned = store.replace_aliases("smile", ["grin", "happy"])

        assert updated.seq == 0
        assert updated.aliases == ("grin", "happy")
        assert orphaned == []
        assert [doc.id for doc in store] == ["smile", "cat"]

    def test_reports_dropped_aliases(self, store, pool):
        store.insert("smile", ["happy", "joy"])

        _updated, orphaned = store.replace_aliases("smile", [])

        assert sorted(orphaned) == ["happy", "joy"]
        assert len(pool) == 1


@pytest.mark.unit
def test_clear_releases_pool(store, pool):
    store.insert("smile", ["happy"])
    store.insert("cat", ["neko"])

    store.clear()

    assert len(store) == 0
    assert len(pool) == 0
    assert "smile" not in pool
