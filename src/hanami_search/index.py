"""Public search index facade.

``Index`` ties together the string pool, normalizer, document store, reverse
index and query engine of one independent index. Every mutation validates its
whole input before touching any state, so a rejected call leaves the index as
it was.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
import logging
from typing import Any

from hanami_search.config import Settings, get_settings
from hanami_search.errors import CorruptDataError, HanamiSearchError, MalformedInputError
from hanami_search.observability import LOADS, MUTATIONS, QUERY_LATENCY, RESULTS, create_span, track_latency
from hanami_search.search.codec import (
    FORMAT_VERSION,
    CurrentPayload,
    DocumentRecord,
    LegacyPayload,
    decode,
    encode,
    migrate,
)
from hanami_search.search.document_store import DocumentStore
from hanami_search.search.models import Document, DocumentForms, MatchTier, parse_document, parse_document_set
from hanami_search.search.normalizer import Normalizer
from hanami_search.search.query_engine import QueryEngine, QueryInput, validate_limit
from hanami_search.search.reverse_index import ReverseIndex, ReverseIndexBuilder
from hanami_search.search.romaji import DEFAULT_ROMAJI_TABLE, RomajiTable
from hanami_search.search.string_pool import StringPool


logger = logging.getLogger(__name__)

_Entry = tuple[str, tuple[str, ...]]


@contextmanager
def _reported(operation: str) -> Iterator[None]:
    try:
        yield
    except HanamiSearchError as exc:
        logger.debug("Index %s rejected: %s", operation, exc)
        raise


def _last_wins(entries: Iterable[_Entry]) -> list[_Entry]:
    """Collapse repeated ids so the last occurrence remains, at its own position."""

    latest: dict[str, tuple[str, ...]] = {}
    for doc_id, aliases in entries:
        latest.pop(doc_id, None)
        latest[doc_id] = aliases
    return list(latest.items())


def _entries_from_payload(documents: Iterable[DocumentRecord]) -> list[_Entry]:
    entries: list[_Entry] = []
    for record in documents:
        if not record.id:
            raise CorruptDataError("Serialized document has an empty id")
        entries.append((record.id, record.aliases))
    return entries


class Index:
    """In-memory name/alias search index with tiered ranking.

    Example:
        index = Index()
        index.add_documents([{"name": "smile", "aliases": ["happy", "joy"]}])
        index.search("smi")  # ["smile"]
    """

    def __init__(self, settings: Settings | None = None, *, table: RomajiTable = DEFAULT_ROMAJI_TABLE) -> None:
        self.settings = settings if settings is not None else get_settings()
        self.pool = StringPool()
        self.normalizer = Normalizer(
            self.pool,
            table=table,
            max_transliteration_length=self.settings.max_transliteration_length,
        )
        self.store = DocumentStore(self.pool)
        self.reverse_index = ReverseIndex()
        self.engine = QueryEngine(self.store, self.reverse_index, self.normalizer)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_documents(self, documents: Any) -> None:
        """Insert a batch of ``{"name", "aliases"}`` documents.

        ``documents`` may be a list of mappings, or JSON text/bytes holding a
        list or an object with a ``documents`` (or ``emojis``) list. An id that
        is already present is replaced and moves to the end of the order.
        """

        with _reported("add_documents"):
            entries = [(doc.name, tuple(doc.aliases)) for doc in parse_document_set(documents)]
        with create_span("index.add_documents", attributes={"index.batch_size": len(entries)}):
            self._apply(entries)
        MUTATIONS.labels(operation="add_documents").inc()
        logger.debug("Added %d documents (index size %d)", len(entries), len(self.store))

    def add_document(self, doc_id: str, aliases: Any = ()) -> None:
        """Insert one document, replacing any document with the same id."""

        with _reported("add_document"):
            document = parse_document(doc_id, aliases)
        self._apply([(document.name, tuple(document.aliases))])
        MUTATIONS.labels(operation="add_document").inc()

    def update_document(self, doc_id: str, aliases: Any) -> bool:
        """Replace the aliases of an existing document; False when it is absent.

        The document keeps its position in the result order.
        """

        with _reported("update_document"):
            document = parse_document(doc_id, aliases)
        if document.name not in self.store:
            return False
        updated, orphaned = self.store.replace_aliases(document.name, document.aliases)
        self._forget(orphaned)
        self.reverse_index.add(updated.id, self._forms(updated.id, updated.aliases))
        MUTATIONS.labels(operation="update_document").inc()
        return True

    def remove_document(self, doc_id: str) -> bool:
        """Delete a document and its index entries; False when it is absent."""

        if not isinstance(doc_id, str):
            msg = f"Document id must be a string, got {type(doc_id).__name__}"
            logger.debug("Index remove_document rejected: %s", msg)
            raise MalformedInputError(msg)
        if not self._discard(doc_id):
            return False
        MUTATIONS.labels(operation="remove_document").inc()
        return True

    def clear_index(self) -> None:
        """Remove every document and drop all cached normalizations."""

        self._reset()
        MUTATIONS.labels(operation="clear_index").inc()
        logger.debug("Index cleared")

    def replace_all_documents(self, documents: Any) -> None:
        """Swap the whole content for ``documents``.

        The new set is validated first; if it is rejected the current content
        is kept unchanged.
        """

        with _reported("replace_all_documents"):
            entries = [(doc.name, tuple(doc.aliases)) for doc in parse_document_set(documents)]
        with create_span("index.replace_all_documents", attributes={"index.batch_size": len(entries)}):
            self._reset()
            self._apply(entries)
        MUTATIONS.labels(operation="replace_all_documents").inc()
        logger.debug("Replaced index content with %d documents", len(self.store))

    def _forms(self, doc_id: str, aliases: Iterable[str]) -> DocumentForms:
        aliases = tuple(aliases)
        normalizer = self.normalizer
        return DocumentForms(
            name=normalizer.document_forms(doc_id),
            aliases=tuple(normalizer.document_forms(alias) for alias in aliases),
            name_readings=normalizer.transliterated_forms(doc_id),
            alias_readings=tuple(reading for alias in aliases for reading in normalizer.transliterated_forms(alias)),
        )

    def _forget(self, texts: Iterable[str]) -> None:
        for text in texts:
            self.normalizer.forget(text)

    def _discard(self, doc_id: str) -> bool:
        removed = self.store.remove(doc_id)
        if removed is None:
            return False
        _document, orphaned = removed
        self.reverse_index.remove(doc_id)
        self._forget(orphaned)
        return True

    def _apply(self, entries: Iterable[_Entry]) -> None:
        builder = ReverseIndexBuilder()
        for doc_id, aliases in _last_wins(entries):
            self._discard(doc_id)
            document = self.store.insert(doc_id, aliases)
            builder.add(document.id, self._forms(document.id, document.aliases))
        self.reverse_index.merge(builder)

    def _reset(self) -> None:
        self.store.clear()
        self.reverse_index.clear()
        self.normalizer.clear()

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def search(self, query: QueryInput, limit: int | None = None) -> list[str]:
        """Return matching ids, best tier first, capped at ``limit``.

        Without a limit the configured ``default_limit`` applies.
        """

        return [doc_id for doc_id, _tier in self._match("search", query, self._default(limit))]

    def search_with_limit(self, query: QueryInput, limit: int) -> list[str]:
        with _reported("search_with_limit"):
            validate_limit(limit)
        return [doc_id for doc_id, _tier in self._match("search_with_limit", query, limit)]

    def search_no_limit(self, query: QueryInput) -> list[str]:
        """Return every matching id."""
        return [doc_id for doc_id, _tier in self._match("search_no_limit", query, None)]

    def explain(self, query: QueryInput, limit: int | None = None) -> list[tuple[str, MatchTier]]:
        """Like ``search``, but pair each id with the tier it matched at."""
        return self._match("explain", query, self._default(limit))

    def search_all(self, keywords: QueryInput, limit: int | None = None) -> list[str]:
        """Return ids whose name, or name and aliases, contain every keyword."""

        with track_latency(QUERY_LATENCY, operation="search_all"), _reported("search_all"):
            return self.engine.search_all(keywords, self._default(limit))

    def _default(self, limit: int | None) -> int:
        return self.settings.default_limit if limit is None else limit

    def _match(self, operation: str, query: QueryInput, limit: int | None) -> list[tuple[str, MatchTier]]:
        with track_latency(QUERY_LATENCY, operation=operation), _reported(operation):
            matches = self.engine.match(query, limit)
        for tier, count in Counter(tier for _doc_id, tier in matches).items():
            RESULTS.labels(tier=tier.label).inc(count)
        return matches

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def dump(self) -> bytes:
        """Serialize every document, in insertion order, in the current format."""

        with create_span("index.dump", attributes={"index.documents": len(self.store)}) as span:
            records = tuple(DocumentRecord(id=doc.id, aliases=doc.aliases) for doc in self.store)
            data = encode(CurrentPayload(documents=records))
            span.set_attribute("index.bytes", len(data))
        return data

    @classmethod
    def load(cls, data: bytes, settings: Settings | None = None, *, table: RomajiTable = DEFAULT_ROMAJI_TABLE) -> Index:
        """Build a new index from ``dump`` output, or from a legacy blob."""

        index = cls(settings, table=table)
        index.restore(data)
        return index

    def restore(self, data: bytes) -> None:
        """Replace this index's content with a serialized one.

        Legacy blobs are migrated on the way in. Nothing changes if ``data``
        cannot be decoded.
        """

        with create_span("index.restore") as span, _reported("restore"):
            payload = decode(data)
            span.set_attribute("index.bytes", len(data))
            source_format = "current"
            if isinstance(payload, LegacyPayload):
                source_format = "legacy"
                payload = migrate(payload)
            entries = _entries_from_payload(payload.documents)
            span.set_attribute("index.format", source_format)
            self._reset()
            self._apply(entries)
        LOADS.labels(format=source_format).inc()
        logger.debug("Restored %d documents from %s format", len(self.store), source_format)

    def get_version(self) -> int:
        """Format version written by ``dump``."""
        return FORMAT_VERSION

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_document(self, doc_id: str) -> Document | None:
        return self.store.get(doc_id)

    def documents(self) -> list[Document]:
        """All documents in insertion order."""
        return list(self.store)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self.store

    def __len__(self) -> int:
        return len(self.store)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(documents={len(self.store)})"
