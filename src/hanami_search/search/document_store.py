"""Document storage keyed by unique id.

The store owns every ``Document`` of an index. Ids and aliases are interned in
the index's ``StringPool`` on insertion and released on removal. Iteration
follows insertion order, which is also ascending ``seq`` order.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator
import logging

from hanami_search.search.models import Document
from hanami_search.search.string_pool import StringPool


logger = logging.getLogger(__name__)


class DocumentStore:
    """Insertion-ordered mapping of document id to ``Document``."""

    def __init__(self, pool: StringPool) -> None:
        self.pool = pool
        self._documents: dict[str, Document] = {}
        self._usage: Counter[str] = Counter()
        self._next_seq = 0

    def get(self, doc_id: str) -> Document | None:
        return self._documents.get(doc_id)

    def insert(self, doc_id: str, aliases: Iterable[str]) -> Document:
        """Append a new document; ``doc_id`` must not already be stored."""

        if doc_id in self._documents:
            msg = f"Document {doc_id!r} is already stored"
            raise KeyError(msg)
        document = Document(
            id=self._acquire(doc_id),
            aliases=tuple(self._acquire(alias) for alias in aliases),
            seq=self._next_seq,
        )
        self._next_seq += 1
        self._documents[document.id] = document
        return document

    def replace_aliases(self, doc_id: str, aliases: Iterable[str]) -> tuple[Document, list[str]]:
        """Swap the aliases of a stored document in place, keeping its ``seq``.

        Returns the updated document and the texts no document references any
        more.
        """

        current = self._documents[doc_id]
        updated = Document(
            id=current.id,
            aliases=tuple(self._acquire(alias) for alias in aliases),
            seq=current.seq,
        )
        self._documents[doc_id] = updated
        orphaned = self._release(current.aliases)
        return updated, orphaned

    def remove(self, doc_id: str) -> tuple[Document, list[str]] | None:
        """Delete a document; return it with the texts that became unreferenced."""

        document = self._documents.pop(doc_id, None)
        if document is None:
            return None
        return document, self._release(document.texts())

    def clear(self) -> None:
        for document in self._documents.values():
            for text in document.texts():
                self.pool.release(text)
        self._documents.clear()
        self._usage.clear()
        logger.debug("Document store cleared")

    def _acquire(self, text: str) -> str:
        shared = self.pool.intern(text)
        self._usage[shared] += 1
        return shared

    def _release(self, texts: Iterable[str]) -> list[str]:
        orphaned: list[str] = []
        for text in texts:
            self.pool.release(text)
            self._usage[text] -= 1
            if self._usage[text] <= 0:
                del self._usage[text]
                orphaned.append(text)
        return orphaned

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._documents

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents.values())

    def __len__(self) -> int:
        return len(self._documents)
