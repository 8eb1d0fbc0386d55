"""Reverse lookup from normalized name/alias forms to document ids.

Only whole normalized strings are indexed: one exact-match table for names,
one for aliases. Prefix and substring matching is evaluated at query time
against the per-document ``DocumentForms`` kept alongside the tables, so the
index grows with the number of distinct names and aliases, not with their
lengths.
"""

from __future__ import annotations

from collections.abc import Iterator

from hanami_search.search.models import DocumentForms


_EMPTY: frozenset[str] = frozenset()


def _link(table: dict[str, set[str]], token: str, doc_id: str) -> None:
    owners = table.get(token)
    if owners is None:
        table[token] = {doc_id}
    else:
        owners.add(doc_id)


def _unlink(table: dict[str, set[str]], token: str, doc_id: str) -> None:
    owners = table.get(token)
    if owners is None:
        return
    owners.discard(doc_id)
    if not owners:
        del table[token]


class ReverseIndex:
    """Exact-match tables plus stored forms for every indexed document."""

    def __init__(self) -> None:
        self._names: dict[str, set[str]] = {}
        self._aliases: dict[str, set[str]] = {}
        self._forms: dict[str, DocumentForms] = {}

    def add(self, doc_id: str, forms: DocumentForms) -> None:
        """Index ``forms`` for ``doc_id``, replacing any previous entry."""

        if doc_id in self._forms:
            self.remove(doc_id)
        self._forms[doc_id] = forms
        for token in forms.name:
            _link(self._names, token, doc_id)
        for token in forms.alias_forms():
            _link(self._aliases, token, doc_id)

    def merge(self, builder: ReverseIndexBuilder) -> None:
        """Index every entry collected by ``builder`` in one pass."""

        for doc_id, forms in builder.entries():
            self.add(doc_id, forms)

    def remove(self, doc_id: str) -> bool:
        forms = self._forms.pop(doc_id, None)
        if forms is None:
            return False
        for token in forms.name:
            _unlink(self._names, token, doc_id)
        for token in forms.alias_forms():
            _unlink(self._aliases, token, doc_id)
        return True

    def clear(self) -> None:
        self._names.clear()
        self._aliases.clear()
        self._forms.clear()

    def name_owners(self, token: str) -> frozenset[str] | set[str]:
        """Ids whose name has ``token`` as a normalized form."""
        return self._names.get(token, _EMPTY)

    def alias_owners(self, token: str) -> frozenset[str] | set[str]:
        """Ids with an alias having ``token`` as a normalized form."""
        return self._aliases.get(token, _EMPTY)

    def forms(self, doc_id: str) -> DocumentForms:
        return self._forms[doc_id]

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._forms

    def __len__(self) -> int:
        return len(self._forms)


class ReverseIndexBuilder:
    """Collects document forms for a batch and produces index entries once.

    Later additions for the same id replace earlier ones, matching the
    overwrite policy of the document store.
    """

    def __init__(self) -> None:
        self._entries: dict[str, DocumentForms] = {}

    def add(self, doc_id: str, forms: DocumentForms) -> None:
        self._entries.pop(doc_id, None)
        self._entries[doc_id] = forms

    def entries(self) -> Iterator[tuple[str, DocumentForms]]:
        return iter(self._entries.items())

    def __len__(self) -> int:
        return len(self._entries)
