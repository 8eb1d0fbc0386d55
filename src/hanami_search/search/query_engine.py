"""Priority-tiered matching over the document store and reverse index.

Tiers run best first (name exact, alias exact, name prefix, alias prefix, name
substring, alias substring). Each document is reported once, at the first tier
it matches, and evaluation stops as soon as ``limit`` results are collected;
lower tiers are never scanned after that. Inside a tier, results follow
document insertion order.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
import logging

from hanami_search.errors import MalformedInputError
from hanami_search.search.analyzers import get_analyzer
from hanami_search.search.document_store import DocumentStore
from hanami_search.search.models import DocumentForms, MatchTier
from hanami_search.search.normalizer import Normalizer
from hanami_search.search.reverse_index import ReverseIndex


logger = logging.getLogger(__name__)

QueryInput = str | Sequence[str]

_Predicate = Callable[[str, str], bool]


def _fields_name(forms: DocumentForms) -> Iterable[str]:
    return forms.name


def _fields_alias(forms: DocumentForms) -> Iterable[str]:
    return forms.alias_forms()


def _fields_name_partial(forms: DocumentForms) -> Iterable[str]:
    return forms.partial_name_forms()


def _fields_alias_partial(forms: DocumentForms) -> Iterable[str]:
    return forms.partial_alias_forms()


def _starts_with(form: str, candidate: str) -> bool:
    return form.startswith(candidate)


def _contains(form: str, candidate: str) -> bool:
    return candidate in form


# Scanned tiers: which forms to look at and how a candidate must match them
_SCAN_RULES: dict[MatchTier, tuple[Callable[[DocumentForms], Iterable[str]], _Predicate]] = {
    MatchTier.NAME_PREFIX: (_fields_name, _starts_with),
    MatchTier.ALIAS_PREFIX: (_fields_alias, _starts_with),
    MatchTier.NAME_PARTIAL: (_fields_name_partial, _contains),
    MatchTier.ALIAS_PARTIAL: (_fields_alias_partial, _contains),
}


def validate_limit(limit: object) -> int:
    """Return ``limit`` if it is a usable result cap."""

    if isinstance(limit, bool) or not isinstance(limit, int):
        msg = f"limit must be a non-negative integer, got {limit!r}"
        raise MalformedInputError(msg)
    if limit < 0:
        msg = f"limit must be a non-negative integer, got {limit}"
        raise MalformedInputError(msg)
    return limit


def _query_strings(query: object) -> list[str]:
    if isinstance(query, str):
        return [query]
    if isinstance(query, Sequence) and not isinstance(query, (bytes, bytearray)):
        strings = list(query)
        if all(isinstance(item, str) for item in strings):
            return strings
    msg = f"query must be a string or a sequence of strings, got {type(query).__name__}"
    raise MalformedInputError(msg)


class QueryEngine:
    """Runs tiered and AND searches for one index."""

    def __init__(self, store: DocumentStore, index: ReverseIndex, normalizer: Normalizer) -> None:
        self.store = store
        self.index = index
        self.normalizer = normalizer

    def candidates(self, query: QueryInput) -> tuple[str, ...]:
        """Return the union of candidate forms of every query string, in order."""

        merged: dict[str, None] = {}
        for text in _query_strings(query):
            for form in self.normalizer.query_forms(text):
                merged.setdefault(form, None)
        return tuple(merged)

    def match(self, query: QueryInput, limit: int | None) -> list[tuple[str, MatchTier]]:
        """Return ``(doc_id, tier)`` pairs in result order, at most ``limit`` long."""

        candidates = self.candidates(query)
        if limit is not None:
            validate_limit(limit)
        if not candidates or limit == 0 or not len(self.store):
            return []

        results: list[tuple[str, MatchTier]] = []
        seen: set[str] = set()
        for tier in MatchTier:
            for doc_id in self._tier_matches(tier, candidates, seen):
                seen.add(doc_id)
                results.append((doc_id, tier))
                if limit is not None and len(results) >= limit:
                    logger.debug("Query %r satisfied at tier %s", query, tier.label)
                    return results
        return results

    def _tier_matches(self, tier: MatchTier, candidates: tuple[str, ...], seen: set[str]) -> Iterator[str]:
        if tier is MatchTier.NAME_EXACT:
            yield from self._exact_matches(self.index.name_owners, candidates, seen)
            return
        if tier is MatchTier.ALIAS_EXACT:
            yield from self._exact_matches(self.index.alias_owners, candidates, seen)
            return

        fields, predicate = _SCAN_RULES[tier]
        for document in self.store:
            if document.id in seen:
                continue
            forms = self.index.forms(document.id)
            if any(predicate(form, candidate) for form in fields(forms) for candidate in candidates):
                yield document.id

    def _exact_matches(
        self,
        owners_of: Callable[[str], Iterable[str]],
        candidates: tuple[str, ...],
        seen: set[str],
    ) -> Iterator[str]:
        owners: set[str] = set()
        for candidate in candidates:
            owners.update(owners_of(candidate))
        owners.difference_update(seen)
        ordered = sorted((self.store.get(doc_id) for doc_id in owners), key=lambda doc: doc.seq)
        for document in ordered:
            yield document.id

    def search_all(self, keywords: QueryInput, limit: int | None) -> list[str]:
        """AND search: every keyword must occur in the name, or in the name or an alias.

        Documents whose name alone covers all keywords come first, then those
        covered by name and aliases together; both groups in insertion order.
        """

        if limit is not None:
            validate_limit(limit)
        analyzer = get_analyzer("keywords")
        variants: dict[str, tuple[str, ...]] = {}
        for text in _query_strings(keywords):
            for token in analyzer(text):
                if token.text not in variants:
                    variants[token.text] = self.normalizer.query_forms(token.text)
        if not variants or limit == 0:
            return []

        keyword_forms = list(variants.values())
        matches: list[str] = []
        seen: set[str] = set()
        for include_aliases in (False, True):
            for document in self.store:
                if document.id in seen:
                    continue
                forms = self.index.forms(document.id)
                fields = list(forms.partial_name_forms())
                if include_aliases:
                    fields.extend(forms.partial_alias_forms())
                if all(any(form in field for form in options for field in fields) for options in keyword_forms):
                    seen.add(document.id)
                    matches.append(document.id)
                    if limit is not None and len(matches) >= limit:
                        return matches
        return matches
