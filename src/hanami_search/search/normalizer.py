"""Text normalization for cross-script matching.

Three memoized transforms feed the query engine: ASCII-aware lowercasing,
katakana to hiragana, and romaji to hiragana. Each cache belongs to one
``Normalizer`` (and therefore to one index), and every cached value is held
through the index's ``StringPool``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

import jaconv

from hanami_search.search.romaji import DEFAULT_ROMAJI_TABLE, RomajiTable, transliterate
from hanami_search.search.string_pool import StringPool


DEFAULT_MAX_TRANSLITERATION_LENGTH = 50


@dataclass(frozen=True)
class CacheInfo:
    """Snapshot of normalizer cache usage."""

    lowercase: int
    hiragana: int
    romaji: int
    hits: int
    misses: int

    @property
    def size(self) -> int:
        return self.lowercase + self.hiragana + self.romaji


def _distinct(forms: Iterable[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for form in forms:
        if form and form not in seen:
            seen[form] = None
    return tuple(seen)


class Normalizer:
    """Produce and cache the normalized forms of names, aliases and queries."""

    def __init__(
        self,
        pool: StringPool | None = None,
        *,
        table: RomajiTable = DEFAULT_ROMAJI_TABLE,
        max_transliteration_length: int = DEFAULT_MAX_TRANSLITERATION_LENGTH,
    ) -> None:
        self.pool = pool if pool is not None else StringPool()
        self.table = table
        self.max_transliteration_length = max_transliteration_length
        self._lowercase: dict[str, str] = {}
        self._hiragana: dict[str, str] = {}
        self._romaji: dict[str, str] = {}
        self._hits = 0
        self._misses = 0

    def _cached(self, cache: dict[str, str], text: str, transform: Callable[[str], str]) -> str:
        value = cache.get(text)
        if value is not None:
            self._hits += 1
            return value
        self._misses += 1
        value = self.pool.intern(transform(text))
        cache[text] = value
        return value

    def lowercase(self, text: str) -> str:
        return self._cached(self._lowercase, text, str.lower)

    def hiragana(self, text: str) -> str:
        """Katakana to hiragana, one code point at a time."""
        return self._cached(self._hiragana, text, jaconv.kata2hira)

    def romaji_to_hiragana(self, text: str) -> str:
        return self._cached(self._romaji, text, self._transliterate)

    def _transliterate(self, text: str) -> str:
        return transliterate(text, self.table)

    def query_forms(self, query: str) -> tuple[str, ...]:
        """Return the candidate forms a query is matched with.

        The order is original, lowercased, hiragana-normalized, then romaji
        converted to hiragana. Duplicates and empty strings are dropped, so an
        empty query yields no candidates at all.
        """

        lowered = self.lowercase(query)
        kana = self.hiragana(lowered)
        forms = [query, lowered, kana]
        if len(lowered) <= self.max_transliteration_length:
            forms.append(self.romaji_to_hiragana(kana))
        return _distinct(forms)

    def document_forms(self, text: str) -> tuple[str, ...]:
        """Return the lowercased and hiragana-normalized forms of a name or alias."""

        lowered = self.lowercase(text)
        return _distinct([lowered, self.hiragana(lowered)])

    def transliterated_forms(self, text: str) -> tuple[str, ...]:
        """Return the romaji-to-hiragana reading of a pure-ASCII name or alias.

        Only the substring tiers match against these readings.
        """

        if not text.isascii():
            return ()
        kana = self.hiragana(self.lowercase(text))
        converted = self.romaji_to_hiragana(kana)
        if not converted or converted == kana:
            return ()
        return (converted,)

    def forget(self, text: str) -> None:
        """Drop every cached transform derived from ``text``."""

        lowered = self._lowercase.pop(text, None)
        if lowered is None:
            return
        self.pool.release(lowered)
        kana = self._hiragana.pop(lowered, None)
        if kana is None:
            return
        self.pool.release(kana)
        converted = self._romaji.pop(kana, None)
        if converted is not None:
            self.pool.release(converted)

    def clear(self) -> None:
        for cache in (self._lowercase, self._hiragana, self._romaji):
            for value in cache.values():
                self.pool.release(value)
            cache.clear()
        self._hits = 0
        self._misses = 0

    def cache_info(self) -> CacheInfo:
        return CacheInfo(
            lowercase=len(self._lowercase),
            hiragana=len(self._hiragana),
            romaji=len(self._romaji),
            hits=self._hits,
            misses=self._misses,
        )
