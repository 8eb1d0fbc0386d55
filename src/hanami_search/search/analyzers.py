"""Analyzer utilities for splitting short strings into tokens.

Analyzers follow a small tokenizer + filter pipeline. Two are registered:

- ``keywords`` splits AND-search input on whitespace and lowercases it.
- ``bigram`` reproduces the legacy BM25 tokenizer, which indexed every pair of
  consecutive characters plus the whole string.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
import re
from typing import Protocol


@dataclass(frozen=True)
class Token:
    """A piece of text emitted by analyzers."""

    text: str


class Analyzer(Protocol):
    """Protocol implemented by analyzers."""

    def __call__(self, text: str) -> list[Token]:  # pragma: no cover - interface definition
        ...


class Tokenizer(Protocol):
    """Protocol implemented by tokenizers."""

    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class WhitespaceTokenizer:
    """Yields maximal runs of non-whitespace characters."""

    _PATTERN = re.compile(r"\S+", re.UNICODE)

    def __call__(self, text: str) -> Iterator[Token]:
        for match in self._PATTERN.finditer(text):
            yield Token(match.group(0))


class BigramTokenizer:
    """Character bigram tokenizer used by the legacy ranked index.

    Emits every two-character window followed by the whole input. Inputs of a
    single character produce just that character; empty input produces nothing.
    """

    def __call__(self, text: str) -> Iterator[Token]:
        if len(text) <= 1:
            if text:
                yield Token(text)
            return
        for start in range(len(text) - 1):
            yield Token(text[start : start + 2])
        yield Token(text)


class LowercaseFilter:
    """Filter that lowercases token text."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text.islower():
                yield token
            else:
                yield Token(token.text.lower())


class UniqueFilter:
    """Drops tokens whose text has already been emitted."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        seen: set[str] = set()
        for token in tokens:
            if token.text in seen:
                continue
            seen.add(token.text)
            yield token


class AnalyzerPipeline:
    """Composable analyzer pipeline (tokenizer + filters)."""

    def __init__(self, tokenizer: Tokenizer, filters: Sequence[TokenFilter] | None = None) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])

    def __call__(self, text: str) -> list[Token]:
        stream: Iterable[Token] = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        return list(stream)


_ANALYZER_FACTORIES: dict[str, Callable[[], Analyzer]] = {
    "keywords": lambda: AnalyzerPipeline(WhitespaceTokenizer(), [LowercaseFilter(), UniqueFilter()]),
    "bigram": lambda: AnalyzerPipeline(BigramTokenizer()),
}


def get_analyzer(name: str) -> Analyzer:
    """Return analyzer by name."""

    normalized = name.lower()
    if normalized not in _ANALYZER_FACTORIES:
        msg = f"Unknown analyzer '{name}'. Available: {sorted(_ANALYZER_FACTORIES)}"
        raise ValueError(msg)
    return _ANALYZER_FACTORIES[normalized]()
