"""Exceptions raised by the search index."""

from __future__ import annotations


class HanamiSearchError(Exception):
    """Base class for all index errors."""


class MalformedInputError(HanamiSearchError, ValueError):
    """Raised when documents, queries, or limits do not match the expected schema."""


class CorruptDataError(HanamiSearchError, ValueError):
    """Raised when a serialized index is truncated or structurally invalid."""


class UnsupportedVersionError(HanamiSearchError, ValueError):
    """Raised when a serialized index carries an unknown format version."""

    def __init__(self, version: int) -> None:
        super().__init__(f"Unsupported index format version: {version}")
        self.version = version
