"""Search data models and input validation."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

import orjson
from pydantic import BaseModel, ConfigDict, Field, StrictStr, TypeAdapter, ValidationError, field_validator

from hanami_search.errors import MalformedInputError


# Root keys accepted when a document set arrives as a JSON object
DOCUMENT_SET_KEYS = ("documents", "emojis")

_JSON_CONTEXT_CHARS = 20


class MatchTier(IntEnum):
    """Priority tiers, best first."""

    NAME_EXACT = 1
    ALIAS_EXACT = 2
    NAME_PREFIX = 3
    ALIAS_PREFIX = 4
    NAME_PARTIAL = 5
    ALIAS_PARTIAL = 6

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, slots=True)
class Document:
    """A stored document: unique id, ordered aliases, insertion sequence."""

    id: str
    aliases: tuple[str, ...]
    seq: int

    def texts(self) -> Iterator[str]:
        """Yield the id followed by each alias."""
        yield self.id
        yield from self.aliases


@dataclass(frozen=True, slots=True)
class DocumentForms:
    """Normalized forms of a document's name and of each alias.

    ``name`` and ``aliases`` hold the forms used by every tier.
    ``name_readings`` and ``alias_readings`` hold romaji-to-hiragana readings,
    which only the substring tiers consult.
    """

    name: tuple[str, ...]
    aliases: tuple[tuple[str, ...], ...]
    name_readings: tuple[str, ...] = ()
    alias_readings: tuple[str, ...] = ()

    def alias_forms(self) -> Iterator[str]:
        for forms in self.aliases:
            yield from forms

    def partial_name_forms(self) -> Iterator[str]:
        yield from self.name
        yield from self.name_readings

    def partial_alias_forms(self) -> Iterator[str]:
        yield from self.alias_forms()
        yield from self.alias_readings


def _require_utf8(value: str) -> str:
    """Reject strings the binary format cannot store, such as lone surrogates."""

    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        msg = f"{value!r} is not valid UTF-8 text: {exc.reason} at position {exc.start}"
        raise ValueError(msg) from exc
    return value


class DocumentInput(BaseModel):
    """External document schema: ``{"name": ..., "aliases": [...]}``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: StrictStr = Field(min_length=1)
    aliases: list[StrictStr] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _name_is_utf8(cls, value: str) -> str:
        return _require_utf8(value)

    @field_validator("aliases")
    @classmethod
    def _aliases_are_utf8(cls, value: list[str]) -> list[str]:
        for alias in value:
            _require_utf8(alias)
        return value


_DOCUMENT_LIST = TypeAdapter(list[DocumentInput])
_ALIAS_LIST = TypeAdapter(list[StrictStr])


def _decode_json(source: str | bytes | bytearray | memoryview) -> Any:
    try:
        return orjson.loads(source)
    except orjson.JSONDecodeError as exc:
        text = source if isinstance(source, str) else bytes(source).decode("utf-8", errors="replace")
        start = max(0, exc.pos - _JSON_CONTEXT_CHARS)
        context = text[start : exc.pos + _JSON_CONTEXT_CHARS]
        msg = f"JSON parse error at line {exc.lineno}, column {exc.colno}: {exc.msg}\nContext: '{context}'"
        raise MalformedInputError(msg) from exc


def parse_document_set(source: Any) -> list[DocumentInput]:
    """Validate a document set given as JSON text/bytes, a mapping, or a sequence.

    A mapping must hold the documents under one of ``DOCUMENT_SET_KEYS``.
    """

    data = _decode_json(source) if isinstance(source, (str, bytes, bytearray, memoryview)) else source
    if isinstance(data, Mapping):
        key = next((name for name in DOCUMENT_SET_KEYS if name in data), None)
        if key is None:
            msg = f"Document set object must contain one of {list(DOCUMENT_SET_KEYS)}"
            raise MalformedInputError(msg)
        data = data[key]
    if not isinstance(data, Sequence) or isinstance(data, (str, bytes)):
        msg = f"Document set must be a list of documents, got {type(data).__name__}"
        raise MalformedInputError(msg)
    try:
        return _DOCUMENT_LIST.validate_python(list(data))
    except ValidationError as exc:
        raise MalformedInputError(f"Invalid document set: {exc}") from exc


def parse_document(doc_id: Any, aliases: Any) -> DocumentInput:
    """Validate a single ``(id, aliases)`` pair from the mutation API."""

    if isinstance(aliases, (str, bytes, bytearray, memoryview)):
        # a lone string would otherwise be read as its characters
        aliases = _decode_json(aliases)
    try:
        return DocumentInput(name=doc_id, aliases=_ALIAS_LIST.validate_python(aliases))
    except ValidationError as exc:
        raise MalformedInputError(f"Invalid document {doc_id!r}: {exc}") from exc
