"""Binary persistence for the search index.

All integers are little-endian unsigned 32-bit; strings are a byte length
followed by UTF-8 bytes. Every blob starts with its format version.

Version 2 (current)::

    [version=2][doc count]{ [id][alias count]{ [alias] }* }*

Version 1 (legacy BM25 engine)::

    [version=1][k1: f32][b: f32][n_docs]
    [posting count]{ [token][id count]{ [id] }* }*
    [doc_len count]{ [id][length] }*
    [doc count]{ [id][alias count]{ [alias] }* }*

Decoding yields a ``CurrentPayload`` or a ``LegacyPayload``. ``migrate`` turns
the latter into the former by keeping the documents and dropping the postings,
length statistics and ranking parameters, which the tiered engine never uses.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
import struct
from types import MappingProxyType
from typing import ClassVar

from hanami_search.errors import CorruptDataError, MalformedInputError, UnsupportedVersionError
from hanami_search.search.analyzers import get_analyzer


FORMAT_VERSION = 2
LEGACY_FORMAT_VERSION = 1

LEGACY_DEFAULT_K1 = 1.2
LEGACY_DEFAULT_B = 0.75

_U32 = struct.Struct("<I")
_F32 = struct.Struct("<f")


@dataclass(frozen=True, slots=True)
class DocumentRecord:
    """A serialized document: id and aliases, nothing derived."""

    id: str
    aliases: tuple[str, ...] = ()


@dataclass(frozen=True)
class CurrentPayload:
    """Decoded version 2 blob."""

    version: ClassVar[int] = FORMAT_VERSION

    documents: tuple[DocumentRecord, ...]


@dataclass(frozen=True)
class LegacyPayload:
    """Decoded version 1 blob from the bigram/BM25 engine."""

    version: ClassVar[int] = LEGACY_FORMAT_VERSION

    documents: tuple[DocumentRecord, ...]
    k1: float = LEGACY_DEFAULT_K1
    b: float = LEGACY_DEFAULT_B
    n_docs: int = 0
    postings: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))
    doc_lengths: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))


Payload = CurrentPayload | LegacyPayload


def migrate(payload: LegacyPayload) -> CurrentPayload:
    """Convert a legacy payload to the current representation."""
    return CurrentPayload(documents=payload.documents)


def build_legacy_payload(
    documents: Iterable[DocumentRecord],
    *,
    k1: float = LEGACY_DEFAULT_K1,
    b: float = LEGACY_DEFAULT_B,
) -> LegacyPayload:
    """Index documents the way the legacy engine did.

    Each document posts its name, the bigrams of its name, and every alias
    with that alias's bigrams; a token is posted once per document. The
    recorded length of a document is its alias count plus one for the name.
    """

    bigrams = get_analyzer("bigram")
    records = tuple(documents)
    postings: dict[str, list[str]] = {}
    doc_lengths: dict[str, int] = {}
    for record in records:
        doc_lengths[record.id] = len(record.aliases) + 1
        seen: set[str] = set()
        sources = [record.id, *(token.text for token in bigrams(record.id))]
        for alias in record.aliases:
            sources.append(alias)
            sources.extend(token.text for token in bigrams(alias))
        for token in sources:
            if token in seen:
                continue
            seen.add(token)
            postings.setdefault(token, []).append(record.id)
    return LegacyPayload(
        documents=records,
        k1=k1,
        b=b,
        n_docs=len(records),
        postings=MappingProxyType({token: tuple(ids) for token, ids in postings.items()}),
        doc_lengths=MappingProxyType(doc_lengths),
    )


class _Writer:
    def __init__(self) -> None:
        self._buffer = bytearray()

    def u32(self, value: int) -> None:
        self._buffer += _U32.pack(value)

    def f32(self, value: float) -> None:
        self._buffer += _F32.pack(value)

    def text(self, value: str) -> None:
        raw = value.encode("utf-8")
        self.u32(len(raw))
        self._buffer += raw

    def documents(self, records: tuple[DocumentRecord, ...]) -> None:
        self.u32(len(records))
        for record in records:
            self.text(record.id)
            self.u32(len(record.aliases))
            for alias in record.aliases:
                self.text(alias)

    def getvalue(self) -> bytes:
        return bytes(self._buffer)


class _Reader:
    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._view = memoryview(data).cast("B")
        self._offset = 0

    @property
    def remaining(self) -> int:
        return len(self._view) - self._offset

    def _take(self, size: int) -> memoryview:
        if size > self.remaining:
            msg = f"Truncated index data: needed {size} bytes at offset {self._offset}, {self.remaining} left"
            raise CorruptDataError(msg)
        chunk = self._view[self._offset : self._offset + size]
        self._offset += size
        return chunk

    def u32(self) -> int:
        return _U32.unpack(self._take(_U32.size))[0]

    def f32(self) -> float:
        return _F32.unpack(self._take(_F32.size))[0]

    def text(self) -> str:
        start = self._offset
        raw = self._take(self.u32())
        try:
            return str(raw, "utf-8")
        except UnicodeDecodeError as exc:
            raise CorruptDataError(f"Invalid UTF-8 string at offset {start}") from exc

    def documents(self) -> tuple[DocumentRecord, ...]:
        records = []
        for _ in range(self.u32()):
            doc_id = self.text()
            aliases = tuple(self.text() for _ in range(self.u32()))
            records.append(DocumentRecord(id=doc_id, aliases=aliases))
        return tuple(records)

    def finish(self) -> None:
        if self.remaining:
            msg = f"Unexpected {self.remaining} trailing bytes at offset {self._offset}"
            raise CorruptDataError(msg)


def encode(payload: Payload) -> bytes:
    """Serialize either payload variant."""

    writer = _Writer()
    writer.u32(payload.version)
    if isinstance(payload, LegacyPayload):
        writer.f32(payload.k1)
        writer.f32(payload.b)
        writer.u32(payload.n_docs)
        writer.u32(len(payload.postings))
        for token, ids in payload.postings.items():
            writer.text(token)
            writer.u32(len(ids))
            for doc_id in ids:
                writer.text(doc_id)
        writer.u32(len(payload.doc_lengths))
        for doc_id, length in payload.doc_lengths.items():
            writer.text(doc_id)
            writer.u32(length)
    writer.documents(payload.documents)
    return writer.getvalue()


def _decode_legacy(reader: _Reader) -> LegacyPayload:
    k1 = reader.f32()
    b = reader.f32()
    n_docs = reader.u32()
    postings: dict[str, tuple[str, ...]] = {}
    for _ in range(reader.u32()):
        token = reader.text()
        postings[token] = tuple(reader.text() for _ in range(reader.u32()))
    doc_lengths: dict[str, int] = {}
    for _ in range(reader.u32()):
        doc_id = reader.text()
        doc_lengths[doc_id] = reader.u32()
    return LegacyPayload(
        documents=reader.documents(),
        k1=k1,
        b=b,
        n_docs=n_docs,
        postings=MappingProxyType(postings),
        doc_lengths=MappingProxyType(doc_lengths),
    )


def decode(data: bytes | bytearray | memoryview) -> Payload:
    """Parse a serialized index, dispatching on its version tag."""

    if not isinstance(data, (bytes, bytearray, memoryview)):
        msg = f"Serialized index must be bytes-like, got {type(data).__name__}"
        raise MalformedInputError(msg)
    reader = _Reader(data)
    if reader.remaining < _U32.size:
        msg = f"Index data too short for a version tag ({reader.remaining} bytes)"
        raise CorruptDataError(msg)

    version = reader.u32()
    payload: Payload
    if version == FORMAT_VERSION:
        payload = CurrentPayload(documents=reader.documents())
    elif version == LEGACY_FORMAT_VERSION:
        payload = _decode_legacy(reader)
    else:
        raise UnsupportedVersionError(version)
    reader.finish()
    return payload
