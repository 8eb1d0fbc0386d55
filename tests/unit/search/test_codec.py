"""Unit tests for the binary codec and legacy migration."""

import struct

import pytest

from hanami_search.errors import CorruptDataError, MalformedInputError, UnsupportedVersionError
from hanami_search.search.codec import (
    FORMAT_VERSION,
    LEGACY_FORMAT_VERSION,
    CurrentPayload,
    DocumentRecord,
    LegacyPayload,
    build_legacy_payload,
    decode,
    encode,
    migrate,
)


DOCUMENTS = (
    DocumentRecord(id="smile", aliases=("happy", "joy")),
    DocumentRecord(id="笑顔", aliases=("えがお", "スマイル")),
    DocumentRecord(id="cat"),
)


def _u32(value):
    return struct.pack("<I", value)


def _text(value):
    raw = value.encode("utf-8")
    return _u32(len(raw)) + raw


@pytest.mark.unit
class TestCurrentFormat:
    def test_exact_layout(self):
        data = encode(CurrentPayload(documents=(DocumentRecord(id="ab", aliases=("c",)),)))

        assert data == _u32(2) + _u32(1) + _text("ab") + _u32(1) + _text("c")

    def test_round_trip(self):
        payload = CurrentPayload(documents=DOCUMENTS)

        assert decode(encode(payload)) == payload

    def test_empty_payload(self):
        data = encode(CurrentPayload(documents=()))

        assert data == _u32(2) + _u32(0)
        assert decode(data) == CurrentPayload(documents=())

    def test_accepts_bytearray_and_memoryview(self):
        data = encode(CurrentPayload(documents=DOCUMENTS))

        assert decode(bytearray(data)).documents == DOCUMENTS
        assert decode(memoryview(data)).documents == DOCUMENTS


@pytest.mark.unit
class TestLegacyFormat:
    """Version 1 blobs carry BM25 statistics that migration discards."""

    def test_build_legacy_payload_indexes_bigrams(self):
        payload = build_legacy_payload([DocumentRecord(id="ab", aliases=("bc",))])

        assert payload.n_docs == 1
        assert payload.doc_lengths == {"ab": 2}
        assert dict(payload.postings) == {"ab": ("ab",), "bc": ("ab",)}
        assert payload.k1 == pytest.approx(1.2)
        assert payload.b == pytest.approx(0.75)

    def test_exact_layout(self):
        payload = build_legacy_payload([DocumentRecord(id="a")], k1=1.5, b=0.5)

        expected = (
            _u32(1)
            + struct.pack("<f", 1.5)
            + struct.pack("<f", 0.5)
            + _u32(1)
            + _u32(1)
            + _text("a")
            + _u32(1)
            + _text("a")
            + _u32(1)
            + _text("a")
            + _u32(1)
            + _u32(1)
            + _text("a")
            + _u32(0)
        )
        assert encode(payload) == expected

    def test_decode_returns_legacy_variant(self):
        decoded = decode(encode(build_legacy_payload(DOCUMENTS)))

        assert isinstance(decoded, LegacyPayload)
        assert decoded.version == LEGACY_FORMAT_VERSION
        assert decoded.documents == DOCUMENTS
        assert decoded.n_docs == 3
        assert decoded.doc_lengths["smile"] == 3
        assert "smile" in decoded.postings["sm"]

    def test_migrate_keeps_only_documents(self):
        legacy = build_legacy_payload(DOCUMENTS)

        migrated = migrate(legacy)

        assert migrated == CurrentPayload(documents=DOCUMENTS)
        assert migrated.version == FORMAT_VERSION

    def test_migration_matches_direct_encoding(self):
        migrated = migrate(decode(encode(build_legacy_payload(DOCUMENTS))))

        assert encode(migrated) == encode(CurrentPayload(documents=DOCUMENTS))


@pytest.mark.unit
class TestDecodeErrors:
    def test_unknown_version(self):
        with pytest.raises(UnsupportedVersionError) as excinfo:
            decode(_u32(3) + _u32(0))

        assert excinfo.value.version == 3

    @pytest.mark.parametrize("data", [b"", b"\x02\x00"])
    def test_too_short_for_version(self, data):
        with pytest.raises(CorruptDataError):
            decode(data)

    def test_truncated(self):
        data = encode(CurrentPayload(documents=DOCUMENTS))

        with pytest.raises(CorruptDataError, match="Truncated"):
            decode(data[:-3])

    def test_trailing_bytes(self):
        data = encode(CurrentPayload(documents=DOCUMENTS))

        with pytest.raises(CorruptDataError, match="trailing"):
            decode(data + b"\x00")

    def test_invalid_utf8(self):
        data = _u32(2) + _u32(1) + _u32(2) + b"\xff\xfe" + _u32(0)

        with pytest.raises(CorruptDataError, match="UTF-8"):
            decode(data)

    def test_huge_count_is_truncation(self):
        with pytest.raises(CorruptDataError):
            decode(_u32(2) + _u32(0xFFFFFFFF))

    def test_not_bytes(self):
        with pytest.raises(MalformedInputError):
            decode("not bytes")
