"""Romaji to hiragana transliteration.

The converter walks the input left to right and, at each position, emits the
kana for the longest syllable the table knows. A doubled consonant becomes a
small ``っ``; ``n`` that cannot start a syllable becomes ``ん``. Characters the
table does not cover are copied through, so every input converts.

The syllable table is data: pass a custom ``RomajiTable`` to the normalizer to
change spellings without touching the algorithm.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType


_VOWELS = frozenset("aeiou")
_SMALL_TSU = "っ"
_SYLLABIC_N = "ん"

_BASE_SYLLABLES: dict[str, str] = {
    "a": "あ", "i": "い", "u": "う", "e": "え", "o": "お",
    "ka": "か", "ki": "き", "ku": "く", "ke": "け", "ko": "こ",
    "sa": "さ", "si": "し", "shi": "し", "su": "す", "se": "せ", "so": "そ",
    "ta": "た", "ti": "ち", "chi": "ち", "tu": "つ", "tsu": "つ", "te": "て", "to": "と",
    "na": "な", "ni": "に", "nu": "ぬ", "ne": "ね", "no": "の",
    "ha": "は", "hi": "ひ", "hu": "ふ", "fu": "ふ", "he": "へ", "ho": "ほ",
    "ma": "ま", "mi": "み", "mu": "む", "me": "め", "mo": "も",
    "ya": "や", "yi": "い", "yu": "ゆ", "ye": "いぇ", "yo": "よ",
    "ra": "ら", "ri": "り", "ru": "る", "re": "れ", "ro": "ろ",
    "wa": "わ", "wi": "うぃ", "we": "うぇ", "wo": "を",
    "ga": "が", "gi": "ぎ", "gu": "ぐ", "ge": "げ", "go": "ご",
    "za": "ざ", "zi": "じ", "ji": "じ", "zu": "ず", "ze": "ぜ", "zo": "ぞ",
    "da": "だ", "di": "ぢ", "du": "づ", "de": "で", "do": "ど",
    "ba": "ば", "bi": "び", "bu": "ぶ", "be": "べ", "bo": "ぼ",
    "pa": "ぱ", "pi": "ぴ", "pu": "ぷ", "pe": "ぺ", "po": "ぽ",
    "va": "ゔぁ", "vi": "ゔぃ", "vu": "ゔ", "ve": "ゔぇ", "vo": "ゔぉ",
    "fa": "ふぁ", "fi": "ふぃ", "fe": "ふぇ", "fo": "ふぉ", "fyu": "ふゅ",
    "she": "しぇ", "che": "ちぇ", "je": "じぇ",
    "thi": "てぃ", "dhi": "でぃ", "twu": "とぅ", "dwu": "どぅ",
    "-": "ー",
}

# consonant prefix -> i-row kana that takes a small ya/yu/yo
_YOON_STEMS: dict[str, str] = {
    "ky": "き", "gy": "ぎ", "sy": "し", "sh": "し", "zy": "じ", "jy": "じ", "j": "じ",
    "ty": "ち", "cy": "ち", "ch": "ち", "dy": "ぢ", "ny": "に", "hy": "ひ",
    "by": "び", "py": "ぴ", "my": "み", "ry": "り",
}

_SMALL_YOON = {"a": "ゃ", "u": "ゅ", "o": "ょ"}

_SMALL_KANA: dict[str, str] = {
    "a": "ぁ", "i": "ぃ", "u": "ぅ", "e": "ぇ", "o": "ぉ",
    "ya": "ゃ", "yu": "ゅ", "yo": "ょ",
    "tu": "っ", "tsu": "っ", "wa": "ゎ", "ka": "ゕ", "ke": "ゖ",
}


def _build_default_syllables() -> dict[str, str]:
    syllables = dict(_BASE_SYLLABLES)
    for stem, kana in _YOON_STEMS.items():
        for vowel, small in _SMALL_YOON.items():
            syllables[f"{stem}{vowel}"] = kana + small
    for prefix in ("x", "l"):
        for key, kana in _SMALL_KANA.items():
            syllables[f"{prefix}{key}"] = kana
    return syllables


class RomajiTable:
    """Immutable mapping of romaji spellings to hiragana."""

    def __init__(self, syllables: Mapping[str, str]) -> None:
        cleaned = {key.lower(): value for key, value in syllables.items() if key}
        self._syllables = MappingProxyType(cleaned)
        self.max_key_length = max((len(key) for key in cleaned), default=0)

    def lookup(self, text: str, start: int) -> tuple[str, int] | None:
        """Return ``(kana, consumed)`` for the longest key at ``start``."""

        longest = min(self.max_key_length, len(text) - start)
        for length in range(longest, 0, -1):
            kana = self._syllables.get(text[start : start + length])
            if kana is not None:
                return kana, length
        return None

    def extended(self, overrides: Mapping[str, str]) -> RomajiTable:
        """Return a copy of this table with ``overrides`` applied."""

        merged = dict(self._syllables)
        merged.update(overrides)
        return RomajiTable(merged)

    def __getitem__(self, key: str) -> str:
        return self._syllables[key]

    def __contains__(self, key: object) -> bool:
        return key in self._syllables

    def __iter__(self) -> Iterator[str]:
        return iter(self._syllables)

    def __len__(self) -> int:
        return len(self._syllables)


DEFAULT_ROMAJI_TABLE = RomajiTable(_build_default_syllables())


def _is_consonant(char: str) -> bool:
    return char.isascii() and char.isalpha() and char not in _VOWELS


def transliterate(text: str, table: RomajiTable = DEFAULT_ROMAJI_TABLE) -> str:
    """Convert lowercase romaji in ``text`` to hiragana, copying anything else."""

    output: list[str] = []
    position = 0
    length = len(text)
    while position < length:
        char = text[position]
        following = text[position + 1] if position + 1 < length else ""

        if char == "n" and following not in _VOWELS and following != "y":
            output.append(_SYLLABIC_N)
            position += 1
            if following == "'":
                position += 1
            elif following == "n":
                after = text[position + 1] if position + 1 < length else ""
                if after not in _VOWELS and after != "y":
                    # "nn" that does not start a syllable is a single ん
                    position += 1
            continue

        if _is_consonant(char) and char != "n":
            geminate = following == char or (char == "t" and text.startswith("ch", position + 1))
            if geminate:
                output.append(_SMALL_TSU)
                position += 1
                continue

        match = table.lookup(text, position)
        if match is None:
            output.append(char)
            position += 1
            continue
        kana, consumed = match
        output.append(kana)
        position += consumed
    return "".join(output)
