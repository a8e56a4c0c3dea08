"""Locale-aware text folding used for tag matching."""

from __future__ import annotations

import re
import unicodedata

_WHITESPACE_RE = re.compile(r"\s+")

# Katakana letters U+30A1..U+30F6 map onto hiragana U+3041..U+3096.
_KATAKANA_START = 0x30A1
_KATAKANA_END = 0x30F6
_KANA_OFFSET = 0x60
_ITERATION_MARKS = {0x30FD: 0x309D, 0x30FE: 0x309E}

_MAX_FOLD_PASSES = 4


def katakana_to_hiragana(text: str) -> str:
    chars = []
    for char in text:
        code = ord(char)
        if _KATAKANA_START <= code <= _KATAKANA_END:
            chars.append(chr(code - _KANA_OFFSET))
        elif code in _ITERATION_MARKS:
            chars.append(chr(_ITERATION_MARKS[code]))
        else:
            chars.append(char)
    return "".join(chars)


def _fold(text: str) -> str:
    folded = unicodedata.normalize("NFKC", text)
    folded = folded.casefold()
    folded = katakana_to_hiragana(folded)
    folded = unicodedata.normalize("NFKC", folded)
    return _WHITESPACE_RE.sub(" ", folded).strip()


def normalize_text(text: str) -> str:
    """Fold width, case and kana variants so visually equal strings compare equal.

    The fold is repeated until it reaches a fixed point, which makes the
    function idempotent.
    """

    if not text:
        return ""
    current = text
    for _ in range(_MAX_FOLD_PASSES):
        folded = _fold(current)
        if folded == current:
            break
        current = folded
    return current


__all__ = ["katakana_to_hiragana", "normalize_text"]
