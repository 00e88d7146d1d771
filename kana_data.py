"""
Static kana pool used by the drawing drill.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

HIRAGANA = "hiragana"
KATAKANA = "katakana"
MIXED = "mixed"

SCRIPTS = (HIRAGANA, KATAKANA)
MODES = (HIRAGANA, KATAKANA, MIXED)


@dataclass(frozen=True)
class KanaSymbol:
    """A single prompt: the kana, its romanized reading and its script."""

    kana: str
    romaji: str
    script: str


_ROMAJI = (
    "a", "i", "u", "e", "o",
    "ka", "ki", "ku", "ke", "ko",
    "sa", "shi", "su", "se", "so",
    "ta", "chi", "tsu", "te", "to",
    "na", "ni", "nu", "ne", "no",
    "ha", "hi", "fu", "he", "ho",
    "ma", "mi", "mu", "me", "mo",
    "ya", "yu", "yo",
    "ra", "ri", "ru", "re", "ro",
    "wa", "wo",
    "n",
)

_HIRAGANA_CHARS = (
    "あいうえお"
    "かきくけこ"
    "さしすせそ"
    "たちつてと"
    "なにぬねの"
    "はひふへほ"
    "まみむめも"
    "やゆよ"
    "らりるれろ"
    "わを"
    "ん"
)

_KATAKANA_CHARS = (
    "アイウエオ"
    "カキクケコ"
    "サシスセソ"
    "タチツテト"
    "ナニヌネノ"
    "ハヒフヘホ"
    "マミムメモ"
    "ヤユヨ"
    "ラリルレロ"
    "ワヲ"
    "ン"
)


def _build_symbols(chars: str, script: str) -> List[KanaSymbol]:
    return [KanaSymbol(kana, romaji, script) for kana, romaji in zip(chars, _ROMAJI)]


KANA_SYMBOLS: Tuple[KanaSymbol, ...] = tuple(
    _build_symbols(_HIRAGANA_CHARS, HIRAGANA) + _build_symbols(_KATAKANA_CHARS, KATAKANA)
)


def validate_mode(mode: str) -> str:
    """Return mode unchanged, or raise ValueError for an unknown mode."""
    if mode not in MODES:
        raise ValueError(f"Unknown kana mode {mode!r}; expected one of {', '.join(MODES)}")
    return mode


def symbols_for_mode(symbols: Sequence[KanaSymbol], mode: str) -> List[KanaSymbol]:
    """
    Filter the pool down to the symbols practised in a mode.

    Args:
        symbols: Ordered glyph pool
        mode: A script name, or MIXED for every script

    Returns:
        Symbols in pool order
    """
    validate_mode(mode)
    if mode == MIXED:
        return list(symbols)
    return [symbol for symbol in symbols if symbol.script == mode]


def find_symbol(symbols: Sequence[KanaSymbol], kana: str):
    """Look up a symbol by its kana, or None."""
    for symbol in symbols:
        if symbol.kana == kana:
            return symbol
    return None
