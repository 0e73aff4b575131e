"""Text measurement and greedy line wrapping."""

from __future__ import annotations

from typing import Callable, Protocol

from reportlab.pdfbase import pdfmetrics

from ..core.fonts import FontCache


class TextMeasurer(Protocol):
    """Measures display (already shaped) text."""

    def string_width(self, text: str, size: float, bold: bool = False) -> float:
        ...


class FontMeasurer:
    """Measures with the metrics of the fonts resolved by a :class:`FontCache`."""

    def __init__(self, fonts: FontCache) -> None:
        self.fonts = fonts

    def string_width(self, text: str, size: float, bold: bool = False) -> float:
        font = self.fonts.bold() if bold else self.fonts.regular()
        return pdfmetrics.stringWidth(text, font.name, size)


class MonospaceMeasurer:
    """Every character is ``char_width * size`` wide. Deterministic, font-free."""

    def __init__(self, char_width: float = 0.5) -> None:
        self.char_width = char_width

    def string_width(self, text: str, size: float, bold: bool = False) -> float:
        return len(text) * size * self.char_width


def _split_long_word(word: str, max_width: float, width_of: Callable[[str], float]) -> list[str]:
    pieces: list[str] = []
    current = ""
    for ch in word:
        if current and width_of(current + ch) > max_width:
            pieces.append(current)
            current = ch
        else:
            current += ch
    if current:
        pieces.append(current)
    return pieces


def wrap_text(text: str, max_width: float, width_of: Callable[[str], float]) -> list[str]:
    """Greedy word wrap of logical *text*.

    Explicit newlines start a new line; blank lines are kept. A single
    word wider than *max_width* is broken between characters.
    """
    lines: list[str] = []
    for raw_line in text.split("\n"):
        words = raw_line.split()
        if not words:
            lines.append("")
            continue
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if width_of(candidate) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
            if width_of(word) <= max_width:
                current = word
            else:
                *full, current = _split_long_word(word, max_width, width_of)
                lines.extend(full)
        lines.append(current)
    return lines
