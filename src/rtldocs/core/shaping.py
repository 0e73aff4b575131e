"""Bidirectional reordering and contextual glyph reshaping.

Persian/Arabic letters are mapped to their isolated/initial/medial/final
presentation forms with ``arabic_reshaper``, then the Unicode
Bidirectional Algorithm (``python-bidi``) computes the visual order.
The visual string is cut into same-direction :class:`ShapedRun`\\ s so an
absolute-positioning renderer can draw them left to right.

Pure Latin/digit text skips the whole pipeline and comes back as one
left-to-right run.
"""

from __future__ import annotations

import logging
import re
import unicodedata

import arabic_reshaper
from bidi.algorithm import get_display

from .models import Direction, ShapedRun

log = logging.getLogger(__name__)

_ARABIC_SCRIPT_RE = re.compile(
    "[\u0600-\u06FF\u0750-\u077F\u08A0-\u08FF\uFB50-\uFDFF\uFE70-\uFEFF]"
)

_RTL_CLASSES = frozenset({"R", "AL"})
_LTR_CLASSES = frozenset({"L", "EN", "AN"})


def contains_persian(text: str | None) -> bool:
    """True if *text* contains any Arabic-script code point."""
    if not text:
        return False
    return _ARABIC_SCRIPT_RE.search(text) is not None


def text_direction(text: str | None) -> Direction:
    return Direction.RTL if contains_persian(text) else Direction.LTR


def _char_direction(ch: str) -> Direction | None:
    cls = unicodedata.bidirectional(ch)
    if cls in _RTL_CLASSES:
        return Direction.RTL
    if cls in _LTR_CLASSES:
        return Direction.LTR
    return None


def segment_runs(visual: str, base: Direction = Direction.RTL) -> list[ShapedRun]:
    """Split a visual-order string into same-direction runs.

    Neutral characters (spaces, punctuation) stick to the run on their
    left; leading neutrals take the base direction.
    """
    if not visual:
        return []
    runs: list[ShapedRun] = []
    current: list[str] = []
    current_dir: Direction | None = None

    for ch in visual:
        ch_dir = _char_direction(ch)
        if ch_dir is None or ch_dir == current_dir or current_dir is None:
            current.append(ch)
            if current_dir is None and ch_dir is not None:
                current_dir = ch_dir
            continue
        runs.append(ShapedRun("".join(current), current_dir, len(runs)))
        current = [ch]
        current_dir = ch_dir

    runs.append(ShapedRun("".join(current), current_dir or base, len(runs)))
    return runs


class Shaper:
    """Turns logical text into display-ready :class:`ShapedRun`\\ s.

    A shaper never raises. When reshaping or reordering fails the original
    text is returned as a single run and the problem is logged once.

    ``enabled=False`` passes Persian text through untouched; the engine
    uses it when no Persian-capable font is available.
    """

    def __init__(self, *, enabled: bool = True) -> None:
        self.enabled = enabled
        self._reshaper = arabic_reshaper.ArabicReshaper()
        self._degraded_logged = False

    def shape(self, text: str) -> list[ShapedRun]:
        if not text:
            return []
        if not contains_persian(text):
            return [ShapedRun(text, Direction.LTR, 0)]
        if not self.enabled:
            return [ShapedRun(text, Direction.RTL, 0)]
        try:
            reshaped = self._reshaper.reshape(text)
            visual = get_display(reshaped, base_dir="R")
        except Exception as exc:
            if not self._degraded_logged:
                log.warning("Shaping failed, writing text unshaped: %s", exc)
                self._degraded_logged = True
            return [ShapedRun(text, Direction.RTL, 0)]
        return segment_runs(visual, Direction.RTL)

    def visual_text(self, text: str) -> str:
        """Shaped text in display order as one string."""
        return "".join(run.text for run in self.shape(text))

