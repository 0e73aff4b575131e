"""Shared typographic and layout constants for the layout engine and emitters.

Both emitters read the same sizes so a paragraph has the same point size
in the PDF and in the Word document.
"""

from __future__ import annotations

from ..core.models import TextRole


# ---------------------------------------------------------------------------
# Color palette (RGB tuples)
# ---------------------------------------------------------------------------

class Colors:
    TEXT = (33, 33, 33)              # Near-black
    HEADING = (0, 51, 102)           # Dark blue
    TITLE = (0, 71, 153)             # Darker blue
    MUTED = (128, 128, 128)          # Gray
    BORDER = (120, 130, 145)         # Box / table borders
    TABLE_HEADER_BG = (225, 233, 245)
    TABLE_ALT_ROW = (246, 248, 252)
    BOX_BG = (250, 250, 250)
    WHITE = (255, 255, 255)


# ---------------------------------------------------------------------------
# Font configuration
# ---------------------------------------------------------------------------

class Fonts:
    # Word-processor faces; the PDF face comes from the FontCache
    BODY = "Vazirmatn"
    COMPLEX_SCRIPT = "Vazirmatn"

    TITLE_SIZE_PT = 20
    SUBTITLE_SIZE_PT = 14
    HEADING_SIZE_PT = 13
    BODY_SIZE_PT = 11
    TABLE_SIZE_PT = 10
    CAPTION_SIZE_PT = 8

    # Line height as a multiple of font size; Persian needs room for dots
    LEADING = 1.6


_ROLE_SIZES = {
    TextRole.TITLE: "TITLE_SIZE_PT",
    TextRole.SUBTITLE: "SUBTITLE_SIZE_PT",
    TextRole.HEADING: "HEADING_SIZE_PT",
    TextRole.BODY: "BODY_SIZE_PT",
    TextRole.CAPTION: "CAPTION_SIZE_PT",
}

_BOLD_ROLES = frozenset({TextRole.TITLE, TextRole.HEADING})


def size_for(role: TextRole, base: float | None = None) -> float:
    """Point size of *role*, scaled when *base* differs from the body size."""
    size = getattr(Fonts, _ROLE_SIZES[role])
    if base is None or base == Fonts.BODY_SIZE_PT:
        return size
    return size * base / Fonts.BODY_SIZE_PT


def is_bold(role: TextRole) -> bool:
    return role in _BOLD_ROLES


def line_height(size: float) -> float:
    return size * Fonts.LEADING


def color_for(role: TextRole) -> tuple[int, int, int]:
    if role is TextRole.TITLE:
        return Colors.TITLE
    if role is TextRole.HEADING:
        return Colors.HEADING
    if role is TextRole.CAPTION:
        return Colors.MUTED
    return Colors.TEXT


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

class Layout:
    """Page and block layout constants (points)."""
    PAGE_MARGIN_PT = 50
    BLOCK_SPACING_PT = 8
    CELL_PADDING_PT = 5
    BULLET_INDENT_PT = 14
    KEY_COLUMN_RATIO = 0.35
    SIGNATURE_HEIGHT_PT = 90
    SIGNATURE_GAP_PT = 20
    FOOTER_OFFSET_PT = 25
    BORDER_WIDTH_PT = 0.6
