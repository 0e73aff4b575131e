"""Cursor-based layout and pagination.

The engine walks the block stream with a single cursor ``(page, y)``:

* each block's height is computed at the printable width;
* when ``y + height`` passes the bottom margin the cursor moves to the
  top of a new page before the block is placed;
* paragraphs paginate line by line, so a long paragraph becomes one
  fragment per page; every other block is placed whole;
* after a block the cursor advances by its height plus ``block_spacing``.

A whole block taller than the printable area is placed at the cursor
without a page break and flagged ``overflow``; it runs past the bottom
margin instead of looping forever looking for a page it fits on.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from ..core.models import (
    BulletList,
    Cell,
    Direction,
    KeyValueBox,
    Line,
    Paragraph,
    PositionedBlock,
    Row,
    SignatureBox,
    Table,
)
from ..core.shaping import Shaper
from ..generators.styles import Fonts, Layout, is_bold, line_height, size_for
from .geometry import PageGeometry
from .metrics import MonospaceMeasurer, TextMeasurer, wrap_text

log = logging.getLogger(__name__)


class LayoutEngine:
    """Positions a block stream on pages of a fixed geometry."""

    def __init__(
        self,
        geometry: PageGeometry | None = None,
        *,
        measurer: TextMeasurer | None = None,
        shaper: Shaper | None = None,
        font_size: float = Fonts.BODY_SIZE_PT,
        block_spacing: float = Layout.BLOCK_SPACING_PT,
        direction: Direction = Direction.RTL,
    ) -> None:
        self.geometry = geometry or PageGeometry()
        self.measurer = measurer or MonospaceMeasurer()
        self.shaper = shaper or Shaper()
        self.font_size = font_size
        self.block_spacing = block_spacing
        self.direction = direction
        self._page = 1
        self._y = self.geometry.top_margin
        self._placed: list[PositionedBlock] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def layout(self, blocks: Iterable[object]) -> list[PositionedBlock]:
        self._page = 1
        self._y = self.geometry.top_margin
        self._placed = []

        pending = list(blocks)
        i = 0
        while i < len(pending):
            block = pending[i]
            if isinstance(block, SignatureBox):
                j = i
                while j < len(pending) and isinstance(pending[j], SignatureBox):
                    j += 1
                self._place_signature_row(pending[i:j])
                i = j
                continue
            if isinstance(block, Paragraph):
                self._place_paragraph(block)
            else:
                self._place_block(block)
            i += 1
        return self._placed

    def measure(self, block: object) -> float:
        """Height *block* needs at the printable width."""
        width = self.geometry.printable_width
        if isinstance(block, Paragraph):
            size = size_for(block.role, self.font_size)
            return len(self._wrap(block.text, width, size, is_bold(block.role))) * line_height(size)
        if isinstance(block, BulletList):
            return sum(line_height(self.font_size) for _ in self._bullet_lines(block))
        if isinstance(block, (KeyValueBox, Table)):
            return sum(row.height for row in self._rows(block))
        if isinstance(block, SignatureBox):
            return Layout.SIGNATURE_HEIGHT_PT
        raise TypeError(f"Cannot lay out {type(block).__name__}")

    # ------------------------------------------------------------------
    # Cursor
    # ------------------------------------------------------------------

    @property
    def _top(self) -> float:
        return self.geometry.top_margin

    @property
    def _bottom(self) -> float:
        return self.geometry.printable_bottom

    def _page_break(self) -> None:
        self._page += 1
        self._y = self._top

    def _advance(self, height: float) -> None:
        self._y += height + self.block_spacing

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def _place_paragraph(self, block: Paragraph) -> None:
        size = size_for(block.role, self.font_size)
        bold = is_bold(block.role)
        lh = line_height(size)
        width = self.geometry.printable_width
        lines = [self._line(t, size, bold) for t in self._wrap(block.text, width, size, bold)]
        if not lines:
            return

        fragment: list[Line] = []
        start_y = self._y
        index = 0
        for line in lines:
            if self._y + lh > self._bottom and self._y > self._top:
                if fragment:
                    self._emit_fragment(block, fragment, start_y, size, index)
                    index += 1
                    fragment = []
                self._page_break()
                start_y = self._y
            fragment.append(line)
            self._y += lh
        self._emit_fragment(block, fragment, start_y, size, index)
        self._y += self.block_spacing

    def _emit_fragment(
        self, block: Paragraph, lines: list[Line], y: float, size: float, index: int
    ) -> None:
        self._placed.append(
            PositionedBlock(
                block=block,
                page=self._page,
                x=self.geometry.left_margin,
                y=y,
                width=self.geometry.printable_width,
                height=len(lines) * line_height(size),
                lines=tuple(lines),
                font_size=size,
                fragment=index,
                continued=index > 0,
            )
        )

    def _place_block(self, block: object) -> None:
        lines: tuple[Line, ...] = ()
        rows: tuple[Row, ...] = ()
        size = self.font_size
        if isinstance(block, BulletList):
            lines = tuple(self._bullet_lines(block))
            height = len(lines) * line_height(size)
        elif isinstance(block, (KeyValueBox, Table)):
            size = self._table_size()
            rows = tuple(self._rows(block))
            height = sum(r.height for r in rows)
        else:
            height = self.measure(block)

        overflow = self._reserve(height, block)
        self._placed.append(
            PositionedBlock(
                block=block,
                page=self._page,
                x=self.geometry.left_margin,
                y=self._y,
                width=self.geometry.printable_width,
                height=height,
                lines=lines,
                rows=rows,
                font_size=size,
                overflow=overflow,
            )
        )
        self._advance(height)

    def _place_signature_row(self, boxes: Sequence[SignatureBox]) -> None:
        n = len(boxes)
        gap = Layout.SIGNATURE_GAP_PT
        total = self.geometry.printable_width
        box_w = (total - gap * (n - 1)) / n
        height = Layout.SIGNATURE_HEIGHT_PT
        size = self.font_size
        pad = Layout.CELL_PADDING_PT

        overflow = self._reserve(height, boxes[0])
        for k, box in enumerate(boxes):
            offset = k * (box_w + gap)
            if self.direction is Direction.RTL:
                offset = total - offset - box_w
            lines = [self._line(t, size, True) for t in self._wrap(box.label, box_w - 2 * pad, size, True)]
            if box.name:
                lines += [self._line(t, size, False) for t in self._wrap(box.name, box_w - 2 * pad, size, False)]
            self._placed.append(
                PositionedBlock(
                    block=box,
                    page=self._page,
                    x=self.geometry.left_margin + offset,
                    y=self._y,
                    width=box_w,
                    height=height,
                    lines=tuple(lines),
                    font_size=size,
                    overflow=overflow,
                )
            )
        self._advance(height)

    def _reserve(self, height: float, block: object) -> bool:
        """Break the page if needed. Returns True for an overflowing block."""
        if height > self.geometry.usable_height:
            log.warning(
                "%s is %.0fpt tall, more than a page (%.0fpt); placing without a break",
                type(block).__name__,
                height,
                self.geometry.usable_height,
            )
            return True
        if self._y + height > self._bottom:
            self._page_break()
        return False

    # ------------------------------------------------------------------
    # Measurement helpers
    # ------------------------------------------------------------------

    def _text_width(self, text: str, size: float, bold: bool) -> float:
        return sum(
            self.measurer.string_width(run.text, size, bold) for run in self.shaper.shape(text)
        )

    def _wrap(self, text: str, width: float, size: float, bold: bool) -> list[str]:
        if not text or not text.strip():
            return []
        return wrap_text(text.strip(), width, lambda s: self._text_width(s, size, bold))

    def _line(self, text: str, size: float, bold: bool, *, bullet: bool = False, indent: float = 0.0) -> Line:
        runs = tuple(self.shaper.shape(text))
        width = sum(self.measurer.string_width(r.text, size, bold) for r in runs)
        return Line(text=text, runs=runs, width=width, bullet=bullet, indent=indent, bold=bold)

    def _bullet_lines(self, block: BulletList) -> list[Line]:
        size = self.font_size
        indent = Layout.BULLET_INDENT_PT
        width = self.geometry.printable_width - indent
        lines: list[Line] = []
        for item in block.items:
            for k, text in enumerate(self._wrap(item, width, size, False)):
                lines.append(self._line(text, size, False, bullet=k == 0, indent=indent))
        return lines

    def _table_size(self) -> float:
        return Fonts.TABLE_SIZE_PT * self.font_size / Fonts.BODY_SIZE_PT

    def _column_widths(self, count: int, weights: Sequence[float] | None) -> list[float]:
        if not weights or len(weights) != count or sum(weights) <= 0:
            weights = [1.0] * count
        total = sum(weights)
        return [self.geometry.printable_width * w / total for w in weights]

    def _rows(self, block: KeyValueBox | Table) -> list[Row]:
        if isinstance(block, KeyValueBox):
            ratio = Layout.KEY_COLUMN_RATIO
            widths = self._column_widths(2, [ratio, 1 - ratio])
            data = [(list(pair), False) for pair in block.pairs]
        else:
            count = len(block.columns)
            widths = self._column_widths(count, block.column_weights)
            data = [(list(block.columns), True)]
            for row in block.rows:
                cells = list(row[:count]) + [""] * (count - len(row))
                data.append((cells, False))

        size = self._table_size()
        lh = line_height(size)
        pad = Layout.CELL_PADDING_PT
        total = self.geometry.printable_width
        rows: list[Row] = []
        y = 0.0
        for texts, header in data:
            cells: list[Cell] = []
            offset = 0.0
            for text, col_w in zip(texts, widths):
                x = offset
                if self.direction is Direction.RTL:
                    x = total - offset - col_w
                bold = header or (isinstance(block, KeyValueBox) and not cells)
                wrapped = self._wrap(str(text), col_w - 2 * pad, size, bold)
                lines = tuple(self._line(t, size, bold) for t in wrapped)
                cells.append(Cell(x=x, width=col_w, lines=lines, header=header))
                offset += col_w
            tallest = max((len(c.lines) for c in cells), default=0)
            height = max(tallest, 1) * lh + 2 * pad
            rows.append(Row(y=y, height=height, cells=tuple(cells), header=header))
            y += height
        return rows


def layout(
    blocks: Iterable[object],
    geometry: PageGeometry | None = None,
    *,
    measurer: TextMeasurer | None = None,
    shaper: Shaper | None = None,
    font_size: float = Fonts.BODY_SIZE_PT,
    block_spacing: float = Layout.BLOCK_SPACING_PT,
    direction: Direction = Direction.RTL,
) -> list[PositionedBlock]:
    """Position *blocks* on pages of *geometry*."""
    engine = LayoutEngine(
        geometry,
        measurer=measurer,
        shaper=shaper,
        font_size=font_size,
        block_spacing=block_spacing,
        direction=direction,
    )
    return engine.layout(blocks)


def page_count(positioned: Sequence[PositionedBlock]) -> int:
    return max((p.page for p in positioned), default=1)
