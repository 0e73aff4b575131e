"""Generate a PDF from a positioned block stream with ReportLab.

The layout engine has already decided every coordinate, so this emitter
only paints: a text line is drawn run by run in visual order starting at
the x the alignment implies, boxes and tables get stroked borders, and
each page receives the footer and its page number.
"""

from __future__ import annotations

import io
import logging
from itertools import groupby
from typing import Sequence

from reportlab.lib import colors
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas as rl_canvas

from ..core.localization import to_persian_digits
from ..core.models import (
    Alignment,
    BulletList,
    Direction,
    DocumentMetadata,
    KeyValueBox,
    Line,
    OutputFormat,
    Paragraph,
    PositionedBlock,
    SignatureBox,
    Table,
    TextRole,
)
from .base import BaseGenerator
from .styles import Colors, Fonts, Layout, color_for, is_bold, line_height

log = logging.getLogger(__name__)


def _rgb(t: tuple[int, int, int]) -> colors.Color:
    return colors.Color(t[0] / 255, t[1] / 255, t[2] / 255)


class PdfGenerator(BaseGenerator):
    """Paints positioned blocks on a ReportLab canvas (A4 by default)."""

    format = OutputFormat.PDF

    # ------------------------------------------------------------------
    # Builder
    # ------------------------------------------------------------------

    def _build(self, positioned: Sequence[PositionedBlock], metadata: DocumentMetadata) -> bytes:
        buffer = io.BytesIO()
        c = rl_canvas.Canvas(
            buffer,
            pagesize=(self.geometry.width, self.geometry.height),
            invariant=1,
        )
        c.setTitle(metadata.title)
        c.setAuthor(metadata.author)
        c.setSubject(metadata.subject)
        c.setCreator("rtldocs")

        by_page = {page: list(items) for page, items in groupby(positioned, key=lambda p: p.page)}
        total = max(by_page, default=1)
        for page in range(1, total + 1):
            for item in by_page.get(page, []):
                self._draw_block(c, item, metadata.direction)
            self._draw_footer(c, metadata, page, total)
            c.showPage()

        c.save()
        return buffer.getvalue()

    # ------------------------------------------------------------------
    # Coordinates & text
    # ------------------------------------------------------------------

    def _pdf_y(self, y: float) -> float:
        """Convert a top-down layout y into ReportLab's bottom-up y."""
        return self.geometry.height - y

    def _font(self, bold: bool) -> str:
        return (self.fonts.bold() if bold else self.fonts.regular()).name

    def _draw_line(
        self,
        c: rl_canvas.Canvas,
        line: Line,
        left: float,
        width: float,
        baseline: float,
        size: float,
        bold: bool,
        alignment: Alignment,
    ) -> None:
        font = self._font(bold)
        c.setFont(font, size)
        if alignment is Alignment.CENTER:
            x = left + (width - line.width) / 2
        elif alignment is Alignment.RIGHT:
            x = left + width - line.width
        else:
            x = left
        for run in line.runs:
            c.drawString(x, self._pdf_y(baseline), run.text)
            x += pdfmetrics.stringWidth(run.text, font, size)

    @staticmethod
    def _baseline(top: float, index: int, size: float) -> float:
        lh = line_height(size)
        return top + index * lh + (lh + size) / 2 - size * 0.15

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def _draw_block(self, c: rl_canvas.Canvas, item: PositionedBlock, direction: Direction) -> None:
        block = item.block
        if isinstance(block, Paragraph):
            self._draw_paragraph(c, item, block)
        elif isinstance(block, BulletList):
            self._draw_bullets(c, item, block)
        elif isinstance(block, (KeyValueBox, Table)):
            self._draw_rows(c, item, direction)
        elif isinstance(block, SignatureBox):
            self._draw_signature(c, item)
        else:
            log.debug("No PDF painter for %s; leaving its area blank", type(block).__name__)

    def _draw_paragraph(self, c: rl_canvas.Canvas, item: PositionedBlock, block: Paragraph) -> None:
        c.setFillColor(_rgb(color_for(block.role)))
        bold = is_bold(block.role)
        for i, line in enumerate(item.lines):
            self._draw_line(
                c, line, item.x, item.width, self._baseline(item.y, i, item.font_size),
                item.font_size, bold, block.alignment,
            )
        if block.role is TextRole.TITLE and not item.continued:
            c.setStrokeColor(_rgb(Colors.BORDER))
            c.setLineWidth(Layout.BORDER_WIDTH_PT)
            rule_y = self._pdf_y(item.y + item.height)
            c.line(item.x, rule_y, item.x + item.width, rule_y)

    def _draw_bullets(self, c: rl_canvas.Canvas, item: PositionedBlock, block: BulletList) -> None:
        c.setFillColor(_rgb(Colors.TEXT))
        size = item.font_size
        for i, line in enumerate(item.lines):
            baseline = self._baseline(item.y, i, size)
            if block.alignment is Alignment.LEFT:
                left, marker_x = item.x + line.indent, item.x + line.indent / 2
            else:
                left, marker_x = item.x, item.x + item.width - line.indent / 2
            self._draw_line(
                c, line, left, item.width - line.indent, baseline, size, False, block.alignment,
            )
            if line.bullet:
                c.setFillColor(_rgb(Colors.HEADING))
                c.circle(marker_x, self._pdf_y(baseline - size * 0.3), size * 0.15, stroke=0, fill=1)
                c.setFillColor(_rgb(Colors.TEXT))

    def _draw_rows(self, c: rl_canvas.Canvas, item: PositionedBlock, direction: Direction) -> None:
        pad = Layout.CELL_PADDING_PT
        size = item.font_size
        align = Alignment.RIGHT if direction is Direction.RTL else Alignment.LEFT
        is_box = isinstance(item.block, KeyValueBox)
        c.setLineWidth(Layout.BORDER_WIDTH_PT)
        c.setStrokeColor(_rgb(Colors.BORDER))
        for r, row in enumerate(item.rows):
            top = item.y + row.y
            for k, cell in enumerate(row.cells):
                left = item.x + cell.x
                if row.header:
                    fill = Colors.TABLE_HEADER_BG
                elif is_box and k == 0:
                    fill = Colors.BOX_BG
                elif r % 2 == 0:
                    fill = Colors.TABLE_ALT_ROW
                else:
                    fill = Colors.WHITE
                c.setFillColor(_rgb(fill))
                c.rect(left, self._pdf_y(top + row.height), cell.width, row.height, stroke=1, fill=1)
                c.setFillColor(_rgb(Colors.HEADING if row.header else Colors.TEXT))
                bold = row.header or (is_box and k == 0)
                for i, line in enumerate(cell.lines):
                    self._draw_line(
                        c, line, left + pad, cell.width - 2 * pad,
                        self._baseline(top + pad, i, size), size, bold,
                        Alignment.CENTER if row.header else align,
                    )

    def _draw_signature(self, c: rl_canvas.Canvas, item: PositionedBlock) -> None:
        pad = Layout.CELL_PADDING_PT
        size = item.font_size
        c.setLineWidth(Layout.BORDER_WIDTH_PT)
        c.setStrokeColor(_rgb(Colors.BORDER))
        c.rect(item.x, self._pdf_y(item.y + item.height), item.width, item.height, stroke=1, fill=0)
        c.setFillColor(_rgb(Colors.TEXT))
        for i, line in enumerate(item.lines):
            self._draw_line(
                c, line, item.x + pad, item.width - 2 * pad,
                self._baseline(item.y + pad, i, size), size,
                line.bold, Alignment.CENTER,
            )
        # Line to sign on, near the bottom of the box
        sign_y = self._pdf_y(item.y + item.height - 2 * pad - size)
        c.line(item.x + 3 * pad, sign_y, item.x + item.width - 3 * pad, sign_y)

    # ------------------------------------------------------------------
    # Page decorations
    # ------------------------------------------------------------------

    def _draw_footer(self, c: rl_canvas.Canvas, metadata: DocumentMetadata, page: int, total: int) -> None:
        size = Fonts.CAPTION_SIZE_PT
        width = self.geometry.width
        base_y = Layout.FOOTER_OFFSET_PT
        c.saveState()
        c.setFillColor(_rgb(Colors.MUTED))
        font = self._font(False)
        c.setFont(font, size)
        if metadata.footer_text:
            text = self.shaper.visual_text(metadata.footer_text)
            c.drawCentredString(width / 2, base_y + size * 1.5, text)
        if metadata.page_numbers:
            label = f"{page} / {total}"
            if metadata.direction is Direction.RTL:
                label = to_persian_digits(label) if self.fonts.supports_persian else label
            c.drawCentredString(width / 2, base_y, label)
        c.restoreState()
