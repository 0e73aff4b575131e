"""Generate a Word (.docx) document from a positioned block stream.

Word re-flows text itself, so this emitter ignores coordinates and line
breaks and writes each block once, in stream order, from its logical
text. Right-to-left documents get explicit markup: ``w:bidi`` on every
paragraph, ``w:rtl`` plus complex-script font and size on every run, and
``w:bidiVisual`` on tables so the first column is the rightmost one.
"""

from __future__ import annotations

import io
import logging
from typing import Sequence

from docx import Document as DocxDocument
from docx.enum.table import WD_TABLE_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Pt, RGBColor

from ..core.models import (
    Alignment,
    BulletList,
    Direction,
    DocumentMetadata,
    KeyValueBox,
    OutputFormat,
    Paragraph,
    PositionedBlock,
    SignatureBox,
    Table,
    TextRole,
)
from .base import BaseGenerator
from .styles import Colors, Fonts, Layout, color_for, is_bold, size_for

log = logging.getLogger(__name__)

_ALIGN = {
    Alignment.LEFT: WD_ALIGN_PARAGRAPH.LEFT,
    Alignment.RIGHT: WD_ALIGN_PARAGRAPH.RIGHT,
    Alignment.CENTER: WD_ALIGN_PARAGRAPH.CENTER,
}

_SZCS_SUCCESSORS = (
    "w:highlight", "w:u", "w:effect", "w:bdr", "w:shd", "w:fitText",
    "w:vertAlign", "w:rtl", "w:cs", "w:em", "w:lang", "w:eastAsianLayout",
    "w:specVanish", "w:oMath",
)

_BIDI_VISUAL_SUCCESSORS = (
    "w:tblStyleRowBandSize", "w:tblStyleColBandSize", "w:tblW", "w:jc",
    "w:tblCellSpacing", "w:tblInd", "w:tblBorders", "w:shd", "w:tblLayout",
    "w:tblCellMar", "w:tblLook", "w:tblCaption", "w:tblDescription",
)


def _hex(rgb: tuple[int, int, int]) -> str:
    return "{:02X}{:02X}{:02X}".format(*rgb)


def _set_cell_shading(cell, color: tuple[int, int, int]) -> None:
    """Apply background shading to a table cell."""
    tc_pr = cell._element.get_or_add_tcPr()
    shading = OxmlElement("w:shd")
    shading.set(qn("w:fill"), _hex(color))
    shading.set(qn("w:val"), "clear")
    tc_pr.append(shading)


def _set_paragraph_bidi(paragraph) -> None:
    p_pr = paragraph._element.get_or_add_pPr()
    if p_pr.find(qn("w:bidi")) is None:
        p_pr.insert_element_before(
            OxmlElement("w:bidi"),
            "w:adjustRightInd", "w:snapToGrid", "w:spacing", "w:ind",
            "w:contextualSpacing", "w:mirrorIndents", "w:suppressOverlap", "w:jc",
        )


def _set_table_bidi(table) -> None:
    tbl_pr = table._tbl.tblPr
    tbl_pr.insert_element_before(OxmlElement("w:bidiVisual"), *_BIDI_VISUAL_SUCCESSORS)


def _add_page_field(paragraph) -> None:
    """Append a PAGE field so Word fills in the page number."""
    field = OxmlElement("w:fldSimple")
    field.set(qn("w:instr"), "PAGE")
    run = OxmlElement("w:r")
    text = OxmlElement("w:t")
    text.text = "1"
    run.append(text)
    field.append(run)
    paragraph._p.append(field)


class WordGenerator(BaseGenerator):
    """Writes positioned blocks as flowing python-docx paragraphs and tables."""

    format = OutputFormat.WORD

    # ------------------------------------------------------------------
    # Builder
    # ------------------------------------------------------------------

    def _build(self, positioned: Sequence[PositionedBlock], metadata: DocumentMetadata) -> bytes:
        self._rtl = metadata.direction is Direction.RTL
        docx = DocxDocument()

        # -- Page setup --
        g = self.geometry
        for section in docx.sections:
            section.page_width = Pt(g.width)
            section.page_height = Pt(g.height)
            section.top_margin = Pt(g.top_margin)
            section.bottom_margin = Pt(g.bottom_margin)
            section.left_margin = Pt(g.left_margin)
            section.right_margin = Pt(g.right_margin)

        # -- Default body style --
        style = docx.styles["Normal"]
        style.font.name = Fonts.BODY
        style.font.size = Pt(Fonts.BODY_SIZE_PT)
        style.font.color.rgb = RGBColor(*Colors.TEXT)
        style.element.get_or_add_rPr().get_or_add_rFonts().set(qn("w:cs"), Fonts.COMPLEX_SCRIPT)
        style.paragraph_format.space_after = Pt(Layout.BLOCK_SPACING_PT / 2)

        props = docx.core_properties
        props.title = metadata.title
        props.author = metadata.author
        props.subject = metadata.subject

        self._add_footer(docx, metadata)

        items = list(positioned)
        i = 0
        while i < len(items):
            item = items[i]
            if isinstance(item.block, SignatureBox):
                j = i
                while j < len(items) and isinstance(items[j].block, SignatureBox):
                    j += 1
                self._render_signatures(docx, [p.block for p in items[i:j]])
                i = j
                continue
            self._render_block(docx, item)
            i += 1

        buffer = io.BytesIO()
        docx.save(buffer)
        return buffer.getvalue()

    # ------------------------------------------------------------------
    # Paragraph / run helpers
    # ------------------------------------------------------------------

    def _start(self) -> Alignment:
        return Alignment.RIGHT if self._rtl else Alignment.LEFT

    def _prepare_paragraph(self, paragraph, alignment: Alignment | None = None) -> None:
        if self._rtl:
            _set_paragraph_bidi(paragraph)
        # Leaving jc unset keeps the paragraph at its start edge in both directions
        if alignment is not None and alignment is not self._start():
            paragraph.alignment = _ALIGN[alignment]

    def _add_run(self, paragraph, text: str, *, size: float, bold: bool = False,
                 color: tuple[int, int, int] = Colors.TEXT):
        run = paragraph.add_run(text)
        run.font.size = Pt(size)
        run.font.bold = bold
        run.font.name = Fonts.BODY
        run.font.color.rgb = RGBColor(*color)
        r_pr = run._element.get_or_add_rPr()
        r_pr.get_or_add_rFonts().set(qn("w:cs"), Fonts.COMPLEX_SCRIPT)
        if self._rtl:
            if bold:
                run.font.cs_bold = True
            sz_cs = OxmlElement("w:szCs")
            sz_cs.set(qn("w:val"), str(int(round(size * 2))))
            r_pr.insert_element_before(sz_cs, *_SZCS_SUCCESSORS)
            run.font.rtl = True
        return run

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def _render_block(self, docx: DocxDocument, item: PositionedBlock) -> None:
        block = item.block
        if isinstance(block, Paragraph):
            if item.fragment > 0:
                return
            self._render_paragraph(docx, block)
        elif isinstance(block, BulletList):
            self._render_bullets(docx, block)
        elif isinstance(block, KeyValueBox):
            self._render_table(docx, None, [list(p) for p in block.pairs], key_column=True)
        elif isinstance(block, Table):
            self._render_table(docx, block.columns, block.rows)
        else:
            log.debug("No Word writer for %s; skipping", type(block).__name__)

    def _render_paragraph(self, docx: DocxDocument, block: Paragraph) -> None:
        p = docx.add_paragraph()
        self._prepare_paragraph(p, block.alignment)
        if block.role in (TextRole.TITLE, TextRole.HEADING):
            p.paragraph_format.keep_with_next = True
            p.paragraph_format.space_before = Pt(Layout.BLOCK_SPACING_PT)
        self._add_run(
            p, block.text,
            size=size_for(block.role), bold=is_bold(block.role), color=color_for(block.role),
        )

    def _render_bullets(self, docx: DocxDocument, block: BulletList) -> None:
        for text in block.items:
            p = docx.add_paragraph(style="List Bullet")
            self._prepare_paragraph(p, block.alignment)
            p.paragraph_format.space_after = Pt(2)
            self._add_run(p, text, size=Fonts.BODY_SIZE_PT)

    def _render_table(
        self,
        docx: DocxDocument,
        columns: list[str] | None,
        rows: list[list[str]],
        *,
        key_column: bool = False,
    ) -> None:
        cols = len(columns) if columns else max((len(r) for r in rows), default=0)
        if cols == 0:
            return
        row_count = (1 if columns else 0) + len(rows)
        table = docx.add_table(rows=row_count, cols=cols)
        table.style = "Table Grid"
        table.alignment = WD_TABLE_ALIGNMENT.CENTER
        if self._rtl:
            _set_table_bidi(table)

        idx = 0
        if columns:
            for k, text in enumerate(columns):
                cell = table.rows[0].cells[k]
                _set_cell_shading(cell, Colors.TABLE_HEADER_BG)
                p = cell.paragraphs[0]
                self._prepare_paragraph(p, Alignment.CENTER)
                self._add_run(p, text, size=Fonts.TABLE_SIZE_PT, bold=True, color=Colors.HEADING)
            idx = 1

        for r, row in enumerate(rows):
            cells = table.rows[idx + r].cells
            for k in range(cols):
                text = row[k] if k < len(row) else ""
                cell = cells[k]
                bold = key_column and k == 0
                if bold:
                    _set_cell_shading(cell, Colors.BOX_BG)
                p = cell.paragraphs[0]
                self._prepare_paragraph(p)
                self._add_run(p, str(text), size=Fonts.TABLE_SIZE_PT, bold=bold)

        # Spacer so consecutive tables do not merge
        self._prepare_paragraph(docx.add_paragraph())

    def _render_signatures(self, docx: DocxDocument, boxes: list[SignatureBox]) -> None:
        table = docx.add_table(rows=1, cols=len(boxes))
        table.alignment = WD_TABLE_ALIGNMENT.CENTER
        if self._rtl:
            _set_table_bidi(table)
        for k, box in enumerate(boxes):
            cell = table.rows[0].cells[k]
            label = cell.paragraphs[0]
            self._prepare_paragraph(label, Alignment.CENTER)
            self._add_run(label, box.label, size=Fonts.BODY_SIZE_PT, bold=True)
            if box.name:
                name = cell.add_paragraph()
                self._prepare_paragraph(name, Alignment.CENTER)
                self._add_run(name, box.name, size=Fonts.BODY_SIZE_PT)

    # ------------------------------------------------------------------
    # Footer
    # ------------------------------------------------------------------

    def _add_footer(self, docx: DocxDocument, metadata: DocumentMetadata) -> None:
        if not (metadata.footer_text or metadata.page_numbers):
            return
        for section in docx.sections:
            footer = section.footer
            footer.is_linked_to_previous = False
            p = footer.paragraphs[0] if footer.paragraphs else footer.add_paragraph()
            self._prepare_paragraph(p, Alignment.CENTER)
            if metadata.footer_text:
                self._add_run(p, metadata.footer_text, size=Fonts.CAPTION_SIZE_PT, color=Colors.MUTED)
            if metadata.page_numbers:
                if metadata.footer_text:
                    p = footer.add_paragraph()
                    self._prepare_paragraph(p, Alignment.CENTER)
                _add_page_field(p)
