"""Tests for the PDF and Word emitters."""

from __future__ import annotations

import io
import logging
from collections import Counter

import pdfplumber
import pytest
from docx import Document as DocxDocument
from docx.oxml.ns import qn

from rtldocs.core.errors import EmitterError
from rtldocs.core.fonts import FontCache
from rtldocs.core.models import (
    ContractRecord,
    Direction,
    DocumentKind,
    DocumentMetadata,
    OutputFormat,
    Paragraph,
    SignatureBox,
)
from rtldocs.generators.base import BaseGenerator
from rtldocs.generators.pdf_generator import PdfGenerator
from rtldocs.generators.word_generator import WordGenerator
from rtldocs.layout import LayoutEngine, PageGeometry
from rtldocs.pipeline import kind_of
from rtldocs.templates import (
    Article,
    FooterConfig,
    Labels,
    PartyConfig,
    RenderAs,
    SignaturesConfig,
    TemplateConfig,
    content_generator,
    metadata_for,
    render,
)


@content_generator("test.latin_info")
def _latin_info(record, params):
    return [("Number", "C-9"), ("Client", record.account_name)]


@content_generator("test.latin_rows")
def _latin_rows(record, params):
    return [["Widget", "2"], ["Gadget", "5"]]


def _latin_template() -> TemplateConfig:
    return TemplateConfig(
        kind=DocumentKind.CONTRACT,
        direction=Direction.LTR,
        title="Service Agreement",
        info="test.latin_info",
        articles=[
            Article(title="Scope", text="Design and build the storefront website."),
            Article(
                title="Payment",
                text=["Deposit on signing", "Balance on delivery"],
                render_as=RenderAs.BULLETS,
            ),
            Article(
                title="Items",
                generator="test.latin_rows",
                render_as=RenderAs.TABLE,
                columns=["Item", "Qty"],
            ),
        ],
        signatures=SignaturesConfig(
            contractor=PartyConfig(label="Contractor", name="Jane Roe"),
            client=PartyConfig(label="Client", resolver="contract.client_name"),
        ),
        footer=FooterConfig(show_contact=False, page_numbers=False),
        labels=Labels(phone="Phone", address="Address", issued="Issued"),
    )


def _pdf_text(data: bytes) -> list[str]:
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        return [page.extract_text() or "" for page in pdf.pages]


def _docx(data: bytes):
    return DocxDocument(io.BytesIO(data))


def _docx_tokens(doc) -> list[str]:
    return " ".join(t.text or "" for t in doc.element.body.iter(qn("w:t"))).split()


class _RecordingPdf(PdfGenerator):
    """Keeps the logical text and weight of every line it paints."""

    def _build(self, positioned, metadata):
        self.painted = []
        return super()._build(positioned, metadata)

    def _draw_line(self, c, line, left, width, baseline, size, bold, alignment):
        self.painted.append((line.text, bold))
        super()._draw_line(c, line, left, width, baseline, size, bold, alignment)


def _ten_line_paragraph():
    text = "\n".join(f"line{i}" for i in range(10))
    engine = LayoutEngine(
        PageGeometry(height=200, top_margin=50, bottom_margin=50),
        font_size=10,
        block_spacing=0,
        direction=Direction.LTR,
    )
    return text, engine.layout([Paragraph(text=text)])


# ---------------------------------------------------------------------------
# PDF
# ---------------------------------------------------------------------------

class TestPdfGenerator:
    def test_contract_with_fallback_font(self, pipeline, contract_record):
        result = pipeline.generate(contract_record, OutputFormat.PDF)
        assert result.data.startswith(b"%PDF")
        assert result.content_type == "application/pdf"
        assert result.filename == "contract-C-1403-001.pdf"
        assert len(_pdf_text(result.data)) == result.page_count

    def test_output_is_reproducible(self, pipeline, contract_record):
        first = pipeline.generate(contract_record, OutputFormat.PDF)
        second = pipeline.generate(contract_record, OutputFormat.PDF)
        assert first.data == second.data

    def test_page_numbers_in_footer(self, pipeline, contract_record):
        pages = _pdf_text(pipeline.generate(contract_record, OutputFormat.PDF).data)
        total = len(pages)
        assert f"{total} / {total}" in pages[-1]

    def test_paragraph_fragments_land_on_their_pages(self):
        _, positioned = _ten_line_paragraph()
        data = PdfGenerator(FontCache.empty(), geometry=PageGeometry(height=200)).emit(
            positioned, DocumentMetadata(direction=Direction.LTR, page_numbers=False)
        )
        pages = _pdf_text(data)
        assert len(pages) == 2
        assert "line0" in pages[0] and "line5" in pages[0]
        assert "line6" in pages[1] and "line9" in pages[1]

    def test_signature_label_is_painted_bold(self):
        engine = LayoutEngine(PageGeometry(), direction=Direction.LTR)
        positioned = engine.layout([SignatureBox(label="Client signature", name="Client")])
        pdf = _RecordingPdf(FontCache.empty())
        pdf.emit(positioned, DocumentMetadata(direction=Direction.LTR, page_numbers=False))
        assert pdf.painted == [("Client signature", True), ("Client", False)]


# ---------------------------------------------------------------------------
# Word
# ---------------------------------------------------------------------------

class TestWordGenerator:
    def test_rtl_markup(self, pipeline, contract_record):
        result = pipeline.generate(contract_record, OutputFormat.WORD)
        assert result.filename == "contract-C-1403-001.docx"
        xml = _docx(result.data).element.xml
        assert "<w:bidi/>" in xml
        assert "<w:rtl/>" in xml
        assert "<w:bidiVisual/>" in xml
        assert 'w:cs="Vazirmatn"' in xml
        assert "<w:szCs " in xml

    def test_ltr_document_has_no_rtl_markup(self, pipeline):
        result = pipeline.generate(
            ContractRecord(account_name="Globex"), OutputFormat.WORD, template=_latin_template()
        )
        xml = _docx(result.data).element.xml
        assert "<w:bidi/>" not in xml
        assert "<w:rtl/>" not in xml

    def test_metadata_and_footer(self, pipeline, contract_record):
        doc = _docx(pipeline.generate(contract_record, OutputFormat.WORD).data)
        assert doc.core_properties.title == "قرارداد طراحی سایت"
        footer = doc.sections[0].footer
        assert "این قرارداد به صورت خودکار تولید شده است." in footer.paragraphs[0].text
        assert 'w:instr="PAGE"' in footer._element.xml

    def test_signatures_share_one_row(self, pipeline, contract_record):
        doc = _docx(pipeline.generate(contract_record, OutputFormat.WORD).data)
        row = doc.tables[-1].rows[0]
        assert len(row.cells) == 2
        assert row.cells[0].paragraphs[0].text == "امضاء مجری"
        assert row.cells[1].paragraphs[1].text == "شرکت نمونه"

    def test_split_paragraph_is_written_once(self):
        text, positioned = _ten_line_paragraph()
        assert len(positioned) == 2
        data = WordGenerator(FontCache.empty()).emit(
            positioned, DocumentMetadata(direction=Direction.LTR, page_numbers=False)
        )
        paragraphs = [p for p in _docx(data).paragraphs if "line0" in p.text]
        assert len(paragraphs) == 1
        assert "line9" in paragraphs[0].text

    def test_items_table(self, pipeline, estimate_record):
        doc = _docx(pipeline.generate(estimate_record, OutputFormat.WORD).data)
        items = next(t for t in doc.tables if t.rows[0].cells[0].text == "نام آیتم")
        assert len(items.rows) == 3
        assert items.rows[1].cells[0].text == "هاست"


# ---------------------------------------------------------------------------
# Both emitters
# ---------------------------------------------------------------------------

class TestEmitterParity:
    def test_same_words_in_both_formats(self, pipeline):
        record = ContractRecord(account_name="Globex")
        template = _latin_template()
        pdf = pipeline.generate(record, OutputFormat.PDF, template=template)
        word = pipeline.generate(record, OutputFormat.WORD, template=template)

        pdf_tokens = " ".join(_pdf_text(pdf.data)).split()
        word_tokens = _docx_tokens(_docx(word.data))
        assert Counter(pdf_tokens) == Counter(word_tokens)

    def test_same_section_order(self, pipeline):
        record = ContractRecord(account_name="Globex")
        template = _latin_template()
        pdf_tokens = " ".join(
            _pdf_text(pipeline.generate(record, OutputFormat.PDF, template=template).data)
        ).split()
        word_tokens = _docx_tokens(
            _docx(pipeline.generate(record, OutputFormat.WORD, template=template).data)
        )
        for tokens in (pdf_tokens, word_tokens):
            order = [tokens.index(h) for h in ("Scope", "Payment", "Items")]
            assert order == sorted(order)

    @pytest.mark.parametrize("fixture", ["contract_record", "estimate_record"])
    def test_persian_documents_carry_the_same_words(self, pipeline, fixture, request):
        record = request.getfixturevalue(fixture)
        template = pipeline.template_for(kind_of(record))
        positioned = pipeline.layout(render(template, record), template.direction)
        metadata = metadata_for(template, record)

        pdf = _RecordingPdf(pipeline.fonts, geometry=pipeline.config.geometry, shaper=pipeline.shaper())
        assert pdf.emit(positioned, metadata).startswith(b"%PDF")
        word = pipeline.emitter(OutputFormat.WORD).emit(positioned, metadata)

        # PDF text of a Persian document is unreadable without a Persian font,
        # so compare the logical text each emitter writes, in stream order
        painted = " ".join(text for text, _ in pdf.painted).split()
        assert "شرکت" in painted
        assert painted == _docx_tokens(_docx(word))


# ---------------------------------------------------------------------------
# Failures & saving
# ---------------------------------------------------------------------------

class _BrokenPdf(PdfGenerator):
    def _build(self, positioned, metadata):
        raise RuntimeError("disk on fire")


class TestEmitterErrors:
    def test_writer_failure_is_wrapped(self, caplog):
        with caplog.at_level(logging.ERROR, logger="rtldocs.generators.base"):
            with pytest.raises(EmitterError) as excinfo:
                _BrokenPdf(FontCache.empty()).emit([], DocumentMetadata())

        assert excinfo.value.format == "pdf"
        assert isinstance(excinfo.value.cause, RuntimeError)
        assert any("emitter failed" in r.getMessage() for r in caplog.records)

    def test_save(self, pipeline, estimate_record, tmp_path):
        result = pipeline.generate(estimate_record, OutputFormat.PDF)
        path = BaseGenerator.save(result, tmp_path / "out")
        assert path.read_bytes() == result.data
        assert path.name == "estimate-E-7.pdf"

    def test_safe_filename(self):
        assert BaseGenerator._safe_filename("contract-C/1", "pdf") == "contract-C_1.pdf"
        assert BaseGenerator._safe_filename("", "docx") == "document.docx"
