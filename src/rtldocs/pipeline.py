"""Orchestration pipeline: record → blocks → layout → emitter."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Protocol, Sequence

from .core.config import DEFAULT_CONFIG, EngineConfig
from .core.errors import MissingRecordError
from .core.fonts import FontCache
from .core.models import (
    ContentBlock,
    ContractRecord,
    Direction,
    DocumentKind,
    EstimateRecord,
    GenerationResult,
    OutputFormat,
    PositionedBlock,
    Record,
)
from .core.shaping import Shaper
from .generators.base import BaseGenerator
from .generators.pdf_generator import PdfGenerator
from .generators.word_generator import WordGenerator
from .layout.engine import LayoutEngine
from .layout.metrics import FontMeasurer, TextMeasurer
from .templates import TemplateConfig, get_template, metadata_for, render

log = logging.getLogger(__name__)

# Map format enum → generator class
_GENERATORS: dict[OutputFormat, type[BaseGenerator]] = {
    OutputFormat.PDF: PdfGenerator,
    OutputFormat.WORD: WordGenerator,
}


# ---------------------------------------------------------------------------
# Record lookup
# ---------------------------------------------------------------------------

class RecordStore(Protocol):
    """Read-only access to the records documents are generated from."""

    def get_contract(self, record_id: int) -> ContractRecord:
        ...

    def get_estimate(self, record_id: int) -> EstimateRecord:
        ...


class JsonRecordStore:
    """Records loaded from a JSON file shaped like::

        {"contracts": [{"id": 1, ...}], "estimates": [{"id": 7, "items": [...]}]}
    """

    def __init__(self, data: dict[str, Any]) -> None:
        self._contracts = {int(c["id"]): c for c in data.get("contracts", [])}
        self._estimates = {int(e["id"]): e for e in data.get("estimates", [])}

    @classmethod
    def from_file(cls, path: str | Path) -> "JsonRecordStore":
        with open(path, encoding="utf-8") as fh:
            return cls(json.load(fh))

    def get_contract(self, record_id: int) -> ContractRecord:
        try:
            return ContractRecord.model_validate(self._contracts[int(record_id)])
        except KeyError:
            raise MissingRecordError(DocumentKind.CONTRACT.value, record_id) from None

    def get_estimate(self, record_id: int) -> EstimateRecord:
        try:
            return EstimateRecord.model_validate(self._estimates[int(record_id)])
        except KeyError:
            raise MissingRecordError(DocumentKind.ESTIMATE.value, record_id) from None

    def get(self, kind: DocumentKind, record_id: int) -> Record:
        if kind is DocumentKind.CONTRACT:
            return self.get_contract(record_id)
        return self.get_estimate(record_id)


def kind_of(record: Record) -> DocumentKind:
    return DocumentKind.CONTRACT if isinstance(record, ContractRecord) else DocumentKind.ESTIMATE


def document_name(record: Record) -> str:
    """Base filename (no extension) for *record*."""
    if isinstance(record, ContractRecord):
        return f"contract-{record.contract_number or record.id}"
    return f"estimate-{record.estimate_number or record.id}"


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

class DocumentPipeline:
    """End-to-end record → document pipeline.

    Usage::

        pipeline = DocumentPipeline(load_config("rtldocs.yaml"))
        result = pipeline.generate(record, OutputFormat.PDF)
        Path(result.filename).write_bytes(result.data)

    The :class:`FontCache` is the only state that outlives a call; pass a
    shared one to reuse resolved fonts across pipelines.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        fonts: FontCache | None = None,
        *,
        measurer: TextMeasurer | None = None,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.fonts = fonts or FontCache(self.config.fonts or None, base_dir=self.config.font_dir)
        self._measurer = measurer

    # -- stages ----------------------------------------------------------

    def template_for(self, kind: DocumentKind, template: TemplateConfig | None = None) -> TemplateConfig:
        if template is None:
            return get_template(kind, self.config.company)
        return template.with_company(self.config.company)

    def shaper(self) -> Shaper:
        return Shaper(enabled=self.fonts.supports_persian)

    def blocks(
        self,
        record: Record,
        template: TemplateConfig | None = None,
        *,
        generated_at: date | datetime | str | None = None,
    ) -> list[ContentBlock]:
        return render(self.template_for(kind_of(record), template), record, generated_at=generated_at)

    def layout(
        self,
        blocks: Sequence[object],
        direction: Direction = Direction.RTL,
        shaper: Shaper | None = None,
    ) -> list[PositionedBlock]:
        engine = LayoutEngine(
            self.config.geometry,
            measurer=self._measurer or FontMeasurer(self.fonts),
            shaper=shaper or self.shaper(),
            font_size=self.config.font_size,
            block_spacing=self.config.block_spacing,
            direction=direction,
        )
        return engine.layout(blocks)

    def emitter(self, fmt: OutputFormat, shaper: Shaper | None = None) -> BaseGenerator:
        cls = _GENERATORS[OutputFormat(fmt)]
        return cls(self.fonts, geometry=self.config.geometry, shaper=shaper or self.shaper())

    # -- entry points ----------------------------------------------------

    def generate(
        self,
        record: Record,
        fmt: OutputFormat = OutputFormat.PDF,
        *,
        template: TemplateConfig | None = None,
        generated_at: date | datetime | str | None = None,
    ) -> GenerationResult:
        """Generate one document for *record* in *fmt*."""
        fmt = OutputFormat(fmt)
        resolved = self.template_for(kind_of(record), template)
        shaper = self.shaper()

        blocks = render(resolved, record, generated_at=generated_at)
        positioned = self.layout(blocks, resolved.direction, shaper)
        metadata = metadata_for(resolved, record, generated_at=generated_at)

        result = self.emitter(fmt, shaper).generate(positioned, metadata, name=document_name(record))
        log.info(
            "Generated %s (%d blocks, %d pages, %d bytes)",
            result.filename, len(blocks), result.page_count, result.size,
        )
        return result

    def generate_from_store(
        self,
        store: RecordStore,
        kind: DocumentKind,
        record_id: int,
        fmt: OutputFormat = OutputFormat.PDF,
        **kwargs: Any,
    ) -> GenerationResult:
        """Look up a record, then generate. A missing record fails before any work."""
        kind = DocumentKind(kind)
        if kind is DocumentKind.CONTRACT:
            record: Record = store.get_contract(record_id)
        else:
            record = store.get_estimate(record_id)
        return self.generate(record, fmt, **kwargs)
