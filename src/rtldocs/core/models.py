"""Pydantic models for business records and the layout block stream.

Records are the read-only input handed over by the CRUD layer. Content
blocks form the intermediate representation between the template model
and the layout engine; every emitter consumes the positioned form of the
same block stream.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class OutputFormat(str, Enum):
    """Supported output formats."""
    PDF = "pdf"
    WORD = "word"


class DocumentKind(str, Enum):
    """Kinds of business documents the engine can render."""
    CONTRACT = "contract"
    ESTIMATE = "estimate"


class Direction(str, Enum):
    """Base text direction."""
    LTR = "ltr"
    RTL = "rtl"


class Alignment(str, Enum):
    """Horizontal alignment of a text block."""
    RIGHT = "right"
    LEFT = "left"
    CENTER = "center"


class TextRole(str, Enum):
    """Typographic role of a paragraph; drives font size and weight."""
    TITLE = "title"
    SUBTITLE = "subtitle"
    HEADING = "heading"
    BODY = "body"
    CAPTION = "caption"


class BlockType(str, Enum):
    """Types of layout blocks."""
    PARAGRAPH = "paragraph"
    BULLET_LIST = "bullet_list"
    KEY_VALUE_BOX = "key_value_box"
    TABLE = "table"
    SIGNATURE_BOX = "signature_box"


DateLike = Union[date, datetime, str, None]


# ---------------------------------------------------------------------------
# Business records
# ---------------------------------------------------------------------------

class ContractRecord(BaseModel):
    """Snapshot of one contract, with joined display names resolved."""

    model_config = ConfigDict(frozen=True)

    id: int = 0
    contract_number: str = ""
    title: str = ""
    description: Optional[str] = None
    account_name: Optional[str] = None
    contract_type: Optional[str] = None
    start_date: DateLike = None
    end_date: DateLike = None
    value: Optional[float] = None
    currency: str = "IRR"
    status: str = ""
    auto_renew: bool = False
    renewal_notice_days: Optional[int] = None
    signed_date: DateLike = None
    signed_by: Optional[str] = None
    created_at: DateLike = None

    # Website / service details
    domain_name: Optional[str] = None
    hosting_type: Optional[str] = None
    hosting_duration: Optional[int] = None
    ssl_certificate: Optional[bool] = None
    support_duration: Optional[int] = None
    seo_package: Optional[str] = None
    website_pages: Optional[int] = None
    website_languages: Optional[str] = None
    payment_terms: Optional[str] = None
    delivery_days: Optional[int] = None
    warranty_months: Optional[int] = None

    # Template data
    client_national_id: Optional[str] = None
    contractor_name: Optional[str] = None
    project_title: Optional[str] = None
    package_name: Optional[str] = None
    first_payment: Optional[float] = None
    first_payment_ratio: float = Field(default=0.33, ge=0, le=1)
    remaining_payments: Optional[list[float]] = None
    installment_count: int = Field(default=2, ge=1)
    execution_days: Optional[int] = None
    validity_months: Optional[int] = None
    custom_items: list[str] = Field(default_factory=list)


class EstimateItem(BaseModel):
    """A single line of an estimate."""

    model_config = ConfigDict(frozen=True)

    item_name: str = ""
    quantity: float = 1
    unit_price: float = 0
    total_amount: float = 0


class EstimateRecord(BaseModel):
    """Snapshot of one estimate (pre-invoice) with its line items."""

    model_config = ConfigDict(frozen=True)

    id: int = 0
    estimate_number: str = ""
    account_name: Optional[str] = None
    amount: float = 0
    currency: str = "IRR"
    status: str = ""
    valid_until: DateLike = None
    notes: Optional[str] = None
    contract_type: Optional[str] = None
    domain_name: Optional[str] = None
    hosting_type: Optional[str] = None
    ssl_included: bool = False
    created_at: DateLike = None
    items: list[EstimateItem] = Field(default_factory=list)


Record = Union[ContractRecord, EstimateRecord]


# ---------------------------------------------------------------------------
# Content blocks
# ---------------------------------------------------------------------------

class _Block(BaseModel):
    model_config = ConfigDict(frozen=True)


class Paragraph(_Block):
    """A plain paragraph, wrapped and paginated line by line."""
    type: Literal[BlockType.PARAGRAPH] = BlockType.PARAGRAPH
    text: str
    alignment: Alignment = Alignment.RIGHT
    role: TextRole = TextRole.BODY


class BulletList(_Block):
    """A bulleted list (obligations, subject items). Never split."""
    type: Literal[BlockType.BULLET_LIST] = BlockType.BULLET_LIST
    items: list[str] = Field(default_factory=list)
    alignment: Alignment = Alignment.RIGHT


class KeyValueBox(_Block):
    """A bordered box of label/value rows."""
    type: Literal[BlockType.KEY_VALUE_BOX] = BlockType.KEY_VALUE_BOX
    pairs: list[tuple[str, str]] = Field(default_factory=list)


class Table(_Block):
    """A simple table with one header row and fixed-width columns."""
    type: Literal[BlockType.TABLE] = BlockType.TABLE
    columns: list[str]
    rows: list[list[str]] = Field(default_factory=list)
    column_weights: Optional[list[float]] = None


class SignatureBox(_Block):
    """A bordered signature area: party label and printed name."""
    type: Literal[BlockType.SIGNATURE_BOX] = BlockType.SIGNATURE_BOX
    label: str
    name: str = ""


ContentBlock = Annotated[
    Union[Paragraph, BulletList, KeyValueBox, Table, SignatureBox],
    Field(discriminator="type"),
]


class BlockStream(BaseModel):
    """Serializable wrapper around a rendered block sequence."""
    blocks: list[ContentBlock] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Shaping & layout output
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ShapedRun:
    """A same-direction span of display glyphs, in visual position."""
    text: str
    direction: Direction
    visual_index: int = 0


@dataclass(frozen=True)
class Line:
    """One wrapped line: logical text plus its shaped runs."""
    text: str
    runs: tuple[ShapedRun, ...]
    width: float
    bullet: bool = False
    indent: float = 0.0
    bold: bool = False

    @property
    def visual(self) -> str:
        return "".join(r.text for r in self.runs)


@dataclass(frozen=True)
class Cell:
    """A laid-out table / box cell, in physical (left-to-right) position."""
    x: float
    width: float
    lines: tuple[Line, ...]
    header: bool = False


@dataclass(frozen=True)
class Row:
    y: float
    height: float
    cells: tuple[Cell, ...]
    header: bool = False


@dataclass(frozen=True)
class PositionedBlock:
    """A content block placed at absolute page coordinates.

    ``y`` is measured downward from the top edge of the page.
    """
    block: object
    page: int
    x: float
    y: float
    width: float
    height: float
    lines: tuple[Line, ...] = ()
    rows: tuple[Row, ...] = ()
    font_size: float = 11.0
    fragment: int = 0
    continued: bool = False
    overflow: bool = False


# ---------------------------------------------------------------------------
# Emitter I/O
# ---------------------------------------------------------------------------

class DocumentMetadata(BaseModel):
    """Document-level data shared by every emitter."""
    title: str = ""
    author: str = ""
    subject: str = ""
    footer_text: str = ""
    page_numbers: bool = True
    direction: Direction = Direction.RTL
    generated_at: str = ""


CONTENT_TYPES = {
    OutputFormat.PDF: "application/pdf",
    OutputFormat.WORD: (
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    ),
}

EXTENSIONS = {
    OutputFormat.PDF: "pdf",
    OutputFormat.WORD: "docx",
}


class GenerationResult(BaseModel):
    """Result of a single generation request."""
    format: OutputFormat
    filename: str
    content_type: str
    data: bytes
    page_count: int = 1

    @property
    def size(self) -> int:
        return len(self.data)

