"""Template model: a serializable description of a business document.

A :class:`TemplateConfig` is plain data. Dynamic content is referenced by
generator *name* (see :mod:`rtldocs.templates.registry`), so a template
round-trips through JSON or YAML and can be shipped as a config file::

    # contract.yaml
    kind: contract
    direction: rtl
    title: "قرارداد طراحی سایت"
    info: contract.info
    articles:
      - title: "ماده ۱ - طرفین قرارداد"
        generator: contract.parties
      - title: "ماده ۷ - حل اختلاف"
        text: "..."

Static text may use ``{{variable}}`` placeholders that are filled from
:attr:`TemplateConfig.variables`.

:func:`render` turns a template plus a record into the ordered content
block stream consumed by the layout engine. It is deterministic: the same
template and record always produce an identical stream.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, ValidationError, model_validator

from ..core.config import CompanySettings, read_structured_file
from ..core.errors import TemplateError
from ..core.localization import to_jalali_datetime
from ..core.models import (
    Alignment,
    BulletList,
    ContentBlock,
    Direction,
    DocumentKind,
    DocumentMetadata,
    KeyValueBox,
    Paragraph,
    Record,
    SignatureBox,
    Table,
    TextRole,
)
from .registry import get_generator

log = logging.getLogger(__name__)

_VAR_PATTERN = re.compile(r"\{\{\s*(\w+)\s*\}\}")


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------

class RenderAs(str, Enum):
    """How an article's content is turned into blocks."""
    PARAGRAPH = "paragraph"
    BULLETS = "bullets"
    KEY_VALUES = "key_values"
    TABLE = "table"


class Article(BaseModel):
    """One numbered section: a title plus static or generated content."""

    title: str
    text: Union[str, list[str], None] = None
    generator: Optional[str] = None
    params: dict[str, Any] = Field(default_factory=dict)
    render_as: RenderAs = RenderAs.PARAGRAPH
    optional: bool = False
    columns: list[str] = Field(default_factory=list)
    column_weights: Optional[list[float]] = None

    @model_validator(mode="after")
    def _one_source(self) -> "Article":
        if (self.text is None) == (self.generator is None):
            raise ValueError(
                f"Article {self.title!r} needs exactly one of 'text' or 'generator'"
            )
        if self.render_as is RenderAs.TABLE and not self.columns:
            raise ValueError(f"Table article {self.title!r} needs 'columns'")
        return self


class HeaderConfig(BaseModel):
    company_name: str = ""
    phone: str = ""
    address: str = ""


class PartyConfig(BaseModel):
    """A signature party: fixed ``name`` or a generator resolving it."""
    label: str
    name: str = ""
    resolver: Optional[str] = None


class SignaturesConfig(BaseModel):
    contractor: PartyConfig
    client: PartyConfig


class FooterConfig(BaseModel):
    note: str = ""
    show_contact: bool = True
    page_numbers: bool = True


class Labels(BaseModel):
    """Fixed captions the renderer writes around template content."""
    phone: str = "تلفن"
    address: str = "آدرس"
    issued: str = "تاریخ صدور"


class TemplateConfig(BaseModel):
    """A complete document template."""

    kind: DocumentKind
    direction: Direction = Direction.RTL
    header: HeaderConfig = Field(default_factory=HeaderConfig)
    title: str = ""
    subtitle: Optional[str] = None
    info: Optional[str] = None
    info_params: dict[str, Any] = Field(default_factory=dict)
    articles: list[Article] = Field(default_factory=list)
    signatures: Optional[SignaturesConfig] = None
    footer: FooterConfig = Field(default_factory=FooterConfig)
    labels: Labels = Field(default_factory=Labels)
    variables: dict[str, Any] = Field(default_factory=dict)

    @property
    def start_alignment(self) -> Alignment:
        return Alignment.RIGHT if self.direction is Direction.RTL else Alignment.LEFT

    def with_company(self, company: CompanySettings | None) -> "TemplateConfig":
        """Copy of this template with *company* settings merged in.

        Only non-empty settings override the template's own values.
        """
        if company is None or not company.has_values:
            return self
        header = self.header.model_copy(
            update={
                k: v
                for k, v in {
                    "company_name": company.name,
                    "phone": company.phone,
                    "address": company.address,
                }.items()
                if v
            }
        )
        update: dict[str, Any] = {"header": header}
        if company.contractor_name:
            update["variables"] = {**self.variables, "contractor_name": company.contractor_name}
            if self.signatures is not None:
                contractor = self.signatures.contractor.model_copy(
                    update={"name": company.contractor_name}
                )
                update["signatures"] = self.signatures.model_copy(
                    update={"contractor": contractor}
                )
        return self.model_copy(update=update)

    def footer_text(self) -> str:
        parts = [self.footer.note] if self.footer.note else []
        if self.footer.show_contact:
            if self.header.phone:
                parts.append(f"{self.labels.phone}: {self.header.phone}")
            if self.header.address:
                parts.append(self.header.address)
        return " | ".join(parts)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def substitute(text: str, variables: dict[str, Any]) -> str:
    """Replace ``{{name}}`` placeholders; unknown names are left as-is."""

    def _replace(match: re.Match[str]) -> str:
        key = match.group(1)
        return str(variables[key]) if key in variables else match.group(0)

    return _VAR_PATTERN.sub(_replace, text)


def _call(name: str, record: Record, params: dict[str, Any]) -> Any:
    generator = get_generator(name)
    return generator(record, params)


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    return [v for v in value if v not in (None, "")]


def _paragraphs(value: Any) -> list[str]:
    texts: list[str] = []
    for item in _as_list(value):
        texts.extend(p.strip() for p in str(item).split("\n\n") if p.strip())
    return texts


def _content_blocks(
    article: Article, value: Any, template: TemplateConfig
) -> list[ContentBlock]:
    align = template.start_alignment
    if article.render_as is RenderAs.PARAGRAPH:
        return [Paragraph(text=t, alignment=align) for t in _paragraphs(value)]
    if article.render_as is RenderAs.BULLETS:
        items = [str(i) for i in _as_list(value)]
        return [BulletList(items=items, alignment=align)] if items else []
    if article.render_as is RenderAs.KEY_VALUES:
        pairs = [(str(k), str(v)) for k, v in _as_list(value)]
        return [KeyValueBox(pairs=pairs)] if pairs else []
    rows = [[str(c) for c in row] for row in _as_list(value)]
    if not rows:
        return []
    return [Table(columns=article.columns, rows=rows, column_weights=article.column_weights)]


def _article_value(article: Article, record: Record, variables: dict[str, Any]) -> Any:
    if article.generator is not None:
        return _call(article.generator, record, {**variables, **article.params})
    if isinstance(article.text, list):
        return [substitute(t, variables) for t in article.text]
    return substitute(article.text or "", variables)


def render(
    template: TemplateConfig,
    record: Record,
    *,
    generated_at: date | datetime | str | None = None,
) -> list[ContentBlock]:
    """Render *record* through *template* into an ordered block stream.

    Raises :class:`TemplateError` when an article references a generator
    that is not registered.
    """
    align = template.start_alignment
    variables = dict(template.variables)
    blocks: list[ContentBlock] = []

    header = template.header
    if header.company_name:
        blocks.append(Paragraph(text=header.company_name, alignment=Alignment.CENTER, role=TextRole.SUBTITLE))
    contact = []
    if header.phone:
        contact.append(f"{template.labels.phone}: {header.phone}")
    if header.address:
        contact.append(f"{template.labels.address}: {header.address}")
    if contact:
        blocks.append(Paragraph(text=" | ".join(contact), alignment=Alignment.CENTER, role=TextRole.CAPTION))

    if template.title:
        blocks.append(Paragraph(text=substitute(template.title, variables), alignment=Alignment.CENTER, role=TextRole.TITLE))
    if template.subtitle:
        subtitle = _subtitle(template, record)
        if subtitle.strip():
            blocks.append(Paragraph(text=subtitle, alignment=Alignment.CENTER, role=TextRole.SUBTITLE))

    if generated_at is not None:
        blocks.append(
            Paragraph(
                text=f"{template.labels.issued}: {to_jalali_datetime(generated_at)}",
                alignment=align,
                role=TextRole.CAPTION,
            )
        )

    if template.info:
        pairs = _as_list(_call(template.info, record, {**variables, **template.info_params}))
        if pairs:
            blocks.append(KeyValueBox(pairs=[(str(k), str(v)) for k, v in pairs]))

    for article in template.articles:
        content = _content_blocks(article, _article_value(article, record, variables), template)
        if not content and article.optional:
            log.debug("Skipping empty optional article %r", article.title)
            continue
        blocks.append(Paragraph(text=substitute(article.title, variables), alignment=align, role=TextRole.HEADING))
        blocks.extend(content)

    if template.signatures is not None:
        for party in (template.signatures.contractor, template.signatures.client):
            name = party.name
            if party.resolver:
                name = str(_call(party.resolver, record, variables) or name)
            blocks.append(SignatureBox(label=party.label, name=name))

    return blocks


def _record_variables(record: Record) -> dict[str, Any]:
    return {k: ("" if v is None else v) for k, v in record.model_dump(exclude={"items"}).items()}


def _subtitle(template: TemplateConfig, record: Record) -> str:
    return substitute(template.subtitle or "", {**template.variables, **_record_variables(record)})


def metadata_for(
    template: TemplateConfig,
    record: Record,
    *,
    generated_at: date | datetime | str | None = None,
) -> DocumentMetadata:
    """Document-level metadata matching :func:`render` for the same inputs."""
    subject = ""
    if template.subtitle:
        subject = _subtitle(template, record).strip()
    return DocumentMetadata(
        title=template.title,
        author=template.header.company_name,
        subject=subject,
        footer_text=template.footer_text(),
        page_numbers=template.footer.page_numbers,
        direction=template.direction,
        generated_at=to_jalali_datetime(generated_at) if generated_at is not None else "",
    )


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def load_template(path: str | Path) -> TemplateConfig:
    """Load a :class:`TemplateConfig` from a YAML or JSON file."""
    try:
        data = read_structured_file(path)
        return TemplateConfig.model_validate(data)
    except (ValidationError, ValueError, FileNotFoundError) as exc:
        raise TemplateError(f"Invalid template {path}: {exc}") from exc
