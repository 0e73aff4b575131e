"""Document templates: model, generator registry and built-in templates."""

from __future__ import annotations

from ..core.config import CompanySettings
from ..core.errors import TemplateError
from ..core.models import DocumentKind
from .contract import contract_template
from .estimate import estimate_template
from .model import (
    Article,
    FooterConfig,
    HeaderConfig,
    Labels,
    PartyConfig,
    RenderAs,
    SignaturesConfig,
    TemplateConfig,
    load_template,
    metadata_for,
    render,
)
from .payments import PaymentSchedule, split_installments
from .registry import content_generator, get_generator, registered_generators

_BUILTIN = {
    DocumentKind.CONTRACT: contract_template,
    DocumentKind.ESTIMATE: estimate_template,
}


def get_template(kind: DocumentKind | str, company: CompanySettings | None = None) -> TemplateConfig:
    """Built-in template for *kind*, merged with *company* settings."""
    try:
        factory = _BUILTIN[DocumentKind(kind)]
    except ValueError:
        raise TemplateError(f"No built-in template for {kind!r}") from None
    return factory().with_company(company)


__all__ = [
    "Article",
    "FooterConfig",
    "HeaderConfig",
    "Labels",
    "PartyConfig",
    "PaymentSchedule",
    "RenderAs",
    "SignaturesConfig",
    "TemplateConfig",
    "content_generator",
    "contract_template",
    "estimate_template",
    "get_generator",
    "get_template",
    "load_template",
    "metadata_for",
    "registered_generators",
    "render",
    "split_installments",
]
