"""Built-in estimate (pre-invoice) template and its content generators."""

from __future__ import annotations

from typing import Any, Mapping

from ..core.localization import DATE_SENTINEL, format_currency, format_number, to_jalali
from ..core.models import DocumentKind, EstimateRecord
from .contract import (
    DEFAULT_ADDRESS,
    DEFAULT_COMPANY_NAME,
    DEFAULT_PHONE,
    contract_type_label,
)
from .model import Article, FooterConfig, HeaderConfig, RenderAs, TemplateConfig
from .registry import content_generator

ITEM_COLUMNS = ["نام آیتم", "تعداد", "قیمت واحد", "جمع"]
ITEM_COLUMN_WEIGHTS = [200, 60, 80, 80]


@content_generator("estimate.info")
def estimate_info(record: EstimateRecord, params: Mapping[str, Any]) -> list[tuple[str, str]]:
    pairs = [
        ("شماره", record.estimate_number or DATE_SENTINEL),
        ("تاریخ", to_jalali(record.created_at)),
    ]
    if record.valid_until:
        pairs.append(("اعتبار تا", to_jalali(record.valid_until)))
    pairs.append(("مشتری", record.account_name or DATE_SENTINEL))
    return pairs


@content_generator("estimate.details")
def estimate_details(record: EstimateRecord, params: Mapping[str, Any]) -> list[tuple[str, str]]:
    # Mirrors the printed estimate: hosting and SSL only appear next to a type or domain.
    if not (record.contract_type or record.domain_name):
        return []
    pairs = []
    if record.contract_type:
        pairs.append(("نوع قرارداد", contract_type_label(record.contract_type)))
    if record.domain_name:
        pairs.append(("نام دامنه", record.domain_name))
    if record.hosting_type:
        pairs.append(("نوع هاستینگ", record.hosting_type))
    if record.ssl_included:
        pairs.append(("گواهینامه SSL", "شامل"))
    return pairs


@content_generator("estimate.items")
def estimate_items(record: EstimateRecord, params: Mapping[str, Any]) -> list[list[str]]:
    return [
        [
            item.item_name or DATE_SENTINEL,
            format_number(item.quantity or 1),
            format_number(item.unit_price or 0),
            format_number(item.total_amount or 0),
        ]
        for item in record.items
    ]


@content_generator("estimate.total")
def estimate_total(record: EstimateRecord, params: Mapping[str, Any]) -> str:
    return format_currency(record.amount, record.currency)


@content_generator("estimate.notes")
def estimate_notes(record: EstimateRecord, params: Mapping[str, Any]) -> str:
    return (record.notes or "").strip()


def estimate_template() -> TemplateConfig:
    """A fresh copy of the default estimate template."""
    return TemplateConfig(
        kind=DocumentKind.ESTIMATE,
        header=HeaderConfig(
            company_name=DEFAULT_COMPANY_NAME,
            phone=DEFAULT_PHONE,
            address=DEFAULT_ADDRESS,
        ),
        title="پیش‌فاکتور",
        info="estimate.info",
        articles=[
            Article(
                title="جزئیات قرارداد/سایت",
                generator="estimate.details",
                render_as=RenderAs.KEY_VALUES,
                optional=True,
            ),
            Article(
                title="آیتم‌ها",
                generator="estimate.items",
                render_as=RenderAs.TABLE,
                columns=ITEM_COLUMNS,
                column_weights=ITEM_COLUMN_WEIGHTS,
                optional=True,
            ),
            Article(title="جمع کل", generator="estimate.total"),
            Article(title="یادداشت", generator="estimate.notes", optional=True),
        ],
        footer=FooterConfig(note="این پیش‌فاکتور به صورت خودکار تولید شده است."),
    )
