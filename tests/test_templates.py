"""Tests for the template model, generators and built-in templates."""

from __future__ import annotations

import pytest
import yaml
from pydantic import ValidationError

from rtldocs.core.config import CompanySettings
from rtldocs.core.errors import TemplateError
from rtldocs.core.localization import format_currency
from rtldocs.core.models import (
    BlockStream,
    BulletList,
    ContractRecord,
    DocumentKind,
    EstimateRecord,
    KeyValueBox,
    Paragraph,
    SignatureBox,
    Table,
    TextRole,
)
from rtldocs.templates import (
    Article,
    RenderAs,
    TemplateConfig,
    contract_template,
    estimate_template,
    get_template,
    load_template,
    metadata_for,
    registered_generators,
    render,
    split_installments,
)


def _headings(blocks) -> list[str]:
    return [b.text for b in blocks if isinstance(b, Paragraph) and b.role is TextRole.HEADING]


# ---------------------------------------------------------------------------
# Installments
# ---------------------------------------------------------------------------

class TestSplitInstallments:
    def test_default_split(self):
        schedule = split_installments(10_000_000)
        assert schedule.first_payment == 3_300_000
        assert schedule.remaining == 6_700_000
        assert schedule.installments == (3_350_000, 3_350_000)
        assert sum(schedule.payments) == 10_000_000

    def test_explicit_first_payment(self):
        schedule = split_installments(10_000_000, first_payment=4_000_000)
        assert schedule.installments == (3_000_000, 3_000_000)

    def test_explicit_installments(self):
        schedule = split_installments(10_000_000, installments=[5_000_000, 1_700_000])
        assert schedule.installments == (5_000_000, 1_700_000)
        assert not schedule.equal_installments

    def test_rounding_stays_within_count_units(self):
        schedule = split_installments(1000, count=3)
        assert schedule.first_payment == 330
        assert schedule.installments == (223, 223, 223)
        assert abs(sum(schedule.payments) - 1000) <= 3

    def test_zero_total(self):
        schedule = split_installments(0)
        assert schedule.payments == (0, 0, 0)


# ---------------------------------------------------------------------------
# Contract template
# ---------------------------------------------------------------------------

class TestContractTemplate:
    def test_articles_in_fixed_order(self, contract_record):
        headings = _headings(render(contract_template(), contract_record))
        numbered = [h for h in headings if h.startswith("ماده")]
        assert numbered == [a.title for a in contract_template().articles if a.title.startswith("ماده")]
        assert len(numbered) == 9

    def test_signatures_come_last(self, contract_record):
        blocks = render(contract_template(), contract_record)
        assert isinstance(blocks[-1], SignatureBox)
        assert isinstance(blocks[-2], SignatureBox)
        assert blocks[-2].label == "امضاء مجری"
        assert blocks[-2].name == "صابر سلیمانی"
        assert blocks[-1].label == "امضاء کارفرما"
        assert blocks[-1].name == "شرکت نمونه"

    def test_client_name_defaults(self):
        blocks = render(contract_template(), ContractRecord())
        assert blocks[-1].name == "کارفرما"

    def test_render_is_idempotent(self, contract_record):
        first = render(contract_template(), contract_record)
        second = render(contract_template(), contract_record)
        assert first == second
        assert (
            BlockStream(blocks=first).model_dump_json()
            == BlockStream(blocks=second).model_dump_json()
        )

    def test_empty_record_renders(self):
        blocks = render(contract_template(), ContractRecord())
        assert len(_headings(blocks)) == 9

    def test_optional_articles_are_omitted(self, contract_record):
        headings = _headings(render(contract_template(), contract_record))
        assert "توضیحات" not in headings

        with_description = contract_record.model_copy(update={"description": "شرح پروژه"})
        assert "توضیحات" in _headings(render(contract_template(), with_description))

    def test_amount_uses_shared_currency_label(self, contract_record):
        blocks = render(contract_template(), contract_record)
        index = next(
            i for i, b in enumerate(blocks)
            if isinstance(b, Paragraph) and b.text == "ماده ششم - مبلغ قرارداد"
        )
        amount = " ".join(b.text for b in blocks[index + 1:index + 3])
        assert format_currency(10_000_000, "IRR") in amount
        assert format_currency(3_300_000, "IRR") in amount
        assert format_currency(3_350_000, "IRR") in amount
        assert "تومان" not in amount

    def test_amount_split_into_two_paragraphs(self, contract_record):
        blocks = render(contract_template(), contract_record)
        index = next(
            i for i, b in enumerate(blocks)
            if isinstance(b, Paragraph) and b.text == "ماده ششم - مبلغ قرارداد"
        )
        assert isinstance(blocks[index + 1], Paragraph)
        assert isinstance(blocks[index + 2], Paragraph)
        assert blocks[index + 2].text.startswith("مبلغ قرارداد به صورت")

    def test_custom_items_appended_to_subject(self, contract_record):
        record = contract_record.model_copy(update={"custom_items": ["اتصال به درگاه پرداخت"]})
        lists = [b for b in render(contract_template(), record) if isinstance(b, BulletList)]
        assert lists[0].items[-1] == "اتصال به درگاه پرداخت"

    def test_info_box(self, contract_record):
        boxes = [b for b in render(contract_template(), contract_record) if isinstance(b, KeyValueBox)]
        info = dict(boxes[0].pairs)
        assert info["شماره قرارداد"] == "C-1403-001"
        assert info["تاریخ شروع"] == "1403/01/01"
        assert info["نوع قرارداد"] == "طراحی وب‌سایت"

    def test_details_box_lists_only_present_fields(self, contract_record):
        boxes = [b for b in render(contract_template(), contract_record) if isinstance(b, KeyValueBox)]
        details = dict(boxes[1].pairs)
        assert details["نام دامنه"] == "example.ir"
        assert details["گواهینامه SSL"] == "شامل"
        assert "نوع هاستینگ" not in details

    def test_generated_at_caption(self, contract_record):
        plain = render(contract_template(), contract_record)
        stamped = render(contract_template(), contract_record, generated_at="2024-03-20 09:00:00")
        assert len(stamped) == len(plain) + 1
        assert any(isinstance(b, Paragraph) and "1403/01/01 09:00" in b.text for b in stamped)


# ---------------------------------------------------------------------------
# Estimate template
# ---------------------------------------------------------------------------

class TestEstimateTemplate:
    def test_items_table(self, estimate_record):
        tables = [b for b in render(estimate_template(), estimate_record) if isinstance(b, Table)]
        assert len(tables) == 1
        assert tables[0].columns == ["نام آیتم", "تعداد", "قیمت واحد", "جمع"]
        assert tables[0].rows[0] == ["هاست", "۱", "۳٬۰۰۰٬۰۰۰", "۳٬۰۰۰٬۰۰۰"]

    def test_no_items_no_table(self):
        blocks = render(estimate_template(), EstimateRecord())
        assert not any(isinstance(b, Table) for b in blocks)
        assert "آیتم‌ها" not in _headings(blocks)

    def test_total_and_notes(self, estimate_record):
        blocks = render(estimate_template(), estimate_record)
        texts = [b.text for b in blocks if isinstance(b, Paragraph)]
        assert format_currency(4_500_000, "IRR") in texts
        assert "پرداخت نقدی" in texts

    def test_no_signatures(self, estimate_record):
        assert not any(isinstance(b, SignatureBox) for b in render(estimate_template(), estimate_record))


# ---------------------------------------------------------------------------
# Model, registry & loading
# ---------------------------------------------------------------------------

class TestTemplateModel:
    def test_article_needs_exactly_one_source(self):
        with pytest.raises(ValidationError):
            Article(title="x")
        with pytest.raises(ValidationError):
            Article(title="x", text="a", generator="contract.parties")

    def test_table_article_needs_columns(self):
        with pytest.raises(ValidationError):
            Article(title="x", generator="estimate.items", render_as=RenderAs.TABLE)

    def test_unknown_generator_raises_at_render(self, contract_record):
        template = TemplateConfig(
            kind=DocumentKind.CONTRACT,
            articles=[Article(title="x", generator="no.such.generator")],
        )
        with pytest.raises(TemplateError):
            render(template, contract_record)

    def test_builtin_generators_registered(self):
        names = registered_generators()
        assert "contract.amount" in names
        assert "estimate.items" in names

    def test_json_round_trip(self):
        template = contract_template()
        assert TemplateConfig.model_validate_json(template.model_dump_json()) == template

    def test_load_yaml_template(self, tmp_path, estimate_record):
        path = tmp_path / "estimate.yaml"
        path.write_text(
            yaml.safe_dump(estimate_template().model_dump(mode="json"), allow_unicode=True),
            encoding="utf-8",
        )
        loaded = load_template(path)
        assert render(loaded, estimate_record) == render(estimate_template(), estimate_record)

    def test_load_invalid_template(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("kind: invoice\n", encoding="utf-8")
        with pytest.raises(TemplateError):
            load_template(path)

    def test_static_text_variables(self, contract_record):
        template = TemplateConfig(
            kind=DocumentKind.CONTRACT,
            variables={"city": "تهران"},
            articles=[Article(title="محل", text="شهر {{city}} و {{unknown}}")],
        )
        blocks = render(template, contract_record)
        assert blocks[-1].text == "شهر تهران و {{unknown}}"

    def test_company_settings_merge(self, contract_record):
        company = CompanySettings(name="Acme", phone="021-555", contractor_name="Jane Roe")
        template = get_template(DocumentKind.CONTRACT, company)
        assert template.header.company_name == "Acme"
        assert template.header.address == contract_template().header.address
        blocks = render(template, contract_record)
        assert blocks[0].text == "Acme"
        assert blocks[-2].name == "Jane Roe"

    def test_empty_company_settings_keep_defaults(self):
        assert get_template("contract", CompanySettings()) == contract_template()

    def test_metadata(self, contract_record):
        meta = metadata_for(contract_template(), contract_record)
        assert meta.title == "قرارداد طراحی سایت"
        assert meta.subject == "سایت فروشگاهی"
        assert "این قرارداد به صورت خودکار تولید شده است." in meta.footer_text

    def test_metadata_subject_matches_rendered_subtitle(self, contract_record):
        template = TemplateConfig(
            kind=DocumentKind.CONTRACT,
            variables={"project": "Alpha"},
            subtitle="{{project}} / {{title}}",
        )
        subtitles = [
            b.text for b in render(template, contract_record)
            if isinstance(b, Paragraph) and b.role is TextRole.SUBTITLE
        ]
        assert subtitles == ["Alpha / سایت فروشگاهی"]
        assert metadata_for(template, contract_record).subject == subtitles[0]
