"""Shared fixtures."""

from __future__ import annotations

import json

import pytest

from rtldocs.core.config import EngineConfig
from rtldocs.core.fonts import FontCache
from rtldocs.core.models import ContractRecord, EstimateItem, EstimateRecord
from rtldocs.pipeline import DocumentPipeline


@pytest.fixture
def contract_record() -> ContractRecord:
    return ContractRecord(
        id=1,
        contract_number="C-1403-001",
        title="سایت فروشگاهی",
        account_name="شرکت نمونه",
        contract_type="website",
        start_date="2024-03-20",
        end_date="2024-09-20",
        value=10_000_000,
        currency="IRR",
        status="active",
        created_at="2024-03-19 10:15:00",
        domain_name="example.ir",
        ssl_certificate=True,
        support_duration=6,
        website_pages=12,
        client_national_id="0012345678",
    )


@pytest.fixture
def estimate_record() -> EstimateRecord:
    return EstimateRecord(
        id=7,
        estimate_number="E-7",
        account_name="شرکت نمونه",
        amount=4_500_000,
        currency="IRR",
        valid_until="2024-04-20",
        notes="پرداخت نقدی",
        contract_type="hosting",
        domain_name="example.ir",
        ssl_included=True,
        created_at="2024-03-20",
        items=[
            EstimateItem(item_name="هاست", quantity=1, unit_price=3_000_000, total_amount=3_000_000),
            EstimateItem(item_name="دامنه", quantity=1, unit_price=1_500_000, total_amount=1_500_000),
        ],
    )


@pytest.fixture
def fallback_fonts() -> FontCache:
    """A font cache that never finds a Persian font."""
    return FontCache.empty()


@pytest.fixture
def pipeline(fallback_fonts) -> DocumentPipeline:
    return DocumentPipeline(EngineConfig(), fallback_fonts)


@pytest.fixture
def records_file(tmp_path, contract_record, estimate_record):
    path = tmp_path / "records.json"
    path.write_text(
        json.dumps(
            {
                "contracts": [contract_record.model_dump(mode="json")],
                "estimates": [estimate_record.model_dump(mode="json")],
            },
            ensure_ascii=False,
        ),
        encoding="utf-8",
    )
    return path
