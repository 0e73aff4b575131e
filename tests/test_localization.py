"""Tests for Jalali dates and Persian number formatting."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from rtldocs.core.localization import (
    DATE_SENTINEL,
    currency_label,
    format_currency,
    format_number,
    from_jalali,
    round_half_up,
    to_jalali,
    to_jalali_datetime,
    to_latin_digits,
    to_persian_digits,
)


class TestJalali:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (date(2024, 3, 20), "1403/01/01"),
            ("2023-03-21", "1402/01/01"),
            (datetime(2024, 3, 20, 23, 59), "1403/01/01"),
            ("2024-03-20T08:30:00Z", "1403/01/01"),
            ("2024-03-20 08:30:00", "1403/01/01"),
        ],
    )
    def test_known_dates(self, value, expected):
        assert to_jalali(value) == expected

    @pytest.mark.parametrize("value", [None, "", "not a date", "2024-13-45"])
    def test_missing_or_invalid_is_sentinel(self, value):
        assert to_jalali(value) == DATE_SENTINEL
        assert to_jalali_datetime(value) == DATE_SENTINEL

    def test_persian_digits(self):
        assert to_jalali(date(2024, 3, 20), persian_digits=True) == "۱۴۰۳/۰۱/۰۱"

    def test_datetime_format(self):
        assert to_jalali_datetime("2024-03-20 14:30:00") == "1403/01/01 14:30"

    def test_deterministic(self):
        assert to_jalali("2024-03-20") == to_jalali("2024-03-20")

    def test_from_jalali(self):
        assert from_jalali("1403/01/01") == date(2024, 3, 20)
        assert from_jalali("۱۴۰۲/۰۱/۰۱") == date(2023, 3, 21)
        assert from_jalali("1403/13/01") is None
        assert from_jalali("yesterday") is None
        assert from_jalali(None) is None


class TestNumbers:
    def test_digit_conversion(self):
        assert to_persian_digits(2024) == "۲۰۲۴"
        assert to_latin_digits("۲۰۲۴") == "2024"
        assert to_persian_digits(None) == ""

    def test_grouped_persian_number(self):
        assert format_number(10_000_000) == "۱۰٬۰۰۰٬۰۰۰"

    def test_grouped_latin_number(self):
        assert format_number(1234567, persian_digits=False) == "1,234,567"
        assert format_number(1234.5, persian_digits=False) == "1,234.5"

    def test_decimals(self):
        assert format_number(2.345, persian_digits=False, decimals=2) == "2.35"

    def test_integral_float_has_no_fraction(self):
        assert format_number(3_300_000.0, persian_digits=False) == "3,300,000"

    def test_invalid_number_is_empty(self):
        assert format_number("abc") == ""
        assert format_number(None) == ""

    @pytest.mark.parametrize("value, expected", [(2.5, 3), (3.5, 4), (2.4, 2), (-2.5, -3)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected


class TestCurrency:
    def test_labels(self):
        assert currency_label("IRR") == "ریال"
        assert currency_label("IRT") == "تومان"
        assert currency_label("usd") == "دلار"
        assert currency_label("EUR") == "یورو"
        assert currency_label("GBP") == "GBP"

    def test_format_currency(self):
        assert format_currency(3_300_000, "IRR") == "۳٬۳۰۰٬۰۰۰ ریال"
        assert format_currency(1500, "USD", persian_digits=False) == "1,500 دلار"

    def test_missing_amount_is_zero(self):
        assert format_currency(None, "IRR") == "۰ ریال"
