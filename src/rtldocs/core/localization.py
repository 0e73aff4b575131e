"""Jalali calendar conversion and Persian number formatting.

All helpers are pure: no locale globals, no wall-clock reads. Invalid or
missing dates render as :data:`DATE_SENTINEL` instead of raising.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

import jdatetime

DATE_SENTINEL = "-"

PERSIAN_DIGITS = "۰۱۲۳۴۵۶۷۸۹"
ARABIC_DIGITS = "٠١٢٣٤٥٦٧٨٩"
_TO_PERSIAN = str.maketrans("0123456789", PERSIAN_DIGITS)
_TO_LATIN = str.maketrans(PERSIAN_DIGITS + ARABIC_DIGITS, "0123456789" * 2)

# Arabic thousands separator, as used by fa-IR number formatting
PERSIAN_GROUP_SEPARATOR = "٬"
PERSIAN_DECIMAL_SEPARATOR = "٫"

CURRENCY_LABELS: dict[str, str] = {
    "IRR": "ریال",
    "IRT": "تومان",
    "TOMAN": "تومان",
    "USD": "دلار",
    "EUR": "یورو",
}

_JALALI_RE = re.compile(r"^\s*(\d{4})[/-](\d{1,2})[/-](\d{1,2})\s*$")


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def _coerce_datetime(value: date | datetime | str | None) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.strptime(text, "%Y-%m-%d %H:%M:%S")
        except ValueError:
            return None
    return None


def to_jalali(value: date | datetime | str | None, *, persian_digits: bool = False) -> str:
    """Format a Gregorian date as ``YYYY/MM/DD`` in the Jalali calendar."""
    dt = _coerce_datetime(value)
    if dt is None:
        return DATE_SENTINEL
    try:
        text = jdatetime.date.fromgregorian(date=dt.date()).strftime("%Y/%m/%d")
    except (ValueError, OverflowError):
        return DATE_SENTINEL
    return to_persian_digits(text) if persian_digits else text


def to_jalali_datetime(
    value: date | datetime | str | None, *, persian_digits: bool = False
) -> str:
    """Format a Gregorian timestamp as ``YYYY/MM/DD HH:MM`` (Jalali)."""
    dt = _coerce_datetime(value)
    if dt is None:
        return DATE_SENTINEL
    try:
        jdt = jdatetime.datetime.fromgregorian(datetime=dt.replace(tzinfo=None))
        text = jdt.strftime("%Y/%m/%d %H:%M")
    except (ValueError, OverflowError):
        return DATE_SENTINEL
    return to_persian_digits(text) if persian_digits else text


def from_jalali(text: str | None) -> date | None:
    """Parse a ``YYYY/MM/DD`` Jalali date (Latin or Persian digits)."""
    if not text:
        return None
    match = _JALALI_RE.match(text.translate(_TO_LATIN))
    if not match:
        return None
    year, month, day = (int(g) for g in match.groups())
    try:
        return jdatetime.date(year, month, day).togregorian()
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------

def to_persian_digits(value: object) -> str:
    """Replace ASCII digits with Persian digit glyphs."""
    if value is None:
        return ""
    return str(value).translate(_TO_PERSIAN)


def to_latin_digits(value: str) -> str:
    return value.translate(_TO_LATIN)


def round_half_up(value: float | int | Decimal) -> int:
    """Round to the nearest integer unit, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def format_number(
    value: float | int | str | None,
    *,
    persian_digits: bool = True,
    decimals: int | None = None,
) -> str:
    """Group-separated numeral, optionally in Persian digits.

    Returns ``""`` for values that are not numbers.
    """
    if value is None:
        return ""
    try:
        number = Decimal(to_latin_digits(str(value)).replace(",", ""))
    except InvalidOperation:
        return ""
    if not number.is_finite():
        return ""

    if decimals is None:
        if number == number.to_integral_value():
            text = f"{int(number):,}"
        else:
            text = f"{float(number):,}"
    else:
        quant = Decimal(1).scaleb(-decimals)
        text = f"{number.quantize(quant, rounding=ROUND_HALF_UP):,.{decimals}f}"

    if not persian_digits:
        return text
    text = text.replace(",", PERSIAN_GROUP_SEPARATOR).replace(".", PERSIAN_DECIMAL_SEPARATOR)
    return to_persian_digits(text)


def currency_label(currency: str | None) -> str:
    if not currency:
        return ""
    return CURRENCY_LABELS.get(currency.upper(), currency)


def format_currency(
    amount: float | int | None,
    currency: str | None,
    *,
    persian_digits: bool = True,
) -> str:
    """Formatted amount followed by its currency label."""
    number = format_number(amount if amount is not None else 0, persian_digits=persian_digits)
    label = currency_label(currency)
    return f"{number} {label}".strip()
