"""Installment split for contract amounts.

The schedule is computed once here and formatted by the template model,
so the PDF and the Word document always print the same figures.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from ..core.localization import round_half_up

DEFAULT_FIRST_PAYMENT_RATIO = 0.33
DEFAULT_INSTALLMENTS = 2


@dataclass(frozen=True)
class PaymentSchedule:
    total: int
    first_payment: int
    remaining: int
    installments: tuple[int, ...]

    @property
    def payments(self) -> tuple[int, ...]:
        """First payment followed by every installment."""
        return (self.first_payment, *self.installments)

    @property
    def equal_installments(self) -> bool:
        return len(set(self.installments)) <= 1


def split_installments(
    total: float | int,
    *,
    ratio: float = DEFAULT_FIRST_PAYMENT_RATIO,
    count: int = DEFAULT_INSTALLMENTS,
    first_payment: float | int | None = None,
    installments: Sequence[float | int] | None = None,
) -> PaymentSchedule:
    """Split *total* into a first payment and *count* equal installments.

    ``first_payment`` defaults to ``round(total * ratio)``; the remainder
    is divided into *count* installments, each rounded to the nearest
    unit. Explicit *installments* replace the computed ones. The sum of
    all payments equals *total* within *count* units of rounding.
    """
    total_int = round_half_up(total or 0)
    if first_payment:
        first = round_half_up(first_payment)
    else:
        first = round_half_up(Decimal(str(total_int)) * Decimal(str(ratio)))
    remaining = total_int - first

    if installments:
        parts = tuple(round_half_up(p) for p in installments)
    else:
        count = max(count, 1)
        each = round_half_up(Decimal(remaining) / Decimal(count))
        parts = (each,) * count

    return PaymentSchedule(
        total=total_int,
        first_payment=first,
        remaining=remaining,
        installments=parts,
    )
