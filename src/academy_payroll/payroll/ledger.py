"""
academy_payroll.payroll.ledger

Pure arithmetic over an employee's advances for one month.

Responsibilities:
- Sum advance amounts.
- Derive `remainingPayable` on read (never stored).
- Compute the clamped final payment of a month.
- Enforce the monthly advance ceiling.
- Accept only amounts the ledger can store exactly (whole cents).
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from academy_payroll.errors import CapExceeded

ZERO = Decimal("0")
CENT = Decimal("0.01")
# Numeric(14, 2): twelve integer digits.
MAX_AMOUNT = Decimal("999999999999.99")


def as_cents(amount: Decimal) -> Decimal | None:
    """
    `amount` quantized to cents, or None when it is not a positive, finite
    amount of whole cents that fits a money column.
    """

    if not amount.is_finite() or amount <= 0 or amount > MAX_AMOUNT:
        return None
    cents = amount.quantize(CENT)
    if cents != amount:
        return None
    return cents


def sum_amounts(amounts: Iterable[Decimal]) -> Decimal:
    return sum(amounts, ZERO)


def remaining_payable(base_salary: Decimal, total_advances: Decimal) -> Decimal:
    return max(ZERO, base_salary - total_advances)


def final_payment(base_salary: Decimal, total_advances: Decimal) -> Decimal:
    # Never negative, even when advances outgrew a lowered base salary.
    return max(ZERO, base_salary - total_advances)


def check_advance_cap(
    *, base_salary: Decimal, total_advances: Decimal, amount: Decimal
) -> None:
    """
    Raise `CapExceeded` when granting `amount` would take the month's advances
    past `base_salary`. Reaching the salary exactly is allowed.
    """

    if total_advances + amount > base_salary:
        raise CapExceeded(
            base_salary=base_salary,
            total_advances=total_advances,
            requested_amount=amount,
        )
