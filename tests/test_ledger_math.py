from __future__ import annotations

from decimal import Decimal

import pytest

from academy_payroll.errors import CapExceeded
from academy_payroll.payroll.ledger import (
    as_cents,
    check_advance_cap,
    final_payment,
    remaining_payable,
    sum_amounts,
)

D = Decimal


def test_sum_amounts_of_nothing_is_zero() -> None:
    assert sum_amounts([]) == D("0")
    assert sum_amounts([D("100.50"), D("200.25")]) == D("300.75")


@pytest.mark.parametrize(
    ("base", "total", "expected"),
    [
        (D("50000"), D("0"), D("50000")),
        (D("50000"), D("20000"), D("30000")),
        (D("50000"), D("50000"), D("0")),
        (D("50000"), D("65000"), D("0")),
        (D("0"), D("100"), D("0")),
    ],
)
def test_final_payment_is_never_negative(base: Decimal, total: Decimal, expected: Decimal) -> None:
    assert final_payment(base, total) == expected
    assert remaining_payable(base, total) == expected


def test_cap_allows_reaching_the_salary_exactly() -> None:
    check_advance_cap(base_salary=D("50000"), total_advances=D("20000"), amount=D("30000"))


def test_cap_rejection_explains_itself() -> None:
    with pytest.raises(CapExceeded) as info:
        check_advance_cap(base_salary=D("50000"), total_advances=D("20000"), amount=D("35000"))

    assert info.value.payload() == {
        "baseSalary": 50000.0,
        "totalAdvances": 20000.0,
        "remainingPayable": 30000.0,
        "requestedAmount": 35000.0,
    }


def test_cap_rejection_reports_deficit_after_salary_cut() -> None:
    # Base salary lowered below what was already advanced this month.
    with pytest.raises(CapExceeded) as info:
        check_advance_cap(base_salary=D("10000"), total_advances=D("15000"), amount=D("1"))
    assert info.value.remaining_payable == D("-5000")


@pytest.mark.parametrize(
    "amount, expected",
    [
        (D("100"), D("100.00")),
        (D("0.01"), D("0.01")),
        (D("12.50"), D("12.50")),
        (D("12.5000"), D("12.50")),
        (D("999999999999.99"), D("999999999999.99")),
    ],
)
def test_whole_cent_amounts_are_accepted(amount: Decimal, expected: Decimal) -> None:
    cents = as_cents(amount)
    assert cents == expected
    assert cents.as_tuple().exponent == -2


@pytest.mark.parametrize(
    "amount",
    [D("0.004"), D("10.005"), D("0"), D("-5"), D("1000000000000"), D("NaN"), D("Infinity")],
)
def test_amounts_the_ledger_cannot_store_are_refused(amount: Decimal) -> None:
    assert as_cents(amount) is None
