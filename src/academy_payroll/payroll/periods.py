"""
academy_payroll.payroll.periods

Month period keys.

An advance is bucketed by the UTC year-month of the instant it was granted;
finalizations and payroll lookups address the same buckets by key.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime

from academy_payroll.errors import InvalidRequest

_MONTH_RE = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def month_key(instant: datetime) -> str:
    """
    UTC-normalized "YYYY-MM" for `instant`; naive datetimes are taken as UTC.
    """

    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=UTC)
    return instant.astimezone(UTC).strftime("%Y-%m")


def parse_month(value: str | None) -> str:
    if not value or _MONTH_RE.fullmatch(value.strip()) is None:
        raise InvalidRequest("month must be in YYYY-MM format")
    return value.strip()


def utc_now() -> datetime:
    return datetime.now(tz=UTC)
