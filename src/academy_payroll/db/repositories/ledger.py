"""
academy_payroll.db.repositories.ledger

Repository for the advance arena and monthly salary finalizations.

Responsibilities:
- Append advances and finalizations (no update/delete paths exist).
- Answer per-(teacher, month) queries: list, SUM, finalization lookup.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from academy_payroll.db.models import Advance, SalaryFinalization


class LedgerRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def append_advance(
        self,
        *,
        teacher_id: uuid.UUID,
        month: str,
        amount: Decimal,
        reason: str,
        issued_by: str,
        created_at: datetime,
    ) -> Advance:
        adv = Advance(
            teacher_id=teacher_id,
            month=month,
            amount=amount,
            reason=reason,
            issued_by=issued_by,
            created_at=created_at,
        )
        self._session.add(adv)
        return adv

    async def advances_for_month(self, teacher_id: uuid.UUID, month: str) -> list[Advance]:
        stmt = (
            select(Advance)
            .where(Advance.teacher_id == teacher_id, Advance.month == month)
            .order_by(Advance.id)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def total_advances(self, teacher_id: uuid.UUID, month: str) -> Decimal:
        stmt = select(func.coalesce(func.sum(Advance.amount), 0)).where(
            Advance.teacher_id == teacher_id, Advance.month == month
        )
        total = (await self._session.execute(stmt)).scalar_one()
        return Decimal(str(total))

    async def finalization_for_month(
        self, teacher_id: uuid.UUID, month: str
    ) -> SalaryFinalization | None:
        stmt = select(SalaryFinalization).where(
            SalaryFinalization.teacher_id == teacher_id, SalaryFinalization.month == month
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def append_finalization(
        self,
        *,
        teacher_id: uuid.UUID,
        month: str,
        base_salary: Decimal,
        total_advances: Decimal,
        final_payment: Decimal,
        paid_by: str,
        paid_at: datetime,
    ) -> SalaryFinalization:
        record = SalaryFinalization(
            teacher_id=teacher_id,
            month=month,
            base_salary=base_salary,
            total_advances=total_advances,
            final_payment=final_payment,
            paid_by=paid_by,
            paid_at=paid_at,
        )
        self._session.add(record)
        return record


# --- Module Notes -----------------------------------------------------------
# Appends are flushed by the service together with the teacher version bump so
# the row insert and the optimistic check land in one statement batch.
