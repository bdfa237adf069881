"""
academy_payroll.services.payroll_service

Payroll ledger service (transaction + persistence owner).

Responsibilities:
- Grant advances under the monthly base-salary ceiling.
- Summarize one employee's month (advances, remaining payable, finalization).
- Finalize a month's salary exactly once per employee.
- Serialize writes per employee and retry optimistic-concurrency losers.
"""

from __future__ import annotations

import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from typing import TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from academy_payroll.auth.models import Principal
from academy_payroll.db.models import Advance, SalaryFinalization
from academy_payroll.db.repositories.ledger import LedgerRepo
from academy_payroll.db.repositories.teachers import TeacherRepo
from academy_payroll.errors import (
    AcademyError,
    AlreadyFinalized,
    CapExceeded,
    InternalError,
    InvalidRequest,
    NotFound,
)
from academy_payroll.observability.logging import get_logger
from academy_payroll.payroll.ledger import (
    as_cents,
    check_advance_cap,
    final_payment,
    remaining_payable,
    sum_amounts,
)
from academy_payroll.payroll.periods import month_key, parse_month, utc_now
from academy_payroll.services.locks import KeyedLocks
from academy_payroll.settings import Settings

log = get_logger(__name__)

DEFAULT_ADVANCE_REASON = "Advance payment"

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class AdvanceGranted:
    teacher_id: uuid.UUID
    teacher_name: str
    base_salary: Decimal
    remaining_payable: Decimal
    amount: Decimal
    month: str


@dataclass(frozen=True, slots=True)
class PayrollSummary:
    teacher_id: uuid.UUID
    teacher_name: str
    teacher_email: str
    base_salary: Decimal
    month: str
    advances: list[Advance]
    total_advances: Decimal
    remaining_payable: Decimal
    finalization: SalaryFinalization | None


@dataclass(frozen=True, slots=True)
class FinalizationResult:
    teacher_id: uuid.UUID
    teacher_name: str
    month: str
    base_salary: Decimal
    total_advances: Decimal
    final_payment: Decimal


def _naive_utc(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant
    return instant.astimezone(UTC).replace(tzinfo=None)


class PayrollService:
    def __init__(
        self,
        *,
        session: AsyncSession,
        settings: Settings,
        locks: KeyedLocks,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._session = session
        self._settings = settings
        self._locks = locks
        self._clock = clock

        self._teachers = TeacherRepo(session)
        self._ledger = LedgerRepo(session)

    async def grant_advance(
        self,
        *,
        authorizer: Principal,
        teacher_id: uuid.UUID | None,
        amount: Decimal | None,
        reason: str | None = None,
    ) -> AdvanceGranted:
        cents = as_cents(amount) if amount is not None else None
        if teacher_id is None or cents is None:
            raise InvalidRequest("teacherId and valid amount are required")
        amount = cents
        reason = (reason or "").strip() or DEFAULT_ADVANCE_REASON

        async with self._locks.hold(teacher_id):
            granted = await self._write(
                op="grant_advance",
                teacher_id=teacher_id,
                safe_message="Error granting advance",
                attempt=lambda: self._grant_once(
                    authorizer=authorizer, teacher_id=teacher_id, amount=amount, reason=reason
                ),
            )
            try:
                # Recomputed from the committed ledger, not from the pre-grant sum.
                total = await self._ledger.total_advances(teacher_id, granted.month)
            except SQLAlchemyError as e:
                raise InternalError("Error granting advance", error=str(e)) from e

        result = AdvanceGranted(
            teacher_id=granted.teacher_id,
            teacher_name=granted.teacher_name,
            base_salary=granted.base_salary,
            remaining_payable=remaining_payable(granted.base_salary, total),
            amount=granted.amount,
            month=granted.month,
        )
        log.info(
            "advance_granted",
            teacher_id=str(teacher_id),
            month=result.month,
            amount=str(amount),
            issued_by=authorizer.subject,
        )
        return result

    async def get_payroll(
        self, *, teacher_id: uuid.UUID, month: str | None = None
    ) -> PayrollSummary:
        period = parse_month(month) if month is not None else month_key(self._clock())
        try:
            teacher = await self._teachers.get(teacher_id)
            if teacher is None:
                raise NotFound("Teacher not found")
            advances = await self._ledger.advances_for_month(teacher.id, period)
            finalization = await self._ledger.finalization_for_month(teacher.id, period)
        except SQLAlchemyError as e:
            raise InternalError("Error fetching payroll", error=str(e)) from e

        total = sum_amounts(a.amount for a in advances)
        return PayrollSummary(
            teacher_id=teacher.id,
            teacher_name=teacher.name,
            teacher_email=teacher.email,
            base_salary=teacher.base_salary,
            month=period,
            advances=advances,
            total_advances=total,
            remaining_payable=remaining_payable(teacher.base_salary, total),
            finalization=finalization,
        )

    async def finalize_salary(
        self,
        *,
        authorizer: Principal,
        teacher_id: uuid.UUID | None,
        month: str | None,
    ) -> FinalizationResult:
        if teacher_id is None or not month:
            raise InvalidRequest("teacherId and month (YYYY-MM) are required")
        period = parse_month(month)

        async with self._locks.hold(teacher_id):
            result = await self._write(
                op="finalize_salary",
                teacher_id=teacher_id,
                safe_message="Error finalizing salary",
                attempt=lambda: self._finalize_once(
                    authorizer=authorizer, teacher_id=teacher_id, month=period
                ),
            )

        log.info(
            "salary_finalized",
            teacher_id=str(teacher_id),
            month=period,
            final_payment=str(result.final_payment),
            paid_by=authorizer.subject,
        )
        return result

    async def _grant_once(
        self,
        *,
        authorizer: Principal,
        teacher_id: uuid.UUID,
        amount: Decimal,
        reason: str,
    ) -> AdvanceGranted:
        teacher = await self._teachers.get(teacher_id, for_update=True)
        if teacher is None:
            raise NotFound("Teacher not found")

        now = self._clock()
        period = month_key(now)
        total = await self._ledger.total_advances(teacher.id, period)
        try:
            # Checked against today's base salary; earlier advances are not re-validated.
            check_advance_cap(base_salary=teacher.base_salary, total_advances=total, amount=amount)
        except CapExceeded:
            log.info(
                "advance_cap_exceeded",
                teacher_id=str(teacher_id),
                month=period,
                total_advances=str(total),
                requested_amount=str(amount),
            )
            raise

        await self._ledger.append_advance(
            teacher_id=teacher.id,
            month=period,
            amount=amount,
            reason=reason,
            issued_by=authorizer.subject,
            created_at=_naive_utc(now),
        )
        self._teachers.touch(teacher)
        await self._session.flush()

        return AdvanceGranted(
            teacher_id=teacher.id,
            teacher_name=teacher.name,
            base_salary=teacher.base_salary,
            remaining_payable=remaining_payable(teacher.base_salary, total + amount),
            amount=amount,
            month=period,
        )

    async def _finalize_once(
        self,
        *,
        authorizer: Principal,
        teacher_id: uuid.UUID,
        month: str,
    ) -> FinalizationResult:
        teacher = await self._teachers.get(teacher_id, for_update=True)
        if teacher is None:
            raise NotFound("Teacher not found")

        if await self._ledger.finalization_for_month(teacher.id, month) is not None:
            log.info("salary_already_finalized", teacher_id=str(teacher_id), month=month)
            raise AlreadyFinalized(month)

        total = await self._ledger.total_advances(teacher.id, month)
        payment = final_payment(teacher.base_salary, total)
        await self._ledger.append_finalization(
            teacher_id=teacher.id,
            month=month,
            base_salary=teacher.base_salary,
            total_advances=total,
            final_payment=payment,
            paid_by=authorizer.subject,
            paid_at=_naive_utc(self._clock()),
        )
        self._teachers.touch(teacher)
        try:
            await self._session.flush()
        except IntegrityError as e:
            # Another process finalized the same (teacher, month) first.
            log.info("salary_already_finalized", teacher_id=str(teacher_id), month=month)
            raise AlreadyFinalized(month) from e

        return FinalizationResult(
            teacher_id=teacher.id,
            teacher_name=teacher.name,
            month=month,
            base_salary=teacher.base_salary,
            total_advances=total,
            final_payment=payment,
        )

    async def _write(
        self,
        *,
        op: str,
        teacher_id: uuid.UUID,
        safe_message: str,
        attempt: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Run one read-check-append attempt and commit it. A `StaleDataError`
        means another writer bumped the teacher's version in between: roll
        back, re-read and re-validate.
        """

        max_attempts = self._settings.ledger_max_attempts
        for n in range(1, max_attempts + 1):
            try:
                result = await attempt()
                await self._session.commit()
                return result
            except StaleDataError:
                await self._session.rollback()
                log.warning("ledger_write_conflict", op=op, teacher_id=str(teacher_id), attempt=n)
            except AcademyError:
                await self._session.rollback()
                raise
            except SQLAlchemyError as e:
                await self._session.rollback()
                log.exception("ledger_write_failed", op=op, teacher_id=str(teacher_id))
                raise InternalError(safe_message, error=str(e)) from e

        raise InternalError(safe_message, error=f"{op} conflicted on {max_attempts} attempts")


# --- Module Notes -----------------------------------------------------------
# Routers build one PayrollService per request; the KeyedLocks instance is
# app-scoped (see `api.app.create_app`) so all requests share it.
