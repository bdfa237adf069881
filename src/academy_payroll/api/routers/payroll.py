"""
academy_payroll.api.routers.payroll

Payroll ledger endpoints (administrative principals only).

Responsibilities:
- Grant an advance against the current month's salary.
- Read one teacher's payroll summary for a month.
- Finalize a month's salary.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from academy_payroll.api.deps import db_session, ledger_clock, ledger_locks, settings_dep
from academy_payroll.api.schemas import CamelModel, Money
from academy_payroll.auth.deps import require_admin
from academy_payroll.auth.models import Principal
from academy_payroll.services.locks import KeyedLocks
from academy_payroll.services.payroll_service import PayrollService
from academy_payroll.settings import Settings

router = APIRouter(
    prefix="/api/payroll",
    tags=["payroll"],
    dependencies=[Depends(require_admin)],
)


def payroll_service(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
    locks: KeyedLocks = Depends(ledger_locks),
    clock: Callable[[], datetime] = Depends(ledger_clock),
) -> PayrollService:
    return PayrollService(session=session, settings=settings, locks=locks, clock=clock)


class AdvanceRequest(CamelModel):
    # Optional at the schema level so a missing field gets the ledger's own message.
    teacher_id: uuid.UUID | None = None
    amount: Decimal | None = None
    reason: str | None = Field(default=None, max_length=500)


class AdvanceTeacher(CamelModel):
    id: uuid.UUID
    name: str
    base_salary: Money
    remaining_payable: Money
    advance_granted: Money
    month: str


class AdvanceResponse(CamelModel):
    message: str
    teacher: AdvanceTeacher


class TeacherSummary(CamelModel):
    id: uuid.UUID
    name: str
    email: str
    base_salary: Money


class AdvanceItem(CamelModel):
    id: int
    date: datetime
    amount: Money
    reason: str
    issued_by: str
    month: str


class FinalizationItem(CamelModel):
    month: str
    base_salary: Money
    total_advances: Money
    final_payment: Money
    paid_at: datetime
    paid_by: str


class PayrollResponse(CamelModel):
    message: str = "Payroll fetched successfully"
    teacher: TeacherSummary
    month: str
    advances: list[AdvanceItem]
    total_advances: Money
    remaining_payable: Money
    salary_finalized: FinalizationItem | None


class FinalizeRequest(CamelModel):
    teacher_id: uuid.UUID | None = None
    month: str | None = None


class FinalizedSalary(CamelModel):
    teacher_id: uuid.UUID
    teacher_name: str
    month: str
    base_salary: Money
    total_advances: Money
    final_payment: Money


class FinalizeResponse(CamelModel):
    message: str
    salary: FinalizedSalary


@router.post("/advance", status_code=HTTP_201_CREATED, response_model=AdvanceResponse)
async def grant_advance(
    body: AdvanceRequest,
    principal: Principal = Depends(require_admin),
    service: PayrollService = Depends(payroll_service),
) -> AdvanceResponse:
    granted = await service.grant_advance(
        authorizer=principal,
        teacher_id=body.teacher_id,
        amount=body.amount,
        reason=body.reason,
    )
    return AdvanceResponse(
        message="Advance granted successfully",
        teacher=AdvanceTeacher(
            id=granted.teacher_id,
            name=granted.teacher_name,
            base_salary=granted.base_salary,
            remaining_payable=granted.remaining_payable,
            advance_granted=granted.amount,
            month=granted.month,
        ),
    )


@router.get("/{teacher_id}", response_model=PayrollResponse)
async def get_payroll(
    teacher_id: uuid.UUID,
    month: str | None = Query(default=None, description="YYYY-MM; defaults to the current month"),
    service: PayrollService = Depends(payroll_service),
) -> PayrollResponse:
    summary = await service.get_payroll(teacher_id=teacher_id, month=month)
    fin = summary.finalization
    return PayrollResponse(
        teacher=TeacherSummary(
            id=summary.teacher_id,
            name=summary.teacher_name,
            email=summary.teacher_email,
            base_salary=summary.base_salary,
        ),
        month=summary.month,
        advances=[
            AdvanceItem(
                id=a.id,
                date=a.created_at,
                amount=a.amount,
                reason=a.reason,
                issued_by=a.issued_by,
                month=a.month,
            )
            for a in summary.advances
        ],
        total_advances=summary.total_advances,
        remaining_payable=summary.remaining_payable,
        salary_finalized=(
            FinalizationItem(
                month=fin.month,
                base_salary=fin.base_salary,
                total_advances=fin.total_advances,
                final_payment=fin.final_payment,
                paid_at=fin.paid_at,
                paid_by=fin.paid_by,
            )
            if fin is not None
            else None
        ),
    )


@router.post("/finalize", status_code=HTTP_201_CREATED, response_model=FinalizeResponse)
async def finalize_salary(
    body: FinalizeRequest,
    principal: Principal = Depends(require_admin),
    service: PayrollService = Depends(payroll_service),
) -> FinalizeResponse:
    result = await service.finalize_salary(
        authorizer=principal,
        teacher_id=body.teacher_id,
        month=body.month,
    )
    return FinalizeResponse(
        message="Salary finalized successfully",
        salary=FinalizedSalary(
            teacher_id=result.teacher_id,
            teacher_name=result.teacher_name,
            month=result.month,
            base_salary=result.base_salary,
            total_advances=result.total_advances,
            final_payment=result.final_payment,
        ),
    )


# --- Module Notes -----------------------------------------------------------
# Routes translate HTTP only; cap checks, month keys and retries live in
# `services.payroll_service` and `payroll.*`.
