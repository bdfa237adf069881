"""
tests.test_payroll_concurrency

Ledger writes under contention: concurrent requests in one process, and
interleaved writers that only meet at the database (separate lock registries,
as with two worker processes).
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from decimal import Decimal

import httpx
import pytest
from factories import create_teacher
from fastapi import FastAPI
from sqlalchemy import func, select

from academy_payroll.auth.models import Principal, PrincipalRole
from academy_payroll.db.models import Advance, SalaryFinalization, Teacher
from academy_payroll.errors import AlreadyFinalized, CapExceeded, InternalError
from academy_payroll.services.locks import KeyedLocks
from academy_payroll.services.payroll_service import PayrollService
from academy_payroll.settings import Settings

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=UTC)
AUTHORIZER = Principal(subject="payroll-clerk", role=PrincipalRole.admin, display_name="Clerk")


def service_for(session, settings: Settings) -> PayrollService:
    # Fresh KeyedLocks: writers behave like separate processes.
    return PayrollService(session=session, settings=settings, locks=KeyedLocks(), clock=lambda: NOW)


async def persisted_total(sessionmaker, teacher_id) -> Decimal:
    async with sessionmaker() as session:
        stmt = select(func.coalesce(func.sum(Advance.amount), 0)).where(
            Advance.teacher_id == teacher_id, Advance.month == "2024-03"
        )
        return Decimal(str((await session.execute(stmt)).scalar_one()))


@pytest.mark.asyncio
async def test_concurrent_grants_never_exceed_base_salary(
    app: FastAPI, client: httpx.AsyncClient, sessionmaker, admin_headers
) -> None:
    app.state.clock = lambda: NOW
    teacher = await create_teacher(sessionmaker, base_salary=10000)

    async def one() -> int:
        r = await client.post(
            "/api/payroll/advance",
            json={"teacherId": str(teacher.id), "amount": 1000},
            headers=admin_headers,
        )
        return r.status_code

    codes = await asyncio.gather(*(one() for _ in range(20)))

    assert codes.count(201) == 10
    assert codes.count(400) == 10
    assert await persisted_total(sessionmaker, teacher.id) == Decimal("10000")
    # Lock entries are released once every request is done.
    assert len(app.state.ledger_locks) == 0


@pytest.mark.asyncio
async def test_concurrent_finalize_writes_one_record(
    app: FastAPI, client: httpx.AsyncClient, sessionmaker, admin_headers
) -> None:
    teacher = await create_teacher(sessionmaker)

    async def one() -> int:
        r = await client.post(
            "/api/payroll/finalize",
            json={"teacherId": str(teacher.id), "month": "2024-03"},
            headers=admin_headers,
        )
        return r.status_code

    codes = await asyncio.gather(*(one() for _ in range(8)))

    assert codes.count(201) == 1
    assert codes.count(400) == 7
    async with sessionmaker() as session:
        stmt = select(func.count()).select_from(SalaryFinalization).where(
            SalaryFinalization.teacher_id == teacher.id
        )
        assert (await session.execute(stmt)).scalar_one() == 1


@pytest.mark.asyncio
async def test_stale_grant_is_retried_and_rechecked(sessionmaker, settings: Settings) -> None:
    teacher = await create_teacher(sessionmaker, base_salary=10000)

    async with sessionmaker() as session_a:
        service_a = service_for(session_a, settings)
        real_total = service_a._ledger.total_advances
        calls = 0

        async def racing_total(teacher_id, month):
            # The first read goes stale: another writer commits right after it.
            nonlocal calls
            calls += 1
            total = await real_total(teacher_id, month)
            if calls == 1:
                async with sessionmaker() as session_b:
                    await service_for(session_b, settings).grant_advance(
                        authorizer=AUTHORIZER, teacher_id=teacher.id, amount=Decimal("6000")
                    )
            return total

        service_a._ledger.total_advances = racing_total

        with pytest.raises(CapExceeded) as excinfo:
            await service_a.grant_advance(
                authorizer=AUTHORIZER, teacher_id=teacher.id, amount=Decimal("6000")
            )

    # Second attempt saw the other writer's advance and refused.
    assert calls == 2
    assert excinfo.value.total_advances == Decimal("6000")
    assert await persisted_total(sessionmaker, teacher.id) == Decimal("6000")


@pytest.mark.asyncio
async def test_stale_grant_that_still_fits_succeeds_on_retry(
    sessionmaker, settings: Settings
) -> None:
    teacher = await create_teacher(sessionmaker, base_salary=10000)

    async with sessionmaker() as session_a:
        service_a = service_for(session_a, settings)
        real_total = service_a._ledger.total_advances
        calls = 0

        async def racing_total(teacher_id, month):
            nonlocal calls
            calls += 1
            total = await real_total(teacher_id, month)
            if calls == 1:
                async with sessionmaker() as session_b:
                    await service_for(session_b, settings).grant_advance(
                        authorizer=AUTHORIZER, teacher_id=teacher.id, amount=Decimal("6000")
                    )
            return total

        service_a._ledger.total_advances = racing_total
        granted = await service_a.grant_advance(
            authorizer=AUTHORIZER, teacher_id=teacher.id, amount=Decimal("3000")
        )

    assert granted.remaining_payable == Decimal("1000")
    assert await persisted_total(sessionmaker, teacher.id) == Decimal("9000")
    async with sessionmaker() as session:
        row = await session.get(Teacher, teacher.id)
        assert row.version == 3


@pytest.mark.asyncio
async def test_endless_conflicts_give_up_with_internal_error(
    sessionmaker, settings: Settings
) -> None:
    teacher = await create_teacher(sessionmaker, base_salary=10000)

    async with sessionmaker() as session_a:
        service_a = service_for(session_a, settings)
        real_total = service_a._ledger.total_advances

        async def always_racing(teacher_id, month):
            total = await real_total(teacher_id, month)
            async with sessionmaker() as session_b:
                await service_for(session_b, settings).grant_advance(
                    authorizer=AUTHORIZER, teacher_id=teacher.id, amount=Decimal("1")
                )
            return total

        service_a._ledger.total_advances = always_racing

        with pytest.raises(InternalError) as excinfo:
            await service_a.grant_advance(
                authorizer=AUTHORIZER, teacher_id=teacher.id, amount=Decimal("100")
            )

    assert excinfo.value.message == "Error granting advance"
    # Only the interfering writer's advances landed.
    expected = Decimal(settings.ledger_max_attempts)
    assert await persisted_total(sessionmaker, teacher.id) == expected


@pytest.mark.asyncio
async def test_interleaved_finalize_loses_cleanly(sessionmaker, settings: Settings) -> None:
    teacher = await create_teacher(sessionmaker, base_salary=10000)

    async with sessionmaker() as session_a:
        service_a = service_for(session_a, settings)
        real_lookup = service_a._ledger.finalization_for_month
        calls = 0

        async def racing_lookup(teacher_id, month):
            nonlocal calls
            calls += 1
            found = await real_lookup(teacher_id, month)
            if calls == 1:
                async with sessionmaker() as session_b:
                    await service_for(session_b, settings).finalize_salary(
                        authorizer=AUTHORIZER, teacher_id=teacher.id, month="2024-03"
                    )
            return found

        service_a._ledger.finalization_for_month = racing_lookup

        with pytest.raises(AlreadyFinalized):
            await service_a.finalize_salary(
                authorizer=AUTHORIZER, teacher_id=teacher.id, month="2024-03"
            )

    async with sessionmaker() as session:
        stmt = select(func.count()).select_from(SalaryFinalization)
        assert (await session.execute(stmt)).scalar_one() == 1
