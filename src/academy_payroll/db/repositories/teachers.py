"""
academy_payroll.db.repositories.teachers

Repository for `Teacher` aggregates.

Responsibilities:
- Create and fetch employees.
- Mark an aggregate as written so its version column is bumped on flush.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from academy_payroll.db.models import Teacher


class TeacherRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, name: str, email: str, base_salary: Decimal) -> Teacher:
        teacher = Teacher(name=name, email=email.lower(), base_salary=base_salary)
        self._session.add(teacher)
        await self._session.flush()
        return teacher

    async def get(self, teacher_id: uuid.UUID, *, for_update: bool = False) -> Teacher | None:
        # populate_existing: a retried write must see the row as committed by the winner.
        return await self._session.get(
            Teacher,
            teacher_id,
            with_for_update=for_update,
            populate_existing=True,
        )

    async def set_base_salary(self, teacher: Teacher, base_salary: Decimal) -> None:
        teacher.base_salary = base_salary
        await self._session.flush()

    def touch(self, teacher: Teacher) -> None:
        # Any dirty column makes the UPDATE carry `WHERE version = :seen`.
        teacher.updated_at = datetime.now(tz=UTC).replace(tzinfo=None)


# --- Module Notes -----------------------------------------------------------
# `for_update` takes a row lock on backends that support it (Postgres); SQLite
# ignores it and relies on the version check alone.
