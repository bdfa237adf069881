"""
academy_payroll.db.repositories.principals

Repository for authenticatable accounts (staff users and students).

Responsibilities:
- Load accounts for login (password hash included).
- Load accounts for request authentication (password hash never loaded).
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import defer

from academy_payroll.db.models import StaffRole, StaffUser, Student, StudentStatus


class StaffUserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        username: str,
        password_hash: str,
        full_name: str,
        role: StaffRole,
        permissions: list[str] | None = None,
        is_active: bool = True,
    ) -> StaffUser:
        user = StaffUser(
            username=username.strip().lower(),
            password_hash=password_hash,
            full_name=full_name,
            role=role,
            permissions=permissions if permissions is not None else ["dashboard"],
            is_active=is_active,
        )
        self._session.add(user)
        await self._session.flush()
        return user

    async def get_for_login(self, username: str) -> StaffUser | None:
        stmt = select(StaffUser).where(StaffUser.username == username.strip().lower())
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def get_public(self, user_id: uuid.UUID) -> StaffUser | None:
        # raiseload: touching password_hash on this projection is a bug, not a lazy load.
        stmt = (
            select(StaffUser)
            .options(defer(StaffUser.password_hash, raiseload=True))
            .where(StaffUser.id == user_id)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def record_login(self, user: StaffUser) -> None:
        user.last_login = datetime.now(tz=UTC).replace(tzinfo=None)
        await self._session.flush()


class StudentRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        student_id: str,
        name: str,
        password_hash: str | None,
        barcode_id: str | None = None,
        email: str | None = None,
        status: StudentStatus = StudentStatus.active,
    ) -> Student:
        student = Student(
            student_id=student_id,
            barcode_id=barcode_id,
            name=name,
            email=email.lower() if email else None,
            password_hash=password_hash,
            status=status,
        )
        self._session.add(student)
        await self._session.flush()
        return student

    async def get_for_login(self, username: str) -> Student | None:
        # Students sign in with any of their printed identifiers.
        stmt = select(Student).where(
            or_(
                Student.barcode_id == username,
                Student.student_id == username,
                func.lower(Student.email) == username.lower(),
            )
        )
        return (await self._session.execute(stmt)).scalars().first()

    async def get_public(self, student_pk: uuid.UUID) -> Student | None:
        stmt = (
            select(Student)
            .options(defer(Student.password_hash, raiseload=True))
            .where(Student.id == student_pk)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()
