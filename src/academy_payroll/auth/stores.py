"""
academy_payroll.auth.stores

Principal stores: resolve a token subject into a `Principal`.

Responsibilities:
- Load the account behind a subject without its password column.
- Refuse accounts that may no longer sign in (inactive staff, non-Active students).
"""

from __future__ import annotations

import uuid
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from academy_payroll.auth.models import Principal, PrincipalRole, effective_permissions
from academy_payroll.db.models import StaffUser, Student, StudentStatus
from academy_payroll.db.repositories.principals import StaffUserRepo, StudentRepo


class PrincipalStore(Protocol):
    async def load(self, session: AsyncSession, subject: str) -> Principal | None: ...


def _as_uuid(subject: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(subject)
    except ValueError:
        return None


def staff_principal(user: StaffUser) -> Principal:
    return Principal(
        subject=str(user.id),
        role=PrincipalRole.admin,
        display_name=user.full_name,
        staff_role=user.role.value,
        permissions=effective_permissions(user.role.value, user.permissions),
    )


def student_principal(student: Student) -> Principal:
    return Principal(
        subject=str(student.id),
        role=PrincipalRole.student,
        display_name=student.name,
    )


class StaffPrincipalStore:
    async def load(self, session: AsyncSession, subject: str) -> Principal | None:
        user_id = _as_uuid(subject)
        if user_id is None:
            return None
        user = await StaffUserRepo(session).get_public(user_id)
        if user is None or not user.is_active:
            return None
        return staff_principal(user)


class StudentPrincipalStore:
    async def load(self, session: AsyncSession, subject: str) -> Principal | None:
        student_pk = _as_uuid(subject)
        if student_pk is None:
            return None
        student = await StudentRepo(session).get_public(student_pk)
        if student is None or student.status is not StudentStatus.active:
            return None
        return student_principal(student)
