"""
academy_payroll.api.routers.student_portal

Student portal session endpoints.

Responsibilities:
- Student login by barcode id, student id or email (+ `studentToken` cookie).
- Current-student profile and logout behind the student gate.
"""

from __future__ import annotations

import uuid
from datetime import timedelta

from fastapi import APIRouter, Depends, Response
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from academy_payroll.api.deps import db_session, settings_dep
from academy_payroll.api.schemas import CamelModel
from academy_payroll.auth.deps import STUDENT_COOKIES, require_student
from academy_payroll.auth.jwt import JwtConfig, issue_token
from academy_payroll.auth.models import Principal, PrincipalRole
from academy_payroll.auth.passwords import verify_password
from academy_payroll.db.models import Student, StudentStatus
from academy_payroll.db.repositories.principals import StudentRepo
from academy_payroll.errors import Forbidden, LoginFailed
from academy_payroll.observability.logging import get_logger
from academy_payroll.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/api/student-portal", tags=["student-portal"])

SESSION_COOKIE = STUDENT_COOKIES[0]


class StudentLoginRequest(CamelModel):
    username: str = Field(min_length=1, max_length=256)
    password: str = Field(min_length=1, max_length=72)


class StudentProfile(CamelModel):
    id: uuid.UUID
    student_id: str
    barcode_id: str | None
    name: str
    email: str | None
    status: str


class StudentLoginResponse(CamelModel):
    success: bool = True
    message: str
    student: StudentProfile
    token: str


class StudentProfileResponse(CamelModel):
    success: bool = True
    student: StudentProfile


def _profile(student: Student) -> StudentProfile:
    return StudentProfile(
        id=student.id,
        student_id=student.student_id,
        barcode_id=student.barcode_id,
        name=student.name,
        email=student.email,
        status=student.status.value,
    )


@router.post("/login", response_model=StudentLoginResponse)
async def student_login(
    body: StudentLoginRequest,
    response: Response,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> StudentLoginResponse:
    student = await StudentRepo(session).get_for_login(body.username.strip())
    if student is None:
        log.info("login_failed", principal_role="student", reason="unknown_student")
        raise LoginFailed("unknown_student")
    if student.status is not StudentStatus.active:
        log.info("login_failed", principal_role="student", reason="not_active")
        raise Forbidden(
            "student_not_active",
            message=(
                "Account is pending approval. Please visit the administration office "
                "to receive your credentials."
            ),
        )
    if not await verify_password(body.password, student.password_hash):
        log.info("login_failed", principal_role="student", reason="bad_credentials")
        raise LoginFailed("bad_credentials")

    ttl = timedelta(minutes=settings.student_token_ttl_minutes)
    token = issue_token(
        cfg=JwtConfig.from_settings(settings),
        subject=str(student.id),
        role=PrincipalRole.student.value,
        ttl=ttl,
        extra={"studentId": student.student_id, "barcodeId": student.barcode_id},
    )
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=int(ttl.total_seconds()),
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    log.info("login_succeeded", principal_role="student", student_pk=str(student.id))
    return StudentLoginResponse(
        message=f"Welcome, {student.name}!", student=_profile(student), token=token
    )


@router.get("/me", response_model=StudentProfileResponse)
async def student_me(
    principal: Principal = Depends(require_student),
    session: AsyncSession = Depends(db_session),
) -> StudentProfileResponse:
    student = await StudentRepo(session).get_public(uuid.UUID(principal.subject))
    if student is None:
        raise LoginFailed("principal_vanished")
    return StudentProfileResponse(student=_profile(student))


@router.post("/logout")
async def student_logout(
    response: Response,
    principal: Principal = Depends(require_student),
) -> dict[str, object]:
    response.delete_cookie(SESSION_COOKIE)
    log.info("logout", principal_role="student", student_pk=principal.subject)
    return {"success": True, "message": "Logged out successfully"}
