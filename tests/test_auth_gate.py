"""
tests.test_auth_gate

Authenticate-as-role behavior through real routes: credential transport,
401 vs 403 separation, and principal resolution.
"""

from __future__ import annotations

import uuid
from datetime import timedelta

import httpx
import pytest
from factories import bearer, create_staff, create_student, mint

from academy_payroll.auth.jwt import JwtConfig
from academy_payroll.db.models import StaffRole, StaffUser, StudentStatus

ADMIN_ROUTE = "/api/auth/me"
STUDENT_ROUTE = "/api/student-portal/me"


@pytest.mark.asyncio
async def test_missing_credential_is_401(client: httpx.AsyncClient) -> None:
    r = await client.get(ADMIN_ROUTE)
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Authentication required"}
    assert r.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_bad_credentials_share_the_missing_token_message(
    client: httpx.AsyncClient, owner: StaffUser, jwt_cfg: JwtConfig
) -> None:
    expired = mint(jwt_cfg, subject=str(owner.id), role="admin", ttl=timedelta(seconds=-60))
    valid = mint(jwt_cfg, subject=str(owner.id), role="admin")
    tampered = valid[:-4] + ("AAAA" if not valid.endswith("AAAA") else "BBBB")

    bodies = []
    for token in (expired, tampered, "garbage"):
        r = await client.get(ADMIN_ROUTE, headers=bearer(token))
        assert r.status_code == 401
        bodies.append(r.json())

    missing = (await client.get(ADMIN_ROUTE)).json()
    assert all(body == missing for body in bodies)


@pytest.mark.asyncio
async def test_student_token_on_admin_route_is_403(
    client: httpx.AsyncClient, sessionmaker, jwt_cfg: JwtConfig
) -> None:
    student = await create_student(sessionmaker)
    token = mint(jwt_cfg, subject=str(student.id), role="student")

    r = await client.get(ADMIN_ROUTE, headers=bearer(token))
    assert r.status_code == 403
    assert r.json()["message"] == "Access denied"

    r = await client.get(STUDENT_ROUTE, headers=bearer(token))
    assert r.status_code == 200
    assert r.json()["student"]["studentId"] == "STU-001"


@pytest.mark.asyncio
async def test_admin_token_on_student_route_is_403(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    r = await client.get(STUDENT_ROUTE, headers=admin_headers)
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_role_mismatch_is_checked_before_lookup(
    client: httpx.AsyncClient, jwt_cfg: JwtConfig
) -> None:
    # Subject does not exist anywhere: still a 403, the token is valid but for the wrong gate.
    token = mint(jwt_cfg, subject=str(uuid.uuid4()), role="student")
    r = await client.get(ADMIN_ROUTE, headers=bearer(token))
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_unknown_subject_is_401(client: httpx.AsyncClient, jwt_cfg: JwtConfig) -> None:
    for subject in (str(uuid.uuid4()), "not-a-uuid"):
        token = mint(jwt_cfg, subject=subject, role="admin")
        r = await client.get(ADMIN_ROUTE, headers=bearer(token))
        assert r.status_code == 401


@pytest.mark.asyncio
async def test_inactive_staff_and_suspended_students_are_401(
    client: httpx.AsyncClient, sessionmaker, jwt_cfg: JwtConfig
) -> None:
    staff = await create_staff(sessionmaker, username="former", is_active=False)
    student = await create_student(
        sessionmaker, student_id="STU-002", barcode_id=None, status=StudentStatus.suspended
    )

    r = await client.get(ADMIN_ROUTE, headers=bearer(mint(jwt_cfg, subject=str(staff.id), role="admin")))
    assert r.status_code == 401
    r = await client.get(
        STUDENT_ROUTE, headers=bearer(mint(jwt_cfg, subject=str(student.id), role="student"))
    )
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_cookie_is_checked_before_bearer_header(
    client: httpx.AsyncClient, owner: StaffUser, jwt_cfg: JwtConfig
) -> None:
    token = mint(jwt_cfg, subject=str(owner.id), role="admin")

    client.cookies.set("authToken", token)
    r = await client.get(ADMIN_ROUTE, headers=bearer("garbage"))
    assert r.status_code == 200

    # "token" is read before "authToken", and a bad cookie is not rescued by a good header.
    client.cookies.set("token", "garbage")
    r = await client.get(ADMIN_ROUTE, headers=bearer(token))
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_principal_profile_never_exposes_password_hash(
    client: httpx.AsyncClient, admin_headers: dict[str, str]
) -> None:
    r = await client.get(ADMIN_ROUTE, headers=admin_headers)
    assert r.status_code == 200
    user = r.json()["user"]
    assert "passwordHash" not in user and "password" not in user
    assert user["role"] == "OWNER"
    # OWNER carries every permission, including payroll.
    assert "payroll" in user["permissions"]


@pytest.mark.asyncio
async def test_teacher_staff_permissions_are_fixed(
    client: httpx.AsyncClient, sessionmaker, jwt_cfg: JwtConfig
) -> None:
    staff = await create_staff(sessionmaker, username="tutor", role=StaffRole.teacher)
    r = await client.get(ADMIN_ROUTE, headers=bearer(mint(jwt_cfg, subject=str(staff.id), role="admin")))
    assert r.json()["user"]["permissions"] == ["dashboard", "timetable"]
