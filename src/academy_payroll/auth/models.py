"""
academy_payroll.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Principal`) injected into endpoints.
- Define the closed set of principal classes a token can carry.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

ALL_PERMISSIONS: frozenset[str] = frozenset(
    {
        "dashboard",
        "admissions",
        "students",
        "teachers",
        "finance",
        "classes",
        "timetable",
        "sessions",
        "configuration",
        "users",
        "website",
        "payroll",
        "settlement",
        "gatekeeper",
        "frontdesk",
        "inquiries",
        "reports",
        "lectures",
    }
)

TEACHER_PERMISSIONS: frozenset[str] = frozenset({"dashboard", "timetable"})


class PrincipalRole(enum.StrEnum):
    admin = "admin"
    student = "student"


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity.
    """

    subject: str
    role: PrincipalRole
    display_name: str
    # Staff role (OWNER, ADMIN, ...) for admin principals; None for students.
    staff_role: str | None = None
    permissions: frozenset[str] = field(default_factory=frozenset)


def effective_permissions(staff_role: str, granted: list[str] | None) -> frozenset[str]:
    if staff_role == "OWNER":
        return ALL_PERMISSIONS
    if staff_role == "TEACHER":
        return TEACHER_PERMISSIONS
    return frozenset(p for p in (granted or ["dashboard"]) if p in ALL_PERMISSIONS)
