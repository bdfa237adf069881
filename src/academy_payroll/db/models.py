"""
academy_payroll.db.models

Core persistence schema for the payroll ledger.

Responsibilities:
- Define ORM models:
  - StaffUser: administrative principals (password hash + permissions)
  - Student: student-portal principals
  - Teacher: employee aggregate root (base salary + ledger version)
  - Advance: append-only advance arena, keyed by (teacher, month)
  - SalaryFinalization: write-once monthly settlement per (teacher, month)
"""

from __future__ import annotations

import enum
import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid as SAUuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from academy_payroll.db.base import Base

MONEY = Numeric(14, 2, asdecimal=True)


def _utcnow() -> datetime:
    # Naive UTC timestamps keep SQLite and Postgres behavior identical.
    return datetime.now(tz=UTC).replace(tzinfo=None)


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class StaffRole(enum.StrEnum):
    owner = "OWNER"
    admin = "ADMIN"
    operator = "OPERATOR"
    partner = "PARTNER"
    staff = "STAFF"
    teacher = "TEACHER"


class StudentStatus(enum.StrEnum):
    active = "Active"
    pending = "Pending"
    alumni = "Alumni"
    expelled = "Expelled"
    suspended = "Suspended"


class StaffUser(Base):
    __tablename__ = "staff_users"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    username: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    full_name: Mapped[str] = mapped_column(String(256), nullable=False)
    role: Mapped[StaffRole] = mapped_column(
        Enum(StaffRole, values_callable=_enum_values), nullable=False
    )
    permissions: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=lambda: ["dashboard"]
    )
    is_active: Mapped[bool] = mapped_column(nullable=False, default=True)
    last_login: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)


class Student(Base):
    __tablename__ = "students"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    student_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    # Printed on ID cards, e.g. EDW-2026-001.
    barcode_id: Mapped[str | None] = mapped_column(String(64), nullable=True, unique=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    email: Mapped[str | None] = mapped_column(String(256), nullable=True, index=True)
    password_hash: Mapped[str | None] = mapped_column(String(128), nullable=True)
    status: Mapped[StudentStatus] = mapped_column(
        Enum(StudentStatus, values_callable=_enum_values),
        nullable=False,
        default=StudentStatus.active,
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)


class Teacher(Base):
    __tablename__ = "teachers"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    email: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    base_salary: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))

    # Bumped on every ledger write; concurrent writers lose with StaleDataError.
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    advances: Mapped[list[Advance]] = relationship(
        back_populates="teacher", order_by="Advance.id", lazy="raise"
    )
    finalizations: Mapped[list[SalaryFinalization]] = relationship(
        back_populates="teacher", order_by="SalaryFinalization.id", lazy="raise"
    )

    __mapper_args__ = {"version_id_col": version}
    __table_args__ = (CheckConstraint("base_salary >= 0", name="base_salary_non_negative"),)


class Advance(Base):
    __tablename__ = "advances"

    # Autoincrement id doubles as the chronological insertion order.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    teacher_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("teachers.id"), nullable=False
    )
    # "YYYY-MM", derived from created_at at grant time.
    month: Mapped[str] = mapped_column(String(7), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    issued_by: Mapped[str] = mapped_column(String(256), nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)

    teacher: Mapped[Teacher] = relationship(back_populates="advances", lazy="raise")

    __table_args__ = (
        Index("ix_advances_teacher_month", "teacher_id", "month"),
        CheckConstraint("amount > 0", name="amount_positive"),
    )


class SalaryFinalization(Base):
    __tablename__ = "salary_finalizations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    teacher_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("teachers.id"), nullable=False
    )
    month: Mapped[str] = mapped_column(String(7), nullable=False)
    base_salary: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    total_advances: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    final_payment: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    paid_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    paid_by: Mapped[str] = mapped_column(String(256), nullable=False)

    teacher: Mapped[Teacher] = relationship(back_populates="finalizations", lazy="raise")

    __table_args__ = (
        UniqueConstraint("teacher_id", "month", name="uq_salary_finalizations_teacher_month"),
    )


# --- Module Notes -----------------------------------------------------------
# Advances and finalizations are never updated or deleted by the service layer.
# Month totals are computed with SQL SUM over ix_advances_teacher_month.
