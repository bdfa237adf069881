"""payroll ledger: staff users, students, teachers, advances, finalizations

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

MONEY = sa.Numeric(14, 2)


def upgrade() -> None:
    op.create_table(
        "staff_users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("username", sa.String(128), nullable=False),
        sa.Column("password_hash", sa.String(128), nullable=False),
        sa.Column("full_name", sa.String(256), nullable=False),
        sa.Column(
            "role",
            sa.Enum(
                "OWNER", "ADMIN", "OPERATOR", "PARTNER", "STAFF", "TEACHER", name="staffrole"
            ),
            nullable=False,
        ),
        sa.Column("permissions", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_staff_users"),
        sa.UniqueConstraint("username", name="uq_staff_users_username"),
    )
    op.create_table(
        "students",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("student_id", sa.String(64), nullable=False),
        sa.Column("barcode_id", sa.String(64), nullable=True),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("email", sa.String(256), nullable=True),
        sa.Column("password_hash", sa.String(128), nullable=True),
        sa.Column(
            "status",
            sa.Enum("Active", "Pending", "Alumni", "Expelled", "Suspended", name="studentstatus"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_students"),
        sa.UniqueConstraint("student_id", name="uq_students_student_id"),
        sa.UniqueConstraint("barcode_id", name="uq_students_barcode_id"),
    )
    op.create_index("ix_students_email", "students", ["email"])
    op.create_table(
        "teachers",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("email", sa.String(256), nullable=False),
        sa.Column("base_salary", MONEY, nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("base_salary >= 0", name="ck_teachers_base_salary_non_negative"),
        sa.PrimaryKeyConstraint("id", name="pk_teachers"),
        sa.UniqueConstraint("email", name="uq_teachers_email"),
    )
    op.create_table(
        "advances",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("teacher_id", sa.Uuid(), nullable=False),
        sa.Column("month", sa.String(7), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("issued_by", sa.String(256), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("amount > 0", name="ck_advances_amount_positive"),
        sa.ForeignKeyConstraint(
            ["teacher_id"], ["teachers.id"], name="fk_advances_teacher_id_teachers"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_advances"),
    )
    op.create_index("ix_advances_teacher_month", "advances", ["teacher_id", "month"])
    op.create_table(
        "salary_finalizations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("teacher_id", sa.Uuid(), nullable=False),
        sa.Column("month", sa.String(7), nullable=False),
        sa.Column("base_salary", MONEY, nullable=False),
        sa.Column("total_advances", MONEY, nullable=False),
        sa.Column("final_payment", MONEY, nullable=False),
        sa.Column("paid_at", sa.DateTime(), nullable=False),
        sa.Column("paid_by", sa.String(256), nullable=False),
        sa.ForeignKeyConstraint(
            ["teacher_id"], ["teachers.id"], name="fk_salary_finalizations_teacher_id_teachers"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_salary_finalizations"),
        sa.UniqueConstraint("teacher_id", "month", name="uq_salary_finalizations_teacher_month"),
    )


def downgrade() -> None:
    op.drop_table("salary_finalizations")
    op.drop_index("ix_advances_teacher_month", table_name="advances")
    op.drop_table("advances")
    op.drop_table("teachers")
    op.drop_index("ix_students_email", table_name="students")
    op.drop_table("students")
    op.drop_table("staff_users")
    sa.Enum(name="studentstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="staffrole").drop(op.get_bind(), checkfirst=True)
