"""initial payroll schema: users/rbac, employees, monthly salaries, adjustments

Revision ID: 3f1a9c2d7e40
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3f1a9c2d7e40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


employee_status = sa.Enum("active", "inactive", "on_leave", name="employee_status_enum")
salary_status = sa.Enum("pending", "paid", "cancelled", name="salary_status_enum")
adjustment_type = sa.Enum("deduction", "bonus", name="adjustment_type_enum")


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "roles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(length=50), nullable=False, unique=True),
        sa.Column("name", sa.String(length=100), nullable=True),
    )
    op.create_table(
        "permissions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(length=120), nullable=False, unique=True),
        sa.Column("name", sa.String(length=150), nullable=True),
    )
    op.create_table(
        "user_roles",
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("role_id", sa.Integer(), sa.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    )
    op.create_table(
        "role_permissions",
        sa.Column("role_id", sa.Integer(), sa.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("permission_id", sa.Integer(), sa.ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "employees",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("employee_code", sa.String(length=50), nullable=True, unique=True),
        sa.Column("specialization", sa.String(length=40), nullable=True),
        sa.Column("hire_date", sa.Date(), nullable=True),
        sa.Column("salary", sa.Numeric(10, 2), nullable=True),
        sa.Column("work_type", sa.String(length=16), nullable=False, server_default="remote"),
        sa.Column("status", employee_status, nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_emp_status", "employees", ["status"])

    op.create_table(
        "monthly_salaries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("employee_id", sa.Integer(), sa.ForeignKey("employees.id"), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("base_salary", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_deductions", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("total_bonuses", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("net_salary", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", salary_status, nullable=False, server_default="pending"),
        sa.Column("paid_at", sa.DateTime(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("employee_id", "month", "year", name="uq_salary_employee_period"),
        sa.CheckConstraint("month >= 1 AND month <= 12", name="ck_salary_month_range"),
    )
    op.create_index("ix_monthly_salaries_employee_id", "monthly_salaries", ["employee_id"])
    op.create_index("ix_salary_period", "monthly_salaries", ["year", "month"])

    op.create_table(
        "salary_adjustments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("salary_id", sa.Integer(),
                  sa.ForeignKey("monthly_salaries.id", ondelete="CASCADE"), nullable=False),
        sa.Column("employee_id", sa.Integer(), sa.ForeignKey("employees.id"), nullable=False),
        sa.Column("type", adjustment_type, nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("reason", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("amount > 0", name="ck_adjustment_amount_positive"),
    )
    op.create_index("ix_salary_adjustments_salary_id", "salary_adjustments", ["salary_id"])
    op.create_index("ix_salary_adjustments_employee_id", "salary_adjustments", ["employee_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_salary_adjustments_employee_id", table_name="salary_adjustments")
    op.drop_index("ix_salary_adjustments_salary_id", table_name="salary_adjustments")
    op.drop_table("salary_adjustments")

    op.drop_index("ix_salary_period", table_name="monthly_salaries")
    op.drop_index("ix_monthly_salaries_employee_id", table_name="monthly_salaries")
    op.drop_table("monthly_salaries")

    op.drop_index("ix_emp_status", table_name="employees")
    op.drop_table("employees")

    op.drop_table("role_permissions")
    op.drop_table("user_roles")
    op.drop_table("permissions")
    op.drop_table("roles")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    adjustment_type.drop(bind, checkfirst=True)
    salary_status.drop(bind, checkfirst=True)
    employee_status.drop(bind, checkfirst=True)
