"""Add the five approval-request tables.

Revision ID: 20261019100000
Revises: 20261019000000
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20261019100000"
down_revision: Union[str, None] = "20261019000000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

REQUEST_TABLES = (
    "registration_requests",
    "info_edit_requests",
    "deactivation_requests",
    "reactivation_requests",
    "role_change_requests",
)


def _lifecycle_columns() -> list:
    """Columns shared by every request table (see RequestMixin)."""
    return [
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("state", sa.String(length=16), nullable=False, server_default="pendiente"),
        sa.Column("submitted_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("review_comment", sa.Text(), nullable=True),
        sa.Column("submitter_id", sa.Integer(), nullable=True),
        sa.Column("target_account_id", sa.Integer(), nullable=True),
        sa.Column("reviewer_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["submitter_id"], ["accounts.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["target_account_id"], ["accounts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["reviewer_id"], ["accounts.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    ]


def upgrade() -> None:
    op.create_table(
        "registration_requests",
        *_lifecycle_columns(),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("house_number", sa.String(length=10), nullable=True),
    )
    op.create_index(op.f("ix_registration_requests_email"), "registration_requests", ["email"], unique=False)

    op.create_table(
        "info_edit_requests",
        *_lifecycle_columns(),
        sa.Column("current_full_name", sa.String(length=255), nullable=False),
        sa.Column("new_full_name", sa.String(length=255), nullable=True),
        sa.Column("current_email", sa.String(length=255), nullable=False),
        sa.Column("new_email", sa.String(length=255), nullable=True),
        sa.Column("current_phone", sa.String(length=20), nullable=True),
        sa.Column("new_phone", sa.String(length=20), nullable=True),
    )

    op.create_table(
        "deactivation_requests",
        *_lifecycle_columns(),
        sa.Column("motivo", sa.Text(), nullable=False),
    )

    op.create_table(
        "reactivation_requests",
        *_lifecycle_columns(),
        sa.Column("motivo", sa.Text(), nullable=False),
        sa.Column("house_number", sa.String(length=10), nullable=False),
    )

    op.create_table(
        "role_change_requests",
        *_lifecycle_columns(),
        sa.Column("current_role", sa.String(length=50), nullable=False),
        sa.Column("new_role", sa.String(length=50), nullable=False),
        sa.Column("change_type", sa.String(length=32), nullable=False),
        sa.Column("motivo", sa.Text(), nullable=True),
    )

    for table in REQUEST_TABLES:
        op.create_index(op.f(f"ix_{table}_state"), table, ["state"], unique=False)
        op.create_index(op.f(f"ix_{table}_target_account_id"), table, ["target_account_id"], unique=False)


def downgrade() -> None:
    for table in reversed(REQUEST_TABLES):
        op.drop_index(op.f(f"ix_{table}_target_account_id"), table_name=table)
        op.drop_index(op.f(f"ix_{table}_state"), table_name=table)
    op.drop_index(op.f("ix_registration_requests_email"), table_name="registration_requests")
    for table in reversed(REQUEST_TABLES):
        op.drop_table(table)
