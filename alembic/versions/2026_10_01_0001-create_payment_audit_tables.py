"""create_payment_audit_tables

Revision ID: 5e1c7a9d2b40
Revises:
Create Date: 2026-10-01 00:01:00.000000

This migration adds:
- users, bookings and payment_verifications tables
- payment_audit_logs table with lookup indexes
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "5e1c7a9d2b40"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("accommodation_title", sa.String(length=255), nullable=False),
        sa.Column("check_in_date", sa.Date(), nullable=True),
        sa.Column("total_months", sa.Integer(), nullable=False),
        sa.Column("paid_months", sa.Integer(), nullable=False),
        sa.Column("payment_status", sa.String(length=50), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_bookings_id"), "bookings", ["id"], unique=False)
    op.create_index(op.f("ix_bookings_user_id"), "bookings", ["user_id"], unique=False)

    op.create_table(
        "payment_verifications",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("booking_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("month_number", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("currency", sa.String(length=50), nullable=False),
        sa.Column("payment_method", sa.String(length=50), nullable=False),
        sa.Column("transaction_reference", sa.String(length=100), nullable=True),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("user_notes", sa.Text(), nullable=True),
        # Uploaded proof
        sa.Column("proof_filename", sa.String(length=255), nullable=False),
        sa.Column("proof_size", sa.Integer(), nullable=False),
        sa.Column("proof_mimetype", sa.String(length=100), nullable=False),
        # Review
        sa.Column("verification_status", sa.String(length=50), nullable=False),
        sa.Column("verified_by", sa.Uuid(), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("admin_notes", sa.String(length=1000), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        # Receipt
        sa.Column("receipt_number", sa.String(length=100), nullable=True),
        sa.Column("receipt_filename", sa.String(length=255), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["booking_id"], ["bookings.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["verified_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("receipt_number"),
    )
    op.create_index(
        op.f("ix_payment_verifications_id"), "payment_verifications", ["id"], unique=False
    )
    op.create_index(
        op.f("ix_payment_verifications_booking_id"),
        "payment_verifications",
        ["booking_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_payment_verifications_user_id"),
        "payment_verifications",
        ["user_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_payment_verifications_verification_status"),
        "payment_verifications",
        ["verification_status"],
        unique=False,
    )

    op.create_table(
        "payment_audit_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        # Lookup references (kept when the target is deleted)
        sa.Column("payment_verification_id", sa.Uuid(), nullable=True),
        sa.Column("booking_id", sa.Uuid(), nullable=True),
        sa.Column("performed_by", sa.Uuid(), nullable=False),
        # What happened
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        # Snapshots (JSONB for PostgreSQL)
        sa.Column(
            "previous_state", postgresql.JSONB(astext_type=sa.Text()), nullable=True
        ),
        sa.Column("new_state", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("severity", sa.String(length=50), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("tags", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.ForeignKeyConstraint(
            ["payment_verification_id"],
            ["payment_verifications.id"],
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(["booking_id"], ["bookings.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["performed_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_payment_audit_logs_id"), "payment_audit_logs", ["id"], unique=False
    )
    op.create_index(
        op.f("ix_payment_audit_logs_timestamp"),
        "payment_audit_logs",
        ["timestamp"],
        unique=False,
    )
    for name, column in (
        ("payment", "payment_verification_id"),
        ("booking", "booking_id"),
        ("performer", "performed_by"),
        ("action", "action"),
        ("category", "category"),
        ("severity", "severity"),
    ):
        op.create_index(
            f"ix_payment_audit_logs_{name}_ts",
            "payment_audit_logs",
            [column, "timestamp"],
            unique=False,
        )


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table("payment_audit_logs")
    op.drop_table("payment_verifications")
    op.drop_table("bookings")
    op.drop_table("users")
