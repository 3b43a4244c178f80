"""Initial timesheet schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 00:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PROFILE_CHILD_TABLES = (
    "long_day_configs",
    "smart_working_configs",
    "time_class_configs",
    "daily_entries",
    "day_overrides",
    "paid_hours",
)


def _profile_fk() -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(["profile_id"], ["user_profiles.id"], ondelete="CASCADE")


def upgrade() -> None:
    op.create_table(
        "user_profiles",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("user_name", sa.String(length=255), nullable=False, server_default=sa.text("''")),
        sa.Column("initial_ferie", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("monthly_ferie_accrual", sa.Float(), nullable=False, server_default=sa.text("2.16")),
        sa.Column("bank_hours_initial", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("patron_saint_date", sa.String(length=5), nullable=False, server_default=sa.text("'09-04'")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )

    op.create_table(
        "long_day_configs",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("profile_id", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("days", sa.JSON(), nullable=False),
        _profile_fk(),
    )
    op.create_table(
        "smart_working_configs",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("profile_id", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("monthly_limit", sa.Integer(), nullable=False, server_default=sa.text("8")),
        _profile_fk(),
    )
    op.create_table(
        "time_class_configs",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("profile_id", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("type", sa.String(length=16), nullable=False),
        _profile_fk(),
    )

    op.create_table(
        "daily_entries",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("profile_id", sa.Integer(), nullable=False),
        sa.Column("day_date", sa.Date(), nullable=False),
        sa.Column("causal", sa.String(length=16), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("permesso_minutes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("spring_request", sa.Boolean(), nullable=True),
        _profile_fk(),
        sa.UniqueConstraint("profile_id", "day_date", name="uq_daily_entries_profile_day"),
    )
    op.create_index("ix_daily_entries_day_date", "daily_entries", ["day_date"], unique=False)

    op.create_table(
        "day_overrides",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("profile_id", sa.Integer(), nullable=False),
        sa.Column("day_date", sa.Date(), nullable=False),
        sa.Column("kind", sa.String(length=8), nullable=False),
        _profile_fk(),
        sa.UniqueConstraint("profile_id", "day_date", name="uq_day_overrides_profile_day"),
    )

    op.create_table(
        "paid_hours",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("profile_id", sa.Integer(), nullable=False),
        sa.Column("month", sa.String(length=7), nullable=False),
        sa.Column("minutes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _profile_fk(),
        sa.UniqueConstraint("profile_id", "month", name="uq_paid_hours_profile_month"),
    )

    for table_name in PROFILE_CHILD_TABLES:
        op.create_index(f"ix_{table_name}_profile_id", table_name, ["profile_id"], unique=False)

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "ts_utc",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("actor_type", sa.String(length=16), nullable=False),
        sa.Column("actor_id", sa.String(length=255), nullable=False),
        sa.Column("action", sa.String(length=255), nullable=False),
        sa.Column("entity_type", sa.String(length=255), nullable=True),
        sa.Column("entity_id", sa.String(length=255), nullable=True),
        sa.Column("success", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("details", sa.JSON(), nullable=False),
    )
    op.create_index("ix_audit_logs_ts_utc", "audit_logs", ["ts_utc"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_audit_logs_ts_utc", table_name="audit_logs")
    op.drop_table("audit_logs")
    for table_name in reversed(PROFILE_CHILD_TABLES):
        op.drop_index(f"ix_{table_name}_profile_id", table_name=table_name)
    op.drop_table("paid_hours")
    op.drop_table("day_overrides")
    op.drop_index("ix_daily_entries_day_date", table_name="daily_entries")
    op.drop_table("daily_entries")
    op.drop_table("time_class_configs")
    op.drop_table("smart_working_configs")
    op.drop_table("long_day_configs")
    op.drop_table("user_profiles")
