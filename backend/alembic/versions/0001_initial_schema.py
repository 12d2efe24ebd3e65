"""Initial schema: users, reports, vitals, shared_access

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-01 00:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "reports",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("report_type", sa.String(), nullable=False),
        sa.Column("file_path", sa.String(), nullable=False),
        sa.Column("file_type", sa.String(), nullable=False),
        sa.Column("original_name", sa.String(), nullable=True),
        sa.Column("upload_date", sa.DateTime(), nullable=False),
        sa.Column("report_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("idx_report_user_id", "reports", ["user_id"])
    op.create_index("idx_report_type", "reports", ["report_type"])
    op.create_index("idx_report_date", "reports", ["report_date"])

    op.create_table(
        "vitals",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column(
            "report_id",
            sa.String(),
            sa.ForeignKey("reports.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("vital_type", sa.String(), nullable=False),
        sa.Column("value", sa.String(), nullable=False),
        sa.Column("unit", sa.String(), nullable=False),
        sa.Column("measured_at", sa.DateTime(), nullable=False),
    )
    op.create_index("idx_vital_report_id", "vitals", ["report_id"])
    op.create_index("idx_vital_type", "vitals", ["vital_type"])
    op.create_index("idx_vital_measured_at", "vitals", ["measured_at"])

    op.create_table(
        "shared_access",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column(
            "report_id",
            sa.String(),
            sa.ForeignKey("reports.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "shared_by",
            sa.String(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("shared_with_email", sa.String(), nullable=False),
        sa.Column(
            "shared_with_user_id",
            sa.String(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("access_level", sa.String(), nullable=False, server_default="read"),
        sa.Column("shared_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            "report_id", "shared_with_email", name="uq_share_report_email"
        ),
    )
    op.create_index("idx_share_report_id", "shared_access", ["report_id"])
    op.create_index("idx_share_email", "shared_access", ["shared_with_email"])
    op.create_index("idx_share_user_id", "shared_access", ["shared_with_user_id"])
    op.create_index("idx_share_shared_by", "shared_access", ["shared_by"])


def downgrade() -> None:
    op.drop_table("shared_access")
    op.drop_table("vitals")
    op.drop_table("reports")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
