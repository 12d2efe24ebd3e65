"""Add vitals.entry_order

Revision ID: 0002_vital_entry_order
Revises: 0001_initial_schema
Create Date: 2026-10-19 00:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0002_vital_entry_order"
down_revision: Union[str, None] = "0001_initial_schema"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    with op.batch_alter_table("vitals") as batch_op:
        batch_op.add_column(
            sa.Column("entry_order", sa.Integer(), nullable=False, server_default="0")
        )
        batch_op.create_index("idx_vital_entry_order", ["entry_order"])


def downgrade() -> None:
    with op.batch_alter_table("vitals") as batch_op:
        batch_op.drop_index("idx_vital_entry_order")
        batch_op.drop_column("entry_order")
