"""Initial schema: purchased_slots, rotation_leases, rotation_runs.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "purchased_slots",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("slot_number", sa.Integer, nullable=False),
        sa.Column("group_number", sa.Integer, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("payment_confirmed", sa.Boolean, nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("display_asset", sa.Text, nullable=True),
        sa.Column("business_name", sa.String(200), nullable=True),
        sa.Column("contact_email", sa.String(320), nullable=True),
        sa.Column("destination_url", sa.Text, nullable=True),
        sa.Column("last_rotation_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_rotation_seed", sa.BigInteger, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_purchased_slots_status_created", "purchased_slots", ["status", "created_at"],
    )

    op.create_table(
        "rotation_leases",
        sa.Column("name", sa.String(64), primary_key=True),
        sa.Column("holder", sa.String(64), nullable=False),
        sa.Column("acquired_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "rotation_runs",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("seed", sa.BigInteger, nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("rotated_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("overflow_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("batch_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("committed_batches", sa.Integer, nullable=False, server_default="0"),
        sa.Column("error_code", sa.String(50), nullable=True),
        sa.Column("error_message", sa.Text, nullable=True),
        sa.Column("duration_ms", sa.Integer, nullable=False, server_default="0"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("rotation_runs")
    op.drop_table("rotation_leases")
    op.drop_index("ix_purchased_slots_status_created", table_name="purchased_slots")
    op.drop_table("purchased_slots")
