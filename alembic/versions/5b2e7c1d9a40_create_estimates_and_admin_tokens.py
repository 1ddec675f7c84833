"""create estimates and admin_tokens

Revision ID: 5b2e7c1d9a40
Revises:
Create Date: 2026-10-19 10:12:41.204913

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision: str = '5b2e7c1d9a40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "estimates",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("work_qty", sa.BigInteger(), nullable=False),
        sa.Column("carton_qty", sa.BigInteger(), nullable=False),
        sa.Column("weight_per_carton", sa.Float(), nullable=False),
        sa.Column("total_weight_kg", sa.Float(), nullable=False),
        sa.Column("work_location", sa.Text(), nullable=False),
        sa.Column("product_type", sa.Text(), nullable=True),
        sa.Column("work_method", sa.Text(), nullable=True),
        sa.Column("urgency", sa.Text(), nullable=False),
        sa.Column("ref_info", sa.Text(), nullable=True),
        sa.Column("memo", sa.Text(), nullable=True),
        sa.Column("contact_name", sa.Text(), nullable=False),
        sa.Column("contact_phone", sa.Text(), nullable=False),
        sa.Column("contact_email", sa.Text(), nullable=False),
        sa.Column("base_fee", sa.BigInteger(), nullable=False),
        sa.Column("carton_fee", sa.BigInteger(), nullable=False),
        sa.Column("transport_fee", sa.BigInteger(), nullable=False),
        sa.Column("rule_adj_rate", sa.Float(), nullable=False),
        sa.Column("rule_fee", sa.BigInteger(), nullable=False),
        sa.Column("ai_adj_rate", sa.Float(), nullable=False),
        sa.Column("total_adj_rate", sa.Float(), nullable=False),
        sa.Column("total_fee", sa.BigInteger(), nullable=False),
        sa.Column("lead_time_days", sa.Integer(), nullable=False),
        sa.Column("notices", sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql"), nullable=False),
        sa.Column("ai_comment", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_estimates_created_at", "estimates", ["created_at"])

    op.create_table(
        "admin_tokens",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("role", sa.Text(), nullable=False, unique=True),
        sa.Column("refresh_token", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("admin_tokens")
    op.drop_index("ix_estimates_created_at", table_name="estimates")
    op.drop_table("estimates")
