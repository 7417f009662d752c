from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_create_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "sessions",
        sa.Column("tenant", sa.String(), primary_key=True),
        sa.Column("identity", sa.String(), primary_key=True),
        sa.Column("state", sa.String(), nullable=True),
        sa.Column("order_items", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "cooldowns",
        sa.Column("tenant", sa.String(), primary_key=True),
        sa.Column("identity", sa.String(), primary_key=True),
        sa.Column("cooldown_until", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("tenant", sa.String(), nullable=False),
        sa.Column("identity", sa.String(), nullable=False),
        sa.Column("order_details", sa.Text(), nullable=False),
        sa.Column("total_price", sa.Numeric(12, 4), nullable=False),
        sa.Column("customer_info", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_orders_tenant", "orders", ["tenant"])
    op.create_index("ix_orders_identity", "orders", ["identity"])

    op.create_table(
        "processed_messages",
        sa.Column("tenant", sa.String(), primary_key=True),
        sa.Column("message_id", sa.String(), primary_key=True),
    )


def downgrade() -> None:
    op.drop_table("processed_messages")
    op.drop_index("ix_orders_identity", table_name="orders")
    op.drop_index("ix_orders_tenant", table_name="orders")
    op.drop_table("orders")
    op.drop_table("cooldowns")
    op.drop_table("sessions")
