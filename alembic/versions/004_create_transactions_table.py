"""create transactions table

Revision ID: 004
Revises: 003
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ENUM, UUID

revision = "004"
down_revision = "003"
branch_labels = None
depends_on = None


def upgrade() -> None:
    transactionstatus = sa.Enum(
        "pending", "processing", "completed", "failed", "cancelled",
        name="transactionstatus",
    )
    transactionstatus.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "transactions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("transaction_id", sa.String(16), unique=True, index=True, nullable=False),
        sa.Column(
            "sender_id",
            UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            index=True,
            nullable=False,
        ),
        sa.Column(
            "recipient_id",
            UUID(as_uuid=True),
            sa.ForeignKey("recipients.id"),
            nullable=False,
        ),
        sa.Column("send_amount", sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column("send_currency", sa.String(3), nullable=False),
        sa.Column("receive_amount", sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column("receive_currency", sa.String(3), nullable=False),
        sa.Column("exchange_rate", sa.Numeric(precision=20, scale=10), nullable=False),
        sa.Column(
            "fee_amount",
            sa.Numeric(precision=18, scale=2),
            server_default="0",
            nullable=False,
        ),
        sa.Column("fee_type", sa.String(20), nullable=False),
        sa.Column("total_amount", sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column(
            "status",
            ENUM(name="transactionstatus", create_type=False),
            server_default="pending",
            nullable=False,
        ),
        sa.Column("reference", sa.String(100), nullable=True),
        sa.Column("failure_reason", sa.Text(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("send_amount > 0", name="ck_transactions_send_positive"),
        sa.CheckConstraint("receive_amount > 0", name="ck_transactions_receive_positive"),
        sa.CheckConstraint("fee_amount >= 0", name="ck_transactions_fee_non_negative"),
    )

    # Admin listing sorts by recency
    op.create_index("ix_transactions_created_at", "transactions", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_transactions_created_at", table_name="transactions")
    op.drop_table("transactions")
    sa.Enum(name="transactionstatus").drop(op.get_bind(), checkfirst=True)
