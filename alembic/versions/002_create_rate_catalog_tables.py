"""create currencies and exchange_rates tables

Revision ID: 002
Revises: 001
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ENUM, UUID

revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Shared by currencies and exchange_rates
    catalogstatus = sa.Enum("active", "inactive", name="catalogstatus")
    catalogstatus.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "currencies",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("code", sa.String(3), unique=True, index=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("symbol", sa.String(8), nullable=False),
        sa.Column("flag_svg", sa.Text(), nullable=True),
        sa.Column(
            "status",
            ENUM(name="catalogstatus", create_type=False),
            server_default="active",
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "exchange_rates",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("from_currency", sa.String(3), index=True, nullable=False),
        sa.Column("to_currency", sa.String(3), index=True, nullable=False),
        sa.Column("rate", sa.Numeric(precision=20, scale=10), nullable=False),
        sa.Column("fee_type", sa.String(20), server_default="free", nullable=False),
        sa.Column(
            "fee_amount",
            sa.Numeric(precision=18, scale=2),
            server_default="0",
            nullable=False,
        ),
        sa.Column(
            "status",
            ENUM(name="catalogstatus", create_type=False),
            server_default="active",
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("from_currency", "to_currency", name="uq_exchange_rates_pair"),
        sa.CheckConstraint("rate > 0", name="ck_exchange_rates_rate_positive"),
        sa.CheckConstraint("fee_amount >= 0", name="ck_exchange_rates_fee_non_negative"),
    )


def downgrade() -> None:
    op.drop_table("exchange_rates")
    op.drop_table("currencies")
    sa.Enum(name="catalogstatus").drop(op.get_bind(), checkfirst=True)
