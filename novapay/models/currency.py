"""
Currency and ExchangeRate models — the operator-maintained rate catalog.

Rates are directional: ``rate`` is the amount of ``to_currency`` per one
unit of ``from_currency``. At most one row exists per ordered pair; the
reverse pair is a separate row with its own fee policy.
"""

import enum
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Enum as SAEnum,
    event,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from novapay.database import Base
from novapay.services.fx_engine import FeeType, RATE_STATUS_ACTIVE

DEFAULT_FLAG_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="20" height="20" '
    'viewBox="0 0 32 32"><rect width="32" height="32" fill="#ccc"/></svg>'
)


class CatalogStatus(str, enum.Enum):
    ACTIVE = RATE_STATUS_ACTIVE
    INACTIVE = "inactive"


# ---------------------------------------------------------------------------
# Currency
# ---------------------------------------------------------------------------


class Currency(Base):
    __tablename__ = "currencies"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    code: Mapped[str] = mapped_column(
        String(3), unique=True, index=True, nullable=False,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    symbol: Mapped[str] = mapped_column(String(8), nullable=False)
    flag_svg: Mapped[str | None] = mapped_column(Text)
    status: Mapped[CatalogStatus] = mapped_column(
        SAEnum(CatalogStatus, name="catalogstatus"), default=CatalogStatus.ACTIVE,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<Currency {self.code} status={self.status.value if self.status else 'N/A'}>"


# ---------------------------------------------------------------------------
# ExchangeRate
# ---------------------------------------------------------------------------


class ExchangeRate(Base):
    __tablename__ = "exchange_rates"
    __table_args__ = (
        UniqueConstraint("from_currency", "to_currency", name="uq_exchange_rates_pair"),
        CheckConstraint("rate > 0", name="ck_exchange_rates_rate_positive"),
        CheckConstraint("fee_amount >= 0", name="ck_exchange_rates_fee_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    from_currency: Mapped[str] = mapped_column(String(3), index=True, nullable=False)
    to_currency: Mapped[str] = mapped_column(String(3), index=True, nullable=False)

    rate: Mapped[Decimal] = mapped_column(
        Numeric(precision=20, scale=10), nullable=False,
    )

    # Stored as plain text; the engine charges nothing for values it
    # does not recognise.
    fee_type: Mapped[str] = mapped_column(String(20), default=FeeType.FREE.value)
    fee_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2), default=Decimal("0"),
    )

    status: Mapped[CatalogStatus] = mapped_column(
        SAEnum(CatalogStatus, name="catalogstatus"), default=CatalogStatus.ACTIVE,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return (
            f"<ExchangeRate {self.from_currency}->{self.to_currency} "
            f"{self.rate} fee={self.fee_type}:{self.fee_amount}>"
        )


# ---------------------------------------------------------------------------
# Auto-set Python-side defaults on construction
# ---------------------------------------------------------------------------


@event.listens_for(Currency, "init")
def _set_currency_defaults(target, args, kwargs):
    if "id" not in kwargs:
        target.id = uuid.uuid4()
    if "status" not in kwargs:
        target.status = CatalogStatus.ACTIVE
    if "flag_svg" not in kwargs:
        target.flag_svg = DEFAULT_FLAG_SVG
    if "created_at" not in kwargs:
        target.created_at = datetime.now(timezone.utc)
    if "updated_at" not in kwargs:
        target.updated_at = datetime.now(timezone.utc)


@event.listens_for(ExchangeRate, "init")
def _set_rate_defaults(target, args, kwargs):
    if "id" not in kwargs:
        target.id = uuid.uuid4()
    if "fee_type" not in kwargs:
        target.fee_type = FeeType.FREE.value
    if "fee_amount" not in kwargs:
        target.fee_amount = Decimal("0")
    if "status" not in kwargs:
        target.status = CatalogStatus.ACTIVE
    if "created_at" not in kwargs:
        target.created_at = datetime.now(timezone.utc)
    if "updated_at" not in kwargs:
        target.updated_at = datetime.now(timezone.utc)
