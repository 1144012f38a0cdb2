"""
Pydantic schemas for currencies, exchange rates, and FX quotes.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _upper(v: str) -> str:
    return v.strip().upper()


# ---------------------------------------------------------------------------
# Currencies
# ---------------------------------------------------------------------------


class CurrencyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str
    name: str
    symbol: str
    flag_svg: str | None
    status: str

    @field_validator("status", mode="before")
    @classmethod
    def status_value(cls, v):
        return getattr(v, "value", v)


class CurrencyCreateRequest(BaseModel):
    """Schema for adding a currency to the catalog."""
    code: str = Field(..., min_length=3, max_length=3, examples=["NGN"])
    name: str = Field(..., min_length=1, max_length=100, examples=["Nigerian Naira"])
    symbol: str = Field(..., min_length=1, max_length=8, examples=["₦"])
    flag_svg: str | None = None

    @field_validator("code")
    @classmethod
    def normalise_code(cls, v: str) -> str:
        return _upper(v)


class CurrencyStatusUpdate(BaseModel):
    status: Literal["active", "inactive"]


# ---------------------------------------------------------------------------
# Exchange rates
# ---------------------------------------------------------------------------


class ExchangeRateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    from_currency: str
    to_currency: str
    rate: Decimal
    fee_type: str
    fee_amount: Decimal
    status: str

    @field_validator("status", mode="before")
    @classmethod
    def status_value(cls, v):
        return getattr(v, "value", v)


class ExchangeRateUpsert(BaseModel):
    """One row of a bulk rate upsert, keyed on the currency pair."""
    from_currency: str = Field(..., min_length=3, max_length=3, examples=["USD"])
    to_currency: str = Field(..., min_length=3, max_length=3, examples=["NGN"])
    rate: Decimal = Field(..., gt=0, examples=[1500])
    fee_type: Literal["free", "fixed", "percentage"] = "free"
    fee_amount: Decimal = Field(Decimal("0"), ge=0, examples=[5])
    status: Literal["active", "inactive"] = "active"

    @field_validator("from_currency", "to_currency")
    @classmethod
    def normalise_code(cls, v: str) -> str:
        return _upper(v)

    @field_validator("fee_amount")
    @classmethod
    def percentage_in_range(cls, v: Decimal, info) -> Decimal:
        if info.data.get("fee_type") == "percentage" and v > 100:
            raise ValueError("Percentage fee must be between 0 and 100")
        return v


class ExchangeRateUpsertResponse(BaseModel):
    success: bool
    count: int


# ---------------------------------------------------------------------------
# Quotes
# ---------------------------------------------------------------------------


class QuoteResponse(BaseModel):
    """Engine output for a proposed transfer."""
    direction: str
    from_currency: str
    to_currency: str
    send_amount: Decimal
    receive_amount: Decimal
    exchange_rate: Decimal
    fee_amount: Decimal
    fee_type: str
    total_amount: Decimal
    rates_loaded_at: datetime | None = None


class RateAvailability(BaseModel):
    from_currency: str
    to_currency: str
    available: bool
