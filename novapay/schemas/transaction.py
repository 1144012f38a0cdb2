"""
Pydantic schemas for transaction creation, listing, and status changes.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Upper bound on a user-entered transfer amount, in either direction.
MAX_TRANSFER_AMOUNT = Decimal("1000000000000")


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


class TransactionCreateRequest(BaseModel):
    """Schema for creating a transfer to a saved recipient."""
    recipient_id: UUID
    amount: Decimal = Field(..., gt=0, le=MAX_TRANSFER_AMOUNT, examples=[200])
    direction: Literal["send", "receive"] = "send"
    send_currency: str = Field(..., min_length=3, max_length=3, examples=["USD"])
    receive_currency: str = Field(..., min_length=3, max_length=3, examples=["NGN"])

    @field_validator("send_currency", "receive_currency")
    @classmethod
    def normalise_code(cls, v: str) -> str:
        return v.strip().upper()


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class TransactionResponse(BaseModel):
    """Full stored transaction."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    transaction_id: str
    sender_id: UUID
    recipient_id: UUID
    send_amount: Decimal
    send_currency: str
    receive_amount: Decimal
    receive_currency: str
    exchange_rate: Decimal
    fee_amount: Decimal
    fee_type: str
    total_amount: Decimal
    status: str
    reference: str | None
    failure_reason: str | None
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime

    @field_validator("status", mode="before")
    @classmethod
    def status_value(cls, v):
        return getattr(v, "value", v)


class TransactionListResponse(BaseModel):
    """Paginated transaction list."""
    items: list[TransactionResponse]
    total: int
    page: int
    per_page: int


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


class TransactionStatusUpdate(BaseModel):
    """Admin status change."""
    status: Literal["pending", "processing", "completed", "failed", "cancelled"]
    failure_reason: str | None = Field(None, max_length=500)
    reference: str | None = Field(None, max_length=100)
