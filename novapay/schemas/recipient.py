"""
Pydantic schemas for saved recipients.
"""

import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class RecipientCreateRequest(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=200, examples=["Chiamaka Obi"])
    account_number: str = Field(..., examples=["0123456789"])
    bank_name: str = Field(..., min_length=1, max_length=100, examples=["Access Bank"])
    currency: str = Field(..., min_length=3, max_length=3, examples=["NGN"])

    @field_validator("account_number")
    @classmethod
    def validate_account_number(cls, v: str) -> str:
        if not re.match(r"^[A-Z0-9]{6,34}$", v.replace(" ", "").upper()):
            raise ValueError("Account number must be 6-34 letters or digits")
        return v.replace(" ", "").upper()

    @field_validator("currency")
    @classmethod
    def normalise_code(cls, v: str) -> str:
        return v.strip().upper()


class RecipientResponse(BaseModel):
    id: UUID
    full_name: str
    account_number: str  # masked
    bank_name: str
    currency: str
    created_at: datetime
