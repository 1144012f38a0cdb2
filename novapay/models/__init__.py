"""SQLAlchemy ORM models for NovaPay."""

from novapay.models.user import User, UserStatus
from novapay.models.currency import CatalogStatus, Currency, ExchangeRate
from novapay.models.recipient import Recipient
from novapay.models.transaction import (
    InvalidStatusTransition,
    Transaction,
    TransactionStatus,
)

__all__ = [
    "User", "UserStatus",
    "CatalogStatus", "Currency", "ExchangeRate",
    "Recipient",
    "InvalidStatusTransition", "Transaction", "TransactionStatus",
]
