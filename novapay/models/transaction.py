"""
Transaction model — the immutable financial record of a transfer.

The amount, rate and fee columns are copied verbatim from the FX engine's
``OrderAmounts`` at creation; from then on the stored row, not the engine,
is authoritative. Only the status lifecycle changes afterwards:

    pending    -> processing | cancelled | failed
    processing -> completed | failed | cancelled
    failed     -> pending   (retry)
    completed, cancelled    (terminal)
"""

import enum
import random
import string
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
    Enum as SAEnum,
    event,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from novapay.database import Base
from novapay.services.fx_engine import OrderAmounts

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TransactionStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


# ---------------------------------------------------------------------------
# Status transition map
# ---------------------------------------------------------------------------

VALID_TRANSITIONS: dict[TransactionStatus, set[TransactionStatus]] = {
    TransactionStatus.PENDING: {
        TransactionStatus.PROCESSING,
        TransactionStatus.CANCELLED,
        TransactionStatus.FAILED,
    },
    TransactionStatus.PROCESSING: {
        TransactionStatus.COMPLETED,
        TransactionStatus.FAILED,
        TransactionStatus.CANCELLED,
    },
    TransactionStatus.COMPLETED: set(),
    TransactionStatus.FAILED: {
        TransactionStatus.PENDING,
    },
    TransactionStatus.CANCELLED: set(),
}


class InvalidStatusTransition(ValueError):
    """Raised when a status change is not allowed from the current status."""

    def __init__(self, from_status: TransactionStatus, to_status: TransactionStatus):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Invalid status transition from {from_status.value} to {to_status.value}"
        )


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("send_amount > 0", name="ck_transactions_send_positive"),
        CheckConstraint("receive_amount > 0", name="ck_transactions_receive_positive"),
        CheckConstraint("fee_amount >= 0", name="ck_transactions_fee_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )

    # Public reference
    transaction_id: Mapped[str] = mapped_column(
        String(16), unique=True, index=True, nullable=False,
    )

    # Parties
    sender_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), index=True, nullable=False,
    )
    recipient_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("recipients.id"), nullable=False,
    )

    # Amounts (from OrderAmounts, never recomputed)
    send_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2), nullable=False,
    )
    send_currency: Mapped[str] = mapped_column(String(3), nullable=False)
    receive_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2), nullable=False,
    )
    receive_currency: Mapped[str] = mapped_column(String(3), nullable=False)
    exchange_rate: Mapped[Decimal] = mapped_column(
        Numeric(precision=20, scale=10), nullable=False,
    )
    fee_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2), default=Decimal("0"),
    )
    fee_type: Mapped[str] = mapped_column(String(20), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2), nullable=False,
    )

    # Status
    status: Mapped[TransactionStatus] = mapped_column(
        SAEnum(TransactionStatus, name="transactionstatus"),
        default=TransactionStatus.PENDING,
    )
    reference: Mapped[str | None] = mapped_column(String(100))
    failure_reason: Mapped[str | None] = mapped_column(Text)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    sender = relationship("User", back_populates="transactions")
    recipient = relationship("Recipient")

    # ------------------------------------------------------------------
    # Construction from an engine result
    # ------------------------------------------------------------------

    @classmethod
    def from_order(
        cls,
        order: OrderAmounts,
        *,
        sender_id: uuid.UUID,
        recipient_id: uuid.UUID,
        send_currency: str,
        receive_currency: str,
        reference: str | None = None,
    ) -> "Transaction":
        """Build a PENDING transaction carrying *order*'s amounts verbatim."""
        return cls(
            sender_id=sender_id,
            recipient_id=recipient_id,
            send_amount=order.send_amount,
            send_currency=send_currency,
            receive_amount=order.receive_amount,
            receive_currency=receive_currency,
            exchange_rate=order.exchange_rate,
            fee_amount=order.fee_amount,
            fee_type=order.fee_type,
            total_amount=order.total_amount,
            reference=reference,
        )

    # ------------------------------------------------------------------
    # Reference generation
    # ------------------------------------------------------------------

    @staticmethod
    def generate_transaction_id() -> str:
        """Generate an NP-XXXXXXXXXX reference (10 uppercase alphanumeric chars)."""
        chars = string.ascii_uppercase + string.digits
        suffix = "".join(random.choices(chars, k=10))
        return f"NP-{suffix}"

    # ------------------------------------------------------------------
    # Status transition validation
    # ------------------------------------------------------------------

    @staticmethod
    def is_valid_transition(from_status: TransactionStatus, to_status: TransactionStatus) -> bool:
        """Check whether a status transition is allowed."""
        allowed = VALID_TRANSITIONS.get(from_status, set())
        return to_status in allowed

    def transition_to(
        self,
        new_status: TransactionStatus,
        *,
        failure_reason: str | None = None,
        reference: str | None = None,
    ) -> None:
        """
        Transition to *new_status* if the move is valid.

        Raises InvalidStatusTransition if it is not. Sets ``completed_at``
        on completion and records the optional failure reason / payment
        reference when given.
        """
        if not self.is_valid_transition(self.status, new_status):
            raise InvalidStatusTransition(self.status, new_status)
        self.status = new_status

        if failure_reason:
            self.failure_reason = failure_reason
        if reference:
            self.reference = reference
        if new_status == TransactionStatus.COMPLETED:
            self.completed_at = datetime.now(timezone.utc)

    def __repr__(self) -> str:
        return (
            f"<Transaction {self.transaction_id} "
            f"{self.send_amount} {self.send_currency}->{self.receive_currency} "
            f"status={self.status.value if self.status else 'N/A'}>"
        )


# ---------------------------------------------------------------------------
# Auto-set Python-side defaults on construction
# ---------------------------------------------------------------------------


@event.listens_for(Transaction, "init")
def _set_transaction_defaults(target, args, kwargs):
    if "id" not in kwargs:
        target.id = uuid.uuid4()
    if "transaction_id" not in kwargs:
        target.transaction_id = Transaction.generate_transaction_id()
    if "status" not in kwargs:
        target.status = TransactionStatus.PENDING
    if "fee_amount" not in kwargs:
        target.fee_amount = Decimal("0")
    if "created_at" not in kwargs:
        target.created_at = datetime.now(timezone.utc)
    if "updated_at" not in kwargs:
        target.updated_at = datetime.now(timezone.utc)
