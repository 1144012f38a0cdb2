"""
Recipient model — a saved beneficiary that a user sends money to.

The beneficiary account number is Fernet-encrypted at rest.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String, event
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from novapay.core.security import decrypt_value, encrypt_value
from novapay.database import Base


class Recipient(Base):
    __tablename__ = "recipients"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), index=True, nullable=False,
    )
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    account_number: Mapped[str] = mapped_column(String(256), nullable=False)  # encrypted
    bank_name: Mapped[str] = mapped_column(String(100), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    user = relationship("User", back_populates="recipients")

    def set_account_number(self, plaintext: str) -> None:
        """Encrypt and store the beneficiary account number."""
        self.account_number = encrypt_value(plaintext)

    def get_account_number(self) -> str:
        """Decrypt and return the beneficiary account number."""
        return decrypt_value(self.account_number)

    def masked_account_number(self) -> str:
        plain = self.get_account_number()
        return f"****{plain[-4:]}"

    def __repr__(self) -> str:
        return f"<Recipient {self.full_name!r} {self.currency}>"


@event.listens_for(Recipient, "init")
def _set_recipient_defaults(target, args, kwargs):
    if "id" not in kwargs:
        target.id = uuid.uuid4()
    if "created_at" not in kwargs:
        target.created_at = datetime.now(timezone.utc)
    if "updated_at" not in kwargs:
        target.updated_at = datetime.now(timezone.utc)
