"""
Recipient endpoints — saved beneficiaries for the authenticated user.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from novapay.api.deps import require_customer
from novapay.database import get_db
from novapay.models.recipient import Recipient
from novapay.models.transaction import Transaction
from novapay.models.user import User
from novapay.schemas.recipient import RecipientCreateRequest, RecipientResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _build_response(recipient: Recipient) -> RecipientResponse:
    return RecipientResponse(
        id=recipient.id,
        full_name=recipient.full_name,
        account_number=recipient.masked_account_number(),
        bank_name=recipient.bank_name,
        currency=recipient.currency,
        created_at=recipient.created_at,
    )


async def get_owned_recipient(db: AsyncSession, recipient_id: UUID, user: User) -> Recipient:
    """Load a recipient, enforcing that *user* owns it (404 otherwise)."""
    result = await db.execute(select(Recipient).where(Recipient.id == recipient_id))
    recipient = result.scalar_one_or_none()
    if recipient is None or recipient.user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Recipient not found",
        )
    return recipient


@router.post("/", response_model=RecipientResponse, status_code=status.HTTP_201_CREATED)
async def create_recipient(
    payload: RecipientCreateRequest,
    user: User = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
):
    recipient = Recipient(
        user_id=user.id,
        full_name=payload.full_name,
        bank_name=payload.bank_name,
        currency=payload.currency,
    )
    recipient.set_account_number(payload.account_number)
    db.add(recipient)
    await db.flush()

    logger.info("Recipient %s created for user %s", recipient.id, user.id)
    return _build_response(recipient)


@router.get("/", response_model=list[RecipientResponse])
async def list_recipients(
    user: User = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Recipient)
        .where(Recipient.user_id == user.id)
        .order_by(Recipient.created_at.desc())
    )
    return [_build_response(r) for r in result.scalars().all()]


@router.delete("/{recipient_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recipient(
    recipient_id: UUID,
    user: User = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
):
    """Delete a saved recipient that no transaction refers to."""
    recipient = await get_owned_recipient(db, recipient_id, user)

    in_use = (await db.execute(
        select(func.count(Transaction.id)).where(Transaction.recipient_id == recipient.id)
    )).scalar_one()
    if in_use:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Recipient has transactions and cannot be deleted",
        )

    await db.delete(recipient)
    await db.flush()
    logger.info("Recipient %s deleted by user %s", recipient.id, user.id)
