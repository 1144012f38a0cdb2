"""
Transaction endpoints — create, list, get, and cancel transfers.

Create flow:
  1. Rate-limit the user
  2. Check the recipient belongs to the user
  3. Load the active rate catalog (cached)
  4. Run the FX engine; any engine error is a 400 and nothing is written
  5. Persist the transaction (PENDING) with the engine's amounts verbatim
  6. Enqueue the receipt and the operator alert as separate tasks
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from novapay.api.deps import get_rate_cache, require_customer
from novapay.api.recipients import get_owned_recipient
from novapay.database import get_db
from novapay.models.transaction import (
    InvalidStatusTransition,
    Transaction,
    TransactionStatus,
)
from novapay.models.user import User
from novapay.redis_client import get_redis
from novapay.schemas.transaction import (
    TransactionCreateRequest,
    TransactionListResponse,
    TransactionResponse,
)
from novapay.services import transaction_service
from novapay.services.fx_engine import FXEngineError
from novapay.services.rate_catalog import RateCatalogCache
from novapay.services.rate_limit import check_transaction_rate_limit
from novapay.tasks.notification_tasks import (
    send_admin_transaction_alert,
    send_status_update,
    send_transaction_created,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _get_owned_transaction(db: AsyncSession, transaction_id: str, user: User) -> Transaction:
    result = await db.execute(
        select(Transaction).where(Transaction.transaction_id == transaction_id)
    )
    txn = result.scalar_one_or_none()

    if txn is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Transaction not found",
        )

    if txn.sender_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have access to this transaction",
        )

    return txn


def notification_details(txn: Transaction) -> dict:
    """JSON-safe summary of a transaction for the e-mail task."""
    return {
        "transaction_id": txn.transaction_id,
        "send_amount": str(txn.send_amount),
        "send_currency": txn.send_currency,
        "receive_amount": str(txn.receive_amount),
        "receive_currency": txn.receive_currency,
        "fee_amount": str(txn.fee_amount),
        "total_amount": str(txn.total_amount),
    }


# ---------------------------------------------------------------------------
# POST / — Create transaction
# ---------------------------------------------------------------------------


@router.post("/", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    payload: TransactionCreateRequest,
    user: User = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis),
    cache: RateCatalogCache = Depends(get_rate_cache),
):
    """Price the transfer with the FX engine and record it as PENDING."""
    # 1. Rate limit
    if not await check_transaction_rate_limit(str(user.id), redis):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many transactions. Please wait before trying again.",
        )

    # 2. Recipient ownership
    recipient = await get_owned_recipient(db, payload.recipient_id, user)

    # 3. Catalog snapshot
    catalog = await cache.get(db)

    # 4-5. Engine + persistence
    try:
        txn = await transaction_service.create_transaction(
            db,
            user=user,
            recipient=recipient,
            direction=payload.direction,
            amount=payload.amount,
            send_currency=payload.send_currency,
            receive_currency=payload.receive_currency,
            catalog=catalog,
        )
    except FXEngineError as exc:
        logger.info("Transaction rejected for user %s: %s", user.id, exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        )

    # 6. Notification
    details = notification_details(txn)
    send_transaction_created.delay(user.email, details)
    send_admin_transaction_alert.delay(details)

    return TransactionResponse.model_validate(txn)


# ---------------------------------------------------------------------------
# GET / — List transactions
# ---------------------------------------------------------------------------


@router.get("/", response_model=TransactionListResponse)
async def list_transactions(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    status_filter: TransactionStatus | None = Query(None, alias="status"),
    user: User = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
):
    """List the user's transactions, newest first."""
    filters = [Transaction.sender_id == user.id]
    if status_filter:
        filters.append(Transaction.status == status_filter)

    count_stmt = select(func.count(Transaction.id)).where(*filters)
    total = (await db.execute(count_stmt)).scalar_one()

    items_stmt = (
        select(Transaction)
        .where(*filters)
        .order_by(Transaction.created_at.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    result = await db.execute(items_stmt)
    items = list(result.scalars().all())

    return TransactionListResponse(
        items=[TransactionResponse.model_validate(t) for t in items],
        total=total,
        page=page,
        per_page=per_page,
    )


# ---------------------------------------------------------------------------
# GET /{transaction_id} — Get transaction
# ---------------------------------------------------------------------------


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: str,
    user: User = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
):
    """Get one of the user's transactions by its public id."""
    txn = await _get_owned_transaction(db, transaction_id, user)
    return TransactionResponse.model_validate(txn)


# ---------------------------------------------------------------------------
# POST /{transaction_id}/cancel — Cancel transaction
# ---------------------------------------------------------------------------


@router.post("/{transaction_id}/cancel", response_model=TransactionResponse)
async def cancel_transaction(
    transaction_id: str,
    user: User = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
):
    """Cancel a transaction. Users may only cancel while it is PENDING."""
    txn = await _get_owned_transaction(db, transaction_id, user)

    if txn.status != TransactionStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=(
                f"Cannot cancel transaction in '{txn.status.value}' status. "
                f"Only pending transactions can be cancelled."
            ),
        )

    try:
        await transaction_service.update_status(db, txn, TransactionStatus.CANCELLED)
    except InvalidStatusTransition as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))

    send_status_update.delay(user.email, txn.transaction_id, TransactionStatus.CANCELLED.value)

    return TransactionResponse.model_validate(txn)
