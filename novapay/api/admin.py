"""
Admin endpoints — currency and exchange-rate catalog maintenance, and
transaction oversight.

Every write to exchange rates invalidates the application's rate cache so
the next quote sees the new catalog.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from novapay.api.deps import get_rate_cache, require_admin
from novapay.database import get_db
from novapay.models.currency import CatalogStatus, Currency
from novapay.models.transaction import (
    InvalidStatusTransition,
    Transaction,
    TransactionStatus,
)
from novapay.models.user import User
from novapay.schemas.rate import (
    CurrencyCreateRequest,
    CurrencyResponse,
    CurrencyStatusUpdate,
    ExchangeRateResponse,
    ExchangeRateUpsert,
    ExchangeRateUpsertResponse,
)
from novapay.schemas.transaction import (
    TransactionListResponse,
    TransactionResponse,
    TransactionStatusUpdate,
)
from novapay.services import transaction_service
from novapay.services.rate_catalog import (
    RateCatalogCache,
    list_currencies,
    list_exchange_rates,
    upsert_rates,
)
from novapay.tasks.notification_tasks import send_status_update

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Currencies
# ---------------------------------------------------------------------------


@router.get("/currencies", response_model=list[CurrencyResponse])
async def list_all_currencies(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """All currencies, active or not."""
    return await list_currencies(db, active_only=False)


@router.post("/currencies", response_model=CurrencyResponse, status_code=status.HTTP_201_CREATED)
async def create_currency(
    payload: CurrencyCreateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Add a currency. Codes are stored upper-case and must be unique."""
    existing = await db.execute(select(Currency).where(Currency.code == payload.code))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Currency {payload.code} already exists",
        )

    kwargs = payload.model_dump(exclude_none=True)
    currency = Currency(**kwargs)
    db.add(currency)
    await db.flush()

    logger.info("Currency %s created by admin %s", currency.code, admin.id)
    return currency


@router.patch("/currencies/{currency_id}/status", response_model=CurrencyResponse)
async def update_currency_status(
    currency_id: UUID,
    payload: CurrencyStatusUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Activate or deactivate a currency."""
    result = await db.execute(select(Currency).where(Currency.id == currency_id))
    currency = result.scalar_one_or_none()
    if currency is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Currency not found",
        )

    currency.status = CatalogStatus(payload.status)
    await db.flush()

    logger.info("Currency %s set to %s by admin %s", currency.code, payload.status, admin.id)
    return currency


# ---------------------------------------------------------------------------
# Exchange rates
# ---------------------------------------------------------------------------


@router.get("/exchange-rates", response_model=list[ExchangeRateResponse])
async def list_all_exchange_rates(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """All exchange-rate rows, including inactive ones."""
    return await list_exchange_rates(db)


@router.put("/exchange-rates", response_model=ExchangeRateUpsertResponse)
async def put_exchange_rates(
    payload: list[ExchangeRateUpsert],
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    cache: RateCatalogCache = Depends(get_rate_cache),
):
    """
    Bulk upsert exchange rates keyed on (from_currency, to_currency).

    Identity pairs are rejected; same-currency transfers never use the
    catalog.
    """
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one exchange rate is required",
        )
    for entry in payload:
        if entry.from_currency == entry.to_currency:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Cannot set a rate from {entry.from_currency} to itself",
            )

    saved = await upsert_rates(db, [entry.model_dump() for entry in payload])
    cache.invalidate()

    logger.info("Admin %s updated %d exchange rate(s)", admin.id, len(saved))
    return ExchangeRateUpsertResponse(success=True, count=len(saved))


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@router.get("/transactions", response_model=TransactionListResponse)
async def list_all_transactions(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    status_filter: TransactionStatus | None = Query(None, alias="status"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """List all transactions across the platform, newest first."""
    filters = []
    if status_filter:
        filters.append(Transaction.status == status_filter)

    total = (
        await db.execute(select(func.count(Transaction.id)).where(*filters))
    ).scalar_one()

    result = await db.execute(
        select(Transaction)
        .where(*filters)
        .order_by(Transaction.created_at.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    items = list(result.scalars().all())

    return TransactionListResponse(
        items=[TransactionResponse.model_validate(t) for t in items],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.patch("/transactions/{transaction_id}/status", response_model=TransactionResponse)
async def update_transaction_status(
    transaction_id: str,
    payload: TransactionStatusUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Move a transaction through its lifecycle and notify the sender."""
    result = await db.execute(
        select(Transaction).where(Transaction.transaction_id == transaction_id)
    )
    txn = result.scalar_one_or_none()
    if txn is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Transaction not found",
        )

    new_status = TransactionStatus(payload.status)
    try:
        await transaction_service.update_status(
            db, txn, new_status,
            failure_reason=payload.failure_reason,
            reference=payload.reference,
        )
    except InvalidStatusTransition as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))

    sender = await db.get(User, txn.sender_id)
    if sender is not None:
        send_status_update.delay(sender.email, txn.transaction_id, new_status.value)

    return TransactionResponse.model_validate(txn)
