"""
Public FX endpoints — the active rate catalog, quotes, and pair checks.

Quotes run the FX engine against the cached catalog snapshot; nothing is
persisted. Transaction creation performs the same calculation again at
submission time.
"""

import logging
from decimal import Decimal
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from novapay.api.deps import get_rate_cache
from novapay.database import get_db
from novapay.schemas.rate import ExchangeRateResponse, QuoteResponse, RateAvailability
from novapay.schemas.transaction import MAX_TRANSFER_AMOUNT
from novapay.services.fx_engine import (
    FXEngineError,
    calculate_order_amounts,
    validate_rate,
)
from novapay.services.rate_catalog import RateCatalogCache
from novapay.services.transaction_service import check_settleable

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=list[ExchangeRateResponse])
async def list_rates(
    db: AsyncSession = Depends(get_db),
    cache: RateCatalogCache = Depends(get_rate_cache),
):
    """Active exchange rates as currently served to quotes."""
    catalog = await cache.get(db)
    return [ExchangeRateResponse.model_validate(r, from_attributes=True) for r in catalog]


@router.get("/quote", response_model=QuoteResponse)
async def get_quote(
    amount: Decimal = Query(..., gt=0, le=MAX_TRANSFER_AMOUNT, examples=[200]),
    from_currency: str = Query(..., alias="from", min_length=3, max_length=3, examples=["USD"]),
    to_currency: str = Query(..., alias="to", min_length=3, max_length=3, examples=["NGN"]),
    direction: Literal["send", "receive"] = Query("send"),
    db: AsyncSession = Depends(get_db),
    cache: RateCatalogCache = Depends(get_rate_cache),
):
    """
    Price a transfer without creating it.

    ``direction=send`` treats *amount* as what the sender pays in;
    ``direction=receive`` treats it as what the recipient gets.
    """
    src = from_currency.upper()
    tgt = to_currency.upper()
    catalog = await cache.get(db)

    try:
        order = calculate_order_amounts(direction, amount, src, tgt, catalog)
        check_settleable(order)
    except FXEngineError as exc:
        logger.info("Quote rejected for %s -> %s: %s", src, tgt, exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        )

    return QuoteResponse(
        direction=direction,
        from_currency=src,
        to_currency=tgt,
        send_amount=order.send_amount,
        receive_amount=order.receive_amount,
        exchange_rate=order.exchange_rate,
        fee_amount=order.fee_amount,
        fee_type=order.fee_type,
        total_amount=order.total_amount,
        rates_loaded_at=cache.loaded_at,
    )


@router.get("/validate", response_model=RateAvailability)
async def check_pair(
    from_currency: str = Query(..., alias="from", min_length=3, max_length=3),
    to_currency: str = Query(..., alias="to", min_length=3, max_length=3),
    db: AsyncSession = Depends(get_db),
    cache: RateCatalogCache = Depends(get_rate_cache),
):
    """Whether a transfer between the two currencies can be priced."""
    src = from_currency.upper()
    tgt = to_currency.upper()
    catalog = await cache.get(db)
    return RateAvailability(
        from_currency=src,
        to_currency=tgt,
        available=validate_rate(catalog, src, tgt),
    )
