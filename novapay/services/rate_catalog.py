"""
Rate catalog provider — loads currencies and exchange rates, and caches
the active rate snapshot handed to the FX engine.

The cache is an explicit object owned by the application (created once in
``novapay.main`` and reached through a dependency), with an injected clock
and TTL so tests can move time forward deterministically. The engine never
sees it.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Awaitable, Callable, Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from novapay.config import settings
from novapay.models.currency import CatalogStatus, Currency, ExchangeRate
from novapay.services.fx_engine import CatalogRate, FeeType

logger = logging.getLogger(__name__)

KNOWN_FEE_TYPES = {f.value for f in FeeType}

Clock = Callable[[], datetime]
RateLoader = Callable[[AsyncSession], Awaitable[list[CatalogRate]]]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def load_active_rates(db: AsyncSession) -> list[CatalogRate]:
    """Fetch all active exchange rates as detached CatalogRate snapshots."""
    result = await db.execute(
        select(ExchangeRate).where(ExchangeRate.status == CatalogStatus.ACTIVE)
    )
    catalog = []
    for row in result.scalars().all():
        if row.fee_type not in KNOWN_FEE_TYPES:
            logger.warning(
                "Exchange rate %s->%s has unrecognised fee_type %r; no fee will be charged",
                row.from_currency, row.to_currency, row.fee_type,
            )
        catalog.append(CatalogRate.from_row(row))
    return catalog


async def list_currencies(db: AsyncSession, active_only: bool = True) -> list[Currency]:
    stmt = select(Currency).order_by(Currency.code)
    if active_only:
        stmt = stmt.where(Currency.status == CatalogStatus.ACTIVE)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_exchange_rates(db: AsyncSession) -> list[ExchangeRate]:
    """All rate rows regardless of status (admin view)."""
    result = await db.execute(
        select(ExchangeRate).order_by(ExchangeRate.from_currency, ExchangeRate.to_currency)
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Admin writes
# ---------------------------------------------------------------------------


async def upsert_rates(db: AsyncSession, entries: Iterable[dict]) -> list[ExchangeRate]:
    """
    Insert or update rate rows keyed on (from_currency, to_currency).

    Each entry carries ``from_currency``, ``to_currency``, ``rate`` and
    optionally ``fee_type``, ``fee_amount`` and ``status``.
    """
    saved = []
    for entry in entries:
        result = await db.execute(
            select(ExchangeRate).where(
                ExchangeRate.from_currency == entry["from_currency"],
                ExchangeRate.to_currency == entry["to_currency"],
            )
        )
        row = result.scalar_one_or_none()

        fee_type = entry.get("fee_type", FeeType.FREE.value)
        fee_amount = Decimal(str(entry.get("fee_amount", 0)))
        status = CatalogStatus(entry.get("status", CatalogStatus.ACTIVE.value))

        if row is None:
            row = ExchangeRate(
                from_currency=entry["from_currency"],
                to_currency=entry["to_currency"],
                rate=Decimal(str(entry["rate"])),
                fee_type=fee_type,
                fee_amount=fee_amount,
                status=status,
            )
            db.add(row)
        else:
            row.rate = Decimal(str(entry["rate"]))
            row.fee_type = fee_type
            row.fee_amount = fee_amount
            row.status = status
            row.updated_at = utc_now()
        saved.append(row)

    await db.flush()
    logger.info("Upserted %d exchange rate(s)", len(saved))
    return saved


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------


class RateCatalogCache:
    """TTL cache of the active rate catalog."""

    def __init__(
        self,
        loader: RateLoader = load_active_rates,
        ttl_seconds: int = settings.RATE_CACHE_TTL_SECONDS,
        clock: Clock = utc_now,
    ):
        self._loader = loader
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._snapshot: tuple[CatalogRate, ...] = ()
        self._loaded_at: datetime | None = None
        self._lock = asyncio.Lock()

    @property
    def loaded_at(self) -> datetime | None:
        return self._loaded_at

    def is_fresh(self) -> bool:
        if self._loaded_at is None:
            return False
        return self._clock() - self._loaded_at < self._ttl

    async def get(self, db: AsyncSession) -> tuple[CatalogRate, ...]:
        """Return the cached snapshot, reloading through *db* when stale."""
        if self.is_fresh():
            return self._snapshot

        async with self._lock:
            # Another request may have refreshed while we waited.
            if not self.is_fresh():
                rates = await self._loader(db)
                self._snapshot = tuple(rates)
                self._loaded_at = self._clock()
                logger.debug("Rate catalog refreshed: %d active rate(s)", len(self._snapshot))
        return self._snapshot

    def invalidate(self) -> None:
        self._loaded_at = None
