"""
Catalog seeder — populates currencies and exchange rates for development.

Usage:
    python scripts/seed_data.py

Creates:
  - 5 currencies (USD, NGN, RUB, EUR, GBP)
  - 6 directional exchange rates with a mix of fee policies

Idempotent: existing currency codes and rate pairs are left untouched.
"""

import asyncio
from decimal import Decimal

from sqlalchemy import select

from novapay.database import async_session
from novapay.models.currency import Currency, ExchangeRate
from novapay.services.fx_engine import FeeType, calculate_order_amounts

# ---------------------------------------------------------------------------
# Currencies
# ---------------------------------------------------------------------------

SAMPLE_CURRENCIES: list[dict] = [
    {"code": "USD", "name": "US Dollar", "symbol": "$"},
    {"code": "NGN", "name": "Nigerian Naira", "symbol": "₦"},
    {"code": "RUB", "name": "Russian Ruble", "symbol": "₽"},
    {"code": "EUR", "name": "Euro", "symbol": "€"},
    {"code": "GBP", "name": "British Pound", "symbol": "£"},
]

# ---------------------------------------------------------------------------
# Rates: one row per direction the operator prices explicitly
# ---------------------------------------------------------------------------

SAMPLE_RATES: list[dict] = [
    {"from_currency": "RUB", "to_currency": "NGN", "rate": Decimal("22.45"),
     "fee_type": FeeType.FREE.value, "fee_amount": Decimal("0")},
    {"from_currency": "NGN", "to_currency": "RUB", "rate": Decimal("0.0445"),
     "fee_type": FeeType.PERCENTAGE.value, "fee_amount": Decimal("1.5")},
    {"from_currency": "USD", "to_currency": "NGN", "rate": Decimal("1500"),
     "fee_type": FeeType.FIXED.value, "fee_amount": Decimal("5")},
    {"from_currency": "EUR", "to_currency": "NGN", "rate": Decimal("1625.50"),
     "fee_type": FeeType.FIXED.value, "fee_amount": Decimal("4")},
    {"from_currency": "GBP", "to_currency": "NGN", "rate": Decimal("1890.25"),
     "fee_type": FeeType.PERCENTAGE.value, "fee_amount": Decimal("1")},
    {"from_currency": "USD", "to_currency": "EUR", "rate": Decimal("0.92"),
     "fee_type": FeeType.FREE.value, "fee_amount": Decimal("0")},
]


async def seed() -> None:
    """Insert sample catalog data. Safe to run multiple times."""

    async with async_session() as session:
        # ==================================================================
        # 1. CURRENCIES
        # ==================================================================

        existing_codes = set(
            (await session.execute(select(Currency.code))).scalars().all()
        )

        new_currencies = 0
        for data in SAMPLE_CURRENCIES:
            if data["code"] in existing_codes:
                continue
            session.add(Currency(**data))
            new_currencies += 1

        await session.flush()
        print(f"  Currencies: {new_currencies} new, {len(existing_codes)} existing")

        # ==================================================================
        # 2. EXCHANGE RATES
        # ==================================================================

        existing_pairs = set(
            (await session.execute(
                select(ExchangeRate.from_currency, ExchangeRate.to_currency)
            )).all()
        )

        new_rates = 0
        for data in SAMPLE_RATES:
            if (data["from_currency"], data["to_currency"]) in existing_pairs:
                continue
            session.add(ExchangeRate(**data))
            new_rates += 1

        await session.flush()
        print(f"  Exchange rates: {new_rates} new, {len(existing_pairs)} existing")

        await session.commit()

    _print_summary()


def _print_summary() -> None:
    """Print a sample quote for each seeded corridor."""
    catalog = [ExchangeRate(**data) for data in SAMPLE_RATES]

    print("\n  Seed complete! Sample quotes for 100 units sent:")
    for data in SAMPLE_RATES:
        order = calculate_order_amounts(
            "send", Decimal("100"), data["from_currency"], data["to_currency"], catalog,
        )
        print(
            f"    {data['from_currency']} -> {data['to_currency']}: "
            f"receive {order.receive_amount}, fee {order.fee_amount} ({order.fee_type}), "
            f"total {order.total_amount}"
        )


if __name__ == "__main__":
    asyncio.run(seed())
