"""Tests for the public rate, quote and currency endpoints."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from novapay.models.currency import Currency


class TestListRates:

    @pytest.mark.asyncio
    async def test_lists_cached_catalog(self, client, rate_cache):
        resp = await client.get("/api/v1/rates/")

        assert resp.status_code == 200
        data = resp.json()
        pairs = {(r["from_currency"], r["to_currency"]) for r in data}
        assert ("USD", "NGN") in pairs
        assert ("NGN", "RUB") in pairs
        assert rate_cache.loaded_at is not None


class TestQuote:

    @pytest.mark.asyncio
    async def test_send_quote(self, client):
        resp = await client.get(
            "/api/v1/rates/quote", params={"amount": "200", "from": "USD", "to": "NGN"},
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["direction"] == "send"
        assert Decimal(data["send_amount"]) == Decimal("200.00")
        assert Decimal(data["receive_amount"]) == Decimal("300000.00")
        assert Decimal(data["fee_amount"]) == Decimal("5.00")
        assert Decimal(data["total_amount"]) == Decimal("205.00")
        assert data["fee_type"] == "fixed"
        assert data["rates_loaded_at"] is not None

    @pytest.mark.asyncio
    async def test_receive_quote_on_inverted_pair(self, client):
        resp = await client.get(
            "/api/v1/rates/quote",
            params={"amount": "100", "from": "ngn", "to": "usd", "direction": "receive"},
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["from_currency"] == "NGN"
        assert Decimal(data["receive_amount"]) == Decimal("100.00")
        assert Decimal(data["send_amount"]) == Decimal("150000.00")
        assert Decimal(data["fee_amount"]) == Decimal("5.00")

    @pytest.mark.asyncio
    async def test_unknown_pair_returns_400(self, client):
        resp = await client.get(
            "/api/v1/rates/quote", params={"amount": "50", "from": "XYZ", "to": "ABC"},
        )

        assert resp.status_code == 400
        assert resp.json()["detail"] == "Exchange rate not found for XYZ to ABC"

    @pytest.mark.asyncio
    async def test_zero_amount_rejected(self, client):
        resp = await client.get(
            "/api/v1/rates/quote", params={"amount": "0", "from": "USD", "to": "NGN"},
        )

        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_amount_rounding_to_zero_returns_400(self, client):
        resp = await client.get(
            "/api/v1/rates/quote", params={"amount": "0.01", "from": "NGN", "to": "USD"},
        )

        assert resp.status_code == 400
        assert resp.json()["detail"] == "Amount is too small to transfer at this rate"

    @pytest.mark.asyncio
    async def test_amount_above_limit_rejected(self, client):
        resp = await client.get(
            "/api/v1/rates/quote",
            params={"amount": "5000000000000", "from": "USD", "to": "NGN"},
        )

        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_bad_direction_rejected(self, client):
        resp = await client.get(
            "/api/v1/rates/quote",
            params={"amount": "10", "from": "USD", "to": "NGN", "direction": "both"},
        )

        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_quote_is_served_from_cache(self, client, rate_cache):
        params = {"amount": "10", "from": "USD", "to": "NGN"}

        await client.get("/api/v1/rates/quote", params=params)
        await client.get("/api/v1/rates/quote", params=params)

        rate_cache._loader.assert_awaited_once()


class TestValidatePair:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "src,tgt,available",
        [
            ("USD", "NGN", True),
            ("NGN", "USD", True),
            ("EUR", "EUR", True),
            ("GBP", "EUR", False),
            ("USD", "RUB", False),
        ],
    )
    async def test_availability(self, client, src, tgt, available):
        resp = await client.get("/api/v1/rates/validate", params={"from": src, "to": tgt})

        assert resp.status_code == 200
        assert resp.json()["available"] is available


class TestCurrencies:

    @pytest.mark.asyncio
    async def test_lists_active_currencies(self, client, mock_db):
        currencies = [
            Currency(code="NGN", name="Nigerian Naira", symbol="₦"),
            Currency(code="USD", name="US Dollar", symbol="$"),
        ]
        result = MagicMock()
        result.scalars.return_value.all.return_value = currencies
        mock_db.execute = AsyncMock(return_value=result)

        resp = await client.get("/api/v1/currencies/")

        assert resp.status_code == 200
        data = resp.json()
        assert [c["code"] for c in data] == ["NGN", "USD"]
        assert data[0]["status"] == "active"
        assert data[0]["flag_svg"].startswith("<svg")


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")

    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
