"""Tests for admin endpoints — catalog maintenance and transaction oversight."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from novapay.models.currency import CatalogStatus, Currency
from novapay.models.transaction import Transaction, TransactionStatus
from novapay.services.fx_engine import OrderAmounts


@pytest.fixture
def admin(make_user):
    return make_user(email="ops@novapay.example", is_admin=True)


@pytest.fixture
def admin_headers(auth_headers_for, admin):
    return auth_headers_for(admin)


def _scalar(value):
    result = MagicMock()
    result.scalar_one_or_none = MagicMock(return_value=value)
    return result


def _rows(rows):
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    return result


@pytest.fixture
def pending_txn(make_user, make_recipient):
    sender = make_user()
    order = OrderAmounts(
        send_amount=Decimal("1000.00"),
        receive_amount=Decimal("44.50"),
        exchange_rate=Decimal("0.0445"),
        fee_amount=Decimal("15.00"),
        fee_type="percentage",
        total_amount=Decimal("1015.00"),
    )
    txn = Transaction.from_order(
        order,
        sender_id=sender.id,
        recipient_id=make_recipient(sender, currency="RUB").id,
        send_currency="NGN",
        receive_currency="RUB",
    )
    return sender, txn


# ---------------------------------------------------------------------------
# Access control
# ---------------------------------------------------------------------------


class TestAdminAccess:

    @pytest.mark.asyncio
    async def test_customer_gets_403(self, client, mock_db, make_user, auth_headers_for):
        customer = make_user()
        mock_db.execute = AsyncMock(return_value=_scalar(customer))

        resp = await client.get("/api/v1/admin/currencies", headers=auth_headers_for(customer))

        assert resp.status_code == 403
        assert resp.json()["detail"] == "Admin access required"


# ---------------------------------------------------------------------------
# Currencies
# ---------------------------------------------------------------------------


class TestAdminCurrencies:

    @pytest.mark.asyncio
    async def test_list_includes_inactive(self, client, mock_db, admin, admin_headers):
        currencies = [
            Currency(code="EUR", name="Euro", symbol="€", status=CatalogStatus.INACTIVE),
            Currency(code="USD", name="US Dollar", symbol="$"),
        ]
        mock_db.execute = AsyncMock(side_effect=[_scalar(admin), _rows(currencies)])

        resp = await client.get("/api/v1/admin/currencies", headers=admin_headers)

        assert resp.status_code == 200
        assert [c["status"] for c in resp.json()] == ["inactive", "active"]

    @pytest.mark.asyncio
    async def test_create_currency(self, client, mock_db, admin, admin_headers):
        mock_db.execute = AsyncMock(side_effect=[_scalar(admin), _scalar(None)])

        resp = await client.post(
            "/api/v1/admin/currencies",
            json={"code": "rub", "name": "Russian Ruble", "symbol": "₽"},
            headers=admin_headers,
        )

        assert resp.status_code == 201
        assert resp.json()["code"] == "RUB"
        added = mock_db.add.call_args[0][0]
        assert isinstance(added, Currency)
        assert added.status == CatalogStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_duplicate_currency_returns_409(self, client, mock_db, admin, admin_headers):
        existing = Currency(code="RUB", name="Russian Ruble", symbol="₽")
        mock_db.execute = AsyncMock(side_effect=[_scalar(admin), _scalar(existing)])

        resp = await client.post(
            "/api/v1/admin/currencies",
            json={"code": "RUB", "name": "Russian Ruble", "symbol": "₽"},
            headers=admin_headers,
        )

        assert resp.status_code == 409
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_deactivate_currency(self, client, mock_db, admin, admin_headers):
        currency = Currency(code="GBP", name="British Pound", symbol="£")
        mock_db.execute = AsyncMock(side_effect=[_scalar(admin), _scalar(currency)])

        resp = await client.patch(
            f"/api/v1/admin/currencies/{currency.id}/status",
            json={"status": "inactive"},
            headers=admin_headers,
        )

        assert resp.status_code == 200
        assert currency.status == CatalogStatus.INACTIVE


# ---------------------------------------------------------------------------
# Exchange rates
# ---------------------------------------------------------------------------


class TestAdminExchangeRates:

    @pytest.mark.asyncio
    async def test_upsert_invalidates_cache(
        self, client, mock_db, admin, admin_headers, rate_cache,
    ):
        await rate_cache.get(mock_db)
        assert rate_cache.is_fresh()

        mock_db.execute = AsyncMock(side_effect=[_scalar(admin), _scalar(None), _scalar(None)])

        resp = await client.put(
            "/api/v1/admin/exchange-rates",
            json=[
                {"from_currency": "rub", "to_currency": "ngn", "rate": "22.45"},
                {
                    "from_currency": "NGN",
                    "to_currency": "RUB",
                    "rate": "0.0445",
                    "fee_type": "percentage",
                    "fee_amount": "1.5",
                },
            ],
            headers=admin_headers,
        )

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "count": 2}
        assert mock_db.add.call_count == 2
        assert rate_cache.is_fresh() is False

    @pytest.mark.asyncio
    async def test_percentage_over_100_rejected(self, client, mock_db, admin, admin_headers):
        mock_db.execute = AsyncMock(return_value=_scalar(admin))

        resp = await client.put(
            "/api/v1/admin/exchange-rates",
            json=[{
                "from_currency": "USD",
                "to_currency": "NGN",
                "rate": "1500",
                "fee_type": "percentage",
                "fee_amount": "150",
            }],
            headers=admin_headers,
        )

        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_identity_pair_rejected(self, client, mock_db, admin, admin_headers):
        mock_db.execute = AsyncMock(return_value=_scalar(admin))

        resp = await client.put(
            "/api/v1/admin/exchange-rates",
            json=[{"from_currency": "USD", "to_currency": "USD", "rate": "1"}],
            headers=admin_headers,
        )

        assert resp.status_code == 400
        mock_db.add.assert_not_called()


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


class TestAdminTransactions:

    @pytest.mark.asyncio
    async def test_move_to_processing_notifies_sender(
        self, client, mock_db, admin, admin_headers, pending_txn, celery_tasks,
    ):
        sender, txn = pending_txn
        mock_db.execute = AsyncMock(side_effect=[_scalar(admin), _scalar(txn)])
        mock_db.get = AsyncMock(return_value=sender)

        resp = await client.patch(
            f"/api/v1/admin/transactions/{txn.transaction_id}/status",
            json={"status": "processing", "reference": "BANK-REF-42"},
            headers=admin_headers,
        )

        assert resp.status_code == 200
        assert resp.json()["status"] == "processing"
        assert txn.reference == "BANK-REF-42"
        # Amounts are never recomputed on status changes.
        assert txn.total_amount == Decimal("1015.00")
        celery_tasks["admin_status"].delay.assert_called_once_with(
            sender.email, txn.transaction_id, "processing",
        )

    @pytest.mark.asyncio
    async def test_completed_sets_timestamp(
        self, client, mock_db, admin, admin_headers, pending_txn,
    ):
        _, txn = pending_txn
        txn.status = TransactionStatus.PROCESSING
        mock_db.execute = AsyncMock(side_effect=[_scalar(admin), _scalar(txn)])

        resp = await client.patch(
            f"/api/v1/admin/transactions/{txn.transaction_id}/status",
            json={"status": "completed"},
            headers=admin_headers,
        )

        assert resp.status_code == 200
        assert resp.json()["completed_at"] is not None

    @pytest.mark.asyncio
    async def test_invalid_transition_returns_409(
        self, client, mock_db, admin, admin_headers, pending_txn, celery_tasks,
    ):
        _, txn = pending_txn
        mock_db.execute = AsyncMock(side_effect=[_scalar(admin), _scalar(txn)])

        resp = await client.patch(
            f"/api/v1/admin/transactions/{txn.transaction_id}/status",
            json={"status": "completed"},
            headers=admin_headers,
        )

        assert resp.status_code == 409
        assert resp.json()["detail"] == "Invalid status transition from pending to completed"
        assert txn.status == TransactionStatus.PENDING
        celery_tasks["admin_status"].delay.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_transaction_returns_404(self, client, mock_db, admin, admin_headers):
        mock_db.execute = AsyncMock(side_effect=[_scalar(admin), _scalar(None)])

        resp = await client.patch(
            "/api/v1/admin/transactions/NP-NOPE000000/status",
            json={"status": "failed"},
            headers=admin_headers,
        )

        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_list_all(self, client, mock_db, admin, admin_headers, pending_txn):
        _, txn = pending_txn
        count = MagicMock()
        count.scalar_one = MagicMock(return_value=1)
        mock_db.execute = AsyncMock(side_effect=[_scalar(admin), count, _rows([txn])])

        resp = await client.get(
            "/api/v1/admin/transactions", params={"status": "pending"}, headers=admin_headers,
        )

        assert resp.status_code == 200
        assert resp.json()["total"] == 1
        assert resp.json()["items"][0]["send_currency"] == "NGN"
