"""
Transaction service — turns an FX quote into a persisted transaction and
applies status changes.

The engine runs first; only a complete ``OrderAmounts`` ever reaches the
database. Engine errors propagate unchanged so the route can answer 400
without having written anything.
"""

import logging
from decimal import Decimal
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from novapay.models.recipient import Recipient
from novapay.models.transaction import Transaction, TransactionStatus
from novapay.models.user import User
from novapay.services.fx_engine import (
    FXEngineError,
    OrderAmounts,
    QuoteDirection,
    RateNotFoundError,
    RateRow,
    calculate_order_amounts,
)

logger = logging.getLogger(__name__)

# Largest value a Numeric(18, 2) money column holds.
MAX_STORED_AMOUNT = Decimal("9999999999999999.99")


class UnsettleableAmountError(FXEngineError):
    """The quoted amounts round to zero or do not fit the money columns."""


def check_settleable(order: OrderAmounts) -> None:
    """
    Reject a quote that cannot be stored as a transaction.

    A positive input can still round to 0.00 on the other side of a
    strongly skewed rate, and large inputs can overflow the column.
    """
    if order.send_amount <= 0 or order.receive_amount <= 0:
        raise UnsettleableAmountError("Amount is too small to transfer at this rate")
    if max(order.receive_amount, order.total_amount) > MAX_STORED_AMOUNT:
        raise UnsettleableAmountError("Amount is too large to transfer")


async def create_transaction(
    db: AsyncSession,
    *,
    user: User,
    recipient: Recipient,
    direction: QuoteDirection | str,
    amount: Decimal,
    send_currency: str,
    receive_currency: str,
    catalog: Iterable[RateRow],
) -> Transaction:
    """
    Quote the transfer and persist it as a PENDING transaction.

    Raises any ``FXEngineError`` from the engine, or UnsettleableAmountError,
    before touching *db*.
    """
    try:
        order = calculate_order_amounts(
            direction, amount, send_currency, receive_currency, catalog,
        )
    except RateNotFoundError as exc:
        logger.warning(
            "No exchange rate configured for %s -> %s (user %s)",
            exc.from_currency, exc.to_currency, user.id,
        )
        raise
    check_settleable(order)

    txn = Transaction.from_order(
        order,
        sender_id=user.id,
        recipient_id=recipient.id,
        send_currency=send_currency,
        receive_currency=receive_currency,
    )
    db.add(txn)
    await db.flush()

    logger.info(
        "Transaction %s created: %s %s -> %s %s (fee %s %s, total %s)",
        txn.transaction_id,
        order.send_amount, send_currency,
        order.receive_amount, receive_currency,
        order.fee_type, order.fee_amount, order.total_amount,
    )
    return txn


async def update_status(
    db: AsyncSession,
    txn: Transaction,
    new_status: TransactionStatus,
    *,
    failure_reason: str | None = None,
    reference: str | None = None,
) -> TransactionStatus:
    """
    Move *txn* to *new_status* and flush. Returns the previous status.

    Raises InvalidStatusTransition if the lifecycle forbids the move.
    """
    previous = txn.status
    txn.transition_to(new_status, failure_reason=failure_reason, reference=reference)
    await db.flush()

    logger.info(
        "Transaction %s status %s -> %s",
        txn.transaction_id, previous.value, new_status.value,
    )
    return previous
