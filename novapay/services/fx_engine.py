"""
FX Engine — rate resolution, fee policy, and order amount calculation.

Pure and synchronous: every function here works only on its arguments.
The rate catalog is loaded (and cached) by the caller, so a quote is only
as fresh as the catalog snapshot passed in.

Resolution order for a (from, to) pair:
    1. identity   — same currency, rate 1, never a fee
    2. stored     — an active row for (from, to), used as-is
    3. inverted   — an active row for (to, from) with rate > 0; the rate is
                    1 / stored rate but the fee policy is the stored row's
    4. not found

All money is ``Decimal``. Each output amount is rounded half-up to the
cent exactly once, after every derived value has been computed.
"""

import enum
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import ClassVar, Iterable, Protocol, Union

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CENT = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0")
ONE = Decimal("1")

RATE_STATUS_ACTIVE = "active"


class FeeType(str, enum.Enum):
    FREE = "free"
    FIXED = "fixed"
    PERCENTAGE = "percentage"


class QuoteDirection(str, enum.Enum):
    """Which side of the trade the user-entered amount is on."""
    SEND = "send"
    RECEIVE = "receive"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class FXEngineError(ValueError):
    """Base class for quote failures caused by the request or the catalog."""


class InvalidAmountError(FXEngineError):
    def __init__(self, amount):
        self.amount = amount
        super().__init__("Amount must be greater than 0")


class MissingCurrencyError(FXEngineError):
    def __init__(self):
        super().__init__("Both from_currency and to_currency are required")


class RateNotFoundError(FXEngineError):
    def __init__(self, from_currency: str, to_currency: str):
        self.from_currency = from_currency
        self.to_currency = to_currency
        super().__init__(
            f"Exchange rate not found for {from_currency} to {to_currency}"
        )


# ---------------------------------------------------------------------------
# Catalog rows
# ---------------------------------------------------------------------------


class RateRow(Protocol):
    """Shape of a catalog entry; satisfied by the ORM row and CatalogRate."""
    from_currency: str
    to_currency: str
    rate: Decimal
    fee_type: str
    fee_amount: Decimal
    status: str


@dataclass(frozen=True)
class CatalogRate:
    """Detached, immutable copy of an exchange-rate row."""
    from_currency: str
    to_currency: str
    rate: Decimal
    fee_type: str = FeeType.FREE.value
    fee_amount: Decimal = ZERO
    status: str = RATE_STATUS_ACTIVE

    @classmethod
    def from_row(cls, row: RateRow) -> "CatalogRate":
        return cls(
            from_currency=row.from_currency,
            to_currency=row.to_currency,
            rate=to_decimal(row.rate),
            fee_type=_plain(row.fee_type),
            fee_amount=to_decimal(row.fee_amount),
            status=_plain(row.status),
        )


def to_decimal(value) -> Decimal:
    """Coerce a number to Decimal, going through str() for floats."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _plain(value) -> str:
    return value.value if isinstance(value, enum.Enum) else value


def _is_active(row: RateRow) -> bool:
    return _plain(row.status) == RATE_STATUS_ACTIVE


def _round_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


# ---------------------------------------------------------------------------
# Resolved rates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StoredRate:
    """An active catalog row for exactly the requested direction."""
    row: RateRow
    kind: ClassVar[str] = "stored"

    @property
    def from_currency(self) -> str:
        return self.row.from_currency

    @property
    def to_currency(self) -> str:
        return self.row.to_currency

    @property
    def rate(self) -> Decimal:
        return to_decimal(self.row.rate)

    @property
    def fee_type(self) -> str:
        return _plain(self.row.fee_type)

    @property
    def fee_amount(self) -> Decimal:
        return to_decimal(self.row.fee_amount)


@dataclass(frozen=True)
class InvertedRate:
    """The reverse catalog row, inverted. Fees stay as the operator set them."""
    original: RateRow
    effective_rate: Decimal
    kind: ClassVar[str] = "inverted"

    @property
    def from_currency(self) -> str:
        return self.original.to_currency

    @property
    def to_currency(self) -> str:
        return self.original.from_currency

    @property
    def rate(self) -> Decimal:
        return self.effective_rate

    @property
    def fee_type(self) -> str:
        return _plain(self.original.fee_type)

    @property
    def fee_amount(self) -> Decimal:
        return to_decimal(self.original.fee_amount)


@dataclass(frozen=True)
class IdentityRate:
    """Same-currency conversion."""
    currency: str
    kind: ClassVar[str] = "identity"
    rate: ClassVar[Decimal] = ONE
    fee_type: ClassVar[str] = FeeType.FREE.value
    fee_amount: ClassVar[Decimal] = ZERO

    @property
    def from_currency(self) -> str:
        return self.currency

    @property
    def to_currency(self) -> str:
        return self.currency


ResolvedRate = Union[StoredRate, InvertedRate, IdentityRate]


# ---------------------------------------------------------------------------
# Order amounts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OrderAmounts:
    send_amount: Decimal
    receive_amount: Decimal
    exchange_rate: Decimal
    fee_amount: Decimal
    fee_type: str
    total_amount: Decimal


# ---------------------------------------------------------------------------
# Rate lookup
# ---------------------------------------------------------------------------


def resolve_rate(
    catalog: Iterable[RateRow],
    from_currency: str,
    to_currency: str,
) -> ResolvedRate | None:
    """
    Find the rate for converting *from_currency* into *to_currency*.

    Codes are matched exactly; callers normalise case first. Inactive rows
    are skipped. A direct row always wins over an invertible reverse row.
    Returns None when neither exists.
    """
    if from_currency == to_currency:
        return IdentityRate(from_currency)

    reverse: RateRow | None = None
    for row in catalog:
        if not _is_active(row):
            continue
        if row.from_currency == from_currency and row.to_currency == to_currency:
            return StoredRate(row)
        if (
            reverse is None
            and row.from_currency == to_currency
            and row.to_currency == from_currency
        ):
            reverse = row

    if reverse is not None:
        stored = to_decimal(reverse.rate)
        if stored > 0:
            return InvertedRate(original=reverse, effective_rate=ONE / stored)

    return None


def validate_rate(
    catalog: Iterable[RateRow],
    from_currency: str,
    to_currency: str,
) -> bool:
    """True if a rate (identity, stored or inverted) exists for the pair."""
    return resolve_rate(catalog, from_currency, to_currency) is not None


# ---------------------------------------------------------------------------
# Fees
# ---------------------------------------------------------------------------


def calculate_fee(amount, rate: ResolvedRate | RateRow) -> Decimal:
    """
    Fee for sending *amount* under *rate*'s fee policy.

    ``fixed`` is a flat charge, ``percentage`` is points of *amount*.
    Unknown fee types charge nothing.
    """
    fee_type = _plain(rate.fee_type)
    if fee_type == FeeType.FIXED.value:
        return to_decimal(rate.fee_amount)
    if fee_type == FeeType.PERCENTAGE.value:
        return to_decimal(amount) * to_decimal(rate.fee_amount) / HUNDRED
    return ZERO


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


def calculate_order_amounts(
    direction: QuoteDirection | str,
    amount,
    from_currency: str,
    to_currency: str,
    catalog: Iterable[RateRow],
) -> OrderAmounts:
    """
    Compute the full, rounded amounts for a transfer.

    With ``send`` the amount is what the user pays in; with ``receive`` it
    is what the recipient gets. The fee is always charged on the unrounded
    send-side amount.

    Raises InvalidAmountError, MissingCurrencyError or RateNotFoundError;
    nothing is returned on failure.
    """
    direction = QuoteDirection(direction)

    try:
        value = to_decimal(amount)
    except (InvalidOperation, TypeError):
        raise InvalidAmountError(amount)
    if not value.is_finite() or value <= 0:
        raise InvalidAmountError(amount)

    if not from_currency or not to_currency:
        raise MissingCurrencyError()

    resolved = resolve_rate(catalog, from_currency, to_currency)
    if resolved is None:
        raise RateNotFoundError(from_currency, to_currency)

    rate = resolved.rate
    if direction == QuoteDirection.RECEIVE:
        receive_amount = value
        send_amount = receive_amount / rate
    else:
        send_amount = value
        receive_amount = send_amount * rate

    fee_amount = calculate_fee(send_amount, resolved)
    total_amount = send_amount + fee_amount

    return OrderAmounts(
        send_amount=_round_cents(send_amount),
        receive_amount=_round_cents(receive_amount),
        exchange_rate=rate,
        fee_amount=_round_cents(fee_amount),
        fee_type=resolved.fee_type,
        total_amount=_round_cents(total_amount),
    )
