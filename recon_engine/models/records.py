"""Record snapshots compared by the matching engine."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum


class RecordType(str, Enum):
    """Kind of inbox document, drives the date tolerance model."""

    INVOICE = "invoice"
    EXPENSE = "expense"


def to_decimal(value: Decimal | int | float | str | None) -> Decimal | None:
    """Coerce a monetary value to Decimal, keeping None as None."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    # Go through str so 260.18 stays 260.18 instead of its binary expansion
    return Decimal(str(value))


def to_date(value: date | datetime | str) -> date:
    """Coerce an ISO-8601 string, date or datetime to a calendar date.

    Raises:
        ValueError: If a string is not a valid ISO-8601 date or datetime
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(value).date()


@dataclass(frozen=True)
class ComparableRecord:
    """Snapshot of an inbox item or a bank transaction.

    Amounts are signed: invoices are usually positive and payments negative,
    but either polarity is accepted. Currency codes are compared as given, so
    callers normalize case upstream.
    """

    amount: Decimal | None = None
    currency: str | None = None
    base_amount: Decimal | None = None
    base_currency: str | None = None
    date: "date | None" = None
    record_type: RecordType | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "base_amount", to_decimal(self.base_amount))
        if self.date is not None:
            object.__setattr__(self, "date", to_date(self.date))
        if self.record_type:
            object.__setattr__(self, "record_type", RecordType(self.record_type))
        else:
            object.__setattr__(self, "record_type", None)

    @property
    def has_amount(self) -> bool:
        """A zero amount carries no information and counts as missing."""
        return bool(self.amount)

    @property
    def has_base(self) -> bool:
        """Base amount and base currency are only usable together."""
        return bool(self.base_amount) and bool(self.base_currency)

    def __repr__(self) -> str:
        return f"<ComparableRecord {self.amount} {self.currency} {self.date}>"
