"""Date proximity scoring with banking-delay-aware tolerance bands."""

from datetime import date, datetime
from typing import NamedTuple

from recon_engine.models.records import RecordType, to_date


class PaymentTermsBand(NamedTuple):
    """Days-after-invoice window for a common payment term."""

    name: str
    min_days: int
    max_days: int
    score: float


class DateScorer:
    """Scores how plausible the gap between an inbox date and a transaction is.

    The signed difference is ``transaction - inbox`` in days. Invoices are
    normally paid after they are issued, on payment terms; receipts are
    normally created after the bank transaction posts, and bank feeds lag
    the real event by a few days. The score never drops below ``FLOOR_SCORE``
    because a date alone never rules a match out.
    """

    FLOOR_SCORE = 0.1

    # Evaluated in this order, first hit wins. The windows overlap:
    # Net-7 claims days 3-6 before the immediate band is reached.
    INVOICE_TERMS: tuple[PaymentTermsBand, ...] = (
        PaymentTermsBand("net_30", 24, 38, 0.98),
        PaymentTermsBand("net_60", 55, 68, 0.96),
        PaymentTermsBand("net_90", 85, 98, 0.94),
        PaymentTermsBand("net_15", 10, 20, 0.95),
        PaymentTermsBand("net_7", 3, 11, 0.93),
        PaymentTermsBand("immediate", 0, 6, 0.99),
    )
    INVOICE_EXTENDED_MAX_DAYS = 123
    INVOICE_ADVANCE_PAYMENT_DAYS = 10
    INVOICE_ADVANCE_PAYMENT_SCORE = 0.85

    # Bank transactions show up this many days after the purchase
    BANKING_DELAY_DAYS = 3

    # (max delay-adjusted days, score) for a receipt created after the transaction
    EXPENSE_LATE_RECEIPT: tuple[tuple[int, float], ...] = (
        (4, 0.99),
        (10, 0.95),
        (33, 0.90),
        (63, 0.80),
        (93, 0.70),
    )
    EXPENSE_EARLY_RECEIPT_DAYS = 10
    EXPENSE_EARLY_RECEIPT_SCORE = 0.85

    # (max absolute days, score) when no type-specific band applies
    PROXIMITY: tuple[tuple[int, float], ...] = (
        (0, 1.0),
        (1, 0.95),
        (3, 0.85),
        (7, 0.75),
        (14, 0.6),
    )
    PROXIMITY_DECAY_DAYS = 30

    def score(
        self,
        inbox_date: date | datetime | str,
        transaction_date: date | datetime | str,
        record_type: RecordType | str | None = None,
    ) -> float:
        """Score the date gap between an inbox item and a transaction.

        Args:
            inbox_date: Date on the inbox document
            transaction_date: Booking date of the bank transaction
            record_type: Inbox document type, defaults to expense

        Raises:
            ValueError: If a date string is not ISO-8601
        """
        signed_days = (to_date(transaction_date) - to_date(inbox_date)).days
        # Anything that is not an invoice follows the expense model
        if record_type == RecordType.INVOICE:
            score = self._invoice_score(signed_days)
        else:
            score = self._expense_score(signed_days)

        if score is not None:
            return score
        return self.proximity_score(abs(signed_days))

    def _invoice_score(self, signed_days: int) -> float | None:
        if signed_days > 0:
            for band in self.INVOICE_TERMS:
                if band.min_days <= signed_days <= band.max_days:
                    return band.score
            if signed_days <= self.INVOICE_EXTENDED_MAX_DAYS:
                return max(0.7, 0.9 - (signed_days - 33) * 0.002)
            return None

        # Paid before the invoice date
        if signed_days >= -self.INVOICE_ADVANCE_PAYMENT_DAYS:
            return self.INVOICE_ADVANCE_PAYMENT_SCORE
        return None

    def _expense_score(self, signed_days: int) -> float | None:
        if signed_days < 0:
            adjusted_days = abs(signed_days) + self.BANKING_DELAY_DAYS
            for max_days, score in self.EXPENSE_LATE_RECEIPT:
                if adjusted_days <= max_days:
                    return score
            return None

        # Receipt dated before the transaction posted
        if signed_days <= self.EXPENSE_EARLY_RECEIPT_DAYS:
            return self.EXPENSE_EARLY_RECEIPT_SCORE
        return None

    def proximity_score(self, diff_days: int) -> float:
        """Direction-agnostic proximity ladder."""
        for max_days, score in self.PROXIMITY:
            if diff_days <= max_days:
                return score
        if diff_days <= self.PROXIMITY_DECAY_DAYS:
            return max(0.3, 1 - (diff_days / self.PROXIMITY_DECAY_DAYS) * 0.7)
        return self.FLOOR_SCORE


_scorer = DateScorer()


def score_date(
    inbox_date: date | datetime | str,
    transaction_date: date | datetime | str,
    record_type: RecordType | str | None = None,
) -> float:
    """Score a date gap with the default date scorer."""
    return _scorer.score(inbox_date, transaction_date, record_type)
