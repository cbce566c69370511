"""Amount similarity scoring."""

from collections.abc import Callable
from decimal import Decimal
from enum import Enum

from recon_engine.models.records import ComparableRecord


class AmountMode(str, Enum):
    """How two amounts are being compared."""

    EXACT_CURRENCY = "exact_currency"
    BASE_CURRENCY = "base_currency"
    CROSS_CURRENCY_BASE = "cross_currency_base"
    DIFFERENT_CURRENCY = "different_currency"
    FALLBACK = "fallback"


def _finish_exact_currency(base_score: float, penalty: float) -> float:
    # Same currency is the strongest signal; the sign penalty does not apply
    return min(1.0, base_score * 1.10)


def _finish_base_currency(base_score: float, penalty: float) -> float:
    return min(1.0, base_score * 1.05)


def _finish_cross_currency_base(base_score: float, penalty: float) -> float:
    return min(1.0, base_score * 1.03 * penalty)


def _finish_penalty_only(base_score: float, penalty: float) -> float:
    return min(1.0, base_score * penalty)


# One finishing adjustment per mode
MODE_FINISHERS: dict[AmountMode, Callable[[float, float], float]] = {
    AmountMode.EXACT_CURRENCY: _finish_exact_currency,
    AmountMode.BASE_CURRENCY: _finish_base_currency,
    AmountMode.CROSS_CURRENCY_BASE: _finish_cross_currency_base,
    AmountMode.DIFFERENT_CURRENCY: _finish_penalty_only,
    AmountMode.FALLBACK: _finish_penalty_only,
}


def _opposite_signs(amount_a: Decimal, amount_b: Decimal) -> bool:
    return (amount_a > 0 and amount_b < 0) or (amount_a < 0 and amount_b > 0)


class AmountScorer:
    """Scores how closely two amounts agree, in [0, 1].

    Resolution order:
    1. Same native currency: compare native amounts
    2. Same base currency: compare converted base amounts
    3. Different currencies without conversion: penalized native comparison
    4. Neither record has a currency: plain native comparison
    """

    MISSING_SCORE = 0.5

    # Opposite direction plus a bigger magnitude gap than this is a false match
    SUSPICIOUS_RATIO = Decimal("5")
    SUSPICIOUS_SCORE = 0.1

    # Penalty for currencies we could not convert
    UNRESOLVED_CURRENCY_FACTOR = 0.4

    # (max relative difference, score), checked top-down after the exact case
    DIFFERENCE_LADDER: tuple[tuple[Decimal, float], ...] = (
        (Decimal("0.01"), 0.98),
        (Decimal("0.02"), 0.95),
        (Decimal("0.025"), 0.92),
        (Decimal("0.03"), 0.90),
        (Decimal("0.05"), 0.85),
        (Decimal("0.10"), 0.60),
        (Decimal("0.20"), 0.30),
    )

    # Penalties when an invoice is compared against a payment (opposite signs)
    OPPOSITE_SIGN_PENALTY = 0.7
    OPPOSITE_SIGN_PENALTY_DIFFERENT_CURRENCY = 0.3

    def mode_for(self, record_a: ComparableRecord, record_b: ComparableRecord) -> AmountMode | None:
        """Decide how a pair of records is compared.

        Returns:
            The comparison mode, or None when an amount is missing
        """
        if not record_a.has_amount or not record_b.has_amount:
            return None

        currency_a = record_a.currency or None
        currency_b = record_b.currency or None

        if currency_a and currency_b and currency_a == currency_b:
            return AmountMode.EXACT_CURRENCY

        if (
            record_a.has_base
            and record_b.has_base
            and record_a.base_currency == record_b.base_currency
        ):
            if currency_a != currency_b:
                return AmountMode.CROSS_CURRENCY_BASE
            return AmountMode.BASE_CURRENCY

        if currency_a != currency_b:
            return AmountMode.DIFFERENT_CURRENCY

        return AmountMode.FALLBACK

    def score(self, record_a: ComparableRecord, record_b: ComparableRecord) -> float:
        """Score the amount agreement of two records."""
        mode = self.mode_for(record_a, record_b)
        if mode is None:
            return self.MISSING_SCORE

        if mode in (AmountMode.BASE_CURRENCY, AmountMode.CROSS_CURRENCY_BASE):
            return self.difference_score(record_a.base_amount, record_b.base_amount, mode)

        if mode == AmountMode.DIFFERENT_CURRENCY:
            if self.is_suspicious(record_a.amount, record_b.amount):
                return self.SUSPICIOUS_SCORE
            raw = self.difference_score(record_a.amount, record_b.amount, mode)
            return raw * self.UNRESOLVED_CURRENCY_FACTOR

        return self.difference_score(record_a.amount, record_b.amount, mode)

    def is_suspicious(self, amount_a: Decimal, amount_b: Decimal) -> bool:
        """Opposite directions with a large magnitude mismatch."""
        if not _opposite_signs(amount_a, amount_b):
            return False
        abs_a, abs_b = abs(amount_a), abs(amount_b)
        ratio = max(abs_a, abs_b) / min(abs_a, abs_b)
        return ratio > self.SUSPICIOUS_RATIO

    def difference_score(self, amount_a: Decimal, amount_b: Decimal, mode: AmountMode) -> float:
        """Score the relative difference between two amounts for a mode.

        Opposite signs are compared by magnitude so that a +599 invoice and a
        -599 payment agree, at the cost of a cross-perspective penalty.
        """
        opposite = _opposite_signs(amount_a, amount_b)
        if opposite:
            amount_a, amount_b = abs(amount_a), abs(amount_b)

        max_amount = max(abs(amount_a), abs(amount_b))
        if max_amount == 0:
            return 1.0 if amount_a == amount_b else 0.0

        percentage_diff = abs(amount_a - amount_b) / max_amount
        base_score = self.ladder_score(percentage_diff)

        penalty = 1.0
        if opposite:
            if mode == AmountMode.DIFFERENT_CURRENCY:
                penalty = self.OPPOSITE_SIGN_PENALTY_DIFFERENT_CURRENCY
            else:
                penalty = self.OPPOSITE_SIGN_PENALTY

        return MODE_FINISHERS[mode](base_score, penalty)

    def ladder_score(self, percentage_diff: Decimal) -> float:
        """Map a relative difference onto the base score ladder."""
        if percentage_diff == 0:
            return 1.0
        for max_diff, score in self.DIFFERENCE_LADDER:
            if percentage_diff <= max_diff:
                return score
        return 0.0


_scorer = AmountScorer()


def score_amount(record_a: ComparableRecord, record_b: ComparableRecord) -> float:
    """Score two records with the default amount scorer."""
    return _scorer.score(record_a, record_b)
