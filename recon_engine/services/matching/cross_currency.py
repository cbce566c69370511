"""Cross-currency equivalence detection on base amounts."""

import logging
from decimal import Decimal
from typing import NamedTuple

from recon_engine.models.records import ComparableRecord

logger = logging.getLogger(__name__)


class ToleranceTier(NamedTuple):
    """Tolerance applied below an average base amount."""

    name: str
    upper_bound: Decimal | None  # exclusive; None means unbounded
    minimum: Decimal
    percent: Decimal


class CrossCurrencyDetector:
    """Decides whether two differently denominated records are the same payment.

    Both records must carry base amounts in the same reporting currency. The
    allowed difference scales with the average base amount: small payments
    get an absolute floor to absorb rounding and fees, large ones must agree
    closely because exchange-rate slippage is small relative to the amount.
    """

    TIERS: tuple[ToleranceTier, ...] = (
        ToleranceTier("small", Decimal("100"), Decimal("10"), Decimal("0.04")),
        ToleranceTier("medium", Decimal("1000"), Decimal("15"), Decimal("0.02")),
        ToleranceTier("large", None, Decimal("25"), Decimal("0.015")),
    )

    def is_match(self, record_a: ComparableRecord, record_b: ComparableRecord) -> bool:
        """Check whether the base amounts agree within the tiered tolerance."""
        if not self.is_eligible(record_a, record_b):
            return False

        base_a = abs(record_a.base_amount)
        base_b = abs(record_b.base_amount)
        difference = abs(base_a - base_b)
        average = (base_a + base_b) / 2

        tier = self.tier_for(average)
        tolerance = self.tolerance_for(average)
        is_match = difference < tolerance

        logger.debug(
            f"Cross-currency check {record_a.currency}->{record_b.currency} "
            f"({record_a.base_currency}): diff={difference} avg={average} "
            f"tier={tier.name} tolerance={tolerance} match={is_match}"
        )

        return is_match

    def is_eligible(self, record_a: ComparableRecord, record_b: ComparableRecord) -> bool:
        """Check that the pair is cross-currency with comparable base amounts."""
        if not record_a.currency or not record_b.currency:
            return False
        if record_a.currency == record_b.currency:
            return False
        if not record_a.has_base or not record_b.has_base:
            return False
        return record_a.base_currency == record_b.base_currency

    def tier_for(self, average: Decimal) -> ToleranceTier:
        """Get the tolerance tier for an average base amount."""
        for tier in self.TIERS:
            if tier.upper_bound is None or average < tier.upper_bound:
                return tier
        return self.TIERS[-1]

    def tolerance_for(self, average: Decimal) -> Decimal:
        """Get the absolute tolerance for an average base amount."""
        tier = self.tier_for(average)
        return max(tier.minimum, average * tier.percent)


_detector = CrossCurrencyDetector()


def is_cross_currency_match(record_a: ComparableRecord, record_b: ComparableRecord) -> bool:
    """Run the default cross-currency detector."""
    return _detector.is_match(record_a, record_b)
