"""Currency code comparison."""


class CurrencyScorer:
    """Scores agreement between two ISO 4217 currency codes.

    Cross-currency pairs get a low score and have to earn
    confidence through base-amount agreement, not through the currency.
    """

    MISSING_SCORE = 0.5
    SAME_SCORE = 1.0
    DIFFERENT_SCORE = 0.3

    def score(self, currency_a: str | None, currency_b: str | None) -> float:
        """Score two currency codes (case-sensitive)."""
        if not currency_a or not currency_b:
            return self.MISSING_SCORE

        if currency_a == currency_b:
            return self.SAME_SCORE

        return self.DIFFERENT_SCORE


_scorer = CurrencyScorer()


def score_currency(currency_a: str | None, currency_b: str | None) -> float:
    """Score two currency codes with the default scorer."""
    return _scorer.score(currency_a, currency_b)
