"""Pair scoring pipeline."""

import logging
from collections.abc import Iterable
from typing import TypeVar

from recon_engine.config import Settings
from recon_engine.models.records import ComparableRecord, RecordType

from .amount import AmountMode, AmountScorer
from .confidence import ConfidenceAggregator, MatchDecision, MatchScores
from .cross_currency import CrossCurrencyDetector
from .currency import CurrencyScorer
from .dates import DateScorer

logger = logging.getLogger(__name__)

CandidateKey = TypeVar("CandidateKey")


class MatchEngine:
    """Scores (inbox item, transaction) pairs.

    Flow:
    1. Score amount, currency and date independently
    2. Run the cross-currency detector on eligible pairs
    3. Aggregate with the external embedding similarity
    4. Map the confidence onto a decision band
    """

    # A later candidate must beat the current best by more than this
    TIE_EPSILON = 0.001

    def __init__(
        self,
        aggregator: ConfidenceAggregator | None = None,
        cross_currency_gate: bool = False,
    ):
        """Initialize engine.

        Args:
            aggregator: Confidence aggregator (defaults to standard weights)
            cross_currency_gate: Reject eligible cross-currency pairs that
                fail the base-amount tolerance check
        """
        self.amount_scorer = AmountScorer()
        self.currency_scorer = CurrencyScorer()
        self.date_scorer = DateScorer()
        self.cross_currency_detector = CrossCurrencyDetector()
        self.aggregator = aggregator or ConfidenceAggregator()
        self.cross_currency_gate = cross_currency_gate

    @classmethod
    def from_settings(cls, settings: Settings) -> "MatchEngine":
        """Build an engine from application settings."""
        return cls(
            aggregator=ConfidenceAggregator.from_settings(settings),
            cross_currency_gate=settings.cross_currency_gate,
        )

    def score_pair(
        self,
        inbox: ComparableRecord,
        transaction: ComparableRecord,
        embedding_score: float,
    ) -> MatchScores:
        """Score a single pair.

        Args:
            inbox: Inbox item snapshot, its record type selects the date model
            transaction: Bank transaction snapshot
            embedding_score: Semantic similarity in [0, 1] from the embedding provider

        Returns:
            MatchScores with component scores, confidence, decision and reasons

        Raises:
            ValueError: If either record has no date
        """
        if inbox.date is None or transaction.date is None:
            raise ValueError("Both records need a date to be scored")

        reasons = []

        amount_mode = self.amount_scorer.mode_for(inbox, transaction)
        amount_score = self.amount_scorer.score(inbox, transaction)
        if amount_mode is None:
            reasons.append("amount_missing")
        elif amount_mode == AmountMode.DIFFERENT_CURRENCY and self.amount_scorer.is_suspicious(
            inbox.amount, transaction.amount
        ):
            reasons.append("amount_sign_magnitude_mismatch")
        else:
            reasons.append(f"amount_{amount_mode.value}")

        currency_score = self.currency_scorer.score(inbox.currency, transaction.currency)
        if not inbox.currency or not transaction.currency:
            reasons.append("currency_missing")
        elif inbox.currency == transaction.currency:
            reasons.append("currency_same")
        else:
            reasons.append("currency_different")

        record_type = inbox.record_type or RecordType.EXPENSE
        date_score = self.date_scorer.score(inbox.date, transaction.date, record_type)
        signed_days = (transaction.date - inbox.date).days
        reasons.append(f"date_{record_type.value}_{signed_days:+d}_days")

        is_cross_currency = False
        gate_rejected = False
        if self.cross_currency_detector.is_eligible(inbox, transaction):
            is_cross_currency = self.cross_currency_detector.is_match(inbox, transaction)
            reasons.append(
                "cross_currency_within_tolerance"
                if is_cross_currency
                else "cross_currency_outside_tolerance"
            )
            gate_rejected = self.cross_currency_gate and not is_cross_currency

        confidence = self.aggregator.aggregate(
            amount_score, currency_score, date_score, embedding_score
        )
        decision = self.aggregator.get_decision(confidence)

        if gate_rejected and decision != MatchDecision.NO_MATCH:
            logger.info(
                f"Cross-currency gate rejected {inbox.currency}->{transaction.currency} "
                f"pair with confidence {confidence:.3f}"
            )
            decision = MatchDecision.NO_MATCH
            reasons.append("cross_currency_gate")

        reasons.append(f"final_{confidence:.3f}_{decision.value}")
        logger.debug(f"Scored {inbox!r} against {transaction!r}: {reasons}")

        return MatchScores(
            amount_score=amount_score,
            currency_score=currency_score,
            date_score=date_score,
            embedding_score=max(0.0, min(1.0, embedding_score)),
            confidence=confidence,
            decision=decision,
            is_cross_currency=is_cross_currency,
            reasons=reasons,
        )

    def best_match(
        self,
        inbox: ComparableRecord,
        candidates: Iterable[tuple[CandidateKey, ComparableRecord, float]],
    ) -> tuple[CandidateKey, MatchScores] | None:
        """Find the best transaction for an inbox item.

        Args:
            inbox: Inbox item snapshot
            candidates: (key, transaction, embedding_score) triples; the key is
                returned untouched so callers can use their own identifiers

        Returns:
            (key, scores) of the best candidate that is not a no-match, or None
        """
        best: tuple[CandidateKey, MatchScores] | None = None
        highest = 0.0

        for key, transaction, embedding_score in candidates:
            scores = self.score_pair(inbox, transaction, embedding_score)
            if scores.decision == MatchDecision.NO_MATCH:
                continue
            if scores.confidence > highest + self.TIE_EPSILON:
                best = (key, scores)
                highest = scores.confidence

        return best
