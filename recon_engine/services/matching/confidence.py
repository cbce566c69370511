"""Confidence aggregation and match decisions."""

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from enum import Enum

from recon_engine.config import Settings


class MatchDecision(str, Enum):
    """Outcome of a scored pair."""

    AUTO_MATCHED = "auto_matched"
    SUGGESTED = "suggested"
    NO_MATCH = "no_match"


@dataclass(frozen=True)
class ConfidenceWeights:
    """Weights of each signal in the confidence score."""

    amount: float = 0.3
    currency: float = 0.2
    date: float = 0.2
    embedding: float = 0.3

    def __post_init__(self) -> None:
        weights = asdict(self)
        negative = [name for name, value in weights.items() if value < 0]
        if negative:
            raise ValueError(f"Weights must be non-negative: {', '.join(negative)}")
        total = sum(weights.values())
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"Weights must sum to 1.0, got {total}")


@dataclass(frozen=True)
class DecisionThresholds:
    """Confidence cut-offs for the match decision."""

    auto_match: float = 0.9
    suggest: float = 0.6

    def __post_init__(self) -> None:
        if not 0.0 <= self.suggest <= self.auto_match <= 1.0:
            raise ValueError(
                f"Thresholds must satisfy 0 <= suggest ({self.suggest}) "
                f"<= auto_match ({self.auto_match}) <= 1"
            )


@dataclass
class MatchScores:
    """Explainable breakdown of a scored (inbox item, transaction) pair."""

    amount_score: float
    currency_score: float
    date_score: float
    embedding_score: float
    confidence: float
    decision: MatchDecision
    is_cross_currency: bool = False
    reasons: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary, scores rounded to 3 decimals."""
        return {
            "amount_score": round(self.amount_score, 3),
            "currency_score": round(self.currency_score, 3),
            "date_score": round(self.date_score, 3),
            "embedding_score": round(self.embedding_score, 3),
            "confidence": round(self.confidence, 3),
            "decision": self.decision.value,
            "is_cross_currency": self.is_cross_currency,
            "reasons": self.reasons,
        }


def _decimal(value: float) -> Decimal:
    # Through str so 0.95 stays 0.95 instead of its binary expansion
    return Decimal(str(value))


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def embedding_similarity_from_distance(distance: float) -> float:
    """Convert a cosine distance from the vector store to a [0, 1] similarity."""
    return _clamp(1.0 - distance)


class ConfidenceAggregator:
    """Combines component scores into one confidence and a decision."""

    def __init__(
        self,
        weights: ConfidenceWeights | None = None,
        thresholds: DecisionThresholds | None = None,
    ):
        """Initialize aggregator.

        Args:
            weights: Signal weights (defaults to 0.3/0.2/0.2/0.3)
            thresholds: Decision thresholds (defaults to 0.9 auto, 0.6 suggest)
        """
        self.weights = weights or ConfidenceWeights()
        self.thresholds = thresholds or DecisionThresholds()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConfidenceAggregator":
        """Build an aggregator from application settings."""
        return cls(
            weights=ConfidenceWeights(
                amount=settings.weight_amount,
                currency=settings.weight_currency,
                date=settings.weight_date,
                embedding=settings.weight_embedding,
            ),
            thresholds=DecisionThresholds(
                auto_match=settings.auto_match_threshold,
                suggest=settings.suggest_threshold,
            ),
        )

    def aggregate(
        self,
        amount_score: float,
        currency_score: float,
        date_score: float,
        embedding_score: float,
    ) -> float:
        """Weighted sum of the component scores.

        The embedding score comes from an external similarity provider and is
        clamped into [0, 1] before weighting. The sum is taken in Decimal so a
        confidence that lands exactly on a threshold is not pushed below it.
        """
        confidence = (
            _decimal(self.weights.amount) * _decimal(amount_score)
            + _decimal(self.weights.currency) * _decimal(currency_score)
            + _decimal(self.weights.date) * _decimal(date_score)
            + _decimal(self.weights.embedding) * _decimal(_clamp(embedding_score))
        )
        confidence = max(Decimal("0"), min(Decimal("1"), confidence))
        return float(confidence)

    def get_decision(self, confidence: float) -> MatchDecision:
        """Determine the decision band for a confidence score."""
        score = _decimal(confidence)
        if score >= _decimal(self.thresholds.auto_match):
            return MatchDecision.AUTO_MATCHED
        elif score >= _decimal(self.thresholds.suggest):
            return MatchDecision.SUGGESTED
        else:
            return MatchDecision.NO_MATCH


_aggregator = ConfidenceAggregator()


def aggregate_confidence(
    amount_score: float,
    currency_score: float,
    date_score: float,
    embedding_score: float,
) -> float:
    """Aggregate component scores with the default weights."""
    return _aggregator.aggregate(amount_score, currency_score, date_score, embedding_score)
