"""Transaction matching engine."""

from .amount import AmountMode, AmountScorer, score_amount
from .calibration import CalibrationResult, FeedbackStatus, MatchFeedback, ThresholdCalibrator
from .confidence import (
    ConfidenceAggregator,
    ConfidenceWeights,
    DecisionThresholds,
    MatchDecision,
    MatchScores,
    aggregate_confidence,
    embedding_similarity_from_distance,
)
from .cross_currency import CrossCurrencyDetector, is_cross_currency_match
from .currency import CurrencyScorer, score_currency
from .dates import DateScorer, score_date
from .engine import MatchEngine

__all__ = [
    "AmountMode",
    "AmountScorer",
    "CurrencyScorer",
    "DateScorer",
    "CrossCurrencyDetector",
    "ConfidenceAggregator",
    "ConfidenceWeights",
    "DecisionThresholds",
    "MatchDecision",
    "MatchScores",
    "MatchEngine",
    "ThresholdCalibrator",
    "CalibrationResult",
    "MatchFeedback",
    "FeedbackStatus",
    "score_amount",
    "score_currency",
    "score_date",
    "is_cross_currency_match",
    "aggregate_confidence",
    "embedding_similarity_from_distance",
]
