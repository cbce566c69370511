"""Decision threshold calibration from reviewer feedback."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

from recon_engine.config import Settings

from .confidence import DecisionThresholds, MatchDecision

logger = logging.getLogger(__name__)


class FeedbackStatus(str, Enum):
    """Reviewer verdict on a suggested or auto-matched pair."""

    CONFIRMED = "confirmed"
    DECLINED = "declined"


@dataclass
class MatchFeedback:
    """A reviewed match decision."""

    decision: MatchDecision
    status: FeedbackStatus
    confidence: float
    created_at: datetime


@dataclass
class CalibrationResult:
    """Calibrated thresholds and the statistics behind them."""

    total_samples: int
    confirmed: int
    declined: int
    avg_confidence_confirmed: float
    avg_confidence_declined: float
    auto_match_accuracy: float
    suggested_match_accuracy: float
    thresholds: DecisionThresholds
    calibrated: bool

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "total_samples": self.total_samples,
            "confirmed": self.confirmed,
            "declined": self.declined,
            "avg_confidence_confirmed": round(self.avg_confidence_confirmed, 4),
            "avg_confidence_declined": round(self.avg_confidence_declined, 4),
            "auto_match_accuracy": round(self.auto_match_accuracy, 4),
            "suggested_match_accuracy": round(self.suggested_match_accuracy, 4),
            "auto_match_threshold": self.thresholds.auto_match,
            "suggest_threshold": self.thresholds.suggest,
            "calibrated": self.calibrated,
        }


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are read as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _average(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _accuracy(samples: list[MatchFeedback]) -> float:
    if not samples:
        return 0.0
    confirmed = sum(1 for s in samples if s.status == FeedbackStatus.CONFIRMED)
    return confirmed / len(samples)


class ThresholdCalibrator:
    """Learns team-specific decision thresholds from reviewed matches.

    Teams that keep confirming suggestions get more suggestions; teams that
    decline auto-matches get a stricter auto-match threshold. Adjustments are
    bounded around the configured thresholds so calibration can never drift
    far from policy.
    """

    # Bounds around the configured thresholds
    AUTO_MAX_DECREASE = 0.07
    AUTO_MAX_INCREASE = 0.03
    SUGGEST_MAX_DECREASE = 0.12
    SUGGEST_MAX_INCREASE = 0.15

    def __init__(
        self,
        base: DecisionThresholds | None = None,
        window_days: int = 90,
        min_samples: int = 5,
    ):
        """Initialize calibrator.

        Args:
            base: Thresholds to calibrate from
            window_days: Only feedback this recent is considered
            min_samples: Below this many samples the base thresholds are kept
        """
        self.base = base or DecisionThresholds()
        self.window_days = window_days
        self.min_samples = min_samples

    @classmethod
    def from_settings(cls, settings: Settings) -> "ThresholdCalibrator":
        """Build a calibrator from application settings."""
        return cls(
            base=DecisionThresholds(
                auto_match=settings.auto_match_threshold,
                suggest=settings.suggest_threshold,
            ),
            window_days=settings.calibration_window_days,
            min_samples=settings.calibration_min_samples,
        )

    def calibrate(self, feedback: Iterable[MatchFeedback], as_of: datetime) -> CalibrationResult:
        """Calibrate thresholds from feedback.

        Args:
            feedback: Reviewed decisions, any order
            as_of: End of the feedback window; naive timestamps here and in
                the feedback are read as UTC

        Returns:
            CalibrationResult with the thresholds to use
        """
        as_of = _as_utc(as_of)
        cutoff = as_of - timedelta(days=self.window_days)
        samples = [f for f in feedback if cutoff < _as_utc(f.created_at) <= as_of]

        confirmed = [s for s in samples if s.status == FeedbackStatus.CONFIRMED]
        declined = [s for s in samples if s.status == FeedbackStatus.DECLINED]
        auto_matches = [s for s in samples if s.decision == MatchDecision.AUTO_MATCHED]
        suggested = [s for s in samples if s.decision == MatchDecision.SUGGESTED]

        result = CalibrationResult(
            total_samples=len(samples),
            confirmed=len(confirmed),
            declined=len(declined),
            avg_confidence_confirmed=_average([s.confidence for s in confirmed]),
            avg_confidence_declined=_average([s.confidence for s in declined]),
            auto_match_accuracy=_accuracy(auto_matches),
            suggested_match_accuracy=_accuracy(suggested),
            thresholds=self.base,
            calibrated=False,
        )

        if len(samples) < self.min_samples:
            return result

        auto = self._calibrate_auto(result)
        suggest = self._calibrate_suggest(result)

        auto = min(
            self.base.auto_match + self.AUTO_MAX_INCREASE,
            max(self.base.auto_match - self.AUTO_MAX_DECREASE, auto),
        )
        suggest = min(
            self.base.suggest + self.SUGGEST_MAX_INCREASE,
            max(self.base.suggest - self.SUGGEST_MAX_DECREASE, suggest),
        )
        auto = round(max(0.0, min(1.0, auto)), 4)
        suggest = round(max(0.0, min(auto, suggest)), 4)

        result.thresholds = DecisionThresholds(auto_match=auto, suggest=suggest)
        result.calibrated = True

        if result.thresholds != self.base:
            logger.info(
                f"Calibrated thresholds from {len(samples)} samples: "
                f"auto {self.base.auto_match} -> {auto}, "
                f"suggest {self.base.suggest} -> {suggest}"
            )

        return result

    def _calibrate_auto(self, stats: CalibrationResult) -> float:
        threshold = self.base.auto_match

        if stats.auto_match_accuracy > 0.97 and stats.confirmed > 5:
            threshold -= 0.04
        elif stats.auto_match_accuracy < 0.95 and stats.declined > 2:
            threshold += 0.03

        return threshold

    def _calibrate_suggest(self, stats: CalibrationResult) -> float:
        threshold = self.base.suggest
        accuracy = stats.suggested_match_accuracy

        # Acceptance of suggestions, first matching rule wins
        if accuracy > 0.9 and stats.confirmed > 8:
            threshold -= 0.08
        elif accuracy > 0.8 and stats.confirmed > 5:
            threshold -= 0.06
        elif accuracy > 0.7 and stats.confirmed > 3:
            threshold -= 0.04
        elif accuracy < 0.5 and stats.declined > 4:
            threshold += 0.12
        elif accuracy < 0.65 and stats.declined > 6:
            threshold += 0.08

        # Separation between confirmed and declined confidence
        if (
            stats.avg_confidence_confirmed > 0
            and stats.avg_confidence_declined > 0
            and stats.confirmed > 3
        ):
            gap = stats.avg_confidence_confirmed - stats.avg_confidence_declined
            if gap > 0.2:
                threshold -= 0.08
            elif gap > 0.12:
                threshold -= 0.05
            elif gap < 0.05:
                threshold += 0.06

        # Engagement volume
        if stats.confirmed > 20:
            threshold -= 0.03
        if stats.declined > 15 and accuracy < 0.7:
            threshold += 0.08

        return threshold
