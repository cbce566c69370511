"""Services for reconciliation."""

from .matching import MatchEngine, ThresholdCalibrator

__all__ = ["MatchEngine", "ThresholdCalibrator"]
