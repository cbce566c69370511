"""Match scoring API endpoints."""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from recon_engine.config import settings
from recon_engine.models.records import ComparableRecord, RecordType
from recon_engine.services.matching import (
    FeedbackStatus,
    MatchDecision,
    MatchEngine,
    MatchFeedback,
    ThresholdCalibrator,
)

router = APIRouter(prefix="/api/match", tags=["matching"])


class RecordIn(BaseModel):
    """Inbox item or transaction snapshot."""

    amount: Decimal | None = None
    currency: str | None = Field(None, min_length=3, max_length=3)
    base_amount: Decimal | None = None
    base_currency: str | None = Field(None, min_length=3, max_length=3)
    record_type: RecordType | None = None
    date: date

    def to_record(self) -> ComparableRecord:
        return ComparableRecord(
            amount=self.amount,
            currency=self.currency,
            base_amount=self.base_amount,
            base_currency=self.base_currency,
            date=self.date,
            record_type=self.record_type,
        )


class ScoreRequest(BaseModel):
    """Request to score one pair."""

    inbox: RecordIn
    transaction: RecordIn
    embedding_score: float = Field(..., ge=0.0, le=1.0)


class ScoreResponse(BaseModel):
    """Score breakdown for a pair."""

    amount_score: float
    currency_score: float
    date_score: float
    embedding_score: float
    confidence: float
    decision: MatchDecision
    is_cross_currency: bool
    reasons: list[str]


class CandidateIn(BaseModel):
    """Candidate transaction for an inbox item."""

    id: str
    transaction: RecordIn
    embedding_score: float = Field(..., ge=0.0, le=1.0)


class BestMatchRequest(BaseModel):
    """Request to pick the best candidate for an inbox item."""

    inbox: RecordIn
    candidates: list[CandidateIn] = Field(default_factory=list)


class BestMatchResponse(BaseModel):
    """Best candidate, if any qualified."""

    candidate_id: str | None = None
    scores: ScoreResponse | None = None


class PolicyResponse(BaseModel):
    """Active weights and thresholds."""

    weight_amount: float
    weight_currency: float
    weight_date: float
    weight_embedding: float
    auto_match_threshold: float
    suggest_threshold: float
    cross_currency_gate: bool


class FeedbackIn(BaseModel):
    """Reviewed match decision."""

    decision: MatchDecision
    status: FeedbackStatus
    confidence: float = Field(..., ge=0.0, le=1.0)
    created_at: datetime


class CalibrateRequest(BaseModel):
    """Request to calibrate thresholds."""

    feedback: list[FeedbackIn] = Field(default_factory=list)
    as_of: datetime


class CalibrationResponse(BaseModel):
    """Calibrated thresholds and supporting statistics."""

    total_samples: int
    confirmed: int
    declined: int
    avg_confidence_confirmed: float
    avg_confidence_declined: float
    auto_match_accuracy: float
    suggested_match_accuracy: float
    auto_match_threshold: float
    suggest_threshold: float
    calibrated: bool


def get_engine() -> MatchEngine:
    """Match engine configured from settings."""
    return MatchEngine.from_settings(settings)


def get_calibrator() -> ThresholdCalibrator:
    """Threshold calibrator configured from settings."""
    return ThresholdCalibrator.from_settings(settings)


@router.post("/score", response_model=ScoreResponse)
async def score_pair(
    request: ScoreRequest,
    engine: Annotated[MatchEngine, Depends(get_engine)],
):
    """Score an inbox item against a transaction."""
    scores = engine.score_pair(
        request.inbox.to_record(),
        request.transaction.to_record(),
        request.embedding_score,
    )
    return scores.to_dict()


@router.post("/best", response_model=BestMatchResponse)
async def best_match(
    request: BestMatchRequest,
    engine: Annotated[MatchEngine, Depends(get_engine)],
):
    """Pick the best candidate transaction for an inbox item."""
    result = engine.best_match(
        request.inbox.to_record(),
        (
            (candidate.id, candidate.transaction.to_record(), candidate.embedding_score)
            for candidate in request.candidates
        ),
    )
    if result is None:
        return BestMatchResponse()

    candidate_id, scores = result
    return BestMatchResponse(candidate_id=candidate_id, scores=scores.to_dict())


@router.get("/policy", response_model=PolicyResponse)
async def get_policy(engine: Annotated[MatchEngine, Depends(get_engine)]):
    """Get the active scoring policy."""
    weights = engine.aggregator.weights
    thresholds = engine.aggregator.thresholds
    return PolicyResponse(
        weight_amount=weights.amount,
        weight_currency=weights.currency,
        weight_date=weights.date,
        weight_embedding=weights.embedding,
        auto_match_threshold=thresholds.auto_match,
        suggest_threshold=thresholds.suggest,
        cross_currency_gate=engine.cross_currency_gate,
    )


@router.post("/calibrate", response_model=CalibrationResponse)
async def calibrate_thresholds(
    request: CalibrateRequest,
    calibrator: Annotated[ThresholdCalibrator, Depends(get_calibrator)],
):
    """Calibrate decision thresholds from reviewer feedback."""
    result = calibrator.calibrate(
        [
            MatchFeedback(
                decision=f.decision,
                status=f.status,
                confidence=f.confidence,
                created_at=f.created_at,
            )
            for f in request.feedback
        ],
        as_of=request.as_of,
    )
    return result.to_dict()
