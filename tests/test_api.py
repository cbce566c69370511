"""Tests for API endpoints."""

import pytest

from recon_engine.api.matching import get_engine
from recon_engine.main import app
from recon_engine.services.matching import MatchEngine

SEK_INVOICE = {"amount": 599, "currency": "SEK", "date": "2024-08-23"}
SEK_PAYMENT = {"amount": -599, "currency": "SEK", "date": "2024-08-25"}


@pytest.fixture
def gated_engine():
    """Override the engine with the cross-currency gate enabled."""
    app.dependency_overrides[get_engine] = lambda: MatchEngine(cross_currency_gate=True)
    yield
    app.dependency_overrides.pop(get_engine, None)


class TestScoreAPI:
    """Tests for pair scoring endpoint."""

    @pytest.mark.asyncio
    async def test_score_pair(self, client):
        """Test scoring an invoice against its payment."""
        response = await client.post(
            "/api/match/score",
            json={"inbox": SEK_INVOICE, "transaction": SEK_PAYMENT, "embedding_score": 0.9},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["amount_score"] == 1.0
        assert data["currency_score"] == 1.0
        assert data["date_score"] == 0.85
        assert data["confidence"] == 0.94
        assert data["decision"] == "auto_matched"
        assert data["is_cross_currency"] is False
        assert "currency_same" in data["reasons"]

    @pytest.mark.asyncio
    async def test_score_cross_currency(self, client):
        """Test scoring a USD invoice against a SEK payment."""
        response = await client.post(
            "/api/match/score",
            json={
                "inbox": {
                    "amount": "260.18",
                    "currency": "USD",
                    "base_amount": "2570.78",
                    "base_currency": "SEK",
                    "date": "2024-08-01",
                },
                "transaction": {
                    "amount": "-2570.78",
                    "currency": "SEK",
                    "base_amount": "2570.78",
                    "base_currency": "SEK",
                    "date": "2024-08-01",
                },
                "embedding_score": 0.8,
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["is_cross_currency"] is True
        assert data["decision"] == "suggested"

    @pytest.mark.asyncio
    async def test_score_invoice_record_type(self, client):
        """Test the record type selects payment terms."""
        response = await client.post(
            "/api/match/score",
            json={
                "inbox": {
                    "amount": 5000,
                    "currency": "EUR",
                    "date": "2024-01-01",
                    "record_type": "invoice",
                },
                "transaction": {"amount": -5000, "currency": "EUR", "date": "2024-01-31"},
                "embedding_score": 0.7,
            },
        )

        assert response.status_code == 200
        assert response.json()["date_score"] == 0.98

    @pytest.mark.asyncio
    async def test_malformed_date(self, client):
        """Test malformed dates are rejected."""
        response = await client.post(
            "/api/match/score",
            json={
                "inbox": {**SEK_INVOICE, "date": "2024-13-45"},
                "transaction": SEK_PAYMENT,
                "embedding_score": 0.9,
            },
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_missing_date(self, client):
        """Test records without a date are rejected."""
        response = await client.post(
            "/api/match/score",
            json={
                "inbox": {"amount": 599, "currency": "SEK"},
                "transaction": SEK_PAYMENT,
                "embedding_score": 0.9,
            },
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_embedding_out_of_range(self, client):
        """Test embedding scores outside [0, 1] are rejected."""
        response = await client.post(
            "/api/match/score",
            json={"inbox": SEK_INVOICE, "transaction": SEK_PAYMENT, "embedding_score": 1.5},
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_invalid_currency_code(self, client):
        """Test currency codes must have three letters."""
        response = await client.post(
            "/api/match/score",
            json={
                "inbox": {**SEK_INVOICE, "currency": "SEKR"},
                "transaction": SEK_PAYMENT,
                "embedding_score": 0.9,
            },
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_cross_currency_gate(self, client, gated_engine):
        """Test the gate rejects cross-currency pairs outside tolerance."""
        response = await client.post(
            "/api/match/score",
            json={
                "inbox": {
                    "amount": 200,
                    "currency": "USD",
                    "base_amount": 2000,
                    "base_currency": "SEK",
                    "date": "2024-08-01",
                },
                "transaction": {
                    "amount": -2050,
                    "currency": "SEK",
                    "base_amount": 2050,
                    "base_currency": "SEK",
                    "date": "2024-08-01",
                },
                "embedding_score": 1.0,
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["decision"] == "no_match"
        assert "cross_currency_gate" in data["reasons"]


class TestBestMatchAPI:
    """Tests for best candidate endpoint."""

    @pytest.mark.asyncio
    async def test_best_match(self, client):
        """Test the strongest candidate is returned."""
        response = await client.post(
            "/api/match/best",
            json={
                "inbox": SEK_INVOICE,
                "candidates": [
                    {
                        "id": "txn-far",
                        "transaction": {"amount": -1000, "currency": "USD", "date": "2024-08-25"},
                        "embedding_score": 0.2,
                    },
                    {"id": "txn-good", "transaction": SEK_PAYMENT, "embedding_score": 0.9},
                ],
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["candidate_id"] == "txn-good"
        assert data["scores"]["decision"] == "auto_matched"

    @pytest.mark.asyncio
    async def test_no_candidates(self, client):
        """Test an empty candidate list returns no match."""
        response = await client.post(
            "/api/match/best",
            json={"inbox": SEK_INVOICE, "candidates": []},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["candidate_id"] is None
        assert data["scores"] is None


class TestPolicyAPI:
    """Tests for policy endpoint."""

    @pytest.mark.asyncio
    async def test_default_policy(self, client):
        """Test the default weights and thresholds are reported."""
        response = await client.get("/api/match/policy")

        assert response.status_code == 200
        data = response.json()
        assert data["weight_amount"] == 0.3
        assert data["weight_currency"] == 0.2
        assert data["weight_date"] == 0.2
        assert data["weight_embedding"] == 0.3
        assert data["auto_match_threshold"] == 0.9
        assert data["suggest_threshold"] == 0.6
        assert data["cross_currency_gate"] is False

    @pytest.mark.asyncio
    async def test_policy_reflects_override(self, client, gated_engine):
        """Test the policy reports the engine in use."""
        response = await client.get("/api/match/policy")
        assert response.json()["cross_currency_gate"] is True


class TestCalibrateAPI:
    """Tests for calibration endpoint."""

    @pytest.mark.asyncio
    async def test_insufficient_feedback(self, client):
        """Test too little feedback keeps the configured thresholds."""
        response = await client.post(
            "/api/match/calibrate",
            json={
                "as_of": "2026-01-15T12:00:00Z",
                "feedback": [
                    {
                        "decision": "auto_matched",
                        "status": "confirmed",
                        "confidence": 0.95,
                        "created_at": "2026-01-10T12:00:00Z",
                    }
                ],
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["calibrated"] is False
        assert data["total_samples"] == 1
        assert data["auto_match_threshold"] == 0.9
        assert data["suggest_threshold"] == 0.6

    @pytest.mark.asyncio
    async def test_calibrates_from_feedback(self, client):
        """Test reliable auto-matches lower the auto-match threshold."""
        feedback = [
            {
                "decision": "auto_matched",
                "status": "confirmed",
                "confidence": 0.95,
                "created_at": f"2026-01-{day:02d}T12:00:00Z",
            }
            for day in range(1, 15)
        ]
        response = await client.post(
            "/api/match/calibrate",
            json={"as_of": "2026-01-15T12:00:00Z", "feedback": feedback},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["calibrated"] is True
        assert data["confirmed"] == 14
        assert data["auto_match_threshold"] == 0.86

    @pytest.mark.asyncio
    async def test_mixed_timezones(self, client):
        """Test naive and offset timestamps can be mixed in one request."""
        feedback = [
            {
                "decision": "auto_matched",
                "status": "confirmed",
                "confidence": 0.95,
                "created_at": "2024-03-01T00:00:00Z",
            },
            {
                "decision": "auto_matched",
                "status": "confirmed",
                "confidence": 0.95,
                "created_at": "2024-03-02T00:00:00",
            },
        ]
        response = await client.post(
            "/api/match/calibrate",
            json={"as_of": "2024-03-10T00:00:00", "feedback": feedback},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total_samples"] == 2
        assert data["calibrated"] is False

    @pytest.mark.asyncio
    async def test_invalid_status(self, client):
        """Test unknown feedback statuses are rejected."""
        response = await client.post(
            "/api/match/calibrate",
            json={
                "as_of": "2026-01-15T12:00:00Z",
                "feedback": [
                    {
                        "decision": "auto_matched",
                        "status": "maybe",
                        "confidence": 0.95,
                        "created_at": "2026-01-10T12:00:00Z",
                    }
                ],
            },
        )
        assert response.status_code == 422
