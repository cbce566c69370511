"""Pytest configuration and fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient

from recon_engine.main import app
from recon_engine.models.records import ComparableRecord


@pytest.fixture
async def client():
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def sek_invoice():
    """Inbox item: 599 SEK invoice."""
    return ComparableRecord(amount="599", currency="SEK", date="2024-08-23")


@pytest.fixture
def sek_payment():
    """Bank transaction paying the 599 SEK invoice two days later."""
    return ComparableRecord(amount="-599", currency="SEK", date="2024-08-25")


@pytest.fixture
def vercel_invoice():
    """USD invoice with its SEK base amount."""
    return ComparableRecord(
        amount="260.18",
        currency="USD",
        base_amount="2570.78",
        base_currency="SEK",
        date="2024-08-01",
    )


@pytest.fixture
def vercel_payment():
    """SEK card payment for the USD invoice."""
    return ComparableRecord(
        amount="-2570.78",
        currency="SEK",
        base_amount="2570.78",
        base_currency="SEK",
        date="2024-08-01",
    )
