"""Main FastAPI application."""

import logging

from fastapi import FastAPI

from .api.matching import router as matching_router
from .config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(title="Recon Engine", version="1.0.0")
app.include_router(matching_router)


@app.get("/")
async def root():
    return {"message": "Recon engine running"}


@app.get("/health")
async def health():
    """Liveness probe - always returns OK if app is running."""
    return {"status": "ok"}
