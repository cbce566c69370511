"""Configuration from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Logging
    log_level: str = "INFO"

    # Confidence weights (must sum to 1.0)
    weight_amount: float = 0.3
    weight_currency: float = 0.2
    weight_date: float = 0.2
    weight_embedding: float = 0.3

    # Decision thresholds
    auto_match_threshold: float = 0.9
    suggest_threshold: float = 0.6

    # Force no-match when an eligible cross-currency pair fails the tolerance check
    cross_currency_gate: bool = False

    # Threshold calibration from reviewer feedback
    calibration_window_days: int = 90
    calibration_min_samples: int = 5

    class Config:
        env_prefix = ""
        case_sensitive = False


settings = Settings()
