"""Configuration management for the Note Risk Agent."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CREDIT_SCORES: dict[str, int] = {
    "AAA": 0,
    "AA+": 10,
    "AA": 20,
    "AA-": 30,
    "A+": 40,
    "A": 50,
    "A-": 60,
    "BBB+": 70,
    "BBB": 80,
    "BBB-": 90,
    "BB": 100,
}


class RiskParameters(BaseModel):
    """Model constants for the scoring pipeline.

    The defaults are the calibrated values; tests and callers may build a
    variant with ``RiskParameters(risk_free_rate=0.03)`` or ``model_copy``.
    """

    model_config = ConfigDict(frozen=True)

    # ── Market model ───────────────────────────────────────────────────────────
    risk_free_rate: float = Field(default=0.045, description="Annual risk-free drift")
    trading_days_per_year: int = Field(default=252, gt=0, description="Annualization factor")

    # ── Worst-of correlation penalty ───────────────────────────────────────────
    correlation_sensitivity: float = Field(
        default=0.5,
        ge=0,
        description="Penalty added per unit of (1 - mean correlation)",
    )

    # ── Call structure heuristic ───────────────────────────────────────────────
    short_no_call_months: float = Field(default=6, description="Below this, lock-in counts as short")
    long_no_call_months: float = Field(default=12, description="At or above this, lock-in counts as long")
    short_no_call_multiplier: float = Field(default=0.95, gt=0)
    long_no_call_multiplier: float = Field(default=1.05, gt=0)

    # ── Protection design ──────────────────────────────────────────────────────
    hard_buffer_multiplier: float = Field(default=0.7, gt=0)

    # ── Blend ──────────────────────────────────────────────────────────────────
    market_weight: float = Field(default=0.90, ge=0, le=1)
    credit_weight: float = Field(default=0.10, ge=0, le=1)
    credit_scores: dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_CREDIT_SCORES))
    unrated_credit_score: int = Field(
        default=50,
        ge=0,
        le=100,
        description="Neutral score for ratings missing from credit_scores",
    )

    @field_validator("credit_scores")
    @classmethod
    def validate_credit_scores(cls, v: dict[str, int]) -> dict[str, int]:
        out_of_range = {rating: score for rating, score in v.items() if not 0 <= score <= 100}
        if out_of_range:
            raise ValueError(f"Credit scores must be within 0-100: {out_of_range}")
        return v


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="NOTE_RISK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Market Data ────────────────────────────────────────────────────────────
    market_data_base_url: str = Field(
        default="https://query1.finance.yahoo.com",
        description="Yahoo Finance chart API host",
    )
    market_data_timeout_seconds: float = Field(default=30.0, description="HTTP timeout per request")
    lookback_days: int = Field(default=365, gt=0, description="Calendar days of history per asset")
    user_agent: str = Field(
        default="Mozilla/5.0 (compatible; note-risk-agent/0.1)",
        description="User-Agent header sent to the market data host",
    )

    # ── Logging ────────────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", description="Root log level")


settings = Settings()
