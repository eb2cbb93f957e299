"""Domain models for the Note Risk Agent."""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ── Enums ──────────────────────────────────────────────────────────────────────

class CreditRating(str, Enum):
    AAA = "AAA"
    AA_PLUS = "AA+"
    AA = "AA"
    AA_MINUS = "AA-"
    A_PLUS = "A+"
    A = "A"
    A_MINUS = "A-"
    BBB_PLUS = "BBB+"
    BBB = "BBB"
    BBB_MINUS = "BBB-"
    BB = "BB"


class CallFeature(str, Enum):
    AUTOCALLABLE = "Autocallable"
    NON_CALLABLE = "Non-Callable"


class ProtectionType(str, Enum):
    SOFT_BARRIER = "Soft Barrier"
    HARD_BUFFER = "Hard Buffer"


class RiskBand(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    ELEVATED = "elevated"
    HIGH = "high"

    @classmethod
    def from_score(cls, score: int) -> "RiskBand":
        if score < 30:
            return cls.LOW
        if score < 60:
            return cls.MODERATE
        if score < 80:
            return cls.ELEVATED
        return cls.HIGH


# ── Market Data ────────────────────────────────────────────────────────────────

class PricePoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: dt.date
    close: float = Field(gt=0, allow_inf_nan=False, description="Closing price")


class PriceSeries(BaseModel):
    """Daily closes for one asset. Points are expected ascending by date."""

    model_config = ConfigDict(frozen=True)

    asset: str
    points: list[PricePoint] = Field(default_factory=list)

    @field_validator("points")
    @classmethod
    def validate_unique_dates(cls, v: list[PricePoint]) -> list[PricePoint]:
        seen: set[dt.date] = set()
        for point in v:
            if point.date in seen:
                raise ValueError(f"Duplicate price date {point.date.isoformat()}")
            seen.add(point.date)
        return v

    @classmethod
    def from_pairs(cls, asset: str, pairs) -> "PriceSeries":
        """Build a series from ``(date, close)`` tuples."""
        return cls(asset=asset, points=[PricePoint(date=d, close=c) for d, c in pairs])

    def __len__(self) -> int:
        return len(self.points)

    def sorted_points(self) -> list[PricePoint]:
        return sorted(self.points, key=lambda p: p.date)

    def closes(self) -> list[float]:
        return [p.close for p in self.sorted_points()]


# ── Note Terms ─────────────────────────────────────────────────────────────────

class NoteTerms(BaseModel):
    """Terms of a structured note, supplied once per analysis."""

    model_config = ConfigDict(frozen=True)

    credit_rating: str = Field(description="Issuer rating, e.g. 'A+'; unmapped values score neutral")
    maturity_months: float = Field(gt=0, allow_inf_nan=False, description="Time to maturity in months")
    call_feature: CallFeature = CallFeature.NON_CALLABLE
    no_call_period_months: Optional[float] = Field(
        default=None, ge=0, description="Initial lock-in for autocallable notes"
    )
    protection_type: ProtectionType
    protection_level: float = Field(
        gt=0, le=100, description="Barrier or buffer level as % of spot, e.g. 75"
    )
    assets: list[str] = Field(min_length=1, description="Underlying basket identifiers")

    note_id: Optional[str] = None
    issuer: Optional[str] = None
    name: Optional[str] = None
    coupon: Optional[float] = Field(default=None, ge=0, description="Annual coupon %")

    @field_validator("credit_rating")
    @classmethod
    def normalize_rating(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("assets")
    @classmethod
    def validate_assets(cls, v: list[str]) -> list[str]:
        normalized = [a.strip().upper() for a in v]
        if any(not a for a in normalized):
            raise ValueError("Asset identifiers must be non-empty")
        if len(set(normalized)) != len(normalized):
            raise ValueError("Basket assets must be distinct")
        return normalized

    @model_validator(mode="after")
    def validate_call_terms(self) -> "NoteTerms":
        if self.call_feature == CallFeature.AUTOCALLABLE and self.no_call_period_months is None:
            raise ValueError("Autocallable notes require no_call_period_months")
        return self

    @property
    def years_to_maturity(self) -> float:
        return self.maturity_months / 12

    @property
    def effective_no_call_period(self) -> Optional[float]:
        """No-call period when the note can be called, otherwise None."""
        if self.call_feature == CallFeature.AUTOCALLABLE:
            return self.no_call_period_months
        return None


# ── Results ────────────────────────────────────────────────────────────────────

class AssetRiskMetric(BaseModel):
    model_config = ConfigDict(frozen=True)

    asset: str
    breach_probability: float = Field(ge=0, le=100, description="Probability of breach, percent")
    volatility: float = Field(ge=0, description="Annualized volatility")
    spot_price: float = Field(gt=0)
    barrier_price: float = Field(gt=0)


class RiskAnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100, description="Composite risk score 0-100")
    assets: list[AssetRiskMetric]
    correlation_penalty: float = Field(ge=1.0, description="Worst-of independence multiplier")
    correlations: list[float] = Field(default_factory=list)
    market_risk_score: float = Field(ge=0, le=100)
    credit_risk_score: float = Field(ge=0, le=100)
    risk_band: RiskBand
    summary: str
