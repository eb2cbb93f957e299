"""
Composite scorer.

Blends worst-of market risk (90%) with issuer credit risk (10%) into a
single 0-100 score. The call-structure and protection multipliers are
heuristics, not a calibrated model.
"""

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

from .config import RiskParameters
from .correlation import correlation_penalty
from .exceptions import DegenerateInputError
from .models import ProtectionType


@dataclass(frozen=True)
class ScoringInput:
    credit_rating: str
    years_to_maturity: float
    protection_type: ProtectionType
    asset_probabilities: Sequence[float]   # each in [0, 1]
    correlations: Sequence[float] = field(default_factory=tuple)
    no_call_period: Optional[float] = None  # months, autocallables only


@dataclass(frozen=True)
class ScoreBreakdown:
    score: int
    market_risk_score: float
    credit_risk_score: float
    correlation_penalty: float


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class RiskEngine:
    def __init__(self, parameters: Optional[RiskParameters] = None) -> None:
        self.parameters = parameters or RiskParameters()

    def credit_score(self, rating: str) -> float:
        """Ordinal credit score; ratings outside the table take the neutral fallback."""
        table = self.parameters.credit_scores
        if rating in table:
            return float(table[rating])
        return float(self.parameters.unrated_credit_score)

    def call_adjustment(self, no_call_period: Optional[float]) -> float:
        p = self.parameters
        if no_call_period is None:
            return 1.0
        if no_call_period < p.short_no_call_months:
            return p.short_no_call_multiplier
        if no_call_period >= p.long_no_call_months:
            return p.long_no_call_multiplier
        return 1.0

    def protection_adjustment(self, protection_type: ProtectionType) -> float:
        if protection_type == ProtectionType.HARD_BUFFER:
            return self.parameters.hard_buffer_multiplier
        return 1.0

    def market_score(self, x: ScoringInput, penalty: float) -> float:
        if len(x.asset_probabilities) == 0:
            raise DegenerateInputError("At least one asset probability is required")

        worst = max(x.asset_probabilities)
        raw = worst * 100 * penalty
        raw *= self.call_adjustment(x.no_call_period)
        raw *= self.protection_adjustment(x.protection_type)
        return min(raw, 100.0)

    def score(self, x: ScoringInput) -> ScoreBreakdown:
        p = self.parameters
        penalty = correlation_penalty(x.correlations, p.correlation_sensitivity)
        market = self.market_score(x, penalty)
        credit = self.credit_score(x.credit_rating)

        blended = market * p.market_weight + credit * p.credit_weight
        final = max(0, min(100, round_half_up(blended)))

        return ScoreBreakdown(
            score=final,
            market_risk_score=market,
            credit_risk_score=credit,
            correlation_penalty=penalty,
        )


def calculate_final_risk_score(
    credit_rating: str,
    years_to_maturity: float,
    protection_type: ProtectionType,
    asset_probabilities: Sequence[float],
    correlations: Sequence[float] = (),
    no_call_period: Optional[float] = None,
    parameters: Optional[RiskParameters] = None,
) -> int:
    """Score a note in one call with default (or given) parameters."""
    engine = RiskEngine(parameters)
    return engine.score(
        ScoringInput(
            credit_rating=credit_rating,
            years_to_maturity=years_to_maturity,
            protection_type=protection_type,
            asset_probabilities=asset_probabilities,
            correlations=correlations,
            no_call_period=no_call_period,
        )
    ).score
