from .analyzer import NoteRiskAnalyzer
from .breach import breach_probability, normal_cdf
from .config import RiskParameters
from .correlation import align_trailing, correlation_penalty, pairwise_correlations
from .exceptions import (
    DataUnavailableError,
    DegenerateInputError,
    InsufficientDataError,
    NoteRiskError,
    RiskAnalysisError,
)
from .models import (
    AssetRiskMetric,
    CallFeature,
    CreditRating,
    NoteTerms,
    PricePoint,
    PriceSeries,
    ProtectionType,
    RiskAnalysisResult,
    RiskBand,
)
from .risk_engine import RiskEngine, ScoreBreakdown, ScoringInput, calculate_final_risk_score
from .volatility import VolatilityEstimate, estimate_volatility, log_returns

__all__ = [
    "AssetRiskMetric",
    "CallFeature",
    "CreditRating",
    "DataUnavailableError",
    "DegenerateInputError",
    "InsufficientDataError",
    "NoteRiskAnalyzer",
    "NoteRiskError",
    "NoteTerms",
    "PricePoint",
    "PriceSeries",
    "ProtectionType",
    "RiskAnalysisError",
    "RiskAnalysisResult",
    "RiskBand",
    "RiskEngine",
    "RiskParameters",
    "ScoreBreakdown",
    "ScoringInput",
    "VolatilityEstimate",
    "align_trailing",
    "breach_probability",
    "calculate_final_risk_score",
    "correlation_penalty",
    "estimate_volatility",
    "log_returns",
    "normal_cdf",
    "pairwise_correlations",
]
