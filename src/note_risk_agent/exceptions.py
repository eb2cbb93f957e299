"""Exceptions raised by the note risk pipeline."""

from typing import Any, Dict, Optional


class NoteRiskError(Exception):
    """Base exception for all risk-pipeline errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__.upper()
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"{self.error_code}: {self.message}"


class DataUnavailableError(NoteRiskError):
    """Price history for an asset could not be obtained or was empty."""

    def __init__(self, asset: str, reason: str = "no price history returned"):
        super().__init__(
            f"Price history unavailable for {asset}: {reason}",
            error_code="DATA_UNAVAILABLE",
            details={"asset": asset, "reason": reason},
        )
        self.asset = asset


class InsufficientDataError(NoteRiskError):
    """Too few observations to compute a return."""

    def __init__(self, asset: str, observations: int, required: int = 2):
        super().__init__(
            f"Insufficient data for {asset}: {observations} observations, need {required}",
            error_code="INSUFFICIENT_DATA",
            details={"asset": asset, "observations": observations, "required": required},
        )
        self.asset = asset
        self.observations = observations


class DegenerateInputError(NoteRiskError):
    """Numeric input outside the domain of the breach model or scorer."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="DEGENERATE_INPUT", details=details)


class RiskAnalysisError(NoteRiskError):
    """User-facing failure for a whole analysis request."""

    USER_MESSAGE = "Unable to compute risk. Check inputs and try again."

    def __init__(self, asset: Optional[str] = None, cause: Optional[NoteRiskError] = None):
        details: Dict[str, Any] = {}
        if asset:
            details["asset"] = asset
        if cause is not None:
            details["cause"] = cause.to_dict()
        super().__init__(self.USER_MESSAGE, error_code="RISK_ANALYSIS_FAILED", details=details)
        self.asset = asset
