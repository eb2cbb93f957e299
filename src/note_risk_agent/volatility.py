"""
Returns/volatility estimator.

Turns a daily close series into log returns and an annualized realized
volatility (sample standard deviation scaled by sqrt of trading days).
"""

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from .config import RiskParameters
from .exceptions import InsufficientDataError
from .models import PriceSeries

logger = logging.getLogger(__name__)

TRADING_DAYS_PER_YEAR = RiskParameters().trading_days_per_year
MIN_RELIABLE_OBSERVATIONS = 20


@dataclass(frozen=True)
class VolatilityEstimate:
    """Realized volatility for one asset."""
    asset: str
    annual_volatility: float  # decimal, 0.20 = 20%
    last_price: float
    returns: np.ndarray       # daily log returns, oldest first
    observations: int         # number of closes used


def log_returns(prices: Sequence[float]) -> np.ndarray:
    """Daily log returns ln(p[i+1] / p[i]) of an ordered close sequence."""
    arr = np.asarray(prices, dtype=float)
    return np.diff(np.log(arr))


def annualized_volatility(returns: np.ndarray, trading_days: int = TRADING_DAYS_PER_YEAR) -> float:
    """Sample standard deviation (n-1) of daily returns, annualized.

    A single return has no spread and yields 0.0.
    """
    if len(returns) < 2:
        return 0.0
    daily_vol = float(np.std(returns, ddof=1))
    return daily_vol * float(np.sqrt(trading_days))


def estimate_volatility(
    series: PriceSeries,
    trading_days: int = TRADING_DAYS_PER_YEAR,
) -> VolatilityEstimate:
    """Compute annualized volatility and spot price from a price series."""
    observations = len(series)
    if observations < 2:
        raise InsufficientDataError(series.asset, observations)

    closes = series.closes()
    returns = log_returns(closes)
    annual_vol = annualized_volatility(returns, trading_days)

    if observations < MIN_RELIABLE_OBSERVATIONS:
        logger.warning(
            f"{series.asset}: only {observations} closes, volatility estimate is unreliable"
        )
    logger.debug(f"{series.asset} annualized vol: {annual_vol * 100:.1f}%")

    return VolatilityEstimate(
        asset=series.asset,
        annual_volatility=annual_vol,
        last_price=closes[-1],
        returns=returns,
        observations=observations,
    )
