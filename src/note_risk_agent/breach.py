"""
Breach probability model.

Probability that a lognormal asset with risk-neutral drift finishes at or
below its protection barrier at maturity: Phi(-d2) from Black-Scholes.
"""

import math

from .config import RiskParameters
from .exceptions import DegenerateInputError

RISK_FREE_RATE = RiskParameters().risk_free_rate

# Zelen-Severo (Abramowitz & Stegun 26.2.17) coefficients
_P = 0.2316419
_INV_SQRT_2PI = 0.3989422804
_B = (0.31938153, -0.356563782, 1.781477937, -1.821255978, 1.330274429)


def normal_cdf(x: float) -> float:
    """Standard normal CDF, absolute error below 1e-7."""
    t = 1.0 / (1.0 + _P * abs(x))
    d = _INV_SQRT_2PI * math.exp(-x * x / 2.0)
    b1, b2, b3, b4, b5 = _B
    p = d * t * (b1 + t * (b2 + t * (b3 + t * (b4 + t * b5))))
    return 1.0 - p if x > 0 else p


def d2(
    current_price: float,
    barrier_price: float,
    volatility: float,
    years_to_maturity: float,
    risk_free_rate: float = RISK_FREE_RATE,
) -> float:
    numerator = (
        math.log(current_price / barrier_price)
        + (risk_free_rate - 0.5 * volatility ** 2) * years_to_maturity
    )
    return numerator / (volatility * math.sqrt(years_to_maturity))


def breach_probability(
    current_price: float,
    barrier_price: float,
    volatility: float,
    years_to_maturity: float,
    risk_free_rate: float = RISK_FREE_RATE,
) -> float:
    """
    Probability in [0, 1] that the asset is at or below ``barrier_price``
    after ``years_to_maturity`` years.

    Zero volatility is the deterministic limit: the terminal price is the
    forward S * exp(rT), so the result is 1.0 when the forward is at or
    below the barrier and 0.0 otherwise.
    """
    if years_to_maturity <= 0:
        return 0.0
    if current_price <= 0 or barrier_price <= 0:
        raise DegenerateInputError(
            "Spot and barrier prices must be positive",
            details={"current_price": current_price, "barrier_price": barrier_price},
        )
    if volatility < 0 or not math.isfinite(volatility):
        raise DegenerateInputError(
            "Volatility must be a non-negative finite number",
            details={"volatility": volatility},
        )

    if volatility == 0:
        forward = current_price * math.exp(risk_free_rate * years_to_maturity)
        return 1.0 if forward <= barrier_price else 0.0

    prob = normal_cdf(-d2(current_price, barrier_price, volatility, years_to_maturity, risk_free_rate))
    return min(1.0, max(0.0, prob))
