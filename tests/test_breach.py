import math

import numpy as np
import pytest

from note_risk_agent import DegenerateInputError, RiskParameters, breach_probability, normal_cdf
from note_risk_agent.breach import RISK_FREE_RATE


def _exact_cdf(x: float) -> float:
    return 0.5 * (1.0 + math.erf(x / math.sqrt(2.0)))


def test_normal_cdf_matches_erf():
    for x in np.linspace(-8.0, 8.0, 1601):
        assert abs(normal_cdf(float(x)) - _exact_cdf(float(x))) < 1e-6


def test_normal_cdf_symmetry():
    assert normal_cdf(0.0) == pytest.approx(0.5, abs=1e-7)
    for x in [0.3, 1.0, 1.96, 3.5]:
        assert normal_cdf(x) + normal_cdf(-x) == pytest.approx(1.0, abs=1e-7)


def test_reference_scenario():
    prob = breach_probability(100.0, 75.0, 0.20, 1.0)

    assert prob == pytest.approx(0.059, abs=1e-3)
    assert prob == pytest.approx(_exact_cdf(-1.563411), abs=1e-6)


def test_risk_free_rate_is_injectable():
    base = breach_probability(100.0, 75.0, 0.20, 1.0)
    no_drift = breach_probability(100.0, 75.0, 0.20, 1.0, risk_free_rate=0.0)

    assert no_drift > base


def test_no_time_means_no_breach():
    for years in [0.0, -0.5, -10.0]:
        assert breach_probability(100.0, 99.0, 0.3, years) == 0.0
        assert breach_probability(100.0, 150.0, 0.0, years) == 0.0


def test_probability_in_unit_interval():
    for vol in [0.0, 0.01, 0.2, 0.8, 2.5]:
        for years in [0.01, 0.5, 1.0, 5.0, 30.0]:
            for barrier in [1.0, 50.0, 75.0, 100.0, 140.0]:
                prob = breach_probability(100.0, barrier, vol, years)
                assert 0.0 <= prob <= 1.0


def test_higher_barrier_is_easier_to_breach():
    probs = [breach_probability(100.0, b, 0.25, 2.0) for b in range(40, 101, 5)]

    assert all(later >= earlier for earlier, later in zip(probs, probs[1:]))


def test_zero_volatility_is_deterministic():
    # forward = 100 * exp(0.045) ~ 104.6
    assert breach_probability(100.0, 75.0, 0.0, 1.0) == 0.0
    assert breach_probability(100.0, 100.0, 0.0, 1.0) == 0.0
    assert breach_probability(100.0, 110.0, 0.0, 1.0) == 1.0


def test_degenerate_prices_raise():
    with pytest.raises(DegenerateInputError):
        breach_probability(0.0, 75.0, 0.2, 1.0)
    with pytest.raises(DegenerateInputError):
        breach_probability(100.0, -1.0, 0.2, 1.0)
    with pytest.raises(DegenerateInputError):
        breach_probability(100.0, 75.0, -0.2, 1.0)
    with pytest.raises(DegenerateInputError):
        breach_probability(100.0, 75.0, float("nan"), 1.0)


def test_default_rate_comes_from_risk_parameters():
    assert RISK_FREE_RATE == RiskParameters().risk_free_rate
    assert breach_probability(100.0, 75.0, 0.20, 1.0) == breach_probability(
        100.0, 75.0, 0.20, 1.0, risk_free_rate=RiskParameters().risk_free_rate
    )
