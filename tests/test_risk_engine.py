import pytest
from pydantic import ValidationError

from note_risk_agent import (
    DegenerateInputError,
    ProtectionType,
    RiskEngine,
    RiskParameters,
    ScoringInput,
    calculate_final_risk_score,
)
from note_risk_agent.risk_engine import round_half_up


def _input(**overrides) -> ScoringInput:
    base = dict(
        credit_rating="A",
        years_to_maturity=1.0,
        protection_type=ProtectionType.SOFT_BARRIER,
        asset_probabilities=[0.2],
        correlations=[],
        no_call_period=None,
    )
    base.update(overrides)
    return ScoringInput(**base)


def test_single_asset_hard_buffer_aaa():
    engine = RiskEngine()

    out = engine.score(
        _input(
            credit_rating="AAA",
            protection_type=ProtectionType.HARD_BUFFER,
            asset_probabilities=[0.10],
        )
    )

    assert out.correlation_penalty == 1.0
    assert out.market_risk_score == pytest.approx(7.0)
    assert out.credit_risk_score == 0
    assert out.score == 6


def test_two_asset_short_no_call_bbb():
    score = calculate_final_risk_score(
        credit_rating="BBB",
        years_to_maturity=1.0,
        protection_type="Soft Barrier",
        asset_probabilities=[0.30, 0.10],
        correlations=[0.0],
        no_call_period=3,
    )

    assert score == 46


def test_worst_asset_drives_market_risk():
    engine = RiskEngine()

    out = engine.score(_input(asset_probabilities=[0.05, 0.40, 0.10], correlations=[1.0, 1.0, 1.0]))

    assert out.market_risk_score == pytest.approx(40.0)


def test_unmapped_rating_falls_back_to_neutral():
    engine = RiskEngine()

    for rating in ["CCC", "B+", "not-a-rating", ""]:
        assert engine.credit_score(rating) == 50


def test_credit_table_is_ordinal():
    engine = RiskEngine()
    ratings = ["AAA", "AA+", "AA", "AA-", "A+", "A", "A-", "BBB+", "BBB", "BBB-", "BB"]

    scores = [engine.credit_score(r) for r in ratings]

    assert scores == [0, 10, 20, 30, 40, 50, 60, 70, 80, 90, 100]


def test_no_call_band_boundaries():
    engine = RiskEngine()

    assert engine.call_adjustment(None) == 1.0
    assert engine.call_adjustment(0) == 0.95
    assert engine.call_adjustment(5.9) == 0.95
    assert engine.call_adjustment(6) == 1.0
    assert engine.call_adjustment(11.9) == 1.0
    assert engine.call_adjustment(12) == 1.05
    assert engine.call_adjustment(36) == 1.05


def test_long_no_call_raises_market_risk():
    engine = RiskEngine()

    base = engine.score(_input(asset_probabilities=[0.2]))
    locked = engine.score(_input(asset_probabilities=[0.2], no_call_period=18))

    assert locked.market_risk_score == pytest.approx(base.market_risk_score * 1.05)


def test_market_risk_clamped_at_100():
    engine = RiskEngine()

    out = engine.score(
        _input(credit_rating="BB", asset_probabilities=[1.0], correlations=[-1.0], no_call_period=24)
    )

    assert out.market_risk_score == 100.0
    assert out.score == 100


def test_score_stays_in_range():
    engine = RiskEngine()

    for prob in [0.0, 0.01, 0.5, 0.99, 1.0]:
        for rating in ["AAA", "BBB", "BB", "junk"]:
            for protection in ProtectionType:
                out = engine.score(
                    _input(credit_rating=rating, protection_type=protection, asset_probabilities=[prob])
                )
                assert isinstance(out.score, int)
                assert 0 <= out.score <= 100


def test_scoring_is_idempotent():
    engine = RiskEngine()
    x = _input(asset_probabilities=[0.31, 0.12], correlations=[0.4], no_call_period=9)

    assert engine.score(x) == engine.score(x)


def test_empty_basket_is_rejected():
    with pytest.raises(DegenerateInputError):
        RiskEngine().score(_input(asset_probabilities=[]))


def test_parameters_are_injectable():
    params = RiskParameters(hard_buffer_multiplier=0.5, unrated_credit_score=100)
    engine = RiskEngine(params)

    out = engine.score(
        _input(credit_rating="CCC", protection_type=ProtectionType.HARD_BUFFER, asset_probabilities=[0.2])
    )

    assert out.market_risk_score == pytest.approx(10.0)
    assert out.credit_risk_score == 100


def test_final_score_rounds_half_up():
    params = RiskParameters(market_weight=0.5, credit_weight=0.5)

    score = calculate_final_risk_score(
        credit_rating="AAA",
        years_to_maturity=1.0,
        protection_type=ProtectionType.SOFT_BARRIER,
        asset_probabilities=[0.05],
        parameters=params,
    )

    assert round_half_up(2.5) == 3
    assert score == 3


@pytest.mark.parametrize("table", [{"A": 150}, {"A": -1}, {"AAA": 0, "BB": 101}])
def test_credit_table_rejects_scores_outside_0_100(table):
    with pytest.raises(ValidationError):
        RiskParameters(credit_scores=table)


def test_credit_table_accepts_bounds():
    params = RiskParameters(credit_scores={"AAA": 0, "CCC": 100})
    engine = RiskEngine(params)

    assert engine.credit_score("AAA") == 0
    assert engine.credit_score("CCC") == 100
