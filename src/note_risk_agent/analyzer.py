"""
Note risk analyzer: runs the full pipeline over a note's basket.

1. Fetch one year of daily closes for every underlying, concurrently
2. Estimate annualized volatility and spot for each asset
3. Price the barrier breach probability per asset
4. Correlate aligned returns across the basket
5. Blend into the composite score

Any failure for any asset abandons the whole analysis; no partial results.
"""

import asyncio
from datetime import date, timedelta
from typing import Mapping, Optional

import structlog

from .breach import breach_probability
from .config import RiskParameters, settings
from .correlation import pairwise_correlations
from .exceptions import DataUnavailableError, NoteRiskError, RiskAnalysisError
from .models import AssetRiskMetric, NoteTerms, PriceSeries, RiskAnalysisResult, RiskBand
from .price_feed import PriceHistorySource
from .risk_engine import RiskEngine, ScoringInput
from .volatility import estimate_volatility

logger = structlog.get_logger(__name__)


def summarize(terms: NoteTerms) -> str:
    return (
        f"Based on {', '.join(terms.assets)} with {terms.protection_type.value} "
        f"at {terms.protection_level:g}%"
    )


class NoteRiskAnalyzer:
    """Scores structured notes from their terms and market history."""

    def __init__(
        self,
        source: PriceHistorySource,
        parameters: Optional[RiskParameters] = None,
        lookback_days: Optional[int] = None,
    ) -> None:
        self.source = source
        self.parameters = parameters or RiskParameters()
        self.engine = RiskEngine(self.parameters)
        self.lookback_days = lookback_days or settings.lookback_days

    async def fetch_histories(
        self,
        terms: NoteTerms,
        as_of: Optional[date] = None,
    ) -> dict[str, PriceSeries]:
        """Fetch every basket history concurrently; the first failure propagates."""
        end = as_of or date.today()
        start = end - timedelta(days=self.lookback_days)

        async def fetch(asset: str) -> PriceSeries:
            try:
                series = await self.source.get_history(asset, start, end)
            except NoteRiskError:
                raise
            except Exception as e:
                raise DataUnavailableError(asset, str(e) or e.__class__.__name__) from e
            if len(series) == 0:
                raise DataUnavailableError(asset)
            return series

        tasks = [asyncio.create_task(fetch(asset)) for asset in terms.assets]
        try:
            histories = await asyncio.gather(*tasks)
        except BaseException:
            # Abandon the in-flight fetches before the source is closed.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return dict(zip(terms.assets, histories))

    async def analyze(self, terms: NoteTerms, as_of: Optional[date] = None) -> RiskAnalysisResult:
        """Fetch market data and score the note."""
        log = logger.bind(assets=terms.assets, note_id=terms.note_id)
        try:
            histories = await self.fetch_histories(terms, as_of)
            result = self._run(terms, histories)
        except NoteRiskError as e:
            log.error("risk_analysis_failed", error=str(e))
            raise RiskAnalysisError(asset=getattr(e, "asset", None), cause=e) from e

        log.info(
            "risk_analysis_complete",
            score=result.score,
            band=result.risk_band.value,
            correlation_penalty=round(result.correlation_penalty, 4),
        )
        return result

    def analyze_histories(
        self,
        terms: NoteTerms,
        histories: Mapping[str, PriceSeries],
    ) -> RiskAnalysisResult:
        """Score the note from already fetched price histories."""
        try:
            return self._run(terms, histories)
        except NoteRiskError as e:
            logger.error("risk_analysis_failed", assets=terms.assets, error=str(e))
            raise RiskAnalysisError(asset=getattr(e, "asset", None), cause=e) from e

    def _run(self, terms: NoteTerms, histories: Mapping[str, PriceSeries]) -> RiskAnalysisResult:
        p = self.parameters
        years = terms.years_to_maturity

        metrics: list[AssetRiskMetric] = []
        probabilities: list[float] = []
        returns_by_asset = {}

        for asset in terms.assets:
            series = histories.get(asset)
            if series is None or len(series) == 0:
                raise DataUnavailableError(asset)

            estimate = estimate_volatility(series, p.trading_days_per_year)
            spot = estimate.last_price
            barrier = spot * (terms.protection_level / 100)
            prob = breach_probability(spot, barrier, estimate.annual_volatility, years, p.risk_free_rate)

            probabilities.append(prob)
            returns_by_asset[asset] = estimate.returns
            metrics.append(
                AssetRiskMetric(
                    asset=asset,
                    breach_probability=prob * 100,
                    volatility=estimate.annual_volatility,
                    spot_price=spot,
                    barrier_price=barrier,
                )
            )
            logger.debug(
                "asset_scored",
                asset=asset,
                volatility=round(estimate.annual_volatility, 4),
                breach_pct=round(prob * 100, 2),
            )

        correlations = pairwise_correlations(returns_by_asset)
        breakdown = self.engine.score(
            ScoringInput(
                credit_rating=terms.credit_rating,
                years_to_maturity=years,
                protection_type=terms.protection_type,
                asset_probabilities=probabilities,
                correlations=correlations,
                no_call_period=terms.effective_no_call_period,
            )
        )

        return RiskAnalysisResult(
            score=breakdown.score,
            assets=metrics,
            correlation_penalty=breakdown.correlation_penalty,
            correlations=correlations,
            market_risk_score=breakdown.market_risk_score,
            credit_risk_score=breakdown.credit_risk_score,
            risk_band=RiskBand.from_score(breakdown.score),
            summary=summarize(terms),
        )
