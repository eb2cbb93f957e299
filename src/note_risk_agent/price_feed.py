"""
Price feed service: daily closing history for basket underlyings.

YahooPriceFeed reads the Yahoo Finance chart API. SyntheticPriceFeed
generates reproducible GBM paths for demos and tests. Neither substitutes
data for a failed request: a feed either returns a history or raises
DataUnavailableError.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Protocol

import httpx
import numpy as np
import structlog

from .config import settings
from .exceptions import DataUnavailableError
from .models import PriceSeries

logger = structlog.get_logger(__name__)


class PriceHistorySource(Protocol):
    async def get_history(self, asset: str, start: date, end: date) -> PriceSeries:
        ...


def _to_epoch(d: date) -> int:
    return int(datetime(d.year, d.month, d.day, tzinfo=timezone.utc).timestamp())


def parse_chart_payload(asset: str, payload: dict) -> PriceSeries:
    """Extract (date, close) pairs from a chart API response body."""
    if not isinstance(payload, dict):
        raise DataUnavailableError(asset, "malformed chart payload")
    chart = payload.get("chart") or {}
    error = chart.get("error")
    if error:
        reason = error.get("description", error.get("code")) if isinstance(error, dict) else error
        raise DataUnavailableError(asset, str(reason))

    results = chart.get("result") or []
    if not results:
        raise DataUnavailableError(asset, "empty chart result")

    result = results[0]
    timestamps = result.get("timestamp") or []
    try:
        closes = result["indicators"]["quote"][0]["close"] or []
    except (KeyError, IndexError, TypeError):
        raise DataUnavailableError(asset, "malformed chart payload")

    # Later rows win when two timestamps land on the same trading date.
    by_date: dict[date, float] = {}
    for ts, close in zip(timestamps, closes):
        if close is None or not math.isfinite(close) or close <= 0:
            continue
        day = datetime.fromtimestamp(ts, tz=timezone.utc).date()
        by_date[day] = float(close)

    if not by_date:
        raise DataUnavailableError(asset)

    return PriceSeries.from_pairs(asset, sorted(by_date.items()))


class YahooPriceFeed:
    """Fetches daily closes from the Yahoo Finance chart endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = (base_url or settings.market_data_base_url).rstrip("/")
        self._client = client or httpx.AsyncClient(
            timeout=timeout or settings.market_data_timeout_seconds,
            headers={"User-Agent": settings.user_agent},
        )

    async def __aenter__(self) -> "YahooPriceFeed":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def get_history(self, asset: str, start: date, end: date) -> PriceSeries:
        """Get historical daily closes for an asset, oldest first."""
        url = f"{self._base_url}/v8/finance/chart/{asset}"
        params = {
            "period1": _to_epoch(start),
            "period2": _to_epoch(end + timedelta(days=1)),
            "interval": "1d",
        }
        try:
            resp = await self._client.get(url, params=params)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as e:
            logger.warning("historical_fetch_failed", asset=asset, status=e.response.status_code)
            raise DataUnavailableError(asset, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.warning("historical_fetch_failed", asset=asset, error=str(e))
            raise DataUnavailableError(asset, str(e) or e.__class__.__name__) from e
        except ValueError as e:
            logger.warning("historical_payload_invalid", asset=asset, error=str(e))
            raise DataUnavailableError(asset, "invalid JSON payload") from e

        series = parse_chart_payload(asset, payload)
        logger.debug("historical_fetched", asset=asset, points=len(series))
        return series

    async def close(self) -> None:
        await self._client.aclose()


class SyntheticPriceFeed:
    """Geometric Brownian motion price histories on business days."""

    BASE_PRICES = {
        "SPY": 520.0,
        "QQQ": 440.0,
        "IWM": 205.0,
        "DIA": 390.0,
        "GLD": 215.0,
        "TLT": 92.0,
        "EFA": 78.0,
        "FEZ": 50.0,
        "XLF": 41.0,
        "XLE": 92.0,
    }

    def __init__(
        self,
        seed: int = 7,
        daily_drift: float = 0.0002,
        daily_volatility: float = 0.012,
        volatilities: Optional[dict[str, float]] = None,
    ) -> None:
        self._seed = seed
        self._mu = daily_drift
        self._sigma = daily_volatility
        self._volatilities = volatilities or {}

    def _rng(self, asset: str) -> np.random.Generator:
        # One stream per (seed, asset)
        return np.random.default_rng([self._seed, *asset.encode()])

    async def get_history(self, asset: str, start: date, end: date) -> PriceSeries:
        days = [
            start + timedelta(days=i)
            for i in range((end - start).days + 1)
            if (start + timedelta(days=i)).weekday() < 5
        ]
        if not days:
            raise DataUnavailableError(asset, "no trading days in range")

        sigma = self._volatilities.get(asset.upper(), self._sigma)
        shocks = self._rng(asset).standard_normal(len(days) - 1)
        log_path = np.concatenate(([0.0], np.cumsum((self._mu - 0.5 * sigma ** 2) + sigma * shocks)))
        start_price = self.BASE_PRICES.get(asset.upper(), 100.0)
        prices = start_price * np.exp(log_path)

        return PriceSeries.from_pairs(asset, zip(days, (round(float(p), 4) for p in prices)))
