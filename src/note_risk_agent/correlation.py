"""
Correlation aggregator.

Worst-of notes get riskier as their underlyings decorrelate: the chance that
at least one asset breaches exceeds any single asset's own probability. The
penalty multiplier is a tractable proxy for that effect.
"""

import logging
from typing import Mapping, Sequence

import numpy as np

from .config import RiskParameters

logger = logging.getLogger(__name__)

CORRELATION_SENSITIVITY = RiskParameters().correlation_sensitivity
# Standard deviation at or below this counts as a flat series
FLAT_SERIES_TOLERANCE = 1e-12


def align_trailing(returns_by_asset: Mapping[str, Sequence[float]]) -> dict[str, np.ndarray]:
    """Truncate every return series to the most recent N returns, N = shortest length."""
    if not returns_by_asset:
        return {}
    min_len = min(len(r) for r in returns_by_asset.values())
    return {
        asset: np.asarray(returns, dtype=float)[len(returns) - min_len:]
        for asset, returns in returns_by_asset.items()
    }


def sample_correlation(x: np.ndarray, y: np.ndarray) -> float:
    """Pearson correlation of two equal-length series.

    Undefined when either series is flat or a single return; reported as
    0.0 (no measurable co-movement). Constant returns rarely have an exact
    zero standard deviation in floating point, so flatness is tested
    against ``FLAT_SERIES_TOLERANCE``.
    """
    if np.std(x) <= FLAT_SERIES_TOLERANCE or np.std(y) <= FLAT_SERIES_TOLERANCE:
        return 0.0
    corr = float(np.corrcoef(x, y)[0, 1])
    return max(-1.0, min(1.0, corr))


def pairwise_correlations(returns_by_asset: Mapping[str, Sequence[float]]) -> list[float]:
    """Correlation of every unordered asset pair (i < j, basket order) on aligned returns."""
    if len(returns_by_asset) < 2:
        return []

    aligned = align_trailing(returns_by_asset)
    assets = list(aligned.keys())
    window = len(aligned[assets[0]])

    correlations = []
    for i in range(len(assets)):
        for j in range(i + 1, len(assets)):
            corr = sample_correlation(aligned[assets[i]], aligned[assets[j]])
            logger.debug(f"corr({assets[i]}, {assets[j]}) = {corr:.3f} over {window} returns")
            correlations.append(corr)
    return correlations


def correlation_penalty(
    correlations: Sequence[float],
    sensitivity: float = CORRELATION_SENSITIVITY,
) -> float:
    """1.0 for a fully co-moving (or single-asset) basket, up to 1 + sensitivity.

    Negative average correlation is penalised the same as independence:
    the mean is floored at 0 before ``1 + (1 - mean) * sensitivity`` is
    applied. Unfloored, that formula reaches 1 + 2 * sensitivity (2.0 at the
    default) for a mean of -1; floored, a mean of -1 gives 1.5 and the
    penalty never exceeds 1 + sensitivity.
    """
    if len(correlations) == 0:
        return 1.0
    avg_corr = max(float(np.mean(correlations)), 0.0)
    return 1.0 + (1.0 - avg_corr) * sensitivity
