"""
Drawdown calculation utilities.
Pure functions for running-peak drawdown analysis.
"""

import numpy as np
from typing import Sequence


class DrawdownError(Exception):
    """Raised when drawdown calculation fails."""
    pass


def drawdown_series(prices: Sequence[float]) -> np.ndarray:
    """
    Calculate the drawdown from the running peak at every point.

    Formula: dd_t = (peak_t - P_t) / peak_t, peak_t = max(P_0..P_t)

    Args:
        prices: List of prices in chronological order

    Returns:
        Numpy array of drawdowns as positive fractions (0.2 = 20% below peak)

    Raises:
        DrawdownError: If insufficient data or invalid prices
    """
    if len(prices) < 2:
        raise DrawdownError("Insufficient data: need at least 2 prices")

    prices_array = np.asarray(prices, dtype=float)

    if np.any(~np.isfinite(prices_array)) or np.any(prices_array <= 0):
        raise DrawdownError("Zero or negative prices not allowed")

    # Single forward pass tracking the highest price seen so far
    running_max = np.maximum.accumulate(prices_array)

    return (running_max - prices_array) / running_max


def max_drawdown(prices: Sequence[float]) -> float:
    """
    Largest peak-to-trough decline over the whole series.

    Args:
        prices: List of prices in chronological order

    Returns:
        Maximum drawdown as positive decimal (0 for a series that never falls)

    Raises:
        DrawdownError: If insufficient data or invalid prices

    Example:
        prices = [100, 110, 90, 120] -> (110 - 90) / 110 ≈ 0.1818
    """
    return float(np.max(drawdown_series(prices)))
