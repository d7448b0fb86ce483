"""
Returns calculation utilities.
Pure functions for daily simple returns, compounded annual return and win rate.
"""

import math
import numpy as np
from typing import Sequence

TRADING_DAYS_PER_YEAR = 252


class ReturnsError(Exception):
    """Raised when returns calculation fails."""
    pass


class ReturnsOverflowError(ReturnsError):
    """Raised when a compounded return does not fit in a float."""
    pass


def daily_returns(prices: Sequence[float]) -> np.ndarray:
    """
    Calculate simple period-over-period returns.

    Formula: r_i = (P_i - P_{i-1}) / P_{i-1}

    A pair is skipped when either price is non-positive or non-finite, so
    one corrupted point cannot turn into an infinite return.

    Args:
        prices: List of prices in chronological order

    Returns:
        Numpy array of returns (at most len(prices) - 1 values)

    Raises:
        ReturnsError: If fewer than 2 prices

    Example:
        prices = [100, 110, 99]
        Returns: [0.10, -0.10]
    """
    if len(prices) < 2:
        raise ReturnsError("Insufficient data: need at least 2 prices")

    returns = []
    for previous, current in zip(prices[:-1], prices[1:]):
        if not (_is_valid_price(previous) and _is_valid_price(current)):
            continue
        returns.append((current - previous) / previous)

    return np.array(returns, dtype=float)


def total_return(prices: Sequence[float]) -> float:
    """
    Calculate the return from the first to the last price.

    Formula: (P_last - P_first) / P_first

    Raises:
        ReturnsError: If insufficient data or invalid endpoint prices
    """
    if len(prices) < 2:
        raise ReturnsError("Insufficient data: need at least 2 prices")

    first, last = prices[0], prices[-1]
    if not (_is_valid_price(first) and _is_valid_price(last)):
        raise ReturnsError("Zero or negative prices not allowed")

    return (last - first) / first


def annualized_return(
    prices: Sequence[float],
    periods_per_year: int = TRADING_DAYS_PER_YEAR
) -> float:
    """
    Calculate compounded annualized return.

    Formula: (1 + total_return) ^ (periods_per_year / n) - 1
    where n is the number of price points.

    Args:
        prices: List of prices in chronological order
        periods_per_year: Trading days per year (252)

    Returns:
        Annualized return as decimal (0.08 = 8%)

    Raises:
        ReturnsError: If insufficient data or invalid prices
        ReturnsOverflowError: If the compounded value overflows a float
    """
    growth = 1 + total_return(prices)
    years_exponent = periods_per_year / len(prices)

    try:
        return growth ** years_exponent - 1
    except OverflowError as e:
        raise ReturnsOverflowError(f"Annualized return overflows for growth {growth} over {len(prices)} points") from e


def win_rate(returns: Sequence[float]) -> float:
    """
    Fraction of periods with a strictly positive return.

    Flat periods (return exactly 0) are not wins but stay in the denominator.

    Raises:
        ReturnsError: If no returns
    """
    if len(returns) == 0:
        raise ReturnsError("Insufficient data: need at least 1 return")

    returns_array = np.asarray(returns, dtype=float)
    return float(np.count_nonzero(returns_array > 0)) / len(returns_array)


def _is_valid_price(price: float) -> bool:
    return price is not None and math.isfinite(price) and price > 0
