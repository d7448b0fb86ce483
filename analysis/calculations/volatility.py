"""
Volatility calculation utilities.
Pure functions for annualized total and downside volatility of daily returns.
"""

import numpy as np
import math
from typing import Sequence

from analysis.calculations.returns import TRADING_DAYS_PER_YEAR


class VolatilityError(Exception):
    """Raised when volatility calculation fails."""
    pass


def annualized_volatility(
    returns: Sequence[float],
    annualize: int = TRADING_DAYS_PER_YEAR
) -> float:
    """
    Calculate annualized volatility from daily returns.

    Formula: σ = std(returns) × √annualize

    Uses the population standard deviation (ddof=0).

    Args:
        returns: Daily simple returns
        annualize: Annualization factor (252 for daily to annual)

    Returns:
        Annualized volatility as decimal (0.25 = 25%)

    Raises:
        VolatilityError: If no returns or invalid values
    """
    returns_array = _checked_array(returns)

    std_dev = np.std(returns_array, ddof=0)

    return float(std_dev * math.sqrt(annualize))


def downside_deviation(
    returns: Sequence[float],
    annualize: int = TRADING_DAYS_PER_YEAR
) -> float:
    """
    Calculate annualized downside deviation.

    Formula: sqrt(mean(r² for r < 0)) × √annualize

    The mean runs over the negative returns only, not the full count.
    Returns 0.0 when no return is negative.

    Raises:
        VolatilityError: If no returns or invalid values
    """
    returns_array = _checked_array(returns)

    negative = returns_array[returns_array < 0]
    if negative.size == 0:
        return 0.0

    return float(math.sqrt(np.mean(negative ** 2)) * math.sqrt(annualize))


def _checked_array(returns: Sequence[float]) -> np.ndarray:
    if len(returns) == 0:
        raise VolatilityError("Insufficient data: need at least 1 return")

    returns_array = np.asarray(returns, dtype=float)

    if np.any(np.isnan(returns_array)):
        raise VolatilityError("NaN values not allowed in returns")

    if np.any(np.isinf(returns_array)):
        raise VolatilityError("Infinite values not allowed in returns")

    return returns_array
