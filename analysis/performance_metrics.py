"""
Performance metrics - composes the calculators into one Metric Bundle.
Full precision inside; rounding only happens in MetricBundle.to_dict().
"""

import logging
from dataclasses import dataclass
from typing import Dict, Any, Optional, Sequence

from analysis.calculations.returns import (
    daily_returns,
    annualized_return,
    win_rate,
    ReturnsError,
    ReturnsOverflowError,
    TRADING_DAYS_PER_YEAR
)
from analysis.calculations.volatility import (
    annualized_volatility,
    downside_deviation,
    VolatilityError
)
from analysis.calculations.drawdown import max_drawdown, DrawdownError
from analysis.calculations.ratios import (
    sharpe_ratio,
    sortino_ratio,
    calmar_ratio,
    RISK_FREE_RATE
)

logger = logging.getLogger(__name__)

# Volatility at or below this is treated as zero (floating-point noise
# from a constant or perfectly geometric series)
ZERO_VOLATILITY_EPSILON = 1e-12


@dataclass(frozen=True)
class MetricBundle:
    """Seven summary statistics for one instrument, as decimals."""
    annualized_return: Optional[float]
    annualized_volatility: float
    sharpe_ratio: Optional[float]
    max_drawdown: float
    calmar_ratio: Optional[float]
    sortino_ratio: Optional[float]
    win_rate: float

    def to_dict(self) -> Dict[str, Any]:
        """
        Presentation shape for the comparison payload.

        Returns, volatility, drawdown and win rate become percentages with
        2 decimals; ratios keep 3 decimals; undefined values stay None.
        """
        return {
            'annualizedReturn': _pct(self.annualized_return),
            'annualizedVolatility': _pct(self.annualized_volatility),
            'sharpeRatio': _ratio(self.sharpe_ratio),
            'maxDrawdown': _pct(self.max_drawdown),
            'calmarRatio': _ratio(self.calmar_ratio),
            'sortinoRatio': _ratio(self.sortino_ratio),
            'winRate': _pct(self.win_rate),
        }


def compute_metrics(
    prices: Sequence[float],
    risk_free_rate: float = RISK_FREE_RATE,
    periods_per_year: int = TRADING_DAYS_PER_YEAR
) -> Optional[MetricBundle]:
    """
    Compute the Metric Bundle for one instrument's raw closes.

    A compounded return too large for a float leaves annualized_return
    and the three ratios built on it as None; the other metrics are kept.

    Args:
        prices: Closes in chronological order, gaps removed
        risk_free_rate: Annual risk-free rate for Sharpe/Sortino (3%)
        periods_per_year: Trading days per year (252)

    Returns:
        MetricBundle, or None when fewer than 2 prices or no valid
        returns (not computable, as opposed to computed as zero)
    """
    if prices is None or len(prices) < 2:
        return None

    try:
        returns = daily_returns(prices)
        if returns.size == 0:
            logger.info("No valid daily returns; metrics unavailable")
            return None

        try:
            annual_return = annualized_return(prices, periods_per_year=periods_per_year)
        except ReturnsOverflowError as e:
            logger.warning(f"Annualized return undefined: {e}")
            annual_return = None

        annual_vol = annualized_volatility(returns, annualize=periods_per_year)
        downside = downside_deviation(returns, annualize=periods_per_year)
        max_dd = max_drawdown(prices)
        wins = win_rate(returns)
    except (ReturnsError, VolatilityError, DrawdownError) as e:
        logger.warning(f"Metrics unavailable: {e}")
        return None

    sharpe = None
    sortino = None
    calmar = None
    if annual_return is not None:
        calmar = calmar_ratio(annual_return, max_dd)
        # Degenerate volatility: Sharpe and Sortino undefined
        if annual_vol > ZERO_VOLATILITY_EPSILON:
            sharpe = sharpe_ratio(annual_return, annual_vol, risk_free_rate=risk_free_rate)
            sortino = sortino_ratio(annual_return, downside, risk_free_rate=risk_free_rate)

    return MetricBundle(
        annualized_return=annual_return,
        annualized_volatility=annual_vol,
        sharpe_ratio=sharpe,
        max_drawdown=max_dd,
        calmar_ratio=calmar,
        sortino_ratio=sortino,
        win_rate=wins
    )


def _pct(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return round(value * 100, 2)


def _ratio(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return round(value, 3)
