"""
Risk-adjusted return ratios.
"""

from typing import Optional

RISK_FREE_RATE = 0.03


def sharpe_ratio(
    annual_return: float,
    annual_volatility: float,
    risk_free_rate: float = RISK_FREE_RATE
) -> Optional[float]:
    """
    Formula: (R - Rf) / σ

    Returns:
        Sharpe ratio, or None when volatility is zero (undefined)
    """
    if annual_volatility <= 0:
        return None
    return (annual_return - risk_free_rate) / annual_volatility


def sortino_ratio(
    annual_return: float,
    downside_dev: float,
    risk_free_rate: float = RISK_FREE_RATE
) -> float:
    """
    Formula: (R - Rf) / downside deviation

    Returns:
        Sortino ratio, 0.0 when there is no downside (no negative returns)
    """
    if downside_dev <= 0:
        return 0.0
    return (annual_return - risk_free_rate) / downside_dev


def calmar_ratio(annual_return: float, max_dd: float) -> float:
    """Annual return over maximum drawdown; 0.0 without a drawdown."""
    if max_dd > 0:
        return annual_return / max_dd
    return 0.0
