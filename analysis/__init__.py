"""
Analysis Engine Module

Aligns and compares index price series:
- Union-by-date alignment of per-index closes
- Rebasing each index to 100 at its first quote
- Annualized return and volatility, Sharpe, max drawdown, Calmar, Sortino, win rate
"""

__version__ = "0.1.0"
