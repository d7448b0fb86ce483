"""
Data Ingestion Module

Handles fetching and validating data from external sources:
- Tushare Pro for daily index closes and ETF net asset values
- YAML instrument registry for the indices being compared
"""

__version__ = "0.1.0"
