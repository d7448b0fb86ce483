"""
ETF NAV DAG - fetches one fund's net asset value history for display.
Composes: Provider → Transform → Validate → Payload.
"""

import logging
from datetime import date
from typing import Dict, Any, Optional
from dataclasses import dataclass

from ingestion.providers.tushare_adapter import fetch_fund_nav_window
from ingestion.transforms.normalizers import normalize_fund_nav
from ingestion.transforms.validators import (
    validate_fund_nav_row,
    validate_trade_date,
    ValidationError
)

logger = logging.getLogger(__name__)

DEFAULT_FUND_CODE = '563300.SH'
DEFAULT_NAV_START_DATE = '20230601'


@dataclass
class EtfNavConfig:
    """Configuration for the ETF NAV pipeline."""
    ts_code: str = DEFAULT_FUND_CODE
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    def __post_init__(self):
        """Validate and set defaults."""
        if not self.ts_code or not isinstance(self.ts_code, str):
            raise ValueError("ts_code must be non-empty string")

        if self.end_date is None:
            self.end_date = date.today().strftime('%Y%m%d')

        if self.start_date is None:
            self.start_date = DEFAULT_NAV_START_DATE

        try:
            validate_trade_date(self.start_date)
            validate_trade_date(self.end_date)
        except ValidationError as e:
            raise ValueError(str(e)) from e

        if self.start_date > self.end_date:
            raise ValueError("start_date must be <= end_date")


def run_etf_nav(config: EtfNavConfig) -> Dict[str, Any]:
    """
    Fetch, order and validate a fund's NAV history.

    Args:
        config: Pipeline configuration

    Returns:
        {'success': True, 'data': rows, 'count': n}, or
        {'success': False, 'message': ...} when nothing came back or the fetch failed
    """
    try:
        raw_data = fetch_fund_nav_window(
            ts_code=config.ts_code,
            start_date=config.start_date,
            end_date=config.end_date
        )
    except Exception as e:
        logger.error(f"ETF NAV fetch failed for {config.ts_code}: {e}")
        return {'success': False, 'message': str(e)}

    if not raw_data:
        return {'success': False, 'message': f"No NAV data returned for {config.ts_code}"}

    rows = []
    for row in normalize_fund_nav(raw_data):
        try:
            validate_fund_nav_row(row)
            rows.append(row)
        except ValidationError as e:
            logger.warning(f"Validation warning for {config.ts_code} NAV row: {e}")

    return {'success': True, 'data': rows, 'count': len(rows)}
