"""
Tushare Pro adapter - fetch index closes and fund NAVs over HTTP.
Network IO allowed here, but minimal business logic.
"""

import os
import logging
import requests
import pandas as pd
from datetime import datetime
from typing import Dict, Any, List, Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_TUSHARE_API = 'http://api.tushare.pro'

INDEX_DAILY_FIELDS = 'ts_code,trade_date,close,open,high,low,vol,amount,pct_chg'
FUND_NAV_FIELDS = 'ts_code,ann_date,end_date,unit_nav,accum_nav,net_asset,total_net_asset,adj_nav'


class TushareError(Exception):
    """Raised when Tushare operations fail."""
    pass


def fetch_index_window(ts_code: str, start_date: str, end_date: str) -> List[Dict[str, Any]]:
    """
    Fetch daily index bars within a date window.
    Returns raw data in provider format - no normalization.

    Args:
        ts_code: Tushare index code (e.g., '000905.SH')
        start_date: Start date YYYYMMDD (inclusive)
        end_date: End date YYYYMMDD (inclusive)

    Returns:
        List of raw row dictionaries keyed by Tushare field names

    Raises:
        TushareError: If fetch fails or validation fails
    """
    _validate_date_range(start_date, end_date)
    _validate_ts_code(ts_code)

    rows = query_api(
        'index_daily',
        params={'ts_code': ts_code, 'start_date': start_date, 'end_date': end_date},
        fields=INDEX_DAILY_FIELDS
    )
    logger.info(f"Fetched {len(rows)} index_daily rows for {ts_code}")
    return rows


def fetch_fund_nav_window(ts_code: str, start_date: str, end_date: str) -> List[Dict[str, Any]]:
    """
    Fetch fund net asset values within a date window.

    Args:
        ts_code: Tushare fund code (e.g., '563300.SH')
        start_date: Start date YYYYMMDD (inclusive)
        end_date: End date YYYYMMDD (inclusive)

    Returns:
        List of raw NAV dictionaries keyed by Tushare field names

    Raises:
        TushareError: If fetch fails or validation fails
    """
    _validate_date_range(start_date, end_date)
    _validate_ts_code(ts_code)

    rows = query_api(
        'fund_nav',
        params={'ts_code': ts_code, 'start_date': start_date, 'end_date': end_date},
        fields=FUND_NAV_FIELDS
    )
    logger.info(f"Fetched {len(rows)} fund_nav rows for {ts_code}")
    return rows


def query_api(
    api_name: str,
    params: Dict[str, Any],
    fields: str,
    token: Optional[str] = None,
    api_url: Optional[str] = None
) -> List[Dict[str, Any]]:
    """
    POST one query to the Tushare Pro HTTP API.

    Tushare answers with a column list ('fields') and positional rows
    ('items'); these are zipped into one dict per row.

    Raises:
        TushareError: On missing token, HTTP failure or non-zero API code
    """
    if token is None:
        token = os.getenv('TUSHARE_TOKEN')
    if not token:
        raise TushareError("TUSHARE_TOKEN environment variable required")

    if api_url is None:
        api_url = os.getenv('TUSHARE_API', DEFAULT_TUSHARE_API)

    timeout = int(os.getenv('REQUESTS_TIMEOUT_S', '30'))

    payload = {
        'api_name': api_name,
        'token': token,
        'params': params,
        'fields': fields
    }

    try:
        response = requests.post(api_url, json=payload, timeout=timeout)
        response.raise_for_status()
        body = response.json()
    except requests.RequestException as e:
        logger.error(f"Tushare {api_name} request failed: {e}")
        raise TushareError(f"Failed to query {api_name}: {str(e)}") from e
    except ValueError as e:
        raise TushareError(f"Invalid JSON from Tushare {api_name}: {str(e)}") from e

    code = body.get('code', 0)
    if code not in (0, None):
        raise TushareError(f"Tushare {api_name} error {code}: {body.get('msg', 'unknown error')}")

    return _rows_from_body(body)


def _rows_from_body(body: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Zip Tushare 'fields' and 'items' into row dictionaries."""
    data = body.get('data') or {}
    fields = data.get('fields') or []
    items = data.get('items') or []

    if not fields or not items:
        return []

    frame = pd.DataFrame(items, columns=fields)
    # None survives as None instead of NaN in object columns
    frame = frame.astype(object).where(pd.notna(frame), None)
    return frame.to_dict('records')


def _validate_date_range(start_date: str, end_date: str) -> None:
    """
    Validate date range parameters.

    Args:
        start_date: Start date YYYYMMDD
        end_date: End date YYYYMMDD

    Raises:
        TushareError: If validation fails
    """
    try:
        start = datetime.strptime(start_date, '%Y%m%d')
        end = datetime.strptime(end_date, '%Y%m%d')
    except (TypeError, ValueError) as e:
        raise TushareError(f"Dates must be YYYYMMDD strings: {start_date}, {end_date}") from e

    if start > end:
        raise TushareError(f"start date ({start_date}) must be <= end date ({end_date})")


def _validate_ts_code(ts_code: str) -> None:
    """
    Basic Tushare code validation.

    Raises:
        TushareError: If code is invalid
    """
    if not ts_code or not isinstance(ts_code, str):
        raise TushareError("ts_code must be non-empty string")

    if '.' not in ts_code:
        raise TushareError(f"ts_code must carry an exchange suffix: {ts_code}")

    allowed_chars = set('ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789.')
    if not set(ts_code.upper()).issubset(allowed_chars):
        raise TushareError(f"ts_code contains invalid characters: {ts_code}")
