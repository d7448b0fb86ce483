"""
Normalizers for transforming provider data to canonical shape.
Pure functions - no IO, network, or side effects.
Minimal normalization - only when necessary.
"""

from typing import Dict, Any, List, Optional


def to_iso_date(trade_date: str) -> str:
    """Render a YYYYMMDD trading date as YYYY-MM-DD."""
    return f"{trade_date[0:4]}-{trade_date[4:6]}-{trade_date[6:8]}"


def normalize_index_prices(raw_rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Transform provider-native index rows to canonical observations.

    Minimal normalization:
    - Keep only trade_date and close (all the engine consumes)
    - Deduplication by date (keep last to handle corrections)
    - Ascending sort by date (Tushare returns newest first)

    Args:
        raw_rows: List of Tushare index_daily dictionaries

    Returns:
        List of {'trade_date': 'YYYYMMDD', 'close': value} in date order
    """
    if not raw_rows:
        return []

    seen_dates = {}  # For deduplication

    for raw in raw_rows:
        trade_date = raw.get('trade_date')
        if trade_date is None:
            continue
        # Justified: Tushare can hand back ints when a client re-encodes the frame
        trade_date = str(trade_date)

        close = raw.get('close')
        canonical = {
            'trade_date': trade_date,
            'close': float(close) if close is not None else None,
        }
        seen_dates[trade_date] = canonical

    return [seen_dates[d] for d in sorted(seen_dates)]


def normalize_fund_nav(raw_rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Transform provider-native fund NAV rows for display.

    Rows are sorted by announcement date (falling back to period end date)
    and gain an ISO 'date' field. All provider fields are kept.

    Args:
        raw_rows: List of Tushare fund_nav dictionaries

    Returns:
        List of NAV dictionaries in date order
    """
    if not raw_rows:
        return []

    normalized = []
    for raw in raw_rows:
        row = dict(raw)
        date_str = _nav_date(row)
        row['date'] = to_iso_date(date_str) if date_str else None
        normalized.append(row)

    normalized.sort(key=lambda r: _nav_date(r) or '')
    return normalized


def _nav_date(row: Dict[str, Any]) -> Optional[str]:
    """Announcement date, else period end date."""
    value = row.get('ann_date') or row.get('end_date')
    return str(value) if value else None
