"""
Alignment engine - merges per-instrument series into one date-keyed table.
Pure function: no IO, result independent of the order series arrive in.
"""

from typing import Dict, Any, List, Mapping, Sequence

from ingestion.transforms.normalizers import to_iso_date


def align(series_by_instrument: Mapping[str, Sequence[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """
    Merge N independently fetched series into a single merged table.

    Rows are the union of all instruments' trading dates. Each row carries
    'trade_date', its ISO rendering 'date', and one column per instrument
    that has a close on that date. Instruments without a quote on a date
    are absent from that row, never zero-filled.

    Args:
        series_by_instrument: Instrument key -> list of
            {'trade_date': 'YYYYMMDD', 'close': float} observations

    Returns:
        List of merged rows sorted ascending by trade_date

    Example:
        a = [{'trade_date': '20240102', 'close': 10.0}]
        b = [{'trade_date': '20240103', 'close': 20.0}]
        align({'a': a, 'b': b}) ->
            [{'trade_date': '20240102', 'date': '2024-01-02', 'a': 10.0},
             {'trade_date': '20240103', 'date': '2024-01-03', 'b': 20.0}]
    """
    rows_by_date: Dict[str, Dict[str, Any]] = {}

    for key, series in series_by_instrument.items():
        for observation in series or []:
            trade_date = observation['trade_date']
            row = rows_by_date.get(trade_date)
            if row is None:
                row = {'trade_date': trade_date, 'date': to_iso_date(trade_date)}
                rows_by_date[trade_date] = row
            row[key] = observation['close']

    # YYYYMMDD sorts lexically in chronological order
    return [rows_by_date[d] for d in sorted(rows_by_date)]


def extract_prices(table: Sequence[Dict[str, Any]], key: str) -> List[float]:
    """
    Pull one instrument's raw closes out of a merged table.

    Args:
        table: Merged table in date order
        key: Instrument key

    Returns:
        Closes in date order with gaps removed
    """
    return [row[key] for row in table if row.get(key) is not None]


def extract_series(table: Sequence[Dict[str, Any]], key: str) -> List[Dict[str, Any]]:
    """Recover one instrument's observations from a merged table."""
    return [
        {'trade_date': row['trade_date'], 'close': row[key]}
        for row in table
        if row.get(key) is not None
    ]
