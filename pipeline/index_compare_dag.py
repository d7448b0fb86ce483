"""
Index comparison DAG - orchestrates the complete comparison pipeline.
Composes: Provider → Transform → Validate → Align → Normalize → Metrics → Payload.
"""

import os
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date, datetime
from typing import Dict, Any, Optional, List
from dataclasses import dataclass

from ingestion.instruments import Instrument, InstrumentConfigError, validate_instrument_keys
from ingestion.providers.tushare_adapter import fetch_index_window
from ingestion.transforms.normalizers import normalize_index_prices
from ingestion.transforms.validators import (
    validate_observation,
    validate_trade_date,
    ValidationError
)
from analysis.alignment import align
from analysis.normalization import normalize
from analysis.metrics_aggregator import compute_all_metrics, metrics_to_payload
from analysis.performance_metrics import MetricBundle

logger = logging.getLogger(__name__)

# Launch date of CSI 2000, the most recently published default index
DEFAULT_START_DATE = '20220722'


@dataclass
class CompareConfig:
    """Configuration for the index comparison pipeline."""
    instruments: List[Instrument]
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    workers: Optional[int] = None

    def __post_init__(self):
        """Validate and set defaults."""
        if not self.instruments:
            raise ValueError("instruments must be a non-empty list")

        keys = [instrument.key for instrument in self.instruments]
        if len(set(keys)) != len(keys):
            raise ValueError(f"instrument keys must be unique, got {keys}")

        try:
            validate_instrument_keys(keys)
        except InstrumentConfigError as e:
            raise ValueError(str(e)) from e

        if self.end_date is None:
            self.end_date = date.today().strftime('%Y%m%d')

        if self.workers is None:
            self.workers = int(os.getenv('FETCH_WORKERS', '5'))

        if self.workers < 1:
            raise ValueError("workers must be >= 1")

        try:
            validate_trade_date(self.end_date)
            if self.start_date is None:
                # Never past the end: a window before every launch is just empty
                self.start_date = min(default_start_date(self.instruments), self.end_date)
            validate_trade_date(self.start_date)
        except ValidationError as e:
            raise ValueError(str(e)) from e

        # YYYYMMDD compares lexically in date order
        if self.start_date > self.end_date:
            raise ValueError("start_date must be <= end_date")

    @property
    def instrument_keys(self) -> List[str]:
        return [instrument.key for instrument in self.instruments]


def default_start_date(instruments: List[Instrument]) -> str:
    """
    Latest launch date among the instruments, so every index has data
    from the first row; DEFAULT_START_DATE when none is configured.
    """
    launch_dates = [i.launch_date for i in instruments if i.launch_date]
    if not launch_dates:
        return DEFAULT_START_DATE
    return max(launch_dates)


def fetch_series(instrument: Instrument, start_date: str, end_date: str) -> List[Dict[str, Any]]:
    """
    Fetch one instrument's validated series.

    Rows failing validation are dropped with a warning.

    Returns:
        Observations sorted ascending by trade_date (possibly empty)
    """
    raw_data = fetch_index_window(
        ts_code=instrument.ts_code,
        start_date=start_date,
        end_date=end_date
    )

    valid_rows = []
    for row in normalize_index_prices(raw_data):
        try:
            validate_observation(row)
            valid_rows.append(row)
        except ValidationError as e:
            logger.warning(f"Validation warning for {instrument.key} {row.get('trade_date', 'unknown')}: {e}")

    return valid_rows


def fetch_all_series(config: CompareConfig) -> Dict[str, List[Dict[str, Any]]]:
    """
    Fetch every instrument concurrently, one task per instrument.

    Each task returns its own series; results are combined only after all
    tasks finish. A failed fetch degrades to an empty series for that
    instrument without affecting the others.

    Returns:
        Instrument key -> series, in configured instrument order
    """
    results: Dict[str, List[Dict[str, Any]]] = {}

    with ThreadPoolExecutor(max_workers=config.workers) as executor:
        futures = {
            executor.submit(fetch_series, instrument, config.start_date, config.end_date): instrument
            for instrument in config.instruments
        }
        for future in as_completed(futures):
            instrument = futures[future]
            try:
                results[instrument.key] = future.result()
            except Exception as exc:
                logger.warning(f"Fetch failed for {instrument.key} ({instrument.ts_code}): {exc}")
                results[instrument.key] = []

    return {key: results[key] for key in config.instrument_keys}


def build_compare_payload(
    table: List[Dict[str, Any]],
    instruments: List[Instrument],
    bundles: Dict[str, MetricBundle]
) -> Dict[str, Any]:
    """
    Package the comparison for the presentation layer.

    Instruments without a Metric Bundle are absent from performanceMetrics.
    """
    return {
        'success': True,
        'data': table,
        'count': len(table),
        'indices': [instrument.to_dict() for instrument in instruments],
        'performanceMetrics': metrics_to_payload(bundles)
    }


def build_error_payload(message: str) -> Dict[str, Any]:
    """Failure shape of the comparison payload."""
    return {'success': False, 'message': message}


def compare_series(
    series_by_instrument: Dict[str, List[Dict[str, Any]]],
    instruments: List[Instrument]
) -> Dict[str, Any]:
    """
    Run the pure core over already-fetched series and build the payload.

    Args:
        series_by_instrument: Instrument key -> observations (any arrival order)
        instruments: Instrument descriptors, in display order

    Returns:
        Comparison payload
    """
    keys = [instrument.key for instrument in instruments]

    table = align(series_by_instrument)
    table = normalize(table, keys)
    bundles = compute_all_metrics(table, keys)

    return build_compare_payload(table, instruments, bundles)


def run_index_compare(config: CompareConfig) -> Dict[str, Any]:
    """
    Run the complete index comparison pipeline.

    Pipeline stages:
    1. Fetch every instrument concurrently
    2. Align into one merged table
    3. Rebase each instrument to 100
    4. Compute per-instrument metrics
    5. Assemble payload

    Args:
        config: Pipeline configuration

    Returns:
        Comparison payload ({'success': False, 'message': ...} on failure)
    """
    start_time = datetime.now()
    logger.info(
        f"Comparing {len(config.instruments)} indices from {config.start_date} to {config.end_date}"
    )

    try:
        series_by_instrument = fetch_all_series(config)

        empty = [key for key, series in series_by_instrument.items() if not series]
        if empty:
            logger.warning(f"No data for {', '.join(empty)}; comparison is degraded")

        payload = compare_series(series_by_instrument, config.instruments)

    except Exception as e:
        logger.error(f"Index comparison failed: {e}")
        return build_error_payload(str(e))

    duration = (datetime.now() - start_time).total_seconds()
    logger.info(f"Comparison built: {payload['count']} rows in {duration:.1f}s")

    return payload
