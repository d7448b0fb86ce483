"""
Metrics aggregator - computes a Metric Bundle for every instrument in a merged table.
Each instrument is independent: one that cannot be computed is simply absent.
"""

import logging
from typing import Dict, Any, Sequence

from analysis.alignment import extract_prices
from analysis.performance_metrics import compute_metrics, MetricBundle

logger = logging.getLogger(__name__)


def compute_all_metrics(
    table: Sequence[Dict[str, Any]],
    instrument_keys: Sequence[str]
) -> Dict[str, MetricBundle]:
    """
    Compute metrics per instrument from its raw closes.

    Normalized columns are never read; each instrument's prices are its own
    raw column in date order with gaps removed.

    Args:
        table: Merged (optionally normalized) table
        instrument_keys: Instruments to evaluate

    Returns:
        Instrument key -> MetricBundle, only for computable instruments
    """
    bundles = {}

    for key in instrument_keys:
        prices = extract_prices(table, key)
        if not prices:
            logger.info(f"No prices for {key}; skipping metrics")
            continue

        bundle = compute_metrics(prices)
        if bundle is None:
            logger.info(f"Metrics unavailable for {key} ({len(prices)} prices)")
            continue

        bundles[key] = bundle

    return bundles


def metrics_to_payload(bundles: Dict[str, MetricBundle]) -> Dict[str, Dict[str, Any]]:
    """Rounded presentation form keyed by instrument."""
    return {key: bundle.to_dict() for key, bundle in bundles.items()}
