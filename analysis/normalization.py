"""
Normalization - rebases each instrument's column to 100 at its first quote.
"""

import math
import logging
from typing import Dict, Any, List, Sequence

logger = logging.getLogger(__name__)

REBASE_VALUE = 100.0


def norm_key(key: str) -> str:
    """Column name for an instrument's normalized values."""
    return f"{key}_norm"


def find_bases(table: Sequence[Dict[str, Any]], instrument_keys: Sequence[str]) -> Dict[str, float]:
    """
    Find each instrument's normalization base.

    The base is the first raw value present in table order. Instruments
    with no quotes are left out; so are instruments whose base is zero,
    negative or non-finite (logged, normalization fails closed).

    Args:
        table: Merged table in date order
        instrument_keys: Instruments to look up

    Returns:
        Instrument key -> base price, only for valid bases
    """
    bases = {}

    for key in instrument_keys:
        base = next((row[key] for row in table if row.get(key) is not None), None)
        if base is None:
            continue

        if not math.isfinite(base) or base <= 0:
            logger.warning(f"Invalid normalization base for {key}: {base}; skipping normalization")
            continue

        bases[key] = base

    return bases


def normalize(table: Sequence[Dict[str, Any]], instrument_keys: Sequence[str]) -> List[Dict[str, Any]]:
    """
    Add a '<key>_norm' column rebased to 100 for every instrument.

    Formula: norm = round(raw / base * 100, 2)

    Only the emitted value is rounded. Raw columns are left untouched and
    the input rows are not mutated.

    Args:
        table: Merged table from align()
        instrument_keys: Instruments to normalize

    Returns:
        New merged table with normalized columns added
    """
    bases = find_bases(table, instrument_keys)

    normalized_table = []
    for row in table:
        normalized = dict(row)
        for key, base in bases.items():
            raw = row.get(key)
            if raw is not None:
                normalized[norm_key(key)] = round(raw / base * REBASE_VALUE, 2)
        normalized_table.append(normalized)

    return normalized_table
