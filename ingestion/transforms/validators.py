"""
Core validators for canonical data rows.
Pure functions - no IO, network, or side effects.
"""

import math
from datetime import datetime
from typing import Dict, Any


class ValidationError(ValueError):
    """Raised when data validation fails."""
    pass


def validate_trade_date(value: Any) -> None:
    """
    Validate a trading date encoded as an 8-digit YYYYMMDD string.

    Args:
        value: Candidate date string

    Raises:
        ValidationError: If not a real calendar date in YYYYMMDD form
    """
    if not isinstance(value, str):
        raise ValidationError(f"trade_date must be string, got {type(value)}")

    if len(value) != 8 or not value.isdigit():
        raise ValidationError(f"trade_date must be 8 digits (YYYYMMDD), got {value!r}")

    try:
        datetime.strptime(value, '%Y%m%d')
    except ValueError as e:
        raise ValidationError(f"trade_date is not a calendar date: {value}") from e


def validate_observation(row: Dict[str, Any]) -> None:
    """
    Validate a canonical observation row.

    Args:
        row: Dictionary with 'trade_date' and 'close'

    Raises:
        ValidationError: If validation fails
    """
    required_keys = {'trade_date', 'close'}

    missing = required_keys - set(row.keys())
    if missing:
        raise ValidationError(f"Missing required keys: {missing}")

    validate_trade_date(row['trade_date'])

    close = row['close']
    # bool is an int subclass
    if isinstance(close, bool) or not isinstance(close, (int, float)):
        raise ValidationError(f"close must be numeric, got {type(close)}")

    if not math.isfinite(close):
        raise ValidationError(f"close must be finite, got {close}")

    if close <= 0:
        raise ValidationError(f"close must be positive, got {close}")


def validate_fund_nav_row(row: Dict[str, Any]) -> None:
    """
    Validate a canonical fund NAV row.

    Only the reporting date and unit NAV are required; other Tushare
    fields pass through untouched.

    Raises:
        ValidationError: If validation fails
    """
    if 'date' not in row or not row['date']:
        raise ValidationError("NAV row has neither ann_date nor end_date")

    unit_nav = row.get('unit_nav')
    if unit_nav is None:
        return

    if isinstance(unit_nav, bool) or not isinstance(unit_nav, (int, float)):
        raise ValidationError(f"unit_nav must be numeric, got {type(unit_nav)}")

    if not math.isfinite(unit_nav) or unit_nav <= 0:
        raise ValidationError(f"unit_nav must be positive and finite, got {unit_nav}")
