"""
Instrument registry - the explicit list of indices being compared.
Loaded from YAML; falls back to the built-in CSI index set.
"""

import os
import logging
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, List, Optional

from ingestion.transforms.validators import validate_trade_date, ValidationError
from analysis.normalization import norm_key

logger = logging.getLogger(__name__)

# Columns every merged row carries next to the instrument columns
RESERVED_ROW_FIELDS = ('trade_date', 'date')


class InstrumentConfigError(Exception):
    """Raised when the instrument registry is malformed."""
    pass


@dataclass(frozen=True)
class Instrument:
    """One tracked index identified by a stable key."""
    key: str
    name: str
    ts_code: str
    launch_date: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        """Metadata shape used in the comparison payload."""
        return {'key': self.key, 'name': self.name, 'ts_code': self.ts_code}


DEFAULT_INSTRUMENTS = [
    Instrument('csi500', '中证500', '000905.SH', '20070115'),
    Instrument('csi800', '中证800', '000906.SH', '20070115'),
    Instrument('csi1000', '中证1000', '000852.SH', '20141017'),
    Instrument('csi2000', '中证2000', '932000.CSI', '20220722'),
    Instrument('dividend_lowvol', '中证红利低波', 'H30269.CSI', '20141231'),
]


def load_instruments(config_path: Optional[str] = None) -> List[Instrument]:
    """
    Load instrument descriptors from a YAML file.

    Args:
        config_path: Path to the registry file (default: INDEX_CONFIG_PATH
            env var, then ./config/indices.yml)

    Returns:
        List of instruments in file order

    Raises:
        InstrumentConfigError: If the file exists but cannot be parsed
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = os.getenv('INDEX_CONFIG_PATH', './config/indices.yml')

    config_file = Path(config_path)
    if not config_file.exists():
        if explicit:
            raise InstrumentConfigError(f"Instrument config file not found: {config_path}")
        logger.info(f"No instrument config at {config_path}, using built-in indices")
        return list(DEFAULT_INSTRUMENTS)

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InstrumentConfigError(f"Failed to load instrument config: {e}") from e

    if not isinstance(config, dict) or 'instruments' not in config:
        raise InstrumentConfigError("Instrument config missing 'instruments' section")

    return parse_instruments(config['instruments'])


def parse_instruments(entries: List[Dict[str, Any]]) -> List[Instrument]:
    """
    Build instruments from raw config entries.

    Raises:
        InstrumentConfigError: On missing fields, duplicate keys or an empty list
    """
    if not entries:
        raise InstrumentConfigError("At least one instrument is required")

    instruments = []
    seen_keys = set()

    for entry in entries:
        if not isinstance(entry, dict):
            raise InstrumentConfigError(f"Instrument entry must be a mapping, got {type(entry)}")

        missing = {'key', 'name', 'ts_code'} - set(entry.keys())
        if missing:
            raise InstrumentConfigError(f"Instrument entry missing required keys: {missing}")

        key = str(entry['key'])
        if key in seen_keys:
            raise InstrumentConfigError(f"Duplicate instrument key: {key}")
        seen_keys.add(key)

        launch_date = entry.get('launch_date')
        if launch_date is not None:
            launch_date = str(launch_date)
            try:
                validate_trade_date(launch_date)
            except ValidationError as e:
                raise InstrumentConfigError(f"Invalid launch_date for {key}: {e}") from e

        instruments.append(Instrument(
            key=key,
            name=str(entry['name']),
            ts_code=str(entry['ts_code']),
            launch_date=launch_date
        ))

    validate_instrument_keys([instrument.key for instrument in instruments])

    return instruments


def validate_instrument_keys(keys: List[str]) -> None:
    """
    Check that instrument keys cannot collide with merged-row columns.

    A key may not be a reserved row field, nor the normalized column
    name of another instrument ('a' and 'a_norm' together).

    Raises:
        InstrumentConfigError: On the first clashing key
    """
    normalized_columns = {norm_key(key): key for key in keys}

    for key in keys:
        if key in RESERVED_ROW_FIELDS:
            raise InstrumentConfigError(f"Instrument key '{key}' is a reserved row field")
        if key in normalized_columns:
            raise InstrumentConfigError(
                f"Instrument key '{key}' clashes with the normalized column of '{normalized_columns[key]}'"
            )
