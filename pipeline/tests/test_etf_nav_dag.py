"""
Tests for the ETF NAV DAG with a mocked provider.
"""

import pytest
from datetime import date
from unittest.mock import patch

from ingestion.providers.tushare_adapter import TushareError
from pipeline.etf_nav_dag import (
    run_etf_nav,
    EtfNavConfig,
    DEFAULT_FUND_CODE,
    DEFAULT_NAV_START_DATE
)


class TestEtfNavDAG:

    @patch('pipeline.etf_nav_dag.fetch_fund_nav_window')
    def test_run_etf_nav_success(self, mock_fetch):
        mock_fetch.return_value = [
            {'ts_code': '563300.SH', 'ann_date': '20240110', 'end_date': '20240109', 'unit_nav': 1.05},
            {'ts_code': '563300.SH', 'ann_date': '20240103', 'end_date': '20240102', 'unit_nav': 1.01},
        ]
        config = EtfNavConfig(start_date='20240101', end_date='20240110')

        result = run_etf_nav(config)

        mock_fetch.assert_called_once_with(
            ts_code='563300.SH', start_date='20240101', end_date='20240110'
        )
        assert result['success'] is True
        assert result['count'] == 2
        assert [row['date'] for row in result['data']] == ['2024-01-03', '2024-01-10']

    @patch('pipeline.etf_nav_dag.fetch_fund_nav_window')
    def test_run_etf_nav_empty(self, mock_fetch):
        mock_fetch.return_value = []

        result = run_etf_nav(EtfNavConfig(start_date='20240101', end_date='20240110'))

        assert result['success'] is False
        assert '563300.SH' in result['message']

    @patch('pipeline.etf_nav_dag.fetch_fund_nav_window')
    def test_run_etf_nav_fetch_error(self, mock_fetch):
        mock_fetch.side_effect = TushareError("TUSHARE_TOKEN environment variable required")

        result = run_etf_nav(EtfNavConfig(start_date='20240101', end_date='20240110'))

        assert result == {'success': False, 'message': 'TUSHARE_TOKEN environment variable required'}

    @patch('pipeline.etf_nav_dag.fetch_fund_nav_window')
    def test_run_etf_nav_drops_dateless_rows(self, mock_fetch):
        mock_fetch.return_value = [
            {'ann_date': None, 'end_date': None, 'unit_nav': 1.0},
            {'ann_date': '20240103', 'end_date': '20240102', 'unit_nav': 1.01},
        ]

        result = run_etf_nav(EtfNavConfig(start_date='20240101', end_date='20240110'))

        assert result['count'] == 1


class TestEtfNavConfig:

    def test_defaults(self):
        config = EtfNavConfig()

        assert config.ts_code == DEFAULT_FUND_CODE
        assert config.start_date == DEFAULT_NAV_START_DATE
        assert config.end_date == date.today().strftime('%Y%m%d')

    def test_invalid_range(self):
        with pytest.raises(ValueError, match="start_date must be <="):
            EtfNavConfig(start_date='20240110', end_date='20240101')

    def test_empty_code(self):
        with pytest.raises(ValueError, match="ts_code"):
            EtfNavConfig(ts_code='')
