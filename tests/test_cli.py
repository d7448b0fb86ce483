"""
Tests for CLI entry point - pipelines mocked, argument handling and output real.
"""

import json
import pytest
from pathlib import Path
from unittest.mock import patch

import cli

PROJECT_ROOT = Path(__file__).parent.parent
CONFIG_PATH = str(PROJECT_ROOT / 'config' / 'indices.yml')

COMPARE_PAYLOAD = {
    'success': True,
    'data': [{'trade_date': '20240102', 'date': '2024-01-02', 'csi500': 5500.0, 'csi500_norm': 100.0}],
    'count': 1,
    'indices': [
        {'key': 'csi500', 'name': '中证500', 'ts_code': '000905.SH'},
        {'key': 'csi2000', 'name': '中证2000', 'ts_code': '932000.CSI'},
    ],
    'performanceMetrics': {
        'csi500': {
            'annualizedReturn': 12.5, 'annualizedVolatility': 20.1, 'sharpeRatio': None,
            'maxDrawdown': 18.18, 'calmarRatio': 0.688, 'sortinoRatio': None, 'winRate': 55.0
        }
    }
}


class TestCompareCommand:
    """Tests for `cli.py compare`."""

    @patch('cli.run_index_compare')
    def test_compare_writes_output(self, mock_run, tmp_path):
        mock_run.return_value = COMPARE_PAYLOAD
        output_path = tmp_path / 'out' / 'compare.json'

        cli.main([
            'compare', '--config', CONFIG_PATH,
            '--start', '20240101', '--end', '20240131',
            '--output', str(output_path), '--quiet'
        ])

        config = mock_run.call_args[0][0]
        assert config.start_date == '20240101'
        assert config.end_date == '20240131'
        assert len(config.instruments) == 5

        with open(output_path, 'r', encoding='utf-8') as f:
            assert json.load(f) == COMPARE_PAYLOAD

    @patch('cli.run_index_compare')
    def test_compare_quiet_prints_json(self, mock_run, capsys):
        mock_run.return_value = COMPARE_PAYLOAD

        cli.main(['compare', '--config', CONFIG_PATH, '--quiet'])

        out = capsys.readouterr().out
        assert json.loads(out) == COMPARE_PAYLOAD

    @patch('cli.run_index_compare')
    def test_compare_summary_table(self, mock_run, capsys):
        mock_run.return_value = COMPARE_PAYLOAD

        cli.main(['compare', '--config', CONFIG_PATH])

        out = capsys.readouterr().out
        assert 'csi500' in out
        assert '18.18' in out
        assert 'n/a' in out
        assert 'not available' in out

    @patch('cli.run_index_compare')
    def test_compare_failure_exits(self, mock_run, capsys):
        mock_run.return_value = {'success': False, 'message': 'boom'}

        with pytest.raises(SystemExit) as exc_info:
            cli.main(['compare', '--config', CONFIG_PATH, '--quiet'])

        assert exc_info.value.code == 1
        assert 'boom' in capsys.readouterr().err

    def test_compare_invalid_dates_exit(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(['compare', '--config', CONFIG_PATH, '--start', '2024-01-01'])

        assert exc_info.value.code == 1
        assert 'ERROR' in capsys.readouterr().err

    def test_compare_missing_config_exit(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(['compare', '--config', str(tmp_path / 'missing.yml')])

        assert exc_info.value.code == 1


class TestEtfNavCommand:

    @patch('cli.run_etf_nav')
    def test_etf_nav_default_code(self, mock_run, capsys):
        mock_run.return_value = {'success': True, 'data': [], 'count': 0}

        cli.main(['etf-nav', '--start', '20240101', '--end', '20240110'])

        config = mock_run.call_args[0][0]
        assert config.ts_code == '563300.SH'
        assert 'NAV rows: 0' in capsys.readouterr().out


def test_no_command_exits():
    with pytest.raises(SystemExit) as exc_info:
        cli.main([])

    assert exc_info.value.code == 1
