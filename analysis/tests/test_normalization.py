"""
Tests for normalization - rebasing each index to 100 at its first quote.
"""

import copy
import pytest

from analysis.alignment import align, extract_series
from analysis.normalization import normalize, find_bases, norm_key


def _series(*pairs):
    return [{'trade_date': d, 'close': c} for d, c in pairs]


class TestNormalize:
    """Tests for normalize function."""

    def test_self_normalization(self):
        """First value is exactly 100.00, the rest are rounded ratios."""
        raw = [3012.37, 3100.25, 2950.0, 3201.79, 3188.01]
        series = _series(*[(f"202401{d:02d}", c) for d, c in zip(range(2, 7), raw)])

        table = normalize(align({'csi500': series}), ['csi500'])

        values = [row['csi500_norm'] for row in table]
        assert values[0] == 100.00
        for i, price in enumerate(raw):
            assert values[i] == round(price / raw[0] * 100, 2)

    def test_late_starting_instrument_uses_own_base(self):
        """Base is the instrument's first quote, not the table's first row."""
        table = align({
            'a': _series(('20240102', 10.0), ('20240103', 11.0), ('20240104', 12.0)),
            'b': _series(('20240103', 50.0), ('20240104', 55.0)),
        })

        result = normalize(table, ['a', 'b'])

        assert 'b_norm' not in result[0]
        assert result[1]['b_norm'] == 100.0
        assert result[2]['b_norm'] == 110.0
        assert result[2]['a_norm'] == 120.0

    def test_gaps_stay_gaps(self):
        """Rows without a raw value get no normalized value."""
        table = align({
            'a': _series(('20240102', 10.0), ('20240104', 12.0)),
            'b': _series(('20240103', 50.0)),
        })

        result = normalize(table, ['a', 'b'])

        assert 'a_norm' not in result[1]
        assert 'b_norm' not in result[0]
        assert 'b_norm' not in result[2]

    def test_instrument_without_data(self):
        """No observations means no normalized column at all."""
        table = align({'a': _series(('20240102', 10.0)), 'b': []})

        result = normalize(table, ['a', 'b'])

        assert all('b_norm' not in row for row in result)
        assert all('b' not in row for row in result)

    @pytest.mark.parametrize('bad_base', [0.0, -5.0])
    def test_invalid_base_fails_closed(self, bad_base):
        """A zero or negative base omits that instrument only."""
        table = align({
            'bad': _series(('20240102', bad_base), ('20240103', 10.0)),
            'good': _series(('20240102', 20.0), ('20240103', 22.0)),
        })

        result = normalize(table, ['bad', 'good'])

        assert all('bad_norm' not in row for row in result)
        assert [row['good_norm'] for row in result] == [100.0, 110.0]

    def test_input_not_mutated(self):
        table = align({'a': _series(('20240102', 10.0), ('20240103', 11.0))})
        snapshot = copy.deepcopy(table)

        normalize(table, ['a'])

        assert table == snapshot

    def test_raw_round_trip(self):
        """Normalization is derived; raw series are recoverable exactly."""
        series = {
            'a': _series(('20240102', 10.123), ('20240104', 12.456)),
            'b': _series(('20240103', 50.5), ('20240104', 49.75)),
        }

        result = normalize(align(series), ['a', 'b'])

        for key, original in series.items():
            assert extract_series(result, key) == original

    def test_full_precision_before_rounding(self):
        """Only the emitted value is rounded."""
        table = align({'a': _series(('20240102', 3.0), ('20240103', 1.0))})

        result = normalize(table, ['a'])

        # 1/3 * 100 = 33.333... -> 33.33
        assert result[1]['a_norm'] == 33.33


class TestFindBases:

    def test_find_bases(self):
        table = align({
            'a': _series(('20240103', 11.0), ('20240102', 10.0)),
            'b': _series(('20240104', 0.0)),
            'c': [],
        })

        assert find_bases(table, ['a', 'b', 'c']) == {'a': 10.0}

    def test_norm_key(self):
        assert norm_key('csi500') == 'csi500_norm'
