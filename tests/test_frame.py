"""Tests for the validity filter that prepares trade frames."""
import time
from datetime import datetime

import numpy as np
import pandas as pd
import pytest

from tradejournal.analytics.bucketing import bucket_pl
from tradejournal.journal.frame import (
    TRADE_COLUMNS,
    coerce_pl,
    coerce_timestamp,
    prepare_trades,
)
from tradejournal.journal.trade import create_trade


@pytest.fixture
def valid_records():
    """Three well-formed trade documents, out of time order."""
    return [
        {'id': 'b', 'ticker': 'msft', 'timestamp': '2024-03-05T10:00:00', 'realized_pl': -50.0},
        {'id': 'a', 'ticker': 'AAPL', 'timestamp': '2024-03-04T10:00:00', 'realized_pl': 100.0},
        {'id': 'c', 'ticker': 'AAPL', 'timestamp': '2024-03-06T10:00:00', 'realized_pl': 25},
    ]


@pytest.fixture
def malformed_records():
    """Records that must be dropped."""
    return [
        {'id': 'x1', 'ticker': 'AAPL', 'timestamp': 'not a date', 'realized_pl': 10.0},
        {'id': 'x2', 'ticker': 'AAPL', 'timestamp': None, 'realized_pl': 10.0},
        {'id': 'x3', 'ticker': 'AAPL', 'timestamp': '2024-03-04', 'realized_pl': 'abc'},
        {'id': 'x4', 'ticker': 'AAPL', 'timestamp': '2024-03-04', 'realized_pl': float('nan')},
        {'id': 'x5', 'ticker': 'AAPL', 'timestamp': '2024-03-04', 'realized_pl': float('inf')},
        {'id': 'x6', 'ticker': 'AAPL', 'timestamp': '2024-03-04', 'realized_pl': True},
        {'id': 'x7', 'ticker': 'AAPL', 'timestamp': '2024-03-04'},
        'not a record',
    ]


class TestPrepareTrades:
    """Tests for prepare_trades."""

    def test_columns_and_order(self, valid_records):
        """Output has the standard columns, sorted by timestamp."""
        frame = prepare_trades(valid_records)

        assert list(frame.columns) == TRADE_COLUMNS
        assert list(frame['id']) == ['a', 'b', 'c']
        assert frame['timestamp'].is_monotonic_increasing

    def test_tickers_upper_cased(self, valid_records):
        """Tickers are upper-cased."""
        frame = prepare_trades(valid_records)
        assert set(frame['ticker']) == {'AAPL', 'MSFT'}

    def test_malformed_records_dropped(self, valid_records, malformed_records):
        """Output with malformed records equals output for the valid subset."""
        mixed = malformed_records[:4] + valid_records + malformed_records[4:]

        expected = prepare_trades(valid_records)
        result = prepare_trades(mixed)

        pd.testing.assert_frame_equal(result, expected)

    def test_only_malformed(self, malformed_records):
        """A collection of malformed records gives an empty frame."""
        frame = prepare_trades(malformed_records)
        assert frame.empty
        assert list(frame.columns) == TRADE_COLUMNS

    def test_none_and_empty(self):
        """None and empty input give an empty frame."""
        assert prepare_trades(None).empty
        assert prepare_trades([]).empty

    def test_camel_case_keys(self):
        """Stored camelCase documents are understood."""
        frame = prepare_trades([
            {'id': 'a', 'ticker': 'AAPL', 'entryPrice': 10.0, 'exitPrice': 11.0,
             'timestamp': '2024-03-04T10:00:00', 'realizedPL': 100.0},
        ])

        assert frame.loc[0, 'realized_pl'] == 100.0
        assert frame.loc[0, 'entry_price'] == 10.0

    def test_trade_models(self):
        """Trade models are accepted."""
        trades = [
            create_trade('AAPL', 'long', 10, 100.0, 101.0, datetime(2024, 3, 4, 10)),
            create_trade('TSLA', 'short', 10, 50.0, 40.0, datetime(2024, 3, 3, 10)),
        ]
        frame = prepare_trades(trades)

        assert list(frame['ticker']) == ['TSLA', 'AAPL']
        assert list(frame['realized_pl']) == [100.0, 10.0]

    def test_stable_sort_for_equal_timestamps(self):
        """Trades at the same instant keep their input order."""
        ts = '2024-03-04T10:00:00'
        frame = prepare_trades([
            {'id': str(i), 'ticker': 'AAPL', 'timestamp': ts, 'realized_pl': float(i)} for i in range(5)
        ])
        assert list(frame['id']) == ['0', '1', '2', '3', '4']

    def test_prepared_frame_returned_as_is(self, valid_records):
        """Preparing a prepared frame is a no-op."""
        frame = prepare_trades(valid_records)
        assert prepare_trades(frame) is frame

    def test_plain_dataframe_input(self, valid_records):
        """A DataFrame that was not prepared is filtered like records."""
        raw = pd.DataFrame(valid_records)
        frame = prepare_trades(raw)

        assert len(frame) == 3
        assert list(frame['id']) == ['a', 'b', 'c']

    def test_resorted_prepared_frame_is_reordered(self, valid_records):
        """A prepared frame re-sorted by P&L comes back in time order."""
        by_pl = prepare_trades(valid_records).sort_values('realized_pl')
        assert list(by_pl['id']) == ['b', 'c', 'a']

        frame = prepare_trades(by_pl)

        assert list(frame['id']) == ['a', 'b', 'c']
        assert frame['timestamp'].is_monotonic_increasing

    def test_does_not_mutate_input(self, valid_records):
        """Input records are left untouched."""
        before = [dict(record) for record in valid_records]
        prepare_trades(valid_records)
        assert valid_records == before


@pytest.fixture
def new_york(monkeypatch):
    """Run with America/New_York as the local zone."""
    monkeypatch.setenv('TZ', 'America/New_York')
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


class TestCoercion:
    """Tests for timestamp and P&L coercion."""

    def test_iso_string(self):
        assert coerce_timestamp('2024-03-04T10:30:00') == pd.Timestamp('2024-03-04 10:30')

    def test_naive_is_local_wall_time(self, new_york):
        """Naive values are not shifted by the local zone."""
        assert coerce_timestamp('2024-01-15T14:30:00') == pd.Timestamp('2024-01-15 14:30')

    def test_epoch_milliseconds(self, new_york):
        """Numbers are epoch milliseconds, read as local time."""
        # 2024-01-15T14:30:00Z
        assert coerce_timestamp(1705329000000) == pd.Timestamp('2024-01-15 09:30')

    def test_utc_string_to_local(self, new_york):
        """Aware timestamps are converted to local time and made naive."""
        ts = coerce_timestamp('2024-01-15T14:30:00Z')

        assert ts.tzinfo is None
        assert ts == pd.Timestamp('2024-01-15 09:30')

    def test_offset_follows_daylight_saving(self, new_york):
        """Winter and summer instants get their own UTC offset."""
        assert coerce_timestamp('2024-07-15T14:30:00Z') == pd.Timestamp('2024-07-15 10:30')
        assert coerce_timestamp('2024-12-16T14:30:00+00:00') == pd.Timestamp('2024-12-16 09:30')

    def test_late_evening_stays_on_local_day(self, new_york):
        """Instants after UTC midnight land on the previous local day on both sides of a DST change."""
        assert coerce_timestamp('2024-03-10T04:30:00Z') == pd.Timestamp('2024-03-09 23:30')
        assert coerce_timestamp('2024-03-11T03:30:00Z') == pd.Timestamp('2024-03-10 23:30')

    def test_buckets_use_local_hour(self, new_york):
        for stamp in ['2024-01-15T14:30:00Z', 1705329000000]:
            assert bucket_pl([{'timestamp': stamp, 'realized_pl': 10}], 'hour') == {9: 10.0}

    def test_unparseable(self):
        for value in ['garbage', '', None, True, float('nan'), object()]:
            assert coerce_timestamp(value) is None, f"{value!r} should not parse"

    def test_pl(self):
        assert coerce_pl(5) == 5.0
        assert coerce_pl(np.float64(-2.5)) == -2.5
        for value in ['5', None, False, float('nan'), float('-inf')]:
            assert coerce_pl(value) is None, f"{value!r} should be rejected"
