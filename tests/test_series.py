"""Tests for cumulative series and equity curves."""
from datetime import datetime

import numpy as np
import pytest

from tradejournal.analytics.series import build_series, equity_curve, filter_since
from tradejournal.core.error_decorator import OptionError


NOW = datetime(2024, 3, 6, 18, 0)


@pytest.fixture
def trades():
    """+500, -250, +1000 on three consecutive days."""
    return [
        {'id': 't1', 'ticker': 'AAPL', 'timestamp': '2024-03-04T10:30:00', 'realized_pl': 500.0},
        {'id': 't2', 'ticker': 'AAPL', 'timestamp': '2024-03-05T11:30:00', 'realized_pl': -250.0},
        {'id': 't3', 'ticker': 'MSFT', 'timestamp': '2024-03-06T11:30:00', 'realized_pl': 1000.0},
    ]


class TestBuildSeries:
    """Tests for build_series."""

    def test_zero_mode_all(self, trades):
        """Running P&L from 0, origin point first."""
        series = build_series(trades, 'all', now=NOW)
        values = [p['cumulative_value'] for p in series['points']]

        assert values == [0.0, 500.0, 250.0, 1250.0]
        assert series['points'][0]['trade_id'] is None
        assert [p['trade_id'] for p in series['points'][1:]] == ['t1', 't2', 't3']
        assert series['window_start'] == datetime(2024, 3, 4, 10, 30)

    def test_zero_mode_without_capital(self, trades):
        """No capital: the change percent has no base and is 0."""
        stats = build_series(trades, 'all', now=NOW)['stats']

        assert stats['change'] == 1250.0
        assert stats['change_percent'] == 0.0
        assert stats['is_positive'] is True

    def test_portfolio_mode(self, trades):
        """Portfolio mode starts at the capital."""
        series = build_series(trades, 'all', now=NOW, mode='portfolio', initial_capital=10000)
        values = [p['cumulative_value'] for p in series['points']]
        stats = series['stats']

        assert values == [10000.0, 10500.0, 10250.0, 11250.0]
        assert stats['current_value'] == 11250.0
        assert np.isclose(stats['change_percent'], 12.5)
        assert stats['portfolio_value'] == 11250.0

    def test_today_window_zero_mode(self, trades):
        """Today's series starts at 0; its percent base includes earlier P&L."""
        series = build_series(trades, 'today', now=NOW, initial_capital=10000)
        values = [p['cumulative_value'] for p in series['points']]
        stats = series['stats']

        assert values == [0.0, 1000.0]
        assert series['window_start'] == datetime(2024, 3, 6)
        assert stats['start_value'] == 10250.0
        assert np.isclose(stats['change_percent'], 1000 / 10250 * 100)

    def test_today_window_portfolio_mode(self, trades):
        """Same window in portfolio mode starts from the value at midnight."""
        series = build_series(trades, 'today', now=NOW, mode='portfolio', initial_capital=10000)
        values = [p['cumulative_value'] for p in series['points']]

        assert values == [10250.0, 11250.0]
        assert np.isclose(series['stats']['change_percent'], 1000 / 10250 * 100)

    def test_trailing_window(self, trades):
        """7d includes every trade in the last week."""
        series = build_series(trades, '7d', now=NOW)
        assert len(series['points']) == 4

    def test_window_without_trades(self, trades):
        """A window with no trades is just the origin point."""
        series = build_series(trades, '1m', now=datetime(2024, 5, 1), mode='portfolio', initial_capital=1000)

        assert len(series['points']) == 1
        assert series['points'][0]['cumulative_value'] == 2250.0
        assert series['stats']['change'] == 0.0
        assert series['stats']['is_positive'] is True

    def test_no_trades(self):
        """Empty collection, 'all' range: window starts now."""
        series = build_series([], 'all', now=NOW)

        assert len(series['points']) == 1
        assert series['window_start'] == NOW
        assert series['stats']['current_value'] == 0.0

    def test_unknown_range(self, trades):
        with pytest.raises(OptionError):
            build_series(trades, '2w', now=NOW)

    def test_unknown_mode(self, trades):
        with pytest.raises(OptionError):
            build_series(trades, 'all', now=NOW, mode='equity')

    @pytest.mark.parametrize('mode', ['zero', 'portfolio'])
    @pytest.mark.parametrize('time_range', ['today', '7d', '1m', '3m', '1y', 'all'])
    def test_point_dates_never_decrease(self, time_range, mode):
        """Unsorted input still gives points in time order, origin first."""
        unsorted = [
            {'id': 'd', 'ticker': 'AAPL', 'timestamp': '2024-03-06T09:45:00', 'realized_pl': 40.0},
            {'id': 'a', 'ticker': 'AAPL', 'timestamp': '2023-05-02T10:00:00', 'realized_pl': -10.0},
            {'id': 'f', 'ticker': 'TSLA', 'timestamp': '2024-03-06T15:00:00', 'realized_pl': -5.0},
            {'id': 'c', 'ticker': 'MSFT', 'timestamp': '2024-02-20T13:00:00', 'realized_pl': 25.0},
            {'id': 'e', 'ticker': 'MSFT', 'timestamp': '2024-03-06T09:45:00', 'realized_pl': 15.0},
            {'id': 'b', 'ticker': 'TSLA', 'timestamp': '2023-12-28T11:00:00', 'realized_pl': 60.0},
        ]
        series = build_series(unsorted, time_range, now=NOW, mode=mode, initial_capital=1000)
        dates = [p['date'] for p in series['points']]

        assert len(dates) > 1, f"{time_range} window should hold trades"
        assert dates == sorted(dates), f"Dates out of order for {time_range}/{mode}"
        assert dates[0] == series['window_start']


class TestEquityCurve:
    """Tests for equity_curve."""

    def test_monthly(self, trades):
        """Twelve calendar months ending with the reference month."""
        curve = equity_curve(trades, 'monthly', datetime(2024, 3, 20))

        assert len(curve) == 12
        assert curve[0]['label'] == 'Apr 2023'
        assert curve[-1]['label'] == 'Mar 2024'
        assert curve[-1]['pl'] == 1250.0
        assert curve[-1]['cumulative_value'] == 1250.0

    def test_biannual(self, trades):
        curve = equity_curve(trades, 'biannual', datetime(2024, 3, 20))

        assert len(curve) == 24
        assert curve[-1]['label'] == 'Mar 24'

    def test_annual(self, trades):
        """Five calendar years ending with the reference year."""
        curve = equity_curve(trades, 'annual', datetime(2024, 3, 20))

        assert [item['label'] for item in curve] == ['2020', '2021', '2022', '2023', '2024']
        assert curve[-1]['cumulative_value'] == 1250.0

    def test_weekly(self, trades):
        """Monday weeks from three months back to the reference week."""
        curve = equity_curve(trades, 'weekly', datetime(2024, 3, 20))

        assert curve[0]['start'] == datetime(2023, 12, 18)
        assert curve[-1]['start'] == datetime(2024, 3, 18)
        assert all(item['start'].weekday() == 0 for item in curve)
        week = next(item for item in curve if item['label'] == 'Mar 4')
        assert week['pl'] == 1250.0

    def test_daily(self, trades):
        """One point per trade on the reference day."""
        curve = equity_curve(trades, 'daily', datetime(2024, 3, 5, 20, 0))

        assert len(curve) == 1
        assert curve[0]['label'] == '11:30'
        assert curve[0]['cumulative_value'] == -250.0

    def test_carries_in_earlier_pl(self, trades):
        """P&L realized before the first bucket seeds the running total."""
        curve = equity_curve(trades, 'monthly', datetime(2025, 6, 15))

        assert curve[0]['pl'] == 0.0
        assert curve[0]['cumulative_value'] == 1250.0
        assert curve[-1]['cumulative_value'] == 1250.0

    def test_unknown_period(self, trades):
        with pytest.raises(OptionError):
            equity_curve(trades, 'hourly', datetime(2024, 3, 20))


def test_filter_since(trades):
    """Only trades from the trailing window are kept."""
    recent = filter_since(trades, 1, now=NOW)
    assert list(recent['id']) == ['t3']
