"""Tests for performance metrics."""
import math

import numpy as np
import pandas as pd
import pytest

from tradejournal.analytics.metrics import (
    METRIC_KEYS,
    clamp_capital,
    compute_metrics,
    empty_metrics,
    max_drawdown,
    profit_factor,
)


@pytest.fixture
def three_day_trades():
    """+500, -250, +1000 on three consecutive days at 10:00."""
    return [
        {'id': '1', 'ticker': 'AAPL', 'timestamp': '2024-03-04T10:00:00', 'realized_pl': 500.0},
        {'id': '2', 'ticker': 'AAPL', 'timestamp': '2024-03-05T10:00:00', 'realized_pl': -250.0},
        {'id': '3', 'ticker': 'MSFT', 'timestamp': '2024-03-06T10:00:00', 'realized_pl': 1000.0},
    ]


class TestComputeMetrics:
    """Tests for compute_metrics."""

    def test_basic_counts(self, three_day_trades):
        """Totals, counts and win rate."""
        m = compute_metrics(three_day_trades)

        assert m['total_pl'] == 1250.0
        assert m['total_trades'] == 3
        assert m['win_count'] == 2
        assert m['loss_count'] == 1
        assert np.isclose(m['win_rate'], 200 / 3)
        assert m['avg_win'] == 750.0
        assert m['avg_loss'] == -250.0
        assert m['largest_win'] == 1000.0
        assert m['largest_loss'] == -250.0

    def test_days(self, three_day_trades):
        """Three trading days spanning exactly two elapsed days."""
        m = compute_metrics(three_day_trades)

        assert m['trading_days'] == 3
        assert m['total_days'] == 2
        assert np.isclose(m['avg_daily_pl'], 1250 / 3)
        assert np.isclose(m['avg_monthly_pl'], 1250.0)

    def test_risk_metrics(self, three_day_trades):
        """Drawdown, profit factor and consistency."""
        m = compute_metrics(three_day_trades)

        assert m['max_drawdown'] == 250.0
        assert np.isclose(m['profit_factor'], 6.0)
        assert m['consistency'] == 100.0

    def test_annual_return_with_capital(self, three_day_trades):
        """Simple annualization over total_days / 365.25."""
        m = compute_metrics(three_day_trades, initial_capital=10000)

        assert np.isclose(m['avg_annual_pl'], 1250 / (2 / 365.25))
        assert np.isclose(m['annual_return_rate'], 2282.8125)

    def test_volatility(self, three_day_trades):
        """Population std of daily P&L, scaled by sqrt(21) and sqrt(252)."""
        m = compute_metrics(three_day_trades, initial_capital=10000)
        daily_vol = np.std([500.0, -250.0, 1000.0])

        assert np.isclose(m['daily_volatility'], daily_vol)
        assert np.isclose(m['monthly_volatility'], daily_vol * np.sqrt(21))
        assert np.isclose(m['annualized_volatility_pct'], daily_vol * np.sqrt(252) / 10000 * 100)
        expected_sharpe = (2282.8125 - 2.0) / m['annualized_volatility_pct']
        assert np.isclose(m['sharpe_ratio'], expected_sharpe)

    def test_no_capital(self, three_day_trades):
        """Without capital there is no return rate or Sharpe."""
        m = compute_metrics(three_day_trades)

        assert m['annual_return_rate'] == 0.0
        assert m['annualized_volatility_pct'] == 0.0
        assert m['sharpe_ratio'] == 0.0

    def test_empty(self):
        """Empty input gives all zeros."""
        m = compute_metrics([])

        assert m == empty_metrics()
        assert set(m) == set(METRIC_KEYS)
        assert all(value == 0 for value in m.values())

    def test_malformed_records_ignored(self, three_day_trades):
        """Malformed records do not change the result."""
        dirty = three_day_trades + [
            {'id': 'x', 'ticker': 'AAPL', 'timestamp': 'nope', 'realized_pl': 99999.0},
            {'id': 'y', 'ticker': 'AAPL', 'timestamp': '2024-03-05T10:00:00', 'realized_pl': float('nan')},
        ]
        assert compute_metrics(dirty, 5000) == compute_metrics(three_day_trades, 5000)

    def test_deterministic(self, three_day_trades):
        """Same input gives identical output."""
        assert compute_metrics(three_day_trades, 10000) == compute_metrics(three_day_trades, 10000)

    def test_all_wins(self):
        """Wins without losses cap the profit factor at 999."""
        trades = [
            {'timestamp': '2024-03-04T10:00:00', 'realized_pl': 100.0},
            {'timestamp': '2024-03-05T10:00:00', 'realized_pl': 50.0},
        ]
        m = compute_metrics(trades)

        assert m['profit_factor'] == 999.0
        assert m['win_rate'] == 100.0
        assert m['max_drawdown'] == 0.0

    def test_all_losses(self):
        """Losses only: zero profit factor, drawdown equals total loss."""
        trades = [
            {'timestamp': '2024-03-04T10:00:00', 'realized_pl': -100.0},
            {'timestamp': '2024-03-05T10:00:00', 'realized_pl': -50.0},
        ]
        m = compute_metrics(trades)

        assert m['profit_factor'] == 0.0
        assert m['win_rate'] == 0.0
        assert m['max_drawdown'] == 150.0
        assert m['consistency'] == 0.0

    def test_single_trade(self):
        """One trade: one day elapsed and no volatility."""
        m = compute_metrics([{'timestamp': '2024-03-04T10:00:00', 'realized_pl': 42.0}], 1000)

        assert m['total_days'] == 1
        assert m['trading_days'] == 1
        assert m['daily_volatility'] == 0.0
        assert m['sharpe_ratio'] == 0.0

    def test_all_values_finite(self, three_day_trades):
        """No NaN or infinity for any capital input."""
        for capital in [0, -100, float('nan'), float('inf'), 'abc', 1e12]:
            m = compute_metrics(three_day_trades, capital)
            assert all(math.isfinite(v) for v in m.values()), f"Non-finite metric for capital={capital!r}"


class TestHelpers:
    """Tests for the metric helpers."""

    def test_clamp_capital(self):
        assert clamp_capital(5000) == 5000.0
        assert clamp_capital(-1) == 0.0
        assert clamp_capital(2e9) == 1e9
        assert clamp_capital(None) == 0.0
        assert clamp_capital(float('inf')) == 0.0

    def test_drawdown_from_first_trade(self):
        """The peak starts at zero, so an opening loss is a drawdown."""
        assert max_drawdown(pd.Series([-100.0, 50.0, -200.0])) == 250.0

    def test_drawdown_after_peak(self):
        assert max_drawdown(pd.Series([100.0, -300.0, 50.0])) == 300.0

    def test_drawdown_empty(self):
        assert max_drawdown(pd.Series([], dtype=float)) == 0.0

    def test_profit_factor(self):
        assert profit_factor(pd.Series([100.0, -50.0])) == 2.0
        assert profit_factor(pd.Series([0.0, 0.0])) == 0.0
