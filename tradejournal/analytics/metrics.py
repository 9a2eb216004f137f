"""Performance metrics over a trade collection."""
import math
from typing import Any

import numpy as np
import pandas as pd

from tradejournal.analytics.bucketing import bucket_series
from tradejournal.core.constants import AnalyticsConstants
from tradejournal.core.error_decorator import return_on_error
from tradejournal.core.logger import get_logger
from tradejournal.journal.frame import prepare_trades


logger = get_logger(__name__)

METRIC_KEYS = (
    'total_pl', 'total_trades', 'win_count', 'loss_count', 'win_rate',
    'avg_win', 'avg_loss', 'largest_win', 'largest_loss',
    'avg_daily_pl', 'avg_monthly_pl', 'avg_annual_pl', 'annual_return_rate',
    'trading_days', 'total_days',
    'daily_volatility', 'monthly_volatility', 'annualized_volatility_pct',
    'sharpe_ratio', 'max_drawdown', 'profit_factor', 'consistency',
)

_COUNT_KEYS = ('total_trades', 'win_count', 'loss_count', 'trading_days', 'total_days')


def empty_metrics() -> dict[str, Any]:
    """All-zero metrics, returned for an empty trade collection."""
    return {key: (0 if key in _COUNT_KEYS else 0.0) for key in METRIC_KEYS}


def clamp_capital(initial_capital: Any) -> float:
    """Clamp a capital input to [0, MAX_CAPITAL]; non-numeric or non-finite -> 0."""
    try:
        capital = float(initial_capital)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(capital):
        return 0.0
    return min(max(capital, 0.0), AnalyticsConstants.MAX_CAPITAL)


def max_drawdown(pl: pd.Series) -> float:
    """
    Largest peak-to-trough drop of the cumulative P&L walk, in currency.

    The running peak starts at 0, so a collection that opens with losses
    is in drawdown from the first trade.

    Example:
        >>> max_drawdown(pd.Series([100.0, -300.0, 50.0]))
        300.0
    """
    if len(pl) == 0:
        return 0.0
    running = pl.cumsum()
    peak = running.cummax().clip(lower=0.0)
    return float(max((peak - running).max(), 0.0))


def profit_factor(pl: pd.Series) -> float:
    """
    Gross wins over absolute gross losses.

    Returns PROFIT_FACTOR_CAP when there are wins but no losses and 0 when
    there are neither.
    """
    gross_win = float(pl[pl > 0].sum())
    gross_loss = abs(float(pl[pl < 0].sum()))
    if gross_loss > 0:
        return gross_win / gross_loss
    return AnalyticsConstants.PROFIT_FACTOR_CAP if gross_win > 0 else 0.0


def win_rate(pl: pd.Series) -> float:
    """Percentage of trades with positive P&L."""
    if len(pl) == 0:
        return 0.0
    return float((pl > 0).sum()) / len(pl) * 100


def _finite(value: float) -> float:
    value = float(value)
    return value if math.isfinite(value) else 0.0


@return_on_error(empty_metrics)
def compute_metrics(trades, initial_capital: float = 0.0) -> dict[str, Any]:
    """
    Compute summary performance metrics for a trade collection.

    Args:
        trades: Trade collection (see prepare_trades); callers filter it to a
                window beforehand if they want windowed metrics
        initial_capital: Capital used to turn the annual P&L into a rate,
                         clamped to [0, 1e9]

    Returns:
        Dictionary with metrics:
            - total_pl, total_trades, win_count, loss_count
            - win_rate: % of trades with realized_pl > 0
            - avg_win, avg_loss, largest_win, largest_loss
            - avg_daily_pl: total_pl / distinct trading days
            - avg_monthly_pl: total_pl / max(1, ceil(total_days / 30))
            - avg_annual_pl: total_pl / (total_days / 365.25), simple rate
            - annual_return_rate: avg_annual_pl / capital * 100 (0 if no capital)
            - trading_days: distinct local calendar days with trades
            - total_days: max(1, ceil(days from first to last trade))
            - daily_volatility: population std of daily P&L (0 if < 2 days)
            - monthly_volatility: daily_volatility * sqrt(21)
            - annualized_volatility_pct: daily_volatility * sqrt(252) / capital * 100
            - sharpe_ratio: (annual_return_rate - 2) / annualized_volatility_pct
            - max_drawdown: >= 0, in currency
            - profit_factor: gross wins / |gross losses| (999 if no losses)
            - consistency: % of traded months with positive P&L

    Notes:
        - Every value is finite; degenerate inputs give 0 or the 999 cap
        - Same input gives identical output

    Example:
        >>> m = compute_metrics([{'timestamp': '2024-03-04 10:00', 'realized_pl': 500},
        ...                      {'timestamp': '2024-03-05 10:00', 'realized_pl': -250}])
        >>> m['total_pl'], m['win_rate']
        (250.0, 50.0)
    """
    capital = clamp_capital(initial_capital)
    frame = prepare_trades(trades)
    if frame.empty:
        logger.debug("No valid trades, returning empty metrics")
        return empty_metrics()

    pl = frame['realized_pl']
    timestamps = frame['timestamp']
    wins = pl[pl > 0]
    losses = pl[pl < 0]
    total_pl = float(pl.sum())

    elapsed = (timestamps.iloc[-1] - timestamps.iloc[0]).total_seconds()
    total_days = max(1, math.ceil(elapsed / 86400))
    total_years = total_days / AnalyticsConstants.DAYS_PER_YEAR
    total_months = max(1, math.ceil(total_days / AnalyticsConstants.DAYS_PER_MONTH))

    daily = bucket_series(frame, 'day')
    trading_days = len(daily)
    avg_annual_pl = total_pl / total_years
    annual_return_rate = avg_annual_pl / capital * 100 if capital > 0 else 0.0

    # Population std; a single day has no dispersion
    daily_volatility = float(np.std(daily.to_numpy(), ddof=0)) if trading_days > 1 else 0.0
    monthly_volatility = daily_volatility * np.sqrt(AnalyticsConstants.BUSINESS_DAYS_PER_MONTH)
    annualized_volatility_pct = (
        daily_volatility * np.sqrt(AnalyticsConstants.TRADING_DAYS_PER_YEAR) / capital * 100
        if capital > 0 else 0.0
    )
    sharpe = (
        (annual_return_rate - AnalyticsConstants.RISK_FREE_RATE_PCT) / annualized_volatility_pct
        if annualized_volatility_pct > 0 else 0.0
    )

    monthly = bucket_series(frame, 'month')
    consistency = float((monthly > 0).sum()) / len(monthly) * 100

    metrics = {
        'total_pl': total_pl,
        'total_trades': int(len(pl)),
        'win_count': int(len(wins)),
        'loss_count': int(len(losses)),
        'win_rate': win_rate(pl),
        'avg_win': float(wins.mean()) if len(wins) else 0.0,
        'avg_loss': float(losses.mean()) if len(losses) else 0.0,
        'largest_win': float(wins.max()) if len(wins) else 0.0,
        'largest_loss': float(losses.min()) if len(losses) else 0.0,
        'avg_daily_pl': total_pl / trading_days,
        'avg_monthly_pl': total_pl / total_months,
        'avg_annual_pl': avg_annual_pl,
        'annual_return_rate': annual_return_rate,
        'trading_days': int(trading_days),
        'total_days': int(total_days),
        'daily_volatility': daily_volatility,
        'monthly_volatility': float(monthly_volatility),
        'annualized_volatility_pct': float(annualized_volatility_pct),
        'sharpe_ratio': float(sharpe),
        'max_drawdown': max_drawdown(pl),
        'profit_factor': profit_factor(pl),
        'consistency': consistency,
    }
    metrics = {
        key: value if key in _COUNT_KEYS else _finite(value)
        for key, value in metrics.items()
    }

    logger.debug(f"Metrics over {metrics['total_trades']} trades: "
                 f"total_pl={total_pl:.2f}, win_rate={metrics['win_rate']:.1f}%, "
                 f"max_dd={metrics['max_drawdown']:.2f}")

    return metrics
