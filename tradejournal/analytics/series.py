"""Cumulative P&L / portfolio value series."""
from datetime import datetime
from typing import Any, Optional

import pandas as pd

from tradejournal.analytics.bucketing import week_start
from tradejournal.analytics.metrics import clamp_capital
from tradejournal.core.constants import SeriesConstants
from tradejournal.core.error_decorator import OptionError, return_on_error
from tradejournal.core.logger import get_logger
from tradejournal.journal.frame import coerce_timestamp, prepare_trades


logger = get_logger(__name__)


def _resolve_now(now: Any) -> pd.Timestamp:
    ts = coerce_timestamp(now) if now is not None else None
    return ts if ts is not None else pd.Timestamp.now()


def window_bounds(
    frame: pd.DataFrame,
    time_range: str,
    now: pd.Timestamp
) -> tuple[pd.Timestamp, Optional[pd.Timestamp]]:
    """
    Start (inclusive) and end (exclusive, or None for open) of a series window.

    - today: local midnight of ``now`` until the next midnight
    - 7d / 1m / 3m / 1y: ``now`` minus 7 / 30 / 90 / 365 days
    - all: earliest trade, or ``now`` when there are no trades
    """
    if time_range not in SeriesConstants.TIME_RANGES:
        raise OptionError(
            f"Unknown time range: {time_range}. Use one of {SeriesConstants.TIME_RANGES}."
        )

    if time_range == 'today':
        start = now.normalize()
        return start, start + pd.Timedelta(days=1)
    if time_range == 'all':
        return (frame['timestamp'].iloc[0] if not frame.empty else now), None
    return now - pd.Timedelta(days=SeriesConstants.RANGE_DAYS[time_range]), None


def _series_stats(values: list[float], start_value: float, portfolio_value: float) -> dict[str, Any]:
    change = values[-1] - values[0] if values else 0.0
    reference = abs(start_value)
    return {
        'current_value': values[-1] if values else 0.0,
        'change': change,
        'change_percent': change / reference * 100 if reference > 0 else 0.0,
        'is_positive': change >= 0,
        'start_value': start_value,
        'portfolio_value': portfolio_value,
    }


def _empty_series() -> dict[str, Any]:
    return {
        'points': [],
        'stats': _series_stats([], 0.0, 0.0),
        'window_start': None,
        'time_range': None,
        'mode': None,
    }


@return_on_error(_empty_series)
def build_series(
    trades,
    time_range: str = 'all',
    now: datetime | None = None,
    mode: str = 'zero',
    initial_capital: float = 0.0
) -> dict[str, Any]:
    """
    Build the cumulative series behind the P&L and portfolio charts.

    Args:
        trades: Trade collection (see prepare_trades)
        time_range: 'today', '7d', '1m', '3m', '1y' or 'all'
        now: Reference instant (default: current local time)
        mode: 'zero' (running trading P&L from 0) or 'portfolio'
              (initial capital plus everything realized before the window)
        initial_capital: Starting capital, clamped to [0, 1e9]

    Returns:
        Dictionary with:
            - points: [{date, cumulative_value, pl, trade_id}], the origin
              point at the window start first, then one point per trade
            - stats: {current_value, change, change_percent, is_positive,
              start_value, portfolio_value}
            - window_start, time_range, mode

    Raises:
        OptionError: for an unknown time range or mode

    Notes:
        - change = last value - first value
        - change_percent is relative to the portfolio value at the window
          start (capital + P&L before the window), never to the static capital
    """
    if mode not in SeriesConstants.MODES:
        raise OptionError(f"Unknown series mode: {mode}. Use one of {SeriesConstants.MODES}.")

    frame = prepare_trades(trades)
    reference_now = _resolve_now(now)
    start, end = window_bounds(frame, time_range, reference_now)
    capital = clamp_capital(initial_capital)

    ts = frame['timestamp']
    in_window = ts >= start
    if end is not None:
        in_window &= ts < end
    window = frame[in_window]

    start_value = capital + float(frame.loc[ts < start, 'realized_pl'].sum())
    origin = start_value if mode == 'portfolio' else 0.0

    running = origin + window['realized_pl'].cumsum()
    points = [{
        'date': start.to_pydatetime(),
        'cumulative_value': origin,
        'pl': 0.0,
        'trade_id': None,
    }]
    points.extend(
        {
            'date': row_ts.to_pydatetime(),
            'cumulative_value': float(value),
            'pl': float(pl),
            'trade_id': trade_id,
        }
        for row_ts, value, pl, trade_id in zip(
            window['timestamp'], running, window['realized_pl'], window['id']
        )
    )

    values = [point['cumulative_value'] for point in points]
    portfolio_value = start_value + float(window['realized_pl'].sum())

    logger.debug(f"Series {time_range}/{mode}: {len(window)} trades in window from {start}")

    return {
        'points': points,
        'stats': _series_stats(values, start_value, portfolio_value),
        'window_start': start.to_pydatetime(),
        'time_range': time_range,
        'mode': mode,
    }


def filter_since(trades, days: int, now: datetime | None = None) -> pd.DataFrame:
    """Prepared trades from the trailing ``days`` days before ``now``."""
    frame = prepare_trades(trades)
    cutoff = _resolve_now(now) - pd.Timedelta(days=days)
    return frame[frame['timestamp'] >= cutoff]


def _equity_buckets(period: str, reference: pd.Timestamp) -> tuple[list[pd.Timestamp], pd.Timestamp, str]:
    """Bucket starts, the end of the last bucket and a label format."""
    if period == 'weekly':
        first = week_start(reference - pd.DateOffset(months=3))
        starts = pd.date_range(first, week_start(reference), freq='7D')
        return list(starts), starts[-1] + pd.Timedelta(days=7), 'week'

    if period in ('monthly', 'biannual'):
        count = 12 if period == 'monthly' else 24
        first = (reference - pd.DateOffset(months=count - 1)).to_period('M').to_timestamp()
        starts = pd.date_range(first, periods=count, freq='MS')
        return list(starts), starts[-1] + pd.DateOffset(months=1), '%b %Y' if count == 12 else '%b %y'

    starts = pd.date_range(pd.Timestamp(reference.year - 4, 1, 1), periods=5, freq='YS')
    return list(starts), pd.Timestamp(reference.year + 1, 1, 1), '%Y'


@return_on_error(list)
def equity_curve(trades, period: str = 'monthly', reference_date: datetime | None = None) -> list[dict[str, Any]]:
    """
    Cumulative P&L by period for the equity curve view.

    Args:
        trades: Trade collection (see prepare_trades)
        period: 'daily' (one point per trade on the reference day),
                'weekly' (Monday weeks from three months back), 'monthly'
                (12 months), 'biannual' (24 months) or 'annual' (5 years)
        reference_date: Date the view is anchored on (default: today)

    Returns:
        List of {label, start, pl, cumulative_value}. Bucketed periods carry
        in all P&L realized before the first bucket.
    """
    if period not in SeriesConstants.EQUITY_PERIODS:
        raise OptionError(
            f"Unknown equity period: {period}. Use one of {SeriesConstants.EQUITY_PERIODS}."
        )

    frame = prepare_trades(trades)
    reference = _resolve_now(reference_date)
    ts = frame['timestamp']

    if period == 'daily':
        day = reference.normalize()
        day_frame = frame[(ts >= day) & (ts < day + pd.Timedelta(days=1))]
        running = day_frame['realized_pl'].cumsum()
        return [
            {
                'label': row_ts.strftime('%H:%M'),
                'start': row_ts.to_pydatetime(),
                'pl': float(pl),
                'cumulative_value': float(value),
            }
            for row_ts, pl, value in zip(day_frame['timestamp'], day_frame['realized_pl'], running)
        ]

    starts, end, label_format = _equity_buckets(period, reference)
    running = float(frame.loc[ts < starts[0], 'realized_pl'].sum())

    curve = []
    for i, bucket_start in enumerate(starts):
        bucket_end = starts[i + 1] if i + 1 < len(starts) else end
        pl = float(frame.loc[(ts >= bucket_start) & (ts < bucket_end), 'realized_pl'].sum())
        running += pl
        label = (
            f"{bucket_start:%b} {bucket_start.day}" if label_format == 'week'
            else bucket_start.strftime(label_format)
        )
        curve.append({
            'label': label,
            'start': bucket_start.to_pydatetime(),
            'pl': pl,
            'cumulative_value': running,
        })

    return curve
