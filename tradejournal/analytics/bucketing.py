"""Calendar bucketing of realized P&L."""
from datetime import datetime
from typing import Any

import numpy as np
import pandas as pd

from tradejournal.core.constants import BucketConstants, FileFormats
from tradejournal.core.error_decorator import OptionError, return_on_error
from tradejournal.core.logger import get_logger
from tradejournal.journal.frame import coerce_timestamp, prepare_trades


logger = get_logger(__name__)


def check_granularity(granularity: str) -> None:
    if granularity not in BucketConstants.GRANULARITIES:
        raise OptionError(
            f"Unknown granularity: {granularity}. Use one of {BucketConstants.GRANULARITIES}."
        )


def week_start(ts: pd.Timestamp) -> pd.Timestamp:
    """Local midnight of the Monday starting the week that contains ``ts``."""
    return ts.normalize() - pd.Timedelta(days=ts.weekday())


def bucket_keys(frame: pd.DataFrame, granularity: str) -> pd.Series:
    """
    Bucket key of every trade in a prepared frame.

    Keys by granularity:
        - hour: int 0-23 (local hour of day)
        - weekday: int, Monday=0 ... Sunday=6
        - day: 'YYYY-MM-DD'
        - week: 'YYYY-MM-DD' of the Monday that starts the week
        - month: 'YYYY-MM'
        - year: int
    """
    check_granularity(granularity)
    ts = frame['timestamp']

    if granularity == 'hour':
        return ts.dt.hour
    if granularity == 'weekday':
        return ts.dt.weekday
    if granularity == 'day':
        return ts.dt.strftime(FileFormats.DATE_FORMAT)
    if granularity == 'week':
        monday = ts.dt.normalize() - pd.to_timedelta(ts.dt.weekday, unit='D')
        return monday.dt.strftime(FileFormats.DATE_FORMAT)
    if granularity == 'month':
        return ts.dt.strftime(FileFormats.MONTH_FORMAT)
    return ts.dt.year


def plain_key(key: Any) -> Any:
    """numpy scalars -> python scalars, so results serialize cleanly."""
    if isinstance(key, np.integer):
        return int(key)
    return key


def bucket_series(frame: pd.DataFrame, granularity: str) -> pd.Series:
    """Summed realized P&L per bucket of a prepared frame, ascending by key."""
    if frame.empty:
        return pd.Series(dtype=float)
    return frame['realized_pl'].groupby(bucket_keys(frame, granularity)).sum().sort_index()


@return_on_error(dict)
def bucket_pl(trades, granularity: str) -> dict[Any, float]:
    """
    Sum realized P&L per calendar bucket.

    Args:
        trades: Trade collection (see prepare_trades)
        granularity: 'hour', 'weekday', 'day', 'week', 'month' or 'year'

    Returns:
        Ordered dict of bucket key -> summed realized P&L (see bucket_keys
        for the key format). Trades with invalid timestamps are excluded.

    Raises:
        OptionError: for an unknown granularity

    Example:
        >>> bucket_pl(trades, 'day')
        {'2024-03-04': 500.0, '2024-03-05': -250.0}
    """
    check_granularity(granularity)
    frame = prepare_trades(trades)
    sums = bucket_series(frame, granularity)
    return {plain_key(key): float(value) for key, value in sums.items()}


def bucket_stats(trades, granularity: str) -> pd.DataFrame:
    """
    Per-bucket trade statistics.

    Returns:
        DataFrame indexed by bucket key with columns
        [total_pl, trade_count, win_count, loss_count, win_rate, avg_pl].
        win_rate is a percentage.
    """
    frame = prepare_trades(trades)
    columns = ['total_pl', 'trade_count', 'win_count', 'loss_count', 'win_rate', 'avg_pl']
    if frame.empty:
        check_granularity(granularity)
        return pd.DataFrame(columns=columns)

    pl = frame['realized_pl']
    work = pd.DataFrame({
        'bucket': bucket_keys(frame, granularity),
        'pl': pl,
        'is_win': pl > 0,
        'is_loss': pl < 0,
    })
    stats = work.groupby('bucket').agg(
        total_pl=('pl', 'sum'),
        trade_count=('pl', 'size'),
        win_count=('is_win', 'sum'),
        loss_count=('is_loss', 'sum'),
    )
    stats['win_rate'] = stats['win_count'] / stats['trade_count'] * 100
    stats['avg_pl'] = stats['total_pl'] / stats['trade_count']

    return stats[columns].sort_index()


def _day_frame(frame: pd.DataFrame, day: pd.Timestamp) -> pd.DataFrame:
    start = day.normalize()
    end = start + pd.Timedelta(days=1)
    return frame[(frame['timestamp'] >= start) & (frame['timestamp'] < end)]


def _to_day(value: Any) -> pd.Timestamp:
    day = coerce_timestamp(value)
    if day is None:
        day = pd.Timestamp.now()
    return day.normalize()


def _empty_daily_stats() -> dict[str, Any]:
    return {
        'date': None,
        'total_pl': 0.0,
        'win_count': 0,
        'loss_count': 0,
        'total_trades': 0,
        'win_rate': 0.0,
        'avg_win': 0.0,
        'avg_loss': 0.0,
    }


@return_on_error(_empty_daily_stats)
def daily_stats(trades, day: datetime | str) -> dict[str, Any]:
    """Summary of the trades closed on one local calendar day."""
    frame = prepare_trades(trades)
    target = _to_day(day)
    pl = _day_frame(frame, target)['realized_pl']
    wins = pl[pl > 0]
    losses = pl[pl < 0]

    return {
        'date': target.strftime(FileFormats.DATE_FORMAT),
        'total_pl': float(pl.sum()),
        'win_count': int(len(wins)),
        'loss_count': int(len(losses)),
        'total_trades': int(len(pl)),
        'win_rate': len(wins) / len(pl) * 100 if len(pl) else 0.0,
        'avg_win': float(wins.mean()) if len(wins) else 0.0,
        'avg_loss': float(losses.mean()) if len(losses) else 0.0,
    }


@return_on_error(list)
def hourly_stats(trades, day: datetime | str) -> list[dict[str, Any]]:
    """
    Hour-by-hour P&L for one day across the extended session (4 AM - 8 PM).

    Every session hour is present, with zeros when nothing traded; trades
    outside the session are ignored.
    """
    frame = prepare_trades(trades)
    day_frame = _day_frame(frame, _to_day(day))
    hours = range(BucketConstants.SESSION_FIRST_HOUR, BucketConstants.SESSION_LAST_HOUR + 1)

    grouped = day_frame['realized_pl'].groupby(day_frame['timestamp'].dt.hour)
    sums = grouped.sum().reindex(hours, fill_value=0.0)
    counts = grouped.size().reindex(hours, fill_value=0)

    return [
        {
            'hour': hour,
            'total_pl': float(sums[hour]),
            'trade_count': int(counts[hour]),
            'avg_pl': float(sums[hour]) / int(counts[hour]) if counts[hour] else 0.0,
        }
        for hour in hours
    ]


def _empty_weekly_stats() -> dict[str, Any]:
    return {
        'week_start': None,
        'week_end': None,
        'total_pl': 0.0,
        'total_trades': 0,
        'win_count': 0,
        'loss_count': 0,
        'win_rate': 0.0,
    }


@return_on_error(_empty_weekly_stats)
def weekly_stats(trades, day: datetime | str) -> dict[str, Any]:
    """Summary of the Monday-start week that contains ``day``."""
    frame = prepare_trades(trades)
    start = week_start(_to_day(day))
    end = start + pd.Timedelta(days=7)
    pl = frame[(frame['timestamp'] >= start) & (frame['timestamp'] < end)]['realized_pl']
    wins = int((pl > 0).sum())

    return {
        'week_start': start.to_pydatetime(),
        'week_end': (end - pd.Timedelta(microseconds=1)).to_pydatetime(),
        'total_pl': float(pl.sum()),
        'total_trades': int(len(pl)),
        'win_count': wins,
        'loss_count': int((pl < 0).sum()),
        'win_rate': wins / len(pl) * 100 if len(pl) else 0.0,
    }
