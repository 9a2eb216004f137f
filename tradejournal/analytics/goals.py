"""Progress of realized P&L against daily, weekly, monthly and yearly targets."""
import math
from datetime import datetime
from typing import Any, Mapping, Optional

import pandas as pd

from tradejournal.analytics.bucketing import week_start
from tradejournal.core.constants import GoalConstants
from tradejournal.core.error_decorator import OptionError, return_on_error
from tradejournal.core.logger import get_logger
from tradejournal.journal.frame import coerce_timestamp, prepare_trades


logger = get_logger(__name__)


def _timestamp_or_now(value: Any) -> pd.Timestamp:
    ts = coerce_timestamp(value) if value is not None else None
    return ts if ts is not None else pd.Timestamp.now()


def period_bounds(period: str, reference: pd.Timestamp) -> tuple[pd.Timestamp, pd.Timestamp]:
    """
    Start (inclusive) and end (exclusive) of the goal period holding ``reference``.

    Weeks start on Monday; months and years follow the local calendar.
    """
    day = reference.normalize()
    if period == 'daily':
        start = day
        return start, start + pd.Timedelta(days=1)
    if period == 'weekly':
        start = week_start(day)
        return start, start + pd.Timedelta(days=7)
    if period == 'monthly':
        start = day.replace(day=1)
        return start, start + pd.DateOffset(months=1)
    if period == 'yearly':
        start = day.replace(month=1, day=1)
        return start, start + pd.DateOffset(years=1)
    raise OptionError(f"Unknown goal period: {period}. Use one of {GoalConstants.PERIODS}.")


def market_day_fraction(now: pd.Timestamp) -> float:
    """Share of the regular session (9:30 AM - 4:00 PM) that has passed at ``now``."""
    clock = now.hour + now.minute / 60
    if clock < GoalConstants.MARKET_OPEN_HOUR:
        return 0.0
    if clock > GoalConstants.MARKET_CLOSE_HOUR:
        return 1.0
    session = GoalConstants.MARKET_CLOSE_HOUR - GoalConstants.MARKET_OPEN_HOUR
    return (clock - GoalConstants.MARKET_OPEN_HOUR) / session


def elapsed_days(
    period: str,
    start: pd.Timestamp,
    end: pd.Timestamp,
    now: pd.Timestamp
) -> tuple[float, float, float]:
    """
    (total, elapsed, left) days of a period as seen at ``now``.

    The current day counts as elapsed. A daily period measures its single
    day by the market session instead of the calendar.
    """
    if period == 'daily':
        if now < start:
            elapsed = 0.0
        elif now >= end:
            elapsed = 1.0
        else:
            elapsed = market_day_fraction(now)
        return 1.0, elapsed, 1.0 - elapsed

    total = float((end - start).days)
    if now < start:
        return total, 0.0, total
    if now >= end:
        return total, total, 0.0

    elapsed = float((now.normalize() - start).days + 1)
    return total, elapsed, total - elapsed


def resolve_targets(targets: Optional[Mapping[str, Any]] = None) -> dict[str, float]:
    """Default targets overlaid with ``targets``; every amount must be a positive number."""
    resolved = dict(GoalConstants.DEFAULT_TARGETS)
    for period, amount in (targets or {}).items():
        if period not in GoalConstants.PERIODS:
            raise OptionError(f"Unknown goal period: {period}. Use one of {GoalConstants.PERIODS}.")
        if amount is None:
            continue
        if isinstance(amount, bool) or not isinstance(amount, (int, float)) \
                or not math.isfinite(amount) or amount <= 0:
            raise OptionError(f"Goal target for {period} must be a positive number, got {amount!r}")
        resolved[period] = float(amount)
    return resolved


def _period_progress(
    frame: pd.DataFrame,
    period: str,
    target: float,
    reference: pd.Timestamp,
    now: pd.Timestamp
) -> dict[str, Any]:
    start, end = period_bounds(period, reference)
    ts = frame['timestamp']
    pl = frame.loc[(ts >= start) & (ts < end), 'realized_pl']

    actual = float(pl.sum())
    progress = actual / target * 100
    remaining = target - actual
    total_days, days_elapsed, days_left = elapsed_days(period, start, end, now)

    time_elapsed = days_elapsed / total_days * 100
    average_daily = actual / days_elapsed if days_elapsed > 0 else 0.0

    return {
        'period': period,
        'label': GoalConstants.LABELS[period],
        'start': start.to_pydatetime(),
        'end': (end - pd.Timedelta(microseconds=1)).to_pydatetime(),
        'target': target,
        'actual': actual,
        'trade_count': int(len(pl)),
        # Capped for display; on_track uses the uncapped value
        'progress': min(progress, 100.0),
        'remaining': remaining,
        'days_left': days_left,
        'daily_required': remaining / days_left if days_left > 0 else 0.0,
        'time_elapsed': time_elapsed,
        'projected_end': average_daily * total_days,
        'on_track': progress >= time_elapsed or actual >= target,
    }


@return_on_error(list)
def goal_progress(
    trades,
    targets: Optional[Mapping[str, Any]] = None,
    reference_date: datetime | None = None,
    now: datetime | None = None
) -> list[dict[str, Any]]:
    """
    Compare realized P&L with an earnings target for each goal period.

    Args:
        trades: Trade collection (see prepare_trades)
        targets: {period: amount} for 'daily', 'weekly', 'monthly',
                 'yearly'; missing periods use the default targets
        reference_date: Date whose day, week, month and year are measured
                        (default: now)
        now: Instant that splits each period into elapsed and remaining
             time (default: current local time)

    Returns:
        One dict per period in daily/weekly/monthly/yearly order with
        period, label, start, end, target, actual, trade_count, progress
        (percent, capped at 100), remaining, days_left, daily_required,
        time_elapsed (percent), projected_end and on_track.

    Raises:
        OptionError: for an unknown period or a non-positive target
    """
    amounts = resolve_targets(targets)
    frame = prepare_trades(trades)
    current = _timestamp_or_now(now)
    reference = _timestamp_or_now(reference_date) if reference_date is not None else current

    results = [
        _period_progress(frame, period, amounts[period], reference, current)
        for period in GoalConstants.PERIODS
    ]

    logger.debug(
        f"Goal progress for {reference:%Y-%m-%d}: "
        + ", ".join(f"{r['period']} {r['progress']:.0f}%" for r in results)
    )

    return results
