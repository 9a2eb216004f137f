"""Rule-based pattern detection over the recent trading window.

Every detector is a pure function ``(window) -> pattern dict | None`` over
the prepared, time-sorted trades of the trailing four-week window. The
thresholds live in ``InsightConstants``; they are fixed so the findings are
reproducible.
"""
from datetime import datetime
from typing import Any, Callable, Optional

import pandas as pd

from tradejournal.analytics.bucketing import bucket_keys, week_start
from tradejournal.analytics.metrics import profit_factor
from tradejournal.core.constants import BucketConstants, InsightConstants as IC
from tradejournal.core.error_decorator import return_on_error
from tradejournal.core.formatting import format_currency, format_hour
from tradejournal.core.logger import get_logger
from tradejournal.journal.frame import coerce_timestamp, prepare_trades


logger = get_logger(__name__)

Pattern = dict[str, Any]


def _pattern(
    kind: str,
    title: str,
    description: str,
    confidence: float,
    recommendation: str,
    detector: str
) -> Pattern:
    return {
        'type': kind,
        'title': title,
        'description': description,
        'confidence': confidence,
        'actionable_recommendation': recommendation,
        'detector': detector,
    }


def analysis_window(reference_date: datetime | None = None) -> tuple[pd.Timestamp, pd.Timestamp]:
    """
    Trailing window the detectors look at.

    Runs from Monday 00:00 of the week four weeks before the reference week
    through the last instant of the reference week's Sunday.
    """
    reference = coerce_timestamp(reference_date) if reference_date is not None else None
    if reference is None:
        reference = pd.Timestamp.now()
    current_week = week_start(reference)
    start = current_week - pd.Timedelta(weeks=IC.ANALYSIS_WEEKS)
    end = current_week + pd.Timedelta(days=7) - pd.Timedelta(microseconds=1)
    return start, end


def _group_stats(window: pd.DataFrame, keys: pd.Series) -> pd.DataFrame:
    """P&L, trade count and win rate (fraction) per key, ascending by key."""
    pl = window['realized_pl']
    work = pd.DataFrame({'key': keys, 'pl': pl, 'is_win': pl > 0})
    stats = work.groupby('key').agg(pl=('pl', 'sum'), trades=('pl', 'size'), wins=('is_win', 'sum'))
    stats['win_rate'] = stats['wins'] / stats['trades']
    return stats


def _ranked(stats: pd.DataFrame, min_trades: int, ascending: bool) -> pd.DataFrame:
    significant = stats[stats['trades'] >= min_trades]
    return significant.sort_values('pl', ascending=ascending, kind='mergesort')


def detect_overtrading(window: pd.DataFrame) -> Optional[Pattern]:
    counts = bucket_keys(window, 'day').value_counts()
    if counts.empty:
        return None

    max_per_day = int(counts.max())
    avg_per_day = float(counts.mean())
    if not (max_per_day > IC.OVERTRADING_MAX_PER_DAY or avg_per_day > IC.OVERTRADING_AVG_PER_DAY):
        return None

    confidence = (
        IC.OVERTRADING_SEVERE_CONFIDENCE if max_per_day > IC.OVERTRADING_SEVERE_MAX
        else IC.OVERTRADING_CONFIDENCE
    )
    suggested = max(IC.OVERTRADING_MIN_SUGGESTED, int(avg_per_day * IC.OVERTRADING_REDUCTION))
    return _pattern(
        'warning',
        'Potential Overtrading Detected',
        f"You averaged {avg_per_day:.1f} trades per day with a peak of {max_per_day} trades. "
        f"Consider reducing frequency.",
        confidence,
        f"Try limiting yourself to {suggested} trades per day for better focus.",
        'overtrading',
    )


def _hour_labels(hours) -> str:
    return ' and '.join(format_hour(int(hour)) for hour in hours)


def detect_best_hour(window: pd.DataFrame) -> Optional[Pattern]:
    ranked = _ranked(_group_stats(window, bucket_keys(window, 'hour')), IC.MIN_TRADES_PER_HOUR, ascending=False)
    if ranked.empty or ranked['pl'].iloc[0] <= 0:
        return None

    hours = _hour_labels(ranked.index[:2])
    return _pattern(
        'success',
        'Peak Performance Hours Identified',
        f"Your best trading hours are {hours} with {format_currency(ranked['pl'].iloc[0])} P&L.",
        IC.HOUR_CONFIDENCE,
        f"Focus your most important trades during {hours}.",
        'best_hour',
    )


def detect_worst_hour(window: pd.DataFrame) -> Optional[Pattern]:
    ranked = _ranked(_group_stats(window, bucket_keys(window, 'hour')), IC.MIN_TRADES_PER_HOUR, ascending=True)
    if ranked.empty or ranked['pl'].iloc[0] >= IC.WORST_HOUR_PL:
        return None

    hours = _hour_labels(ranked.index[:2])
    return _pattern(
        'danger',
        'Problematic Trading Hours',
        f"You tend to lose money trading at {hours} ({format_currency(ranked['pl'].iloc[0])} P&L).",
        IC.HOUR_CONFIDENCE,
        f"Consider avoiding trades during {hours} or reducing position sizes.",
        'worst_hour',
    )


def detect_best_weekday(window: pd.DataFrame) -> Optional[Pattern]:
    ranked = _ranked(
        _group_stats(window, bucket_keys(window, 'weekday')), IC.MIN_TRADES_PER_WEEKDAY, ascending=False
    )
    if ranked.empty:
        return None

    best = ranked.iloc[0]
    if not (best['pl'] > 0 and best['win_rate'] > IC.BEST_WEEKDAY_WIN_RATE):
        return None

    day = BucketConstants.DAY_NAMES[int(ranked.index[0])]
    return _pattern(
        'success',
        'Best Trading Day Identified',
        f"{day} is your strongest day with {format_currency(best['pl'])} P&L "
        f"and {best['win_rate'] * 100:.1f}% win rate.",
        IC.WEEKDAY_CONFIDENCE,
        f"Consider allocating more capital or taking higher conviction trades on {day}.",
        'best_weekday',
    )


def detect_worst_weekday(window: pd.DataFrame) -> Optional[Pattern]:
    ranked = _ranked(
        _group_stats(window, bucket_keys(window, 'weekday')), IC.MIN_TRADES_PER_WEEKDAY, ascending=True
    )
    if ranked.empty or ranked['pl'].iloc[0] >= IC.WORST_WEEKDAY_PL:
        return None

    worst = ranked.iloc[0]
    day = BucketConstants.DAY_NAMES[int(ranked.index[0])]
    return _pattern(
        'warning',
        'Challenging Trading Day',
        f"{day} shows consistent losses ({format_currency(worst['pl'])}) "
        f"with {worst['win_rate'] * 100:.1f}% win rate.",
        IC.WEEKDAY_CONFIDENCE,
        f"Be extra cautious on {day} or consider taking smaller positions.",
        'worst_weekday',
    )


def detect_best_ticker(window: pd.DataFrame) -> Optional[Pattern]:
    ranked = _ranked(_group_stats(window, window['ticker']), IC.MIN_TRADES_PER_TICKER, ascending=False)
    if ranked.empty:
        return None

    best = ranked.iloc[0]
    if not (best['pl'] > IC.BEST_TICKER_PL and best['win_rate'] > IC.BEST_TICKER_WIN_RATE):
        return None

    ticker = ranked.index[0]
    return _pattern(
        'success',
        'High-Performance Ticker',
        f"{ticker} is your best performer with {format_currency(best['pl'])} P&L "
        f"across {int(best['trades'])} trades ({best['win_rate'] * 100:.1f}% win rate).",
        IC.TICKER_CONFIDENCE,
        f"Consider increasing position size or frequency when trading {ticker}.",
        'best_ticker',
    )


def detect_worst_ticker(window: pd.DataFrame) -> Optional[Pattern]:
    ranked = _ranked(_group_stats(window, window['ticker']), IC.MIN_TRADES_PER_TICKER, ascending=True)
    if ranked.empty:
        return None

    worst = ranked.iloc[0]
    if not (worst['pl'] < IC.WORST_TICKER_PL and worst['trades'] >= IC.WORST_TICKER_MIN_TRADES):
        return None

    ticker = ranked.index[0]
    return _pattern(
        'danger',
        'Problematic Ticker',
        f"{ticker} has cost you {format_currency(abs(worst['pl']))} with a "
        f"{worst['win_rate'] * 100:.1f}% win rate across {int(worst['trades'])} trades.",
        IC.TICKER_CONFIDENCE,
        f"Avoid or significantly reduce exposure to {ticker} until you identify what's going wrong.",
        'worst_ticker',
    )


def current_losing_streak(pl: pd.Series) -> int:
    """Consecutive losing trades counted back from the most recent one."""
    streak = 0
    for value in reversed(pl.to_list()):
        if value >= 0:
            break
        streak += 1
    return streak


def detect_losing_streak(window: pd.DataFrame) -> Optional[Pattern]:
    streak = current_losing_streak(window['realized_pl'])
    if streak < IC.LOSING_STREAK_MIN:
        return None

    return _pattern(
        'warning',
        'Current Losing Streak',
        f"You're currently on a {streak}-trade losing streak. "
        f"Consider taking a break or reducing position sizes.",
        IC.LOSING_STREAK_CONFIDENCE,
        "Take a step back, review your recent trades, and consider paper trading "
        "until you break the pattern.",
        'losing_streak',
    )


def detect_trade_quality(window: pd.DataFrame) -> Optional[Pattern]:
    """Win rate together with the gross profit factor of the window.

    Needs at least one win and one loss; one-sided windows say nothing
    about risk management.
    """
    pl = window['realized_pl']
    if not ((pl > 0).any() and (pl < 0).any()):
        return None

    rate = float((pl > 0).sum()) / len(pl)
    factor = profit_factor(pl)

    if rate < IC.POOR_WIN_RATE and factor < IC.POOR_PROFIT_FACTOR:
        return _pattern(
            'danger',
            'Low Win Rate & Profit Factor',
            f"Your win rate is {rate * 100:.1f}% with a profit factor of {factor:.2f}. "
            f"This suggests room for improvement.",
            IC.QUALITY_CONFIDENCE,
            "Focus on cutting losses quicker or letting winners run longer to improve your profit factor.",
            'trade_quality',
        )
    if rate > IC.STRONG_WIN_RATE and factor > IC.STRONG_PROFIT_FACTOR:
        return _pattern(
            'success',
            'Strong Risk Management',
            f"Excellent {rate * 100:.1f}% win rate with {factor:.2f} profit factor. "
            f"You're managing risk well.",
            IC.QUALITY_CONFIDENCE,
            "Consider gradually increasing position sizes to capitalize on your good risk management.",
            'trade_quality',
        )
    return None


DETECTORS: tuple[Callable[[pd.DataFrame], Optional[Pattern]], ...] = (
    detect_overtrading,
    detect_best_hour,
    detect_worst_hour,
    detect_best_weekday,
    detect_worst_weekday,
    detect_best_ticker,
    detect_worst_ticker,
    detect_losing_streak,
    detect_trade_quality,
)


@return_on_error(list)
def detect_patterns(trades, reference_date: datetime | None = None) -> list[Pattern]:
    """
    Run every detector over the trailing four-week window.

    Args:
        trades: Trade collection (see prepare_trades)
        reference_date: Date whose week ends the window (default: now)

    Returns:
        Up to 5 pattern dicts {type, title, description, confidence,
        actionable_recommendation, detector}, highest confidence first.
        Empty when there are fewer than 5 valid trades overall or inside
        the window.
    """
    frame = prepare_trades(trades)
    if len(frame) < IC.MIN_TRADES:
        return []

    start, end = analysis_window(reference_date)
    ts = frame['timestamp']
    window = frame[(ts >= start) & (ts <= end)]
    if len(window) < IC.MIN_TRADES:
        logger.debug(f"Only {len(window)} trades between {start} and {end}, skipping insights")
        return []

    patterns = [pattern for pattern in (detector(window) for detector in DETECTORS) if pattern]

    # sorted() is stable, so equal confidences keep detector order
    ranked = sorted(patterns, key=lambda p: p['confidence'], reverse=True)[:IC.MAX_PATTERNS]

    logger.debug(f"{len(patterns)} patterns detected over {len(window)} trades, returning {len(ranked)}")

    return ranked
