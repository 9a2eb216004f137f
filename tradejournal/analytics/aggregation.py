"""Per-ticker and per-bucket trade statistics, heatmap and calendar cells."""
import math
from datetime import datetime
from typing import Any

import pandas as pd

from tradejournal.analytics.bucketing import bucket_keys, check_granularity, plain_key, week_start
from tradejournal.core.constants import AggregationConstants, ColorScales, FileFormats
from tradejournal.core.error_decorator import OptionError, return_on_error
from tradejournal.core.logger import get_logger
from tradejournal.journal.frame import coerce_timestamp, prepare_trades


logger = get_logger(__name__)

SORT_COLUMNS = {'total_pl': 'total_pl', 'trades': 'total_trades', 'win_rate': 'win_rate'}


def _rgb(color) -> str:
    return f"rgb({color[0]}, {color[1]}, {color[2]})"


def pl_color(value: float, max_abs: float) -> dict[str, Any]:
    """
    Colour of a calendar or heatmap cell.

    Positive values use the green scale, negative values the red one;
    intensity = |value| / max_abs, capped at 1, blends from the light to the
    base colour. Text turns white above intensity 0.6.

    Returns:
        Dictionary with tone ('positive', 'negative' or 'neutral'),
        intensity, color, border_color and text_color ('rgb(r, g, b)' or
        'white')
    """
    if not value or max_abs <= 0 or not math.isfinite(value):
        return {
            'tone': 'neutral',
            'intensity': 0.0,
            'color': _rgb(ColorScales.NEUTRAL),
            'border_color': _rgb(ColorScales.NEUTRAL_TEXT),
            'text_color': _rgb(ColorScales.NEUTRAL_TEXT),
        }

    if value > 0:
        tone, base, dark, light = (
            'positive', ColorScales.POSITIVE_BASE, ColorScales.POSITIVE_DARK, ColorScales.POSITIVE_LIGHT
        )
    else:
        tone, base, dark, light = (
            'negative', ColorScales.NEGATIVE_BASE, ColorScales.NEGATIVE_DARK, ColorScales.NEGATIVE_LIGHT
        )

    intensity = min(abs(value) / max_abs, 1.0)
    blended = [math.floor(lo + (hi - lo) * intensity) for lo, hi in zip(light, base)]

    return {
        'tone': tone,
        'intensity': intensity,
        'color': _rgb(blended),
        'border_color': _rgb(dark),
        'text_color': 'white' if intensity > ColorScales.LIGHT_TEXT_INTENSITY else _rgb(dark),
    }


def _group_summary(frame: pd.DataFrame, keys: pd.Series) -> pd.DataFrame:
    """Trade statistics per group key, indexed by key (ascending)."""
    pl = frame['realized_pl']
    grouped = pl.groupby(keys)

    summary = pd.DataFrame({
        'total_trades': grouped.size(),
        'total_pl': grouped.sum(),
        'win_count': (pl > 0).groupby(keys).sum(),
        'loss_count': (pl < 0).groupby(keys).sum(),
        'avg_win': pl.where(pl > 0).groupby(keys).mean(),
        'avg_loss': pl.where(pl < 0).groupby(keys).mean(),
        'best_trade': grouped.max(),
        'worst_trade': grouped.min(),
        'last_traded': frame['timestamp'].groupby(keys).max(),
    }).fillna({'avg_win': 0.0, 'avg_loss': 0.0})

    summary['win_rate'] = summary['win_count'] / summary['total_trades'] * 100
    summary['avg_pl_per_trade'] = summary['total_pl'] / summary['total_trades']
    summary['is_winner'] = summary['total_pl'] > 0
    return summary.sort_index()


def _summary_records(summary: pd.DataFrame, key_name: str) -> list[dict[str, Any]]:
    records = []
    for key, row in summary.iterrows():
        records.append({
            key_name: plain_key(key),
            'total_trades': int(row['total_trades']),
            'total_pl': float(row['total_pl']),
            'win_count': int(row['win_count']),
            'loss_count': int(row['loss_count']),
            'win_rate': float(row['win_rate']),
            'avg_win': float(row['avg_win']),
            'avg_loss': float(row['avg_loss']),
            'avg_pl_per_trade': float(row['avg_pl_per_trade']),
            'best_trade': float(row['best_trade']),
            'worst_trade': float(row['worst_trade']),
            'last_traded': row['last_traded'].to_pydatetime(),
            'is_winner': bool(row['is_winner']),
        })
    return records


def _check_sort_key(sort_by: str) -> None:
    if sort_by not in AggregationConstants.SORT_KEYS:
        raise OptionError(f"Unknown sort key: {sort_by}. Use one of {AggregationConstants.SORT_KEYS}.")


@return_on_error(list)
def aggregate_by_ticker(trades, min_trades: int = 1, sort_by: str = 'total_pl') -> list[dict[str, Any]]:
    """
    Group trades by ticker and rank the tickers.

    Args:
        trades: Trade collection (see prepare_trades)
        min_trades: Drop tickers with fewer trades
        sort_by: 'total_pl', 'trades' or 'win_rate' (descending; ties by ticker)

    Returns:
        List of {ticker, total_trades, total_pl, win_count, loss_count,
        win_rate, avg_win, avg_loss, avg_pl_per_trade, best_trade,
        worst_trade, last_traded, is_winner}
    """
    _check_sort_key(sort_by)
    frame = prepare_trades(trades)
    if frame.empty:
        return []

    summary = _group_summary(frame, frame['ticker'].rename('ticker'))
    summary = summary[summary['total_trades'] >= min_trades]
    summary = (
        summary.rename_axis('ticker').reset_index()
        .sort_values([SORT_COLUMNS[sort_by], 'ticker'], ascending=[False, True], kind='mergesort')
        .set_index('ticker')
    )

    return _summary_records(summary, 'ticker')


@return_on_error(list)
def aggregate_by_bucket(trades, granularity: str) -> list[dict[str, Any]]:
    """Same statistics as aggregate_by_ticker, keyed by calendar bucket (ascending)."""
    check_granularity(granularity)
    frame = prepare_trades(trades)
    if frame.empty:
        return []

    summary = _group_summary(frame, bucket_keys(frame, granularity).rename('bucket'))
    return _summary_records(summary, 'bucket')


def _empty_heatmap() -> dict[str, Any]:
    return {'cells': [], 'summary': _heatmap_summary([])}


def _heatmap_summary(cells: list[dict[str, Any]]) -> dict[str, Any]:
    if not cells:
        return {
            'total_pl': 0.0,
            'total_trades': 0,
            'stocks_traded': 0,
            'winners': 0,
            'losers': 0,
            'avg_win_rate': 0.0,
            'best_stock': None,
            'worst_stock': None,
        }

    winners = sum(1 for cell in cells if cell['is_winner'])
    return {
        'total_pl': sum(cell['total_pl'] for cell in cells),
        'total_trades': sum(cell['total_trades'] for cell in cells),
        'stocks_traded': len(cells),
        'winners': winners,
        'losers': len(cells) - winners,
        'avg_win_rate': sum(cell['win_rate'] for cell in cells) / len(cells),
        'best_stock': cells[0]['ticker'],
        'worst_stock': min(cells, key=lambda cell: cell['total_pl'])['ticker'],
    }


@return_on_error(_empty_heatmap)
def heatmap(
    trades,
    min_trades: int = AggregationConstants.HEATMAP_MIN_TRADES,
    time_filter: str = 'all',
    sort_by: str = 'total_pl',
    now: datetime | None = None
) -> dict[str, Any]:
    """
    Ticker cells for the performance heatmap.

    Args:
        trades: Trade collection (see prepare_trades)
        min_trades: Minimum trades for a ticker to get a cell
        time_filter: 'all', '30d', '90d' or '1y' back from ``now``
        sort_by: Cell order, as aggregate_by_ticker
        now: Reference instant (default: current local time)

    Returns:
        Dictionary with:
            - cells: ticker statistics plus pl_color fields, coloured
              relative to the largest |total_pl| among the cells
            - summary: total_pl, total_trades, stocks_traded, winners,
              losers, avg_win_rate, best_stock (first cell), worst_stock
    """
    if time_filter != 'all' and time_filter not in AggregationConstants.HEATMAP_FILTER_DAYS:
        raise OptionError(f"Unknown time filter: {time_filter}. Use 'all' or one of "
                          f"{tuple(AggregationConstants.HEATMAP_FILTER_DAYS)}.")
    _check_sort_key(sort_by)

    frame = prepare_trades(trades)
    if time_filter != 'all':
        reference = coerce_timestamp(now) if now is not None else None
        if reference is None:
            reference = pd.Timestamp.now()
        cutoff = reference - pd.Timedelta(days=AggregationConstants.HEATMAP_FILTER_DAYS[time_filter])
        frame = frame[frame['timestamp'] >= cutoff]

    stocks = aggregate_by_ticker(frame, min_trades=min_trades, sort_by=sort_by)
    max_abs = max((abs(stock['total_pl']) for stock in stocks), default=0.0)
    cells = [{**stock, **pl_color(stock['total_pl'], max_abs)} for stock in stocks]

    return {'cells': cells, 'summary': _heatmap_summary(cells)}


@return_on_error(list)
def calendar_grid(trades, reference_date: datetime | None = None) -> list[dict[str, Any]]:
    """
    Day cells for the P&L calendar around a reference date.

    The grid runs from the Monday on or before ``reference - 21 days`` to
    the Sunday on or after ``reference + 21 days``. Cells are coloured
    relative to the largest absolute daily P&L in the grid.

    Returns:
        List of {date, weekday, total_pl, trade_count, has_data} plus
        pl_color fields, one per day in order
    """
    reference = coerce_timestamp(reference_date) if reference_date is not None else None
    if reference is None:
        reference = pd.Timestamp.now()
    span = pd.Timedelta(days=AggregationConstants.CALENDAR_SPAN_DAYS)
    start = week_start(reference - span)
    end = week_start(reference + span) + pd.Timedelta(days=7)

    frame = prepare_trades(trades)
    ts = frame['timestamp']
    in_grid = frame[(ts >= start) & (ts < end)]
    keys = bucket_keys(in_grid, 'day')
    sums = in_grid['realized_pl'].groupby(keys).sum()
    counts = in_grid['realized_pl'].groupby(keys).size()
    max_abs = float(sums.abs().max()) if not sums.empty else 0.0

    cells = []
    for day in pd.date_range(start, end - pd.Timedelta(days=1), freq='D'):
        key = day.strftime(FileFormats.DATE_FORMAT)
        total = float(sums.get(key, 0.0))
        count = int(counts.get(key, 0))
        cells.append({
            'date': key,
            'weekday': int(day.weekday()),
            'total_pl': total,
            'trade_count': count,
            'has_data': count > 0,
            **pl_color(total, max_abs),
        })

    return cells
