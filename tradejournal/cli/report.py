#!/usr/bin/env python
"""
Print a performance report of the trade journal.

Usage:
    python -m tradejournal.run report [--config CONFIG] [--store STORE] [--capital N] [--date YYYY-MM-DD]
"""
import argparse
from typing import Any

import pandas as pd

from tradejournal.analytics.aggregation import aggregate_by_ticker
from tradejournal.analytics.goals import goal_progress
from tradejournal.analytics.insights import detect_patterns
from tradejournal.analytics.metrics import compute_metrics
from tradejournal.analytics.projection import project_portfolio
from tradejournal.analytics.series import build_series
from tradejournal.core.config import get_param, load_config
from tradejournal.core.data_loader import load_trade_frame
from tradejournal.core.formatting import format_currency, format_percent
from tradejournal.core.logger import configure_logging, get_logger


logger = get_logger(__name__)


def build_report(
    cfg: dict,
    store_path: str | None = None,
    initial_capital: float | None = None,
    reference_date: str | None = None
) -> dict[str, Any]:
    """
    Run the main analytics over the trade store.

    Returns:
        Dictionary with metrics, series_stats, projections, patterns,
        goals and top_tickers
    """
    frame = load_trade_frame(store_path or get_param(cfg, 'journal', 'store_path'))
    capital = get_param(cfg, 'analytics', 'initial_capital', default=0.0) if initial_capital is None else initial_capital
    reference = pd.Timestamp(reference_date).to_pydatetime() if reference_date else None

    metrics = compute_metrics(frame, initial_capital=capital)
    series = build_series(frame, time_range='all', mode='portfolio', initial_capital=capital)

    return {
        'metrics': metrics,
        'series_stats': series['stats'],
        'projections': project_portfolio(
            metrics['annual_return_rate'],
            capital,
            monthly_contribution=get_param(cfg, 'projection', 'monthly_contribution', default=0.0),
            conservative=get_param(cfg, 'projection', 'conservative', default=False),
        ),
        'patterns': detect_patterns(frame, reference_date=reference),
        'goals': goal_progress(frame, targets=get_param(cfg, 'goals'), reference_date=reference),
        'top_tickers': aggregate_by_ticker(frame)[:5],
    }


def log_report(report: dict[str, Any]) -> None:
    metrics = report['metrics']

    logger.info("=" * 60)
    logger.info("TRADE JOURNAL PERFORMANCE")
    logger.info("=" * 60)
    logger.info(f"  Total P&L:        {format_currency(metrics['total_pl'])}")
    logger.info(f"  Trades:           {metrics['total_trades']} "
                f"({metrics['win_count']} wins / {metrics['loss_count']} losses)")
    logger.info(f"  Win rate:         {format_percent(metrics['win_rate'])}")
    logger.info(f"  Profit factor:    {metrics['profit_factor']:.2f}")
    logger.info(f"  Max drawdown:     {format_currency(metrics['max_drawdown'])}")
    logger.info(f"  Annual return:    {format_percent(metrics['annual_return_rate'])}")
    logger.info(f"  Sharpe-like:      {metrics['sharpe_ratio']:.2f}")
    logger.info(f"  Consistency:      {format_percent(metrics['consistency'])}")
    logger.info(f"  Portfolio value:  {format_currency(report['series_stats']['portfolio_value'])}")

    logger.info("-" * 60)
    logger.info("PROJECTIONS")
    for period in report['projections']:
        logger.info(f"  {period['period']:<9} {format_currency(period['projected_value']):>18} "
                    f"(CAGR {format_percent(period['cagr'])})")

    logger.info("-" * 60)
    logger.info("GOALS")
    for goal in report['goals']:
        status = 'on track' if goal['on_track'] else 'behind'
        logger.info(f"  {goal['label']:<8} {format_currency(goal['actual']):>14} of "
                    f"{format_currency(goal['target'])} ({format_percent(goal['progress'])}, {status})")

    if report['top_tickers']:
        logger.info("-" * 60)
        logger.info("TOP TICKERS")
        for stock in report['top_tickers']:
            logger.info(f"  {stock['ticker']:<8} {format_currency(stock['total_pl']):>14} "
                        f"{stock['total_trades']:>4} trades, {format_percent(stock['win_rate'])} win rate")

    if report['patterns']:
        logger.info("-" * 60)
        logger.info("INSIGHTS")
        for pattern in report['patterns']:
            logger.info(f"  [{pattern['type']}] {pattern['title']}: {pattern['description']}")


def main():
    parser = argparse.ArgumentParser(description='Print a trade journal performance report')
    parser.add_argument('--config', type=str, default=None, help='Config file path')
    parser.add_argument('--store', type=str, default=None, help='Trade store (JSON or CSV)')
    parser.add_argument('--capital', type=float, default=None, help='Initial capital')
    parser.add_argument('--date', type=str, default=None, help='Reference date for insights (YYYY-MM-DD)')
    args = parser.parse_args()

    cfg = load_config(args.config)
    configure_logging(
        level=get_param(cfg, 'logging', 'level', default='INFO'),
        log_file=get_param(cfg, 'logging', 'file'),
    )

    report = build_report(cfg, store_path=args.store, initial_capital=args.capital, reference_date=args.date)
    log_report(report)


if __name__ == '__main__':
    main()
