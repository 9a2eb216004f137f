"""Export journal analytics to Excel for periodic review."""
from datetime import datetime
from pathlib import Path

import pandas as pd

from tradejournal.analytics.aggregation import aggregate_by_ticker
from tradejournal.analytics.bucketing import bucket_stats
from tradejournal.analytics.insights import detect_patterns
from tradejournal.analytics.metrics import compute_metrics
from tradejournal.analytics.projection import project_portfolio
from tradejournal.core.constants import FileFormats, Paths
from tradejournal.core.data_loader import ensure_directory
from tradejournal.core.logger import get_logger
from tradejournal.journal.frame import prepare_trades


logger = get_logger(__name__)


def export_to_excel(
    trades,
    output_file: str | Path | None = None,
    initial_capital: float = 0.0,
    monthly_contribution: float = 0.0,
    conservative: bool = False,
    reference_date: datetime | None = None
) -> str:
    """
    Write the journal's analytics to one Excel file with multiple sheets.

    Sheets: Trades, Daily PnL, Monthly Summary, Tickers, Projections,
    Statistics and (when any pattern fires) Insights.

    Returns:
        Path of the written file
    """
    logger.info("Exporting journal analytics to Excel...")

    if output_file is None:
        timestamp = datetime.now().strftime(FileFormats.TIMESTAMP_FORMAT)
        output_file = Paths.RESULTS_REPORTS / FileFormats.REPORT_FILE_TEMPLATE.format(timestamp=timestamp)

    output_path = Path(output_file)
    ensure_directory(output_path.parent)

    frame = prepare_trades(trades)
    metrics = compute_metrics(frame, initial_capital=initial_capital)

    with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
        # Sheet 1: Trades
        frame.to_excel(writer, sheet_name='Trades', index=False)
        logger.info(f"Exported trades: {len(frame)} records")

        # Sheet 2: Daily P&L
        daily_df = bucket_stats(frame, 'day').rename_axis('date').reset_index()
        daily_df['cumulative_pl'] = daily_df['total_pl'].cumsum()
        daily_df.to_excel(writer, sheet_name='Daily PnL', index=False)
        logger.info(f"Exported daily P&L: {len(daily_df)} days")

        # Sheet 3: Monthly Summary
        monthly_df = bucket_stats(frame, 'month').rename_axis('month').reset_index()
        monthly_df['cumulative_pl'] = monthly_df['total_pl'].cumsum()
        monthly_df.to_excel(writer, sheet_name='Monthly Summary', index=False)
        logger.info(f"Exported monthly summary: {len(monthly_df)} months")

        # Sheet 4: Tickers
        tickers_df = pd.DataFrame(aggregate_by_ticker(frame))
        tickers_df.to_excel(writer, sheet_name='Tickers', index=False)
        logger.info(f"Exported ticker stats: {len(tickers_df)} tickers")

        # Sheet 5: Projections
        projections_df = pd.DataFrame(project_portfolio(
            metrics['annual_return_rate'],
            initial_capital,
            monthly_contribution=monthly_contribution,
            conservative=conservative,
        ))
        projections_df.to_excel(writer, sheet_name='Projections', index=False)
        logger.info("Exported projections")

        # Sheet 6: Statistics
        stats_df = pd.DataFrame([metrics]).T
        stats_df.columns = ['Value']
        stats_df.to_excel(writer, sheet_name='Statistics')

        # Sheet 7: Insights
        patterns = detect_patterns(frame, reference_date=reference_date)
        if patterns:
            pd.DataFrame(patterns).to_excel(writer, sheet_name='Insights', index=False)
            logger.info(f"Exported {len(patterns)} insights")
        else:
            logger.info("No insights for the current window")

    logger.info(f"Excel report saved to: {output_path}")
    return str(output_path)
