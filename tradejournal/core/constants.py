"""Centralized constants and paths for the trade journal analytics engine.

This module contains all hardcoded values, paths, and thresholds used
throughout the application. All modules should import from here rather
than embedding magic values directly in code.
"""
from pathlib import Path
from typing import Final


class Paths:
    """Centralized file system paths."""

    # Project root
    ROOT: Final[Path] = Path(__file__).parent.parent.parent

    CONFIG_DIR: Final[Path] = ROOT / 'configs'
    DEFAULT_CONFIG: Final[Path] = CONFIG_DIR / 'default.yaml'

    # Trade store
    DATA_ROOT: Final[Path] = ROOT / 'data'
    TRADES_FILE: Final[Path] = DATA_ROOT / 'trades.json'

    # Reports
    RESULTS_ROOT: Final[Path] = ROOT / 'results'
    RESULTS_REPORTS: Final[Path] = RESULTS_ROOT / 'reports'

    # Logs
    LOGS_ROOT: Final[Path] = ROOT / 'logs'
    API_ERROR_LOG: Final[Path] = LOGS_ROOT / 'api_errors.log'


class AnalyticsConstants:
    """Performance metric constants."""

    # Calendar constants
    TRADING_DAYS_PER_YEAR: Final[int] = 252
    BUSINESS_DAYS_PER_MONTH: Final[int] = 21
    DAYS_PER_YEAR: Final[float] = 365.25
    DAYS_PER_MONTH: Final[int] = 30

    # Risk-free rate used by the Sharpe-like ratio, in percent
    RISK_FREE_RATE_PCT: Final[float] = 2.0

    # Profit factor when there are wins but no losses
    PROFIT_FACTOR_CAP: Final[float] = 999.0

    # Input clamps
    MAX_CAPITAL: Final[float] = 1_000_000_000.0
    MAX_MONTHLY_CONTRIBUTION: Final[float] = MAX_CAPITAL / 12

    DEFAULT_INITIAL_CAPITAL: Final[float] = 10000.0


class SeriesConstants:
    """Cumulative series windows."""

    TIME_RANGES: Final[tuple[str, ...]] = ('today', '7d', '1m', '3m', '1y', 'all')
    RANGE_DAYS: Final[dict[str, int]] = {'7d': 7, '1m': 30, '3m': 90, '1y': 365}
    MODES: Final[tuple[str, ...]] = ('zero', 'portfolio')

    EQUITY_PERIODS: Final[tuple[str, ...]] = ('daily', 'weekly', 'monthly', 'biannual', 'annual')


class BucketConstants:
    """Time-bucketing granularities and session hours."""

    GRANULARITIES: Final[tuple[str, ...]] = ('hour', 'weekday', 'day', 'week', 'month', 'year')

    # Extended trading session shown in the hourly breakdown
    SESSION_FIRST_HOUR: Final[int] = 4
    SESSION_LAST_HOUR: Final[int] = 20

    DAY_NAMES: Final[tuple[str, ...]] = (
        'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday'
    )


class ProjectionConstants:
    """Portfolio projection constants."""

    HORIZONS_YEARS: Final[tuple[int, ...]] = (1, 3, 5, 10, 15)
    CONSERVATIVE_FACTOR: Final[float] = 0.6
    MONTHS_PER_YEAR: Final[int] = 12
    MIN_ANNUAL_RATE: Final[float] = -1.0

    DEFAULT_MONTHLY_CONTRIBUTION: Final[float] = 1000.0
    DEFAULT_DIVIDEND_YIELD: Final[float] = 2.5
    DEFAULT_DIVIDEND_GROWTH_RATE: Final[float] = 5.0
    DIVIDEND_INCOME_YEARS: Final[int] = 15
    YIELD_ON_COST_YEARS: Final[int] = 10


class InsightConstants:
    """Thresholds of the pattern detectors.

    They define reproducible behavior and are not user-configurable.
    """

    MIN_TRADES: Final[int] = 5
    ANALYSIS_WEEKS: Final[int] = 4
    MAX_PATTERNS: Final[int] = 5

    # Overtrading
    OVERTRADING_MAX_PER_DAY: Final[int] = 20
    OVERTRADING_AVG_PER_DAY: Final[float] = 10.0
    OVERTRADING_SEVERE_MAX: Final[int] = 25
    OVERTRADING_SEVERE_CONFIDENCE: Final[float] = 0.9
    OVERTRADING_CONFIDENCE: Final[float] = 0.7
    OVERTRADING_MIN_SUGGESTED: Final[int] = 5
    OVERTRADING_REDUCTION: Final[float] = 0.7

    # Time of day
    MIN_TRADES_PER_HOUR: Final[int] = 3
    WORST_HOUR_PL: Final[float] = -100.0
    HOUR_CONFIDENCE: Final[float] = 0.8

    # Day of week
    MIN_TRADES_PER_WEEKDAY: Final[int] = 3
    BEST_WEEKDAY_WIN_RATE: Final[float] = 0.6
    WORST_WEEKDAY_PL: Final[float] = -200.0
    WEEKDAY_CONFIDENCE: Final[float] = 0.7

    # Tickers
    MIN_TRADES_PER_TICKER: Final[int] = 3
    BEST_TICKER_PL: Final[float] = 500.0
    BEST_TICKER_WIN_RATE: Final[float] = 0.6
    WORST_TICKER_PL: Final[float] = -500.0
    WORST_TICKER_MIN_TRADES: Final[int] = 5
    TICKER_CONFIDENCE: Final[float] = 0.8

    # Losing streak
    LOSING_STREAK_MIN: Final[int] = 3
    LOSING_STREAK_CONFIDENCE: Final[float] = 0.9

    # Win rate / profit factor quality
    POOR_WIN_RATE: Final[float] = 0.4
    POOR_PROFIT_FACTOR: Final[float] = 1.2
    STRONG_WIN_RATE: Final[float] = 0.6
    STRONG_PROFIT_FACTOR: Final[float] = 2.0
    QUALITY_CONFIDENCE: Final[float] = 0.8


class GoalConstants:
    """Earnings goal periods and default targets."""

    PERIODS: Final[tuple[str, ...]] = ('daily', 'weekly', 'monthly', 'yearly')
    LABELS: Final[dict[str, str]] = {
        'daily': 'Daily', 'weekly': 'Weekly', 'monthly': 'Monthly', 'yearly': 'Yearly',
    }
    DEFAULT_TARGETS: Final[dict[str, float]] = {
        'daily': 500.0, 'weekly': 2500.0, 'monthly': 10000.0, 'yearly': 120000.0,
    }

    # Regular session in local hours; the daily goal's clock runs only inside it
    MARKET_OPEN_HOUR: Final[float] = 9.5
    MARKET_CLOSE_HOUR: Final[float] = 16.0


class ColorScales:
    """Calendar and heatmap colour scales (RGB)."""

    POSITIVE_BASE: Final[tuple[int, int, int]] = (16, 185, 129)
    POSITIVE_DARK: Final[tuple[int, int, int]] = (4, 120, 87)
    POSITIVE_LIGHT: Final[tuple[int, int, int]] = (209, 250, 229)

    NEGATIVE_BASE: Final[tuple[int, int, int]] = (239, 68, 68)
    NEGATIVE_DARK: Final[tuple[int, int, int]] = (153, 27, 27)
    NEGATIVE_LIGHT: Final[tuple[int, int, int]] = (254, 226, 226)

    NEUTRAL: Final[tuple[int, int, int]] = (243, 244, 246)
    NEUTRAL_TEXT: Final[tuple[int, int, int]] = (75, 85, 99)

    LIGHT_TEXT_INTENSITY: Final[float] = 0.6


class AggregationConstants:
    """Ticker aggregation and calendar constants."""

    SORT_KEYS: Final[tuple[str, ...]] = ('total_pl', 'trades', 'win_rate')
    HEATMAP_MIN_TRADES: Final[int] = 3
    HEATMAP_FILTER_DAYS: Final[dict[str, int]] = {'30d': 30, '90d': 90, '1y': 365}
    CALENDAR_SPAN_DAYS: Final[int] = 21


class TradeLimits:
    """Bounds enforced when a trade is created."""

    MAX_PRICE: Final[float] = 1_000_000.0
    MAX_QUANTITY: Final[int] = 1_000_000
    MAX_TICKER_LENGTH: Final[int] = 10


class FileFormats:
    """File format constants and templates."""

    TIMESTAMP_FORMAT: Final[str] = '%Y%m%d_%H%M%S'
    DATE_FORMAT: Final[str] = '%Y-%m-%d'
    MONTH_FORMAT: Final[str] = '%Y-%m'

    REPORT_FILE_TEMPLATE: Final[str] = 'journal_report_{timestamp}.xlsx'

