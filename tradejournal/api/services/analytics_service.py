"""Service layer between the API routers and the analytics engine."""

import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from tradejournal.analytics.aggregation import aggregate_by_bucket, aggregate_by_ticker, calendar_grid, heatmap
from tradejournal.analytics.bucketing import daily_stats, hourly_stats, weekly_stats
from tradejournal.analytics.cache import AnalyticsCache
from tradejournal.analytics.goals import goal_progress
from tradejournal.analytics.insights import detect_patterns
from tradejournal.analytics.metrics import compute_metrics
from tradejournal.analytics.projection import project_dividends, project_portfolio
from tradejournal.analytics.series import build_series, equity_curve, filter_since
from tradejournal.core.config import get_param, load_config
from tradejournal.core.data_loader import load_trades, resolve_store_path
from tradejournal.core.error_decorator import log_errors_to_file
from tradejournal.core.logger import get_logger
from tradejournal.journal.frame import prepare_trades

logger = get_logger(__name__)


def _current_minute() -> datetime:
    """Reference time for cached windows; keys roll over once a minute."""
    return datetime.now().replace(second=0, microsecond=0)


def _clean(value: Any) -> Any:
    """NaN (from CSV stores) -> None, so responses stay valid JSON."""
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


class AnalyticsService:
    """Loads the trade store and runs memoized analytics over it."""

    def __init__(self, config: Optional[Dict[str, Any]] = None, store_path: Optional[str] = None):
        self.config = config if config is not None else load_config()

        self.store_path = resolve_store_path(store_path or get_param(self.config, "journal", "store_path"))

        self.initial_capital = get_param(self.config, "analytics", "initial_capital", default=0.0)
        self.cache = AnalyticsCache(get_param(self.config, "cache", "max_entries", default=128))

    @log_errors_to_file()
    def load_trades(self) -> List[Dict[str, Any]]:
        """Fetch every stored trade record (raw, unvalidated)."""
        return load_trades(self.store_path)

    def _capital(self, initial_capital: Optional[float]) -> float:
        return self.initial_capital if initial_capital is None else initial_capital

    def _projection_param(self, key: str, value: Any) -> Any:
        return get_param(self.config, "projection", key) if value is None else value

    def list_trades(self) -> Dict[str, Any]:
        records = self.load_trades()
        frame = prepare_trades(records)
        trades = [
            {key: _clean(value) for key, value in row.items()}
            for row in frame.to_dict("records")
        ]
        for trade in trades:
            trade["timestamp"] = trade["timestamp"].to_pydatetime()

        return {
            "trades": trades,
            "total_records": len(records),
            "valid_records": len(frame),
        }

    def get_metrics(self, initial_capital: Optional[float] = None, days: Optional[int] = None) -> Dict[str, Any]:
        capital = self._capital(initial_capital)
        trades = self.load_trades()
        if days is not None:
            trades = filter_since(trades, days)
        return self.cache.get_or_compute(
            "metrics", trades, {"initial_capital": capital},
            lambda frame: compute_metrics(frame, initial_capital=capital),
        )

    def get_series(
        self,
        time_range: str = "all",
        mode: str = "zero",
        initial_capital: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        now = now or _current_minute()
        capital = self._capital(initial_capital)
        params = {"time_range": time_range, "mode": mode, "initial_capital": capital, "now": now}
        return self.cache.get_or_compute(
            "series", self.load_trades(), params,
            lambda frame: build_series(frame, time_range=time_range, now=now, mode=mode, initial_capital=capital),
        )

    def get_projections(
        self,
        initial_capital: Optional[float] = None,
        monthly_contribution: Optional[float] = None,
        conservative: Optional[bool] = None,
    ) -> List[Dict[str, Any]]:
        """Project forward at the historical annual return rate of the stored trades."""
        capital = self._capital(initial_capital)
        metrics = self.get_metrics(initial_capital=capital)
        return project_portfolio(
            metrics["annual_return_rate"],
            capital,
            monthly_contribution=self._projection_param("monthly_contribution", monthly_contribution),
            conservative=self._projection_param("conservative", conservative),
        )

    def get_dividends(
        self,
        dividend_yield: Optional[float] = None,
        dividend_growth_rate: Optional[float] = None,
    ) -> Dict[str, float]:
        metrics = self.get_metrics()
        return project_dividends(
            metrics["total_pl"],
            dividend_yield=self._projection_param("dividend_yield", dividend_yield),
            dividend_growth_rate=self._projection_param("dividend_growth_rate", dividend_growth_rate),
        )

    def get_patterns(self, reference_date: Optional[datetime] = None) -> List[Dict[str, Any]]:
        reference_date = reference_date or _current_minute()
        return self.cache.get_or_compute(
            "patterns", self.load_trades(), {"reference_date": reference_date},
            lambda frame: detect_patterns(frame, reference_date=reference_date),
        )

    def get_tickers(self, min_trades: int = 1, sort_by: str = "total_pl") -> List[Dict[str, Any]]:
        return self.cache.get_or_compute(
            "tickers", self.load_trades(), {"min_trades": min_trades, "sort_by": sort_by},
            lambda frame: aggregate_by_ticker(frame, min_trades=min_trades, sort_by=sort_by),
        )

    def get_buckets(self, granularity: str) -> List[Dict[str, Any]]:
        return self.cache.get_or_compute(
            "buckets", self.load_trades(), {"granularity": granularity},
            lambda frame: aggregate_by_bucket(frame, granularity),
        )

    def get_heatmap(
        self,
        min_trades: int = 3,
        time_filter: str = "all",
        sort_by: str = "total_pl",
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        now = now or _current_minute()
        params = {"min_trades": min_trades, "time_filter": time_filter, "sort_by": sort_by, "now": now}
        return self.cache.get_or_compute(
            "heatmap", self.load_trades(), params,
            lambda frame: heatmap(frame, min_trades=min_trades, time_filter=time_filter, sort_by=sort_by, now=now),
        )

    def get_calendar(self, reference_date: Optional[datetime] = None) -> List[Dict[str, Any]]:
        reference_date = reference_date or _current_minute()
        return self.cache.get_or_compute(
            "calendar", self.load_trades(), {"reference_date": reference_date},
            lambda frame: calendar_grid(frame, reference_date=reference_date),
        )

    def get_equity_curve(self, period: str = "monthly", reference_date: Optional[datetime] = None) -> List[Dict[str, Any]]:
        reference_date = reference_date or _current_minute()
        return self.cache.get_or_compute(
            "equity_curve", self.load_trades(), {"period": period, "reference_date": reference_date},
            lambda frame: equity_curve(frame, period=period, reference_date=reference_date),
        )

    def get_goals(
        self,
        targets: Optional[Dict[str, Optional[float]]] = None,
        reference_date: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Progress toward the configured earnings targets, with ``targets`` overriding them."""
        now = now or _current_minute()
        amounts = dict(get_param(self.config, "goals", default={}))
        amounts.update({period: amount for period, amount in (targets or {}).items() if amount is not None})
        params = {"targets": amounts, "reference_date": reference_date, "now": now}
        return self.cache.get_or_compute(
            "goals", self.load_trades(), params,
            lambda frame: goal_progress(frame, targets=amounts, reference_date=reference_date, now=now),
        )

    def get_daily(self, day: datetime) -> Dict[str, Any]:
        return daily_stats(self.load_trades(), day)

    def get_hourly(self, day: datetime) -> List[Dict[str, Any]]:
        return hourly_stats(self.load_trades(), day)

    def get_weekly(self, day: datetime) -> Dict[str, Any]:
        return weekly_stats(self.load_trades(), day)

    def analyze(
        self,
        trades: List[Dict[str, Any]],
        initial_capital: Optional[float] = None,
        monthly_contribution: Optional[float] = None,
        conservative: bool = False,
        reference_date: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Run the main analytics over posted trades instead of the store."""
        capital = self._capital(initial_capital)
        frame = prepare_trades(trades)
        metrics = compute_metrics(frame, initial_capital=capital)

        logger.info(f"Analyzing {len(frame)} posted trades ({len(trades) - len(frame)} dropped)")

        return {
            "metrics": metrics,
            "series": build_series(frame, time_range="all", mode="portfolio", initial_capital=capital),
            "projections": project_portfolio(
                metrics["annual_return_rate"],
                capital,
                monthly_contribution=self._projection_param("monthly_contribution", monthly_contribution),
                conservative=conservative,
            ),
            "patterns": detect_patterns(frame, reference_date=reference_date),
            "tickers": aggregate_by_ticker(frame),
            "dropped_records": len(trades) - len(frame),
        }
