"""API endpoints for trade analytics."""

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Body, HTTPException, Query

from tradejournal.api.models.analytics import (
    AnalyzeRequest,
    BucketsResponse,
    DividendsResponse,
    GoalsResponse,
    MetricsResponse,
    PatternsResponse,
    ProjectionsResponse,
    SeriesResponse,
    TickersResponse,
)
from tradejournal.api.services.analytics_service import AnalyticsService
from tradejournal.core.error_decorator import OptionError
from tradejournal.core.logger import get_logger

logger = get_logger(__name__)
router = APIRouter()
analytics_service = AnalyticsService()


def _http_error(e: Exception, what: str) -> HTTPException:
    """Bad option -> 400, missing store -> 404, anything else -> 500."""
    if isinstance(e, OptionError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, FileNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    logger.error(f"Error computing {what}: {e}")
    return HTTPException(status_code=500, detail=str(e))


def _as_datetime(day: Optional[date]) -> Optional[datetime]:
    if day is None or isinstance(day, datetime):
        return day
    return datetime(day.year, day.month, day.day)


@router.get("/metrics", response_model=MetricsResponse)
async def get_metrics(
    initial_capital: Optional[float] = Query(None, description="Capital for the return rate (default from config)"),
    days: Optional[int] = Query(None, description="Only trades from the last N days", ge=1),
):
    """
    Get performance metrics of the stored trades.

    Returns total P&L, win rate, volatility, Sharpe-like ratio, drawdown,
    profit factor and consistency.
    """
    try:
        return {
            "status": "success",
            "data": analytics_service.get_metrics(initial_capital=initial_capital, days=days),
        }
    except Exception as e:
        raise _http_error(e, "metrics")


@router.get("/series", response_model=SeriesResponse)
async def get_series(
    time_range: str = Query("all", description="today, 7d, 1m, 3m, 1y or all"),
    mode: str = Query("zero", description="zero (trading P&L) or portfolio (capital-relative)"),
    initial_capital: Optional[float] = Query(None, description="Starting capital for portfolio mode"),
):
    """Get the cumulative P&L / portfolio value series for a time range."""
    try:
        return {
            "status": "success",
            "data": analytics_service.get_series(
                time_range=time_range, mode=mode, initial_capital=initial_capital
            ),
        }
    except Exception as e:
        raise _http_error(e, "series")


@router.get("/projections", response_model=ProjectionsResponse)
async def get_projections(
    initial_capital: Optional[float] = Query(None, description="Starting capital"),
    monthly_contribution: Optional[float] = Query(None, description="Monthly contribution"),
    conservative: Optional[bool] = Query(None, description="Scale the historical rate by 0.6"),
):
    """
    Project the portfolio over 1, 3, 5, 10 and 15 years.

    The rate is the historical annual return rate of the stored trades.
    """
    try:
        return {
            "status": "success",
            "data": analytics_service.get_projections(
                initial_capital=initial_capital,
                monthly_contribution=monthly_contribution,
                conservative=conservative,
            ),
        }
    except Exception as e:
        raise _http_error(e, "projections")


@router.get("/dividends", response_model=DividendsResponse)
async def get_dividends(
    dividend_yield: Optional[float] = Query(None, description="Dividend yield in percent", ge=0),
    dividend_growth_rate: Optional[float] = Query(None, description="Yearly dividend growth in percent"),
):
    """Get dividend income estimates for the realized profits."""
    try:
        return {
            "status": "success",
            "data": analytics_service.get_dividends(
                dividend_yield=dividend_yield, dividend_growth_rate=dividend_growth_rate
            ),
        }
    except Exception as e:
        raise _http_error(e, "dividends")


@router.get("/patterns", response_model=PatternsResponse)
async def get_patterns(
    reference_date: Optional[date] = Query(None, description="Date whose week ends the 4-week window"),
):
    """Get heuristic trading insights for the last four weeks."""
    try:
        return {
            "status": "success",
            "data": analytics_service.get_patterns(reference_date=_as_datetime(reference_date)),
        }
    except Exception as e:
        raise _http_error(e, "patterns")


@router.get("/tickers", response_model=TickersResponse)
async def get_tickers(
    min_trades: int = Query(1, description="Minimum trades per ticker", ge=1),
    sort_by: str = Query("total_pl", description="total_pl, trades or win_rate"),
):
    """Get per-ticker statistics, best first."""
    try:
        return {
            "status": "success",
            "data": analytics_service.get_tickers(min_trades=min_trades, sort_by=sort_by),
        }
    except Exception as e:
        raise _http_error(e, "ticker stats")


@router.get("/buckets/{granularity}", response_model=BucketsResponse)
async def get_buckets(granularity: str):
    """Get statistics per hour, weekday, day, week, month or year."""
    try:
        return {
            "status": "success",
            "data": analytics_service.get_buckets(granularity),
        }
    except Exception as e:
        raise _http_error(e, "bucket stats")


@router.get("/heatmap")
async def get_heatmap(
    min_trades: int = Query(3, description="Minimum trades per ticker", ge=1),
    time_filter: str = Query("all", description="all, 30d, 90d or 1y"),
    sort_by: str = Query("total_pl", description="total_pl, trades or win_rate"),
):
    """Get coloured ticker cells and a summary for the performance heatmap."""
    try:
        return {
            "status": "success",
            "data": analytics_service.get_heatmap(min_trades=min_trades, time_filter=time_filter, sort_by=sort_by),
        }
    except Exception as e:
        raise _http_error(e, "heatmap")


@router.get("/calendar")
async def get_calendar(
    reference_date: Optional[date] = Query(None, description="Center of the calendar grid"),
):
    """Get coloured daily P&L cells for the weeks around a date."""
    try:
        return {
            "status": "success",
            "data": analytics_service.get_calendar(reference_date=_as_datetime(reference_date)),
        }
    except Exception as e:
        raise _http_error(e, "calendar")


@router.get("/equity-curve")
async def get_equity_curve(
    period: str = Query("monthly", description="daily, weekly, monthly, biannual or annual"),
    reference_date: Optional[date] = Query(None, description="Date the curve is anchored on"),
):
    """Get cumulative P&L by period."""
    try:
        return {
            "status": "success",
            "data": analytics_service.get_equity_curve(period=period, reference_date=_as_datetime(reference_date)),
        }
    except Exception as e:
        raise _http_error(e, "equity curve")


@router.get("/goals", response_model=GoalsResponse)
async def get_goals(
    reference_date: Optional[date] = Query(None, description="Date whose day, week, month and year are measured"),
    daily: Optional[float] = Query(None, description="Daily target (default from config)", gt=0),
    weekly: Optional[float] = Query(None, description="Weekly target", gt=0),
    monthly: Optional[float] = Query(None, description="Monthly target", gt=0),
    yearly: Optional[float] = Query(None, description="Yearly target", gt=0),
):
    """
    Get progress toward the daily, weekly, monthly and yearly earnings targets.

    Each period reports actual P&L, remaining amount, the amount needed per
    remaining day and whether progress keeps up with elapsed time.
    """
    try:
        targets = {"daily": daily, "weekly": weekly, "monthly": monthly, "yearly": yearly}
        return {
            "status": "success",
            "data": analytics_service.get_goals(targets=targets, reference_date=_as_datetime(reference_date)),
        }
    except Exception as e:
        raise _http_error(e, "goal progress")


@router.get("/daily/{day}")
async def get_daily(day: date):
    """Get the summary of one trading day."""
    try:
        return {
            "status": "success",
            "data": analytics_service.get_daily(_as_datetime(day)),
        }
    except Exception as e:
        raise _http_error(e, "daily stats")


@router.get("/hourly/{day}")
async def get_hourly(day: date):
    """Get hour-by-hour P&L of one day (4 AM - 8 PM)."""
    try:
        return {
            "status": "success",
            "data": analytics_service.get_hourly(_as_datetime(day)),
        }
    except Exception as e:
        raise _http_error(e, "hourly stats")


@router.get("/weekly/{day}")
async def get_weekly(day: date):
    """Get the summary of the Monday-start week containing a day."""
    try:
        return {
            "status": "success",
            "data": analytics_service.get_weekly(_as_datetime(day)),
        }
    except Exception as e:
        raise _http_error(e, "weekly stats")


@router.post("/analyze")
async def analyze_trades(request: AnalyzeRequest = Body(...)):
    """
    Analyze posted trades instead of the store.

    Returns metrics, the portfolio series, projections, patterns and
    per-ticker statistics in one response.
    """
    try:
        return {
            "status": "success",
            "data": analytics_service.analyze(
                request.trades,
                initial_capital=request.initial_capital,
                monthly_contribution=request.monthly_contribution,
                conservative=request.conservative,
                reference_date=request.reference_date,
            ),
        }
    except Exception as e:
        raise _http_error(e, "analysis")
