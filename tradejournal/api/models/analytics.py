"""Pydantic models for analytics responses."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class PerformanceMetrics(BaseModel):
    """Summary statistics over a trade collection."""

    total_pl: float = Field(..., description="Sum of realized P&L")
    total_trades: int = Field(..., description="Number of valid trades")
    win_count: int = Field(..., description="Trades with positive P&L")
    loss_count: int = Field(..., description="Trades with negative P&L")
    win_rate: float = Field(..., description="Winning trades in percent (0-100)")
    avg_win: float = Field(..., description="Average winning trade")
    avg_loss: float = Field(..., description="Average losing trade (negative)")
    largest_win: float = Field(..., description="Largest winning trade")
    largest_loss: float = Field(..., description="Largest losing trade (negative)")
    avg_daily_pl: float = Field(..., description="P&L per trading day")
    avg_monthly_pl: float = Field(..., description="P&L per 30-day month")
    avg_annual_pl: float = Field(..., description="Simple annual P&L rate")
    annual_return_rate: float = Field(..., description="Annual P&L as percent of initial capital")
    trading_days: int = Field(..., description="Distinct days with trades")
    total_days: int = Field(..., description="Days from first to last trade (>= 1)")
    daily_volatility: float = Field(..., description="Population std of daily P&L")
    monthly_volatility: float = Field(..., description="Daily volatility scaled by sqrt(21)")
    annualized_volatility_pct: float = Field(..., description="Annualized volatility as percent of capital")
    sharpe_ratio: float = Field(..., description="Sharpe-like ratio against a 2% risk-free rate")
    max_drawdown: float = Field(..., description="Largest peak-to-trough drop, in currency")
    profit_factor: float = Field(..., description="Gross wins / gross losses (999 if no losses)")
    consistency: float = Field(..., description="Profitable months in percent")

    class Config:
        json_schema_extra = {
            "example": {
                "total_pl": 1250.0,
                "total_trades": 3,
                "win_count": 2,
                "loss_count": 1,
                "win_rate": 66.67,
                "avg_win": 750.0,
                "avg_loss": -250.0,
                "largest_win": 1000.0,
                "largest_loss": -250.0,
                "avg_daily_pl": 416.67,
                "avg_monthly_pl": 1250.0,
                "avg_annual_pl": 152187.5,
                "annual_return_rate": 1521.88,
                "trading_days": 3,
                "total_days": 3,
                "daily_volatility": 519.71,
                "monthly_volatility": 2381.62,
                "annualized_volatility_pct": 82.5,
                "sharpe_ratio": 18.42,
                "max_drawdown": 250.0,
                "profit_factor": 6.0,
                "consistency": 100.0,
            }
        }


class SeriesPoint(BaseModel):
    """One point of a cumulative series."""

    date: datetime = Field(..., description="Window start for the origin, trade time otherwise")
    cumulative_value: float = Field(..., description="Running value after this point")
    pl: float = Field(..., description="Realized P&L added at this point")
    trade_id: Optional[str] = Field(None, description="Trade behind the point (None for the origin)")


class SeriesStats(BaseModel):
    """Change statistics of a cumulative series."""

    current_value: float
    change: float
    change_percent: float = Field(..., description="Change relative to the window-start portfolio value")
    is_positive: bool
    start_value: float = Field(..., description="Portfolio value at the window start")
    portfolio_value: float = Field(..., description="Portfolio value at the end of the window")


class CumulativeSeries(BaseModel):
    """Cumulative P&L or portfolio value series."""

    points: List[SeriesPoint]
    stats: SeriesStats
    window_start: Optional[datetime] = None
    time_range: Optional[str] = None
    mode: Optional[str] = None


class ProjectionPeriod(BaseModel):
    """Projected portfolio at one horizon."""

    period: str = Field(..., description="Horizon label")
    years: int = Field(..., description="Horizon in years")
    projected_value: float
    total_contributions: float = Field(..., description="Initial capital plus contributions")
    total_growth: float
    growth_percentage: float
    cagr: float = Field(..., description="Compound annual growth rate in percent")
    monthly_contribution: float
    effective_annual_rate: float = Field(..., description="Rate used for compounding, in percent")

    class Config:
        json_schema_extra = {
            "example": {
                "period": "1 Year",
                "years": 1,
                "projected_value": 22000.0,
                "total_contributions": 22000.0,
                "total_growth": 0.0,
                "growth_percentage": 0.0,
                "cagr": 0.0,
                "monthly_contribution": 1000.0,
                "effective_annual_rate": 0.0,
            }
        }


class DividendProjection(BaseModel):
    """Dividend income if realized profits were invested in dividend payers."""

    annual_income: float
    monthly_income: float
    fifteen_year_income: float
    yield_on_cost_10y: float = Field(..., description="Yield on cost after 10 years, in percent")


class Pattern(BaseModel):
    """Heuristic finding over the recent trading window."""

    type: str = Field(..., description="success, warning, danger or info")
    title: str
    description: str
    confidence: float = Field(..., ge=0, le=1)
    actionable_recommendation: str
    detector: str

    class Config:
        json_schema_extra = {
            "example": {
                "type": "warning",
                "title": "Current Losing Streak",
                "description": "You're currently on a 3-trade losing streak.",
                "confidence": 0.9,
                "actionable_recommendation": "Take a step back and review your recent trades.",
                "detector": "losing_streak",
            }
        }


class TickerStats(BaseModel):
    """Per-ticker trade statistics."""

    ticker: str
    total_trades: int
    total_pl: float
    win_count: int
    loss_count: int
    win_rate: float
    avg_win: float
    avg_loss: float
    avg_pl_per_trade: float
    best_trade: float
    worst_trade: float
    last_traded: datetime
    is_winner: bool


class BucketStats(BaseModel):
    """Per-bucket trade statistics."""

    bucket: Union[int, str]
    total_trades: int
    total_pl: float
    win_count: int
    loss_count: int
    win_rate: float
    avg_win: float
    avg_loss: float
    avg_pl_per_trade: float
    best_trade: float
    worst_trade: float
    last_traded: datetime
    is_winner: bool


class GoalProgress(BaseModel):
    """Realized P&L of one goal period against its earnings target."""

    period: str = Field(..., description="daily, weekly, monthly or yearly")
    label: str
    start: datetime
    end: datetime
    target: float
    actual: float = Field(..., description="Realized P&L inside the period")
    trade_count: int
    progress: float = Field(..., description="Actual / target in percent, capped at 100")
    remaining: float = Field(..., description="Target minus actual (negative once exceeded)")
    days_left: float
    daily_required: float = Field(..., description="Remaining amount per day left")
    time_elapsed: float = Field(..., description="Elapsed share of the period in percent")
    projected_end: float = Field(..., description="Actual P&L extrapolated to the full period")
    on_track: bool

    class Config:
        json_schema_extra = {
            "example": {
                "period": "weekly",
                "label": "Weekly",
                "start": "2024-03-04T00:00:00",
                "end": "2024-03-10T23:59:59.999999",
                "target": 2500.0,
                "actual": 1250.0,
                "trade_count": 3,
                "progress": 50.0,
                "remaining": 1250.0,
                "days_left": 4.0,
                "daily_required": 312.5,
                "time_elapsed": 42.86,
                "projected_end": 2916.67,
                "on_track": True,
            }
        }


class AnalyzeRequest(BaseModel):
    """Trades posted for analysis instead of reading the store."""

    trades: List[Dict[str, Any]] = Field(..., description="Trade documents (snake_case or camelCase)")
    initial_capital: Optional[float] = Field(None, description="Defaults to analytics.initial_capital")
    monthly_contribution: Optional[float] = Field(None, description="Defaults to projection.monthly_contribution")
    conservative: bool = False
    reference_date: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "trades": [
                    {
                        "ticker": "AAPL",
                        "direction": "long",
                        "quantity": 100,
                        "entryPrice": 150.0,
                        "exitPrice": 155.0,
                        "timestamp": "2024-03-04T10:30:00",
                        "realizedPL": 500.0,
                    }
                ],
                "initial_capital": 10000,
            }
        }


class MetricsResponse(BaseModel):
    status: str = "success"
    data: PerformanceMetrics


class SeriesResponse(BaseModel):
    status: str = "success"
    data: CumulativeSeries


class ProjectionsResponse(BaseModel):
    status: str = "success"
    data: List[ProjectionPeriod]


class DividendsResponse(BaseModel):
    status: str = "success"
    data: DividendProjection


class PatternsResponse(BaseModel):
    status: str = "success"
    data: List[Pattern]


class TickersResponse(BaseModel):
    status: str = "success"
    data: List[TickerStats]


class BucketsResponse(BaseModel):
    status: str = "success"
    data: List[BucketStats]


class GoalsResponse(BaseModel):
    status: str = "success"
    data: List[GoalProgress]
