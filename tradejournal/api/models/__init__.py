"""Pydantic models for API schemas."""

from .analytics import (
    AnalyzeRequest,
    BucketStats,
    CumulativeSeries,
    DividendProjection,
    GoalProgress,
    Pattern,
    PerformanceMetrics,
    ProjectionPeriod,
    SeriesPoint,
    SeriesStats,
    TickerStats,
)
from .trades import TradeList, TradePreviewRequest, TradeRecord, TradesResponse

__all__ = [
    "AnalyzeRequest",
    "BucketStats",
    "CumulativeSeries",
    "DividendProjection",
    "GoalProgress",
    "Pattern",
    "PerformanceMetrics",
    "ProjectionPeriod",
    "SeriesPoint",
    "SeriesStats",
    "TickerStats",
    "TradeList",
    "TradePreviewRequest",
    "TradeRecord",
    "TradesResponse",
]
