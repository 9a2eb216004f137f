"""Business logic services for API."""

from .analytics_service import AnalyticsService

__all__ = [
    "AnalyticsService",
]
