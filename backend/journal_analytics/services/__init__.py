"""
Services package initialization.

This module aggregates the services of the analytics engine:
- Trade aggregation, bucketing and series analytics
- Snapshot storage
- Reports and exports
"""

from journal_analytics.services.analytics import (
    analytics_service,
    AnalyticsService,
    InMemorySnapshotStore,
    SnapshotStore,
)
from journal_analytics.services.reporting import DashboardBuilder, Exporter, ReportBuilder

__all__ = [
    # Analytics
    "analytics_service",
    "AnalyticsService",
    "SnapshotStore",
    "InMemorySnapshotStore",

    # Reporting
    "ReportBuilder",
    "DashboardBuilder",
    "Exporter",
]
