"""
Trade aggregation and time-series performance analytics.

Components:
- Reducer: single-pass aggregate statistics
- Bucketizer: day / ISO-week / month / instrument filtering and daily P&L series
- Series: streak, drawdown and best/worst scans over the daily series
- Snapshot: snapshot assembly
- Storage: snapshot store contract and in-memory implementation
- Service: entry points tying the components together
"""

from .reducer import AggregateReducer
from .bucketizer import BucketResult, PeriodBucketizer
from .series import compute_drawdown, compute_series, compute_streaks
from .snapshot import AnalyticsSnapshotBuilder
from .storage import InMemorySnapshotStore, SnapshotStore
from .service import AnalyticsService

analytics_service = AnalyticsService()

__all__ = [
    'analytics_service',        # Default service instance, no store attached
    'AnalyticsService',
    'AggregateReducer',
    'PeriodBucketizer',
    'BucketResult',
    'compute_streaks',
    'compute_drawdown',
    'compute_series',
    'AnalyticsSnapshotBuilder',
    'SnapshotStore',
    'InMemorySnapshotStore',
]
