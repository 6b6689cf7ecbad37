"""
Reporting package: period reports, dashboard figures and file exports built
from analytics snapshots.
"""

from .report import ReportBuilder
from .dashboard import DashboardBuilder, compute_performance_metrics
from .exporter import Exporter

__all__ = [
    'ReportBuilder',
    'DashboardBuilder',
    'compute_performance_metrics',
    'Exporter',
]
