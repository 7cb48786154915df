"""
Analytics module for the assistant.

Provides the KPI facade and number formatting shared by the tools.
"""

from .formatting import format_int
from .kpis import KpiResult, MetricsQueryFacade, SqlMetricsQueries

__all__ = [
    "format_int",
    "KpiResult",
    "MetricsQueryFacade",
    "SqlMetricsQueries",
]
