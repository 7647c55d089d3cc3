"""
Package initialization file for response_metrics models.

Re-exports all Pydantic schemas and enumerations so other modules can import
them from response_metrics.models directly.

Usage:
    from response_metrics.models import MetricRow, RollupResult, NO_DATA
"""

# =============================================================================
# Enums
# =============================================================================

from response_metrics.models.enums import (
    RangeAnchor,
    ExportDataset,
    MetricsFeed,
    SlaStatus,
    DeltaEvent,
    NoData,
    NO_DATA,
    is_no_data,
)


# =============================================================================
# Schemas
# =============================================================================

from response_metrics.models.schemas import (
    # Input feed
    MetricRow,
    Employee,
    TrackedEmail,
    RowDelta,
    # Range
    DateRange,
    # Rollup results
    TeamTotals,
    EmployeeSummary,
    DailyPoint,
    HeatmapMatrix,
    RowKey,
    RollupResult,
    # Unanswered emails
    UnansweredEmail,
    # API responses
    DashboardResponse,
    # Measure aliases
    Minutes,
    Percent,
)


__all__ = [
    # Enums
    'RangeAnchor',
    'ExportDataset',
    'MetricsFeed',
    'SlaStatus',
    'DeltaEvent',
    'NoData',
    'NO_DATA',
    'is_no_data',
    # Schemas
    'MetricRow',
    'Employee',
    'TrackedEmail',
    'RowDelta',
    'DateRange',
    'TeamTotals',
    'EmployeeSummary',
    'DailyPoint',
    'HeatmapMatrix',
    'RowKey',
    'RollupResult',
    'UnansweredEmail',
    'DashboardResponse',
    'Minutes',
    'Percent',
]
