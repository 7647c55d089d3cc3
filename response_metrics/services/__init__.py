"""
Response Metrics Services Module

Business logic for the dashboard. Every rollup stage is a pure function of its
inputs; only the data sources and the session perform I/O.

Services:
- range_resolver: Preset/custom date window resolution
- row_filter: Inclusive date filtering
- aggregator: Team, employee, daily and heatmap rollups
- formatter: Display strings and export tables
- exporter: CSV serialization and filenames
- email_activity: Tracked email rollups and unanswered email list
- data_source: MetricsSource implementations (Postgres, in-memory)
- live_updates: Row deltas and stale read protection
- dashboard: Pipeline orchestration and export building
"""

# =============================================================================
# Rollup Pipeline Exports
# =============================================================================

from response_metrics.services.range_resolver import (
    parse_iso_date,
    resolve_anchor,
    resolve_range,
    preset_range,
)
from response_metrics.services.row_filter import (
    filter_rows,
    ensure_valid_range,
)
from response_metrics.services.aggregator import (
    aggregate,
    weighted_average,
    sla_percent,
    round_minutes,
    round_percent,
    days_in_range,
)

# =============================================================================
# Formatting and Export
# =============================================================================

from response_metrics.services.formatter import (
    format_minutes,
    format_percent,
    format_count,
    table_for,
)
from response_metrics.services.exporter import (
    to_delimited_text,
    export_filename,
    CSV_MEDIA_TYPE,
)

# =============================================================================
# Tracked Emails
# =============================================================================

from response_metrics.services.email_activity import (
    rows_from_tracked_emails,
    build_unanswered,
    response_minutes,
)

# =============================================================================
# Data Access, Live Updates and Orchestration
# =============================================================================

from response_metrics.services.data_source import (
    MetricsSource,
    PostgresMetricsSource,
    InMemoryMetricsSource,
)
from response_metrics.services.live_updates import (
    apply_row_deltas,
    GenerationGuard,
    MetricsSession,
)
from response_metrics.services.dashboard import (
    build_dashboard,
    load_dashboard,
    load_unanswered,
    read_window,
    read_rows,
    build_export,
    rollup_for_range,
)


__all__ = [
    'parse_iso_date',
    'resolve_anchor',
    'resolve_range',
    'preset_range',
    'filter_rows',
    'ensure_valid_range',
    'aggregate',
    'weighted_average',
    'sla_percent',
    'round_minutes',
    'round_percent',
    'days_in_range',
    'format_minutes',
    'format_percent',
    'format_count',
    'table_for',
    'to_delimited_text',
    'export_filename',
    'CSV_MEDIA_TYPE',
    'rows_from_tracked_emails',
    'build_unanswered',
    'response_minutes',
    'MetricsSource',
    'PostgresMetricsSource',
    'InMemoryMetricsSource',
    'apply_row_deltas',
    'GenerationGuard',
    'MetricsSession',
    'build_dashboard',
    'load_dashboard',
    'load_unanswered',
    'read_window',
    'read_rows',
    'build_export',
    'rollup_for_range',
]
