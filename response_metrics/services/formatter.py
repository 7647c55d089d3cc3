"""
Display formatting for rollup results.

Turns RollupResult pieces into display strings and into ordered table rows
for each export dataset. NO_DATA renders as an em dash so a missing average
is never shown as 0.

Key Functions:
- format_minutes, format_percent, format_count: KPI card strings
- display_value: Cell value used in tables and CSV exports
- employee_table, daily_table, heatmap_table, unanswered_table: Row builders
- table_for: Rows and columns for an ExportDataset
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from response_metrics.models.enums import ExportDataset, is_no_data
from response_metrics.models.schemas import (
    DailyPoint,
    EmployeeSummary,
    HeatmapMatrix,
    Minutes,
    Percent,
    RollupResult,
    UnansweredEmail,
)


DASH = "—"

# (key, header label) pairs
Column = Tuple[str, str]
TableRow = Dict[str, Any]


# =============================================================================
# Column Definitions
# =============================================================================

EMPLOYEE_COLUMNS: List[Column] = [
    ('employee_email', 'Employee'),
    ('name', 'Name'),
    ('total_first_responses', 'First Responses'),
    ('avg_response', 'Avg Response (min)'),
    ('sla_breaches', 'SLA Breaches'),
    ('sla_percent', 'SLA %'),
]

DAILY_COLUMNS: List[Column] = [
    ('date', 'Date'),
    ('total_first_responses', 'First Responses'),
    ('avg_response', 'Avg Response (min)'),
    ('sla_breaches', 'SLA Breaches'),
    ('sla_percent', 'SLA %'),
]

UNANSWERED_COLUMNS: List[Column] = [
    ('client_email', 'Client'),
    ('subject', 'Subject'),
    ('employee_email', 'Inbox'),
    ('received_at', 'Received'),
    ('minutes_unanswered', 'Minutes Unanswered'),
    ('sla_status', 'SLA'),
    ('outlook_link', 'Link'),
]


# =============================================================================
# Value Formatting
# =============================================================================


def format_minutes(value: Minutes) -> str:
    """'10.0 min', or a dash for NO_DATA."""
    if is_no_data(value):
        return DASH
    return f"{value:.1f} min"


def format_percent(value: Percent) -> str:
    """'80%', or a dash for NO_DATA."""
    if is_no_data(value):
        return DASH
    return f"{value}%"


def format_count(value: int) -> str:
    return f"{value:,}"


def display_value(value: Any) -> str:
    """
    Convert a table cell to its exported text.

    NO_DATA becomes a dash, None becomes an empty string, dates use ISO 8601.
    """
    if value is None:
        return ""
    if is_no_data(value):
        return DASH
    if isinstance(value, datetime):
        return value.isoformat(timespec='seconds')
    if isinstance(value, date):
        return value.isoformat()
    if hasattr(value, 'value') and isinstance(value.value, str):
        return value.value
    return str(value)


# =============================================================================
# Table Builders
# =============================================================================


def employee_table(summaries: Sequence[EmployeeSummary]) -> List[TableRow]:
    return [
        {
            'employee_email': s.employeeId,
            'name': s.name or s.employeeId,
            'total_first_responses': s.responses,
            'avg_response': s.weightedAvgMinutes,
            'sla_breaches': s.breaches,
            'sla_percent': s.slaPercent,
        }
        for s in summaries
    ]


def daily_table(series: Sequence[DailyPoint]) -> List[TableRow]:
    return [
        {
            'date': point.date,
            'total_first_responses': point.responses,
            'avg_response': point.weightedAvgMinutes,
            'sla_breaches': point.breaches,
            'sla_percent': point.slaPercent,
        }
        for point in series
    ]


def heatmap_columns(heatmap: HeatmapMatrix) -> List[Column]:
    """Employee column followed by one column per date."""
    return [('employee_email', 'Employee')] + [
        (day.isoformat(), day.isoformat()) for day in heatmap.dates
    ]


def heatmap_table(heatmap: HeatmapMatrix) -> List[TableRow]:
    """One row per employee, breach count per date column."""
    table = []
    for employee_id, counts in zip(heatmap.employeeIds, heatmap.breaches):
        row: TableRow = {'employee_email': employee_id}
        for day, count in zip(heatmap.dates, counts):
            row[day.isoformat()] = count
        table.append(row)
    return table


def unanswered_table(emails: Sequence[UnansweredEmail]) -> List[TableRow]:
    return [
        {
            'client_email': email.clientEmail,
            'subject': email.subject,
            'employee_email': email.employeeEmail,
            'received_at': email.receivedAt,
            'minutes_unanswered': email.minutesUnanswered,
            'sla_status': email.slaStatus,
            'outlook_link': email.outlookLink,
        }
        for email in emails
    ]


def table_for(
    dataset: ExportDataset,
    result: Optional[RollupResult] = None,
    unanswered: Sequence[UnansweredEmail] = ()
) -> Tuple[List[TableRow], List[Column]]:
    """
    Rows and columns for an export dataset.

    Args:
        dataset: Which result set to tabulate.
        result: Rollup used by EMPLOYEES, DAILY and HEATMAP.
        unanswered: Emails used by UNANSWERED.

    Returns:
        (rows, columns). rows is empty when there is nothing to export.
    """
    if dataset == ExportDataset.UNANSWERED:
        return unanswered_table(unanswered), list(UNANSWERED_COLUMNS)

    if result is None:
        return [], []

    if dataset == ExportDataset.EMPLOYEES:
        return employee_table(result.employeeSummaries), list(EMPLOYEE_COLUMNS)
    if dataset == ExportDataset.DAILY:
        return daily_table(result.dailySeries), list(DAILY_COLUMNS)
    return heatmap_table(result.heatmap), heatmap_columns(result.heatmap)
