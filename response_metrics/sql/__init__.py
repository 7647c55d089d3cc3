"""
SQL Query Package for the Response Metrics service.

Read-only parameterized queries used by the Postgres metrics source.

Usage:
    from response_metrics.sql import DAILY_METRICS_QUERY

    rows = await conn.fetch(DAILY_METRICS_QUERY, start, end)
"""

from response_metrics.sql.metric_queries import (
    DAILY_METRICS_QUERY,
    LATEST_METRIC_DATE_QUERY,
    CLIENT_FACING_EMPLOYEES_QUERY,
    ANSWERED_EMAILS_QUERY,
    LATEST_ANSWERED_EMAIL_DATE_QUERY,
    UNANSWERED_EMAILS_QUERY,
)


__all__ = [
    'DAILY_METRICS_QUERY',
    'LATEST_METRIC_DATE_QUERY',
    'CLIENT_FACING_EMPLOYEES_QUERY',
    'ANSWERED_EMAILS_QUERY',
    'LATEST_ANSWERED_EMAIL_DATE_QUERY',
    'UNANSWERED_EMAILS_QUERY',
]
