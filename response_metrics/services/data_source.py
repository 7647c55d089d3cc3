"""
Metrics data sources.

The rollup core never talks to the database directly; it reads through a
MetricsSource. Two implementations are provided:

- PostgresMetricsSource: asyncpg reads against the Supabase tables
- InMemoryMetricsSource: fixed in-memory data for tests and offline use

Any driver-level failure is raised as SourceReadFailure. Reads are never
retried here.
"""

import asyncio
import logging
from datetime import date, datetime
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Sequence

import asyncpg
from asyncpg import Pool

from response_metrics.core.database import get_db_pool
from response_metrics.core.exceptions import SourceReadFailure
from response_metrics.models.enums import MetricsFeed
from response_metrics.models.schemas import Employee, MetricRow, TrackedEmail
from response_metrics.services.email_activity import as_utc
from response_metrics.services.row_filter import filter_rows
from response_metrics.sql.metric_queries import (
    ANSWERED_EMAILS_QUERY,
    CLIENT_FACING_EMPLOYEES_QUERY,
    DAILY_METRICS_QUERY,
    LATEST_ANSWERED_EMAIL_DATE_QUERY,
    LATEST_METRIC_DATE_QUERY,
    UNANSWERED_EMAILS_QUERY,
)


logger = logging.getLogger(__name__)


class MetricsSource(Protocol):
    """Read-only interface over the external metrics feed."""

    async def fetch_metric_rows(self, start: date, end: date) -> List[MetricRow]:
        """Daily metric rows with start <= date <= end, ordered by date."""
        ...

    async def fetch_latest_date(self, feed: MetricsFeed = MetricsFeed.DAILY) -> Optional[date]:
        """Newest calendar day present in `feed`, or None when it is empty."""
        ...

    async def fetch_employees(self) -> List[Employee]:
        """Client-facing employees."""
        ...

    async def fetch_tracked_emails(
        self, since: datetime, until: Optional[datetime] = None
    ) -> List[TrackedEmail]:
        """Answered inbound emails received in [since, until)."""
        ...

    async def fetch_unanswered(self, limit: int) -> List[TrackedEmail]:
        """Oldest unanswered inbound emails, at most `limit`."""
        ...


# =============================================================================
# Record Mapping
# =============================================================================


def metric_row_from_record(record: Any) -> MetricRow:
    return MetricRow(
        date=record['date'],
        employeeId=record['employee_email'],
        responseCount=int(record['total_first_responses'] or 0),
        avgResponseMinutes=(
            float(record['avg_response_minutes'])
            if record['avg_response_minutes'] is not None else None
        ),
        breachCount=int(record['sla_breaches'] or 0),
    )


def employee_from_record(record: Any) -> Employee:
    return Employee(
        email=record['email'],
        name=record['name'],
        department=record['department'],
    )


def tracked_email_from_record(record: Any, has_response: bool) -> TrackedEmail:
    data = dict(record)
    minutes = data.get('response_time_minutes')
    return TrackedEmail(
        id=str(data['id']),
        employeeEmail=data.get('employee_email'),
        clientEmail=data.get('client_email'),
        subject=data.get('subject'),
        receivedAt=data['received_at'],
        firstResponseAt=data.get('first_response_at'),
        responseTimeMinutes=float(minutes) if minutes is not None else None,
        slaBreached=data.get('sla_breached'),
        graphMessageId=data.get('graph_message_id'),
        hasResponse=has_response,
    )


# =============================================================================
# Postgres Source
# =============================================================================


class PostgresMetricsSource:
    """
    MetricsSource backed by the Supabase Postgres database.

    Args:
        pool_factory: Coroutine returning the asyncpg pool. Defaults to the
            process-wide pool from response_metrics.core.database.
    """

    def __init__(self, pool_factory: Callable[[], Awaitable[Pool]] = get_db_pool):
        self._pool_factory = pool_factory

    async def _fetch(self, dataset: str, query: str, *args: Any) -> List[Any]:
        try:
            pool = await self._pool_factory()
            async with pool.acquire() as conn:
                return await conn.fetch(query, *args)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError,
                asyncio.TimeoutError, RuntimeError) as e:
            logger.error(f"Failed to read {dataset}: {e}")
            raise SourceReadFailure(f"Failed to read {dataset}: {e}", source=dataset) from e

    async def fetch_metric_rows(self, start: date, end: date) -> List[MetricRow]:
        records = await self._fetch('metric_rows', DAILY_METRICS_QUERY, start, end)
        rows = [metric_row_from_record(record) for record in records]
        logger.info(f"Loaded {len(rows)} metric rows for {start}..{end}")
        return rows

    async def fetch_latest_date(self, feed: MetricsFeed = MetricsFeed.DAILY) -> Optional[date]:
        if feed == MetricsFeed.TRACKED:
            records = await self._fetch('latest_email_date', LATEST_ANSWERED_EMAIL_DATE_QUERY)
        else:
            records = await self._fetch('latest_metric_date', LATEST_METRIC_DATE_QUERY)
        return records[0]['latest'] if records else None

    async def fetch_employees(self) -> List[Employee]:
        records = await self._fetch('employees', CLIENT_FACING_EMPLOYEES_QUERY)
        return [employee_from_record(record) for record in records]

    async def fetch_tracked_emails(
        self, since: datetime, until: Optional[datetime] = None
    ) -> List[TrackedEmail]:
        records = await self._fetch('tracked_emails', ANSWERED_EMAILS_QUERY, since, until)
        return [tracked_email_from_record(record, has_response=True) for record in records]

    async def fetch_unanswered(self, limit: int) -> List[TrackedEmail]:
        records = await self._fetch('unanswered_emails', UNANSWERED_EMAILS_QUERY, limit)
        return [tracked_email_from_record(record, has_response=False) for record in records]


# =============================================================================
# In-Memory Source
# =============================================================================


class InMemoryMetricsSource:
    """MetricsSource over fixed in-memory data."""

    def __init__(
        self,
        rows: Sequence[MetricRow] = (),
        employees: Sequence[Employee] = (),
        emails: Sequence[TrackedEmail] = (),
    ):
        self.rows = list(rows)
        self.employees = list(employees)
        self.emails = list(emails)

    async def fetch_metric_rows(self, start: date, end: date) -> List[MetricRow]:
        return sorted(filter_rows(self.rows, start, end), key=lambda row: row.date)

    async def fetch_latest_date(self, feed: MetricsFeed = MetricsFeed.DAILY) -> Optional[date]:
        if feed == MetricsFeed.TRACKED:
            days = [as_utc(e.receivedAt).date() for e in self.emails if e.hasResponse]
        else:
            days = [row.date for row in self.rows]
        return max(days, default=None)

    async def fetch_employees(self) -> List[Employee]:
        return list(self.employees)

    async def fetch_tracked_emails(
        self, since: datetime, until: Optional[datetime] = None
    ) -> List[TrackedEmail]:
        since = as_utc(since)
        until = as_utc(until) if until is not None else None
        return [
            e for e in self.emails
            if e.hasResponse
            and as_utc(e.receivedAt) >= since
            and (until is None or as_utc(e.receivedAt) < until)
        ]

    async def fetch_unanswered(self, limit: int) -> List[TrackedEmail]:
        pending = sorted(
            (e for e in self.emails if not e.hasResponse),
            key=lambda e: as_utc(e.receivedAt),
        )
        return pending[:limit]
