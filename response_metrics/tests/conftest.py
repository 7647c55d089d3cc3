"""
Pytest Configuration and Shared Fixtures for Response Metrics Tests.

Provides:
- Sample metric rows, roster and tracked emails
- Test settings that ignore the local .env file
- In-memory and mocked asyncpg data sources
- A FastAPI TestClient with dependencies overridden

Dependencies:
- pytest
- pytest-asyncio
- httpx (FastAPI TestClient)
"""

from datetime import date, datetime, timezone
from typing import Generator, List, Optional
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from response_metrics.core.config import Settings
from response_metrics.models import Employee, MetricRow, TrackedEmail
from response_metrics.services.data_source import InMemoryMetricsSource


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        'markers',
        'api: marks tests that exercise the FastAPI endpoints'
    )


# ============================================================
# DATA HELPERS
# ============================================================

def make_row(
    day: str,
    employee: str,
    count: int,
    avg: Optional[float] = None,
    breaches: int = 0
) -> MetricRow:
    """Build a MetricRow from compact arguments."""
    return MetricRow(
        date=date.fromisoformat(day),
        employeeId=employee,
        responseCount=count,
        avgResponseMinutes=avg,
        breachCount=breaches,
    )


def utc(text: str) -> datetime:
    """Parse 'YYYY-MM-DDTHH:MM' as a UTC datetime."""
    return datetime.fromisoformat(text).replace(tzinfo=timezone.utc)


# ============================================================
# SAMPLE DATA FIXTURES
# ============================================================

@pytest.fixture
def example_rows() -> List[MetricRow]:
    """Two employees on one day: team totals 15 / 3 / 10.0 min / 80%."""
    return [
        make_row("2024-01-01", "a", 10, 5.0, 2),
        make_row("2024-01-01", "b", 5, 20.0, 1),
    ]


@pytest.fixture
def week_rows() -> List[MetricRow]:
    """Sparse rows across 2024-01-01..2024-01-05."""
    return [
        make_row("2024-01-01", "a", 10, 5.0, 2),
        make_row("2024-01-01", "b", 5, 20.0, 1),
        make_row("2024-01-02", "a", 5, 8.0, 4),
        make_row("2024-01-05", "b", 4, 12.5, 0),
    ]


@pytest.fixture
def roster() -> List[Employee]:
    return [
        Employee(email="a", name="Alice", department="Support"),
        Employee(email="b", name="Bob", department="Support"),
        Employee(email="c", name="Carol", department="Sales"),
    ]


@pytest.fixture
def tracked_emails() -> List[TrackedEmail]:
    return [
        TrackedEmail(
            id="1", employeeEmail="a", clientEmail="client1@example.com",
            receivedAt=utc("2024-01-01T09:00"), firstResponseAt=utc("2024-01-01T09:10"),
            responseTimeMinutes=10,
        ),
        TrackedEmail(
            id="2", employeeEmail="a", clientEmail="client2@example.com",
            receivedAt=utc("2024-01-01T09:00"), firstResponseAt=utc("2024-01-01T09:20"),
        ),
        TrackedEmail(
            id="3", employeeEmail=None, clientEmail="client3@example.com",
            receivedAt=utc("2024-01-01T11:00"), responseTimeMinutes=3,
        ),
        TrackedEmail(
            id="4", employeeEmail="b", clientEmail="client4@example.com",
            receivedAt=utc("2024-01-02T08:00"), responseTimeMinutes=15,
        ),
        TrackedEmail(
            id="5", employeeEmail="b", clientEmail="client5@example.com",
            subject="Quote, \"urgent\"",
            receivedAt=utc("2024-01-02T09:50"), graphMessageId=None, hasResponse=False,
        ),
        TrackedEmail(
            id="6", employeeEmail="a", clientEmail="client6@example.com",
            receivedAt=utc("2024-01-02T09:00"), graphMessageId="AAMkAD", hasResponse=False,
        ),
    ]


# ============================================================
# SETTINGS AND SOURCE FIXTURES
# ============================================================

@pytest.fixture
def test_settings() -> Settings:
    """Settings with defaults only; the local .env file is ignored."""
    return Settings(_env_file=None, database_url=None)


@pytest.fixture
def memory_source(week_rows, roster, tracked_emails) -> InMemoryMetricsSource:
    return InMemoryMetricsSource(rows=week_rows, employees=roster, emails=tracked_emails)


@pytest.fixture
def mock_db_pool() -> AsyncMock:
    """
    Mock asyncpg pool whose acquire() yields a mock connection.

    Configure results through pool.conn.fetch.
    """
    pool = AsyncMock()

    conn = AsyncMock()
    conn.fetch = AsyncMock(return_value=[])

    acquire_context = AsyncMock()
    acquire_context.__aenter__ = AsyncMock(return_value=conn)
    acquire_context.__aexit__ = AsyncMock(return_value=None)
    pool.acquire = Mock(return_value=acquire_context)
    pool.conn = conn

    return pool


# ============================================================
# API FIXTURES
# ============================================================

FIXED_NOW = utc("2024-01-10T12:00")


def build_client(source, settings: Settings, now: datetime = FIXED_NOW) -> TestClient:
    """TestClient with source, settings and clock overridden."""
    from response_metrics.core.dependencies import (
        get_metrics_source,
        get_now,
        get_settings_dependency,
    )
    from response_metrics.main import app

    app.dependency_overrides[get_metrics_source] = lambda: source
    app.dependency_overrides[get_settings_dependency] = lambda: settings
    app.dependency_overrides[get_now] = lambda: now
    return TestClient(app)


@pytest.fixture
def api_client(memory_source, test_settings) -> Generator[TestClient, None, None]:
    from response_metrics.main import app

    client = build_client(memory_source, test_settings)
    yield client
    app.dependency_overrides.clear()
