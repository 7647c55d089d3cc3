"""
FastAPI dependency injection module for the Response Metrics service.

Provides reusable dependencies for configuration and the metrics source so
endpoint handlers never construct infrastructure themselves.

Key Dependencies Provided:
- get_settings_dependency: Returns the cached Settings singleton
- get_metrics_source: Returns the Postgres-backed MetricsSource
- get_now: Current UTC time
- SettingsDep / MetricsSourceDep / NowDep: Annotated aliases for endpoint signatures

Testing:
    Swap the source without touching the database:

    app.dependency_overrides[get_metrics_source] = lambda: InMemoryMetricsSource(rows)
"""

from datetime import datetime, timezone
from typing import Annotated

from fastapi import Depends

from response_metrics.core.config import Settings, get_settings
from response_metrics.core.database import get_db_pool
from response_metrics.services.data_source import MetricsSource, PostgresMetricsSource


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so tests can override it:

        app.dependency_overrides[get_settings_dependency] = lambda: test_settings
    """
    return get_settings()


# =============================================================================
# Metrics Source Dependency
# =============================================================================

def get_metrics_source() -> MetricsSource:
    """Return a MetricsSource reading from the shared asyncpg pool."""
    return PostgresMetricsSource(pool_factory=get_db_pool)


# =============================================================================
# Clock Dependency
# =============================================================================

def get_now() -> datetime:
    """
    Current UTC time.

    The only place request handlers read the wall clock; range anchors and
    unanswered-email ages are computed from this value.
    """
    return datetime.now(timezone.utc)


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

MetricsSourceDep = Annotated[MetricsSource, Depends(get_metrics_source)]

NowDep = Annotated[datetime, Depends(get_now)]
