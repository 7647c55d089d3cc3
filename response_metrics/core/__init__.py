"""
Core infrastructure package for the Response Metrics service.

Provides:
- Configuration management via pydantic-settings
- Exception types for invalid ranges and source read failures
- Async PostgreSQL connectivity via asyncpg
- FastAPI dependency injection utilities

Usage:
    from response_metrics.core import get_settings, InvalidRange

Note:
    Dependency helpers live in response_metrics.core.dependencies and are not
    re-exported here, because they import the services package.
"""

from response_metrics.core.config import Settings, get_settings
from response_metrics.core.exceptions import (
    ResponseMetricsError,
    InvalidRange,
    SourceReadFailure,
)
from response_metrics.core.database import init_db, close_db, get_db_pool


__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Exceptions (from exceptions.py)
    'ResponseMetricsError',
    'InvalidRange',
    'SourceReadFailure',
    # Database pool lifecycle (from database.py)
    'init_db',
    'close_db',
    'get_db_pool',
]
