"""
Exception types for the Response Metrics service.

Only two conditions are raised as exceptions:

- InvalidRange: a date window that cannot be used (malformed date string,
  start after end, or a preset that is not offered).
- SourceReadFailure: the external metrics feed could not be read. It is
  surfaced to the caller as-is; nothing retries it.

Empty input and rows missing an average are not errors. Empty aggregates
carry the NO_DATA sentinel (see response_metrics.models.enums.NoData) and
rows without an average are left out of the weighted-average denominator.
"""

from typing import Optional


class ResponseMetricsError(Exception):
    """Base class for all errors raised by this package."""


class InvalidRange(ResponseMetricsError, ValueError):
    """
    Raised when a requested date range cannot be resolved.

    Attributes:
        start: The offending lower bound as received, if any.
        end: The offending upper bound as received, if any.
    """

    def __init__(self, message: str, start: Optional[object] = None, end: Optional[object] = None):
        super().__init__(message)
        self.start = start
        self.end = end


class SourceReadFailure(ResponseMetricsError):
    """
    Raised when the metrics source fails to return data.

    Attributes:
        source: Short name of the dataset that failed (e.g. 'metric_rows').
    """

    def __init__(self, message: str, source: str = 'metric_rows'):
        super().__init__(message)
        self.source = source
