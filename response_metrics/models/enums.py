"""
Enumeration definitions for the Response Metrics service.

All enums inherit from both `str` and `Enum` so that Pydantic models serialize
them as plain strings in API responses.

The NoData enum is a single-member sentinel. Aggregated measures are typed
`Union[NoData, float]` so "no data" is never confused with a real zero.
"""

from enum import Enum


class RangeAnchor(str, Enum):
    """
    Date a preset range ends on.

    - TODAY: the wall-clock date supplied by the caller
    - LATEST_DATA: the most recent date present in the loaded rows

    The two diverge whenever the feed lags behind the calendar.
    """
    TODAY = "today"
    LATEST_DATA = "latest_data"


class ExportDataset(str, Enum):
    """
    Result sets that can be exported as CSV.

    The value is used as the `{dataset}` part of the export filename.
    """
    EMPLOYEES = "employees"
    DAILY = "daily"
    HEATMAP = "heatmap"
    UNANSWERED = "unanswered"


class MetricsFeed(str, Enum):
    """
    Where dashboard rows come from.

    - DAILY: the precomputed daily_first_responder_metrics table
    - TRACKED: answered rows of tracked_emails, rolled up per day on read

    TRACKED reflects emails the nightly rollup has not processed yet.
    """
    DAILY = "daily"
    TRACKED = "tracked"


class SlaStatus(str, Enum):
    """SLA state of an unanswered email."""
    OK = "OK"
    BREACHED = "Breached"


class DeltaEvent(str, Enum):
    """
    Change event types on the live metrics feed.

    Mirrors the Postgres change events delivered by the realtime subscription.
    """
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class NoData(str, Enum):
    """
    Marker for a measure that has no underlying data.

    Rendered as a dash by the formatter; serialized as "no_data" in JSON.
    """
    NO_DATA = "no_data"


NO_DATA = NoData.NO_DATA


def is_no_data(value: object) -> bool:
    """Return True if value is the NO_DATA sentinel."""
    return value is NO_DATA
