"""
Date range resolution for the dashboard range selector.

Turns a preset (7/14/30/60 days) or explicit custom bounds into an inclusive
DateRange anchored on an explicit date. The anchor is always passed in by
the caller; nothing in this module reads the wall clock.

Key Functions:
- parse_iso_date: Accept a date or an ISO 8601 'YYYY-MM-DD' string
- resolve_anchor: Pick the anchor date for TODAY or LATEST_DATA mode
- resolve_range: Build the inclusive window from a preset or custom bounds

Preset Window:
- end = anchor
- start = anchor - (N - 1) days

Custom Window:
- Both bounds given: the smaller becomes start
- Either bound missing: fall back to the default preset
"""

import logging
import re
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence, Union

from response_metrics.core.exceptions import InvalidRange
from response_metrics.models.enums import RangeAnchor
from response_metrics.models.schemas import DateRange, MetricRow


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

DEFAULT_PRESETS: Sequence[int] = (7, 14, 30, 60)

DEFAULT_RANGE_DAYS: int = 30


DateLike = Union[date, str]

ISO_DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


# =============================================================================
# Parsing
# =============================================================================


def parse_iso_date(value: DateLike) -> date:
    """
    Parse a calendar date.

    Args:
        value: A date instance or an ISO 8601 'YYYY-MM-DD' string.

    Returns:
        The parsed date.

    Raises:
        InvalidRange: If the value is not a date or a well-formed ISO date.

    Example:
        >>> parse_iso_date("2024-01-31")
        datetime.date(2024, 1, 31)
    """
    # datetime is a date subclass; keep only the calendar day
    if isinstance(value, date):
        return date(value.year, value.month, value.day)

    if isinstance(value, str):
        text = value.strip()
        if ISO_DATE_PATTERN.fullmatch(text):
            try:
                return date.fromisoformat(text)
            except ValueError:
                pass

    raise InvalidRange(f"malformed date: {value!r}")


# =============================================================================
# Anchor Selection
# =============================================================================


def resolve_anchor(
    rows: Iterable[MetricRow],
    mode: RangeAnchor,
    today: date
) -> Optional[date]:
    """
    Pick the date a preset range ends on.

    Args:
        rows: Loaded metric rows.
        mode: TODAY uses `today`; LATEST_DATA uses the newest row date.
        today: The caller's notion of the current date.

    Returns:
        The anchor date, or None in LATEST_DATA mode when there are no rows.
    """
    if mode == RangeAnchor.TODAY:
        return today

    latest = max((row.date for row in rows), default=None)
    if latest is None:
        logger.debug("No rows loaded; latest-data anchor unavailable")
    return latest


# =============================================================================
# Range Resolution
# =============================================================================


def preset_range(anchor: date, days: int) -> DateRange:
    """Inclusive window of `days` days ending on `anchor`."""
    if days < 1:
        raise InvalidRange(f"preset must be at least 1 day, got {days}")
    return DateRange(start=anchor - timedelta(days=days - 1), end=anchor)


def resolve_range(
    anchor: Optional[date],
    preset: Optional[int] = None,
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None,
    default_days: int = DEFAULT_RANGE_DAYS,
    presets: Sequence[int] = DEFAULT_PRESETS,
) -> Optional[DateRange]:
    """
    Resolve the active date window.

    Custom bounds take priority over a preset. If only one custom bound is
    supplied the default preset is used instead.

    Args:
        anchor: Date preset windows end on. None means no data was loaded.
        preset: Day count, must be one of `presets`.
        start: Custom lower bound.
        end: Custom upper bound.
        default_days: Preset used when nothing usable is supplied.
        presets: Allowed preset values.

    Returns:
        The inclusive DateRange, or None when there is no anchor and no
        complete custom range.

    Raises:
        InvalidRange: For a malformed custom bound or an unknown preset.

    Example:
        >>> resolve_range(date(2024, 1, 30), preset=7)
        DateRange(start=datetime.date(2024, 1, 24), end=datetime.date(2024, 1, 30))
    """
    start_date = parse_iso_date(start) if start is not None else None
    end_date = parse_iso_date(end) if end is not None else None

    if start_date is not None and end_date is not None:
        if start_date > end_date:
            start_date, end_date = end_date, start_date
        return DateRange(start=start_date, end=end_date)

    if start_date is not None or end_date is not None:
        logger.info(
            f"Incomplete custom range ({start_date}, {end_date}); "
            f"using {default_days}-day preset"
        )
        preset = default_days
    elif preset is not None and preset not in presets:
        raise InvalidRange(f"unknown preset: {preset} days")

    if anchor is None:
        return None

    return preset_range(anchor, preset if preset is not None else default_days)
