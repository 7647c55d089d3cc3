"""
Row filtering by inclusive date window.
"""

import logging
from datetime import date
from typing import Iterable, List

from response_metrics.core.exceptions import InvalidRange
from response_metrics.models.schemas import MetricRow


logger = logging.getLogger(__name__)


def ensure_valid_range(start: date, end: date) -> None:
    """
    Raise InvalidRange if start is after end.

    Callers use this to surface an "invalid range" message; filter_rows
    itself only returns an empty list.
    """
    if start > end:
        raise InvalidRange(f"range start {start} is after end {end}", start=start, end=end)


def filter_rows(rows: Iterable[MetricRow], start: date, end: date) -> List[MetricRow]:
    """
    Keep rows whose date lies in [start, end], preserving input order.

    Args:
        rows: Metric rows in any order.
        start: Inclusive lower bound.
        end: Inclusive upper bound.

    Returns:
        A new list. Empty when start > end.
    """
    if start > end:
        logger.warning(f"Invalid range {start} > {end}; returning no rows")
        return []

    return [row for row in rows if start <= row.date <= end]
