"""
Live update handling for the dashboard.

Two concerns live here:

1. Row deltas. The realtime subscription delivers INSERT / UPDATE / DELETE
   events for daily_first_responder_metrics. apply_row_deltas folds them into
   a new row list; the result goes through the same pure aggregator as a
   fresh load. Nothing is mutated in place.

2. Stale reads. A new range selection does not abort a read already in
   flight. GenerationGuard tags every read with a generation number and
   MetricsSession drops any result whose generation is no longer current.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from response_metrics.core.exceptions import SourceReadFailure
from response_metrics.models.enums import DeltaEvent
from response_metrics.models.schemas import (
    DateRange,
    Employee,
    MetricRow,
    RollupResult,
    RowDelta,
)
from response_metrics.services.aggregator import aggregate
from response_metrics.services.data_source import MetricsSource
from response_metrics.services.row_filter import filter_rows


logger = logging.getLogger(__name__)


# =============================================================================
# Row Deltas
# =============================================================================


def apply_row_deltas(rows: Sequence[MetricRow], deltas: Iterable[RowDelta]) -> List[MetricRow]:
    """
    Apply change events to a row snapshot.

    INSERT and UPDATE upsert by (date, employeeId): the new row takes the
    place of the first existing row with that key (other rows with the key are
    dropped) or is appended. DELETE removes every row with the key.

    Args:
        rows: Current snapshot; left untouched.
        deltas: Events in arrival order.

    Returns:
        A new list of rows.
    """
    result = list(rows)
    for delta in deltas:
        key = (delta.row.date, delta.row.employeeId)
        positions = [i for i, row in enumerate(result) if (row.date, row.employeeId) == key]

        if delta.event == DeltaEvent.DELETE:
            result = [row for i, row in enumerate(result) if i not in positions]
            continue

        if positions:
            first = positions[0]
            result[first] = delta.row
            drop = set(positions[1:])
            result = [row for i, row in enumerate(result) if i not in drop]
        else:
            result.append(delta.row)
    return result


# =============================================================================
# Stale Read Protection
# =============================================================================


class GenerationGuard:
    """Monotonic generation counter; only the latest token is current."""

    def __init__(self) -> None:
        self._generation = 0

    def begin(self) -> int:
        self._generation += 1
        return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation


class MetricsSession:
    """
    Dashboard view state for one client: active range, row snapshot and the
    latest rollup.

    Args:
        source: Where rows are read from.
        roster: Client-facing employees passed to the aggregator.
    """

    def __init__(self, source: MetricsSource, roster: Sequence[Employee] = ()):
        self._source = source
        self._guard = GenerationGuard()
        self.roster: List[Employee] = list(roster)
        self.range: Optional[DateRange] = None
        self.rows: List[MetricRow] = []
        self.result: Optional[RollupResult] = None

    def _recompute(self) -> Optional[RollupResult]:
        if self.range is None:
            return None
        in_range = filter_rows(self.rows, self.range.start, self.range.end)
        self.result = aggregate(in_range, self.range, self.roster)
        return self.result

    async def load(self, date_range: DateRange) -> Optional[RollupResult]:
        """
        Read rows for date_range and recompute the rollup.

        Returns:
            The new rollup, or None if a newer load started while this one
            was waiting on the source.

        Raises:
            SourceReadFailure: If the read for the current range fails. A
                failure of a superseded read is logged and ignored.
        """
        token = self._guard.begin()
        try:
            rows = await self._source.fetch_metric_rows(date_range.start, date_range.end)
        except SourceReadFailure:
            if not self._guard.is_current(token):
                logger.warning(f"Ignoring failed stale read for {date_range.start}..{date_range.end}")
                return None
            raise

        if not self._guard.is_current(token):
            logger.info(f"Discarding stale read for {date_range.start}..{date_range.end}")
            return None

        self.range = date_range
        self.rows = list(rows)
        return self._recompute()

    def apply_deltas(self, deltas: Iterable[RowDelta]) -> Optional[RollupResult]:
        """
        Fold live change events into the snapshot and recompute.

        Returns:
            The new rollup, or None if nothing has been loaded yet.
        """
        self.rows = apply_row_deltas(self.rows, deltas)
        return self._recompute()
