"""
Metrics rollup aggregation service.

This module folds filtered metric rows into everything the dashboard renders
for a date window: team totals, per-employee summaries, a zero-filled daily
series and an employee x date breach heatmap. It is pure and synchronous;
every call builds a fresh RollupResult from its inputs.

Key Functions:
- aggregate: Main entry point producing a RollupResult
- weighted_average: Response-weighted average latency
- sla_percent: Share of responses within SLA
- round_minutes / round_percent: Display rounding (half-up)

Formulas:
- responses = sum(responseCount)
- breaches = sum(breachCount)
- weightedAvgMinutes = sum(avg_i * count_i) / sum(count_i), over rows with an
  average and count_i > 0, rounded to 1 decimal place
- slaPercent = round(100 * (responses - breaches) / responses), clamped to
  [0, 100]

Undefined values (no responses, or no row carrying an average) are the
NO_DATA sentinel, never 0. None of the functions here raise for well-typed
input.

Duplicate (date, employeeId) rows are summed and reported in
RollupResult.duplicateKeys.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from response_metrics.models.enums import NO_DATA
from response_metrics.models.schemas import (
    DailyPoint,
    DateRange,
    Employee,
    EmployeeSummary,
    HeatmapMatrix,
    MetricRow,
    Minutes,
    Percent,
    RollupResult,
    RowKey,
    TeamTotals,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Rounding
# =============================================================================


def _round_half_up(value: float, places: str) -> Decimal:
    return Decimal(str(value)).quantize(Decimal(places), rounding=ROUND_HALF_UP)


def round_minutes(value: float) -> float:
    """Round minutes to 1 decimal place, halves away from zero."""
    return float(_round_half_up(value, '0.1'))


def round_percent(value: float) -> int:
    """Round a percentage to the nearest integer and clamp it to [0, 100]."""
    rounded = int(_round_half_up(value, '1'))
    return min(100, max(0, rounded))


# =============================================================================
# Measure Calculations
# =============================================================================


def weighted_average(pairs: Iterable[Tuple[Optional[float], int]]) -> Minutes:
    """
    Response-weighted average of per-row averages.

    Args:
        pairs: (avgResponseMinutes, responseCount) per row. Pairs with no
            average, a non-finite average or a non-positive count are skipped.

    Returns:
        Average rounded to 1 decimal place, or NO_DATA if nothing qualified.

    Example:
        >>> weighted_average([(5.0, 10), (20.0, 5)])
        10.0
    """
    weighted_sum = 0.0
    weight = 0
    for avg, count in pairs:
        if avg is None or count <= 0 or not math.isfinite(avg):
            continue
        weighted_sum += avg * count
        weight += count

    if weight == 0:
        return NO_DATA
    return round_minutes(weighted_sum / weight)


def sla_percent(responses: int, breaches: int) -> Percent:
    """
    Percentage of responses within SLA.

    Returns:
        Integer in [0, 100], or NO_DATA when there are no responses.

    Example:
        >>> sla_percent(15, 3)
        80
    """
    if responses <= 0:
        return NO_DATA
    return round_percent(100.0 * (responses - breaches) / responses)


# =============================================================================
# Accumulator
# =============================================================================


@dataclass
class _Accumulator:
    """Running sums for one group (team, employee or day)."""
    responses: int = 0
    breaches: int = 0
    averages: List[Tuple[Optional[float], int]] = field(default_factory=list)

    def add(self, row: MetricRow) -> None:
        self.responses += row.responseCount
        self.breaches += row.breachCount
        self.averages.append((row.avgResponseMinutes, row.responseCount))

    def measures(self) -> Dict[str, object]:
        return {
            'responses': self.responses,
            'breaches': self.breaches,
            'weightedAvgMinutes': weighted_average(self.averages),
            'slaPercent': sla_percent(self.responses, self.breaches),
        }


# =============================================================================
# Aggregation
# =============================================================================


def days_in_range(date_range: DateRange) -> List[date]:
    """Every calendar day in the range, ascending."""
    return [date_range.start + timedelta(days=offset) for offset in range(date_range.days)]


def _find_duplicates(rows: Sequence[MetricRow]) -> List[RowKey]:
    seen = set()
    duplicates: Dict[Tuple[date, str], None] = {}
    for row in rows:
        key = (row.date, row.employeeId)
        if key in seen:
            duplicates[key] = None
        seen.add(key)
    return [RowKey(date=d, employeeId=e) for d, e in sorted(duplicates)]


def _build_heatmap(
    employee_ids: List[str],
    days: List[date],
    rows: Sequence[MetricRow]
) -> HeatmapMatrix:
    """Breach matrix with intensity = clip(breaches / max, 0, 1)."""
    row_index = {employee_id: i for i, employee_id in enumerate(employee_ids)}
    col_index = {day: j for j, day in enumerate(days)}

    matrix = np.zeros((len(employee_ids), len(days)), dtype=np.int64)
    for row in rows:
        i = row_index.get(row.employeeId)
        j = col_index.get(row.date)
        if i is not None and j is not None:
            matrix[i, j] += row.breachCount

    max_breaches = int(matrix.max()) if matrix.size else 0
    if max_breaches > 0:
        intensity = np.clip(matrix / max_breaches, 0.0, 1.0)
    else:
        intensity = np.zeros(matrix.shape, dtype=np.float64)

    return HeatmapMatrix(
        employeeIds=list(employee_ids),
        dates=list(days),
        breaches=matrix.tolist(),
        intensity=intensity.tolist(),
        maxBreaches=max_breaches,
    )


def aggregate(
    rows: Sequence[MetricRow],
    date_range: Optional[DateRange],
    roster: Optional[Sequence[Employee]] = None
) -> RollupResult:
    """
    Roll filtered rows up into team, employee, daily and heatmap views.

    Args:
        rows: Metric rows, normally already filtered to date_range. Rows
            outside the range are ignored.
        date_range: Active window. None (no resolvable range) short-circuits
            to an empty result.
        roster: Optional client-facing employees. Every roster member gets a
            summary, even with no rows, and summaries carry roster names.

    Returns:
        A new RollupResult:
        - employeeSummaries sorted by responses desc, then employeeId asc
        - dailySeries with one point per day in range, zero-filled
        - heatmap rows in employeeSummaries order

    Example:
        >>> result = aggregate(rows, DateRange(start=d, end=d))
        >>> result.teamTotals.slaPercent
        80
    """
    roster = list(roster or [])
    names = {employee.email: employee.name for employee in roster}

    if date_range is None:
        summaries = [
            EmployeeSummary(employeeId=employee.email, name=employee.name)
            for employee in sorted(roster, key=lambda e: e.email)
        ]
        return RollupResult(range=None, employeeSummaries=summaries)

    in_range = [row for row in rows if date_range.start <= row.date <= date_range.end]
    if len(in_range) != len(rows):
        logger.debug(f"Ignored {len(rows) - len(in_range)} rows outside {date_range.start}..{date_range.end}")

    duplicates = _find_duplicates(in_range)
    if duplicates:
        logger.warning(
            f"Summing {len(duplicates)} duplicate (date, employee) keys: "
            + ", ".join(f"{key.date}/{key.employeeId}" for key in duplicates[:5])
        )

    team = _Accumulator()
    by_employee: Dict[str, _Accumulator] = {employee.email: _Accumulator() for employee in roster}
    by_day: Dict[date, _Accumulator] = {}
    stacked: Dict[date, Dict[str, int]] = {}

    for row in in_range:
        team.add(row)
        by_employee.setdefault(row.employeeId, _Accumulator()).add(row)
        by_day.setdefault(row.date, _Accumulator()).add(row)
        day_stack = stacked.setdefault(row.date, {})
        day_stack[row.employeeId] = day_stack.get(row.employeeId, 0) + row.responseCount

    summaries = [
        EmployeeSummary(employeeId=employee_id, name=names.get(employee_id), **acc.measures())
        for employee_id, acc in by_employee.items()
    ]
    summaries.sort(key=lambda s: (-s.responses, s.employeeId))

    days = days_in_range(date_range)
    daily_series = [
        DailyPoint(
            date=day,
            responsesByEmployee=dict(sorted(stacked.get(day, {}).items())),
            **by_day.get(day, _Accumulator()).measures(),
        )
        for day in days
    ]

    heatmap = _build_heatmap([s.employeeId for s in summaries], days, in_range)

    return RollupResult(
        range=date_range,
        teamTotals=TeamTotals(**team.measures()),
        employeeSummaries=summaries,
        dailySeries=daily_series,
        heatmap=heatmap,
        duplicateKeys=duplicates,
    )
