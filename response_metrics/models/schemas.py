"""
Pydantic models for the Response Metrics service.

This module provides type-safe data validation and serialization for the
input feed (metric rows, employees, tracked emails), the rollup results
(team totals, employee summaries, daily series, heatmap) and the API
response envelopes.

Measures that can be undefined use `Union[NoData, float]` (or `int` for
percentages). The NO_DATA sentinel serializes as "no_data".

All models use Pydantic v2 syntax.
"""

from datetime import datetime, date as DateType
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from response_metrics.models.enums import (
    DeltaEvent,
    NoData,
    RangeAnchor,
    SlaStatus,
)


# Undefined averages and percentages carry NO_DATA instead of 0 or None
Minutes = Union[NoData, float]
Percent = Union[NoData, int]


# =============================================================================
# Input Feed Models
# =============================================================================


class MetricRow(BaseModel):
    """
    One (date, employee) observation from daily_first_responder_metrics.

    avgResponseMinutes is present only when responseCount > 0 in well-formed
    data. breachCount should not exceed responseCount, but the feed does not
    enforce it.
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "date": "2024-01-01",
                "employeeId": "agent@example.com",
                "responseCount": 10,
                "avgResponseMinutes": 5.0,
                "breachCount": 2,
            }
        }
    )

    date: DateType = Field(
        ...,
        description="Calendar day of the observation (partition key)"
    )
    employeeId: str = Field(
        ...,
        min_length=1,
        description="Opaque employee identifier (email address in the source)"
    )
    responseCount: int = Field(
        default=0,
        ge=0,
        description="First responses sent that day"
    )
    avgResponseMinutes: Optional[float] = Field(
        default=None,
        ge=0.0,
        description="Average first-response latency in minutes"
    )
    breachCount: int = Field(
        default=0,
        ge=0,
        description="First responses slower than the SLA target"
    )


class Employee(BaseModel):
    """A client-facing staff member from the employees table."""
    model_config = ConfigDict(frozen=True)

    email: str = Field(..., min_length=1)
    name: Optional[str] = None
    department: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.email


class TrackedEmail(BaseModel):
    """
    An inbound email tracked for first-response latency.

    Answered emails carry firstResponseAt and usually responseTimeMinutes;
    unanswered ones only carry receivedAt.
    """
    id: str
    employeeEmail: Optional[str] = None
    clientEmail: Optional[str] = None
    subject: Optional[str] = None
    receivedAt: datetime
    firstResponseAt: Optional[datetime] = None
    responseTimeMinutes: Optional[float] = None
    slaBreached: Optional[bool] = None
    graphMessageId: Optional[str] = None
    hasResponse: bool = True


class RowDelta(BaseModel):
    """A single change event on the live metrics feed."""
    event: DeltaEvent
    row: MetricRow


# =============================================================================
# Range Model
# =============================================================================


class DateRange(BaseModel):
    """Inclusive calendar window, start <= end."""
    model_config = ConfigDict(frozen=True)

    start: DateType
    end: DateType

    @model_validator(mode='after')
    def _check_order(self) -> 'DateRange':
        if self.start > self.end:
            raise ValueError(f"range start {self.start} is after end {self.end}")
        return self

    @property
    def days(self) -> int:
        """Number of calendar days covered, both ends included."""
        return (self.end - self.start).days + 1


# =============================================================================
# Rollup Result Models
# =============================================================================


class TeamTotals(BaseModel):
    """Team-wide totals over the active range."""
    responses: int = Field(default=0, ge=0)
    breaches: int = Field(default=0, ge=0)
    weightedAvgMinutes: Minutes = Field(
        default=NoData.NO_DATA,
        description="Response-weighted average latency, 1 decimal place"
    )
    slaPercent: Percent = Field(
        default=NoData.NO_DATA,
        description="Share of responses within SLA, integer in [0, 100]"
    )


class EmployeeSummary(TeamTotals):
    """Per-employee totals over the active range."""
    employeeId: str
    name: Optional[str] = None


class DailyPoint(TeamTotals):
    """
    Totals for a single calendar day.

    responsesByEmployee feeds the stacked daily bar chart.
    """
    date: DateType
    responsesByEmployee: Dict[str, int] = Field(default_factory=dict)


class HeatmapMatrix(BaseModel):
    """
    Employee x date breach counts.

    breaches[i][j] and intensity[i][j] refer to employeeIds[i] on dates[j].
    Missing cells are zero.
    """
    employeeIds: List[str] = Field(default_factory=list)
    dates: List[DateType] = Field(default_factory=list)
    breaches: List[List[int]] = Field(default_factory=list)
    intensity: List[List[float]] = Field(default_factory=list)
    maxBreaches: int = 0


class RowKey(BaseModel):
    """A (date, employeeId) key, used to report duplicate feed rows."""
    model_config = ConfigDict(frozen=True)

    date: DateType
    employeeId: str


class RollupResult(BaseModel):
    """
    Everything the dashboard renders for one range.

    range is None when no window could be resolved (for example an empty
    feed anchored on the latest data date).
    """
    range: Optional[DateRange] = None
    teamTotals: TeamTotals = Field(default_factory=TeamTotals)
    employeeSummaries: List[EmployeeSummary] = Field(default_factory=list)
    dailySeries: List[DailyPoint] = Field(default_factory=list)
    heatmap: HeatmapMatrix = Field(default_factory=HeatmapMatrix)
    duplicateKeys: List[RowKey] = Field(default_factory=list)


# =============================================================================
# Unanswered Email Models
# =============================================================================


class UnansweredEmail(BaseModel):
    """An inbound email still waiting for a first response."""
    id: str
    clientEmail: Optional[str] = None
    subject: str = "(No subject)"
    employeeEmail: Optional[str] = None
    receivedAt: datetime
    minutesUnanswered: int
    slaStatus: SlaStatus
    outlookLink: Optional[str] = None


# =============================================================================
# API Response Models
# =============================================================================


class DashboardResponse(RollupResult):
    """Rollup plus the context it was computed in."""
    anchor: RangeAnchor
    anchorDate: Optional[DateType] = None
    slaTargetMinutes: int
