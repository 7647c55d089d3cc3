"""
Dashboard orchestration service.

Chains the rollup stages for one request:

    resolve anchor -> resolve range -> validate -> filter -> aggregate

and provides the async loader that reads rows and the roster from a
MetricsSource first, plus the CSV export builder.

Key Functions:
- build_dashboard: Pure pipeline over already-loaded rows
- read_window: Anchor date and exact window to read from a MetricsSource
- read_rows: Metric rows for a window from the daily or tracked feed
- load_dashboard: Read from a MetricsSource, then build_dashboard
- load_unanswered: Unanswered email list from a MetricsSource
- build_export: (filename, csv text) for an export dataset
"""

import asyncio
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Sequence, Tuple

from response_metrics.core.config import Settings, get_settings
from response_metrics.core.exceptions import InvalidRange
from response_metrics.models.enums import ExportDataset, MetricsFeed, RangeAnchor
from response_metrics.models.schemas import (
    DashboardResponse,
    DateRange,
    Employee,
    MetricRow,
    RollupResult,
    UnansweredEmail,
)
from response_metrics.services.aggregator import aggregate
from response_metrics.services.data_source import MetricsSource
from response_metrics.services.email_activity import build_unanswered, rows_from_tracked_emails
from response_metrics.services.exporter import export_filename, to_delimited_text
from response_metrics.services.formatter import table_for
from response_metrics.services.range_resolver import DateLike, resolve_anchor, resolve_range
from response_metrics.services.row_filter import ensure_valid_range, filter_rows


logger = logging.getLogger(__name__)


# =============================================================================
# Pipeline
# =============================================================================


def rollup_for_range(
    rows: Sequence[MetricRow],
    start: date,
    end: date,
    roster: Sequence[Employee] = ()
) -> RollupResult:
    """
    Filter and aggregate rows for an explicit window.

    Raises:
        InvalidRange: If start is after end.
    """
    ensure_valid_range(start, end)
    return aggregate(filter_rows(rows, start, end), DateRange(start=start, end=end), roster)


def build_dashboard(
    rows: Sequence[MetricRow],
    today: date,
    preset: Optional[int] = None,
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None,
    anchor: Optional[RangeAnchor] = None,
    roster: Sequence[Employee] = (),
    settings: Optional[Settings] = None,
    anchor_date: Optional[date] = None,
) -> DashboardResponse:
    """
    Run the full rollup pipeline over loaded rows.

    Args:
        rows: Loaded metric rows.
        today: Current date as seen by the caller; used by the TODAY anchor.
        preset: Range preset in days.
        start: Custom range lower bound.
        end: Custom range upper bound.
        anchor: Anchor mode; defaults to settings.range_anchor.
        roster: Client-facing employees.
        settings: Defaults to get_settings().
        anchor_date: Anchor already known to the caller (for example the
            newest date in the whole feed). Derived from `rows` when None.

    Returns:
        DashboardResponse. With no resolvable range (empty feed anchored on
        latest data) the range is None and all measures are NO_DATA.

    Raises:
        InvalidRange: For malformed bounds or an unknown preset.
    """
    settings = settings or get_settings()
    mode = anchor or settings.range_anchor

    if anchor_date is None:
        anchor_date = resolve_anchor(rows, mode, today)
    date_range = resolve_range(
        anchor_date,
        preset=preset,
        start=start,
        end=end,
        default_days=settings.default_range_days,
        presets=settings.range_presets,
    )

    if date_range is None:
        logger.info("No data loaded; returning empty dashboard")
        rollup = aggregate([], None, roster)
    else:
        rollup = rollup_for_range(rows, date_range.start, date_range.end, roster)

    return DashboardResponse(
        **dict(rollup),
        anchor=mode,
        anchorDate=anchor_date,
        slaTargetMinutes=settings.sla_target_minutes,
    )


# =============================================================================
# Loading
# =============================================================================


async def read_window(
    source: MetricsSource,
    today: date,
    preset: Optional[int],
    start: Optional[DateLike],
    end: Optional[DateLike],
    mode: RangeAnchor,
    settings: Settings,
    feed: MetricsFeed = MetricsFeed.DAILY,
) -> Tuple[Optional[date], Optional[DateRange]]:
    """
    Anchor date and the exact window of rows to read.

    The LATEST_DATA anchor asks the source for the newest date in the feed, so
    the window is known before any rows are read, however far the feed lags.

    Returns:
        (anchor_date, window). Both are None for an empty feed anchored on
        the latest data, unless a complete custom range was given.

    Raises:
        InvalidRange: For malformed bounds or an unknown preset.
        SourceReadFailure: If the latest-date lookup fails.
    """
    if mode == RangeAnchor.TODAY:
        anchor_date: Optional[date] = today
    else:
        anchor_date = await source.fetch_latest_date(feed)
        logger.debug(f"Latest {feed.value} data date: {anchor_date}")

    window = resolve_range(
        anchor_date,
        preset=preset,
        start=start,
        end=end,
        default_days=settings.default_range_days,
        presets=settings.range_presets,
    )
    return anchor_date, window


async def read_rows(
    source: MetricsSource,
    window: DateRange,
    feed: MetricsFeed = MetricsFeed.DAILY,
    settings: Optional[Settings] = None,
) -> List[MetricRow]:
    """
    Metric rows for `window` from the selected feed.

    TRACKED reads answered emails received in the window (UTC days) and
    folds them into daily rows with the configured SLA target.
    """
    if feed == MetricsFeed.DAILY:
        return await source.fetch_metric_rows(window.start, window.end)

    settings = settings or get_settings()
    since = datetime.combine(window.start, time.min, tzinfo=timezone.utc)
    until = datetime.combine(window.end + timedelta(days=1), time.min, tzinfo=timezone.utc)
    emails = await source.fetch_tracked_emails(since, until)
    rows = rows_from_tracked_emails(emails, sla_target=settings.sla_target_minutes)
    logger.info(f"Folded {len(emails)} tracked emails into {len(rows)} rows")
    return rows


async def load_dashboard(
    source: MetricsSource,
    today: date,
    preset: Optional[int] = None,
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None,
    anchor: Optional[RangeAnchor] = None,
    settings: Optional[Settings] = None,
    feed: MetricsFeed = MetricsFeed.DAILY,
) -> DashboardResponse:
    """
    Read the roster and metric rows, then build the dashboard.

    Raises:
        InvalidRange: For malformed bounds or an unknown preset.
        SourceReadFailure: If any read fails.
    """
    settings = settings or get_settings()
    mode = anchor or settings.range_anchor
    anchor_date, window = await read_window(
        source, today, preset, start, end, mode, settings, feed=feed,
    )

    if window is None:
        employees = await source.fetch_employees()
        rows: List[MetricRow] = []
    else:
        employees, rows = await asyncio.gather(
            source.fetch_employees(),
            read_rows(source, window, feed=feed, settings=settings),
        )
    logger.info(f"Building dashboard from {len(rows)} {feed.value} rows, {len(employees)} employees")

    return build_dashboard(
        rows,
        today=today,
        preset=preset,
        start=start,
        end=end,
        anchor=mode,
        roster=employees,
        settings=settings,
        anchor_date=anchor_date,
    )


async def load_unanswered(
    source: MetricsSource,
    now: datetime,
    settings: Optional[Settings] = None,
) -> List[UnansweredEmail]:
    """Oldest unanswered inbound emails with SLA status."""
    settings = settings or get_settings()
    emails = await source.fetch_unanswered(settings.unanswered_limit)
    return build_unanswered(
        emails,
        now=now,
        sla_target=settings.sla_target_minutes,
        deeplink_base=settings.outlook_deeplink_base,
        limit=settings.unanswered_limit,
    )


# =============================================================================
# Export
# =============================================================================


def build_export(
    dataset: ExportDataset,
    result: Optional[RollupResult],
    unanswered: Sequence[UnansweredEmail] = (),
    today: Optional[date] = None,
) -> Tuple[str, str]:
    """
    Build a CSV download.

    Args:
        dataset: Which result set to export.
        result: Rollup supplying the range and the rollup datasets.
        unanswered: Emails for the UNANSWERED dataset.
        today: Filename date when the rollup has no range.

    Returns:
        (filename, text). text is empty when there is nothing to export.

    Raises:
        InvalidRange: If neither the rollup range nor `today` is available.
    """
    rows, columns = table_for(dataset, result, unanswered)

    if result is not None and result.range is not None:
        start, end = result.range.start, result.range.end
    elif today is not None:
        start = end = today
    else:
        raise InvalidRange("export needs a resolved range")

    return export_filename(dataset, start, end), to_delimited_text(rows, columns)
