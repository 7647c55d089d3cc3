"""
FastAPI router module for dashboard endpoints.

Key Endpoints:
- GET /dashboard: KPI totals, employee summaries, daily series and heatmap
- GET /unanswered: Inbound emails still waiting for a first response

Query Parameters (GET /dashboard):
- preset: Range preset in days (7, 14, 30, 60 by default)
- start / end: Custom range bounds, ISO 8601 dates
- anchor: 'latest_data' or 'today'; defaults to the configured anchor
- feed: 'daily' (precomputed rollup, default) or 'tracked' (answered tracked
  emails rolled up on read)

Error Mapping:
- InvalidRange -> 400
- SourceReadFailure -> 502
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from response_metrics.core.dependencies import MetricsSourceDep, NowDep, SettingsDep
from response_metrics.core.exceptions import InvalidRange, SourceReadFailure
from response_metrics.models.enums import MetricsFeed, RangeAnchor
from response_metrics.models.schemas import DashboardResponse, UnansweredEmail
from response_metrics.services.dashboard import load_dashboard, load_unanswered


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    source: MetricsSourceDep,
    settings: SettingsDep,
    now: NowDep,
    preset: Optional[int] = Query(default=None, description="Range preset in days"),
    start: Optional[str] = Query(default=None, description="Custom range start (YYYY-MM-DD)"),
    end: Optional[str] = Query(default=None, description="Custom range end (YYYY-MM-DD)"),
    anchor: Optional[RangeAnchor] = Query(default=None, description="Date preset ranges end on"),
    feed: MetricsFeed = Query(default=MetricsFeed.DAILY, description="Row source: daily rollup or tracked emails"),
) -> DashboardResponse:
    """
    Dashboard rollup for the selected range.

    With the latest_data anchor and an empty feed, range is null and every
    measure is "no_data".
    """
    try:
        response = await load_dashboard(
            source,
            today=now.date(),
            preset=preset,
            start=start,
            end=end,
            anchor=anchor,
            settings=settings,
            feed=feed,
        )
        logger.info(
            f"Dashboard built for {response.range.start if response.range else None}"
            f"..{response.range.end if response.range else None}"
        )
        return response

    except InvalidRange as e:
        logger.warning(f"Invalid range requested: {e}")
        raise HTTPException(status_code=400, detail=f"Invalid range: {e}")
    except SourceReadFailure as e:
        logger.exception("Error loading dashboard data")
        raise HTTPException(status_code=502, detail=f"Failed to load metrics: {e}")


@router.get("/unanswered", response_model=List[UnansweredEmail])
async def get_unanswered(
    source: MetricsSourceDep,
    settings: SettingsDep,
    now: NowDep,
) -> List[UnansweredEmail]:
    """Oldest unanswered inbound emails with minutes waited and SLA status."""
    try:
        emails = await load_unanswered(source, now=now, settings=settings)
        logger.info(f"Listed {len(emails)} unanswered emails")
        return emails

    except SourceReadFailure as e:
        logger.exception("Error loading unanswered emails")
        raise HTTPException(status_code=502, detail=f"Failed to load unanswered emails: {e}")
