"""
FastAPI router module for CSV exports.

Key Endpoints:
- GET /exports/{dataset}: CSV download of employees, daily, heatmap or
  unanswered data for the selected range

The response is an attachment named {dataset}_{start}_to_{end}.csv with media
type text/csv;charset=utf-8. An empty dataset returns 204 instead of a
header-only file.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Response

from response_metrics.core.dependencies import MetricsSourceDep, NowDep, SettingsDep
from response_metrics.core.exceptions import InvalidRange, SourceReadFailure
from response_metrics.models.enums import ExportDataset, MetricsFeed, RangeAnchor
from response_metrics.services.dashboard import build_export, load_dashboard, load_unanswered
from response_metrics.services.exporter import CSV_MEDIA_TYPE


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{dataset}")
async def export_dataset(
    dataset: ExportDataset,
    source: MetricsSourceDep,
    settings: SettingsDep,
    now: NowDep,
    preset: Optional[int] = Query(default=None, description="Range preset in days"),
    start: Optional[str] = Query(default=None, description="Custom range start (YYYY-MM-DD)"),
    end: Optional[str] = Query(default=None, description="Custom range end (YYYY-MM-DD)"),
    anchor: Optional[RangeAnchor] = Query(default=None, description="Date preset ranges end on"),
    feed: MetricsFeed = Query(default=MetricsFeed.DAILY, description="Row source: daily rollup or tracked emails"),
) -> Response:
    """Export one dataset as CSV."""
    try:
        if dataset == ExportDataset.UNANSWERED:
            result = None
            unanswered = await load_unanswered(source, now=now, settings=settings)
        else:
            result = await load_dashboard(
                source,
                today=now.date(),
                preset=preset,
                start=start,
                end=end,
                anchor=anchor,
                settings=settings,
                feed=feed,
            )
            unanswered = []

        filename, text = build_export(dataset, result, unanswered, today=now.date())

    except InvalidRange as e:
        logger.warning(f"Invalid export range: {e}")
        raise HTTPException(status_code=400, detail=f"Invalid range: {e}")
    except SourceReadFailure as e:
        logger.exception(f"Error loading data for {dataset.value} export")
        raise HTTPException(status_code=502, detail=f"Failed to load metrics: {e}")

    if not text:
        logger.info(f"Nothing to export for {dataset.value}")
        return Response(status_code=204)

    logger.info(f"Exported {filename}")
    return Response(
        content=text,
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
