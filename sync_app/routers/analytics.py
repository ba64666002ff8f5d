"""API endpoints for readiness analytics, insights and CSV export."""
from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from sync_app.config import get_settings
from sync_app.database import get_db
from sync_app.exceptions import InvalidInputError
from sync_app.models.schemas import InsightResponse
from sync_app.services.cohort import split_cohorts, split_start_date
from sync_app.services.csv_export import CSV_FILENAME, export_csv
from sync_app.services.formatting import round_half_up, to_number
from sync_app.services.health_store import HealthRecordStore
from sync_app.services.insight_client import InsightClient


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["analytics"])

_CHART_FIELDS = ("period_level", "readiness_score", "sleep_score")


@router.get("/records")
async def get_combined_records(db: Annotated[Session, Depends(get_db)]) -> list[dict[str, Any]]:
    """Records from both tables merged and sorted by date."""
    return HealthRecordStore(db).list_combined()


@router.get("/trends")
async def get_trends(db: Annotated[Session, Depends(get_db)]) -> dict[str, Any]:
    """
    Chart series for readiness, sleep and period level.

    Returns:
        dict: {
            "records": records with numeric chart fields,
            "sync_start_date": date of the first record after the split or None,
            "split_index": int,
            "average_readiness_before": float,
            "average_readiness_after": float
        }
    """
    split_index = get_settings().sync_start_index
    records = HealthRecordStore(db).list_combined()
    series = [
        {**record, **{name: to_number(record.get(name)) for name in _CHART_FIELDS}}
        for record in records
    ]
    cohorts = split_cohorts(series, split_index)
    avg_before, avg_after = cohorts.averages("readiness_score")
    return {
        "records": series,
        "sync_start_date": split_start_date(series, split_index),
        "split_index": cohorts.split_index,
        "average_readiness_before": float(round_half_up(avg_before)),
        "average_readiness_after": float(round_half_up(avg_after)),
    }


@router.get("/export.csv")
async def export_records_csv(db: Annotated[Session, Depends(get_db)]) -> Response:
    """Download the combined records as ``health_data.csv``."""
    content = export_csv(HealthRecordStore(db).list_combined())
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{CSV_FILENAME}"'},
    )


@router.post("/insights", response_model=InsightResponse)
async def generate_insights(payload: Annotated[Any, Body()]) -> dict[str, str]:
    """
    Compare readiness before and after the user started using Sync.

    The body is ``{"data": [record, ...]}`` with records ordered by date.
    Upstream failures return ``{"error": "Perplexity API error", "detail": "<raw body>"}``.
    """
    logger.info("[POST /api/analytics/insights] invoked")
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise InvalidInputError("No valid data array")

    insights = await InsightClient().insights_for_records(data)
    return {"insights": insights}
