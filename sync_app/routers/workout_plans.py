"""API endpoints for generated 7-day workout plans."""
from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session

from sync_app.database import get_db
from sync_app.models.database_models import GeminiOutput
from sync_app.models.schemas import StoredPlanResponse, WorkoutPlan, WorkoutPlanResponse
from sync_app.services.health_store import HealthRecordStore
from sync_app.services.workout_planner import WorkoutPlanRequester, format_instructions


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/workout-plans", tags=["workout_plans"])


def _latest_or_404(store: HealthRecordStore) -> GeminiOutput:
    entry = store.latest_plan()
    if entry is None:
        raise HTTPException(status_code=404, detail="No workout plan generated yet")
    return entry


def stored_plan_days(entry: GeminiOutput) -> WorkoutPlan:
    """Validate a stored plan blob, treating an unreadable blob as empty."""
    try:
        return WorkoutPlan.model_validate(entry.workout_plan or {})
    except ValidationError:
        logger.warning("Stored workout plan %s does not match the plan schema", entry.id)
        return WorkoutPlan()


@router.post("/generate", response_model=WorkoutPlanResponse)
async def generate_workout_plan(db: Annotated[Session, Depends(get_db)]) -> WorkoutPlanResponse:
    """
    Generate a plan from the full ``health_data`` history and store it.

    A malformed model response yields ``{"days": [], "error": "..."}`` with
    status 200; missing credentials or upstream failures are errors.
    """
    store = HealthRecordStore(db)
    records = store.list_records()
    result = await WorkoutPlanRequester().generate_plan(records, store=store)
    return WorkoutPlanResponse(days=result.plan.days, error=result.error)


@router.get("/latest", response_model=StoredPlanResponse)
async def get_latest_plan(db: Annotated[Session, Depends(get_db)]) -> GeminiOutput:
    """Most recently generated plan."""
    return _latest_or_404(HealthRecordStore(db))


@router.get("/latest/instructions")
async def get_latest_instructions(db: Annotated[Session, Depends(get_db)]) -> dict[str, list[str]]:
    """Narration lines for the latest plan, one per day."""
    plan = stored_plan_days(_latest_or_404(HealthRecordStore(db)))
    return {"instructions": format_instructions(plan)}
