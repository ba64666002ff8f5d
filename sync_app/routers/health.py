"""Router exposing status and health record endpoints."""
from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sync_app.database import get_db
from sync_app.models.schemas import HealthRecordCreate, HealthRecordResponse
from sync_app.services.health_store import HealthRecordStore


logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/status")
async def get_status() -> dict[str, str]:
    """Return a minimal status payload."""
    return {"status": "online"}


@router.get("/records", response_model=list[HealthRecordResponse])
async def list_health_records(db: Annotated[Session, Depends(get_db)]) -> list[dict[str, Any]]:
    """
    Get all records from ``health_data`` in chronological order.

    Store failures surface as a 500 with ``{"error": "Error loading health data."}``.
    """
    records = HealthRecordStore(db).list_records()
    logger.info("Loaded %d health records", len(records))
    return records


@router.post("/records", response_model=HealthRecordResponse, status_code=201)
async def create_health_record(
    record: HealthRecordCreate,
    db: Annotated[Session, Depends(get_db)],
) -> dict[str, Any]:
    """Insert a manually entered record into the requested table."""
    values = record.model_dump(exclude={"table"})
    return HealthRecordStore(db).add_record(record.table, values)
