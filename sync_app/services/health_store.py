"""Read/append access to health records and generated plans."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sync_app.exceptions import StoreError
from sync_app.models.database_models import (
    RECORD_TABLES,
    GeminiOutput,
    HealthData,
    HealthRecordColumns,
)


logger = logging.getLogger(__name__)


class HealthRecordStore:
    """Thin query layer over the record tables and the plan log."""

    def __init__(self, db: Session):
        self.db = db

    def _model_for(self, table: str) -> type[HealthRecordColumns]:
        try:
            return RECORD_TABLES[table]
        except KeyError:
            raise ValueError(f"Unknown health record table: {table}") from None

    def _query_ordered(self, table: str) -> list[HealthRecordColumns]:
        model = self._model_for(table)
        try:
            return self.db.query(model).order_by(model.date, model.id).all()
        except SQLAlchemyError as err:
            logger.exception("Error fetching %s", table)
            raise StoreError("Error loading health data.", detail=str(err)) from err

    def list_records(self, table: str = HealthData.__tablename__) -> list[dict[str, Any]]:
        """Return every record of ``table`` ordered by date ascending."""
        return [record.to_dict() for record in self._query_ordered(table)]

    def list_combined(self) -> list[dict[str, Any]]:
        """
        Merge both record tables and sort by date ascending.

        A table that cannot be read is logged and skipped so the other
        table's records are still returned.
        """
        combined: list[HealthRecordColumns] = []
        for table in RECORD_TABLES:
            try:
                combined.extend(self._query_ordered(table))
            except StoreError as err:
                logger.error("Skipping %s in combined view: %s", table, err)
        combined.sort(key=lambda record: record.date)
        return [record.to_dict() for record in combined]

    def add_record(self, table: str, values: dict[str, Any]) -> dict[str, Any]:
        """Insert a new record; records are never updated afterwards."""
        model = self._model_for(table)
        record = model(**values)
        try:
            self.db.add(record)
            self.db.flush()
        except SQLAlchemyError as err:
            self.db.rollback()
            logger.exception("Error inserting into %s", table)
            raise StoreError("Error saving health data.", detail=str(err)) from err
        logger.info("Inserted %s record id=%s date=%s", table, record.id, record.date.isoformat())
        return record.to_dict()

    def save_plan(self, workout_plan: dict[str, Any], generated_at: datetime | None = None) -> GeminiOutput:
        """Append a generated plan to the plan log."""
        entry = GeminiOutput(
            generated_at=generated_at or datetime.utcnow(),
            workout_plan=workout_plan,
        )
        try:
            self.db.add(entry)
            self.db.flush()
        except SQLAlchemyError as err:
            self.db.rollback()
            logger.exception("Error writing workout plan")
            raise StoreError("Error saving workout plan.", detail=str(err)) from err
        return entry

    def latest_plan(self) -> GeminiOutput | None:
        try:
            return (
                self.db.query(GeminiOutput)
                .order_by(GeminiOutput.generated_at.desc(), GeminiOutput.id.desc())
                .first()
            )
        except SQLAlchemyError as err:
            logger.exception("Error fetching latest workout plan")
            raise StoreError("Error loading workout plan.", detail=str(err)) from err
