"""SQLAlchemy ORM models for health records and generated workout plans."""
from datetime import date, datetime
from typing import Any

from sqlalchemy import Integer, Date, DateTime, Float, String, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column

from sync_app.database import Base


class HealthRecordColumns:
    """Columns shared by both health record tables.

    Records are written once (external sync or manual import) and never
    updated in place.
    """

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    period_level: Mapped[float] = mapped_column(Float, nullable=False)
    readiness_score: Mapped[int] = mapped_column(Integer, nullable=False)  # 0-100
    sleep_score: Mapped[int] = mapped_column(Integer, nullable=False)  # 0-100

    # Descriptive fields, mostly filled by manual entry
    weight: Mapped[float | None] = mapped_column(Float, nullable=True)  # lbs
    condition: Mapped[str | None] = mapped_column(String(200), nullable=True)
    athlete_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    symptoms: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "weight": self.weight,
            "condition": self.condition,
            "athlete_type": self.athlete_type,
            "period_level": self.period_level,
            "symptoms": self.symptoms,
            "readiness_score": self.readiness_score,
            "sleep_score": self.sleep_score,
        }


class HealthData(HealthRecordColumns, Base):
    """Original health observations table."""

    __tablename__ = "health_data"


class NewHealthData(HealthRecordColumns, Base):
    """Observations recorded after the user started using Sync."""

    __tablename__ = "new_health_data"


class GeminiOutput(Base):
    """Append-only log of generated workout plans."""

    __tablename__ = "gemini_output"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    generated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    workout_plan: Mapped[dict] = mapped_column(JSON, nullable=False)


RECORD_TABLES: dict[str, type[HealthRecordColumns]] = {
    HealthData.__tablename__: HealthData,
    NewHealthData.__tablename__: NewHealthData,
}
