"""Pydantic models describing API payloads and the workout plan contract."""
from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class HealthRecordBase(BaseModel):
    """Fields supplied when a health record is created."""

    date: date
    period_level: float = Field(ge=0)
    readiness_score: int = Field(ge=0, le=100)
    sleep_score: int = Field(ge=0, le=100)
    weight: float | None = Field(default=None, gt=0)
    condition: str | None = None
    athlete_type: str | None = None
    symptoms: str | None = None


class HealthRecordCreate(HealthRecordBase):
    """Schema for inserting a record into one of the record tables."""

    table: Literal["health_data", "new_health_data"] = "health_data"


class HealthRecordResponse(HealthRecordBase):
    """Schema for a stored health record."""

    id: int

    model_config = ConfigDict(from_attributes=True)


# Workout plan contract. Generated text is loosely typed: numbers are accepted
# where strings are expected and unknown keys are kept. Null fields take their default.
class _GeneratedModel(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True, extra="allow")

    @model_validator(mode="before")
    @classmethod
    def null_fields_use_defaults(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None or key not in cls.model_fields}
        return data


class WorkoutItem(_GeneratedModel):
    name: str = ""
    duration: str = ""


class WorkoutDayPlan(_GeneratedModel):
    day: str = ""
    focus: str = ""
    workouts: list[WorkoutItem] = []
    notes: str = ""


class WorkoutPlan(BaseModel):
    """Plan returned by the generative endpoint; seven days expected, not enforced."""

    model_config = ConfigDict(extra="allow")

    days: list[WorkoutDayPlan] = []


class WorkoutPlanResponse(BaseModel):
    """Result of a plan generation request."""

    days: list[WorkoutDayPlan] = []
    error: str | None = None


class StoredPlanResponse(BaseModel):
    id: int
    generated_at: datetime
    workout_plan: dict[str, Any]

    model_config = ConfigDict(from_attributes=True)


class InsightResponse(BaseModel):
    insights: str


class SpeakRequest(BaseModel):
    textToSpeak: str = Field(min_length=1)


class SpeakResponse(BaseModel):
    audioContent: str


class PlaybackRequest(BaseModel):
    """Optional audio duration reported by the player, in seconds."""

    duration: float | None = Field(default=None, gt=0)


class PlaybackSessionResponse(BaseModel):
    session_id: str
    state: str
    progress: int
    current_index: int
    instruction: str | None = None
    instruction_count: int
    error: str | None = None
    audioContent: str | None = None
