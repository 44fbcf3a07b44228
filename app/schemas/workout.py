"""Workout, WorkoutExercise and WorkoutSet schemas."""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from app.core.constants import MAX_LENGTHS, NUMERIC_BOUNDS
from app.core.enums import WorkoutStatus
from app.core.validation import (
    validate_date,
    validate_integer,
    validate_number,
    validate_optional_string,
    validate_string,
)

SET_NOTES_MAX_LENGTH = 500


def _optional_int(v: Any, bounds: str) -> int | None:
    if v is None:
        return None
    return validate_integer(v, *NUMERIC_BOUNDS[bounds])


# ── Sets ──


class WorkoutSetCreate(BaseModel):
    set_number: int
    weight: float
    reps: int
    rir: int | None = None
    rpe: float | None = None
    is_warmup: bool = False
    is_dropset: bool = False
    notes: str | None = None

    @field_validator("set_number", mode="before")
    @classmethod
    def check_set_number(cls, v: Any) -> int:
        return validate_integer(v, *NUMERIC_BOUNDS["sets"])

    @field_validator("weight", mode="before")
    @classmethod
    def check_weight(cls, v: Any) -> float:
        return validate_number(v, *NUMERIC_BOUNDS["weight"], allow_decimals=True)

    @field_validator("reps", mode="before")
    @classmethod
    def check_reps(cls, v: Any) -> int:
        return validate_integer(v, *NUMERIC_BOUNDS["reps"])

    @field_validator("rir", mode="before")
    @classmethod
    def check_rir(cls, v: Any) -> int | None:
        return _optional_int(v, "rir")

    @field_validator("rpe", mode="before")
    @classmethod
    def check_rpe(cls, v: Any) -> float | None:
        if v is None:
            return None
        return validate_number(v, *NUMERIC_BOUNDS["rpe"], allow_decimals=True)

    @field_validator("notes", mode="before")
    @classmethod
    def check_notes(cls, v: Any) -> str | None:
        return validate_optional_string(v, SET_NOTES_MAX_LENGTH)


class WorkoutSetUpdate(BaseModel):
    """Partial update; ``rir`` may be set to null to clear it."""

    weight: float | None = None
    reps: int | None = None
    rir: int | None = None
    is_warmup: bool | None = None
    is_dropset: bool | None = None

    @field_validator("weight", mode="before")
    @classmethod
    def check_weight(cls, v: Any) -> float:
        return validate_number(v, *NUMERIC_BOUNDS["weight"], allow_decimals=True)

    @field_validator("reps", mode="before")
    @classmethod
    def check_reps(cls, v: Any) -> int:
        return validate_integer(v, *NUMERIC_BOUNDS["reps"])

    @field_validator("rir", mode="before")
    @classmethod
    def check_rir(cls, v: Any) -> int | None:
        return _optional_int(v, "rir")

    @field_validator("is_warmup", "is_dropset", mode="before")
    @classmethod
    def check_flags(cls, v: Any) -> bool:
        if not isinstance(v, bool):
            raise ValueError("Value must be true or false")
        return v


class WorkoutSetRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    workout_exercise_id: UUID
    set_number: int
    weight: float
    reps: int
    rir: int | None = None
    rpe: float | None = None
    is_warmup: bool = False
    is_dropset: bool = False
    notes: str | None = None
    created_at: datetime


# ── Exercises ──


class WorkoutExerciseCreate(BaseModel):
    exercise_name: str
    order_index: int = 0
    notes: str | None = None

    @field_validator("exercise_name", mode="before")
    @classmethod
    def check_exercise_name(cls, v: Any) -> str:
        return validate_string(v, MAX_LENGTHS["exercise_name"])

    @field_validator("order_index", mode="before")
    @classmethod
    def check_order_index(cls, v: Any) -> int:
        return validate_integer(v, *NUMERIC_BOUNDS["order_index"])

    @field_validator("notes", mode="before")
    @classmethod
    def check_notes(cls, v: Any) -> str | None:
        return validate_optional_string(v, MAX_LENGTHS["notes"])


class WorkoutExerciseUpdate(BaseModel):
    exercise_name: str | None = None
    order_index: int | None = None
    notes: str | None = None

    @field_validator("exercise_name", mode="before")
    @classmethod
    def check_exercise_name(cls, v: Any) -> str:
        return validate_string(v, MAX_LENGTHS["exercise_name"])

    @field_validator("order_index", mode="before")
    @classmethod
    def check_order_index(cls, v: Any) -> int:
        return validate_integer(v, *NUMERIC_BOUNDS["order_index"])

    @field_validator("notes", mode="before")
    @classmethod
    def check_notes(cls, v: Any) -> str | None:
        return validate_optional_string(v, MAX_LENGTHS["notes"])


class WorkoutExerciseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    workout_id: UUID
    exercise_name: str
    order_index: int
    notes: str | None = None
    created_at: datetime
    sets: list[WorkoutSetRead] = []


# ── Workouts ──


class WorkoutCreate(BaseModel):
    title: str
    notes: str | None = None
    workout_date: date
    duration_minutes: int | None = None

    @field_validator("title", mode="before")
    @classmethod
    def check_title(cls, v: Any) -> str:
        return validate_string(v, MAX_LENGTHS["workout_title"])

    @field_validator("notes", mode="before")
    @classmethod
    def check_notes(cls, v: Any) -> str | None:
        return validate_optional_string(v, MAX_LENGTHS["notes"])

    @field_validator("workout_date", mode="before")
    @classmethod
    def check_workout_date(cls, v: Any) -> date:
        return validate_date(v)

    @field_validator("duration_minutes", mode="before")
    @classmethod
    def check_duration(cls, v: Any) -> int | None:
        return _optional_int(v, "duration")


class WorkoutUpdate(BaseModel):
    """Partial update; ``notes`` set to null or "" clears it."""

    title: str | None = None
    notes: str | None = None
    workout_date: date | None = None
    status: WorkoutStatus | None = None
    duration_minutes: int | None = None

    @field_validator("title", mode="before")
    @classmethod
    def check_title(cls, v: Any) -> str:
        return validate_string(v, MAX_LENGTHS["workout_title"])

    @field_validator("notes", mode="before")
    @classmethod
    def check_notes(cls, v: Any) -> str | None:
        return validate_optional_string(v, MAX_LENGTHS["notes"])

    @field_validator("workout_date", mode="before")
    @classmethod
    def check_workout_date(cls, v: Any) -> date:
        return validate_date(v)

    @field_validator("status", mode="before")
    @classmethod
    def check_status(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("Status cannot be empty")
        return v

    @field_validator("duration_minutes", mode="before")
    @classmethod
    def check_duration(cls, v: Any) -> int | None:
        return _optional_int(v, "duration")


class WorkoutRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    notes: str | None = None
    workout_date: date
    duration_minutes: int | None = None
    status: WorkoutStatus
    created_at: datetime
    updated_at: datetime
    exercises: list[WorkoutExerciseRead] = []
