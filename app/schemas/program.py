"""Saved program and scheduled workout schemas."""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from app.core.constants import MAX_LENGTHS, MAX_PLAN_WORKOUTS, NUMERIC_BOUNDS
from app.core.enums import ProgramSource, WorkoutStatus
from app.core.validation import (
    validate_date,
    validate_integer,
    validate_optional_string,
    validate_string,
    validate_uuid,
)

PROGRAM_TAG_MAX_LENGTH = 50


def check_plan_object(v: Any) -> Any:
    if not isinstance(v, dict):
        raise ValueError("Plan data must be an object")
    return v


class PlanWorkout(BaseModel):
    """One workout of a program week. Keys beyond these are kept as given."""

    model_config = ConfigDict(extra="allow")

    day: int = 1
    name: str = "Workout"
    focus: str | None = None
    exercises: list[dict[str, Any]] = []

    @field_validator("day", mode="before")
    @classmethod
    def check_day(cls, v: Any) -> int:
        if v is None:
            return 1
        return validate_integer(v, *NUMERIC_BOUNDS["plan_day"])

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, v: Any) -> str:
        if v is None:
            return "Workout"
        return validate_string(v, MAX_LENGTHS["workout_title"])

    @field_validator("focus", mode="before")
    @classmethod
    def check_focus(cls, v: Any) -> str | None:
        return validate_optional_string(v, MAX_LENGTHS["workout_title"])

    @field_validator("exercises", mode="before")
    @classmethod
    def check_exercises(cls, v: Any) -> Any:
        return [] if v is None else v


class PlanData(BaseModel):
    """``{"weeks": n, "workouts": [...]}``; ``weeks`` falls back to the program's."""

    model_config = ConfigDict(extra="allow")

    weeks: int | None = None
    workouts: list[PlanWorkout] = []

    @field_validator("weeks", mode="before")
    @classmethod
    def check_weeks(cls, v: Any) -> int | None:
        if v is None:
            return None
        return validate_integer(v, *NUMERIC_BOUNDS["weeks"])

    @field_validator("workouts", mode="before")
    @classmethod
    def check_workouts(cls, v: Any) -> Any:
        if v is None:
            return []
        if not isinstance(v, list):
            raise ValueError("Workouts must be a list")
        if len(v) > MAX_PLAN_WORKOUTS:
            raise ValueError(f"A plan can have at most {MAX_PLAN_WORKOUTS} workouts")
        return v


class ProgramCreate(BaseModel):
    name: str
    description: str | None = None
    weeks: int = 4
    days_per_week: int
    goal: str | None = None
    experience_level: str | None = None
    equipment: str | None = None
    source: ProgramSource = ProgramSource.MANUAL
    plan_data: PlanData

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, v: Any) -> str:
        return validate_string(v, MAX_LENGTHS["program_name"])

    @field_validator("description", mode="before")
    @classmethod
    def check_description(cls, v: Any) -> str | None:
        return validate_optional_string(v, MAX_LENGTHS["description"])

    @field_validator("weeks", mode="before")
    @classmethod
    def check_weeks(cls, v: Any) -> int:
        return validate_integer(v, *NUMERIC_BOUNDS["weeks"])

    @field_validator("days_per_week", mode="before")
    @classmethod
    def check_days_per_week(cls, v: Any) -> int:
        return validate_integer(v, *NUMERIC_BOUNDS["days_per_week"])

    @field_validator("goal", "experience_level", "equipment", mode="before")
    @classmethod
    def check_tags(cls, v: Any) -> str | None:
        return validate_optional_string(v, PROGRAM_TAG_MAX_LENGTH)

    @field_validator("plan_data", mode="before")
    @classmethod
    def check_plan_data(cls, v: Any) -> Any:
        return check_plan_object(v)


class ProgramUpdate(BaseModel):
    """Partial update. Activating a program deactivates the caller's others."""

    name: str | None = None
    description: str | None = None
    is_active: bool | None = None
    plan_data: PlanData | None = None

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, v: Any) -> str:
        return validate_string(v, MAX_LENGTHS["program_name"])

    @field_validator("description", mode="before")
    @classmethod
    def check_description(cls, v: Any) -> str | None:
        return validate_optional_string(v, MAX_LENGTHS["description"])

    @field_validator("is_active", mode="before")
    @classmethod
    def check_is_active(cls, v: Any) -> bool:
        if not isinstance(v, bool):
            raise ValueError("Value must be true or false")
        return v

    @field_validator("plan_data", mode="before")
    @classmethod
    def check_plan_data(cls, v: Any) -> Any:
        return check_plan_object(v)


class ProgramRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None = None
    weeks: int
    days_per_week: int
    goal: str | None = None
    experience_level: str | None = None
    equipment: str | None = None
    source: ProgramSource
    is_active: bool
    plan_data: dict[str, Any]
    created_at: datetime
    updated_at: datetime


class ScheduleProgramRequest(BaseModel):
    program_id: UUID
    start_date: date

    @field_validator("program_id", mode="before")
    @classmethod
    def check_program_id(cls, v: Any) -> str:
        if v is None or v == "":
            raise ValueError("Program ID is required")
        try:
            return validate_uuid(v)
        except ValueError:
            raise ValueError("Invalid program ID") from None

    @field_validator("start_date", mode="before")
    @classmethod
    def check_start_date(cls, v: Any) -> date:
        if v is None or v == "":
            raise ValueError("Start date is required")
        try:
            return validate_date(v)
        except ValueError:
            raise ValueError("Invalid start date") from None


class ScheduleResult(BaseModel):
    scheduled_count: int
    start_date: date
    end_date: date


class DiscontinueResult(BaseModel):
    deleted_count: int


class ScheduledWorkoutUpdate(BaseModel):
    status: WorkoutStatus | None = None
    completed_workout_id: UUID | None = None

    @field_validator("status", mode="before")
    @classmethod
    def check_status(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("Status cannot be empty")
        return v

    @field_validator("completed_workout_id", mode="before")
    @classmethod
    def check_completed_workout_id(cls, v: Any) -> str | None:
        if v is None:
            return None
        return validate_uuid(v)


class ScheduledWorkoutRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    program_id: UUID | None = None
    title: str
    workout_date: date
    status: WorkoutStatus
    notes: str | None = None
    scheduled_exercises: list[dict[str, Any]] | None = None
    completed_workout_id: UUID | None = None
    created_at: datetime
    updated_at: datetime
