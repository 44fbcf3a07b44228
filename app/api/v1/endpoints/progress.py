"""Progress analytics: personal records, training volume and streaks."""

from __future__ import annotations

from datetime import date, timedelta

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import api_rate_limit, get_current_user
from app.core.constants import (
    DEFAULT_PR_LIMIT,
    DEFAULT_VOLUME_DAYS,
    MAX_PR_LIMIT,
    MAX_VOLUME_DAYS,
    MIN_VOLUME_DAYS,
)
from app.core.enums import WorkoutStatus
from app.db.session import get_db
from app.models.user import User
from app.models.workout import Workout, WorkoutExercise, WorkoutSet
from app.schemas.common import ApiResponse
from app.schemas.progress import PersonalRecord, StreakStats, VolumeReport
from app.services.progress import SetRow, personal_records, streak_stats, volume_by_day

router = APIRouter()

# Only sessions that actually happened count toward volume and streaks
TRAINED_STATUSES = (WorkoutStatus.COMPLETED.value, WorkoutStatus.IN_PROGRESS.value)


def _set_rows_query(user_id):
    return (
        select(
            Workout.id.label("workout_id"),
            Workout.workout_date,
            WorkoutExercise.exercise_name,
            WorkoutSet.weight,
            WorkoutSet.reps,
        )
        .join(WorkoutExercise, WorkoutExercise.id == WorkoutSet.workout_exercise_id)
        .join(Workout, Workout.id == WorkoutExercise.workout_id)
        .where(Workout.user_id == user_id)
    )


def _to_rows(result) -> list[SetRow]:
    return [
        SetRow(
            workout_id=r.workout_id,
            workout_date=r.workout_date,
            exercise_name=r.exercise_name,
            weight=float(r.weight or 0),
            reps=int(r.reps or 0),
        )
        for r in result.all()
    ]


@router.get("/prs", response_model=ApiResponse[list[PersonalRecord]])
async def get_personal_records(
    user: User = Depends(get_current_user),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
    exercise: str | None = None,
    limit: int = Query(DEFAULT_PR_LIMIT),
):
    """Heaviest set per exercise, heaviest first. ``exercise`` filters by substring."""
    limit = min(MAX_PR_LIMIT, max(1, limit))
    result = await db.execute(_set_rows_query(user.id).order_by(WorkoutSet.weight.desc()))
    return ApiResponse(data=personal_records(_to_rows(result), exercise_filter=exercise, limit=limit))


@router.get("/volume", response_model=ApiResponse[VolumeReport])
async def get_volume(
    user: User = Depends(get_current_user),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
    days: int = Query(DEFAULT_VOLUME_DAYS),
    exercise: str | None = None,
):
    """Daily volume over the last ``days`` days (clamped to 7-365) with a summary."""
    days = min(MAX_VOLUME_DAYS, max(MIN_VOLUME_DAYS, days))
    today = date.today()
    stmt = _set_rows_query(user.id).where(
        Workout.status.in_(TRAINED_STATUSES),
        Workout.workout_date >= today - timedelta(days=days),
        Workout.workout_date <= today,
    )
    if exercise:
        stmt = stmt.where(WorkoutExercise.exercise_name.icontains(exercise, autoescape=True))
    result = await db.execute(stmt.order_by(Workout.workout_date.asc()))
    return ApiResponse(data=volume_by_day(_to_rows(result), period_days=days))


@router.get("/streaks", response_model=ApiResponse[StreakStats])
async def get_streaks(
    user: User = Depends(get_current_user),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    """Current and longest streaks (one rest day allowed) plus recent counts."""
    result = await db.execute(
        select(Workout.workout_date)
        .where(Workout.user_id == user.id, Workout.status.in_(TRAINED_STATUSES))
        .distinct()
        .order_by(Workout.workout_date.desc())
    )
    return ApiResponse(data=streak_stats(result.scalars().all(), today=date.today()))
