"""Calendar of scheduled (planned) workouts."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import api_rate_limit, get_current_user, path_uuid
from app.core.enums import WorkoutStatus
from app.core.validation import validate_date_string
from app.db.session import get_db
from app.models.program import ScheduledWorkout
from app.models.user import User
from app.models.workout import Workout
from app.schemas.common import ApiResponse
from app.schemas.program import ScheduledWorkoutRead, ScheduledWorkoutUpdate

router = APIRouter()

scheduled_id_path = path_uuid("scheduled_id", "scheduled workout")


async def get_owned_scheduled(db: AsyncSession, scheduled_id: uuid.UUID, user_id: uuid.UUID) -> ScheduledWorkout:
    result = await db.execute(
        select(ScheduledWorkout).where(ScheduledWorkout.id == scheduled_id, ScheduledWorkout.user_id == user_id)
    )
    scheduled = result.scalar_one_or_none()
    if not scheduled:
        raise HTTPException(status_code=404, detail="Scheduled workout not found")
    return scheduled


@router.get("", response_model=ApiResponse[list[ScheduledWorkoutRead]])
async def list_scheduled_workouts(
    user: User = Depends(get_current_user),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
    start: str | None = None,
    end: str | None = None,
):
    """Scheduled workouts in date order, optionally within [start, end] (YYYY-MM-DD)."""
    stmt = select(ScheduledWorkout).where(ScheduledWorkout.user_id == user.id)
    try:
        if start:
            stmt = stmt.where(ScheduledWorkout.workout_date >= validate_date_string(start))
        if end:
            stmt = stmt.where(ScheduledWorkout.workout_date <= validate_date_string(end))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid date range: {e}") from None
    result = await db.execute(stmt.order_by(ScheduledWorkout.workout_date.asc(), ScheduledWorkout.created_at.asc()))
    return ApiResponse(data=[ScheduledWorkoutRead.model_validate(s) for s in result.scalars().all()])


@router.get("/{scheduled_id}", response_model=ApiResponse[ScheduledWorkoutRead])
async def get_scheduled_workout(
    user: User = Depends(get_current_user),
    scheduled_id: uuid.UUID = Depends(scheduled_id_path),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    scheduled = await get_owned_scheduled(db, scheduled_id, user.id)
    return ApiResponse(data=ScheduledWorkoutRead.model_validate(scheduled))


@router.patch("/{scheduled_id}", response_model=ApiResponse[ScheduledWorkoutRead])
async def update_scheduled_workout(
    payload: ScheduledWorkoutUpdate,
    user: User = Depends(get_current_user),
    scheduled_id: uuid.UUID = Depends(scheduled_id_path),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    """Change status, or link the workout that fulfilled it (which marks it completed)."""
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=400, detail="No valid fields to update")
    scheduled = await get_owned_scheduled(db, scheduled_id, user.id)

    if "status" in data:
        scheduled.status = data["status"].value
    if "completed_workout_id" in data:
        workout_id = data["completed_workout_id"]
        if workout_id is not None:
            owned = await db.execute(
                select(Workout.id).where(Workout.id == workout_id, Workout.user_id == user.id)
            )
            if owned.scalar_one_or_none() is None:
                raise HTTPException(status_code=404, detail="Workout not found")
            scheduled.status = WorkoutStatus.COMPLETED.value
        scheduled.completed_workout_id = workout_id
    scheduled.updated_at = datetime.now(timezone.utc)
    await db.flush()
    return ApiResponse(data=ScheduledWorkoutRead.model_validate(scheduled))


@router.delete("/{scheduled_id}", response_model=ApiResponse[None])
async def delete_scheduled_workout(
    user: User = Depends(get_current_user),
    scheduled_id: uuid.UUID = Depends(scheduled_id_path),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    scheduled = await get_owned_scheduled(db, scheduled_id, user.id)
    await db.delete(scheduled)
    await db.flush()
    return ApiResponse(message="Scheduled workout deleted successfully")
