"""Individual set endpoints (ownership is checked through exercise and workout)."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import api_rate_limit, get_current_user, path_uuid
from app.db.session import get_db
from app.models.user import User
from app.models.workout import Workout, WorkoutExercise, WorkoutSet
from app.schemas.common import ApiResponse
from app.schemas.workout import WorkoutSetRead, WorkoutSetUpdate

router = APIRouter()

set_id_path = path_uuid("set_id", "set")


async def get_owned_set(db: AsyncSession, set_id: uuid.UUID, user_id: uuid.UUID) -> WorkoutSet:
    result = await db.execute(
        select(WorkoutSet)
        .join(WorkoutExercise, WorkoutExercise.id == WorkoutSet.workout_exercise_id)
        .join(Workout, Workout.id == WorkoutExercise.workout_id)
        .where(WorkoutSet.id == set_id, Workout.user_id == user_id)
    )
    set_ = result.scalar_one_or_none()
    if not set_:
        raise HTTPException(status_code=404, detail="Set not found")
    return set_


@router.get("/{set_id}", response_model=ApiResponse[WorkoutSetRead])
async def get_set(
    user: User = Depends(get_current_user),
    set_id: uuid.UUID = Depends(set_id_path),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    return ApiResponse(data=WorkoutSetRead.model_validate(await get_owned_set(db, set_id, user.id)))


@router.patch("/{set_id}", response_model=ApiResponse[WorkoutSetRead])
async def update_set(
    payload: WorkoutSetUpdate,
    user: User = Depends(get_current_user),
    set_id: uuid.UUID = Depends(set_id_path),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    """Update weight, reps, RIR (null clears it) or the warmup/dropset flags."""
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=400, detail="No valid fields to update")
    set_ = await get_owned_set(db, set_id, user.id)
    for k, v in data.items():
        setattr(set_, k, v)
    await db.flush()
    return ApiResponse(data=WorkoutSetRead.model_validate(set_), message="Set updated successfully")


@router.delete("/{set_id}", response_model=ApiResponse[None])
async def delete_set(
    user: User = Depends(get_current_user),
    set_id: uuid.UUID = Depends(set_id_path),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    set_ = await get_owned_set(db, set_id, user.id)
    await db.delete(set_)
    await db.flush()
    return ApiResponse(message="Set deleted successfully")
