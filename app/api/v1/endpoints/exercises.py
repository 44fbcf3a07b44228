"""Workout exercise endpoints (ownership is checked through the parent workout)."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.deps import api_rate_limit, get_current_user, path_uuid
from app.db.session import get_db
from app.models.user import User
from app.models.workout import Workout, WorkoutExercise, WorkoutSet
from app.schemas.common import ApiResponse
from app.schemas.workout import (
    WorkoutExerciseRead,
    WorkoutExerciseUpdate,
    WorkoutSetCreate,
    WorkoutSetRead,
)

router = APIRouter()

exercise_id_path = path_uuid("exercise_id", "exercise")


async def get_owned_exercise(db: AsyncSession, exercise_id: uuid.UUID, user_id: uuid.UUID) -> WorkoutExercise:
    result = await db.execute(
        select(WorkoutExercise)
        .join(Workout, Workout.id == WorkoutExercise.workout_id)
        .where(WorkoutExercise.id == exercise_id, Workout.user_id == user_id)
        .options(selectinload(WorkoutExercise.sets))
    )
    exercise = result.scalar_one_or_none()
    if not exercise:
        raise HTTPException(status_code=404, detail="Exercise not found")
    return exercise


@router.get("/{exercise_id}", response_model=ApiResponse[WorkoutExerciseRead])
async def get_exercise(
    user: User = Depends(get_current_user),
    exercise_id: uuid.UUID = Depends(exercise_id_path),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    exercise = await get_owned_exercise(db, exercise_id, user.id)
    return ApiResponse(data=WorkoutExerciseRead.model_validate(exercise))


@router.patch("/{exercise_id}", response_model=ApiResponse[WorkoutExerciseRead])
async def update_exercise(
    payload: WorkoutExerciseUpdate,
    user: User = Depends(get_current_user),
    exercise_id: uuid.UUID = Depends(exercise_id_path),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    """Rename, reorder or annotate an exercise."""
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=400, detail="No valid fields to update")
    exercise = await get_owned_exercise(db, exercise_id, user.id)
    for k, v in data.items():
        setattr(exercise, k, v)
    await db.flush()
    return ApiResponse(data=WorkoutExerciseRead.model_validate(exercise), message="Exercise updated successfully")


@router.delete("/{exercise_id}", response_model=ApiResponse[None])
async def delete_exercise(
    user: User = Depends(get_current_user),
    exercise_id: uuid.UUID = Depends(exercise_id_path),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    """Delete an exercise and its sets."""
    exercise = await get_owned_exercise(db, exercise_id, user.id)
    await db.delete(exercise)
    await db.flush()
    return ApiResponse(message="Exercise deleted successfully")


@router.get("/{exercise_id}/sets", response_model=ApiResponse[list[WorkoutSetRead]])
async def list_sets(
    user: User = Depends(get_current_user),
    exercise_id: uuid.UUID = Depends(exercise_id_path),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    exercise = await get_owned_exercise(db, exercise_id, user.id)
    return ApiResponse(data=[WorkoutSetRead.model_validate(s) for s in exercise.sets])


@router.post("/{exercise_id}/sets", response_model=ApiResponse[WorkoutSetRead], status_code=201)
async def add_set(
    payload: WorkoutSetCreate,
    user: User = Depends(get_current_user),
    exercise_id: uuid.UUID = Depends(exercise_id_path),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    """Log a set for one of the caller's exercises."""
    exercise = await get_owned_exercise(db, exercise_id, user.id)
    set_ = WorkoutSet(workout_exercise_id=exercise.id, **payload.model_dump())
    db.add(set_)
    await db.flush()
    return ApiResponse(data=WorkoutSetRead.model_validate(set_), message="Set added successfully")
