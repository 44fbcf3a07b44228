"""Workout CRUD endpoints and per-workout exercise listing."""

from __future__ import annotations

import math
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.deps import api_rate_limit, get_audit_logger, get_current_user, path_uuid, user_rate_limit
from app.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.core.enums import AuditEventType, WorkoutStatus
from app.db.session import get_db
from app.models.user import User
from app.models.workout import Workout, WorkoutExercise
from app.schemas.common import ApiResponse, PaginatedResponse, Pagination
from app.schemas.workout import (
    WorkoutCreate,
    WorkoutExerciseCreate,
    WorkoutExerciseRead,
    WorkoutRead,
    WorkoutUpdate,
)
from app.services import billing
from app.services.audit_log import AuditLogger

router = APIRouter()

SORT_COLUMNS = {
    "workout_date": Workout.workout_date,
    "created_at": Workout.created_at,
    "title": Workout.title,
}

workout_id_path = path_uuid("workout_id", "workout")


async def get_owned_workout(
    db: AsyncSession, workout_id: uuid.UUID, user_id: uuid.UUID, with_exercises: bool = True
) -> Workout:
    stmt = select(Workout).where(Workout.id == workout_id, Workout.user_id == user_id)
    if with_exercises:
        stmt = stmt.options(selectinload(Workout.exercises).selectinload(WorkoutExercise.sets))
    result = await db.execute(stmt)
    workout = result.scalar_one_or_none()
    if not workout:
        raise HTTPException(status_code=404, detail="Workout not found")
    return workout


@router.get("", response_model=PaginatedResponse[list[WorkoutRead]])
async def list_workouts(
    user: User = Depends(get_current_user),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
    page: int = Query(1),
    page_size: int = Query(DEFAULT_PAGE_SIZE),
    status: str | None = None,
    sort_by: str = "workout_date",
    sort_order: str = "desc",
):
    """List the caller's workouts with exercises and sets, paginated."""
    page = max(1, page)
    page_size = min(MAX_PAGE_SIZE, max(1, page_size))
    filters = [Workout.user_id == user.id]
    if status in {s.value for s in WorkoutStatus}:
        filters.append(Workout.status == status)

    total = (await db.execute(select(func.count(Workout.id)).where(*filters))).scalar_one()

    column = SORT_COLUMNS.get(sort_by, Workout.workout_date)
    order = column.asc() if sort_order == "asc" else column.desc()
    result = await db.execute(
        select(Workout)
        .where(*filters)
        .options(selectinload(Workout.exercises).selectinload(WorkoutExercise.sets))
        .order_by(order, Workout.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    workouts = result.scalars().all()
    return PaginatedResponse(
        data=[WorkoutRead.model_validate(w) for w in workouts],
        pagination=Pagination(
            page=page,
            page_size=page_size,
            total=total,
            total_pages=math.ceil(total / page_size) if total else 0,
        ),
    )


@router.post("", response_model=ApiResponse[WorkoutRead], status_code=201)
async def create_workout(
    payload: WorkoutCreate,
    request: Request,
    user: User = Depends(get_current_user),
    _rate=Depends(user_rate_limit("workout_create")),
    db: AsyncSession = Depends(get_db),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Log a completed workout, subject to the plan's monthly quota."""
    quota = await billing.get_workout_quota(db, user.id)
    if not quota.can_create:
        raise HTTPException(status_code=429, detail=billing.quota_exceeded_message(quota))

    workout = Workout(
        user_id=user.id,
        title=payload.title,
        notes=payload.notes,
        workout_date=payload.workout_date,
        duration_minutes=payload.duration_minutes,
        status=WorkoutStatus.COMPLETED.value,
        exercises=[],
    )
    db.add(workout)
    await db.flush()
    await billing.increment_monthly_usage(db, user.id)

    await audit.log_event(
        AuditEventType.WORKOUT_CREATED,
        user_id=user.id,
        request=request,
        metadata={"workout_id": str(workout.id), "workout_date": payload.workout_date.isoformat()},
    )
    return ApiResponse(data=WorkoutRead.model_validate(workout), message="Workout created successfully")


@router.get("/{workout_id}", response_model=ApiResponse[WorkoutRead])
async def get_workout(
    user: User = Depends(get_current_user),
    workout_id: uuid.UUID = Depends(workout_id_path),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    """Workout with exercises (by order_index) and their sets (by set_number)."""
    workout = await get_owned_workout(db, workout_id, user.id)
    return ApiResponse(data=WorkoutRead.model_validate(workout))


@router.patch("/{workout_id}", response_model=ApiResponse[WorkoutRead])
async def update_workout(
    payload: WorkoutUpdate,
    user: User = Depends(get_current_user),
    workout_id: uuid.UUID = Depends(workout_id_path),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    """Update title, notes, date, status or duration."""
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=400, detail="No valid fields to update")
    workout = await get_owned_workout(db, workout_id, user.id)
    for k, v in data.items():
        setattr(workout, k, v.value if isinstance(v, WorkoutStatus) else v)
    workout.updated_at = datetime.now(timezone.utc)
    await db.flush()
    return ApiResponse(data=WorkoutRead.model_validate(workout), message="Workout updated successfully")


@router.delete("/{workout_id}", response_model=ApiResponse[None])
async def delete_workout(
    request: Request,
    user: User = Depends(get_current_user),
    workout_id: uuid.UUID = Depends(workout_id_path),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Delete a workout with its exercises and sets."""
    workout = await get_owned_workout(db, workout_id, user.id)
    await db.delete(workout)
    await db.flush()
    await audit.log_event(
        AuditEventType.WORKOUT_DELETED,
        user_id=user.id,
        request=request,
        metadata={"workout_id": str(workout_id)},
    )
    return ApiResponse(message="Workout deleted successfully")


@router.get("/{workout_id}/exercises", response_model=ApiResponse[list[WorkoutExerciseRead]])
async def list_workout_exercises(
    user: User = Depends(get_current_user),
    workout_id: uuid.UUID = Depends(workout_id_path),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    workout = await get_owned_workout(db, workout_id, user.id)
    return ApiResponse(data=[WorkoutExerciseRead.model_validate(e) for e in workout.exercises])


@router.post("/{workout_id}/exercises", response_model=ApiResponse[WorkoutExerciseRead], status_code=201)
async def add_exercise(
    payload: WorkoutExerciseCreate,
    user: User = Depends(get_current_user),
    workout_id: uuid.UUID = Depends(workout_id_path),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    """Add an exercise to one of the caller's workouts."""
    workout = await get_owned_workout(db, workout_id, user.id, with_exercises=False)
    exercise = WorkoutExercise(
        workout_id=workout.id,
        exercise_name=payload.exercise_name,
        order_index=payload.order_index,
        notes=payload.notes,
        sets=[],
    )
    db.add(exercise)
    await db.flush()
    return ApiResponse(data=WorkoutExerciseRead.model_validate(exercise), message="Exercise added successfully")
