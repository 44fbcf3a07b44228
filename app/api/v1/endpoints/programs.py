"""Saved training programs: CRUD, scheduling onto the calendar, discontinuing."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import api_rate_limit, get_current_user, path_uuid
from app.core.enums import WorkoutStatus
from app.db.session import get_db
from app.models.program import SavedProgram, ScheduledWorkout
from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.program import (
    DiscontinueResult,
    PlanData,
    ProgramCreate,
    ProgramRead,
    ProgramUpdate,
    ScheduleProgramRequest,
    ScheduleResult,
)
from app.services.programs import build_schedule

router = APIRouter()

program_id_path = path_uuid("program_id", "program")

OPEN_STATUSES = (WorkoutStatus.PLANNED.value, WorkoutStatus.IN_PROGRESS.value)


async def get_owned_program(db: AsyncSession, program_id: uuid.UUID, user_id: uuid.UUID) -> SavedProgram:
    result = await db.execute(
        select(SavedProgram).where(SavedProgram.id == program_id, SavedProgram.user_id == user_id)
    )
    program = result.scalar_one_or_none()
    if not program:
        raise HTTPException(status_code=404, detail="Program not found")
    return program


@router.get("", response_model=ApiResponse[list[ProgramRead]])
async def list_programs(
    user: User = Depends(get_current_user),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(SavedProgram).where(SavedProgram.user_id == user.id).order_by(SavedProgram.created_at.desc())
    )
    return ApiResponse(data=[ProgramRead.model_validate(p) for p in result.scalars().all()])


@router.post("", response_model=ApiResponse[ProgramRead], status_code=201)
async def create_program(
    payload: ProgramCreate,
    user: User = Depends(get_current_user),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    """Save a program. ``plan_data`` keys beyond the known plan fields are stored as given."""
    data = payload.model_dump(exclude={"plan_data"})
    data["plan_data"] = payload.plan_data.model_dump(exclude_unset=True)
    data["source"] = payload.source.value
    program = SavedProgram(user_id=user.id, is_active=False, **data)
    db.add(program)
    await db.flush()
    return ApiResponse(data=ProgramRead.model_validate(program), message="Program saved successfully")


@router.post("/schedule", response_model=ApiResponse[ScheduleResult], status_code=201)
async def schedule_program(
    payload: ScheduleProgramRequest,
    user: User = Depends(get_current_user),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    """Create one planned calendar entry per plan workout per week and activate the program."""
    program = await get_owned_program(db, payload.program_id, user.id)
    if program.is_active:
        raise HTTPException(
            status_code=400,
            detail="This program is already active. Discontinue it first if you want to restart.",
        )
    try:
        plan = PlanData.model_validate(program.plan_data)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Program plan is invalid") from None
    if not plan.workouts:
        raise HTTPException(status_code=400, detail="Program has no workouts")

    entries = build_schedule(program.name, plan, payload.start_date, program.weeks)
    db.add_all(
        ScheduledWorkout(
            user_id=user.id,
            program_id=program.id,
            status=WorkoutStatus.PLANNED.value,
            **entry,
        )
        for entry in entries
    )
    program.is_active = True
    program.updated_at = datetime.now(timezone.utc)
    await db.flush()

    return ApiResponse(
        data=ScheduleResult(
            scheduled_count=len(entries),
            start_date=payload.start_date,
            end_date=max(e["workout_date"] for e in entries),
        ),
        message=f"Scheduled {len(entries)} workouts",
    )


@router.get("/{program_id}", response_model=ApiResponse[ProgramRead])
async def get_program(
    user: User = Depends(get_current_user),
    program_id: uuid.UUID = Depends(program_id_path),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    return ApiResponse(data=ProgramRead.model_validate(await get_owned_program(db, program_id, user.id)))


@router.patch("/{program_id}", response_model=ApiResponse[ProgramRead])
async def update_program(
    payload: ProgramUpdate,
    user: User = Depends(get_current_user),
    program_id: uuid.UUID = Depends(program_id_path),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    """Update name, description, plan or active flag."""
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=400, detail="No valid fields to update")
    program = await get_owned_program(db, program_id, user.id)
    if data.get("is_active"):
        await db.execute(
            update(SavedProgram)
            .where(SavedProgram.user_id == user.id, SavedProgram.id != program.id)
            .values(is_active=False)
        )
    for k, v in data.items():
        setattr(program, k, v)
    program.updated_at = datetime.now(timezone.utc)
    await db.flush()
    return ApiResponse(data=ProgramRead.model_validate(program), message="Program updated successfully")


@router.delete("/{program_id}", response_model=ApiResponse[None])
async def delete_program(
    user: User = Depends(get_current_user),
    program_id: uuid.UUID = Depends(program_id_path),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    """Delete a program. Already scheduled workouts stay on the calendar."""
    program = await get_owned_program(db, program_id, user.id)
    await db.execute(
        update(ScheduledWorkout).where(ScheduledWorkout.program_id == program.id).values(program_id=None)
    )
    await db.delete(program)
    await db.flush()
    return ApiResponse(message="Program deleted successfully")


@router.post("/{program_id}/discontinue", response_model=ApiResponse[DiscontinueResult])
async def discontinue_program(
    user: User = Depends(get_current_user),
    program_id: uuid.UUID = Depends(program_id_path),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    """Remove the program's upcoming open workouts and mark it inactive."""
    program = await get_owned_program(db, program_id, user.id)
    result = await db.execute(
        delete(ScheduledWorkout).where(
            ScheduledWorkout.program_id == program.id,
            ScheduledWorkout.user_id == user.id,
            ScheduledWorkout.workout_date >= date.today(),
            ScheduledWorkout.status.in_(OPEN_STATUSES),
        )
    )
    deleted = result.rowcount or 0
    program.is_active = False
    program.updated_at = datetime.now(timezone.utc)
    await db.flush()
    return ApiResponse(
        data=DiscontinueResult(deleted_count=deleted),
        message=f"Discontinued program and removed {deleted} scheduled workouts",
    )
