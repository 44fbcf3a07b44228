"""Account deletion and the caller's audit trail."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import api_rate_limit, get_audit_logger, get_current_user, require_same_origin, user_rate_limit
from app.core.constants import DEFAULT_AUDIT_LOG_LIMIT, GENERIC_ERROR
from app.core.enums import AuditEventType, AuditSeverity
from app.core.security import verify_password
from app.db.session import get_db
from app.models.billing import Entitlement, Subscription, UsageLimit
from app.models.program import SavedProgram, ScheduledWorkout
from app.models.user import PasswordResetToken, Profile, User
from app.models.workout import Workout, WorkoutExercise, WorkoutSet
from app.schemas.audit import AuditLogRead
from app.schemas.auth import DeleteAccountRequest
from app.schemas.common import ApiResponse
from app.services.audit_log import AuditLogger

router = APIRouter()

MAX_AUDIT_LOG_LIMIT = 100


async def delete_user_data(db: AsyncSession, user_id: uuid.UUID) -> None:
    """Remove every row owned by the user, children before parents."""
    user_workouts = select(Workout.id).where(Workout.user_id == user_id)
    user_exercises = select(WorkoutExercise.id).where(WorkoutExercise.workout_id.in_(user_workouts))

    await db.execute(delete(WorkoutSet).where(WorkoutSet.workout_exercise_id.in_(user_exercises)))
    await db.execute(delete(WorkoutExercise).where(WorkoutExercise.workout_id.in_(user_workouts)))
    await db.execute(delete(ScheduledWorkout).where(ScheduledWorkout.user_id == user_id))
    await db.execute(delete(Workout).where(Workout.user_id == user_id))
    await db.execute(delete(SavedProgram).where(SavedProgram.user_id == user_id))
    for model in (UsageLimit, Entitlement, Subscription, PasswordResetToken):
        await db.execute(delete(model).where(model.user_id == user_id))
    await db.execute(delete(Profile).where(Profile.id == user_id))
    await db.execute(delete(User).where(User.id == user_id))


@router.post("/delete", response_model=ApiResponse[None], dependencies=[Depends(require_same_origin)])
async def delete_account(
    request: Request,
    payload: DeleteAccountRequest,
    user: User = Depends(get_current_user),
    _rate=Depends(user_rate_limit("auth", prefix="delete")),
    db: AsyncSession = Depends(get_db),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Permanently delete the caller's account after re-checking their password."""
    password = payload.password
    if not isinstance(password, str) or not password:
        raise HTTPException(status_code=400, detail="Password is required")

    if not verify_password(password, user.password_hash):
        await audit.log_security_event(
            AuditEventType.SUSPICIOUS_ACTIVITY,
            {"action": "delete_account_failed_password"},
            user_id=user.id,
            request=request,
            severity=AuditSeverity.MEDIUM,
        )
        raise HTTPException(status_code=401, detail="Incorrect password")

    user_id = user.id
    await audit.log_event(
        AuditEventType.PROFILE_UPDATED,
        user_id=user_id,
        request=request,
        metadata={"action": "account_deletion_initiated"},
        severity=AuditSeverity.HIGH,
    )
    await delete_user_data(db, user_id)
    await db.flush()
    return ApiResponse(message="Account deleted successfully")


@router.get("/audit-log", response_model=ApiResponse[list[AuditLogRead]])
async def get_audit_log(
    user: User = Depends(get_current_user),
    _rate=Depends(api_rate_limit),
    audit: AuditLogger = Depends(get_audit_logger),
    limit: int = Query(DEFAULT_AUDIT_LOG_LIMIT),
):
    """The caller's most recent audit events, newest first."""
    limit = min(MAX_AUDIT_LOG_LIMIT, max(1, limit))
    events = await audit.recent_events(user.id, limit=limit)
    if events is None:
        raise HTTPException(status_code=500, detail=GENERIC_ERROR)
    return ApiResponse(data=[AuditLogRead.model_validate(e) for e in events])
