"""The signed-in user's account and public profile."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import api_rate_limit, get_audit_logger, get_current_user
from app.core.enums import AuditEventType
from app.db.session import get_db
from app.models.user import Profile, User
from app.schemas.common import ApiResponse
from app.schemas.profile import AccountRead, ProfileRead, ProfileUpdate
from app.services.audit_log import AuditLogger

router = APIRouter()


async def get_or_create_profile(db: AsyncSession, user: User) -> Profile:
    result = await db.execute(select(Profile).where(Profile.id == user.id))
    profile = result.scalar_one_or_none()
    if profile is None:
        profile = Profile(id=user.id)
        db.add(profile)
        await db.flush()
    return profile


@router.get("", response_model=ApiResponse[AccountRead])
async def get_profile(
    user: User = Depends(get_current_user),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    profile = await get_or_create_profile(db, user)
    return ApiResponse(
        data=AccountRead(
            id=user.id,
            email=user.email,
            created_at=user.created_at,
            profile=ProfileRead.model_validate(profile),
        )
    )


@router.patch("", response_model=ApiResponse[ProfileRead])
async def update_profile(
    payload: ProfileUpdate,
    request: Request,
    user: User = Depends(get_current_user),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Update username, display name, avatar or bio."""
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=400, detail="No valid fields to update")

    if data.get("username"):
        taken = await db.execute(
            select(Profile.id).where(Profile.username == data["username"], Profile.id != user.id)
        )
        if taken.scalar_one_or_none() is not None:
            raise HTTPException(status_code=400, detail="Username is already taken")

    profile = await get_or_create_profile(db, user)
    for k, v in data.items():
        setattr(profile, k, v)
    profile.updated_at = datetime.now(timezone.utc)
    await db.flush()

    await audit.log_event(
        AuditEventType.PROFILE_UPDATED,
        user_id=user.id,
        request=request,
        metadata={"fields": sorted(data)},
    )
    return ApiResponse(data=ProfileRead.model_validate(profile), message="Profile updated successfully")
