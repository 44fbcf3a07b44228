"""Plan tiers, monthly workout quotas and progress entitlements."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import (
    FREE_WORKOUTS_PER_MONTH,
    PRO_WORKOUTS_PER_MONTH,
    PROGRESS_UNLOCK_THRESHOLD,
)
from app.core.enums import SubscriptionPlan, SubscriptionStatus, UnlockReason
from app.models.billing import Entitlement, Subscription, UsageLimit
from app.models.workout import Workout

PRO_STATUSES = (SubscriptionStatus.ACTIVE.value, SubscriptionStatus.TRIALING.value)

TIER_LIMITS = {
    SubscriptionPlan.FREE: {"workouts_per_month": FREE_WORKOUTS_PER_MONTH, "progress_access": False},
    SubscriptionPlan.PRO: {"workouts_per_month": PRO_WORKOUTS_PER_MONTH, "progress_access": True},
}


def month_key(now: datetime | None = None) -> str:
    """``YYYY-MM`` of the current UTC month."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y-%m")


def is_pro(subscription: Subscription | None) -> bool:
    return subscription is not None and subscription.status in PRO_STATUSES


async def get_subscription(db: AsyncSession, user_id: uuid.UUID) -> Subscription | None:
    result = await db.execute(select(Subscription).where(Subscription.user_id == user_id))
    return result.scalar_one_or_none()


async def get_tier(db: AsyncSession, user_id: uuid.UUID) -> SubscriptionPlan:
    subscription = await get_subscription(db, user_id)
    return SubscriptionPlan.PRO if is_pro(subscription) else SubscriptionPlan.FREE


async def get_monthly_usage(db: AsyncSession, user_id: uuid.UUID, key: str | None = None) -> int:
    result = await db.execute(
        select(UsageLimit.workouts_logged).where(
            UsageLimit.user_id == user_id,
            UsageLimit.month_key == (key or month_key()),
        )
    )
    return result.scalar_one_or_none() or 0


async def increment_monthly_usage(db: AsyncSession, user_id: uuid.UUID, key: str | None = None) -> int:
    """Add one logged workout to this month's counter and return the new total."""
    key = key or month_key()
    result = await db.execute(
        select(UsageLimit).where(UsageLimit.user_id == user_id, UsageLimit.month_key == key)
    )
    usage = result.scalar_one_or_none()
    if usage is None:
        usage = UsageLimit(user_id=user_id, month_key=key, workouts_logged=0)
        db.add(usage)
    usage.workouts_logged += 1
    usage.updated_at = datetime.now(timezone.utc)
    await db.flush()
    return usage.workouts_logged


@dataclass
class WorkoutQuota:
    tier: SubscriptionPlan
    limit: int
    used: int

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.used)

    @property
    def can_create(self) -> bool:
        return self.used < self.limit


async def get_workout_quota(db: AsyncSession, user_id: uuid.UUID) -> WorkoutQuota:
    tier = await get_tier(db, user_id)
    return WorkoutQuota(
        tier=tier,
        limit=TIER_LIMITS[tier]["workouts_per_month"],
        used=await get_monthly_usage(db, user_id),
    )


def quota_exceeded_message(quota: WorkoutQuota) -> str:
    message = f"Monthly workout limit reached ({quota.used}/{quota.limit})."
    if quota.tier == SubscriptionPlan.FREE:
        return f"{message} Upgrade to Pro for up to {PRO_WORKOUTS_PER_MONTH} workouts per month."
    return f"{message} Your limit resets at the start of next month."


async def get_entitlements(db: AsyncSession, user_id: uuid.UUID) -> dict:
    """Progress access: pro subscribers, stored unlocks, or enough logged workouts."""
    pro = is_pro(await get_subscription(db, user_id))

    result = await db.execute(select(Entitlement).where(Entitlement.user_id == user_id))
    entitlement = result.scalar_one_or_none()

    count_result = await db.execute(select(func.count(Workout.id)).where(Workout.user_id == user_id))
    total_workouts = count_result.scalar_one() or 0

    stored_unlock = bool(entitlement and entitlement.progress_unlocked)
    earned = total_workouts >= PROGRESS_UNLOCK_THRESHOLD
    unlocked = pro or stored_unlock or earned

    reason: UnlockReason | None = None
    if pro:
        reason = UnlockReason.PRO
    elif stored_unlock and entitlement.unlocked_reason:
        reason = UnlockReason(entitlement.unlocked_reason)
    elif unlocked:
        reason = UnlockReason.EARNED

    return {
        "progress_unlocked": unlocked,
        "unlock_reason": reason,
        "unlocked_at": entitlement.unlocked_at if entitlement else None,
        "total_workouts": total_workouts,
        "workouts_until_unlock": 0 if unlocked else PROGRESS_UNLOCK_THRESHOLD - total_workouts,
        "is_pro": pro,
    }
