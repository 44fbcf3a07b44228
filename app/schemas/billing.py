"""Subscription, entitlement and usage schemas."""

from datetime import datetime

from pydantic import BaseModel

from app.core.enums import SubscriptionPlan, UnlockReason


class TierLimits(BaseModel):
    workouts_per_month: int
    progress_access: bool


class SubscriptionStatusRead(BaseModel):
    tier: SubscriptionPlan
    status: str
    limits: TierLimits
    current_period_end: datetime | None = None
    cancel_at_period_end: bool = False
    workouts_used_this_month: int
    workouts_remaining: int
    can_create_workout: bool


class SubscriptionAction(BaseModel):
    action: str | None = None  # cancel | reactivate


class EntitlementsRead(BaseModel):
    progress_unlocked: bool
    unlock_reason: UnlockReason | None = None
    unlocked_at: datetime | None = None
    total_workouts: int
    workouts_until_unlock: int
    is_pro: bool
