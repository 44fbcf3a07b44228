"""Subscription status and cancel/reactivate actions."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import api_rate_limit, get_audit_logger, get_current_user, user_rate_limit
from app.core.enums import AuditEventType, SubscriptionStatus
from app.db.session import get_db
from app.models.user import User
from app.schemas.billing import SubscriptionAction, SubscriptionStatusRead, TierLimits
from app.schemas.common import ApiResponse
from app.services import billing
from app.services.audit_log import AuditLogger

router = APIRouter()


@router.get("/subscription", response_model=ApiResponse[SubscriptionStatusRead])
async def get_subscription_status(
    user: User = Depends(get_current_user),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    """Current plan, its limits and this month's workout usage."""
    subscription = await billing.get_subscription(db, user.id)
    quota = await billing.get_workout_quota(db, user.id)
    return ApiResponse(
        data=SubscriptionStatusRead(
            tier=quota.tier,
            status=subscription.status if subscription else SubscriptionStatus.INACTIVE.value,
            limits=TierLimits(**billing.TIER_LIMITS[quota.tier]),
            current_period_end=subscription.current_period_end if subscription else None,
            cancel_at_period_end=subscription.cancel_at_period_end if subscription else False,
            workouts_used_this_month=quota.used,
            workouts_remaining=quota.remaining,
            can_create_workout=quota.can_create,
        )
    )


@router.post("/subscription", response_model=ApiResponse[None])
async def update_subscription(
    payload: SubscriptionAction,
    request: Request,
    user: User = Depends(get_current_user),
    _rate=Depends(user_rate_limit("payment", prefix="billing")),
    db: AsyncSession = Depends(get_db),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Cancel at period end, or undo a pending cancellation."""
    subscription = await billing.get_subscription(db, user.id)
    if subscription is None or not subscription.provider_subscription_id:
        raise HTTPException(status_code=400, detail="No active subscription found")

    if payload.action == "cancel":
        subscription.cancel_at_period_end = True
        message = "Subscription will be canceled at the end of the billing period"
    elif payload.action == "reactivate":
        subscription.cancel_at_period_end = False
        message = "Subscription reactivated"
    else:
        raise HTTPException(status_code=400, detail="Invalid action")

    subscription.updated_at = datetime.now(timezone.utc)
    await db.flush()
    if payload.action == "cancel":
        await audit.log_payment_event(
            AuditEventType.SUBSCRIPTION_CANCELLED,
            user.id,
            {"subscription_id": subscription.provider_subscription_id, "at_period_end": True},
            request=request,
        )
    return ApiResponse(message=message)
