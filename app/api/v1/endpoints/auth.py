"""Signup, login and password reset.

Auth routes are limited per client IP (not per user) and every outcome is
written to the audit log. Responses never reveal whether an email is
registered, except for the duplicate-signup error.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_audit_logger, require_same_origin
from app.core.config import get_settings
from app.core.enums import AuditEventType
from app.core.rate_limit import RATE_LIMITS, rate_limit_headers, rate_limiter
from app.core.security import (
    create_access_token,
    dummy_verify_password,
    generate_secure_token,
    get_client_ip,
    hash_password,
    hash_string,
    verify_password,
)
from app.db.session import get_db
from app.models.user import PasswordResetToken, Profile, User
from app.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    SignupRequest,
    TokenResponse,
)
from app.schemas.common import ApiResponse
from app.services.audit_log import AuditLogger

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_same_origin)])

RESET_REQUESTED_MESSAGE = "If an account exists with this email, you will receive a password reset link."


def ip_rate_limit(preset: str, key: str, endpoint: str, detail: str | None = None):
    """Dependency factory limiting by client IP; a hit is audited as a security event."""
    config = RATE_LIMITS[preset]

    async def dependency(
        request: Request,
        audit: AuditLogger = Depends(get_audit_logger),
    ) -> None:
        client_ip = get_client_ip(request)
        result = rate_limiter.check(f"{key}:{client_ip}", config)
        if result.allowed:
            return
        await audit.log_security_event(
            AuditEventType.RATE_LIMIT_EXCEEDED,
            {"endpoint": endpoint, "ip": client_ip},
            request=request,
        )
        message = detail or (
            f"Too many login attempts. Please try again in {math.ceil(result.reset_in / 60)} minutes."
        )
        raise HTTPException(status_code=429, detail=message, headers=rate_limit_headers(result))

    return dependency


@router.post(
    "/signup",
    response_model=ApiResponse[None],
    status_code=201,
    dependencies=[
        Depends(
            ip_rate_limit(
                "signup",
                "auth:signup",
                "/auth/signup",
                detail="Too many signup attempts. Please try again later.",
            )
        )
    ],
)
async def signup(
    payload: SignupRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Create an account and its profile."""
    existing = await db.execute(select(User.id).where(User.email == payload.email))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(status_code=400, detail="An account with this email already exists")

    user = User(email=payload.email, password_hash=hash_password(payload.password))
    db.add(user)
    await db.flush()
    db.add(Profile(id=user.id, full_name=payload.full_name))
    await db.flush()

    await audit.log_auth_event(
        AuditEventType.SIGNUP,
        user.id,
        request=request,
        metadata={"ip": get_client_ip(request), "email_domain": payload.email.split("@")[-1]},
    )
    return ApiResponse(message="Account created!")


@router.post(
    "/login",
    response_model=ApiResponse[TokenResponse],
    dependencies=[Depends(ip_rate_limit("auth", "auth:login", "/auth/login"))],
)
async def login(
    payload: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Exchange email and password for a bearer token."""
    client_ip = get_client_ip(request)
    result = await db.execute(select(User).where(User.email == payload.email))
    user = result.scalar_one_or_none()
    if user is None:
        dummy_verify_password()
        password_ok = False
    else:
        password_ok = verify_password(payload.password, user.password_hash)
    if not password_ok:
        await audit.log_auth_event(
            AuditEventType.LOGIN_FAILED,
            request=request,
            metadata={
                "email": payload.email,
                "ip": client_ip,
                "reason": "unknown_email" if user is None else "bad_password",
            },
        )
        raise HTTPException(status_code=401, detail="Invalid email or password")

    await audit.log_auth_event(
        AuditEventType.LOGIN_SUCCESS,
        user.id,
        request=request,
        metadata={"ip": client_ip, "method": "password"},
    )
    settings = get_settings()
    return ApiResponse(
        data=TokenResponse(
            access_token=create_access_token(str(user.id)),
            expires_in=settings.access_token_expire_minutes * 60,
            user_id=str(user.id),
            email=user.email,
        ),
        message="Login successful",
    )


@router.post(
    "/forgot-password",
    response_model=ApiResponse[None],
    dependencies=[
        Depends(
            ip_rate_limit(
                "password_reset",
                "auth:reset",
                "/auth/forgot-password",
                detail="Too many password reset requests. Please try again later.",
            )
        )
    ],
)
async def forgot_password(
    payload: ForgotPasswordRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Issue a single-use reset token. The reply is identical whether or not the account exists."""
    settings = get_settings()
    user_id = None
    try:
        result = await db.execute(select(User).where(User.email == payload.email))
        user = result.scalar_one_or_none()
        if user is not None:
            user_id = user.id
            token = generate_secure_token()
            db.add(
                PasswordResetToken(
                    user_id=user.id,
                    token_hash=hash_string(token),
                    expires_at=datetime.now(timezone.utc)
                    + timedelta(minutes=settings.password_reset_expire_minutes),
                )
            )
            await db.flush()
            logger.debug(
                "Password reset link for %s: %s/auth/reset-password?token=%s",
                user.id,
                settings.site_url.rstrip("/"),
                token,
            )
    except Exception:
        logger.exception("Forgot password: could not issue reset token")
        await db.rollback()

    await audit.log_auth_event(
        AuditEventType.PASSWORD_RESET_REQUEST,
        user_id,
        request=request,
        metadata={"email_domain": payload.email.split("@")[-1], "ip": get_client_ip(request)},
    )
    return ApiResponse(message=RESET_REQUESTED_MESSAGE)


@router.post("/reset-password", response_model=ApiResponse[None])
async def reset_password(
    payload: ResetPasswordRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Set a new password using a token from forgot-password."""
    result = await db.execute(
        select(PasswordResetToken).where(PasswordResetToken.token_hash == hash_string(payload.token))
    )
    reset = result.scalar_one_or_none()
    now = datetime.now(timezone.utc)
    if reset is None or reset.used_at is not None:
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")
    expires_at = reset.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if expires_at < now:
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")

    user = (await db.execute(select(User).where(User.id == reset.user_id))).scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")
    user.password_hash = hash_password(payload.password)
    reset.used_at = now
    await db.flush()

    await audit.log_auth_event(AuditEventType.PASSWORD_CHANGED, user.id, request=request)
    return ApiResponse(message="Password updated successfully")
