"""Shared request dependencies: current user, audit logger, path ids, rate limits."""

from __future__ import annotations

import uuid

from fastapi import Depends, HTTPException, Path, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import UNAUTHORIZED
from app.core.rate_limit import RATE_LIMITS, RateLimitResult, enforce_rate_limit
from app.core.security import decode_access_token, validate_origin
from app.core.validation import validate_uuid
from app.db.session import get_db
from app.models.user import User
from app.services.audit_log import AuditLogger

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the bearer token to a user; any failure is a 401."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail=UNAUTHORIZED)
    try:
        payload = decode_access_token(credentials.credentials)
        user_id = uuid.UUID(payload["sub"])
    except ValueError:
        raise HTTPException(status_code=401, detail=UNAUTHORIZED) from None
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=401, detail=UNAUTHORIZED)
    return user


def get_audit_logger(request: Request) -> AuditLogger:
    """Audit logger configured on the application at startup."""
    return request.app.state.audit_logger


def path_uuid(name: str, label: str):
    """Dependency factory parsing path param ``name``; a malformed id is a 400."""

    def dependency(value: str = Path(..., alias=name)) -> uuid.UUID:
        try:
            return uuid.UUID(validate_uuid(value))
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Invalid {label} ID") from None

    return dependency


def user_rate_limit(preset: str, prefix: str | None = None):
    """Dependency factory limiting the caller under ``<prefix>:<user_id>``."""
    config = RATE_LIMITS[preset]
    key_prefix = prefix or preset

    def dependency(user: User = Depends(get_current_user)) -> RateLimitResult:
        return enforce_rate_limit(f"{key_prefix}:{user.id}", config)

    return dependency


api_rate_limit = user_rate_limit("api")


def require_same_origin(request: Request) -> None:
    """Reject cross-site form posts to auth and account endpoints."""
    if not validate_origin(request):
        raise HTTPException(status_code=403, detail="Invalid request origin")
