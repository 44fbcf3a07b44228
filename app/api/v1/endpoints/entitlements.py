"""Progress analytics entitlement."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import api_rate_limit, get_current_user
from app.db.session import get_db
from app.models.user import User
from app.schemas.billing import EntitlementsRead
from app.schemas.common import ApiResponse
from app.services import billing

router = APIRouter()


@router.get("", response_model=ApiResponse[EntitlementsRead])
async def get_entitlements(
    user: User = Depends(get_current_user),
    _rate=Depends(api_rate_limit),
    db: AsyncSession = Depends(get_db),
):
    """Whether progress analytics are unlocked, and why."""
    return ApiResponse(data=EntitlementsRead(**await billing.get_entitlements(db, user.id)))
