from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_issues.api.deps import require_auth
from fleet_issues.core.config import Settings, get_settings
from fleet_issues.core.database import get_db
from fleet_issues.core.exceptions import NotFound
from fleet_issues.core.security import Principal
from fleet_issues.models.enums import VesselStatus
from fleet_issues.models.user import User
from fleet_issues.schemas.quota import QuotaStatusResponse
from fleet_issues.schemas.user import MeResponse
from fleet_issues.services.quotas import can_assign_more_vessels, can_report_more_issues

router = APIRouter()


@router.get("", response_model=MeResponse)
async def read_me(
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    user = await db.get(User, principal.id)
    if not user:
        raise NotFound("User not found")

    return {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "assigned_vessel_ids": [v.id for v in user.vessels],
    }


@router.get("/quotas", response_model=QuotaStatusResponse)
async def read_my_quotas(
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Where the signed-in user stands against the vessel and open-issue caps."""
    return {
        "vessels": await can_assign_more_vessels(
            db, principal.id, VesselStatus.ACTIVE, limit=settings.MAX_ACTIVE_VESSEL_ASSIGNMENTS
        ),
        "issues": await can_report_more_issues(db, principal.id, limit=settings.MAX_OPEN_ISSUES_PER_CREW),
    }
