from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from fleet_issues.api.deps import require_admin
from fleet_issues.core.config import Settings, get_settings
from fleet_issues.core.database import get_db
from fleet_issues.core.exceptions import NotFound
from fleet_issues.core.security import Principal
from fleet_issues.models.enums import UserRole, VesselStatus
from fleet_issues.models.user import User
from fleet_issues.schemas.quota import QuotaStatusResponse
from fleet_issues.schemas.user import CrewMemberResponse
from fleet_issues.services.quotas import can_assign_more_vessels, can_report_more_issues

router = APIRouter()


# 1. LIST CREW (for the vessel assignment picker)
@router.get("", response_model=List[CrewMemberResponse])
async def list_crew(
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    stmt = select(User).where(User.role == UserRole.CREW.value).order_by(User.email.asc())
    result = await db.execute(stmt)
    return result.scalars().all()


# 2. QUOTA STATUS FOR ONE USER
@router.get("/{user_id}/quotas", response_model=QuotaStatusResponse)
async def read_user_quotas(
    user_id: UUID,
    vessel_status: VesselStatus = Query(VesselStatus.ACTIVE, alias="vesselStatus"),
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Lets an admin see whether assigning this user to a vessel with ``vesselStatus`` would pass."""
    user = await db.get(User, user_id)
    if not user:
        raise NotFound("User not found")

    return {
        "vessels": await can_assign_more_vessels(
            db, user.id, vessel_status, limit=settings.MAX_ACTIVE_VESSEL_ASSIGNMENTS
        ),
        "issues": await can_report_more_issues(db, user.id, limit=settings.MAX_OPEN_ISSUES_PER_CREW),
    }
