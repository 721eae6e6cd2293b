import logging
from typing import Dict, Iterable, List, Optional, Set
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import delete, func, insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from fleet_issues.api.deps import require_admin, require_auth
from fleet_issues.core.config import Settings, get_settings
from fleet_issues.core.database import get_db
from fleet_issues.core.exceptions import Conflict, NotFound, ValidationFailed
from fleet_issues.core.security import Principal
from fleet_issues.models.associations import user_vessel_link
from fleet_issues.models.enums import IssueStatus, UserRole, VesselStatus
from fleet_issues.models.issue import Issue
from fleet_issues.models.user import User
from fleet_issues.models.vessel import Vessel
from fleet_issues.schemas.user import MessageResponse
from fleet_issues.schemas.vessel import (
    VesselCreate,
    VesselDetailResponse,
    VesselResponse,
    VesselSummaryResponse,
    VesselUpdate,
)
from fleet_issues.services.access import ensure_vessel_access
from fleet_issues.services.quotas import apply_quota, can_assign_more_vessels, lock_users

logger = logging.getLogger(__name__)
router = APIRouter()


def vessel_to_dict(vessel: Vessel) -> dict:
    return {
        "id": vessel.id,
        "name": vessel.name,
        "imo": vessel.imo,
        "flag": vessel.flag,
        "vessel_type": vessel.vessel_type,
        "status": vessel.status,
        "last_inspection_date": vessel.last_inspection_date,
        "created_at": vessel.created_at,
    }


async def open_issue_counts(db: AsyncSession, vessel_ids: Iterable[UUID]) -> Dict[UUID, int]:
    ids = list(vessel_ids)
    if not ids:
        return {}
    stmt = (
        select(Issue.vessel_id, func.count(Issue.id))
        .where(Issue.vessel_id.in_(ids), Issue.status == IssueStatus.OPEN.value)
        .group_by(Issue.vessel_id)
    )
    result = await db.execute(stmt)
    return {vessel_id: count for vessel_id, count in result.all()}


async def assigned_crew_ids(db: AsyncSession, vessel_id: UUID) -> Set[UUID]:
    stmt = select(user_vessel_link.c.user_id).where(user_vessel_link.c.vessel_id == vessel_id)
    result = await db.execute(stmt)
    return set(result.scalars().all())


async def build_detail(db: AsyncSession, vessel: Vessel) -> dict:
    counts = await open_issue_counts(db, [vessel.id])
    crew_ids = await assigned_crew_ids(db, vessel.id)
    return {
        **vessel_to_dict(vessel),
        "open_issue_count": counts.get(vessel.id, 0),
        "assigned_crew_ids": sorted(crew_ids, key=str),
    }


# 1. LIST VESSELS
@router.get("", response_model=List[VesselSummaryResponse])
async def read_vessels(
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    stmt = select(Vessel).order_by(Vessel.name.asc())

    # Crew only see what they are assigned to
    if not principal.is_admin:
        stmt = stmt.join(user_vessel_link, user_vessel_link.c.vessel_id == Vessel.id).where(
            user_vessel_link.c.user_id == principal.id
        )

    result = await db.execute(stmt)
    vessels = result.scalars().all()
    counts = await open_issue_counts(db, [v.id for v in vessels])

    return [{**vessel_to_dict(v), "open_issue_count": counts.get(v.id, 0)} for v in vessels]


# 2. CREATE VESSEL
@router.post("", response_model=VesselResponse, status_code=status.HTTP_201_CREATED)
async def create_vessel(
    vessel_in: VesselCreate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    # Check duplicate
    result = await db.execute(select(Vessel).where(Vessel.imo == vessel_in.imo))
    if result.scalars().first():
        raise Conflict("IMO already exists")

    new_vessel = Vessel(
        name=vessel_in.name,
        imo=vessel_in.imo,
        flag=vessel_in.flag,
        vessel_type=vessel_in.vessel_type,
        status=vessel_in.status.value,
        last_inspection_date=vessel_in.last_inspection_date,
    )

    db.add(new_vessel)
    await db.commit()
    await db.refresh(new_vessel)

    logger.info(f"🚢 Vessel {new_vessel.name} ({new_vessel.imo}) created by {principal.email}")
    return vessel_to_dict(new_vessel)


# 3. GET ONE VESSEL
@router.get("/{vessel_id}", response_model=VesselDetailResponse)
async def read_vessel(
    vessel_id: UUID,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    await ensure_vessel_access(db, principal, vessel_id)

    vessel = await db.get(Vessel, vessel_id)
    if not vessel:
        raise NotFound("Vessel not found")

    return await build_detail(db, vessel)


# 4. UPDATE VESSEL (fields + crew assignments)
@router.patch("/{vessel_id}", response_model=VesselDetailResponse)
async def update_vessel(
    vessel_id: UUID,
    vessel_in: VesselUpdate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    vessel = await db.get(Vessel, vessel_id)
    if not vessel:
        raise NotFound("Vessel not found")

    update_data = vessel_in.model_dump(exclude_unset=True)
    new_crew_ids: Optional[List[UUID]] = update_data.pop("assigned_crew_ids", None)

    # Explicit nulls only mean something for the inspection date
    update_data = {
        field: value
        for field, value in update_data.items()
        if value is not None or field == "last_inspection_date"
    }
    if "status" in update_data:
        update_data["status"] = VesselStatus(update_data["status"]).value

    if "imo" in update_data and update_data["imo"] != vessel.imo:
        result = await db.execute(
            select(Vessel.id).where(Vessel.imo == update_data["imo"], Vessel.id != vessel.id)
        )
        if result.first():
            raise Conflict("IMO already exists")

    # --- Validate crew IDs ---
    if new_crew_ids is not None:
        new_crew_ids = list(dict.fromkeys(new_crew_ids))
        if new_crew_ids:
            result = await db.execute(select(User).where(User.id.in_(new_crew_ids)))
            users = result.scalars().all()
            if len(users) != len(new_crew_ids):
                raise ValidationFailed("One or more assigned crew members do not exist")
            if any(u.role != UserRole.CREW.value for u in users):
                raise ValidationFailed("Only crew members can be assigned to vessels")

    # --- Active vessel cap ---
    current_crew = await assigned_crew_ids(db, vessel.id)
    final_crew = set(new_crew_ids) if new_crew_ids is not None else current_crew
    old_status = vessel.status
    new_status = update_data.get("status", old_status)

    if new_status == VesselStatus.ACTIVE.value:
        if old_status != VesselStatus.ACTIVE.value:
            # Going Active counts against everyone on board
            to_check = final_crew
        else:
            to_check = final_crew - current_crew

        if to_check:
            await lock_users(db, to_check)
            for user_id in sorted(to_check, key=str):
                decision = await can_assign_more_vessels(
                    db,
                    user_id,
                    new_status,
                    limit=settings.MAX_ACTIVE_VESSEL_ASSIGNMENTS,
                    exclude_vessel_id=vessel.id,
                )
                apply_quota(decision, settings, f"assign user {user_id} to vessel {vessel.id}")

    # --- Apply in one transaction: fields + crew ---
    for field, value in update_data.items():
        setattr(vessel, field, value)

    if new_crew_ids is not None:
        await db.execute(delete(user_vessel_link).where(user_vessel_link.c.vessel_id == vessel.id))
        if new_crew_ids:
            await db.execute(
                insert(user_vessel_link),
                [{"user_id": user_id, "vessel_id": vessel.id} for user_id in new_crew_ids],
            )
        logger.info(f"👥 Vessel {vessel.id} crew set to {len(new_crew_ids)} member(s) by {principal.email}")

    await db.commit()
    await db.refresh(vessel)

    return await build_detail(db, vessel)


# 5. DELETE VESSEL
@router.delete("/{vessel_id}", response_model=MessageResponse)
async def delete_vessel(
    vessel_id: UUID,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    vessel = await db.get(Vessel, vessel_id)
    if not vessel:
        raise NotFound("Vessel not found")

    # Children first so this also holds where the store does not cascade
    await db.execute(delete(Issue).where(Issue.vessel_id == vessel_id))
    await db.execute(delete(user_vessel_link).where(user_vessel_link.c.vessel_id == vessel_id))
    await db.execute(delete(Vessel).where(Vessel.id == vessel_id))
    await db.commit()

    logger.info(f"🗑️ Vessel {vessel_id} deleted by {principal.email}")
    return {"ok": True}
