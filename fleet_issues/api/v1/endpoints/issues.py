import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from fleet_issues.api.deps import require_admin, require_auth
from fleet_issues.core.config import Settings, get_settings
from fleet_issues.core.database import get_db
from fleet_issues.core.exceptions import Forbidden, NotFound
from fleet_issues.core.security import Principal
from fleet_issues.models.enums import IssueStatus
from fleet_issues.models.issue import Issue
from fleet_issues.schemas.issue import IssueCreate, IssueResponse, IssueUpdate
from fleet_issues.services.access import can_access_vessel, ensure_vessel_access
from fleet_issues.services.quotas import apply_quota, can_report_more_issues, lock_users

logger = logging.getLogger(__name__)
router = APIRouter()


async def load_issue(db: AsyncSession, issue_id: UUID) -> Optional[Issue]:
    stmt = (
        select(Issue)
        .where(Issue.id == issue_id)
        .options(selectinload(Issue.vessel))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalars().first()


# --- LIST ISSUES ---
@router.get("", response_model=List[IssueResponse])
async def read_issues(
    vessel_id: Optional[UUID] = Query(None, alias="vesselId"),
    issue_status: Optional[IssueStatus] = Query(None, alias="status"),
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    """
    With ``vesselId``: every issue on that vessel, for anyone allowed to see it.
    Without: admins get the whole fleet, crew get the issues they reported.
    """
    query = select(Issue).options(selectinload(Issue.vessel))

    if vessel_id is not None:
        await ensure_vessel_access(db, principal, vessel_id)
        query = query.where(Issue.vessel_id == vessel_id)
    elif not principal.is_admin:
        query = query.where(Issue.reported_by_id == principal.id)

    if issue_status is not None:
        query = query.where(Issue.status == issue_status.value)

    result = await db.execute(query.order_by(Issue.created_at.desc()))
    return result.scalars().all()


# --- REPORT ISSUE ---
@router.post("", response_model=IssueResponse, status_code=status.HTTP_201_CREATED)
async def create_issue(
    issue_in: IssueCreate,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if principal.is_admin:
        raise Forbidden("Forbidden: only crew can report issues")

    # Assignment implies the vessel exists
    await ensure_vessel_access(db, principal, issue_in.vessel_id, "Forbidden: vessel not assigned")

    await lock_users(db, [principal.id])
    decision = await can_report_more_issues(db, principal.id, limit=settings.MAX_OPEN_ISSUES_PER_CREW)
    apply_quota(decision, settings, f"report issue by {principal.id}")

    new_issue = Issue(
        vessel_id=issue_in.vessel_id,
        reported_by_id=principal.id,
        category=issue_in.category,
        description=issue_in.description,
        priority=issue_in.priority.value,
        status=IssueStatus.OPEN.value,
    )
    db.add(new_issue)
    await db.commit()

    logger.info(f"📝 Issue {new_issue.id} ({new_issue.priority}) reported on vessel {new_issue.vessel_id}")
    return await load_issue(db, new_issue.id)


# --- GET ONE ISSUE ---
@router.get("/{issue_id}", response_model=IssueResponse)
async def read_issue(
    issue_id: UUID,
    principal: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    issue = await load_issue(db, issue_id)
    if not issue:
        raise NotFound("Issue not found")

    if principal.is_admin or issue.reported_by_id == principal.id:
        return issue

    if not await can_access_vessel(db, principal, issue.vessel_id):
        logger.warning(f"⚠️ User {principal.id} denied access to issue {issue_id}")
        raise Forbidden()

    return issue


# --- ADMIN UPDATE (status / recommendation) ---
@router.patch("/{issue_id}", response_model=IssueResponse)
async def update_issue(
    issue_id: UUID,
    issue_in: IssueUpdate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    issue = await load_issue(db, issue_id)
    if not issue:
        raise NotFound("Issue not found")

    update_data = issue_in.model_dump(exclude_unset=True)
    if update_data.get("status") is not None:
        issue.status = IssueStatus(update_data["status"]).value
    if "recommendation" in update_data:
        issue.recommendation = update_data["recommendation"]

    if update_data:
        await db.commit()
        logger.info(f"🔧 Issue {issue_id} updated by {principal.email}: {sorted(update_data)}")

    return issue
