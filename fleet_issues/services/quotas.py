"""
Per-crew caps: concurrently assigned Active vessels and open reported issues.

The checks only count. Handlers decide what to do with a refusal through
``apply_quota``, which honours ``QUOTA_ENFORCEMENT``. ``lock_users`` takes row
locks on the users involved so that count-then-write runs serialized per user
inside the request transaction (PostgreSQL; SQLite has no row locks and
serializes writers on its own).
"""
import logging
from typing import Iterable, Optional, Union
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_issues.core.config import Settings
from fleet_issues.core.exceptions import QuotaExceeded
from fleet_issues.models.associations import user_vessel_link
from fleet_issues.models.enums import IssueStatus, VesselStatus
from fleet_issues.models.issue import Issue
from fleet_issues.models.user import User
from fleet_issues.models.vessel import Vessel
from fleet_issues.schemas.quota import IssueQuota, VesselQuota

logger = logging.getLogger(__name__)


async def count_active_assignments(
    db: AsyncSession, user_id: UUID, exclude_vessel_id: Optional[UUID] = None
) -> int:
    stmt = (
        select(func.count())
        .select_from(user_vessel_link)
        .join(Vessel, Vessel.id == user_vessel_link.c.vessel_id)
        .where(
            user_vessel_link.c.user_id == user_id,
            Vessel.status == VesselStatus.ACTIVE.value,
        )
    )
    if exclude_vessel_id is not None:
        stmt = stmt.where(Vessel.id != exclude_vessel_id)
    return (await db.execute(stmt)).scalar_one()


async def count_open_issues(db: AsyncSession, user_id: UUID) -> int:
    stmt = select(func.count(Issue.id)).where(
        Issue.reported_by_id == user_id,
        Issue.status == IssueStatus.OPEN.value,
    )
    return (await db.execute(stmt)).scalar_one()


async def can_assign_more_vessels(
    db: AsyncSession,
    user_id: UUID,
    new_vessel_status: Union[VesselStatus, str],
    *,
    limit: int,
    exclude_vessel_id: Optional[UUID] = None,
) -> VesselQuota:
    active_count = await count_active_assignments(db, user_id, exclude_vessel_id)

    if VesselStatus(new_vessel_status) == VesselStatus.ACTIVE and active_count >= limit:
        return VesselQuota(
            allowed=False,
            active_count=active_count,
            message=(
                f"Crew member is already assigned to {active_count} active vessels "
                f"(maximum {limit}). Move a vessel out of Active or unassign one first."
            ),
        )
    return VesselQuota(allowed=True, active_count=active_count)


async def can_report_more_issues(
    db: AsyncSession, user_id: UUID, *, limit: int
) -> IssueQuota:
    open_issue_count = await count_open_issues(db, user_id)

    if open_issue_count >= limit:
        return IssueQuota(
            allowed=False,
            open_issue_count=open_issue_count,
            message=(
                f"You already have {open_issue_count} open issues (maximum {limit}). "
                "Wait for an admin to resolve one before reporting another."
            ),
        )
    return IssueQuota(allowed=True, open_issue_count=open_issue_count)


async def lock_users(db: AsyncSession, user_ids: Iterable[UUID]) -> None:
    ids = sorted(set(user_ids), key=str)
    if not ids:
        return
    # Stable order so two writers never wait on each other crosswise
    await db.execute(select(User.id).where(User.id.in_(ids)).order_by(User.id).with_for_update())


def apply_quota(decision: Union[VesselQuota, IssueQuota], settings: Settings, context: str) -> None:
    if decision.allowed:
        return
    if settings.QUOTA_ENFORCEMENT == "enforce":
        logger.warning(f"⚠️ Quota refused ({context}): {decision.message}")
        raise QuotaExceeded(decision.message)
    logger.warning(f"⚠️ Quota exceeded but enforcement is advisory ({context}): {decision.message}")
