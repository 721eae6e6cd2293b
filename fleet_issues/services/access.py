import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_issues.core.exceptions import Forbidden
from fleet_issues.core.security import Principal
from fleet_issues.models.associations import user_vessel_link

logger = logging.getLogger(__name__)


async def can_access_vessel(db: AsyncSession, principal: Principal, vessel_id: UUID) -> bool:
    """Admins see every vessel. Crew only see vessels they are assigned to."""
    if principal.is_admin:
        return True

    stmt = select(user_vessel_link.c.vessel_id).where(
        user_vessel_link.c.user_id == principal.id,
        user_vessel_link.c.vessel_id == vessel_id,
    )
    result = await db.execute(stmt)
    return result.first() is not None


async def ensure_vessel_access(
    db: AsyncSession, principal: Principal, vessel_id: UUID, message: str = "Forbidden"
) -> None:
    if not await can_access_vessel(db, principal, vessel_id):
        logger.warning(f"⚠️ User {principal.id} denied access to vessel {vessel_id}")
        raise Forbidden(message)
