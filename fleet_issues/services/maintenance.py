from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_issues.models.vessel import Vessel


async def vessels_due_for_inspection(
    db: AsyncSession, interval_days: int, today: Optional[date] = None
) -> List[Vessel]:
    """Vessels never inspected, or last inspected more than ``interval_days`` ago."""
    cutoff = (today or date.today()) - timedelta(days=interval_days)
    stmt = (
        select(Vessel)
        .where(or_(Vessel.last_inspection_date < cutoff, Vessel.last_inspection_date.is_(None)))
        .order_by(Vessel.name.asc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())
