import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_issues.api.deps import require_admin
from fleet_issues.core.config import Settings, get_settings
from fleet_issues.core.database import get_db
from fleet_issues.core.security import Principal
from fleet_issues.schemas.vessel import MaintenanceScanResponse
from fleet_issues.services.maintenance import vessels_due_for_inspection

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=MaintenanceScanResponse)
async def run_maintenance_scan(
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Flags vessels whose last inspection is missing or older than the inspection interval."""
    due = await vessels_due_for_inspection(db, settings.INSPECTION_INTERVAL_DAYS)
    logger.info(f"🔍 Maintenance scan by {principal.email}: {len(due)} vessel(s) due")
    return {
        "ok": True,
        "message": "Maintenance scan completed.",
        "vessels_due_for_inspection": due,
    }
