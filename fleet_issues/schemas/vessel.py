from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field, constr

from fleet_issues.models.enums import VesselStatus
from fleet_issues.schemas.base import CamelModel

# Seven digits, optionally prefixed with "IMO"
IMO_PATTERN = r"^(IMO)?\d{7}$"


class VesselBase(CamelModel):
    name: constr(min_length=1)
    imo: constr(pattern=IMO_PATTERN)
    flag: constr(min_length=1)
    vessel_type: constr(min_length=1) = Field(alias="type")
    status: VesselStatus
    last_inspection_date: Optional[date] = None


class VesselCreate(VesselBase):
    pass


class VesselUpdate(CamelModel):
    name: Optional[constr(min_length=1)] = None
    imo: Optional[constr(pattern=IMO_PATTERN)] = None
    flag: Optional[constr(min_length=1)] = None
    vessel_type: Optional[constr(min_length=1)] = Field(default=None, alias="type")
    status: Optional[VesselStatus] = None
    last_inspection_date: Optional[date] = None
    assigned_crew_ids: Optional[List[UUID]] = None


class VesselResponse(VesselBase):
    id: UUID
    # Plain str so rows written before validation tightened still serialize
    imo: str
    status: str
    created_at: Optional[datetime] = None


class VesselSummaryResponse(VesselResponse):
    open_issue_count: int = 0


class VesselDetailResponse(VesselSummaryResponse):
    assigned_crew_ids: List[UUID] = []


class VesselDueResponse(CamelModel):
    id: UUID
    name: str
    imo: str
    last_inspection_date: Optional[date] = None


class MaintenanceScanResponse(CamelModel):
    ok: bool = True
    message: str
    vessels_due_for_inspection: List[VesselDueResponse] = []
