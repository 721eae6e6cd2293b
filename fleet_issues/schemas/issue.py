from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import constr

from fleet_issues.models.enums import IssuePriority, IssueStatus
from fleet_issues.schemas.base import CamelModel


class IssueCreate(CamelModel):
    vessel_id: UUID
    category: constr(min_length=1)
    description: constr(min_length=1)
    priority: IssuePriority


class IssueUpdate(CamelModel):
    status: Optional[IssueStatus] = None
    # null clears it, omitted leaves it alone
    recommendation: Optional[str] = None


class IssueVessel(CamelModel):
    id: UUID
    name: str


class IssueResponse(CamelModel):
    id: UUID
    vessel_id: UUID
    reported_by_id: Optional[UUID] = None
    category: str
    description: str
    priority: IssuePriority
    status: IssueStatus
    recommendation: Optional[str] = None
    created_at: datetime
    vessel: Optional[IssueVessel] = None
