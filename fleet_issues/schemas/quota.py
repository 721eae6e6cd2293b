from typing import Optional

from fleet_issues.schemas.base import CamelModel


class VesselQuota(CamelModel):
    allowed: bool
    active_count: int
    message: Optional[str] = None


class IssueQuota(CamelModel):
    allowed: bool
    open_issue_count: int
    message: Optional[str] = None


class QuotaStatusResponse(CamelModel):
    vessels: VesselQuota
    issues: IssueQuota
