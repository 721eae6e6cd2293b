"""Quota checks against a real (SQLite) store."""
import pytest

from fleet_issues.core.config import Settings
from fleet_issues.core.exceptions import QuotaExceeded
from fleet_issues.models.enums import IssueStatus, VesselStatus
from fleet_issues.schemas.quota import IssueQuota, VesselQuota
from fleet_issues.services.quotas import (
    apply_quota,
    can_assign_more_vessels,
    can_report_more_issues,
)


@pytest.mark.parametrize("already_active", [0, 1, 2])
async def test_assign_allowed_below_cap(db, crew, make_vessel, assign, already_active):
    vessels = [await make_vessel(name=f"V{i}") for i in range(already_active)]
    if vessels:
        await assign(crew, *vessels)

    decision = await can_assign_more_vessels(db, crew.id, VesselStatus.ACTIVE, limit=3)

    assert decision.allowed is True
    assert decision.active_count == already_active
    assert decision.message is None


async def test_assign_refused_at_three_active(db, crew, make_vessel, assign):
    a = await make_vessel(name="A")
    b = await make_vessel(name="B")
    c = await make_vessel(name="C")
    await assign(crew, a, b, c)

    decision = await can_assign_more_vessels(db, crew.id, "Active", limit=3)

    assert decision.allowed is False
    assert decision.active_count == 3
    assert "3 active vessels" in decision.message


@pytest.mark.parametrize("status", [VesselStatus.IN_PORT, VesselStatus.UNDER_MAINTENANCE])
async def test_non_active_vessel_always_allowed(db, crew, make_vessel, assign, status):
    vessels = [await make_vessel(name=f"V{i}") for i in range(4)]
    await assign(crew, *vessels)

    decision = await can_assign_more_vessels(db, crew.id, status, limit=3)

    assert decision.allowed is True
    assert decision.active_count == 4


async def test_only_active_vessels_are_counted(db, crew, make_vessel, assign):
    await assign(
        crew,
        await make_vessel(name="A"),
        await make_vessel(name="B"),
        await make_vessel(name="C", status=VesselStatus.IN_PORT),
        await make_vessel(name="D", status=VesselStatus.UNDER_MAINTENANCE),
    )

    decision = await can_assign_more_vessels(db, crew.id, VesselStatus.ACTIVE, limit=3)

    assert decision.allowed is True
    assert decision.active_count == 2


async def test_vessel_going_in_port_frees_a_slot(db, crew, make_vessel, assign):
    a = await make_vessel(name="A")
    b = await make_vessel(name="B")
    c = await make_vessel(name="C")
    await assign(crew, a, b, c)

    refused = await can_assign_more_vessels(db, crew.id, VesselStatus.ACTIVE, limit=3)
    assert (refused.allowed, refused.active_count) == (False, 3)

    c.status = VesselStatus.IN_PORT.value
    await db.commit()

    allowed = await can_assign_more_vessels(db, crew.id, VesselStatus.ACTIVE, limit=3)
    assert (allowed.allowed, allowed.active_count) == (True, 2)


async def test_exclude_vessel_ignores_current_assignment(db, crew, make_vessel, assign):
    a = await make_vessel(name="A")
    b = await make_vessel(name="B")
    c = await make_vessel(name="C")
    await assign(crew, a, b, c)

    decision = await can_assign_more_vessels(db, crew.id, VesselStatus.ACTIVE, limit=3, exclude_vessel_id=c.id)

    assert decision.allowed is True
    assert decision.active_count == 2


async def test_other_users_assignments_do_not_count(db, crew, make_user, make_vessel, assign):
    other = await make_user("other@vessel.com")
    await assign(other, *[await make_vessel(name=f"V{i}") for i in range(3)])

    decision = await can_assign_more_vessels(db, crew.id, VesselStatus.ACTIVE, limit=3)

    assert decision.allowed is True
    assert decision.active_count == 0


async def test_custom_limit(db, crew, make_vessel, assign):
    await assign(crew, await make_vessel(name="A"))

    decision = await can_assign_more_vessels(db, crew.id, VesselStatus.ACTIVE, limit=1)

    assert decision.allowed is False


async def test_report_allowed_below_cap(db, crew, make_vessel, make_issue):
    vessel = await make_vessel()
    await make_issue(vessel, crew)
    await make_issue(vessel, crew)

    decision = await can_report_more_issues(db, crew.id, limit=3)

    assert decision.allowed is True
    assert decision.open_issue_count == 2


async def test_report_refused_then_allowed_after_resolve(db, crew, make_vessel, make_issue):
    vessel = await make_vessel()
    await make_issue(vessel, crew)
    await make_issue(vessel, crew)
    third = await make_issue(vessel, crew)

    refused = await can_report_more_issues(db, crew.id, limit=3)
    assert refused.allowed is False
    assert refused.open_issue_count == 3
    assert "3 open issues" in refused.message

    third.status = IssueStatus.RESOLVED.value
    await db.commit()

    allowed = await can_report_more_issues(db, crew.id, limit=3)
    assert allowed.allowed is True
    assert allowed.open_issue_count == 2


async def test_resolved_and_unattributed_issues_do_not_count(db, crew, make_vessel, make_issue):
    vessel = await make_vessel()
    await make_issue(vessel, crew, status=IssueStatus.RESOLVED)
    await make_issue(vessel, crew, status=IssueStatus.RESOLVED)
    await make_issue(vessel, crew, status=IssueStatus.RESOLVED)
    await make_issue(vessel, None)

    decision = await can_report_more_issues(db, crew.id, limit=3)

    assert decision.allowed is True
    assert decision.open_issue_count == 0


def test_apply_quota_enforce_raises():
    settings = Settings(QUOTA_ENFORCEMENT="enforce")
    decision = IssueQuota(allowed=False, open_issue_count=3, message="too many")

    with pytest.raises(QuotaExceeded) as excinfo:
        apply_quota(decision, settings, "test")

    assert excinfo.value.message == "too many"


def test_apply_quota_advisory_passes():
    settings = Settings(QUOTA_ENFORCEMENT="advisory")
    decision = VesselQuota(allowed=False, active_count=3, message="too many")

    apply_quota(decision, settings, "test")


async def test_checks_need_an_explicit_limit(db, crew):
    with pytest.raises(TypeError):
        await can_assign_more_vessels(db, crew.id, VesselStatus.ACTIVE)
    with pytest.raises(TypeError):
        await can_report_more_issues(db, crew.id)
