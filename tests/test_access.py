import uuid

import pytest

from fleet_issues.core.exceptions import Forbidden
from fleet_issues.core.security import Principal
from fleet_issues.models.enums import UserRole
from fleet_issues.services.access import can_access_vessel, ensure_vessel_access


def principal_for(user):
    return Principal(id=user.id, email=user.email, role=user.role)


async def test_admin_can_access_any_vessel(db, admin, make_vessel):
    vessel = await make_vessel()

    assert await can_access_vessel(db, principal_for(admin), vessel.id) is True
    # Even ids that resolve to nothing
    assert await can_access_vessel(db, principal_for(admin), uuid.uuid4()) is True


async def test_crew_access_requires_assignment(db, crew, make_vessel, assign):
    mine = await make_vessel(name="Mine")
    theirs = await make_vessel(name="Theirs")
    await assign(crew, mine)

    principal = principal_for(crew)
    assert await can_access_vessel(db, principal, mine.id) is True
    assert await can_access_vessel(db, principal, theirs.id) is False
    assert await can_access_vessel(db, principal, uuid.uuid4()) is False


async def test_crew_access_is_per_user(db, crew, make_user, make_vessel, assign):
    other = await make_user("other@vessel.com")
    vessel = await make_vessel()
    await assign(other, vessel)

    assert await can_access_vessel(db, principal_for(crew), vessel.id) is False
    assert await can_access_vessel(db, principal_for(other), vessel.id) is True


async def test_ensure_vessel_access_raises_forbidden(db, crew, make_vessel):
    vessel = await make_vessel()

    with pytest.raises(Forbidden) as excinfo:
        await ensure_vessel_access(db, principal_for(crew), vessel.id, "Forbidden: vessel not assigned")

    assert excinfo.value.message == "Forbidden: vessel not assigned"


def test_principal_role_parsing():
    principal = Principal(id=uuid.uuid4(), email="a@b.com", role="ADMIN")

    assert principal.role is UserRole.ADMIN
    assert principal.is_admin is True
