import uuid
from datetime import date, timedelta

from fleet_issues.models.enums import UserRole, VesselStatus


async def test_me_lists_assigned_vessels(client, crew, make_vessel, assign, auth_headers):
    a = await make_vessel(name="A")
    b = await make_vessel(name="B")
    await make_vessel(name="C")
    await assign(crew, a, b)

    r = await client.get("/api/v1/me", headers=auth_headers(crew))

    assert r.status_code == 200
    body = r.json()
    assert body["role"] == "CREW"
    assert set(body["assignedVesselIds"]) == {str(a.id), str(b.id)}


async def test_me_for_deleted_user_is_not_found(client, auth_headers):
    class Ghost:
        id = uuid.uuid4()
        email = "ghost@fleet.com"
        role = UserRole.CREW.value

    r = await client.get("/api/v1/me", headers=auth_headers(Ghost))
    assert r.status_code == 404


async def test_users_lists_crew_only_for_admin(client, admin, crew, make_user, auth_headers):
    await make_user("able@vessel.com")

    r = await client.get("/api/v1/users", headers=auth_headers(admin))

    assert r.status_code == 200
    assert [u["email"] for u in r.json()] == ["able@vessel.com", "crew@vessel.com"]
    assert set(r.json()[0]) == {"id", "email"}

    assert (await client.get("/api/v1/users", headers=auth_headers(crew))).status_code == 403
    assert (await client.get("/api/v1/users")).status_code == 401


async def test_admin_reads_user_quotas(client, admin, crew, make_vessel, assign, auth_headers):
    await assign(crew, *[await make_vessel(name=f"V{i}") for i in range(3)])

    active = await client.get(f"/api/v1/users/{crew.id}/quotas", headers=auth_headers(admin))
    assert active.status_code == 200
    assert active.json()["vessels"]["allowed"] is False
    assert active.json()["vessels"]["activeCount"] == 3
    assert active.json()["issues"]["openIssueCount"] == 0

    in_port = await client.get(
        f"/api/v1/users/{crew.id}/quotas", params={"vesselStatus": "In Port"}, headers=auth_headers(admin)
    )
    assert in_port.json()["vessels"] == {"allowed": True, "activeCount": 3, "message": None}

    missing = await client.get(f"/api/v1/users/{uuid.uuid4()}/quotas", headers=auth_headers(admin))
    assert missing.status_code == 404

    denied = await client.get(f"/api/v1/users/{crew.id}/quotas", headers=auth_headers(crew))
    assert denied.status_code == 403


async def test_maintenance_scan_flags_stale_and_missing_inspections(client, admin, crew, make_vessel, auth_headers):
    today = date.today()
    await make_vessel(name="Fresh", last_inspection_date=today - timedelta(days=10))
    await make_vessel(name="Stale", last_inspection_date=today - timedelta(days=120))
    await make_vessel(name="Never", status=VesselStatus.IN_PORT)

    r = await client.post("/api/v1/maintenance-scan", headers=auth_headers(admin))

    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert [v["name"] for v in body["vesselsDueForInspection"]] == ["Never", "Stale"]
    assert body["vesselsDueForInspection"][0]["lastInspectionDate"] is None

    assert (await client.post("/api/v1/maintenance-scan", headers=auth_headers(crew))).status_code == 403
