"""Integration tests for driver profile and vehicle administration."""

import pytest
import pytest_asyncio

from ridehail.domain.enums import UserRole, VehicleStatus, VehicleType

VEHICLE = {
    "make": "Toyota",
    "model": "Camry",
    "year": 2021,
    "license_plate": "lag-123-xy",
    "color": "Black",
    "vehicle_type": "sedan",
}


@pytest_asyncio.fixture
async def admin_headers(make_user, auth):
    return auth(await make_user(UserRole.ADMIN))


# ── Profiles ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_profile(client, make_user, admin_headers):
    user = await make_user(UserRole.DRIVER, full_name="Tunde Bakare")
    resp = await client.post(
        "/api/v1/admin/drivers",
        json={
            "user_id": user.id,
            "license_number": "DL-0001",
            "address_street": "4 Allen Avenue",
            "address_city": "Ikeja",
        },
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert data["user_id"] == user.id
    assert data["full_name"] == "Tunde Bakare"
    assert data["status"] == "active"
    assert data["is_verified"] is False
    assert data["total_trips"] == 0
    assert data["driver_rating"] is None
    assert data["vehicle"] is None
    assert "total_earnings" not in data


@pytest.mark.asyncio
async def test_create_profile_requires_driver_role(client, make_user, admin_headers):
    rider = await make_user()
    resp = await client.post(
        "/api/v1/admin/drivers",
        json={
            "user_id": rider.id,
            "license_number": "DL-0002",
            "address_street": "1 Broad Street",
            "address_city": "Lagos",
        },
        headers=admin_headers,
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_duplicate_profile_conflicts(client, make_driver, admin_headers):
    user, profile = await make_driver()
    resp = await client.post(
        "/api/v1/admin/drivers",
        json={
            "user_id": user.id,
            "license_number": "DL-OTHER",
            "address_street": "1 Broad Street",
            "address_city": "Lagos",
        },
        headers=admin_headers,
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_get_driver_by_user_or_profile_id(client, make_driver, admin_headers):
    user, profile = await make_driver()
    for reference in (profile.id, user.id):
        resp = await client.get(f"/api/v1/admin/drivers/{reference}", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["id"] == profile.id


@pytest.mark.asyncio
async def test_driver_sees_only_own_profile(client, make_driver, auth):
    user, profile = await make_driver()
    other, other_profile = await make_driver()

    resp = await client.get(f"/api/v1/admin/drivers/{profile.id}", headers=auth(user))
    assert resp.status_code == 200
    resp = await client.get(f"/api/v1/admin/drivers/{other_profile.id}", headers=auth(user))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_unknown_driver(client, admin_headers):
    resp = await client.get("/api/v1/admin/drivers/missing", headers=admin_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_list_filters(client, make_driver, admin_headers):
    _, verified = await make_driver(VehicleType.SEDAN)
    _, unverified = await make_driver(is_verified=False)

    resp = await client.get("/api/v1/admin/drivers?is_verified=false", headers=admin_headers)
    assert [d["id"] for d in resp.json()] == [unverified.id]

    resp = await client.get("/api/v1/admin/drivers/without-vehicles", headers=admin_headers)
    assert [d["id"] for d in resp.json()] == [unverified.id]

    resp = await client.get("/api/v1/admin/drivers", headers=admin_headers)
    assert {d["id"] for d in resp.json()} == {verified.id, unverified.id}


@pytest.mark.asyncio
async def test_status_mirrors_account_activity(client, make_driver, admin_headers, auth):
    user, profile = await make_driver()
    resp = await client.patch(
        f"/api/v1/admin/drivers/{profile.id}/status",
        json={"status": "suspended"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "suspended"

    # Suspended driver is locked out
    resp = await client.get("/api/v1/driver/profile", headers=auth(user))
    assert resp.status_code == 403

    resp = await client.patch(
        f"/api/v1/admin/drivers/{user.id}/status",
        json={"status": "active"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    resp = await client.get("/api/v1/driver/profile", headers=auth(user))
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_status_pending_rejected(client, make_driver, admin_headers):
    _, profile = await make_driver()
    resp = await client.patch(
        f"/api/v1/admin/drivers/{profile.id}/status",
        json={"status": "pending"},
        headers=admin_headers,
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_verify(client, make_driver, admin_headers):
    _, profile = await make_driver(is_verified=False)
    resp = await client.patch(
        f"/api/v1/admin/drivers/{profile.id}/verify",
        json={"notes": "Documents checked"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["is_verified"] is True
    assert data["verified_at"] is not None
    assert data["verification_notes"] == "Documents checked"


@pytest.mark.asyncio
async def test_driver_endpoints_forbidden_to_riders(client, make_user, auth):
    rider = await make_user()
    resp = await client.get("/api/v1/admin/drivers", headers=auth(rider))
    assert resp.status_code == 403
    resp = await client.get("/api/v1/driver/profile", headers=auth(rider))
    assert resp.status_code == 403


# ── Vehicle link ──────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_assign_and_unassign_vehicle(client, make_driver, make_vehicle, admin_headers):
    _, profile = await make_driver()
    vehicle = await make_vehicle(VehicleType.SUV)
    base = f"/api/v1/admin/drivers/{profile.id}"

    resp = await client.post(
        f"{base}/assign-vehicle", json={"vehicle_id": vehicle.id}, headers=admin_headers
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["vehicle"]["id"] == vehicle.id
    assert resp.json()["vehicle"]["status"] == "assigned"

    resp = await client.post(f"{base}/unassign-vehicle", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["vehicle"] is None

    resp = await client.get(f"/api/v1/admin/vehicles/{vehicle.id}", headers=admin_headers)
    assert resp.json()["status"] == "available"

    resp = await client.post(f"{base}/unassign-vehicle", headers=admin_headers)
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_vehicle_cannot_go_to_two_drivers(client, make_driver, make_vehicle, admin_headers):
    _, first = await make_driver()
    _, second = await make_driver()
    vehicle = await make_vehicle()

    resp = await client.post(
        f"/api/v1/admin/drivers/{first.id}/assign-vehicle",
        json={"vehicle_id": vehicle.id},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    resp = await client.post(
        f"/api/v1/admin/drivers/{second.id}/assign-vehicle",
        json={"vehicle_id": vehicle.id},
        headers=admin_headers,
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_driver_holding_vehicle_cannot_take_another(
    client, make_driver, make_vehicle, admin_headers
):
    _, profile = await make_driver(VehicleType.SEDAN)
    spare = await make_vehicle()
    resp = await client.post(
        f"/api/v1/admin/drivers/{profile.id}/assign-vehicle",
        json={"vehicle_id": spare.id},
        headers=admin_headers,
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_assign_missing_vehicle(client, make_driver, admin_headers):
    _, profile = await make_driver()
    resp = await client.post(
        f"/api/v1/admin/drivers/{profile.id}/assign-vehicle",
        json={"vehicle_id": "missing"},
        headers=admin_headers,
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_maintenance_vehicle_not_assignable(
    client, make_driver, make_vehicle, admin_headers
):
    _, profile = await make_driver()
    vehicle = await make_vehicle(status=VehicleStatus.MAINTENANCE)
    resp = await client.post(
        f"/api/v1/admin/drivers/{profile.id}/assign-vehicle",
        json={"vehicle_id": vehicle.id},
        headers=admin_headers,
    )
    assert resp.status_code == 409


# ── Vehicles ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_vehicle_normalises_plate(client, admin_headers):
    resp = await client.post("/api/v1/admin/vehicles", json=VEHICLE, headers=admin_headers)
    assert resp.status_code == 201
    assert resp.json()["license_plate"] == "LAG-123-XY"
    assert resp.json()["status"] == "available"

    # Plates are unique regardless of case
    resp = await client.post(
        "/api/v1/admin/vehicles",
        json={**VEHICLE, "license_plate": "LAG-123-xy"},
        headers=admin_headers,
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_vehicle_listing(client, make_vehicle, admin_headers):
    free = await make_vehicle(VehicleType.VAN)
    await make_vehicle(VehicleType.SEDAN, status=VehicleStatus.MAINTENANCE)

    resp = await client.get("/api/v1/admin/vehicles/available", headers=admin_headers)
    assert [v["id"] for v in resp.json()] == [free.id]

    resp = await client.get("/api/v1/admin/vehicles?vehicle_type=van", headers=admin_headers)
    assert [v["id"] for v in resp.json()] == [free.id]

    resp = await client.get("/api/v1/admin/vehicles", headers=admin_headers)
    assert len(resp.json()) == 2


@pytest.mark.asyncio
async def test_update_vehicle(client, make_vehicle, admin_headers):
    vehicle = await make_vehicle()
    other = await make_vehicle()
    url = f"/api/v1/admin/vehicles/{vehicle.id}"

    resp = await client.put(url, json={"color": "Blue", "status": "maintenance"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["color"] == "Blue"
    assert resp.json()["status"] == "maintenance"

    resp = await client.put(url, json={"license_plate": other.license_plate}, headers=admin_headers)
    assert resp.status_code == 409

    resp = await client.put(url, json={"status": "assigned"}, headers=admin_headers)
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_delete_vehicle(client, make_driver, make_vehicle, admin_headers):
    _, profile = await make_driver(VehicleType.SEDAN)
    spare = await make_vehicle()

    resp = await client.delete(
        f"/api/v1/admin/vehicles/{profile.vehicle_id}", headers=admin_headers
    )
    assert resp.status_code == 409

    resp = await client.delete(f"/api/v1/admin/vehicles/{spare.id}", headers=admin_headers)
    assert resp.status_code == 204
    resp = await client.get(f"/api/v1/admin/vehicles/{spare.id}", headers=admin_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_vehicles_require_admin(client, make_driver, auth):
    user, _ = await make_driver()
    resp = await client.get("/api/v1/admin/vehicles", headers=auth(user))
    assert resp.status_code == 403
