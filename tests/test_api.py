import uuid

from sqlalchemy import select

from hostel_allocation.models.audit.audit_log import AuditLog

API = "/api/v1"


def create_asset(client, **overrides):
    data = {
        "category": "bed",
        "item_name": f"Bed {uuid.uuid4().hex[:4]}",
        "location": "Block A",
        "floor": "1",
        "room_label": "101",
    }
    data.update(overrides)
    resp = client.post(f"{API}/assets", json=data)
    assert resp.status_code == 201
    return resp.json()


def enroll(client, **overrides):
    data = {
        "external_resident_code": f"STU{uuid.uuid4().hex[:8].upper()}",
        "first_name": "Meera",
        "last_name": "Iyer",
    }
    data.update(overrides)
    return client.post(f"{API}/residents", json=data)


def test_asset_lifecycle(client):
    asset = create_asset(client, external_code="bed-a101")
    assert asset["state"] == "available"
    assert asset["external_code"] == "BED-A101"
    assert len(asset["public_slug"]) == 10
    assert asset["public_url"] == f"https://hostel.example/p/{asset['public_slug']}"
    assert asset["human_label"] == "Block A / Floor 1 / Room 101"

    by_code = client.get(f"{API}/assets/by-code/bed-a101")
    assert by_code.status_code == 200
    assert by_code.json()["id"] == asset["id"]

    by_slug = client.get(f"{API}/assets/by-slug/{asset['public_slug']}")
    assert by_slug.json()["id"] == asset["id"]

    qr = client.get(f"{API}/assets/{asset['id']}/qr")
    assert qr.status_code == 200
    assert qr.headers["content-type"] == "image/png"
    assert qr.content.startswith(b"\x89PNG")

    maint = client.patch(f"{API}/assets/{asset['id']}/maintenance", json={"state": "damaged"})
    assert maint.status_code == 200
    assert maint.json()["state"] == "damaged"

    available = client.get(f"{API}/assets/available", params={"category": "bed"})
    assert available.json() == []

    summary = client.get(f"{API}/assets/summary").json()
    assert summary["total"] == 1
    assert summary["damaged"] == 1

    deleted = client.delete(f"{API}/assets/{asset['id']}")
    assert deleted.status_code == 204
    assert client.get(f"{API}/assets/{asset['id']}").status_code == 404


def test_asset_validation(client):
    missing = client.post(f"{API}/assets", json={"category": "bed"})
    assert missing.status_code == 422

    with_state = client.post(
        f"{API}/assets",
        json={
            "category": "bed",
            "item_name": "Bed Q",
            "location": "Block A",
            "room_label": "101",
            "state": "occupied",
        },
    )
    assert with_state.status_code == 422

    asset = create_asset(client)
    occupied = client.patch(f"{API}/assets/{asset['id']}/maintenance", json={"state": "occupied"})
    assert occupied.status_code == 422

    duplicate = client.post(
        f"{API}/assets",
        json={
            "category": "bed",
            "item_name": "Bed Z",
            "location": "Block A",
            "room_label": "101",
            "external_code": asset["external_code"],
        },
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["error"]["code"] == "DUPLICATE_ENTRY"


def test_allocation_flow(client):
    b1 = create_asset(client)
    b2 = create_asset(client)

    resp = enroll(client, asset_id=b1["id"])
    assert resp.status_code == 201
    body = resp.json()
    r1 = body["resident"]
    assert r1["assigned_asset_id"] == b1["id"]
    assert body["asset"]["state"] == "occupied"
    assert body["changed"]

    taken = enroll(client, asset_id=b1["id"])
    assert taken.status_code == 409
    error = taken.json()["error"]
    assert error["code"] == "ASSET_UNAVAILABLE"
    assert error["request_id"] == taken.headers["X-Request-ID"]

    moved = client.post(f"{API}/allocations/assign", json={"resident_id": r1["id"], "asset_id": b2["id"]})
    assert moved.status_code == 200
    assert moved.json()["previous_asset_id"] == b1["id"]
    assert moved.json()["asset"]["id"] == b2["id"]
    assert client.get(f"{API}/assets/{b1['id']}").json()["state"] == "available"

    released = client.post(f"{API}/allocations/release", json={"resident_id": r1["id"]})
    assert released.status_code == 200
    assert released.json()["asset"]["id"] == b2["id"]
    assert released.json()["asset"]["state"] == "available"
    assert released.json()["resident"]["assigned_asset_id"] is None

    again = client.post(f"{API}/allocations/release", json={"resident_id": r1["id"]})
    assert again.status_code == 200
    assert not again.json()["changed"]


def test_maintenance_refused_while_occupied(client):
    asset = create_asset(client)
    enroll(client, asset_id=asset["id"])

    resp = client.patch(f"{API}/assets/{asset['id']}/maintenance", json={"state": "in_maintenance"})
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "ASSET_OCCUPIED"

    retire = client.delete(f"{API}/assets/{asset['id']}")
    assert retire.status_code == 409


def test_swap(client):
    b1 = create_asset(client)
    b2 = create_asset(client)
    r1 = enroll(client, asset_id=b1["id"]).json()["resident"]
    r2 = enroll(client, asset_id=b2["id"]).json()["resident"]

    resp = client.post(
        f"{API}/allocations/swap",
        json={"first_resident_id": r1["id"], "second_resident_id": r2["id"]},
    )
    assert resp.status_code == 200
    residents = resp.json()["residents"]
    assert residents[0]["assigned_asset_id"] == b2["id"]
    assert residents[1]["assigned_asset_id"] == b1["id"]

    same = client.post(
        f"{API}/allocations/swap",
        json={"first_resident_id": r1["id"], "second_resident_id": r1["id"]},
    )
    assert same.status_code == 422


def test_unknown_ids_return_404(client):
    asset = create_asset(client)

    resp = client.post(f"{API}/allocations/assign", json={"resident_id": "missing", "asset_id": asset["id"]})
    assert resp.status_code == 404
    assert resp.json()["error"]["details"]["resource_type"] == "Resident"

    assert client.get(f"{API}/residents/missing").status_code == 404
    assert client.get(f"{API}/assets/by-slug/nothing").status_code == 404
    assert client.post(f"{API}/allocations/release", json={"resident_id": "missing"}).status_code == 404


def test_actor_header_is_audited(client, database):
    asset = create_asset(client)
    resident = enroll(client).json()["resident"]

    resp = client.post(
        f"{API}/allocations/assign",
        json={"resident_id": resident["id"], "asset_id": asset["id"]},
        headers={"X-Actor-Id": "warden-7"},
    )
    assert resp.status_code == 200
    assert client.app.state.dispatcher.flush(timeout=5)

    with database.session_scope() as s:
        logs = s.execute(
            select(AuditLog).where(AuditLog.action == "asset_assigned")
        ).scalars().all()
        assert len(logs) == 1
        assert logs[0].actor_id == "warden-7"
        assert logs[0].target_id == resident["id"]


def test_resident_checkout_and_removal(client):
    asset = create_asset(client)
    resident = enroll(client, external_resident_code="stu-900", asset_id=asset["id"]).json()["resident"]

    by_code = client.get(f"{API}/residents/by-code/STU-900")
    assert by_code.status_code == 200
    assert by_code.json()["id"] == resident["id"]

    checkout = client.post(f"{API}/residents/{resident['id']}/checkout")
    assert checkout.status_code == 200
    assert not checkout.json()["resident"]["is_active"]
    assert client.get(f"{API}/assets/{asset['id']}").json()["state"] == "available"

    reassign = client.post(f"{API}/allocations/assign", json={"resident_id": resident["id"], "asset_id": asset["id"]})
    assert reassign.status_code == 422

    removed = client.delete(f"{API}/residents/{resident['id']}")
    assert removed.status_code == 204
    assert client.get(f"{API}/residents/{resident['id']}").status_code == 404


def test_health_and_metrics(client):
    health = client.get(f"{API}/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"
    assert health.json()["database"]["is_connected"]

    create_asset(client)
    enroll(client)

    metrics = client.get(f"{API}/metrics")
    assert metrics.status_code == 200
    assert "allocation_operations_total" in metrics.text
