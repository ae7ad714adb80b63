from __future__ import annotations

from fastapi.testclient import TestClient

from app import create_app


ADMIN_TOKEN = "secret-admin-token"
DIRECTORY = {
    "collaborators": [
        {"id": "col_ana", "codigo": "COL-001", "nombre": "Ana", "apellido": "González", "departamento": "Recepción"},
        {"id": "col_bruno", "codigo": "COL-002", "nombre": "Bruno", "apellido": "Díaz", "departamento": "Mantenimiento"},
        {"id": "col_carla", "codigo": "COL-003", "nombre": "Carla", "apellido": "Ruiz"},
    ]
}


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _first_room(palace: dict, apartment_index: int = 0, room_index: int = 0) -> dict:
    return palace["floors"][0]["apartments"][apartment_index]["rooms"][room_index]


def test_tenant_end_to_end_flow(make_settings) -> None:
    app = create_app(make_settings(admin_token=ADMIN_TOKEN))

    with TestClient(app) as client:
        # Login and tenant registration
        bad_login = client.post("/login", json={"admin_token": "wrong"})
        assert bad_login.status_code == 401

        login = client.post("/login", json={"admin_token": ADMIN_TOKEN})
        assert login.status_code == 200
        admin_token = login.json()["access_token"]

        anonymous = client.post("/admin/tenants", json={"namespace": "acme"})
        assert anonymous.status_code == 401

        created = client.post("/admin/tenants", json={"namespace": "Acme"}, headers=_auth(admin_token))
        assert created.status_code == 201
        assert created.json()["namespace"] == "acme"
        tenant_token = created.json()["accessToken"]

        duplicate = client.post("/admin/tenants", json={"namespace": "acme"}, headers=_auth(admin_token))
        assert duplicate.status_code == 400
        assert duplicate.json()["detail"]["code"] == "tenant_exists"

        forbidden = client.get("/admin/tenants", headers=_auth(tenant_token))
        assert forbidden.status_code == 403

        tenants = client.get("/admin/tenants", headers=_auth(admin_token)).json()
        assert tenants["namespaces"] == ["acme", tenants["defaultNamespace"]]

        # Structure and directory inside the tenant
        headers = _auth(tenant_token)
        palace_response = client.post(
            "/palaces",
            json={"floors": 1, "apartmentsPerFloor": 2, "roomsPerApartment": 2},
            headers=headers,
        )
        assert palace_response.status_code == 201
        body = palace_response.json()
        palace = body["palace"]
        assert palace["name"] == "Edificio 01"
        assert body["stats"]["rooms"] == 4

        sync = client.put("/collaborators", json=DIRECTORY, headers=headers)
        assert sync.status_code == 200
        assert sync.json()["sync"] == {"created": 3, "updated": 0, "total": 3}

        # Assignment
        room = _first_room(palace)
        assign_url = f"/palaces/{palace['id']}/rooms/{room['id']}/collaborators"
        assigned = client.put(assign_url, json={"collaboratorIds": ["col_ana", "col_bruno"]}, headers=headers)
        assert assigned.status_code == 200
        assigned_room = assigned.json()["room"]
        assert assigned_room["status"] == "occupied"
        assert assigned_room["guests"] == 2
        assert [item["codigo"] for item in assigned_room["collaborators"]] == ["COL-001", "COL-002"]

        too_many = client.put(
            assign_url,
            json={"collaboratorIds": ["col_ana", "col_bruno", "col_carla"]},
            headers=headers,
        )
        assert too_many.status_code == 422

        # Move into the other apartment
        target = _first_room(palace, apartment_index=1)
        moved = client.post(
            "/assignments/move",
            json={
                "collaboratorId": "col_ana",
                "from": {"palaceId": palace["id"], "roomId": room["id"]},
                "to": {"palaceId": palace["id"], "roomId": target["id"]},
            },
            headers=headers,
        )
        assert moved.status_code == 200
        assert moved.json()["to"]["collaboratorIds"] == ["col_ana"]
        assert moved.json()["from"]["collaboratorIds"] == ["col_bruno"]

        lookup = client.get("/assignments/col_ana", headers=headers).json()
        assert [item["roomId"] for item in lookup["assignments"]] == [target["id"]]

        # Pre-checkin fills the remaining slot of the target room
        pre_checkin_url = f"/palaces/{palace['id']}/rooms/{target['id']}/pre_checkin"
        scheduled = client.put(
            pre_checkin_url,
            json={"guestName": "Luis", "checkinDate": "2025-12-01T15:00:00Z"},
            headers=headers,
        )
        assert scheduled.status_code == 200
        assert scheduled.json()["room"]["availableSlots"] == 0

        full = client.post(
            "/assignments/move",
            json={
                "collaboratorId": "col_bruno",
                "from": {"palaceId": palace["id"], "roomId": room["id"]},
                "to": {"palaceId": palace["id"], "roomId": target["id"]},
            },
            headers=headers,
        )
        assert full.status_code == 409
        assert full.json()["detail"]["code"] == "destination_full"

        bad_date = client.put(pre_checkin_url, json={"checkinDate": "someday"}, headers=headers)
        assert bad_date.status_code == 400

        # Apartment lifecycle
        apartment_id = palace["floors"][0]["apartments"][0]["id"]
        out_of_service = client.patch(
            f"/palaces/{palace['id']}/apartments/{apartment_id}/status",
            json={"status": "out_of_service", "note": "AC repair"},
            headers=headers,
        )
        assert out_of_service.status_code == 200
        assert out_of_service.json()["apartment"]["outOfServiceNote"] == "AC repair"
        assert out_of_service.json()["stats"]["maintenance"] == 2

        blocked = client.put(assign_url, json={"collaboratorIds": ["col_bruno", "col_carla"]}, headers=headers)
        assert blocked.status_code == 400
        assert blocked.json()["detail"]["code"] == "apartment_out_of_service"

        # Movements and dashboard
        movements = client.get("/collaborators/movements", params={"limit": 2}, headers=headers).json()
        assert movements["total"] == 3
        assert movements["movements"][0]["type"] == "relocation"

        reversed_range = client.get(
            "/collaborators/movements",
            params={"from": "2025-02-10", "to": "2025-02-01"},
            headers=headers,
        )
        assert reversed_range.status_code == 400

        overview = client.get("/dashboard/overview", headers=headers).json()
        assert overview["namespace"] == "acme"
        assert overview["alerts"][0]["level"] == "error"

        # The default tenant never saw any of it
        default_palaces = client.get("/palaces", headers=_auth(admin_token)).json()
        assert default_palaces["palaces"] == []
        peeked = client.get("/palaces", headers={**_auth(admin_token), "X-Tenant-Namespace": "acme"}).json()
        assert len(peeked["palaces"]) == 1

        # Tenant removal
        protected = client.delete(f"/admin/tenants/{tenants['defaultNamespace']}", headers=_auth(admin_token))
        assert protected.status_code == 403
        removed = client.delete("/admin/tenants/acme", headers=_auth(admin_token))
        assert removed.status_code == 200


def test_structural_errors_map_to_conflict(make_settings) -> None:
    app = create_app(make_settings())

    with TestClient(app) as client:
        palace = client.post(
            "/palaces",
            json={"floors": 1, "apartmentsPerFloor": 1, "roomsPerApartment": 1},
        ).json()["palace"]
        floor_id = palace["floors"][0]["id"]

        last_floor = client.delete(f"/palaces/{palace['id']}/floors/{floor_id}")
        assert last_floor.status_code == 409
        assert last_floor.json()["detail"]["code"] == "structural_error"

        missing = client.get("/palaces/palace_missing")
        assert missing.status_code == 404

        added = client.post(f"/palaces/{palace['id']}/floors")
        assert added.status_code == 201
        assert added.json()["floor"]["name"] == "Piso 2"

        removed = client.delete(f"/palaces/{palace['id']}/floors/{floor_id}")
        assert removed.status_code == 200
        assert removed.json()["palace"]["floors"][0]["name"] == "Piso 1"

        room_id = removed.json()["palace"]["floors"][0]["apartments"][0]["rooms"][0]["id"]
        maintenance = client.patch(
            f"/palaces/{palace['id']}/rooms/{room_id}",
            json={"status": "maintenance", "maintenanceNote": "Pintura", "maintenanceAreaType": "common"},
        )
        assert maintenance.status_code == 200
        assert maintenance.json()["room"]["maintenanceAreaType"] == "common"

        invalid_area = client.patch(
            f"/palaces/{palace['id']}/rooms/{room_id}",
            json={"status": "maintenance", "maintenanceNote": "Pintura", "maintenanceAreaType": "roof"},
        )
        assert invalid_area.status_code == 422


def test_required_authentication_rejects_anonymous(make_settings) -> None:
    app = create_app(make_settings(admin_token=ADMIN_TOKEN, require_authentication=True))

    with TestClient(app) as client:
        assert client.get("/palaces").status_code == 401
        assert client.get("/palaces", headers=_auth("not-a-jwt")).status_code == 401

        token = client.post("/login", json={"admin_token": ADMIN_TOKEN}).json()["access_token"]
        assert client.get("/palaces", headers=_auth(token)).status_code == 200


def test_snapshots_survive_app_restart(make_settings) -> None:
    settings = make_settings(persist_snapshots=True)

    with TestClient(create_app(settings)) as client:
        created = client.post("/palaces", json={"floors": 1, "customName": "Casa Norte"})
        assert created.status_code == 201
        exported = client.get("/tenant/snapshot").json()

    with TestClient(create_app(settings)) as client:
        palaces = client.get("/palaces").json()["palaces"]
        assert [palace["name"] for palace in palaces] == ["Casa Norte"]

        imported = client.put("/tenant/snapshot", json={**exported, "palaces": []})
        assert imported.status_code == 200
        assert client.get("/palaces").json()["palaces"] == []


def test_demo_seed_populates_default_tenant(make_settings) -> None:
    settings = make_settings(seed_demo_palaces=True, seed_demo_collaborators=True, demo_palace_count=1)

    with TestClient(create_app(settings)) as client:
        overview = client.get("/dashboard/overview").json()

    assert overview["stats"]["totalPalaces"] == 1
    assert overview["collaborators"] == {"total": 7, "activos": 6, "retirados": 1}
    assert overview["stats"]["roomsOccupied"] == 2


def test_malformed_palace_payload_maps_to_bad_request(make_settings) -> None:
    app = create_app(make_settings())

    with TestClient(app) as client:
        palace = client.post(
            "/palaces",
            json={"floors": 1, "apartmentsPerFloor": 1, "roomsPerApartment": 2},
        ).json()["palace"]
        url = f"/palaces/{palace['id']}"

        _first_room(palace)["guests"] = "abc"
        bad_guests = client.put(url, json=palace)
        assert bad_guests.status_code == 400
        assert bad_guests.json()["detail"]["code"] == "validation_error"

        _first_room(palace)["guests"] = 0
        _first_room(palace)["preCheckin"] = "tomorrow"
        bad_pre_checkin = client.put(url, json=palace)
        assert bad_pre_checkin.status_code == 400

        _first_room(palace)["preCheckin"] = None
        palace["floors"][0]["apartments"][0]["rooms"].append("room")
        bad_entry = client.put(url, json=palace)
        assert bad_entry.status_code == 400

        palace["floors"][0]["apartments"][0]["rooms"].pop()
        unchanged = client.get(url)
        assert unchanged.status_code == 200
        assert len(unchanged.json()["palace"]["floors"][0]["apartments"][0]["rooms"]) == 2
        assert client.put(url, json=palace).status_code == 200
