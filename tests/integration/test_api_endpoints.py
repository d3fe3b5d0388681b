"""
API endpoint tests
"""
from fastapi import status

ACTOR = {"X-Actor-Id": "inspector-1"}


def create_equipment(client, **fields):
    payload = {
        "brand": "Petzl",
        "model": "Volta",
        "type": "CORDE",
        "commissioning_date": "2024-01-31",
        "inspection_frequency_months": 1,
    }
    payload.update(fields)
    response = client.post("/equipments/", json=payload)
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["equipment"]


class TestRootEndpoints:

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["docs"] == "/docs"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] is True


class TestEquipmentEndpoints:

    def test_create_and_get(self, client):
        created = create_equipment(client, identifier="ROPE-01")

        response = client.get(f"/equipments/{created['id']}")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["equipment"]["identifier"] == "ROPE-01"

    def test_create_defaults_commissioning_date(self, client):
        created = create_equipment(client, commissioning_date=None)

        assert created["commissioning_date"] is not None

    def test_create_invalid_frequency(self, client):
        response = client.post("/equipments/", json={
            "brand": "Petzl", "model": "Volta", "type": "CORDE", "inspection_frequency_months": 0,
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "invalid_frequency"

    def test_create_missing_brand(self, client):
        response = client.post("/equipments/", json={"model": "Volta", "type": "CORDE", "inspection_frequency_months": 6})

        assert response.status_code == 422

    def test_get_unknown(self, client):
        response = client.get("/equipments/999")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error_code"] == "equipment_not_found"

    def test_list_by_type(self, client):
        create_equipment(client, type="CASQUE")
        create_equipment(client, type="CORDE")

        response = client.get("/equipments/", params={"type": "CASQUE"})

        assert [e["type"] for e in response.json()["equipments"]] == ["CASQUE"]

    def test_due_date_month_end(self, client):
        created = create_equipment(client)

        response = client.get(f"/equipments/{created['id']}/due-date", params={"as_of": "2024-02-01"})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["equipmentId"] == created["id"]
        assert data["nextDueDate"] == "2024-02-29"
        assert data["daysRemaining"] == 28
        assert data["lastInspectionDate"] is None

    def test_update(self, client):
        created = create_equipment(client)

        response = client.put(f"/equipments/{created['id']}", json={"inspection_frequency_months": 12})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["equipment"]["inspection_frequency_months"] == 12

    def test_delete_cascades(self, client):
        created = create_equipment(client)
        client.post("/inspections/", json={
            "equipment_id": created["id"], "inspection_date": "2024-02-10", "outcome": "OPERATIONAL",
        }, headers=ACTOR)

        response = client.delete(f"/equipments/{created['id']}")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["inspections_deleted"] == 1
        assert client.get("/inspections/").json()["inspections"] == []


class TestNeedControlEndpoint:

    def test_horizon_and_reference_day(self, client):
        seven = create_equipment(client, commissioning_date="2023-09-08", inspection_frequency_months=6)
        create_equipment(client, commissioning_date="2023-09-09", inspection_frequency_months=6)
        due = create_equipment(client, commissioning_date="2023-09-01", inspection_frequency_months=6)

        response = client.get("/equipments/need-control", params={"days": 7, "as_of": "2024-03-01"})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["days"] == 7
        assert data["as_of"] == "2024-03-01"
        assert [(e["equipmentId"], e["daysRemaining"], e["urgency"]) for e in data["equipments"]] == [
            (due["id"], 0, "overdue"),
            (seven["id"], 7, "dueSoon"),
        ]

    def test_default_horizon(self, client):
        create_equipment(client, commissioning_date="2024-01-01", inspection_frequency_months=6)

        data = client.get("/equipments/need-control", params={"as_of": "2024-06-01"}).json()

        assert data["days"] == 30
        assert len(data["equipments"]) == 1

    def test_negative_horizon_rejected(self, client):
        response = client.get("/equipments/need-control", params={"days": -1})

        assert response.status_code == 422


class TestInspectionEndpoints:

    def test_record_requires_actor(self, client):
        created = create_equipment(client)

        response = client.post("/inspections/", json={
            "equipment_id": created["id"], "inspection_date": "2024-02-10", "outcome": "OPERATIONAL",
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_record_for_unknown_equipment(self, client):
        response = client.post("/inspections/", json={
            "equipment_id": 404, "inspection_date": "2024-02-10", "outcome": "OPERATIONAL",
        }, headers=ACTOR)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error_code"] == "equipment_not_found"

    def test_record_moves_due_date(self, client):
        created = create_equipment(client, commissioning_date="2023-01-01", inspection_frequency_months=12)

        response = client.post("/inspections/", json={
            "equipment_id": created["id"], "inspection_date": "2023-06-15", "outcome": "Opérationnel",
        }, headers=ACTOR)

        assert response.status_code == status.HTTP_201_CREATED
        inspection = response.json()["inspection"]
        assert inspection["actor_id"] == "inspector-1"
        assert inspection["outcome"] == "OPERATIONAL"

        due = client.get(f"/equipments/{created['id']}/due-date", params={"as_of": "2024-01-01"}).json()
        assert due["lastInspectionDate"] == "2023-06-15"
        assert due["nextDueDate"] == "2024-06-15"

    def test_list_for_equipment(self, client):
        created = create_equipment(client)
        for day in ("2024-01-05", "2024-03-05"):
            client.post("/inspections/", json={
                "equipment_id": created["id"], "inspection_date": day, "outcome": "OPERATIONAL",
            }, headers=ACTOR)

        response = client.get(f"/inspections/equipment/{created['id']}")

        assert [i["inspection_date"] for i in response.json()["inspections"]] == ["2024-03-05", "2024-01-05"]

    def test_list_by_actor(self, client):
        created = create_equipment(client)
        for actor, day in (("alice", "2024-01-05"), ("bob", "2024-02-05"), ("alice", "2024-03-05")):
            client.post("/inspections/", json={
                "equipment_id": created["id"], "inspection_date": day, "outcome": "OPERATIONAL",
            }, headers={"X-Actor-Id": actor})

        response = client.get("/inspections/actor/alice")

        assert response.status_code == status.HTTP_200_OK
        inspections = response.json()["inspections"]
        assert [i["inspection_date"] for i in inspections] == ["2024-03-05", "2024-01-05"]
        assert all(i["actor_id"] == "alice" for i in inspections)

    def test_get_unknown(self, client):
        response = client.get("/inspections/31")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error_code"] == "inspection_not_found"

    def test_cleanup_orphans(self, client):
        response = client.post("/inspections/cleanup-orphans")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["deleted"] == 0

    def test_stats(self, client):
        created = create_equipment(client)
        client.post("/inspections/", json={
            "equipment_id": created["id"], "inspection_date": "2024-05-05", "outcome": "RETIRED",
        }, headers=ACTOR)

        data = client.get("/inspections/stats", params={"as_of": "2024-06-01"}).json()

        assert data["total"] == 1
        assert data["by_outcome"] == [{"outcome": "RETIRED", "count": 1}]


class TestAlertsEndpoint:

    def test_alerts(self, client):
        created = create_equipment(client, identifier="ROPE-09")

        response = client.get("/alerts/", params={"as_of": "2024-02-29", "days": 10})

        assert response.status_code == status.HTTP_200_OK
        alerts = response.json()["alerts"]
        assert len(alerts) == 1
        assert alerts[0]["equipmentId"] == created["id"]
        assert alerts[0]["identifier"] == "ROPE-09"
        assert alerts[0]["label"] == "Immediate inspection"
        assert alerts[0]["nextDueDisplay"] == "29/02/2024"
