import pytest
from fastapi.testclient import TestClient
from jose import jwt

from conftest import FakeHospitalDirectory, FakeUserDirectory, user
from shared.core.config import settings
from shared.core.database import get_db
from shared.utils.app_status_code import AppStatusCode
from equipment_service.app.main import app
from equipment_service.app.models.equipment.outbox_event import OutboxEvent
from equipment_service.util.hospital_directory_client import get_hospital_directory
from equipment_service.util.user_directory_client import get_user_directory


def make_token(**claims):
    payload = {
        "user_id": "U-1",
        "first_name": "Amina",
        "last_name": "Benali",
        "email": "amina@ministry.example",
        "hospital_id": "H-1",
        "roles": ["ROLE_MINISTRY_ADMIN"],
    }
    payload.update(claims)
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


@pytest.fixture
def users():
    return FakeUserDirectory(supervisors={"S-NEW": [user("U-11", "Lina", "Meziane", "lina@hospital.example")]})


@pytest.fixture
def client(db, classification_tree, users):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_user_directory] = lambda: users
    app.dependency_overrides[get_hospital_directory] = lambda: FakeHospitalDirectory(
        services={"S-OLD": "Radiology", "S-NEW": "Cardiology"})
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def headers():
    return {"Authorization": f"Bearer {make_token()}"}


def create(client, headers, name="Volumetric pump"):
    return client.post("/api/equipments/", headers=headers, json={
        "name": name, "classification_code": "Z11010101", "lifespan": 10,
        "risk_class": "IIb", "hospital_id": "H-1",
    })


def test_create_returns_serial_code(client, headers):
    response = create(client, headers)

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "Success"
    assert body["status_code"] == AppStatusCode.CREATED_SUCCESSFULLY
    assert len(body["data"]["serial_code"]) == 10

    fetched = client.get(f"/api/equipments/{body['data']['id']}", headers=headers).json()
    assert fetched["data"]["status"] == "awaiting reception"
    assert fetched["data"]["classification_code"] == "Z11010101"


def test_duplicate_name_is_a_conflict(client, headers):
    create(client, headers)
    response = create(client, headers)

    assert response.status_code == 409
    body = response.json()
    assert body["status"] == "Failure"
    assert body["status_code"] == AppStatusCode.DUPLICATE_ADD_ERROR
    assert body["data"] is None


def test_unknown_classification_is_bad_request(client, headers):
    response = client.post("/api/equipments/", headers=headers, json={
        "name": "Pump", "classification_code": "NOPE", "lifespan": 10, "risk_class": "IIb"})

    assert response.status_code == 400
    assert response.json()["status_code"] == AppStatusCode.INVALID_REFERENCE


def test_missing_equipment_is_not_found(client, headers):
    response = client.get("/api/equipments/missing", headers=headers)

    assert response.status_code == 404
    assert response.json()["status_code"] == AppStatusCode.RECORD_NOT_FOUND


def test_requests_need_a_token(client):
    response = client.get("/api/equipments/non-received")
    assert response.status_code in (401, 403)


def test_forged_token_is_rejected(client):
    forged = jwt.encode({"user_id": "U-1"}, "another-secret", algorithm="HS256")
    response = client.get("/api/equipments/non-received", headers={"Authorization": f"Bearer {forged}"})

    assert response.status_code == 401
    assert response.json()["status_code"] == AppStatusCode.AUTHENTICATION_TOKEN_INVALID


def test_reception_queue(client, headers):
    create(client, headers, name="Pump A")
    create(client, headers, name="Pump B")

    body = client.get("/api/equipments/non-received", headers=headers).json()
    assert sorted(e["name"] for e in body["data"]) == ["Pump A", "Pump B"]


def test_inter_service_transfer_endpoint(client, headers, db, users):
    equipment_id = create(client, headers).json()["data"]["id"]

    response = client.put(f"/api/equipments/{equipment_id}/transfer/service", headers=headers, json={
        "new_service_id": "S-NEW", "description": "Needed in cardiology"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["equipment"]["service_id"] == "S-NEW"
    assert data["history"]["type"] == "INTER_SERVICE"
    assert data["history"]["initiated_by_name"] == "Amina Benali"
    assert data["degraded_steps"] == []

    # the caller's token is forwarded to the directories
    assert ("supervisors", make_token(), "S-NEW") in users.calls
    assert db.query(OutboxEvent).count() == 2

    history = client.get(f"/api/equipments/{equipment_id}/transfer-history", headers=headers).json()
    assert len(history["data"]) == 1


def test_delete_returns_summary(client, headers):
    equipment_id = create(client, headers).json()["data"]["id"]
    client.post(f"/api/equipments/{equipment_id}/spare-parts", headers=headers, json={"name": "Battery"})
    client.post(f"/api/equipments/{equipment_id}/maintenance-plans", headers=headers,
                json={"description": "Yearly check"})

    response = client.delete(f"/api/equipments/{equipment_id}", headers=headers)

    assert response.status_code == 200
    assert response.json()["data"] == {
        "spare_part_plans_deleted": 0,
        "direct_plans_deleted": 1,
        "spare_parts_deleted": 1,
        "equipment_deleted": 1,
    }
    assert client.get(f"/api/equipments/{equipment_id}", headers=headers).status_code == 404
