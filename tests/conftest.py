import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import date

import pytest
import requests
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shared.core.database import Base
from equipment_service.app.models.equipment import (
    brand, classification_node, equipment, equipment_transfer_history, maintenance_plan, outbox_event, sla, spare_part)
from equipment_service.app.models.equipment.brand import Brand
from equipment_service.app.models.equipment.classification_node import ClassificationNode
from equipment_service.app.models.equipment.sla import SLA
from equipment_service.app.crud.equipment import equipment_crud
from equipment_service.app.crud.equipment.classification_resolver import ClassificationResolver, classification_forest
from equipment_service.app.schemas.equipment.equipment_schemas import EquipmentRequest
from equipment_service.app.schemas.equipment.transfer_schemas import UserDTO
from equipment_service.util.event_publisher import EventPublisher


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def classification_tree(db):
    """
    Z11 ─ Z1101 ─ Z110101 ─ Z11010101
    C01 ─ C0101
        └ C0102
    """
    deepest = ClassificationNode(code="Z11010101", label="Infusion pump, volumetric")
    level3 = ClassificationNode(code="Z110101", label="Infusion pumps", children=[deepest])
    level2 = ClassificationNode(code="Z1101", label="Infusion systems", children=[level3])
    root_z = ClassificationNode(code="Z11", label="Instruments", children=[level2])
    root_c = ClassificationNode(code="C01", label="Cardiology", children=[
        ClassificationNode(code="C0101", label="Monitors"),
        ClassificationNode(code="C0102", label="Defibrillators"),
    ])
    db.add_all([root_z, root_c])
    db.commit()
    return {"Z11": root_z, "C01": root_c}


@pytest.fixture
def resolver(db, classification_tree):
    return ClassificationResolver(classification_forest(db))


@pytest.fixture
def brand_row(db):
    row = Brand(name="Medtronic", hospital_id="H-1")
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def sla_row(db):
    row = SLA(name="Gold", max_response_time=4, max_resolution_time=24)
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def make_equipment(db, resolver):
    def _make(name="Volumetric pump", code="Z11010101", hospital_id="H-1", **extra):
        request = EquipmentRequest(
            name=name, classification_code=code, lifespan=10, risk_class="IIb",
            hospital_id=hospital_id, **extra)
        return equipment_crud.create_equipment(db, request, resolver)
    return _make


@pytest.fixture
def received_equipment(db, make_equipment, brand_row):
    created = make_equipment()
    return equipment_crud.receive_equipment(db, created.serial_code, EquipmentRequest(
        brand="Medtronic",
        supplier="MedSupply",
        service_id="S-OLD",
        acquisition_date=date(2024, 1, 10),
        start_date_warranty=date(2024, 1, 10),
        end_date_warranty=date(2026, 1, 10),
        amount=12500.0,
    ))


# ============================================================================
# Collaborators
# ============================================================================

class FakeUserDirectory:

    def __init__(self, supervisors=None, admins=None, hospital_users=None, fail=False):
        self.supervisors = supervisors or {}
        self.admins = admins or {}
        self.hospital_users = hospital_users or {}
        self.fail = fail
        self.calls = []

    def _check(self, name, *args):
        self.calls.append((name, *args))
        if self.fail:
            raise requests.ConnectionError("user-service unreachable")

    def get_service_supervisors(self, token, service_id):
        self._check("supervisors", token, service_id)
        return self.supervisors.get(service_id, [])

    def get_admin_by_hospital_id(self, token, hospital_id):
        self._check("admin", token, hospital_id)
        return self.admins.get(hospital_id)

    def get_users_by_hospital_and_roles(self, token, hospital_id, roles):
        self._check("users", token, hospital_id, tuple(roles))
        return self.hospital_users.get(hospital_id, [])


class FakeHospitalDirectory:

    def __init__(self, services=None, hospitals=None, fail=False):
        self.services = services or {}
        self.hospitals = hospitals or {}
        self.fail = fail

    def get_service_name(self, token, service_id):
        if self.fail:
            raise requests.Timeout("hospital-service timed out")
        return self.services.get(service_id)

    def get_hospital_name(self, token, hospital_id):
        if self.fail:
            raise requests.Timeout("hospital-service timed out")
        return self.hospitals.get(hospital_id)


class RecordingPublisher(EventPublisher):

    def __init__(self, fail=False):
        self.events = []
        self.fail = fail

    def publish(self, topic, payload):
        if self.fail:
            raise RuntimeError("broker down")
        self.events.append((topic, payload))

    def topics(self):
        return [topic for topic, _ in self.events]


def user(id, first, last, email):
    return UserDTO(id=id, first_name=first, last_name=last, email=email)


@pytest.fixture
def actor():
    return user("U-1", "Amina", "Benali", "amina@ministry.example")


@pytest.fixture
def publisher():
    return RecordingPublisher()
