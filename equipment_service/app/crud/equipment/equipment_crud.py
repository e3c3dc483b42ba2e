# app/crud/equipment/equipment_crud.py
import logging
import uuid
from typing import Iterable, List, Optional
from sqlalchemy import String, cast, or_
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from shared.core.config import settings
from shared.core.exceptions import (
    AlreadyReceivedError, ConflictError, InvalidArgumentError, InvalidReferenceError, NotFoundError)
from ...enum.equipment_enum import EquipmentStatus
from ...models.equipment.brand import Brand
from ...models.equipment.equipment import Equipment
from ...models.equipment.maintenance_plan import MaintenancePlan
from ...models.equipment.sla import SLA
from ...models.equipment.spare_part import SparePart
from ...schemas.equipment.equipment_schemas import (
    DeletionSummary, EquipmentRequest, MaintenancePlanIn, SparePartCreate)
from .classification_resolver import ClassificationResolver, classification_forest

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# HELPERS
# ----------------------------------------------------------------------

def generate_serial_code() -> str:
    return uuid.uuid4().hex[:10].upper()


def generate_unique_serial_code(db: Session) -> str:
    for _ in range(settings.SERIAL_CODE_MAX_ATTEMPTS):
        serial_code = generate_serial_code()
        taken = db.query(Equipment.id).filter(
            Equipment.serial_code == serial_code).first()
        if not taken:
            return serial_code
        logger.warning(f"Serial code collision on {serial_code}, retrying")

    raise ConflictError("Unable to generate a unique serial code")


def _unique_ids(ids: Optional[List[str]]) -> List[str]:
    # keeps first occurrence order
    return list(dict.fromkeys(ids or []))


def _name_taken(db: Session, name: str, exclude_id: Optional[str] = None) -> bool:
    query = db.query(Equipment.id).filter(Equipment.name == name)
    if exclude_id:
        query = query.filter(Equipment.id != exclude_id)
    return query.first() is not None


def _commit(db: Session):
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if "name" in str(e.orig):
            raise ConflictError("An equipment with this name already exists")
        raise ConflictError(f"Duplicate equipment found: {e.orig}")


def _drop_references(db: Session, part_ids: Iterable[str], plan_ids: Iterable[str], exclude_id: Optional[str] = None):
    """Strip deleted spare part and plan IDs from every equipment that still lists them."""
    part_ids, plan_ids = set(part_ids), set(plan_ids)
    if not part_ids:
        return

    query = db.query(Equipment)
    if exclude_id:
        query = query.filter(Equipment.id != exclude_id)
    # text match narrows the scan, the exact check happens below
    text = cast(Equipment.spare_part_ids, String)
    candidates = query.filter(or_(*[text.like(f'%"{i}"%') for i in part_ids])).all()

    for equipment in candidates:
        listed = equipment.spare_part_ids or []
        if not part_ids.intersection(listed):
            continue
        equipment.spare_part_ids = [i for i in listed if i not in part_ids]
        equipment.maintenance_plan_ids = [
            i for i in (equipment.maintenance_plan_ids or []) if i not in plan_ids]


def _get_resolver(db: Session, resolver: Optional[ClassificationResolver]) -> ClassificationResolver:
    return resolver or ClassificationResolver(classification_forest(db))


# ----------------------------------------------------------------------
# LOOKUPS
# ----------------------------------------------------------------------

def get_equipment(db: Session, equipment_id: str, for_update: bool = False) -> Equipment:
    query = db.query(Equipment).filter(Equipment.id == equipment_id)
    if for_update:
        query = query.with_for_update()
    equipment = query.first()
    if not equipment:
        raise NotFoundError("Equipment not found")
    return equipment


def find_by_serial_code(db: Session, serial_code: str) -> Equipment:
    equipment = db.query(Equipment).filter(
        Equipment.serial_code == serial_code).first()
    if not equipment:
        raise NotFoundError("No equipment found with this serial code")
    return equipment


def get_equipment_by_hospital(db: Session, hospital_id: str) -> List[Equipment]:
    return (
        db.query(Equipment)
        .filter(Equipment.hospital_id == hospital_id, Equipment.reception == True)
        .order_by(Equipment.name.asc())
        .all()
    )


def get_non_received_equipment(db: Session) -> List[Equipment]:
    return (
        db.query(Equipment)
        .filter(Equipment.reception == False)
        .order_by(Equipment.created_at.asc())
        .all()
    )


def get_spare_parts_by_equipment(db: Session, equipment_id: str) -> List[SparePart]:
    return db.query(SparePart).filter(SparePart.equipment_id == equipment_id).all()


# ----------------------------------------------------------------------
# LIFECYCLE
# ----------------------------------------------------------------------

def create_equipment(db: Session, request: EquipmentRequest, resolver: Optional[ClassificationResolver] = None) -> Equipment:
    if not request.name or not request.classification_code:
        raise InvalidArgumentError(
            "Name and classification code are required")
    if request.lifespan is not None and request.lifespan <= 0:
        raise InvalidArgumentError("Lifespan must be greater than zero")

    if _name_taken(db, request.name):
        raise ConflictError(
            f"An equipment named '{request.name}' already exists")

    classification = _get_resolver(db, resolver).find(
        request.classification_code)
    if not classification:
        raise InvalidReferenceError(
            f"Invalid classification code '{request.classification_code}'")

    equipment = Equipment(
        name=request.name,
        classification_id=classification.id,
        lifespan=request.lifespan,
        risk_class=request.risk_class,
        hospital_id=request.hospital_id,
        serial_code=generate_unique_serial_code(db),
        spare_part_ids=[],
        maintenance_plan_ids=[],
        reception=False,
        status=EquipmentStatus.AWAITING_RECEPTION.value,
    )
    db.add(equipment)
    _commit(db)
    db.refresh(equipment)

    logger.info(
        f"Equipment {equipment.id} created with serial code {equipment.serial_code}")
    return equipment


def receive_equipment(db: Session, serial_code: str, request: EquipmentRequest) -> Equipment:
    equipment = db.query(Equipment).filter(
        Equipment.serial_code == serial_code).with_for_update().first()
    if not equipment:
        raise NotFoundError("No equipment found with this serial code")

    if equipment.reception:
        raise AlreadyReceivedError("The equipment has already been received")

    if request.name and _name_taken(db, request.name, exclude_id=equipment.id):
        raise ConflictError(
            f"An equipment named '{request.name}' already exists")

    # brands are never created implicitly
    brand = db.query(Brand).filter(Brand.name == request.brand).first()
    if not brand:
        raise InvalidReferenceError(f"Brand '{request.brand}' does not exist")

    spare_part_ids = _unique_ids(request.spare_part_ids)
    if spare_part_ids:
        found = db.query(SparePart.id).filter(
            SparePart.id.in_(spare_part_ids)).count()
        if found != len(spare_part_ids):
            raise InvalidReferenceError(
                "Some spare parts do not exist in the store")

    if request.sla_id and not db.query(SLA.id).filter(SLA.id == request.sla_id).first():
        raise InvalidReferenceError(f"SLA '{request.sla_id}' does not exist")

    if request.name:
        equipment.name = request.name
    equipment.brand_id = brand.id
    equipment.reception = True
    equipment.status = EquipmentStatus.IN_SERVICE.value
    equipment.supplier = request.supplier
    equipment.acquisition_date = request.acquisition_date
    equipment.amount = request.amount
    equipment.start_date_warranty = request.start_date_warranty
    equipment.end_date_warranty = request.end_date_warranty
    equipment.service_id = request.service_id
    equipment.sla_id = request.sla_id
    if spare_part_ids:
        equipment.spare_part_ids = spare_part_ids

    _commit(db)
    db.refresh(equipment)

    logger.info(f"Equipment {equipment.id} received ({serial_code})")
    return equipment


def update_equipment(db: Session, equipment_id: str, request: EquipmentRequest, resolver: Optional[ClassificationResolver] = None) -> Equipment:
    """
    Administrative update: replaces every mutable field, status and reception
    flag included, with the values of the request.
    """
    equipment = get_equipment(db, equipment_id, for_update=True)

    if not request.classification_code or request.lifespan is None or request.lifespan <= 0 or not request.risk_class:
        raise InvalidArgumentError(
            "Required fields (classification code, lifespan, risk class) must be provided")

    status = request.status or (
        EquipmentStatus.IN_SERVICE.value if request.reception else EquipmentStatus.AWAITING_RECEPTION.value)
    if request.reception and status == EquipmentStatus.AWAITING_RECEPTION.value:
        raise InvalidArgumentError(
            "A received equipment cannot be awaiting reception")

    name = request.name or equipment.name
    if name != equipment.name and _name_taken(db, name, exclude_id=equipment.id):
        raise ConflictError(f"An equipment named '{name}' already exists")

    classification = _get_resolver(db, resolver).find(
        request.classification_code)
    if not classification:
        raise InvalidReferenceError(
            f"Classification code '{request.classification_code}' not found")

    brand = db.query(Brand).filter(
        Brand.name == request.brand, Brand.hospital_id == request.hospital_id).first()
    if not brand:
        raise InvalidReferenceError(
            f"Brand '{request.brand}' does not exist for this hospital")

    if request.sla_id and not db.query(SLA.id).filter(SLA.id == request.sla_id).first():
        raise InvalidReferenceError(f"SLA '{request.sla_id}' does not exist")

    equipment.classification_id = classification.id
    equipment.name = name
    equipment.acquisition_date = request.acquisition_date
    equipment.supplier = request.supplier
    equipment.risk_class = request.risk_class
    equipment.amount = request.amount
    equipment.lifespan = request.lifespan
    equipment.end_date_warranty = request.end_date_warranty
    equipment.start_date_warranty = request.start_date_warranty
    equipment.service_id = request.service_id
    equipment.hospital_id = request.hospital_id
    equipment.brand_id = brand.id
    equipment.spare_part_ids = _unique_ids(request.spare_part_ids)
    equipment.status = status
    equipment.reception = request.reception
    equipment.sla_id = request.sla_id

    _commit(db)
    db.refresh(equipment)

    logger.info(f"Equipment {equipment.id} updated")
    return equipment


def add_maintenance_plan(db: Session, equipment_id: str, plan: MaintenancePlanIn) -> Equipment:
    equipment = get_equipment(db, equipment_id, for_update=True)

    new_plan = MaintenancePlan(
        equipment_id=equipment_id,
        maintenance_date=plan.maintenance_date,
        description=plan.description,
        spare_part_id=plan.spare_part_id,
    )
    db.add(new_plan)
    db.flush()

    equipment.maintenance_plan_ids = [
        *(equipment.maintenance_plan_ids or []), new_plan.id]
    _commit(db)
    db.refresh(equipment)
    return equipment


def add_spare_part(db: Session, equipment_id: str, spare_part: SparePartCreate) -> Equipment:
    equipment = get_equipment(db, equipment_id, for_update=True)

    new_part = SparePart(equipment_id=equipment_id, **spare_part.model_dump())
    db.add(new_part)
    db.flush()

    current_ids = list(equipment.spare_part_ids or [])
    if new_part.id not in current_ids:
        equipment.spare_part_ids = [*current_ids, new_part.id]
    _commit(db)
    db.refresh(equipment)
    return equipment


def assign_sla(db: Session, equipment_id: str, sla_id: str) -> Equipment:
    equipment = get_equipment(db, equipment_id, for_update=True)

    sla = db.query(SLA).filter(SLA.id == sla_id).first()
    if not sla:
        raise NotFoundError("SLA not found")

    equipment.sla_id = sla.id
    _commit(db)
    db.refresh(equipment)
    return equipment


def delete_equipment(db: Session, equipment_id: str) -> DeletionSummary:
    """
    Cascade delete, in one transaction: plans linked to the equipment's spare
    parts, the spare parts, plans linked directly to the equipment, and
    finally the equipment itself.

    Only spare parts owned by the equipment are removed. Parts it merely lists
    belong to another equipment and are left alone; other equipment listing
    a removed part lose the reference.
    """
    equipment = get_equipment(db, equipment_id, for_update=True)

    part_ids = [
        part_id for (part_id,) in db.query(SparePart.id).filter(SparePart.equipment_id == equipment_id)
    ]

    summary = DeletionSummary()
    try:
        if part_ids:
            part_plan_ids = [
                plan_id for (plan_id,) in db.query(MaintenancePlan.id).filter(MaintenancePlan.spare_part_id.in_(part_ids))
            ]
            _drop_references(db, part_ids, part_plan_ids,
                             exclude_id=equipment_id)
            summary.spare_part_plans_deleted = (
                db.query(MaintenancePlan)
                .filter(MaintenancePlan.spare_part_id.in_(part_ids))
                .delete(synchronize_session=False)
            )
            summary.spare_parts_deleted = (
                db.query(SparePart)
                .filter(SparePart.id.in_(part_ids))
                .delete(synchronize_session=False)
            )

        summary.direct_plans_deleted = (
            db.query(MaintenancePlan)
            .filter(MaintenancePlan.equipment_id == equipment_id)
            .delete(synchronize_session=False)
        )

        db.delete(equipment)
        summary.equipment_deleted = 1
        db.commit()
    except Exception:
        db.rollback()
        logger.exception(f"Deleting equipment {equipment_id} failed")
        raise

    logger.info(f"Equipment {equipment_id} deleted: {summary.model_dump()}")
    return summary


def delete_spare_part(db: Session, spare_part_id: str) -> int:
    """
    Delete a spare part and the maintenance plans referencing it, and strip
    both from every equipment that lists them.
    """
    spare_part = db.query(SparePart).filter(
        SparePart.id == spare_part_id).first()
    if not spare_part:
        raise NotFoundError("Spare part not found")

    try:
        linked_plan_ids = [
            plan_id for (plan_id,) in db.query(MaintenancePlan.id).filter(MaintenancePlan.spare_part_id == spare_part_id)
        ]
        if linked_plan_ids:
            db.query(MaintenancePlan).filter(
                MaintenancePlan.id.in_(linked_plan_ids)).delete(synchronize_session=False)

        if spare_part.equipment_id:
            equipment = db.query(Equipment).filter(
                Equipment.id == spare_part.equipment_id).with_for_update().first()
            if equipment:
                equipment.spare_part_ids = [
                    i for i in (equipment.spare_part_ids or []) if i != spare_part_id]
                equipment.maintenance_plan_ids = [
                    i for i in (equipment.maintenance_plan_ids or []) if i not in linked_plan_ids]

        _drop_references(db, [spare_part_id], linked_plan_ids,
                         exclude_id=spare_part.equipment_id)

        db.delete(spare_part)
        db.commit()
    except Exception:
        db.rollback()
        raise

    return len(linked_plan_ids)
