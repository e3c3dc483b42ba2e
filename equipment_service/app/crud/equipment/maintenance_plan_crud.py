# app/crud/equipment/maintenance_plan_crud.py
import logging
from typing import List
from sqlalchemy.orm import Session

from shared.core.exceptions import NotFoundError
from ...models.equipment.equipment import Equipment
from ...models.equipment.maintenance_plan import MaintenancePlan
from ...schemas.equipment.equipment_schemas import MaintenancePlanIn

logger = logging.getLogger(__name__)


def reconcile_maintenance_plans(db: Session, equipment_id: str, submitted_plans: List[MaintenancePlanIn]) -> List[MaintenancePlan]:
    """
    Merge the submitted plans into the store and make them the equipment's
    complete plan set.

    A submitted plan whose id matches a stored record updates that record's
    date, description and spare part. Any other plan (no id, or an id the
    store does not know) is inserted with the equipment id stamped on it.
    Previously referenced plans left out of the submission stay in the store,
    unreferenced.
    """
    equipment = db.query(Equipment).filter(
        Equipment.id == equipment_id).with_for_update().first()
    if not equipment:
        raise NotFoundError("Equipment not found")

    final_plans = []
    try:
        for submitted in submitted_plans:
            existing = None
            if submitted.id:
                existing = db.query(MaintenancePlan).filter(
                    MaintenancePlan.id == submitted.id).first()

            if existing:
                existing.maintenance_date = submitted.maintenance_date
                existing.description = submitted.description
                existing.spare_part_id = submitted.spare_part_id
                final_plans.append(existing)
            else:
                new_plan = MaintenancePlan(
                    equipment_id=equipment_id,
                    maintenance_date=submitted.maintenance_date,
                    description=submitted.description,
                    spare_part_id=submitted.spare_part_id,
                )
                if submitted.id:
                    new_plan.id = submitted.id
                db.add(new_plan)
                # flush so the generated id is available below
                db.flush()
                final_plans.append(new_plan)

        equipment.maintenance_plan_ids = [plan.id for plan in final_plans]
        db.commit()
    except Exception:
        db.rollback()
        raise

    for plan in final_plans:
        db.refresh(plan)

    logger.info(
        f"Maintenance plans reconciled for equipment {equipment_id}: {len(final_plans)} plan(s)")
    return final_plans


def get_maintenance_plans_by_equipment(db: Session, equipment_id: str) -> List[MaintenancePlan]:
    return (
        db.query(MaintenancePlan)
        .filter(MaintenancePlan.equipment_id == equipment_id)
        .order_by(MaintenancePlan.maintenance_date.asc())
        .all()
    )
