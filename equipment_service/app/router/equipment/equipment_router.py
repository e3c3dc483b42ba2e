# app/router/equipment/equipment_router.py
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import get_bearer_token, validate_current_token
from shared.core.database import get_db
from shared.core.schemas import UserToken
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.equipment import equipment_crud as crud
from ...crud.equipment import maintenance_plan_crud
from ...schemas.equipment.equipment_schemas import (
    EquipmentOut, EquipmentRequest, MaintenancePlanIn, MaintenancePlanOut, SparePartCreate, SparePartOut)
from ...schemas.equipment.transfer_schemas import (
    InterHospitalTransferRequest, InterServiceTransferRequest, TransferHistoryOut, UserDTO)
from ...services.equipment_transfer_service import EquipmentTransferService, get_transfer_history
from ....util.event_publisher import OutboxEventPublisher
from ....util.hospital_directory_client import get_hospital_directory
from ....util.user_directory_client import get_user_directory

router = APIRouter(
    prefix="/api/equipments",
    tags=["equipments"],
    dependencies=[Depends(validate_current_token)]
)


def get_transfer_service(
        db: Session = Depends(get_db),
        user_directory=Depends(get_user_directory),
        hospital_directory=Depends(get_hospital_directory)) -> EquipmentTransferService:
    return EquipmentTransferService(db, user_directory, hospital_directory, OutboxEventPublisher(db))


def actor_from_token(current_user: UserToken) -> UserDTO:
    return UserDTO(
        id=current_user.user_id,
        first_name=current_user.first_name,
        last_name=current_user.last_name,
        email=current_user.email,
    )


def _out(equipment) -> EquipmentOut:
    return EquipmentOut.model_validate(equipment)


# ---------------- Lookups ----------------
@router.get("/non-received", response_model=None)
def non_received(db: Session = Depends(get_db)):
    return success_response(data=[_out(e) for e in crud.get_non_received_equipment(db)])


@router.get("/hospital/{hospital_id}", response_model=None)
def equipment_by_hospital(hospital_id: str, db: Session = Depends(get_db)):
    return success_response(data=[_out(e) for e in crud.get_equipment_by_hospital(db, hospital_id)])


@router.get("/serial/{serial_code}", response_model=None)
def equipment_by_serial(serial_code: str, db: Session = Depends(get_db)):
    return success_response(data=_out(crud.find_by_serial_code(db, serial_code)))


@router.get("/{equipment_id}", response_model=None)
def get_equipment(equipment_id: str, db: Session = Depends(get_db)):
    return success_response(data=_out(crud.get_equipment(db, equipment_id)))


@router.get("/{equipment_id}/spare-parts", response_model=None)
def spare_parts(equipment_id: str, db: Session = Depends(get_db)):
    parts = crud.get_spare_parts_by_equipment(db, equipment_id)
    return success_response(data=[SparePartOut.model_validate(p) for p in parts])


@router.get("/{equipment_id}/maintenance-plans", response_model=None)
def maintenance_plans(equipment_id: str, db: Session = Depends(get_db)):
    plans = maintenance_plan_crud.get_maintenance_plans_by_equipment(
        db, equipment_id)
    return success_response(data=[MaintenancePlanOut.model_validate(p) for p in plans])


@router.get("/{equipment_id}/transfer-history", response_model=None)
def transfer_history(equipment_id: str, db: Session = Depends(get_db)):
    records = get_transfer_history(db, equipment_id)
    return success_response(data=[TransferHistoryOut.model_validate(r) for r in records])


# ---------------- Lifecycle ----------------
@router.post("/", response_model=None)
def create_equipment(request: EquipmentRequest, db: Session = Depends(get_db)):
    equipment = crud.create_equipment(db, request)
    return success_response(
        data={"id": equipment.id, "serial_code": equipment.serial_code},
        message="Equipment created successfully",
        status_code=AppStatusCode.CREATED_SUCCESSFULLY)


@router.put("/reception/{serial_code}", response_model=None)
def receive_equipment(serial_code: str, request: EquipmentRequest, db: Session = Depends(get_db)):
    equipment = crud.receive_equipment(db, serial_code, request)
    return success_response(data=_out(equipment), message="Equipment received successfully",
                            status_code=AppStatusCode.UPDATED_SUCCESSFULLY)


@router.put("/{equipment_id}", response_model=None)
def update_equipment(equipment_id: str, request: EquipmentRequest, db: Session = Depends(get_db)):
    equipment = crud.update_equipment(db, equipment_id, request)
    return success_response(data=_out(equipment), message="Equipment updated successfully",
                            status_code=AppStatusCode.UPDATED_SUCCESSFULLY)


@router.post("/{equipment_id}/maintenance-plans", response_model=None)
def add_maintenance_plan(equipment_id: str, plan: MaintenancePlanIn, db: Session = Depends(get_db)):
    return success_response(data=_out(crud.add_maintenance_plan(db, equipment_id, plan)),
                            message="Maintenance plan added")


@router.put("/{equipment_id}/maintenance-plans", response_model=None)
def reconcile_maintenance_plans(equipment_id: str, plans: List[MaintenancePlanIn], db: Session = Depends(get_db)):
    result = maintenance_plan_crud.reconcile_maintenance_plans(
        db, equipment_id, plans)
    return success_response(data=[MaintenancePlanOut.model_validate(p) for p in result],
                            message="Maintenance plans updated successfully")


@router.post("/{equipment_id}/spare-parts", response_model=None)
def add_spare_part(equipment_id: str, spare_part: SparePartCreate, db: Session = Depends(get_db)):
    return success_response(data=_out(crud.add_spare_part(db, equipment_id, spare_part)),
                            message="Spare part added")


@router.delete("/spare-parts/{spare_part_id}", response_model=None)
def delete_spare_part(spare_part_id: str, db: Session = Depends(get_db)):
    removed_plans = crud.delete_spare_part(db, spare_part_id)
    return success_response(data={"maintenance_plans_deleted": removed_plans},
                            message="Spare part deleted",
                            status_code=AppStatusCode.DELETED_SUCCESSFULLY)


@router.put("/{equipment_id}/sla/{sla_id}", response_model=None)
def assign_sla(equipment_id: str, sla_id: str, db: Session = Depends(get_db)):
    return success_response(data=_out(crud.assign_sla(db, equipment_id, sla_id)),
                            message="SLA assigned")


@router.delete("/{equipment_id}", response_model=None)
def delete_equipment(equipment_id: str, db: Session = Depends(get_db)):
    summary = crud.delete_equipment(db, equipment_id)
    return success_response(data=summary, message="Equipment deleted",
                            status_code=AppStatusCode.DELETED_SUCCESSFULLY)


# ---------------- Transfers ----------------
@router.put("/{equipment_id}/transfer/service", response_model=None)
def transfer_inter_service(
        equipment_id: str,
        request: InterServiceTransferRequest,
        service: EquipmentTransferService = Depends(get_transfer_service),
        token: str = Depends(get_bearer_token),
        current_user: UserToken = Depends(validate_current_token)):
    result = service.transfer_inter_service(
        equipment_id, request.new_service_id, request.description, actor_from_token(current_user), token)
    return success_response(data=result, message="Equipment transferred to the new service")


@router.put("/{equipment_id}/transfer/hospital", response_model=None)
def transfer_inter_hospital(
        equipment_id: str,
        request: InterHospitalTransferRequest,
        service: EquipmentTransferService = Depends(get_transfer_service),
        token: str = Depends(get_bearer_token),
        current_user: UserToken = Depends(validate_current_token)):
    result = service.transfer_inter_hospital(
        equipment_id, request.new_hospital_id, request.description, actor_from_token(current_user), token)
    return success_response(data=result, message="Equipment transferred to the new hospital")
