# app/schemas/equipment/transfer_schemas.py
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from ...enum.equipment_enum import TransferType
from .equipment_schemas import EquipmentOut


class UserDTO(BaseModel):
    id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None

    model_config = {"from_attributes": True, "extra": "ignore"}

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class SupervisorInfo(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    service_id: Optional[str] = None


class InterServiceTransferRequest(BaseModel):
    new_service_id: str
    description: Optional[str] = None


class InterHospitalTransferRequest(BaseModel):
    new_hospital_id: str
    description: Optional[str] = None


class EquipmentServiceTransferEvent(BaseModel):
    serial_code: str
    equipment_name: str
    description: Optional[str] = None
    old_service_name: str
    new_service_name: str
    initiator_first_name: Optional[str] = None
    initiator_last_name: Optional[str] = None
    initiator_email: Optional[str] = None
    old_supervisor: Optional[SupervisorInfo] = None
    new_supervisor: Optional[SupervisorInfo] = None
    emails_to_notify: List[str] = []


class EquipmentTransferEvent(BaseModel):
    serial_code: str
    equipment_id: str
    equipment_name: str
    description: Optional[str] = None
    old_hospital_id: Optional[str] = None
    old_hospital_name: str
    new_hospital_id: str
    new_hospital_name: str
    initiator_first_name: Optional[str] = None
    initiator_last_name: Optional[str] = None
    initiator_email: Optional[str] = None
    emails_to_notify: List[str] = []


class NotificationEvent(BaseModel):
    title: str
    message: str
    emails: List[str] = []


class TransferHistoryOut(BaseModel):
    id: str
    equipment_id: str
    type: TransferType
    old_service_id: Optional[str] = None
    new_service_id: Optional[str] = None
    old_hospital_id: Optional[str] = None
    new_hospital_id: Optional[str] = None
    description: Optional[str] = None
    initiated_by_user_id: Optional[str] = None
    initiated_by_name: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TransferResult(BaseModel):
    equipment: EquipmentOut
    history: TransferHistoryOut
    degraded_steps: List[str] = []
