# app/schemas/equipment/equipment_schemas.py
from pydantic import BaseModel
from typing import List, Optional
from datetime import date, datetime


class EquipmentRequest(BaseModel):
    name: Optional[str] = None
    classification_code: Optional[str] = None
    lifespan: Optional[int] = None
    risk_class: Optional[str] = None
    hospital_id: Optional[str] = None
    service_id: Optional[str] = None
    brand: Optional[str] = None
    supplier: Optional[str] = None
    acquisition_date: Optional[date] = None
    start_date_warranty: Optional[date] = None
    end_date_warranty: Optional[date] = None
    amount: Optional[float] = None
    sla_id: Optional[str] = None
    spare_part_ids: Optional[List[str]] = None
    status: Optional[str] = None
    reception: bool = False


class EquipmentOut(BaseModel):
    id: str
    name: str
    serial_code: str
    classification_code: Optional[str] = None
    lifespan: Optional[int] = None
    risk_class: Optional[str] = None
    hospital_id: Optional[str] = None
    service_id: Optional[str] = None
    brand_name: Optional[str] = None
    supplier: Optional[str] = None
    acquisition_date: Optional[date] = None
    start_date_warranty: Optional[date] = None
    end_date_warranty: Optional[date] = None
    amount: Optional[float] = None
    sla_id: Optional[str] = None
    spare_part_ids: List[str] = []
    maintenance_plan_ids: List[str] = []
    reception: bool
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SparePartCreate(BaseModel):
    name: str
    lifespan: Optional[int] = None
    supplier: Optional[str] = None
    attributes: Optional[dict] = None


class SparePartOut(SparePartCreate):
    id: str
    equipment_id: Optional[str] = None

    model_config = {"from_attributes": True}


class MaintenancePlanIn(BaseModel):
    # no id means a new plan
    id: Optional[str] = None
    maintenance_date: Optional[date] = None
    description: Optional[str] = None
    spare_part_id: Optional[str] = None


class MaintenancePlanOut(BaseModel):
    id: str
    equipment_id: Optional[str] = None
    maintenance_date: Optional[date] = None
    description: Optional[str] = None
    spare_part_id: Optional[str] = None

    model_config = {"from_attributes": True}


class DeletionSummary(BaseModel):
    spare_part_plans_deleted: int = 0
    direct_plans_deleted: int = 0
    spare_parts_deleted: int = 0
    equipment_deleted: int = 0
