# app/models/equipment/maintenance_plan.py
import uuid
from sqlalchemy import Column, Date, DateTime, String, Text, func
from shared.core.database import Base


class MaintenancePlan(Base):
    __tablename__ = "maintenance_plans"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    equipment_id = Column(String(36), index=True, nullable=True)
    maintenance_date = Column(Date, nullable=True)
    description = Column(Text, nullable=True)
    spare_part_id = Column(String(36), index=True, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())
