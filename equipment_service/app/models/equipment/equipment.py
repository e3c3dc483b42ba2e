# app/models/equipment/equipment.py
import uuid
from sqlalchemy import JSON, Boolean, Column, Date, ForeignKey, Integer, Numeric, String, TIMESTAMP, func
from sqlalchemy.orm import relationship
from shared.core.database import Base
from ...enum.equipment_enum import EquipmentStatus


class Equipment(Base):
    __tablename__ = "equipments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), unique=True, nullable=False)
    classification_id = Column(String(36), ForeignKey(
        "classification_nodes.id", ondelete="SET NULL"), nullable=True)
    serial_code = Column(String(10), unique=True, nullable=False)
    lifespan = Column(Integer, nullable=True)
    risk_class = Column(String(32), nullable=True)
    hospital_id = Column(String(64), index=True, nullable=True)
    service_id = Column(String(64), nullable=True)
    brand_id = Column(String(36), ForeignKey(
        "brands.id", ondelete="SET NULL"), nullable=True)
    supplier = Column(String(200), nullable=True)
    acquisition_date = Column(Date, nullable=True)
    start_date_warranty = Column(Date, nullable=True)
    end_date_warranty = Column(Date, nullable=True)
    amount = Column(Numeric(14, 2), nullable=True)
    sla_id = Column(String(36), ForeignKey(
        "slas.id", ondelete="SET NULL"), nullable=True)
    # references only, the records live in their own tables
    spare_part_ids = Column(JSON, nullable=False, default=list)
    maintenance_plan_ids = Column(JSON, nullable=False, default=list)
    reception = Column(Boolean, nullable=False, default=False)
    status = Column(String(64), nullable=False,
                    default=EquipmentStatus.AWAITING_RECEPTION.value)
    created_at = Column(TIMESTAMP(timezone=True),
                        server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(
    ), onupdate=func.now(), nullable=False)

    classification = relationship("ClassificationNode")
    brand = relationship("Brand")
    sla = relationship("SLA")

    @property
    def lifecycle_state(self) -> EquipmentStatus:
        return EquipmentStatus.of(self.status)

    @property
    def classification_code(self):
        return self.classification.code if self.classification else None

    @property
    def brand_name(self):
        return self.brand.name if self.brand else None
