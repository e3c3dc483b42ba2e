import uuid
from sqlalchemy import TIMESTAMP, Column, Enum, String, Text, func
from ...enum.equipment_enum import TransferType
from shared.core.database import Base


class EquipmentTransferHistory(Base):
    """Append-only audit trail of ownership changes."""
    __tablename__ = "equipment_transfer_histories"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    equipment_id = Column(String(36), index=True, nullable=False)
    type = Column(Enum(TransferType, native_enum=False,
                  values_callable=lambda x: [e.value for e in x]), nullable=False)
    old_service_id = Column(String(64), nullable=True)
    new_service_id = Column(String(64), nullable=True)
    old_hospital_id = Column(String(64), nullable=True)
    new_hospital_id = Column(String(64), nullable=True)
    description = Column(Text, nullable=True)
    initiated_by_user_id = Column(String(64), nullable=True)
    initiated_by_name = Column(String(200), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True),
                        server_default=func.now(), nullable=False)
