import uuid
from sqlalchemy import JSON, Column, DateTime, Integer, String, func
from shared.core.database import Base


class SparePart(Base):
    __tablename__ = "spare_parts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    equipment_id = Column(String(36), index=True, nullable=True)
    name = Column(String(200), nullable=False)
    lifespan = Column(Integer, nullable=True)
    supplier = Column(String(200), nullable=True)
    attributes = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
