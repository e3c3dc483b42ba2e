import uuid
from sqlalchemy import Column, DateTime, Integer, Numeric, String, func
from shared.core.database import Base


class SLA(Base):
    __tablename__ = "slas"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(128), nullable=False)
    hospital_id = Column(String(64), nullable=True)
    max_response_time = Column(Integer, nullable=True)  # hours
    max_resolution_time = Column(Integer, nullable=True)  # hours
    penalty = Column(Numeric(14, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
