import uuid
from sqlalchemy import JSON, TIMESTAMP, Boolean, Column, String, func
from shared.core.database import Base


class OutboxEvent(Base):
    """Events waiting for the broker relay."""
    __tablename__ = "outbox_events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    topic = Column(String(128), index=True, nullable=False)
    payload = Column(JSON, nullable=False)
    dispatched = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP(timezone=True),
                        server_default=func.now(), nullable=False)
