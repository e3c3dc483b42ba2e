import logging

from sqlalchemy.orm import Session

from ..app.models.equipment.outbox_event import OutboxEvent

logger = logging.getLogger(__name__)


class EventPublisher:
    """Fire-and-forget channel; delivery belongs to the message bus."""

    def publish(self, topic: str, payload: dict) -> None:
        raise NotImplementedError


class OutboxEventPublisher(EventPublisher):
    """Appends events to the outbox table, the broker relay forwards them."""

    def __init__(self, db: Session):
        self.db = db

    def publish(self, topic: str, payload: dict) -> None:
        try:
            self.db.add(OutboxEvent(topic=topic, payload=payload))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"Event queued on '{topic}'")
