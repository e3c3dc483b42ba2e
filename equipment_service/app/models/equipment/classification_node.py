# app/models/equipment/classification_node.py
import uuid
from sqlalchemy import Column, String, ForeignKey
from sqlalchemy.orm import backref, relationship
from shared.core.database import Base


class ClassificationNode(Base):
    """Medical-device nomenclature node (EMDN style), arbitrary depth."""
    __tablename__ = "classification_nodes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    code = Column(String(64), unique=True, nullable=False)
    label = Column(String(255), nullable=True)
    parent_id = Column(String(36), ForeignKey(
        "classification_nodes.id", ondelete="CASCADE"), nullable=True)

    children = relationship(
        "ClassificationNode",
        backref=backref("parent", remote_side=[id]),
        order_by="ClassificationNode.code",
    )
