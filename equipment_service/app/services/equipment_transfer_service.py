# app/services/equipment_transfer_service.py
import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from shared.helpers.best_effort import StepOutcome, attempt
from ..crud.equipment import equipment_crud
from ..enum.equipment_enum import EquipmentStatus, EventTopic, TransferNotifyRole, TransferType
from ..models.equipment.equipment import Equipment
from ..models.equipment.equipment_transfer_history import EquipmentTransferHistory
from ..schemas.equipment.equipment_schemas import EquipmentOut
from ..schemas.equipment.transfer_schemas import (
    EquipmentServiceTransferEvent, EquipmentTransferEvent, NotificationEvent, SupervisorInfo,
    TransferHistoryOut, TransferResult, UserDTO)
from ...util.event_publisher import EventPublisher
from ...util.hospital_directory_client import HospitalDirectoryClient
from ...util.user_directory_client import UserDirectoryClient

logger = logging.getLogger(__name__)

UNKNOWN_SERVICE_NAME = "Unknown service name"
UNKNOWN_HOSPITAL_NAME = "Unknown hospital name"

HOSPITAL_TRANSFER_ROLES = [role.value for role in TransferNotifyRole]


def build_recipients(*groups: Iterable[Optional[str]]) -> List[str]:
    """Flatten e-mail groups, dropping blanks and duplicates (first seen wins)."""
    recipients = []
    for group in groups:
        for email in group:
            if email and email not in recipients:
                recipients.append(email)
    return recipients


def to_supervisor_info(user: Optional[UserDTO], service_id: Optional[str]) -> Optional[SupervisorInfo]:
    if user is None:
        return None
    return SupervisorInfo(
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        service_id=service_id,
    )


class EquipmentTransferService:
    """
    Inter-service and inter-hospital transfers.

    Each workflow commits the equipment change first, then gathers
    notification data and publishes events through isolated best-effort
    steps, then appends the audit record. A failing lookup or publish degrades
    the notification but never undoes the transfer.
    """

    def __init__(
        self,
        db: Session,
        user_directory: UserDirectoryClient,
        hospital_directory: HospitalDirectoryClient,
        publisher: EventPublisher,
    ):
        self.db = db
        self.user_directory = user_directory
        self.hospital_directory = hospital_directory
        self.publisher = publisher

    # ------------------------------------------------------------------
    # steps
    # ------------------------------------------------------------------

    def _first_supervisor(self, token: str, service_id: Optional[str]) -> StepOutcome:
        def lookup():
            if not service_id:
                return None
            supervisors = self.user_directory.get_service_supervisors(
                token, service_id)
            return supervisors[0] if supervisors else None
        return attempt(f"supervisors of service {service_id}", lookup)

    def _service_name(self, token: str, service_id: Optional[str]) -> StepOutcome:
        def lookup():
            if not service_id:
                return None
            return self.hospital_directory.get_service_name(token, service_id)
        return attempt(f"name of service {service_id}", lookup, default=UNKNOWN_SERVICE_NAME)

    def _hospital_name(self, token: str, hospital_id: Optional[str]) -> StepOutcome:
        def lookup():
            if not hospital_id:
                return None
            return self.hospital_directory.get_hospital_name(token, hospital_id)
        return attempt(f"name of hospital {hospital_id}", lookup, default=UNKNOWN_HOSPITAL_NAME)

    def _publish(self, topic: EventTopic, payload: dict) -> StepOutcome:
        return attempt(f"publish to {topic.value}", self.publisher.publish, topic.value, payload)

    def _record_history(self, equipment: Equipment, transfer_type: TransferType, description: Optional[str], actor: UserDTO, **ids) -> EquipmentTransferHistory:
        history = EquipmentTransferHistory(
            equipment_id=equipment.id,
            type=transfer_type,
            description=description,
            initiated_by_user_id=actor.id,
            initiated_by_name=actor.full_name,
            **ids,
        )
        self.db.add(history)
        self.db.commit()
        self.db.refresh(history)
        logger.info(
            f"{transfer_type.value} transfer recorded for equipment {equipment.id}")
        return history

    def _result(self, equipment: Equipment, history: EquipmentTransferHistory, outcomes: List[StepOutcome]) -> TransferResult:
        self.db.refresh(equipment)
        return TransferResult(
            equipment=EquipmentOut.model_validate(equipment),
            history=TransferHistoryOut.model_validate(history),
            degraded_steps=[o.step for o in outcomes if not o.ok],
        )

    # ------------------------------------------------------------------
    # workflows
    # ------------------------------------------------------------------

    def transfer_inter_service(self, equipment_id: str, new_service_id: str, description: Optional[str], actor: UserDTO, token: str) -> TransferResult:
        equipment = equipment_crud.get_equipment(
            self.db, equipment_id, for_update=True)

        old_service_id = equipment.service_id
        equipment.service_id = new_service_id
        self.db.commit()
        logger.info(
            f"Equipment {equipment_id} moved from service {old_service_id} to {new_service_id}")

        old_supervisor = self._first_supervisor(token, old_service_id)
        new_supervisor = self._first_supervisor(token, new_service_id)
        old_service_name = self._service_name(token, old_service_id)
        new_service_name = self._service_name(token, new_service_id)

        old_supervisor_info = to_supervisor_info(
            old_supervisor.value, old_service_id)
        new_supervisor_info = to_supervisor_info(
            new_supervisor.value, new_service_id)
        emails = build_recipients(
            [actor.email],
            [old_supervisor_info.email if old_supervisor_info else None],
            [new_supervisor_info.email if new_supervisor_info else None],
        )

        event = EquipmentServiceTransferEvent(
            serial_code=equipment.serial_code,
            equipment_name=equipment.name,
            description=description,
            old_service_name=old_service_name.value,
            new_service_name=new_service_name.value,
            initiator_first_name=actor.first_name,
            initiator_last_name=actor.last_name,
            initiator_email=actor.email,
            old_supervisor=old_supervisor_info,
            new_supervisor=new_supervisor_info,
            emails_to_notify=emails,
        )
        notification = NotificationEvent(
            title="Equipment transfer",
            message=f"Equipment {equipment.name} has been transferred from {old_service_name.value} to {new_service_name.value}.",
            emails=emails,
        )
        published = [
            self._publish(EventTopic.EQUIPMENT_SERVICE_TRANSFER,
                          event.model_dump(mode="json")),
            self._publish(EventTopic.NOTIFICATION,
                          notification.model_dump(mode="json")),
        ]

        history = self._record_history(
            equipment, TransferType.INTER_SERVICE, description, actor,
            old_service_id=old_service_id, new_service_id=new_service_id,
        )
        return self._result(
            equipment, history,
            [old_supervisor, new_supervisor, old_service_name, new_service_name, *published],
        )

    def transfer_inter_hospital(self, equipment_id: str, new_hospital_id: str, description: Optional[str], actor: UserDTO, token: str) -> TransferResult:
        equipment = equipment_crud.get_equipment(
            self.db, equipment_id, for_update=True)

        old_hospital_id = equipment.hospital_id
        equipment.hospital_id = new_hospital_id
        # must be received again at the destination
        equipment.reception = False
        equipment.status = EquipmentStatus.AWAITING_RECEPTION.value
        self.db.commit()
        logger.info(
            f"Equipment {equipment_id} moved from hospital {old_hospital_id} to {new_hospital_id}")

        new_admin = attempt(
            f"admin of hospital {new_hospital_id}",
            self.user_directory.get_admin_by_hospital_id, token, new_hospital_id,
        )
        new_hospital_name = self._hospital_name(token, new_hospital_id)
        old_hospital_name = self._hospital_name(token, old_hospital_id)

        def origin_users():
            if not old_hospital_id:
                return []
            return self.user_directory.get_users_by_hospital_and_roles(
                token, old_hospital_id, HOSPITAL_TRANSFER_ROLES)
        origin_staff = attempt(
            f"staff of hospital {old_hospital_id}", origin_users, default=[])

        emails = build_recipients(
            [actor.email],
            [new_admin.value.email if new_admin.value else None],
            [user.email for user in origin_staff.value],
        )

        event = EquipmentTransferEvent(
            serial_code=equipment.serial_code,
            equipment_id=equipment.id,
            equipment_name=equipment.name,
            description=description,
            old_hospital_id=old_hospital_id,
            old_hospital_name=old_hospital_name.value,
            new_hospital_id=new_hospital_id,
            new_hospital_name=new_hospital_name.value,
            initiator_first_name=actor.first_name,
            initiator_last_name=actor.last_name,
            initiator_email=actor.email,
            emails_to_notify=emails,
        )
        notification = NotificationEvent(
            title="Inter-hospital equipment transfer",
            message=f"Equipment {equipment.name} has been transferred from {old_hospital_name.value} to {new_hospital_name.value}.",
            emails=emails,
        )
        published = [
            self._publish(EventTopic.EQUIPMENT_HOSPITAL_TRANSFER,
                          event.model_dump(mode="json")),
            self._publish(EventTopic.NOTIFICATION,
                          notification.model_dump(mode="json")),
        ]

        history = self._record_history(
            equipment, TransferType.INTER_HOSPITAL, description, actor,
            old_hospital_id=old_hospital_id, new_hospital_id=new_hospital_id,
        )
        return self._result(
            equipment, history,
            [new_admin, new_hospital_name, old_hospital_name, origin_staff, *published],
        )


def get_transfer_history(db: Session, equipment_id: str) -> List[EquipmentTransferHistory]:
    return (
        db.query(EquipmentTransferHistory)
        .filter(EquipmentTransferHistory.equipment_id == equipment_id)
        .order_by(EquipmentTransferHistory.created_at.desc())
        .all()
    )
