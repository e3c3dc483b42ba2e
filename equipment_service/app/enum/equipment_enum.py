from enum import Enum


class EquipmentStatus(str, Enum):
    AWAITING_RECEPTION = "awaiting reception"
    IN_SERVICE = "in service"
    # any administratively set text (maintenance, decommissioned, ...)
    OTHER = "other"

    @classmethod
    def of(cls, value):
        if value == cls.AWAITING_RECEPTION.value:
            return cls.AWAITING_RECEPTION
        if value == cls.IN_SERVICE.value:
            return cls.IN_SERVICE
        return cls.OTHER


class TransferType(str, Enum):
    INTER_SERVICE = "INTER_SERVICE"
    INTER_HOSPITAL = "INTER_HOSPITAL"


class EventTopic(str, Enum):
    EQUIPMENT_SERVICE_TRANSFER = "equipment-service-transfer-events"
    EQUIPMENT_HOSPITAL_TRANSFER = "equipment-events"
    NOTIFICATION = "notification-events"


class TransferNotifyRole(str, Enum):
    HOSPITAL_ADMIN = "ROLE_HOSPITAL_ADMIN"
    MINISTRY_ADMIN = "ROLE_MINISTRY_ADMIN"
    MAINTENANCE_ENGINEER = "ROLE_MAINTENANCE_ENGINEER"
