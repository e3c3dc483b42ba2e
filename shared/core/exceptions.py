from shared.utils.app_status_code import AppStatusCode


class ServiceError(Exception):
    """Base exception for equipment service errors."""

    status_code: str = AppStatusCode.OPERATION_FAILED
    http_status: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    """Referenced entity does not exist."""
    status_code = AppStatusCode.RECORD_NOT_FOUND
    http_status = 404


class ConflictError(ServiceError):
    """Uniqueness violation."""
    status_code = AppStatusCode.DUPLICATE_ADD_ERROR
    http_status = 409


class InvalidReferenceError(ServiceError):
    """A foreign ID or code does not resolve."""
    status_code = AppStatusCode.INVALID_REFERENCE
    http_status = 400


class InvalidArgumentError(ServiceError):
    """Malformed or missing required field."""
    status_code = AppStatusCode.REQUIRED_VALIDATION_ERROR
    http_status = 400


class AlreadyReceivedError(ServiceError):
    """Equipment has already gone through reception."""
    status_code = AppStatusCode.ALREADY_RECEIVED
    http_status = 409


class DegradedNotification(ServiceError):
    """
    A notification-enrichment step failed after the state change was committed.
    Recorded and logged only, never raised to callers.
    """

    def __init__(self, step: str, cause: Exception):
        super().__init__(f"{step} failed: {cause}")
        self.step = step
        self.cause = cause
