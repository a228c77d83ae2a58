from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    PERMISSION_DENIED = "PERMISSION_DENIED"
    FETCH_FAILED = "FETCH_FAILED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    UPLOAD_FAILED = "UPLOAD_FAILED"
    UPLOAD_IN_PROGRESS = "UPLOAD_IN_PROGRESS"
    CAPTURE_FAILED = "CAPTURE_FAILED"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"


class PinnaException(Exception):
    """Base for every recoverable engine error. Carries a user-facing message."""

    code: ErrorCode = ErrorCode.VALIDATION_FAILED
    status_code: int = 400

    def __init__(self, message: str, *, details: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code.value,
            "details": self.details,
        }


class PermissionDenied(PinnaException):
    code = ErrorCode.PERMISSION_DENIED
    status_code = 403

    def __init__(self, resource: str) -> None:
        super().__init__(
            f"Permission to access the {resource} was denied",
            details={"resource": resource},
        )
        self.resource = resource


class FetchFailed(PinnaException):
    code = ErrorCode.FETCH_FAILED
    status_code = 502


class ValidationError(PinnaException):
    code = ErrorCode.VALIDATION_FAILED
    status_code = 422

    def __init__(self, fields: list[str]) -> None:
        super().__init__(
            f"Please enter {' and '.join(fields)}",
            details={"fields": fields},
        )
        self.fields = fields

    @property
    def field(self) -> str:
        return self.fields[0]


class UploadError(PinnaException):
    code = ErrorCode.UPLOAD_FAILED
    status_code = 502


class UploadInProgress(PinnaException):
    code = ErrorCode.UPLOAD_IN_PROGRESS
    status_code = 409

    def __init__(self) -> None:
        super().__init__("An upload for this photo is already in progress")


class CaptureError(PinnaException):
    code = ErrorCode.CAPTURE_FAILED
    status_code = 400


class SessionNotFound(PinnaException):
    code = ErrorCode.SESSION_NOT_FOUND
    status_code = 404

    def __init__(self, session_id: str) -> None:
        super().__init__("Map session not found", details={"session_id": session_id})


class ResourceNotFound(PinnaException):
    code = ErrorCode.RESOURCE_NOT_FOUND
    status_code = 404


def resource_not_found(resource: str, resource_id: str | None = None) -> ResourceNotFound:
    details = {"resource": resource}
    if resource_id:
        details["resource_id"] = resource_id
    return ResourceNotFound(f"{resource} not found", details=details)
