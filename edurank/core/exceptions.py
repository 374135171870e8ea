"""Application exceptions.

Every exception renders the same envelope::

    {"success": false, "error": {"code": ..., "message": ..., "details": {...}}}
"""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception.

    Subclasses set ``status_code``, ``code`` and ``default_message``.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(status_code=type(self).status_code, detail=self.envelope())

    def envelope(self) -> dict[str, Any]:
        return {
            "success": False,
            "error": {"code": self.code, "message": self.message, "details": self.details},
        }


class AuthenticationError(AppException):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "AUTH_FAILED"
    default_message = "Authentication failed"


class PermissionDeniedError(AppException):
    """The principal may not act on the requested class or subject."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "PERMISSION_DENIED"
    default_message = "Permission denied"

    def __init__(
        self,
        message: str | None = None,
        class_level: str | None = None,
        subject: str | None = None,
    ):
        details = {}
        if class_level:
            details["class_level"] = class_level
        if subject:
            details["subject"] = subject
        super().__init__(message, details)


class ValidationError(AppException):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "VALIDATION_ERROR"
    default_message = "Validation error"


class InvalidClassLevelError(AppException):
    """Class level outside the supported set of classes.

    Raised instead of falling back to a default tier, since a wrong tier
    would compute max marks against the wrong subject list.
    """

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_CLASS_LEVEL"

    def __init__(self, class_level: Any):
        self.class_level = class_level
        super().__init__(
            f"Unknown class level: {class_level!r}",
            {"class_level": str(class_level)},
        )


class UploadError(AppException):
    """Uploaded file rejected before parsing."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "UPLOAD_FAILED"
    default_message = "Upload failed"


class NotFoundError(AppException):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource", identifier: str | None = None):
        super().__init__(
            f"{resource} not found",
            {"identifier": identifier} if identifier else None,
        )


class InternalError(AppException):
    pass
