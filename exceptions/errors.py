"""
Custom exception classes for the application.

Every error carries a stable code used in the API error envelope.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "EMPTY_FILE")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with current state (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


# ===================
# CSV HEADER PARSER
# ===================

class EmptyFileError(ValidationError):
    """Uploaded file has no non-blank lines."""

    def __init__(self, file_name: Optional[str] = None):
        super().__init__(
            code="EMPTY_FILE",
            message="CSV file appears to be empty",
            details={"file_name": file_name}
        )


class FileTooLargeError(AppError):
    """Uploaded file exceeds the configured size limit (413)."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            code="FILE_TOO_LARGE",
            message=f"File exceeds the maximum upload size of {limit / (1024 * 1024):.1f}MB",
            status_code=413,
            details={"size": size, "limit": limit}
        )


# ===================
# FIELD MAPPING
# ===================

class UnknownFieldError(ValidationError):
    """Override target is not a canonical field."""

    def __init__(self, field_key: str):
        super().__init__(
            code="UNKNOWN_FIELD",
            message=f"'{field_key}' is not a known contact field",
            details={"field": field_key}
        )


class UnknownHeaderError(ValidationError):
    """Override names a header that is not awaiting manual mapping."""

    def __init__(self, header: str):
        super().__init__(
            code="UNKNOWN_HEADER",
            message=f"'{header}' is not an unmapped header in this file",
            details={"header": header}
        )


class MappingConflictError(ConflictError):
    """Target field is already claimed by another header."""

    def __init__(self, field_key: str, claimed_by: str):
        super().__init__(
            code="MAPPING_CONFLICT",
            message=f"Field '{field_key}' is already mapped to '{claimed_by}'",
            details={"field": field_key, "claimed_by": claimed_by}
        )


# ===================
# IMPORT WIZARD
# ===================

class MissingSelectionError(ValidationError):
    """File or account not chosen before verification."""

    def __init__(self, missing: list[str]):
        super().__init__(
            code="MISSING_SELECTION",
            message="Please select a file and account first",
            details={"missing": missing}
        )


class UnknownAccountError(ValidationError):
    """Selected CID is not in the loaded account list."""

    def __init__(self, cid: str):
        super().__init__(
            code="UNKNOWN_ACCOUNT",
            message="CID account not found",
            details={"cid": cid}
        )


class InvalidPhaseError(ConflictError):
    """Wizard action not allowed in the current phase."""

    def __init__(self, action: str, phase: str):
        super().__init__(
            code="INVALID_WIZARD_PHASE",
            message=f"Cannot {action} while the wizard is in the {phase} step",
            details={"action": action, "phase": phase}
        )


class SubmissionInProgressError(ConflictError):
    """A submit is already in flight for this wizard."""

    def __init__(self):
        super().__init__(
            code="SUBMISSION_IN_PROGRESS",
            message="An upload is already in progress"
        )


class WizardNotFoundError(NotFoundError):
    """Wizard session not found or expired."""

    def __init__(self, wizard_id: str):
        super().__init__(
            resource="Wizard",
            identifier=wizard_id,
            code="WIZARD_NOT_FOUND"
        )


# ===================
# UPLOAD SUBMISSION
# ===================

class SubmissionTimeoutError(AppError):
    """Ingestion request exceeded the fixed time bound (504)."""

    def __init__(self, timeout_seconds: float):
        super().__init__(
            code="SUBMISSION_TIMEOUT",
            message=f"Upload did not complete within {timeout_seconds:g} seconds",
            status_code=504,
            details={"timeout_seconds": timeout_seconds}
        )


class SubmissionRejectedError(AppError):
    """Ingestion endpoint returned a non-success response (502)."""

    GENERIC_MESSAGE = "Upload failed"

    def __init__(self, message: Optional[str] = None, upstream_status: Optional[int] = None):
        super().__init__(
            code="SUBMISSION_REJECTED",
            message=message or self.GENERIC_MESSAGE,
            status_code=502,
            details={"upstream_status": upstream_status}
        )


class MalformedResponseError(AppError):
    """Ingestion endpoint answered 2xx with a body that cannot be read (502)."""

    def __init__(self, reason: str):
        super().__init__(
            code="MALFORMED_RESPONSE",
            message="Upload finished but the server response could not be read",
            status_code=502,
            details={"reason": reason}
        )
