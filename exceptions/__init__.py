"""
Custom exceptions module.

All errors derive from AppError and render through AppError.to_dict().
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    ExternalServiceError,

    # CSV header parser
    EmptyFileError,
    FileTooLargeError,

    # Field mapping
    UnknownFieldError,
    UnknownHeaderError,
    MappingConflictError,

    # Import wizard
    MissingSelectionError,
    UnknownAccountError,
    InvalidPhaseError,
    SubmissionInProgressError,
    WizardNotFoundError,

    # Upload submission
    SubmissionTimeoutError,
    SubmissionRejectedError,
    MalformedResponseError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "ExternalServiceError",

    # Parser
    "EmptyFileError",
    "FileTooLargeError",

    # Mapping
    "UnknownFieldError",
    "UnknownHeaderError",
    "MappingConflictError",

    # Wizard
    "MissingSelectionError",
    "UnknownAccountError",
    "InvalidPhaseError",
    "SubmissionInProgressError",
    "WizardNotFoundError",

    # Submission
    "SubmissionTimeoutError",
    "SubmissionRejectedError",
    "MalformedResponseError",
]
