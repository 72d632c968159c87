"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    CamelSchema,
)
from models.manual_mapping import (
    SKIP,
    ManualMapping,
)
from models.imports import (
    WizardPhase,
    CanonicalFieldResponse,
    ParsedHeader,
    MappingDraft,
    MappingSummary,
    ImportOutcome,
    AccountSelection,
    WizardSnapshot,
    SubmitResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "CamelSchema",

    # Manual mapping
    "SKIP",
    "ManualMapping",

    # Imports
    "WizardPhase",
    "CanonicalFieldResponse",
    "ParsedHeader",
    "MappingDraft",
    "MappingSummary",
    "ImportOutcome",
    "AccountSelection",
    "WizardSnapshot",
    "SubmitResponse",
]
