"""
Bulk contact import models.

Data structures passed between the header parser, the synonym matcher,
the mapping resolver and the import wizard, plus the API shapes built
from them.
"""

from types import MappingProxyType
from typing import Mapping, Optional
from enum import Enum
from pydantic import ConfigDict, Field, field_serializer, field_validator

from models.base import CamelSchema


class WizardPhase(str, Enum):
    """Import dialog step."""
    UPLOAD = "upload"  # Choose account and file
    VERIFY = "verify"  # Review auto mapping, resolve unmapped headers


class CanonicalFieldResponse(CamelSchema):
    """A contact field the platform can store."""

    key: str = Field(..., description="Field key sent to the ingestion API")
    label: str = Field(..., description="Human-readable label")


class ParsedHeader(CamelSchema):
    """Header row and row count extracted from an uploaded file."""

    model_config = ConfigDict(frozen=True)

    headers: tuple[str, ...] = Field(..., description="Header tokens in file order")
    total_rows: int = Field(..., ge=0, description="Non-blank lines after the header")
    file_name: str = Field(default="", description="Original filename")


class MappingDraft(CamelSchema):
    """
    Result of one verification pass.

    Immutable: verifying again produces a new draft rather than
    editing this one.

    mapped_fields maps canonical field key -> header and is exposed as a
    read-only mapping. A header that only matched fields already claimed
    by an earlier header appears in duplicate_headers and nowhere else.
    """

    model_config = ConfigDict(frozen=True)

    headers: tuple[str, ...] = Field(..., description="Header tokens in file order")
    mapped_fields: Mapping[str, str] = Field(default_factory=dict, validate_default=True)
    unmapped_headers: tuple[str, ...] = Field(default=())
    duplicate_headers: tuple[str, ...] = Field(default=())
    total_rows: int = Field(..., ge=0)
    file_name: str = Field(default="")

    @field_validator("mapped_fields", mode="after")
    @classmethod
    def freeze_mapped_fields(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @field_serializer("mapped_fields")
    def serialize_mapped_fields(self, value: Mapping[str, str]) -> dict[str, str]:
        return dict(value)


class MappingSummary(CamelSchema):
    """Counts shown under the mapping table."""

    mapped_count: int = Field(..., ge=0, description="Auto plus manual mappings")
    skipped_count: int = Field(..., ge=0, description="Unmapped headers left out")


class ImportOutcome(CamelSchema):
    """
    Result of one bulk import submission.

    success=False carries a reason in message and a machine code in
    error_code. Counts come from the ingestion API on success.
    """

    success: bool
    message: str
    error_code: Optional[str] = None
    total_rows: int = 0
    success_count: int = 0
    error_count: int = 0
    errors: list[str] = Field(default_factory=list)
    auto_mapped_fields: Optional[int] = Field(
        None,
        description="Fields the ingestion API mapped on its own header pass"
    )


class AccountSelection(CamelSchema):
    """Account chosen as the owner of imported contacts."""

    cid: str = Field(..., min_length=1, description="Client/account identifier")


class WizardSnapshot(CamelSchema):
    """Everything the import dialog renders for its current step."""

    wizard_id: str
    phase: WizardPhase
    cid: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    draft: Optional[MappingDraft] = None
    overrides: dict[str, str] = Field(default_factory=dict)
    available_targets: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Selectable field keys per unmapped header"
    )
    summary: Optional[MappingSummary] = None
    busy: bool = False
    last_outcome: Optional[ImportOutcome] = None


class SubmitResponse(CamelSchema):
    """Submission result plus the reset wizard."""

    outcome: ImportOutcome
    wizard: WizardSnapshot
