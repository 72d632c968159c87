"""
Mapping resolver.

Merges the automatic mapping in a MappingDraft with the operator's
manual overrides and produces the final field mapping sent to the
ingestion API.

Overrides map header -> target, where target is a canonical field key,
SKIP, or "" (unset). The final mapping is field key -> header.

Uniqueness rules:
- A field claimed by the automatic mapping is never offered as a target
- A field chosen for one header is not offered for any other header
Only headers left in draft.unmapped_headers can be overridden. Row data
is never looked at here.
"""

from typing import Optional
import structlog

from config.fields import CANONICAL_FIELD_KEYS
from models.imports import MappingDraft, MappingSummary
from models.manual_mapping import SKIP
from exceptions import (
    MappingConflictError,
    UnknownFieldError,
    UnknownHeaderError,
)

logger = structlog.get_logger(__name__)

Overrides = dict[str, str]
FinalMapping = dict[str, str]


def is_active_target(target: Optional[str]) -> bool:
    """True if target maps a header (not unset, not skipped)."""
    return bool(target) and target != SKIP


def filter_overrides(overrides: Overrides) -> Overrides:
    """Drop unset and skipped overrides, keeping header -> field key."""
    return {
        header: target
        for header, target in overrides.items()
        if is_active_target(target)
    }


def claimed_by(
    draft: MappingDraft,
    overrides: Overrides,
    field_key: str,
    exclude_header: Optional[str] = None
) -> Optional[str]:
    """
    Return the header currently holding field_key, if any.

    Auto-mapped headers take precedence over overrides. exclude_header
    lets a header keep its own current choice.
    """
    if field_key in draft.mapped_fields:
        return draft.mapped_fields[field_key]
    for header, target in filter_overrides(overrides).items():
        if header != exclude_header and target == field_key:
            return header
    return None


def available_targets(
    draft: MappingDraft,
    overrides: Overrides,
    header: str
) -> list[str]:
    """
    Field keys the operator may pick for header, in canonical order.

    Excludes auto-mapped fields and fields chosen for other headers.
    The header's own current choice stays in the list.
    """
    return [
        key for key in CANONICAL_FIELD_KEYS
        if claimed_by(draft, overrides, key, exclude_header=header) is None
    ]


def validate_override(
    draft: MappingDraft,
    overrides: Overrides,
    header: str,
    target: str
) -> None:
    """
    Check that header may be mapped to target.

    Raises:
        UnknownHeaderError: header is blank or not waiting for manual mapping
        UnknownFieldError: target is not a field key, SKIP or ""
        MappingConflictError: target is already held by another header
    """
    if not header or header not in draft.unmapped_headers:
        raise UnknownHeaderError(header)

    if not is_active_target(target):
        return

    if target not in CANONICAL_FIELD_KEYS:
        raise UnknownFieldError(target)

    holder = claimed_by(draft, overrides, target, exclude_header=header)
    if holder is not None:
        raise MappingConflictError(target, holder)


def apply_override(
    draft: MappingDraft,
    overrides: Overrides,
    header: str,
    target: str
) -> Overrides:
    """
    Validate and record one operator choice.

    Args:
        draft: Current verification draft
        overrides: Existing overrides (not modified)
        header: Unmapped header being resolved
        target: Field key, SKIP, or "" to unset

    Returns:
        New overrides dict including the choice

    Raises:
        Same as validate_override()
    """
    validate_override(draft, overrides, header, target)

    updated = dict(overrides)
    if target:
        updated[header] = target
    else:
        updated.pop(header, None)

    logger.debug("override_applied", header=header, target=target or None)
    return updated


def resolve(draft: MappingDraft, overrides: Overrides) -> FinalMapping:
    """
    Build the final field key -> header mapping.

    Union of the automatic mapping and the active overrides. If two
    entries name the same field the later one wins; apply_override()
    keeps that from happening.

    Args:
        draft: Verification draft
        overrides: Operator choices, header -> target

    Returns:
        Field key -> header mapping
    """
    final: FinalMapping = dict(draft.mapped_fields)
    for header, field_key in filter_overrides(overrides).items():
        final[field_key] = header
    return final


def summarize(draft: MappingDraft, overrides: Overrides) -> MappingSummary:
    """Mapped and skipped counts for the verification step."""
    manual = len(filter_overrides(overrides))
    return MappingSummary(
        mapped_count=len(draft.mapped_fields) + manual,
        skipped_count=max(len(draft.unmapped_headers) - manual, 0)
    )
