"""
Synonym matcher: automatic header to field mapping.

Greedy assignment over the ordered synonym table:
- Headers are processed in file order
- For each header, the table is scanned top to bottom
- The first unclaimed field listing the header (case-insensitive) claims it
- A field claims at most one header

Duplicate handling (first occurrence wins):
- A header that only matches fields already claimed by earlier headers
  is dropped from both mapped and unmapped and reported in
  duplicate_headers, e.g. "email,email,firstName" keeps the first "email"
- An unmatched header whose exact text is already waiting in unmapped
  is reported the same way, since manual overrides are keyed by text

Empty header tokens are never matched or treated as duplicates. Each one
stays in unmapped so the skipped count covers every column.
"""

from dataclasses import dataclass, field
from typing import Iterable
import structlog

from config.fields import SYNONYM_TABLE
from models.imports import MappingDraft, ParsedHeader

logger = structlog.get_logger(__name__)

SynonymTable = tuple[tuple[str, tuple[str, ...]], ...]


@dataclass
class MatchResult:
    """Split of a header row into mapped, unmapped and duplicate headers."""
    mapped_fields: dict[str, str] = field(default_factory=dict)
    unmapped_headers: list[str] = field(default_factory=list)
    duplicate_headers: list[str] = field(default_factory=list)


def _lowered(synonym_table: SynonymTable) -> list[tuple[str, frozenset[str]]]:
    return [
        (key, frozenset(variant.lower() for variant in variants))
        for key, variants in synonym_table
    ]


def match_headers(
    headers: Iterable[str],
    synonym_table: SynonymTable = SYNONYM_TABLE
) -> MatchResult:
    """
    Map each header to a canonical field using the synonym table.

    Deterministic: the same header sequence always yields the same split.

    Args:
        headers: Header tokens in file order
        synonym_table: Ordered (key, variants) pairs

    Returns:
        MatchResult with mapped_fields (field key -> header),
        unmapped_headers and duplicate_headers, all in file order
    """
    table = _lowered(synonym_table)
    result = MatchResult()

    for header in headers:
        needle = header.lower()
        matched_claimed = False
        claimed_key = None

        for key, variants in table:
            if needle not in variants:
                continue
            if key in result.mapped_fields:
                matched_claimed = True
                continue
            claimed_key = key
            break

        if claimed_key is not None:
            result.mapped_fields[claimed_key] = header
        elif not header:
            result.unmapped_headers.append(header)
        elif matched_claimed or header in result.unmapped_headers:
            result.duplicate_headers.append(header)
        else:
            result.unmapped_headers.append(header)

    if result.duplicate_headers:
        logger.warning(
            "duplicate_headers_ignored",
            duplicates=result.duplicate_headers
        )

    return result


def build_mapping_draft(
    parsed: ParsedHeader,
    synonym_table: SynonymTable = SYNONYM_TABLE
) -> MappingDraft:
    """
    Run the matcher over a parsed header row and freeze the result.

    Args:
        parsed: Output of parse_csv_header()
        synonym_table: Ordered (key, variants) pairs

    Returns:
        MappingDraft for the verification step
    """
    match = match_headers(parsed.headers, synonym_table)

    logger.info(
        "headers_matched",
        file_name=parsed.file_name,
        mapped=len(match.mapped_fields),
        unmapped=len(match.unmapped_headers),
        duplicates=len(match.duplicate_headers)
    )

    return MappingDraft(
        headers=parsed.headers,
        mapped_fields=match.mapped_fields,
        unmapped_headers=tuple(match.unmapped_headers),
        duplicate_headers=tuple(match.duplicate_headers),
        total_rows=parsed.total_rows,
        file_name=parsed.file_name
    )
