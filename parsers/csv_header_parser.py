"""
CSV header parser for bulk contact uploads.

Reads only what the mapping step needs: the header row and the number
of data rows. Row contents are left to the ingestion API.
"""

from typing import Union
import structlog

from models.imports import ParsedHeader
from exceptions import EmptyFileError

logger = structlog.get_logger(__name__)

DELIMITER = ","
QUOTE_CHAR = '"'
UTF8_BOM = "\ufeff"


def decode_csv_content(content: Union[str, bytes]) -> str:
    """
    Decode uploaded bytes as UTF-8, dropping a leading byte order mark.

    Undecodable bytes are replaced rather than rejected; only the header
    row is inspected here.
    """
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    if content.startswith(UTF8_BOM):
        content = content[len(UTF8_BOM):]
    return content


def split_header_row(line: str) -> tuple[str, ...]:
    """
    Split a header line into tokens.

    Each token is trimmed and has every double quote removed:
    '"Email", First Name ,"Notes"' -> ("Email", "First Name", "Notes")
    """
    return tuple(
        token.strip().replace(QUOTE_CHAR, "")
        for token in line.split(DELIMITER)
    )


def parse_csv_header(content: Union[str, bytes], file_name: str = "") -> ParsedHeader:
    """
    Extract the header row and data row count from CSV text.

    Blank and whitespace-only lines are ignored everywhere in the file.
    A header row whose tokens are all empty still counts as a header.

    Args:
        content: Raw file content (str, or UTF-8 bytes)
        file_name: Original filename, carried into the result

    Returns:
        ParsedHeader with ordered headers and total_rows

    Raises:
        EmptyFileError: If the file has no non-blank lines
    """
    text = decode_csv_content(content)
    lines = [line for line in text.splitlines() if line.strip()]

    if not lines:
        logger.warning("csv_file_empty", file_name=file_name)
        raise EmptyFileError(file_name)

    headers = split_header_row(lines[0])
    total_rows = len(lines) - 1

    logger.info(
        "csv_header_parsed",
        file_name=file_name,
        header_count=len(headers),
        total_rows=total_rows
    )

    return ParsedHeader(
        headers=headers,
        total_rows=total_rows,
        file_name=file_name
    )
