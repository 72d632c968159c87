"""
Upload submitter.

Packages the file, the CID and the final field mapping into a single
bulk import request and turns the reply into an ImportOutcome.
Failures are reported in the outcome, never raised.
"""

from typing import Optional
import structlog

from models.imports import ImportOutcome
from integrations.ingestion_api import IngestionApiClient, get_ingestion_api_client
from exceptions import AppError, MalformedResponseError

logger = structlog.get_logger(__name__)

# Server error messages returned to the operator
MAX_REPORTED_ERRORS = 10


class UploadSubmitter:
    """Sends one resolved import to the ingestion API."""

    def __init__(self, client: Optional[IngestionApiClient] = None):
        self.client = client or get_ingestion_api_client()

    def submit(
        self,
        file_name: str,
        content: bytes,
        account_id: str,
        final_mapping: dict[str, str],
    ) -> ImportOutcome:
        """
        Submit the import and report what happened.

        Args:
            file_name: Original filename
            content: Raw file bytes
            account_id: CID that will own the contacts
            final_mapping: Field key -> CSV header

        Returns:
            ImportOutcome; success=False with error_code on failure
        """
        try:
            payload = self.client.upload_csv(file_name, content, account_id, final_mapping)
            outcome = outcome_from_response(payload)
        except AppError as e:
            logger.warning(
                "import_submission_failed",
                cid=account_id,
                file_name=file_name,
                code=e.code,
                error=e.message
            )
            return ImportOutcome(
                success=False,
                message=e.message,
                error_code=e.code
            )

        logger.info(
            "import_submission_complete",
            cid=account_id,
            file_name=file_name,
            total_rows=outcome.total_rows,
            success_count=outcome.success_count,
            error_count=outcome.error_count
        )
        return outcome


def outcome_from_response(payload: dict) -> ImportOutcome:
    """
    Build a success outcome from the ingestion API response body.

    Expected shape:
        {"totalRows": 3, "successCount": 2, "errorCount": 1,
         "errors": [...], "headerMapping": {"mappedFields": 4}}

    Raises:
        MalformedResponseError: Body is not an object or a count is not a number
    """
    if not isinstance(payload, dict):
        raise MalformedResponseError(f"expected a JSON object, got {type(payload).__name__}")

    try:
        total_rows = _count(payload.get("totalRows"))
        success_count = _count(payload.get("successCount"))
        error_count = _count(payload.get("errorCount"))
        header_mapping = payload.get("headerMapping") or {}
        auto_mapped = header_mapping.get("mappedFields")
        auto_mapped = _count(auto_mapped) if auto_mapped is not None else None
        errors = payload.get("errors") or []
        if not isinstance(errors, list):
            errors = [errors]
    except (AttributeError, TypeError, ValueError) as e:
        raise MalformedResponseError(str(e))

    message = f"Successfully uploaded {success_count} of {total_rows} records"
    if auto_mapped:
        message += f" ({auto_mapped} fields auto-mapped)"

    return ImportOutcome(
        success=True,
        message=message,
        total_rows=total_rows,
        success_count=success_count,
        error_count=error_count,
        errors=[str(err) for err in errors][:MAX_REPORTED_ERRORS],
        auto_mapped_fields=auto_mapped
    )


def _count(value) -> int:
    """Integer count from a JSON value; missing or null counts as 0."""
    return int(value or 0)
