"""
Platform API integration.

Two calls are made from the import console:
- list_accounts(): CIDs an import can be assigned to
- upload_csv(): one multipart bulk import request per submission

The ingestion API runs the row-by-row import and enrichment; this module
only ships the file, the CID and the field mapping to it.
"""

import json
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as DeadlineExceeded
from typing import Optional
import requests
import structlog

from config import settings
from exceptions import (
    ExternalServiceError,
    MalformedResponseError,
    SubmissionRejectedError,
    SubmissionTimeoutError,
)

logger = structlog.get_logger(__name__)

SERVICE_NAME = "ingestion"
UPLOAD_PATH = "/api/upload-csv"
ACCOUNTS_PATH = "/api/cid-accounts"


class IngestionApiClient:
    """
    HTTP client for the platform API.

    Each call uses a fixed timeout. Nothing is retried.

    upload_timeout bounds the whole upload, not just each socket read:
    a server trickling its reply still hits the deadline.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        upload_timeout: Optional[float] = None,
        accounts_timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.ingestion_api_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.ingestion_api_key
        self.upload_timeout = upload_timeout or settings.import_timeout_seconds
        self.accounts_timeout = accounts_timeout or settings.account_list_timeout_seconds

    def _headers(self) -> dict:
        if not self.api_key:
            return {}
        return {"Authorization": f"Bearer {self.api_key}"}

    def list_accounts(self) -> list[str]:
        """
        Get the CIDs of all accounts.

        Returns:
            List of CID strings in API order

        Raises:
            ExternalServiceError: If the request fails
        """
        url = f"{self.base_url}{ACCOUNTS_PATH}"

        try:
            response = requests.get(url, headers=self._headers(), timeout=self.accounts_timeout)
            response.raise_for_status()
            payload = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error("account_list_failed", error=str(e))
            raise ExternalServiceError(
                SERVICE_NAME,
                "Failed to load accounts",
                details={"original_error": str(e)}
            )

        accounts = [row["cid"] for row in payload if row.get("cid")]
        logger.info("accounts_loaded", count=len(accounts))
        return accounts

    def upload_csv(
        self,
        file_name: str,
        content: bytes,
        cid: str,
        field_mappings: dict[str, str],
    ) -> dict:
        """
        Send one bulk import request.

        Args:
            file_name: Original filename
            content: Raw file bytes
            cid: Account that will own the imported contacts
            field_mappings: Field key -> CSV header

        Returns:
            Parsed JSON body of the success response

        Raises:
            SubmissionTimeoutError: Request exceeded upload_timeout
            SubmissionRejectedError: Non-success response
            MalformedResponseError: Success response whose JSON is not an object
            ExternalServiceError: Connection or transport failure
        """
        url = f"{self.base_url}{UPLOAD_PATH}"
        files = {"csvFile": (file_name, content, "text/csv")}
        data = {"cid": cid, "fieldMappings": json.dumps(field_mappings)}

        logger.info(
            "sending_bulk_import",
            cid=cid,
            file_name=file_name,
            size=len(content),
            mapped_fields=len(field_mappings)
        )

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ingestion-upload")
        future = executor.submit(
            requests.post,
            url,
            files=files,
            data=data,
            headers=self._headers(),
            timeout=self.upload_timeout
        )
        try:
            response = future.result(timeout=self.upload_timeout)
        except (DeadlineExceeded, requests.exceptions.Timeout):
            logger.error("bulk_import_timed_out", cid=cid, timeout=self.upload_timeout)
            raise SubmissionTimeoutError(self.upload_timeout)
        except requests.exceptions.RequestException as e:
            logger.error("bulk_import_request_failed", cid=cid, error=str(e))
            raise ExternalServiceError(
                SERVICE_NAME,
                "Could not reach the ingestion API",
                details={"original_error": str(e)}
            )
        finally:
            # A request past its deadline finishes in the background, unobserved
            executor.shutdown(wait=False)

        if not response.ok:
            message = _error_message(response)
            logger.error(
                "bulk_import_rejected",
                cid=cid,
                status=response.status_code,
                message=message
            )
            raise SubmissionRejectedError(message, upstream_status=response.status_code)

        try:
            payload = response.json()
        except ValueError:
            logger.warning("bulk_import_response_not_json", cid=cid)
            return {}

        if not isinstance(payload, dict):
            logger.error(
                "bulk_import_response_malformed",
                cid=cid,
                body_type=type(payload).__name__
            )
            raise MalformedResponseError(f"expected a JSON object, got {type(payload).__name__}")
        return payload


def _error_message(response: requests.Response) -> Optional[str]:
    """Server-supplied message from an error response, if any."""
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict):
        return payload.get("message") or None
    return None


_client: Optional[IngestionApiClient] = None


def get_ingestion_api_client() -> IngestionApiClient:
    global _client
    if _client is None:
        _client = IngestionApiClient()
    return _client
