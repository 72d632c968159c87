"""
Shared test fixtures.
"""

import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

import pytest
from unittest.mock import patch
from typing import Generator

from models.imports import ImportOutcome


# ===================
# MOCK INGESTION API
# ===================

class MockResponse:
    """Mock requests.Response with a JSON body."""

    def __init__(self, status_code: int = 200, payload=None, json_error: bool = False):
        self.status_code = status_code
        self._payload = payload
        self._json_error = json_error

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._json_error:
            raise ValueError("No JSON object could be decoded")
        return self._payload

    def raise_for_status(self):
        if not self.ok:
            import requests
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")


class FakeSubmitter:
    """
    Stand-in for UploadSubmitter that records calls.

    Usage:
        submitter = FakeSubmitter(outcome=ImportOutcome(success=True, message="ok"))
        wizard = ImportWizard("w-1", submitter=submitter)
    """

    def __init__(self, outcome: ImportOutcome = None):
        self.outcome = outcome or ImportOutcome(
            success=True,
            message="Successfully uploaded 3 of 3 records",
            total_rows=3,
            success_count=3
        )
        self.calls: list[dict] = []

    def submit(self, file_name, content, account_id, final_mapping) -> ImportOutcome:
        self.calls.append({
            "file_name": file_name,
            "content": content,
            "account_id": account_id,
            "final_mapping": final_mapping,
        })
        return self.outcome


# ===================
# FIXTURES
# ===================

@pytest.fixture
def scenario_a_csv() -> bytes:
    """Header row with three known fields and one unknown, 3 data rows."""
    return (
        b"Email,First Name,Last Name,Notes\n"
        b"ann@example.com,Ann,Lee,vip\n"
        b"bo@example.com,Bo,Diaz,\n"
        b"cy@example.com,Cy,Park,call back\n"
    )


@pytest.fixture
def fake_submitter() -> FakeSubmitter:
    """Submitter that succeeds without touching the network."""
    return FakeSubmitter()


@pytest.fixture
def mock_requests() -> Generator:
    """
    Patch requests in the ingestion API module.

    Usage:
        def test_something(mock_requests):
            mock_requests.post.return_value = MockResponse(200, {...})
    """
    with patch("integrations.ingestion_api.requests") as mocked:
        import requests
        mocked.exceptions = requests.exceptions
        yield mocked


@pytest.fixture(autouse=True)
def clear_wizard_sessions():
    """Start every test with no open wizards."""
    from services import wizard_session_service
    wizard_session_service._sessions.clear()
    yield
    wizard_session_service._sessions.clear()


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client with the account list stubbed.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/api/imports/fields")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    with patch(
        "services.wizard_session_service._load_accounts",
        return_value=["Robbie_Haas", "acme"]
    ):
        yield TestClient(app)
