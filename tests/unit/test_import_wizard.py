"""
Unit tests for the ImportWizard state machine.

Run: pytest tests/unit/test_import_wizard.py -v
"""

import threading
import pytest

from models.imports import ImportOutcome, WizardPhase
from models.manual_mapping import SKIP
from services.import_wizard import ImportWizard, WizardEvent, next_phase
from services.upload_submitter import UploadSubmitter
from integrations.ingestion_api import IngestionApiClient
from exceptions import (
    EmptyFileError,
    FileTooLargeError,
    InvalidPhaseError,
    MappingConflictError,
    MissingSelectionError,
    SubmissionInProgressError,
    UnknownAccountError,
)
from tests.conftest import FakeSubmitter, MockResponse


def make_wizard(submitter=None, known_accounts=None, **kwargs) -> ImportWizard:
    return ImportWizard(
        "wizard-1",
        known_accounts=known_accounts,
        submitter=submitter or FakeSubmitter(),
        **kwargs
    )


def verified_wizard(content: bytes, submitter=None) -> ImportWizard:
    wizard = make_wizard(submitter)
    wizard.select_account("acme")
    wizard.select_file("contacts.csv", content)
    wizard.verify()
    return wizard


class TestTransitions:
    """Tests for next_phase()"""

    def test_upload_to_verify(self):
        assert next_phase(WizardPhase.UPLOAD, WizardEvent.VERIFY) == WizardPhase.VERIFY

    def test_submit_returns_to_upload(self):
        assert next_phase(WizardPhase.VERIFY, WizardEvent.SUBMIT) == WizardPhase.UPLOAD

    @pytest.mark.parametrize("phase,event", [
        (WizardPhase.UPLOAD, WizardEvent.SUBMIT),
        (WizardPhase.UPLOAD, WizardEvent.BACK),
        (WizardPhase.UPLOAD, WizardEvent.EDIT),
        (WizardPhase.VERIFY, WizardEvent.VERIFY),
        (WizardPhase.VERIFY, WizardEvent.SELECT),
    ])
    def test_illegal_transitions(self, phase, event):
        with pytest.raises(InvalidPhaseError):
            next_phase(phase, event)


class TestUploadStep:
    """Tests for selection and verification"""

    def test_starts_empty_in_upload(self):
        wizard = make_wizard()

        assert wizard.phase == WizardPhase.UPLOAD
        assert wizard.draft is None
        assert wizard.overrides == {}

    def test_verify_moves_to_verify(self, scenario_a_csv):
        wizard = verified_wizard(scenario_a_csv)

        assert wizard.phase == WizardPhase.VERIFY
        assert wizard.draft.unmapped_headers == ("Notes",)
        assert wizard.draft.total_rows == 3
        assert wizard.draft.file_name == "contacts.csv"

    def test_verify_without_file(self):
        """Should refuse to verify and stay in UPLOAD."""
        wizard = make_wizard()
        wizard.select_account("acme")

        with pytest.raises(MissingSelectionError) as exc_info:
            wizard.verify()

        assert exc_info.value.details["missing"] == ["file"]
        assert wizard.phase == WizardPhase.UPLOAD

    def test_verify_without_account(self, scenario_a_csv):
        wizard = make_wizard()
        wizard.select_file("contacts.csv", scenario_a_csv)

        with pytest.raises(MissingSelectionError) as exc_info:
            wizard.verify()

        assert exc_info.value.details["missing"] == ["account"]

    def test_scenario_c_empty_file(self):
        """Should raise EmptyFileError and produce no draft."""
        wizard = make_wizard()
        wizard.select_account("acme")
        wizard.select_file("empty.csv", b"\n\n")

        with pytest.raises(EmptyFileError):
            wizard.verify()

        assert wizard.phase == WizardPhase.UPLOAD
        assert wizard.draft is None

    def test_recovers_after_empty_file(self, scenario_a_csv):
        """Should accept a new file after a failed parse."""
        wizard = make_wizard()
        wizard.select_account("acme")
        wizard.select_file("empty.csv", b"")
        with pytest.raises(EmptyFileError):
            wizard.verify()

        wizard.select_file("contacts.csv", scenario_a_csv)
        wizard.verify()

        assert wizard.phase == WizardPhase.VERIFY

    def test_unknown_account_rejected(self):
        wizard = make_wizard(known_accounts=["acme"])

        with pytest.raises(UnknownAccountError):
            wizard.select_account("other")

        assert wizard.cid is None

    def test_known_account_accepted(self):
        wizard = make_wizard(known_accounts=["acme"])

        wizard.select_account(" acme ")

        assert wizard.cid == "acme"

    def test_file_too_large(self):
        wizard = make_wizard(max_upload_bytes=1024)

        with pytest.raises(FileTooLargeError):
            wizard.select_file("big.csv", b"x" * 2048)

        assert wizard.file_content is None

    def test_cannot_select_in_verify(self, scenario_a_csv):
        wizard = verified_wizard(scenario_a_csv)

        with pytest.raises(InvalidPhaseError):
            wizard.select_account("other")


class TestVerifyStep:
    """Tests for overrides and back navigation"""

    def test_set_override(self, scenario_a_csv):
        wizard = verified_wizard(scenario_a_csv)

        wizard.set_override("Notes", "address")

        assert wizard.overrides == {"Notes": "address"}
        assert "address" in wizard.available_targets("Notes")

    def test_available_targets_waits_for_lock(self, scenario_a_csv):
        """Should not read the draft while another action holds the wizard."""
        wizard = verified_wizard(scenario_a_csv)
        result = {}
        reader = threading.Thread(
            target=lambda: result.update(targets=wizard.available_targets("Notes"))
        )

        with wizard._lock:
            reader.start()
            reader.join(timeout=0.2)
            assert reader.is_alive()
            assert result == {}

        reader.join(timeout=5)
        assert "address" in result["targets"]
        assert "email" not in result["targets"]

    def test_available_targets_empty_in_upload(self):
        assert make_wizard().available_targets("Notes") == []

    def test_override_conflict_with_auto_mapping(self, scenario_a_csv):
        wizard = verified_wizard(scenario_a_csv)

        with pytest.raises(MappingConflictError):
            wizard.set_override("Notes", "email")

        assert wizard.overrides == {}

    def test_override_not_allowed_in_upload(self):
        wizard = make_wizard()

        with pytest.raises(InvalidPhaseError):
            wizard.set_override("Notes", "address")

    def test_back_discards_draft_and_overrides(self, scenario_a_csv):
        wizard = verified_wizard(scenario_a_csv)
        wizard.set_override("Notes", "address")

        wizard.back()

        assert wizard.phase == WizardPhase.UPLOAD
        assert wizard.draft is None
        assert wizard.overrides == {}
        assert wizard.cid == "acme"
        assert wizard.file_name == "contacts.csv"

    def test_reverify_produces_new_draft(self, scenario_a_csv):
        wizard = verified_wizard(scenario_a_csv)
        first = wizard.draft

        wizard.back()
        wizard.verify()

        assert wizard.draft is not first
        assert wizard.draft == first


class TestSubmit:
    """Tests for submit()"""

    def test_sends_final_mapping(self, scenario_a_csv, fake_submitter):
        wizard = verified_wizard(scenario_a_csv, fake_submitter)
        wizard.set_override("Notes", "address")

        outcome = wizard.submit()

        assert outcome.success is True
        call = fake_submitter.calls[0]
        assert call["account_id"] == "acme"
        assert call["file_name"] == "contacts.csv"
        assert call["content"] == scenario_a_csv
        assert call["final_mapping"] == {
            "email": "Email",
            "firstName": "First Name",
            "lastName": "Last Name",
            "address": "Notes",
        }

    def test_skipped_header_not_sent(self, scenario_a_csv, fake_submitter):
        wizard = verified_wizard(scenario_a_csv, fake_submitter)
        wizard.set_override("Notes", SKIP)

        wizard.submit()

        assert "Notes" not in fake_submitter.calls[0]["final_mapping"].values()

    def test_resets_after_success(self, scenario_a_csv):
        wizard = verified_wizard(scenario_a_csv)

        outcome = wizard.submit()

        assert wizard.phase == WizardPhase.UPLOAD
        assert wizard.draft is None
        assert wizard.overrides == {}
        assert wizard.cid is None
        assert wizard.file_content is None
        assert wizard.busy is False
        assert wizard.last_outcome == outcome

    def test_scenario_e_timeout_resets(self, scenario_a_csv):
        """Should report the timeout and return to a clean UPLOAD state."""
        submitter = FakeSubmitter(ImportOutcome(
            success=False,
            message="Upload did not complete within 300 seconds",
            error_code="SUBMISSION_TIMEOUT"
        ))
        wizard = verified_wizard(scenario_a_csv, submitter)

        outcome = wizard.submit()

        assert outcome.success is False
        assert outcome.error_code == "SUBMISSION_TIMEOUT"
        assert wizard.phase == WizardPhase.UPLOAD
        assert wizard.draft is None

    def test_resets_when_submitter_raises(self, scenario_a_csv):
        """Should still reset if the submitter fails unexpectedly."""
        class BrokenSubmitter:
            def submit(self, *args):
                raise RuntimeError("boom")

        wizard = verified_wizard(scenario_a_csv, BrokenSubmitter())

        with pytest.raises(RuntimeError):
            wizard.submit()

        assert wizard.phase == WizardPhase.UPLOAD
        assert wizard.busy is False

    @pytest.mark.parametrize("body", [None, [], {"totalRows": "n/a"}])
    def test_unreadable_reply_resets_with_failed_outcome(self, scenario_a_csv, mock_requests, body):
        """Should report a failed outcome rather than raise."""
        mock_requests.post.return_value = MockResponse(200, body)
        client = IngestionApiClient(base_url="http://ingest.test", api_key="")
        wizard = verified_wizard(scenario_a_csv, UploadSubmitter(client))

        outcome = wizard.submit()

        assert outcome.success is False
        assert outcome.error_code == "MALFORMED_RESPONSE"
        assert wizard.phase == WizardPhase.UPLOAD
        assert wizard.draft is None
        assert wizard.last_outcome == outcome

    def test_submit_not_allowed_in_upload(self):
        with pytest.raises(InvalidPhaseError):
            make_wizard().submit()

    def test_second_submit_rejected_while_in_flight(self, scenario_a_csv):
        """Should allow only one submission at a time."""
        started = threading.Event()
        release = threading.Event()

        class SlowSubmitter(FakeSubmitter):
            def submit(self, *args):
                started.set()
                release.wait(timeout=5)
                return super().submit(*args)

        wizard = verified_wizard(scenario_a_csv, SlowSubmitter())
        worker = threading.Thread(target=wizard.submit)
        worker.start()
        started.wait(timeout=5)

        try:
            assert wizard.busy is True
            with pytest.raises(SubmissionInProgressError):
                wizard.submit()
            with pytest.raises(SubmissionInProgressError):
                wizard.back()
        finally:
            release.set()
            worker.join(timeout=5)

        assert wizard.busy is False
        assert wizard.phase == WizardPhase.UPLOAD

    def test_outcome_dropped_after_reset_in_flight(self, scenario_a_csv):
        """Should not surface an outcome once the wizard was reset."""
        wizard_ref = {}

        class ResettingSubmitter(FakeSubmitter):
            def submit(self, *args):
                wizard_ref["wizard"].reset()
                return super().submit(*args)

        submitter = ResettingSubmitter()
        wizard = verified_wizard(scenario_a_csv, submitter)
        wizard_ref["wizard"] = wizard

        outcome = wizard.submit()

        assert outcome.success is True
        assert wizard.last_outcome is None
        assert wizard.phase == WizardPhase.UPLOAD


class TestSnapshot:
    """Tests for snapshot()"""

    def test_verify_snapshot(self, scenario_a_csv):
        wizard = verified_wizard(scenario_a_csv)
        wizard.set_override("Notes", "address")

        snapshot = wizard.snapshot()

        assert snapshot.phase == WizardPhase.VERIFY
        assert snapshot.cid == "acme"
        assert snapshot.file_size == len(scenario_a_csv)
        assert snapshot.summary.mapped_count == 4
        assert snapshot.summary.skipped_count == 0
        assert "address" in snapshot.available_targets["Notes"]
        assert "email" not in snapshot.available_targets["Notes"]

    def test_upload_snapshot(self):
        snapshot = make_wizard().snapshot()

        assert snapshot.phase == WizardPhase.UPLOAD
        assert snapshot.draft is None
        assert snapshot.summary is None
        assert snapshot.available_targets == {}
