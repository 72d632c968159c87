"""
Import wizard state machine.

Drives one bulk import attempt through two steps:

    UPLOAD --verify--> VERIFY --submit--> UPLOAD
                         |
                         +----back------> UPLOAD

Every legal (phase, event) pair is listed in _TRANSITIONS; anything
else raises InvalidPhaseError. Submitting always ends in a clean UPLOAD
state, whether the ingestion API accepted the file or not.

One submit may be in flight per wizard. The busy flag is checked and set
under a lock because API requests for the same wizard can arrive on
different worker threads.
"""

from enum import Enum
from typing import Iterable, Optional
import threading
import structlog

from config import settings
from models.imports import (
    ImportOutcome,
    MappingDraft,
    WizardPhase,
    WizardSnapshot,
)
from parsers.csv_header_parser import parse_csv_header
from services.synonym_matcher import build_mapping_draft
from services import mapping_resolver
from services.upload_submitter import UploadSubmitter
from exceptions import (
    FileTooLargeError,
    InvalidPhaseError,
    MissingSelectionError,
    SubmissionInProgressError,
    UnknownAccountError,
)

logger = structlog.get_logger(__name__)


class WizardEvent(str, Enum):
    """Operator actions that may change the wizard phase."""
    SELECT = "select a file or account"
    VERIFY = "verify fields"
    EDIT = "edit field mappings"
    BACK = "go back"
    SUBMIT = "submit"


_TRANSITIONS: dict[tuple[WizardPhase, WizardEvent], WizardPhase] = {
    (WizardPhase.UPLOAD, WizardEvent.SELECT): WizardPhase.UPLOAD,
    (WizardPhase.UPLOAD, WizardEvent.VERIFY): WizardPhase.VERIFY,
    (WizardPhase.VERIFY, WizardEvent.EDIT): WizardPhase.VERIFY,
    (WizardPhase.VERIFY, WizardEvent.BACK): WizardPhase.UPLOAD,
    (WizardPhase.VERIFY, WizardEvent.SUBMIT): WizardPhase.UPLOAD,
}


def next_phase(phase: WizardPhase, event: WizardEvent) -> WizardPhase:
    """
    Look up the phase reached from phase on event.

    Raises:
        InvalidPhaseError: If event is not allowed in phase
    """
    try:
        return _TRANSITIONS[(phase, event)]
    except KeyError:
        raise InvalidPhaseError(event.value, phase.value)


class ImportWizard:
    """
    State for one open import dialog.

    Holds the selected account and file, the mapping draft and the
    operator's overrides. Nothing here outlives the dialog.
    """

    def __init__(
        self,
        wizard_id: str,
        known_accounts: Optional[Iterable[str]] = None,
        submitter: Optional[UploadSubmitter] = None,
        max_upload_bytes: Optional[int] = None,
    ):
        self.wizard_id = wizard_id
        self.known_accounts = frozenset(known_accounts) if known_accounts is not None else None
        self.max_upload_bytes = max_upload_bytes or settings.max_upload_bytes
        self._submitter = submitter
        self._lock = threading.Lock()
        self._attempt = 0

        self.phase = WizardPhase.UPLOAD
        self.cid: Optional[str] = None
        self.file_name: Optional[str] = None
        self.file_content: Optional[bytes] = None
        self.draft: Optional[MappingDraft] = None
        self.overrides: dict[str, str] = {}
        self.busy = False
        self.last_outcome: Optional[ImportOutcome] = None

    @property
    def submitter(self) -> UploadSubmitter:
        if self._submitter is None:
            self._submitter = UploadSubmitter()
        return self._submitter

    # ===================
    # INTERNAL HELPERS
    # ===================

    def _require(self, event: WizardEvent) -> WizardPhase:
        target = next_phase(self.phase, event)
        if self.busy:
            raise SubmissionInProgressError()
        return target

    def _clear(self) -> None:
        """Return to an empty UPLOAD state and invalidate any in-flight submit."""
        self._attempt += 1
        self.phase = WizardPhase.UPLOAD
        self.cid = None
        self.file_name = None
        self.file_content = None
        self.draft = None
        self.overrides = {}
        self.busy = False
        self.last_outcome = None

    # ===================
    # UPLOAD STEP
    # ===================

    def select_account(self, cid: str) -> None:
        """
        Choose the account that will own the imported contacts.

        Raises:
            UnknownAccountError: If an account list was loaded and cid is not in it
        """
        with self._lock:
            self._require(WizardEvent.SELECT)
            cid = cid.strip()
            if self.known_accounts is not None and cid not in self.known_accounts:
                raise UnknownAccountError(cid)
            self.cid = cid
            logger.debug("wizard_account_selected", wizard_id=self.wizard_id, cid=cid)

    def select_file(self, file_name: str, content: bytes) -> None:
        """
        Attach the uploaded file.

        Raises:
            FileTooLargeError: If content exceeds max_upload_bytes
        """
        with self._lock:
            self._require(WizardEvent.SELECT)
            if len(content) > self.max_upload_bytes:
                raise FileTooLargeError(len(content), self.max_upload_bytes)
            self.file_name = file_name
            self.file_content = content
            logger.debug(
                "wizard_file_selected",
                wizard_id=self.wizard_id,
                file_name=file_name,
                size=len(content)
            )

    def verify(self) -> MappingDraft:
        """
        Parse the header row and auto-map it, then move to VERIFY.

        On any failure the wizard stays in UPLOAD with no draft.

        Raises:
            MissingSelectionError: File or account not chosen
            EmptyFileError: File has no non-blank lines
        """
        with self._lock:
            target = self._require(WizardEvent.VERIFY)

            missing = []
            if self.file_content is None:
                missing.append("file")
            if not self.cid:
                missing.append("account")
            if missing:
                raise MissingSelectionError(missing)

            parsed = parse_csv_header(self.file_content, self.file_name or "")
            draft = build_mapping_draft(parsed)

            self.draft = draft
            self.overrides = {}
            self.last_outcome = None
            self.phase = target

            logger.info(
                "wizard_verified",
                wizard_id=self.wizard_id,
                cid=self.cid,
                file_name=self.file_name,
                total_rows=draft.total_rows,
                auto_mapped=len(draft.mapped_fields),
                unmapped=len(draft.unmapped_headers)
            )
            return draft

    # ===================
    # VERIFY STEP
    # ===================

    def set_override(self, header: str, target: str) -> dict[str, str]:
        """
        Map an unmapped header to a field, skip it, or unset it ("").

        Raises:
            UnknownHeaderError, UnknownFieldError, MappingConflictError
        """
        with self._lock:
            self._require(WizardEvent.EDIT)
            self.overrides = mapping_resolver.apply_override(
                self.draft, self.overrides, header, target
            )
            return dict(self.overrides)

    def available_targets(self, header: str) -> list[str]:
        """Field keys selectable for header in the current draft."""
        with self._lock:
            if self.draft is None:
                return []
            return mapping_resolver.available_targets(self.draft, self.overrides, header)

    def back(self) -> None:
        """Return to UPLOAD, discarding the draft and overrides."""
        with self._lock:
            self.phase = self._require(WizardEvent.BACK)
            self.draft = None
            self.overrides = {}
            logger.debug("wizard_back", wizard_id=self.wizard_id)

    def submit(self) -> ImportOutcome:
        """
        Resolve the mapping and send the import.

        The wizard is reset to an empty UPLOAD state afterwards and the
        outcome is kept in last_outcome. If the wizard was reset or
        closed while the request was running, the outcome is returned
        to the caller but not stored.

        Raises:
            InvalidPhaseError: Not in VERIFY
            SubmissionInProgressError: Another submit is running
        """
        with self._lock:
            self._require(WizardEvent.SUBMIT)
            self.busy = True
            attempt = self._attempt
            final_mapping = mapping_resolver.resolve(self.draft, self.overrides)
            file_name = self.file_name or ""
            content = self.file_content or b""
            cid = self.cid

        logger.info(
            "wizard_submitting",
            wizard_id=self.wizard_id,
            cid=cid,
            file_name=file_name,
            mapped_fields=len(final_mapping)
        )

        outcome: Optional[ImportOutcome] = None
        try:
            outcome = self.submitter.submit(file_name, content, cid, final_mapping)
            return outcome
        finally:
            with self._lock:
                if attempt == self._attempt:
                    self._clear()
                    self.last_outcome = outcome
                else:
                    logger.info(
                        "wizard_outcome_discarded",
                        wizard_id=self.wizard_id,
                        success=outcome.success if outcome else None
                    )

    # ===================
    # LIFECYCLE
    # ===================

    def reset(self) -> None:
        """Clear everything and start over at UPLOAD."""
        with self._lock:
            self._clear()
            logger.debug("wizard_reset", wizard_id=self.wizard_id)

    def snapshot(self) -> WizardSnapshot:
        """Current state for the API."""
        with self._lock:
            draft = self.draft
            overrides = dict(self.overrides)
            available = {}
            summary = None
            if draft is not None:
                available = {
                    header: mapping_resolver.available_targets(draft, overrides, header)
                    for header in draft.unmapped_headers
                }
                summary = mapping_resolver.summarize(draft, overrides)

            return WizardSnapshot(
                wizard_id=self.wizard_id,
                phase=self.phase,
                cid=self.cid,
                file_name=self.file_name,
                file_size=len(self.file_content) if self.file_content is not None else None,
                draft=draft,
                overrides=overrides,
                available_targets=available,
                summary=summary,
                busy=self.busy,
                last_outcome=self.last_outcome
            )
