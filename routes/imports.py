"""
Bulk contact import API routes.

Backs the "Upload CSV" dialog: each open dialog is a wizard session that
moves from account/file selection to field-mapping verification and
ends with a single submission to the ingestion API.
"""

from fastapi import APIRouter, UploadFile, File
from fastapi.responses import JSONResponse
import structlog

from config import CANONICAL_FIELDS
from models.imports import (
    AccountSelection,
    CanonicalFieldResponse,
    SubmitResponse,
    WizardSnapshot,
)
from models.manual_mapping import ManualMapping
from services import wizard_session_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/imports", tags=["Imports"])


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# ROUTES
# ===================

@router.get("/fields", response_model=list[CanonicalFieldResponse])
async def list_fields():
    """
    Get the contact fields a header can be mapped to.

    Ordered as shown in the manual mapping dropdown.
    """
    return [CanonicalFieldResponse(key=key, label=label) for key, label in CANONICAL_FIELDS]


@router.post("/wizards", response_model=WizardSnapshot, status_code=201)
def open_wizard():
    """
    Open a new import dialog.

    Loads the account list once so later selections can be checked.
    """
    try:
        wizard = wizard_session_service.open_wizard()
        return wizard.snapshot()
    except Exception as e:
        return handle_error(e)


@router.get("/wizards/{wizard_id}", response_model=WizardSnapshot)
async def get_wizard(wizard_id: str):
    """Get the current state of an import dialog."""
    try:
        return wizard_session_service.get_wizard(wizard_id).snapshot()
    except Exception as e:
        return handle_error(e)


@router.put("/wizards/{wizard_id}/account", response_model=WizardSnapshot)
async def select_account(wizard_id: str, data: AccountSelection):
    """Choose the account (CID) that will own the imported contacts."""
    try:
        wizard = wizard_session_service.get_wizard(wizard_id)
        wizard.select_account(data.cid)
        return wizard.snapshot()
    except Exception as e:
        return handle_error(e)


@router.post("/wizards/{wizard_id}/file", response_model=WizardSnapshot)
async def select_file(wizard_id: str, file: UploadFile = File(...)):
    """
    Attach the CSV file.

    The file is held in memory until submission; only its header row is
    read before then.
    """
    try:
        wizard = wizard_session_service.get_wizard(wizard_id)
        content = await file.read()
        wizard.select_file(file.filename or "upload.csv", content)
        return wizard.snapshot()
    except Exception as e:
        return handle_error(e)


@router.post("/wizards/{wizard_id}/verify", response_model=WizardSnapshot)
async def verify_fields(wizard_id: str):
    """
    Parse the header row and auto-map it.

    Moves the dialog to the verify step. Errors (missing selection,
    empty file) leave it in the upload step.
    """
    try:
        wizard = wizard_session_service.get_wizard(wizard_id)
        wizard.verify()
        return wizard.snapshot()
    except Exception as e:
        return handle_error(e)


@router.put("/wizards/{wizard_id}/overrides", response_model=WizardSnapshot)
async def set_override(wizard_id: str, data: ManualMapping):
    """
    Map an unmapped header manually.

    target is a field key, "skip", or "" to clear the choice.
    """
    try:
        wizard = wizard_session_service.get_wizard(wizard_id)
        wizard.set_override(data.header, data.target)
        return wizard.snapshot()
    except Exception as e:
        return handle_error(e)


@router.post("/wizards/{wizard_id}/back", response_model=WizardSnapshot)
async def go_back(wizard_id: str):
    """Return to the upload step, discarding the mapping."""
    try:
        wizard = wizard_session_service.get_wizard(wizard_id)
        wizard.back()
        return wizard.snapshot()
    except Exception as e:
        return handle_error(e)


@router.post("/wizards/{wizard_id}/submit", response_model=SubmitResponse)
def submit_import(wizard_id: str):
    """
    Send the file and final mapping to the ingestion API.

    Blocks until the ingestion API answers or the configured timeout
    passes. The outcome is returned either way and the dialog is reset.
    """
    try:
        wizard = wizard_session_service.get_wizard(wizard_id)
        outcome = wizard.submit()
        return SubmitResponse(outcome=outcome, wizard=wizard.snapshot())
    except Exception as e:
        return handle_error(e)


@router.delete("/wizards/{wizard_id}", status_code=204)
async def close_wizard(wizard_id: str):
    """Close the dialog and drop its state."""
    try:
        wizard_session_service.close_wizard(wizard_id)
    except Exception as e:
        return handle_error(e)
