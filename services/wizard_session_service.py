"""
In-memory store of open import wizards.

One wizard per open import dialog, keyed by wizard_id, expired after
settings.wizard_ttl_minutes of inactivity. Single-server only.
"""
import uuid
from datetime import datetime, timedelta
from typing import Optional
import structlog

from config import settings
from services.import_wizard import ImportWizard
from integrations.ingestion_api import get_ingestion_api_client
from exceptions import AppError, WizardNotFoundError

logger = structlog.get_logger(__name__)

_sessions: dict[str, tuple[datetime, ImportWizard]] = {}


def _expiry() -> datetime:
    return datetime.now() + timedelta(minutes=settings.wizard_ttl_minutes)


def _load_accounts() -> Optional[list[str]]:
    """Account list for validating selections, or None if unavailable."""
    try:
        return get_ingestion_api_client().list_accounts()
    except AppError as e:
        logger.warning("wizard_accounts_unavailable", error=e.message)
        return None


def open_wizard(known_accounts: Optional[list[str]] = None) -> ImportWizard:
    """
    Create a fresh wizard in the UPLOAD step.

    Args:
        known_accounts: Valid CIDs. Loaded from the platform API if omitted.
    """
    _cleanup_expired()
    if known_accounts is None:
        known_accounts = _load_accounts()

    wizard = ImportWizard(str(uuid.uuid4()), known_accounts=known_accounts)
    _sessions[wizard.wizard_id] = (_expiry(), wizard)
    logger.info("wizard_opened", wizard_id=wizard.wizard_id)
    return wizard


def get_wizard(wizard_id: str) -> ImportWizard:
    """
    Get an open wizard and extend its lifetime.

    Raises:
        WizardNotFoundError: Unknown or expired wizard_id
    """
    entry = _sessions.get(wizard_id)
    if entry is None:
        raise WizardNotFoundError(wizard_id)
    expires_at, wizard = entry
    if datetime.now() > expires_at:
        del _sessions[wizard_id]
        raise WizardNotFoundError(wizard_id)
    _sessions[wizard_id] = (_expiry(), wizard)
    return wizard


def close_wizard(wizard_id: str) -> None:
    """Discard a wizard. An upload still running finishes unobserved."""
    entry = _sessions.pop(wizard_id, None)
    if entry is None:
        raise WizardNotFoundError(wizard_id)
    _, wizard = entry
    wizard.reset()
    logger.info("wizard_closed", wizard_id=wizard_id)


def _cleanup_expired() -> None:
    """Remove all expired entries."""
    now = datetime.now()
    expired = [k for k, (exp, _) in _sessions.items() if now > exp]
    for k in expired:
        del _sessions[k]
