"""
Configuration module.

Exports:
    settings: Application settings instance
    get_settings: Function to get settings (for dependency injection)
    CANONICAL_FIELDS: Ordered (key, label) pairs for contact fields
    SYNONYM_TABLE: Ordered (key, header variants) pairs used by the matcher
"""

from config.settings import settings, get_settings, Settings
from config.fields import (
    CANONICAL_FIELDS,
    CANONICAL_FIELD_KEYS,
    FIELD_LABELS,
    SYNONYM_TABLE,
)

__all__ = [
    # Settings
    "settings",
    "get_settings",
    "Settings",

    # Import fields
    "CANONICAL_FIELDS",
    "CANONICAL_FIELD_KEYS",
    "FIELD_LABELS",
    "SYNONYM_TABLE",
]
