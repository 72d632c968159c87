"""
Business logic services.

The import pipeline, leaves first:
    synonym_matcher -> mapping_resolver -> import_wizard -> upload_submitter
"""

from services.synonym_matcher import MatchResult, match_headers, build_mapping_draft
from services.mapping_resolver import (
    available_targets,
    apply_override,
    resolve,
    summarize,
)
from services.upload_submitter import UploadSubmitter
from services.import_wizard import ImportWizard, WizardEvent, next_phase

__all__ = [
    "MatchResult",
    "match_headers",
    "build_mapping_draft",
    "available_targets",
    "apply_override",
    "resolve",
    "summarize",
    "UploadSubmitter",
    "ImportWizard",
    "WizardEvent",
    "next_phase",
]
