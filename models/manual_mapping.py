"""Manual mapping model for resolving unmapped CSV headers during verification."""

from pydantic import Field

from models.base import CamelSchema

# Sentinel target meaning "ignore this column"
SKIP = "skip"


class ManualMapping(CamelSchema):
    """Operator-provided target for a header the matcher left unmapped."""
    header: str = Field(..., description="Unmapped header from the file")
    target: str = Field(
        default="",
        description="Canonical field key, 'skip', or empty to unset"
    )
