from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from citemark.models.citation import Link

ValidationStatus = Literal["valid", "warning", "error"]


class ValidationVerdict(BaseModel):
    """Outcome of resolving one link's target file and anchor."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: ValidationStatus
    error: str | None = None
    suggestion: str | None = None


class AnchorCheck(BaseModel):
    """Result of the anchor resolution primitive."""

    status: ValidationStatus
    matched_id: str | None = None  # Anchor id that satisfied the lookup
    suggestion: str | None = None


class ValidationSummary(BaseModel):
    total: int = 0
    valid: int = 0
    warnings: int = 0
    errors: int = 0


class ValidationResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    file_path: str
    summary: ValidationSummary
    links: list[Link]

