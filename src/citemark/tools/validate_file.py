"""Tool handler for validate_file.

Receives AppState, delegates to the validator, and returns a structured dict
with one verdict per link and a summary.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from citemark.errors import CitationError, ErrorCode
from citemark.models.tools import ValidateFileInput

if TYPE_CHECKING:
    from citemark.state import AppState


async def handle(file_path: str, state: AppState) -> dict:
    """Handle a validate_file tool call."""
    log = structlog.get_logger().bind(tool="validate_file", file_path=file_path)
    log.info("handler_called")

    try:
        validated = ValidateFileInput(file_path=file_path)
    except ValueError as exc:
        raise CitationError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a non-empty path to a markdown file (max 4096 chars).",
            recoverable=False,
        ) from exc

    result = await state.validator.validate_file(validated.file_path)
    log.info(
        "validate_complete",
        total=result.summary.total,
        errors=result.summary.errors,
        warnings=result.summary.warnings,
    )
    return result.model_dump(by_alias=True, mode="json")
