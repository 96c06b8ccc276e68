"""Tool handler for extract_file.

Extracts a whole target file. Full-file extraction is what was asked for, so
the full-files gate is forced open.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from citemark.errors import CitationError, ErrorCode
from citemark.models import CliFlags
from citemark.models.tools import ExtractFileInput

if TYPE_CHECKING:
    from citemark.state import AppState


async def handle(target_file: str, state: AppState) -> dict:
    """Handle an extract_file tool call."""
    log = structlog.get_logger().bind(tool="extract_file", target_file=target_file)
    log.info("handler_called")

    try:
        validated = ExtractFileInput(target_file=target_file)
    except ValueError as exc:
        raise CitationError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a non-empty path to a markdown file (max 4096 chars).",
            recoverable=False,
        ) from exc

    link = state.link_factory.create_file_link(validated.target_file)
    verdict = await state.validator.validate_link(link)
    if verdict.status != "valid":
        log.info("synthetic_link_invalid", status=verdict.status, error=verdict.error)
        raise CitationError(
            code=ErrorCode.VALIDATION_FAILED,
            message=verdict.error or f"Link validation returned {verdict.status}",
            suggestion=verdict.suggestion or "Check the target file path.",
            recoverable=False,
        )

    output = await state.extractor.extract_content(
        [link.model_copy(update={"validation": verdict})],
        CliFlags(full_files=True),
    )
    log.info("extract_complete", unique=output.stats.unique_content)
    return output.to_payload()
