"""Tool handler for extract_header.

Extracts one section by heading text from a target file, without a citing
document. The synthetic link must validate before anything is extracted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from citemark.errors import CitationError, ErrorCode
from citemark.models import CliFlags
from citemark.models.tools import ExtractHeaderInput

if TYPE_CHECKING:
    from citemark.state import AppState


async def handle(target_file: str, header_name: str, state: AppState) -> dict:
    """Handle an extract_header tool call."""
    log = structlog.get_logger().bind(
        tool="extract_header", target_file=target_file, header_name=header_name
    )
    log.info("handler_called")

    try:
        validated = ExtractHeaderInput(target_file=target_file, header_name=header_name)
    except ValueError as exc:
        raise CitationError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a non-empty target file path and heading text.",
            recoverable=False,
        ) from exc

    link = state.link_factory.create_header_link(validated.target_file, validated.header_name)
    verdict = await state.validator.validate_link(link)
    if verdict.status != "valid":
        log.info("synthetic_link_invalid", status=verdict.status, error=verdict.error)
        raise CitationError(
            code=ErrorCode.VALIDATION_FAILED,
            message=verdict.error or f"Link validation returned {verdict.status}",
            suggestion=verdict.suggestion or "Check the target file and heading text.",
            recoverable=False,
        )

    output = await state.extractor.extract_content(
        [link.model_copy(update={"validation": verdict})],
        CliFlags(full_files=state.settings.extraction.full_files),
    )
    log.info("extract_complete", unique=output.stats.unique_content)
    return output.to_payload()
