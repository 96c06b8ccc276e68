"""Tool handler for extract_links.

Validates every citation in a source file, then extracts and deduplicates the
content of the eligible ones.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from citemark.errors import CitationError, ErrorCode
from citemark.models import CliFlags
from citemark.models.tools import ExtractLinksInput

if TYPE_CHECKING:
    from citemark.state import AppState


async def handle(source_file: str, full_files: bool, state: AppState) -> dict:
    """Handle an extract_links tool call."""
    log = structlog.get_logger().bind(tool="extract_links", source_file=source_file)
    log.info("handler_called")

    try:
        validated = ExtractLinksInput(source_file=source_file, full_files=full_files)
    except ValueError as exc:
        raise CitationError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a non-empty path to a markdown file (max 4096 chars).",
            recoverable=False,
        ) from exc

    validation = await state.validator.validate_file(validated.source_file)
    flags = CliFlags(
        full_files=validated.full_files or state.settings.extraction.full_files,
    )
    output = await state.extractor.extract_content(validation.links, flags)

    log.info(
        "extract_complete",
        links=output.stats.total_links,
        unique=output.stats.unique_content,
        tokens_saved=output.stats.tokens_saved,
    )
    return output.to_payload()
