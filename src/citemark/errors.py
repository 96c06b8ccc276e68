from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_UNREADABLE = "FILE_UNREADABLE"
    HEADING_NOT_FOUND = "HEADING_NOT_FOUND"
    BLOCK_NOT_FOUND = "BLOCK_NOT_FOUND"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    INVALID_INPUT = "INVALID_INPUT"


class CitationError(Exception):
    """Raised for all expected failure conditions in the citation pipeline.

    The validator converts resolution failures into ``error`` verdicts and the
    extractor converts retrieval failures into per-link ``error`` results, so
    one broken citation never aborts a batch. Handlers in ``citemark.tools``
    let it propagate to the caller with a structured suggestion.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable
