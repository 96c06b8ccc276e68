from __future__ import annotations

import json
from typing import Literal

from pydantic import Field, model_validator

from citemark.models.citation import Link, WireModel

TOTAL_LENGTH_KEY = "_totalContentCharacterLength"

ExtractionStatus = Literal["success", "skipped", "error"]


class CliFlags(WireModel):
    """Flags consumed by the core pipeline."""

    full_files: bool = False
    # Directory bound for file discovery; resolved before the pipeline runs.
    scope: str | None = None


class EligibilityDecision(WireModel):
    eligible: bool
    reason: str


class SuccessDetails(WireModel):
    decision_reason: str
    extracted_content: str


class FailureDetails(WireModel):
    reason: str


class ExtractionResult(WireModel):
    """Per-link outcome in the outgoing links report."""

    source_link: Link
    status: ExtractionStatus
    content_id: str | None = None
    success_details: SuccessDetails | None = None
    failure_details: FailureDetails | None = None

    @model_validator(mode="after")
    def _exactly_one_details(self) -> ExtractionResult:
        if (self.success_details is None) == (self.failure_details is None):
            raise ValueError("exactly one of success_details/failure_details must be set")
        if self.status == "success" and self.success_details is None:
            raise ValueError("success results carry success_details")
        return self


class SourceLinkEntry(WireModel):
    raw_source_link: str
    source_line: int


class ContentBlock(WireModel):
    content: str
    content_length: int
    source_links: list[SourceLinkEntry] = []


class OutgoingLinksReport(WireModel):
    processed_links: list[ExtractionResult] = []


class ExtractionStats(WireModel):
    total_links: int = 0
    unique_content: int = 0
    duplicate_content_detected: int = 0
    tokens_saved: int = 0
    compression_ratio: float = 0.0
    extracted: int = 0
    skipped: int = 0
    errors: int = 0


class AggregatedOutput(WireModel):
    """Deduplicated extraction payload.

    ``extracted_content_blocks`` maps content ids to blocks, preceded by the
    ``_totalContentCharacterLength`` diagnostic entry.
    """

    extracted_content_blocks: dict[str, ContentBlock | int] = Field(default_factory=dict)
    outgoing_links_report: OutgoingLinksReport = OutgoingLinksReport()
    stats: ExtractionStats = ExtractionStats()

    @property
    def content_blocks(self) -> dict[str, ContentBlock]:
        """Content entries only, without the size metadata."""
        return {
            key: value
            for key, value in self.extracted_content_blocks.items()
            if isinstance(value, ContentBlock)
        }

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


def serialised_length(blocks: dict[str, ContentBlock]) -> int:
    """Length of the compact JSON form of a content block map."""
    data = {key: block.model_dump(by_alias=True, mode="json") for key, block in blocks.items()}
    return len(json.dumps(data, separators=(",", ":"), ensure_ascii=False))
