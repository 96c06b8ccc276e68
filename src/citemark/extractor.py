"""Content extraction and deduplication.

Consumes validated links, decides per link whether to extract, retrieves the
referenced content through the parse cache and aggregates it into a payload
keyed by content hash. One failing link never aborts the batch: it is
reported as ``skipped`` or ``error`` and processing continues.
"""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

import structlog

from citemark.eligibility import analyze_eligibility
from citemark.errors import CitationError, ErrorCode
from citemark.models import (
    AggregatedOutput,
    CliFlags,
    ContentBlock,
    ExtractionResult,
    ExtractionStats,
    FailureDetails,
    OutgoingLinksReport,
    SourceLinkEntry,
    SuccessDetails,
)
from citemark.models.extraction import TOTAL_LENGTH_KEY, serialised_length
from citemark.normalise import decode_anchor, strip_block_prefix

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from citemark.document import ParsedDocument
    from citemark.models import Link
    from citemark.protocols import EligibilityStrategy, ParsedFileCacheProtocol

log = structlog.get_logger()


def generate_content_id(content: str, length: int = 16) -> str:
    """First ``length`` hex chars of the content's SHA-256 digest."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:length]


class ContentExtractor:
    def __init__(
        self,
        cache: ParsedFileCacheProtocol,
        strategies: Sequence[EligibilityStrategy],
        *,
        content_id_length: int = 16,
    ) -> None:
        self._cache = cache
        self._strategies = list(strategies)
        self._content_id_length = content_id_length

    async def extract_content(
        self,
        links: Iterable[Link],
        flags: CliFlags | None = None,
    ) -> AggregatedOutput:
        """Extract and deduplicate the content behind ``links``, in input order."""
        flags = flags or CliFlags()
        source_documents: dict[str, ParsedDocument] = {}
        results: list[ExtractionResult] = []
        blocks: dict[str, ContentBlock] = {}
        stats = ExtractionStats()

        for link in links:
            result = await self._process_link(link, flags, source_documents)
            results.append(result)
            stats.total_links += 1

            if result.status == "skipped":
                stats.skipped += 1
                continue
            if result.status == "error":
                stats.errors += 1
                continue

            stats.extracted += 1
            content = result.success_details.extracted_content
            entry = SourceLinkEntry(raw_source_link=link.full_match, source_line=link.line)
            existing = blocks.get(result.content_id)
            if existing is None:
                blocks[result.content_id] = ContentBlock(
                    content=content,
                    content_length=len(content),
                    source_links=[entry],
                )
            else:
                existing.source_links.append(entry)
                stats.duplicate_content_detected += 1
                stats.tokens_saved += len(content)

        stats.unique_content = len(blocks)
        unique_size = sum(block.content_length for block in blocks.values())
        if unique_size + stats.tokens_saved > 0:
            stats.compression_ratio = stats.tokens_saved / (unique_size + stats.tokens_saved)

        # Size metadata is measured before it is inserted, then placed first.
        extracted_content_blocks: dict[str, ContentBlock | int] = {
            TOTAL_LENGTH_KEY: serialised_length(blocks)
        }
        extracted_content_blocks.update(blocks)

        log.info(
            "extraction_complete",
            total=stats.total_links,
            extracted=stats.extracted,
            skipped=stats.skipped,
            errors=stats.errors,
            unique=stats.unique_content,
            duplicates=stats.duplicate_content_detected,
        )
        return AggregatedOutput(
            extracted_content_blocks=extracted_content_blocks,
            outgoing_links_report=OutgoingLinksReport(processed_links=results),
            stats=stats,
        )

    async def _process_link(
        self,
        link: Link,
        flags: CliFlags,
        source_documents: dict[str, ParsedDocument],
    ) -> ExtractionResult:
        verdict = link.validation
        if verdict is None or verdict.status != "valid":
            if verdict is None:
                reason = "link was not validated"
            else:
                reason = verdict.error or f"validation status is {verdict.status}"
            return _failure(link, "skipped", f"Link failed validation: {reason}")

        decision = analyze_eligibility(link, flags, self._strategies)
        if not decision.eligible:
            return _failure(link, "skipped", f"Link not eligible: {decision.reason}")

        try:
            content = await self._retrieve(link, source_documents)
        except Exception as exc:
            log.warning(
                "link_extraction_failed",
                source=link.source.path.absolute,
                line=link.line,
                target=link.target.path.absolute,
                anchor=link.target.anchor,
                exc_info=True,
            )
            return _failure(link, "error", f"Extraction failed: {exc}")

        return ExtractionResult(
            source_link=link,
            status="success",
            content_id=generate_content_id(content, self._content_id_length),
            success_details=SuccessDetails(
                decision_reason=decision.reason,
                extracted_content=content,
            ),
        )

    async def _retrieve(self, link: Link, source_documents: dict[str, ParsedDocument]) -> str:
        document = await self._target_document(link, source_documents)
        anchor = link.target.anchor

        if link.anchor_type is None or anchor is None:
            return document.extract_full_content()

        if link.anchor_type == "block":
            block_id = strip_block_prefix(anchor)
            content = document.extract_block(block_id)
            if content is None:
                raise CitationError(
                    code=ErrorCode.BLOCK_NOT_FOUND,
                    message=f"Block anchor not found: ^{block_id}",
                    suggestion="Check the block id in the target document.",
                    recoverable=False,
                )
            return content

        heading_text = decode_anchor(anchor)
        content = document.extract_section(heading_text)
        if content is None:
            content = self._fallback_section(document, anchor, heading_text)
        if content is None:
            raise CitationError(
                code=ErrorCode.HEADING_NOT_FOUND,
                message=f"Heading not found: {heading_text}",
                suggestion="Check the heading text in the target document.",
                recoverable=False,
            )
        return content

    @staticmethod
    def _fallback_section(document: ParsedDocument, anchor: str, heading_text: str) -> str | None:
        # Encoded and explicit ids map back to the heading text they were derived from.
        for anchor_id in (anchor, heading_text):
            title = document.heading_text_for_anchor(anchor_id)
            if title is not None:
                return document.extract_section(title)
            matched = document.find_anchor(anchor_id)
            if matched is not None and matched.anchor_type == "block":
                return document.extract_block(matched.id)
        return None

    async def _target_document(
        self,
        link: Link,
        source_documents: dict[str, ParsedDocument],
    ) -> ParsedDocument:
        if link.scope == "internal":
            source_path = link.source.path.absolute
            document = source_documents.get(source_path)
            if document is None:
                document = await self._cache.resolve_parsed_file(source_path)
                source_documents[source_path] = document
            return document

        target_path = link.target.path.absolute
        if target_path is None:
            raise CitationError(
                code=ErrorCode.FILE_NOT_FOUND,
                message="Link has no target path",
                suggestion="Add a file path to the link.",
                recoverable=False,
            )
        return await self._cache.resolve_parsed_file(target_path)


def _failure(link: Link, status: str, reason: str) -> ExtractionResult:
    return ExtractionResult(
        source_link=link,
        status=status,
        failure_details=FailureDetails(reason=reason),
    )
