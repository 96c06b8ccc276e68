"""Citation validation.

Resolves every link of a source file against its target document and attaches
a verdict. All document access goes through the parse cache; the validator
itself performs no file I/O.

Anchor resolution, in order:
  1. Exact id match       → valid
  2. Normalised match     → warning, suggesting the matched id
  3. No match             → error, suggesting similar ids if any
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from citemark.cache import normalise_path
from citemark.errors import CitationError
from citemark.links import create_link
from citemark.models import AnchorCheck, ValidationResult, ValidationSummary, ValidationVerdict
from citemark.normalise import exact_candidates, normalise_anchor

if TYPE_CHECKING:
    from citemark.document import ParsedDocument
    from citemark.models import Link
    from citemark.protocols import ParsedFileCacheProtocol

log = structlog.get_logger()


class CitationValidator:
    def __init__(
        self,
        cache: ParsedFileCacheProtocol,
        *,
        similarity_cutoff: int = 50,
        max_suggestions: int = 5,
    ) -> None:
        self._cache = cache
        self._similarity_cutoff = similarity_cutoff
        self._max_suggestions = max_suggestions

    async def validate_file(self, path: str) -> ValidationResult:
        """Validate every link in ``path``, in source order.

        Raises CitationError if the source file itself cannot be parsed.
        """
        source_path = normalise_path(path)
        document = await self._cache.resolve_parsed_file(source_path)

        links: list[Link] = []
        summary = ValidationSummary()
        for link in document.links:
            verdict = await self.validate_link(link)
            links.append(link.model_copy(update={"validation": verdict}))
            summary.total += 1
            if verdict.status == "valid":
                summary.valid += 1
            elif verdict.status == "warning":
                summary.warnings += 1
            else:
                summary.errors += 1

        log.info(
            "validation_complete",
            path=source_path,
            total=summary.total,
            valid=summary.valid,
            warnings=summary.warnings,
            errors=summary.errors,
        )
        return ValidationResult(file_path=source_path, summary=summary, links=links)

    async def validate_link(self, link: Link) -> ValidationVerdict:
        """Resolve one link's target file and anchor."""
        if link.scope == "internal":
            target_path = link.source.path.absolute
        else:
            target_path = link.target.path.absolute
        if target_path is None:
            return ValidationVerdict(
                status="error",
                error="Link has no target path",
                suggestion="Add a file path or an anchor to the link.",
            )

        try:
            document = await self._cache.resolve_parsed_file(target_path)
        except CitationError as exc:
            log.debug("link_target_unresolved", target=target_path, code=exc.code)
            return ValidationVerdict(status="error", error=exc.message, suggestion=exc.suggestion)

        anchor = link.target.anchor
        if anchor is None:
            return ValidationVerdict(status="valid")

        check = self.validate_anchor_exists(anchor, document)
        if check.status == "valid":
            return ValidationVerdict(status="valid")
        if check.status == "warning":
            return ValidationVerdict(
                status="warning",
                error=f"Anchor matched only after normalisation: #{anchor}",
                suggestion=check.suggestion,
            )
        return ValidationVerdict(
            status="error",
            error=f"Anchor not found: #{anchor}",
            suggestion=check.suggestion,
        )

    def validate_anchor_exists(self, anchor: str, document: ParsedDocument) -> AnchorCheck:
        """Check ``anchor`` against the document's anchor ids."""
        for candidate in exact_candidates(anchor):
            if document.has_anchor(candidate):
                return AnchorCheck(status="valid", matched_id=candidate)

        wanted = normalise_anchor(anchor)
        if wanted:
            for anchor_id in document.anchor_ids():
                if normalise_anchor(anchor_id) == wanted:
                    return AnchorCheck(status="warning", matched_id=anchor_id, suggestion=anchor_id)

        similar = document.find_similar_anchors(
            anchor,
            limit=self._max_suggestions,
            score_cutoff=self._similarity_cutoff,
        )
        if similar:
            suggestion = "Did you mean: " + ", ".join(f"#{anchor_id}" for anchor_id in similar)
        else:
            suggestion = "No similar anchors found"
        return AnchorCheck(status="error", suggestion=suggestion)

    async def check_reference(self, reference: str, source_file: str) -> ValidationVerdict:
        """Validate a standalone reference such as ``file.md#anchor``, ``#anchor`` or ``^block``.

        Relative paths resolve against ``source_file``'s directory.
        """
        reference = reference.strip()
        if reference.startswith("^"):
            raw_path, anchor = "", reference
        else:
            raw_path, _, anchor = reference.partition("#")

        link = create_link(
            link_type="markdown",
            anchor=anchor,
            raw_path=raw_path,
            source_absolute=normalise_path(source_file),
            text=None,
            full_match=reference,
            line=0,
            column=0,
        )
        return await self.validate_link(link)
