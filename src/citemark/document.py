"""Parsed document facade.

Wraps one ParserOutput and answers every question the validator and the
extractor ask about a document. Immutable after construction: collections
are exposed as tuples through read-only properties.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rapidfuzz import fuzz, process

from citemark.normalise import normalise_anchor
from citemark.parser import split_explicit_id
from citemark.tokenizer import flatten_tokens, split_lines

if TYPE_CHECKING:
    from citemark.models import Anchor, Heading, Link
    from citemark.parser import ParserOutput
    from citemark.tokenizer import Token


class ParsedDocument:
    def __init__(self, output: ParserOutput) -> None:
        self._output = output
        self._lines = [line.rstrip("\r\n") for line in split_lines(output.content)]

    def __repr__(self) -> str:
        return f"ParsedDocument({self.file_path!r}, links={len(self.links)}, anchors={len(self.anchors)})"

    @property
    def file_path(self) -> str:
        return self._output.file_path

    @property
    def content(self) -> str:
        return self._output.content

    @property
    def tokens(self) -> tuple[Token, ...]:
        return self._output.tokens

    @property
    def links(self) -> tuple[Link, ...]:
        return self._output.links

    @property
    def anchors(self) -> tuple[Anchor, ...]:
        return self._output.anchors

    @property
    def headings(self) -> tuple[Heading, ...]:
        return self._output.headings

    # ------------------------------------------------------------------
    # Anchor queries
    # ------------------------------------------------------------------

    def anchor_ids(self) -> list[str]:
        """Distinct anchor ids in document order."""
        return list(dict.fromkeys(anchor.id for anchor in self.anchors))

    def has_anchor(self, anchor_id: str) -> bool:
        return self.find_anchor(anchor_id) is not None

    def find_anchor(self, anchor_id: str) -> Anchor | None:
        for anchor in self.anchors:
            if anchor.id == anchor_id:
                return anchor
        return None

    def heading_text_for_anchor(self, anchor_id: str) -> str | None:
        """Heading text behind a header anchor id (literal, encoded or explicit)."""
        for anchor in self.anchors:
            if anchor.anchor_type == "header" and anchor.id == anchor_id:
                return anchor.raw_text
        return None

    def find_similar_anchors(
        self,
        anchor_id: str,
        *,
        limit: int = 5,
        score_cutoff: int = 50,
    ) -> list[str]:
        """Anchor ids resembling ``anchor_id``, best first.

        Both sides are normalised before scoring, so case and separator
        differences do not count against a candidate.
        """
        ids = self.anchor_ids()
        if not ids:
            return []
        results = process.extract(
            anchor_id,
            ids,
            scorer=fuzz.ratio,
            processor=normalise_anchor,
            limit=limit,
            score_cutoff=score_cutoff,
        )
        return [choice for choice, _score, _index in results]

    # ------------------------------------------------------------------
    # Content retrieval
    # ------------------------------------------------------------------

    def extract_section(self, heading_text: str) -> str | None:
        """Raw source from the heading titled ``heading_text`` up to the next
        heading of the same or a higher level (or end of document).

        Returns ``None`` if no heading has that text.
        """
        flat = flatten_tokens(self.tokens)

        start: int | None = None
        for index, entry in enumerate(flat):
            token = entry.token
            if token.type != "heading":
                continue
            if token.text == heading_text or split_explicit_id(token.text)[0] == heading_text:
                start = index
                break
        if start is None:
            return None

        target_level = flat[start].token.level or 1
        end = len(flat)
        for index in range(start + 1, len(flat)):
            token = flat[index].token
            if token.type == "heading" and token.level is not None and token.level <= target_level:
                end = index
                break

        return "".join(entry.token.raw for entry in flat[start:end])

    def extract_block(self, anchor_id: str) -> str | None:
        """The single source line carrying block anchor ``anchor_id``."""
        for anchor in self.anchors:
            if anchor.anchor_type != "block" or anchor.id != anchor_id:
                continue
            if anchor.line < 1 or anchor.line > len(self._lines):
                return None
            return self._lines[anchor.line - 1]
        return None

    def extract_full_content(self) -> str:
        return self.content
