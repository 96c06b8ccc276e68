"""Link extraction.

Per-line regex scan for the citation syntaxes the pipeline understands:

- bracketed-path links   ``[text](path.md#anchor)`` and ``[text](#anchor)``
- wiki links             ``[[path.md#anchor|text]]`` and ``[[#anchor|text]]``
- cite links             ``[cite: path.md]``

Lines inside fenced code blocks and matches inside inline code spans are
ignored, as are external URLs and images.
"""

from __future__ import annotations

import os
import re
from urllib.parse import unquote

from citemark.models.citation import (
    ExtractionMarker,
    Link,
    LinkScope,
    LinkSource,
    LinkTarget,
    LinkType,
    SourcePath,
    TargetPath,
)
from citemark.tokenizer import fenced_line_indexes, split_lines

# Anchor may contain spaces and colons and up to two levels of nested parens.
_ANCHOR = r"(?:[^()]|\((?:[^()]|\([^)]*\))*\))+"

_MARKDOWN_LINK_RE = re.compile(r"(?<!!)\[([^\]]+)\]\(([^)#]*)(?:#(" + _ANCHOR + r"))?\)")
_WIKI_LINK_RE = re.compile(r"\[\[([^\]#|]*)(?:#([^\]|]+))?(?:\|([^\]]+))?\]\]")
_CITE_LINK_RE = re.compile(r"\[cite:\s*([^\]]+)\]")

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")
_MARKER_RE = re.compile(r"\s*(%%(.+?)%%|<!--\s*(.+?)\s*-->)")


def determine_anchor_type(anchor: str | None) -> str | None:
    """Classify an anchor: caret-prefixed is a block reference, anything else a header."""
    if not anchor:
        return None
    if anchor.startswith("^"):
        return "block"
    return "header"


def resolve_path(raw_path: str | None, base_dir: str) -> str | None:
    """Resolve a link path (URL-decoded) against ``base_dir``."""
    if not raw_path:
        return None
    decoded = unquote(raw_path)
    if os.path.isabs(decoded):
        return os.path.normpath(decoded)
    return os.path.normpath(os.path.join(base_dir, decoded))


def relative_path(absolute: str | None, base_dir: str) -> str | None:
    if absolute is None:
        return None
    relative = os.path.relpath(absolute, base_dir)
    return relative.replace(os.sep, "/")


def create_link(
    *,
    link_type: LinkType,
    anchor: str | None,
    raw_path: str | None,
    source_absolute: str,
    text: str | None,
    full_match: str,
    line: int,
    column: int,
    extraction_markers: list[ExtractionMarker] | None = None,
    base_dir: str | None = None,
) -> Link:
    """Single construction point for Link objects.

    Paths resolve against ``base_dir``, defaulting to the source file's directory.
    """
    if base_dir is None:
        base_dir = os.path.dirname(source_absolute)
    anchor = anchor or None
    raw_path = raw_path or None
    scope: LinkScope = "internal" if raw_path is None else "cross-document"
    absolute = resolve_path(raw_path, base_dir)

    return Link(
        link_type=link_type,
        scope=scope,
        anchor_type=determine_anchor_type(anchor),
        source=LinkSource(path=SourcePath(absolute=source_absolute)),
        target=LinkTarget(
            path=TargetPath(
                raw=raw_path,
                absolute=absolute,
                relative=relative_path(absolute, base_dir),
            ),
            anchor=anchor,
        ),
        text=text,
        full_match=full_match,
        line=line,
        column=column,
        extraction_markers=extraction_markers or [],
    )


def detect_extraction_markers(line: str, link_end: int) -> list[ExtractionMarker]:
    """Collect the markers immediately following a link, e.g. ``%%force-extract%%``."""
    markers: list[ExtractionMarker] = []
    position = link_end
    while True:
        match = _MARKER_RE.match(line, position)
        if match is None:
            return markers
        markers.append(
            ExtractionMarker(
                full_match=match.group(1),
                inner_text=(match.group(2) or match.group(3) or "").strip(),
            )
        )
        position = match.end()


def is_inside_inline_code(line: str, position: int) -> bool:
    """True when ``position`` falls inside a backtick code span."""
    in_code = False
    for index in range(min(position, len(line))):
        if line[index] == "`" and (index == 0 or line[index - 1] != "\\"):
            in_code = not in_code
    return in_code


def _is_external(path: str) -> bool:
    return bool(_SCHEME_RE.match(path)) or path.startswith("//")


def extract_links(content: str, source_path: str) -> list[Link]:
    """Extract all citations from ``content``, ordered by line then column."""
    links: list[Link] = []
    lines = [line.rstrip("\r\n") for line in split_lines(content)]
    fenced = fenced_line_indexes(lines)

    for index, line in enumerate(lines):
        if index in fenced:
            continue
        line_links: list[Link] = []
        line_no = index + 1

        for match in _MARKDOWN_LINK_RE.finditer(line):
            raw_path = match.group(2).strip()
            anchor = match.group(3)
            if is_inside_inline_code(line, match.start()) or _is_external(raw_path):
                continue
            if not raw_path and not anchor:
                continue
            line_links.append(
                create_link(
                    link_type="markdown",
                    anchor=anchor,
                    raw_path=raw_path,
                    source_absolute=source_path,
                    text=match.group(1),
                    full_match=match.group(0),
                    line=line_no,
                    column=match.start(),
                    extraction_markers=detect_extraction_markers(line, match.end()),
                )
            )

        for match in _WIKI_LINK_RE.finditer(line):
            raw_path = match.group(1).strip()
            anchor = match.group(2)
            if is_inside_inline_code(line, match.start()):
                continue
            if not raw_path and not anchor:
                continue
            line_links.append(
                create_link(
                    link_type="wiki",
                    anchor=anchor,
                    raw_path=raw_path,
                    source_absolute=source_path,
                    text=match.group(3),
                    full_match=match.group(0),
                    line=line_no,
                    column=match.start(),
                    extraction_markers=detect_extraction_markers(line, match.end()),
                )
            )

        for match in _CITE_LINK_RE.finditer(line):
            raw_path = match.group(1).strip()
            if is_inside_inline_code(line, match.start()):
                continue
            line_links.append(
                create_link(
                    link_type="markdown",
                    anchor=None,
                    raw_path=raw_path,
                    source_absolute=source_path,
                    text=f"cite: {raw_path}",
                    full_match=match.group(0),
                    line=line_no,
                    column=match.start(),
                    extraction_markers=detect_extraction_markers(line, match.end()),
                )
            )

        line_links.sort(key=lambda link: link.column)
        links.extend(line_links)

    return links
