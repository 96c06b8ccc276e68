"""Markdown document parser.

Reads a file once and produces everything the pipeline needs from it: the
block token tree, outgoing links, headings and anchors. Anchors are found by a
single pass over the source lines, suppressing lines inside fenced code
blocks:

- trailing ``^block-id`` references
- inline ``^block-id`` tokens (semantic-version lookalikes skipped)
- ATX headings, with an explicit ``{#custom-id}`` suffix honoured
- emphasis markers ``==**text**==``
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import aiofiles
import structlog

from citemark.errors import CitationError, ErrorCode
from citemark.links import extract_links
from citemark.models import Anchor, Heading, Link
from citemark.tokenizer import Token, fenced_line_indexes, flatten_tokens, split_lines, tokenize

log = structlog.get_logger()

_TRAILING_BLOCK_RE = re.compile(r"(?<![#\w])\^([A-Za-z0-9\-_]+)$")
_INLINE_BLOCK_RE = re.compile(r"(?<![#\w])\^([A-Za-z0-9\-_]+)")
_SEMVER_TAIL_RE = re.compile(r"^\.\d")
_ATX_HEADING_RE = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?(?:[ \t]+#+)?[ \t]*$")
_EXPLICIT_ID_RE = re.compile(r"^(.+?)\s*\{#([^}]+)\}$")
_EMPHASIS_ANCHOR_RE = re.compile(r"==\*\*([^*]+)\*\*==")


@dataclass(frozen=True)
class ParserOutput:
    file_path: str
    content: str
    tokens: tuple[Token, ...]
    links: tuple[Link, ...]
    headings: tuple[Heading, ...]
    anchors: tuple[Anchor, ...]


def encode_heading_id(text: str) -> str:
    """Percent-encoded heading id: colons dropped, whitespace runs become ``%20``."""
    return re.sub(r"\s+", "%20", text.replace(":", ""))


def split_explicit_id(text: str) -> tuple[str, str | None]:
    """Split ``Title {#custom-id}`` into ``("Title", "custom-id")``."""
    match = _EXPLICIT_ID_RE.match(text)
    if match is None:
        return text, None
    return match.group(1).strip(), match.group(2).strip()


def extract_headings(tokens: list[Token] | tuple[Token, ...]) -> list[Heading]:
    """Headings in document order, from the token tree."""
    return [
        Heading(level=flat.token.level, text=flat.token.text, raw=flat.token.raw)
        for flat in flatten_tokens(tokens)
        if flat.token.type == "heading" and flat.token.level is not None
    ]


def extract_anchors(content: str) -> list[Anchor]:
    """Find every anchor a link fragment can target, in line order."""
    anchors: list[Anchor] = []
    lines = [line.rstrip("\r\n") for line in split_lines(content)]
    fenced = fenced_line_indexes(lines)

    for index, line in enumerate(lines):
        if index in fenced:
            continue
        lineno = index + 1

        heading = _ATX_HEADING_RE.match(line)
        if heading is not None:
            anchors.extend(_heading_anchors(heading.group(2) or "", line, lineno))
            continue

        stripped = line.rstrip()
        trailing = _TRAILING_BLOCK_RE.search(stripped)
        if trailing is not None:
            anchors.append(
                Anchor(
                    anchor_type="block",
                    id=trailing.group(1),
                    raw_text=None,
                    full_match=trailing.group(0),
                    line=lineno,
                    column=trailing.start(),
                )
            )

        for match in _INLINE_BLOCK_RE.finditer(line):
            if trailing is not None and match.start() == trailing.start():
                continue
            if _SEMVER_TAIL_RE.match(line[match.end() :]):
                continue
            anchors.append(
                Anchor(
                    anchor_type="block",
                    id=match.group(1),
                    raw_text=None,
                    full_match=match.group(0),
                    line=lineno,
                    column=match.start(),
                )
            )

        for match in _EMPHASIS_ANCHOR_RE.finditer(line):
            anchors.append(
                Anchor(
                    anchor_type="block",
                    id=match.group(1),
                    raw_text=match.group(1),
                    full_match=match.group(0),
                    line=lineno,
                    column=match.start(),
                )
            )

    anchors.sort(key=lambda anchor: (anchor.line, anchor.column))
    return anchors


def _heading_anchors(text: str, line: str, lineno: int) -> list[Anchor]:
    text = text.strip()
    if not text:
        return []

    title, explicit_id = split_explicit_id(text)
    if explicit_id is not None:
        return [
            Anchor(
                anchor_type="header",
                id=explicit_id,
                raw_text=title,
                full_match=line,
                line=lineno,
                column=0,
            )
        ]

    anchors = [
        Anchor(
            anchor_type="header",
            id=text,
            raw_text=text,
            full_match=line,
            line=lineno,
            column=0,
        )
    ]
    encoded = encode_heading_id(text)
    if encoded != text:
        anchors.append(
            Anchor(
                anchor_type="header",
                id=encoded,
                raw_text=text,
                full_match=line,
                line=lineno,
                column=0,
            )
        )
    return anchors


class MarkdownParser:
    """Async file parser implementing ParserProtocol."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    async def parse_file(self, path: str) -> ParserOutput:
        content = await self._read(path)
        tokens = tokenize(content)
        output = ParserOutput(
            file_path=path,
            content=content,
            tokens=tuple(tokens),
            links=tuple(extract_links(content, path)),
            headings=tuple(extract_headings(tokens)),
            anchors=tuple(extract_anchors(content)),
        )
        log.debug(
            "file_parsed",
            path=path,
            links=len(output.links),
            headings=len(output.headings),
            anchors=len(output.anchors),
        )
        return output

    async def _read(self, path: str) -> str:
        try:
            async with aiofiles.open(path, encoding=self._encoding) as f:
                return await f.read()
        except FileNotFoundError as exc:
            raise CitationError(
                code=ErrorCode.FILE_NOT_FOUND,
                message=f"File not found: {path}",
                suggestion="Check the link path; it is resolved relative to the citing file.",
                recoverable=False,
            ) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise CitationError(
                code=ErrorCode.FILE_UNREADABLE,
                message=f"Could not read {path}: {exc}",
                suggestion="Ensure the file is a readable UTF-8 text file.",
                recoverable=False,
            ) from exc
