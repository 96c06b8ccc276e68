"""Shared test fixtures for the citemark test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from citemark.app import build_app_state
from citemark.config import Settings
from citemark.document import ParsedDocument
from citemark.links import extract_links
from citemark.parser import ParserOutput, extract_anchors, extract_headings
from citemark.tokenizer import tokenize

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from citemark.state import AppState


GUIDE_MD = """\
# Guide

Intro paragraph.

## Setup

Install the package.

```bash
# not a heading
pip install citemark
```

### Details

Nested detail text.

## Usage: Basics

Use it like this. ^usage-note

Version ^1.2.3 is not an anchor.

==**Key Point**==

## My Header

Header body.

## Custom {#custom-id}

Custom section body.
"""


@pytest.fixture()
def guide_md() -> str:
    return GUIDE_MD


@pytest.fixture()
def write_md(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a markdown file under tmp_path and return its path."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def guide_path(write_md: Callable[[str, str], Path], guide_md: str) -> Path:
    return write_md("guide.md", guide_md)


@pytest.fixture()
def make_document() -> Callable[..., ParsedDocument]:
    """Build a ParsedDocument from a string without touching the filesystem."""

    def _make(content: str, file_path: str = "/docs/doc.md") -> ParsedDocument:
        tokens = tokenize(content)
        return ParsedDocument(
            ParserOutput(
                file_path=file_path,
                content=content,
                tokens=tuple(tokens),
                links=tuple(extract_links(content, file_path)),
                headings=tuple(extract_headings(tokens)),
                anchors=tuple(extract_anchors(content)),
            )
        )

    return _make


@pytest.fixture()
def app_state(tmp_path: Path) -> AppState:
    """Fully wired AppState with synthetic links resolving against tmp_path."""
    return build_app_state(Settings(), cwd=str(tmp_path))
