"""Unit tests for citemark.links."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from citemark.links import (
    create_link,
    detect_extraction_markers,
    determine_anchor_type,
    extract_links,
    is_inside_inline_code,
)

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def source(tmp_path: Path) -> str:
    return str(tmp_path / "source.md")


class TestBracketedLinks:
    def test_cross_document_header_link(self, tmp_path: Path, source: str) -> None:
        links = extract_links("See [setup](guide.md#Setup) here.\n", source)
        assert len(links) == 1
        link = links[0]
        assert link.link_type == "markdown"
        assert link.scope == "cross-document"
        assert link.anchor_type == "header"
        assert link.target.anchor == "Setup"
        assert link.target.path.raw == "guide.md"
        assert link.target.path.absolute == str(tmp_path / "guide.md")
        assert link.target.path.relative == "guide.md"
        assert link.text == "setup"
        assert link.full_match == "[setup](guide.md#Setup)"
        assert link.line == 1
        assert link.column == 4
        assert link.validation is None

    def test_internal_link_has_no_path(self, source: str) -> None:
        link = extract_links("[local](#Intro)\n", source)[0]
        assert link.scope == "internal"
        assert link.target.path.raw is None
        assert link.target.path.absolute is None
        assert link.target.path.relative is None
        assert link.target.anchor == "Intro"

    def test_block_anchor(self, source: str) -> None:
        link = extract_links("[b](notes.md#^block-1)\n", source)[0]
        assert link.anchor_type == "block"
        assert link.target.anchor == "^block-1"

    def test_full_file_link_has_no_anchor(self, source: str) -> None:
        link = extract_links("[all](notes.md)\n", source)[0]
        assert link.anchor_type is None
        assert link.target.anchor is None

    def test_anchor_with_spaces_and_colon(self, source: str) -> None:
        link = extract_links("[u](guide.md#Usage: Basics)\n", source)[0]
        assert link.target.anchor == "Usage: Basics"

    def test_anchor_with_nested_parentheses(self, source: str) -> None:
        link = extract_links("[fn](api.md#parse(text (raw)))\n", source)[0]
        assert link.target.anchor == "parse(text (raw))"

    def test_url_encoded_path_is_decoded_for_resolution(self, tmp_path: Path, source: str) -> None:
        link = extract_links("[n](my%20notes.md)\n", source)[0]
        assert link.target.path.raw == "my%20notes.md"
        assert link.target.path.absolute == str(tmp_path / "my notes.md")

    def test_parent_directory_relative_path(self, tmp_path: Path) -> None:
        nested_source = str(tmp_path / "sub" / "source.md")
        link = extract_links("[up](../guide.md)\n", nested_source)[0]
        assert link.target.path.absolute == str(tmp_path / "guide.md")
        assert link.target.path.relative == "../guide.md"

    def test_external_and_image_links_ignored(self, source: str) -> None:
        content = "[site](https://example.com/a.md) [mail](mailto:a@b.c) ![img](pic.png)\n"
        assert extract_links(content, source) == []


class TestWikiLinks:
    def test_cross_document_with_alias(self, source: str) -> None:
        link = extract_links("[[guide.md#Setup|the setup]]\n", source)[0]
        assert link.link_type == "wiki"
        assert link.scope == "cross-document"
        assert link.text == "the setup"
        assert link.target.anchor == "Setup"

    def test_internal_block_reference(self, source: str) -> None:
        link = extract_links("[[#^para-1|para]]\n", source)[0]
        assert link.scope == "internal"
        assert link.anchor_type == "block"

    def test_alias_is_optional(self, source: str) -> None:
        link = extract_links("[[guide.md]]\n", source)[0]
        assert link.text is None
        assert link.anchor_type is None


class TestCiteLinks:
    def test_cite_is_cross_document_full_file(self, tmp_path: Path, source: str) -> None:
        link = extract_links("Per [cite: refs/paper.md], yes.\n", source)[0]
        assert link.link_type == "markdown"
        assert link.scope == "cross-document"
        assert link.anchor_type is None
        assert link.target.path.absolute == str(tmp_path / "refs" / "paper.md")


class TestCodeExclusion:
    def test_links_in_fenced_code_ignored(self, source: str) -> None:
        content = "```\n[x](a.md#A)\n```\n[y](b.md#B)\n"
        links = extract_links(content, source)
        assert [link.text for link in links] == ["y"]
        assert links[0].line == 4

    def test_links_in_inline_code_ignored(self, source: str) -> None:
        content = "Use `[x](a.md)` literally, or [y](b.md).\n"
        assert [link.text for link in extract_links(content, source)] == ["y"]

    def test_is_inside_inline_code(self) -> None:
        line = "a `code` b"
        assert is_inside_inline_code(line, 4) is True
        assert is_inside_inline_code(line, 9) is False


class TestOrdering:
    def test_links_ordered_by_line_then_column(self, source: str) -> None:
        content = "[[a.md|A]] and [b](b.md)\n[c](c.md)\n"
        links = extract_links(content, source)
        assert [(link.line, link.column) for link in links] == [(1, 0), (1, 15), (2, 0)]


class TestExtractionMarkers:
    def test_markers_following_link_collected_in_order(self) -> None:
        line = "[a](g.md) %%force-extract%% <!-- stop-extract-link --> tail"
        markers = detect_extraction_markers(line, line.index(")") + 1)
        assert [marker.inner_text for marker in markers] == ["force-extract", "stop-extract-link"]
        assert markers[0].full_match == "%%force-extract%%"

    def test_marker_must_follow_link(self) -> None:
        line = "[a](g.md) text %%force-extract%%"
        assert detect_extraction_markers(line, line.index(")") + 1) == []

    def test_markers_attached_to_link(self, source: str) -> None:
        link = extract_links("[a](g.md) %%stop-extract-link%%\n", source)[0]
        assert link.has_marker("stop-extract-link")
        assert not link.has_marker("force-extract")


class TestCreateLink:
    def test_anchor_type_classification(self) -> None:
        assert determine_anchor_type("^abc") == "block"
        assert determine_anchor_type("Heading") == "header"
        assert determine_anchor_type("") is None
        assert determine_anchor_type(None) is None

    def test_empty_anchor_normalised_to_none(self, source: str) -> None:
        link = create_link(
            link_type="markdown",
            anchor="",
            raw_path="a.md",
            source_absolute=source,
            text="a",
            full_match="[a](a.md)",
            line=1,
            column=0,
        )
        assert link.target.anchor is None
        assert link.anchor_type is None

    def test_anchor_type_invariant_enforced(self, source: str) -> None:
        link = extract_links("[a](a.md#X)\n", source)[0]
        data = link.model_dump()
        data["anchor_type"] = None
        with pytest.raises(ValueError):
            type(link).model_validate(data)
