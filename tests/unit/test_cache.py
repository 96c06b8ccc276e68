"""Unit tests for citemark.cache."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

import pytest

from citemark.cache import ParsedFileCache, normalise_path
from citemark.document import ParsedDocument
from citemark.errors import CitationError, ErrorCode
from citemark.parser import MarkdownParser, ParserOutput
from citemark.tokenizer import tokenize

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


def _output(path: str, content: str = "# Title\n") -> ParserOutput:
    return ParserOutput(
        file_path=path,
        content=content,
        tokens=tuple(tokenize(content)),
        links=(),
        headings=(),
        anchors=(),
    )


def _not_found(path: str) -> CitationError:
    return CitationError(
        code=ErrorCode.FILE_NOT_FOUND,
        message=f"File not found: {path}",
        suggestion="Check the path.",
    )


class TestResolveParsedFile:
    async def test_returns_parsed_document(self, tmp_path: Path) -> None:
        path = str(tmp_path / "a.md")
        parser = AsyncMock(spec=MarkdownParser)
        parser.parse_file.return_value = _output(path)
        cache = ParsedFileCache(parser)

        document = await cache.resolve_parsed_file(path)

        assert isinstance(document, ParsedDocument)
        assert document.file_path == path
        parser.parse_file.assert_awaited_once_with(path)

    async def test_concurrent_calls_share_one_parse(self, tmp_path: Path) -> None:
        path = str(tmp_path / "a.md")
        release = asyncio.Event()

        async def slow_parse(p: str) -> ParserOutput:
            await release.wait()
            return _output(p)

        parser = AsyncMock(spec=MarkdownParser)
        parser.parse_file.side_effect = slow_parse
        cache = ParsedFileCache(parser)

        futures = [cache.resolve_parsed_file(path) for _ in range(5)]
        # One pending entry backs every waiter
        assert len(cache) == 1

        release.set()
        documents = await asyncio.gather(*futures)

        assert all(document is documents[0] for document in documents)
        assert parser.parse_file.await_count == 1

    async def test_equivalent_paths_share_one_entry(self, tmp_path: Path) -> None:
        path = str(tmp_path / "a.md")
        parser = AsyncMock(spec=MarkdownParser)
        parser.parse_file.side_effect = lambda p: _output(p)
        cache = ParsedFileCache(parser)

        first = await cache.resolve_parsed_file(path)
        second = await cache.resolve_parsed_file(str(tmp_path / "sub" / ".." / "a.md"))

        assert first is second
        parser.parse_file.assert_awaited_once_with(normalise_path(path))

    async def test_resolved_entry_is_reused(self, tmp_path: Path) -> None:
        path = str(tmp_path / "a.md")
        parser = AsyncMock(spec=MarkdownParser)
        parser.parse_file.side_effect = lambda p: _output(p)
        cache = ParsedFileCache(parser)

        first = await cache.resolve_parsed_file(path)
        second = await cache.resolve_parsed_file(path)

        assert first is second
        assert path in cache

    async def test_cancelled_waiter_does_not_cancel_parse(self, tmp_path: Path) -> None:
        path = str(tmp_path / "a.md")
        release = asyncio.Event()

        async def slow_parse(p: str) -> ParserOutput:
            await release.wait()
            return _output(p)

        parser = AsyncMock(spec=MarkdownParser)
        parser.parse_file.side_effect = slow_parse
        cache = ParsedFileCache(parser)

        survivor = cache.resolve_parsed_file(path)
        with pytest.raises(TimeoutError):
            await asyncio.wait_for(cache.resolve_parsed_file(path), timeout=0.01)
        assert path in cache

        release.set()
        document = await survivor

        assert document.file_path == path
        assert await cache.resolve_parsed_file(path) is document
        assert parser.parse_file.await_count == 1


class TestFailureEviction:
    async def test_failure_propagates_to_every_waiter(self, tmp_path: Path) -> None:
        path = str(tmp_path / "missing.md")
        parser = AsyncMock(spec=MarkdownParser)
        parser.parse_file.side_effect = _not_found(path)
        cache = ParsedFileCache(parser)

        results = await asyncio.gather(
            cache.resolve_parsed_file(path),
            cache.resolve_parsed_file(path),
            return_exceptions=True,
        )

        assert all(isinstance(result, CitationError) for result in results)
        assert results[0] is results[1]
        assert parser.parse_file.await_count == 1

    async def test_failed_entry_is_removed(self, tmp_path: Path) -> None:
        path = str(tmp_path / "missing.md")
        parser = AsyncMock(spec=MarkdownParser)
        parser.parse_file.side_effect = _not_found(path)
        cache = ParsedFileCache(parser)

        with pytest.raises(CitationError):
            await cache.resolve_parsed_file(path)

        assert path not in cache
        assert len(cache) == 0

    async def test_retry_after_failure_succeeds(self, tmp_path: Path) -> None:
        path = str(tmp_path / "flaky.md")
        parser = AsyncMock(spec=MarkdownParser)
        parser.parse_file.side_effect = [_not_found(path), _output(path)]
        cache = ParsedFileCache(parser)

        with pytest.raises(CitationError):
            await cache.resolve_parsed_file(path)
        document = await cache.resolve_parsed_file(path)

        assert document.file_path == path
        assert parser.parse_file.await_count == 2

    async def test_retry_reads_fixed_file(
        self, tmp_path: Path, write_md: Callable[[str, str], Path]
    ) -> None:
        path = str(tmp_path / "late.md")
        cache = ParsedFileCache(MarkdownParser())

        with pytest.raises(CitationError) as exc_info:
            await cache.resolve_parsed_file(path)
        assert exc_info.value.code == ErrorCode.FILE_NOT_FOUND

        write_md("late.md", "# Late\n")
        document = await cache.resolve_parsed_file(path)
        assert [heading.text for heading in document.headings] == ["Late"]
