"""Per-run cache of parsed documents.

Maps a normalised absolute path to the future of its ParsedDocument. The
future is stored before the parse settles, so concurrent callers asking for
the same file share one read and one parse. A failed parse is evicted as soon
as it settles: every caller already awaiting it sees the same error, and the
next request starts a fresh attempt.

``resolve_parsed_file`` is a plain method, not a coroutine. Lookup and
insertion therefore run without a suspension point in between, which is all
the synchronisation a single event loop needs. Callers receive a shielded
view of the stored task, so cancelling one waiter leaves the parse running
for the others.
"""

from __future__ import annotations

import asyncio
import os
from functools import partial
from typing import TYPE_CHECKING

import structlog

from citemark.document import ParsedDocument

if TYPE_CHECKING:
    from citemark.protocols import ParserProtocol

log = structlog.get_logger()


def normalise_path(path: str) -> str:
    return os.path.abspath(os.path.normpath(path))


class ParsedFileCache:
    """In-memory parse cache implementing ParsedFileCacheProtocol."""

    def __init__(self, parser: ParserProtocol) -> None:
        self._parser = parser
        self._entries: dict[str, asyncio.Future[ParsedDocument]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and normalise_path(path) in self._entries

    def resolve_parsed_file(self, path: str) -> asyncio.Future[ParsedDocument]:
        """Return an awaitable for the (possibly still pending) parse of ``path``.

        Must be called from within a running event loop.
        """
        key = normalise_path(path)
        entry = self._entries.get(key)
        if entry is not None:
            log.debug("parse_cache_hit", path=key, pending=not entry.done())
            return asyncio.shield(entry)

        log.debug("parse_cache_miss", path=key)
        future = asyncio.ensure_future(self._load(key))
        self._entries[key] = future
        future.add_done_callback(partial(self._on_settled, key))
        return asyncio.shield(future)

    async def _load(self, path: str) -> ParsedDocument:
        output = await self._parser.parse_file(path)
        return ParsedDocument(output)

    def _on_settled(self, key: str, future: asyncio.Future[ParsedDocument]) -> None:
        if not future.cancelled() and future.exception() is None:
            return
        # Only evict our own entry; a retry may already have replaced it.
        if self._entries.get(key) is future:
            del self._entries[key]
        log.warning(
            "parse_cache_evicted",
            path=key,
            reason="cancelled" if future.cancelled() else repr(future.exception()),
        )
