"""Protocol interfaces for swappable components.

The cache, validator and extractor reference these protocols, not the
concrete implementations. This allows:
- Tests to substitute instrumented or in-memory parsers
- Eligibility rules to be added without changing the extractor
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from citemark.document import ParsedDocument
    from citemark.models import CliFlags, EligibilityDecision, Link
    from citemark.parser import ParserOutput


class ParserProtocol(Protocol):
    """Interface for the markdown document parser."""

    async def parse_file(self, path: str) -> ParserOutput: ...


class ParsedFileCacheProtocol(Protocol):
    """Interface for the per-run parsed document cache."""

    def resolve_parsed_file(self, path: str) -> Awaitable[ParsedDocument]: ...


class EligibilityStrategy(Protocol):
    """One rule in the extraction eligibility chain.

    Returns ``None`` to defer to the next strategy.
    """

    def decide(self, link: Link, flags: CliFlags) -> EligibilityDecision | None: ...
