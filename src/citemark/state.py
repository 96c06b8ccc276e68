"""Application state container.

AppState is created once per process by ``citemark.app.build_app_state`` and
passed to every tool handler. The parse cache lives for the whole process, so
a file is read and parsed at most once per run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from citemark.config import Settings
    from citemark.extractor import ContentExtractor
    from citemark.factory import LinkFactory
    from citemark.protocols import ParsedFileCacheProtocol, ParserProtocol
    from citemark.validator import CitationValidator


@dataclass
class AppState:
    """Holds all shared runtime state. Passed to every tool handler."""

    settings: Settings
    parser: ParserProtocol
    cache: ParsedFileCacheProtocol
    validator: CitationValidator
    extractor: ContentExtractor
    link_factory: LinkFactory
