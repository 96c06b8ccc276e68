"""Application wiring.

Responsibilities (and nothing more):
- Configure structlog
- Build the component graph into an AppState
"""

from __future__ import annotations

import logging
import sys

import structlog

from citemark.cache import ParsedFileCache
from citemark.config import Settings
from citemark.eligibility import default_strategies
from citemark.extractor import ContentExtractor
from citemark.factory import LinkFactory
from citemark.parser import MarkdownParser
from citemark.state import AppState
from citemark.validator import CitationValidator

log = structlog.get_logger()


def setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # Logs go to stderr; stdout carries the extraction payload
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def build_app_state(settings: Settings | None = None, *, cwd: str | None = None) -> AppState:
    """Create the parser → cache → validator → extractor graph."""
    settings = settings or Settings()

    parser = MarkdownParser()
    cache = ParsedFileCache(parser)
    validator = CitationValidator(
        cache,
        similarity_cutoff=settings.validation.similarity_cutoff,
        max_suggestions=settings.validation.max_suggestions,
    )
    extractor = ContentExtractor(
        cache,
        default_strategies(settings.extraction),
        content_id_length=settings.extraction.content_id_length,
    )

    log.debug("app_state_built", full_files=settings.extraction.full_files)
    return AppState(
        settings=settings,
        parser=parser,
        cache=cache,
        validator=validator,
        extractor=extractor,
        link_factory=LinkFactory(cwd),
    )
