"""Extraction eligibility chain.

An ordered list of strategies, each returning a decision or ``None`` to defer.
The first decision wins; if nobody decides, the link is not eligible.

Default precedence (highest first):
  1. stop marker      → never extract
  2. force marker     → always extract
  3. anchored link    → section/block links extract by default
  4. CLI full-files   → full-file links extract only when the flag is set
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from citemark.models import EligibilityDecision

if TYPE_CHECKING:
    from collections.abc import Sequence

    from citemark.config import ExtractionSettings
    from citemark.models import CliFlags, Link
    from citemark.protocols import EligibilityStrategy


class StopMarkerStrategy:
    def __init__(self, marker: str = "stop-extract-link") -> None:
        self.marker = marker

    def decide(self, link: Link, flags: CliFlags) -> EligibilityDecision | None:
        if link.has_marker(self.marker):
            return EligibilityDecision(
                eligible=False, reason=f"{self.marker} marker prevents extraction"
            )
        return None


class ForceMarkerStrategy:
    def __init__(self, marker: str = "force-extract") -> None:
        self.marker = marker

    def decide(self, link: Link, flags: CliFlags) -> EligibilityDecision | None:
        if link.has_marker(self.marker):
            return EligibilityDecision(eligible=True, reason=f"{self.marker} overrides defaults")
        return None


class SectionLinkStrategy:
    def decide(self, link: Link, flags: CliFlags) -> EligibilityDecision | None:
        if link.anchor_type is not None:
            return EligibilityDecision(
                eligible=True, reason="Markdown anchor links eligible by default"
            )
        return None


class CliFlagStrategy:
    def decide(self, link: Link, flags: CliFlags) -> EligibilityDecision | None:
        if flags.full_files:
            return EligibilityDecision(
                eligible=True, reason="CLI flag --full-files forces extraction"
            )
        return EligibilityDecision(
            eligible=False, reason="Full-file link ineligible without --full-files flag"
        )


def default_strategies(settings: ExtractionSettings | None = None) -> list[EligibilityStrategy]:
    """Build the strategy chain in precedence order."""
    stop_marker = settings.stop_marker if settings is not None else "stop-extract-link"
    force_marker = settings.force_marker if settings is not None else "force-extract"
    return [
        StopMarkerStrategy(stop_marker),
        ForceMarkerStrategy(force_marker),
        SectionLinkStrategy(),
        CliFlagStrategy(),
    ]


def analyze_eligibility(
    link: Link,
    flags: CliFlags,
    strategies: Sequence[EligibilityStrategy],
) -> EligibilityDecision:
    for strategy in strategies:
        decision = strategy.decide(link, flags)
        if decision is not None:
            return decision
    return EligibilityDecision(eligible=False, reason="No strategy matched")
