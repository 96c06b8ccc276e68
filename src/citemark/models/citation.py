from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from citemark.models.validation import ValidationVerdict

LinkType = Literal["markdown", "wiki"]
LinkScope = Literal["internal", "cross-document"]
AnchorType = Literal["header", "block"]


class WireModel(BaseModel):
    """Base for models that are serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SourcePath(WireModel):
    absolute: str


class LinkSource(WireModel):
    path: SourcePath


class TargetPath(WireModel):
    raw: str | None = None  # Exactly as written in the source document
    absolute: str | None = None  # Resolved against the source directory (cache key)
    relative: str | None = None  # Recomputed from the source directory (display)


class LinkTarget(WireModel):
    path: TargetPath = TargetPath()
    anchor: str | None = None


class ExtractionMarker(WireModel):
    """Author marker following a link, e.g. ``%%force-extract%%``."""

    full_match: str
    inner_text: str


class Link(WireModel):
    """One citation found in a source document."""

    link_type: LinkType
    scope: LinkScope
    anchor_type: AnchorType | None
    source: LinkSource
    target: LinkTarget
    text: str | None
    full_match: str
    line: int  # 1-based; 0 for synthetic links
    column: int  # 0-based
    extraction_markers: list[ExtractionMarker] = []
    validation: ValidationVerdict | None = None

    @model_validator(mode="after")
    def _anchor_type_matches_anchor(self) -> Link:
        if (self.target.anchor is None) != (self.anchor_type is None):
            raise ValueError("anchor_type must be None exactly when target.anchor is None")
        return self

    def has_marker(self, inner_text: str) -> bool:
        return any(marker.inner_text == inner_text for marker in self.extraction_markers)


class Anchor(WireModel):
    """A named position a link fragment can target."""

    anchor_type: AnchorType
    id: str
    raw_text: str | None = None
    full_match: str
    line: int  # 1-based
    column: int  # 0-based; header anchors use 0


class Heading(WireModel):
    level: int
    text: str
    raw: str
