from __future__ import annotations

from citemark.models.citation import (
    Anchor,
    ExtractionMarker,
    Heading,
    Link,
    LinkSource,
    LinkTarget,
    SourcePath,
    TargetPath,
)
from citemark.models.extraction import (
    AggregatedOutput,
    CliFlags,
    ContentBlock,
    EligibilityDecision,
    ExtractionResult,
    ExtractionStats,
    FailureDetails,
    OutgoingLinksReport,
    SourceLinkEntry,
    SuccessDetails,
)
from citemark.models.tools import (
    ExtractFileInput,
    ExtractHeaderInput,
    ExtractLinksInput,
    ValidateFileInput,
)
from citemark.models.validation import (
    AnchorCheck,
    ValidationResult,
    ValidationSummary,
    ValidationVerdict,
)

# ValidationResult references Link, which itself depends on ValidationVerdict.
ValidationResult.model_rebuild(_types_namespace={"Link": Link})

__all__ = [
    # citation
    "Link",
    "LinkSource",
    "LinkTarget",
    "SourcePath",
    "TargetPath",
    "ExtractionMarker",
    "Anchor",
    "Heading",
    # validation
    "ValidationVerdict",
    "AnchorCheck",
    "ValidationSummary",
    "ValidationResult",
    # extraction
    "CliFlags",
    "EligibilityDecision",
    "ExtractionResult",
    "SuccessDetails",
    "FailureDetails",
    "SourceLinkEntry",
    "ContentBlock",
    "OutgoingLinksReport",
    "ExtractionStats",
    "AggregatedOutput",
    # tools
    "ValidateFileInput",
    "ExtractLinksInput",
    "ExtractHeaderInput",
    "ExtractFileInput",
]
