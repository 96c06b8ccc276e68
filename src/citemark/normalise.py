"""Anchor normalisation.

Pure string functions shared by anchor validation, similar-anchor search and
content retrieval. No knowledge of documents or I/O.
"""

from __future__ import annotations

import re
from urllib.parse import unquote

_EMPHASIS_RE = re.compile(r"^==\*\*([^*]+)\*\*==$")


def decode_anchor(anchor: str) -> str:
    """URL-decode an anchor fragment: ``My%20Header`` → ``My Header``."""
    return unquote(anchor)


def strip_block_prefix(anchor: str) -> str:
    """``^block-id`` → ``block-id``. Other anchors are returned unchanged."""
    return anchor[1:] if anchor.startswith("^") else anchor


def normalise_anchor(raw: str) -> str:
    """Normalise an anchor for format-insensitive comparison.

    Steps (order matters):
      1. URL-decode:           "My%20Header" → "My Header"
      2. Lowercase
      3. Drop punctuation:     backticks, colons, a leading ``^``, ...
      4. Collapse separators:  runs of ``-``, ``_`` and whitespace → one space
      5. Trim whitespace
    """
    text = decode_anchor(raw)
    text = text.lower()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[-_\s]+", " ", text)
    return text.strip()


def exact_candidates(anchor: str) -> list[str]:
    """Ids that count as an exact match for ``anchor``.

    The anchor itself, its caret-stripped form for block references, and the
    inner text of an ``==**text**==`` emphasis marker.
    """
    candidates = [anchor]
    stripped = strip_block_prefix(anchor)
    if stripped != anchor:
        candidates.append(stripped)
    emphasis = _EMPHASIS_RE.match(anchor)
    if emphasis is not None:
        candidates.append(emphasis.group(1))
    return candidates
