"""Synthetic links for direct header and file extraction.

Links built here have no citing document: the source is the working
directory, paths resolve against it, and ``line`` is 0.
"""

from __future__ import annotations

import os

from citemark.errors import CitationError, ErrorCode
from citemark.links import create_link
from citemark.models import Link


class LinkFactory:
    def __init__(self, cwd: str | None = None) -> None:
        self._cwd = os.path.abspath(cwd or os.getcwd())

    def create_header_link(self, target_path: str, header_name: str) -> Link:
        """Link to the section under ``header_name`` in ``target_path``."""
        _require(target_path, "target_path")
        _require(header_name, "header_name")
        return create_link(
            link_type="markdown",
            anchor=header_name,
            raw_path=target_path,
            source_absolute=self._cwd,
            text=header_name,
            full_match=f"[{header_name}]({target_path}#{header_name})",
            line=0,
            column=0,
            base_dir=self._cwd,
        )

    def create_file_link(self, target_path: str) -> Link:
        """Link to the whole of ``target_path``."""
        _require(target_path, "target_path")
        name = os.path.basename(target_path)
        return create_link(
            link_type="markdown",
            anchor=None,
            raw_path=target_path,
            source_absolute=self._cwd,
            text=name,
            full_match=f"[{name}]({target_path})",
            line=0,
            column=0,
            base_dir=self._cwd,
        )


def _require(value: str, name: str) -> None:
    if not value or not value.strip():
        raise CitationError(
            code=ErrorCode.INVALID_INPUT,
            message=f"{name} must not be empty",
            suggestion=f"Provide a non-empty {name}.",
            recoverable=False,
        )
