"""Unit tests for package version resolution."""

from __future__ import annotations

import importlib.metadata
import importlib.util
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import pytest

import citemark

_INIT_PATH = Path(__file__).resolve().parents[2] / "src" / "citemark" / "__init__.py"


class TestVersion:
    def test_version_from_metadata_or_fallback(self) -> None:
        try:
            expected = version("citemark")
        except PackageNotFoundError:
            expected = "0.0.0+unknown"
        assert citemark.__version__ == expected

    def test_fallback_warns_without_metadata(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def _missing(_name: str) -> str:
            raise PackageNotFoundError

        monkeypatch.setattr(importlib.metadata, "version", _missing)
        spec = importlib.util.spec_from_file_location("citemark_fallback_version", _INIT_PATH)
        assert spec is not None
        assert spec.loader is not None
        module = importlib.util.module_from_spec(spec)

        with pytest.warns(RuntimeWarning, match="Package metadata for 'citemark' not found"):
            spec.loader.exec_module(module)

        assert module.__version__ == "0.0.0+unknown"
