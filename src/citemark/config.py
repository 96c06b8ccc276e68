"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (CITEMARK__EXTRACTION__FULL_FILES=true)
  2. citemark.yaml          (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional; all fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_CONFIG_DIR = platformdirs.user_config_dir("citemark")


def _find_config_file() -> str | None:
    """Return the path of the first citemark.yaml found, or None."""
    candidates = [
        Path("citemark.yaml"),
        Path(_DEFAULT_CONFIG_DIR) / "citemark.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ExtractionSettings(BaseModel):
    full_files: bool = False
    stop_marker: str = "stop-extract-link"
    force_marker: str = "force-extract"
    content_id_length: int = Field(default=16, ge=8, le=64)


class ValidationSettings(BaseModel):
    # rapidfuzz score (0-100) a candidate anchor must reach to be suggested
    similarity_cutoff: int = Field(default=50, ge=0, le=100)
    max_suggestions: int = Field(default=5, ge=1)


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: CITEMARK__LOGGING__LEVEL=DEBUG
        env_prefix="CITEMARK__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    extraction: ExtractionSettings = ExtractionSettings()
    validation: ValidationSettings = ValidationSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
