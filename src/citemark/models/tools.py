from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class ValidateFileInput(BaseModel):
    file_path: str = Field(min_length=1, max_length=4096)

    @field_validator("file_path")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("file_path must not be blank")
        return v


class ExtractLinksInput(BaseModel):
    source_file: str = Field(min_length=1, max_length=4096)
    full_files: bool = False

    @field_validator("source_file")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("source_file must not be blank")
        return v


class ExtractHeaderInput(BaseModel):
    target_file: str = Field(min_length=1, max_length=4096)
    header_name: str = Field(min_length=1, max_length=1000)

    @field_validator("target_file", "header_name")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("value must not be blank")
        return v


class ExtractFileInput(BaseModel):
    target_file: str = Field(min_length=1, max_length=4096)

    @field_validator("target_file")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("target_file must not be blank")
        return v
