from __future__ import annotations

import base64
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from uploader.services.uploads import ProcessedFile, UploadResult


ErrorHook = Callable[[Any, BaseException], Any]


class UploadOptions(BaseModel):
    """Caller-facing upload options. Unset values fall back to the defaults below."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    extensions: frozenset[str] = Field(default_factory=frozenset, description="Allowed extensions; empty allows all")
    max_size_bytes: int | None = Field(default=None, ge=0, description="Limit for the declared request content-length")
    max_file_size_bytes: int | None = Field(default=None, ge=0, description="Limit for a single file")
    save_file: bool = True
    read_file: bool = False
    use_current_dir: bool = True
    use_date_time_sub_dir: bool = True
    temp_dir: Path = Path("temp_uploads")
    on_error: ErrorHook | None = None
    continue_on_error: bool = False

    @field_validator("extensions", mode="before")
    @classmethod
    def normalize_extensions(cls, value: object) -> object:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple, set, frozenset)):
            normalized = (str(v).strip().lstrip(".").lower() for v in value)
            return frozenset(ext for ext in normalized if ext)
        return value


class ProcessedFileOut(BaseModel):
    filename: str
    size: int
    type: str
    contents: str | None = Field(default=None, description="Base64 encoded bytes when read_file is enabled")
    uri: str = Field(..., description="Filesystem path of the stored (or temporary) file")
    url: str = Field(..., description="URL encoded path below the served root; empty when not saved")

    @classmethod
    def from_processed(cls, processed: ProcessedFile) -> "ProcessedFileOut":
        contents = None
        if processed.contents is not None:
            contents = base64.b64encode(processed.contents).decode("ascii")
        return cls(
            filename=processed.filename,
            size=processed.size,
            type=processed.type,
            contents=contents,
            uri=processed.uri,
            url=processed.url,
        )


class UploadResultOut(BaseModel):
    data: dict[str, list[ProcessedFileOut]] = Field(default_factory=dict)

    @classmethod
    def from_result(cls, result: UploadResult | None) -> "UploadResultOut":
        if result is None:
            return cls()
        return cls(
            data={
                field: [ProcessedFileOut.from_processed(f) for f in files]
                for field, files in result.data.items()
            }
        )
