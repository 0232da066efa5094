from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from uploader.schemas.uploads import UploadOptions


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    upload_base_path: Path = Field(Path("uploads"), alias="UPLOAD_BASE_PATH")
    upload_temp_dir: Path = Field(Path("temp_uploads"), alias="UPLOAD_TEMP_DIR")

    # Comma separated, e.g. "jpg,png,pdf". Empty means every extension is accepted.
    upload_allowed_extensions: str | None = Field(None, alias="UPLOAD_ALLOWED_EXTENSIONS")
    upload_max_size_bytes: int | None = Field(None, alias="UPLOAD_MAX_SIZE_BYTES")
    upload_max_file_size_bytes: int | None = Field(None, alias="UPLOAD_MAX_FILE_SIZE_BYTES")

    upload_save_file: bool = Field(True, alias="UPLOAD_SAVE_FILE")
    upload_read_file: bool = Field(False, alias="UPLOAD_READ_FILE")
    upload_use_current_dir: bool = Field(True, alias="UPLOAD_USE_CURRENT_DIR")
    upload_use_date_time_sub_dir: bool = Field(True, alias="UPLOAD_USE_DATE_TIME_SUB_DIR")
    upload_continue_on_error: bool = Field(False, alias="UPLOAD_CONTINUE_ON_ERROR")

    cors_origins: str | None = Field(None, alias="CORS_ORIGINS")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    @field_validator("upload_allowed_extensions", mode="before")
    @classmethod
    def _normalize_allowed_extensions(cls, v: object) -> object:
        if v is None:
            return None
        if isinstance(v, str):
            exts = v.strip()
            return exts or None
        return v

    @field_validator("upload_max_size_bytes", "upload_max_file_size_bytes", mode="before")
    @classmethod
    def _empty_limit_is_unbounded(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().upper() or "INFO"
        return v

    @property
    def allowed_extensions(self) -> list[str]:
        if not self.upload_allowed_extensions:
            return []
        return [e.strip() for e in self.upload_allowed_extensions.split(",") if e.strip()]

    @property
    def upload_dir(self) -> Path:
        if self.upload_use_current_dir:
            return Path.cwd() / self.upload_base_path
        return self.upload_base_path

    def upload_options(self) -> UploadOptions:
        return UploadOptions(
            extensions=self.allowed_extensions,
            max_size_bytes=self.upload_max_size_bytes,
            max_file_size_bytes=self.upload_max_file_size_bytes,
            save_file=self.upload_save_file,
            read_file=self.upload_read_file,
            use_current_dir=self.upload_use_current_dir,
            use_date_time_sub_dir=self.upload_use_date_time_sub_dir,
            temp_dir=self.upload_temp_dir,
            continue_on_error=self.upload_continue_on_error,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
