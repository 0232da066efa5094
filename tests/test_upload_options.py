from __future__ import annotations

import dataclasses
import logging
from pathlib import Path

import pydantic
import pytest

from uploader.schemas.uploads import UploadOptions
from uploader.services.options import log_upload_error, normalize_options


def test_normalize_options_fills_defaults() -> None:
    config = normalize_options("uploads")

    assert config.base_path == Path("uploads")
    assert config.allowed_extensions == frozenset()
    assert config.max_total_bytes is None
    assert config.max_file_bytes is None
    assert config.persist_to_disk is True
    assert config.read_into_memory is False
    assert config.use_process_relative_base is True
    assert config.use_timestamped_subdir is True
    assert config.on_error is log_upload_error
    assert config.temp_dir == Path("temp_uploads")
    assert config.continue_on_error is False


def test_normalize_options_accepts_plain_mapping() -> None:
    config = normalize_options(
        "media",
        {
            "extensions": [".JPG", "png", "  "],
            "max_size_bytes": 10_000,
            "max_file_size_bytes": 1000,
            "save_file": False,
            "read_file": True,
            "use_current_dir": False,
            "use_date_time_sub_dir": False,
        },
    )

    assert config.allowed_extensions == frozenset({"jpg", "png"})
    assert config.max_total_bytes == 10_000
    assert config.max_file_bytes == 1000
    assert config.persist_to_disk is False
    assert config.read_into_memory is True
    assert config.use_process_relative_base is False
    assert config.use_timestamped_subdir is False


def test_normalize_options_keeps_custom_error_hook() -> None:
    def hook(request, error) -> None:
        return None

    config = normalize_options("uploads", UploadOptions(on_error=hook, extensions="jpg,gif"))

    assert config.on_error is hook
    assert config.allowed_extensions == frozenset({"jpg", "gif"})


def test_normalize_options_rejects_unknown_option() -> None:
    with pytest.raises(pydantic.ValidationError):
        normalize_options("uploads", {"max_files": 3})


def test_normalize_options_rejects_negative_limit() -> None:
    with pytest.raises(pydantic.ValidationError):
        normalize_options("uploads", {"max_file_size_bytes": -1})


def test_upload_config_is_immutable() -> None:
    config = normalize_options("uploads")
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.persist_to_disk = False  # type: ignore[misc]


def test_resolved_temp_dir_is_relative_to_cwd(workdir: Path) -> None:
    assert normalize_options("uploads").resolved_temp_dir == workdir / "temp_uploads"
    absolute = workdir / "elsewhere"
    assert normalize_options("uploads", {"temp_dir": absolute}).resolved_temp_dir == absolute


def test_default_error_hook_logs_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="uploader.services.options"):
        log_upload_error(None, ValueError("Content type is missing"))

    assert "Content type is missing" in caplog.text
