from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from uploader.schemas.uploads import ErrorHook, UploadOptions


logger = logging.getLogger(__name__)


def log_upload_error(request: Any, error: BaseException) -> None:
    path = getattr(getattr(request, "url", None), "path", None)
    logger.warning("Upload rejected: %s", error, extra={"path": path})


@dataclass(frozen=True)
class UploadConfig:
    base_path: Path
    allowed_extensions: frozenset[str]
    max_total_bytes: int | None
    max_file_bytes: int | None
    persist_to_disk: bool
    read_into_memory: bool
    use_process_relative_base: bool
    use_timestamped_subdir: bool
    on_error: ErrorHook
    temp_dir: Path
    continue_on_error: bool

    @property
    def resolved_temp_dir(self) -> Path:
        if self.temp_dir.is_absolute():
            return self.temp_dir
        return Path.cwd() / self.temp_dir


def normalize_options(
    base_path: str | Path,
    options: UploadOptions | Mapping[str, Any] | None = None,
) -> UploadConfig:
    """
    Merge caller options with the defaults into a fully resolved `UploadConfig`.

    - `options` may be an `UploadOptions`, a plain mapping of option names or None.
    - Unknown option names and negative limits raise `pydantic.ValidationError`.
    """
    if options is None:
        opts = UploadOptions()
    elif isinstance(options, UploadOptions):
        opts = options
    else:
        opts = UploadOptions.model_validate(dict(options))

    return UploadConfig(
        base_path=Path(base_path),
        allowed_extensions=opts.extensions,
        max_total_bytes=opts.max_size_bytes,
        max_file_bytes=opts.max_file_size_bytes,
        persist_to_disk=opts.save_file,
        read_into_memory=opts.read_file,
        use_process_relative_base=opts.use_current_dir,
        use_timestamped_subdir=opts.use_date_time_sub_dir,
        on_error=opts.on_error or log_upload_error,
        temp_dir=Path(opts.temp_dir),
        continue_on_error=opts.continue_on_error,
    )
