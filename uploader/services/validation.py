from __future__ import annotations

from dataclasses import dataclass

from uploader.services.options import UploadConfig


@dataclass(frozen=True)
class ValidationIssue:
    filename: str
    message: str


def file_extension(filename: str) -> str:
    """Return the text after the last dot of `filename`, or "" when it has none."""
    _, dot, ext = filename.rpartition(".")
    return ext if dot else ""


def validate_file(filename: str, size: int, config: UploadConfig) -> list[ValidationIssue]:
    """
    Check one file against the extension allow-list and the per-file size limit.

    - Both checks always run, so a single file can produce two issues.
    - A file without extension is checked as extension "" and is therefore
      rejected whenever an allow-list is configured.
    - Returns an empty list when the file is accepted.
    """
    issues: list[ValidationIssue] = []

    ext = file_extension(filename)
    if config.allowed_extensions and ext.lower() not in config.allowed_extensions:
        allowed = ",".join(sorted(config.allowed_extensions))
        issues.append(
            ValidationIssue(
                filename=filename,
                message=f"File extension {ext} in {filename} is not allowed. Allowed extensions: {allowed}.",
            )
        )

    if config.max_file_bytes is not None and size > config.max_file_bytes:
        issues.append(
            ValidationIssue(
                filename=filename,
                message=(
                    f"File size exceeds limit. File: {filename}, Size: {size} bytes, "
                    f"Limit: {config.max_file_bytes} bytes."
                ),
            )
        )

    return issues
