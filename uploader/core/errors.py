"""Upload exception types.

Service code stays HTTP-agnostic; each error carries the status code the upload
dependency uses when it turns the failure into an ``HTTPException``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uploader.services.validation import ValidationIssue


class UploadError(Exception):
    """Base class for every failure that terminates an upload request."""

    status_code = 500


class UploadPreconditionError(UploadError):
    """Raised when the request cannot be treated as a multipart upload."""

    status_code = 400


class UploadTooLargeError(UploadPreconditionError):
    """Raised when the declared content-length is above the configured maximum."""

    status_code = 413


class UploadValidationError(UploadError):
    status_code = 422

    def __init__(self, issues: Sequence[ValidationIssue]) -> None:
        self.issues = list(issues)
        super().__init__("Unprocessable Entity: " + " ".join(issue.message for issue in self.issues))


class StorageError(UploadError):
    """Raised when a file cannot be written to disk."""

    status_code = 500
