from __future__ import annotations

import inspect
import logging
import re
from collections.abc import Callable, Coroutine, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from fastapi import HTTPException, Request
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from uploader.core.errors import UploadError, UploadPreconditionError, UploadTooLargeError, UploadValidationError
from uploader.schemas.uploads import UploadOptions
from uploader.services.options import UploadConfig, normalize_options
from uploader.services.paths import build_storage_path, public_url
from uploader.services.storage import write_file, write_temp_file
from uploader.services.validation import ValidationIssue, validate_file


logger = logging.getLogger(__name__)

_BOUNDARY_RE = re.compile(r"boundary=\"?([^\";]*)\"?", re.IGNORECASE)


@dataclass
class ProcessedFile:
    filename: str
    size: int
    type: str
    contents: bytes | None = None
    uri: str = ""
    url: str = ""


@dataclass
class UploadResult:
    data: dict[str, list[ProcessedFile]] = field(default_factory=dict)


@dataclass
class UploadContext:
    """Per-request state. Created for every request and never kept on the uploader."""

    result: UploadResult = field(default_factory=UploadResult)
    issues: list[ValidationIssue] = field(default_factory=list)


def check_preconditions(headers: Mapping[str, str], config: UploadConfig) -> int:
    """
    Validate the upload headers before the body is decoded.

    Returns the declared content-length. Raises `UploadPreconditionError` (or
    `UploadTooLargeError` for an oversized payload) on the first failing check.
    """
    content_length = headers.get("content-length")
    content_type = headers.get("content-type")

    declares_body = bool(headers.get("transfer-encoding")) or (content_length or "").strip() not in {"", "0"}
    if not declares_body:
        raise UploadPreconditionError("Request is missing a body")
    if content_length is None or not content_length.strip():
        raise UploadPreconditionError("Content length is missing")
    try:
        declared = int(content_length)
    except ValueError as exc:
        raise UploadPreconditionError(f"Content length is invalid: {content_length}") from exc
    if not content_type:
        raise UploadPreconditionError("Content type is missing")

    if config.max_total_bytes is not None and declared > config.max_total_bytes:
        raise UploadTooLargeError(
            f"Total upload size exceeded. Uploaded: {declared}. Allowed maximum: {config.max_total_bytes}"
        )

    media_type = content_type.split(";", 1)[0].strip().lower()
    match = _BOUNDARY_RE.search(content_type)
    if media_type != "multipart/form-data" or match is None or not match.group(1).strip():
        raise UploadPreconditionError(
            "Invalid form data. The request body should be encoded as 'multipart/form-data'."
        )
    return declared


async def process_file(upload: UploadFile, config: UploadConfig, context: UploadContext) -> ProcessedFile | None:
    """Validate and store one file. Returns None when the file was rejected."""
    filename = upload.filename or ""

    data: bytes | None = None
    size = upload.size
    if size is None:
        data = await upload.read()
        size = len(data)

    issues = validate_file(filename, size, config)
    if issues:
        context.issues.extend(issues)
        return None

    if data is None:
        data = await upload.read()
    # Leave the spooled file readable for the endpoint.
    await upload.seek(0)

    processed = ProcessedFile(
        filename=filename,
        size=size,
        type=upload.content_type or "",
        contents=data if config.read_into_memory else None,
    )

    if config.persist_to_disk:
        path = await build_storage_path(config, filename)
        await write_file(path, data)
        processed.uri = str(path)
        processed.url = public_url(path)
    else:
        path = await write_temp_file(config.resolved_temp_dir, filename, data)
        processed.uri = str(path)

    logger.debug("Stored upload %s (%s bytes) at %s", filename, size, processed.uri)
    return processed


async def process_form(form: FormData, config: UploadConfig) -> UploadResult:
    """
    Run every file of `form` through validation and storage.

    - Fields are handled in decoder order; plain string values are skipped.
    - Every file of a field is kept, so `data[field]` is a list.
    - Validation issues are collected across all files and raised together as one
      `UploadValidationError` after the last file.
    """
    context = UploadContext()

    for field_name, value in form.multi_items():
        if not isinstance(value, UploadFile):
            continue
        processed = await process_file(value, config, context)
        if processed is not None:
            context.result.data.setdefault(field_name, []).append(processed)

    if context.issues:
        raise UploadValidationError(context.issues)
    return context.result


class FileUploader:
    """
    Validates and stores the files of multipart requests.

    The instance only holds the immutable `UploadConfig`, so one uploader can serve
    concurrent requests. Use `handler()` as a FastAPI dependency; the processed files
    are returned and also kept on `request.state.uploaded_files`.
    """

    def __init__(self, path: str | Path, options: UploadOptions | Mapping[str, Any] | None = None) -> None:
        self.config = normalize_options(path, options)

    def handler(self) -> Callable[[Request], Coroutine[Any, Any, UploadResult | None]]:
        self.config.resolved_temp_dir.mkdir(parents=True, exist_ok=True)

        async def upload_files(request: Request) -> UploadResult | None:
            return await self.handle(request)

        return upload_files

    async def handle(self, request: Request) -> UploadResult | None:
        try:
            result = await self.process(request)
        except UploadError as exc:
            await self._report(request, exc)
            if self.config.continue_on_error:
                return None
            raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc

        request.state.uploaded_files = result
        return result

    async def process(self, request: Request) -> UploadResult:
        declared = check_preconditions(request.headers, self.config)
        logger.debug("Decoding multipart upload of %s bytes", declared)
        try:
            form = await request.form()
        except MultiPartException as exc:
            raise UploadPreconditionError(f"Invalid form data: {exc.message}") from exc
        except StarletteHTTPException as exc:
            raise UploadPreconditionError(f"Invalid form data: {exc.detail}") from exc
        return await process_form(form, self.config)

    async def _report(self, request: Request, error: UploadError) -> None:
        outcome = self.config.on_error(request, error)
        if inspect.isawaitable(outcome):
            await outcome
