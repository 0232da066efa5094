from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import Path, PurePosixPath

from uploader.core.errors import StorageError


logger = logging.getLogger(__name__)

_FALLBACK_FILENAME = "upload"


def safe_filename(filename: str) -> str:
    """Final segment of a client supplied filename, so writes stay inside the target directory."""
    name = PurePosixPath(filename.replace("\\", "/")).name.strip()
    if name in {"", ".", ".."}:
        return _FALLBACK_FILENAME
    return name


async def ensure_dir(path: Path) -> None:
    try:
        await asyncio.to_thread(path.mkdir, parents=True, exist_ok=True)
    except OSError as exc:
        logger.exception("Could not create upload directory %s", path)
        raise StorageError("Could not create the upload directory") from exc


async def write_file(path: Path, data: bytes) -> Path:
    await ensure_dir(path.parent)
    try:
        await asyncio.to_thread(path.write_bytes, data)
    except OSError as exc:
        logger.exception("Could not write upload to %s", path)
        raise StorageError("Could not store the uploaded file") from exc
    return path


async def write_temp_file(temp_dir: Path, filename: str, data: bytes) -> Path:
    """Write `data` below `temp_dir` as "<uuid>_<filename>" and return the path."""
    return await write_file(temp_dir / f"{uuid.uuid4().hex}_{safe_filename(filename)}", data)
