from __future__ import annotations

import uuid
from datetime import datetime
from pathlib import Path
from urllib.parse import quote

from uploader.services.options import UploadConfig
from uploader.services.storage import ensure_dir, safe_filename


# encodeURI safe set minus "?" and "#", which would cut the path short.
_URL_SAFE = "/;,:@&=+$-_.!~*'()"


def timestamped_subdir(now: datetime, unique_id: uuid.UUID) -> Path:
    return Path(
        f"{now.year}",
        f"{now.month:02d}",
        f"{now.day:02d}",
        f"{now.hour:02d}",
        f"{now.minute:02d}",
        f"{now.second:02d}",
        str(unique_id),
    )


def storage_dir(
    config: UploadConfig,
    *,
    now: datetime | None = None,
    unique_id: uuid.UUID | None = None,
) -> Path:
    upload_path = config.base_path
    if config.use_timestamped_subdir:
        # A fresh uuid per file keeps same-named uploads apart.
        upload_path = upload_path / timestamped_subdir(now or datetime.now(), unique_id or uuid.uuid4())

    if config.use_process_relative_base:
        return Path.cwd() / upload_path
    return upload_path


async def build_storage_path(
    config: UploadConfig,
    filename: str,
    *,
    now: datetime | None = None,
    unique_id: uuid.UUID | None = None,
) -> Path:
    directory = storage_dir(config, now=now, unique_id=unique_id)
    await ensure_dir(directory)
    return directory / safe_filename(filename)


def public_url(path: Path, root: Path | None = None) -> str:
    """URL-encoded form of `path`, relative to `root` (cwd by default) and rooted at "/"."""
    root = root or Path.cwd()
    try:
        rel = path.relative_to(root).as_posix()
    except ValueError:
        rel = str(path).replace("\\", "/")

    if not rel.startswith("/"):
        rel = "/" + rel
    return quote(rel, safe=_URL_SAFE)
