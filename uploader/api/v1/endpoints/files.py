from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from uploader.core.config import Settings, get_settings


router = APIRouter()


def _resolve_stored_path(rel: str, settings: Settings) -> Path:
    base_dir = settings.upload_dir.resolve()
    served_root = Path.cwd().resolve()

    abs_path = (served_root / rel).resolve()
    if not abs_path.is_relative_to(base_dir) and not base_dir.is_relative_to(served_root):
        # Files stored outside the served root are published under their absolute path.
        abs_path = (Path("/") / rel).resolve()

    try:
        abs_path.relative_to(base_dir)
    except ValueError as e:
        raise HTTPException(status_code=403, detail="Forbidden path") from e
    return abs_path


@router.get("/{file_path:path}")
async def download_file(file_path: str) -> FileResponse:
    """
    Download a stored upload by the `url` returned from the upload endpoint.
    Only files below the configured upload directory are served.
    """
    settings = get_settings()

    rel = file_path.lstrip("/")
    abs_path = _resolve_stored_path(rel, settings)
    if not abs_path.is_file():
        raise HTTPException(status_code=404, detail="Not found")

    return FileResponse(path=str(abs_path), filename=abs_path.name)
