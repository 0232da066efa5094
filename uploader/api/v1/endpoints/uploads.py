from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, Depends, Request

from uploader.core.config import get_settings
from uploader.schemas.uploads import UploadResultOut
from uploader.services.uploads import FileUploader, UploadResult


router = APIRouter()


@lru_cache
def get_uploader() -> FileUploader:
    settings = get_settings()
    return FileUploader(settings.upload_base_path, settings.upload_options())


async def uploaded_files(request: Request) -> UploadResult | None:
    return await get_uploader().handle(request)


@router.post("", response_model=UploadResultOut)
async def upload_files(result: UploadResult | None = Depends(uploaded_files)) -> UploadResultOut:
    return UploadResultOut.from_result(result)
