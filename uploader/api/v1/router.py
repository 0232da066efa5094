from __future__ import annotations

from fastapi import APIRouter

from uploader.api.v1.endpoints import files, uploads


api_router = APIRouter()

api_router.include_router(uploads.router, prefix="/uploads", tags=["uploads"])
api_router.include_router(files.router, prefix="/files", tags=["files"])
