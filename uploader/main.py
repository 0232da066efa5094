from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from uploader.api.v1.endpoints.uploads import get_uploader
from uploader.api.v1.router import api_router
from uploader.core.config import get_settings


def create_app() -> FastAPI:
    settings = get_settings()
    logging.getLogger("uploader").setLevel(settings.log_level)

    app = FastAPI(title="Multipart upload service", version="1.0")

    if settings.cors_origins:
        origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.on_event("startup")
    async def startup() -> None:
        settings.upload_dir.mkdir(parents=True, exist_ok=True)
        get_uploader().config.resolved_temp_dir.mkdir(parents=True, exist_ok=True)

    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()
