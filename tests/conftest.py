from __future__ import annotations

import io
import sys
from collections.abc import AsyncIterator, Callable, Iterator
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from starlette.datastructures import Headers, UploadFile

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from uploader.api.v1.endpoints.uploads import get_uploader  # noqa: E402
from uploader.core.config import get_settings  # noqa: E402
from uploader.main import create_app  # noqa: E402


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    # cwd may be reported through a resolved symlink; compare against that.
    return Path.cwd()


@pytest.fixture
def make_upload() -> Callable[..., UploadFile]:
    def _make(
        filename: str,
        data: bytes = b"",
        *,
        content_type: str = "application/octet-stream",
        size: int | None = -1,
    ) -> UploadFile:
        return UploadFile(
            file=io.BytesIO(data),
            size=len(data) if size == -1 else size,
            filename=filename,
            headers=Headers({"content-type": content_type}),
        )

    return _make


@pytest.fixture
def upload_env(workdir: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[pytest.MonkeyPatch]:
    monkeypatch.setenv("UPLOAD_BASE_PATH", "uploads")
    monkeypatch.setenv("UPLOAD_TEMP_DIR", "temp_uploads")
    monkeypatch.setenv("UPLOAD_ALLOWED_EXTENSIONS", "jpg")
    monkeypatch.setenv("UPLOAD_MAX_FILE_SIZE_BYTES", "1000")
    get_settings.cache_clear()
    get_uploader.cache_clear()

    yield monkeypatch

    get_settings.cache_clear()
    get_uploader.cache_clear()


@pytest_asyncio.fixture
async def client(upload_env: pytest.MonkeyPatch) -> AsyncIterator[httpx.AsyncClient]:
    app = create_app()
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
