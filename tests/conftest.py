"""Shared pytest fixtures for AI Artify tests."""

from __future__ import annotations

import io
import shutil
import tempfile
from collections.abc import Generator
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from artify.api.main import create_app
from artify.core.config import ArtifyConfig
from artify.core.gallery_store import GalleryStore, MemoryStorage
from artify.core.gateway import GenerationGateway


class FakeUpstream:
    """Scriptable stand-in for the inference API.

    Every request is recorded in :attr:`requests`.  The reply is rebuilt for
    each call from :attr:`status_code`, :attr:`content` and :attr:`headers`,
    or :attr:`error` is raised to simulate a transport fault.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.content = b""
        self.headers: dict[str, str] = {}
        self.error: Exception | None = None

    def reply(self, status_code: int, content: bytes | str = b"", headers: dict | None = None):
        """Configure the next responses."""
        self.status_code = status_code
        self.content = content.encode("utf-8") if isinstance(content, str) else content
        self.headers = headers or {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, content=self.content, headers=self.headers)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> ArtifyConfig:
    """Configuration with a dummy API key and a temporary data directory."""
    return ArtifyConfig(
        huggingface_api_key="hf_test_key",
        data_dir=temp_dir / "data",
        _env_file=None,
    )


@pytest.fixture
def unconfigured_config(temp_dir: Path, monkeypatch) -> ArtifyConfig:
    """Configuration without an API key."""
    monkeypatch.delenv("HUGGINGFACE_API_KEY", raising=False)
    monkeypatch.delenv("ARTIFY_HUGGINGFACE_API_KEY", raising=False)
    return ArtifyConfig(
        huggingface_api_key=None,
        data_dir=temp_dir / "data",
        _env_file=None,
    )


@pytest.fixture
def png_bytes() -> bytes:
    """A small red PNG image."""
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color="red").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def upstream(png_bytes: bytes) -> FakeUpstream:
    """Fake inference API answering 200 with a PNG by default."""
    fake = FakeUpstream()
    fake.reply(200, png_bytes, {"content-type": "image/png"})
    return fake


@pytest.fixture
def gateway(test_config: ArtifyConfig, upstream: FakeUpstream) -> GenerationGateway:
    """Gateway wired to the fake upstream."""
    return GenerationGateway(test_config, client=upstream.client())


@pytest.fixture
def memory_storage() -> MemoryStorage:
    """Empty in-memory storage backend."""
    return MemoryStorage()


@pytest.fixture
def gallery_store(memory_storage: MemoryStorage) -> GalleryStore:
    """Gallery store backed by in-memory storage."""
    return GalleryStore(memory_storage)


@pytest.fixture
def test_client(test_config: ArtifyConfig, upstream: FakeUpstream) -> Generator[TestClient, None, None]:
    """FastAPI TestClient whose upstream calls go to the fake API."""
    app = create_app(test_config, transport=upstream.transport)
    with TestClient(app) as client:
        yield client
