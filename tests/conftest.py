"""
Shared fixtures.

API tests run against the real application with two overrides: settings
built in-process (no .env needed) and a fresh in-memory store per test.
"""

from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from src.api.dependencies import get_storage_client
from src.config.settings import Settings, get_settings
from src.infrastructure.storage.client import MockStorageClient
from src.main import create_app

ADMIN_PASSWORD = "correct horse battery staple"
PUBLIC_URL = "https://images.example.com"


def _make_image(fmt: str = "PNG", size: tuple[int, int] = (4, 4), mode: str = "RGB") -> bytes:
    """A tiny real image so Pillow has something to decode."""
    buffer = BytesIO()
    Image.new(mode, size, color="red" if mode == "RGB" else 1).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def make_image():
    return _make_image


@pytest.fixture
def png_bytes() -> bytes:
    return _make_image("PNG")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        admin_password=ADMIN_PASSWORD,
        session_secret="test-signing-key",
        r2_mock_mode=True,
        r2_public_url=PUBLIC_URL + "/",
        max_file_size=4096,
    )


@pytest.fixture
def storage() -> MockStorageClient:
    return MockStorageClient()


@pytest.fixture
def app(settings, storage):
    application = create_app()
    application.dependency_overrides[get_settings] = lambda: settings
    application.dependency_overrides[get_storage_client] = lambda: storage
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def logged_in_client(client):
    response = client.post("/api/auth/login", json={"password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return client
