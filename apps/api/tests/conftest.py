"""Pytest configuration and fixtures."""

import io
import os
import tempfile

# Keep the module-level app away from the working tree and the network
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="pedidos-uploads-"))
os.environ.setdefault("NOTIFICATIONS_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from pedidos_api.main import create_app
from pedidos_api.models import Order
from pedidos_api.notifications.service import NotificationDispatcher, NotificationResult
from pedidos_api.orders.store import OrderStore
from pedidos_api.settings import Settings
from pedidos_api.storage.service import StorageService

PNG_HEADER = b"\x89PNG\r\n\x1a\n"


class FakeDispatcher(NotificationDispatcher):
    """Records approval notifications instead of sending them."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.sent: list[Order] = []

    def notify_approved(self, order: Order) -> NotificationResult:
        self.sent.append(order)
        if self.succeed:
            return NotificationResult.succeeded()
        return NotificationResult.failed("relay unavailable")


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a temporary upload directory."""
    return Settings(
        _env_file=None,
        upload_dir=str(tmp_path / "uploads"),
        gmail_user=None,
        gmail_pass=None,
    )


@pytest.fixture
def storage(settings) -> StorageService:
    """Storage rooted in the temporary upload directory."""
    return StorageService(settings.upload_dir)


@pytest.fixture
def store(storage) -> OrderStore:
    """Fresh, isolated order store."""
    return OrderStore(storage)


@pytest.fixture
def dispatcher() -> FakeDispatcher:
    """Notification dispatcher that always succeeds."""
    return FakeDispatcher()


@pytest.fixture
def app(settings, store, dispatcher):
    """Application wired with isolated store and fake dispatcher."""
    return create_app(settings=settings, store=store, dispatcher=dispatcher)


@pytest.fixture
def client(app) -> TestClient:
    """Test client for the isolated application."""
    return TestClient(app)


def png_bytes(size: int = 1024) -> bytes:
    """PNG-looking payload of the given size."""
    return PNG_HEADER + b"\x00" * max(0, size - len(PNG_HEADER))


def proof_file(name: str = "proof.png", content_type: str = "image/png", size: int = 1024):
    """Multipart file tuple for the ``comprobante`` field."""
    return {"comprobante": (name, io.BytesIO(png_bytes(size)), content_type)}
