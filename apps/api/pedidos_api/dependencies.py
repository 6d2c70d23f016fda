"""FastAPI dependencies resolving per-app services."""

from fastapi import Request

from pedidos_api.orders.service import OrderService
from pedidos_api.orders.store import OrderStore
from pedidos_api.storage.service import StorageService


def get_order_service(request: Request) -> OrderService:
    """Get the order service owned by the running app."""
    return request.app.state.order_service


def get_order_store(request: Request) -> OrderStore:
    """Get the order store owned by the running app."""
    return request.app.state.order_service.store


def get_storage(request: Request) -> StorageService:
    """Get the upload storage owned by the running app."""
    return request.app.state.storage
