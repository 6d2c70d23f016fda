"""Domain models."""

from pedidos_api.models.order import Order, OrderStatus
from pedidos_api.models.upload import UploadCandidate, UploadDescriptor

__all__ = [
    "Order",
    "OrderStatus",
    "UploadCandidate",
    "UploadDescriptor",
]
