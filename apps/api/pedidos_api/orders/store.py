"""In-memory order store."""

import copy
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from pedidos_api.errors import DuplicateOrderError, OrderNotFoundError
from pedidos_api.models import Order, OrderStatus
from pedidos_api.storage.service import StorageService
from pedidos_api.utils.metrics import orders_in_memory

logger = logging.getLogger(__name__)


@dataclass
class OrderListing:
    """Snapshot of the store with counts computed at read time."""

    orders: list[Order]
    total: int
    pending: int
    approved: int


class OrderStore:
    """Newest-first collection of orders guarded by a single lock.

    Every public method is atomic with respect to the others and hands back
    copies, so callers never touch the shared records outside the lock.
    """

    def __init__(self, storage: Optional[StorageService] = None):
        """Initialize an empty store."""
        self._orders: list[Order] = []
        self._index: dict[int, Order] = {}
        self._lock = threading.Lock()
        self.storage = storage

    def insert(self, order: Order) -> Order:
        """Prepend an order."""
        with self._lock:
            if order.id in self._index:
                raise DuplicateOrderError(order.id)
            stored = copy.copy(order)
            self._orders.insert(0, stored)
            self._index[stored.id] = stored
            orders_in_memory.set(len(self._orders))
            return copy.copy(stored)

    def get(self, order_id: int) -> Order:
        """Get an order by id."""
        with self._lock:
            order = self._index.get(order_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            return copy.copy(order)

    def list(self) -> OrderListing:
        """List all orders newest-first along with status counts."""
        with self._lock:
            orders = [copy.copy(o) for o in self._orders]
        approved = sum(1 for o in orders if o.status == OrderStatus.APPROVED)
        return OrderListing(
            orders=orders,
            total=len(orders),
            pending=len(orders) - approved,
            approved=approved,
        )

    def count(self) -> int:
        """Number of stored orders."""
        with self._lock:
            return len(self._orders)

    def update(self, order_id: int, mutator: Callable[[Order], object]) -> tuple[Order, object]:
        """
        Apply an in-place mutation to a stored order.

        Returns:
            Tuple of (copy of the updated order, mutator return value)
        """
        with self._lock:
            order = self._index.get(order_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            result = mutator(order)
            return copy.copy(order), result

    def delete(self, order_id: int) -> Order:
        """Remove an order and clean up its backing file."""
        with self._lock:
            order = self._index.pop(order_id, None)
            if order is None:
                raise OrderNotFoundError(order_id)
            self._orders.remove(order)
            orders_in_memory.set(len(self._orders))

        if self.storage is not None:
            try:
                if not self.storage.delete(order.stored_file_name):
                    logger.info(f"File for order {order_id} already gone: {order.stored_file_name}")
            except (OSError, ValueError) as e:
                logger.error(f"Failed to delete file {order.stored_file_name} for order {order_id}: {e}")
        return order
