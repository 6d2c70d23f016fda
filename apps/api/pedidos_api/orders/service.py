"""Order lifecycle: intake and approval."""

import logging
import re
import threading
import time
from dataclasses import dataclass
from typing import Optional

from pedidos_api.errors import OrderValidationError
from pedidos_api.models import Order, OrderStatus, UploadCandidate, UploadDescriptor
from pedidos_api.notifications.service import NotificationDispatcher, NotificationResult
from pedidos_api.orders.store import OrderStore
from pedidos_api.uploads.validator import UploadValidator
from pedidos_api.utils.metrics import orders_approved, orders_created, orders_deleted

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: Optional[str]) -> bool:
    """Check for a basic ``local@domain.tld`` shape."""
    return bool(email) and EMAIL_PATTERN.match(email) is not None


class OrderIdAllocator:
    """Time-derived order ids that never repeat and never go backwards."""

    def __init__(self):
        self._last = 0
        self._lock = threading.Lock()

    def next_id(self) -> int:
        """Allocate the next id: current epoch ms, bumped past the last one."""
        with self._lock:
            self._last = max(int(time.time() * 1000), self._last + 1)
            return self._last


@dataclass
class ApprovalResult:
    """Result of an approval request."""

    order: Order
    changed: bool
    notification: Optional[NotificationResult] = None

    @property
    def email_sent(self) -> bool:
        return self.notification is not None and self.notification.sent


class OrderService:
    """Controls order creation and the pending -> approved transition."""

    def __init__(
        self,
        store: OrderStore,
        validator: UploadValidator,
        dispatcher: NotificationDispatcher,
        id_allocator: Optional[OrderIdAllocator] = None,
    ):
        """Initialize order service."""
        self.store = store
        self.validator = validator
        self.dispatcher = dispatcher
        self.ids = id_allocator or OrderIdAllocator()

    def _validate_email(self, email: Optional[str]) -> str:
        email = (email or "").strip()
        if not email:
            raise OrderValidationError("Faltan datos")
        if not is_valid_email(email):
            raise OrderValidationError("Email inválido")
        return email

    def create(
        self,
        email: Optional[str],
        comment: Optional[str],
        descriptor: Optional[UploadDescriptor],
        source_ip: str = "",
    ) -> Order:
        """Record a new pending order for an accepted upload."""
        email = self._validate_email(email)
        if descriptor is None:
            raise OrderValidationError("Faltan datos")

        order = Order(
            id=self.ids.next_id(),
            email=email,
            comment=comment or "",
            stored_file_name=descriptor.stored_file_name,
            original_file_name=descriptor.original_file_name,
            file_size_bytes=descriptor.size_bytes,
            content_type=descriptor.content_type,
            source_ip=source_ip or "",
            status=OrderStatus.PENDING,
        )
        order = self.store.insert(order)
        orders_created.inc()
        logger.info(f"Order {order.id} received from {order.email} (file {order.stored_file_name})")
        return order

    def submit(
        self,
        email: Optional[str],
        comment: Optional[str],
        candidate: Optional[UploadCandidate],
        source_ip: str = "",
    ) -> Order:
        """
        Full intake: validate input, persist the upload, create the order.

        Email and file presence are checked before any byte is written, so a
        rejected submission never leaves a file behind.
        """
        self._validate_email(email)
        if candidate is None or not candidate.filename:
            raise OrderValidationError("Faltan datos")

        descriptor = self.validator.accept(candidate)
        try:
            return self.create(email, comment, descriptor, source_ip)
        except Exception:
            self.validator.storage.delete(descriptor.stored_file_name)
            raise

    def get(self, order_id: int) -> Order:
        """Get an order by id."""
        return self.store.get(order_id)

    def approve(self, order_id: int) -> ApprovalResult:
        """
        Approve an order and notify the customer.

        Re-approving an approved order is a successful no-op and sends no
        email. The status change is committed to the store before the
        notification is attempted, and a failed notification never undoes it.
        """
        order, changed = self.store.update(order_id, lambda o: o.approve())
        if not changed:
            orders_approved.labels(outcome="noop").inc()
            logger.info(f"Order {order_id} already approved")
            return ApprovalResult(order=order, changed=False)

        orders_approved.labels(outcome="approved").inc()
        logger.info(f"Order {order_id} approved")

        notification = self.dispatcher.notify_approved(order)
        if not notification.sent:
            logger.warning(f"Order {order_id} approved but email not sent: {notification.reason}")
        return ApprovalResult(order=order, changed=True, notification=notification)

    def delete(self, order_id: int) -> Order:
        """Delete an order and its stored file."""
        order = self.store.delete(order_id)
        orders_deleted.inc()
        logger.info(f"Order {order_id} deleted")
        return order
