"""Order model for payment-proof submissions."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class OrderStatus(str, Enum):
    """Order lifecycle states."""

    PENDING = "pendiente"
    APPROVED = "aprobado"


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class Order:
    """A customer submission: contact email, comment and proof of payment."""

    id: int
    email: str
    stored_file_name: str
    comment: str = ""
    original_file_name: str = ""
    file_size_bytes: int = 0
    content_type: str = ""
    source_ip: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: OrderStatus = OrderStatus.PENDING
    approved_at: Optional[datetime] = None

    @property
    def is_approved(self) -> bool:
        """Check if the order has been approved."""
        return self.status == OrderStatus.APPROVED

    def approve(self, when: Optional[datetime] = None) -> bool:
        """Move the order to approved. Returns False if it already was."""
        if self.is_approved:
            return False
        self.status = OrderStatus.APPROVED
        self.approved_at = when or datetime.now(timezone.utc)
        return True

    def to_dict(self) -> dict:
        """Serialize to the public JSON shape."""
        return {
            "id": self.id,
            "email": self.email,
            "comentario": self.comment,
            "archivo": self.stored_file_name,
            "nombreOriginal": self.original_file_name,
            "tamano": self.file_size_bytes,
            "tipo": self.content_type,
            "fecha": _isoformat(self.created_at),
            "estado": self.status.value,
            "aprobadoEn": _isoformat(self.approved_at),
            "ip": self.source_ip,
        }
