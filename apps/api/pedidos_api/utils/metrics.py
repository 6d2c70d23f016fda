"""Prometheus metrics."""

from prometheus_client import Counter, Gauge

# Order metrics
orders_created = Counter(
    "pedidos_orders_created_total",
    "Total orders created",
)

orders_approved = Counter(
    "pedidos_orders_approved_total",
    "Total approval requests",
    ["outcome"],
)

orders_deleted = Counter(
    "pedidos_orders_deleted_total",
    "Total orders deleted",
)

orders_in_memory = Gauge(
    "pedidos_orders_in_memory",
    "Orders currently held in memory",
)

# Upload metrics
upload_rejections = Counter(
    "pedidos_upload_rejections_total",
    "Uploads rejected by the validator",
    ["reason"],
)

# Notification metrics
notifications = Counter(
    "pedidos_notifications_total",
    "Approval notifications attempted",
    ["status"],
)
