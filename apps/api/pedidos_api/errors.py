"""Error taxonomy for the order intake API."""


class PedidosError(Exception):
    """Base class for all domain errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class OrderValidationError(PedidosError):
    """Missing or malformed input on order intake."""

    status_code = 400


class UploadRejected(PedidosError):
    """Uploaded file has a disallowed type or exceeds the size limit."""

    status_code = 400

    def __init__(self, message: str, reason: str = "type"):
        super().__init__(message)
        self.reason = reason


class OrderNotFoundError(PedidosError):
    """No order with the requested id."""

    status_code = 404

    def __init__(self, order_id):
        super().__init__("Pedido no encontrado")
        self.order_id = order_id


class DuplicateOrderError(PedidosError):
    """An order with the same id is already stored."""

    status_code = 500

    def __init__(self, order_id: int):
        super().__init__(f"Order {order_id} already exists")
        self.order_id = order_id
