"""
Error kinds raised by the inventory core.

Every error is scoped to the request that triggered it and is raised before
any state is changed, so callers can surface ``message`` and ``kind``
directly and retrying the same request will fail the same way.
"""


class InventoryError(Exception):
    """Base class for recoverable inventory errors."""

    kind = "InventoryError"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict:
        return {"message": self.message, "kind": self.kind}


class ValidationError(InventoryError):
    """Malformed input: non-positive quantity, empty reason, unknown movement type."""

    kind = "ValidationError"
    status_code = 400


class NotFoundError(InventoryError):
    kind = "NotFoundError"
    status_code = 404


class InsufficientStockError(InventoryError):
    """An outward movement asked for more than is on hand."""

    kind = "InsufficientStockError"
    status_code = 409

    def __init__(self, component_id: str, available: int, requested: int):
        self.component_id = component_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for component {component_id}: "
            f"requested {requested}, available {available}"
        )

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["available"] = self.available
        payload["requested"] = self.requested
        return payload
