"""Typed exception hierarchy for the back-office engine.

Every exception carries a machine-readable ``code`` so callers (HTTP layers,
the automation dispatcher, scheduled jobs) branch on type or code rather than
on message text::

    BackofficeError
    ├── InvalidArgumentError    missing or malformed input, raised before any mutation
    ├── NotFoundError           referenced product/item/alert/supplier is absent
    ├── InsufficientStockError  a deduction would exceed on-hand stock
    └── StorageFailureError     the enclosing atomic unit was rolled back
"""

from decimal import Decimal
from typing import Any


class BackofficeError(Exception):
    """Base class for all engine errors."""

    code: str = "BACKOFFICE_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {"code": self.code, "message": self.message}


class InvalidArgumentError(BackofficeError):
    """A required field is missing or malformed."""

    code = "INVALID_ARGUMENT"


class NotFoundError(BackofficeError):
    """A referenced entity does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' not found")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update({"entity": self.entity, "entity_id": str(self.entity_id)})
        return data


class InsufficientStockError(BackofficeError):
    """A deduction asked for more than is on hand."""

    code = "INSUFFICIENT_STOCK"

    def __init__(
        self,
        item_id: int,
        item_name: str,
        requested: Decimal,
        available: Decimal,
        unit: str,
    ):
        self.item_id = item_id
        self.item_name = item_name
        self.requested = requested
        self.available = available
        self.unit = unit
        super().__init__(
            f"Insufficient stock for '{item_name}': need {requested} {unit}, "
            f"have {available} {unit}"
        )

    @property
    def shortage(self) -> Decimal:
        return self.requested - self.available

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "item_id": self.item_id,
                "item_name": self.item_name,
                "requested": str(self.requested),
                "available": str(self.available),
                "unit": self.unit,
            }
        )
        return data


class StorageFailureError(BackofficeError):
    """The store rejected or failed an atomic unit of work."""

    code = "STORAGE_FAILURE"
