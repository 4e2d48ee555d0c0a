"""Reorder forecasting and purchasing models."""

from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class UrgencyLevel(int, Enum):
    """Reorder urgency tiers, 5 being most urgent."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3
    URGENT = 4
    CRITICAL = 5

    @property
    def label(self) -> str:
        return self.name


class PurchaseOrderStatus(str, Enum):
    """Purchase order progression."""

    PENDING = "pending"
    ORDERED = "ordered"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class ReorderSuggestion(BaseModel):
    """Recomputed on demand, never persisted."""

    item_id: int
    item_name: str
    unit: str
    current_stock: Decimal
    reorder_level: Decimal
    suggested_order_qty: Decimal
    avg_daily_usage: Decimal
    days_until_stockout: Decimal
    urgency: UrgencyLevel
    supplier_id: int | None = None
    supplier_name: str = "No supplier assigned"
    cost_per_unit: Decimal = Decimal("0")
    estimated_cost: Decimal = Decimal("0")
    reason: str

    @property
    def urgency_label(self) -> str:
        return self.urgency.label


class PurchaseOrderLineRequest(BaseModel):
    """One accepted suggestion to put on an order."""

    item_id: int
    quantity: Decimal = Field(gt=0)
    unit_cost: Decimal = Field(default=Decimal("0"), ge=0)

    @property
    def total_cost(self) -> Decimal:
        return self.quantity * self.unit_cost


class PurchaseOrderLine(BaseModel):
    """Persisted order line."""

    id: int
    inventory_item_id: int
    quantity: Decimal
    unit_cost: Decimal
    total_cost: Decimal


class PurchaseOrderResult(BaseModel):
    """Identifiers and totals of a created purchase order."""

    po_id: int
    po_number: str
    supplier_id: int
    order_date: date
    expected_delivery: date
    status: PurchaseOrderStatus = PurchaseOrderStatus.PENDING
    total_amount: Decimal
    lines: list[PurchaseOrderLine] = Field(default_factory=list)
