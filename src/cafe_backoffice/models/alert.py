"""Inventory alert models."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AlertKind(str, Enum):
    """Alert kinds, in notification priority order."""

    OUT_OF_STOCK = "out_of_stock"
    LOW_STOCK = "low_stock"
    EXPIRING_SOON = "expiring_soon"


class AlertCandidate(BaseModel):
    """A condition the monitor wants surfaced."""

    inventory_item_id: int
    kind: AlertKind
    message: str
    dedupe_key: str | None = None


class InventoryAlert(BaseModel):
    """Persisted alert."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    inventory_item_id: int
    item_name: str | None = None
    kind: AlertKind
    message: str
    dedupe_key: str | None = None
    is_resolved: bool = False
    created_at: datetime
    resolved_at: datetime | None = None


class StockLevel(BaseModel):
    """Item snapshot reported by a stock scan."""

    id: int
    name: str
    quantity: Decimal
    unit: str
    min_stock: Decimal
    reorder_level: Decimal
    supplier_id: int | None = None


class StockScanResult(BaseModel):
    """Items found low or out of stock in one monitor pass."""

    low_stock_items: list[StockLevel] = Field(default_factory=list)
    out_of_stock_items: list[StockLevel] = Field(default_factory=list)
    alerts_created: int = 0

    @property
    def low_stock_count(self) -> int:
        return len(self.low_stock_items)

    @property
    def out_of_stock_count(self) -> int:
        return len(self.out_of_stock_items)


class ExpiringBatch(BaseModel):
    """Active batch nearing its expiry date."""

    batch_id: int
    batch_number: str
    inventory_item_id: int
    item_name: str
    quantity: Decimal
    unit: str
    expiry_date: date
    days_until_expiry: int


class ExpiryScanResult(BaseModel):
    """Batches found by one expiry pass."""

    items: list[ExpiringBatch] = Field(default_factory=list)
    alerts_created: int = 0

    @property
    def count(self) -> int:
        return len(self.items)
