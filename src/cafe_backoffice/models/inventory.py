"""Inventory management models."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class BatchStatus(str, Enum):
    """Lifecycle of an inventory batch."""

    ACTIVE = "active"
    DEPLETED = "depleted"
    EXPIRED = "expired"


class InventoryItem(BaseModel):
    """Inventory item with stock levels."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    category: str | None = None
    quantity: Decimal = Field(ge=0)
    unit: str = "pcs"
    min_stock: Decimal = Decimal("0")
    max_stock: Decimal = Decimal("0")
    reorder_level: Decimal = Decimal("0")
    cost_per_unit: Decimal = Decimal("0")
    supplier_id: int | None = None
    updated_at: datetime | None = None

    @property
    def is_low_stock(self) -> bool:
        """Check if item is at or under its reorder level but not empty."""
        return 0 < self.quantity <= self.reorder_level

    @property
    def is_out_of_stock(self) -> bool:
        """Check if nothing is left on hand."""
        return self.quantity <= 0


class RecipeIngredient(BaseModel):
    """One line of a product's bill of materials."""

    product_id: str
    inventory_item_id: int
    ingredient_name: str
    quantity: Decimal = Field(gt=0, description="Quantity consumed per unit sold")
    unit: str
    notes: str | None = None
    cost_per_unit: Decimal = Decimal("0")

    @property
    def ingredient_cost(self) -> Decimal:
        return (self.quantity * self.cost_per_unit).quantize(Decimal("0.0001"))


class IngredientAvailability(BaseModel):
    """Whether one ingredient covers a prospective sale."""

    inventory_item_id: int
    ingredient_name: str
    required_per_unit: Decimal
    total_required: Decimal
    available: Decimal
    remaining_after_sale: Decimal
    unit: str

    @property
    def is_available(self) -> bool:
        return self.remaining_after_sale >= 0


class ProductAvailability(BaseModel):
    """Availability of every ingredient for a product and quantity."""

    product_id: str
    quantity: Decimal
    ingredients: list[IngredientAvailability] = Field(default_factory=list)

    @property
    def all_available(self) -> bool:
        return all(ingredient.is_available for ingredient in self.ingredients)


class StockDeduction(BaseModel):
    """Outcome of one ledger deduction."""

    inventory_item_id: int
    item_name: str
    unit: str
    requested: Decimal
    applied: Decimal
    previous_quantity: Decimal
    remaining: Decimal

    @property
    def shortage(self) -> Decimal:
        return self.requested - self.applied

    @property
    def is_complete(self) -> bool:
        return self.applied == self.requested


class StockMovement(BaseModel):
    """Audit record of an applied stock change."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    inventory_item_id: int
    movement_type: str
    quantity: Decimal
    previous_quantity: Decimal
    new_quantity: Decimal
    reference_type: str | None = None
    reference_id: int | None = None
    notes: str | None = None
    created_at: datetime

    @property
    def net_change(self) -> Decimal:
        return self.new_quantity - self.previous_quantity
