"""Sale-related data models."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class SaleErrorKind(str, Enum):
    """Why an ingredient deduction did not fully apply."""

    INSUFFICIENT_STOCK = "insufficient_stock"
    MISSING_PRODUCT = "missing_product"
    MISSING_ITEM = "missing_item"
    STORAGE = "storage"


class SaleLine(BaseModel):
    """Individual product line in a sale."""

    product_id: str | None = None
    product_name: str = Field(min_length=1)
    quantity: Decimal = Field(gt=0)
    unit_price: Decimal = Field(ge=0, decimal_places=2)

    @field_validator("product_id")
    @classmethod
    def blank_product_is_none(cls, v: str | None) -> str | None:
        """Treat an empty product reference as no product."""
        if v is not None and not v.strip():
            return None
        return v

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


class SaleRequest(BaseModel):
    """A finalized cart handed over by the point of sale."""

    reference: str | None = None
    total_amount: Decimal = Field(ge=0, decimal_places=2)
    lines: list[SaleLine] = Field(default_factory=list)
    occurred_at: datetime | None = None


class AppliedDeduction(BaseModel):
    """Stock actually removed for one ingredient of a sale line."""

    inventory_item_id: int
    item_name: str
    product_id: str
    deducted: Decimal
    unit: str
    previous_quantity: Decimal
    new_quantity: Decimal


class DeductionError(BaseModel):
    """Per-ingredient problem recorded against a sale line."""

    kind: SaleErrorKind
    product_id: str | None = None
    inventory_item_id: int | None = None
    item_name: str | None = None
    required: Decimal | None = None
    available: Decimal | None = None
    shortage: Decimal | None = None
    unit: str | None = None
    message: str


class DeductionResult(BaseModel):
    """Outcome of deducting stock for one sale line."""

    line_index: int
    product_id: str | None = None
    quantity: Decimal
    deductions: list[AppliedDeduction] = Field(default_factory=list)
    errors: list[DeductionError] = Field(default_factory=list)
    skipped: bool = False

    @property
    def success(self) -> bool:
        return not self.errors


class SaleResult(BaseModel):
    """Identifiers and the inventory summary for a recorded sale."""

    transaction_id: int
    reference: str
    total_amount: Decimal
    lines: list[DeductionResult] = Field(default_factory=list)

    @property
    def deductions(self) -> list[AppliedDeduction]:
        return [deduction for line in self.lines for deduction in line.deductions]

    @property
    def errors(self) -> list[DeductionError]:
        return [error for line in self.lines for error in line.errors]

    @property
    def fully_deducted(self) -> bool:
        return not self.errors

    def summary(self) -> dict:
        """JSON-ready summary for callers."""
        return {
            "transaction_id": self.transaction_id,
            "reference": self.reference,
            "total_amount": str(self.total_amount),
            "deductions": [d.model_dump(mode="json") for d in self.deductions],
            "errors": [e.model_dump(mode="json") for e in self.errors],
        }
