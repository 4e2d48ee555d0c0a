"""Data models for the back-office engine."""

from cafe_backoffice.models.alert import (
    AlertCandidate,
    AlertKind,
    ExpiringBatch,
    ExpiryScanResult,
    InventoryAlert,
    StockLevel,
    StockScanResult,
)
from cafe_backoffice.models.inventory import (
    BatchStatus,
    IngredientAvailability,
    InventoryItem,
    ProductAvailability,
    RecipeIngredient,
    StockDeduction,
    StockMovement,
)
from cafe_backoffice.models.reorder import (
    PurchaseOrderLine,
    PurchaseOrderLineRequest,
    PurchaseOrderResult,
    PurchaseOrderStatus,
    ReorderSuggestion,
    UrgencyLevel,
)
from cafe_backoffice.models.sale import (
    AppliedDeduction,
    DeductionError,
    DeductionResult,
    SaleErrorKind,
    SaleLine,
    SaleRequest,
    SaleResult,
)

__all__ = [
    # Alerts
    "AlertCandidate",
    "AlertKind",
    "ExpiringBatch",
    "ExpiryScanResult",
    "InventoryAlert",
    "StockLevel",
    "StockScanResult",
    # Inventory
    "BatchStatus",
    "IngredientAvailability",
    "InventoryItem",
    "ProductAvailability",
    "RecipeIngredient",
    "StockDeduction",
    "StockMovement",
    # Reorder
    "PurchaseOrderLine",
    "PurchaseOrderLineRequest",
    "PurchaseOrderResult",
    "PurchaseOrderStatus",
    "ReorderSuggestion",
    "UrgencyLevel",
    # Sale
    "AppliedDeduction",
    "DeductionError",
    "DeductionResult",
    "SaleErrorKind",
    "SaleLine",
    "SaleRequest",
    "SaleResult",
]
