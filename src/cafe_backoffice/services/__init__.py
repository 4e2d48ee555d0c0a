"""Engine services: recipes, stock ledger, sales, alerts and reordering."""

from cafe_backoffice.services.alerts import AlertDeduplicator
from cafe_backoffice.services.automation import AutomationService
from cafe_backoffice.services.base import BaseService, ToolResult
from cafe_backoffice.services.forecaster import ReorderForecaster
from cafe_backoffice.services.ledger import StockLedger
from cafe_backoffice.services.monitor import StockMonitor
from cafe_backoffice.services.purchasing import PurchaseOrderBuilder
from cafe_backoffice.services.recipes import RecipeResolver
from cafe_backoffice.services.sales import SaleFulfillmentCoordinator

__all__ = [
    "AlertDeduplicator",
    "AutomationService",
    "BaseService",
    "ReorderForecaster",
    "SaleFulfillmentCoordinator",
    "StockLedger",
    "StockMonitor",
    "PurchaseOrderBuilder",
    "RecipeResolver",
    "ToolResult",
]
