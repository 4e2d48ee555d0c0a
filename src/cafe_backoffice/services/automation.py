"""Automation Service - single entry point routing actions to the engine services."""

from typing import Any

from cafe_backoffice.config import Settings
from cafe_backoffice.db.database import Database
from cafe_backoffice.services.alerts import AlertDeduplicator
from cafe_backoffice.services.base import BaseService, ToolResult
from cafe_backoffice.services.forecaster import ReorderForecaster
from cafe_backoffice.services.ledger import StockLedger
from cafe_backoffice.services.monitor import StockMonitor
from cafe_backoffice.services.purchasing import PurchaseOrderBuilder
from cafe_backoffice.services.recipes import RecipeResolver
from cafe_backoffice.services.sales import SaleFulfillmentCoordinator
from cafe_backoffice.utils.clock import Clock


class AutomationService(BaseService):
    """
    Front door for back-office automation actions.

    Every service shares one database handle, settings object and clock.
    Actions are dispatched by name to the service that owns them, so callers
    (scripts, schedulers, an HTTP layer) only need to know the action name.
    """

    def __init__(
        self,
        database: Database,
        settings: Settings | None = None,
        clock: Clock | None = None,
    ):
        super().__init__("automation", database, settings, clock)

        self.recipes = RecipeResolver(database, self.settings, self.clock)
        self.ledger = StockLedger(database, self.settings, self.clock)
        self.alerts = AlertDeduplicator(database, self.settings, self.clock)
        self.monitor = StockMonitor(database, self.settings, self.clock, alerts=self.alerts)
        self.forecaster = ReorderForecaster(database, self.settings, self.clock)
        self.purchasing = PurchaseOrderBuilder(database, self.settings, self.clock)
        self.sales = SaleFulfillmentCoordinator(
            database,
            self.settings,
            self.clock,
            recipes=self.recipes,
            ledger=self.ledger,
        )

        # Action name -> owning service
        self.routes: dict[str, BaseService] = {
            "check_low_stock": self.monitor,
            "get_expiring_items": self.monitor,
            "get_notifications": self.alerts,
            "dismiss_notification": self.alerts,
            "get_reorder_suggestions": self.forecaster,
            "create_auto_po": self.purchasing,
            "record_sale": self.sales,
            "check_availability": self.recipes,
            "recipe_cost": self.recipes,
            "list_movements": self.ledger,
        }
        self.register_tools()

    def register_tools(self) -> None:
        """Register automation tools."""
        self.register_tool("run_checks", self.run_checks)

    @property
    def actions(self) -> list[str]:
        """Every action name this service answers to."""
        return sorted(set(self.routes) | set(self.tools))

    def execute(self, action: str, params: dict[str, Any] | None = None) -> ToolResult:
        """
        Run an action by name.

        Args:
            action: Action name, e.g. ``check_low_stock``
            params: Keyword arguments for the action

        Returns:
            ToolResult from the owning service; unknown actions fail with NOT_FOUND
        """
        params = params or {}
        service = self.routes.get(action)

        self.logger.log_operation(
            "dispatch",
            target=action,
            routed_to=service.service_id if service else self.service_id,
        )

        if service is None:
            return self.execute_tool(action, params)
        return service.execute_tool(action, params)

    def run_checks(self) -> dict[str, Any]:
        """Run the stock and expiry scans together, as a scheduler would."""
        stock = self.monitor.scan()
        expiry = self.monitor.scan_expiring()
        return {
            "low_stock_count": stock.low_stock_count,
            "out_of_stock_count": stock.out_of_stock_count,
            "expiring_count": expiry.count,
            "alerts_created": stock.alerts_created + expiry.alerts_created,
        }
