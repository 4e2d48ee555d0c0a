"""Reorder Forecaster - projects stockouts and suggests order quantities."""

import time
from datetime import timedelta
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from cafe_backoffice.config import Settings
from cafe_backoffice.db.database import Database
from cafe_backoffice.db.tables import (
    InventoryItemRow,
    ProductRow,
    SaleLineItemRow,
    SalesTransactionRow,
    SupplierRow,
)
from cafe_backoffice.models.reorder import ReorderSuggestion, UrgencyLevel
from cafe_backoffice.services.base import BaseService
from cafe_backoffice.utils.clock import Clock

ZERO = Decimal("0")


def suggest_order_quantity(
    max_stock: Decimal,
    current_stock: Decimal,
    avg_daily_usage: Decimal,
    buffer_days: int = 7,
    round_to: int = 10,
) -> Decimal:
    """
    Quantity that refills to max stock or covers the buffer, whichever is larger.

    The result is rounded up to the next multiple of ``round_to`` and is never
    negative.
    """
    raw = max(max_stock - current_stock, buffer_days * avg_daily_usage, ZERO)
    step = Decimal(round_to)
    return (raw / step).to_integral_value(rounding=ROUND_CEILING) * step


def classify_urgency(current_stock: Decimal, days_until_stockout: Decimal) -> UrgencyLevel:
    """Urgency tier; an empty shelf beats any usage projection."""
    if current_stock <= 0:
        return UrgencyLevel.CRITICAL
    if days_until_stockout <= 2:
        return UrgencyLevel.URGENT
    if days_until_stockout <= 5:
        return UrgencyLevel.HIGH
    if days_until_stockout <= 10:
        return UrgencyLevel.MEDIUM
    return UrgencyLevel.LOW


def reorder_reason(
    current_stock: Decimal,
    days_until_stockout: Decimal,
    avg_daily_usage: Decimal,
    reorder_level: Decimal,
    unit: str,
) -> str:
    if current_stock <= 0:
        return "OUT OF STOCK - Immediate reorder required"
    if days_until_stockout <= 2:
        return f"Stock will run out in {_round(days_until_stockout, '0.1')} days"
    if avg_daily_usage > 0:
        return (
            f"Usage rate: {_round(avg_daily_usage, '0.01')} {unit}/day. "
            "Reorder to maintain buffer."
        )
    return f"Below reorder level of {reorder_level.normalize():f} {unit}"


def _round(value: Decimal, places: str) -> Decimal:
    return value.quantize(Decimal(places), rounding=ROUND_HALF_UP)


class ReorderForecaster(BaseService):
    """
    Forecaster that recommends what to reorder and how urgently.

    Usage velocity is the trailing ``forecast_window_days`` of units sold of
    the products linked to an item, divided by the window length.
    """

    def __init__(
        self,
        database: Database,
        settings: Settings | None = None,
        clock: Clock | None = None,
    ):
        super().__init__("reorder_forecaster", database, settings, clock)
        self.register_tools()

    def register_tools(self) -> None:
        """Register forecaster tools."""
        self.register_tool("get_reorder_suggestions", self.get_reorder_suggestions)

    def suggest(self) -> list[ReorderSuggestion]:
        """
        Build reorder suggestions for every item at or under its reorder level.

        Returns:
            Suggestions sorted by urgency, most urgent first
        """
        start_time = time.time()

        with self.database.session_scope() as session:
            usage_by_item = self._usage_by_item(session)
            rows = session.execute(
                select(InventoryItemRow, SupplierRow.name)
                .outerjoin(SupplierRow, InventoryItemRow.supplier_id == SupplierRow.id)
                .where(InventoryItemRow.quantity <= InventoryItemRow.reorder_level)
                .order_by(InventoryItemRow.id)
            ).all()

            suggestions = [
                self._build(item, supplier_name, usage_by_item.get(item.id, ZERO))
                for item, supplier_name in rows
            ]

        suggestions.sort(key=lambda suggestion: suggestion.urgency, reverse=True)

        self.logger.log_operation(
            "suggest_reorders",
            duration_ms=(time.time() - start_time) * 1000,
            suggestions=len(suggestions),
            critical=sum(1 for s in suggestions if s.urgency == UrgencyLevel.CRITICAL),
        )
        return suggestions

    def get_reorder_suggestions(self) -> dict:
        """JSON-ready wrapper around ``suggest``."""
        suggestions = self.suggest()
        return {
            "suggestions": [
                {**s.model_dump(mode="json"), "urgency_label": s.urgency_label}
                for s in suggestions
            ],
            "total_items": len(suggestions),
        }

    def _usage_by_item(self, session: Session) -> dict[int, Decimal]:
        """Average daily units sold per linked inventory item over the window."""
        window = self.settings.forecast_window_days
        since = self.clock.start_of_day() - timedelta(days=window)

        rows = session.execute(
            select(ProductRow.inventory_item_id, func.sum(SaleLineItemRow.quantity))
            .join(SalesTransactionRow, SaleLineItemRow.transaction_id == SalesTransactionRow.id)
            .join(ProductRow, SaleLineItemRow.product_id == ProductRow.id)
            .where(
                SalesTransactionRow.occurred_at >= since,
                ProductRow.inventory_item_id.is_not(None),
            )
            .group_by(ProductRow.inventory_item_id)
        ).all()

        return {
            item_id: Decimal(str(total or 0)) / Decimal(window)
            for item_id, total in rows
        }

    def _build(
        self,
        item: InventoryItemRow,
        supplier_name: str | None,
        avg_daily_usage: Decimal,
    ) -> ReorderSuggestion:
        current_stock = item.quantity

        if avg_daily_usage > 0:
            days_until_stockout = current_stock / avg_daily_usage
        else:
            days_until_stockout = Decimal(self.settings.stockout_sentinel_days)

        suggested_qty = suggest_order_quantity(
            item.max_stock,
            current_stock,
            avg_daily_usage,
            buffer_days=self.settings.reorder_buffer_days,
            round_to=self.settings.reorder_round_to,
        )

        return ReorderSuggestion(
            item_id=item.id,
            item_name=item.name,
            unit=item.unit,
            current_stock=current_stock,
            reorder_level=item.reorder_level,
            suggested_order_qty=suggested_qty,
            avg_daily_usage=_round(avg_daily_usage, "0.01"),
            days_until_stockout=_round(days_until_stockout, "0.1"),
            urgency=classify_urgency(current_stock, days_until_stockout),
            supplier_id=item.supplier_id,
            supplier_name=supplier_name or "No supplier assigned",
            cost_per_unit=item.cost_per_unit,
            estimated_cost=_round(suggested_qty * item.cost_per_unit, "0.01"),
            reason=reorder_reason(
                current_stock,
                days_until_stockout,
                avg_daily_usage,
                item.reorder_level,
                item.unit,
            ),
        )
