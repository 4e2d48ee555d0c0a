"""Purchase Order Builder - turns accepted reorder suggestions into orders."""

import time
import uuid
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Sequence

from pydantic import ValidationError
from sqlalchemy import select

from cafe_backoffice.config import Settings
from cafe_backoffice.db.database import Database
from cafe_backoffice.db.tables import (
    InventoryItemRow,
    PurchaseOrderLineRow,
    PurchaseOrderRow,
    SupplierRow,
)
from cafe_backoffice.exceptions import InvalidArgumentError, NotFoundError
from cafe_backoffice.models.reorder import (
    PurchaseOrderLine,
    PurchaseOrderLineRequest,
    PurchaseOrderResult,
    PurchaseOrderStatus,
    ReorderSuggestion,
)
from cafe_backoffice.services.base import BaseService
from cafe_backoffice.utils.clock import Clock

CENT = Decimal("0.01")
AUTO_PO_NOTES = "Auto-generated reorder based on stock levels and sales velocity"


class PurchaseOrderBuilder(BaseService):
    """Builder that persists a purchase order header and its lines atomically."""

    def __init__(
        self,
        database: Database,
        settings: Settings | None = None,
        clock: Clock | None = None,
    ):
        super().__init__("purchase_order_builder", database, settings, clock)
        self.register_tools()

    def register_tools(self) -> None:
        """Register purchasing tools."""
        self.register_tool("create_auto_po", self.create_auto_po)

    def create_from_suggestions(
        self,
        supplier_id: int | None,
        items: Sequence[PurchaseOrderLineRequest | dict[str, Any]],
    ) -> PurchaseOrderResult:
        """
        Create a pending purchase order for one supplier.

        Args:
            supplier_id: Supplier the order goes to
            items: Lines with item id, quantity and unit cost

        Returns:
            The created order with its total

        Raises:
            InvalidArgumentError: If the supplier or lines are missing or malformed
            NotFoundError: If the supplier or an item does not exist
            StorageFailureError: If the order could not be saved; nothing is kept
        """
        start_time = time.time()

        if not supplier_id:
            raise InvalidArgumentError("Supplier ID required")
        if not items:
            raise InvalidArgumentError("Purchase order needs at least one item")

        try:
            lines = [
                item
                if isinstance(item, PurchaseOrderLineRequest)
                else PurchaseOrderLineRequest.model_validate(item)
                for item in items
            ]
        except ValidationError as e:
            raise InvalidArgumentError(f"Invalid purchase order line: {e}") from e

        today = self.clock.today()
        po_number = self._po_number(today)

        with self.database.session_scope() as session:
            if session.get(SupplierRow, supplier_id) is None:
                raise NotFoundError("Supplier", supplier_id)

            item_ids = {line.item_id for line in lines}
            known_ids = set(
                session.execute(
                    select(InventoryItemRow.id).where(InventoryItemRow.id.in_(item_ids))
                ).scalars()
            )
            missing = sorted(item_ids - known_ids)
            if missing:
                raise NotFoundError("Inventory item", missing[0])

            order = PurchaseOrderRow(
                po_number=po_number,
                supplier_id=supplier_id,
                order_date=today,
                expected_delivery=today + timedelta(days=self.settings.purchase_order_lead_days),
                status=PurchaseOrderStatus.PENDING.value,
                total_amount=Decimal("0"),
                notes=AUTO_PO_NOTES,
            )
            session.add(order)
            session.flush()

            total = Decimal("0")
            for line in lines:
                line_total = line.total_cost.quantize(CENT, rounding=ROUND_HALF_UP)
                order.items.append(
                    PurchaseOrderLineRow(
                        inventory_item_id=line.item_id,
                        quantity=line.quantity,
                        unit_cost=line.unit_cost,
                        total_cost=line_total,
                    )
                )
                total += line_total

            order.total_amount = total
            session.flush()

            result = PurchaseOrderResult(
                po_id=order.id,
                po_number=order.po_number,
                supplier_id=order.supplier_id,
                order_date=order.order_date,
                expected_delivery=order.expected_delivery,
                status=PurchaseOrderStatus(order.status),
                total_amount=total,
                lines=[
                    PurchaseOrderLine(
                        id=row.id,
                        inventory_item_id=row.inventory_item_id,
                        quantity=row.quantity,
                        unit_cost=row.unit_cost,
                        total_cost=row.total_cost,
                    )
                    for row in order.items
                ],
            )

        self.logger.log_operation(
            "create_purchase_order",
            duration_ms=(time.time() - start_time) * 1000,
            po_number=result.po_number,
            supplier_id=supplier_id,
            lines=len(result.lines),
            total=str(result.total_amount),
        )
        return result

    def create_auto_po(
        self,
        supplier_id: int | None = None,
        items: Sequence[PurchaseOrderLineRequest | dict[str, Any]] = (),
    ) -> dict:
        """JSON-ready wrapper around ``create_from_suggestions``."""
        result = self.create_from_suggestions(supplier_id, items)
        return {
            "po_id": result.po_id,
            "po_number": result.po_number,
            "total_amount": str(result.total_amount),
            "items_count": len(result.lines),
            "message": "Purchase order created successfully",
        }

    @staticmethod
    def lines_from_suggestions(
        suggestions: Iterable[ReorderSuggestion],
    ) -> list[PurchaseOrderLineRequest]:
        """Turn suggestions into order lines at their suggested quantity and cost."""
        return [
            PurchaseOrderLineRequest(
                item_id=suggestion.item_id,
                quantity=suggestion.suggested_order_qty,
                unit_cost=suggestion.cost_per_unit,
            )
            for suggestion in suggestions
            if suggestion.suggested_order_qty > 0
        ]

    @staticmethod
    def _po_number(today) -> str:
        return f"PO-{today:%Y%m%d}-{uuid.uuid4().hex[-6:].upper()}"
