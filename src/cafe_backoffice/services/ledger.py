"""Stock Ledger - the only writer of on-hand quantity during sales."""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from cafe_backoffice.config import Settings
from cafe_backoffice.db.database import Database
from cafe_backoffice.db.tables import InventoryItemRow, StockMovementRow
from cafe_backoffice.exceptions import (
    InsufficientStockError,
    InvalidArgumentError,
    NotFoundError,
)
from cafe_backoffice.models.inventory import InventoryItem, StockDeduction, StockMovement
from cafe_backoffice.services.base import BaseService
from cafe_backoffice.utils.clock import Clock

ZERO = Decimal("0")


class StockLedger(BaseService):
    """
    Ledger that owns current on-hand quantity per inventory item.

    Shortage policy:
    - partial (``allow_partial=True``): remove whatever is on hand, never
      going below zero, and report the unmet remainder as ``shortage``
    - strict (``allow_partial=False``): raise ``InsufficientStockError`` and
      leave the quantity untouched

    The item row is selected ``FOR UPDATE`` so concurrent sales serialize on
    the same item instead of both acting on a stale quantity.
    """

    def __init__(
        self,
        database: Database,
        settings: Settings | None = None,
        clock: Clock | None = None,
    ):
        super().__init__("stock_ledger", database, settings, clock)
        self.register_tools()

    def register_tools(self) -> None:
        """Register ledger tools."""
        self.register_tool("get_stock", self.get_stock)
        self.register_tool("list_movements", self.list_movements)

    def deduct(
        self,
        session: Session,
        item_id: int,
        quantity: Decimal,
        *,
        allow_partial: bool | None = None,
        reference_type: str | None = "sales_transaction",
        reference_id: int | None = None,
        note: str | None = None,
    ) -> StockDeduction:
        """
        Remove stock from an item inside the caller's transaction.

        Args:
            session: Session owning the enclosing transaction
            item_id: Inventory item to deduct from
            quantity: Quantity requested
            allow_partial: Shortage policy; defaults to settings
            reference_type: What caused the movement
            reference_id: Identifier of the causing record
            note: Free-text note for the movement journal

        Returns:
            What was applied and what remains

        Raises:
            InvalidArgumentError: If quantity is not positive
            NotFoundError: If the item does not exist
            InsufficientStockError: On shortage under the strict policy
        """
        if quantity <= 0:
            raise InvalidArgumentError("Deduction quantity must be greater than zero")
        if allow_partial is None:
            allow_partial = self.settings.partial_deductions

        item = session.execute(
            select(InventoryItemRow).where(InventoryItemRow.id == item_id).with_for_update()
        ).scalar_one_or_none()

        if item is None:
            raise NotFoundError("Inventory item", item_id)

        previous = item.quantity
        available = max(previous, ZERO)

        if quantity > available and not allow_partial:
            raise InsufficientStockError(
                item_id=item.id,
                item_name=item.name,
                requested=quantity,
                available=available,
                unit=item.unit,
            )

        applied = min(quantity, available)
        remaining = previous - applied

        if applied > 0:
            now = self.clock.now()
            item.quantity = remaining
            item.updated_at = now
            session.add(
                StockMovementRow(
                    inventory_item_id=item.id,
                    movement_type="sale",
                    quantity=applied,
                    previous_quantity=previous,
                    new_quantity=remaining,
                    reference_type=reference_type,
                    reference_id=reference_id,
                    notes=note,
                    created_at=now,
                )
            )
            session.flush()

        if applied < quantity:
            self.logger.logger.warning(
                "stock_shortage",
                item_id=item.id,
                item_name=item.name,
                requested=str(quantity),
                applied=str(applied),
            )

        return StockDeduction(
            inventory_item_id=item.id,
            item_name=item.name,
            unit=item.unit,
            requested=quantity,
            applied=applied,
            previous_quantity=previous,
            remaining=remaining,
        )

    def get_stock(self, item_id: int) -> InventoryItem:
        """Get the current stock record of an item."""
        with self.database.session_scope() as session:
            item = session.get(InventoryItemRow, item_id)
            if item is None:
                raise NotFoundError("Inventory item", item_id)
            return InventoryItem.model_validate(item)

    def list_movements(
        self,
        limit: int = 200,
        item_id: int | None = None,
    ) -> list[StockMovement]:
        """
        Get recent stock movements, newest first.

        Args:
            limit: Max rows, clamped to 1..movement_list_limit
            item_id: Optional item filter

        Returns:
            Movement journal entries
        """
        limit = max(1, min(limit, self.settings.movement_list_limit))

        query = select(StockMovementRow).order_by(
            StockMovementRow.created_at.desc(), StockMovementRow.id.desc()
        )
        if item_id is not None:
            query = query.where(StockMovementRow.inventory_item_id == item_id)

        with self.database.session_scope() as session:
            rows = session.execute(query.limit(limit)).scalars().all()
            return [StockMovement.model_validate(row) for row in rows]
