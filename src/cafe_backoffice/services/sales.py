"""Sale Fulfillment Coordinator - records sales and deducts their ingredients."""

import time
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Sequence

from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cafe_backoffice.config import Settings
from cafe_backoffice.db.database import Database
from cafe_backoffice.db.tables import SaleLineItemRow, SalesTransactionRow
from cafe_backoffice.exceptions import (
    InsufficientStockError,
    InvalidArgumentError,
    NotFoundError,
)
from cafe_backoffice.models.inventory import RecipeIngredient
from cafe_backoffice.models.sale import (
    AppliedDeduction,
    DeductionError,
    DeductionResult,
    SaleErrorKind,
    SaleLine,
    SaleRequest,
    SaleResult,
)
from cafe_backoffice.services.base import BaseService
from cafe_backoffice.services.ledger import StockLedger
from cafe_backoffice.services.recipes import RecipeResolver
from cafe_backoffice.utils.clock import Clock

NO_REFERENCE = "N/A"


class SaleFulfillmentCoordinator(BaseService):
    """
    Coordinator that turns a finalized cart into a persisted sale.

    Transaction model:
    - The header and its line items are one all-or-nothing unit. A failure
      there rolls everything back and surfaces as ``StorageFailureError``.
    - Ingredient deductions run afterwards, each inside its own SAVEPOINT of
      the same transaction. A shortage or a failed deduction is collected as
      an error entry and never unwinds the sale.
    """

    def __init__(
        self,
        database: Database,
        settings: Settings | None = None,
        clock: Clock | None = None,
        recipes: RecipeResolver | None = None,
        ledger: StockLedger | None = None,
    ):
        super().__init__("sale_coordinator", database, settings, clock)
        self.recipes = recipes or RecipeResolver(database, self.settings, self.clock)
        self.ledger = ledger or StockLedger(database, self.settings, self.clock)
        self.register_tools()

    def register_tools(self) -> None:
        """Register coordinator tools."""
        self.register_tool("record_sale", self.record_sale_summary)

    def record_sale(
        self,
        reference: str | None,
        total_amount: Decimal | float | str,
        lines: Sequence[SaleLine | dict[str, Any]],
        occurred_at: datetime | None = None,
    ) -> SaleResult:
        """
        Record a sale and deduct the stock its products consume.

        Args:
            reference: Receipt reference; generated when empty or "N/A"
            total_amount: Sale total
            lines: Sold products with quantity and unit price
            occurred_at: When the sale happened; defaults to now

        Returns:
            Transaction identifiers plus applied deductions and errors

        Raises:
            InvalidArgumentError: If the sale payload is malformed
            StorageFailureError: If the header or lines could not be saved
        """
        start_time = time.time()
        request = self._validate(reference, total_amount, lines, occurred_at)
        now = self.clock.now()

        with self.database.session_scope() as session:
            sale_reference = self._normalize_reference(request.reference)
            if sale_reference is None:
                sale_reference = self._next_reference(session, now)

            transaction = SalesTransactionRow(
                reference=sale_reference,
                total=request.total_amount,
                occurred_at=request.occurred_at or now,
                created_at=now,
            )
            transaction.items = [
                SaleLineItemRow(
                    product_id=line.product_id,
                    product_name=line.product_name,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
                for line in request.lines
            ]
            session.add(transaction)
            session.flush()

            line_results = [
                self._fulfil_line(session, transaction.id, index, line)
                for index, line in enumerate(request.lines)
            ]

            result = SaleResult(
                transaction_id=transaction.id,
                reference=sale_reference,
                total_amount=request.total_amount,
                lines=line_results,
            )

        self.logger.log_operation(
            "record_sale",
            duration_ms=(time.time() - start_time) * 1000,
            transaction_id=result.transaction_id,
            reference=result.reference,
            lines=len(request.lines),
            deductions=len(result.deductions),
            errors=len(result.errors),
        )

        return result

    def record_sale_summary(
        self,
        reference: str | None = None,
        total_amount: Decimal | float | str = 0,
        lines: Sequence[SaleLine | dict[str, Any]] = (),
        occurred_at: datetime | None = None,
    ) -> dict[str, Any]:
        """Record a sale and return its JSON-ready summary."""
        return self.record_sale(reference, total_amount, lines, occurred_at).summary()

    def _validate(
        self,
        reference: str | None,
        total_amount: Decimal | float | str,
        lines: Sequence[SaleLine | dict[str, Any]],
        occurred_at: datetime | None,
    ) -> SaleRequest:
        """Build the request model, mapping validation failures to InvalidArgumentError."""
        try:
            return SaleRequest(
                reference=reference,
                total_amount=total_amount,
                lines=[
                    line if isinstance(line, SaleLine) else SaleLine.model_validate(line)
                    for line in lines
                ],
                occurred_at=occurred_at,
            )
        except ValidationError as e:
            raise InvalidArgumentError(f"Invalid sale: {e}") from e

    @staticmethod
    def _normalize_reference(reference: str | None) -> str | None:
        """Return the caller's reference, or None when one must be generated."""
        if reference is None:
            return None
        trimmed = reference.strip()
        if not trimmed or trimmed.upper() == NO_REFERENCE:
            return None
        return trimmed

    def _next_reference(self, session: Session, now: datetime) -> str:
        """
        Generate ``<prefix><YYYYMMDD>-<NNNN>`` from today's sale count.

        The sequence starts at today's count + 1 and moves forward past any
        reference already taken, so a generated reference never collides.
        """
        day_start = self.clock.start_of_day(now.date())
        day_end = day_start + timedelta(days=1)

        todays_count = session.execute(
            select(func.count(SalesTransactionRow.id)).where(
                SalesTransactionRow.created_at >= day_start,
                SalesTransactionRow.created_at < day_end,
            )
        ).scalar_one()

        prefix = f"{self.settings.sale_reference_prefix}{now:%Y%m%d}-"
        sequence = todays_count + 1
        while True:
            candidate = f"{prefix}{sequence:04d}"
            taken = session.execute(
                select(SalesTransactionRow.id).where(SalesTransactionRow.reference == candidate)
            ).first()
            if taken is None:
                return candidate
            sequence += 1

    def _fulfil_line(
        self,
        session: Session,
        transaction_id: int,
        index: int,
        line: SaleLine,
    ) -> DeductionResult:
        """Deduct every ingredient of one sale line, collecting failures."""
        result = DeductionResult(
            line_index=index,
            product_id=line.product_id,
            quantity=line.quantity,
        )

        if line.product_id is None or line.quantity <= 0:
            result.skipped = True
            return result

        try:
            ingredients = self.recipes.resolve_in(session, line.product_id)
        except NotFoundError as e:
            result.errors.append(
                DeductionError(
                    kind=SaleErrorKind.MISSING_PRODUCT,
                    product_id=line.product_id,
                    message=e.message,
                )
            )
            return result

        for ingredient in ingredients:
            self._deduct_ingredient(session, transaction_id, line, ingredient, result)

        return result

    def _deduct_ingredient(
        self,
        session: Session,
        transaction_id: int,
        line: SaleLine,
        ingredient: RecipeIngredient,
        result: DeductionResult,
    ) -> None:
        """Run one ledger deduction inside a savepoint."""
        required = ingredient.quantity * line.quantity
        savepoint = session.begin_nested()

        try:
            deduction = self.ledger.deduct(
                session,
                ingredient.inventory_item_id,
                required,
                reference_id=transaction_id,
                note=f"Auto-deducted for product: {line.product_id} (qty: {line.quantity})",
            )
        except InsufficientStockError as e:
            savepoint.rollback()
            result.errors.append(
                DeductionError(
                    kind=SaleErrorKind.INSUFFICIENT_STOCK,
                    product_id=line.product_id,
                    inventory_item_id=e.item_id,
                    item_name=e.item_name,
                    required=e.requested,
                    available=e.available,
                    shortage=e.shortage,
                    unit=ingredient.unit,
                    message=e.message,
                )
            )
            return
        except NotFoundError as e:
            savepoint.rollback()
            result.errors.append(
                DeductionError(
                    kind=SaleErrorKind.MISSING_ITEM,
                    product_id=line.product_id,
                    inventory_item_id=ingredient.inventory_item_id,
                    item_name=ingredient.ingredient_name,
                    message=e.message,
                )
            )
            return
        except SQLAlchemyError as e:
            savepoint.rollback()
            self.logger.log_error(
                error=str(e),
                transaction_id=transaction_id,
                inventory_item_id=ingredient.inventory_item_id,
            )
            result.errors.append(
                DeductionError(
                    kind=SaleErrorKind.STORAGE,
                    product_id=line.product_id,
                    inventory_item_id=ingredient.inventory_item_id,
                    item_name=ingredient.ingredient_name,
                    required=required,
                    unit=ingredient.unit,
                    message=f"Deduction failed: {e}",
                )
            )
            return

        savepoint.commit()

        if deduction.applied > 0:
            result.deductions.append(
                AppliedDeduction(
                    inventory_item_id=deduction.inventory_item_id,
                    item_name=deduction.item_name,
                    product_id=line.product_id,
                    deducted=deduction.applied,
                    unit=ingredient.unit,
                    previous_quantity=deduction.previous_quantity,
                    new_quantity=deduction.remaining,
                )
            )

        if not deduction.is_complete:
            result.errors.append(
                DeductionError(
                    kind=SaleErrorKind.INSUFFICIENT_STOCK,
                    product_id=line.product_id,
                    inventory_item_id=deduction.inventory_item_id,
                    item_name=deduction.item_name,
                    required=deduction.requested,
                    available=deduction.previous_quantity,
                    shortage=deduction.shortage,
                    unit=ingredient.unit,
                    message=(
                        f"Insufficient stock for '{deduction.item_name}': need "
                        f"{deduction.requested} {ingredient.unit}, "
                        f"deducted {deduction.applied} {ingredient.unit}"
                    ),
                )
            )
