"""Stock Monitor - scans stock and batch expiry and raises alerts."""

import time
from datetime import timedelta
from decimal import Decimal

from sqlalchemy import select

from cafe_backoffice.config import Settings
from cafe_backoffice.db.database import Database
from cafe_backoffice.db.tables import InventoryBatchRow, InventoryItemRow
from cafe_backoffice.exceptions import InvalidArgumentError
from cafe_backoffice.models.alert import (
    AlertCandidate,
    AlertKind,
    ExpiringBatch,
    ExpiryScanResult,
    StockLevel,
    StockScanResult,
)
from cafe_backoffice.models.inventory import BatchStatus
from cafe_backoffice.services.alerts import AlertDeduplicator
from cafe_backoffice.services.base import BaseService
from cafe_backoffice.utils.clock import Clock


def format_quantity(value: Decimal) -> str:
    """Render a quantity without trailing zeros (``5.000`` -> ``5``)."""
    normalized = value.normalize()
    return format(normalized, "f")


def low_stock_message(level: StockLevel) -> str:
    return (
        f"Item '{level.name}' is running low ({format_quantity(level.quantity)} "
        f"{level.unit} remaining, reorder at {format_quantity(level.reorder_level)})"
    )


def out_of_stock_message(level: StockLevel) -> str:
    return f"Item '{level.name}' is OUT OF STOCK"


def expiring_message(batch: ExpiringBatch) -> str:
    return (
        f"Batch '{batch.batch_number}' of '{batch.item_name}' expires in "
        f"{batch.days_until_expiry} days"
    )


class StockMonitor(BaseService):
    """
    Monitor that turns stock conditions into deduplicated alerts.

    Meant to be triggered externally (cron, scheduler); running it often is
    safe because the deduplicator suppresses repeats.
    """

    def __init__(
        self,
        database: Database,
        settings: Settings | None = None,
        clock: Clock | None = None,
        alerts: AlertDeduplicator | None = None,
    ):
        super().__init__("stock_monitor", database, settings, clock)
        self.alerts = alerts or AlertDeduplicator(database, self.settings, self.clock)
        self.register_tools()

    def register_tools(self) -> None:
        """Register monitor tools."""
        self.register_tool("check_low_stock", self.check_low_stock)
        self.register_tool("get_expiring_items", self.get_expiring_items)

    def scan(self) -> StockScanResult:
        """
        Find low and out-of-stock items and alert on them.

        Low stock is ``0 < quantity <= reorder_level``, ordered by
        ``quantity / reorder_level`` so the nearest to empty comes first.
        Out of stock is ``quantity <= 0``.
        """
        start_time = time.time()

        with self.database.session_scope() as session:
            low_rows = session.execute(
                select(InventoryItemRow).where(
                    InventoryItemRow.quantity > 0,
                    InventoryItemRow.quantity <= InventoryItemRow.reorder_level,
                )
            ).scalars().all()
            out_rows = session.execute(
                select(InventoryItemRow)
                .where(InventoryItemRow.quantity <= 0)
                .order_by(InventoryItemRow.name)
            ).scalars().all()

            low_stock = sorted(
                (self._level(row) for row in low_rows),
                key=lambda level: (level.quantity / level.reorder_level, level.name),
            )
            out_of_stock = [self._level(row) for row in out_rows]

            created = 0
            for level in low_stock:
                created += self.alerts.raise_in(
                    session,
                    AlertCandidate(
                        inventory_item_id=level.id,
                        kind=AlertKind.LOW_STOCK,
                        message=low_stock_message(level),
                    ),
                )
            for level in out_of_stock:
                created += self.alerts.raise_in(
                    session,
                    AlertCandidate(
                        inventory_item_id=level.id,
                        kind=AlertKind.OUT_OF_STOCK,
                        message=out_of_stock_message(level),
                    ),
                )

        self.logger.log_operation(
            "scan_stock",
            duration_ms=(time.time() - start_time) * 1000,
            low_stock=len(low_stock),
            out_of_stock=len(out_of_stock),
            alerts_created=created,
        )

        return StockScanResult(
            low_stock_items=low_stock,
            out_of_stock_items=out_of_stock,
            alerts_created=created,
        )

    def scan_expiring(self, days_ahead: int | None = None) -> ExpiryScanResult:
        """
        Find active batches expiring within ``days_ahead`` days.

        Batches inside the alert horizon (``expiry_alert_days``) are alerted
        once per batch number. Already-expired active batches are included.

        Args:
            days_ahead: Scan horizon in days; defaults to expiry_scan_days

        Returns:
            Batches ordered by soonest expiry
        """
        start_time = time.time()

        if days_ahead is None:
            days_ahead = self.settings.expiry_scan_days
        else:
            try:
                days_ahead = int(days_ahead)
            except (TypeError, ValueError) as e:
                raise InvalidArgumentError("days_ahead must be an integer") from e
        if days_ahead < 0:
            raise InvalidArgumentError("days_ahead must not be negative")

        today = self.clock.today()
        horizon = today + timedelta(days=days_ahead)

        with self.database.session_scope() as session:
            rows = session.execute(
                select(InventoryBatchRow, InventoryItemRow)
                .join(InventoryItemRow, InventoryBatchRow.inventory_item_id == InventoryItemRow.id)
                .where(
                    InventoryBatchRow.expiry_date.is_not(None),
                    InventoryBatchRow.expiry_date <= horizon,
                    InventoryBatchRow.status == BatchStatus.ACTIVE.value,
                    InventoryBatchRow.quantity > 0,
                )
                .order_by(InventoryBatchRow.expiry_date, InventoryBatchRow.id)
            ).all()

            batches = [
                ExpiringBatch(
                    batch_id=batch.id,
                    batch_number=batch.batch_number,
                    inventory_item_id=item.id,
                    item_name=item.name,
                    quantity=batch.quantity,
                    unit=item.unit,
                    expiry_date=batch.expiry_date,
                    days_until_expiry=(batch.expiry_date - today).days,
                )
                for batch, item in rows
            ]

            created = 0
            for batch in batches:
                if batch.days_until_expiry > self.settings.expiry_alert_days:
                    continue
                created += self.alerts.raise_in(
                    session,
                    AlertCandidate(
                        inventory_item_id=batch.inventory_item_id,
                        kind=AlertKind.EXPIRING_SOON,
                        message=expiring_message(batch),
                        dedupe_key=batch.batch_number,
                    ),
                )

        self.logger.log_operation(
            "scan_expiring",
            duration_ms=(time.time() - start_time) * 1000,
            days_ahead=days_ahead,
            batches=len(batches),
            alerts_created=created,
        )

        return ExpiryScanResult(items=batches, alerts_created=created)

    def check_low_stock(self) -> dict:
        """JSON-ready wrapper around ``scan``."""
        result = self.scan()
        return {
            "low_stock_count": result.low_stock_count,
            "out_of_stock_count": result.out_of_stock_count,
            "low_stock_items": [level.model_dump(mode="json") for level in result.low_stock_items],
            "out_of_stock_items": [
                level.model_dump(mode="json") for level in result.out_of_stock_items
            ],
            "alerts_created": result.alerts_created,
        }

    def get_expiring_items(self, days: int | None = None) -> dict:
        """JSON-ready wrapper around ``scan_expiring``."""
        result = self.scan_expiring(days)
        return {
            "expiring_items": [batch.model_dump(mode="json") for batch in result.items],
            "count": result.count,
            "alerts_created": result.alerts_created,
        }

    @staticmethod
    def _level(row: InventoryItemRow) -> StockLevel:
        return StockLevel(
            id=row.id,
            name=row.name,
            quantity=row.quantity,
            unit=row.unit,
            min_stock=row.min_stock,
            reorder_level=row.reorder_level,
            supplier_id=row.supplier_id,
        )
