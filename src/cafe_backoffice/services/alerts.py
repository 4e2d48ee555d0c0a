"""Alert Deduplicator - persists inventory alerts without flooding."""

from datetime import timedelta

from sqlalchemy import case, select
from sqlalchemy.orm import Session

from cafe_backoffice.config import Settings
from cafe_backoffice.db.database import Database
from cafe_backoffice.db.tables import InventoryAlertRow, InventoryItemRow
from cafe_backoffice.exceptions import InvalidArgumentError, NotFoundError
from cafe_backoffice.models.alert import AlertCandidate, AlertKind, InventoryAlert
from cafe_backoffice.services.base import BaseService
from cafe_backoffice.utils.clock import Clock

KIND_PRIORITY = case(
    (InventoryAlertRow.alert_type == AlertKind.OUT_OF_STOCK.value, 1),
    (InventoryAlertRow.alert_type == AlertKind.LOW_STOCK.value, 2),
    (InventoryAlertRow.alert_type == AlertKind.EXPIRING_SOON.value, 3),
    else_=4,
)


class AlertDeduplicator(BaseService):
    """
    Alert store that suppresses repeats within a trailing window.

    An alert is suppressed when an unresolved alert with the same item, kind
    and dedupe key was created inside the window. Resolving an alert takes it
    out of the window, so the same condition can alert again immediately.

    With ``alert_dedupe_lock`` enabled, the check and insert run after
    locking the inventory item row, which serializes concurrent monitor
    passes per item on backends that support ``FOR UPDATE``.
    """

    def __init__(
        self,
        database: Database,
        settings: Settings | None = None,
        clock: Clock | None = None,
    ):
        super().__init__("alert_deduplicator", database, settings, clock)
        self.register_tools()

    def register_tools(self) -> None:
        """Register alert tools."""
        self.register_tool("get_notifications", self.notifications)
        self.register_tool("dismiss_notification", self.dismiss)

    def raise_alert(
        self,
        item_id: int,
        kind: AlertKind | str,
        message: str,
        dedupe_key: str | None = None,
    ) -> bool:
        """
        Persist an alert unless an equivalent one is still open.

        Args:
            item_id: Inventory item the alert is about
            kind: Alert kind
            message: Human-readable message
            dedupe_key: Extra identity, e.g. the batch number of an expiry alert

        Returns:
            True if a new alert was created
        """
        candidate = AlertCandidate(
            inventory_item_id=item_id,
            kind=AlertKind(kind),
            message=message,
            dedupe_key=dedupe_key,
        )
        with self.database.session_scope() as session:
            return self.raise_in(session, candidate)

    def raise_in(self, session: Session, candidate: AlertCandidate) -> bool:
        """Deduplicate and insert inside the caller's transaction."""
        if self.settings.alert_dedupe_lock:
            item_id = session.execute(
                select(InventoryItemRow.id)
                .where(InventoryItemRow.id == candidate.inventory_item_id)
                .with_for_update()
            ).scalar_one_or_none()
        else:
            item_id = session.execute(
                select(InventoryItemRow.id).where(
                    InventoryItemRow.id == candidate.inventory_item_id
                )
            ).scalar_one_or_none()

        if item_id is None:
            raise NotFoundError("Inventory item", candidate.inventory_item_id)

        now = self.clock.now()
        window_start = now - timedelta(hours=self.settings.alert_dedupe_window_hours)

        query = select(InventoryAlertRow.id).where(
            InventoryAlertRow.inventory_item_id == candidate.inventory_item_id,
            InventoryAlertRow.alert_type == candidate.kind.value,
            InventoryAlertRow.is_resolved.is_(False),
            InventoryAlertRow.created_at >= window_start,
        )
        if candidate.dedupe_key is None:
            query = query.where(InventoryAlertRow.dedupe_key.is_(None))
        else:
            query = query.where(InventoryAlertRow.dedupe_key == candidate.dedupe_key)

        if session.execute(query.limit(1)).first() is not None:
            self.logger.logger.debug(
                "alert_suppressed",
                item_id=candidate.inventory_item_id,
                kind=candidate.kind.value,
                dedupe_key=candidate.dedupe_key,
            )
            return False

        session.add(
            InventoryAlertRow(
                inventory_item_id=candidate.inventory_item_id,
                alert_type=candidate.kind.value,
                alert_message=candidate.message,
                dedupe_key=candidate.dedupe_key,
                is_resolved=False,
                created_at=now,
            )
        )
        session.flush()

        self.logger.logger.info(
            "alert_created",
            item_id=candidate.inventory_item_id,
            kind=candidate.kind.value,
            dedupe_key=candidate.dedupe_key,
        )
        return True

    def resolve(self, alert_id: int) -> InventoryAlert:
        """
        Mark an alert as resolved.

        Args:
            alert_id: Alert to dismiss

        Returns:
            The alert after resolution; already-resolved alerts are returned unchanged

        Raises:
            NotFoundError: If the alert does not exist
        """
        with self.database.session_scope() as session:
            row = session.get(InventoryAlertRow, alert_id)
            if row is None:
                raise NotFoundError("Alert", alert_id)

            if not row.is_resolved:
                row.is_resolved = True
                row.resolved_at = self.clock.now()
                session.flush()
                self.logger.log_operation("resolve_alert", alert_id=alert_id)

            return self._to_model(row, row.inventory_item.name)

    def list_unresolved(self, limit: int | None = None) -> list[InventoryAlert]:
        """
        Get open alerts, most severe kind first and newest first within a kind.

        Args:
            limit: Max alerts; defaults to notification_limit

        Returns:
            Unresolved alerts with their item names
        """
        limit = self.settings.notification_limit if limit is None else limit
        if limit <= 0:
            raise InvalidArgumentError("Limit must be greater than zero")

        with self.database.session_scope() as session:
            rows = session.execute(
                select(InventoryAlertRow, InventoryItemRow.name)
                .join(InventoryItemRow, InventoryAlertRow.inventory_item_id == InventoryItemRow.id)
                .where(InventoryAlertRow.is_resolved.is_(False))
                .order_by(KIND_PRIORITY, InventoryAlertRow.created_at.desc(), InventoryAlertRow.id.desc())
                .limit(limit)
            ).all()
            return [self._to_model(row, item_name) for row, item_name in rows]

    def notifications(self, limit: int | None = None) -> dict:
        """JSON-ready list of open alerts."""
        alerts = self.list_unresolved(limit)
        return {
            "notifications": [alert.model_dump(mode="json") for alert in alerts],
            "count": len(alerts),
        }

    def dismiss(self, alert_id: int) -> dict:
        """JSON-ready wrapper around ``resolve``."""
        if not alert_id:
            raise InvalidArgumentError("Alert ID required")
        alert = self.resolve(alert_id)
        return {"alert": alert.model_dump(mode="json"), "message": "Notification dismissed"}

    @staticmethod
    def _to_model(row: InventoryAlertRow, item_name: str | None) -> InventoryAlert:
        return InventoryAlert(
            id=row.id,
            inventory_item_id=row.inventory_item_id,
            item_name=item_name,
            kind=AlertKind(row.alert_type),
            message=row.alert_message,
            dedupe_key=row.dedupe_key,
            is_resolved=row.is_resolved,
            created_at=row.created_at,
            resolved_at=row.resolved_at,
        )
