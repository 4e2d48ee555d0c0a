"""Pytest configuration and fixtures."""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Generator

import pytest

from cafe_backoffice.config import Settings
from cafe_backoffice.db.database import Database
from cafe_backoffice.db.tables import (
    InventoryBatchRow,
    InventoryItemRow,
    ProductRow,
    RecipeIngredientRow,
    SaleLineItemRow,
    SalesTransactionRow,
    SupplierRow,
)
from cafe_backoffice.services.alerts import AlertDeduplicator
from cafe_backoffice.services.automation import AutomationService
from cafe_backoffice.services.forecaster import ReorderForecaster
from cafe_backoffice.services.ledger import StockLedger
from cafe_backoffice.services.monitor import StockMonitor
from cafe_backoffice.services.purchasing import PurchaseOrderBuilder
from cafe_backoffice.services.recipes import RecipeResolver
from cafe_backoffice.services.sales import SaleFulfillmentCoordinator
from cafe_backoffice.utils.clock import FixedClock

NOW = datetime(2024, 6, 3, 9, 30, 0)


@pytest.fixture
def clock() -> FixedClock:
    """Clock pinned to Monday 2024-06-03 09:30."""
    return FixedClock(NOW)


@pytest.fixture
def settings() -> Settings:
    """Settings backed by an in-memory SQLite database."""
    return Settings(
        database_url="sqlite+pysqlite:///:memory:",
        log_format="text",
    )


@pytest.fixture
def database(settings: Settings) -> Generator[Database, None, None]:
    """Fresh schema per test."""
    db = Database.from_settings(settings)
    db.create_tables()
    yield db
    db.disconnect()


# Service fixtures


@pytest.fixture
def recipes(database: Database, settings: Settings, clock: FixedClock) -> RecipeResolver:
    return RecipeResolver(database, settings, clock)


@pytest.fixture
def ledger(database: Database, settings: Settings, clock: FixedClock) -> StockLedger:
    return StockLedger(database, settings, clock)


@pytest.fixture
def sales(
    database: Database,
    settings: Settings,
    clock: FixedClock,
    recipes: RecipeResolver,
    ledger: StockLedger,
) -> SaleFulfillmentCoordinator:
    return SaleFulfillmentCoordinator(database, settings, clock, recipes=recipes, ledger=ledger)


@pytest.fixture
def alerts(database: Database, settings: Settings, clock: FixedClock) -> AlertDeduplicator:
    return AlertDeduplicator(database, settings, clock)


@pytest.fixture
def monitor(
    database: Database,
    settings: Settings,
    clock: FixedClock,
    alerts: AlertDeduplicator,
) -> StockMonitor:
    return StockMonitor(database, settings, clock, alerts=alerts)


@pytest.fixture
def forecaster(database: Database, settings: Settings, clock: FixedClock) -> ReorderForecaster:
    return ReorderForecaster(database, settings, clock)


@pytest.fixture
def purchasing(database: Database, settings: Settings, clock: FixedClock) -> PurchaseOrderBuilder:
    return PurchaseOrderBuilder(database, settings, clock)


@pytest.fixture
def automation(database: Database, settings: Settings, clock: FixedClock) -> AutomationService:
    return AutomationService(database, settings, clock)


# Sample data fixtures


@pytest.fixture
def catalog(database: Database) -> dict[str, int]:
    """
    Seed a small café catalog and return ids by short name.

    Stock at a glance:
    - beans 1.000 kg (reorder 0.5) and milk 10 L (reorder 5) are healthy
    - cups 40 pcs (reorder 50) and vanilla 0.050 L (reorder 1) are low
    - caramel is out of stock
    """
    with database.session_scope() as session:
        supplier = SupplierRow(name="Bean Brothers Roastery", contact="orders@beanbrothers.example")
        session.add(supplier)
        session.flush()

        def item(name: str, quantity: str, unit: str, max_stock: str, reorder: str,
                 cost: str, supplier_id: int | None) -> InventoryItemRow:
            row = InventoryItemRow(
                name=name,
                quantity=Decimal(quantity),
                unit=unit,
                min_stock=Decimal(reorder) / 2,
                max_stock=Decimal(max_stock),
                reorder_level=Decimal(reorder),
                cost_per_unit=Decimal(cost),
                supplier_id=supplier_id,
            )
            session.add(row)
            return row

        beans = item("Espresso Beans", "1.000", "kg", "5", "0.5", "18.5", supplier.id)
        milk = item("Whole Milk", "10", "L", "40", "5", "1.1", supplier.id)
        cups = item("Cup 12oz", "40", "pcs", "500", "50", "0.08", supplier.id)
        vanilla = item("Vanilla Syrup", "0.050", "L", "5", "1", "9.8", None)
        caramel = item("Caramel Syrup", "0", "L", "5", "1", "9.8", supplier.id)
        session.flush()

        session.add_all(
            [
                ProductRow(id="espresso", name="Espresso", price=Decimal("2.80"),
                           inventory_item_id=beans.id),
                ProductRow(id="latte", name="Caffè Latte", price=Decimal("4.20"),
                           inventory_item_id=milk.id),
                ProductRow(id="vanilla_shot", name="Vanilla Shot", price=Decimal("0.60"),
                           inventory_item_id=vanilla.id),
                ProductRow(id="gift_card", name="Gift Card", price=Decimal("25.00")),
            ]
        )
        session.flush()

        for product_id, item_row, quantity, unit in [
            ("espresso", beans, "0.018", "kg"),
            ("espresso", cups, "1", "pcs"),
            ("latte", beans, "0.018", "kg"),
            ("latte", milk, "0.250", "L"),
            ("latte", cups, "1", "pcs"),
            ("vanilla_shot", vanilla, "0.030", "L"),
            ("vanilla_shot", cups, "1", "pcs"),
        ]:
            session.add(
                RecipeIngredientRow(
                    product_id=product_id,
                    inventory_item_id=item_row.id,
                    quantity=Decimal(quantity),
                    unit=unit,
                )
            )

        return {
            "supplier": supplier.id,
            "beans": beans.id,
            "milk": milk.id,
            "cups": cups.id,
            "vanilla": vanilla.id,
            "caramel": caramel.id,
        }


@pytest.fixture
def add_batch(database: Database) -> Callable[..., int]:
    """Insert an inventory batch and return its id."""

    def _add(item_id: int, batch_number: str, expiry_date, quantity: str = "5",
             status: str = "active") -> int:
        with database.session_scope() as session:
            row = InventoryBatchRow(
                inventory_item_id=item_id,
                batch_number=batch_number,
                quantity=Decimal(quantity),
                expiry_date=expiry_date,
                status=status,
            )
            session.add(row)
            session.flush()
            return row.id

    return _add


@pytest.fixture
def add_sale_history(database: Database) -> Callable[..., None]:
    """Insert a past sale directly, without touching stock."""
    counter = {"n": 0}

    def _add(product_id: str, quantity: str, occurred_at: datetime) -> None:
        counter["n"] += 1
        with database.session_scope() as session:
            transaction = SalesTransactionRow(
                reference=f"HIST-{counter['n']:04d}",
                total=Decimal("0"),
                occurred_at=occurred_at,
                created_at=occurred_at,
            )
            transaction.items = [
                SaleLineItemRow(
                    product_id=product_id,
                    product_name=product_id,
                    quantity=Decimal(quantity),
                    unit_price=Decimal("0"),
                )
            ]
            session.add(transaction)

    return _add
