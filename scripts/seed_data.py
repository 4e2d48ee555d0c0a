"""Seed a demo café catalog: suppliers, stock, products, recipes and batches."""

from datetime import timedelta
from decimal import Decimal

from cafe_backoffice.config import get_settings
from cafe_backoffice.db.database import Database
from cafe_backoffice.db.tables import (
    InventoryBatchRow,
    InventoryItemRow,
    ProductRow,
    RecipeIngredientRow,
    SupplierRow,
)
from cafe_backoffice.utils.clock import SystemClock
from cafe_backoffice.utils.logging import setup_logging


def seed_suppliers(database: Database) -> dict[str, int]:
    """Seed suppliers and return their ids by name."""
    print("Seeding suppliers...")

    suppliers = [
        SupplierRow(name="Bean Brothers Roastery", contact="orders@beanbrothers.example"),
        SupplierRow(name="Valley Dairy Co.", contact="+1 555 0142"),
        SupplierRow(name="Packaging Plus", contact="sales@packagingplus.example"),
    ]

    with database.session_scope() as session:
        session.add_all(suppliers)
        session.flush()
        for supplier in suppliers:
            print(f"  ✓ Added {supplier.name}")
        ids = {supplier.name: supplier.id for supplier in suppliers}

    print("✓ Suppliers seeded successfully\n")
    return ids


def seed_inventory(database: Database, suppliers: dict[str, int]) -> dict[str, int]:
    """Seed raw materials and return their ids by name."""
    print("Seeding inventory...")

    beans = suppliers["Bean Brothers Roastery"]
    dairy = suppliers["Valley Dairy Co."]
    packaging = suppliers["Packaging Plus"]

    # name, category, quantity, unit, min, max, reorder, cost, supplier
    stock = [
        ("Espresso Beans", "coffee", "4.500", "kg", "2", "20", "5", "18.5000", beans),
        ("Decaf Beans", "coffee", "1.200", "kg", "1", "8", "2", "21.0000", beans),
        ("Whole Milk", "dairy", "12.000", "L", "5", "40", "10", "1.1000", dairy),
        ("Oat Milk", "dairy", "3.000", "L", "2", "20", "4", "2.4000", dairy),
        ("Vanilla Syrup", "syrup", "0.750", "L", "0.5", "5", "1", "9.8000", None),
        ("Caramel Syrup", "syrup", "0.000", "L", "0.5", "5", "1", "9.8000", None),
        ("Cup 12oz", "packaging", "180", "pcs", "100", "1000", "200", "0.0800", packaging),
        ("Lid 12oz", "packaging", "420", "pcs", "100", "1000", "200", "0.0300", packaging),
        ("Butter Croissant", "bakery", "14", "pcs", "6", "40", "10", "0.9500", None),
    ]

    rows = [
        InventoryItemRow(
            name=name,
            category=category,
            quantity=Decimal(quantity),
            unit=unit,
            min_stock=Decimal(min_stock),
            max_stock=Decimal(max_stock),
            reorder_level=Decimal(reorder_level),
            cost_per_unit=Decimal(cost),
            supplier_id=supplier_id,
        )
        for name, category, quantity, unit, min_stock, max_stock, reorder_level, cost, supplier_id
        in stock
    ]

    with database.session_scope() as session:
        session.add_all(rows)
        session.flush()
        for row in rows:
            print(f"  ✓ Added {row.name} (stock: {row.quantity} {row.unit})")
        ids = {row.name: row.id for row in rows}

    print("✓ Inventory seeded successfully\n")
    return ids


def seed_products(database: Database, items: dict[str, int]) -> None:
    """Seed sellable products and their recipes."""
    print("Seeding products and recipes...")

    products = [
        ProductRow(id="espresso", name="Espresso", price=Decimal("2.80"),
                   inventory_item_id=items["Espresso Beans"]),
        ProductRow(id="latte", name="Caffè Latte", price=Decimal("4.20"),
                   inventory_item_id=items["Whole Milk"]),
        ProductRow(id="oat_latte", name="Oat Latte", price=Decimal("4.60"),
                   inventory_item_id=items["Oat Milk"]),
        ProductRow(id="vanilla_latte", name="Vanilla Latte", price=Decimal("4.80"),
                   inventory_item_id=items["Vanilla Syrup"]),
        ProductRow(id="croissant", name="Butter Croissant", price=Decimal("3.10"),
                   inventory_item_id=items["Butter Croissant"]),
        ProductRow(id="gift_card", name="Gift Card", price=Decimal("25.00")),
    ]

    # product, item, quantity per unit, unit
    recipes = [
        ("espresso", "Espresso Beans", "0.018", "kg"),
        ("espresso", "Cup 12oz", "1", "pcs"),
        ("latte", "Espresso Beans", "0.018", "kg"),
        ("latte", "Whole Milk", "0.250", "L"),
        ("latte", "Cup 12oz", "1", "pcs"),
        ("latte", "Lid 12oz", "1", "pcs"),
        ("oat_latte", "Espresso Beans", "0.018", "kg"),
        ("oat_latte", "Oat Milk", "0.250", "L"),
        ("oat_latte", "Cup 12oz", "1", "pcs"),
        ("oat_latte", "Lid 12oz", "1", "pcs"),
        ("vanilla_latte", "Espresso Beans", "0.018", "kg"),
        ("vanilla_latte", "Whole Milk", "0.250", "L"),
        ("vanilla_latte", "Vanilla Syrup", "0.030", "L"),
        ("vanilla_latte", "Cup 12oz", "1", "pcs"),
        ("vanilla_latte", "Lid 12oz", "1", "pcs"),
        ("croissant", "Butter Croissant", "1", "pcs"),
    ]

    with database.session_scope() as session:
        session.add_all(products)
        session.flush()
        session.add_all(
            RecipeIngredientRow(
                product_id=product_id,
                inventory_item_id=items[item_name],
                quantity=Decimal(quantity),
                unit=unit,
            )
            for product_id, item_name, quantity, unit in recipes
        )
        for product in products:
            print(f"  ✓ Added {product.name} ({product.price})")

    print("✓ Products seeded successfully\n")


def seed_batches(database: Database, items: dict[str, int]) -> None:
    """Seed perishable batches, some close to expiry."""
    print("Seeding batches...")

    today = SystemClock().today()
    batches = [
        ("MILK-0601", "Whole Milk", "6", 3),
        ("MILK-0605", "Whole Milk", "6", 9),
        ("OAT-0520", "Oat Milk", "3", 45),
        ("CROI-0603", "Butter Croissant", "14", 1),
    ]

    with database.session_scope() as session:
        for batch_number, item_name, quantity, expires_in in batches:
            session.add(
                InventoryBatchRow(
                    inventory_item_id=items[item_name],
                    batch_number=batch_number,
                    quantity=Decimal(quantity),
                    expiry_date=today + timedelta(days=expires_in),
                )
            )
            print(f"  ✓ Added {batch_number} of {item_name} (expires in {expires_in} days)")

    print("✓ Batches seeded successfully\n")


def main() -> None:
    """Run all seed functions."""
    settings = get_settings()
    setup_logging(settings)

    print("\n" + "=" * 50)
    print("  Seeding Café Back-Office Data")
    print("=" * 50 + "\n")

    database = Database.from_settings(settings)
    database.create_tables()

    try:
        suppliers = seed_suppliers(database)
        items = seed_inventory(database, suppliers)
        seed_products(database, items)
        seed_batches(database, items)
    finally:
        database.disconnect()

    print("=" * 50)
    print("  ✓ All data seeded successfully!")
    print("=" * 50 + "\n")


if __name__ == "__main__":
    main()
