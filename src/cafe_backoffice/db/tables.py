"""SQLAlchemy ORM tables for the engine's logical schema.

Quantities are Numeric(12, 3) so fractional recipe amounts (0.018 kg of
coffee) survive the round trip; money is Numeric(12, 2).
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

Quantity = Numeric(12, 3)
Money = Numeric(12, 2)


class Base(DeclarativeBase):
    """Declarative base for all tables."""


class SupplierRow(Base):
    __tablename__ = "suppliers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    contact: Mapped[str | None] = mapped_column(String(120))


class InventoryItemRow(Base):
    """Raw material on hand. ``quantity`` is the single source of truth."""

    __tablename__ = "inventory_items"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_inventory_items_quantity"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    category: Mapped[str | None] = mapped_column(String(60))
    quantity: Mapped[Decimal] = mapped_column(Quantity, nullable=False, default=Decimal("0"))
    unit: Mapped[str] = mapped_column(String(20), nullable=False, default="pcs")
    min_stock: Mapped[Decimal] = mapped_column(Quantity, nullable=False, default=Decimal("0"))
    max_stock: Mapped[Decimal] = mapped_column(Quantity, nullable=False, default=Decimal("0"))
    reorder_level: Mapped[Decimal] = mapped_column(
        Quantity, nullable=False, default=Decimal("0")
    )
    cost_per_unit: Mapped[Decimal] = mapped_column(
        Numeric(12, 4), nullable=False, default=Decimal("0")
    )
    supplier_id: Mapped[int | None] = mapped_column(ForeignKey("suppliers.id"))
    updated_at: Mapped[datetime | None] = mapped_column(DateTime)

    supplier: Mapped[SupplierRow | None] = relationship()


class ProductRow(Base):
    """Sellable catalog entry.

    ``inventory_item_id`` links a product to the item whose sales velocity it
    drives in reorder forecasting.
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(40), primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    price: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    inventory_item_id: Mapped[int | None] = mapped_column(ForeignKey("inventory_items.id"))


class RecipeIngredientRow(Base):
    __tablename__ = "product_recipes"
    __table_args__ = (
        UniqueConstraint("product_id", "inventory_item_id", name="uq_recipe_ingredient"),
        CheckConstraint("quantity > 0", name="ck_product_recipes_quantity"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[str] = mapped_column(ForeignKey("products.id"), nullable=False)
    inventory_item_id: Mapped[int] = mapped_column(
        ForeignKey("inventory_items.id"), nullable=False
    )
    quantity: Mapped[Decimal] = mapped_column(Quantity, nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)

    inventory_item: Mapped[InventoryItemRow] = relationship()


class SalesTransactionRow(Base):
    __tablename__ = "sales_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reference: Mapped[str] = mapped_column(String(40), nullable=False, unique=True)
    total: Mapped[Decimal] = mapped_column(Money, nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    items: Mapped[list[SaleLineItemRow]] = relationship(
        back_populates="transaction",
        order_by="SaleLineItemRow.id",
        cascade="all, delete-orphan",
    )


class SaleLineItemRow(Base):
    __tablename__ = "sales_transaction_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    transaction_id: Mapped[int] = mapped_column(
        ForeignKey("sales_transactions.id"), nullable=False, index=True
    )
    product_id: Mapped[str | None] = mapped_column(String(40))
    product_name: Mapped[str] = mapped_column(String(120), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Quantity, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Money, nullable=False)

    transaction: Mapped[SalesTransactionRow] = relationship(back_populates="items")


class StockMovementRow(Base):
    """Audit row for one applied stock change."""

    __tablename__ = "stock_movements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    inventory_item_id: Mapped[int] = mapped_column(
        ForeignKey("inventory_items.id"), nullable=False, index=True
    )
    movement_type: Mapped[str] = mapped_column(String(20), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Quantity, nullable=False)
    previous_quantity: Mapped[Decimal] = mapped_column(Quantity, nullable=False)
    new_quantity: Mapped[Decimal] = mapped_column(Quantity, nullable=False)
    reference_type: Mapped[str | None] = mapped_column(String(40))
    reference_id: Mapped[int | None] = mapped_column(Integer)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class InventoryAlertRow(Base):
    __tablename__ = "inventory_alerts"
    __table_args__ = (
        Index(
            "idx_alert_dedupe",
            "inventory_item_id",
            "alert_type",
            "is_resolved",
            "created_at",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    inventory_item_id: Mapped[int] = mapped_column(
        ForeignKey("inventory_items.id"), nullable=False
    )
    alert_type: Mapped[str] = mapped_column(String(20), nullable=False)
    alert_message: Mapped[str] = mapped_column(Text, nullable=False)
    dedupe_key: Mapped[str | None] = mapped_column(String(60))
    is_resolved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime)

    inventory_item: Mapped[InventoryItemRow] = relationship()


class InventoryBatchRow(Base):
    __tablename__ = "inventory_batches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    inventory_item_id: Mapped[int] = mapped_column(
        ForeignKey("inventory_items.id"), nullable=False, index=True
    )
    batch_number: Mapped[str] = mapped_column(String(60), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Quantity, nullable=False)
    expiry_date: Mapped[date | None] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")

    inventory_item: Mapped[InventoryItemRow] = relationship()


class PurchaseOrderRow(Base):
    __tablename__ = "purchase_orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    po_number: Mapped[str] = mapped_column(String(40), nullable=False, unique=True)
    supplier_id: Mapped[int] = mapped_column(ForeignKey("suppliers.id"), nullable=False)
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    expected_delivery: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    total_amount: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    notes: Mapped[str | None] = mapped_column(Text)

    items: Mapped[list[PurchaseOrderLineRow]] = relationship(
        back_populates="purchase_order",
        order_by="PurchaseOrderLineRow.id",
        cascade="all, delete-orphan",
    )


class PurchaseOrderLineRow(Base):
    __tablename__ = "purchase_order_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    po_id: Mapped[int] = mapped_column(ForeignKey("purchase_orders.id"), nullable=False)
    inventory_item_id: Mapped[int] = mapped_column(
        ForeignKey("inventory_items.id"), nullable=False
    )
    quantity: Mapped[Decimal] = mapped_column(Quantity, nullable=False)
    unit_cost: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    total_cost: Mapped[Decimal] = mapped_column(Money, nullable=False)

    purchase_order: Mapped[PurchaseOrderRow] = relationship(back_populates="items")
