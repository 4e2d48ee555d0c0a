"""Tests for model properties and error serialization."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from cafe_backoffice.exceptions import InsufficientStockError, NotFoundError
from cafe_backoffice.models import InventoryItem, SaleLine, StockDeduction


def test_inventory_item_stock_flags() -> None:
    low = InventoryItem(id=1, name="Oat Milk", quantity=Decimal("2"), reorder_level=Decimal("4"))
    empty = InventoryItem(id=2, name="Caramel Syrup", quantity=Decimal("0"), reorder_level=Decimal("1"))
    healthy = InventoryItem(id=3, name="Whole Milk", quantity=Decimal("10"), reorder_level=Decimal("5"))

    assert (low.is_low_stock, low.is_out_of_stock) == (True, False)
    assert (empty.is_low_stock, empty.is_out_of_stock) == (False, True)
    assert (healthy.is_low_stock, healthy.is_out_of_stock) == (False, False)


def test_sale_line_subtotal_and_blank_product() -> None:
    line = SaleLine(product_id="  ", product_name="Custom charge", quantity=3, unit_price="1.50")

    assert line.product_id is None
    assert line.subtotal == Decimal("4.50")


def test_sale_line_requires_positive_quantity() -> None:
    with pytest.raises(ValidationError):
        SaleLine(product_id="latte", product_name="Caffè Latte", quantity=0, unit_price="4.20")


def test_stock_deduction_shortage() -> None:
    deduction = StockDeduction(
        inventory_item_id=1,
        item_name="Vanilla Syrup",
        unit="L",
        requested=Decimal("0.06"),
        applied=Decimal("0.05"),
        previous_quantity=Decimal("0.05"),
        remaining=Decimal("0"),
    )

    assert deduction.shortage == Decimal("0.01")
    assert deduction.is_complete is False


def test_error_to_dict() -> None:
    assert NotFoundError("Product", "flat_white").to_dict() == {
        "code": "NOT_FOUND",
        "message": "Product 'flat_white' not found",
        "entity": "Product",
        "entity_id": "flat_white",
    }

    error = InsufficientStockError(
        item_id=4,
        item_name="Vanilla Syrup",
        requested=Decimal("0.06"),
        available=Decimal("0.05"),
        unit="L",
    )
    data = error.to_dict()
    assert data["code"] == "INSUFFICIENT_STOCK"
    assert data["requested"] == "0.06"
    assert data["available"] == "0.05"
    assert error.shortage == Decimal("0.01")
