"""Tests for reorder quantities, urgency and suggestions."""

from datetime import datetime, timedelta
from decimal import Decimal

from cafe_backoffice.models.reorder import UrgencyLevel
from cafe_backoffice.services.forecaster import (
    ReorderForecaster,
    classify_urgency,
    reorder_reason,
    suggest_order_quantity,
)


def D(value: str | int) -> Decimal:
    return Decimal(str(value))


class TestSuggestOrderQuantity:
    def test_refill_dominates_buffer(self) -> None:
        assert suggest_order_quantity(D(100), D(40), D(2)) == D(60)
        assert suggest_order_quantity(D(100), D(40), D(3)) == D(60)

    def test_buffer_rounds_up_to_ten(self) -> None:
        # max(5, 14) = 14
        assert suggest_order_quantity(D(100), D(95), D(2)) == D(20)

    def test_fractional_refill_rounds_up(self) -> None:
        assert suggest_order_quantity(D(5), D("0.05"), D(0)) == D(10)

    def test_overstocked_item_never_goes_negative(self) -> None:
        assert suggest_order_quantity(D(10), D(50), D(0)) == D(0)

    def test_custom_buffer_and_step(self) -> None:
        assert suggest_order_quantity(D(0), D(0), D(3), buffer_days=14, round_to=25) == D(50)


class TestClassifyUrgency:
    def test_empty_shelf_is_critical_regardless_of_usage(self) -> None:
        assert classify_urgency(D(0), D(999)) == UrgencyLevel.CRITICAL
        assert classify_urgency(D(0), D(0)) == UrgencyLevel.CRITICAL

    def test_tier_boundaries(self) -> None:
        assert classify_urgency(D(40), D(2)) == UrgencyLevel.URGENT
        assert classify_urgency(D(50), D("2.5")) == UrgencyLevel.HIGH
        assert classify_urgency(D(50), D(5)) == UrgencyLevel.HIGH
        assert classify_urgency(D(50), D("5.1")) == UrgencyLevel.MEDIUM
        assert classify_urgency(D(50), D(10)) == UrgencyLevel.MEDIUM
        assert classify_urgency(D(50), D(11)) == UrgencyLevel.LOW

    def test_labels(self) -> None:
        assert UrgencyLevel.CRITICAL.label == "CRITICAL"
        assert UrgencyLevel.LOW.label == "LOW"


def test_reorder_reasons() -> None:
    assert reorder_reason(D(0), D(999), D(0), D(5), "kg") == (
        "OUT OF STOCK - Immediate reorder required"
    )
    assert reorder_reason(D(3), D("1.5"), D(2), D(5), "kg") == "Stock will run out in 1.5 days"
    assert reorder_reason(D(4), D(4), D(1), D(5), "kg") == (
        "Usage rate: 1.00 kg/day. Reorder to maintain buffer."
    )
    assert reorder_reason(D(4), D(999), D(0), D("5.000"), "kg") == "Below reorder level of 5 kg"


def test_suggest_without_sales_history(
    forecaster: ReorderForecaster, catalog: dict[str, int]
) -> None:
    suggestions = forecaster.suggest()

    assert [s.item_name for s in suggestions] == ["Caramel Syrup", "Cup 12oz", "Vanilla Syrup"]

    caramel = suggestions[0]
    assert caramel.urgency == UrgencyLevel.CRITICAL
    assert caramel.reason == "OUT OF STOCK - Immediate reorder required"
    assert caramel.suggested_order_qty == D(10)
    assert caramel.supplier_name == "Bean Brothers Roastery"

    vanilla = suggestions[2]
    assert vanilla.urgency == UrgencyLevel.LOW
    assert vanilla.avg_daily_usage == D(0)
    assert vanilla.days_until_stockout == D(999)
    assert vanilla.supplier_id is None
    assert vanilla.supplier_name == "No supplier assigned"
    assert vanilla.reason == "Below reorder level of 1 L"


def test_suggest_uses_trailing_sales_velocity(
    forecaster: ReorderForecaster, add_sale_history, catalog: dict[str, int]
) -> None:
    window_start = datetime(2024, 5, 4)
    # 30 shots inside the window: 1 per day
    add_sale_history("vanilla_shot", "20", window_start)
    add_sale_history("vanilla_shot", "10", datetime(2024, 6, 2, 15, 0))
    # Outside the window
    add_sale_history("vanilla_shot", "500", window_start - timedelta(minutes=1))

    suggestions = forecaster.suggest()
    vanilla = next(s for s in suggestions if s.item_name == "Vanilla Syrup")

    assert vanilla.avg_daily_usage == D("1.00")
    assert vanilla.days_until_stockout == D("0.1")
    assert vanilla.urgency == UrgencyLevel.URGENT
    assert vanilla.urgency_label == "URGENT"
    # max(5 - 0.05, 7 x 1) = 7 -> 10
    assert vanilla.suggested_order_qty == D(10)
    assert vanilla.estimated_cost == D("98.00")
    assert vanilla.reason == "Stock will run out in 0.1 days"


def test_suggestions_sorted_by_urgency(
    forecaster: ReorderForecaster, add_sale_history, catalog: dict[str, int]
) -> None:
    add_sale_history("vanilla_shot", "30", datetime(2024, 6, 1, 12, 0))

    suggestions = forecaster.suggest()
    urgencies = [s.urgency for s in suggestions]

    assert urgencies == sorted(urgencies, reverse=True)
    assert urgencies[:2] == [UrgencyLevel.CRITICAL, UrgencyLevel.URGENT]


def test_healthy_items_are_not_suggested(
    forecaster: ReorderForecaster, catalog: dict[str, int]
) -> None:
    names = {s.item_name for s in forecaster.suggest()}

    assert "Espresso Beans" not in names
    assert "Whole Milk" not in names


def test_reorder_tool(forecaster: ReorderForecaster, catalog: dict[str, int]) -> None:
    result = forecaster.execute_tool("get_reorder_suggestions", {})

    assert result.success is True
    assert result.result["total_items"] == 3
    first = result.result["suggestions"][0]
    assert first["urgency"] == 5
    assert first["urgency_label"] == "CRITICAL"
