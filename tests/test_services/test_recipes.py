"""Tests for recipe resolution, availability and costing."""

from decimal import Decimal

import pytest

from cafe_backoffice.exceptions import InvalidArgumentError, NotFoundError
from cafe_backoffice.services.recipes import RecipeResolver


def test_resolve_returns_ingredients_by_name(
    recipes: RecipeResolver, catalog: dict[str, int]
) -> None:
    ingredients = recipes.resolve("latte")

    assert [i.ingredient_name for i in ingredients] == [
        "Cup 12oz",
        "Espresso Beans",
        "Whole Milk",
    ]
    milk = ingredients[2]
    assert milk.inventory_item_id == catalog["milk"]
    assert milk.quantity == Decimal("0.25")
    assert milk.unit == "L"


def test_product_without_recipe_consumes_nothing(
    recipes: RecipeResolver, catalog: dict[str, int]
) -> None:
    assert recipes.resolve("gift_card") == []


def test_unknown_product_raises(recipes: RecipeResolver, catalog: dict[str, int]) -> None:
    with pytest.raises(NotFoundError) as exc_info:
        recipes.resolve("flat_white")

    assert exc_info.value.code == "NOT_FOUND"
    assert "flat_white" in exc_info.value.message


def test_check_availability_within_stock(
    recipes: RecipeResolver, catalog: dict[str, int]
) -> None:
    availability = recipes.check_availability("latte", 2)

    assert availability.all_available is True
    beans = next(i for i in availability.ingredients if i.ingredient_name == "Espresso Beans")
    assert beans.total_required == Decimal("0.036")
    assert beans.available == Decimal("1")
    assert beans.remaining_after_sale == Decimal("0.964")


def test_check_availability_flags_short_ingredient(
    recipes: RecipeResolver, catalog: dict[str, int]
) -> None:
    # 50 lattes need 12.5 L of milk and 50 cups; only 10 L and 40 cups on hand
    availability = recipes.check_availability("latte", 50)

    assert availability.all_available is False
    short = {i.ingredient_name for i in availability.ingredients if not i.is_available}
    assert short == {"Whole Milk", "Cup 12oz"}


def test_check_availability_rejects_non_positive_quantity(
    recipes: RecipeResolver, catalog: dict[str, int]
) -> None:
    with pytest.raises(InvalidArgumentError):
        recipes.check_availability("latte", 0)


def test_recipe_cost(recipes: RecipeResolver, catalog: dict[str, int]) -> None:
    # 0.018 kg x 18.50 + 1 cup x 0.08
    assert recipes.recipe_cost("espresso") == Decimal("0.413")
    assert recipes.recipe_cost("gift_card") == Decimal("0")


def test_resolve_tool_reports_missing_product(
    recipes: RecipeResolver, catalog: dict[str, int]
) -> None:
    result = recipes.execute_tool("resolve_recipe", {"product_id": "flat_white"})

    assert result.success is False
    assert result.error_code == "NOT_FOUND"
