"""Recipe Resolver - maps sellable products to the stock they consume."""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from cafe_backoffice.config import Settings
from cafe_backoffice.db.database import Database
from cafe_backoffice.db.tables import InventoryItemRow, ProductRow, RecipeIngredientRow
from cafe_backoffice.exceptions import InvalidArgumentError, NotFoundError
from cafe_backoffice.models.inventory import (
    IngredientAvailability,
    ProductAvailability,
    RecipeIngredient,
)
from cafe_backoffice.services.base import BaseService
from cafe_backoffice.utils.clock import Clock


class RecipeResolver(BaseService):
    """
    Read-only lookups over product recipes.

    Responsibilities:
    - Resolve a product's bill of materials
    - Check whether stock covers a prospective sale
    - Cost a product from its ingredients
    """

    def __init__(
        self,
        database: Database,
        settings: Settings | None = None,
        clock: Clock | None = None,
    ):
        super().__init__("recipe_resolver", database, settings, clock)
        self.register_tools()

    def register_tools(self) -> None:
        """Register recipe resolver tools."""
        self.register_tool("resolve_recipe", self.resolve)
        self.register_tool("check_availability", self.check_availability)
        self.register_tool("recipe_cost", self.recipe_cost)

    def resolve(self, product_id: str) -> list[RecipeIngredient]:
        """
        Get the ingredients consumed by one unit of a product.

        Args:
            product_id: Product identifier

        Returns:
            Ingredients ordered by name; empty when the product consumes no
            tracked stock

        Raises:
            NotFoundError: If the product does not exist
        """
        with self.database.session_scope() as session:
            return self.resolve_in(session, product_id)

    def resolve_in(self, session: Session, product_id: str) -> list[RecipeIngredient]:
        """Resolve a recipe inside the caller's transaction."""
        if session.get(ProductRow, product_id) is None:
            raise NotFoundError("Product", product_id)

        rows = session.execute(
            select(RecipeIngredientRow, InventoryItemRow)
            .join(InventoryItemRow, RecipeIngredientRow.inventory_item_id == InventoryItemRow.id)
            .where(RecipeIngredientRow.product_id == product_id)
            .order_by(InventoryItemRow.name, RecipeIngredientRow.id)
        ).all()

        return [
            RecipeIngredient(
                product_id=recipe.product_id,
                inventory_item_id=recipe.inventory_item_id,
                ingredient_name=item.name,
                quantity=recipe.quantity,
                unit=recipe.unit,
                notes=recipe.notes,
                cost_per_unit=item.cost_per_unit,
            )
            for recipe, item in rows
        ]

    def check_availability(self, product_id: str, quantity: Decimal | int) -> ProductAvailability:
        """
        Check if on-hand stock covers selling ``quantity`` units of a product.

        Args:
            product_id: Product identifier
            quantity: Units the cashier intends to sell

        Returns:
            Per-ingredient requirement against current stock
        """
        quantity = Decimal(str(quantity))
        if quantity <= 0:
            raise InvalidArgumentError("Quantity must be greater than zero")

        with self.database.session_scope() as session:
            ingredients = self.resolve_in(session, product_id)
            availability = []
            for ingredient in ingredients:
                item = session.get(InventoryItemRow, ingredient.inventory_item_id)
                total_required = ingredient.quantity * quantity
                availability.append(
                    IngredientAvailability(
                        inventory_item_id=ingredient.inventory_item_id,
                        ingredient_name=ingredient.ingredient_name,
                        required_per_unit=ingredient.quantity,
                        total_required=total_required,
                        available=item.quantity,
                        remaining_after_sale=item.quantity - total_required,
                        unit=ingredient.unit,
                    )
                )

        return ProductAvailability(
            product_id=product_id,
            quantity=quantity,
            ingredients=availability,
        )

    def recipe_cost(self, product_id: str) -> Decimal:
        """Sum of ingredient quantity times cost per unit for one product unit."""
        ingredients = self.resolve(product_id)
        return sum(
            (ingredient.ingredient_cost for ingredient in ingredients),
            Decimal("0"),
        )
