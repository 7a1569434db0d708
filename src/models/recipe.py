"""
Recipe models for podi recipes.

This module contains:
- Recipe: Recipe with overheads, selling price and descriptive fields
- RecipeIngredient: Ingredient lines owned by a recipe
"""

from sqlalchemy import (
    Column,
    String,
    Integer,
    Numeric,
    Text,
    ForeignKey,
    Index,
    CheckConstraint,
    Boolean,
)
from sqlalchemy.orm import relationship

from .base import BaseModel
from src.services.dto import RecipeData, RecipeIngredientLine


class Recipe(BaseModel):
    """
    Recipe model.

    Attributes:
        name: Recipe name (e.g., "Sambar Powder")
        preparation: Preparation instructions
        overheads: Fixed per-batch surcharge (packing, gas, labour)
        selling_price: Stored selling price (policy-derived or manual)
        shelf_life: Free-text shelf life (e.g., "6 months")
        storage: Storage instructions
        calories, protein, fat, carbs: Optional nutrition facts
        is_hidden: Hidden recipes are left out of ordering and indent screens
    """

    __tablename__ = "recipes"

    name = Column(String(200), nullable=False, index=True)
    preparation = Column(Text, nullable=True)
    overheads = Column(Numeric(10, 4), nullable=False, default=0)
    selling_price = Column(Numeric(10, 4), nullable=False, default=0)
    shelf_life = Column(String(100), nullable=True)
    storage = Column(String(200), nullable=True)

    calories = Column(Numeric(10, 2), nullable=True)
    protein = Column(Numeric(10, 2), nullable=True)
    fat = Column(Numeric(10, 2), nullable=True)
    carbs = Column(Numeric(10, 2), nullable=True)

    is_hidden = Column(Boolean, nullable=False, default=False, index=True)

    # Lines are deleted with their recipe
    recipe_ingredients = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        lazy="joined",
        order_by="RecipeIngredient.id",
    )

    __table_args__ = (
        CheckConstraint("overheads >= 0", name="ck_recipe_overheads_non_negative"),
    )

    def __repr__(self) -> str:
        return f"Recipe(id={self.id}, name='{self.name}')"

    def to_dto(self) -> RecipeData:
        """Detached, immutable copy including ingredient lines."""
        return RecipeData(
            id=self.id,
            name=self.name,
            overheads=self.overheads,
            selling_price=self.selling_price,
            ingredients=tuple(ri.to_line() for ri in self.recipe_ingredients),
            is_hidden=self.is_hidden,
            preparation=self.preparation,
            shelf_life=self.shelf_life,
            storage=self.storage,
            calories=self.calories,
            protein=self.protein,
            fat=self.fat,
            carbs=self.carbs,
        )


class RecipeIngredient(BaseModel):
    """
    One ingredient line of a recipe.

    The ingredient is referenced by name rather than by foreign key so a
    recipe can be saved before its ingredient is priced; such a line costs
    zero until a master ingredient with that name exists.

    Attributes:
        recipe_id: Owning recipe
        ingredient_name: Master ingredient name
        quantity: Amount in `unit`
        unit: One of g, kg, ml, l
    """

    __tablename__ = "recipe_ingredients"

    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False)
    ingredient_name = Column(String(200), nullable=False)
    quantity = Column(Numeric(10, 3), nullable=False)
    unit = Column(String(10), nullable=False)

    recipe = relationship("Recipe", back_populates="recipe_ingredients")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_recipe_ingredient_quantity_positive"),
        CheckConstraint("unit IN ('g', 'kg', 'ml', 'l')", name="ck_recipe_ingredient_unit"),
        Index("idx_recipe_ingredient_recipe", "recipe_id"),
        Index("idx_recipe_ingredient_name", "ingredient_name"),
    )

    def __repr__(self) -> str:
        return (
            f"RecipeIngredient(recipe_id={self.recipe_id}, "
            f"ingredient_name='{self.ingredient_name}', "
            f"quantity={self.quantity}, unit='{self.unit}')"
        )

    def to_line(self) -> RecipeIngredientLine:
        return RecipeIngredientLine(
            ingredient_name=self.ingredient_name,
            quantity=self.quantity,
            unit=self.unit,
        )
