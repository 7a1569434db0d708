"""
Recipe Scaling Service - project a recipe to a batch size.

The multiplier is the desired output in the recipe's natural unit (for
example kilograms of finished podi). Ingredient quantities, costs and the
selling price all scale linearly, overheads included: overhead is treated
as a per-unit-batch cost rather than a fixed charge per production run.

A multiplier that is zero, negative, not a number or not finite is replaced
with 1; scaling never fails on it.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Tuple

from src.services.costing_service import RecipeCost
from src.services.dto import RecipeData, RecipeIngredientLine
from src.services.logging_utils import get_service_logger, log_operation
from src.utils.validators import to_decimal

logger = get_service_logger(__name__)

DEFAULT_MULTIPLIER = Decimal("1")


@dataclass(frozen=True)
class ScaledRecipe:
    """A recipe's lines and figures multiplied to a batch size.

    Attributes:
        multiplier: The multiplier actually applied (after clamping)
        scaled_ingredients: Lines with quantity * multiplier, units unchanged
        scaled_raw_material_cost: raw_material_cost * multiplier
        scaled_final_cost: final_cost * multiplier
        scaled_selling_price: recipe.selling_price * multiplier
    """

    recipe_name: str
    multiplier: Decimal
    scaled_ingredients: Tuple[RecipeIngredientLine, ...]
    scaled_raw_material_cost: Decimal
    scaled_final_cost: Decimal
    scaled_selling_price: Decimal


def normalize_multiplier(value: Any) -> Decimal:
    """
    Clamp a requested multiplier to a usable value.

    Args:
        value: Requested batch multiplier (number or numeric string)

    Returns:
        The multiplier as Decimal, or 1 if it was not a positive finite number
    """
    try:
        multiplier = to_decimal(value)
    except ValueError:
        multiplier = None

    if multiplier is None or multiplier <= 0:
        log_operation(
            logger,
            operation="scale_recipe",
            outcome="multiplier_clamped",
            level=logging.DEBUG,
            requested_multiplier=repr(value),
        )
        return DEFAULT_MULTIPLIER
    return multiplier


def scale_recipe(recipe: RecipeData, cost: RecipeCost, multiplier: Any) -> ScaledRecipe:
    """
    Scale a recipe and its cost figures by a batch multiplier.

    Args:
        recipe: Recipe to scale
        cost: Result of calculate_recipe_cost for the same recipe
        multiplier: Desired batch multiplier

    Returns:
        ScaledRecipe; with a multiplier of 1 every figure equals its input

    Example:
        >>> scaled = scale_recipe(recipe, cost, 3)
        >>> scaled.scaled_final_cost == cost.final_cost * 3
        True
    """
    factor = normalize_multiplier(multiplier)

    return ScaledRecipe(
        recipe_name=recipe.name,
        multiplier=factor,
        scaled_ingredients=tuple(line.scaled(factor) for line in recipe.ingredients),
        scaled_raw_material_cost=cost.raw_material_cost * factor,
        scaled_final_cost=cost.final_cost * factor,
        scaled_selling_price=recipe.selling_price * factor,
    )
