"""
Costing Service - recipe cost and selling price calculations.

This service provides the pure calculations behind every price shown in the
application:
- Price lookup against the master ingredient list
- Raw material and final cost of a recipe
- The recommended selling price (100% markup) and manual overrides
- Profit margin against a stored selling price

All functions are pure: they take fully materialized values (see
src.services.dto), never touch the database and never mutate their inputs.

An ingredient missing from the master list contributes zero cost. The name
is reported in RecipeCost.unresolved_ingredients and logged at WARNING so the
data entry can be fixed. An unrecognized unit raises InvalidUnit.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from src.services.dto import MasterIngredientData, RecipeData, RecipeIngredientLine
from src.services.logging_utils import get_service_logger, log_operation
from src.services.unit_converter import to_canonical_mass
from src.utils.constants import SELLING_PRICE_MULTIPLIER
from src.utils.validators import to_decimal

logger = get_service_logger(__name__)

# Either the master list itself or an index built from it
PriceIndex = Mapping[str, Decimal]
MasterList = Union[PriceIndex, Iterable[MasterIngredientData]]

ZERO = Decimal("0")


@dataclass(frozen=True)
class LineCost:
    """Cost of one recipe line."""

    line: RecipeIngredientLine
    price_per_kg: Optional[Decimal]
    cost: Decimal

    @property
    def is_resolved(self) -> bool:
        return self.price_per_kg is not None


@dataclass(frozen=True)
class RecipeCost:
    """Result of costing one recipe.

    Attributes:
        raw_material_cost: Sum of ingredient line costs
        final_cost: raw_material_cost + overheads
        line_costs: Per-line breakdown in recipe line order
        unresolved_ingredients: Sorted names missing from the master list
    """

    raw_material_cost: Decimal
    final_cost: Decimal
    line_costs: Tuple[LineCost, ...] = ()
    unresolved_ingredients: Tuple[str, ...] = ()

    @property
    def overheads(self) -> Decimal:
        return self.final_cost - self.raw_material_cost


@dataclass(frozen=True)
class RecipeSummary:
    """Cost, recommended price and margin for a recipe card."""

    recipe_name: str
    cost: RecipeCost
    recommended_price: Decimal
    selling_price: Decimal
    profit_margin: Optional[Decimal]


# ============================================================================
# Price Resolution
# ============================================================================


def build_price_index(master_list: Iterable[MasterIngredientData]) -> Dict[str, Decimal]:
    """
    Index master ingredient prices by name.

    If a name appears more than once the first record wins, matching a
    front-to-back search of the list.

    Args:
        master_list: Master ingredient records

    Returns:
        Dict of ingredient name -> price per kg
    """
    index: Dict[str, Decimal] = {}
    for ingredient in master_list:
        if ingredient.name not in index:
            index[ingredient.name] = ingredient.price_per_kg
    return index


def as_price_index(master_list: MasterList) -> PriceIndex:
    if isinstance(master_list, Mapping):
        return master_list
    return build_price_index(master_list)


def resolve_price_per_kg(name: str, master_list: MasterList) -> Optional[Decimal]:
    """
    Look up the price per kilogram of an ingredient.

    Matching is exact and case-sensitive.

    Args:
        name: Ingredient name as written on the recipe line
        master_list: Master ingredient records or a prebuilt price index

    Returns:
        Price per kg, or None when the ingredient is not in the master list
    """
    price = as_price_index(master_list).get(name)
    if price is None:
        return None
    return to_decimal(price)


# ============================================================================
# Recipe Cost
# ============================================================================


def _cost_line(line: RecipeIngredientLine, prices: PriceIndex) -> LineCost:
    price = resolve_price_per_kg(line.ingredient_name, prices)
    # Unit is checked even for lines with no master price
    kilograms = to_canonical_mass(line.quantity, line.unit)
    if price is None:
        return LineCost(line=line, price_per_kg=None, cost=ZERO)
    return LineCost(line=line, price_per_kg=price, cost=kilograms * price)


def calculate_line_cost(line: Any, master_list: MasterList) -> Decimal:
    """
    Cost of a single ingredient line.

    Args:
        line: RecipeIngredientLine or a dict with ingredient_name/quantity/unit
        master_list: Master ingredient records or a prebuilt price index

    Returns:
        Line cost, 0 if the ingredient is not in the master list

    Raises:
        InvalidUnit: If the line's unit is not recognized
    """
    if not isinstance(line, RecipeIngredientLine):
        line = RecipeIngredientLine.from_dict(line)
    return _cost_line(line, as_price_index(master_list)).cost


def calculate_recipe_cost(recipe: RecipeData, master_list: MasterList) -> RecipeCost:
    """
    Compute raw material cost and final cost for one recipe.

    raw_material_cost is the sum over lines of kilograms * price_per_kg;
    final_cost adds the recipe's overheads. No rounding is applied.

    Args:
        recipe: Recipe with its ingredient lines
        master_list: Master ingredient records or a prebuilt price index

    Returns:
        RecipeCost with per-line breakdown and unresolved ingredient names

    Raises:
        InvalidUnit: If any line uses an unrecognized unit
    """
    prices = as_price_index(master_list)

    line_costs: List[LineCost] = [_cost_line(line, prices) for line in recipe.ingredients]
    raw_material_cost = sum((lc.cost for lc in line_costs), ZERO)
    unresolved = tuple(sorted({lc.line.ingredient_name for lc in line_costs if not lc.is_resolved}))

    for ingredient_name in unresolved:
        log_operation(
            logger,
            operation="calculate_recipe_cost",
            outcome="unresolved_ingredient",
            level=logging.WARNING,
            recipe_name=recipe.name,
            ingredient_name=ingredient_name,
        )

    return RecipeCost(
        raw_material_cost=raw_material_cost,
        final_cost=raw_material_cost + recipe.overheads,
        line_costs=tuple(line_costs),
        unresolved_ingredients=unresolved,
    )


# ============================================================================
# Pricing Policy
# ============================================================================


def recommended_price(final_cost: Any) -> Decimal:
    """
    Recommended selling price for a final cost (100% markup).

    Example:
        >>> recommended_price(Decimal("74"))
        Decimal('148')
    """
    return to_decimal(final_cost) * SELLING_PRICE_MULTIPLIER


def resolve_selling_price(final_cost: Any, manual_price: Any = None) -> Decimal:
    """
    Selling price to store for a recipe.

    A manual price is used as given, without any reasonableness check;
    otherwise the recommended price applies.
    """
    if manual_price is not None:
        return to_decimal(manual_price)
    return recommended_price(final_cost)


def profit_margin(selling_price: Any, final_cost: Any) -> Optional[Decimal]:
    """
    Profit as a percentage of the selling price.

    Returns:
        (selling_price - final_cost) / selling_price * 100, or None when
        the selling price is zero
    """
    price = to_decimal(selling_price)
    if price == 0:
        return None
    return (price - to_decimal(final_cost)) / price * 100


def summarize_recipe(recipe: RecipeData, master_list: MasterList) -> RecipeSummary:
    """Cost a recipe and compare its stored selling price to the policy price."""
    cost = calculate_recipe_cost(recipe, master_list)
    return RecipeSummary(
        recipe_name=recipe.name,
        cost=cost,
        recommended_price=recommended_price(cost.final_cost),
        selling_price=recipe.selling_price,
        profit_margin=profit_margin(recipe.selling_price, cost.final_cost),
    )
