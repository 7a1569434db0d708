"""
Indent Service - ingredient demand and cost across many recipes.

Given the recipes on hand, a desired batch quantity per recipe and the
master price list, aggregate_indent() builds the procurement worksheet
("indent"): one row per ingredient with the total weight needed, its cost,
and one column per selected recipe showing that recipe's contribution.

Weights are summed in the units written on the recipe lines (grams for
almost every podi recipe) and are only converted to kilograms for the cost
arithmetic. Ingredient rows and recipe columns are ordered by name
(case-sensitive, code point order) regardless of input order.

Usage:
    report = aggregate_indent(recipes, {recipe.id: 2}, master_ingredients)
    for row in report.to_rows():
        print(row)
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from src.services.costing_service import MasterList, as_price_index, resolve_price_per_kg
from src.services.dto import RecipeData
from src.services.logging_utils import get_service_logger, log_operation
from src.services.unit_converter import format_currency, format_weight, to_canonical_mass
from src.utils.constants import CURRENCY_SYMBOL, EMPTY_CELL
from src.utils.validators import to_decimal

logger = get_service_logger(__name__)

ZERO = Decimal("0")


@dataclass
class IngredientDemandEntry:
    """Aggregated demand for one ingredient across the selected recipes."""

    ingredient_name: str
    total_weight: Decimal = ZERO
    total_cost: Decimal = ZERO
    recipes: Dict[str, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class IndentReport:
    """The indent worksheet.

    Attributes:
        per_ingredient: Demand entries sorted by ingredient name
        recipe_columns: Names of the recipes included, sorted
        grand_total: Sum of total_cost over all entries
        recipe_quantities: (recipe name, desired quantity) pairs, sorted by name
        unresolved_ingredients: Ingredient names missing from the master list
    """

    per_ingredient: Tuple[IngredientDemandEntry, ...]
    recipe_columns: Tuple[str, ...]
    grand_total: Decimal
    recipe_quantities: Tuple[Tuple[str, int], ...] = ()
    unresolved_ingredients: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.recipe_columns

    def get_entry(self, ingredient_name: str) -> IngredientDemandEntry:
        """Return the entry for an ingredient.

        Raises:
            KeyError: If no selected recipe uses the ingredient
        """
        for entry in self.per_ingredient:
            if entry.ingredient_name == ingredient_name:
                return entry
        raise KeyError(ingredient_name)

    def to_rows(self, currency_symbol: str = CURRENCY_SYMBOL) -> List[List[str]]:
        """
        Tabular form for spreadsheet or print formatters.

        Returns:
            Header row, one row per ingredient, and a closing grand total row
        """
        rows: List[List[str]] = [
            ["Ingredient", "Total Weight", "Total Cost", *self.recipe_columns]
        ]
        for entry in self.per_ingredient:
            row = [
                entry.ingredient_name,
                format_weight(entry.total_weight),
                format_currency(entry.total_cost, currency_symbol),
            ]
            for recipe_name in self.recipe_columns:
                weight = entry.recipes.get(recipe_name)
                row.append(format_weight(weight) if weight else EMPTY_CELL)
            rows.append(row)
        rows.append(["Grand Total", "", format_currency(self.grand_total, currency_symbol)])
        return rows

    def recipe_quantity_rows(self) -> List[List[Any]]:
        """Rows for the companion 'Recipe Quantities' sheet."""
        return [["Recipe Name", "Quantity"], *[[name, qty] for name, qty in self.recipe_quantities]]


def _desired_quantity(value: Any) -> int:
    """Batch count for a recipe; anything unusable counts as 0 (excluded)."""
    try:
        quantity = to_decimal(value)
    except ValueError:
        return 0
    if quantity <= 0:
        return 0
    return int(quantity)


def select_recipes(
    recipes: Iterable[RecipeData],
    desired_quantities: Mapping[Any, Any],
) -> List[Tuple[RecipeData, int]]:
    """
    Pair each recipe with its desired quantity, dropping the unselected ones.

    Args:
        recipes: Candidate recipes
        desired_quantities: Recipe id -> batch multiplier

    Returns:
        (recipe, quantity) pairs with quantity > 0, sorted by recipe name
    """
    selected = []
    for recipe in recipes:
        quantity = _desired_quantity(desired_quantities.get(recipe.id, 0))
        if quantity > 0:
            selected.append((recipe, quantity))
    return sorted(selected, key=lambda pair: pair[0].name)


def aggregate_indent(
    recipes: Iterable[RecipeData],
    desired_quantities: Mapping[Any, Any],
    master_list: MasterList,
) -> IndentReport:
    """
    Aggregate ingredient demand and cost across the selected recipes.

    For every line of every recipe with a desired quantity above zero:
    line_weight = quantity * desired (line units) and
    line_cost = kilograms(line_weight) * price_per_kg (0 if unpriced).
    Weights and costs accumulate per ingredient name.

    Args:
        recipes: Recipes to choose from (hidden recipes are not filtered here)
        desired_quantities: Recipe id -> batch multiplier; 0 or missing excludes
        master_list: Master ingredient records or a prebuilt price index

    Returns:
        IndentReport with grand_total == sum of entry total_cost

    Raises:
        InvalidUnit: If any selected recipe line uses an unrecognized unit
    """
    prices = as_price_index(master_list)
    selected = select_recipes(recipes, desired_quantities)

    buckets: Dict[str, IngredientDemandEntry] = {}
    unresolved = set()

    for recipe, quantity in selected:
        for line in recipe.ingredients:
            price = resolve_price_per_kg(line.ingredient_name, prices)
            line_weight = line.quantity * quantity
            kilograms = to_canonical_mass(line_weight, line.unit)

            if price is None:
                unresolved.add(line.ingredient_name)
                line_cost = ZERO
            else:
                line_cost = kilograms * price

            entry = buckets.get(line.ingredient_name)
            if entry is None:
                entry = IngredientDemandEntry(ingredient_name=line.ingredient_name)
                buckets[line.ingredient_name] = entry

            entry.total_weight += line_weight
            entry.total_cost += line_cost
            entry.recipes[recipe.name] = entry.recipes.get(recipe.name, ZERO) + line_weight

    for ingredient_name in sorted(unresolved):
        log_operation(
            logger,
            operation="aggregate_indent",
            outcome="unresolved_ingredient",
            level=logging.WARNING,
            ingredient_name=ingredient_name,
        )

    per_ingredient = tuple(buckets[name] for name in sorted(buckets))
    for entry in per_ingredient:
        entry.recipes = dict(sorted(entry.recipes.items()))

    grand_total = sum((entry.total_cost for entry in per_ingredient), ZERO)
    recipe_columns = tuple(sorted({recipe.name for recipe, _ in selected}))

    log_operation(
        logger,
        operation="aggregate_indent",
        outcome="success",
        level=logging.DEBUG,
        recipe_count=len(recipe_columns),
        ingredient_count=len(per_ingredient),
        grand_total=str(grand_total),
    )

    return IndentReport(
        per_ingredient=per_ingredient,
        recipe_columns=recipe_columns,
        grand_total=grand_total,
        recipe_quantities=tuple((recipe.name, quantity) for recipe, quantity in selected),
        unresolved_ingredients=tuple(sorted(unresolved)),
    )
