"""
Tests for the indent (multi-recipe ingredient demand).

Tests cover:
- Selection of recipes by desired quantity
- Per-ingredient weight, cost and recipe columns
- Ordering and grand total
- Unresolved ingredients and invalid units
- Tabular output
"""

import logging
from decimal import Decimal

import pytest

from src.services.dto import MasterIngredientData, RecipeData, RecipeIngredientLine
from src.services.exceptions import InvalidUnit
from src.services.indent_service import aggregate_indent, select_recipes


@pytest.fixture
def two_coriander_recipes():
    """Two recipes sharing Coriander Seeds (200 g and 150 g)."""
    return [
        RecipeData(
            id=1,
            name="Sambar Powder",
            ingredients=(RecipeIngredientLine("Coriander Seeds", 200, "g"),),
        ),
        RecipeData(
            id=2,
            name="Rasam Powder",
            ingredients=(RecipeIngredientLine("Coriander Seeds", 150, "g"),),
        ),
    ]


class TestAggregateIndent:
    """Test aggregation across recipes."""

    def test_shared_ingredient_scenario(self, coriander, two_coriander_recipes):
        report = aggregate_indent(two_coriander_recipes, {1: 2, 2: 1}, [coriander])

        entry = report.get_entry("Coriander Seeds")
        assert entry.total_weight == Decimal("550")
        assert entry.total_cost == Decimal("66")
        assert entry.recipes == {"Sambar Powder": Decimal("400"), "Rasam Powder": Decimal("150")}
        assert report.grand_total == Decimal("66")

    def test_zero_and_missing_quantities_are_excluded(self, master_list, sambar_powder, rasam_powder):
        report = aggregate_indent([sambar_powder, rasam_powder], {1: 0}, master_list)
        assert report.is_empty
        assert report.per_ingredient == ()
        assert report.grand_total == 0

        report = aggregate_indent([sambar_powder, rasam_powder], {2: 1}, master_list)
        assert report.recipe_columns == ("Rasam Powder",)
        for entry in report.per_ingredient:
            assert "Sambar Powder" not in entry.recipes
        with pytest.raises(KeyError):
            report.get_entry("Toor Dal")

    def test_negative_and_junk_quantities_are_excluded(self, master_list, sambar_powder, rasam_powder):
        report = aggregate_indent(
            [sambar_powder, rasam_powder], {1: -3, 2: "lots"}, master_list
        )
        assert report.is_empty

    def test_grand_total_is_sum_of_entry_costs(self, master_list, sambar_powder, rasam_powder):
        report = aggregate_indent([sambar_powder, rasam_powder], {1: 3, 2: 2}, master_list)
        assert report.grand_total == sum(e.total_cost for e in report.per_ingredient)
        # Sambar 61 * 3 + Rasam (36 + 15) * 2
        assert report.grand_total == Decimal("285")

    def test_weights_stay_in_line_units(self, master_list, rasam_powder):
        report = aggregate_indent([rasam_powder], {2: 2}, master_list)
        chilli = report.get_entry("Red Chilli")
        assert chilli.total_weight == Decimal("0.10")
        assert chilli.total_cost == Decimal("30")

    def test_ordering_is_independent_of_input_order(self, master_list, sambar_powder, rasam_powder):
        forward = aggregate_indent([sambar_powder, rasam_powder], {1: 1, 2: 1}, master_list)
        backward = aggregate_indent([rasam_powder, sambar_powder], {1: 1, 2: 1}, master_list)

        assert forward.recipe_columns == ("Rasam Powder", "Sambar Powder")
        assert [e.ingredient_name for e in forward.per_ingredient] == [
            "Coriander Seeds",
            "Red Chilli",
            "Toor Dal",
        ]
        assert forward.recipe_columns == backward.recipe_columns
        assert [e.ingredient_name for e in forward.per_ingredient] == [
            e.ingredient_name for e in backward.per_ingredient
        ]

    def test_case_sensitive_ordering(self):
        prices = [MasterIngredientData(name="salt", price_per_kg=20)]
        recipe = RecipeData(
            id="x",
            name="Mix",
            ingredients=(
                RecipeIngredientLine("salt", 10, "g"),
                RecipeIngredientLine("Urad Dal", 10, "g"),
            ),
        )
        report = aggregate_indent([recipe], {"x": 1}, prices)
        assert [e.ingredient_name for e in report.per_ingredient] == ["Urad Dal", "salt"]

    def test_unresolved_ingredient_counts_weight_not_cost(self, master_list, caplog):
        recipe = RecipeData(
            id=7,
            name="Curry Leaf Podi",
            ingredients=(
                RecipeIngredientLine("Curry Leaves", 100, "g"),
                RecipeIngredientLine("Toor Dal", 100, "g"),
            ),
        )
        with caplog.at_level(logging.WARNING):
            report = aggregate_indent([recipe], {7: 2}, master_list)

        leaves = report.get_entry("Curry Leaves")
        assert leaves.total_weight == Decimal("200")
        assert leaves.total_cost == 0
        assert report.unresolved_ingredients == ("Curry Leaves",)
        assert report.grand_total == Decimal("28")
        assert any(
            getattr(r, "ingredient_name", None) == "Curry Leaves" for r in caplog.records
        )

    def test_invalid_unit_raises(self, master_list):
        recipe = RecipeData(
            id=8, name="Bad", ingredients=(RecipeIngredientLine("Toor Dal", 1, "lb"),)
        )
        with pytest.raises(InvalidUnit):
            aggregate_indent([recipe], {8: 1}, master_list)

    def test_invalid_unit_in_unselected_recipe_is_ignored(self, master_list, sambar_powder):
        bad = RecipeData(id=8, name="Bad", ingredients=(RecipeIngredientLine("Toor Dal", 1, "lb"),))
        report = aggregate_indent([sambar_powder, bad], {1: 1}, master_list)
        assert report.recipe_columns == ("Sambar Powder",)

    def test_same_ingredient_twice_in_one_recipe_adds_up(self, coriander):
        recipe = RecipeData(
            id=1,
            name="Double",
            ingredients=(
                RecipeIngredientLine("Coriander Seeds", 100, "g"),
                RecipeIngredientLine("Coriander Seeds", 50, "g"),
            ),
        )
        report = aggregate_indent([recipe], {1: 2}, [coriander])
        assert report.get_entry("Coriander Seeds").recipes == {"Double": Decimal("300")}

    def test_recipe_quantities(self, master_list, sambar_powder, rasam_powder):
        report = aggregate_indent([sambar_powder, rasam_powder], {1: 2, 2: "3"}, master_list)
        assert report.recipe_quantities == (("Rasam Powder", 3), ("Sambar Powder", 2))
        assert report.recipe_quantity_rows() == [
            ["Recipe Name", "Quantity"],
            ["Rasam Powder", 3],
            ["Sambar Powder", 2],
        ]


class TestSelectRecipes:
    """Test selection of recipes by desired quantity."""

    def test_sorted_pairs(self, sambar_powder, rasam_powder):
        pairs = select_recipes([sambar_powder, rasam_powder], {1: 1, 2: 4})
        assert [(r.name, q) for r, q in pairs] == [("Rasam Powder", 4), ("Sambar Powder", 1)]


class TestIndentRows:
    """Test the tabular form of the report."""

    def test_rows(self, coriander, two_coriander_recipes):
        two_coriander_recipes.append(
            RecipeData(
                id=3,
                name="Chutney Podi",
                ingredients=(RecipeIngredientLine("Urad Dal", 1500, "g"),),
            )
        )
        prices = [coriander, MasterIngredientData(name="Urad Dal", price_per_kg=100)]
        report = aggregate_indent(two_coriander_recipes, {1: 2, 2: 1, 3: 1}, prices)

        assert report.to_rows() == [
            ["Ingredient", "Total Weight", "Total Cost", "Chutney Podi", "Rasam Powder", "Sambar Powder"],
            ["Coriander Seeds", "550 g", "₹66.00", "-", "150 g", "400 g"],
            ["Urad Dal", "1.50 kg", "₹150.00", "1.50 kg", "-", "-"],
            ["Grand Total", "", "₹216.00"],
        ]
