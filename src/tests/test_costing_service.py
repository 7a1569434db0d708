"""
Tests for recipe costing and the pricing policy.

Tests cover:
- Price lookup against the master list
- Raw material and final cost, including unpriced ingredients
- Recommended price, manual prices and profit margin
- Recipe summary
"""

import logging
from decimal import Decimal

import pytest

from src.services.costing_service import (
    build_price_index,
    calculate_line_cost,
    calculate_recipe_cost,
    profit_margin,
    recommended_price,
    resolve_price_per_kg,
    resolve_selling_price,
    summarize_recipe,
)
from src.services.dto import MasterIngredientData, RecipeData, RecipeIngredientLine
from src.services.exceptions import InvalidUnit


@pytest.fixture
def coriander_recipe():
    """Sambar Powder with a single 200 g coriander line and overheads of 50."""
    return RecipeData(
        id=1,
        name="Sambar Powder",
        overheads=Decimal("50"),
        ingredients=(RecipeIngredientLine("Coriander Seeds", Decimal("200"), "g"),),
    )


class TestPriceResolution:
    """Test exact-name price lookup."""

    def test_resolves_known_ingredient(self, master_list):
        assert resolve_price_per_kg("Coriander Seeds", master_list) == Decimal("120")

    def test_unknown_ingredient_returns_none(self, master_list):
        assert resolve_price_per_kg("Cumin", master_list) is None

    def test_match_is_case_sensitive(self, master_list):
        assert resolve_price_per_kg("coriander seeds", master_list) is None

    def test_accepts_prebuilt_index(self, master_list):
        index = build_price_index(master_list)
        assert resolve_price_per_kg("Toor Dal", index) == Decimal("140")

    def test_first_duplicate_wins(self):
        index = build_price_index(
            [
                MasterIngredientData(name="Urad Dal", price_per_kg=100),
                MasterIngredientData(name="Urad Dal", price_per_kg=999),
            ]
        )
        assert index == {"Urad Dal": Decimal("100")}


class TestRecipeCost:
    """Test raw material and final cost."""

    def test_coriander_scenario(self, coriander, coriander_recipe):
        cost = calculate_recipe_cost(coriander_recipe, [coriander])
        assert cost.raw_material_cost == Decimal("24")
        assert cost.final_cost == Decimal("74")
        assert cost.overheads == Decimal("50")
        assert recommended_price(cost.final_cost) == Decimal("148")

    def test_empty_recipe_costs_nothing(self, master_list):
        recipe = RecipeData(id=9, name="Empty", overheads=0)
        cost = calculate_recipe_cost(recipe, master_list)
        assert cost.raw_material_cost == 0
        assert cost.final_cost == 0
        assert cost.line_costs == ()

    def test_multi_line_recipe(self, master_list, sambar_powder):
        cost = calculate_recipe_cost(sambar_powder, master_list)
        # 0.2 * 120 + 0.1 * 300 + 0.05 * 140
        assert cost.raw_material_cost == Decimal("61")
        assert cost.final_cost == Decimal("81")

    def test_line_order_does_not_matter(self, master_list, sambar_powder):
        reversed_recipe = RecipeData(
            id=sambar_powder.id,
            name=sambar_powder.name,
            overheads=sambar_powder.overheads,
            ingredients=tuple(reversed(sambar_powder.ingredients)),
        )
        assert (
            calculate_recipe_cost(reversed_recipe, master_list).final_cost
            == calculate_recipe_cost(sambar_powder, master_list).final_cost
        )

    def test_line_costs_follow_line_order(self, master_list, sambar_powder):
        cost = calculate_recipe_cost(sambar_powder, master_list)
        assert [lc.cost for lc in cost.line_costs] == [Decimal("24"), Decimal("30"), Decimal("7")]
        assert all(lc.is_resolved for lc in cost.line_costs)

    def test_litres_and_millilitres_cost_like_kilograms_and_grams(self):
        oil = [MasterIngredientData(name="Gingelly Oil", price_per_kg=400)]
        recipe = RecipeData(
            id=3,
            name="Oil Podi",
            ingredients=(
                RecipeIngredientLine("Gingelly Oil", 250, "ml"),
                RecipeIngredientLine("Gingelly Oil", 1, "l"),
            ),
        )
        assert calculate_recipe_cost(recipe, oil).raw_material_cost == Decimal("500")

    def test_unresolved_ingredient_costs_zero_and_is_reported(self, master_list, caplog):
        recipe = RecipeData(
            id=4,
            name="Idli Podi",
            overheads=10,
            ingredients=(
                RecipeIngredientLine("Toor Dal", 100, "g"),
                RecipeIngredientLine("Sesame", 50, "g"),
                RecipeIngredientLine("Curry Leaves", 20, "g"),
            ),
        )
        with caplog.at_level(logging.WARNING):
            cost = calculate_recipe_cost(recipe, master_list)

        assert cost.raw_material_cost == Decimal("14")
        assert cost.final_cost == Decimal("24")
        assert cost.unresolved_ingredients == ("Curry Leaves", "Sesame")
        assert not cost.line_costs[1].is_resolved
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert {r.ingredient_name for r in warnings} == {"Curry Leaves", "Sesame"}
        assert all(r.recipe_name == "Idli Podi" for r in warnings)

    def test_invalid_unit_aborts(self, master_list):
        recipe = RecipeData(
            id=5,
            name="Bad",
            ingredients=(
                RecipeIngredientLine("Toor Dal", 100, "g"),
                RecipeIngredientLine("Red Chilli", 1, "lb"),
            ),
        )
        with pytest.raises(InvalidUnit):
            calculate_recipe_cost(recipe, master_list)

    def test_invalid_unit_fails_even_when_unpriced(self, master_list):
        recipe = RecipeData(
            id=6, name="Bad", ingredients=(RecipeIngredientLine("Saffron", 1, "oz"),)
        )
        with pytest.raises(InvalidUnit):
            calculate_recipe_cost(recipe, master_list)

    def test_no_rounding(self):
        prices = [MasterIngredientData(name="Pepper", price_per_kg=Decimal("333.33"))]
        recipe = RecipeData(
            id=7, name="Pepper Podi", ingredients=(RecipeIngredientLine("Pepper", 7, "g"),)
        )
        assert calculate_recipe_cost(recipe, prices).raw_material_cost == Decimal("2.33331")


class TestLineCost:
    """Test single-line previews."""

    def test_dict_line(self, master_list):
        line = {"ingredient_name": "Red Chilli", "quantity": "250", "unit": "g"}
        assert calculate_line_cost(line, master_list) == Decimal("75")

    def test_unpriced_line_is_zero(self, master_list):
        line = RecipeIngredientLine("Jaggery", 100, "g")
        assert calculate_line_cost(line, master_list) == 0


class TestPricingPolicy:
    """Test recommended and manual selling prices."""

    @pytest.mark.parametrize("final_cost", [Decimal("0"), Decimal("74"), Decimal("12.345")])
    def test_recommended_price_doubles(self, final_cost):
        assert recommended_price(final_cost) == final_cost * 2

    def test_policy_price_when_no_manual_price(self):
        assert resolve_selling_price(Decimal("74")) == Decimal("148")

    def test_manual_price_used_as_given(self):
        assert resolve_selling_price(Decimal("74"), 60) == Decimal("60")

    def test_manual_zero_is_respected(self):
        assert resolve_selling_price(Decimal("74"), 0) == Decimal("0")


class TestProfitMargin:
    """Test margin against the stored selling price."""

    def test_margin_percentage(self):
        assert profit_margin(Decimal("148"), Decimal("74")) == Decimal("50")

    def test_zero_selling_price_has_no_margin(self):
        assert profit_margin(0, Decimal("74")) is None

    def test_loss_is_negative(self):
        assert profit_margin(Decimal("50"), Decimal("75")) == Decimal("-50")


class TestSummarizeRecipe:
    """Test the recipe overview."""

    def test_summary(self, master_list, sambar_powder):
        summary = summarize_recipe(sambar_powder, master_list)
        assert summary.recipe_name == "Sambar Powder"
        assert summary.cost.final_cost == Decimal("81")
        assert summary.recommended_price == Decimal("162")
        assert summary.selling_price == Decimal("148")
        assert summary.profit_margin == (Decimal("148") - Decimal("81")) / Decimal("148") * 100
