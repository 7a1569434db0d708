"""
Unit tests for validation functions.

Tests cover:
- Decimal conversion
- Single-field validators
- Composite validators for ingredients, recipes, orders and stock
"""

from decimal import Decimal

import pytest

from src.utils.validators import (
    to_decimal,
    validate_choice,
    validate_customer_data,
    validate_master_ingredient_data,
    validate_non_negative_number,
    validate_order_items,
    validate_positive_number,
    validate_recipe_data,
    validate_recipe_line_data,
    validate_required_string,
    validate_stock_movement,
    validate_string_length,
    validate_unit,
)


class TestToDecimal:
    """Test conversion of user numbers."""

    def test_float_goes_through_str(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_strings_are_stripped(self):
        assert to_decimal(" 12.5 ") == Decimal("12.5")

    @pytest.mark.parametrize("value", [True, None, "abc", float("nan"), float("inf"), "Infinity"])
    def test_rejects_non_numbers(self, value):
        with pytest.raises(ValueError):
            to_decimal(value)


class TestSingleFieldValidators:
    """Test the building-block validators."""

    def test_required_string(self):
        assert validate_required_string("Hing")[0]
        assert not validate_required_string("")[0]
        assert not validate_required_string("   ")[0]
        assert not validate_required_string(None)[0]

    @pytest.mark.parametrize("value", [123, 4.5, ["Hing"], {"name": "Hing"}])
    def test_non_text_is_invalid(self, value):
        is_valid, error = validate_required_string(value, "Name")
        assert not is_valid
        assert error == "Name: Must be text"

        is_valid, error = validate_string_length(value, 3, "Name")
        assert not is_valid
        assert error == "Name: Must be text"

    def test_string_length(self):
        assert validate_string_length("abc", 3)[0]
        is_valid, error = validate_string_length("abcd", 3, "Brand")
        assert not is_valid
        assert error.startswith("Brand:")
        assert validate_string_length(None, 3)[0]

    def test_positive_number(self):
        assert validate_positive_number("0.5")[0]
        assert not validate_positive_number(0)[0]
        assert not validate_positive_number("x")[0]

    def test_non_negative_number(self):
        assert validate_non_negative_number(0)[0]
        assert not validate_non_negative_number(-0.01)[0]

    def test_unit(self):
        assert validate_unit("kg")[0]
        assert validate_unit(" ml ")[0]
        assert not validate_unit("KG")[0]
        assert not validate_unit("")[0]
        assert not validate_unit(5)[0]

    def test_choice(self):
        assert validate_choice("paid", ["paid", "unpaid"])[0]
        assert not validate_choice("PAID", ["paid", "unpaid"])[0]
        is_valid, error = validate_choice("half", ["unpaid", "partial", "paid"], "Payment status")
        assert error == "Payment status: Must be one of: unpaid, partial, paid"


class TestCompositeValidators:
    """Test the whole-record validators."""

    def test_master_ingredient(self):
        assert validate_master_ingredient_data({"name": "Hing", "price_per_kg": 0}) == (True, [])
        is_valid, errors = validate_master_ingredient_data({"name": "", "price_per_kg": -1})
        assert not is_valid
        assert len(errors) == 2

    def test_master_ingredient_with_non_text_fields(self):
        is_valid, errors = validate_master_ingredient_data({"name": 123, "price_per_kg": 1})
        assert not is_valid
        assert errors == ["Name: Must be text"]

        is_valid, errors = validate_master_ingredient_data(
            {"name": "Hing", "price_per_kg": 1, "brand": 42}
        )
        assert errors == ["Brand: Must be text"]

    def test_recipe_with_non_text_name(self):
        is_valid, errors = validate_recipe_data({"name": 123, "overheads": 0})
        assert not is_valid
        assert "Name: Must be text" in errors

    def test_recipe_line_errors_are_numbered(self):
        is_valid, errors = validate_recipe_line_data(
            {"ingredient_name": "Hing", "quantity": 0, "unit": "g"}, position=3
        )
        assert not is_valid
        assert len(errors) == 1
        assert errors[0].startswith("Ingredient 3 quantity:")

    def test_recipe_with_lines(self):
        lines = [
            {"ingredient_name": "Hing", "quantity": 5, "unit": "g"},
            {"ingredient_name": "Salt", "quantity": 5, "unit": "cup"},
        ]
        is_valid, errors = validate_recipe_data({"name": "Podi", "overheads": 0}, lines)
        assert not is_valid
        assert len(errors) == 1
        assert errors[0].startswith("Ingredient 2 unit")

    def test_recipe_nutrients_and_price(self):
        is_valid, errors = validate_recipe_data(
            {"name": "Podi", "selling_price": -1, "protein": "lots"}
        )
        assert not is_valid
        assert len(errors) == 2

    def test_customer(self):
        assert validate_customer_data(
            {"customer_name": "Ravi", "phone_number": "98765", "address": "Chennai"}
        )[0]
        is_valid, errors = validate_customer_data({"customer_name": "Ravi", "phone_number": "1" * 30})
        assert not is_valid
        assert len(errors) == 2

    def test_order_items(self):
        assert not validate_order_items([])[0]
        is_valid, errors = validate_order_items(
            [{"recipe_name": "Podi", "quantity_type": "", "amount": 10}]
        )
        assert not is_valid
        assert errors[0].startswith("Item 1 quantity")

    def test_stock_movement(self):
        assert validate_stock_movement({"opening": 0, "used": "2.5"})[0]
        is_valid, errors = validate_stock_movement({"opening_stock": -1})
        assert not is_valid
        assert errors[0].startswith("Opening Stock")
