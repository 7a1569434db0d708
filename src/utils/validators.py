"""
Input validation functions for the Podi Tracker application.

This module provides validation functions for all user inputs including:
- Numeric validation (positive, non-negative)
- String validation (length, required fields)
- Unit validation
- Composite validators for ingredient, recipe, order and stock data

Validators return (is_valid, error_message) tuples; the composite
validators return (is_valid, list_of_errors) so services can raise a
single ValidationError carrying every problem at once.
"""

import math
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional, Tuple

from .constants import (
    ALL_UNITS,
    MAX_ADDRESS_LENGTH,
    MAX_BRAND_LENGTH,
    MAX_NAME_LENGTH,
    MAX_PHONE_LENGTH,
    ERROR_REQUIRED_FIELD,
    ERROR_INVALID_NUMBER,
    ERROR_INVALID_POSITIVE,
    ERROR_INVALID_NON_NEGATIVE,
    ERROR_INVALID_UNIT,
    ERROR_INVALID_CHOICE,
    ERROR_INVALID_TEXT,
)


def to_decimal(value: Any) -> Decimal:
    """
    Convert a user-supplied number to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1") rather than its
    binary expansion.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise ValueError(f"Not a finite number: {value!r}")
        result = Decimal(str(value))
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, TypeError):
            raise ValueError(f"Not a number: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def validate_required_string(value: Optional[str], field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a string field is not empty.

    Args:
        value: The string value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return False, f"{field_name}: {ERROR_REQUIRED_FIELD}"
    if not isinstance(value, str):
        return False, f"{field_name}: {ERROR_INVALID_TEXT}"
    return True, ""


def validate_string_length(
    value: str, max_length: int, field_name: str = "Field"
) -> Tuple[bool, str]:
    """Validate that a string doesn't exceed maximum length."""
    if value is not None and not isinstance(value, str):
        return False, f"{field_name}: {ERROR_INVALID_TEXT}"
    if value and len(value) > max_length:
        return False, f"{field_name}: Must be {max_length} characters or less"
    return True, ""


def validate_positive_number(value: Any, field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a value is a positive number (> 0).

    Args:
        value: The value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        num_value = to_decimal(value)
    except ValueError:
        return False, f"{field_name}: {ERROR_INVALID_NUMBER}"
    if num_value <= 0:
        return False, f"{field_name}: {ERROR_INVALID_POSITIVE}"
    return True, ""


def validate_non_negative_number(value: Any, field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a value is a non-negative number (>= 0).

    Args:
        value: The value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        num_value = to_decimal(value)
    except ValueError:
        return False, f"{field_name}: {ERROR_INVALID_NUMBER}"
    if num_value < 0:
        return False, f"{field_name}: {ERROR_INVALID_NON_NEGATIVE}"
    return True, ""


def validate_unit(unit: str, field_name: str = "Unit") -> Tuple[bool, str]:
    """
    Validate that a unit is one of the recipe line units.

    Matching is exact: the stored unit codes are lower case.
    """
    if not unit:
        return False, f"{field_name}: {ERROR_REQUIRED_FIELD}"

    if not isinstance(unit, str) or unit.strip() not in ALL_UNITS:
        return False, f"{field_name}: {ERROR_INVALID_UNIT}"

    return True, ""


def validate_choice(value: str, choices: List[str], field_name: str = "Field") -> Tuple[bool, str]:
    """Validate that a value is one of a fixed set of choices."""
    if value not in choices:
        return False, f"{field_name}: {ERROR_INVALID_CHOICE}: {', '.join(choices)}"
    return True, ""


def validate_master_ingredient_data(data: dict) -> Tuple[bool, list]:
    """
    Validate all fields for a master ingredient.

    Args:
        data: Dictionary with name, price_per_kg and optional brand

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []

    name = data.get("name")
    is_valid, error = validate_required_string(name, "Name")
    if not is_valid:
        errors.append(error)
    else:
        is_valid, error = validate_string_length(name, MAX_NAME_LENGTH, "Name")
        if not is_valid:
            errors.append(error)

    is_valid, error = validate_non_negative_number(data.get("price_per_kg"), "Price per kg")
    if not is_valid:
        errors.append(error)

    if data.get("brand"):
        is_valid, error = validate_string_length(data["brand"], MAX_BRAND_LENGTH, "Brand")
        if not is_valid:
            errors.append(error)

    return len(errors) == 0, errors


def validate_recipe_line_data(data: dict, position: Optional[int] = None) -> Tuple[bool, list]:
    """
    Validate one recipe ingredient line.

    Args:
        data: Dictionary with ingredient_name, quantity and unit
        position: 1-based line number used to prefix error messages

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    prefix = f"Ingredient {position} " if position is not None else ""
    errors = []

    is_valid, error = validate_required_string(data.get("ingredient_name"), f"{prefix}name")
    if not is_valid:
        errors.append(error)

    is_valid, error = validate_positive_number(data.get("quantity"), f"{prefix}quantity")
    if not is_valid:
        errors.append(error)

    is_valid, error = validate_unit(data.get("unit"), f"{prefix}unit")
    if not is_valid:
        errors.append(error)

    return len(errors) == 0, errors


def validate_recipe_data(data: dict, lines: Optional[List[dict]] = None) -> Tuple[bool, list]:
    """
    Validate recipe fields and, optionally, its ingredient lines.

    Args:
        data: Dictionary with recipe fields (name, overheads, selling_price, ...)
        lines: Optional list of ingredient line dictionaries

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []

    name = data.get("name")
    is_valid, error = validate_required_string(name, "Name")
    if not is_valid:
        errors.append(error)
    else:
        is_valid, error = validate_string_length(name, MAX_NAME_LENGTH, "Name")
        if not is_valid:
            errors.append(error)

    is_valid, error = validate_non_negative_number(data.get("overheads", 0), "Overheads")
    if not is_valid:
        errors.append(error)

    if data.get("selling_price") is not None:
        is_valid, error = validate_non_negative_number(data["selling_price"], "Selling price")
        if not is_valid:
            errors.append(error)

    for field_name in ("calories", "protein", "fat", "carbs"):
        if data.get(field_name) is not None:
            is_valid, error = validate_non_negative_number(data[field_name], field_name.title())
            if not is_valid:
                errors.append(error)

    for position, line in enumerate(lines or [], start=1):
        _, line_errors = validate_recipe_line_data(line, position)
        errors.extend(line_errors)

    return len(errors) == 0, errors


def validate_customer_data(data: dict) -> Tuple[bool, list]:
    """Validate the customer fields of an order."""
    errors = []

    for key, label, max_length in (
        ("customer_name", "Customer name", MAX_NAME_LENGTH),
        ("phone_number", "Phone number", MAX_PHONE_LENGTH),
        ("address", "Address", MAX_ADDRESS_LENGTH),
    ):
        value = data.get(key)
        is_valid, error = validate_required_string(value, label)
        if not is_valid:
            errors.append(error)
            continue
        is_valid, error = validate_string_length(value, max_length, label)
        if not is_valid:
            errors.append(error)

    return len(errors) == 0, errors


def validate_order_items(items: List[dict]) -> Tuple[bool, list]:
    """Validate order line items (recipe_name, quantity_type, amount)."""
    errors = []

    if not items:
        errors.append("Items: At least one item is required")

    for position, item in enumerate(items or [], start=1):
        is_valid, error = validate_required_string(item.get("recipe_name"), f"Item {position} recipe")
        if not is_valid:
            errors.append(error)
        is_valid, error = validate_required_string(
            item.get("quantity_type"), f"Item {position} quantity"
        )
        if not is_valid:
            errors.append(error)
        is_valid, error = validate_non_negative_number(item.get("amount"), f"Item {position} amount")
        if not is_valid:
            errors.append(error)

    return len(errors) == 0, errors


def validate_stock_movement(values: dict) -> Tuple[bool, list]:
    """Validate the non-negative quantities of a stock register entry."""
    errors = []
    for field_name, value in values.items():
        is_valid, error = validate_non_negative_number(value, field_name.replace("_", " ").title())
        if not is_valid:
            errors.append(error)
    return len(errors) == 0, errors
