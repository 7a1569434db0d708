"""
Unit conversion for the Podi Tracker costing engine.

This module provides:
- Canonical mass conversion (every line unit to kilogram-equivalents)
- Unit validation helpers
- Display helpers for weights and money

Conversion Strategy:
- Gram and millilitre quantities divide by 1000
- Kilogram and litre quantities pass through unchanged
- Volume is treated as mass (1 ml == 1 g); densities are not modelled
- Anything else raises InvalidUnit rather than guessing a factor
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any

from src.services.exceptions import InvalidUnit
from src.utils.constants import (
    ALL_UNITS,
    CANONICAL_MASS_DIVISORS,
    CURRENCY_SYMBOL,
    KG_DISPLAY_THRESHOLD,
)
from src.utils.validators import to_decimal

VALID_UNITS = tuple(ALL_UNITS)

_TWO_PLACES = Decimal("0.01")
_WHOLE = Decimal("1")


# ============================================================================
# Unit Detection
# ============================================================================


def normalize_unit(unit: Any) -> str:
    """
    Return the unit code used for lookups.

    Surrounding whitespace is ignored; case is not folded.

    Raises:
        InvalidUnit: If unit is not one of g, kg, ml, l
    """
    if not isinstance(unit, str):
        raise InvalidUnit(unit)
    code = unit.strip()
    if code not in CANONICAL_MASS_DIVISORS:
        raise InvalidUnit(unit)
    return code


def is_valid_unit(unit: Any) -> bool:
    """Check whether a unit can be converted to canonical mass."""
    try:
        normalize_unit(unit)
    except InvalidUnit:
        return False
    return True


# ============================================================================
# Canonical Mass
# ============================================================================


def to_canonical_mass(quantity: Any, unit: str) -> Decimal:
    """
    Convert a quantity to kilogram-equivalents.

    Args:
        quantity: Amount in the given unit
        unit: One of "g", "kg", "ml", "l"

    Returns:
        Quantity in kilograms (litres count as kilograms)

    Raises:
        InvalidUnit: If the unit is not recognized

    Example:
        >>> to_canonical_mass(200, "g")
        Decimal('0.2')
        >>> to_canonical_mass(2, "l")
        Decimal('2')
    """
    code = normalize_unit(unit)
    return to_decimal(quantity) / CANONICAL_MASS_DIVISORS[code]


# ============================================================================
# Display Helpers
# ============================================================================


def format_weight(value: Any) -> str:
    """
    Format a gram-denominated weight for reports.

    Values of 1000 or more are shown in kilograms with two decimals, smaller
    values as a whole number of grams.

    Example:
        >>> format_weight(550)
        '550 g'
        >>> format_weight(1000)
        '1.00 kg'
        >>> format_weight(2345)
        '2.35 kg'
    """
    amount = to_decimal(value)
    if amount >= KG_DISPLAY_THRESHOLD:
        kilograms = (amount / 1000).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
        return f"{kilograms} kg"
    grams = amount.quantize(_WHOLE, rounding=ROUND_HALF_UP)
    return f"{grams} g"


def format_currency(amount: Any, symbol: str = CURRENCY_SYMBOL) -> str:
    """
    Format a money amount with two decimals.

    Example:
        >>> format_currency(66)
        '₹66.00'
    """
    value = to_decimal(amount).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    return f"{symbol}{value}"


def format_quantity(quantity: Any, unit: str) -> str:
    """Format a recipe line quantity with its unit, e.g. '600 g'."""
    value = to_decimal(quantity).normalize()
    # normalize() turns 600 into 6E+2
    if value == value.to_integral_value():
        value = value.quantize(_WHOLE)
    return f"{value} {unit}"
