"""Service layer exception classes for Podi Tracker.

This module defines all custom exceptions used by the costing engine and
the service layer to provide consistent error handling across the
application.

Exception Hierarchy:
    ServiceError (base)
    ├── InvalidUnit
    ├── ValidationError
    ├── MasterIngredientNotFound
    ├── IngredientNameExists
    ├── RecipeNotFound
    ├── OrderNotFound
    ├── RecipePricingNotFound
    ├── StockEntryNotFound
    └── DatabaseError

An ingredient missing from the master price list is deliberately NOT an
exception: the costing engine prices it at zero and reports the name in
``unresolved_ingredients`` so partially entered recipes still cost.
"""

from typing import Optional

from src.utils.constants import ALL_UNITS


class ServiceError(Exception):
    """Base exception for all service layer errors.

    All service-specific exceptions should inherit from this class.
    """

    pass


class InvalidUnit(ServiceError):
    """Raised when a quantity is given in a unit the engine cannot convert.

    Args:
        unit: The unrecognized unit string

    Example:
        >>> raise InvalidUnit("lb")
        InvalidUnit: Unrecognized unit 'lb' (expected one of: g, kg, ml, l)
    """

    def __init__(self, unit):
        self.unit = unit
        super().__init__(
            f"Unrecognized unit {unit!r} (expected one of: {', '.join(ALL_UNITS)})"
        )


class ValidationError(ServiceError):
    """Raised when data validation fails."""

    def __init__(self, errors: list):
        self.errors = errors
        error_msg = "; ".join(errors)
        super().__init__(f"Validation failed: {error_msg}")


class MasterIngredientNotFound(ServiceError):
    """Raised when a master ingredient cannot be found by name.

    Example:
        >>> raise MasterIngredientNotFound("Coriander Seeds")
        MasterIngredientNotFound: Master ingredient 'Coriander Seeds' not found
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Master ingredient '{name}' not found")


class IngredientNameExists(ServiceError):
    """Raised when creating or renaming an ingredient to a name already in use."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Master ingredient '{name}' already exists")


class RecipeNotFound(ServiceError):
    """Raised when a recipe cannot be found by ID."""

    def __init__(self, recipe_id):
        self.recipe_id = recipe_id
        super().__init__(f"Recipe with ID {recipe_id} not found")


class OrderNotFound(ServiceError):
    """Raised when an order cannot be found by ID."""

    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order with ID {order_id} not found")


class RecipePricingNotFound(ServiceError):
    """Raised when a price list entry cannot be found by ID."""

    def __init__(self, pricing_id: int):
        self.pricing_id = pricing_id
        super().__init__(f"Recipe pricing with ID {pricing_id} not found")


class StockEntryNotFound(ServiceError):
    """Raised when a stock register entry cannot be found by ID."""

    def __init__(self, entry_id: int):
        self.entry_id = entry_id
        super().__init__(f"Stock entry with ID {entry_id} not found")


class DatabaseError(ServiceError):
    """Raised when a database operation fails."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")
