"""
Constants and enumerations for the Podi Tracker application.

This module defines all system-wide constants including:
- Recipe line units
- Pricing and display rules
- Order and payment statuses
- Price list quantity types
- Field limits and validation messages
"""

from decimal import Decimal
from typing import Dict, List

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "Podi Tracker"
APP_VERSION = "0.1.0"
DATABASE_FILENAME = "podi_tracker.db"

# ============================================================================
# Units
# ============================================================================

# Units a recipe line may be written in
MASS_UNITS: List[str] = [
    "g",  # Gram
    "kg",  # Kilogram
]

VOLUME_UNITS: List[str] = [
    "ml",  # Milliliter
    "l",  # Liter
]

ALL_UNITS: List[str] = MASS_UNITS + VOLUME_UNITS

# Divisor that brings each unit to kilogram-equivalents (1 ml == 1 g)
CANONICAL_MASS_DIVISORS: Dict[str, Decimal] = {
    "g": Decimal("1000"),
    "ml": Decimal("1000"),
    "kg": Decimal("1"),
    "l": Decimal("1"),
}

# ============================================================================
# Pricing & Display
# ============================================================================

# Recommended selling price = final cost * SELLING_PRICE_MULTIPLIER
SELLING_PRICE_MULTIPLIER = Decimal("2")

# Weights at or above this many grams are displayed in kilograms
KG_DISPLAY_THRESHOLD = Decimal("1000")

CURRENCY_SYMBOL = "₹"

# Placeholder for a recipe column that does not use an ingredient
EMPTY_CELL = "-"

# ============================================================================
# Orders
# ============================================================================

ORDER_STATUS_PENDING = "pending"
ORDER_STATUS_RECEIVED = "received"
ORDER_STATUS_ORDER_SENT = "order_sent"
ORDER_STATUS_INVOICED = "invoiced"
ORDER_STATUS_COMPLETED = "completed"
ORDER_STATUS_PAID = "paid"

ORDER_STATUSES: List[str] = [
    ORDER_STATUS_PENDING,
    ORDER_STATUS_RECEIVED,
    ORDER_STATUS_ORDER_SENT,
    ORDER_STATUS_INVOICED,
    ORDER_STATUS_COMPLETED,
    ORDER_STATUS_PAID,
]

PAYMENT_STATUS_UNPAID = "unpaid"
PAYMENT_STATUS_PARTIAL = "partial"
PAYMENT_STATUS_PAID = "paid"

PAYMENT_STATUSES: List[str] = [
    PAYMENT_STATUS_UNPAID,
    PAYMENT_STATUS_PARTIAL,
    PAYMENT_STATUS_PAID,
]

# ============================================================================
# Price List
# ============================================================================

QUANTITY_TYPES: List[str] = [
    "Sample Trial",
    "100grms",
    "250grms",
    "500grms",
    "1 Kg",
]

# ============================================================================
# Field Limits
# ============================================================================

MAX_NAME_LENGTH = 200
MAX_BRAND_LENGTH = 200
MAX_PHONE_LENGTH = 20
MAX_ADDRESS_LENGTH = 500

# ============================================================================
# Validation Messages
# ============================================================================

ERROR_REQUIRED_FIELD = "This field is required"
ERROR_INVALID_NUMBER = "Must be a valid number"
ERROR_INVALID_POSITIVE = "Must be greater than zero"
ERROR_INVALID_NON_NEGATIVE = "Must be zero or greater"
ERROR_INVALID_UNIT = f"Unit must be one of: {', '.join(ALL_UNITS)}"
ERROR_INVALID_CHOICE = "Must be one of"
ERROR_INVALID_TEXT = "Must be text"
