"""
Database models package.

This package contains all SQLAlchemy ORM models for the application.
"""

from .base import Base, BaseModel
from .master_ingredient import MasterIngredient
from .recipe import Recipe, RecipeIngredient
from .order import Order, OrderItem
from .recipe_pricing import RecipePricing
from .stock_entry import ProductStockEntry, RawMaterialStockEntry

__all__ = [
    "Base",
    "BaseModel",
    "MasterIngredient",
    "Recipe",
    "RecipeIngredient",
    "Order",
    "OrderItem",
    "RecipePricing",
    "ProductStockEntry",
    "RawMaterialStockEntry",
]
