"""
Stock register models.

This module contains:
- ProductStockEntry: Daily movement of a finished product (podi), in kg
- RawMaterialStockEntry: Daily movement of a raw material, in kg

Closing stock is derived (opening + inflow - outflow) and never stored.
"""

from sqlalchemy import CheckConstraint, Column, Date, Index, Numeric, String

from .base import BaseModel


class ProductStockEntry(BaseModel):
    """
    One day's stock movement for a finished product.

    Attributes:
        entry_date: Day the movement applies to
        product_name: Product (recipe) name
        opening_stock: Stock at start of day
        production: Quantity produced
        sales: Quantity sold
    """

    __tablename__ = "product_stock_entries"
    DERIVED_FIELDS = ("closing_stock",)

    entry_date = Column(Date, nullable=False)
    product_name = Column(String(200), nullable=False)
    opening_stock = Column(Numeric(10, 3), nullable=False, default=0)
    production = Column(Numeric(10, 3), nullable=False, default=0)
    sales = Column(Numeric(10, 3), nullable=False, default=0)

    __table_args__ = (
        CheckConstraint(
            "opening_stock >= 0 AND production >= 0 AND sales >= 0",
            name="ck_product_stock_non_negative",
        ),
        Index("idx_product_stock_date", "entry_date"),
    )

    @property
    def closing_stock(self):
        return self.opening_stock + self.production - self.sales


class RawMaterialStockEntry(BaseModel):
    """
    One day's stock movement for a raw material.

    Attributes:
        entry_date: Day the movement applies to
        ingredient_name: Master ingredient name
        opening: Stock at start of day
        purchased: Quantity bought
        used: Quantity consumed in production
    """

    __tablename__ = "raw_material_stock_entries"
    DERIVED_FIELDS = ("closing",)

    entry_date = Column(Date, nullable=False)
    ingredient_name = Column(String(200), nullable=False)
    opening = Column(Numeric(10, 3), nullable=False, default=0)
    purchased = Column(Numeric(10, 3), nullable=False, default=0)
    used = Column(Numeric(10, 3), nullable=False, default=0)

    __table_args__ = (
        CheckConstraint(
            "opening >= 0 AND purchased >= 0 AND used >= 0",
            name="ck_raw_material_stock_non_negative",
        ),
        Index("idx_raw_material_stock_date", "entry_date"),
    )

    @property
    def closing(self):
        return self.opening + self.purchased - self.used
