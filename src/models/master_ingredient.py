"""
MasterIngredient model - the master ingredient price list.

Each row is one raw material the business buys (e.g. "Coriander Seeds"),
with its current price per kilogram. Recipe lines refer to it by name.
"""

from sqlalchemy import Column, String, Numeric, CheckConstraint

from .base import BaseModel
from src.services.dto import MasterIngredientData


class MasterIngredient(BaseModel):
    """
    Master ingredient with its purchase price.

    Attributes:
        name: Unique ingredient name, the match key for recipe lines
        price_per_kg: Price of one kilogram (or litre)
        brand: Optional brand
    """

    __tablename__ = "master_ingredients"

    name = Column(String(200), nullable=False, unique=True, index=True)
    price_per_kg = Column(Numeric(10, 4), nullable=False, default=0)
    brand = Column(String(200), nullable=True)

    __table_args__ = (
        CheckConstraint("price_per_kg >= 0", name="ck_master_ingredient_price_non_negative"),
    )

    def __repr__(self) -> str:
        return f"MasterIngredient(id={self.id}, name='{self.name}', price_per_kg={self.price_per_kg})"

    def to_dto(self) -> MasterIngredientData:
        """Detached, immutable copy for the costing engine."""
        return MasterIngredientData(
            id=self.id,
            name=self.name,
            price_per_kg=self.price_per_kg,
            brand=self.brand,
        )
