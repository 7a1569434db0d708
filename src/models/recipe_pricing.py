"""
RecipePricing model - the customer price list.

One row per (recipe, pack size) with the price charged to customers. Order
entry looks prices up here; disabled rows are not offered.
"""

from sqlalchemy import Boolean, Column, Numeric, String, UniqueConstraint

from .base import BaseModel


class RecipePricing(BaseModel):
    """
    Price of one pack size of one recipe.

    Attributes:
        recipe_name: Recipe the price applies to
        quantity_type: Pack size label (e.g., "250grms")
        price: Customer price
        is_enabled: Whether the pack size is currently sold
    """

    __tablename__ = "recipe_pricing"

    recipe_name = Column(String(200), nullable=False, index=True)
    quantity_type = Column(String(50), nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    is_enabled = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("recipe_name", "quantity_type", name="uq_recipe_pricing_pack"),
    )

    def __repr__(self) -> str:
        return (
            f"RecipePricing(id={self.id}, recipe_name='{self.recipe_name}', "
            f"quantity_type='{self.quantity_type}', price={self.price})"
        )
