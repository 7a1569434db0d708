"""
Customer order models.

This module contains:
- Order: A customer order with delivery details, status and invoice number
- OrderItem: One priced line of an order (recipe + pack size + amount)
"""

from sqlalchemy import (
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .base import BaseModel
from src.utils.constants import ORDER_STATUS_PENDING, PAYMENT_STATUS_UNPAID
from src.utils.datetime_utils import utc_now


def _today():
    return utc_now().date()


class Order(BaseModel):
    """
    Customer order.

    Attributes:
        customer_name: Customer's name
        phone_number: Contact number
        address: Delivery address
        total_amount: Sum of item amounts, recomputed whenever items change
        status: Fulfilment status (see ORDER_STATUSES)
        payment_status: "unpaid", "partial" or "paid"
        order_date: Date the order was taken
        invoice_number: Sequential invoice number, assigned on creation
    """

    __tablename__ = "orders"

    customer_name = Column(String(200), nullable=False)
    phone_number = Column(String(20), nullable=False)
    address = Column(Text, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False, default=ORDER_STATUS_PENDING)
    payment_status = Column(String(20), nullable=False, default=PAYMENT_STATUS_UNPAID)
    order_date = Column(Date, nullable=False, default=_today)
    invoice_number = Column(Integer, nullable=True, unique=True)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="joined",
        order_by="OrderItem.id",
    )

    __table_args__ = (
        Index("idx_order_status", "status"),
        Index("idx_order_date", "order_date"),
    )

    def __repr__(self) -> str:
        return (
            f"Order(id={self.id}, invoice_number={self.invoice_number}, "
            f"customer_name='{self.customer_name}', status='{self.status}')"
        )


class OrderItem(BaseModel):
    """
    One line of an order.

    Attributes:
        order_id: Owning order
        recipe_name: Product ordered (recipe name)
        quantity_type: Pack size (see QUANTITY_TYPES)
        amount: Price charged for the line
    """

    __tablename__ = "order_items"

    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    recipe_name = Column(String(200), nullable=False)
    quantity_type = Column(String(50), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False, default=0)

    order = relationship("Order", back_populates="items")

    __table_args__ = (Index("idx_order_item_order", "order_id"),)

    def __repr__(self) -> str:
        return (
            f"OrderItem(order_id={self.order_id}, recipe_name='{self.recipe_name}', "
            f"quantity_type='{self.quantity_type}', amount={self.amount})"
        )
