"""Order Service - customer orders and their line items.

Each order carries customer details, a fulfilment status, a payment status
and a sequential invoice number. The order total is always the sum of its
item amounts and is recomputed whenever items are replaced.

All functions follow the session pattern: pass ``session`` to join an
outer transaction, otherwise a new session_scope() is opened.

Example Usage:
    >>> from src.services.order_service import create_order, list_orders
    >>>
    >>> order = create_order(
    ...     customer_name="Lakshmi",
    ...     phone_number="9876543210",
    ...     address="12 Temple Street, Madurai",
    ...     items=[{"recipe_name": "Sambar Powder", "quantity_type": "250grms", "amount": 180}],
    ... )
    >>> order["total_amount"] == 180
    True
    >>> format_invoice_number(order["invoice_number"])
    'INV-001'
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.models import Order, OrderItem
from src.services.database import run_in_session, session_scope
from src.services.exceptions import DatabaseError, OrderNotFound, ValidationError
from src.services.logging_utils import get_service_logger, log_operation
from src.utils.constants import (
    ORDER_STATUS_PENDING,
    ORDER_STATUSES,
    PAYMENT_STATUS_UNPAID,
    PAYMENT_STATUSES,
)
from src.utils.validators import (
    to_decimal,
    validate_choice,
    validate_customer_data,
    validate_order_items,
)

logger = get_service_logger(__name__)


def calculate_order_total(items: List[Dict[str, Any]]) -> Decimal:
    """Sum of item amounts."""
    return sum((to_decimal(item.get("amount", 0)) for item in items), Decimal("0"))


def format_invoice_number(invoice_number: Optional[int]) -> str:
    """Invoice label as printed, e.g. 7 -> 'INV-007'."""
    if invoice_number is None:
        return ""
    return f"INV-{invoice_number:03d}"


def _order_to_dict(order: Order) -> Dict[str, Any]:
    result = order.to_dict()
    result["items"] = [item.to_dict() for item in order.items]
    return result


def _validate(customer: Dict[str, Any], items: List[Dict[str, Any]]) -> None:
    errors = []
    _, customer_errors = validate_customer_data(customer)
    errors.extend(customer_errors)
    _, item_errors = validate_order_items(items)
    errors.extend(item_errors)
    if errors:
        raise ValidationError(errors)


def _build_items(items: List[Dict[str, Any]]) -> List[OrderItem]:
    return [
        OrderItem(
            recipe_name=item["recipe_name"].strip(),
            quantity_type=item["quantity_type"].strip(),
            amount=to_decimal(item["amount"]),
        )
        for item in items
    ]


def _get_order_or_raise(order_id: int, session: Session) -> Order:
    order = session.query(Order).filter(Order.id == order_id).first()
    if order is None:
        raise OrderNotFound(order_id)
    return order


def create_order(
    customer_name: str,
    phone_number: str,
    address: str,
    items: List[Dict[str, Any]],
    status: str = ORDER_STATUS_PENDING,
    session: Optional[Session] = None,
) -> Dict[str, Any]:
    """Create an order with its items.

    Args:
        customer_name: Customer's name (required)
        phone_number: Contact number (required)
        address: Delivery address (required)
        items: Dicts with recipe_name, quantity_type and amount (at least one)
        status: Initial fulfilment status
        session: Optional database session for transactional atomicity

    Returns:
        Dict[str, Any]: Created order, including its items

    Raises:
        ValidationError: If customer fields, items or status are invalid
        DatabaseError: If the database operation fails
    """
    customer = {"customer_name": customer_name, "phone_number": phone_number, "address": address}
    _validate(customer, items)
    is_valid, error = validate_choice(status, ORDER_STATUSES, "Status")
    if not is_valid:
        raise ValidationError([error])

    try:
        if session is not None:
            return _create_order_impl(customer, items, status, session)
        with session_scope() as session:
            return _create_order_impl(customer, items, status, session)
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to create order", e)


def _create_order_impl(
    customer: Dict[str, Any], items: List[Dict[str, Any]], status: str, session: Session
) -> Dict[str, Any]:
    """Implementation of create_order."""
    last_invoice = session.query(func.max(Order.invoice_number)).scalar()

    order = Order(
        customer_name=customer["customer_name"].strip(),
        phone_number=customer["phone_number"].strip(),
        address=customer["address"].strip(),
        total_amount=calculate_order_total(items),
        status=status,
        payment_status=PAYMENT_STATUS_UNPAID,
        invoice_number=(last_invoice or 0) + 1,
    )
    order.items = _build_items(items)
    session.add(order)
    session.flush()

    log_operation(
        logger,
        operation="create_order",
        outcome="success",
        order_id=order.id,
        invoice_number=order.invoice_number,
        total_amount=str(order.total_amount),
    )
    return _order_to_dict(order)


def get_order(order_id: int, session: Optional[Session] = None) -> Dict[str, Any]:
    """Get an order with its items.

    Raises:
        OrderNotFound: If the order doesn't exist
        DatabaseError: If the database operation fails
    """
    return run_in_session(
        lambda session: _order_to_dict(_get_order_or_raise(order_id, session)),
        f"Failed to get order {order_id}",
        session,
    )


def list_orders(session: Optional[Session] = None) -> List[Dict[str, Any]]:
    """All orders, newest first.

    Raises:
        DatabaseError: If the database operation fails
    """
    return run_in_session(_list_orders_impl, "Failed to list orders", session)


def _list_orders_impl(session: Session) -> List[Dict[str, Any]]:
    orders = session.query(Order).order_by(Order.created_at.desc(), Order.id.desc()).all()
    return [_order_to_dict(order) for order in orders]


def get_order_items(order_id: int, session: Optional[Session] = None) -> List[Dict[str, Any]]:
    """Items of one order, in entry order.

    Raises:
        OrderNotFound: If the order doesn't exist
        DatabaseError: If the database operation fails
    """
    return run_in_session(
        lambda session: [item.to_dict() for item in _get_order_or_raise(order_id, session).items],
        f"Failed to get items for order {order_id}",
        session,
    )


def update_order(
    order_id: int,
    customer_name: str,
    phone_number: str,
    address: str,
    items: List[Dict[str, Any]],
    session: Optional[Session] = None,
) -> Dict[str, Any]:
    """Replace an order's customer details and items, recomputing the total.

    Raises:
        OrderNotFound: If the order doesn't exist
        ValidationError: If customer fields or items are invalid
        DatabaseError: If the database operation fails
    """
    customer = {"customer_name": customer_name, "phone_number": phone_number, "address": address}
    _validate(customer, items)

    try:
        if session is not None:
            return _update_order_impl(order_id, customer, items, session)
        with session_scope() as session:
            return _update_order_impl(order_id, customer, items, session)
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to update order {order_id}", e)


def _update_order_impl(
    order_id: int, customer: Dict[str, Any], items: List[Dict[str, Any]], session: Session
) -> Dict[str, Any]:
    """Implementation of update_order."""
    order = _get_order_or_raise(order_id, session)
    order.update_from_dict({key: value.strip() for key, value in customer.items()})
    # delete-orphan cascade removes the previous items
    order.items = _build_items(items)
    order.total_amount = calculate_order_total(items)
    session.flush()

    log_operation(
        logger,
        operation="update_order",
        outcome="success",
        order_id=order_id,
        item_count=len(items),
        total_amount=str(order.total_amount),
    )
    return _order_to_dict(order)


def _set_order_field(
    order_id: int, field_name: str, value: str, choices: List[str], session: Optional[Session]
) -> Dict[str, Any]:
    is_valid, error = validate_choice(value, choices, field_name.replace("_", " ").capitalize())
    if not is_valid:
        raise ValidationError([error])

    def _apply(session: Session) -> Dict[str, Any]:
        order = _get_order_or_raise(order_id, session)
        order.update_from_dict({field_name: value})
        session.flush()
        log_operation(
            logger,
            operation=f"update_{field_name}",
            outcome="success",
            order_id=order_id,
            new_value=value,
        )
        return _order_to_dict(order)

    return run_in_session(_apply, f"Failed to update {field_name} of order {order_id}", session)


def update_order_status(
    order_id: int, status: str, session: Optional[Session] = None
) -> Dict[str, Any]:
    """Change the fulfilment status of an order.

    Raises:
        ValidationError: If status is not one of ORDER_STATUSES
        OrderNotFound: If the order doesn't exist
        DatabaseError: If the database operation fails
    """
    return _set_order_field(order_id, "status", status, ORDER_STATUSES, session)


def update_payment_status(
    order_id: int, payment_status: str, session: Optional[Session] = None
) -> Dict[str, Any]:
    """Mark an order unpaid, partially paid or paid.

    Raises:
        ValidationError: If payment_status is not one of PAYMENT_STATUSES
        OrderNotFound: If the order doesn't exist
        DatabaseError: If the database operation fails
    """
    return _set_order_field(order_id, "payment_status", payment_status, PAYMENT_STATUSES, session)


def delete_order(order_id: int, session: Optional[Session] = None) -> None:
    """Delete an order and its items.

    Raises:
        OrderNotFound: If the order doesn't exist
        DatabaseError: If the database operation fails
    """
    run_in_session(
        lambda session: _delete_order_impl(order_id, session),
        f"Failed to delete order {order_id}",
        session,
    )


def _delete_order_impl(order_id: int, session: Session) -> None:
    """Implementation of delete_order."""
    order = _get_order_or_raise(order_id, session)
    session.delete(order)
    session.flush()
    log_operation(logger, operation="delete_order", outcome="success", order_id=order_id)
