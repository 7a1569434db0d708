"""Recipe Pricing Service - the customer price list.

One entry per recipe and pack size (see QUANTITY_TYPES). Order entry reads
prices from here to fill in item amounts; an entry that is disabled is
treated as not for sale.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from src.models import RecipePricing
from src.services.database import run_in_session
from src.services.exceptions import RecipePricingNotFound, ValidationError
from src.services.logging_utils import get_service_logger, log_operation
from src.utils.constants import QUANTITY_TYPES
from src.utils.validators import (
    to_decimal,
    validate_choice,
    validate_non_negative_number,
    validate_required_string,
)

logger = get_service_logger(__name__)


def _validate_price(price: Any) -> Decimal:
    is_valid, error = validate_non_negative_number(price, "Price")
    if not is_valid:
        raise ValidationError([error])
    return to_decimal(price)


def _get_pricing_or_raise(pricing_id: int, session: Session) -> RecipePricing:
    pricing = session.query(RecipePricing).filter(RecipePricing.id == pricing_id).first()
    if pricing is None:
        raise RecipePricingNotFound(pricing_id)
    return pricing


def list_recipe_pricing(session: Optional[Session] = None) -> List[Dict[str, Any]]:
    """All price list entries, ordered by recipe name then pack size order."""
    return run_in_session(_list_recipe_pricing_impl, "Failed to list recipe prices", session)


def _list_recipe_pricing_impl(session: Session) -> List[Dict[str, Any]]:
    entries = session.query(RecipePricing).order_by(RecipePricing.recipe_name).all()

    def pack_position(entry: RecipePricing) -> int:
        if entry.quantity_type in QUANTITY_TYPES:
            return QUANTITY_TYPES.index(entry.quantity_type)
        return len(QUANTITY_TYPES)

    entries.sort(key=lambda entry: (entry.recipe_name, pack_position(entry)))
    return [entry.to_dict() for entry in entries]


def set_recipe_price(
    recipe_name: str,
    quantity_type: str,
    price: Any,
    session: Optional[Session] = None,
) -> Dict[str, Any]:
    """Set the price of one pack size of a recipe, creating the entry if needed.

    Args:
        recipe_name: Recipe the price applies to
        quantity_type: One of QUANTITY_TYPES
        price: Non-negative customer price
        session: Optional database session

    Returns:
        Dict[str, Any]: The stored price list entry

    Raises:
        ValidationError: If the recipe name is empty, the pack size unknown
            or the price negative
        DatabaseError: If the database operation fails
    """
    errors = []
    for is_valid, error in (
        validate_required_string(recipe_name, "Recipe name"),
        validate_choice(quantity_type, QUANTITY_TYPES, "Quantity type"),
        validate_non_negative_number(price, "Price"),
    ):
        if not is_valid:
            errors.append(error)
    if errors:
        raise ValidationError(errors)

    recipe_name = recipe_name.strip()
    return run_in_session(
        lambda session: _set_recipe_price_impl(recipe_name, quantity_type, to_decimal(price), session),
        f"Failed to set price for {recipe_name} / {quantity_type}",
        session,
    )


def _set_recipe_price_impl(
    recipe_name: str, quantity_type: str, price: Decimal, session: Session
) -> Dict[str, Any]:
    """Implementation of set_recipe_price."""
    pricing = (
        session.query(RecipePricing)
        .filter(
            RecipePricing.recipe_name == recipe_name,
            RecipePricing.quantity_type == quantity_type,
        )
        .first()
    )
    if pricing is None:
        pricing = RecipePricing(recipe_name=recipe_name, quantity_type=quantity_type, price=price)
        session.add(pricing)
        outcome = "created"
    else:
        pricing.update_from_dict({"price": price})
        outcome = "updated"
    session.flush()

    log_operation(
        logger,
        operation="set_recipe_price",
        outcome=outcome,
        recipe_name=recipe_name,
        quantity_type=quantity_type,
        price=str(price),
    )
    return pricing.to_dict()


def update_recipe_price(
    pricing_id: int, price: Any, session: Optional[Session] = None
) -> Dict[str, Any]:
    """Change the price of an existing entry.

    Raises:
        ValidationError: If the price is negative
        RecipePricingNotFound: If the entry doesn't exist
        DatabaseError: If the database operation fails
    """
    price = _validate_price(price)

    def _apply(session: Session) -> Dict[str, Any]:
        pricing = _get_pricing_or_raise(pricing_id, session)
        pricing.update_from_dict({"price": price})
        session.flush()
        log_operation(
            logger,
            operation="update_recipe_price",
            outcome="success",
            pricing_id=pricing_id,
            price=str(price),
        )
        return pricing.to_dict()

    return run_in_session(_apply, f"Failed to update price list entry {pricing_id}", session)


def set_pricing_enabled(
    pricing_id: int, is_enabled: bool, session: Optional[Session] = None
) -> Dict[str, Any]:
    """Offer or withdraw one pack size.

    Raises:
        RecipePricingNotFound: If the entry doesn't exist
        DatabaseError: If the database operation fails
    """

    def _apply(session: Session) -> Dict[str, Any]:
        pricing = _get_pricing_or_raise(pricing_id, session)
        pricing.update_from_dict({"is_enabled": bool(is_enabled)})
        session.flush()
        log_operation(
            logger,
            operation="set_pricing_enabled",
            outcome="enabled" if is_enabled else "disabled",
            pricing_id=pricing_id,
        )
        return pricing.to_dict()

    return run_in_session(_apply, f"Failed to update price list entry {pricing_id}", session)


def get_price_for(
    recipe_name: str, quantity_type: str, session: Optional[Session] = None
) -> Optional[Decimal]:
    """Price charged for a recipe pack size, or None if it is not on sale."""
    return run_in_session(
        lambda session: _get_price_for_impl(recipe_name, quantity_type, session),
        f"Failed to look up price for {recipe_name} / {quantity_type}",
        session,
    )


def _get_price_for_impl(recipe_name: str, quantity_type: str, session: Session) -> Optional[Decimal]:
    pricing = (
        session.query(RecipePricing)
        .filter(
            RecipePricing.recipe_name == recipe_name,
            RecipePricing.quantity_type == quantity_type,
            RecipePricing.is_enabled == True,  # noqa: E712
        )
        .first()
    )
    return pricing.price if pricing else None
