"""Stock Register Service - daily stock movements and the monthly register.

Two registers are kept, both in kilograms:
- Products (podis): opening stock + production - sales
- Raw materials: opening + purchased - used

Closing figures are always derived, never stored. The monthly register
numbers its rows from 1 and shows closing values to one decimal place, the
way the printed register sheets do.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from src.models import ProductStockEntry, RawMaterialStockEntry
from src.services.database import run_in_session
from src.services.exceptions import StockEntryNotFound, ValidationError
from src.services.logging_utils import get_service_logger, log_operation
from src.utils.datetime_utils import format_display_date, format_month, month_bounds, utc_now
from src.utils.validators import to_decimal, validate_required_string, validate_stock_movement

logger = get_service_logger(__name__)

PRODUCT_REGISTER_HEADER = ["S.No", "Date", "Podi Name", "Opening", "Production", "Sales", "Closing"]
RAW_MATERIAL_REGISTER_HEADER = ["S.No", "Date", "Ingredient", "Opening", "Purchased", "Used", "Closing"]

ONE_DECIMAL = Decimal("0.1")


def calculate_closing_stock(opening: Any, inflow: Any, outflow: Any) -> Decimal:
    """Closing stock = opening + inflow - outflow (may be negative)."""
    return to_decimal(opening) + to_decimal(inflow) - to_decimal(outflow)


def _one_decimal(value: Decimal) -> str:
    return str(to_decimal(value).quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP))


def _validate_entry(name_field: str, name: str, quantities: Dict[str, Any]) -> None:
    errors = []
    is_valid, error = validate_required_string(name, name_field)
    if not is_valid:
        errors.append(error)
    _, movement_errors = validate_stock_movement(quantities)
    errors.extend(movement_errors)
    if errors:
        raise ValidationError(errors)


@dataclass(frozen=True)
class MonthlyRegister:
    """Both stock registers for one calendar month.

    Entries are plain dicts (model to_dict() output) ordered by date, then
    by creation.
    """

    year: int
    month: int
    product_entries: List[Dict[str, Any]] = field(default_factory=list)
    raw_material_entries: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def title(self) -> str:
        return format_month(self.year, self.month)

    def product_rows(self) -> List[List[str]]:
        """Display rows for the podi register, header first."""
        rows = [list(PRODUCT_REGISTER_HEADER)]
        for serial, entry in enumerate(self.product_entries, start=1):
            rows.append(
                [
                    str(serial),
                    format_display_date(date.fromisoformat(entry["entry_date"])),
                    entry["product_name"],
                    str(entry["opening_stock"]),
                    str(entry["production"]),
                    str(entry["sales"]),
                    _one_decimal(entry["closing_stock"]),
                ]
            )
        return rows

    def raw_material_rows(self) -> List[List[str]]:
        """Display rows for the raw material register, header first."""
        rows = [list(RAW_MATERIAL_REGISTER_HEADER)]
        for serial, entry in enumerate(self.raw_material_entries, start=1):
            rows.append(
                [
                    str(serial),
                    format_display_date(date.fromisoformat(entry["entry_date"])),
                    entry["ingredient_name"],
                    str(entry["opening"]),
                    str(entry["purchased"]),
                    str(entry["used"]),
                    _one_decimal(entry["closing"]),
                ]
            )
        return rows


def add_product_entry(
    product_name: str,
    opening_stock: Any,
    production: Any,
    sales: Any,
    entry_date: Optional[date] = None,
    session: Optional[Session] = None,
) -> Dict[str, Any]:
    """Record one day's movement of a finished product.

    Args:
        product_name: Podi (recipe) name
        opening_stock: Stock at start of day
        production: Quantity produced
        sales: Quantity sold
        entry_date: Day of the movement, today if omitted
        session: Optional database session

    Returns:
        Dict[str, Any]: Stored entry including the derived closing_stock

    Raises:
        ValidationError: If the name is empty or any quantity is negative
        DatabaseError: If the database operation fails
    """
    quantities = {"opening_stock": opening_stock, "production": production, "sales": sales}
    _validate_entry("Podi name", product_name, quantities)

    def _apply(session: Session) -> Dict[str, Any]:
        entry = ProductStockEntry(
            entry_date=entry_date or utc_now().date(),
            product_name=product_name.strip(),
            **{key: to_decimal(value) for key, value in quantities.items()},
        )
        session.add(entry)
        session.flush()
        log_operation(
            logger,
            operation="add_product_entry",
            outcome="success",
            entry_id=entry.id,
            product_name=entry.product_name,
            closing_stock=str(entry.closing_stock),
        )
        return entry.to_dict()

    return run_in_session(_apply, "Failed to add product stock entry", session)


def add_raw_material_entry(
    ingredient_name: str,
    opening: Any,
    purchased: Any,
    used: Any,
    entry_date: Optional[date] = None,
    session: Optional[Session] = None,
) -> Dict[str, Any]:
    """Record one day's movement of a raw material.

    Raises:
        ValidationError: If the name is empty or any quantity is negative
        DatabaseError: If the database operation fails
    """
    quantities = {"opening": opening, "purchased": purchased, "used": used}
    _validate_entry("Ingredient", ingredient_name, quantities)

    def _apply(session: Session) -> Dict[str, Any]:
        entry = RawMaterialStockEntry(
            entry_date=entry_date or utc_now().date(),
            ingredient_name=ingredient_name.strip(),
            **{key: to_decimal(value) for key, value in quantities.items()},
        )
        session.add(entry)
        session.flush()
        log_operation(
            logger,
            operation="add_raw_material_entry",
            outcome="success",
            entry_id=entry.id,
            ingredient_name=entry.ingredient_name,
            closing=str(entry.closing),
        )
        return entry.to_dict()

    return run_in_session(_apply, "Failed to add raw material stock entry", session)


def get_monthly_register(
    year: int, month: int, session: Optional[Session] = None
) -> MonthlyRegister:
    """Both registers for one month.

    Raises:
        ValueError: If month is outside 1-12
        DatabaseError: If the database operation fails
    """
    return run_in_session(
        lambda session: _get_monthly_register_impl(year, month, session),
        f"Failed to load stock register for {year}-{month:02d}",
        session,
    )


def _get_monthly_register_impl(year: int, month: int, session: Session) -> MonthlyRegister:
    """Implementation of get_monthly_register."""
    start, end = month_bounds(year, month)

    products = (
        session.query(ProductStockEntry)
        .filter(ProductStockEntry.entry_date >= start, ProductStockEntry.entry_date < end)
        .order_by(ProductStockEntry.entry_date, ProductStockEntry.created_at, ProductStockEntry.id)
        .all()
    )
    raw_materials = (
        session.query(RawMaterialStockEntry)
        .filter(RawMaterialStockEntry.entry_date >= start, RawMaterialStockEntry.entry_date < end)
        .order_by(
            RawMaterialStockEntry.entry_date,
            RawMaterialStockEntry.created_at,
            RawMaterialStockEntry.id,
        )
        .all()
    )

    return MonthlyRegister(
        year=year,
        month=month,
        product_entries=[entry.to_dict() for entry in products],
        raw_material_entries=[entry.to_dict() for entry in raw_materials],
    )


def delete_product_entry(entry_id: int, session: Optional[Session] = None) -> None:
    """Remove a podi register entry.

    Raises:
        StockEntryNotFound: If the entry doesn't exist
        DatabaseError: If the database operation fails
    """
    _delete_entry(ProductStockEntry, entry_id, session)


def delete_raw_material_entry(entry_id: int, session: Optional[Session] = None) -> None:
    """Remove a raw material register entry.

    Raises:
        StockEntryNotFound: If the entry doesn't exist
        DatabaseError: If the database operation fails
    """
    _delete_entry(RawMaterialStockEntry, entry_id, session)


def _delete_entry(model, entry_id: int, session: Optional[Session]) -> None:
    def _apply(session: Session) -> None:
        entry = session.query(model).filter(model.id == entry_id).first()
        if entry is None:
            raise StockEntryNotFound(entry_id)
        session.delete(entry)
        session.flush()
        log_operation(
            logger,
            operation=f"delete_{model.__tablename__}",
            outcome="success",
            entry_id=entry_id,
        )

    run_in_session(_apply, f"Failed to delete stock entry {entry_id}", session)
