"""Ingredient Import Service - bulk master ingredient import and export.

Rows are plain dictionaries with the spreadsheet columns Name, Brand and
Price. Column names are matched case-insensitively and "Ingredient" is
accepted in place of "Name". Each row is upserted on its own: a bad row is
recorded in the ImportResult and the rest of the batch carries on.

Example Usage:
    >>> from src.services.repository import InMemoryCatalogRepository
    >>> repo = InMemoryCatalogRepository()
    >>> result = import_master_ingredients(
    ...     [{"Name": "Turmeric", "Price": "180"}, {"name": "", "price": 10}], repo
    ... )
    >>> (result.created, result.failed)
    (1, 1)
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from src.services.exceptions import ServiceError
from src.services.logging_utils import get_service_logger, log_operation
from src.services.repository import CatalogRepository

logger = get_service_logger(__name__)

EXPORT_COLUMNS = ["Name", "Brand", "Price"]

# Spreadsheet rows start below a header row
FIRST_DATA_ROW = 2

_NAME_KEYS = ("name", "ingredient")


class ImportResult:
    """Result of a bulk ingredient import with per-row tracking."""

    def __init__(self):
        self.total_records = 0
        self.created = 0
        self.updated = 0
        self.failed = 0
        self.errors: List[Dict[str, Any]] = []

    @property
    def successful(self) -> int:
        return self.created + self.updated

    def add_created(self):
        self.created += 1
        self.total_records += 1

    def add_updated(self):
        self.updated += 1
        self.total_records += 1

    def add_error(self, row_number: int, record_name: str, error: str):
        """Record a failed row."""
        self.failed += 1
        self.total_records += 1
        self.errors.append(
            {"row": row_number, "record_name": record_name, "message": error}
        )

    def get_summary(self) -> str:
        """Get a user-friendly summary string of the import results."""
        lines = [
            "=" * 60,
            "Ingredient Import Summary",
            "=" * 60,
            f"Total Rows:    {self.total_records}",
            f"Created:       {self.created}",
            f"Updated:       {self.updated}",
            f"Failed:        {self.failed}",
        ]

        if self.errors:
            lines.append("\nErrors:")
            for error in self.errors:
                lines.append(f"  - Row {error['row']}: {error['record_name'] or '(no name)'}")
                lines.append(f"    {error['message']}")

        lines.append("=" * 60)
        return "\n".join(lines)


def _normalize_row(row: Dict[str, Any]) -> Dict[str, Any]:
    lowered = {str(key).strip().lower(): value for key, value in row.items()}
    name = next((lowered[key] for key in _NAME_KEYS if lowered.get(key) not in (None, "")), "")
    brand = lowered.get("brand")
    return {
        "name": str(name).strip(),
        "brand": str(brand).strip() if brand not in (None, "") else None,
        "price_per_kg": lowered.get("price", lowered.get("price_per_kg")),
    }


def import_master_ingredients(
    rows: List[Dict[str, Any]], repository: CatalogRepository
) -> ImportResult:
    """
    Upsert master ingredients from spreadsheet-style rows.

    Args:
        rows: Dicts with Name (or Ingredient), optional Brand and Price
        repository: Catalog repository receiving the ingredients

    Returns:
        ImportResult with created/updated/failed counts and row errors
    """
    result = ImportResult()

    for offset, row in enumerate(rows):
        row_number = FIRST_DATA_ROW + offset
        data = _normalize_row(row)

        if data["price_per_kg"] in (None, ""):
            result.add_error(row_number, data["name"], "Price: This field is required")
            continue

        existed = bool(data["name"]) and repository.find_master_ingredient(data["name"]) is not None
        try:
            repository.upsert_master_ingredient(data["name"], data["price_per_kg"], data["brand"])
        except ServiceError as e:
            result.add_error(row_number, data["name"], str(e))
            continue

        if existed:
            result.add_updated()
        else:
            result.add_created()

    log_operation(
        logger,
        operation="import_master_ingredients",
        outcome="success" if result.failed == 0 else "partial",
        total_records=result.total_records,
        created_count=result.created,
        updated_count=result.updated,
        failed_count=result.failed,
    )
    return result


def export_master_ingredients(repository: CatalogRepository) -> List[Dict[str, Any]]:
    """Master list as rows with the import columns (Name, Brand, Price)."""
    return [
        dict(zip(EXPORT_COLUMNS, (item.name, item.brand or "", item.price_per_kg)))
        for item in repository.list_master_ingredients()
    ]


def load_rows(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    Read import rows from a JSON file.

    Accepts either a list of rows or {"master_ingredients": [...]}.

    Raises:
        ValueError: If the file holds neither shape
    """
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)

    rows: Optional[List[Dict[str, Any]]] = None
    if isinstance(data, list):
        rows = data
    elif isinstance(data, dict) and isinstance(data.get("master_ingredients"), list):
        rows = data["master_ingredients"]

    if rows is None or not all(isinstance(row, dict) for row in rows):
        raise ValueError(f"{path}: expected a list of ingredient rows")
    return rows
