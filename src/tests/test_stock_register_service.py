"""Tests for the stock registers."""

from datetime import date
from decimal import Decimal

import pytest

from src.services import stock_register_service as register
from src.services.exceptions import DatabaseError, StockEntryNotFound, ValidationError


class TestCalculateClosingStock:
    """Test the closing stock formula."""

    def test_formula(self):
        assert register.calculate_closing_stock(10, "2.5", Decimal("4")) == Decimal("8.5")

    def test_can_go_negative(self):
        assert register.calculate_closing_stock(1, 0, 3) == Decimal("-2")


class TestAddEntries:
    """Test recording daily movements."""

    def test_product_entry(self, test_db):
        entry = register.add_product_entry(
            "Sambar Powder", 12, "3.5", 4, entry_date=date(2024, 3, 5)
        )
        assert entry["product_name"] == "Sambar Powder"
        assert entry["entry_date"] == "2024-03-05"
        assert entry["closing_stock"] == Decimal("11.5")

    def test_raw_material_entry(self, test_db):
        entry = register.add_raw_material_entry(
            "Coriander Seeds", 20, 25, "7.25", entry_date=date(2024, 3, 5)
        )
        assert entry["closing"] == Decimal("37.75")

    def test_default_date_is_today(self, test_db):
        entry = register.add_product_entry("Rasam Powder", 1, 1, 1)
        assert entry["entry_date"] is not None

    def test_negative_quantities_rejected(self, test_db):
        with pytest.raises(ValidationError) as exc_info:
            register.add_product_entry("Sambar Powder", -1, 0, -2)
        assert len(exc_info.value.errors) == 2

        with pytest.raises(ValidationError):
            register.add_raw_material_entry("Coriander Seeds", 0, "x", 0)

    def test_name_required(self, test_db):
        with pytest.raises(ValidationError):
            register.add_raw_material_entry("  ", 1, 1, 1)


class TestMonthlyRegister:
    """Test the monthly view."""

    def test_entries_for_month_only_in_date_order(self, test_db):
        register.add_product_entry("Sambar Powder", 5, 0, 1, entry_date=date(2024, 3, 20))
        register.add_product_entry("Rasam Powder", 8, 2, 1, entry_date=date(2024, 3, 2))
        register.add_product_entry("Idli Podi", 1, 0, 0, entry_date=date(2024, 4, 1))
        register.add_product_entry("Idli Podi", 1, 0, 0, entry_date=date(2024, 2, 29))
        register.add_raw_material_entry("Red Chilli", 3, 1, 1, entry_date=date(2024, 3, 31))

        monthly = register.get_monthly_register(2024, 3)

        assert monthly.title == "March 2024"
        assert [e["product_name"] for e in monthly.product_entries] == [
            "Rasam Powder",
            "Sambar Powder",
        ]
        assert [e["ingredient_name"] for e in monthly.raw_material_entries] == ["Red Chilli"]

    def test_same_day_entries_keep_creation_order(self, test_db):
        register.add_product_entry("Sambar Powder", 1, 0, 0, entry_date=date(2024, 3, 2))
        register.add_product_entry("Rasam Powder", 1, 0, 0, entry_date=date(2024, 3, 2))

        names = [e["product_name"] for e in register.get_monthly_register(2024, 3).product_entries]
        assert names == ["Sambar Powder", "Rasam Powder"]

    def test_display_rows(self, test_db):
        register.add_product_entry("Sambar Powder", 10, "2.25", 3, entry_date=date(2024, 3, 2))
        register.add_raw_material_entry("Red Chilli", 3, "0.04", 1, entry_date=date(2024, 3, 9))

        monthly = register.get_monthly_register(2024, 3)
        product_rows = monthly.product_rows()
        raw_rows = monthly.raw_material_rows()

        assert product_rows[0] == register.PRODUCT_REGISTER_HEADER
        assert product_rows[1][0] == "1"
        assert product_rows[1][1] == "02/03/2024"
        assert product_rows[1][2] == "Sambar Powder"
        assert product_rows[1][-1] == "9.3"
        assert raw_rows[1][-1] == "2.0"

    def test_empty_month(self, test_db):
        monthly = register.get_monthly_register(2023, 1)
        assert monthly.product_entries == []
        assert monthly.product_rows() == [register.PRODUCT_REGISTER_HEADER]

    def test_bad_month(self, test_db):
        with pytest.raises(ValueError):
            register.get_monthly_register(2024, 13)


class TestDeleteEntries:
    """Test removing register entries."""

    def test_delete_product_entry(self, test_db):
        entry = register.add_product_entry("Sambar Powder", 1, 0, 0, entry_date=date(2024, 3, 2))
        register.delete_product_entry(entry["id"])
        assert register.get_monthly_register(2024, 3).product_entries == []

    def test_delete_missing_entries(self, test_db):
        with pytest.raises(StockEntryNotFound):
            register.delete_product_entry(999)
        with pytest.raises(StockEntryNotFound):
            register.delete_raw_material_entry(999)


class TestDatabaseErrors:
    """Test that SQLAlchemy failures surface as DatabaseError."""

    def test_product_register_missing(self, test_db, drop_tables):
        drop_tables("product_stock_entries")
        with pytest.raises(DatabaseError) as exc_info:
            register.add_product_entry("Sambar Powder", 1, 0, 0)
        assert exc_info.value.original_error is not None
        with pytest.raises(DatabaseError):
            register.get_monthly_register(2024, 3)
        with pytest.raises(DatabaseError):
            register.delete_product_entry(1)

    def test_raw_material_register_missing(self, test_db, drop_tables):
        drop_tables("raw_material_stock_entries")
        with pytest.raises(DatabaseError):
            register.add_raw_material_entry("Red Chilli", 1, 0, 0)
        with pytest.raises(DatabaseError):
            register.delete_raw_material_entry(1)

    def test_validation_still_runs_first(self, test_db, drop_tables):
        drop_tables("product_stock_entries")
        with pytest.raises(ValidationError):
            register.add_product_entry("", 1, 0, 0)
