"""Tests for the customer price list."""

from decimal import Decimal

import pytest

from src.services import recipe_pricing_service as pricing
from src.services.exceptions import DatabaseError, RecipePricingNotFound, ValidationError


class TestSetRecipePrice:
    """Test creating and updating price list entries."""

    def test_creates_entry(self, test_db):
        entry = pricing.set_recipe_price("Sambar Powder", "250grms", 180)
        assert entry["recipe_name"] == "Sambar Powder"
        assert entry["quantity_type"] == "250grms"
        assert entry["price"] == Decimal("180")
        assert entry["is_enabled"] is True

    def test_second_call_updates_same_entry(self, test_db):
        first = pricing.set_recipe_price("Sambar Powder", "250grms", 180)
        second = pricing.set_recipe_price("Sambar Powder", "250grms", 190)
        assert second["id"] == first["id"]
        assert len(pricing.list_recipe_pricing()) == 1
        assert pricing.get_price_for("Sambar Powder", "250grms") == Decimal("190")

    @pytest.mark.parametrize(
        "recipe_name,quantity_type,price",
        [("", "250grms", 10), ("Sambar Powder", "2 Kg", 10), ("Sambar Powder", "250grms", -5)],
    )
    def test_invalid_entries_rejected(self, test_db, recipe_name, quantity_type, price):
        with pytest.raises(ValidationError):
            pricing.set_recipe_price(recipe_name, quantity_type, price)


class TestListRecipePricing:
    """Test price list ordering."""

    def test_ordered_by_recipe_then_pack_size(self, test_db):
        pricing.set_recipe_price("Sambar Powder", "1 Kg", 700)
        pricing.set_recipe_price("Rasam Powder", "500grms", 360)
        pricing.set_recipe_price("Sambar Powder", "Sample Trial", 30)
        pricing.set_recipe_price("Rasam Powder", "100grms", 80)

        listing = [(e["recipe_name"], e["quantity_type"]) for e in pricing.list_recipe_pricing()]
        assert listing == [
            ("Rasam Powder", "100grms"),
            ("Rasam Powder", "500grms"),
            ("Sambar Powder", "Sample Trial"),
            ("Sambar Powder", "1 Kg"),
        ]


class TestUpdateEntries:
    """Test edits by entry id."""

    def test_update_price(self, test_db):
        entry = pricing.set_recipe_price("Sambar Powder", "100grms", 75)
        updated = pricing.update_recipe_price(entry["id"], "82.50")
        assert updated["price"] == Decimal("82.50")

    def test_update_price_rejects_negative(self, test_db):
        entry = pricing.set_recipe_price("Sambar Powder", "100grms", 75)
        with pytest.raises(ValidationError):
            pricing.update_recipe_price(entry["id"], -1)

    def test_update_missing_entry(self, test_db):
        with pytest.raises(RecipePricingNotFound):
            pricing.update_recipe_price(999, 10)
        with pytest.raises(RecipePricingNotFound):
            pricing.set_pricing_enabled(999, False)


class TestGetPriceFor:
    """Test lookups used by order entry."""

    def test_unknown_pack_has_no_price(self, test_db):
        assert pricing.get_price_for("Sambar Powder", "1 Kg") is None

    def test_disabled_entries_are_not_offered(self, test_db):
        entry = pricing.set_recipe_price("Sambar Powder", "1 Kg", 700)
        pricing.set_pricing_enabled(entry["id"], False)
        assert pricing.get_price_for("Sambar Powder", "1 Kg") is None

        pricing.set_pricing_enabled(entry["id"], True)
        assert pricing.get_price_for("Sambar Powder", "1 Kg") == Decimal("700")


class TestDatabaseErrors:
    """Test that SQLAlchemy failures surface as DatabaseError."""

    def test_price_list_missing(self, test_db, drop_tables):
        drop_tables("recipe_pricing")

        with pytest.raises(DatabaseError) as exc_info:
            pricing.list_recipe_pricing()
        assert "Failed to list recipe prices" in str(exc_info.value)

        with pytest.raises(DatabaseError):
            pricing.set_recipe_price("Sambar Powder", "250grms", 180)
        with pytest.raises(DatabaseError):
            pricing.update_recipe_price(1, 10)
        with pytest.raises(DatabaseError):
            pricing.set_pricing_enabled(1, False)
        with pytest.raises(DatabaseError):
            pricing.get_price_for("Sambar Powder", "250grms")
