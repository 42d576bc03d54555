"""Tests for data models."""

import pytest

from inventory_tracker.models.item import Item, ItemUpdate
from inventory_tracker.models.operation_result import (
    ImportResult,
    OperationResult,
    OperationStatus,
)
from inventory_tracker.utils.exceptions import ValidationError


NOW = 1_700_000_000
DAY = 86400


class TestItem:
    """Tests for Item model."""

    def test_create_item(self, sample_item):
        """Test creating a valid Item."""
        assert sample_item.id == 7
        assert sample_item.name == "Widget"
        assert sample_item.quantity == 10
        assert sample_item.minimum_stock == 5
        assert sample_item.cost == 2.5

    def test_defaults(self):
        """Test default minimum stock, expiry and timestamps."""
        item = Item(id=1, name="Bolt")

        assert item.minimum_stock == 5
        assert item.expiry_date == 0
        assert item.date_added > 0
        assert item.last_modified == item.date_added

    def test_validation_empty_name(self):
        """Test that an empty name raises ValidationError."""
        with pytest.raises(ValidationError, match="Name cannot be empty") as excinfo:
            Item(id=1, name="   ")
        assert excinfo.value.field == "name"

    @pytest.mark.parametrize("field_name", ["quantity", "minimum_stock", "cost", "selling_price"])
    def test_validation_negative_numbers(self, field_name):
        """Test that negative numeric fields raise ValidationError."""
        with pytest.raises(ValidationError, match="cannot be negative"):
            Item(id=1, name="Bolt", **{field_name: -1})

    def test_validation_rejects_fractional_quantity(self):
        with pytest.raises(ValidationError, match="must be a number"):
            Item(id=1, name="Bolt", quantity=1.5)

    def test_integer_prices_become_floats(self):
        item = Item(id=1, name="Bolt", cost=2, selling_price=3)

        assert isinstance(item.cost, float)
        assert isinstance(item.selling_price, float)

    def test_prices_rounded_to_cents(self, sample_item):
        item = Item(id=1, name="Bolt", cost=0.125, selling_price=1.999)

        assert item.cost == 0.12
        assert item.selling_price == 2.0

        sample_item.set_cost(3.14159)
        assert sample_item.cost == 3.14

    def test_derived_metrics(self, sample_item):
        """Test total value, revenue, profit and margin."""
        assert sample_item.total_value == 25.0
        assert sample_item.potential_revenue == 50.0
        assert sample_item.profit == 25.0
        assert sample_item.profit_margin == 100.0

    def test_profit_margin_zero_cost(self):
        item = Item(id=1, name="Freebie", quantity=3, cost=0, selling_price=4)

        assert item.profit_margin == 0.0
        assert item.profit == 12.0

    def test_low_stock_boundary(self):
        """Test that quantity equal to the minimum counts as low stock."""
        item = Item(id=1, name="Bolt", quantity=5, minimum_stock=5)
        assert item.is_low_stock is True

        item.set_quantity(6)
        assert item.is_low_stock is False

    def test_no_expiry(self):
        item = Item(id=1, name="Bolt")

        assert item.is_expired(NOW) is False
        assert item.is_expiring_soon(30, NOW) is False

    def test_expired_item_is_also_expiring_soon(self):
        item = Item(id=1, name="Milk", expiry_date=NOW - 1)

        assert item.is_expired(NOW) is True
        assert item.is_expiring_soon(30, NOW) is True

    def test_expiry_boundaries(self):
        item = Item(id=1, name="Milk", expiry_date=NOW + 30 * DAY)

        assert item.is_expired(NOW) is False
        assert item.is_expiring_soon(30, NOW) is True
        assert item.is_expiring_soon(29, NOW) is False
        assert item.is_expired(NOW + 30 * DAY) is True

    def test_setters_touch_last_modified(self, sample_item):
        """Test that every setter updates last_modified."""
        sample_item.set_cost(3.0)

        assert sample_item.cost == 3.0
        assert sample_item.last_modified > sample_item.date_added

    def test_setter_rejects_negative(self, sample_item):
        with pytest.raises(ValidationError):
            sample_item.set_selling_price(-0.01)

        assert sample_item.selling_price == 5.0
        assert sample_item.last_modified == NOW

    def test_update_quantity(self, sample_item):
        assert sample_item.update_quantity(-10) == 0
        assert sample_item.update_quantity(4) == 4

    def test_update_quantity_below_zero(self, sample_item):
        """Test that removing more than is in stock leaves the item unchanged."""
        with pytest.raises(ValidationError, match="only 10 in stock"):
            sample_item.update_quantity(-11)

        assert sample_item.quantity == 10
        assert sample_item.last_modified == NOW

    def test_apply_update_is_all_or_nothing(self, sample_item):
        with pytest.raises(ValidationError):
            sample_item.apply_update(ItemUpdate(name="Gadget", cost=-1.0))

        assert sample_item.name == "Widget"
        assert sample_item.cost == 2.5

    def test_apply_update_allows_clearing_text(self, sample_item):
        assert sample_item.apply_update(ItemUpdate(description="", quantity=3)) is True

        assert sample_item.description == ""
        assert sample_item.quantity == 3
        assert sample_item.supplier == "Acme"

    def test_apply_empty_update(self, sample_item):
        assert sample_item.apply_update(ItemUpdate()) is False
        assert sample_item.last_modified == NOW

    def test_to_dict(self, sample_item):
        """Test converting Item to dictionary."""
        data = sample_item.to_dict()

        assert data["id"] == 7
        assert data["barcode"] == "123456789"
        assert data["total_value"] == 25.0
        assert data["is_low_stock"] is False


class TestItemUpdate:
    """Tests for ItemUpdate model."""

    def test_empty(self):
        assert ItemUpdate().is_empty() is True
        assert ItemUpdate().changes() == {}

    def test_changes_only_supplied_fields(self):
        update = ItemUpdate(name="New", quantity=0, category="")

        assert update.changes() == {"name": "New", "quantity": 0, "category": ""}
        assert update.is_empty() is False


class TestOperationResult:
    """Tests for OperationResult model."""

    def test_success_statuses(self):
        assert OperationResult(OperationStatus.ADDED, item_id=1).success is True
        assert OperationResult(OperationStatus.NO_CHANGE).success is True
        assert OperationResult(OperationStatus.NOT_FOUND).success is False
        assert OperationResult(OperationStatus.INVALID).success is False

    def test_to_dict(self):
        data = OperationResult(OperationStatus.INVALID, item_id=3, message="bad", field="cost").to_dict()

        assert data["status"] == "invalid"
        assert data["success"] is False
        assert data["field"] == "cost"


class TestImportResult:
    """Tests for ImportResult model."""

    def test_add_error(self):
        result = ImportResult(success=True, source="file.csv")

        result.add_error(3, "MalformedRecordError", "Expected 14 fields, found 10")

        assert result.failed_count == 1
        assert result.errors[0].line_number == 3
        assert result.errors[0].error_type == "MalformedRecordError"

    def test_finalize(self):
        result = ImportResult(success=True)

        result.finalize()

        assert result.end_time is not None
        assert result.duration >= 0

    def test_get_summary(self):
        result = ImportResult(success=True, source="file.csv", total_records=8, imported_count=1)
        for line in range(2, 9):
            result.add_error(line, "MalformedRecordError", "bad record")

        summary = result.get_summary()

        assert "Imported: 1" in summary
        assert "Errors: 7" in summary
        assert "line 2: bad record" in summary
        assert "... and 2 more errors" in summary
