"""Tests for the command-line interface."""

import pytest
from click.testing import CliRunner

from inventory_tracker.cli import cli
from inventory_tracker.services.inventory_store import InventoryStore


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, data_file):
    """Run a CLI command against the temporary data file."""
    def _invoke(*args, input=None):
        return runner.invoke(cli, ["--data-file", str(data_file), *args], input=input)
    return _invoke


class TestCommands:
    """Tests for the one-shot commands."""

    def test_add_and_list(self, invoke):
        result = invoke("add", "Widget", "--category", "Tools", "--quantity", "10",
                        "--cost", "2.50", "--price", "5.00")

        assert result.exit_code == 0
        assert "Item 1 added" in result.output

        listing = invoke("list")
        assert listing.exit_code == 0
        assert "Widget" in listing.output
        assert "25.00" in listing.output

    def test_add_rejects_negative_quantity(self, invoke, data_file):
        result = invoke("add", "Widget", "--quantity", "-1")

        assert result.exit_code == 2
        assert not data_file.exists()

    def test_add_rejects_blank_name(self, invoke):
        result = invoke("add", "  ")

        assert result.exit_code == 1
        assert "Name cannot be empty" in result.output

    def test_add_with_expiry(self, invoke, data_file):
        invoke("add", "Milk", "--expires", "2031-05-01")

        item = InventoryStore(data_file).find(1)
        assert item.expiry_date > 0

    def test_update(self, invoke, data_file):
        invoke("add", "Widget", "--quantity", "10")

        result = invoke("update", "1", "--name", "Gadget", "--price", "7.5")

        assert result.exit_code == 0
        item = InventoryStore(data_file).find(1)
        assert item.name == "Gadget"
        assert item.selling_price == 7.5
        assert item.quantity == 10

    def test_update_without_options(self, invoke):
        invoke("add", "Widget")

        result = invoke("update", "1")

        assert result.exit_code == 0
        assert "No fields to update" in result.output

    def test_update_unknown_item(self, invoke):
        result = invoke("update", "9", "--name", "Gadget")

        assert result.exit_code == 1
        assert "Item 9 not found" in result.output

    def test_adjust_accepts_negative_delta(self, invoke):
        invoke("add", "Widget", "--quantity", "10")

        assert invoke("adjust", "1", "-4").exit_code == 0
        result = invoke("adjust", "1", "-7")

        assert result.exit_code == 1
        assert "only 6 in stock" in result.output

    def test_delete(self, invoke, data_file):
        invoke("add", "Widget")

        result = invoke("delete", "1", "--yes")

        assert result.exit_code == 0
        assert len(InventoryStore(data_file)) == 0

    def test_show(self, invoke):
        invoke("add", "Widget", "--supplier", "Acme")

        assert "Supplier:       Acme" in invoke("show", "1").output
        assert invoke("show", "2").exit_code == 1

    def test_search_category_and_low_stock(self, invoke):
        invoke("add", "Hammer", "--category", "Tools", "--quantity", "2")
        invoke("add", "Apple", "--category", "Food", "--quantity", "50")

        assert "Hammer" in invoke("search", "ham").output
        assert "Apple" in invoke("category", "food").output
        assert "Food: 1 item(s)" in invoke("category").output
        low = invoke("low-stock").output
        assert "Hammer" in low
        assert "Apple" not in low

    def test_report(self, invoke):
        invoke("add", "Hammer", "--quantity", "4", "--cost", "10")

        result = invoke("report", "--top", "1")

        assert result.exit_code == 0
        assert "Total value:        40.00" in result.output
        assert "Top 1 by value" in result.output

    def test_export_and_import(self, invoke, tmp_path):
        invoke("add", "Hammer", "--quantity", "4")
        target = tmp_path / "backup.csv"

        assert invoke("export", str(target)).exit_code == 0

        result = invoke("import", str(target), "--clear")
        assert result.exit_code == 0
        assert "Imported 1 item(s)" in result.output

    def test_import_missing_file(self, invoke, tmp_path):
        result = invoke("import", str(tmp_path / "missing.csv"))

        assert result.exit_code == 1
        assert "Import file not found" in result.output

    def test_config_info(self, runner):
        result = runner.invoke(cli, ["config-info"])

        assert result.exit_code == 0
        assert "Expiring window: 30 days" in result.output


class TestMenu:
    """Tests for the interactive menu."""

    def test_add_display_and_exit(self, invoke, data_file):
        answers = "\n".join([
            "1",          # add
            "Widget",     # name
            "Tools",      # category
            "Acme",       # supplier
            "10",         # quantity
            "2.5",        # cost
            "5",          # selling price
            "",           # minimum stock (default)
            "n",          # expires?
            "",           # location
            "",           # description
            "2",          # display
            "0",          # exit
        ]) + "\n"

        result = invoke("menu", input=answers)

        assert result.exit_code == 0
        assert "Item 1 added" in result.output
        assert "Exiting program." in result.output
        assert InventoryStore(data_file).find(1).supplier == "Acme"

    def test_update_keeps_blank_fields(self, invoke, data_file):
        invoke("add", "Widget", "--quantity", "10", "--cost", "2")
        answers = "\n".join([
            "3",      # update
            "1",      # id
            "",       # name
            "",       # category
            "",       # supplier
            "abc",    # quantity (invalid, re-prompted)
            "12",     # quantity
            "",       # cost
            "",       # selling price
            "",       # minimum stock
            "",       # expiry date
            "",       # location
            "",       # description
            "0",
        ]) + "\n"

        result = invoke("menu", input=answers)

        assert result.exit_code == 0
        item = InventoryStore(data_file).find(1)
        assert item.quantity == 12
        assert item.name == "Widget"
        assert item.cost == 2.0

    def test_update_location_and_clear_expiry(self, invoke, data_file):
        invoke("add", "Milk", "--expires", "2031-05-01", "--location", "Fridge")
        answers = "\n".join([
            "3",          # update
            "1",          # id
            "", "", "",   # name, category, supplier
            "", "", "",   # quantity, cost, selling price
            "",           # minimum stock
            "someday",    # expiry date (invalid, re-prompted)
            "none",       # expiry date
            "Aisle 9",    # location
            "Semi-skimmed",  # description
            "0",
        ]) + "\n"

        result = invoke("menu", input=answers)

        assert result.exit_code == 0
        assert "Item 1 updated" in result.output
        item = InventoryStore(data_file).find(1)
        assert item.expiry_date == 0
        assert item.location == "Aisle 9"
        assert item.description == "Semi-skimmed"
        assert item.name == "Milk"
