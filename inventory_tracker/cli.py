"""Command-line interface for the inventory tracker."""

import sys
from datetime import datetime
from typing import Optional

import click

from . import __version__
from .models.item import ItemUpdate
from .models.operation_result import ImportResult, OperationResult, OperationStatus
from .services import reporting
from .services.inventory_store import InventoryStore
from .utils.config import get_config
from .utils.exceptions import ConfigurationError


DATE_FORMAT = "%Y-%m-%d"
NON_NEGATIVE_INT = click.IntRange(min=0)
NON_NEGATIVE_FLOAT = click.FloatRange(min=0)


def _timestamp(value: Optional[datetime]) -> Optional[int]:
    if value is None:
        return None
    return int(value.timestamp())


def _open_store(ctx: click.Context) -> InventoryStore:
    if ctx.obj is None:
        ctx.obj = {}
    store = ctx.obj.get("store")
    if store is not None:
        return store

    try:
        store = InventoryStore(ctx.obj.get("data_file"))
    except ConfigurationError as e:
        click.echo(click.style(f"✗ Configuration error: {e.message}", fg="red"), err=True)
        sys.exit(1)

    if store.last_load and store.last_load.failed_count:
        click.echo(click.style(
            f"⚠ {store.last_load.failed_count} record(s) in {store.data_file} could not be read and were skipped",
            fg="yellow"
        ), err=True)

    ctx.obj["store"] = store
    return store


def _report(result: OperationResult) -> bool:
    """Echo an operation result; returns its success flag."""
    if result.success:
        click.echo(click.style(f"✓ {result.message}", fg="green"))
        if not result.persisted and result.status != OperationStatus.NO_CHANGE:
            click.echo(click.style("⚠ Changes could not be saved to disk; see logs/error.log", fg="yellow"))
    else:
        click.echo(click.style(f"✗ {result.message}", fg="red"), err=True)
    return result.success


def _report_import(result: ImportResult):
    colour = "green" if result.success and not result.failed_count else "yellow"
    click.echo(click.style(f"Imported {result.imported_count} item(s)", fg=colour, bold=True))
    click.echo(result.get_summary())


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--data-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Backing CSV file (defaults to the configured inventory_data.csv)"
)
@click.pass_context
def cli(ctx: click.Context, data_file: Optional[str]):
    """
    Inventory Tracker CLI.

    Keep track of stock items in a CSV file.
    """
    ctx.ensure_object(dict)
    ctx.obj["data_file"] = data_file


@cli.command("list")
@click.pass_context
def list_items(ctx: click.Context):
    """Show every item with its stock status."""
    store = _open_store(ctx)
    click.echo(reporting.format_item_table(store.items, get_config().inventory.expiring_soon_days))


@cli.command()
@click.argument("item_id", type=int)
@click.pass_context
def show(ctx: click.Context, item_id: int):
    """Show full details for one item."""
    store = _open_store(ctx)
    item = store.find(item_id)
    if item is None:
        click.echo(click.style(f"✗ Item {item_id} not found", fg="red"), err=True)
        sys.exit(1)
    click.echo(reporting.format_item_details(item, get_config().inventory.expiring_soon_days))


@cli.command()
@click.argument("name")
@click.option("--category", default="", help="Category name")
@click.option("--quantity", type=NON_NEGATIVE_INT, default=0, show_default=True)
@click.option("--cost", type=NON_NEGATIVE_FLOAT, default=0.0, show_default=True, help="Unit cost")
@click.option("--price", type=NON_NEGATIVE_FLOAT, default=0.0, show_default=True, help="Unit selling price")
@click.option("--supplier", default="")
@click.option("--min-stock", type=NON_NEGATIVE_INT, default=None, help="Low-stock threshold")
@click.option("--expires", type=click.DateTime(formats=[DATE_FORMAT]), default=None, help="Expiry date (YYYY-MM-DD)")
@click.option("--location", default="")
@click.option("--description", default="")
@click.pass_context
def add(ctx, name, category, quantity, cost, price, supplier, min_stock, expires, location, description):
    """Add a new item called NAME."""
    store = _open_store(ctx)
    result = store.add(
        name,
        category,
        quantity,
        cost,
        price,
        supplier=supplier,
        minimum_stock=min_stock,
        expiry_date=_timestamp(expires) or 0,
        location=location,
        description=description
    )
    sys.exit(0 if _report(result) else 1)


@cli.command()
@click.argument("item_id", type=int)
@click.option("--name", default=None)
@click.option("--category", default=None)
@click.option("--supplier", default=None)
@click.option("--location", default=None)
@click.option("--description", default=None)
@click.option("--quantity", type=NON_NEGATIVE_INT, default=None)
@click.option("--min-stock", type=NON_NEGATIVE_INT, default=None)
@click.option("--cost", type=NON_NEGATIVE_FLOAT, default=None)
@click.option("--price", type=NON_NEGATIVE_FLOAT, default=None)
@click.option("--expires", type=click.DateTime(formats=[DATE_FORMAT]), default=None)
@click.option("--no-expiry", is_flag=True, help="Clear the expiry date")
@click.pass_context
def update(ctx, item_id, name, category, supplier, location, description,
           quantity, min_stock, cost, price, expires, no_expiry):
    """Change selected fields of item ITEM_ID."""
    store = _open_store(ctx)
    changes = ItemUpdate(
        name=name,
        category=category,
        supplier=supplier,
        location=location,
        description=description,
        quantity=quantity,
        minimum_stock=min_stock,
        cost=cost,
        selling_price=price,
        expiry_date=0 if no_expiry else _timestamp(expires)
    )
    sys.exit(0 if _report(store.update(item_id, changes)) else 1)


@cli.command()
@click.argument("item_id", type=int)
@click.confirmation_option(prompt="Delete this item?")
@click.pass_context
def delete(ctx: click.Context, item_id: int):
    """Delete item ITEM_ID."""
    store = _open_store(ctx)
    sys.exit(0 if _report(store.delete(item_id)) else 1)


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument("item_id", type=int)
@click.argument("delta", type=int)
@click.pass_context
def adjust(ctx: click.Context, item_id: int, delta: int):
    """Add DELTA units to item ITEM_ID (negative DELTA removes stock)."""
    store = _open_store(ctx)
    sys.exit(0 if _report(store.adjust_quantity(item_id, delta)) else 1)


@cli.command()
@click.argument("term")
@click.pass_context
def search(ctx: click.Context, term: str):
    """Find items by name, category, supplier or barcode."""
    store = _open_store(ctx)
    click.echo(reporting.format_search_results(term, store.search(term)))


@cli.command()
@click.argument("name", required=False)
@click.pass_context
def category(ctx: click.Context, name: Optional[str]):
    """List items in category NAME, or all categories when NAME is omitted."""
    store = _open_store(ctx)
    if name is None:
        names = store.categories()
        if not names:
            click.echo("No categories yet.")
        for category_name in names:
            click.echo(f"  {category_name or '(uncategorized)'}: {len(store.by_category(category_name))} item(s)")
        return
    click.echo(reporting.format_category_listing(name, store.by_category(name)))


@cli.command("low-stock")
@click.pass_context
def low_stock(ctx: click.Context):
    """Show items at or below their minimum stock."""
    store = _open_store(ctx)
    items = store.low_stock()
    message = reporting.format_low_stock_alerts(items)
    click.echo(click.style(message, fg="yellow") if items else message)


@cli.command()
@click.option("--top", type=click.IntRange(min=1), default=None, help="Number of top items by value")
@click.pass_context
def report(ctx: click.Context, top: Optional[int]):
    """Show inventory analytics."""
    store = _open_store(ctx)
    click.echo(reporting.format_analytics(store.analytics(top)))


@cli.command("export")
@click.argument("path", type=click.Path(dir_okay=False))
@click.pass_context
def export_items(ctx: click.Context, path: str):
    """Write all items to the CSV file PATH."""
    store = _open_store(ctx)
    if store.export_to_csv(path):
        click.echo(click.style(f"✓ Exported {len(store)} item(s) to {path}", fg="green"))
        sys.exit(0)
    click.echo(click.style(f"✗ Could not write {path}", fg="red"), err=True)
    sys.exit(1)


@cli.command("import")
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--clear", is_flag=True, help="Remove existing items before importing")
@click.pass_context
def import_items(ctx: click.Context, path: str, clear: bool):
    """Read items from the CSV file PATH."""
    store = _open_store(ctx)
    result = store.import_from_csv(path, clear_existing=clear)
    _report_import(result)
    sys.exit(0 if result.success else 1)


@cli.command("config-info")
def config_info():
    """Display current configuration settings."""
    try:
        config = get_config()

        click.echo("Configuration Settings:")
        click.echo("=" * 60)
        click.echo()
        click.echo("Environment:")
        click.echo(f"  Environment:     {config.env.environment}")
        click.echo(f"  Log level:       {config.logging.level}")
        click.echo(f"  File logging:    {config.logging.to_file}")
        click.echo()
        click.echo("Storage:")
        click.echo(f"  Data file:       {config.storage.data_file}")
        click.echo(f"  Atomic writes:   {config.storage.atomic_writes}")
        click.echo()
        click.echo("Inventory:")
        click.echo(f"  Default minimum: {config.inventory.default_minimum_stock}")
        click.echo(f"  Expiring window: {config.inventory.expiring_soon_days} days")
        click.echo(f"  Top items:       {config.inventory.top_items}")
        click.echo()

    except ConfigurationError as e:
        click.echo(click.style(f"✗ Error loading config: {e.message}", fg="red"), err=True)
        sys.exit(1)


# ------------------------------------------------------------------
# Interactive menu
# ------------------------------------------------------------------

MENU_OPTIONS = (
    "Add item",
    "Display items",
    "Update item",
    "Delete item",
    "Adjust quantity",
    "Search",
    "Items by category",
    "Low stock alerts",
    "Analytics report",
    "Export to CSV",
    "Import from CSV",
)


def _prompt_optional(label: str, value_type=click.STRING):
    """Prompt until the answer is blank (None) or converts cleanly."""
    param_type = click.types.convert_type(value_type)
    while True:
        raw = click.prompt(f"{label} (blank to keep)", default="", show_default=False)
        if raw == "":
            return None
        try:
            return param_type.convert(raw, None, None)
        except click.BadParameter as e:
            click.echo(click.style(f"Error: {e.message}", fg="red"))


def _prompt_expiry() -> Optional[int]:
    """Blank keeps the expiry date, 'none' clears it, anything else must be a date."""
    date_type = click.DateTime(formats=[DATE_FORMAT])
    while True:
        raw = click.prompt(
            "New expiry date (YYYY-MM-DD, 'none' to clear, blank to keep)", default="", show_default=False
        )
        if raw == "":
            return None
        if raw.strip().lower() == "none":
            return 0
        try:
            return _timestamp(date_type.convert(raw.strip(), None, None))
        except click.BadParameter as e:
            click.echo(click.style(f"Error: {e.message}", fg="red"))


def _prompt_existing_id(store: InventoryStore) -> Optional[int]:
    item_id = click.prompt("Item ID", type=int)
    if store.find(item_id) is None:
        click.echo(click.style(f"✗ Item {item_id} not found", fg="red"))
        return None
    return item_id


def _menu_add(store: InventoryStore):
    name = click.prompt("Name")
    category_name = click.prompt("Category", default="", show_default=False)
    supplier = click.prompt("Supplier", default="", show_default=False)
    quantity = click.prompt("Quantity", type=NON_NEGATIVE_INT)
    cost = click.prompt("Cost", type=NON_NEGATIVE_FLOAT)
    price = click.prompt("Selling price", type=NON_NEGATIVE_FLOAT)
    min_stock = click.prompt(
        "Minimum stock", type=NON_NEGATIVE_INT, default=get_config().inventory.default_minimum_stock
    )
    expires = None
    if click.confirm("Does it expire?", default=False):
        expires = click.prompt("Expiry date (YYYY-MM-DD)", type=click.DateTime(formats=[DATE_FORMAT]))
    location = click.prompt("Location", default="", show_default=False)
    description = click.prompt("Description", default="", show_default=False)
    _report(store.add(
        name,
        category_name,
        quantity,
        cost,
        price,
        supplier=supplier,
        minimum_stock=min_stock,
        expiry_date=_timestamp(expires) or 0,
        location=location,
        description=description
    ))


def _menu_update(store: InventoryStore):
    item_id = _prompt_existing_id(store)
    if item_id is None:
        return
    changes = ItemUpdate(
        name=_prompt_optional("New name"),
        category=_prompt_optional("New category"),
        supplier=_prompt_optional("New supplier"),
        quantity=_prompt_optional("New quantity", NON_NEGATIVE_INT),
        cost=_prompt_optional("New cost", NON_NEGATIVE_FLOAT),
        selling_price=_prompt_optional("New selling price", NON_NEGATIVE_FLOAT),
        minimum_stock=_prompt_optional("New minimum stock", NON_NEGATIVE_INT),
        expiry_date=_prompt_expiry(),
        location=_prompt_optional("New location"),
        description=_prompt_optional("New description"),
    )
    _report(store.update(item_id, changes))


def _menu_delete(store: InventoryStore):
    item_id = _prompt_existing_id(store)
    if item_id is not None and click.confirm(f"Delete item {item_id}?", default=False):
        _report(store.delete(item_id))


def _menu_adjust(store: InventoryStore):
    item_id = _prompt_existing_id(store)
    if item_id is not None:
        delta = click.prompt("Change in quantity (negative to remove)", type=int)
        _report(store.adjust_quantity(item_id, delta))


def _run_menu_choice(store: InventoryStore, choice: int):
    days = get_config().inventory.expiring_soon_days
    if choice == 1:
        _menu_add(store)
    elif choice == 2:
        click.echo(reporting.format_item_table(store.items, days))
    elif choice == 3:
        _menu_update(store)
    elif choice == 4:
        _menu_delete(store)
    elif choice == 5:
        _menu_adjust(store)
    elif choice == 6:
        term = click.prompt("Search term")
        click.echo(reporting.format_search_results(term, store.search(term)))
    elif choice == 7:
        name = click.prompt("Category")
        click.echo(reporting.format_category_listing(name, store.by_category(name)))
    elif choice == 8:
        click.echo(reporting.format_low_stock_alerts(store.low_stock()))
    elif choice == 9:
        click.echo(reporting.format_analytics(store.analytics()))
    elif choice == 10:
        path = click.prompt("Export path", default="inventory_export.csv")
        if store.export_to_csv(path):
            click.echo(click.style(f"✓ Exported {len(store)} item(s) to {path}", fg="green"))
        else:
            click.echo(click.style(f"✗ Could not write {path}", fg="red"))
    elif choice == 11:
        path = click.prompt("Import path")
        clear = click.confirm("Clear existing items first?", default=False)
        _report_import(store.import_from_csv(path, clear_existing=clear))


@cli.command()
@click.pass_context
def menu(ctx: click.Context):
    """Run the interactive text menu."""
    store = _open_store(ctx)

    with store:
        while True:
            click.echo()
            click.echo(click.style("Inventory Management System", bold=True))
            for number, label in enumerate(MENU_OPTIONS, 1):
                click.echo(f"{number:>2}. {label}")
            click.echo(" 0. Exit")

            choice = click.prompt("Choose an option", type=click.IntRange(0, len(MENU_OPTIONS)))
            if choice == 0:
                click.echo("Exiting program.")
                break
            _run_menu_choice(store, choice)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
