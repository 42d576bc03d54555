"""Human-readable listings and summaries of inventory contents."""

from datetime import datetime
from typing import List, Optional, Sequence

from ..models.item import DEFAULT_EXPIRING_SOON_DAYS, Item
from ..models.operation_result import AnalyticsReport


STATUS_LOW = "LOW"
STATUS_EXPIRING_SOON = "EXP SOON"
STATUS_EXPIRED = "EXPIRED"
STATUS_OK = "OK"

TABLE_COLUMNS = (
    ("ID", 5),
    ("Name", 20),
    ("Category", 15),
    ("Qty", 6),
    ("Cost", 10),
    ("Price", 10),
    ("Value", 12),
    ("Status", 8),
)

RULE = "─" * 60


def item_status(item: Item, days: int = DEFAULT_EXPIRING_SOON_DAYS, now: Optional[int] = None) -> str:
    """Single status label; low stock wins over expiring soon, which wins over expired."""
    if item.is_low_stock:
        return STATUS_LOW
    if item.is_expiring_soon(days, now):
        return STATUS_EXPIRING_SOON
    if item.is_expired(now):
        return STATUS_EXPIRED
    return STATUS_OK


def _clip(text: str, width: int) -> str:
    text = " ".join(text.split())
    if len(text) <= width - 1:
        return text
    return text[:width - 2] + "…"


def format_date(timestamp: int) -> str:
    if not timestamp:
        return "-"
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d")


def build_table_rows(
    items: Sequence[Item],
    days: int = DEFAULT_EXPIRING_SOON_DAYS,
    now: Optional[int] = None
) -> List[List[str]]:
    """One row of display strings per item, in the order given."""
    return [
        [
            str(item.id),
            item.name,
            item.category,
            str(item.quantity),
            f"{item.cost:.2f}",
            f"{item.selling_price:.2f}",
            f"{item.total_value:.2f}",
            item_status(item, days, now),
        ]
        for item in items
    ]


def format_item_table(
    items: Sequence[Item],
    days: int = DEFAULT_EXPIRING_SOON_DAYS,
    now: Optional[int] = None
) -> str:
    if not items:
        return "No items in the inventory."

    header = "".join(title.ljust(width) for title, width in TABLE_COLUMNS)
    lines = [header, "-" * len(header)]
    for row in build_table_rows(items, days, now):
        lines.append("".join(
            _clip(value, width).ljust(width) for value, (_, width) in zip(row, TABLE_COLUMNS)
        ).rstrip())
    return "\n".join(lines)


def format_item_details(item: Item, days: int = DEFAULT_EXPIRING_SOON_DAYS, now: Optional[int] = None) -> str:
    lines = [
        f"Item #{item.id}: {item.name}",
        RULE,
        f"Category:       {item.category or '-'}",
        f"Supplier:       {item.supplier or '-'}",
        f"Barcode:        {item.barcode}",
        f"Location:       {item.location or '-'}",
        f"Quantity:       {item.quantity} (minimum {item.minimum_stock})",
        f"Cost:           {item.cost:.2f}",
        f"Selling price:  {item.selling_price:.2f}",
        f"Total value:    {item.total_value:.2f}",
        f"Profit:         {item.profit:.2f} ({item.profit_margin:.1f}% margin)",
        f"Added:          {format_date(item.date_added)}",
        f"Last modified:  {format_date(item.last_modified)}",
        f"Expires:        {format_date(item.expiry_date)}",
        f"Status:         {item_status(item, days, now)}",
    ]
    if item.description:
        lines.append(f"Description:    {item.description}")
    return "\n".join(lines)


def format_search_results(term: str, items: Sequence[Item], now: Optional[int] = None) -> str:
    if not items:
        return f"No items match '{term}'."
    return f"{len(items)} item(s) matching '{term}':\n" + format_item_table(items, now=now)


def format_category_listing(category: str, items: Sequence[Item], now: Optional[int] = None) -> str:
    if not items:
        return f"No items in category '{category}'."
    return f"Category '{category}' ({len(items)} item(s)):\n" + format_item_table(items, now=now)


def format_low_stock_alerts(items: Sequence[Item]) -> str:
    if not items:
        return "All items are sufficiently stocked."

    lines = [f"LOW STOCK ALERT: {len(items)} item(s) at or below minimum"]
    for item in items:
        shortfall = item.minimum_stock - item.quantity
        line = f"  #{item.id} {item.name}: {item.quantity} in stock (minimum {item.minimum_stock})"
        if item.supplier:
            line += f", reorder from {item.supplier}"
        if shortfall > 0:
            line += f", short by {shortfall}"
        lines.append(line)
    return "\n".join(lines)


def format_analytics(report: AnalyticsReport) -> str:
    """Multi-section text summary of an analytics report."""
    lines = [
        "Inventory Analytics",
        "=" * 60,
        f"Total items:        {report.item_count}",
        f"Total units:        {report.total_quantity}",
        f"Total value:        {report.total_value:.2f}",
        f"Potential revenue:  {report.potential_revenue:.2f}",
        f"Potential profit:   {report.total_profit:.2f}",
        "",
        f"Low stock:          {report.low_stock_count}",
        f"Expiring soon:      {report.expiring_soon_count}",
        f"Expired:            {report.expired_count}",
    ]

    if report.categories:
        lines += ["", "By category:"]
        for category in report.categories:
            name = category.name or "(uncategorized)"
            lines.append(
                f"  {_clip(name, 20).ljust(20)} {category.item_count:>4} item(s)"
                f" {category.total_quantity:>7} units {category.total_value:>12.2f}"
            )

    if report.top_items:
        lines += ["", f"Top {len(report.top_items)} by value:"]
        for rank, item in enumerate(report.top_items, 1):
            lines.append(f"  {rank}. #{item.id} {item.name}: {item.total_value:.2f}")

    return "\n".join(lines)
