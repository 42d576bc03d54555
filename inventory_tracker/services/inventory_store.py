"""Inventory store: the item collection and its CSV persistence."""

import random
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Union

from . import csv_codec
from ..models.item import Item, ItemUpdate, current_timestamp
from ..models.operation_result import (
    AnalyticsReport,
    CategorySummary,
    ImportResult,
    OperationResult,
    OperationStatus,
)
from ..utils.config import get_config
from ..utils.exceptions import StorageError, ValidationError
from ..utils.logger import get_error_logger, get_import_logger, get_store_logger


BARCODE_MIN = 100000000
BARCODE_MAX = 999999999


class InventoryStore:
    """
    Owns the ordered item collection, assigns ids and barcodes, and
    rewrites the backing CSV file after every successful mutation.

    Items keep insertion order. Ids increase monotonically and are never
    handed out twice by the same store, even after deletes.
    """

    def __init__(
        self,
        data_file: Optional[Union[str, Path]] = None,
        *,
        autoload: bool = True,
        barcode_factory: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], int]] = None
    ):
        self.config = get_config()
        self.logger = get_store_logger()
        self.import_logger = get_import_logger()
        self.error_logger = get_error_logger()

        self.data_file = Path(data_file or self.config.storage.data_file)
        self.items: List[Item] = []
        self.next_id = 1
        self.last_load: Optional[ImportResult] = None

        self._rng = random.Random()
        self._barcode_factory = barcode_factory or self._random_barcode
        self._clock = clock or current_timestamp

        if autoload:
            self.last_load = self.load()

    # ------------------------------------------------------------------
    # Identity helpers
    # ------------------------------------------------------------------

    def _random_barcode(self) -> str:
        return str(self._rng.randint(BARCODE_MIN, BARCODE_MAX))

    def _allocate_id(self) -> int:
        item_id = self.next_id
        self.next_id += 1
        return item_id

    def _observe_id(self, item_id: int):
        """Advance the id counter past an id read from a file."""
        if item_id >= self.next_id:
            self.next_id = item_id + 1

    def _new_barcode(self) -> str:
        existing = {item.barcode for item in self.items}
        barcode = self._barcode_factory()
        while barcode in existing:
            barcode = self._barcode_factory()
        return barcode

    # ------------------------------------------------------------------
    # Collection protocol
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self.items)

    def find(self, item_id: int) -> Optional[Item]:
        """Exact id lookup."""
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(
        self,
        name: str,
        category: str = "",
        quantity: int = 0,
        cost: float = 0.0,
        selling_price: float = 0.0,
        *,
        supplier: str = "",
        minimum_stock: Optional[int] = None,
        expiry_date: int = 0,
        location: str = "",
        description: str = ""
    ) -> OperationResult:
        """Create an item and persist the store; nothing changes if validation fails."""
        if minimum_stock is None:
            minimum_stock = self.config.inventory.default_minimum_stock
        now = self._clock()

        try:
            item = Item(
                id=self.next_id,
                name=name,
                category=category,
                supplier=supplier,
                barcode=self._new_barcode(),
                quantity=quantity,
                minimum_stock=minimum_stock,
                cost=cost,
                selling_price=selling_price,
                date_added=now,
                last_modified=now,
                expiry_date=expiry_date,
                location=location,
                description=description,
            )
        except ValidationError as e:
            self.logger.warning(f"Rejected new item {name!r}: {e.message}")
            return OperationResult(OperationStatus.INVALID, message=e.message, field=e.field)

        self._allocate_id()
        self.items.append(item)
        self.logger.info(f"Added item {item.id} ({item.name}) qty={item.quantity}")

        return OperationResult(
            OperationStatus.ADDED,
            item_id=item.id,
            quantity=item.quantity,
            message=f"Item {item.id} added",
            persisted=self.save()
        )

    def update(self, item_id: int, update: ItemUpdate) -> OperationResult:
        """Apply the fields supplied in ``update`` to an item."""
        item = self.find(item_id)
        if item is None:
            return OperationResult(OperationStatus.NOT_FOUND, item_id=item_id, message=f"Item {item_id} not found")

        if update.is_empty():
            return OperationResult(
                OperationStatus.NO_CHANGE,
                item_id=item_id,
                quantity=item.quantity,
                message="No fields to update"
            )

        try:
            item.apply_update(update)
        except ValidationError as e:
            self.logger.warning(f"Rejected update of item {item_id}: {e.message}")
            return OperationResult(OperationStatus.INVALID, item_id=item_id, message=e.message, field=e.field)

        item.touch(self._clock())
        self.logger.info(f"Updated item {item_id}: {', '.join(sorted(update.changes()))}")

        return OperationResult(
            OperationStatus.UPDATED,
            item_id=item_id,
            quantity=item.quantity,
            message=f"Item {item_id} updated",
            persisted=self.save()
        )

    def delete(self, item_id: int) -> OperationResult:
        for index, item in enumerate(self.items):
            if item.id == item_id:
                del self.items[index]
                self.logger.info(f"Deleted item {item_id} ({item.name})")
                return OperationResult(
                    OperationStatus.DELETED,
                    item_id=item_id,
                    message=f"Item {item_id} deleted",
                    persisted=self.save()
                )

        return OperationResult(OperationStatus.NOT_FOUND, item_id=item_id, message=f"Item {item_id} not found")

    def adjust_quantity(self, item_id: int, delta: int) -> OperationResult:
        """Add or remove stock; rejected if the quantity would drop below zero."""
        item = self.find(item_id)
        if item is None:
            return OperationResult(OperationStatus.NOT_FOUND, item_id=item_id, message=f"Item {item_id} not found")

        try:
            new_quantity = item.update_quantity(delta)
        except ValidationError as e:
            self.logger.warning(f"Rejected quantity change {delta!r} on item {item_id}: {e.message}")
            return OperationResult(
                OperationStatus.INVALID,
                item_id=item_id,
                quantity=item.quantity,
                message=e.message,
                field=e.field
            )

        item.touch(self._clock())
        self.logger.info(f"Adjusted item {item_id} by {delta:+d} -> {new_quantity}")

        return OperationResult(
            OperationStatus.ADJUSTED,
            item_id=item_id,
            quantity=new_quantity,
            message=f"Item {item_id} quantity is now {new_quantity}",
            persisted=self.save()
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search(self, term: str) -> List[Item]:
        """
        Match ``term`` against name, category and supplier (case-insensitive)
        and against the barcode (case-sensitive). Store order is preserved.
        """
        needle = term.lower()
        return [
            item for item in self.items
            if needle in item.name.lower()
            or needle in item.category.lower()
            or needle in item.supplier.lower()
            or term in item.barcode
        ]

    def by_category(self, category: str) -> List[Item]:
        wanted = category.lower()
        return [item for item in self.items if item.category.lower() == wanted]

    def categories(self) -> List[str]:
        return sorted({item.category for item in self.items})

    def low_stock(self) -> List[Item]:
        return [item for item in self.items if item.is_low_stock]

    def expiring_soon(self, days: Optional[int] = None) -> List[Item]:
        """Items expiring within ``days`` that have not expired yet."""
        days = self.config.inventory.expiring_soon_days if days is None else days
        now = self._clock()
        return [
            item for item in self.items
            if item.is_expiring_soon(days, now) and not item.is_expired(now)
        ]

    def expired(self) -> List[Item]:
        now = self._clock()
        return [item for item in self.items if item.is_expired(now)]

    def analytics(self, top_n: Optional[int] = None) -> AnalyticsReport:
        top_n = self.config.inventory.top_items if top_n is None else top_n
        days = self.config.inventory.expiring_soon_days
        now = self._clock()

        report = AnalyticsReport(item_count=len(self.items))
        by_category: Dict[str, CategorySummary] = {}

        for item in self.items:
            report.total_quantity += item.quantity
            report.total_value += item.total_value
            report.potential_revenue += item.potential_revenue
            report.total_profit += item.profit

            summary = by_category.setdefault(item.category, CategorySummary(name=item.category))
            summary.item_count += 1
            summary.total_quantity += item.quantity
            summary.total_value += item.total_value

            if item.is_low_stock:
                report.low_stock_count += 1
            if item.is_expired(now):
                report.expired_count += 1
            elif item.is_expiring_soon(days, now):
                report.expiring_soon_count += 1

        report.categories = [by_category[name] for name in sorted(by_category)]
        # sorted() is stable, so equal values keep insertion order
        report.top_items = sorted(self.items, key=lambda item: item.total_value, reverse=True)[:top_n]
        return report

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _read_into(self, path: Path, result: ImportResult, reserved_below: int = 0):
        """Append decoded records; ids in use or below ``reserved_below`` get a fresh id."""
        for line_number, decoded in csv_codec.read_records(path, self.config.storage.encoding):
            result.total_records += 1
            if not decoded.ok:
                error = decoded.error
                self.import_logger.warning(f"{path}:{line_number}: skipped record ({error.message})")
                result.add_error(line_number, type(error).__name__, error.message, decoded.raw)
                continue

            item = decoded.item
            if item.id < reserved_below or self.find(item.id) is not None:
                old_id = item.id
                item.id = self._allocate_id()
                self.import_logger.info(f"{path}:{line_number}: id {old_id} already used, imported as {item.id}")
            self._observe_id(item.id)
            self.items.append(item)
            result.imported_count += 1

    def load(self) -> ImportResult:
        """
        Replace in-memory items with the contents of the backing file.

        A missing file yields an empty store. Undecodable records are
        logged and skipped.
        """
        result = ImportResult(success=True, source=str(self.data_file))
        self.items = []
        self.next_id = 1

        if not self.data_file.exists():
            self.import_logger.info(f"No data file at {self.data_file}; starting with an empty inventory")
            result.finalize()
            return result

        try:
            self._read_into(self.data_file, result)
        except StorageError as e:
            self.error_logger.error(e.message)
            result.success = False
            result.add_error(0, type(e).__name__, e.message)

        result.finalize()
        self.import_logger.info(
            f"Loaded {result.imported_count} items from {self.data_file} "
            f"({result.failed_count} errors)"
        )
        return result

    def save(self) -> bool:
        """Rewrite the backing file; returns False (and logs) if it cannot be written."""
        return self._write(self.data_file)

    def _write(self, path: Path) -> bool:
        try:
            csv_codec.write_items(
                path,
                self.items,
                encoding=self.config.storage.encoding,
                atomic=self.config.storage.atomic_writes
            )
        except StorageError as e:
            self.error_logger.error(f"Save failed: {e.message}")
            return False

        self.logger.debug(f"Wrote {len(self.items)} items to {path}")
        return True

    def export_to_csv(self, path: Union[str, Path]) -> bool:
        path = Path(path)
        ok = self._write(path)
        if ok:
            self.import_logger.info(f"Exported {len(self.items)} items to {path}")
        return ok

    def import_from_csv(self, path: Union[str, Path], clear_existing: bool = False) -> ImportResult:
        """
        Merge (or, with ``clear_existing``, replace) items from another CSV file.

        Records that fail to decode are counted and skipped. Imported items
        whose id is taken, or was already issued by this store, get a
        fresh id. The combined inventory is then written to the backing
        file.
        """
        path = Path(path)
        result = ImportResult(success=True, source=str(path))

        if not path.exists():
            message = f"Import file not found: {path}"
            self.error_logger.error(message)
            result.success = False
            result.add_error(0, "FileNotFoundError", message)
            result.finalize()
            return result

        previous_items = list(self.items)
        previous_next_id = self.next_id
        if clear_existing:
            self.items = []

        try:
            self._read_into(path, result, reserved_below=previous_next_id)
        except StorageError as e:
            self.error_logger.error(e.message)
            self.items = previous_items
            self.next_id = previous_next_id
            result.success = False
            result.imported_count = 0
            result.add_error(0, type(e).__name__, e.message)
            result.finalize()
            return result

        # Ids are never reused, even those of cleared items
        self.next_id = max(self.next_id, previous_next_id)

        self.import_logger.info(
            f"Imported {result.imported_count} items from {path} "
            f"({result.failed_count} errors, clear_existing={clear_existing})"
        )
        if not self.save():
            result.success = False
        result.finalize()
        return result

    def close(self):
        """Orderly shutdown: write the current state one last time."""
        self.save()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
