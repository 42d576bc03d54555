"""Inventory item data models."""

import time
from dataclasses import dataclass, fields
from typing import Optional, Dict, Any

from ..utils.exceptions import ValidationError


SECONDS_PER_DAY = 86400
DEFAULT_MINIMUM_STOCK = 5
DEFAULT_EXPIRING_SOON_DAYS = 30


def current_timestamp() -> int:
    """Current time as whole unix seconds."""
    return int(time.time())


def to_money(value) -> float:
    """Round a price to the two decimals it is stored with."""
    return round(float(value), 2)


def _require_text(field_name: str, value: Any) -> None:
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text", field=field_name)


def _require_non_negative(field_name: str, value: Any, kind: type) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float) if kind is float else int):
        raise ValidationError(f"{field_name} must be a number", field=field_name)
    if value < 0:
        raise ValidationError(f"{field_name} cannot be negative", field=field_name)


def validate_field(field_name: str, value: Any) -> None:
    """Validate a single item field, raising ValidationError on bad values."""
    if field_name == "name":
        _require_text(field_name, value)
        if not value.strip():
            raise ValidationError("Name cannot be empty", field="name")
    elif field_name in ("category", "supplier", "location", "description", "barcode"):
        _require_text(field_name, value)
    elif field_name in ("quantity", "minimum_stock", "expiry_date", "date_added", "last_modified"):
        _require_non_negative(field_name, value, int)
    elif field_name in ("cost", "selling_price"):
        _require_non_negative(field_name, value, float)
    elif field_name == "id":
        _require_non_negative(field_name, value, int)
    else:
        raise ValidationError(f"Unknown field: {field_name}", field=field_name)


@dataclass
class Item:
    """Represents one stock item in the inventory."""

    id: int
    name: str
    category: str = ""
    supplier: str = ""
    barcode: str = ""
    quantity: int = 0
    minimum_stock: int = DEFAULT_MINIMUM_STOCK
    cost: float = 0.0
    selling_price: float = 0.0
    date_added: int = 0
    last_modified: int = 0
    expiry_date: int = 0  # 0 means no expiry
    location: str = ""
    description: str = ""

    def __post_init__(self):
        """Validate and normalize data."""
        for item_field in fields(self):
            validate_field(item_field.name, getattr(self, item_field.name))

        self.cost = to_money(self.cost)
        self.selling_price = to_money(self.selling_price)

        if not self.date_added:
            self.date_added = current_timestamp()
        if not self.last_modified:
            self.last_modified = self.date_added

    # ------------------------------------------------------------------
    # Derived metrics
    # ------------------------------------------------------------------

    @property
    def total_value(self) -> float:
        return self.quantity * self.cost

    @property
    def potential_revenue(self) -> float:
        return self.quantity * self.selling_price

    @property
    def profit(self) -> float:
        return (self.selling_price - self.cost) * self.quantity

    @property
    def profit_margin(self) -> float:
        """Margin over cost as a percentage; 0 when cost is 0."""
        if self.cost == 0:
            return 0.0
        return (self.selling_price - self.cost) / self.cost * 100

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.minimum_stock

    @property
    def has_expiry(self) -> bool:
        return self.expiry_date != 0

    def is_expired(self, now: Optional[int] = None) -> bool:
        if not self.has_expiry:
            return False
        now = current_timestamp() if now is None else now
        return self.expiry_date <= now

    def is_expiring_soon(self, days: int = DEFAULT_EXPIRING_SOON_DAYS, now: Optional[int] = None) -> bool:
        """True when the item expires within ``days``; expired items count too."""
        if not self.has_expiry:
            return False
        now = current_timestamp() if now is None else now
        return self.expiry_date <= now + days * SECONDS_PER_DAY

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def touch(self, now: Optional[int] = None):
        self.last_modified = current_timestamp() if now is None else now

    def _set(self, field_name: str, value: Any):
        validate_field(field_name, value)
        if field_name in ("cost", "selling_price"):
            value = to_money(value)
        setattr(self, field_name, value)
        self.touch()

    def set_name(self, name: str):
        self._set("name", name)

    def set_category(self, category: str):
        self._set("category", category)

    def set_supplier(self, supplier: str):
        self._set("supplier", supplier)

    def set_location(self, location: str):
        self._set("location", location)

    def set_description(self, description: str):
        self._set("description", description)

    def set_quantity(self, quantity: int):
        self._set("quantity", quantity)

    def set_minimum_stock(self, minimum_stock: int):
        self._set("minimum_stock", minimum_stock)

    def set_cost(self, cost: float):
        self._set("cost", cost)

    def set_selling_price(self, selling_price: float):
        self._set("selling_price", selling_price)

    def set_expiry_date(self, expiry_date: int):
        self._set("expiry_date", expiry_date)

    def update_quantity(self, delta: int) -> int:
        """Add ``delta`` (possibly negative) to quantity and return the new quantity."""
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise ValidationError("Quantity change must be a whole number", field="quantity")
        new_quantity = self.quantity + delta
        if new_quantity < 0:
            raise ValidationError(
                f"Cannot remove {-delta} units; only {self.quantity} in stock",
                field="quantity",
                details={"current": self.quantity, "delta": delta}
            )
        self.quantity = new_quantity
        self.touch()
        return new_quantity

    def apply_update(self, update: "ItemUpdate") -> bool:
        """
        Apply a partial update.

        Every supplied field is validated before any is written, so a
        rejected update leaves the item untouched.

        Returns:
            True if at least one field was supplied
        """
        changes = update.changes()
        if not changes:
            return False

        for field_name, value in changes.items():
            validate_field(field_name, value)

        for field_name, value in changes.items():
            if field_name in ("cost", "selling_price"):
                value = to_money(value)
            setattr(self, field_name, value)
        self.touch()
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation, derived metrics included."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "supplier": self.supplier,
            "barcode": self.barcode,
            "quantity": self.quantity,
            "minimum_stock": self.minimum_stock,
            "cost": self.cost,
            "selling_price": self.selling_price,
            "date_added": self.date_added,
            "last_modified": self.last_modified,
            "expiry_date": self.expiry_date,
            "location": self.location,
            "description": self.description,
            "total_value": round(self.total_value, 2),
            "profit": round(self.profit, 2),
            "profit_margin": round(self.profit_margin, 2),
            "is_low_stock": self.is_low_stock,
        }


@dataclass
class ItemUpdate:
    """Fields to change on an existing item; ``None`` leaves a field unchanged."""

    name: Optional[str] = None
    category: Optional[str] = None
    supplier: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[int] = None
    minimum_stock: Optional[int] = None
    cost: Optional[float] = None
    selling_price: Optional[float] = None
    expiry_date: Optional[int] = None

    def changes(self) -> Dict[str, Any]:
        return {
            update_field.name: getattr(self, update_field.name)
            for update_field in fields(self)
            if getattr(self, update_field.name) is not None
        }

    def is_empty(self) -> bool:
        return not self.changes()
