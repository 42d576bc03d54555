"""Result data models for store operations, imports and analytics."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Dict, Any, Optional

from .item import Item


class OperationStatus(str, Enum):
    """Outcome of a single store operation."""

    ADDED = "added"
    UPDATED = "updated"
    NO_CHANGE = "no_change"
    DELETED = "deleted"
    ADJUSTED = "adjusted"
    NOT_FOUND = "not_found"
    INVALID = "invalid"


_SUCCESS_STATUSES = {
    OperationStatus.ADDED,
    OperationStatus.UPDATED,
    OperationStatus.NO_CHANGE,
    OperationStatus.DELETED,
    OperationStatus.ADJUSTED,
}


@dataclass
class OperationResult:
    """Represents the result of a store mutation."""

    status: OperationStatus
    item_id: Optional[int] = None
    quantity: Optional[int] = None
    message: str = ""
    field: Optional[str] = None
    persisted: bool = False

    @property
    def success(self) -> bool:
        return self.status in _SUCCESS_STATUSES

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "status": self.status.value,
            "success": self.success,
            "item_id": self.item_id,
            "quantity": self.quantity,
            "message": self.message,
            "field": self.field,
            "persisted": self.persisted
        }


@dataclass
class RecordError:
    """Represents a record that could not be decoded."""

    line_number: int
    error_type: str
    message: str
    raw: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "line_number": self.line_number,
            "error_type": self.error_type,
            "message": self.message,
            "raw": self.raw,
            "timestamp": self.timestamp.isoformat()
        }


@dataclass
class ImportResult:
    """Represents the result of loading or importing a CSV file."""

    success: bool
    source: str = ""
    imported_count: int = 0
    failed_count: int = 0
    total_records: int = 0
    errors: List[RecordError] = field(default_factory=list)
    duration: float = 0.0  # seconds
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    def __post_init__(self):
        """Initialize timestamps if not set."""
        if self.start_time is None:
            self.start_time = datetime.now()

    def add_error(self, line_number: int, error_type: str, message: str, raw: str = ""):
        """Add an error to the result."""
        self.errors.append(RecordError(
            line_number=line_number,
            error_type=error_type,
            message=message,
            raw=raw
        ))
        self.failed_count += 1

    def finalize(self):
        """Finalize the result with end time and duration."""
        self.end_time = datetime.now()
        if self.start_time:
            self.duration = (self.end_time - self.start_time).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "success": self.success,
            "source": self.source,
            "imported_count": self.imported_count,
            "failed_count": self.failed_count,
            "total_records": self.total_records,
            "duration": round(self.duration, 2),
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "errors": [error.to_dict() for error in self.errors]
        }

    def get_summary(self) -> str:
        """Get a human-readable summary."""
        summary_lines = [
            f"Source: {self.source}",
            f"Records read: {self.total_records}",
            f"Imported: {self.imported_count}",
            f"Errors: {self.failed_count}"
        ]

        if self.errors:
            summary_lines.append(f"\nErrors ({len(self.errors)}):")
            for error in self.errors[:5]:
                summary_lines.append(f"  - line {error.line_number}: {error.message}")
            if len(self.errors) > 5:
                summary_lines.append(f"  ... and {len(self.errors) - 5} more errors")

        return "\n".join(summary_lines)


@dataclass
class CategorySummary:
    """Totals for one category."""

    name: str
    item_count: int = 0
    total_quantity: int = 0
    total_value: float = 0.0


@dataclass
class AnalyticsReport:
    """Aggregate figures over the whole inventory."""

    item_count: int = 0
    total_quantity: int = 0
    total_value: float = 0.0
    potential_revenue: float = 0.0
    total_profit: float = 0.0
    categories: List[CategorySummary] = field(default_factory=list)
    low_stock_count: int = 0
    expiring_soon_count: int = 0
    expired_count: int = 0
    top_items: List[Item] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "item_count": self.item_count,
            "total_quantity": self.total_quantity,
            "total_value": round(self.total_value, 2),
            "potential_revenue": round(self.potential_revenue, 2),
            "total_profit": round(self.total_profit, 2),
            "categories": [
                {
                    "name": category.name,
                    "item_count": category.item_count,
                    "total_quantity": category.total_quantity,
                    "total_value": round(category.total_value, 2)
                }
                for category in self.categories
            ],
            "low_stock_count": self.low_stock_count,
            "expiring_soon_count": self.expiring_soon_count,
            "expired_count": self.expired_count,
            "top_items": [item.id for item in self.top_items]
        }
