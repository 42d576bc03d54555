"""CSV encoding and decoding of inventory items.

One item is one record of 14 comma-separated fields. Fields containing a
comma, a quote or a line break are quoted with inner quotes doubled, so a
record may span several physical lines of the file. Decoding never raises
on bad input: it returns a ``DecodeResult`` carrying either the item or the
decode error.
"""

import csv
import io
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional, Tuple, Union

from ..models.item import Item
from ..utils.exceptions import (
    DecodeError,
    InvalidFieldError,
    MalformedRecordError,
    StorageError,
    ValidationError,
)


# (column header, Item attribute, parser)
FIELD_SPECS = (
    ("ID", "id", int),
    ("Name", "name", str),
    ("Category", "category", str),
    ("Supplier", "supplier", str),
    ("Barcode", "barcode", str),
    ("Quantity", "quantity", int),
    ("MinimumStock", "minimum_stock", int),
    ("Cost", "cost", float),
    ("SellingPrice", "selling_price", float),
    ("DateAdded", "date_added", int),
    ("LastModified", "last_modified", int),
    ("ExpiryDate", "expiry_date", int),
    ("Location", "location", str),
    ("Description", "description", str),
)

HEADER_FIELDS = tuple(column for column, _, _ in FIELD_SPECS)
FIELD_COUNT = len(FIELD_SPECS)
MONEY_FIELDS = ("cost", "selling_price")

_COLUMN_FOR_ATTRIBUTE = {attribute: column for column, attribute, _ in FIELD_SPECS}


@dataclass
class DecodeResult:
    """Either a decoded item or the reason the record was rejected."""

    item: Optional[Item] = None
    error: Optional[DecodeError] = None
    raw: str = ""

    @property
    def ok(self) -> bool:
        return self.item is not None


def _join(values: Iterable[str]) -> str:
    buffer = io.StringIO()
    # "\r\n" as terminator so both line-break characters force quoting
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")
    writer.writerow(values)
    return buffer.getvalue()[:-2]


def header() -> str:
    """Column-name line written at the top of every file."""
    return _join(HEADER_FIELDS)


def _render(attribute: str, value) -> str:
    if attribute in MONEY_FIELDS:
        return f"{value:.2f}"
    return str(value)


def encode(item: Item) -> str:
    """Encode an item as a single CSV record (no trailing newline)."""
    return _join(_render(attribute, getattr(item, attribute)) for _, attribute, _ in FIELD_SPECS)


def _split(line: str) -> list:
    text = line.rstrip("\r\n")
    try:
        rows = list(csv.reader(io.StringIO(text, newline=""), strict=True))
    except csv.Error as e:
        raise MalformedRecordError(f"Unparseable record: {e}", {"raw": line}) from e

    if len(rows) != 1:
        raise MalformedRecordError("Record is empty or spans several rows", {"raw": line})

    values = rows[0]
    if len(values) != FIELD_COUNT:
        raise MalformedRecordError(
            f"Expected {FIELD_COUNT} fields, found {len(values)}",
            {"raw": line, "field_count": len(values)}
        )
    return values


def _parse(column: str, parser: type, raw: str) -> Union[int, float, str]:
    if parser is str:
        return raw
    try:
        value = parser(raw.strip())
    except ValueError as e:
        raise InvalidFieldError(column, raw) from e
    if parser is float and not math.isfinite(value):
        raise InvalidFieldError(column, raw, "not a finite number")
    return value


def decode(line: str) -> DecodeResult:
    """Decode one CSV record into an item."""
    try:
        values = _split(line)
        kwargs = {
            attribute: _parse(column, parser, raw)
            for (column, attribute, parser), raw in zip(FIELD_SPECS, values)
        }
    except DecodeError as e:
        return DecodeResult(error=e, raw=line)

    try:
        item = Item(**kwargs)
    except ValidationError as e:
        column = _COLUMN_FOR_ATTRIBUTE.get(e.field, e.field or "record")
        raw_value = values[HEADER_FIELDS.index(column)] if column in HEADER_FIELDS else ""
        return DecodeResult(error=InvalidFieldError(column, raw_value, e.message), raw=line)

    return DecodeResult(item=item, raw=line)


def iter_records(stream: Iterable[str]) -> Iterator[Tuple[int, str]]:
    """
    Group physical lines into logical CSV records.

    Lines are joined while a quoted span is still open, so quoted fields
    with embedded line breaks come back as one record. Blank lines are
    skipped.

    Yields:
        (starting line number, record text without its line terminator)
    """
    pending = ""
    start = 0
    for line_number, line in enumerate(stream, 1):
        if not pending:
            start = line_number
        pending += line
        if pending.count('"') % 2:
            continue
        record = pending.rstrip("\r\n")
        pending = ""
        if record.strip():
            yield start, record

    if pending.strip():
        yield start, pending.rstrip("\r\n")


def is_header(record: str) -> bool:
    return record.strip().lower() == header().lower()


def read_records(path: Union[str, Path], encoding: str = "utf-8") -> Iterator[Tuple[int, DecodeResult]]:
    """
    Decode every record of a CSV file, skipping the header line.

    Raises:
        FileNotFoundError: If the file does not exist
        StorageError: If the file cannot be read
    """
    path = Path(path)
    try:
        with open(path, "r", encoding=encoding, newline="") as f:
            first = True
            for line_number, record in iter_records(f):
                if first:
                    first = False
                    if is_header(record):
                        continue
                yield line_number, decode(record)
    except FileNotFoundError:
        raise
    except (OSError, UnicodeDecodeError) as e:
        raise StorageError(f"Cannot read {path}: {e}", {"path": str(path)}) from e


def write_items(path: Union[str, Path], items: Iterable[Item], encoding: str = "utf-8", atomic: bool = True):
    """
    Write header and items to ``path``, replacing any existing file.

    With ``atomic`` the data goes to a sibling temp file that is renamed
    over the target once complete.

    Raises:
        StorageError: If the file cannot be written
    """
    path = Path(path)
    target = path.with_name(path.name + ".tmp") if atomic else path
    try:
        if not path.parent.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding=encoding, newline="") as f:
            f.write(header() + "\n")
            for item in items:
                f.write(encode(item) + "\n")
        if atomic:
            os.replace(target, path)
    except OSError as e:
        if atomic and target.exists():
            try:
                target.unlink()
            except OSError:
                pass
        raise StorageError(f"Cannot write {path}: {e}", {"path": str(path)}) from e
