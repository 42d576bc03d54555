"""Pytest configuration and fixtures."""

import itertools
import os

# Keep test runs from writing log files into the working directory
os.environ["LOG_TO_FILE"] = "false"

import pytest

from inventory_tracker.models.item import Item
from inventory_tracker.services.inventory_store import InventoryStore
from inventory_tracker.utils.config import get_config


FIXED_NOW = 1_700_000_000


@pytest.fixture(autouse=True)
def fresh_config():
    """Reload configuration for every test."""
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def data_file(tmp_path):
    """Path of a not-yet-existing backing file."""
    return tmp_path / "inventory_data.csv"


@pytest.fixture
def barcode_factory():
    """Deterministic 9-digit barcodes."""
    counter = itertools.count(100000001)
    return lambda: str(next(counter))


@pytest.fixture
def store(data_file, barcode_factory):
    """An empty store backed by a temporary file, with a fixed clock."""
    return InventoryStore(data_file, barcode_factory=barcode_factory, clock=lambda: FIXED_NOW)


@pytest.fixture
def sample_item():
    """Create a sample Item for testing."""
    return Item(
        id=7,
        name="Widget",
        category="Tools",
        supplier="Acme",
        barcode="123456789",
        quantity=10,
        minimum_stock=5,
        cost=2.50,
        selling_price=5.00,
        date_added=FIXED_NOW,
        last_modified=FIXED_NOW,
        expiry_date=0,
        location="Aisle 3",
        description="Standard widget"
    )


@pytest.fixture
def populated_store(store):
    """Store with three items of value 100, 50 and 200."""
    store.add("Alpha", "Hardware", 10, 10.0, 12.0)
    store.add("Bravo", "garden", 5, 10.0, 15.0)
    store.add("Charlie", "Hardware", 20, 10.0, 9.0)
    return store
