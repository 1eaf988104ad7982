"""
Pytest fixtures and configuration for Stockcast tests

This file provides shared fixtures that can be used across all test modules.
All tests run against in-memory snapshots with a fixed clock; the database
is only touched through mocks.

Author: TM3
Date: 2026-02-17
"""
from datetime import datetime, timedelta

import pytest

from stockcast.domain.movement import MovementKind, MovementRecord
from stockcast.domain.product import Product
from stockcast.repositories.data_source import InMemoryDataSource
from stockcast.services.forecast_config import ForecastConfig

FIXED_NOW = datetime(2024, 7, 1, 12, 0)


def build_product(product_id=1, quantity=15, min_quantity=None, supplier=None, category=None):
    return Product(
        id=product_id,
        code=f"P{product_id:04d}",
        name=f"Product {product_id}",
        quantity=quantity,
        min_quantity=min_quantity,
        supplier=supplier,
        category=category
    )


def build_movement(product_id, timestamp, quantity, kind=MovementKind.EXIT, movement_id=None):
    return MovementRecord(
        id=movement_id,
        product_id=product_id,
        kind=kind,
        quantity=quantity,
        timestamp=timestamp
    )


def steady_exits(product_id=1, quantity=10):
    """Exits of `quantity` units every ten days over April-June 2024"""
    return [
        build_movement(product_id, datetime(2024, month, day, 10, 0), quantity)
        for month in (4, 5, 6)
        for day in (5, 15, 25)
    ]


@pytest.fixture
def now():
    """Fixed reference time: 2024-07-01 12:00"""
    return FIXED_NOW


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def config():
    return ForecastConfig()


@pytest.fixture
def make_product():
    """Factory for Product models"""
    return build_product


@pytest.fixture
def make_exit():
    """Factory for exit movements"""
    return build_movement


@pytest.fixture
def make_entry():
    """Factory for entry movements"""
    def _entry(product_id, timestamp, quantity, movement_id=None):
        return build_movement(product_id, timestamp, quantity, MovementKind.ENTRY, movement_id)
    return _entry


@pytest.fixture
def steady_history():
    """Nine exits of 10 units, one every ten days, for product 1"""
    return steady_exits()


@pytest.fixture
def data_source_factory():
    """Factory for InMemoryDataSource"""
    def _source(products=(), movements=()):
        return InMemoryDataSource(products=products, movements=movements)
    return _source


@pytest.fixture
def daily_exits():
    """Factory for daily exits over the `days` days before now"""
    def _exits(product_id, days, quantity=1):
        return [
            build_movement(product_id, FIXED_NOW - timedelta(days=offset, hours=1), quantity)
            for offset in range(days)
        ]
    return _exits
