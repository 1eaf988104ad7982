"""
Repository Layer - Data Access

Repositories read the inventory store and return domain models. The engine
consumes them through the InventoryDataSource protocol and a frozen
InventorySnapshot.

Author: TM3
Date: 2026-02-11
"""
from stockcast.repositories.product_repository import ProductRepository
from stockcast.repositories.movement_repository import MovementRepository
from stockcast.repositories.data_source import InMemoryDataSource, InventoryDataSource, PostgresDataSource
from stockcast.repositories.snapshot import InventorySnapshot, load_snapshot

__all__ = [
    'ProductRepository',
    'MovementRepository',
    'InventoryDataSource',
    'InMemoryDataSource',
    'PostgresDataSource',
    'InventorySnapshot',
    'load_snapshot',
]
