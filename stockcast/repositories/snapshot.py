"""
Inventory snapshot loading

A run of the engine reads the data source exactly once, up front, and then
computes over the frozen result. Per-product movement lookups against a
latent store fan out over a bounded thread pool and fan back in here.

Author: TM3
Date: 2026-02-11
"""
import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from stockcast.domain.movement import MovementRecord
from stockcast.domain.product import Product
from stockcast.repositories.data_source import InventoryDataSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InventorySnapshot:
    """Immutable products + movements for one engine run"""
    products: Mapping[int, Product]
    movements: Mapping[int, Tuple[MovementRecord, ...]]

    def product(self, product_id: int) -> Optional[Product]:
        return self.products.get(product_id)

    def movements_for(self, product_id: int) -> Tuple[MovementRecord, ...]:
        return self.movements.get(product_id, ())

    @property
    def is_empty(self) -> bool:
        return not self.products


def _freeze(products: Iterable[Product], movements: Iterable[MovementRecord]) -> InventorySnapshot:
    by_id: Dict[int, Product] = {}
    for product in products:
        if product.id in by_id:
            logger.warning(f"Duplicate product id {product.id} in source, keeping the first")
            continue
        by_id[product.id] = product

    grouped: Dict[int, List[MovementRecord]] = defaultdict(list)
    for movement in movements:
        grouped[movement.product_id].append(movement)

    frozen_movements = {
        product_id: tuple(sorted(records, key=lambda m: (m.timestamp, m.id or 0)))
        for product_id, records in grouped.items()
    }

    return InventorySnapshot(
        products=MappingProxyType(by_id),
        movements=MappingProxyType(frozen_movements)
    )


def load_snapshot(
    source: InventoryDataSource,
    product_ids: Optional[Iterable[int]] = None,
    max_workers: int = 4
) -> InventorySnapshot:
    """
    Fetch products and movements once and freeze them

    Args:
        source: Data source to read from
        product_ids: When given, movements are fetched per product (bounded
            fan-out); otherwise all movements are fetched in a single call
        max_workers: Upper bound on concurrent per-product fetches

    Returns:
        InventorySnapshot

    Raises:
        Whatever the source raises while listing products or (single-call)
        movements. Per-product fetch failures are isolated: the product is
        kept with an empty history.
    """
    products = source.list_products()

    if product_ids is None:
        movements = source.list_movements()
        snapshot = _freeze(products, movements)
        logger.debug(f"Snapshot loaded: {len(snapshot.products)} products, {len(movements)} movements")
        return snapshot

    ids = list(dict.fromkeys(product_ids))
    if not ids:
        return _freeze(products, [])

    def fetch(product_id: int) -> List[MovementRecord]:
        try:
            return [m for m in source.list_movements(product_id) if m.product_id == product_id]
        except Exception:
            logger.exception(f"Movement fetch failed for product {product_id}, using empty history")
            return []

    workers = max(1, min(max_workers, len(ids)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = list(executor.map(fetch, ids))

    movements = [m for batch in results for m in batch]
    logger.debug(f"Snapshot loaded for {len(ids)} product(s) with {workers} worker(s)")
    return _freeze(products, movements)
