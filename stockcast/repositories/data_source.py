"""
Inventory data sources

The engine reads products and movements through InventoryDataSource and
never cares whether they come from PostgreSQL, a sync payload or a test
fixture. The source is injected into the planning service at construction.

Author: TM3
Date: 2026-02-11
"""
from typing import Any, Iterable, List, Mapping, Optional, Protocol, Union, runtime_checkable

from stockcast.domain.movement import MovementRecord, parse_movements
from stockcast.domain.product import Product, parse_products
from stockcast.repositories.movement_repository import MovementRepository
from stockcast.repositories.product_repository import ProductRepository


@runtime_checkable
class InventoryDataSource(Protocol):
    """Read-only product/movement store consumed by the engine"""

    def list_products(self) -> List[Product]:
        ...

    def list_movements(self, product_id: Optional[int] = None) -> List[MovementRecord]:
        ...


class InMemoryDataSource:
    """
    Data source over in-memory records

    Accepts domain models or loose dict payloads (e.g. the mobile app's
    JSON); dicts are validated once here and malformed ones dropped.
    """

    def __init__(
        self,
        products: Iterable[Union[Product, Mapping[str, Any]]] = (),
        movements: Iterable[Union[MovementRecord, Mapping[str, Any]]] = ()
    ):
        self._products = self._coerce(products, Product, parse_products)
        self._movements = self._coerce(movements, MovementRecord, parse_movements)

    @staticmethod
    def _coerce(records, model, parser) -> tuple:
        records = list(records)
        typed = [r for r in records if isinstance(r, model)]
        raw = [r for r in records if not isinstance(r, model)]
        return tuple(typed + parser(raw))

    def list_products(self) -> List[Product]:
        return list(self._products)

    def list_movements(self, product_id: Optional[int] = None) -> List[MovementRecord]:
        if product_id is None:
            return list(self._movements)
        return [m for m in self._movements if m.product_id == product_id]


class PostgresDataSource:
    """Data source backed by the `produtos` / `movimentacoes` tables"""

    def __init__(
        self,
        product_repository: Optional[ProductRepository] = None,
        movement_repository: Optional[MovementRepository] = None,
        database_url: Optional[str] = None
    ):
        self.product_repository = product_repository or ProductRepository(database_url)
        self.movement_repository = movement_repository or MovementRepository(database_url)

    def list_products(self) -> List[Product]:
        return self.product_repository.find_all()

    def list_movements(self, product_id: Optional[int] = None) -> List[MovementRecord]:
        return self.movement_repository.find_all(product_id)
