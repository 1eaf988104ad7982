"""
Product Domain Model

Read-only view of a catalog product as the forecasting engine sees it.
Stock levels are mutated by the transaction side of the application; the
engine only reads a snapshot.

Author: TM3
Date: 2026-02-10
"""
import logging
from typing import Any, Iterable, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from stockcast.core.exceptions import MalformedRecordError

logger = logging.getLogger(__name__)

# Keys used by the mobile app / legacy Go server payloads
_FIELD_ALIASES = {
    'codigo': 'code',
    'nome': 'name',
    'quantidade': 'quantity',
    'quantidade_minima': 'min_quantity',
    'minQuantity': 'min_quantity',
    'fornecedor': 'supplier',
    'categoria': 'category',
    'localizacao': 'location',
}


class Product(BaseModel):
    """
    Product domain model

    Fields:
        id: Internal product ID
        code: Product code (barcode / SKU)
        name: Product name
        quantity: Current stock level
        min_quantity: Minimum stock threshold (optional)
        supplier: Supplier name (optional)
        category: Product category (optional)
        location: Storage location (optional)
    """

    id: int = Field(..., description="Internal product ID", strict=True)
    code: str = Field(..., description="Product code", min_length=1)
    name: str = Field(..., description="Product name")
    quantity: int = Field(0, description="Current stock level", strict=True)
    min_quantity: Optional[int] = Field(None, description="Minimum stock threshold", ge=0, strict=True)
    supplier: Optional[str] = Field(None, description="Supplier name")
    category: Optional[str] = Field(None, description="Product category")
    location: Optional[str] = Field(None, description="Storage location")

    model_config = ConfigDict(frozen=True)

    @field_validator('supplier', 'category', 'location', mode='before')
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @property
    def is_out_of_stock(self) -> bool:
        """Check if product is out of stock"""
        return self.quantity <= 0


def parse_product(raw: Mapping[str, Any]) -> Product:
    """
    Validate a loosely-typed product record into a Product

    Accepts both the engine field names and the Portuguese keys of the
    inventory mobile app payloads.

    Raises:
        MalformedRecordError: If required fields are missing or invalid
    """
    data = {_FIELD_ALIASES.get(key, key): value for key, value in raw.items()}
    try:
        return Product.model_validate(data)
    except ValidationError as e:
        raise MalformedRecordError(f"Invalid product record: {e.error_count()} error(s)", record=raw) from e


def parse_products(raw_records: Iterable[Mapping[str, Any]]) -> List[Product]:
    """Parse product records, skipping (and logging) malformed ones"""
    products = []
    for raw in raw_records:
        try:
            products.append(parse_product(raw))
        except MalformedRecordError as e:
            logger.warning(f"Skipping malformed product record {raw.get('id')!r}: {e}")
    return products
