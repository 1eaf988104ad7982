"""
Movement Domain Model

Stock movements (entries and exits) produced by the transaction side of
the application. Immutable once created.

Author: TM3
Date: 2026-02-10
"""
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from stockcast.core.exceptions import MalformedRecordError

logger = logging.getLogger(__name__)


class MovementKind(str, Enum):
    ENTRY = "entry"
    EXIT = "exit"


_FIELD_ALIASES = {
    'produto_id': 'product_id',
    'productId': 'product_id',
    'tipo': 'kind',
    'type': 'kind',
    'quantidade': 'quantity',
    'data_movimentacao': 'timestamp',
}

_KIND_ALIASES = {
    'entrada': MovementKind.ENTRY,
    'saida': MovementKind.EXIT,
    'saída': MovementKind.EXIT,
}


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values pass through"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class MovementRecord(BaseModel):
    """
    A single stock movement

    Timestamps are normalized to naive UTC so that window arithmetic never
    mixes aware and naive datetimes.
    """

    id: Optional[int] = Field(None, description="Movement ID")
    product_id: int = Field(..., description="Product the movement belongs to", strict=True)
    kind: MovementKind = Field(..., description="entry or exit")
    quantity: int = Field(..., description="Units moved", ge=0, strict=True)
    timestamp: datetime = Field(..., description="When the movement happened")

    model_config = ConfigDict(frozen=True)

    @field_validator('kind', mode='before')
    @classmethod
    def _normalize_kind(cls, value):
        if isinstance(value, str):
            key = value.strip().lower()
            return _KIND_ALIASES.get(key, key)
        return value

    @field_validator('timestamp')
    @classmethod
    def _to_naive_utc(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @property
    def is_exit(self) -> bool:
        return self.kind == MovementKind.EXIT


def parse_movement(raw: Mapping[str, Any]) -> MovementRecord:
    """
    Validate a loosely-typed movement record

    Raises:
        MalformedRecordError: Missing/unparseable timestamp, unknown kind,
            negative or non-integer quantity
    """
    data = {_FIELD_ALIASES.get(key, key): value for key, value in raw.items()}
    if data.get('timestamp') in (None, ''):
        raise MalformedRecordError("Movement record has no timestamp", record=raw)
    try:
        return MovementRecord.model_validate(data)
    except ValidationError as e:
        raise MalformedRecordError(f"Invalid movement record: {e.error_count()} error(s)", record=raw) from e


def parse_movements(raw_records: Iterable[Mapping[str, Any]]) -> List[MovementRecord]:
    """Parse movement records; malformed ones are excluded, never fatal"""
    movements = []
    skipped = 0
    for raw in raw_records:
        try:
            movements.append(parse_movement(raw))
        except MalformedRecordError as e:
            skipped += 1
            logger.debug(f"Excluding movement {raw.get('id')!r}: {e}")

    if skipped:
        logger.warning(f"Excluded {skipped} malformed movement record(s)")
    return movements
