"""
Replenishment planning types: priority entries, shopping list, consumption trend

Author: TM3
Date: 2026-02-11
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from stockcast.domain.forecast import Confidence, TrendDirection


class Urgency(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort position: high first"""
        return _URGENCY_RANK[self]


_URGENCY_RANK = {Urgency.HIGH: 0, Urgency.MEDIUM: 1, Urgency.LOW: 2}


@dataclass(frozen=True)
class PriorityEntry:
    """Product summary with its replenishment priority"""
    product_id: int
    code: str
    name: str
    quantity: int
    days_remaining: Optional[int]
    urgency: Urgency
    recommended_qty: int
    needs_purchase: bool
    estimated_value: float
    lead_time_days: int
    supplier: Optional[str] = None
    category: Optional[str] = None
    purchase_group: Optional[str] = None


@dataclass(frozen=True)
class ShoppingListItem:
    product_id: int
    code: str
    name: str
    current_quantity: int
    recommended_qty: int
    urgency: Urgency
    estimated_value: float
    economic_lot: int
    supplier: Optional[str] = None
    category: Optional[str] = None
    purchase_group: Optional[str] = None


@dataclass
class SupplierGroup:
    """Items of one supplier consolidated into a single order"""
    product_ids: List[int] = field(default_factory=list)
    total_value: float = 0.0
    max_urgency: Urgency = Urgency.LOW


@dataclass
class ShoppingList:
    items: List[ShoppingListItem]
    total_items: int
    supplier_groups: Dict[str, SupplierGroup]
    total_value: float
    estimated_savings: Optional[float] = None

    @classmethod
    def empty(cls) -> "ShoppingList":
        return cls(items=[], total_items=0, supplier_groups={}, total_value=0.0)


@dataclass(frozen=True)
class FuturePeriod:
    period: str
    quantity: int


@dataclass(frozen=True)
class ConsumptionTrend:
    """Direction and short-term projection of a product's consumption"""
    direction: TrendDirection
    percent_change: float
    description: str
    confidence: Confidence
    seasonal: bool = False
    future_periods: List[FuturePeriod] = field(default_factory=list)

    @classmethod
    def insufficient(cls, description: str = "Insufficient data for trend analysis") -> "ConsumptionTrend":
        return cls(
            direction=TrendDirection.STABLE,
            percent_change=0.0,
            description=description,
            confidence=Confidence.LOW
        )
