"""
Domain Layer - Business Entities

Ingested records (Product, MovementRecord) are pydantic models validated at
the ingestion boundary. Forecast and planning results are plain dataclasses
derived per invocation.

Author: TM3
Date: 2026-02-10
"""
from stockcast.domain.product import Product, parse_product, parse_products
from stockcast.domain.movement import MovementKind, MovementRecord, parse_movement, parse_movements
from stockcast.domain.forecast import (
    Confidence,
    CycleKind,
    ForecastScenario,
    PredictionResult,
    ScenarioKind,
    TemporalProfile,
    TrendDirection,
)
from stockcast.domain.planning import (
    ConsumptionTrend,
    FuturePeriod,
    PriorityEntry,
    ShoppingList,
    ShoppingListItem,
    SupplierGroup,
    Urgency,
)

__all__ = [
    'Product', 'parse_product', 'parse_products',
    'MovementKind', 'MovementRecord', 'parse_movement', 'parse_movements',
    'Confidence', 'CycleKind', 'ForecastScenario', 'PredictionResult',
    'ScenarioKind', 'TemporalProfile', 'TrendDirection',
    'ConsumptionTrend', 'FuturePeriod', 'PriorityEntry', 'ShoppingList',
    'ShoppingListItem', 'SupplierGroup', 'Urgency',
]
