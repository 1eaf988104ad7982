"""
Procurement Service

Turns the ranked priority list into a shopping list: economic order
quantity per product, aggregation by supplier and the estimated savings of
consolidating each supplier's items into a single order.

EOQ = ceil(sqrt(2·D·S / H))
    D = annual demand (recommended quantity × 4, trend adjusted)
    S = fixed cost per order
    H = yearly holding cost per unit (unit price × holding rate)

Author: TM3
Date: 2026-02-15
"""
import logging
import math
from typing import Dict, Iterable, List, Mapping, Optional

from stockcast.domain.forecast import TrendDirection
from stockcast.domain.planning import (
    ConsumptionTrend,
    PriorityEntry,
    ShoppingList,
    ShoppingListItem,
    SupplierGroup,
    Urgency,
)
from stockcast.domain.product import Product
from stockcast.services.forecast_config import ForecastConfig

logger = logging.getLogger(__name__)

UNSPECIFIED_SUPPLIER = "Unspecified"


class ProcurementService:
    """Builds the supplier-grouped shopping list"""

    def __init__(self, config: Optional[ForecastConfig] = None):
        self.config = config or ForecastConfig()

    def annual_demand(self, recommended_qty: int, trend: Optional[ConsumptionTrend] = None) -> float:
        """
        Yearly demand estimate from the recommended quantity

        Growing consumption scales it up by the trend percentage, declining
        consumption scales it down at half weight.
        """
        demand = recommended_qty * 4.0
        if trend is None:
            return demand

        change = abs(trend.percent_change)
        if trend.direction == TrendDirection.GROWING:
            demand *= 1 + change / 100
        elif trend.direction == TrendDirection.DECLINING:
            demand *= 1 - change / 200

        return max(demand, 0.0)

    def economic_order_quantity(self, annual_demand: float) -> int:
        if annual_demand <= 0 or self.config.holding_cost <= 0:
            return 0
        return math.ceil(math.sqrt(2 * annual_demand * self.config.order_cost / self.config.holding_cost))

    def build(
        self,
        entries: Iterable[PriorityEntry],
        products_by_id: Mapping[int, Product],
        trends: Optional[Mapping[int, ConsumptionTrend]] = None
    ) -> ShoppingList:
        """
        Build the shopping list from ranked entries

        Args:
            entries: Ranked priority entries (order is kept)
            products_by_id: Product snapshot for current quantities
            trends: Consumption trend per product id (optional)

        Returns:
            ShoppingList with supplier groups and consolidation savings
        """
        trends = trends or {}
        items: List[ShoppingListItem] = []

        for entry in entries:
            product = products_by_id.get(entry.product_id)
            if product is None:
                logger.warning(f"Product {entry.product_id} missing from snapshot, left off the shopping list")
                continue

            if entry.recommended_qty <= 0 and entry.urgency == Urgency.LOW:
                continue

            demand = self.annual_demand(entry.recommended_qty, trends.get(entry.product_id))
            economic_lot = max(self.economic_order_quantity(demand), entry.recommended_qty)

            items.append(ShoppingListItem(
                product_id=entry.product_id,
                code=product.code,
                name=product.name,
                current_quantity=product.quantity,
                recommended_qty=entry.recommended_qty,
                urgency=entry.urgency,
                estimated_value=entry.recommended_qty * self.config.unit_price,
                economic_lot=economic_lot,
                supplier=product.supplier,
                category=product.category,
                purchase_group=entry.purchase_group
            ))

        supplier_groups = self.group_by_supplier(items)

        order_cost = self.config.order_cost
        separate_total = sum(item.estimated_value + order_cost for item in items)
        consolidated_total = sum(group.total_value + order_cost for group in supplier_groups.values())
        savings = separate_total - consolidated_total

        logger.info(
            f"Shopping list: {len(items)} items, {len(supplier_groups)} suppliers, "
            f"total {consolidated_total:.2f}"
        )

        return ShoppingList(
            items=items,
            total_items=len(items),
            supplier_groups=supplier_groups,
            total_value=consolidated_total,
            estimated_savings=savings if savings > 0 else None
        )

    @staticmethod
    def group_by_supplier(items: Iterable[ShoppingListItem]) -> Dict[str, SupplierGroup]:
        groups: Dict[str, SupplierGroup] = {}
        for item in items:
            group = groups.setdefault(item.supplier or UNSPECIFIED_SUPPLIER, SupplierGroup())
            group.product_ids.append(item.product_id)
            group.total_value += item.estimated_value
            if item.urgency.rank < group.max_urgency.rank:
                group.max_urgency = item.urgency
        return groups
