"""
Priority Ranking Service

Ranks products for replenishment across the whole catalog: urgency tier,
supplier lead time, supplier purchase groups and a stable multi-key sort.

Author: TM3
Date: 2026-02-14
"""
import logging
from collections import Counter
from datetime import date
from typing import Iterable, List, Mapping, Optional, Tuple

from stockcast.domain.forecast import PredictionResult
from stockcast.domain.planning import PriorityEntry, Urgency
from stockcast.domain.product import Product
from stockcast.services.forecast_config import ForecastConfig

logger = logging.getLogger(__name__)


class PriorityRankingService:
    """Builds the ordered replenishment priority list"""

    def __init__(self, config: Optional[ForecastConfig] = None):
        self.config = config or ForecastConfig()

    def classify_urgency(self, product: Product, prediction: PredictionResult) -> Urgency:
        """
        Urgency tier from the forecast, or from stock levels when there is none

        - high: ≤ 7 days left, or no forecast and out of stock
        - medium: ≤ 14 days left, or no forecast and at/below minimum
        - low: everything else
        """
        days = prediction.days_remaining
        if days is not None:
            if days <= 7:
                return Urgency.HIGH
            if days <= 14:
                return Urgency.MEDIUM
            return Urgency.LOW

        min_quantity = product.min_quantity or self.config.default_min_quantity
        if product.is_out_of_stock:
            return Urgency.HIGH
        if product.quantity <= min_quantity:
            return Urgency.MEDIUM
        return Urgency.LOW

    def estimate_lead_time(self, supplier: Optional[str]) -> int:
        """
        Replenishment lead time in days, 7-16 per supplier

        Placeholder: derived from a stable hash of the supplier name until
        lead times come from supplier master data.
        """
        if not supplier:
            return self.config.default_supplier_lead_time_days
        return 7 + sum(ord(char) for char in supplier) % 10

    def purchase_groups(
        self,
        products: Iterable[Product],
        predictions: Mapping[int, PredictionResult],
        today: date
    ) -> Mapping[str, str]:
        """Group id per supplier with enough products needing purchase"""
        needing = Counter(
            p.supplier for p in products
            if p.supplier and p.id in predictions and predictions[p.id].needs_purchase
        )
        stamp = today.strftime('%Y%m%d')
        return {
            supplier: f"{supplier}-{stamp}"
            for supplier, count in needing.items()
            if count >= self.config.purchase_group_min_products
        }

    def rank(
        self,
        products: Iterable[Product],
        predictions: Mapping[int, PredictionResult],
        today: date
    ) -> List[PriorityEntry]:
        """
        Rank products that have a prediction

        Sort order: urgency → days remaining (no forecast last) → purchase
        group → supplier → category. Low-urgency products with nothing to
        buy are dropped.

        Args:
            products: Catalog snapshot
            predictions: Prediction per product id
            today: Reference date (used in purchase group ids)

        Returns:
            Ordered list of PriorityEntry
        """
        products = [p for p in products if p.id in predictions]
        groups = self.purchase_groups(products, predictions, today)

        entries = []
        for product in products:
            prediction = predictions[product.id]
            purchase_group = groups.get(product.supplier) if prediction.needs_purchase else None

            entries.append(PriorityEntry(
                product_id=product.id,
                code=product.code,
                name=product.name,
                quantity=product.quantity,
                days_remaining=prediction.days_remaining,
                urgency=self.classify_urgency(product, prediction),
                recommended_qty=prediction.recommended_qty,
                needs_purchase=prediction.needs_purchase,
                estimated_value=prediction.recommended_qty * self.config.unit_price,
                lead_time_days=self.estimate_lead_time(product.supplier),
                supplier=product.supplier,
                category=product.category,
                purchase_group=purchase_group
            ))

        entries.sort(key=self._sort_key)
        ranked = [e for e in entries if e.urgency != Urgency.LOW or e.recommended_qty > 0]

        logger.debug(f"Ranked {len(ranked)} of {len(entries)} products for replenishment")
        return ranked

    @staticmethod
    def _sort_key(entry: PriorityEntry) -> Tuple:
        # Missing values sort after present ones at every level
        return (
            entry.urgency.rank,
            entry.days_remaining is None, entry.days_remaining or 0,
            entry.purchase_group is None, entry.purchase_group or '',
            entry.supplier is None, entry.supplier or '',
            entry.category is None, entry.category or '',
            entry.product_id,
        )
