"""
Replenishment Service

Entry point of the forecasting engine. Reads one snapshot from the injected
data source per call and runs the pipeline over it:

    temporal analysis → consumption forecast → stockout prediction
        → priority ranking → procurement list

Public methods never raise: missing data and unexpected failures are logged
and degrade to a neutral result.

Author: TM3
Date: 2026-02-16
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from stockcast.core.exceptions import MissingDataError
from stockcast.domain.forecast import PredictionResult
from stockcast.domain.movement import to_naive_utc
from stockcast.domain.planning import ConsumptionTrend, PriorityEntry, ShoppingList
from stockcast.repositories.data_source import InventoryDataSource, PostgresDataSource
from stockcast.repositories.snapshot import InventorySnapshot, load_snapshot
from stockcast.services.consumption_trend_service import ConsumptionTrendService
from stockcast.services.forecast_config import ForecastConfig
from stockcast.services.priority_ranking_service import PriorityRankingService
from stockcast.services.procurement_service import ProcurementService
from stockcast.services.stockout_prediction_service import StockoutPredictionService

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReplenishmentService:
    """
    Demand forecasting and replenishment planning over an inventory source.

    Provides:
    - Per-product stockout prediction
    - Catalog-wide replenishment priority list
    - Supplier-grouped shopping list with EOQ lot sizes
    - Consumption trend analysis
    """

    def __init__(
        self,
        data_source: InventoryDataSource,
        config: Optional[ForecastConfig] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.data_source = data_source
        self.config = config or ForecastConfig()
        self.clock = clock or _utc_now

        self.prediction = StockoutPredictionService(self.config)
        self.ranking = PriorityRankingService(self.config)
        self.procurement = ProcurementService(self.config)
        self.trends = ConsumptionTrendService(self.config)

    # =========================================================================
    # Public API
    # =========================================================================

    def forecast_product(self, product_id: int) -> PredictionResult:
        """
        Stockout prediction for one product

        Returns:
            PredictionResult, or the neutral low-confidence result when the
            product is unknown or the source fails
        """
        now = self._now()
        try:
            snapshot = self._load([product_id])
            product = self._require_product(snapshot, product_id)
            return self.prediction.predict(product, snapshot.movements_for(product_id), now)
        except MissingDataError as e:
            logger.warning(f"Forecast unavailable: {e}")
        except Exception:
            logger.exception(f"Error forecasting product {product_id}")
        return PredictionResult.unavailable()

    def rank_priority_products(self) -> List[PriorityEntry]:
        """Products ordered by replenishment priority (empty on failure)"""
        now = self._now()
        try:
            snapshot = self._load()
            predictions = self._predict_all(snapshot, now)
            return self.ranking.rank(snapshot.products.values(), predictions, now.date())
        except MissingDataError as e:
            logger.warning(f"Priority ranking unavailable: {e}")
        except Exception:
            logger.exception("Error ranking priority products")
        return []

    def build_shopping_list(self) -> ShoppingList:
        """Supplier-grouped shopping list (empty on failure)"""
        now = self._now()
        try:
            snapshot = self._load()
            predictions = self._predict_all(snapshot, now)
            entries = self.ranking.rank(snapshot.products.values(), predictions, now.date())

            trends: Dict[int, ConsumptionTrend] = {}
            for entry in entries:
                try:
                    trends[entry.product_id] = self.trends.analyze(snapshot.movements_for(entry.product_id), now)
                except Exception:
                    logger.exception(f"Trend analysis failed for product {entry.product_id}, no adjustment")

            return self.procurement.build(entries, snapshot.products, trends)
        except MissingDataError as e:
            logger.warning(f"Shopping list unavailable: {e}")
        except Exception:
            logger.exception("Error building shopping list")
        return ShoppingList.empty()

    def analyze_consumption_trend(self, product_id: int) -> ConsumptionTrend:
        """Consumption trend of one product (insufficient-data result on failure)"""
        now = self._now()
        try:
            snapshot = self._load([product_id])
            self._require_product(snapshot, product_id)
            return self.trends.analyze(snapshot.movements_for(product_id), now)
        except MissingDataError as e:
            logger.warning(f"Trend analysis unavailable: {e}")
            return ConsumptionTrend.insufficient("Product not found")
        except Exception:
            logger.exception(f"Error analyzing consumption trend for product {product_id}")
        return ConsumptionTrend.insufficient()

    # =========================================================================
    # Internals
    # =========================================================================

    def _now(self) -> datetime:
        """Clock reading as naive UTC, the form movement timestamps are stored in"""
        return to_naive_utc(self.clock())

    def _load(self, product_ids: Optional[List[int]] = None) -> InventorySnapshot:
        snapshot = load_snapshot(self.data_source, product_ids, max_workers=self.config.max_workers)
        if snapshot.is_empty:
            raise MissingDataError("No products in data source")
        return snapshot

    @staticmethod
    def _require_product(snapshot: InventorySnapshot, product_id: int):
        product = snapshot.product(product_id)
        if product is None:
            raise MissingDataError(f"Product {product_id} not found", product_id=product_id)
        return product

    def _predict_all(self, snapshot: InventorySnapshot, now: datetime) -> Dict[int, PredictionResult]:
        """Predict every product; a failing product is logged and left out"""
        predictions = {}
        for product_id, product in snapshot.products.items():
            try:
                predictions[product_id] = self.prediction.predict(
                    product, snapshot.movements_for(product_id), now
                )
            except Exception:
                logger.exception(f"Prediction failed for product {product_id}, excluded from ranking")

        logger.info(f"Predicted {len(predictions)} of {len(snapshot.products)} products")
        return predictions


# =============================================================================
# Factory
# =============================================================================

def get_replenishment_service(database_url: Optional[str] = None) -> ReplenishmentService:
    """ReplenishmentService over the PostgreSQL inventory tables"""
    return ReplenishmentService(
        PostgresDataSource(database_url=database_url),
        ForecastConfig.from_settings()
    )
