"""
Stockout Prediction Service

Combines the temporal profile and the consumption scenarios with a
product's stock levels to predict depletion and recommend a purchase.

Provides:
- Days remaining / depletion date (realistic scenario)
- Confidence level from history depth and cycle regularity
- Six-month consumption projection
- Safety stock, purchase need and recommended quantity
- Depletion probability and a 1-10 priority score

Author: TM3
Date: 2026-02-13
"""
import logging
import math
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, Optional

import pandas as pd

from stockcast.domain.forecast import (
    Confidence,
    CycleKind,
    ForecastScenario,
    PredictionResult,
    ScenarioKind,
    TemporalProfile,
)
from stockcast.domain.movement import MovementRecord
from stockcast.domain.product import Product
from stockcast.services.consumption_forecaster import ConsumptionForecaster, ConsumptionRate, round_half_up
from stockcast.services.forecast_config import ForecastConfig
from stockcast.services.temporal_analysis_service import TemporalAnalysisService

logger = logging.getLogger(__name__)


class StockoutPredictionService:
    """Per-product stockout prediction"""

    def __init__(
        self,
        config: Optional[ForecastConfig] = None,
        temporal_analysis: Optional[TemporalAnalysisService] = None,
        forecaster: Optional[ConsumptionForecaster] = None
    ):
        self.config = config or ForecastConfig()
        self.temporal_analysis = temporal_analysis or TemporalAnalysisService(self.config)
        self.forecaster = forecaster or ConsumptionForecaster(self.config)

    # =========================================================================
    # Public API
    # =========================================================================

    def predict(
        self,
        product: Product,
        movements: Iterable[MovementRecord],
        now: datetime
    ) -> PredictionResult:
        """
        Predict stockout and purchase need for a product

        Args:
            product: Product snapshot
            movements: The product's movement history (any kind)
            now: Reference time of the run

        Returns:
            PredictionResult
        """
        today = now.date()
        window = self.temporal_analysis.select_window(movements, now)

        if window.total_quantity <= 0:
            logger.debug(f"Product {product.id}: no exits in window, no depletion expected")
            return self._no_consumption_result(product)

        profile = self.temporal_analysis.analyze(window)
        rate = self.forecaster.compute_rate(
            window.total_quantity, window.window_days, profile, today.month
        )

        if not rate.depletes:
            return self._no_consumption_result(product)

        scenarios = self.forecaster.build_scenarios(product.quantity, rate, profile, today)
        realistic = next(s for s in scenarios if s.kind == ScenarioKind.REALISTIC)
        pessimistic = next((s for s in scenarios if s.kind == ScenarioKind.PESSIMISTIC), None)
        days_remaining = realistic.days_remaining

        confidence = self._confidence(window.movement_count, profile)
        lead_time = self.config.lead_time_days
        safety_stock = self.safety_stock(rate.adjusted, lead_time)

        needs_purchase = (
            product.quantity <= safety_stock
            or (days_remaining is not None and days_remaining <= lead_time + self.config.purchase_margin_days)
        )

        recommended_qty = self._recommended_quantity(product, rate, profile, safety_stock, today)

        return PredictionResult(
            days_remaining=days_remaining,
            depletion_date=realistic.depletion_date,
            daily_consumption=rate.adjusted,
            confidence=confidence,
            needs_purchase=needs_purchase,
            recommended_qty=recommended_qty,
            monthly_projection=self.monthly_projection(rate.baseline, profile, today),
            estimated_cost=recommended_qty * self.config.unit_price,
            depletion_probability=self.depletion_probability(pessimistic),
            priority_score=self.priority_score(days_remaining, product, safety_stock, confidence),
            safety_stock=safety_stock,
            scenarios=scenarios
        )

    # =========================================================================
    # Building blocks
    # =========================================================================

    def _no_consumption_result(self, product: Product) -> PredictionResult:
        """Nothing is being consumed: only the minimum stock rule applies"""
        min_quantity = product.min_quantity or self.config.default_min_quantity
        below_minimum = product.quantity <= min_quantity
        recommended_qty = max(min_quantity * 2 - product.quantity, 0) if below_minimum else 0

        return PredictionResult(
            days_remaining=None,
            depletion_date=None,
            daily_consumption=0.0,
            confidence=Confidence.HIGH,
            needs_purchase=below_minimum,
            recommended_qty=recommended_qty,
            estimated_cost=recommended_qty * self.config.unit_price,
            depletion_probability=0.8 if below_minimum else 0.05,
            priority_score=8 if below_minimum else 2
        )

    @staticmethod
    def _confidence(movement_count: int, profile: TemporalProfile) -> Confidence:
        if movement_count > 15 and profile.cycle != CycleKind.IRREGULAR:
            return Confidence.HIGH
        if movement_count > 8:
            return Confidence.MEDIUM
        return Confidence.LOW

    def safety_stock(self, daily_rate: float, lead_time_days: int) -> int:
        """Lead-time demand plus a 20% margin"""
        return math.ceil(daily_rate * lead_time_days * self.config.safety_factor)

    def monthly_projection(self, baseline: float, profile: TemporalProfile, today: date) -> Dict[str, int]:
        """Projected consumption for the current and next months, keyed YYYY-MM"""
        projection = {}
        current = pd.Period(year=today.year, month=today.month, freq='M')

        for offset in range(self.config.projection_months):
            period = current + offset
            trend_adjustment = 1 + profile.trend_rate * offset / 100 if profile.is_trending else 1.0
            monthly = baseline * 30 * profile.factor_for(period.month) * trend_adjustment
            projection[period.strftime('%Y-%m')] = max(round_half_up(monthly), 0)

        return projection

    def projected_consumption(self, baseline: float, profile: TemporalProfile, today: date) -> float:
        """Day-by-day consumption over the projection horizon"""
        total = 0.0
        for offset in range(self.config.projection_horizon_days):
            day = today + timedelta(days=offset)
            # Trend is spread over the horizon at daily resolution
            trend_adjustment = 1 + profile.trend_rate * offset / 6000 if profile.is_trending else 1.0
            total += baseline * profile.factor_for(day.month) * trend_adjustment
        return total

    def _recommended_quantity(
        self,
        product: Product,
        rate: ConsumptionRate,
        profile: TemporalProfile,
        safety_stock: int,
        today: date
    ) -> int:
        projected = self.projected_consumption(rate.baseline, profile, today)
        base_qty = math.ceil(projected - product.quantity + safety_stock)

        effective_min = product.min_quantity or math.ceil(rate.adjusted * 30)
        qty_to_minimum = max(0, effective_min - product.quantity)

        return max(base_qty, qty_to_minimum, 0)

    @staticmethod
    def depletion_probability(pessimistic: Optional[ForecastScenario]) -> float:
        if pessimistic is None or pessimistic.days_remaining is None:
            return 0.5
        if pessimistic.days_remaining < 30:
            return (1 - pessimistic.days_remaining / 30) * pessimistic.probability
        return pessimistic.probability * 0.5

    def priority_score(
        self,
        days_remaining: Optional[int],
        product: Product,
        safety_stock: int,
        confidence: Confidence
    ) -> int:
        """1-10 alert priority, 10 being the most urgent"""
        if days_remaining is not None:
            if days_remaining <= 7:
                score = 10
            elif days_remaining <= 14:
                score = 9
            elif days_remaining <= self.config.lead_time_days:
                score = 8
            elif days_remaining <= 30:
                score = 7
            elif days_remaining <= 60:
                score = 5
            else:
                score = 3
        elif product.quantity <= safety_stock:
            score = 6
        elif product.min_quantity and product.quantity <= product.min_quantity * 1.2:
            score = 4
        else:
            score = 2

        if confidence == Confidence.LOW:
            score += 1

        return max(1, min(score, 10))
