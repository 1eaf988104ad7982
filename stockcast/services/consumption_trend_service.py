"""
Consumption Trend Service

Longer-range view of a product's consumption over its whole exit history:
direction, percent change, seasonality and a short projection. Feeds the
annual demand estimate of the procurement list.

Author: TM3
Date: 2026-02-14
"""
import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from stockcast.domain.forecast import Confidence, TrendDirection
from stockcast.domain.movement import MovementRecord
from stockcast.domain.planning import ConsumptionTrend, FuturePeriod
from stockcast.services.consumption_forecaster import round_half_up
from stockcast.services.forecast_config import ForecastConfig

logger = logging.getLogger(__name__)

MIN_RECORDS = 5
WEEKLY_MIN_RECORDS = 20
SEASONAL_VARIATION = 0.3
PROJECTED_PERIODS = 3


def _week_key(ts: datetime) -> str:
    year, week, _ = ts.isocalendar()
    return f"{year}-W{week:02d}"


class ConsumptionTrendService:
    """Trend analysis over weekly or monthly consumption periods"""

    def __init__(self, config: Optional[ForecastConfig] = None):
        self.config = config or ForecastConfig()

    def analyze(self, movements: Iterable[MovementRecord], now: datetime) -> ConsumptionTrend:
        """
        Analyze the consumption trend of a product

        Periods are weeks when there are at least 20 exit records, months
        otherwise. Direction combines the half-split percent change with the
        least-squares slope over the periods.

        Args:
            movements: The product's movement history (any kind)
            now: Reference time for the projected periods

        Returns:
            ConsumptionTrend (stable / low confidence with fewer than 5 exits)
        """
        exits = sorted((m for m in movements if m.is_exit), key=lambda m: m.timestamp)
        if len(exits) < MIN_RECORDS:
            return ConsumptionTrend.insufficient()

        weekly = len(exits) >= WEEKLY_MIN_RECORDS
        frame = pd.DataFrame({
            'quantity': [float(m.quantity) for m in exits],
        })
        frame['period'] = [
            _week_key(m.timestamp) if weekly else m.timestamp.strftime('%Y-%m') for m in exits
        ]
        frame['month'] = [m.timestamp.month for m in exits]

        periods = frame.groupby('period')['quantity'].sum().sort_index()
        values = periods.to_numpy(dtype=float)

        # Seasonality on record sizes per calendar month
        overall_mean = float(frame['quantity'].mean())
        month_means = frame.groupby('month')['quantity'].mean()
        seasonal = False
        max_variation = 0.0
        if overall_mean > 0:
            max_variation = float((month_means - overall_mean).abs().max() / overall_mean)
            seasonal = max_variation > SEASONAL_VARIATION and len(month_means) >= 3

        slope = self._slope(values)
        percent_change = self._half_split_change(values)

        if percent_change >= self.config.trend_threshold_pct or slope > 0:
            direction = TrendDirection.GROWING
            description = f"Consumption up {abs(percent_change):.1f}%"
        elif percent_change <= -self.config.trend_threshold_pct or slope < 0:
            direction = TrendDirection.DECLINING
            description = f"Consumption down {abs(percent_change):.1f}%"
        else:
            direction = TrendDirection.STABLE
            description = f"Stable consumption over the last {'weeks' if weekly else 'months'}"

        factors = {
            int(month): float(mean) / overall_mean
            for month, mean in month_means.items()
        } if seasonal else {}
        future_periods = self._project(values, now, weekly, factors)

        if len(values) >= 6 and not seasonal:
            confidence = Confidence.HIGH
        elif len(values) >= 4 or (len(values) >= 3 and not seasonal):
            confidence = Confidence.MEDIUM
        else:
            confidence = Confidence.LOW

        if seasonal:
            description += f". Significant seasonality ({round_half_up(max_variation * 100)}% variation between months)"
        if confidence == Confidence.LOW:
            description += ". Low confidence: little history"

        return ConsumptionTrend(
            direction=direction,
            percent_change=round(percent_change, 1),
            description=description,
            confidence=confidence,
            seasonal=seasonal,
            future_periods=future_periods
        )

    @staticmethod
    def _slope(values: np.ndarray) -> float:
        """Least-squares slope of the series against its period index"""
        if len(values) < 2:
            return 0.0
        x = np.arange(len(values), dtype=float)
        x_dev = x - x.mean()
        return float(np.sum(x_dev * (values - values.mean())) / np.sum(x_dev ** 2))

    @staticmethod
    def _half_split_change(values: np.ndarray) -> float:
        middle = len(values) // 2
        if middle == 0:
            return 0.0
        first_avg = float(values[:middle].mean())
        second_avg = float(values[middle:].mean())
        if first_avg <= 0:
            return 0.0
        return (second_avg - first_avg) / first_avg * 100

    @staticmethod
    def _project(values: np.ndarray, now: datetime, weekly: bool, factors: dict) -> List[FuturePeriod]:
        """Extend the mean period-over-period change of the last 3 periods"""
        recent = values[-3:]
        if len(recent) < 2:
            return []

        changes = [
            current / previous - 1
            for previous, current in zip(recent[:-1], recent[1:])
            if previous > 0
        ]
        mean_change = sum(changes) / (len(recent) - 1)

        projected = []
        level = float(recent[-1])
        this_month = pd.Period(year=now.year, month=now.month, freq='M')

        for step in range(1, PROJECTED_PERIODS + 1):
            level *= 1 + mean_change
            if weekly:
                day = now + timedelta(days=7 * step)
                name, month = _week_key(day), day.month
            else:
                period = this_month + step
                name, month = period.strftime('%Y-%m'), period.month

            quantity = level * factors.get(month, 1.0)
            projected.append(FuturePeriod(period=name, quantity=max(0, round_half_up(quantity))))

        return projected
