"""
Temporal Analysis Service

Detects seasonality, consumption cycles and trend from a product's exit
history aggregated by calendar month.

- Seasonality: ratio of each calendar month's average to the overall average
- Cycle: autocorrelation of the monthly series at lags 1, 3, 6 and 12
- Trend: mean of the second half of the series vs the first half

Author: TM3
Date: 2026-02-12
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from stockcast.domain.forecast import CycleKind, TemporalProfile, TrendDirection
from stockcast.domain.movement import MovementRecord
from stockcast.services.forecast_config import ForecastConfig

logger = logging.getLogger(__name__)

# (lag in months, cycle it indicates); order matters for ties
CYCLE_LAGS: Tuple[Tuple[int, CycleKind], ...] = (
    (1, CycleKind.MONTHLY),
    (3, CycleKind.QUARTERLY),
    (6, CycleKind.SEMIANNUAL),
    (12, CycleKind.ANNUAL),
)


@dataclass(frozen=True)
class ExitWindow:
    """
    Exit records selected for one forecast and the span they cover

    `movement_count` counts every movement (entries too) inside the same
    span; it measures how much history backs the forecast.
    """
    records: Tuple[MovementRecord, ...]
    window_days: int
    widened: bool = False
    movement_count: int = 0

    @property
    def total_quantity(self) -> int:
        return sum(r.quantity for r in self.records)

    @property
    def sample_count(self) -> int:
        return len(self.records)


def autocorrelation(values: Sequence[float], lag: int) -> float:
    """
    Autocorrelation coefficient of a series at a given lag

    Σ(xᵢ−μ)(xᵢ₊lag−μ) / Σ(xᵢ−μ)², 0 for constant series or lag ≥ length.
    """
    series = np.asarray(values, dtype=float)
    if lag <= 0 or len(series) <= lag:
        return 0.0

    deviations = series - series.mean()
    denominator = float(np.sum(deviations ** 2))
    if denominator == 0:
        return 0.0

    numerator = float(np.sum(deviations[:-lag] * deviations[lag:]))
    return numerator / denominator


class TemporalAnalysisService:
    """Builds a TemporalProfile from movement history"""

    def __init__(self, config: Optional[ForecastConfig] = None):
        self.config = config or ForecastConfig()

    # =========================================================================
    # Window selection
    # =========================================================================

    def select_window(self, movements: Iterable[MovementRecord], now: datetime) -> ExitWindow:
        """
        Select exit records inside the lookback window

        Uses the default lookback; if it holds fewer than
        `min_window_records` exits, widens to the extended lookback.
        """
        movements = list(movements)
        exits = [m for m in movements if m.is_exit]

        cutoff = now - timedelta(days=self.config.lookback_days)
        selected = [m for m in exits if m.timestamp > cutoff]
        window_days = self.config.lookback_days

        if len(selected) < self.config.min_window_records:
            cutoff = now - timedelta(days=self.config.extended_lookback_days)
            selected = [m for m in exits if m.timestamp > cutoff]
            window_days = self.config.extended_lookback_days
            logger.debug(
                f"Widened lookback to {window_days} days ({len(selected)} exit records)"
            )

        return ExitWindow(
            records=tuple(selected),
            window_days=window_days,
            widened=window_days != self.config.lookback_days,
            movement_count=sum(1 for m in movements if m.timestamp > cutoff)
        )

    # =========================================================================
    # Aggregation
    # =========================================================================

    @staticmethod
    def aggregate_monthly(records: Iterable[MovementRecord]) -> pd.Series:
        """Sum exit quantities per calendar month (PeriodIndex, ascending)"""
        records = list(records)
        if not records:
            return pd.Series(dtype=float)

        frame = pd.DataFrame({
            'timestamp': pd.to_datetime([r.timestamp for r in records]),
            'quantity': [r.quantity for r in records]
        })
        monthly = (
            frame
            .groupby(frame['timestamp'].dt.to_period('M'))['quantity']
            .sum()
            .sort_index()
        )
        return monthly.astype(float)

    # =========================================================================
    # Analysis
    # =========================================================================

    def analyze(self, window: ExitWindow) -> TemporalProfile:
        """Temporal profile of an exit window (neutral if history is too short)"""
        if window.sample_count < self.config.min_analysis_records:
            logger.debug(f"Insufficient exit history ({window.sample_count} records), neutral profile")
            return TemporalProfile.insufficient_data()

        return self.analyze_series(self.aggregate_monthly(window.records))

    def analyze_series(self, monthly: pd.Series) -> TemporalProfile:
        """
        Temporal profile of a monthly exit series

        Args:
            monthly: Exit totals indexed by monthly Period, ascending

        Returns:
            TemporalProfile (neutral when fewer than `min_analysis_records`
            months or no consumption at all)
        """
        if len(monthly) < self.config.min_analysis_records:
            return TemporalProfile.insufficient_data()

        values = monthly.to_numpy(dtype=float)
        overall_avg = float(values.mean())
        if overall_avg <= 0:
            return TemporalProfile.insufficient_data()

        # Average per calendar month, relative to the overall average
        month_avgs = monthly.groupby(monthly.index.month).mean()
        seasonal_factors = {
            int(month): float(avg) / overall_avg
            for month, avg in month_avgs.items()
        }
        max_variation = max(abs(f - 1) for f in seasonal_factors.values())
        seasonal = (
            max_variation > self.config.seasonality_threshold
            and len(seasonal_factors) >= self.config.min_seasonal_months
        )

        cycle = self._detect_cycle(values, seasonal)
        trend, trend_rate = self._detect_trend(values)

        return TemporalProfile(
            seasonal=seasonal,
            seasonal_factors=seasonal_factors,
            cycle=cycle,
            trend=trend,
            trend_rate=trend_rate
        )

    def _detect_cycle(self, values: np.ndarray, seasonal: bool) -> CycleKind:
        if len(values) < self.config.min_cycle_samples:
            # Seasonal but too short to measure: assume a yearly cycle
            return CycleKind.ANNUAL if seasonal else CycleKind.IRREGULAR

        coefficients = [
            (kind, autocorrelation(values, lag) if len(values) > lag else 0.0)
            for lag, kind in CYCLE_LAGS
        ]
        best_kind, best_corr = max(coefficients, key=lambda c: c[1])

        if best_corr > self.config.autocorrelation_threshold:
            return best_kind
        return CycleKind.IRREGULAR

    def _detect_trend(self, values: np.ndarray) -> Tuple[TrendDirection, float]:
        middle = len(values) // 2
        first_avg = float(values[:middle].mean())
        second_avg = float(values[middle:].mean())

        rate = 0.0
        if first_avg > 0:
            rate = (second_avg - first_avg) / first_avg * 100

        threshold = self.config.trend_threshold_pct
        if rate > threshold:
            return TrendDirection.GROWING, rate
        if rate < -threshold:
            return TrendDirection.DECLINING, rate
        return TrendDirection.STABLE, rate
