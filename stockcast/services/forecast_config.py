"""
Forecasting engine configuration

Heuristic thresholds of the engine. The scenario probabilities and the
seasonality/trend cut-offs are business heuristics, not calibrated
statistics; they are kept stable so results stay comparable over time.
"""
from dataclasses import dataclass
from typing import Optional

from stockcast.core.config import Settings, settings as default_settings


@dataclass(frozen=True)
class ForecastConfig:
    """Configuration for the forecasting engine"""
    # History windows
    lookback_days: int = 90
    extended_lookback_days: int = 180
    min_window_records: int = 5       # below this, widen to the extended window
    min_analysis_records: int = 3     # below this, neutral temporal profile

    # Temporal analysis
    seasonality_threshold: float = 0.2
    min_seasonal_months: int = 3
    min_cycle_samples: int = 12
    autocorrelation_threshold: float = 0.3
    trend_threshold_pct: float = 10.0

    # Scenarios
    optimistic_rate_factor: float = 0.8
    pessimistic_rate_factor: float = 1.3

    # Replenishment
    lead_time_days: int = 14
    safety_factor: float = 1.2
    purchase_margin_days: int = 7
    default_min_quantity: int = 5
    projection_months: int = 6
    projection_horizon_days: int = 60

    # Placeholder costs
    unit_price: float = 30.0
    order_cost: float = 100.0
    holding_cost_rate: float = 0.2

    # Ranking
    purchase_group_min_products: int = 3
    default_supplier_lead_time_days: int = 10

    # Snapshot fan-out
    max_workers: int = 4

    @property
    def holding_cost(self) -> float:
        """Annual holding cost per unit"""
        return self.unit_price * self.holding_cost_rate

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ForecastConfig":
        """Build a config from environment settings"""
        s = settings or default_settings
        return cls(
            lookback_days=s.LOOKBACK_DAYS,
            extended_lookback_days=s.EXTENDED_LOOKBACK_DAYS,
            lead_time_days=s.DEFAULT_LEAD_TIME_DAYS,
            default_min_quantity=s.DEFAULT_MIN_QUANTITY,
            unit_price=s.UNIT_PRICE,
            order_cost=s.ORDER_COST,
            holding_cost_rate=s.HOLDING_COST_RATE,
            max_workers=s.MAX_WORKERS
        )
