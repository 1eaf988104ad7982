"""
Consumption Forecaster

Turns an exit window and its temporal profile into a daily consumption
rate, then projects optimistic / realistic / pessimistic depletion
scenarios from the current stock.

Author: TM3
Date: 2026-02-12
"""
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Tuple

from stockcast.domain.forecast import CycleKind, ForecastScenario, ScenarioKind, TemporalProfile
from stockcast.services.forecast_config import ForecastConfig

# Scenario probabilities by horizon of the realistic scenario:
# (realistic, optimistic, pessimistic)
DEFAULT_PROBABILITIES = (0.6, 0.2, 0.2)
LONG_HORIZON_PROBABILITIES = (0.5, 0.25, 0.25)   # realistic > 90 days
SHORT_HORIZON_PROBABILITIES = (0.7, 0.15, 0.15)  # realistic < 30 days

# Expected deviation multiplier per scenario
DEVIATION_MULTIPLIERS = {
    ScenarioKind.REALISTIC: 1.0,
    ScenarioKind.OPTIMISTIC: 0.7,
    ScenarioKind.PESSIMISTIC: 1.5,
}


def round_half_up(value: float) -> int:
    """Nearest integer with halves rounded up (2.5 -> 3), unlike round()"""
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class ConsumptionRate:
    """Daily consumption before and after seasonal/trend adjustment"""
    baseline: float
    adjusted: float

    @property
    def depletes(self) -> bool:
        return self.adjusted > 0


class ConsumptionForecaster:
    """Computes consumption rates and depletion scenarios"""

    def __init__(self, config: Optional[ForecastConfig] = None):
        self.config = config or ForecastConfig()

    def compute_rate(
        self,
        total_exits: float,
        window_days: int,
        profile: TemporalProfile,
        current_month: int
    ) -> ConsumptionRate:
        """
        Baseline and adjusted daily consumption

        baseline = total_exits / window_days
        adjusted = baseline × seasonal factor of the current month (if
        seasonal) × (1 + trend_rate/100) (if trending)
        """
        if window_days <= 0 or total_exits <= 0:
            return ConsumptionRate(baseline=0.0, adjusted=0.0)

        baseline = total_exits / window_days
        adjusted = baseline

        if profile.seasonal:
            adjusted *= profile.factor_for(current_month)

        if profile.is_trending:
            adjusted *= 1 + profile.trend_rate / 100

        return ConsumptionRate(baseline=baseline, adjusted=max(adjusted, 0.0))

    @staticmethod
    def base_deviation(profile: TemporalProfile) -> float:
        """Relative deviation: 10%, 15% if seasonal, 20% if the cycle is irregular"""
        if profile.cycle == CycleKind.IRREGULAR:
            return 0.2
        if profile.seasonal:
            return 0.15
        return 0.1

    @staticmethod
    def probabilities_for(realistic_days: int) -> Tuple[float, float, float]:
        """Scenario weights; longer horizons spread weight to the extremes"""
        if realistic_days > 90:
            return LONG_HORIZON_PROBABILITIES
        if realistic_days < 30:
            return SHORT_HORIZON_PROBABILITIES
        return DEFAULT_PROBABILITIES

    def build_scenarios(
        self,
        quantity: int,
        rate: ConsumptionRate,
        profile: TemporalProfile,
        today: date
    ) -> List[ForecastScenario]:
        """
        Realistic, optimistic and pessimistic depletion scenarios

        Stock that never depletes (adjusted rate ≤ 0) yields a single
        realistic scenario with no depletion date.
        """
        if not rate.depletes:
            return [
                ForecastScenario(
                    kind=ScenarioKind.REALISTIC,
                    days_remaining=None,
                    depletion_date=None,
                    probability=1.0,
                    expected_deviation=0.0
                )
            ]

        stock = max(quantity, 0)
        scenario_rates = (
            (ScenarioKind.REALISTIC, rate.adjusted),
            (ScenarioKind.OPTIMISTIC, rate.adjusted * self.config.optimistic_rate_factor),
            (ScenarioKind.PESSIMISTIC, rate.adjusted * self.config.pessimistic_rate_factor),
        )
        days = {kind: math.floor(stock / daily) for kind, daily in scenario_rates}

        realistic_p, optimistic_p, pessimistic_p = self.probabilities_for(days[ScenarioKind.REALISTIC])
        probabilities = {
            ScenarioKind.REALISTIC: realistic_p,
            ScenarioKind.OPTIMISTIC: optimistic_p,
            ScenarioKind.PESSIMISTIC: pessimistic_p,
        }
        deviation = self.base_deviation(profile)

        return [
            ForecastScenario(
                kind=kind,
                days_remaining=days[kind],
                depletion_date=today + timedelta(days=days[kind]),
                probability=probabilities[kind],
                expected_deviation=deviation * DEVIATION_MULTIPLIERS[kind] * rate.adjusted
            )
            for kind, _ in scenario_rates
        ]
