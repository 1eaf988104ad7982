"""
Forecast result types

Derived per invocation from a snapshot, never persisted.

Author: TM3
Date: 2026-02-10
"""
from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional


class CycleKind(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMIANNUAL = "semiannual"
    ANNUAL = "annual"
    IRREGULAR = "irregular"


class TrendDirection(str, Enum):
    GROWING = "growing"
    DECLINING = "declining"
    STABLE = "stable"


class ScenarioKind(str, Enum):
    OPTIMISTIC = "optimistic"
    REALISTIC = "realistic"
    PESSIMISTIC = "pessimistic"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class TemporalProfile:
    """Seasonality, cycle and trend of a product's monthly exits"""
    seasonal: bool
    seasonal_factors: Dict[int, float]
    cycle: CycleKind
    trend: TrendDirection
    trend_rate: float  # percent

    @classmethod
    def insufficient_data(cls) -> "TemporalProfile":
        """Neutral profile used when history is too short to analyze"""
        return cls(
            seasonal=False,
            seasonal_factors={},
            cycle=CycleKind.IRREGULAR,
            trend=TrendDirection.STABLE,
            trend_rate=0.0
        )

    def factor_for(self, month: int) -> float:
        """Seasonal factor for a calendar month (1.0 when not seasonal or unseen)"""
        if not self.seasonal:
            return 1.0
        return self.seasonal_factors.get(month, 1.0)

    @property
    def is_trending(self) -> bool:
        return self.trend != TrendDirection.STABLE


@dataclass(frozen=True)
class ForecastScenario:
    """One consumption scenario and when it depletes the stock"""
    kind: ScenarioKind
    days_remaining: Optional[int]
    depletion_date: Optional[date]
    probability: float
    expected_deviation: float


@dataclass(frozen=True)
class PredictionResult:
    """Stockout prediction and purchase recommendation for one product"""
    days_remaining: Optional[int]
    depletion_date: Optional[date]
    daily_consumption: float
    confidence: Confidence
    needs_purchase: bool
    recommended_qty: int
    monthly_projection: Dict[str, int] = field(default_factory=dict)
    estimated_cost: float = 0.0
    depletion_probability: float = 0.5
    priority_score: int = 1
    safety_stock: int = 0
    scenarios: List[ForecastScenario] = field(default_factory=list)

    @classmethod
    def unavailable(cls) -> "PredictionResult":
        """Neutral low-confidence result for missing or unusable data"""
        return cls(
            days_remaining=None,
            depletion_date=None,
            daily_consumption=0.0,
            confidence=Confidence.LOW,
            needs_purchase=False,
            recommended_qty=0,
            depletion_probability=0.5,
            priority_score=2
        )

    def scenario(self, kind: ScenarioKind) -> Optional[ForecastScenario]:
        for scenario in self.scenarios:
            if scenario.kind == kind:
                return scenario
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with enums as values and dates as ISO strings"""
        data = asdict(self)
        data['confidence'] = self.confidence.value
        data['depletion_date'] = self.depletion_date.isoformat() if self.depletion_date else None
        data['scenarios'] = [
            {
                **asdict(s),
                'kind': s.kind.value,
                'depletion_date': s.depletion_date.isoformat() if s.depletion_date else None
            }
            for s in self.scenarios
        ]
        return data
