"""Budget planning and forecasting models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from app.models.base import new_id, utcnow
from app.domain.planning.enums import (
    ForecastMethod,
    ForecastType,
    KPIStatus,
    KPITrend,
    PeriodUnit,
    PlanStatus,
    PlanType,
    Priority,
    ScenarioType,
)


@dataclass
class ForecastDataPoint:
    period: str
    projected: float
    lower_bound: float
    upper_bound: float
    confidence: float
    actual: Optional[float] = None


@dataclass
class Forecast:
    name: str
    method: ForecastMethod
    horizon: int
    base_data: List[ForecastDataPoint] = field(default_factory=list)
    projections: List[ForecastDataPoint] = field(default_factory=list)
    description: str = ""
    type: ForecastType = ForecastType.EXPENSE
    period: PeriodUnit = PeriodUnit.MONTHLY
    accuracy: float = 0.0
    confidence: float = 0.0
    created_by: str = ""
    created_at: datetime = field(default_factory=utcnow)
    last_updated: datetime = field(default_factory=utcnow)
    id: str = field(default_factory=new_id)


@dataclass
class BudgetPlanCategory:
    name: str
    planned_amount: Decimal
    growth_rate: Decimal = Decimal("0")
    # Twelve monthly multipliers, January first
    seasonality: List[float] = field(default_factory=lambda: [1.0] * 12)
    priority: Priority = Priority.MEDIUM
    justification: str = ""
    id: str = field(default_factory=new_id)


@dataclass
class BudgetScenario:
    name: str
    type: ScenarioType
    adjustment_factor: Decimal
    description: str = ""
    assumptions: List[str] = field(default_factory=list)
    projected_total: Decimal = Decimal("0")
    is_default: bool = False
    id: str = field(default_factory=new_id)


@dataclass
class PlanningAssumption:
    category: str
    description: str
    value: Decimal
    unit: str = "%"
    impact: Priority = Priority.MEDIUM
    confidence: int = 50
    source: str = ""
    id: str = field(default_factory=new_id)


@dataclass
class BudgetPlan:
    name: str
    description: str
    fiscal_year_id: str
    cost_center_id: str
    plan_type: PlanType = PlanType.ANNUAL
    status: PlanStatus = PlanStatus.DRAFT
    total_planned: Decimal = Decimal("0")
    categories: List[BudgetPlanCategory] = field(default_factory=list)
    assumptions: List[PlanningAssumption] = field(default_factory=list)
    scenarios: List[BudgetScenario] = field(default_factory=list)
    created_by: str = ""
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)
    last_updated: datetime = field(default_factory=utcnow)
    id: str = field(default_factory=new_id)

    @property
    def default_scenario(self) -> Optional[BudgetScenario]:
        return next((s for s in self.scenarios if s.is_default), None)


@dataclass
class KPI:
    name: str
    target: float
    current: float
    description: str = ""
    category: str = ""
    formula: str = ""
    trend: KPITrend = KPITrend.STABLE
    status: KPIStatus = KPIStatus.GOOD
    unit: str = "%"
    frequency: str = "monthly"
    owner: str = ""
    last_updated: datetime = field(default_factory=utcnow)
    id: str = field(default_factory=new_id)
