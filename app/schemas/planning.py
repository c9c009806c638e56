"""Planning schemas: budget plans, forecasts, KPIs and variance."""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

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
    VarianceStatus,
)


class CategorySchema(BaseModel):
    name: str
    planned_amount: Decimal
    growth_rate: Decimal = Decimal("0")
    seasonality: List[float] = Field(default_factory=lambda: [1.0] * 12)
    priority: Priority = Priority.MEDIUM
    justification: str = ""

    class Config:
        from_attributes = True


class ScenarioSchema(BaseModel):
    name: str
    description: str = ""
    type: ScenarioType
    adjustment_factor: Decimal
    assumptions: List[str] = []
    is_default: bool = False

    class Config:
        from_attributes = True


class AssumptionSchema(BaseModel):
    category: str
    description: str
    value: Decimal
    unit: str = "%"
    impact: Priority = Priority.MEDIUM
    confidence: int = Field(default=50, ge=0, le=100)
    source: str = ""

    class Config:
        from_attributes = True


class BudgetPlanCreate(BaseModel):
    """Schema for creating a budget plan."""
    name: str
    description: str
    fiscal_year_id: str
    cost_center_id: str
    plan_type: PlanType = PlanType.ANNUAL
    status: PlanStatus = PlanStatus.DRAFT
    categories: List[CategorySchema]
    scenarios: List[ScenarioSchema]
    assumptions: List[AssumptionSchema] = []


class BudgetPlanUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    fiscal_year_id: Optional[str] = None
    cost_center_id: Optional[str] = None
    plan_type: Optional[PlanType] = None
    status: Optional[PlanStatus] = None
    categories: Optional[List[CategorySchema]] = None
    scenarios: Optional[List[ScenarioSchema]] = None
    assumptions: Optional[List[AssumptionSchema]] = None


class ScenarioResponse(ScenarioSchema):
    id: str
    projected_total: Decimal


class CategoryResponse(CategorySchema):
    id: str


class AssumptionResponse(AssumptionSchema):
    id: str


class BudgetPlanResponse(BaseModel):
    """Schema for budget plan response."""
    id: str
    name: str
    description: str
    fiscal_year_id: str
    cost_center_id: str
    plan_type: PlanType
    status: PlanStatus
    total_planned: Decimal
    categories: List[CategoryResponse]
    assumptions: List[AssumptionResponse]
    scenarios: List[ScenarioResponse]
    created_by: str
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    created_at: datetime
    last_updated: datetime

    class Config:
        from_attributes = True


class BaseDataRow(BaseModel):
    period: str
    actual: float


class ForecastCreate(BaseModel):
    """Schema for creating a forecast."""
    name: str
    description: str
    method: ForecastMethod
    horizon: int
    base_data: List[BaseDataRow]
    type: ForecastType = ForecastType.EXPENSE
    period: Optional[PeriodUnit] = None


class ForecastUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    method: Optional[ForecastMethod] = None
    horizon: Optional[int] = None
    base_data: Optional[List[BaseDataRow]] = None
    type: Optional[ForecastType] = None
    period: Optional[PeriodUnit] = None


class DataPointResponse(BaseModel):
    period: str
    actual: Optional[float] = None
    projected: float
    lower_bound: float
    upper_bound: float
    confidence: float

    class Config:
        from_attributes = True


class ForecastResponse(BaseModel):
    """Schema for forecast response."""
    id: str
    name: str
    description: str
    type: ForecastType
    method: ForecastMethod
    period: PeriodUnit
    horizon: int
    base_data: List[DataPointResponse]
    projections: List[DataPointResponse]
    accuracy: float
    confidence: float
    created_by: str
    created_at: datetime
    last_updated: datetime

    class Config:
        from_attributes = True


class KPICreate(BaseModel):
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


class KPIUpdate(BaseModel):
    name: Optional[str] = None
    target: Optional[float] = None
    current: Optional[float] = None
    description: Optional[str] = None
    category: Optional[str] = None
    formula: Optional[str] = None
    trend: Optional[KPITrend] = None
    status: Optional[KPIStatus] = None
    unit: Optional[str] = None
    frequency: Optional[str] = None
    owner: Optional[str] = None


class KPIResponse(KPICreate):
    id: str
    last_updated: datetime

    class Config:
        from_attributes = True


class VarianceRequest(BaseModel):
    planned: Decimal
    actual: Decimal


class VarianceResponse(BaseModel):
    planned: Decimal
    actual: Decimal
    variance: Decimal
    variance_percentage: float
    status: VarianceStatus

    class Config:
        from_attributes = True


class CategoryVarianceRequest(BaseModel):
    actuals: Dict[str, Decimal]
