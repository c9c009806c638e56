"""Planning domain enums."""

from enum import Enum as PyEnum


class ForecastMethod(str, PyEnum):
    """Projection method."""
    LINEAR = "linear"
    EXPONENTIAL = "exponential"
    SEASONAL = "seasonal"
    REGRESSION = "regression"


class PeriodUnit(str, PyEnum):
    """Calendar step between projected periods."""
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class ForecastType(str, PyEnum):
    REVENUE = "revenue"
    EXPENSE = "expense"
    BUDGET = "budget"


class PlanType(str, PyEnum):
    ANNUAL = "annual"
    QUARTERLY = "quarterly"
    MONTHLY = "monthly"


class PlanStatus(str, PyEnum):
    """Budget plan status."""
    DRAFT = "draft"
    REVIEW = "review"
    APPROVED = "approved"
    ACTIVE = "active"


class ScenarioType(str, PyEnum):
    OPTIMISTIC = "optimistic"
    REALISTIC = "realistic"
    PESSIMISTIC = "pessimistic"


class Priority(str, PyEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class VarianceStatus(str, PyEnum):
    """Outcome of a planned-vs-actual comparison."""
    FAVORABLE = "favorable"
    UNFAVORABLE = "unfavorable"
    NEUTRAL = "neutral"


class KPITrend(str, PyEnum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class KPIStatus(str, PyEnum):
    EXCELLENT = "excellent"
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"
