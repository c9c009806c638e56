"""Budget planning and forecasting domain module."""

from .enums import (
    ForecastMethod,
    PeriodUnit,
    PlanStatus,
    ScenarioType,
    VarianceStatus,
)

__all__ = [
    "ForecastMethod",
    "PeriodUnit",
    "PlanStatus",
    "ScenarioType",
    "VarianceStatus",
]
