"""In-memory record models."""

from .base import TimestampMixin, new_id, today
from .cost_center import CostCenter
from .approval import (
    ApprovalAction,
    ApprovalCondition,
    ApprovalStep,
    ApprovalTemplate,
    ApprovalWorkflow,
    StepDefinition,
)
from .planning import (
    BudgetPlan,
    BudgetPlanCategory,
    BudgetScenario,
    Forecast,
    ForecastDataPoint,
    KPI,
    PlanningAssumption,
)
from .balance_sheet import AccountingAccount, BalanceSheet, BalanceSheetItem

__all__ = [
    "TimestampMixin",
    "new_id",
    "today",
    "CostCenter",
    "ApprovalAction",
    "ApprovalCondition",
    "ApprovalStep",
    "ApprovalTemplate",
    "ApprovalWorkflow",
    "StepDefinition",
    "BudgetPlan",
    "BudgetPlanCategory",
    "BudgetScenario",
    "Forecast",
    "ForecastDataPoint",
    "KPI",
    "PlanningAssumption",
    "AccountingAccount",
    "BalanceSheet",
    "BalanceSheetItem",
]
