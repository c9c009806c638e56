"""Pydantic schemas for API requests and responses."""

from .cost_centers import (
    CostCenterCreate,
    CostCenterUpdate,
    CostCenterResponse,
    CostCenterNodeResponse,
    BudgetRollupResponse,
)
from .approvals import (
    WorkflowCreate,
    WorkflowUpdate,
    WorkflowResponse,
    TemplateCreate,
    TemplateResponse,
)
from .planning import (
    BudgetPlanCreate,
    BudgetPlanUpdate,
    BudgetPlanResponse,
    ForecastCreate,
    ForecastResponse,
    KPICreate,
    KPIResponse,
)
from .balance_sheet import (
    BalanceSheetCreate,
    BalanceSheetResponse,
    ItemCreate,
    ItemResponse,
    SummaryResponse,
)

__all__ = [
    "CostCenterCreate",
    "CostCenterUpdate",
    "CostCenterResponse",
    "CostCenterNodeResponse",
    "BudgetRollupResponse",
    "WorkflowCreate",
    "WorkflowUpdate",
    "WorkflowResponse",
    "TemplateCreate",
    "TemplateResponse",
    "BudgetPlanCreate",
    "BudgetPlanUpdate",
    "BudgetPlanResponse",
    "ForecastCreate",
    "ForecastResponse",
    "KPICreate",
    "KPIResponse",
    "BalanceSheetCreate",
    "BalanceSheetResponse",
    "ItemCreate",
    "ItemResponse",
    "SummaryResponse",
]
