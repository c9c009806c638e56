"""Cost center schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from app.domain.cost_centers.enums import CostCenterStatus, UtilizationLevel


class CostCenterCreate(BaseModel):
    """Schema for creating a cost center."""
    code: str = Field(..., max_length=50)
    name: str = Field(..., max_length=200)
    description: str = ""
    department: str
    manager: str
    budget: Decimal
    parent_id: Optional[str] = None
    status: CostCenterStatus = CostCenterStatus.ACTIVE


class CostCenterUpdate(BaseModel):
    """Partial update; only the fields sent are applied."""
    code: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    department: Optional[str] = None
    manager: Optional[str] = None
    budget: Optional[Decimal] = None
    spent: Optional[Decimal] = None
    parent_id: Optional[str] = None
    status: Optional[CostCenterStatus] = None


class SpendRequest(BaseModel):
    amount: Decimal


class CostCenterResponse(BaseModel):
    """Schema for cost center response."""
    id: str
    code: str
    name: str
    description: str
    department: str
    manager: str
    company_id: Optional[str] = None
    parent_id: Optional[str] = None
    level: int
    path: str
    budget: Decimal
    spent: Decimal
    allocated_budget: Decimal
    inherited_budget: Decimal
    status: CostCenterStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CostCenterNodeResponse(BaseModel):
    """A cost center with its derived subtree."""
    cost_center: CostCenterResponse
    utilization: Optional[float] = None
    utilization_level: Optional[UtilizationLevel] = None
    is_expanded: bool = False
    children: List["CostCenterNodeResponse"] = []


class BudgetRollupResponse(BaseModel):
    cost_center_id: str
    node_count: int
    total_budget: Decimal
    total_spent: Decimal
    utilization: Optional[float] = None
    level: Optional[UtilizationLevel] = None

    class Config:
        from_attributes = True


class DepartmentTotalsResponse(BaseModel):
    department: str
    total_budget: Decimal
    total_spent: Decimal


class ExpansionResponse(BaseModel):
    cost_center_id: str
    is_expanded: bool
