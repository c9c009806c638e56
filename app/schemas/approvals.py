"""Approval workflow schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.domain.approvals.enums import (
    ActionType,
    ConditionOperator,
    Priority,
    StepStatus,
    WorkflowStatus,
    WorkflowType,
)


class StepCreate(BaseModel):
    step_number: int
    name: str = ""
    description: str = ""
    approver_role: str = ""
    approver_ids: List[str] = []
    required_approvals: int = 1
    is_parallel: bool = False
    due_date: Optional[date] = None

    class Config:
        from_attributes = True


class WorkflowCreate(BaseModel):
    """Schema for creating a workflow.

    Either ``steps`` or a template (explicit ``template_id`` or matched by
    type and amount) must supply the steps.
    """
    type: WorkflowType
    title: str = Field(..., max_length=200)
    description: str = ""
    amount: Decimal
    priority: Priority = Priority.MEDIUM
    due_date: Optional[date] = None
    entity_id: Optional[str] = None
    entity_type: Optional[str] = None
    steps: List[StepCreate] = []
    template_id: Optional[str] = None
    context: Dict[str, Any] = {}
    metadata: Dict[str, Any] = {}


class WorkflowUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[Priority] = None
    due_date: Optional[date] = None
    metadata: Optional[Dict[str, Any]] = None


class StepActionRequest(BaseModel):
    comments: Optional[str] = None


class ChangeRequest(BaseModel):
    comments: str = Field(..., min_length=1)


class ApprovalActionResponse(BaseModel):
    id: str
    approver_id: str
    approver_name: str
    action: ActionType
    comments: Optional[str] = None
    timestamp: datetime

    class Config:
        from_attributes = True


class StepResponse(BaseModel):
    id: str
    step_number: int
    name: str
    description: str
    approver_role: str
    approver_ids: List[str]
    required_approvals: int
    status: StepStatus
    approvals: List[ApprovalActionResponse]
    is_parallel: bool
    due_date: Optional[date] = None

    class Config:
        from_attributes = True


class WorkflowResponse(BaseModel):
    """Schema for workflow response."""
    id: str
    type: WorkflowType
    title: str
    description: str
    amount: Decimal
    requested_by: str
    requested_at: date
    status: WorkflowStatus
    current_step: int
    total_steps: int
    priority: Priority
    due_date: Optional[date] = None
    entity_id: Optional[str] = None
    entity_type: Optional[str] = None
    company_id: Optional[str] = None
    metadata: Dict[str, Any]
    steps: List[StepResponse]
    last_updated: datetime

    class Config:
        from_attributes = True


class ConditionSchema(BaseModel):
    field: str
    operator: ConditionOperator
    value: Any

    class Config:
        from_attributes = True


class TemplateCreate(BaseModel):
    name: str
    type: WorkflowType
    description: str = ""
    steps: List[StepCreate]
    conditions: List[ConditionSchema] = []
    is_active: bool = True


class TemplateResponse(BaseModel):
    id: str
    name: str
    type: WorkflowType
    description: str
    steps: List[StepCreate]
    conditions: List[ConditionSchema]
    is_active: bool
    created_by: str
    created_at: datetime

    class Config:
        from_attributes = True
