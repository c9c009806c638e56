"""Approval workflow models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from app.models.base import new_id, today, utcnow
from app.domain.approvals.enums import (
    ActionType,
    ConditionOperator,
    Priority,
    StepStatus,
    WorkflowStatus,
    WorkflowType,
)


@dataclass(frozen=True)
class ApprovalAction:
    """Audit log entry. Never mutated once appended to a step."""
    approver_id: str
    approver_name: str
    action: ActionType
    comments: Optional[str] = None
    timestamp: datetime = field(default_factory=utcnow)
    id: str = field(default_factory=new_id)


@dataclass
class ApprovalStep:
    step_number: int
    name: str = ""
    description: str = ""
    approver_role: str = ""
    approver_ids: List[str] = field(default_factory=list)
    required_approvals: int = 1
    status: StepStatus = StepStatus.PENDING
    approvals: List[ApprovalAction] = field(default_factory=list)
    is_parallel: bool = False
    due_date: Optional[date] = None
    id: str = field(default_factory=new_id)

    @property
    def approve_count(self) -> int:
        return sum(1 for a in self.approvals if a.action == ActionType.APPROVE)


@dataclass
class ApprovalWorkflow:
    type: WorkflowType
    title: str
    amount: Decimal
    requested_by: str
    steps: List[ApprovalStep] = field(default_factory=list)
    description: str = ""
    entity_id: Optional[str] = None
    entity_type: Optional[str] = None
    company_id: Optional[str] = None
    requested_at: date = field(default_factory=today)
    status: WorkflowStatus = WorkflowStatus.PENDING
    current_step: int = 1
    total_steps: int = 0
    priority: Priority = Priority.MEDIUM
    due_date: Optional[date] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    last_updated: datetime = field(default_factory=utcnow)
    id: str = field(default_factory=new_id)

    def step_by_number(self, step_number: int) -> Optional[ApprovalStep]:
        return next((s for s in self.steps if s.step_number == step_number), None)

    def step_by_id(self, step_id: str) -> Optional[ApprovalStep]:
        return next((s for s in self.steps if s.id == step_id), None)

    @property
    def active_step(self) -> Optional[ApprovalStep]:
        return self.step_by_number(self.current_step)


@dataclass(frozen=True)
class ApprovalCondition:
    field: str
    operator: ConditionOperator
    value: Any


@dataclass
class StepDefinition:
    """Step blueprint held by a template."""
    step_number: int
    name: str = ""
    description: str = ""
    approver_role: str = ""
    approver_ids: List[str] = field(default_factory=list)
    required_approvals: int = 1
    is_parallel: bool = False
    due_date: Optional[date] = None


@dataclass
class ApprovalTemplate:
    name: str
    type: WorkflowType
    steps: List[StepDefinition] = field(default_factory=list)
    conditions: List[ApprovalCondition] = field(default_factory=list)
    description: str = ""
    is_active: bool = True
    created_by: str = ""
    created_at: datetime = field(default_factory=utcnow)
    id: str = field(default_factory=new_id)
