"""Approval domain enums."""

from enum import Enum as PyEnum


class WorkflowType(str, PyEnum):
    """Kind of request being approved."""
    EXPENSE = "expense"
    REVENUE = "revenue"
    BUDGET = "budget"


class WorkflowStatus(str, PyEnum):
    """Approval workflow status."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class StepStatus(str, PyEnum):
    """Approval step status."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SKIPPED = "skipped"


class ActionType(str, PyEnum):
    """Approver action recorded in a step's audit log."""
    APPROVE = "approve"
    REJECT = "reject"
    REQUEST_CHANGES = "request_changes"


class Priority(str, PyEnum):
    """Workflow priority."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ConditionOperator(str, PyEnum):
    """Operators usable in template conditions."""
    EQUALS = "equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    CONTAINS = "contains"

