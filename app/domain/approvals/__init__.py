"""Approval workflow domain module."""

from .enums import (
    WorkflowType,
    WorkflowStatus,
    StepStatus,
    ActionType,
    Priority,
    ConditionOperator,
)

__all__ = [
    "WorkflowType",
    "WorkflowStatus",
    "StepStatus",
    "ActionType",
    "Priority",
    "ConditionOperator",
]
