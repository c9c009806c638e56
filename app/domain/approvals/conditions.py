"""Template condition evaluation."""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Optional

from app.models.approval import ApprovalCondition, ApprovalTemplate
from app.domain.approvals.enums import ConditionOperator, WorkflowType


def _as_number(value: Any) -> Optional[Decimal]:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def evaluate_condition(condition: ApprovalCondition, context: Dict[str, Any]) -> bool:
    """True when ``context[condition.field]`` satisfies the condition.

    A missing field never matches.
    """
    if condition.field not in context:
        return False
    actual = context[condition.field]
    expected = condition.value

    if condition.operator == ConditionOperator.EQUALS:
        return actual == expected
    if condition.operator == ConditionOperator.CONTAINS:
        if actual is None:
            return False
        return str(expected).lower() in str(actual).lower()

    left, right = _as_number(actual), _as_number(expected)
    if left is None or right is None:
        return False
    if condition.operator == ConditionOperator.GREATER_THAN:
        return left > right
    if condition.operator == ConditionOperator.LESS_THAN:
        return left < right
    return False


def template_matches(template: ApprovalTemplate, workflow_type: WorkflowType, context: Dict[str, Any]) -> bool:
    if not template.is_active or template.type != workflow_type:
        return False
    return all(evaluate_condition(c, context) for c in template.conditions)


def find_matching_template(
    templates: Iterable[ApprovalTemplate],
    workflow_type: WorkflowType,
    context: Dict[str, Any],
) -> Optional[ApprovalTemplate]:
    """First active template of ``workflow_type`` whose conditions all hold."""
    return next(
        (t for t in templates if template_matches(t, workflow_type, context)),
        None,
    )
