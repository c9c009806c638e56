"""
Multi-step approval workflow service.

State machine:
- A workflow starts ``pending`` at step 1 and walks its steps in order.
- A step is ``approved`` once its approve count reaches
  ``required_approvals``; only the completion of the *current* step moves
  the workflow forward (or finishes it on the last step).
- Any reject closes the step and the workflow as ``rejected`` at once.
- ``request_changes`` only appends to the audit log.
- Cancel is unconditional.

``is_parallel`` is carried on steps as metadata; quorum counting is the
same for parallel and sequential steps.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Sequence

import structlog

from app.core.errors import BusinessRuleError, NotFoundError, PayloadValidationError
from app.db.store import InMemoryStore
from app.models.base import utcnow
from app.models.approval import (
    ApprovalAction,
    ApprovalStep,
    ApprovalTemplate,
    ApprovalWorkflow,
    StepDefinition,
)
from app.domain.approvals.conditions import find_matching_template
from app.domain.approvals.enums import (
    ActionType,
    Priority,
    StepStatus,
    WorkflowStatus,
    WorkflowType,
)

logger = structlog.get_logger()

WORKFLOW_CLOSED_MESSAGE = "Este fluxo de aprovação já foi finalizado"


def validate_workflow(
    title: str,
    amount: Any,
    steps: Sequence[StepDefinition],
    requested_at: Optional[date] = None,
    due_date: Optional[date] = None,
) -> Dict[str, str]:
    """Cross-field checks for a new workflow. Never raises."""
    errors: Dict[str, str] = {}
    if not (title or "").strip():
        errors["title"] = "Título é obrigatório"
    if amount is None or Decimal(str(amount)) < 0:
        errors["amount"] = "Valor deve ser maior ou igual a zero"
    if not steps:
        errors["steps"] = "Pelo menos uma etapa é obrigatória"
    else:
        numbers = [s.step_number for s in steps]
        if numbers != list(range(1, len(steps) + 1)):
            errors["steps"] = "As etapas devem ser numeradas sequencialmente a partir de 1"
        for step in steps:
            if step.required_approvals < 1:
                errors["steps"] = f"Etapa {step.step_number}: pelo menos uma aprovação é necessária"
                break
            if step.approver_ids and step.required_approvals > len(set(step.approver_ids)):
                errors["steps"] = (
                    f"Etapa {step.step_number}: aprovações necessárias excedem o número de aprovadores"
                )
                break
    if due_date and requested_at and due_date < requested_at:
        errors["due_date"] = "Data limite deve ser posterior à data da solicitação"
    return errors


def can_act(user_id: str, role: Optional[str], step: ApprovalStep) -> bool:
    """Whether a user may act on ``step``.

    Listed approver ids take precedence; a step without ids is open to
    anyone holding ``approver_role``.
    """
    if step.approver_ids:
        return user_id in step.approver_ids
    return bool(role) and role == step.approver_role


class ApprovalService:
    """Drives approval workflows through their steps."""

    def __init__(
        self,
        store: InMemoryStore,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.workflows = store.workflows
        self.templates = store.templates
        self.clock = clock

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_workflow(
        self,
        type: WorkflowType,
        title: str,
        amount: Any,
        requested_by: str,
        steps: Sequence[StepDefinition],
        description: str = "",
        priority: Priority = Priority.MEDIUM,
        due_date: Optional[date] = None,
        requested_at: Optional[date] = None,
        entity_id: Optional[str] = None,
        entity_type: Optional[str] = None,
        company_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ApprovalWorkflow:
        requested_at = requested_at or self.clock().date()
        errors = validate_workflow(title, amount, steps, requested_at, due_date)
        if errors:
            logger.warning("Workflow rejected", errors=errors)
            raise PayloadValidationError(errors)

        workflow = ApprovalWorkflow(
            type=WorkflowType(type),
            title=title.strip(),
            description=description,
            amount=Decimal(str(amount)),
            requested_by=requested_by,
            requested_at=requested_at,
            steps=[self._instantiate_step(s) for s in steps],
            status=WorkflowStatus.PENDING,
            current_step=1,
            total_steps=len(steps),
            priority=Priority(priority),
            due_date=due_date,
            entity_id=entity_id,
            entity_type=entity_type,
            company_id=company_id,
            metadata=dict(metadata or {}),
            last_updated=self.clock(),
        )
        self.workflows.add(workflow)
        logger.info(
            "Workflow created",
            workflow_id=workflow.id,
            type=workflow.type.value,
            total_steps=workflow.total_steps,
        )
        return workflow

    def add_template(self, template: ApprovalTemplate) -> ApprovalTemplate:
        errors = validate_workflow(template.name, 0, template.steps)
        errors.pop("amount", None)
        if "title" in errors:
            errors["name"] = errors.pop("title")
        if errors:
            raise PayloadValidationError(errors)
        self.templates.add(template)
        logger.info("Approval template added", template_id=template.id, name=template.name)
        return template

    def find_template(self, type: WorkflowType, context: Dict[str, Any]) -> Optional[ApprovalTemplate]:
        return find_matching_template(self.templates.list(), WorkflowType(type), context)

    def create_workflow_from_template(
        self,
        type: WorkflowType,
        title: str,
        amount: Any,
        requested_by: str,
        template_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> ApprovalWorkflow:
        """
        Create a workflow whose steps are copied from a template.

        Without ``template_id`` the first matching active template is used;
        ``amount`` is always part of the matching context.
        """
        if template_id:
            template = self.templates.get(template_id)
            if template is None:
                raise NotFoundError("Modelo de aprovação não encontrado")
        else:
            match_context = {"amount": amount, **(context or {})}
            template = self.find_template(type, match_context)
            if template is None:
                logger.warning("No approval template matched", type=str(type), amount=str(amount))
                raise BusinessRuleError("Nenhum modelo de aprovação aplicável encontrado")

        return self.create_workflow(
            type=type,
            title=title,
            amount=amount,
            requested_by=requested_by,
            steps=template.steps,
            **kwargs,
        )

    def update_workflow(self, workflow_id: str, **updates: Any) -> ApprovalWorkflow:
        workflow = self._require(workflow_id)
        # due_date is the only field a null clears
        updates = {
            k: v for k, v in updates.items()
            if v is not None or k == "due_date"
        }
        for key in ("title", "description", "due_date", "metadata"):
            if key in updates:
                setattr(workflow, key, updates[key])
        if "priority" in updates:
            workflow.priority = Priority(updates["priority"])
        workflow.last_updated = self.clock()
        logger.info("Workflow updated", workflow_id=workflow_id, fields=sorted(updates))
        return workflow

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def approve_step(
        self,
        workflow_id: str,
        step_id: str,
        approver_id: str,
        approver_name: str,
        comments: Optional[str] = None,
    ) -> ApprovalWorkflow:
        workflow, step = self._open_step(workflow_id, step_id)
        self._append(step, approver_id, approver_name, ActionType.APPROVE, comments)

        if step.approve_count >= step.required_approvals:
            step.status = StepStatus.APPROVED
        else:
            step.status = StepStatus.PENDING

        if step.step_number == workflow.current_step and step.status == StepStatus.APPROVED:
            if workflow.current_step >= workflow.total_steps:
                workflow.status = WorkflowStatus.APPROVED
                logger.info("Workflow approved", workflow_id=workflow.id)
            else:
                workflow.current_step += 1
                logger.info(
                    "Workflow advanced",
                    workflow_id=workflow.id,
                    current_step=workflow.current_step,
                )
        workflow.last_updated = self.clock()
        logger.info(
            "Step approval recorded",
            workflow_id=workflow.id,
            step_id=step.id,
            approver_id=approver_id,
            approvals=step.approve_count,
            required=step.required_approvals,
        )
        return workflow

    def reject_step(
        self,
        workflow_id: str,
        step_id: str,
        approver_id: str,
        approver_name: str,
        comments: Optional[str] = None,
    ) -> ApprovalWorkflow:
        workflow, step = self._open_step(workflow_id, step_id)
        self._append(step, approver_id, approver_name, ActionType.REJECT, comments)
        step.status = StepStatus.REJECTED
        workflow.status = WorkflowStatus.REJECTED
        workflow.last_updated = self.clock()
        logger.info(
            "Workflow rejected",
            workflow_id=workflow.id,
            step_id=step.id,
            approver_id=approver_id,
        )
        return workflow

    def request_changes(
        self,
        workflow_id: str,
        step_id: str,
        approver_id: str,
        approver_name: str,
        comments: str,
    ) -> ApprovalWorkflow:
        workflow, step = self._open_step(workflow_id, step_id)
        self._append(step, approver_id, approver_name, ActionType.REQUEST_CHANGES, comments)
        workflow.last_updated = self.clock()
        logger.info(
            "Changes requested",
            workflow_id=workflow.id,
            step_id=step.id,
            approver_id=approver_id,
        )
        return workflow

    def cancel_workflow(self, workflow_id: str) -> ApprovalWorkflow:
        workflow = self._require(workflow_id)
        previous = workflow.status
        workflow.status = WorkflowStatus.CANCELLED
        workflow.last_updated = self.clock()
        logger.info("Workflow cancelled", workflow_id=workflow_id, previous_status=previous.value)
        return workflow

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_workflow(self, workflow_id: str) -> Optional[ApprovalWorkflow]:
        return self.workflows.get(workflow_id)

    def list_workflows(self, company_id: Optional[str] = None) -> List[ApprovalWorkflow]:
        return self.workflows.list(
            lambda w: company_id is None or w.company_id == company_id
        )

    def get_workflows_by_status(self, status: WorkflowStatus) -> List[ApprovalWorkflow]:
        return self.workflows.list(lambda w: w.status == WorkflowStatus(status))

    def get_workflows_by_type(self, type: WorkflowType) -> List[ApprovalWorkflow]:
        return self.workflows.list(lambda w: w.type == WorkflowType(type))

    def get_pending_approvals_for_user(
        self, user_id: str, company_id: Optional[str] = None
    ) -> List[ApprovalWorkflow]:
        """Task queue: pending workflows whose current step lists ``user_id``."""
        return [w for w in self.list_workflows(company_id) if self._awaits(w, user_id)]

    def get_overdue_workflows(
        self, as_of: Optional[date] = None, company_id: Optional[str] = None
    ) -> List[ApprovalWorkflow]:
        as_of = as_of or self.clock().date()
        return [
            w for w in self.list_workflows(company_id)
            if w.status == WorkflowStatus.PENDING
            and w.due_date is not None
            and w.due_date < as_of
        ]

    def filter_workflows(
        self,
        search: str = "",
        status: str = "all",
        type: str = "all",
        priority: str = "all",
        assigned_to_user: Optional[str] = None,
        company_id: Optional[str] = None,
    ) -> List[ApprovalWorkflow]:
        workflows = self.list_workflows(company_id)
        if search:
            term = search.lower()
            workflows = [
                w for w in workflows
                if term in w.title.lower()
                or term in w.description.lower()
                or term in w.requested_by.lower()
            ]
        if status != "all":
            workflows = [w for w in workflows if w.status.value == status]
        if type != "all":
            workflows = [w for w in workflows if w.type.value == type]
        if priority != "all":
            workflows = [w for w in workflows if w.priority.value == priority]
        if assigned_to_user:
            workflows = [w for w in workflows if self._awaits(w, assigned_to_user)]
        return sorted(workflows, key=lambda w: w.requested_at, reverse=True)

    def get_workflow_stats(self, company_id: Optional[str] = None) -> Dict[str, int]:
        workflows = self.list_workflows(company_id)
        stats = {"total": len(workflows)}
        for status in WorkflowStatus:
            stats[status.value] = sum(1 for w in workflows if w.status == status)
        return stats

    def require_step(self, workflow_id: str, step_id: str) -> ApprovalStep:
        workflow = self._require(workflow_id)
        step = workflow.step_by_id(step_id)
        if step is None:
            raise NotFoundError("Etapa de aprovação não encontrada")
        return step

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require(self, workflow_id: str) -> ApprovalWorkflow:
        workflow = self.workflows.get(workflow_id)
        if workflow is None:
            logger.warning("Workflow not found", workflow_id=workflow_id)
            raise NotFoundError("Fluxo de aprovação não encontrado")
        return workflow

    def _open_step(self, workflow_id: str, step_id: str):
        workflow = self._require(workflow_id)
        if workflow.status != WorkflowStatus.PENDING:
            logger.warning(
                "Action on closed workflow refused",
                workflow_id=workflow_id,
                status=workflow.status.value,
            )
            raise BusinessRuleError(WORKFLOW_CLOSED_MESSAGE)
        step = workflow.step_by_id(step_id)
        if step is None:
            logger.warning("Step not found", workflow_id=workflow_id, step_id=step_id)
            raise NotFoundError("Etapa de aprovação não encontrada")
        return workflow, step

    def _append(
        self,
        step: ApprovalStep,
        approver_id: str,
        approver_name: str,
        action: ActionType,
        comments: Optional[str],
    ) -> ApprovalAction:
        entry = ApprovalAction(
            approver_id=approver_id,
            approver_name=approver_name,
            action=action,
            comments=comments,
            timestamp=self.clock(),
        )
        step.approvals.append(entry)
        return entry

    @staticmethod
    def _awaits(workflow: ApprovalWorkflow, user_id: str) -> bool:
        if workflow.status != WorkflowStatus.PENDING:
            return False
        step = workflow.active_step
        return step is not None and user_id in step.approver_ids

    @staticmethod
    def _instantiate_step(definition: StepDefinition) -> ApprovalStep:
        return ApprovalStep(
            step_number=definition.step_number,
            name=definition.name,
            description=definition.description,
            approver_role=definition.approver_role,
            approver_ids=list(definition.approver_ids),
            required_approvals=definition.required_approvals,
            is_parallel=definition.is_parallel,
            due_date=definition.due_date,
        )
