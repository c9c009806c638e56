"""Approval workflow API endpoints."""

import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.deps import CurrentUser, get_current_user
from app.api.errors import forbidden, http_error
from app.core.errors import DomainError
from app.db.dependencies import get_approval_service
from app.domain.approvals.service import ApprovalService, can_act
from app.models.approval import ApprovalCondition, ApprovalTemplate, StepDefinition
from app.schemas.approvals import (
    ChangeRequest,
    StepActionRequest,
    TemplateCreate,
    TemplateResponse,
    WorkflowCreate,
    WorkflowResponse,
    WorkflowUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _authorize(service: ApprovalService, workflow_id: str, step_id: str, user: CurrentUser) -> None:
    """Raise 403 unless ``user`` may act on the step."""
    try:
        step = service.require_step(workflow_id, step_id)
    except DomainError as e:
        raise http_error(e)
    if not can_act(user.id, user.role, step):
        logger.warning(f"User {user.id} may not act on step {step_id} of workflow {workflow_id}")
        raise forbidden("Usuário não autorizado a aprovar esta etapa")


@router.get("", response_model=List[WorkflowResponse])
def list_workflows(
    search: str = "",
    status_filter: str = Query("all", alias="status"),
    type_filter: str = Query("all", alias="type"),
    priority: str = "all",
    assigned_to_me: bool = False,
    user: CurrentUser = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
) -> List[WorkflowResponse]:
    """Filtered workflows, newest request first."""
    workflows = service.filter_workflows(
        search=search,
        status=status_filter,
        type=type_filter,
        priority=priority,
        assigned_to_user=user.id if assigned_to_me else None,
        company_id=user.company_id,
    )
    return [WorkflowResponse.model_validate(w) for w in workflows]


@router.get("/pending", response_model=List[WorkflowResponse])
def get_pending_approvals(
    user: CurrentUser = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
) -> List[WorkflowResponse]:
    """Workflows waiting on the current user."""
    return [
        WorkflowResponse.model_validate(w)
        for w in service.get_pending_approvals_for_user(user.id, company_id=user.company_id)
    ]


@router.get("/overdue", response_model=List[WorkflowResponse])
def get_overdue_workflows(
    user: CurrentUser = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
) -> List[WorkflowResponse]:
    return [
        WorkflowResponse.model_validate(w)
        for w in service.get_overdue_workflows(company_id=user.company_id)
    ]


@router.get("/stats", response_model=Dict[str, int])
def get_workflow_stats(
    user: CurrentUser = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
) -> Dict[str, int]:
    return service.get_workflow_stats(company_id=user.company_id)


@router.get("/templates", response_model=List[TemplateResponse])
def list_templates(
    user: CurrentUser = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
) -> List[TemplateResponse]:
    return [TemplateResponse.model_validate(t) for t in service.templates.list()]


@router.post("/templates", response_model=TemplateResponse, status_code=status.HTTP_201_CREATED)
def create_template(
    data: TemplateCreate,
    user: CurrentUser = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
) -> TemplateResponse:
    template = ApprovalTemplate(
        name=data.name,
        type=data.type,
        description=data.description,
        steps=[StepDefinition(**s.model_dump()) for s in data.steps],
        conditions=[ApprovalCondition(**c.model_dump()) for c in data.conditions],
        is_active=data.is_active,
        created_by=user.name,
    )
    try:
        service.add_template(template)
    except DomainError as e:
        logger.error(f"Error creating approval template: {e}")
        raise http_error(e)
    return TemplateResponse.model_validate(template)


@router.post("", response_model=WorkflowResponse, status_code=status.HTTP_201_CREATED)
def create_workflow(
    data: WorkflowCreate,
    user: CurrentUser = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
) -> WorkflowResponse:
    """
    Create a workflow requested by the current user.

    Without explicit steps the steps come from ``template_id`` or from the
    first active template matching the type and amount.
    """
    common = dict(
        type=data.type,
        title=data.title,
        amount=data.amount,
        requested_by=user.name,
        description=data.description,
        priority=data.priority,
        due_date=data.due_date,
        entity_id=data.entity_id,
        entity_type=data.entity_type,
        company_id=user.company_id,
        metadata=data.metadata,
    )
    try:
        if data.steps:
            workflow = service.create_workflow(
                steps=[StepDefinition(**s.model_dump()) for s in data.steps],
                **common,
            )
        else:
            workflow = service.create_workflow_from_template(
                template_id=data.template_id,
                context=data.context,
                **common,
            )
    except DomainError as e:
        logger.error(f"Error creating workflow: {e}")
        raise http_error(e)
    logger.info(f"Created workflow {workflow.id} with {workflow.total_steps} steps")
    return WorkflowResponse.model_validate(workflow)


@router.get("/{workflow_id}", response_model=WorkflowResponse)
def get_workflow(
    workflow_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
) -> WorkflowResponse:
    workflow = service.get_workflow(workflow_id)
    if workflow is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Fluxo de aprovação não encontrado",
        )
    return WorkflowResponse.model_validate(workflow)


@router.patch("/{workflow_id}", response_model=WorkflowResponse)
def update_workflow(
    workflow_id: str,
    data: WorkflowUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
) -> WorkflowResponse:
    try:
        workflow = service.update_workflow(workflow_id, **data.model_dump(exclude_unset=True))
    except DomainError as e:
        raise http_error(e)
    return WorkflowResponse.model_validate(workflow)


@router.post("/{workflow_id}/steps/{step_id}/approve", response_model=WorkflowResponse)
def approve_step(
    workflow_id: str,
    step_id: str,
    data: StepActionRequest,
    user: CurrentUser = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
) -> WorkflowResponse:
    _authorize(service, workflow_id, step_id, user)
    try:
        workflow = service.approve_step(workflow_id, step_id, user.id, user.name, data.comments)
    except DomainError as e:
        logger.error(f"Error approving step {step_id} of workflow {workflow_id}: {e}")
        raise http_error(e)
    return WorkflowResponse.model_validate(workflow)


@router.post("/{workflow_id}/steps/{step_id}/reject", response_model=WorkflowResponse)
def reject_step(
    workflow_id: str,
    step_id: str,
    data: StepActionRequest,
    user: CurrentUser = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
) -> WorkflowResponse:
    _authorize(service, workflow_id, step_id, user)
    try:
        workflow = service.reject_step(workflow_id, step_id, user.id, user.name, data.comments)
    except DomainError as e:
        logger.error(f"Error rejecting step {step_id} of workflow {workflow_id}: {e}")
        raise http_error(e)
    return WorkflowResponse.model_validate(workflow)


@router.post("/{workflow_id}/steps/{step_id}/request-changes", response_model=WorkflowResponse)
def request_changes(
    workflow_id: str,
    step_id: str,
    data: ChangeRequest,
    user: CurrentUser = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
) -> WorkflowResponse:
    _authorize(service, workflow_id, step_id, user)
    try:
        workflow = service.request_changes(workflow_id, step_id, user.id, user.name, data.comments)
    except DomainError as e:
        raise http_error(e)
    return WorkflowResponse.model_validate(workflow)


@router.post("/{workflow_id}/cancel", response_model=WorkflowResponse)
def cancel_workflow(
    workflow_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: ApprovalService = Depends(get_approval_service),
) -> WorkflowResponse:
    try:
        workflow = service.cancel_workflow(workflow_id)
    except DomainError as e:
        raise http_error(e)
    logger.info(f"Workflow {workflow_id} cancelled by {user.id}")
    return WorkflowResponse.model_validate(workflow)
