"""Cost center API endpoints."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.deps import CurrentUser, get_current_user
from app.api.errors import http_error
from app.core.errors import DomainError
from app.db.dependencies import get_cost_center_service
from app.domain.cost_centers.hierarchy import (
    CostCenterNode,
    compute_utilization,
    utilization_level,
)
from app.domain.cost_centers.service import CostCenterService
from app.schemas.cost_centers import (
    BudgetRollupResponse,
    CostCenterCreate,
    CostCenterNodeResponse,
    CostCenterResponse,
    CostCenterUpdate,
    DepartmentTotalsResponse,
    ExpansionResponse,
    SpendRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _node_response(node: CostCenterNode) -> CostCenterNodeResponse:
    utilization = compute_utilization(node.center)
    return CostCenterNodeResponse(
        cost_center=CostCenterResponse.model_validate(node.center),
        utilization=utilization,
        utilization_level=utilization_level(utilization),
        is_expanded=node.is_expanded,
        children=[_node_response(child) for child in node.children],
    )


@router.get("", response_model=List[CostCenterResponse])
def list_cost_centers(
    search: str = "",
    status_filter: str = Query("all", alias="status"),
    user: CurrentUser = Depends(get_current_user),
    service: CostCenterService = Depends(get_cost_center_service),
) -> List[CostCenterResponse]:
    """List the active company's cost centers, ordered by level then path."""
    centers = service.filter_cost_centers(search, status_filter, user.company_id)
    return [CostCenterResponse.model_validate(c) for c in centers]


@router.get("/hierarchy", response_model=List[CostCenterNodeResponse])
def get_hierarchy(
    user: CurrentUser = Depends(get_current_user),
    service: CostCenterService = Depends(get_cost_center_service),
) -> List[CostCenterNodeResponse]:
    """Cost center forest with utilization per node."""
    return [_node_response(node) for node in service.hierarchy(user.company_id)]


@router.get("/departments/{department}/totals", response_model=DepartmentTotalsResponse)
def get_department_totals(
    department: str,
    user: CurrentUser = Depends(get_current_user),
    service: CostCenterService = Depends(get_cost_center_service),
) -> DepartmentTotalsResponse:
    """Budget and spend over the department's active cost centers."""
    return DepartmentTotalsResponse(
        department=department,
        total_budget=service.total_budget_by_department(department),
        total_spent=service.total_spent_by_department(department),
    )


@router.post("", response_model=CostCenterResponse, status_code=status.HTTP_201_CREATED)
def create_cost_center(
    data: CostCenterCreate,
    user: CurrentUser = Depends(get_current_user),
    service: CostCenterService = Depends(get_cost_center_service),
) -> CostCenterResponse:
    try:
        center = service.create_cost_center(company_id=user.company_id, **data.model_dump())
    except DomainError as e:
        logger.error(f"Error creating cost center: {e}")
        raise http_error(e)
    logger.info(f"Created cost center {center.id} ({center.path})")
    return CostCenterResponse.model_validate(center)


@router.get("/{center_id}", response_model=CostCenterResponse)
def get_cost_center(
    center_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: CostCenterService = Depends(get_cost_center_service),
) -> CostCenterResponse:
    center = service.get_cost_center(center_id)
    if center is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Centro de custo não encontrado",
        )
    return CostCenterResponse.model_validate(center)


@router.patch("/{center_id}", response_model=CostCenterResponse)
def update_cost_center(
    center_id: str,
    data: CostCenterUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: CostCenterService = Depends(get_cost_center_service),
) -> CostCenterResponse:
    """
    Update a cost center.

    Sending ``parent_id`` (null included) moves the node; descendants get
    their level and path recomputed.
    """
    try:
        center = service.update_cost_center(center_id, **data.model_dump(exclude_unset=True))
    except DomainError as e:
        logger.error(f"Error updating cost center {center_id}: {e}")
        raise http_error(e)
    return CostCenterResponse.model_validate(center)


@router.delete("/{center_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_cost_center(
    center_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: CostCenterService = Depends(get_cost_center_service),
) -> Response:
    try:
        service.delete_cost_center(center_id)
    except DomainError as e:
        logger.error(f"Error deleting cost center {center_id}: {e}")
        raise http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{center_id}/children", response_model=List[CostCenterResponse])
def get_children(
    center_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: CostCenterService = Depends(get_cost_center_service),
) -> List[CostCenterResponse]:
    return [CostCenterResponse.model_validate(c) for c in service.get_children(center_id)]


@router.get("/{center_id}/rollup", response_model=BudgetRollupResponse)
def get_rollup(
    center_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: CostCenterService = Depends(get_cost_center_service),
) -> BudgetRollupResponse:
    """Budget, spend and utilization over the subtree."""
    try:
        return BudgetRollupResponse.model_validate(service.rollup(center_id))
    except DomainError as e:
        raise http_error(e)


@router.post("/{center_id}/spend", response_model=CostCenterResponse)
def record_spend(
    center_id: str,
    data: SpendRequest,
    user: CurrentUser = Depends(get_current_user),
    service: CostCenterService = Depends(get_cost_center_service),
) -> CostCenterResponse:
    try:
        center = service.record_spend(center_id, data.amount)
    except DomainError as e:
        raise http_error(e)
    return CostCenterResponse.model_validate(center)


@router.post("/{center_id}/toggle-expansion", response_model=ExpansionResponse)
def toggle_expansion(
    center_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: CostCenterService = Depends(get_cost_center_service),
) -> ExpansionResponse:
    try:
        expanded = service.toggle_expansion(center_id)
    except DomainError as e:
        raise http_error(e)
    return ExpansionResponse(cost_center_id=center_id, is_expanded=expanded)
