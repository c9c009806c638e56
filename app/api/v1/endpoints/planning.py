"""Budget planning, forecasting and KPI API endpoints."""

import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.deps import CurrentUser, get_current_user
from app.api.errors import http_error
from app.core.errors import DomainError
from app.db.dependencies import get_planning_service
from app.domain.planning.service import PlanningService
from app.models.planning import BudgetPlanCategory, BudgetScenario, PlanningAssumption
from app.schemas.planning import (
    BudgetPlanCreate,
    BudgetPlanResponse,
    BudgetPlanUpdate,
    CategoryVarianceRequest,
    ForecastCreate,
    ForecastResponse,
    ForecastUpdate,
    KPICreate,
    KPIResponse,
    KPIUpdate,
    VarianceRequest,
    VarianceResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _plan_parts(payload: dict) -> dict:
    """Turn nested schema dumps into domain records."""
    parts = dict(payload)
    if parts.get("categories") is not None:
        parts["categories"] = [BudgetPlanCategory(**c) for c in parts["categories"]]
    if parts.get("scenarios") is not None:
        parts["scenarios"] = [BudgetScenario(**s) for s in parts["scenarios"]]
    if parts.get("assumptions") is not None:
        parts["assumptions"] = [PlanningAssumption(**a) for a in parts["assumptions"]]
    return parts


# ----------------------------------------------------------------------
# Budget plans
# ----------------------------------------------------------------------

@router.get("/plans", response_model=List[BudgetPlanResponse])
def list_plans(
    search: str = "",
    status_filter: str = Query("all", alias="status"),
    plan_type: str = "all",
    user: CurrentUser = Depends(get_current_user),
    service: PlanningService = Depends(get_planning_service),
) -> List[BudgetPlanResponse]:
    """Filtered plans, most recently updated first."""
    plans = service.filter_plans(search, status_filter, plan_type)
    return [BudgetPlanResponse.model_validate(p) for p in plans]


@router.get("/plans/stats", response_model=Dict[str, int])
def get_planning_stats(
    user: CurrentUser = Depends(get_current_user),
    service: PlanningService = Depends(get_planning_service),
) -> Dict[str, int]:
    return service.get_planning_stats()


@router.post("/plans", response_model=BudgetPlanResponse, status_code=status.HTTP_201_CREATED)
def create_plan(
    data: BudgetPlanCreate,
    user: CurrentUser = Depends(get_current_user),
    service: PlanningService = Depends(get_planning_service),
) -> BudgetPlanResponse:
    """
    Create a budget plan.

    Invalid categories, scenarios and assumptions are dropped; the total and
    each scenario's projected total are computed from what is kept.
    """
    try:
        plan = service.create_plan(created_by=user.name, **_plan_parts(data.model_dump()))
    except DomainError as e:
        logger.error(f"Error creating budget plan: {e}")
        raise http_error(e)
    logger.info(f"Created budget plan {plan.id} totalling {plan.total_planned}")
    return BudgetPlanResponse.model_validate(plan)


@router.get("/plans/{plan_id}", response_model=BudgetPlanResponse)
def get_plan(
    plan_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: PlanningService = Depends(get_planning_service),
) -> BudgetPlanResponse:
    plan = service.get_plan(plan_id)
    if plan is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Plano orçamentário não encontrado",
        )
    return BudgetPlanResponse.model_validate(plan)


@router.patch("/plans/{plan_id}", response_model=BudgetPlanResponse)
def update_plan(
    plan_id: str,
    data: BudgetPlanUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: PlanningService = Depends(get_planning_service),
) -> BudgetPlanResponse:
    try:
        plan = service.update_plan(plan_id, **_plan_parts(data.model_dump(exclude_unset=True)))
    except DomainError as e:
        logger.error(f"Error updating budget plan {plan_id}: {e}")
        raise http_error(e)
    return BudgetPlanResponse.model_validate(plan)


@router.delete("/plans/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_plan(
    plan_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: PlanningService = Depends(get_planning_service),
) -> Response:
    try:
        service.delete_plan(plan_id)
    except DomainError as e:
        raise http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/plans/{plan_id}/approve", response_model=BudgetPlanResponse)
def approve_plan(
    plan_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: PlanningService = Depends(get_planning_service),
) -> BudgetPlanResponse:
    try:
        plan = service.approve_plan(plan_id, user.name)
    except DomainError as e:
        raise http_error(e)
    return BudgetPlanResponse.model_validate(plan)


@router.post("/plans/{plan_id}/variance", response_model=Dict[str, VarianceResponse])
def get_category_variances(
    plan_id: str,
    data: CategoryVarianceRequest,
    user: CurrentUser = Depends(get_current_user),
    service: PlanningService = Depends(get_planning_service),
) -> Dict[str, VarianceResponse]:
    """Variance of each plan category against the actuals sent."""
    try:
        results = service.category_variances(plan_id, data.actuals)
    except DomainError as e:
        raise http_error(e)
    return {name: VarianceResponse.model_validate(r) for name, r in results.items()}


@router.post("/variance", response_model=VarianceResponse)
def analyze_variance(
    data: VarianceRequest,
    user: CurrentUser = Depends(get_current_user),
    service: PlanningService = Depends(get_planning_service),
) -> VarianceResponse:
    return VarianceResponse.model_validate(service.analyze_variance(data.planned, data.actual))


# ----------------------------------------------------------------------
# Forecasts
# ----------------------------------------------------------------------

@router.get("/forecasts", response_model=List[ForecastResponse])
def list_forecasts(
    user: CurrentUser = Depends(get_current_user),
    service: PlanningService = Depends(get_planning_service),
) -> List[ForecastResponse]:
    return [ForecastResponse.model_validate(f) for f in service.list_forecasts()]


@router.post("/forecasts", response_model=ForecastResponse, status_code=status.HTTP_201_CREATED)
def create_forecast(
    data: ForecastCreate,
    user: CurrentUser = Depends(get_current_user),
    service: PlanningService = Depends(get_planning_service),
) -> ForecastResponse:
    try:
        forecast = service.create_forecast(created_by=user.name, **data.model_dump())
    except DomainError as e:
        logger.error(f"Error creating forecast: {e}")
        raise http_error(e)
    logger.info(f"Created forecast {forecast.id} ({forecast.method.value}, {forecast.horizon} periods)")
    return ForecastResponse.model_validate(forecast)


@router.get("/forecasts/{forecast_id}", response_model=ForecastResponse)
def get_forecast(
    forecast_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: PlanningService = Depends(get_planning_service),
) -> ForecastResponse:
    forecast = service.get_forecast(forecast_id)
    if forecast is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Previsão não encontrada")
    return ForecastResponse.model_validate(forecast)


@router.patch("/forecasts/{forecast_id}", response_model=ForecastResponse)
def update_forecast(
    forecast_id: str,
    data: ForecastUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: PlanningService = Depends(get_planning_service),
) -> ForecastResponse:
    """Update a forecast; projections are regenerated."""
    try:
        forecast = service.update_forecast(forecast_id, **data.model_dump(exclude_unset=True))
    except DomainError as e:
        logger.error(f"Error updating forecast {forecast_id}: {e}")
        raise http_error(e)
    return ForecastResponse.model_validate(forecast)


@router.delete("/forecasts/{forecast_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_forecast(
    forecast_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: PlanningService = Depends(get_planning_service),
) -> Response:
    try:
        service.delete_forecast(forecast_id)
    except DomainError as e:
        raise http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ----------------------------------------------------------------------
# KPIs
# ----------------------------------------------------------------------

@router.get("/kpis", response_model=List[KPIResponse])
def list_kpis(
    user: CurrentUser = Depends(get_current_user),
    service: PlanningService = Depends(get_planning_service),
) -> List[KPIResponse]:
    return [KPIResponse.model_validate(k) for k in service.list_kpis()]


@router.post("/kpis", response_model=KPIResponse, status_code=status.HTTP_201_CREATED)
def create_kpi(
    data: KPICreate,
    user: CurrentUser = Depends(get_current_user),
    service: PlanningService = Depends(get_planning_service),
) -> KPIResponse:
    try:
        kpi = service.create_kpi(**data.model_dump())
    except DomainError as e:
        raise http_error(e)
    return KPIResponse.model_validate(kpi)


@router.patch("/kpis/{kpi_id}", response_model=KPIResponse)
def update_kpi(
    kpi_id: str,
    data: KPIUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: PlanningService = Depends(get_planning_service),
) -> KPIResponse:
    try:
        kpi = service.update_kpi(kpi_id, **data.model_dump(exclude_unset=True))
    except DomainError as e:
        raise http_error(e)
    return KPIResponse.model_validate(kpi)


@router.delete("/kpis/{kpi_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_kpi(
    kpi_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: PlanningService = Depends(get_planning_service),
) -> Response:
    try:
        service.delete_kpi(kpi_id)
    except DomainError as e:
        raise http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
