"""
Planning service: budget plans, forecasts and KPIs.

Forecast projections and plan scenario totals are derived values; they are
recomputed on every create and update so they never drift from their inputs.
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import structlog

from app.core.errors import NotFoundError, PayloadValidationError
from app.db.store import InMemoryStore
from app.models.base import utcnow
from app.models.planning import (
    KPI,
    BudgetPlan,
    BudgetPlanCategory,
    BudgetScenario,
    Forecast,
    ForecastDataPoint,
    PlanningAssumption,
)
from app.domain.planning.enums import (
    ForecastMethod,
    ForecastType,
    KPIStatus,
    KPITrend,
    PeriodUnit,
    PlanStatus,
    PlanType,
)
from app.domain.planning.forecasting import (
    average_confidence,
    base_point,
    estimate_accuracy,
    generate_projections,
    series_values,
)
from app.domain.planning.scenarios import (
    project_scenarios,
    valid_assumptions,
    valid_categories,
    valid_scenarios,
    validate_plan,
)
from app.domain.planning.variance import (
    DEFAULT_THRESHOLD_PCT,
    VarianceResult,
    calculate_variance,
)

logger = structlog.get_logger()

DEFAULT_MAX_HORIZON = 60


def _valid_base_rows(base_data: Sequence[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    return [
        row for row in base_data
        if str(row.get("period") or "").strip()
        and row.get("actual") is not None
        and float(row["actual"]) > 0
    ]


def validate_forecast(
    name: str,
    description: str,
    horizon: int,
    base_data: Sequence[Mapping[str, Any]],
    max_horizon: int = DEFAULT_MAX_HORIZON,
) -> Dict[str, str]:
    """Field-level checks for a forecast submission. Never raises."""
    errors: Dict[str, str] = {}
    if not (name or "").strip():
        errors["name"] = "Nome é obrigatório"
    if not (description or "").strip():
        errors["description"] = "Descrição é obrigatória"
    if horizon is None or horizon < 1 or horizon > max_horizon:
        errors["horizon"] = f"Horizonte deve estar entre 1 e {max_horizon} períodos"
    if not _valid_base_rows(base_data):
        errors["base_data"] = "Pelo menos um dado base válido é obrigatório"
    return errors


class PlanningService:
    """Budget plans with scenarios, forecasts and KPIs."""

    def __init__(
        self,
        store: InMemoryStore,
        clock: Callable[[], datetime] = utcnow,
        max_horizon: int = DEFAULT_MAX_HORIZON,
        variance_threshold_pct: float = DEFAULT_THRESHOLD_PCT,
        default_period_unit: PeriodUnit = PeriodUnit.MONTHLY,
    ):
        self.plans = store.budget_plans
        self.forecasts = store.forecasts
        self.kpis = store.kpis
        self.clock = clock
        self.max_horizon = max_horizon
        self.variance_threshold_pct = variance_threshold_pct
        self.default_period_unit = PeriodUnit(default_period_unit)

    # ------------------------------------------------------------------
    # Budget plans
    # ------------------------------------------------------------------

    def create_plan(
        self,
        name: str,
        description: str,
        fiscal_year_id: str,
        cost_center_id: str,
        categories: Sequence[BudgetPlanCategory],
        scenarios: Sequence[BudgetScenario],
        assumptions: Sequence[PlanningAssumption] = (),
        plan_type: PlanType = PlanType.ANNUAL,
        status: PlanStatus = PlanStatus.DRAFT,
        created_by: str = "",
    ) -> BudgetPlan:
        errors = validate_plan(
            name, description, fiscal_year_id, cost_center_id, categories, scenarios
        )
        if errors:
            logger.warning("Budget plan rejected", errors=errors)
            raise PayloadValidationError(errors)

        kept_categories = valid_categories(categories)
        total, kept_scenarios = project_scenarios(kept_categories, valid_scenarios(scenarios))
        now = self.clock()
        plan = BudgetPlan(
            name=name.strip(),
            description=description.strip(),
            fiscal_year_id=fiscal_year_id,
            cost_center_id=cost_center_id,
            plan_type=PlanType(plan_type),
            status=PlanStatus(status),
            total_planned=total,
            categories=kept_categories,
            assumptions=valid_assumptions(assumptions),
            scenarios=kept_scenarios,
            created_by=created_by,
            created_at=now,
            last_updated=now,
        )
        self.plans.add(plan)
        logger.info(
            "Budget plan created",
            plan_id=plan.id,
            total_planned=str(total),
            scenarios=len(kept_scenarios),
        )
        return plan

    def update_plan(self, plan_id: str, **updates: Any) -> BudgetPlan:
        """
        Apply a partial update and recompute the plan's totals.

        The merged plan is validated as a whole, so an update can never
        leave a plan with zero or several default scenarios.
        """
        plan = self._require_plan(plan_id)
        updates = {k: v for k, v in updates.items() if v is not None}
        merged = {
            "name": updates.get("name", plan.name),
            "description": updates.get("description", plan.description),
            "fiscal_year_id": updates.get("fiscal_year_id", plan.fiscal_year_id),
            "cost_center_id": updates.get("cost_center_id", plan.cost_center_id),
            "categories": updates.get("categories", plan.categories),
            "scenarios": updates.get("scenarios", plan.scenarios),
        }
        errors = validate_plan(**merged)
        if errors:
            logger.warning("Budget plan update rejected", plan_id=plan_id, errors=errors)
            raise PayloadValidationError(errors)

        plan.name = merged["name"].strip()
        plan.description = merged["description"].strip()
        plan.fiscal_year_id = merged["fiscal_year_id"]
        plan.cost_center_id = merged["cost_center_id"]
        plan.categories = valid_categories(merged["categories"])
        plan.total_planned, plan.scenarios = project_scenarios(
            plan.categories, valid_scenarios(merged["scenarios"])
        )
        if "assumptions" in updates:
            plan.assumptions = valid_assumptions(updates["assumptions"])
        if "plan_type" in updates:
            plan.plan_type = PlanType(updates["plan_type"])
        if "status" in updates:
            plan.status = PlanStatus(updates["status"])
        plan.last_updated = self.clock()
        logger.info("Budget plan updated", plan_id=plan_id, fields=sorted(updates))
        return plan

    def delete_plan(self, plan_id: str) -> None:
        self._require_plan(plan_id)
        self.plans.remove(plan_id)
        logger.info("Budget plan deleted", plan_id=plan_id)

    def approve_plan(self, plan_id: str, approved_by: str) -> BudgetPlan:
        plan = self._require_plan(plan_id)
        plan.status = PlanStatus.APPROVED
        plan.approved_by = approved_by
        plan.approved_at = self.clock()
        plan.last_updated = plan.approved_at
        logger.info("Budget plan approved", plan_id=plan_id, approved_by=approved_by)
        return plan

    def get_plan(self, plan_id: str) -> Optional[BudgetPlan]:
        return self.plans.get(plan_id)

    def list_plans(self) -> List[BudgetPlan]:
        return self.plans.list()

    def filter_plans(
        self,
        search: str = "",
        status: str = "all",
        plan_type: str = "all",
    ) -> List[BudgetPlan]:
        plans = self.plans.list()
        if search:
            term = search.lower()
            plans = [
                p for p in plans
                if term in p.name.lower() or term in p.description.lower()
            ]
        if status != "all":
            plans = [p for p in plans if p.status.value == status]
        if plan_type != "all":
            plans = [p for p in plans if p.plan_type.value == plan_type]
        return sorted(plans, key=lambda p: p.last_updated, reverse=True)

    def get_planning_stats(self) -> Dict[str, int]:
        plans = self.plans.list()
        stats = {"total": len(plans)}
        for status in PlanStatus:
            stats[status.value] = sum(1 for p in plans if p.status == status)
        return stats

    # ------------------------------------------------------------------
    # Variance
    # ------------------------------------------------------------------

    def analyze_variance(self, planned: Any, actual: Any) -> VarianceResult:
        return calculate_variance(planned, actual, self.variance_threshold_pct)

    def category_variances(
        self,
        plan_id: str,
        actuals: Mapping[str, Any],
    ) -> Dict[str, VarianceResult]:
        """Variance of each category that has an actual, keyed by category name."""
        plan = self._require_plan(plan_id)
        return {
            category.name: self.analyze_variance(category.planned_amount, actuals[category.name])
            for category in plan.categories
            if category.name in actuals
        }

    # ------------------------------------------------------------------
    # Forecasts
    # ------------------------------------------------------------------

    def create_forecast(
        self,
        name: str,
        description: str,
        method: ForecastMethod,
        horizon: int,
        base_data: Sequence[Mapping[str, Any]],
        type: ForecastType = ForecastType.EXPENSE,
        period: Optional[PeriodUnit] = None,
        created_by: str = "",
    ) -> Forecast:
        """
        Validate the inputs and build a forecast with fresh projections.

        Args:
            base_data: Historical rows with ``period`` and ``actual``; rows
                without a label or with a non-positive actual are dropped

        Raises:
            PayloadValidationError: On missing fields, a horizon out of range
                or no usable base row
            BusinessRuleError: If the method cannot project the series
        """
        errors = validate_forecast(name, description, horizon, base_data, self.max_horizon)
        if errors:
            logger.warning("Forecast rejected", errors=errors)
            raise PayloadValidationError(errors)

        now = self.clock()
        forecast = Forecast(
            name=name.strip(),
            description=description.strip(),
            method=ForecastMethod(method),
            horizon=horizon,
            type=ForecastType(type),
            period=PeriodUnit(period or self.default_period_unit),
            base_data=self._base_points(base_data),
            created_by=created_by,
            created_at=now,
            last_updated=now,
        )
        self._project(forecast)
        self.forecasts.add(forecast)
        logger.info(
            "Forecast created",
            forecast_id=forecast.id,
            method=forecast.method.value,
            horizon=forecast.horizon,
        )
        return forecast

    def update_forecast(self, forecast_id: str, **updates: Any) -> Forecast:
        forecast = self._require_forecast(forecast_id)
        updates = {k: v for k, v in updates.items() if v is not None}
        base_rows = updates.get("base_data")
        if base_rows is None:
            base_rows = [{"period": p.period, "actual": p.actual} for p in forecast.base_data]
        errors = validate_forecast(
            updates.get("name", forecast.name),
            updates.get("description", forecast.description),
            updates.get("horizon", forecast.horizon),
            base_rows,
            self.max_horizon,
        )
        if errors:
            logger.warning("Forecast update rejected", forecast_id=forecast_id, errors=errors)
            raise PayloadValidationError(errors)

        if "name" in updates:
            forecast.name = updates["name"].strip()
        if "description" in updates:
            forecast.description = updates["description"].strip()
        if "method" in updates:
            forecast.method = ForecastMethod(updates["method"])
        if "horizon" in updates:
            forecast.horizon = updates["horizon"]
        if "type" in updates:
            forecast.type = ForecastType(updates["type"])
        if "period" in updates:
            forecast.period = PeriodUnit(updates["period"])
        forecast.base_data = self._base_points(base_rows)
        self._project(forecast)
        forecast.last_updated = self.clock()
        logger.info("Forecast updated", forecast_id=forecast_id, fields=sorted(updates))
        return forecast

    def delete_forecast(self, forecast_id: str) -> None:
        self._require_forecast(forecast_id)
        self.forecasts.remove(forecast_id)
        logger.info("Forecast deleted", forecast_id=forecast_id)

    def get_forecast(self, forecast_id: str) -> Optional[Forecast]:
        return self.forecasts.get(forecast_id)

    def list_forecasts(self) -> List[Forecast]:
        return self.forecasts.list()

    # ------------------------------------------------------------------
    # KPIs
    # ------------------------------------------------------------------

    def create_kpi(self, name: str, target: float, current: float, **fields: Any) -> KPI:
        if not (name or "").strip():
            raise PayloadValidationError({"name": "Nome é obrigatório"})
        kpi = KPI(
            name=name.strip(),
            target=target,
            current=current,
            last_updated=self.clock(),
            **self._kpi_fields(fields),
        )
        self.kpis.add(kpi)
        logger.info("KPI created", kpi_id=kpi.id, name=kpi.name)
        return kpi

    def update_kpi(self, kpi_id: str, **updates: Any) -> KPI:
        kpi = self._require_kpi(kpi_id)
        updates = {k: v for k, v in updates.items() if v is not None}
        if "name" in updates and not (updates["name"] or "").strip():
            raise PayloadValidationError({"name": "Nome é obrigatório"})
        for key, value in self._kpi_fields(updates).items():
            setattr(kpi, key, value)
        for key in ("name", "target", "current"):
            if key in updates:
                setattr(kpi, key, updates[key])
        kpi.last_updated = self.clock()
        logger.info("KPI updated", kpi_id=kpi_id, fields=sorted(updates))
        return kpi

    def delete_kpi(self, kpi_id: str) -> None:
        self._require_kpi(kpi_id)
        self.kpis.remove(kpi_id)
        logger.info("KPI deleted", kpi_id=kpi_id)

    def list_kpis(self) -> List[KPI]:
        return self.kpis.list()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _project(self, forecast: Forecast) -> None:
        forecast.projections = generate_projections(
            series_values(forecast.base_data),
            forecast.method,
            forecast.horizon,
            forecast.period,
            self.clock().date(),
        )
        forecast.accuracy = estimate_accuracy(forecast.base_data)
        forecast.confidence = average_confidence(forecast.projections)

    @staticmethod
    def _base_points(rows: Sequence[Mapping[str, Any]]) -> List[ForecastDataPoint]:
        return [
            base_point(str(row["period"]).strip(), float(row["actual"]))
            for row in _valid_base_rows(rows)
        ]

    @staticmethod
    def _kpi_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
        allowed = {
            "description", "category", "formula", "unit", "frequency", "owner",
        }
        result = {k: v for k, v in fields.items() if k in allowed}
        if "trend" in fields:
            result["trend"] = KPITrend(fields["trend"])
        if "status" in fields:
            result["status"] = KPIStatus(fields["status"])
        return result

    def _require_plan(self, plan_id: str) -> BudgetPlan:
        plan = self.plans.get(plan_id)
        if plan is None:
            logger.warning("Budget plan not found", plan_id=plan_id)
            raise NotFoundError("Plano orçamentário não encontrado")
        return plan

    def _require_forecast(self, forecast_id: str) -> Forecast:
        forecast = self.forecasts.get(forecast_id)
        if forecast is None:
            logger.warning("Forecast not found", forecast_id=forecast_id)
            raise NotFoundError("Previsão não encontrada")
        return forecast

    def _require_kpi(self, kpi_id: str) -> KPI:
        kpi = self.kpis.get(kpi_id)
        if kpi is None:
            logger.warning("KPI not found", kpi_id=kpi_id)
            raise NotFoundError("KPI não encontrado")
        return kpi
