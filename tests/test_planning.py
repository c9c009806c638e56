"""Tests for budget plans, scenarios, variance and the planning service."""

import pytest
from datetime import datetime
from decimal import Decimal

from app.core.errors import NotFoundError, PayloadValidationError
from app.db.store import InMemoryStore
from app.domain.planning.enums import (
    ForecastMethod,
    KPIStatus,
    KPITrend,
    PeriodUnit,
    PlanStatus,
    ScenarioType,
    VarianceStatus,
)
from app.domain.planning.scenarios import project_scenarios, total_planned, validate_plan
from app.domain.planning.service import PlanningService
from app.domain.planning.variance import calculate_variance
from app.models.planning import BudgetPlanCategory, BudgetScenario, PlanningAssumption

NOW = datetime(2024, 6, 10, 9, 30)


def _categories():
    return [
        BudgetPlanCategory("Pessoal", Decimal("600000")),
        BudgetPlanCategory("Marketing", Decimal("150000")),
        BudgetPlanCategory("", Decimal("999")),  # dropped: no name
        BudgetPlanCategory("Viagens", Decimal("0")),  # dropped: no amount
    ]


def _scenarios(defaults=(False, True, False)):
    return [
        BudgetScenario("Otimista", ScenarioType.OPTIMISTIC, Decimal("1.1"), "Alta demanda", is_default=defaults[0]),
        BudgetScenario("Realista", ScenarioType.REALISTIC, Decimal("1.0"), "Base", is_default=defaults[1]),
        BudgetScenario("Pessimista", ScenarioType.PESSIMISTIC, Decimal("0.85"), "Crise", is_default=defaults[2]),
    ]


@pytest.fixture
def service() -> PlanningService:
    return PlanningService(InMemoryStore(), clock=lambda: NOW)


@pytest.fixture
def plan(service):
    return service.create_plan(
        name="Plano 2025",
        description="Orçamento anual",
        fiscal_year_id="fy-2025",
        cost_center_id="cc-1",
        categories=_categories(),
        scenarios=_scenarios(),
        assumptions=[
            PlanningAssumption("Inflação", "IPCA projetado", Decimal("4.5"), source="BCB"),
            PlanningAssumption("Câmbio", "Sem fonte", Decimal("5.0")),
        ],
        created_by="Carlos",
    )


class TestScenarios:

    def test_total_ignores_invalid_categories(self):
        assert total_planned(_categories()) == Decimal("750000")

    def test_projected_total_is_exact(self):
        total, scenarios = project_scenarios(_categories(), _scenarios())
        for scenario in scenarios:
            assert scenario.projected_total == total * scenario.adjustment_factor
        assert scenarios[2].projected_total == Decimal("637500.00")

    def test_two_defaults_fail(self):
        errors = validate_plan("P", "D", "fy", "cc", _categories(), _scenarios((True, True, False)))
        assert errors["scenarios"] == "Apenas um cenário pode ser marcado como padrão"

    def test_no_default_fails(self):
        errors = validate_plan("P", "D", "fy", "cc", _categories(), _scenarios((False, False, False)))
        assert errors["scenarios"] == "Pelo menos um cenário deve ser marcado como padrão"

    def test_missing_fields(self):
        errors = validate_plan("", "", "", "", [], [])
        assert set(errors) == {
            "name", "description", "fiscal_year_id", "cost_center_id", "categories", "scenarios",
        }


class TestVariance:

    @pytest.mark.parametrize(
        "planned, actual, expected",
        [
            (1000, 1100, VarianceStatus.UNFAVORABLE),
            (1000, 900, VarianceStatus.FAVORABLE),
            (1000, 1050, VarianceStatus.NEUTRAL),
            (1000, 950, VarianceStatus.NEUTRAL),
        ],
    )
    def test_status(self, planned, actual, expected):
        assert calculate_variance(planned, actual).status == expected

    def test_amounts(self):
        result = calculate_variance(Decimal("2000"), Decimal("2500"))
        assert result.variance == Decimal("500")
        assert result.variance_percentage == pytest.approx(25.0)

    def test_zero_plan(self):
        result = calculate_variance(0, 300)
        assert result.variance_percentage == 0
        assert result.status == VarianceStatus.NEUTRAL


class TestPlans:

    def test_create_keeps_valid_parts(self, plan):
        assert plan.total_planned == Decimal("750000")
        assert [c.name for c in plan.categories] == ["Pessoal", "Marketing"]
        assert [a.category for a in plan.assumptions] == ["Inflação"]
        assert plan.default_scenario.name == "Realista"
        assert plan.status == PlanStatus.DRAFT
        assert plan.created_at == NOW

    def test_create_with_two_defaults_is_rejected(self, service):
        with pytest.raises(PayloadValidationError) as exc:
            service.create_plan(
                name="P", description="D", fiscal_year_id="fy", cost_center_id="cc",
                categories=_categories(), scenarios=_scenarios((True, True, False)),
            )
        assert "scenarios" in exc.value.errors

    def test_update_recomputes_totals(self, service, plan):
        service.update_plan(
            plan.id,
            categories=[BudgetPlanCategory("Pessoal", Decimal("1000"))],
        )
        assert plan.total_planned == Decimal("1000")
        assert [s.projected_total for s in plan.scenarios] == [
            Decimal("1100.0"), Decimal("1000.0"), Decimal("850.00"),
        ]

    def test_update_cannot_break_default_rule(self, service, plan):
        with pytest.raises(PayloadValidationError):
            service.update_plan(plan.id, scenarios=_scenarios((False, False, False)))
        assert plan.default_scenario is not None

    def test_approve(self, service, plan):
        service.approve_plan(plan.id, "Diretora")
        assert plan.status == PlanStatus.APPROVED
        assert plan.approved_by == "Diretora"
        assert plan.approved_at == NOW

    def test_delete(self, service, plan):
        service.delete_plan(plan.id)
        assert service.get_plan(plan.id) is None
        with pytest.raises(NotFoundError):
            service.delete_plan(plan.id)

    def test_filter_and_stats(self, service, plan):
        service.update_plan(plan.id, status="review")
        assert service.filter_plans(search="anual") == [plan]
        assert service.filter_plans(status="draft") == []
        assert service.filter_plans(plan_type="annual") == [plan]
        stats = service.get_planning_stats()
        assert stats == {"total": 1, "draft": 0, "review": 1, "approved": 0, "active": 0}

    def test_category_variances(self, service, plan):
        result = service.category_variances(plan.id, {"Pessoal": 700000})
        assert list(result) == ["Pessoal"]
        assert result["Pessoal"].status == VarianceStatus.UNFAVORABLE


class TestForecasts:

    @pytest.fixture
    def forecast(self, service):
        return service.create_forecast(
            name="Despesas TI",
            description="Projeção mensal",
            method=ForecastMethod.LINEAR,
            horizon=2,
            base_data=[
                {"period": "2024-03", "actual": 100},
                {"period": "2024-04", "actual": 120},
                {"period": "2024-05", "actual": 140},
                {"period": "", "actual": 999},
                {"period": "2024-06", "actual": 0},
            ],
        )

    def test_create(self, forecast):
        assert [p.period for p in forecast.base_data] == ["2024-03", "2024-04", "2024-05"]
        assert all(p.confidence == 95 for p in forecast.base_data)
        assert [p.projected for p in forecast.projections] == pytest.approx([160, 180])
        assert [p.period for p in forecast.projections] == ["2024-07", "2024-08"]
        assert forecast.accuracy == 95
        assert forecast.confidence == pytest.approx(89)

    @pytest.mark.parametrize("horizon", [0, 61])
    def test_horizon_out_of_range(self, service, horizon):
        with pytest.raises(PayloadValidationError) as exc:
            service.create_forecast(
                name="F", description="D", method="linear", horizon=horizon,
                base_data=[{"period": "2024-01", "actual": 10}],
            )
        assert exc.value.errors["horizon"] == "Horizonte deve estar entre 1 e 60 períodos"

    def test_no_valid_base_data(self, service):
        with pytest.raises(PayloadValidationError) as exc:
            service.create_forecast(
                name="F", description="D", method="linear", horizon=3,
                base_data=[{"period": "2024-01", "actual": 0}],
            )
        assert "base_data" in exc.value.errors

    def test_update_regenerates(self, service, forecast):
        service.update_forecast(forecast.id, horizon=4, period=PeriodUnit.QUARTERLY)
        assert len(forecast.projections) == 4
        assert forecast.projections[0].period == "Q3/2024"
        assert forecast.projections[-1].projected == pytest.approx(220)

    def test_update_ignores_nulls(self, service, forecast):
        service.update_forecast(forecast.id, method=None, period=None, name=None)
        assert forecast.method == ForecastMethod.LINEAR
        assert forecast.period == PeriodUnit.MONTHLY
        assert forecast.name == "Despesas TI"
        assert [p.projected for p in forecast.projections] == pytest.approx([160, 180])

    def test_delete(self, service, forecast):
        service.delete_forecast(forecast.id)
        assert service.list_forecasts() == []


class TestKPIs:

    def test_crud(self, service):
        kpi = service.create_kpi("Margem EBITDA", target=25.0, current=22.5, status="warning")
        assert kpi.status == KPIStatus.WARNING
        service.update_kpi(kpi.id, current=26.0, status="excellent")
        assert kpi.current == 26.0
        assert kpi.status == KPIStatus.EXCELLENT
        assert service.list_kpis() == [kpi]
        service.delete_kpi(kpi.id)
        assert service.list_kpis() == []

    def test_name_required(self, service):
        with pytest.raises(PayloadValidationError):
            service.create_kpi("  ", target=1, current=1)

    def test_update_ignores_nulls(self, service):
        kpi = service.create_kpi("Margem EBITDA", target=25.0, current=22.5, trend="up")
        service.update_kpi(kpi.id, name=None, trend=None, status=None, current=24.0)
        assert kpi.name == "Margem EBITDA"
        assert kpi.trend == KPITrend.UP
        assert kpi.current == 24.0
