"""Budget plan scenario engine."""

from decimal import Decimal
from typing import Dict, List, Sequence, Tuple

from app.models.planning import BudgetPlanCategory, BudgetScenario, PlanningAssumption

DEFAULT_SCENARIO_MISSING = "Pelo menos um cenário deve ser marcado como padrão"
DEFAULT_SCENARIO_DUPLICATED = "Apenas um cenário pode ser marcado como padrão"


def valid_categories(categories: Sequence[BudgetPlanCategory]) -> List[BudgetPlanCategory]:
    """Categories with a name and a positive planned amount."""
    return [c for c in categories if c.name.strip() and c.planned_amount > 0]


def valid_scenarios(scenarios: Sequence[BudgetScenario]) -> List[BudgetScenario]:
    """Scenarios with both a name and a description."""
    return [s for s in scenarios if s.name.strip() and s.description.strip()]


def valid_assumptions(assumptions: Sequence[PlanningAssumption]) -> List[PlanningAssumption]:
    """Assumptions with a category, a description and a source."""
    return [
        a for a in assumptions
        if a.category.strip() and a.description.strip() and a.source.strip()
    ]


def total_planned(categories: Sequence[BudgetPlanCategory]) -> Decimal:
    return sum((c.planned_amount for c in valid_categories(categories)), Decimal("0"))


def project_scenarios(
    categories: Sequence[BudgetPlanCategory],
    scenarios: Sequence[BudgetScenario],
) -> Tuple[Decimal, List[BudgetScenario]]:
    """
    Stamp ``projected_total`` on every scenario.

    Returns:
        (total planned, the same scenario objects updated in place)
    """
    total = total_planned(categories)
    for scenario in scenarios:
        scenario.projected_total = total * Decimal(str(scenario.adjustment_factor))
    return total, list(scenarios)


def validate_scenarios(scenarios: Sequence[BudgetScenario]) -> Dict[str, str]:
    """Exactly one valid scenario must be the default."""
    errors: Dict[str, str] = {}
    kept = valid_scenarios(scenarios)
    if not kept:
        errors["scenarios"] = "Pelo menos um cenário válido é obrigatório"
        return errors
    defaults = [s for s in kept if s.is_default]
    if not defaults:
        errors["scenarios"] = DEFAULT_SCENARIO_MISSING
    elif len(defaults) > 1:
        errors["scenarios"] = DEFAULT_SCENARIO_DUPLICATED
    return errors


def validate_plan(
    name: str,
    description: str,
    fiscal_year_id: str,
    cost_center_id: str,
    categories: Sequence[BudgetPlanCategory],
    scenarios: Sequence[BudgetScenario],
) -> Dict[str, str]:
    """Field-level checks for a budget plan submission. Never raises."""
    errors: Dict[str, str] = {}
    if not (name or "").strip():
        errors["name"] = "Nome é obrigatório"
    if not (description or "").strip():
        errors["description"] = "Descrição é obrigatória"
    if not fiscal_year_id:
        errors["fiscal_year_id"] = "Exercício orçamentário é obrigatório"
    if not cost_center_id:
        errors["cost_center_id"] = "Centro de custo é obrigatório"
    if not valid_categories(categories):
        errors["categories"] = "Pelo menos uma categoria válida é obrigatória"
    errors.update(validate_scenarios(scenarios))
    return errors
