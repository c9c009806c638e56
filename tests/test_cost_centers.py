"""Tests for the cost center tree and budget rollups."""

import pytest
from decimal import Decimal

from app.core.errors import BusinessRuleError, NotFoundError, PayloadValidationError
from app.db.store import InMemoryStore
from app.domain.cost_centers.enums import CostCenterStatus, UtilizationLevel
from app.domain.cost_centers.hierarchy import (
    build_hierarchy,
    compute_utilization,
    utilization_level,
)
from app.domain.cost_centers.service import CostCenterService, validate_cost_center
from app.models.base import utcnow
from app.models.cost_center import CostCenter


def _payload(code: str, **overrides):
    data = {
        "code": code,
        "name": f"Centro {code}",
        "department": "Operações",
        "manager": "Ana",
        "budget": Decimal("1000"),
    }
    data.update(overrides)
    return data


@pytest.fixture
def service() -> CostCenterService:
    return CostCenterService(InMemoryStore())


@pytest.fixture
def tree(service: CostCenterService):
    """ADM → FIN → CTB, plus a second root OPS."""
    adm = service.create_cost_center(company_id="1", **_payload("ADM"))
    fin = service.create_cost_center(company_id="1", **_payload("FIN", parent_id=adm.id))
    ctb = service.create_cost_center(company_id="1", **_payload("CTB", parent_id=fin.id))
    ops = service.create_cost_center(company_id="1", **_payload("OPS", department="Produção"))
    return adm, fin, ctb, ops


class TestValidation:
    """Field-level validation map."""

    def test_valid_payload_has_no_errors(self):
        assert validate_cost_center(_payload("ADM")) == {}

    def test_missing_fields_are_reported(self):
        errors = validate_cost_center({"budget": 0})
        assert set(errors) == {"code", "name", "department", "manager", "budget"}

    @pytest.mark.parametrize("budget", [None, "abc", "NaN", "-5"])
    def test_unusable_budget(self, budget):
        assert "budget" in validate_cost_center(_payload("ADM", budget=budget))

    def test_create_raises_with_error_map(self, service):
        with pytest.raises(PayloadValidationError) as exc:
            service.create_cost_center(**_payload("ADM", budget=Decimal("0")))
        assert "budget" in exc.value.errors

    def test_duplicate_code_in_company(self, service):
        service.create_cost_center(company_id="1", **_payload("ADM"))
        with pytest.raises(PayloadValidationError) as exc:
            service.create_cost_center(company_id="1", **_payload("ADM"))
        assert "code" in exc.value.errors

    def test_unknown_parent(self, service):
        with pytest.raises(PayloadValidationError) as exc:
            service.create_cost_center(**_payload("ADM", parent_id="missing"))
        assert "parent_id" in exc.value.errors


class TestLevelAndPath:
    """level = parent.level + 1, path = parent.path/code."""

    def test_root_and_descendants(self, tree):
        adm, fin, ctb, ops = tree
        assert (adm.level, adm.path) == (0, "ADM")
        assert (fin.level, fin.path) == (1, "ADM/FIN")
        assert (ctb.level, ctb.path) == (2, "ADM/FIN/CTB")
        assert (ops.level, ops.path) == (0, "OPS")

    def test_reparent_cascades_to_descendants(self, service, tree):
        adm, fin, ctb, ops = tree
        service.update_cost_center(fin.id, parent_id=ops.id)
        assert fin.path == "OPS/FIN"
        assert (ctb.level, ctb.path) == (2, "OPS/FIN/CTB")

    def test_move_to_root(self, service, tree):
        adm, fin, ctb, ops = tree
        service.update_cost_center(fin.id, parent_id=None)
        assert (fin.level, fin.path) == (0, "FIN")
        assert (ctb.level, ctb.path) == (1, "FIN/CTB")

    def test_code_change_cascades(self, service, tree):
        adm, fin, ctb, ops = tree
        service.update_cost_center(adm.id, code="DIR")
        assert fin.path == "DIR/FIN"
        assert ctb.path == "DIR/FIN/CTB"

    def test_cannot_become_own_descendant(self, service, tree):
        adm, fin, ctb, ops = tree
        with pytest.raises(PayloadValidationError) as exc:
            service.update_cost_center(adm.id, parent_id=ctb.id)
        assert "parent_id" in exc.value.errors
        with pytest.raises(PayloadValidationError):
            service.update_cost_center(adm.id, parent_id=adm.id)
        assert adm.parent_id is None

    def test_null_fields_are_ignored(self, service, tree):
        adm, fin, ctb, ops = tree
        service.update_cost_center(adm.id, code="DIR", spent=None, status=None)
        assert (adm.code, adm.path) == ("DIR", "DIR")
        assert adm.spent == Decimal("0")
        assert adm.status == CostCenterStatus.ACTIVE
        assert ctb.path == "DIR/FIN/CTB"

    def test_bad_value_leaves_record_untouched(self, service, tree):
        adm, fin, ctb, ops = tree
        with pytest.raises(PayloadValidationError) as exc:
            service.update_cost_center(adm.id, code="DIR", spent="muito")
        assert "spent" in exc.value.errors
        assert (adm.code, adm.path) == ("ADM", "ADM")
        assert fin.path == "ADM/FIN"


class TestHierarchy:

    def test_forest_shape(self, service, tree):
        adm, fin, ctb, ops = tree
        roots = service.hierarchy("1")
        assert [r.id for r in roots] == [adm.id, ops.id]
        assert [c.id for c in roots[0].children] == [fin.id]
        assert [c.id for c in roots[0].children[0].children] == [ctb.id]

    def test_orphans_are_dropped(self):
        root = CostCenter(code="A", name="A", budget=Decimal("1"))
        orphan = CostCenter(code="B", name="B", parent_id="ghost", budget=Decimal("1"))
        roots = build_hierarchy([root, orphan])
        assert [r.id for r in roots] == [root.id]
        assert roots[0].children == []

    def test_toggle_expansion(self, service, tree):
        adm = tree[0]
        assert service.toggle_expansion(adm.id) is True
        assert service.hierarchy("1")[0].is_expanded is True
        assert service.toggle_expansion(adm.id) is False

    def test_children_and_department(self, service, tree):
        adm, fin, ctb, ops = tree
        assert service.get_children(adm.id) == [fin]
        assert ops in service.get_by_department("Produção")


class TestUtilization:

    @pytest.mark.parametrize(
        "spent, expected",
        [
            ("500", UtilizationLevel.OK),
            ("750", UtilizationLevel.OK),
            ("800", UtilizationLevel.WARNING),
            ("950", UtilizationLevel.CRITICAL),
        ],
    )
    def test_levels(self, spent, expected):
        center = CostCenter(code="A", budget=Decimal("1000"), spent=Decimal(spent))
        assert utilization_level(compute_utilization(center)) == expected

    def test_zero_budget_is_undefined(self):
        center = CostCenter(code="A", budget=Decimal("0"), spent=Decimal("10"))
        assert compute_utilization(center) is None
        assert utilization_level(None) is None

    def test_rollup_over_subtree(self, service, tree):
        adm, fin, ctb, ops = tree
        service.record_spend(fin.id, Decimal("900"))
        service.record_spend(ctb.id, Decimal("1000"))
        result = service.rollup(adm.id)
        assert result.node_count == 3
        assert result.total_budget == Decimal("3000")
        assert result.total_spent == Decimal("1900")
        assert result.utilization == pytest.approx(1900 / 3000)
        assert result.level == UtilizationLevel.OK

    def test_department_totals_only_count_active(self, service, tree):
        adm, fin, ctb, ops = tree
        service.update_cost_center(ctb.id, status=CostCenterStatus.INACTIVE)
        assert service.total_budget_by_department("Operações") == Decimal("2000")
        assert service.total_spent_by_department("Operações") == Decimal("0")


class TestDelete:

    def test_parent_with_children_is_kept(self, service, tree):
        adm = tree[0]
        with pytest.raises(BusinessRuleError, match="centros filhos"):
            service.delete_cost_center(adm.id)
        assert service.get_cost_center(adm.id) is adm

    def test_leaf_is_deleted(self, service, tree):
        ctb = tree[2]
        service.delete_cost_center(ctb.id)
        assert service.get_cost_center(ctb.id) is None

    def test_unknown_id(self, service):
        with pytest.raises(NotFoundError):
            service.delete_cost_center("missing")


def test_filter_by_search_and_status(service, tree):
    adm, fin, ctb, ops = tree
    service.update_cost_center(ops.id, status=CostCenterStatus.INACTIVE)
    assert service.filter_cost_centers(search="fin") == [fin]
    assert service.filter_cost_centers(status="inactive") == [ops]
    assert len(service.filter_cost_centers(company_id="1")) == 4


def test_timestamps_are_naive_utc():
    center = CostCenter(code="ADM")
    before = utcnow()
    center.touch()
    assert center.updated_at.tzinfo is None
    assert center.updated_at >= before
