"""Tests for the HTTP API."""

import pytest

from fastapi.testclient import TestClient

from app.db.dependencies import _cost_center_service_for, get_store
from app.db.store import InMemoryStore
from app.domain.balance_sheet.enums import AccountType
from app.main import app
from app.models.balance_sheet import AccountingAccount

HEADERS = {
    "X-User-Id": "u1",
    "X-User-Name": "Usuario 1",
    "X-User-Role": "manager",
    "X-Company-Id": "1",
}


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore(
        accounts=[
            AccountingAccount("1.1.1", "Caixa", AccountType.ASSET, "current-assets", "1"),
            AccountingAccount("2.1.1", "Fornecedores", AccountType.LIABILITY, "current-liabilities", "1"),
            AccountingAccount("3.1.1", "Capital Social", AccountType.EQUITY, "capital", "1"),
        ]
    )


@pytest.fixture
def client(store: InMemoryStore):
    app.dependency_overrides[get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_missing_user_header(client):
    response = client.get("/api/v1/cost-centers")
    assert response.status_code == 401


class TestCostCenterAPI:

    def _create(self, client, code, parent_id=None):
        return client.post(
            "/api/v1/cost-centers",
            json={
                "code": code,
                "name": f"Centro {code}",
                "department": "Financeiro",
                "manager": "Ana",
                "budget": "1000",
                "parent_id": parent_id,
            },
            headers=HEADERS,
        )

    def test_create_and_hierarchy(self, client):
        root = self._create(client, "ADM")
        assert root.status_code == 201
        child = self._create(client, "FIN", parent_id=root.json()["id"])
        assert child.json()["path"] == "ADM/FIN"
        assert child.json()["company_id"] == "1"

        client.post(f"/api/v1/cost-centers/{child.json()['id']}/spend", json={"amount": "800"}, headers=HEADERS)
        tree = client.get("/api/v1/cost-centers/hierarchy", headers=HEADERS).json()
        assert len(tree) == 1
        node = tree[0]["children"][0]
        assert node["utilization"] == pytest.approx(0.8)
        assert node["utilization_level"] == "warning"

    def test_validation_error_map(self, client):
        response = client.post(
            "/api/v1/cost-centers",
            json={"code": "X", "name": "X", "department": "", "manager": "", "budget": "0"},
            headers=HEADERS,
        )
        assert response.status_code == 422
        errors = response.json()["detail"]["errors"]
        assert {"department", "manager", "budget"} <= set(errors)

    def test_delete_parent_refused(self, client):
        root = self._create(client, "ADM").json()
        self._create(client, "FIN", parent_id=root["id"])
        response = client.delete(f"/api/v1/cost-centers/{root['id']}", headers=HEADERS)
        assert response.status_code == 400

    def test_not_found(self, client):
        response = client.get("/api/v1/cost-centers/missing", headers=HEADERS)
        assert response.status_code == 404

    def test_patch_with_null_field(self, client):
        root = self._create(client, "A").json()
        response = client.patch(
            f"/api/v1/cost-centers/{root['id']}",
            json={"code": "B", "spent": None},
            headers=HEADERS,
        )
        assert response.status_code == 200
        body = client.get(f"/api/v1/cost-centers/{root['id']}", headers=HEADERS).json()
        assert (body["code"], body["path"], body["level"]) == ("B", "B", 0)

    def test_service_kept_per_store(self, store):
        assert _cost_center_service_for(store) is _cost_center_service_for(store)
        assert _cost_center_service_for(store) is not _cost_center_service_for(InMemoryStore())


class TestApprovalAPI:

    def _create(self, client):
        return client.post(
            "/api/v1/approvals",
            json={
                "type": "expense",
                "title": "Compra",
                "amount": "500",
                "steps": [{"step_number": 1, "approver_ids": ["u1"], "required_approvals": 1}],
            },
            headers=HEADERS,
        ).json()

    def test_approve_single_step(self, client):
        workflow = self._create(client)
        step_id = workflow["steps"][0]["id"]
        response = client.post(
            f"/api/v1/approvals/{workflow['id']}/steps/{step_id}/approve",
            json={"comments": "ok"},
            headers=HEADERS,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "approved"
        assert body["steps"][0]["status"] == "approved"

    def test_non_approver_is_forbidden(self, client):
        workflow = self._create(client)
        step_id = workflow["steps"][0]["id"]
        response = client.post(
            f"/api/v1/approvals/{workflow['id']}/steps/{step_id}/approve",
            json={},
            headers={**HEADERS, "X-User-Id": "u9"},
        )
        assert response.status_code == 403

    def test_pending_queue(self, client):
        workflow = self._create(client)
        pending = client.get("/api/v1/approvals/pending", headers=HEADERS).json()
        assert [w["id"] for w in pending] == [workflow["id"]]

    def test_queues_scoped_to_company(self, client):
        self._create(client)
        other = {**HEADERS, "X-Company-Id": "2"}
        assert client.get("/api/v1/approvals/pending", headers=other).json() == []
        assert client.get("/api/v1/approvals/stats", headers=other).json()["total"] == 0
        assert client.get("/api/v1/approvals/stats", headers=HEADERS).json()["total"] == 1

    def test_patch_with_null_title(self, client):
        workflow = self._create(client)
        response = client.patch(
            f"/api/v1/approvals/{workflow['id']}",
            json={"title": None, "priority": None},
            headers=HEADERS,
        )
        assert response.status_code == 200
        assert response.json()["title"] == "Compra"
        listed = client.get("/api/v1/approvals", params={"search": "compra"}, headers=HEADERS)
        assert listed.status_code == 200
        assert [w["id"] for w in listed.json()] == [workflow["id"]]

    def test_approve_then_reject_second_step(self, client):
        workflow = client.post(
            "/api/v1/approvals",
            json={
                "type": "expense",
                "title": "Compra de servidores",
                "amount": "50000",
                "steps": [
                    {"step_number": 1, "approver_ids": ["u1"]},
                    {"step_number": 2, "approver_ids": ["u2"]},
                ],
            },
            headers=HEADERS,
        ).json()
        first, second = (s["id"] for s in workflow["steps"])

        response = client.post(
            f"/api/v1/approvals/{workflow['id']}/steps/{first}/approve",
            json={},
            headers=HEADERS,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "pending"
        assert response.json()["current_step"] == 2

        director = {**HEADERS, "X-User-Id": "u2", "X-User-Name": "Diretor"}
        response = client.post(
            f"/api/v1/approvals/{workflow['id']}/steps/{second}/reject",
            json={"comments": "Fora do orçamento"},
            headers=director,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "rejected"
        assert [s["status"] for s in body["steps"]] == ["approved", "rejected"]
        assert body["steps"][1]["approvals"][0]["approver_name"] == "Diretor"


class TestPlanningAPI:

    def test_linear_forecast(self, client):
        response = client.post(
            "/api/v1/planning/forecasts",
            json={
                "name": "TI",
                "description": "Despesas",
                "method": "linear",
                "horizon": 2,
                "base_data": [
                    {"period": "2024-01", "actual": 100},
                    {"period": "2024-02", "actual": 120},
                    {"period": "2024-03", "actual": 140},
                ],
            },
            headers=HEADERS,
        )
        assert response.status_code == 201
        projections = response.json()["projections"]
        assert [p["projected"] for p in projections] == pytest.approx([160, 180])

        response = client.patch(
            f"/api/v1/planning/forecasts/{response.json()['id']}",
            json={"method": None, "period": None, "horizon": 3},
            headers=HEADERS,
        )
        assert response.status_code == 200
        assert response.json()["method"] == "linear"
        assert [p["projected"] for p in response.json()["projections"]] == pytest.approx([160, 180, 200])

    def test_kpi_patch_with_null_trend(self, client):
        kpi = client.post(
            "/api/v1/planning/kpis",
            json={"name": "Margem EBITDA", "target": 25, "current": 22.5, "trend": "up"},
            headers=HEADERS,
        ).json()
        response = client.patch(
            f"/api/v1/planning/kpis/{kpi['id']}",
            json={"trend": None, "current": 23},
            headers=HEADERS,
        )
        assert response.status_code == 200
        assert response.json()["trend"] == "up"
        assert response.json()["current"] == 23

    def test_plan_with_two_defaults(self, client):
        response = client.post(
            "/api/v1/planning/plans",
            json={
                "name": "Plano",
                "description": "Anual",
                "fiscal_year_id": "fy",
                "cost_center_id": "cc",
                "categories": [{"name": "Pessoal", "planned_amount": "1000"}],
                "scenarios": [
                    {"name": "A", "description": "a", "type": "optimistic", "adjustment_factor": "1.1", "is_default": True},
                    {"name": "B", "description": "b", "type": "realistic", "adjustment_factor": "1.0", "is_default": True},
                ],
            },
            headers=HEADERS,
        )
        assert response.status_code == 422
        assert response.json()["detail"]["errors"]["scenarios"] == "Apenas um cenário pode ser marcado como padrão"

    def test_variance(self, client):
        response = client.post(
            "/api/v1/planning/variance",
            json={"planned": "1000", "actual": "1200"},
            headers=HEADERS,
        )
        assert response.json()["status"] == "unfavorable"


class TestBalanceSheetAPI:

    def test_lifecycle_and_summary(self, client, store):
        accounts = {a.code: a.id for a in store.accounts.list()}
        sheet = client.post(
            "/api/v1/balance-sheets",
            json={"fiscal_year_id": "fy", "period": "2024-Q1", "period_type": "quarterly"},
            headers=HEADERS,
        ).json()
        for code, amount in (("1.1.1", "930000"), ("2.1.1", "420000"), ("3.1.1", "510000")):
            response = client.post(
                f"/api/v1/balance-sheets/{sheet['id']}/items",
                json={"account_id": accounts[code], "amount": amount},
                headers=HEADERS,
            )
            assert response.status_code == 201

        summary = client.get(f"/api/v1/balance-sheets/{sheet['id']}/summary", headers=HEADERS).json()
        assert summary["is_balanced"] is True
        assert summary["return_on_assets"] == pytest.approx(0)

        assert client.post(f"/api/v1/balance-sheets/{sheet['id']}/publish", headers=HEADERS).status_code == 200
        response = client.delete(f"/api/v1/balance-sheets/{sheet['id']}", headers=HEADERS)
        assert response.status_code == 400
        assert response.json()["detail"] == "Apenas balanços em rascunho podem ser excluídos"

    def test_patch_with_null_period_type(self, client):
        sheet = client.post(
            "/api/v1/balance-sheets",
            json={"fiscal_year_id": "fy", "period": "2024-Q1", "period_type": "quarterly"},
            headers=HEADERS,
        ).json()
        response = client.patch(
            f"/api/v1/balance-sheets/{sheet['id']}",
            json={"period_type": None, "notes": "Revisado"},
            headers=HEADERS,
        )
        assert response.status_code == 200
        assert response.json()["period_type"] == "quarterly"
        assert response.json()["notes"] == "Revisado"

    def test_create_without_company(self, client):
        headers = {k: v for k, v in HEADERS.items() if k != "X-Company-Id"}
        response = client.post(
            "/api/v1/balance-sheets",
            json={"fiscal_year_id": "fy", "period": "2024-Q1", "period_type": "quarterly"},
            headers=headers,
        )
        assert response.status_code == 400
