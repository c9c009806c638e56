"""Cost center service: tree maintenance, queries and budget rollups."""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Set

import structlog

from app.core.errors import BusinessRuleError, NotFoundError, PayloadValidationError
from app.db.store import InMemoryStore
from app.models.cost_center import CostCenter
from app.domain.cost_centers.enums import CostCenterStatus
from app.domain.cost_centers.hierarchy import (
    BudgetRollup,
    CostCenterNode,
    build_hierarchy,
    derive_level_and_path,
    descendant_ids,
    rollup,
)

logger = structlog.get_logger()

UPDATABLE_FIELDS = {
    "code",
    "name",
    "description",
    "department",
    "manager",
    "budget",
    "spent",
    "allocated_budget",
    "inherited_budget",
    "status",
}
MONEY_FIELDS = {"budget", "spent", "allocated_budget", "inherited_budget"}


def validate_cost_center(data: Dict[str, Any]) -> Dict[str, str]:
    """Field-level checks for a cost center payload. Never raises."""
    errors: Dict[str, str] = {}
    if not str(data.get("code") or "").strip():
        errors["code"] = "Código é obrigatório"
    if not str(data.get("name") or "").strip():
        errors["name"] = "Nome é obrigatório"
    if not str(data.get("department") or "").strip():
        errors["department"] = "Departamento é obrigatório"
    if not str(data.get("manager") or "").strip():
        errors["manager"] = "Gestor é obrigatório"
    try:
        budget = Decimal(str(data.get("budget")))
    except InvalidOperation:
        budget = None
    if budget is None or budget.is_nan() or budget <= 0:
        errors["budget"] = "Orçamento deve ser maior que zero"
    return errors


class CostCenterService:
    """
    Maintains the cost center forest.

    Records are stored flat; ``level`` and ``path`` are recomputed from the
    chosen parent on every create/update and cascaded to descendants when
    a node moves or changes code.
    """

    def __init__(self, store: InMemoryStore):
        self.repo = store.cost_centers
        self._expanded: Set[str] = set()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_cost_center(self, company_id: Optional[str] = None, **data: Any) -> CostCenter:
        errors = validate_cost_center(data)
        parent = None
        parent_id = data.get("parent_id") or None
        if parent_id:
            parent = self.repo.get(parent_id)
            if parent is None:
                errors["parent_id"] = "Centro de custo pai não encontrado"
        code = str(data.get("code") or "").strip()
        if code and self._code_taken(code, company_id):
            errors["code"] = "Já existe um centro de custo com este código"
        if errors:
            logger.warning("Cost center rejected", errors=errors)
            raise PayloadValidationError(errors)

        level, path = derive_level_and_path(code, parent)
        budget = Decimal(str(data["budget"]))
        center = CostCenter(
            code=code,
            name=data["name"].strip(),
            description=data.get("description") or "",
            department=data["department"].strip(),
            manager=data["manager"].strip(),
            company_id=company_id,
            parent_id=parent.id if parent else None,
            level=level,
            path=path,
            budget=budget,
            spent=Decimal("0"),
            allocated_budget=budget,
            inherited_budget=Decimal("0"),
            status=CostCenterStatus(data.get("status") or CostCenterStatus.ACTIVE),
        )
        self.repo.add(center)
        logger.info("Cost center created", cost_center_id=center.id, path=center.path)
        return center

    def update_cost_center(self, center_id: str, **updates: Any) -> CostCenter:
        center = self._require(center_id)
        reparent = "parent_id" in updates
        new_parent_id = (updates.get("parent_id") or None) if reparent else center.parent_id
        # A null parent moves the node to the root; any other null is "unchanged"
        updates = {
            k: v for k, v in updates.items()
            if k in UPDATABLE_FIELDS and v is not None
        }

        errors: Dict[str, str] = {}
        merged = {
            "code": updates.get("code", center.code),
            "name": updates.get("name", center.name),
            "department": updates.get("department", center.department),
            "manager": updates.get("manager", center.manager),
            "budget": updates.get("budget", center.budget),
        }
        errors.update(validate_cost_center(merged))

        parent = None
        if new_parent_id:
            parent = self.repo.get(new_parent_id)
            if parent is None:
                errors["parent_id"] = "Centro de custo pai não encontrado"
            elif new_parent_id == center.id or new_parent_id in descendant_ids(
                center.id, self.repo.list()
            ):
                errors["parent_id"] = "Um centro de custo não pode ser filho de si mesmo ou de seus descendentes"
        new_code = str(merged["code"]).strip()
        if new_code != center.code and self._code_taken(new_code, center.company_id):
            errors["code"] = "Já existe um centro de custo com este código"
        changes: Dict[str, Any] = {}
        for key, value in updates.items():
            try:
                if key in MONEY_FIELDS:
                    value = Decimal(str(value))
                elif key == "status":
                    value = CostCenterStatus(value)
                elif isinstance(value, str):
                    value = value.strip()
            except (InvalidOperation, ValueError):
                errors[key] = "Valor inválido"
                continue
            changes[key] = value

        if errors:
            logger.warning("Cost center update rejected", cost_center_id=center_id, errors=errors)
            raise PayloadValidationError(errors)

        for key, value in changes.items():
            setattr(center, key, value)

        old_path = center.path
        center.parent_id = parent.id if parent else None
        center.level, center.path = derive_level_and_path(center.code, parent)
        center.touch()

        if center.path != old_path:
            moved = self._cascade_paths(center)
            logger.info(
                "Cost center moved",
                cost_center_id=center.id,
                old_path=old_path,
                new_path=center.path,
                descendants_updated=moved,
            )
        logger.info("Cost center updated", cost_center_id=center.id)
        return center

    def delete_cost_center(self, center_id: str) -> None:
        self._require(center_id)
        if self.get_children(center_id):
            logger.warning("Cost center delete refused: has children", cost_center_id=center_id)
            raise BusinessRuleError(
                "Não é possível excluir um centro de custo que possui centros filhos"
            )
        self.repo.remove(center_id)
        self._expanded.discard(center_id)
        logger.info("Cost center deleted", cost_center_id=center_id)

    def record_spend(self, center_id: str, amount: Decimal) -> CostCenter:
        """Add ``amount`` to the center's spent total."""
        center = self._require(center_id)
        center.spent += Decimal(str(amount))
        center.touch()
        logger.info("Spend recorded", cost_center_id=center_id, amount=str(amount))
        return center

    def toggle_expansion(self, center_id: str) -> bool:
        """Flip the UI expansion flag; returns the new value."""
        self._require(center_id)
        if center_id in self._expanded:
            self._expanded.discard(center_id)
            return False
        self._expanded.add(center_id)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_cost_centers(self, company_id: Optional[str] = None) -> List[CostCenter]:
        centers = self.repo.list(
            lambda c: company_id is None or c.company_id == company_id
        )
        return sorted(centers, key=lambda c: (c.level, c.path))

    def get_cost_center(self, center_id: str) -> Optional[CostCenter]:
        return self.repo.get(center_id)

    def hierarchy(self, company_id: Optional[str] = None) -> List[CostCenterNode]:
        return build_hierarchy(self.list_cost_centers(company_id), self._expanded)

    def get_children(self, parent_id: Optional[str]) -> List[CostCenter]:
        return self.repo.list(lambda c: c.parent_id == parent_id)

    def get_by_department(self, department: str) -> List[CostCenter]:
        return self.repo.list(lambda c: c.department == department)

    def filter_cost_centers(
        self,
        search: str = "",
        status: str = "all",
        company_id: Optional[str] = None,
    ) -> List[CostCenter]:
        centers = self.list_cost_centers(company_id)
        if search:
            term = search.lower()
            centers = [
                c for c in centers
                if term in c.name.lower() or term in c.code.lower() or term in c.manager.lower()
            ]
        if status != "all":
            centers = [c for c in centers if c.status.value == status]
        return centers

    def total_budget_by_department(self, department: str) -> Decimal:
        return sum(
            (c.budget for c in self._active_in(department)), Decimal("0")
        )

    def total_spent_by_department(self, department: str) -> Decimal:
        return sum(
            (c.spent for c in self._active_in(department)), Decimal("0")
        )

    def rollup(self, center_id: str) -> BudgetRollup:
        self._require(center_id)
        return rollup(center_id, self.repo.list())

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require(self, center_id: str) -> CostCenter:
        center = self.repo.get(center_id)
        if center is None:
            logger.warning("Cost center not found", cost_center_id=center_id)
            raise NotFoundError("Centro de custo não encontrado")
        return center

    def _code_taken(self, code: str, company_id: Optional[str]) -> bool:
        return any(
            c.code == code and c.company_id == company_id for c in self.repo.list()
        )

    def _active_in(self, department: str) -> List[CostCenter]:
        return [
            c for c in self.repo.list()
            if c.department == department and c.status == CostCenterStatus.ACTIVE
        ]

    def _cascade_paths(self, root: CostCenter) -> int:
        """Recompute level/path of every descendant of ``root``."""
        by_id = {c.id: c for c in self.repo.list()}
        updated = 0
        for child_id in descendant_ids(root.id, by_id.values()):
            child = by_id[child_id]
            child.level, child.path = derive_level_and_path(child.code, by_id[child.parent_id])
            child.touch()
            updated += 1
        return updated
