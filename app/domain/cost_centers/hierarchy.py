"""Cost center tree derivation and utilization math."""

from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Set, Tuple

from app.models.cost_center import CostCenter
from app.domain.cost_centers.enums import UtilizationLevel

CRITICAL_UTILIZATION = 0.90
WARNING_UTILIZATION = 0.75


@dataclass
class CostCenterNode:
    """Read-only view of a cost center with its derived children."""
    center: CostCenter
    children: List["CostCenterNode"] = field(default_factory=list)
    is_expanded: bool = False

    @property
    def id(self) -> str:
        return self.center.id


@dataclass
class BudgetRollup:
    cost_center_id: str
    node_count: int
    total_budget: Decimal
    total_spent: Decimal
    utilization: Optional[float]
    level: Optional[UtilizationLevel]


def group_by_parent(centers: Iterable[CostCenter]) -> Dict[Optional[str], List[CostCenter]]:
    """Children index keyed by parent id (``None`` for roots)."""
    index: Dict[Optional[str], List[CostCenter]] = defaultdict(list)
    for center in centers:
        index[center.parent_id].append(center)
    return index


def build_hierarchy(
    centers: Iterable[CostCenter],
    expanded: Optional[Set[str]] = None,
) -> List[CostCenterNode]:
    """
    Build the forest from a flat list.

    Roots are the centers without a parent. A center whose parent id is not
    in the list is dropped, as is anything only reachable through a cycle.

    Args:
        centers: Flat cost center records
        expanded: Ids whose UI expansion flag is set

    Returns:
        Root nodes in input order
    """
    centers = list(centers)
    expanded = expanded or set()
    index = group_by_parent(centers)
    seen: Set[str] = set()

    def attach(center: CostCenter) -> CostCenterNode:
        seen.add(center.id)
        node = CostCenterNode(center=center, is_expanded=center.id in expanded)
        for child in index.get(center.id, []):
            if child.id not in seen:
                node.children.append(attach(child))
        return node

    return [attach(c) for c in index.get(None, [])]


def derive_level_and_path(code: str, parent: Optional[CostCenter]) -> Tuple[int, str]:
    """Level and slash-joined code path for a node placed under ``parent``."""
    if parent is None:
        return 0, code
    return parent.level + 1, f"{parent.path}/{code}"


def descendant_ids(center_id: str, centers: Iterable[CostCenter]) -> List[str]:
    """All ids below ``center_id``, breadth first."""
    index = group_by_parent(centers)
    result: List[str] = []
    queue = [center_id]
    visited = {center_id}
    while queue:
        current = queue.pop(0)
        for child in index.get(current, []):
            if child.id not in visited:
                visited.add(child.id)
                result.append(child.id)
                queue.append(child.id)
    return result


def compute_utilization(center: CostCenter) -> Optional[float]:
    """
    Spent over budget as a fraction.

    Returns None when the budget is zero or negative; utilization is
    undefined there and must not be displayed as a number.
    """
    return _ratio(center.spent, center.budget)


def utilization_level(utilization: Optional[float]) -> Optional[UtilizationLevel]:
    if utilization is None:
        return None
    if utilization > CRITICAL_UTILIZATION:
        return UtilizationLevel.CRITICAL
    if utilization > WARNING_UTILIZATION:
        return UtilizationLevel.WARNING
    return UtilizationLevel.OK


def rollup(center_id: str, centers: Iterable[CostCenter]) -> BudgetRollup:
    """Budget and spend totals over the subtree rooted at ``center_id``."""
    centers = list(centers)
    by_id = {c.id: c for c in centers}
    ids = [center_id] + descendant_ids(center_id, centers)
    total_budget = sum((by_id[i].budget for i in ids), Decimal("0"))
    total_spent = sum((by_id[i].spent for i in ids), Decimal("0"))
    utilization = _ratio(total_spent, total_budget)
    return BudgetRollup(
        cost_center_id=center_id,
        node_count=len(ids),
        total_budget=total_budget,
        total_spent=total_spent,
        utilization=utilization,
        level=utilization_level(utilization),
    )


def _ratio(numerator: Decimal, denominator: Decimal) -> Optional[float]:
    if denominator <= 0:
        return None
    return float(Decimal(numerator) / Decimal(denominator))
