"""In-memory repositories.

Every aggregate lives in a flat, insertion-ordered map keyed by id. Nothing
survives a process restart.
"""

from typing import Callable, Dict, Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")


class Repository(Generic[T]):
    """Id-keyed arena for one record type."""

    def __init__(self, entity_name: str, initial: Optional[Iterable[T]] = None):
        self.entity_name = entity_name
        self._items: Dict[str, T] = {}
        for item in initial or []:
            self.add(item)

    def __len__(self) -> int:
        return len(self._items)

    def add(self, item: T) -> T:
        self._items[item.id] = item
        return item

    def get(self, item_id: Optional[str]) -> Optional[T]:
        if item_id is None:
            return None
        return self._items.get(item_id)

    def list(self, predicate: Optional[Callable[[T], bool]] = None) -> List[T]:
        items = list(self._items.values())
        if predicate is None:
            return items
        return [item for item in items if predicate(item)]

    def remove(self, item_id: str) -> Optional[T]:
        return self._items.pop(item_id, None)

    def remove_where(self, predicate: Callable[[T], bool]) -> int:
        doomed = [k for k, v in self._items.items() if predicate(v)]
        for key in doomed:
            del self._items[key]
        return len(doomed)


class InMemoryStore:
    """All repositories of the application, seeded from injected records."""

    def __init__(
        self,
        cost_centers=None,
        workflows=None,
        templates=None,
        budget_plans=None,
        forecasts=None,
        kpis=None,
        accounts=None,
        balance_sheets=None,
        balance_sheet_items=None,
    ):
        self.cost_centers = Repository("CostCenter", cost_centers)
        self.workflows = Repository("ApprovalWorkflow", workflows)
        self.templates = Repository("ApprovalTemplate", templates)
        self.budget_plans = Repository("BudgetPlan", budget_plans)
        self.forecasts = Repository("Forecast", forecasts)
        self.kpis = Repository("KPI", kpis)
        self.accounts = Repository("AccountingAccount", accounts)
        self.balance_sheets = Repository("BalanceSheet", balance_sheets)
        self.balance_sheet_items = Repository("BalanceSheetItem", balance_sheet_items)
