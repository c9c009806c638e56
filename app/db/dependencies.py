from functools import lru_cache
from weakref import WeakKeyDictionary

from fastapi import Depends

from app.core.config import Settings, get_settings
from app.db.store import InMemoryStore
from app.domain.approvals.service import ApprovalService
from app.domain.balance_sheet.service import BalanceSheetService
from app.domain.cost_centers.service import CostCenterService
from app.domain.planning.service import PlanningService


@lru_cache
def get_store() -> InMemoryStore:
    """
    Dependency that provides the process-wide store.

    Usage:
        @app.get("/")
        def endpoint(store: InMemoryStore = Depends(get_store)):
            ...
    """
    return InMemoryStore()


# The cost center service keeps the expanded-node set, so one per live store
_cost_center_services: "WeakKeyDictionary[InMemoryStore, CostCenterService]" = WeakKeyDictionary()


def _cost_center_service_for(store: InMemoryStore) -> CostCenterService:
    service = _cost_center_services.get(store)
    if service is None:
        service = _cost_center_services[store] = CostCenterService(store)
    return service


def get_cost_center_service(store: InMemoryStore = Depends(get_store)) -> CostCenterService:
    return _cost_center_service_for(store)


def get_approval_service(store: InMemoryStore = Depends(get_store)) -> ApprovalService:
    return ApprovalService(store)


def get_planning_service(
    store: InMemoryStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> PlanningService:
    return PlanningService(
        store,
        max_horizon=settings.forecast_max_horizon,
        variance_threshold_pct=settings.variance_threshold_pct,
        default_period_unit=settings.forecast_period_unit,
    )


def get_balance_sheet_service(store: InMemoryStore = Depends(get_store)) -> BalanceSheetService:
    return BalanceSheetService(store)
