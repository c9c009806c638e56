from fastapi import APIRouter

from .endpoints import health, cost_centers, approvals, planning, balance_sheets

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(cost_centers.router, prefix="/cost-centers", tags=["cost-centers"])
api_router.include_router(approvals.router, prefix="/approvals", tags=["approvals"])
api_router.include_router(planning.router, prefix="/planning", tags=["planning"])
api_router.include_router(balance_sheets.router, prefix="/balance-sheets", tags=["balance-sheets"])
