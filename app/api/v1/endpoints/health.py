from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.core.config import Settings, get_settings
from app.db.dependencies import get_store
from app.db.store import InMemoryStore

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    project: str
    store: str


@router.get("", response_model=HealthResponse)
def health_check(
    store: InMemoryStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """Report the service and store state."""
    return HealthResponse(
        status="healthy",
        project=settings.project_name,
        store=f"in-memory ({len(store.cost_centers)} cost centers, {len(store.workflows)} workflows)",
    )


@router.get("/live", response_model=dict)
def liveness_check():
    """Kubernetes liveness probe."""
    return {"status": "alive"}
