from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..schemas.asset_health import HealthDashboard, HealthMetrics, HealthSnapshotResponse
from ..services.asset_health import build_health_dashboard, compute_asset_health, get_asset_health_history
from ..services.errors import AssetNotFoundError
from ..services.repository import Repository


router = APIRouter(prefix="/api/asset-health", tags=["asset-health"])


# ---------- DASHBOARD ----------
# Declared before /{asset_id} so "dashboard" is not captured as an id
@router.get("/dashboard", response_model=HealthDashboard)
def get_health_dashboard(db: Session = Depends(get_db)):
    return build_health_dashboard(Repository(db))


@router.get("/{asset_id}", response_model=HealthMetrics)
def get_asset_health(asset_id: str, db: Session = Depends(get_db)):
    try:
        return compute_asset_health(Repository(db), asset_id)
    except AssetNotFoundError:
        raise HTTPException(status_code=404, detail="Asset not found")


@router.get("/{asset_id}/history", response_model=List[HealthSnapshotResponse])
def get_asset_health_history_route(
    asset_id: str,
    days: int = Query(default=settings.health_history_days_default, ge=0),
    db: Session = Depends(get_db),
):
    return get_asset_health_history(Repository(db), asset_id, days)
