from typing import List, Optional

from .base import CamelModel, Timestamp


class HealthMetrics(CamelModel):
    reuse_rate: float = 0.0
    defect_density: float = 0.0
    change_frequency: float = 0.0
    regression_cost: float = 0.0
    maintenance_burden: float = 0.0
    health_score: float = 0.0


class HealthSnapshotResponse(HealthMetrics):
    id: str
    asset_id: str
    calculated_at: Timestamp


class TypeCount(CamelModel):
    type: Optional[str] = None
    count: int


class MaturityCount(CamelModel):
    maturity: Optional[str] = None
    count: int


class TopReusedAsset(CamelModel):
    id: str
    name: str
    type: Optional[str] = None
    reuse_count: int


class AssetHealthRow(CamelModel):
    id: str
    name: str
    type: Optional[str] = None
    maturity: Optional[str] = None
    health_score: float
    reuse_rate: float
    defect_density: float
    change_frequency: float


class HealthDashboard(CamelModel):
    total_assets: int
    assets_by_type: List[TypeCount]
    assets_by_maturity: List[MaturityCount]
    top_reused_assets: List[TopReusedAsset]
    assets_health: List[AssetHealthRow]
