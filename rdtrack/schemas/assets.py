from typing import List, Optional

from pydantic import field_validator

from .base import CamelModel, Timestamp, blank_to_none


class AssetBase(CamelModel):
    name: str
    type: str
    maturity: Optional[str] = None
    owner_id: Optional[str] = None
    owner_name: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None

    @field_validator("maturity", "owner_id", "owner_name", "description", mode="before")
    @classmethod
    def empty_str_to_none(cls, v):
        return blank_to_none(v)


class AssetCreate(AssetBase):
    id: Optional[str] = None


class AssetUpdate(CamelModel):
    name: Optional[str] = None
    type: Optional[str] = None
    maturity: Optional[str] = None
    owner_id: Optional[str] = None
    owner_name: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None

    @field_validator("owner_id", "owner_name", "description", mode="before")
    @classmethod
    def empty_str_to_none(cls, v):
        return blank_to_none(v)


class AssetVersionCreate(CamelModel):
    id: Optional[str] = None
    version: str = ""
    change_reason: Optional[str] = None
    quality_changes: Optional[str] = None
    technical_debt: Optional[str] = None
    changed_by: Optional[str] = None
    quality_score: Optional[float] = None
    defect_density: Optional[float] = None
    change_frequency: Optional[float] = None
    regression_cost: Optional[float] = None
    maintenance_burden: Optional[float] = None
    version_date: Optional[str] = None

    @field_validator(
        "quality_score",
        "defect_density",
        "change_frequency",
        "regression_cost",
        "maintenance_burden",
        "version_date",
        mode="before",
    )
    @classmethod
    def empty_str_to_none(cls, v):
        return blank_to_none(v)


class ProjectRelationCreate(CamelModel):
    id: Optional[str] = None
    asset_id: str
    project_id: str
    relation_type: Optional[str] = "used"
    version: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("relation_type", "version", "notes", mode="before")
    @classmethod
    def empty_str_to_none(cls, v):
        return blank_to_none(v)


class AssetVersionResponse(CamelModel):
    id: str
    version: str
    change_reason: Optional[str] = None
    quality_changes: Optional[str] = None
    technical_debt: Optional[str] = None
    changed_by: Optional[str] = None
    quality_score: Optional[float] = None
    defect_density: Optional[float] = None
    change_frequency: Optional[float] = None
    regression_cost: Optional[float] = None
    maintenance_burden: Optional[float] = None
    version_date: Timestamp


class ProjectRelationResponse(CamelModel):
    id: str
    asset_id: str
    project_id: str
    project_name: Optional[str] = None
    asset_name: Optional[str] = None
    asset_type: Optional[str] = None
    relation_type: str
    version: Optional[str] = None
    notes: Optional[str] = None
    created_at: Timestamp


class AssetSummary(CamelModel):
    id: str
    name: str
    type: str
    maturity: Optional[str] = None
    owner_id: Optional[str] = None
    owner_name: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = []
    reuse_count: int = 0
    related_project_ids: List[str] = []
    created_at: Timestamp
    updated_at: Timestamp
    version_count: int = 0
    latest_version: Optional[str] = None

    @field_validator("tags", "related_project_ids", mode="before")
    @classmethod
    def none_to_list(cls, v):
        return v or []


class AssetDetail(AssetSummary):
    versions: List[AssetVersionResponse] = []
    project_relations: List[ProjectRelationResponse] = []
