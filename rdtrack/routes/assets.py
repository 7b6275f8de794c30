from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, selectinload

from ..db import get_db
from ..models.models import Asset, AssetProjectRelation
from ..schemas.assets import (
    AssetCreate,
    AssetDetail,
    AssetSummary,
    AssetUpdate,
    AssetVersionCreate,
    AssetVersionResponse,
    ProjectRelationCreate,
    ProjectRelationResponse,
)
from ..services.asset_service import (
    add_asset_version,
    create_asset,
    latest_version_label,
    update_asset,
    upsert_project_relation,
)
from ..services.errors import NotFoundError
from ..services.repository import Repository


router = APIRouter(prefix="/api/assets", tags=["assets"])


def _serialize_asset(asset: Asset) -> AssetSummary:
    versions = asset.versions or []
    return AssetSummary(
        id=asset.id,
        name=asset.name,
        type=asset.type,
        maturity=asset.maturity,
        owner_id=asset.owner_id,
        owner_name=asset.owner_name,
        description=asset.description,
        tags=asset.tags,
        reuse_count=asset.reuse_count or 0,
        related_project_ids=asset.related_project_ids,
        created_at=asset.created_at,
        updated_at=asset.updated_at,
        version_count=len(versions),
        latest_version=latest_version_label(asset),
    )


def _serialize_relation(relation: AssetProjectRelation) -> ProjectRelationResponse:
    return ProjectRelationResponse(
        id=relation.id,
        asset_id=relation.asset_id,
        project_id=relation.project_id,
        project_name=relation.project.project_name if relation.project else None,
        asset_name=relation.asset.name if relation.asset else None,
        asset_type=relation.asset.type if relation.asset else None,
        relation_type=relation.relation_type,
        version=relation.version,
        notes=relation.notes,
        created_at=relation.created_at,
    )


@router.get("", response_model=List[AssetSummary])
def list_assets(db: Session = Depends(get_db)):
    return [_serialize_asset(a) for a in Repository(db).list_assets()]


@router.get("/project/{project_id}", response_model=List[ProjectRelationResponse])
def list_assets_by_project(project_id: str, db: Session = Depends(get_db)):
    relations = (
        db.query(AssetProjectRelation)
        .options(selectinload(AssetProjectRelation.asset), selectinload(AssetProjectRelation.project))
        .filter(AssetProjectRelation.project_id == project_id)
        .order_by(AssetProjectRelation.created_at)
        .all()
    )
    return [_serialize_relation(r) for r in relations]


@router.get("/{asset_id}", response_model=AssetDetail)
def get_asset(asset_id: str, db: Session = Depends(get_db)):
    asset = Repository(db).get_asset(asset_id)
    if not asset:
        raise HTTPException(status_code=404, detail="Asset not found")
    summary = _serialize_asset(asset)
    versions = sorted(asset.versions, key=lambda v: v.version_date, reverse=True)
    return AssetDetail(
        **summary.model_dump(),
        versions=[AssetVersionResponse.model_validate(v) for v in versions],
        project_relations=[_serialize_relation(r) for r in asset.project_relations],
    )


@router.post("")
def create_asset_route(payload: AssetCreate, db: Session = Depends(get_db)):
    asset = create_asset(db, payload)
    return {"id": asset.id, "message": "Asset created"}


@router.put("/{asset_id}")
def update_asset_route(asset_id: str, payload: AssetUpdate, db: Session = Depends(get_db)):
    try:
        update_asset(db, asset_id, payload)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"message": "Asset updated"}


@router.delete("/{asset_id}")
def delete_asset(asset_id: str, db: Session = Depends(get_db)):
    asset = db.query(Asset).filter(Asset.id == asset_id).first()
    if not asset:
        raise HTTPException(status_code=404, detail="Asset not found")
    db.delete(asset)
    db.commit()
    return {"message": "Asset deleted"}


@router.post("/{asset_id}/versions")
def create_asset_version(asset_id: str, payload: AssetVersionCreate, db: Session = Depends(get_db)):
    try:
        version = add_asset_version(db, asset_id, payload)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"id": version.id, "message": "Asset version created"}


@router.post("/project-relation")
def create_project_relation(payload: ProjectRelationCreate, db: Session = Depends(get_db)):
    try:
        relation, created = upsert_project_relation(db, payload)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    message = "Project relation created" if created else "Project relation updated"
    return {"id": relation.id, "message": message}
