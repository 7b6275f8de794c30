from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from ..config import settings
from ..models.models import Asset, AssetProjectRelation, AssetVersion, Project
from ..schemas.assets import AssetCreate, AssetUpdate, AssetVersionCreate, ProjectRelationCreate
from .asset_health import latest_version
from .date_rules import parse_loose_datetime
from .errors import AssetNotFoundError, ProjectNotFoundError


USED_RELATION = "used"


def create_asset(db: Session, payload: AssetCreate) -> Asset:
    now = datetime.now()
    asset = Asset(
        name=payload.name.strip(),
        type=payload.type,
        maturity=payload.maturity or settings.default_asset_maturity,
        owner_id=payload.owner_id,
        owner_name=payload.owner_name,
        description=payload.description,
        tags=payload.tags,
        reuse_count=0,
        related_project_ids=None,
        created_at=now,
        updated_at=now,
    )
    if payload.id:
        asset.id = payload.id
    db.add(asset)
    db.commit()
    db.refresh(asset)
    return asset


def update_asset(db: Session, asset_id: str, payload: AssetUpdate) -> Asset:
    asset = db.query(Asset).filter(Asset.id == asset_id).first()
    if not asset:
        raise AssetNotFoundError(asset_id)
    data = payload.model_dump(exclude_unset=True)
    for field in ("name", "type", "maturity"):
        # Required columns keep their value when the update omits them
        if data.get(field):
            setattr(asset, field, data[field])
    for field in ("owner_id", "owner_name", "description", "tags"):
        if field in data:
            setattr(asset, field, data[field])
    asset.updated_at = datetime.now()
    db.commit()
    db.refresh(asset)
    return asset


def add_asset_version(db: Session, asset_id: str, payload: AssetVersionCreate) -> AssetVersion:
    asset = db.query(Asset).filter(Asset.id == asset_id).first()
    if not asset:
        raise AssetNotFoundError(asset_id)
    now = datetime.now()
    version = AssetVersion(
        asset_id=asset_id,
        version=payload.version or "",
        change_reason=payload.change_reason,
        quality_changes=payload.quality_changes,
        technical_debt=payload.technical_debt,
        changed_by=payload.changed_by,
        quality_score=payload.quality_score,
        defect_density=payload.defect_density,
        change_frequency=payload.change_frequency,
        regression_cost=payload.regression_cost,
        maintenance_burden=payload.maintenance_burden,
        version_date=parse_loose_datetime(payload.version_date) or now,
        created_at=now,
    )
    if payload.id:
        version.id = payload.id
    db.add(version)
    db.commit()
    db.refresh(version)
    return version


def refresh_reuse_stats(db: Session, asset: Asset) -> None:
    """Recompute reuse_count ("used" relations) and the distinct related project ids."""
    relations = (
        db.query(AssetProjectRelation)
        .filter(AssetProjectRelation.asset_id == asset.id)
        .order_by(AssetProjectRelation.created_at)
        .all()
    )
    asset.reuse_count = sum(1 for r in relations if r.relation_type == USED_RELATION)
    asset.related_project_ids = list(dict.fromkeys(r.project_id for r in relations))


def upsert_project_relation(db: Session, payload: ProjectRelationCreate) -> Tuple[AssetProjectRelation, bool]:
    """
    Create an asset/project relation, or update version and notes when the same
    (asset, project, relation type) already exists.

    Returns:
        (relation, created)
    """
    asset = db.query(Asset).filter(Asset.id == payload.asset_id).first()
    if not asset:
        raise AssetNotFoundError(payload.asset_id)
    project = db.query(Project).filter(Project.id == payload.project_id).first()
    if not project:
        raise ProjectNotFoundError(payload.project_id)
    relation_type = payload.relation_type or USED_RELATION

    relation = (
        db.query(AssetProjectRelation)
        .filter(
            AssetProjectRelation.asset_id == payload.asset_id,
            AssetProjectRelation.project_id == payload.project_id,
            AssetProjectRelation.relation_type == relation_type,
        )
        .first()
    )
    created = relation is None
    if created:
        relation = AssetProjectRelation(
            asset_id=payload.asset_id,
            project_id=payload.project_id,
            relation_type=relation_type,
            version=payload.version,
            notes=payload.notes,
            created_at=datetime.now(),
        )
        if payload.id:
            relation.id = payload.id
        db.add(relation)
    else:
        relation.version = payload.version
        relation.notes = payload.notes
    db.flush()

    refresh_reuse_stats(db, asset)
    asset.updated_at = datetime.now()
    db.commit()
    db.refresh(relation)
    return relation, created


def detach_project(db: Session, project_id: str) -> int:
    """
    Drop every asset relation pointing at a project and refresh the reuse
    stats of the assets involved. The caller commits.

    Returns:
        Number of relations removed
    """
    relations = db.query(AssetProjectRelation).filter(AssetProjectRelation.project_id == project_id).all()
    asset_ids = list(dict.fromkeys(r.asset_id for r in relations))
    for relation in relations:
        db.delete(relation)
    db.flush()

    now = datetime.now()
    for asset in db.query(Asset).filter(Asset.id.in_(asset_ids)).all():
        refresh_reuse_stats(db, asset)
        asset.updated_at = now
    return len(relations)


def latest_version_label(asset: Asset) -> Optional[str]:
    latest = latest_version(asset.versions or [])
    return latest.version if latest else None
