"""
Data access used by the health scoring and report services.
Thin wrapper over a SQLAlchemy session; database errors propagate unchanged.
"""
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from ..models.models import (
    Asset,
    AssetHealthMetrics,
    LaborCost,
    Project,
    Task,
    User,
)


class Repository:
    def __init__(self, db: Session):
        self.db = db

    # ---------- ASSETS ----------
    def get_asset(self, asset_id: str) -> Optional[Asset]:
        return (
            self.db.query(Asset)
            .options(selectinload(Asset.versions), selectinload(Asset.project_relations))
            .filter(Asset.id == asset_id)
            .first()
        )

    def list_assets(self) -> List[Asset]:
        return (
            self.db.query(Asset)
            .options(selectinload(Asset.versions), selectinload(Asset.project_relations))
            .order_by(Asset.created_at)
            .all()
        )

    def list_assets_owned_by(
        self,
        engineer_id: str,
        engineer_name: Optional[str],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Asset]:
        owner_filter = Asset.owner_id == engineer_id
        if engineer_name:
            owner_filter = or_(owner_filter, Asset.owner_name == engineer_name)
        query = self.db.query(Asset).filter(owner_filter)
        if start is not None:
            query = query.filter(Asset.created_at >= start)
        if end is not None:
            query = query.filter(Asset.created_at <= end)
        return query.order_by(Asset.created_at.desc()).all()

    # ---------- HEALTH SNAPSHOTS ----------
    def insert_health_snapshot(self, snapshot: AssetHealthMetrics) -> AssetHealthMetrics:
        self.db.add(snapshot)
        self.db.commit()
        self.db.refresh(snapshot)
        return snapshot

    def list_health_snapshots(self, asset_id: str, since: datetime) -> List[AssetHealthMetrics]:
        return (
            self.db.query(AssetHealthMetrics)
            .filter(
                AssetHealthMetrics.asset_id == asset_id,
                AssetHealthMetrics.calculated_at >= since,
            )
            .order_by(AssetHealthMetrics.calculated_at.desc())
            .all()
        )

    # ---------- PROJECTS ----------
    def count_projects(self) -> int:
        return self.db.query(Project).count()

    def list_projects(self, ids: Optional[Iterable[str]] = None) -> List[Project]:
        query = self.db.query(Project)
        if ids is not None:
            ids = list(ids)
            if not ids:
                return []
            query = query.filter(Project.id.in_(ids))
        return query.order_by(Project.created_at).all()

    # ---------- TASKS ----------
    def list_tasks(self, project_id: Optional[str] = None, status: Optional[str] = None) -> List[Task]:
        query = self.db.query(Task)
        if project_id:
            query = query.filter(Task.project_id == project_id)
        if status:
            query = query.filter(Task.status == status)
        return query.order_by(Task.created_at).all()

    # ---------- LABOR ----------
    def list_labor_costs(
        self,
        engineer_id: Optional[str] = None,
        task_ids: Optional[Iterable[str]] = None,
        project_ids: Optional[Iterable[str]] = None,
    ) -> List[LaborCost]:
        """
        List labor records.

        task_ids and project_ids combine with OR (a record linked to either
        matches); engineer_id narrows the result further.
        """
        query = self.db.query(LaborCost)
        if engineer_id:
            query = query.filter(LaborCost.engineer_id == engineer_id)
        if task_ids is not None or project_ids is not None:
            task_ids = list(task_ids or [])
            project_ids = list(project_ids or [])
            clauses = []
            if task_ids:
                clauses.append(LaborCost.task_id.in_(task_ids))
            if project_ids:
                clauses.append(LaborCost.project_id.in_(project_ids))
            if not clauses:
                return []
            query = query.filter(or_(*clauses))
        return query.order_by(LaborCost.created_at).all()

    # ---------- ENGINEERS ----------
    def get_engineer(self, engineer_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == engineer_id).first()

    def engineer_names(self, ids: Optional[Iterable[str]] = None) -> Dict[str, str]:
        query = self.db.query(User)
        if ids is not None:
            ids = list(ids)
            if not ids:
                return {}
            query = query.filter(User.id.in_(ids))
        return {u.id: u.name for u in query.all()}
