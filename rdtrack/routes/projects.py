from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..db import get_db
from ..models.models import Project
from ..schemas.tracking import ProjectCreate, ProjectResponse, ProjectUpdate
from ..services.asset_service import detach_project
from ..services.stakeholder_service import SALES_TYPE, save_stakeholder


router = APIRouter(prefix="/api/projects", tags=["projects"])


def _ensure_order_number_free(db: Session, order_number: Optional[str], project_id: Optional[str] = None) -> None:
    if not order_number:
        return
    query = db.query(Project).filter(Project.order_number == order_number)
    if project_id:
        query = query.filter(Project.id != project_id)
    if query.first():
        raise HTTPException(status_code=400, detail="Order number already exists")


@router.get("", response_model=List[ProjectResponse])
def list_projects(q: str | None = None, db: Session = Depends(get_db)):
    query = db.query(Project)
    if q:
        like = f"%{q}%"
        query = query.filter(
            (Project.project_name.ilike(like)) | (Project.order_number.ilike(like)) | (Project.sales_name.ilike(like))
        )
    return query.order_by(Project.created_at.desc()).all()


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(project_id: str, db: Session = Depends(get_db)):
    row = db.query(Project).filter(Project.id == project_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Project not found")
    return row


@router.post("", response_model=ProjectResponse)
def create_project(payload: ProjectCreate, db: Session = Depends(get_db)):
    _ensure_order_number_free(db, payload.order_number)
    row = Project(**payload.model_dump(exclude_none=True))
    db.add(row)
    save_stakeholder(db, row.sales_name, SALES_TYPE)
    db.commit()
    db.refresh(row)
    return row


@router.put("/{project_id}", response_model=ProjectResponse)
def update_project(project_id: str, payload: ProjectUpdate, db: Session = Depends(get_db)):
    row = db.query(Project).filter(Project.id == project_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Project not found")
    data = payload.model_dump(exclude_unset=True)
    _ensure_order_number_free(db, data.get("order_number"), project_id)
    for k, v in data.items():
        if k == "project_name" and not v:
            continue
        setattr(row, k, v)
    save_stakeholder(db, row.sales_name, SALES_TYPE)
    db.commit()
    db.refresh(row)
    return row


@router.delete("/{project_id}")
def delete_project(project_id: str, db: Session = Depends(get_db)):
    row = db.query(Project).filter(Project.id == project_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Project not found")
    detach_project(db, project_id)
    db.delete(row)
    db.commit()
    return {"message": "Project deleted"}
