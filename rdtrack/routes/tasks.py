from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..db import get_db
from ..models.models import Task
from ..schemas.tracking import TaskCreate, TaskResponse, TaskUpdate
from ..services.repository import Repository
from ..services.stakeholder_service import STAKEHOLDER_TYPE, save_stakeholder


router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("", response_model=List[TaskResponse])
def list_tasks(
    project_id: Optional[str] = Query(default=None, alias="projectId"),
    status: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return Repository(db).list_tasks(project_id=project_id, status=status)


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(task_id: str, db: Session = Depends(get_db)):
    row = db.query(Task).filter(Task.id == task_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Task not found")
    return row


@router.post("", response_model=TaskResponse)
def create_task(payload: TaskCreate, db: Session = Depends(get_db)):
    row = Task(**payload.model_dump(exclude_none=True))
    db.add(row)
    save_stakeholder(db, row.stakeholder, STAKEHOLDER_TYPE)
    db.commit()
    db.refresh(row)
    return row


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(task_id: str, payload: TaskUpdate, db: Session = Depends(get_db)):
    row = db.query(Task).filter(Task.id == task_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Task not found")
    data = payload.model_dump(exclude_unset=True)
    for k, v in data.items():
        if k == "name" and not v:
            continue
        if k == "assigned_to":
            v = list(v or [])
        setattr(row, k, v)
    save_stakeholder(db, row.stakeholder, STAKEHOLDER_TYPE)
    db.commit()
    db.refresh(row)
    return row


@router.delete("/{task_id}")
def delete_task(task_id: str, db: Session = Depends(get_db)):
    row = db.query(Task).filter(Task.id == task_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Task not found")
    db.delete(row)
    db.commit()
    return {"message": "Task deleted"}
