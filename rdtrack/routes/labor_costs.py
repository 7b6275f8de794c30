from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..db import get_db
from ..models.models import LaborCost
from ..schemas.tracking import LaborCostCreate, LaborCostResponse, LaborCostUpdate


router = APIRouter(prefix="/api/labor-costs", tags=["labor-costs"])


@router.get("", response_model=List[LaborCostResponse])
def list_labor_costs(
    engineer_id: Optional[str] = Query(default=None, alias="engineerId"),
    task_id: Optional[str] = Query(default=None, alias="taskId"),
    project_id: Optional[str] = Query(default=None, alias="projectId"),
    db: Session = Depends(get_db),
):
    query = db.query(LaborCost)
    if engineer_id:
        query = query.filter(LaborCost.engineer_id == engineer_id)
    if task_id:
        query = query.filter(LaborCost.task_id == task_id)
    if project_id:
        query = query.filter(LaborCost.project_id == project_id)
    return query.order_by(LaborCost.work_date, LaborCost.created_at).all()


@router.post("", response_model=LaborCostResponse)
def create_labor_cost(payload: LaborCostCreate, db: Session = Depends(get_db)):
    row = LaborCost(**payload.model_dump())
    row.total_cost = (row.hours or 0) * (row.hourly_rate or 0)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@router.put("/{labor_id}", response_model=LaborCostResponse)
def update_labor_cost(labor_id: str, payload: LaborCostUpdate, db: Session = Depends(get_db)):
    row = db.query(LaborCost).filter(LaborCost.id == labor_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Labor cost not found")
    # Only fields that were sent are applied; links and dates may be cleared
    for k, v in payload.model_dump(exclude_unset=True).items():
        if k in ("hours", "hourly_rate") and v is None:
            continue
        setattr(row, k, v)
    row.total_cost = (row.hours or 0) * (row.hourly_rate or 0)
    db.commit()
    db.refresh(row)
    return row


@router.delete("/{labor_id}")
def delete_labor_cost(labor_id: str, db: Session = Depends(get_db)):
    row = db.query(LaborCost).filter(LaborCost.id == labor_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Labor cost not found")
    db.delete(row)
    db.commit()
    return {"message": "Labor cost deleted"}
