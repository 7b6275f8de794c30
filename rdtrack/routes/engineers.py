from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..db import get_db
from ..models.models import User
from ..schemas.tracking import EngineerCreate, EngineerResponse, EngineerUpdate


router = APIRouter(prefix="/api/engineers", tags=["engineers"])


@router.get("", response_model=List[EngineerResponse])
def list_engineers(db: Session = Depends(get_db)):
    return db.query(User).order_by(User.name).all()


@router.get("/{engineer_id}", response_model=EngineerResponse)
def get_engineer(engineer_id: str, db: Session = Depends(get_db)):
    row = db.query(User).filter(User.id == engineer_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Engineer not found")
    return row


@router.post("", response_model=EngineerResponse)
def create_engineer(payload: EngineerCreate, db: Session = Depends(get_db)):
    if payload.email and db.query(User).filter(User.email == payload.email).first():
        raise HTTPException(status_code=400, detail="Email already in use")
    row = User(**payload.model_dump(exclude_none=True))
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@router.put("/{engineer_id}", response_model=EngineerResponse)
def update_engineer(engineer_id: str, payload: EngineerUpdate, db: Session = Depends(get_db)):
    row = db.query(User).filter(User.id == engineer_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Engineer not found")
    data = payload.model_dump(exclude_unset=True)
    if data.get("email") and data["email"] != row.email:
        if db.query(User).filter(User.email == data["email"]).first():
            raise HTTPException(status_code=400, detail="Email already in use")
    for k, v in data.items():
        if k == "name" and not v:
            continue
        setattr(row, k, v)
    db.commit()
    db.refresh(row)
    return row


@router.delete("/{engineer_id}")
def delete_engineer(engineer_id: str, db: Session = Depends(get_db)):
    row = db.query(User).filter(User.id == engineer_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Engineer not found")
    db.delete(row)
    db.commit()
    return {"message": "Engineer deleted"}
