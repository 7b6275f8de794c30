from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..models.models import Stakeholder
from ..schemas.tracking import StakeholderResponse


router = APIRouter(prefix="/api/stakeholders", tags=["stakeholders"])


@router.get("", response_model=List[StakeholderResponse])
def list_stakeholders(type: Optional[str] = None, db: Session = Depends(get_db)):
    """Registered stakeholder and sales names, alphabetical."""
    query = db.query(Stakeholder)
    if type:
        query = query.filter(Stakeholder.type == type)
    return query.order_by(Stakeholder.name, Stakeholder.type).all()
