from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas.reports import EngineerReport, EngineerReportRequest, PersonReport, PersonReportRequest
from ..services.errors import EngineerNotFoundError, InvalidReportRequest
from ..services.reports import build_engineer_report, build_person_report
from ..services.repository import Repository


router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.post("/person-report", response_model=PersonReport)
def person_report(payload: PersonReportRequest, db: Session = Depends(get_db)):
    """Hours, projects and tasks a person is involved in as stakeholder or engineer."""
    try:
        return build_person_report(Repository(db), payload.person_name, payload.start_date, payload.end_date)
    except InvalidReportRequest as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/engineer-report", response_model=EngineerReport)
def engineer_report(payload: EngineerReportRequest, db: Session = Depends(get_db)):
    """Tasks, projects, assets and stakeholders of one engineer in a period."""
    try:
        return build_engineer_report(Repository(db), payload.engineer_id, payload.start_date, payload.end_date)
    except InvalidReportRequest as e:
        raise HTTPException(status_code=400, detail=str(e))
    except EngineerNotFoundError:
        raise HTTPException(status_code=404, detail="Engineer not found")
