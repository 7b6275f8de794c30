from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy.orm import Session

from ..models.models import Stakeholder


logger = structlog.get_logger(__name__)

STAKEHOLDER_TYPE = "stakeholder"
SALES_TYPE = "sales"


def save_stakeholder(db: Session, name: Optional[str], type: str = STAKEHOLDER_TYPE) -> Optional[Stakeholder]:
    """
    Register a stakeholder name, or touch updated_at when (name, type) is known.

    The caller owns the transaction; nothing is committed here.
    """
    name = (name or "").strip()
    if not name:
        return None
    now = datetime.now()
    row = db.query(Stakeholder).filter(Stakeholder.name == name, Stakeholder.type == type).first()
    if row is None:
        row = Stakeholder(name=name, type=type, created_at=now, updated_at=now)
        db.add(row)
        logger.info("stakeholder_registered", name=name, type=type)
    else:
        row.updated_at = now
    return row
