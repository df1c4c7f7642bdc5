# campus_gate/routers/violations.py
"""Guard-reported violations: list + annotate-an-existing-scan endpoints."""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from campus_gate.database import get_db
from campus_gate.exceptions import NotFound, StorageFailure
from campus_gate.models.violation import Violation
from campus_gate.schemas.violation import ViolationCreate, ViolationOut
from campus_gate.services.violation_service import record_for_logged_scan
from campus_gate.utils.clock import range_bounds, utcnow

router = APIRouter()


@router.get("/violations", response_model=list[ViolationOut], summary="List violations")
def get_violations(limit: int = 50, campus_id: Optional[str] = None, violation_type: Optional[str] = None,
                   time_range: Optional[Literal["day", "week", "month"]] = Query(None, alias="range"),
                   db: Session = Depends(get_db)):
    """Returns violations, newest first. range=day|week|month limits them to recent scans."""
    q = db.query(Violation)
    if time_range:
        start, end = range_bounds(time_range, utcnow())
        q = q.filter(Violation.timestamp >= start, Violation.timestamp <= end)
    if campus_id:
        q = q.filter(Violation.campus_id == campus_id)
    if violation_type:
        q = q.filter(Violation.violation_type == violation_type)
    return q.order_by(Violation.timestamp.desc(), Violation.id.desc()).limit(limit).all()


@router.post("/violations", status_code=201, summary="Attach a violation to a logged scan")
def create_violation(body: ViolationCreate, db: Session = Depends(get_db)):
    """Records a violation against an access log entry. Does not re-run the access decision."""
    try:
        violation_id = record_for_logged_scan(db, body.log_id, body.violation_type, body.violation_notes)
    except NotFound:
        raise HTTPException(status_code=404, detail="Access log entry not found")
    except StorageFailure:
        raise HTTPException(status_code=503, detail="Violation not saved, please retry")
    return {"violation_id": violation_id, "log_id": body.log_id, "status": "recorded"}
