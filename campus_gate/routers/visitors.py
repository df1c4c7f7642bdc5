# campus_gate/routers/visitors.py
"""Visitor passes: issue a day pass, list today's passes, look one up at the gate."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from campus_gate.database import get_db
from campus_gate.exceptions import NotFound, StorageFailure
from campus_gate.models.visitor import Visitor
from campus_gate.schemas.visitor import VisitorCreate, VisitorOut
from campus_gate.services import directory_service
from campus_gate.services.visitor_pass_service import issue_pass
from campus_gate.utils.clock import campus_date, utcnow

router = APIRouter()


@router.post("/visitors", response_model=VisitorOut, status_code=201, summary="Issue a visitor pass")
def create_visitor(body: VisitorCreate, db: Session = Depends(get_db)):
    """Issues a VIS- pass valid for today only (default: one entry + one exit)."""
    try:
        if directory_service.find_campus(db, body.campus_id) is None:
            raise HTTPException(status_code=404, detail=f"Campus '{body.campus_id}' not found")
        return issue_pass(
            db,
            name=body.name,
            campus_id=body.campus_id,
            purpose=body.purpose,
            visit_to=body.visit_to,
            contact=body.contact,
            max_uses=body.max_uses,
        )
    except StorageFailure:
        raise HTTPException(status_code=503, detail="Visitor pass not saved, please retry")


@router.get("/visitors", response_model=list[VisitorOut], summary="Today's visitor passes")
def list_todays_visitors(campus_id: Optional[str] = None, db: Session = Depends(get_db)):
    """Passes issued on the current campus day, newest first. Guards filter by their campus."""
    q = db.query(Visitor).filter(Visitor.created_date == campus_date(utcnow()))
    if campus_id:
        q = q.filter(Visitor.campus_id == campus_id)
    return q.order_by(Visitor.id.desc()).all()


@router.get("/visitors/{visitor_id}", response_model=VisitorOut, summary="Look up a visitor pass")
def get_visitor(visitor_id: str, db: Session = Depends(get_db)):
    try:
        return directory_service.find_visitor(db, visitor_id, include_expired=True)
    except NotFound:
        raise HTTPException(status_code=404, detail="Visitor pass not found")
