# campus_gate/services/directory_service.py
"""
Read-only lookups used by the gate core: students, visitors, gates, campuses, schedules.
Missing or inactive records raise NotFound; callers must not treat that as a silent deny.
"""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campus_gate.exceptions import NotFound, StorageFailure
from campus_gate.models.campus import Campus
from campus_gate.models.gate import Gate
from campus_gate.models.schedule import ScheduleEntry
from campus_gate.models.student import Student
from campus_gate.models.visitor import Visitor
from campus_gate.utils.logger import get_logger

logger = get_logger(__name__)


def _first(query, entity: str, key: str):
    try:
        return query.first()
    except SQLAlchemyError as exc:
        logger.error(f"[DIRECTORY] {entity} lookup failed for {key}: {exc}")
        raise StorageFailure(f"{entity} lookup failed") from exc


def find_student(db: Session, user_id: str) -> Student:
    student = _first(db.query(Student).filter(Student.user_id == user_id), "student", user_id)
    if not student or student.status != "active":
        raise NotFound("student", user_id)
    return student


def find_visitor(db: Session, visitor_id: str, include_expired: bool = False) -> Visitor:
    """Look up a pass. include_expired lets the pass tracker report expiry precisely."""
    visitor = _first(db.query(Visitor).filter(Visitor.visitor_id == visitor_id), "visitor", visitor_id)
    if not visitor:
        raise NotFound("visitor", visitor_id)
    if visitor.status != "active" and not include_expired:
        raise NotFound("visitor", visitor_id)
    return visitor


def find_gate(db: Session, gate_id: str, include_inactive: bool = False) -> Gate:
    """include_inactive is for campus lookups on gates closed for scanning."""
    gate = _first(db.query(Gate).filter(Gate.gate_id == gate_id), "gate", gate_id)
    if not gate or (gate.status != "active" and not include_inactive):
        raise NotFound("gate", gate_id)
    return gate


def find_campus(db: Session, campus_id: Optional[str]) -> Optional[Campus]:
    """Campus details are decorative on logs, so a missing campus is just None."""
    if not campus_id:
        return None
    return _first(db.query(Campus).filter(Campus.campus_id == campus_id), "campus", campus_id)


def list_schedules(db: Session, user_id: str) -> list[ScheduleEntry]:
    try:
        return db.query(ScheduleEntry).filter(ScheduleEntry.user_id == user_id).all()
    except SQLAlchemyError as exc:
        logger.error(f"[DIRECTORY] schedule lookup failed for {user_id}: {exc}")
        raise StorageFailure("schedule lookup failed") from exc
