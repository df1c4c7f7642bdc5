# campus_gate/services/violation_service.py
"""
Guard-reported violations.
A violation annotates a scan that has already been decided and logged; it never
changes the verdict. The only error this module raises is StorageFailure.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campus_gate.exceptions import NotFound, StorageFailure
from campus_gate.models.access_log import AccessLog
from campus_gate.models.alert import Alert
from campus_gate.models.violation import Violation
from campus_gate.utils.logger import get_logger

logger = get_logger(__name__)

VIOLATION_TYPES = (
    "Inappropriate Uniform",
    "No Student ID",
    "Late",
    "Unauthorized Item",
    "Disrupting Behavior",
    "Other",
)
OTHER = "Other"


@dataclass
class ScanContext:
    """The scan a violation is attached to."""
    log_id: Optional[str]
    identity_id: str
    user_type: str
    gate_id: str
    scan_type: str
    timestamp: datetime
    campus_id: Optional[str] = None
    user_name: Optional[str] = None


def normalize_violation(violation_type: Optional[str], notes: Optional[str]) -> tuple:
    """
    Map guard input onto the enumerated types without ever rejecting it.
    Unknown types become Other with the raw type kept in the notes;
    Other without notes stores "Other" as the note.
    """
    raw = (violation_type or "").strip()
    notes = (notes or "").strip() or None
    match = next((t for t in VIOLATION_TYPES if t.lower() == raw.lower()), None)
    if match is None:
        match = OTHER
        notes = f"{raw}: {notes}" if raw and notes else (raw or notes)
    if match == OTHER and not notes:
        notes = OTHER
    return match, notes


def record_violation(db: Session, context: ScanContext, violation_type: Optional[str],
                     notes: Optional[str] = None) -> str:
    """Append a violation (plus its alert) and return the new violation_id."""
    vtype, vnotes = normalize_violation(violation_type, notes)
    violation_id = str(uuid.uuid4())

    db.add(Violation(
        violation_id=violation_id,
        log_id=context.log_id,
        identity_id=context.identity_id,
        user_type=context.user_type,
        user_name=context.user_name,
        gate_id=context.gate_id,
        campus_id=context.campus_id,
        scan_type=context.scan_type,
        violation_type=vtype,
        violation_notes=vnotes,
        timestamp=context.timestamp,
    ))
    db.add(Alert(
        alert_type="violation",
        severity="warning",
        identity_id=context.identity_id,
        gate_id=context.gate_id,
        campus_id=context.campus_id,
        log_id=context.log_id,
        description=f"Violation recorded: {vtype} by {context.user_name or context.identity_id} "
                    f"at {context.gate_id}" + (f" ({vnotes})" if vnotes and vnotes != vtype else ""),
        is_resolved=0,
        triggered_at=context.timestamp,
    ))
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"[VIOLATION] Could not save {vtype} for {context.identity_id}: {exc}", exc_info=True)
        raise StorageFailure("violation could not be saved") from exc

    logger.warning(f"[VIOLATION] {vtype} | {context.identity_id} | gate={context.gate_id} "
                   f"| scan={context.scan_type} | log={context.log_id}")
    return violation_id


def record_for_logged_scan(db: Session, log_id: str, violation_type: Optional[str],
                           notes: Optional[str] = None) -> str:
    """
    Attach a violation to a scan that is already in the access log.
    Used when the guard re-submits an annotation; the scan itself is not re-evaluated.
    Raises NotFound if the log_id is unknown.
    """
    try:
        entry = db.query(AccessLog).filter(AccessLog.log_id == log_id).first()
    except SQLAlchemyError as exc:
        raise StorageFailure("access log lookup failed") from exc
    if not entry:
        raise NotFound("access log", log_id)

    context = ScanContext(
        log_id=entry.log_id,
        identity_id=entry.identity_id,
        user_type=entry.user_type,
        user_name=entry.user_name,
        gate_id=entry.gate_id,
        campus_id=entry.campus_id,
        scan_type=entry.scan_type,
        timestamp=entry.timestamp,
    )
    return record_violation(db, context, violation_type, notes)
