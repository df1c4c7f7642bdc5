# campus_gate/services/access_log_service.py
"""
Append-only access log. Every scan decision becomes exactly one row, committed
before the verdict leaves the engine. Denials also raise an alert in the same
transaction.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campus_gate.exceptions import LogWriteFailed
from campus_gate.models.access_log import AccessLog
from campus_gate.services.alert_service import build_denial_alert
from campus_gate.utils.logger import get_logger

logger = get_logger(__name__)


def new_log_id() -> str:
    return str(uuid.uuid4())


def write_access_log(db: Session, *, identity_id: str, user_type: str, user_name: Optional[str],
                     gate_id: str, campus_id: Optional[str], scan_type: str, allowed: bool,
                     reasons: list, timestamp: datetime, schedule_summary: Optional[dict] = None,
                     emergency_bypass: bool = False, usage_count: Optional[int] = None,
                     log_id: Optional[str] = None) -> AccessLog:
    entry = AccessLog(
        log_id=log_id or new_log_id(),
        identity_id=identity_id,
        user_type=user_type,
        user_name=user_name,
        gate_id=gate_id,
        campus_id=campus_id,
        scan_type=scan_type,
        allowed=allowed,
        reasons=list(reasons),
        schedule_summary=schedule_summary,
        emergency_bypass=emergency_bypass,
        usage_count=usage_count,
        timestamp=timestamp,
    )
    try:
        db.add(entry)
        if not allowed:
            db.add(build_denial_alert(entry))
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"[ACCESS_LOG] Write failed for {identity_id} at {gate_id}: {exc}", exc_info=True)
        raise LogWriteFailed("access log could not be written") from exc
    return entry
