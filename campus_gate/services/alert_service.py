# campus_gate/services/alert_service.py
"""
Alert feed helpers.
Alerts are added to the caller's transaction so they never exist without the
access log or violation that produced them.
"""

from datetime import datetime
from sqlalchemy.orm import Session
from campus_gate.models.access_log import AccessLog
from campus_gate.models.alert import Alert
from campus_gate.utils.clock import utcnow
from campus_gate.utils.logger import get_logger

logger = get_logger(__name__)


def build_denial_alert(entry: AccessLog) -> Alert:
    """Alert row for a denied scan. Not committed here."""
    reasons = ", ".join(entry.reasons or []) or "no reason given"
    description = (f"{entry.scan_type.capitalize()} denied for {entry.user_name or entry.identity_id} "
                   f"at {entry.gate_id}: {reasons}")
    logger.warning(f"[ALERT][ACCESS_DENIED] {description}")
    return Alert(
        alert_type="access_denied",
        severity="error",
        identity_id=entry.identity_id,
        gate_id=entry.gate_id,
        campus_id=entry.campus_id,
        log_id=entry.log_id,
        description=description,
        is_resolved=0,
        triggered_at=entry.timestamp,
    )


def resolve_alert(db: Session, alert_id: int, now: datetime = None):
    """Mark an alert resolved. Returns the alert, or None if it does not exist."""
    alert = db.query(Alert).filter(Alert.id == alert_id).first()
    if not alert:
        return None
    alert.is_resolved = 1
    alert.resolved_at = now or utcnow()
    db.commit()
    return alert
