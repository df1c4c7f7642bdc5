# campus_gate/routers/gate.py
"""
Guard scan endpoint + access log viewer + today's gate counts.
POST /gate/scan        : authorize one scan, always logged before the response is sent.
GET  /gate/logs        : access log, newest first, with optional filters and range=day|week|month.
GET  /gate/stats/today : entries / exits / denials / violations for the campus day.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from campus_gate.database import get_db
from campus_gate.exceptions import StorageFailure, ViolationWriteFailed
from campus_gate.models.access_log import AccessLog
from campus_gate.models.violation import Violation
from campus_gate.schemas.access_log import AccessLogOut, DailyGateStatsOut
from campus_gate.schemas.scan import ScanLogOut, ScanRequest, VerdictOut
from campus_gate.services.authorization_service import Verdict, ViolationInput, authorize
from campus_gate.utils.clock import campus_date, campus_day_bounds, range_bounds, utcnow
from campus_gate.utils.identity import parse_identity_ref
from campus_gate.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)

RETRY_PROMPT = "Gate system temporarily unavailable, please rescan"


def _verdict_out(verdict: Verdict, violation_pending: bool = False) -> VerdictOut:
    return VerdictOut(
        allowed=verdict.allowed,
        message=verdict.message,
        reasons=verdict.reasons,
        log=ScanLogOut(
            log_id=verdict.log_id,
            user_name=verdict.identity_name,
            user_type=verdict.user_type,
            gate_id=verdict.gate_id,
            campus_id=verdict.campus_id,
            scan_type=verdict.scan_type,
            schedule_summary=verdict.schedule_summary,
        ),
        emergency_bypass=verdict.emergency_bypass,
        usage_count=verdict.usage_count,
        violation_recorded=verdict.violation_recorded,
        violation_id=verdict.violation_id,
        violation_pending=violation_pending,
    )


@router.post("/gate/scan", response_model=VerdictOut, summary="Authorize a guard scan")
def scan(body: ScanRequest, db: Session = Depends(get_db)):
    """
    Decide entry/exit for a scanned student ID or VIS- visitor pass.
    Denials are normal 200 responses with reasons. A storage outage returns 503
    with a generic retry prompt, never a denial.
    """
    try:
        identity = parse_identity_ref(body.identity_ref)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    violation = None
    if body.violation_type and body.violation_type.strip():
        violation = ViolationInput(violation_type=body.violation_type, notes=body.violation_notes)

    try:
        verdict = authorize(db, identity, body.gate_id.strip(), body.scan_type, violation=violation)
    except ViolationWriteFailed as e:
        logger.error(f"Scan logged but violation not saved (log={e.verdict.log_id}): {e}")
        return _verdict_out(e.verdict, violation_pending=True)
    except StorageFailure as e:
        logger.error(f"Scan not decided for {identity.value} at {body.gate_id}: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=RETRY_PROMPT)

    return _verdict_out(verdict)


@router.get("/gate/logs", response_model=list[AccessLogOut], summary="List access logs")
def list_access_logs(limit: int = 50, gate_id: Optional[str] = None, campus_id: Optional[str] = None,
                     allowed: Optional[bool] = None,
                     time_range: Optional[Literal["day", "week", "month"]] = Query(None, alias="range"),
                     db: Session = Depends(get_db)):
    """Returns scan decisions, newest first. Filter by gate, campus, outcome or time range."""
    q = db.query(AccessLog)
    if time_range:
        start, end = range_bounds(time_range, utcnow())
        q = q.filter(AccessLog.timestamp >= start, AccessLog.timestamp <= end)
    if gate_id:
        q = q.filter(AccessLog.gate_id == gate_id)
    if campus_id:
        q = q.filter(AccessLog.campus_id == campus_id)
    if allowed is not None:
        q = q.filter(AccessLog.allowed == allowed)
    return q.order_by(AccessLog.timestamp.desc(), AccessLog.id.desc()).limit(limit).all()


@router.get("/gate/stats/today", response_model=DailyGateStatsOut, summary="Today's gate counts")
def get_today_stats(campus_id: Optional[str] = None, db: Session = Depends(get_db)):
    """Counts for the current campus-local day."""
    now = utcnow()
    start, end = campus_day_bounds(now)

    def _count(model, *criteria):
        q = db.query(func.count(model.id)).filter(model.timestamp >= start, model.timestamp < end, *criteria)
        if campus_id:
            q = q.filter(model.campus_id == campus_id)
        return q.scalar() or 0

    return DailyGateStatsOut(
        date=str(campus_date(now)),
        campus_id=campus_id,
        total=_count(AccessLog),
        entries=_count(AccessLog, AccessLog.scan_type == "entry"),
        exits=_count(AccessLog, AccessLog.scan_type == "exit"),
        denied=_count(AccessLog, AccessLog.allowed.is_(False)),
        violations=_count(Violation),
    )
