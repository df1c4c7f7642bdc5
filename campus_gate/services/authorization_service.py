# campus_gate/services/authorization_service.py
"""
Gate access authorization: the single entry point for a guard scan.

How it works:
  - Load the gate (unknown/inactive gate → deny)
  - Check the gate type accepts the scan direction (entrance/exit-only gates)
  - Student: must exist and be active; emergency gates allow without a schedule
    check, every other gate needs an active class via schedule_matcher
  - Visitor: visitor_pass_service.consume decides (issue day + usage quota)
  - Write exactly one access log row for the decision, then return the verdict
  - If the guard attached a violation, record it; it never changes the verdict

Business denials come back as Verdict(allowed=False). Storage problems raise
StorageFailure instead, so a guard never sees "ACCESS DENIED" for an outage.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from campus_gate.exceptions import NotFound, ScanValidationError, StorageFailure, ViolationWriteFailed
from campus_gate.models.access_log import GATE_ID_MAX_LENGTH, IDENTITY_ID_MAX_LENGTH
from campus_gate.models.gate import Gate
from campus_gate.services import directory_service, schedule_matcher, visitor_pass_service
from campus_gate.services.access_log_service import new_log_id, write_access_log
from campus_gate.services.violation_service import ScanContext, normalize_violation, record_violation
from campus_gate.utils.clock import to_naive_utc, utcnow
from campus_gate.utils.identity import IdentityKind, IdentityRef
from campus_gate.utils.logger import get_audit_logger

audit_logger = get_audit_logger()

SCAN_TYPES = ("entry", "exit")

REASON_UNKNOWN_GATE = "unknown gate"
REASON_WRONG_DIRECTION = "wrong gate direction"
REASON_INVALID_SCAN_TYPE = "invalid scan type"
REASON_UNKNOWN_STUDENT = "unknown or inactive student"
REASON_CONFLICT = "concurrent scan conflict, try again"


@dataclass
class ViolationInput:
    violation_type: str
    notes: Optional[str] = None


@dataclass
class Verdict:
    allowed: bool
    message: str
    reasons: list
    log_id: str
    identity_id: str
    user_type: str
    gate_id: str
    scan_type: str
    timestamp: datetime
    identity_name: Optional[str] = None
    campus_id: Optional[str] = None
    schedule_summary: Optional[dict] = None
    emergency_bypass: bool = False
    usage_count: Optional[int] = None
    violation_recorded: bool = False
    violation_id: Optional[str] = None


@dataclass
class _Decision:
    """Result of the evaluation pass, before anything is written."""
    allowed: bool
    reasons: list = field(default_factory=list)
    user_name: Optional[str] = None
    campus_id: Optional[str] = None
    schedule_summary: Optional[dict] = None
    emergency_bypass: bool = False
    usage_count: Optional[int] = None


def _deny(reason: str, **kwargs) -> _Decision:
    return _Decision(allowed=False, reasons=[reason], **kwargs)


def _check_direction(gate: Gate, scan_type: str):
    if scan_type not in SCAN_TYPES:
        raise ScanValidationError(REASON_INVALID_SCAN_TYPE)
    if not gate.gate_type.accepts(scan_type):
        raise ScanValidationError(REASON_WRONG_DIRECTION)


def _evaluate_student(db: Session, identity: IdentityRef, gate: Gate, now: datetime) -> _Decision:
    try:
        student = directory_service.find_student(db, identity.value)
    except NotFound:
        return _deny(REASON_UNKNOWN_STUDENT, campus_id=gate.campus_id)

    if gate.gate_type.bypasses_schedule:
        return _Decision(allowed=True, user_name=student.full_name,
                         campus_id=gate.campus_id, emergency_bypass=True)

    result = schedule_matcher.match_active_session(db, student, gate, now)
    if result.matched:
        return _Decision(allowed=True, user_name=student.full_name, campus_id=gate.campus_id,
                         schedule_summary=result.schedule_summary)
    return _Decision(allowed=False, reasons=list(result.reasons),
                     user_name=student.full_name, campus_id=gate.campus_id)


def _evaluate_visitor(db: Session, identity: IdentityRef, gate: Gate,
                      scan_type: str, now: datetime) -> _Decision:
    result = visitor_pass_service.consume(db, identity.value, scan_type, now, commit=False)
    name = result.visitor.name if result.visitor is not None else None
    if result.consumed:
        return _Decision(allowed=True, user_name=name, campus_id=gate.campus_id,
                         usage_count=result.usage_count)
    reason = REASON_CONFLICT if result.conflict else result.reason
    usage = result.visitor.usage_count if result.visitor is not None else None
    return _Decision(allowed=False, reasons=[reason], user_name=name,
                     campus_id=gate.campus_id, usage_count=usage)


def evaluate(db: Session, identity: IdentityRef, gate_id: str, scan_type: str,
             now: datetime) -> _Decision:
    """The decision pass. Raises only StorageFailure; everything else is a decision."""
    if len(gate_id) > GATE_ID_MAX_LENGTH:
        return _deny(REASON_UNKNOWN_GATE)
    try:
        gate = directory_service.find_gate(db, gate_id)
    except NotFound:
        return _deny(REASON_UNKNOWN_GATE)

    try:
        _check_direction(gate, scan_type)
    except ScanValidationError as exc:
        return _deny(str(exc), campus_id=gate.campus_id)

    if len(identity.value) > IDENTITY_ID_MAX_LENGTH:
        reason = visitor_pass_service.REASON_INACTIVE if identity.is_visitor else REASON_UNKNOWN_STUDENT
        return _deny(reason, campus_id=gate.campus_id)

    if identity.kind is IdentityKind.VISITOR:
        return _evaluate_visitor(db, identity, gate, scan_type, now)
    return _evaluate_student(db, identity, gate, now)


def _message(decision: _Decision, scan_type: str) -> str:
    if not decision.allowed:
        return "Access denied"
    if decision.emergency_bypass:
        return "Access granted (emergency gate)"
    return "Access granted" if scan_type == "entry" else "Exit recorded"


def authorize(db: Session, identity: IdentityRef, gate_id: str, scan_type: str,
              now: Optional[datetime] = None,
              violation: Optional[ViolationInput] = None) -> Verdict:
    now = to_naive_utc(now or utcnow())
    decision = evaluate(db, identity, gate_id, scan_type, now)
    log_id = new_log_id()
    # over-long IDs were denied above; keep what fits the log columns
    logged_identity = identity.value[:IDENTITY_ID_MAX_LENGTH]
    logged_gate = gate_id[:GATE_ID_MAX_LENGTH]

    write_access_log(
        db,
        log_id=log_id,
        identity_id=logged_identity,
        user_type=identity.kind.value,
        user_name=decision.user_name,
        gate_id=logged_gate,
        campus_id=decision.campus_id,
        scan_type=scan_type,
        allowed=decision.allowed,
        reasons=decision.reasons,
        timestamp=now,
        schedule_summary=decision.schedule_summary,
        emergency_bypass=decision.emergency_bypass,
        usage_count=decision.usage_count,
    )

    level = audit_logger.info if decision.allowed else audit_logger.warning
    level(f"[SCAN] {identity.kind.value}={identity.value} | gate={gate_id} | {scan_type} | "
          f"allowed={decision.allowed} | reasons={decision.reasons} | log={log_id}")

    verdict = Verdict(
        allowed=decision.allowed,
        message=_message(decision, scan_type),
        reasons=list(decision.reasons),
        log_id=log_id,
        identity_id=logged_identity,
        user_type=identity.kind.value,
        gate_id=logged_gate,
        scan_type=scan_type,
        timestamp=now,
        identity_name=decision.user_name,
        campus_id=decision.campus_id,
        schedule_summary=decision.schedule_summary,
        emergency_bypass=decision.emergency_bypass,
        usage_count=decision.usage_count,
    )

    if violation is not None and (violation.violation_type or "").strip():
        vtype, _ = normalize_violation(violation.violation_type, violation.notes)
        verdict.reasons.append(f"Violation noted: {vtype}")
        context = ScanContext(
            log_id=log_id,
            identity_id=logged_identity,
            user_type=identity.kind.value,
            user_name=decision.user_name,
            gate_id=logged_gate,
            campus_id=decision.campus_id,
            scan_type=scan_type,
            timestamp=now,
        )
        try:
            verdict.violation_id = record_violation(db, context, violation.violation_type, violation.notes)
        except StorageFailure as exc:
            raise ViolationWriteFailed(str(exc), verdict=verdict) from exc
        verdict.violation_recorded = True

    return verdict
