# campus_gate/services/visitor_pass_service.py
"""
Visitor pass tracking: issue-day validity + usage quota for VIS- QR codes.

Decision order (first match wins):
  1. Pass missing, or deactivated on its issue day   → "pass not found or inactive"
  2. Scanned on a later day than issued               → "pass expired — valid for issue day only"
                                                        (status flips to expired)
  3. usage_count >= max_uses                          → "usage limit reached"
  4. Conditional increment of usage_count             → Consumed
     (UPDATE ... WHERE usage_count = <value we read>; re-read and retry on a
      lost race, give up after VISITOR_CAS_MAX_ATTEMPTS → "concurrent scan conflict")

usage_count can never pass max_uses: the UPDATE also requires usage_count < max_uses.
The authorization engine commits the increment together with the access log row.
"""

import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campus_gate.config import settings
from campus_gate.exceptions import ConcurrencyConflict, NotFound, StorageFailure
from campus_gate.models.visitor import Visitor
from campus_gate.services import directory_service
from campus_gate.utils.clock import campus_date, to_naive_utc, utcnow
from campus_gate.utils.logger import get_logger

logger = get_logger(__name__)

REASON_INACTIVE = "pass not found or inactive"
REASON_EXPIRED = "pass expired — valid for issue day only"
REASON_LIMIT = "usage limit reached"
REASON_CONFLICT = "concurrent scan conflict"


@dataclass
class Consumed:
    usage_count: int
    visitor: Visitor
    consumed = True


@dataclass
class Rejected:
    reason: str
    visitor: Optional[Visitor] = None
    conflict: bool = False
    consumed = False


def generate_visitor_id() -> str:
    """VIS-<epoch ms>-<random token>, same shape as passes printed by the front desk."""
    return f"VIS-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


def issue_pass(db: Session, name: str, campus_id: str, purpose: Optional[str] = None,
               visit_to: Optional[str] = None, contact: Optional[str] = None,
               max_uses: Optional[int] = None, now: Optional[datetime] = None) -> Visitor:
    """Create a pass valid for the campus-local day of `now`."""
    now = to_naive_utc(now or utcnow())
    visitor = Visitor(
        visitor_id=generate_visitor_id(),
        name=name,
        contact=contact,
        purpose=purpose,
        visit_to=visit_to,
        campus_id=campus_id,
        max_uses=max_uses or settings.VISITOR_DEFAULT_MAX_USES,
        usage_count=0,
        created_date=campus_date(now),
        status="active",
        created_at=now,
    )
    try:
        db.add(visitor)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"[VISITOR] Could not issue pass for {name}: {exc}", exc_info=True)
        raise StorageFailure("visitor pass could not be saved") from exc
    db.refresh(visitor)
    logger.info(f"[VISITOR] Issued {visitor.visitor_id} for {name} (campus {campus_id}, "
                f"max_uses={visitor.max_uses})")
    return visitor


def _load(db: Session, visitor_id: str) -> Optional[Visitor]:
    try:
        visitor = directory_service.find_visitor(db, visitor_id, include_expired=True)
    except NotFound:
        return None
    # Another gate may have bumped the counter since this session last looked.
    db.refresh(visitor)
    return visitor


def _expire(db: Session, visitor: Visitor):
    if visitor.status == "expired":
        return
    try:
        visitor.status = "expired"
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageFailure("visitor pass status update failed") from exc
    logger.info(f"[VISITOR] {visitor.visitor_id} expired (issued {visitor.created_date})")


def _compare_and_swap(db: Session, visitor_id: str, observed: int, now: datetime) -> bool:
    """
    Bump usage_count from `observed` to observed + 1. False if someone else got there first.
    On success the row stays locked in the open transaction until the caller commits.
    """
    stmt = (
        update(Visitor)
        .where(
            Visitor.visitor_id == visitor_id,
            Visitor.usage_count == observed,
            Visitor.usage_count < Visitor.max_uses,
        )
        .values(usage_count=observed + 1, last_used_at=now)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    if result.rowcount == 1:
        return True
    db.rollback()   # end the transaction so the next read sees the winner's commit
    return False


def _check(visitor: Optional[Visitor], today) -> Optional[str]:
    """Steps 1–3 of the decision order. Returns a rejection reason or None."""
    if visitor is None:
        return REASON_INACTIVE
    if visitor.status != "active" and visitor.created_date == today:
        return REASON_INACTIVE
    if visitor.created_date != today:
        return REASON_EXPIRED
    if visitor.usage_count >= visitor.max_uses:
        return REASON_LIMIT
    return None


def _consume_with_retry(db: Session, visitor_id: str, scan_type: str,
                        now: datetime) -> Union[Consumed, Rejected]:
    today = campus_date(now)
    attempts = max(1, settings.VISITOR_CAS_MAX_ATTEMPTS)

    for attempt in range(1, attempts + 1):
        visitor = _load(db, visitor_id)
        reason = _check(visitor, today)
        if reason == REASON_EXPIRED:
            _expire(db, visitor)
        if reason:
            logger.info(f"[VISITOR] {visitor_id} {scan_type} rejected: {reason}")
            return Rejected(reason=reason, visitor=visitor)

        observed = visitor.usage_count
        if _compare_and_swap(db, visitor_id, observed, now):
            db.refresh(visitor)
            logger.info(f"[VISITOR] {visitor_id} {scan_type} consumed "
                        f"({visitor.usage_count}/{visitor.max_uses})")
            return Consumed(usage_count=visitor.usage_count, visitor=visitor)

        logger.warning(f"[VISITOR] {visitor_id} lost usage race "
                       f"(attempt {attempt}/{attempts}, saw {observed})")

    raise ConcurrencyConflict(f"{visitor_id}: usage counter changed on {attempts} attempts")


def consume(db: Session, visitor_id: str, scan_type: str,
            now: Optional[datetime] = None, commit: bool = True) -> Union[Consumed, Rejected]:
    """
    Check and consume one use of a pass.
    With commit=False the increment is left in the session's open transaction,
    so the caller can commit it together with the access log (or roll both back).
    """
    now = to_naive_utc(now or utcnow())
    try:
        result = _consume_with_retry(db, visitor_id, scan_type, now)
        if result.consumed and commit:
            db.commit()
        return result
    except ConcurrencyConflict as exc:
        logger.warning(f"[VISITOR] {exc}")
        return Rejected(reason=REASON_CONFLICT, conflict=True)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"[VISITOR] Storage error consuming {visitor_id}: {exc}", exc_info=True)
        raise StorageFailure("visitor pass update failed") from exc
