# campus_gate/services/schedule_matcher.py
"""
Schedule matching: does the student have a class right now that justifies
being at this gate?

How it works:
  - Gate must belong to the student's campus (cross-campus scans never match)
  - Take the student's entries for today's weekday (campus-local time)
  - Keep entries where now ∈ [start - grace_before, end + grace_after]
  - Drop entries bound to a gate on another campus (closed gates still bind)
  - Pick the entry starting closest to now; ties go to the smaller room name
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

from sqlalchemy.orm import Session

from campus_gate.config import settings
from campus_gate.exceptions import NotFound
from campus_gate.models.gate import Gate
from campus_gate.models.schedule import ScheduleEntry
from campus_gate.models.student import Student
from campus_gate.services import directory_service
from campus_gate.utils.clock import day_name, time_to_minutes, to_campus_time
from campus_gate.utils.logger import get_logger

logger = get_logger(__name__)

NO_CLASS_REASON = "no class scheduled at this time"
OTHER_CAMPUS_REASON = "scan gate belongs to a different campus"


@dataclass
class ScheduleMatch:
    schedule_summary: dict
    matched = True


@dataclass
class NoMatch:
    reasons: list = field(default_factory=lambda: [NO_CLASS_REASON])
    matched = False


def summarize(entry: ScheduleEntry) -> dict:
    return {
        "subject_code": entry.subject_code,
        "subject_name": entry.subject_name,
        "day_of_week": entry.day_of_week,
        "start_time": entry.start_time,
        "end_time": entry.end_time,
        "room": entry.room,
        "instructor": entry.instructor,
    }


def _window(entry: ScheduleEntry, before: int, after: int) -> Optional[tuple]:
    """(start, open_from, open_until) in minutes, or None if the stored times are unusable."""
    try:
        start = time_to_minutes(entry.start_time)
        end = time_to_minutes(entry.end_time)
    except (AttributeError, ValueError):
        logger.warning(f"[SCHEDULE] Skipping entry {entry.id} with bad times "
                       f"{entry.start_time!r}-{entry.end_time!r}")
        return None
    return start, start - before, end + after


def _bound_to_campus(db: Session, entry: ScheduleEntry, campus_id: str) -> bool:
    """A bound gate only pins the entry to a campus; closed gates still count."""
    if not entry.gate_id:
        return True
    try:
        bound_gate = directory_service.find_gate(db, entry.gate_id, include_inactive=True)
    except NotFound:
        logger.warning(f"[SCHEDULE] Entry {entry.id} bound to unknown gate {entry.gate_id}")
        return False
    return bound_gate.campus_id == campus_id


def _on_day(entry: ScheduleEntry, today: str) -> bool:
    return (entry.day_of_week or "").strip().lower() == today.lower()


def select_session(entries: list, now_local: datetime,
                   before: int, after: int) -> Optional[ScheduleEntry]:
    """Pure selection over already-loaded entries. Returns the winning entry or None."""
    today = day_name(now_local)
    minute = now_local.hour * 60 + now_local.minute
    candidates = []
    for entry in entries:
        if not _on_day(entry, today):
            continue
        window = _window(entry, before, after)
        if window is None:
            continue
        start, open_from, open_until = window
        if open_from <= minute <= open_until:
            candidates.append((abs(start - minute), entry.room or "", entry))
    if not candidates:
        return None
    candidates.sort(key=lambda c: (c[0], c[1]))
    return candidates[0][2]


def match_active_session(db: Session, student: Student, gate: Gate,
                         now: datetime) -> Union[ScheduleMatch, NoMatch]:
    if gate.campus_id != student.campus_id:
        logger.info(f"[SCHEDULE] {student.user_id} (campus {student.campus_id}) "
                    f"scanned at {gate.gate_id} on campus {gate.campus_id}")
        return NoMatch(reasons=[OTHER_CAMPUS_REASON])

    now_local = to_campus_time(now)
    today = day_name(now_local)
    # bindings are only resolved for today's entries
    entries = [
        e for e in directory_service.list_schedules(db, student.user_id)
        if _on_day(e, today) and _bound_to_campus(db, e, gate.campus_id)
    ]
    if not entries:
        return NoMatch()

    chosen = select_session(
        entries,
        now_local,
        settings.SCHEDULE_GRACE_MINUTES_BEFORE,
        settings.SCHEDULE_GRACE_MINUTES_AFTER,
    )
    if chosen is None:
        return NoMatch()
    return ScheduleMatch(schedule_summary=summarize(chosen))
