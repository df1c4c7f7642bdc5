# tests/test_authorization_service.py
"""End-to-end tests for guard scan authorization against a seeded SQLite campus."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import logging
import pytest
from unittest.mock import patch
from sqlalchemy.exc import OperationalError

from campus_gate.exceptions import LogWriteFailed, StorageFailure, ViolationWriteFailed
from campus_gate.models import AccessLog, Alert, ScheduleEntry, Violation, Visitor
from campus_gate.models.access_log import GATE_ID_MAX_LENGTH, IDENTITY_ID_MAX_LENGTH
from campus_gate.services import authorization_service
from campus_gate.services.authorization_service import (
    REASON_UNKNOWN_GATE, REASON_UNKNOWN_STUDENT, REASON_WRONG_DIRECTION, ViolationInput, authorize,
)
from campus_gate.services.schedule_matcher import NO_CLASS_REASON, OTHER_CAMPUS_REASON
from campus_gate.services.visitor_pass_service import REASON_INACTIVE, REASON_LIMIT
from campus_gate.utils.logger import AUDIT_LOGGER_NAME
from campus_gate.utils.identity import parse_identity_ref
from conftest import MONDAY, at


def scan(db, identity, gate_id="G1", scan_type="entry", hhmm="08:05", **kwargs):
    return authorize(db, parse_identity_ref(identity), gate_id, scan_type, now=at(MONDAY, hhmm), **kwargs)


def log_for(db, verdict):
    return db.query(AccessLog).filter(AccessLog.log_id == verdict.log_id).one()


class TestStudentScans:
    def test_student_in_class_is_allowed(self, campus_db):
        verdict = scan(campus_db, "S1")
        assert verdict.allowed
        assert verdict.message == "Access granted"
        assert verdict.reasons == []
        assert verdict.identity_name == "Ana Reyes"
        assert verdict.schedule_summary["subject_code"] == "CS301"
        assert verdict.schedule_summary["room"] == "R101"
        assert verdict.campus_id == "MAIN"

    def test_exit_during_class_is_recorded(self, campus_db):
        verdict = scan(campus_db, "S1", scan_type="exit", hhmm="09:30")
        assert verdict.allowed
        assert verdict.message == "Exit recorded"

    def test_early_arrival_within_grace(self, campus_db):
        assert scan(campus_db, "S1", hhmm="07:50").allowed

    def test_after_class_is_denied(self, campus_db):
        verdict = scan(campus_db, "S1", hhmm="10:01")
        assert not verdict.allowed
        assert verdict.reasons == [NO_CLASS_REASON]

    def test_student_without_class_is_denied(self, campus_db):
        verdict = scan(campus_db, "S2")
        assert not verdict.allowed
        assert verdict.message == "Access denied"
        assert verdict.reasons == [NO_CLASS_REASON]

    @pytest.mark.parametrize("identity", ["S3", "S404"])
    def test_inactive_or_unknown_student(self, campus_db, identity):
        verdict = scan(campus_db, identity)
        assert not verdict.allowed
        assert verdict.reasons == [REASON_UNKNOWN_STUDENT]

    def test_other_campus_gate_is_denied(self, campus_db):
        verdict = scan(campus_db, "SN", gate_id="G1")
        assert not verdict.allowed
        assert verdict.reasons == [OTHER_CAMPUS_REASON]

    def test_class_bound_to_closed_gate_still_admits_elsewhere_on_campus(self, campus_db):
        campus_db.add(ScheduleEntry(user_id="S2", day_of_week="Monday", start_time="08:00", end_time="10:00",
                                    room="R202", subject_code="IT210", gate_id="G5"))
        campus_db.commit()
        verdict = scan(campus_db, "S2", gate_id="G1")
        assert verdict.allowed
        assert verdict.schedule_summary["subject_code"] == "IT210"

    def test_class_bound_to_other_campus_gate_does_not_count(self, campus_db):
        campus_db.add(ScheduleEntry(user_id="S2", day_of_week="Monday", start_time="08:00", end_time="10:00",
                                    room="R202", subject_code="IT210", gate_id="GN"))
        campus_db.commit()
        verdict = scan(campus_db, "S2", gate_id="G1")
        assert not verdict.allowed
        assert verdict.reasons == [NO_CLASS_REASON]


class TestGateRules:
    @pytest.mark.parametrize("gate_id,scan_type", [("G2", "exit"), ("G3", "entry")])
    def test_wrong_direction(self, campus_db, gate_id, scan_type):
        verdict = scan(campus_db, "S1", gate_id=gate_id, scan_type=scan_type)
        assert not verdict.allowed
        assert verdict.reasons == [REASON_WRONG_DIRECTION]

    @pytest.mark.parametrize("gate_id,scan_type", [("G2", "entry"), ("G3", "exit")])
    def test_matching_direction(self, campus_db, gate_id, scan_type):
        assert scan(campus_db, "S1", gate_id=gate_id, scan_type=scan_type).allowed

    def test_emergency_gate_skips_schedule(self, campus_db):
        with patch.object(authorization_service.schedule_matcher, "match_active_session") as matcher:
            verdict = scan(campus_db, "S2", gate_id="G4", hhmm="23:00")
        matcher.assert_not_called()
        assert verdict.allowed
        assert verdict.emergency_bypass
        assert verdict.message == "Access granted (emergency gate)"
        assert log_for(campus_db, verdict).emergency_bypass

    def test_emergency_gate_still_needs_active_student(self, campus_db):
        verdict = scan(campus_db, "S3", gate_id="G4")
        assert not verdict.allowed
        assert verdict.reasons == [REASON_UNKNOWN_STUDENT]

    @pytest.mark.parametrize("gate_id", ["G5", "NOPE"])
    def test_inactive_or_unknown_gate(self, campus_db, gate_id):
        verdict = scan(campus_db, "S1", gate_id=gate_id)
        assert not verdict.allowed
        assert verdict.reasons == [REASON_UNKNOWN_GATE]
        assert verdict.campus_id is None


class TestVisitorScans:
    def test_entry_exit_then_limit(self, campus_db, make_visitor, session_factory):
        make_visitor(campus_db)
        first = scan(campus_db, "VIS-001", hhmm="09:00")
        second = scan(campus_db, "VIS-001", scan_type="exit", hhmm="11:00")
        third = scan(campus_db, "VIS-001", hhmm="13:00")

        assert first.allowed and first.usage_count == 1
        assert second.allowed and second.usage_count == 2
        assert not third.allowed
        assert third.reasons == [REASON_LIMIT]
        assert third.usage_count == 2

        other = session_factory()
        try:
            assert other.query(Visitor).filter(Visitor.visitor_id == "VIS-001").one().usage_count == 2
        finally:
            other.close()

    def test_lowercase_prefix_is_not_a_visitor_pass(self, campus_db, make_visitor):
        make_visitor(campus_db, visitor_id="vis-abc")
        verdict = scan(campus_db, "vis-abc")
        assert verdict.user_type == "student"
        assert verdict.reasons == [REASON_UNKNOWN_STUDENT]
        assert campus_db.query(Visitor).one().usage_count == 0

    def test_visitor_scan_never_checks_schedules(self, campus_db, make_visitor):
        make_visitor(campus_db)
        with patch.object(authorization_service.schedule_matcher, "match_active_session") as matcher:
            verdict = scan(campus_db, "VIS-001", hhmm="23:00")
        matcher.assert_not_called()
        assert verdict.allowed

    def test_visitor_at_wrong_direction_gate_keeps_its_use(self, campus_db, make_visitor):
        make_visitor(campus_db)
        verdict = scan(campus_db, "VIS-001", gate_id="G3", scan_type="entry")
        assert not verdict.allowed
        assert campus_db.query(Visitor).one().usage_count == 0


class TestOverlongIds:
    def test_overlong_student_id_is_denied_and_logged(self, campus_db):
        raw = "S" * (IDENTITY_ID_MAX_LENGTH + 1)
        verdict = scan(campus_db, raw)
        assert not verdict.allowed
        assert verdict.reasons == [REASON_UNKNOWN_STUDENT]
        entry = log_for(campus_db, verdict)
        assert entry.identity_id == raw[:IDENTITY_ID_MAX_LENGTH]
        assert len(entry.identity_id) == IDENTITY_ID_MAX_LENGTH

    def test_overlong_visitor_pass_is_denied(self, campus_db):
        verdict = scan(campus_db, "VIS-" + "x" * IDENTITY_ID_MAX_LENGTH)
        assert not verdict.allowed
        assert verdict.reasons == [REASON_INACTIVE]
        assert len(log_for(campus_db, verdict).identity_id) == IDENTITY_ID_MAX_LENGTH

    def test_overlong_gate_id_is_unknown_gate(self, campus_db):
        with patch.object(authorization_service.directory_service, "find_gate") as find_gate:
            verdict = scan(campus_db, "S1", gate_id="G" * (GATE_ID_MAX_LENGTH + 1))
        find_gate.assert_not_called()
        assert verdict.reasons == [REASON_UNKNOWN_GATE]
        assert len(log_for(campus_db, verdict).gate_id) == GATE_ID_MAX_LENGTH


class TestAccessLog:
    @pytest.mark.parametrize("identity,gate_id,scan_type", [
        ("S1", "G1", "entry"),
        ("S2", "G1", "entry"),
        ("S1", "G3", "entry"),
        ("S1", "NOPE", "exit"),
        ("VIS-404", "G1", "entry"),
    ])
    def test_one_log_per_verdict(self, campus_db, identity, gate_id, scan_type):
        verdict = scan(campus_db, identity, gate_id=gate_id, scan_type=scan_type)
        logs = campus_db.query(AccessLog).all()
        assert len(logs) == 1
        assert logs[0].log_id == verdict.log_id
        assert logs[0].allowed == verdict.allowed
        assert logs[0].gate_id == gate_id
        assert logs[0].scan_type == scan_type
        assert logs[0].reasons == verdict.reasons

    def test_verdict_goes_to_scan_audit_log(self, campus_db, caplog):
        caplog.set_level(logging.INFO, logger=AUDIT_LOGGER_NAME)
        verdict = scan(campus_db, "S2")
        records = [r for r in caplog.records if r.name == AUDIT_LOGGER_NAME]
        assert len(records) == 1
        assert records[0].levelno == logging.WARNING
        assert verdict.log_id in records[0].getMessage()

    def test_denial_raises_alert(self, campus_db):
        verdict = scan(campus_db, "S2")
        alert = campus_db.query(Alert).one()
        assert alert.alert_type == "access_denied"
        assert alert.log_id == verdict.log_id

    def test_allowed_scan_raises_no_alert(self, campus_db):
        scan(campus_db, "S1")
        assert campus_db.query(Alert).count() == 0

    def test_log_write_failure_raises_instead_of_denying(self, campus_db, make_visitor, session_factory):
        make_visitor(campus_db)
        broken = OperationalError("INSERT", {}, Exception("database is locked"))
        with patch.object(campus_db, "commit", side_effect=broken):
            with pytest.raises(LogWriteFailed) as exc_info:
                scan(campus_db, "VIS-001")
        assert isinstance(exc_info.value, StorageFailure)

        other = session_factory()
        try:
            assert other.query(AccessLog).count() == 0
            assert other.query(Visitor).one().usage_count == 0
        finally:
            other.close()


class TestViolations:
    def test_violation_on_allowed_scan_keeps_it_allowed(self, campus_db):
        verdict = scan(campus_db, "S1", violation=ViolationInput("Inappropriate Uniform", "no ID lace"))
        assert verdict.allowed
        assert verdict.violation_recorded
        assert "Violation noted: Inappropriate Uniform" in verdict.reasons

        violation = campus_db.query(Violation).one()
        assert violation.violation_id == verdict.violation_id
        assert violation.log_id == verdict.log_id
        assert violation.violation_notes == "no ID lace"

    def test_violation_on_denied_scan_is_only_an_annotation(self, campus_db):
        verdict = scan(campus_db, "S2", violation=ViolationInput("No Student ID"))
        assert not verdict.allowed
        assert verdict.reasons == [NO_CLASS_REASON, "Violation noted: No Student ID"]
        assert log_for(campus_db, verdict).reasons == [NO_CLASS_REASON]
        assert campus_db.query(Violation).one().log_id == verdict.log_id

    def test_denied_scan_never_creates_violation_by_itself(self, campus_db):
        scan(campus_db, "S2")
        assert campus_db.query(Violation).count() == 0

    def test_blank_violation_type_is_ignored(self, campus_db):
        verdict = scan(campus_db, "S1", violation=ViolationInput("   "))
        assert not verdict.violation_recorded
        assert campus_db.query(Violation).count() == 0

    def test_violation_write_failure_carries_logged_verdict(self, campus_db):
        with patch.object(authorization_service, "record_violation",
                          side_effect=StorageFailure("violation could not be saved")):
            with pytest.raises(ViolationWriteFailed) as exc_info:
                scan(campus_db, "S1", violation=ViolationInput("Late"))

        verdict = exc_info.value.verdict
        assert verdict.allowed
        assert not verdict.violation_recorded
        assert log_for(campus_db, verdict).allowed
