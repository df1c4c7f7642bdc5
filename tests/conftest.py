# tests/conftest.py
"""Shared fixtures: a throwaway SQLite database per test, seeded with one campus layout."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from datetime import date, datetime
from sqlalchemy.orm import sessionmaker

from campus_gate.config import settings
from campus_gate.database import build_engine, create_tables
from campus_gate.models import Campus, Gate, ScheduleEntry, Student, Visitor

MONDAY = date(2026, 10, 19)


def at(day: date, hhmm: str) -> datetime:
    """Monday 08:05 → datetime(2026, 10, 19, 8, 5). Campus clock is UTC in tests."""
    h, m = hhmm.split(":")
    return datetime(day.year, day.month, day.day, int(h), int(m))


@pytest.fixture(autouse=True)
def campus_settings(monkeypatch):
    monkeypatch.setattr(settings, "CAMPUS_UTC_OFFSET_MINUTES", 0)
    monkeypatch.setattr(settings, "SCHEDULE_GRACE_MINUTES_BEFORE", 15)
    monkeypatch.setattr(settings, "SCHEDULE_GRACE_MINUTES_AFTER", 0)
    monkeypatch.setattr(settings, "VISITOR_DEFAULT_MAX_USES", 2)
    monkeypatch.setattr(settings, "VISITOR_CAS_MAX_ATTEMPTS", 3)


@pytest.fixture()
def engine(tmp_path):
    eng = build_engine(f"sqlite:///{tmp_path / 'gate.db'}")
    create_tables(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


def seed_campus(session):
    """
    MAIN campus: G1 normal, G2 entrance, G3 exit, G4 emergency, G5 inactive.
    NORTH campus: GN normal.
    S1 has Monday 08:00–10:00 in R101; S2 has no classes; S3 is inactive; SN studies at NORTH.
    """
    session.add_all([
        Campus(campus_id="MAIN", name="Main Campus", status="active"),
        Campus(campus_id="NORTH", name="North Campus", status="active"),
        Gate(gate_id="G1", name="Main Gate", campus_id="MAIN", type="normal", status="active"),
        Gate(gate_id="G2", name="North Entrance", campus_id="MAIN", type="entrance", status="active"),
        Gate(gate_id="G3", name="South Exit", campus_id="MAIN", type="exit", status="active"),
        Gate(gate_id="G4", name="Emergency Gate", campus_id="MAIN", type="emergency", status="active"),
        Gate(gate_id="G5", name="Closed Gate", campus_id="MAIN", type="normal", status="inactive"),
        Gate(gate_id="GN", name="North Main Gate", campus_id="NORTH", type="normal", status="active"),
        Student(user_id="S1", campus_id="MAIN", first_name="Ana", last_name="Reyes", status="active"),
        Student(user_id="S2", campus_id="MAIN", first_name="Ben", last_name="Cruz", status="active"),
        Student(user_id="S3", campus_id="MAIN", first_name="Cy", last_name="Dela", status="inactive"),
        Student(user_id="SN", campus_id="NORTH", first_name="Dee", last_name="Sy", status="active"),
        ScheduleEntry(user_id="S1", day_of_week="Monday", start_time="08:00", end_time="10:00",
                      room="R101", subject_code="CS301", subject_name="Algorithms",
                      instructor="Prof. Santos"),
    ])
    session.commit()


@pytest.fixture()
def campus_db(db):
    seed_campus(db)
    return db


@pytest.fixture()
def make_visitor():
    def _make(session, visitor_id="VIS-001", created_date=MONDAY, usage_count=0,
              max_uses=2, status="active", campus_id="MAIN"):
        session.add(Visitor(visitor_id=visitor_id, name="Visiting Parent", campus_id=campus_id,
                            max_uses=max_uses, usage_count=usage_count,
                            created_date=created_date, status=status))
        session.commit()
        return visitor_id
    return _make
