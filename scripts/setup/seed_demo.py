# scripts/setup/seed_demo.py
"""
Seed a demo campus: gates of every type, two students with a weekly timetable.
Safe to re-run; existing rows (matched by their IDs) are left alone.
Usage: python scripts/setup/seed_demo.py [--campus MAIN]
"""

import argparse
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from campus_gate.database import SessionLocal, create_tables
from campus_gate.models import Campus, Gate, ScheduleEntry, Student

GATES = [
    ("G1", "Main Gate", "normal"),
    ("G2", "North Entrance", "entrance"),
    ("G3", "South Exit", "exit"),
    ("G4", "Emergency Gate", "emergency"),
]

STUDENTS = [
    ("S1", "Ana", "Reyes", "BSCS", "3A"),
    ("S2", "Ben", "Cruz", "BSIT", "2B"),
]

# S1 only; S2 has no classes
SCHEDULE = [
    ("Monday", "08:00", "10:00", "R101", "CS301", "Algorithms", "Prof. Santos"),
    ("Wednesday", "13:00", "15:00", "R204", "CS305", "Databases", "Prof. Lim"),
    ("Friday", "09:00", "11:30", "LAB2", "CS310", "Networks", "Prof. Tan"),
]


def main():
    parser = argparse.ArgumentParser(description="Seed demo campus data")
    parser.add_argument("--campus", default="MAIN")
    args = parser.parse_args()

    create_tables()
    db = SessionLocal()
    try:
        if not db.query(Campus).filter(Campus.campus_id == args.campus).first():
            db.add(Campus(campus_id=args.campus, name=f"{args.campus} Campus", status="active"))
            print(f"✅ Campus {args.campus}")

        for gate_id, name, gate_type in GATES:
            if not db.query(Gate).filter(Gate.gate_id == gate_id).first():
                db.add(Gate(gate_id=gate_id, name=name, campus_id=args.campus, type=gate_type, status="active"))
                print(f"✅ Gate {gate_id} ({gate_type})")

        for user_id, first, last, program, section in STUDENTS:
            if not db.query(Student).filter(Student.user_id == user_id).first():
                db.add(Student(user_id=user_id, campus_id=args.campus, first_name=first, last_name=last,
                               program=program, section=section, status="active"))
                print(f"✅ Student {user_id} {first} {last}")

        if not db.query(ScheduleEntry).filter(ScheduleEntry.user_id == "S1").first():
            for day, start, end, room, code, subject, instructor in SCHEDULE:
                db.add(ScheduleEntry(user_id="S1", day_of_week=day, start_time=start, end_time=end,
                                     room=room, subject_code=code, subject_name=subject, instructor=instructor))
            print(f"✅ {len(SCHEDULE)} schedule entries for S1")

        db.commit()
    finally:
        db.close()
    print("🎉 Demo data ready")


if __name__ == "__main__":
    main()
