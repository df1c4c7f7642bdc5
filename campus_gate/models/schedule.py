# campus_gate/models/schedule.py
"""
Class schedule entries. One row per weekly session of a student's enrolled subject.
start_time / end_time are "HH:MM" strings in campus-local time.
An optional gate_id binds the session's room to a specific gate.
"""

from sqlalchemy import Column, Integer, String
from campus_gate.database import Base


class ScheduleEntry(Base):
    __tablename__ = "schedules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(50), nullable=False, index=True)
    day_of_week = Column(String(10), nullable=False)    # Monday .. Sunday
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    room = Column(String(50))
    instructor = Column(String(200))
    subject_code = Column(String(50))
    subject_name = Column(String(200))
    gate_id = Column(String(50))

    def __repr__(self):
        return f"<ScheduleEntry {self.user_id} {self.day_of_week} {self.start_time}-{self.end_time}>"
