# campus_gate/models/student.py
"""
Students table. Read-only to the gate core; maintained by the admin tools.
"""

from sqlalchemy import Column, Integer, String
from campus_gate.database import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(50), unique=True, nullable=False, index=True)
    campus_id = Column(String(50), nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    program = Column(String(100))
    section = Column(String(50))
    status = Column(String(20), default="active", nullable=False)  # active | inactive

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    def __repr__(self):
        return f"<Student {self.user_id} campus={self.campus_id} status={self.status}>"
