# campus_gate/models/campus.py
"""
Campuses table. Gates, students and visitor passes all belong to one campus.
Used to denormalise the campus name onto scan responses.
"""

from sqlalchemy import Column, Integer, String
from campus_gate.database import Base


class Campus(Base):
    __tablename__ = "campuses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    campus_id = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    location = Column(String(200))
    status = Column(String(20), default="active", nullable=False)  # active | inactive

    def __repr__(self):
        return f"<Campus {self.campus_id} name={self.name}>"
