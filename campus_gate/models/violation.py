# campus_gate/models/violation.py
"""
Guard-reported violations. Each row annotates one scan (by log_id) and never
affects that scan's verdict. Never deleted by the service.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text
from campus_gate.database import Base


class Violation(Base):
    __tablename__ = "violations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    violation_id = Column(String(36), unique=True, nullable=False, index=True)
    log_id = Column(String(36), index=True)
    identity_id = Column(String(60), nullable=False, index=True)
    user_type = Column(String(20), nullable=False)
    user_name = Column(String(200))
    gate_id = Column(String(50), nullable=False)
    campus_id = Column(String(50), index=True)
    scan_type = Column(String(10), nullable=False)
    violation_type = Column(String(50), nullable=False, index=True)
    violation_notes = Column(Text)
    timestamp = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<Violation {self.violation_id} type={self.violation_type} id={self.identity_id}>"
