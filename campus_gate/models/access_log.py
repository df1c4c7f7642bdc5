# campus_gate/models/access_log.py
"""
Access log table: one immutable row per scan decision, allowed or denied.
Rows are only ever inserted; nothing in the service updates or deletes them.
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, JSON
from campus_gate.database import Base

# Widest IDs a scan can carry; longer scans are denied before they reach the log.
IDENTITY_ID_MAX_LENGTH = 60
GATE_ID_MAX_LENGTH = 50


class AccessLog(Base):
    __tablename__ = "access_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    log_id = Column(String(36), unique=True, nullable=False, index=True)
    identity_id = Column(String(IDENTITY_ID_MAX_LENGTH), nullable=False, index=True)  # user_id or visitor_id
    user_type = Column(String(20), nullable=False)                 # student | visitor
    user_name = Column(String(200))
    gate_id = Column(String(GATE_ID_MAX_LENGTH), nullable=False, index=True)
    campus_id = Column(String(50), index=True)                     # copied from gate at write time
    scan_type = Column(String(10), nullable=False)                 # entry | exit
    allowed = Column(Boolean, nullable=False)
    reasons = Column(JSON)
    schedule_summary = Column(JSON)
    emergency_bypass = Column(Boolean, default=False, nullable=False)
    usage_count = Column(Integer)                                  # visitor scans only
    timestamp = Column(DateTime, nullable=False, index=True)       # UTC

    def __repr__(self):
        return f"<AccessLog {self.log_id} {self.identity_id} {self.scan_type} allowed={self.allowed}>"
