# campus_gate/models/alert.py
"""
Alerts table: the guard/admin notification feed.
Written together with denied access logs and with guard-reported violations.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text
from campus_gate.database import Base


class Alert(Base):
    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    alert_type = Column(String(50), nullable=False, index=True)   # access_denied | violation
    severity = Column(String(20), nullable=False)                 # warning | error
    identity_id = Column(String(60))
    gate_id = Column(String(50))
    campus_id = Column(String(50), index=True)
    log_id = Column(String(36))
    description = Column(Text)
    is_resolved = Column(Integer, default=0, nullable=False)
    triggered_at = Column(DateTime, nullable=False, index=True)
    resolved_at = Column(DateTime)

    def __repr__(self):
        return f"<Alert {self.id} type={self.alert_type} resolved={self.is_resolved}>"
