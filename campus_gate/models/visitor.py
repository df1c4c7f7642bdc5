# campus_gate/models/visitor.py
"""
Visitor passes (VIS-… QR codes). Valid on the day of issue only, with a
usage quota (default one entry + one exit). usage_count is only ever
changed through the conditional update in visitor_pass_service.
"""

from sqlalchemy import Column, Integer, String, Date, DateTime, Text
from campus_gate.database import Base


class Visitor(Base):
    __tablename__ = "visitors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    visitor_id = Column(String(60), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    contact = Column(String(100))
    purpose = Column(Text)
    visit_to = Column(String(200))
    campus_id = Column(String(50), nullable=False, index=True)
    max_uses = Column(Integer, default=2, nullable=False)
    usage_count = Column(Integer, default=0, nullable=False)
    created_date = Column(Date, nullable=False, index=True)    # campus-local issue day
    status = Column(String(20), default="active", nullable=False)  # active | expired
    created_at = Column(DateTime)
    last_used_at = Column(DateTime)

    def __repr__(self):
        return f"<Visitor {self.visitor_id} uses={self.usage_count}/{self.max_uses} status={self.status}>"
