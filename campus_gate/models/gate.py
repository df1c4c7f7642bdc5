# campus_gate/models/gate.py
"""
Gates table. Each physical gate belongs to one campus and has a type that
decides which scan directions it accepts and whether schedules are checked.
"""

import enum

from sqlalchemy import Column, Integer, String
from campus_gate.database import Base


class GateType(str, enum.Enum):
    NORMAL = "normal"          # bidirectional, schedule-gated
    ENTRANCE = "entrance"      # entry scans only
    EXIT = "exit"              # exit scans only
    EMERGENCY = "emergency"    # bidirectional, schedule checks bypassed

    @classmethod
    def resolve(cls, value):
        """Map a stored type string to a GateType. Unknown types act as normal gates."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.NORMAL

    def accepts(self, scan_type: str) -> bool:
        if self is GateType.ENTRANCE:
            return scan_type == "entry"
        if self is GateType.EXIT:
            return scan_type == "exit"
        return True

    @property
    def bypasses_schedule(self) -> bool:
        return self is GateType.EMERGENCY


class Gate(Base):
    __tablename__ = "gates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    gate_id = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    location = Column(String(200))
    campus_id = Column(String(50), nullable=False, index=True)
    type = Column(String(20), default=GateType.NORMAL.value, nullable=False)
    status = Column(String(20), default="active", nullable=False)  # active | inactive

    @property
    def gate_type(self) -> GateType:
        return GateType.resolve(self.type)

    def __repr__(self):
        return f"<Gate {self.gate_id} type={self.type} campus={self.campus_id}>"
