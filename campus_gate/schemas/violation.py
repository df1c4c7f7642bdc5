# campus_gate/schemas/violation.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class ViolationCreate(BaseModel):
    """Annotate an already-logged scan (e.g. re-submitting after a failed save)."""
    log_id: str = Field(..., min_length=1)
    violation_type: str = Field(..., min_length=1)
    violation_notes: Optional[str] = None


class ViolationOut(BaseModel):
    violation_id: str
    log_id: Optional[str]
    identity_id: str
    user_type: str
    user_name: Optional[str]
    gate_id: str
    campus_id: Optional[str]
    scan_type: str
    violation_type: str
    violation_notes: Optional[str]
    timestamp: datetime

    class Config:
        from_attributes = True
