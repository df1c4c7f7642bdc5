# campus_gate/schemas/scan.py
from pydantic import BaseModel, Field
from typing import Literal, Optional

from campus_gate.models.access_log import GATE_ID_MAX_LENGTH, IDENTITY_ID_MAX_LENGTH


class ScanRequest(BaseModel):
    identity_ref: str = Field(..., min_length=1, max_length=IDENTITY_ID_MAX_LENGTH,
                              description="Student ID or VIS- visitor pass code")
    scan_type: Literal["entry", "exit"]
    gate_id: str = Field(..., min_length=1, max_length=GATE_ID_MAX_LENGTH)
    violation_type: Optional[str] = None
    violation_notes: Optional[str] = None


class ScanLogOut(BaseModel):
    log_id: str
    user_name: Optional[str] = None
    user_type: str
    gate_id: str
    campus_id: Optional[str] = None
    scan_type: str
    schedule_summary: Optional[dict] = None


class VerdictOut(BaseModel):
    allowed: bool
    message: str
    reasons: list[str] = []
    log: ScanLogOut
    emergency_bypass: bool = False
    usage_count: Optional[int] = None
    violation_recorded: bool = False
    violation_id: Optional[str] = None
    violation_pending: bool = False   # logged verdict, violation still needs to be re-submitted
