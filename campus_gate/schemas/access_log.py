# campus_gate/schemas/access_log.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class AccessLogOut(BaseModel):
    log_id: str
    identity_id: str
    user_type: str
    user_name: Optional[str]
    gate_id: str
    campus_id: Optional[str]
    scan_type: str
    allowed: bool
    reasons: Optional[list[str]]
    schedule_summary: Optional[dict]
    emergency_bypass: bool
    usage_count: Optional[int]
    timestamp: datetime

    class Config:
        from_attributes = True


class DailyGateStatsOut(BaseModel):
    date: str
    campus_id: Optional[str] = None
    total: int
    entries: int
    exits: int
    denied: int
    violations: int
