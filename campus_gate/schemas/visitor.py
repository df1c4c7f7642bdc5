# campus_gate/schemas/visitor.py
from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional


class VisitorCreate(BaseModel):
    name: str = Field(..., min_length=1)
    campus_id: str = Field(..., min_length=1)
    contact: Optional[str] = None
    purpose: Optional[str] = None
    visit_to: Optional[str] = None
    max_uses: Optional[int] = Field(None, ge=1)


class VisitorOut(BaseModel):
    visitor_id: str
    name: str
    contact: Optional[str]
    purpose: Optional[str]
    visit_to: Optional[str]
    campus_id: str
    max_uses: int
    usage_count: int
    created_date: date
    status: str
    created_at: Optional[datetime]
    last_used_at: Optional[datetime]

    class Config:
        from_attributes = True
