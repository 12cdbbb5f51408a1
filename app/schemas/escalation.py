# app/schemas/escalation.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from app.schemas.party import PartyOut


class EscalationIn(BaseModel):
    target_party_id: int


class EscalationOut(BaseModel):
    id: int
    source_party_id: int
    target_party_id: int
    created_at: datetime
    class Config: from_attributes = True


class TrailNode(BaseModel):
    party: PartyOut
    member_count: int
    level: int
    escalated_at: Optional[datetime] = None
