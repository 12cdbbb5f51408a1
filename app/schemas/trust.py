# app/schemas/trust.py
from datetime import datetime
from typing import Dict, Optional
from pydantic import BaseModel


class TrustVoteIn(BaseModel):
    to_user_id: int


class TrustVoteOut(BaseModel):
    id: int
    party_id: int
    from_user_id: int
    to_user_id: int
    created_at: datetime
    expires_at: datetime
    class Config: from_attributes = True


class LeaderOut(BaseModel):
    party_id: int
    leader_id: Optional[int] = None
    tally: Dict[int, int] = {}
