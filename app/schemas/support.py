# app/schemas/support.py
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

from app.schemas.party import PartyOut

SupportType = Literal["explicit", "implicit"]
TargetType = Literal["issue", "question"]


class SupportIn(BaseModel):
    from_party_id: int
    support_type: SupportType = "explicit"
    target_type: TargetType = "issue"
    target_id: Optional[int] = None


class RevokeIn(BaseModel):
    from_party_id: int
    reason: Optional[str] = Field(None, max_length=1000)


class SupportOut(BaseModel):
    id: int
    from_party_id: int
    to_party_id: int
    support_type: SupportType
    target_type: TargetType
    target_id: Optional[int] = None
    created_at: datetime
    expires_at: Optional[datetime] = None
    class Config: from_attributes = True


class SupportWithParty(SupportOut):
    from_party: PartyOut
    is_revoked: bool


class RevocationOut(BaseModel):
    id: int
    party_id: int
    revoking_party_id: int
    target_type: TargetType
    target_id: int
    reason: Optional[str] = None
    created_at: datetime
    class Config: from_attributes = True
