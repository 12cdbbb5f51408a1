# app/schemas/alliance.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from app.schemas.party import PartyOut


class AllianceCreate(BaseModel):
    name: Optional[str] = Field(None, max_length=120)
    party_ids: List[int] = Field(min_length=2)


class AllianceMemberIn(BaseModel):
    party_id: int


class AllianceOut(BaseModel):
    id: int
    name: Optional[str] = None
    created_at: datetime
    disbanded_at: Optional[datetime] = None
    class Config: from_attributes = True


class AllianceMemberOut(BaseModel):
    id: int
    alliance_id: int
    party_id: int
    joined_at: datetime
    left_at: Optional[datetime] = None
    class Config: from_attributes = True


class AllianceMemberWithParty(AllianceMemberOut):
    party: PartyOut


class AllianceWithMembers(AllianceOut):
    members: List[AllianceMemberWithParty] = []


class AllianceLeaveOut(BaseModel):
    success: bool = True
    disbanded: bool
    reason: Optional[str] = None
