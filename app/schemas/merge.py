# app/schemas/merge.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from app.schemas.party import PartyOut


class MergeIn(BaseModel):
    parent_party_id: int


class PartyMergeOut(BaseModel):
    id: int
    child_party_id: int
    parent_party_id: int
    merged_at: datetime
    merged_by: Optional[int] = None
    demerged_at: Optional[datetime] = None
    demerged_by: Optional[int] = None
    class Config: from_attributes = True


class PartyMergeWithParent(PartyMergeOut):
    parent_party: PartyOut


class PartyMergeWithChild(PartyMergeOut):
    child_party: PartyOut


class MemberBreakdownRow(BaseModel):
    party_id: int
    issue_text: str
    member_count: int
    is_self: bool


class MergeStatusOut(BaseModel):
    current_merge: Optional[PartyMergeWithParent] = None
    children: List[PartyMergeWithChild] = []
    breakdown: List[MemberBreakdownRow] = []
    total_members: int


class CycleCheckOut(BaseModel):
    child_party_id: int
    parent_party_id: int
    would_cycle: bool
