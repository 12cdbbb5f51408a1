# app/schemas/party.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from app.core.security import is_valid_pincode

ISSUE_TEXT_MAX = 280


class PartyIn(BaseModel):
    issue_text: str
    pincodes: List[str] = Field(min_length=1)

    @field_validator("issue_text")
    @classmethod
    def _strip_issue(cls, v: str) -> str:
        v = v.strip()
        if not v or len(v) > ISSUE_TEXT_MAX:
            raise ValueError(f"Issue text is required and must be {ISSUE_TEXT_MAX} characters or less")
        return v

    @field_validator("pincodes")
    @classmethod
    def _check_pincodes(cls, v: List[str]) -> List[str]:
        cleaned = [p.strip() for p in v]
        bad = [p for p in cleaned if not is_valid_pincode(p)]
        if bad:
            raise ValueError(f"Invalid pincode: {bad[0]} (expected 6 digits)")
        # dedupe, keep order
        return list(dict.fromkeys(cleaned))


class PartyOut(BaseModel):
    id: int
    issue_text: str
    pincodes: List[str]
    created_by: Optional[int] = None
    created_at: datetime
    class Config: from_attributes = True


class PartyListOut(PartyOut):
    member_count: int
    level: int


class QAMetrics(BaseModel):
    total_questions: int
    unanswered_questions: int
    avg_response_time_hours: Optional[float] = None


class PartyDetailOut(PartyListOut):
    leader_id: Optional[int] = None
    leader_name: Optional[str] = None
    like_count: int = 0
    liked_by_me: bool = False
    total_members: int
    alliance_id: Optional[int] = None
    qa_metrics: QAMetrics


class MembershipOut(BaseModel):
    id: int
    party_id: int
    user_id: int
    joined_at: datetime
    left_at: Optional[datetime] = None
    class Config: from_attributes = True


class LeaveIn(BaseModel):
    feedback: Optional[str] = Field(None, max_length=2000)


class LikeOut(BaseModel):
    success: bool = True
    liked: bool
    like_count: int


class MemberWithVotes(BaseModel):
    user_id: int
    display_name: Optional[str] = None
    joined_at: datetime
    trust_votes: int
    is_leader: bool
