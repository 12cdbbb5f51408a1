# app/routes/parties.py
from __future__ import annotations
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select, type_coerce
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Session

from app.services.deps import get_db, get_current_user, get_optional_user
from app.models.user import User
from app.models.party import Party, Membership
from app.schemas.party import (
    PartyIn, PartyOut, PartyListOut, PartyDetailOut, MembershipOut, LeaveIn, LikeOut,
    MemberWithVotes, QAMetrics,
)
from app.services.alliances import active_alliance_for_party
from app.services.levels import party_level
from app.services.memberships import (
    active_membership, count_active_members, get_party_or_404, has_liked,
    join_party, leave_party, like_count, like_party, unlike_party,
)
from app.services.merge_tree import total_members
from app.services.questions import qa_metrics
from app.services.trust import get_party_leader, member_vote_view

logger = logging.getLogger("openpolitics.parties")
logger.setLevel(logging.INFO)

router = APIRouter(prefix="/api/parties", tags=["parties"])


def _pincode_clause(db: Session, pincode: str):
    """WHERE clause matching parties whose pincode list holds this exact code."""
    if db.get_bind().dialect.name == "postgresql":
        return type_coerce(Party.pincodes, JSONB).contains([pincode])
    codes = func.json_each(Party.pincodes).table_valued("value")
    return select(codes.c.value).where(codes.c.value == pincode).correlate(Party).exists()


@router.get("", response_model=List[PartyListOut])
def list_parties(
    pincode: Optional[str] = None,
    min_level: Optional[int] = Query(None, alias="minLevel", ge=1, le=4),
    db: Session = Depends(get_db),
):
    q = db.query(Party)
    if pincode:
        q = q.filter(_pincode_clause(db, pincode))
    parties: List[Party] = q.order_by(Party.created_at.desc(), Party.id.desc()).all()

    counts = count_active_members(db, [p.id for p in parties])
    out = []
    for p in parties:
        count = counts.get(p.id, 0)
        level = party_level(count)
        if min_level is not None and level < min_level:
            continue
        out.append(PartyListOut(
            id=p.id,
            issue_text=p.issue_text,
            pincodes=p.pincodes,
            created_by=p.created_by,
            created_at=p.created_at,
            member_count=count,
            level=level,
        ))
    return out


@router.post("", response_model=PartyOut, status_code=201)
def create_party(payload: PartyIn, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    row = Party(issue_text=payload.issue_text, pincodes=payload.pincodes, created_by=user.id)
    db.add(row)
    db.flush()

    # Creator joins their own party unless they already belong to one
    if active_membership(db, user.id) is None:
        db.add(Membership(party_id=row.id, user_id=user.id))
    else:
        logger.info(f"Creator {user.id} already in a party; not auto-joining party {row.id}")

    db.commit()
    db.refresh(row)
    logger.info(f"Party {row.id} created by user {user.id}")
    return row


@router.get("/{party_id}", response_model=PartyDetailOut)
def get_party(
    party_id: int,
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
):
    party = get_party_or_404(db, party_id)
    count = count_active_members(db, [party_id])[party_id]

    leader_id = get_party_leader(db, party_id)
    leader_name = None
    if leader_id is not None:
        leader = db.query(User).filter(User.id == leader_id).first()
        if leader:
            leader_name = leader.display_name or leader.username

    alliance_row = active_alliance_for_party(db, party_id)

    return PartyDetailOut(
        id=party.id,
        issue_text=party.issue_text,
        pincodes=party.pincodes,
        created_by=party.created_by,
        created_at=party.created_at,
        member_count=count,
        level=party_level(count),
        leader_id=leader_id,
        leader_name=leader_name,
        like_count=like_count(db, party_id),
        liked_by_me=has_liked(db, party_id, user.id) if user else False,
        total_members=total_members(db, party_id),
        alliance_id=alliance_row.alliance_id if alliance_row else None,
        qa_metrics=QAMetrics(**qa_metrics(db, party_id)),
    )


@router.get("/{party_id}/members", response_model=List[MemberWithVotes])
def get_party_members(party_id: int, db: Session = Depends(get_db)):
    get_party_or_404(db, party_id)
    return member_vote_view(db, party_id)


@router.post("/{party_id}/join", response_model=MembershipOut, status_code=201)
def join(party_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return join_party(db, party_id, user)


@router.post("/{party_id}/leave", response_model=MembershipOut)
def leave(
    party_id: int,
    payload: Optional[LeaveIn] = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return leave_party(db, party_id, user, payload.feedback if payload else None)


@router.post("/{party_id}/like", response_model=LikeOut, status_code=201)
def like(party_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    like_party(db, party_id, user)
    return LikeOut(liked=True, like_count=like_count(db, party_id))


@router.delete("/{party_id}/like", response_model=LikeOut)
def unlike(party_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    unlike_party(db, party_id, user)
    return LikeOut(liked=False, like_count=like_count(db, party_id))
