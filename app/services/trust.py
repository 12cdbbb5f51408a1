# app/services/trust.py
"""
Trust-vote leadership.

The leader of a party is never stored. It is derived on demand from the
party's non-expired trust votes and a reference time:

  * a vote counts while ``expires_at > now``; expired rows are simply ignored
  * a vote counts only while its target is still an active member
  * each member has at most one vote per party (recasting replaces it)
  * the leader is the candidate with the strictly highest tally

Ties are broken by replaying the counted votes oldest first (``created_at``,
then ``id``) and keeping the first candidate whose running tally reaches the
maximum. A later candidate that only draws level never takes over.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import and_
from sqlalchemy.orm import Session

from app.core.clock import utcnow, as_utc
from app.core.config import TRUST_VOTE_TTL_DAYS
from app.core.errors import NotFound, Unauthorized
from app.models.party import Membership
from app.models.trust_vote import TrustVote
from app.models.user import User
from app.services.memberships import get_party_or_404, is_active_member

logger = logging.getLogger("openpolitics.trust")
logger.setLevel(logging.INFO)


@dataclass(frozen=True)
class Ballot:
    """The slice of a trust vote the tally needs."""
    to_user_id: int
    created_at: datetime
    expires_at: datetime
    id: int = 0

    @classmethod
    def from_model(cls, v: TrustVote) -> "Ballot":
        return cls(to_user_id=v.to_user_id, created_at=v.created_at, expires_at=v.expires_at, id=v.id or 0)


def _live_in_order(ballots: Iterable[Ballot], now: datetime) -> List[Ballot]:
    now = as_utc(now)
    live = [b for b in ballots if as_utc(b.expires_at) > now]
    live.sort(key=lambda b: (as_utc(b.created_at), b.id))
    return live


def tally_votes(ballots: Iterable[Ballot], now: datetime) -> Dict[int, int]:
    tally: Dict[int, int] = {}
    for b in _live_in_order(ballots, now):
        tally[b.to_user_id] = tally.get(b.to_user_id, 0) + 1
    return tally


def compute_leader(ballots: Iterable[Ballot], now: datetime) -> Optional[int]:
    leader: Optional[int] = None
    best = 0
    running: Dict[int, int] = {}
    for b in _live_in_order(ballots, now):
        running[b.to_user_id] = running.get(b.to_user_id, 0) + 1
        if running[b.to_user_id] > best:
            best = running[b.to_user_id]
            leader = b.to_user_id
    return leader


# ---------- store-backed ----------

def _live_ballots(db: Session, party_id: int, now: datetime) -> List[Ballot]:
    # Votes for someone who has since left stay in the table but never count
    rows = (
        db.query(TrustVote)
        .join(Membership, and_(
            Membership.party_id == TrustVote.party_id,
            Membership.user_id == TrustVote.to_user_id,
            Membership.left_at.is_(None),
        ))
        .filter(TrustVote.party_id == party_id, TrustVote.expires_at > now)
        .all()
    )
    return [Ballot.from_model(v) for v in rows]


def get_party_leader(db: Session, party_id: int, now: Optional[datetime] = None) -> Optional[int]:
    now = now or utcnow()
    return compute_leader(_live_ballots(db, party_id, now), now)


def leader_with_tally(db: Session, party_id: int, now: Optional[datetime] = None) -> Tuple[Optional[int], Dict[int, int]]:
    now = now or utcnow()
    ballots = _live_ballots(db, party_id, now)
    return compute_leader(ballots, now), tally_votes(ballots, now)


def is_party_leader(db: Session, party_id: int, user_id: int, now: Optional[datetime] = None) -> bool:
    return get_party_leader(db, party_id, now) == user_id


def cast_vote(db: Session, party_id: int, voter: User, to_user_id: int, now: Optional[datetime] = None) -> TrustVote:
    get_party_or_404(db, party_id)

    if not is_active_member(db, party_id, voter.id):
        raise Unauthorized.forbidden("Must be a member to vote")
    if not is_active_member(db, party_id, to_user_id):
        raise NotFound("Target user is not a member of this party")

    now = now or utcnow()

    # Drop the previous vote (expired or not) before inserting; one commit for both
    db.query(TrustVote).filter(
        TrustVote.party_id == party_id,
        TrustVote.from_user_id == voter.id,
    ).delete(synchronize_session=False)

    vote = TrustVote(
        party_id=party_id,
        from_user_id=voter.id,
        to_user_id=to_user_id,
        created_at=now,
        expires_at=now + timedelta(days=TRUST_VOTE_TTL_DAYS),
    )
    db.add(vote)
    db.commit()
    db.refresh(vote)
    logger.info(f"Trust vote in party {party_id}: {voter.id} -> {to_user_id}")
    return vote


def withdraw_vote(db: Session, party_id: int, voter: User) -> None:
    deleted = db.query(TrustVote).filter(
        TrustVote.party_id == party_id,
        TrustVote.from_user_id == voter.id,
    ).delete(synchronize_session=False)
    if not deleted:
        db.rollback()
        raise NotFound("No trust vote to withdraw")
    db.commit()
    logger.info(f"Trust vote withdrawn in party {party_id} by {voter.id}")


def member_vote_view(db: Session, party_id: int, now: Optional[datetime] = None) -> List[dict]:
    """Active members with their live vote counts, oldest member first."""
    leader_id, tally = leader_with_tally(db, party_id, now)
    rows: Sequence = (
        db.query(Membership.user_id, Membership.joined_at, User.display_name, User.username)
        .join(User, User.id == Membership.user_id)
        .filter(Membership.party_id == party_id, Membership.left_at.is_(None))
        .order_by(Membership.joined_at.asc(), Membership.id.asc())
        .all()
    )
    return [
        {
            "user_id": uid,
            "display_name": display_name or username,
            "joined_at": joined_at,
            "trust_votes": tally.get(uid, 0),
            "is_leader": uid == leader_id,
        }
        for uid, joined_at, display_name, username in rows
    ]
