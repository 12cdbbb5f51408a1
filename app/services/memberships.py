# app/services/memberships.py
from __future__ import annotations
import logging
from typing import Dict, Iterable, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.core.errors import ConflictAlreadyExists, NotFound
from app.models.party import Party, Membership, PartyLike
from app.models.trust_vote import TrustVote
from app.models.user import User

logger = logging.getLogger("openpolitics.memberships")
logger.setLevel(logging.INFO)


def get_party_or_404(db: Session, party_id: int) -> Party:
    party = db.query(Party).filter(Party.id == party_id).first()
    if not party:
        raise NotFound("Party not found")
    return party


def active_membership(db: Session, user_id: int, party_id: Optional[int] = None) -> Optional[Membership]:
    q = db.query(Membership).filter(Membership.user_id == user_id, Membership.left_at.is_(None))
    if party_id is not None:
        q = q.filter(Membership.party_id == party_id)
    return q.first()


def is_active_member(db: Session, party_id: int, user_id: int) -> bool:
    return active_membership(db, user_id, party_id) is not None


def count_active_members(db: Session, party_ids: Iterable[int]) -> Dict[int, int]:
    """Active member count per party in one grouped query; absent parties map to 0."""
    ids = list(set(party_ids))
    if not ids:
        return {}
    rows = (
        db.query(Membership.party_id, func.count(Membership.id))
        .filter(Membership.party_id.in_(ids), Membership.left_at.is_(None))
        .group_by(Membership.party_id)
        .all()
    )
    counts = {pid: 0 for pid in ids}
    for pid, cnt in rows:
        counts[pid] = int(cnt)
    return counts


def member_count(db: Session, party_id: int) -> int:
    return count_active_members(db, [party_id])[party_id]


def join_party(db: Session, party_id: int, user: User) -> Membership:
    get_party_or_404(db, party_id)

    if active_membership(db, user.id, party_id):
        raise ConflictAlreadyExists("Already a member")
    if active_membership(db, user.id):
        raise ConflictAlreadyExists(
            "You can only join one party at a time. Leave your current party first."
        )

    row = Membership(party_id=party_id, user_id=user.id)
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent join; the partial unique index caught it
        db.rollback()
        raise ConflictAlreadyExists(
            "You can only join one party at a time. Leave your current party first."
        )
    db.refresh(row)
    logger.info(f"User {user.id} joined party {party_id}")
    return row


def leave_party(db: Session, party_id: int, user: User, feedback: Optional[str] = None) -> Membership:
    row = active_membership(db, user.id, party_id)
    if not row:
        raise NotFound("Not a member of this party")

    row.left_at = utcnow()
    row.leave_feedback = feedback or None

    # Votes given by the leaving member go with them
    db.query(TrustVote).filter(
        TrustVote.party_id == party_id,
        TrustVote.from_user_id == user.id,
    ).delete(synchronize_session=False)

    db.commit()
    db.refresh(row)
    logger.info(f"User {user.id} left party {party_id}")
    return row


# ---------- likes ----------

def like_count(db: Session, party_id: int) -> int:
    return db.query(func.count(PartyLike.id)).filter(PartyLike.party_id == party_id).scalar() or 0


def has_liked(db: Session, party_id: int, user_id: int) -> bool:
    return db.query(PartyLike.id).filter(
        PartyLike.party_id == party_id, PartyLike.user_id == user_id
    ).first() is not None


def like_party(db: Session, party_id: int, user: User) -> bool:
    """Returns True when a new like was recorded, False when it already existed."""
    get_party_or_404(db, party_id)
    if has_liked(db, party_id, user.id):
        return False

    db.add(PartyLike(party_id=party_id, user_id=user.id))
    try:
        db.commit()
    except IntegrityError:
        # Duplicate like from a concurrent request is still a success
        db.rollback()
        return False
    return True


def unlike_party(db: Session, party_id: int, user: User) -> bool:
    get_party_or_404(db, party_id)
    deleted = db.query(PartyLike).filter(
        PartyLike.party_id == party_id, PartyLike.user_id == user.id
    ).delete(synchronize_session=False)
    db.commit()
    return bool(deleted)
