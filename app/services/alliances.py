# app/services/alliances.py
from __future__ import annotations
import logging
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.core.clock import utcnow
from app.core.errors import (
    AlreadyAllied, DependencyFailure, InvalidOperation, NotFound, Unauthorized,
)
from app.models.alliance import Alliance, AllianceMember
from app.models.party import Party
from app.models.user import User
from app.services.trust import is_party_leader

logger = logging.getLogger("openpolitics.alliances")
logger.setLevel(logging.INFO)

MIN_ALLIANCE_SIZE = 2


def _get_alliance(db: Session, alliance_id: int) -> Alliance:
    row = db.query(Alliance).filter(Alliance.id == alliance_id).first()
    if not row:
        raise NotFound("Alliance not found")
    return row


def _active_members_q(db: Session, alliance_id: int):
    return db.query(AllianceMember).filter(
        AllianceMember.alliance_id == alliance_id,
        AllianceMember.left_at.is_(None),
    )


def _already_allied(db: Session, party_ids: List[int]) -> bool:
    return db.query(AllianceMember.id).filter(
        AllianceMember.party_id.in_(party_ids),
        AllianceMember.left_at.is_(None),
    ).first() is not None


def _close_alliance(db: Session, alliance: Alliance) -> None:
    now = utcnow()
    alliance.disbanded_at = now
    _active_members_q(db, alliance.id).update({AllianceMember.left_at: now}, synchronize_session=False)


def _rollback_alliance(db: Session, alliance_id: int) -> None:
    """Compensation for a failed member insert. Safe to run more than once."""
    db.rollback()
    try:
        db.query(Alliance).filter(Alliance.id == alliance_id).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Rollback of alliance {alliance_id} failed", exc_info=True)
        raise
    logger.warning(f"Alliance {alliance_id} rolled back after member insert failure")


def create_alliance(db: Session, party_ids: List[int], actor: User, name: Optional[str] = None) -> Alliance:
    ids = list(dict.fromkeys(party_ids))
    if len(ids) < MIN_ALLIANCE_SIZE:
        raise InvalidOperation(f"At least {MIN_ALLIANCE_SIZE} distinct parties are required to create an alliance")

    found = {pid for (pid,) in db.query(Party.id).filter(Party.id.in_(ids)).all()}
    missing = [pid for pid in ids if pid not in found]
    if missing:
        raise NotFound(f"Party not found: {missing[0]}")

    if not any(is_party_leader(db, pid, actor.id) for pid in ids):
        raise Unauthorized.forbidden("Only a founding party's leader can create an alliance")

    if _already_allied(db, ids):
        raise AlreadyAllied()

    alliance = Alliance(name=name or None)
    db.add(alliance)
    db.commit()
    db.refresh(alliance)
    alliance_id = alliance.id

    try:
        db.add_all([AllianceMember(alliance_id=alliance_id, party_id=pid) for pid in ids])
        db.commit()
    except IntegrityError:
        _rollback_alliance(db, alliance_id)
        raise AlreadyAllied()
    except SQLAlchemyError:
        _rollback_alliance(db, alliance_id)
        raise DependencyFailure("Could not add alliance members")

    db.refresh(alliance)
    logger.info(f"Alliance {alliance_id} created with parties {ids} by user {actor.id}")
    return alliance


def add_alliance_member(db: Session, alliance_id: int, party_id: int, actor: User) -> AllianceMember:
    alliance = _get_alliance(db, alliance_id)
    if alliance.disbanded_at is not None:
        raise InvalidOperation("Alliance has been disbanded")
    if not db.query(Party.id).filter(Party.id == party_id).first():
        raise NotFound("Party not found")
    if not is_party_leader(db, party_id, actor.id):
        raise Unauthorized.forbidden("Only the party leader can join an alliance")
    if _already_allied(db, [party_id]):
        raise AlreadyAllied("This party is already in an alliance. Leave the current alliance first.")

    row = AllianceMember(alliance_id=alliance_id, party_id=party_id)
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AlreadyAllied("This party is already in an alliance. Leave the current alliance first.")
    db.refresh(row)
    logger.info(f"Party {party_id} joined alliance {alliance_id}")
    return row


def leave_alliance(db: Session, alliance_id: int, party_id: int, actor: User) -> bool:
    """Close the party's row; returns True when the alliance disbanded as a result."""
    alliance = _get_alliance(db, alliance_id)
    row = _active_members_q(db, alliance_id).filter(AllianceMember.party_id == party_id).first()
    if not row:
        raise NotFound("Party is not an active member of this alliance")
    if not is_party_leader(db, party_id, actor.id):
        raise Unauthorized.forbidden("Only the party leader can leave an alliance")

    row.left_at = utcnow()
    db.flush()

    remaining = active_member_count(db, alliance_id)
    disbanded = remaining < MIN_ALLIANCE_SIZE
    if disbanded:
        _close_alliance(db, alliance)

    db.commit()
    if disbanded:
        logger.info(f"Alliance {alliance_id} disbanded: {remaining} member(s) left after party {party_id} left")
    else:
        logger.info(f"Party {party_id} left alliance {alliance_id}")
    return disbanded


def disband_alliance(db: Session, alliance_id: int, actor: User) -> Alliance:
    alliance = _get_alliance(db, alliance_id)
    if alliance.disbanded_at is not None:
        raise InvalidOperation("Alliance has already been disbanded")

    member_ids = [m.party_id for m in _active_members_q(db, alliance_id).all()]
    if not any(is_party_leader(db, pid, actor.id) for pid in member_ids):
        raise Unauthorized.forbidden("Only a member party's leader can disband the alliance")

    _close_alliance(db, alliance)
    db.commit()
    db.refresh(alliance)
    logger.info(f"Alliance {alliance_id} disbanded by user {actor.id}")
    return alliance


def active_alliance_for_party(db: Session, party_id: int) -> Optional[AllianceMember]:
    return db.query(AllianceMember).filter(
        AllianceMember.party_id == party_id,
        AllianceMember.left_at.is_(None),
    ).first()


def list_active_alliances(db: Session) -> List[dict]:
    """Alliances not disbanded and still holding at least two active members."""
    alliances = (
        db.query(Alliance)
        .filter(Alliance.disbanded_at.is_(None))
        .order_by(Alliance.created_at.desc(), Alliance.id.desc())
        .all()
    )
    if not alliances:
        return []

    members = (
        db.query(AllianceMember)
        .options(joinedload(AllianceMember.party))
        .filter(
            AllianceMember.alliance_id.in_([a.id for a in alliances]),
            AllianceMember.left_at.is_(None),
        )
        .order_by(AllianceMember.joined_at.asc(), AllianceMember.id.asc())
        .all()
    )
    by_alliance: Dict[int, List[AllianceMember]] = {}
    for m in members:
        by_alliance.setdefault(m.alliance_id, []).append(m)

    return [
        {"alliance": a, "members": by_alliance[a.id]}
        for a in alliances
        if len(by_alliance.get(a.id, [])) >= MIN_ALLIANCE_SIZE
    ]


def active_member_count(db: Session, alliance_id: int) -> int:
    return db.query(func.count(AllianceMember.id)).filter(
        AllianceMember.alliance_id == alliance_id,
        AllianceMember.left_at.is_(None),
    ).scalar() or 0
