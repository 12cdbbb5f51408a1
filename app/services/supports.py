# app/services/supports.py
from __future__ import annotations
import logging
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from app.core.errors import InvalidOperation, Unauthorized
from app.models.support import PartySupport, Revocation
from app.models.user import User
from app.services.memberships import get_party_or_404
from app.services.trust import is_party_leader

logger = logging.getLogger("openpolitics.supports")
logger.setLevel(logging.INFO)


def _check_pair(db: Session, from_party_id: int, to_party_id: int, actor: User, action: str) -> None:
    if from_party_id == to_party_id:
        raise InvalidOperation(f"A party cannot {action} itself")
    get_party_or_404(db, from_party_id)
    get_party_or_404(db, to_party_id)
    if not is_party_leader(db, from_party_id, actor.id):
        raise Unauthorized.forbidden(f"Only the party leader can {action} another party")


def add_support(
    db: Session,
    from_party_id: int,
    to_party_id: int,
    actor: User,
    support_type: str = "explicit",
    target_type: str = "issue",
    target_id: Optional[int] = None,
) -> PartySupport:
    # Repeated support is a renewal, not a duplicate
    _check_pair(db, from_party_id, to_party_id, actor, "support")
    row = PartySupport(
        from_party_id=from_party_id,
        to_party_id=to_party_id,
        support_type=support_type,
        target_type=target_type,
        target_id=target_id if target_id is not None else to_party_id,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info(f"Party {from_party_id} supports party {to_party_id} ({support_type})")
    return row


def revoke_support(
    db: Session,
    from_party_id: int,
    to_party_id: int,
    actor: User,
    reason: Optional[str] = None,
) -> Revocation:
    _check_pair(db, from_party_id, to_party_id, actor, "revoke support for")
    row = Revocation(
        party_id=to_party_id,
        revoking_party_id=from_party_id,
        target_type="issue",
        target_id=to_party_id,
        reason=reason or None,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info(f"Party {from_party_id} revoked support for party {to_party_id}")
    return row


def supports_for_party(db: Session, party_id: int) -> List[dict]:
    """
    Supports received by a party, oldest first. A support shows as revoked when
    any revocation from its supporting party targets this party, whatever the
    timestamps; the support row itself is never touched.
    """
    get_party_or_404(db, party_id)
    supports = (
        db.query(PartySupport)
        .options(joinedload(PartySupport.from_party))
        .filter(PartySupport.to_party_id == party_id)
        .order_by(PartySupport.created_at.asc(), PartySupport.id.asc())
        .all()
    )
    revoking = {
        rid for (rid,) in db.query(Revocation.revoking_party_id)
        .filter(Revocation.target_id == party_id)
        .all()
    }
    return [{"support": s, "is_revoked": s.from_party_id in revoking} for s in supports]
