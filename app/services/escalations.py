# app/services/escalations.py
from __future__ import annotations
import logging
from typing import List

from sqlalchemy.orm import Session, joinedload

from app.core.errors import Unauthorized
from app.models.escalation import Escalation
from app.models.user import User
from app.services.levels import party_level
from app.services.memberships import count_active_members, get_party_or_404
from app.services.trust import is_party_leader

logger = logging.getLogger("openpolitics.escalations")
logger.setLevel(logging.INFO)


def escalate(db: Session, source_party_id: int, target_party_id: int, actor: User) -> Escalation:
    # Duplicates and loops are allowed: the same issue may go to many parties
    get_party_or_404(db, source_party_id)
    get_party_or_404(db, target_party_id)
    if not is_party_leader(db, source_party_id, actor.id):
        raise Unauthorized.forbidden("Only the party leader can escalate an issue")

    row = Escalation(source_party_id=source_party_id, target_party_id=target_party_id)
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info(f"Party {source_party_id} escalated to party {target_party_id}")
    return row


def escalation_trail(db: Session, source_party_id: int) -> List[dict]:
    """
    The source party followed by every party it escalated to, oldest
    escalation first. One level only; callers follow a target's own trail
    for further hops.
    """
    source = get_party_or_404(db, source_party_id)
    edges = (
        db.query(Escalation)
        .options(joinedload(Escalation.target_party))
        .filter(Escalation.source_party_id == source_party_id)
        .order_by(Escalation.created_at.asc(), Escalation.id.asc())
        .all()
    )
    counts = count_active_members(db, [source_party_id] + [e.target_party_id for e in edges])

    trail = [{
        "party": source,
        "member_count": counts[source_party_id],
        "level": party_level(counts[source_party_id]),
        "escalated_at": None,
    }]
    for e in edges:
        trail.append({
            "party": e.target_party,
            "member_count": counts[e.target_party_id],
            "level": party_level(counts[e.target_party_id]),
            "escalated_at": e.created_at,
        })
    return trail
