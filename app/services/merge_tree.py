# app/services/merge_tree.py
"""
Party merge forest.

Each party has at most one active parent (a ``PartyMerge`` row with
``demerged_at`` unset). Members roll up from children into parents, never
the other way round, so a party's total is its own active members plus those
of every party below it.

Cycle prevention happens before an edge is inserted. Walks over the forest
are still bounded by ``MERGE_TREE_MAX_DEPTH`` and never revisit a node, so
aggregation terminates even if a cycle ever slips into the table.
"""
from __future__ import annotations
import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.clock import utcnow
from app.core.config import MERGE_TREE_MAX_DEPTH
from app.core.errors import (
    AlreadyMerged, CycleDetected, InvalidMerge, NotMerged, Unauthorized,
)
from app.models.party import Party
from app.models.party_merge import PartyMerge
from app.models.user import User
from app.services.memberships import count_active_members, get_party_or_404
from app.services.trust import get_party_leader

logger = logging.getLogger("openpolitics.merge_tree")
logger.setLevel(logging.INFO)

ParentLookup = Callable[[int], Optional[int]]
ChildrenLookup = Callable[[List[int]], Dict[int, List[int]]]


# ---------- pure walks ----------

def would_create_cycle(
    child_id: int,
    parent_id: int,
    parent_of: ParentLookup,
    max_depth: int = MERGE_TREE_MAX_DEPTH,
) -> bool:
    """
    True if linking child -> parent would close a loop, i.e. child is parent
    itself or one of parent's ancestors. A walk that runs past max_depth or
    meets a node twice is treated as a cycle as well.
    """
    if child_id == parent_id:
        return True

    seen = set()
    node: Optional[int] = parent_id
    depth = 0
    while node is not None:
        if node == child_id or node in seen:
            return True
        if depth >= max_depth:
            logger.warning(f"Ancestor walk from party {parent_id} exceeded depth {max_depth}")
            return True
        seen.add(node)
        node = parent_of(node)
        depth += 1
    return False


def walk_descendants(
    root_id: int,
    children_of: ChildrenLookup,
    max_depth: int = MERGE_TREE_MAX_DEPTH,
) -> List[Tuple[int, int]]:
    """
    Breadth-first (party_id, depth) pairs for root and everything merged
    below it, root first. children_of receives a whole frontier at once so a
    store-backed lookup costs one query per level.
    """
    out: List[Tuple[int, int]] = [(root_id, 0)]
    visited = {root_id}
    frontier = [root_id]
    depth = 0

    while frontier:
        if depth >= max_depth:
            logger.warning(f"Descendant walk from party {root_id} truncated at depth {max_depth}")
            break
        depth += 1
        children = children_of(frontier)
        next_frontier: List[int] = []
        for pid in frontier:
            for child in sorted(children.get(pid, [])):
                if child in visited:
                    continue
                visited.add(child)
                out.append((child, depth))
                next_frontier.append(child)
        frontier = next_frontier

    return out


# ---------- store lookups ----------

def active_merge_for_child(db: Session, child_id: int) -> Optional[PartyMerge]:
    return db.query(PartyMerge).filter(
        PartyMerge.child_party_id == child_id,
        PartyMerge.demerged_at.is_(None),
    ).first()


def _parent_lookup(db: Session) -> ParentLookup:
    def parent_of(party_id: int) -> Optional[int]:
        row = db.query(PartyMerge.parent_party_id).filter(
            PartyMerge.child_party_id == party_id,
            PartyMerge.demerged_at.is_(None),
        ).first()
        return row.parent_party_id if row else None
    return parent_of


def _children_lookup(db: Session) -> ChildrenLookup:
    def children_of(parent_ids: List[int]) -> Dict[int, List[int]]:
        rows = db.query(PartyMerge.parent_party_id, PartyMerge.child_party_id).filter(
            PartyMerge.parent_party_id.in_(parent_ids),
            PartyMerge.demerged_at.is_(None),
        ).all()
        out: Dict[int, List[int]] = {}
        for parent, child in rows:
            out.setdefault(parent, []).append(child)
        return out
    return children_of


def check_merge_cycle(db: Session, child_id: int, parent_id: int) -> bool:
    return would_create_cycle(child_id, parent_id, _parent_lookup(db))


def descendant_ids(db: Session, party_id: int) -> List[int]:
    return [pid for pid, _ in walk_descendants(party_id, _children_lookup(db))]


def total_members(db: Session, party_id: int) -> int:
    counts = count_active_members(db, descendant_ids(db, party_id))
    return sum(counts.values())


def member_breakdown(db: Session, party_id: int) -> List[dict]:
    ids = descendant_ids(db, party_id)
    counts = count_active_members(db, ids)
    issues = dict(db.query(Party.id, Party.issue_text).filter(Party.id.in_(ids)).all())
    return [
        {
            "party_id": pid,
            "issue_text": issues.get(pid, ""),
            "member_count": counts.get(pid, 0),
            "is_self": pid == party_id,
        }
        for pid in ids
    ]


# ---------- transitions ----------

def merge_party(db: Session, child_id: int, parent_id: int, actor: User) -> PartyMerge:
    if child_id == parent_id:
        raise InvalidMerge()

    get_party_or_404(db, child_id)
    get_party_or_404(db, parent_id)

    if get_party_leader(db, child_id) != actor.id:
        raise Unauthorized.forbidden("Only the party leader can initiate a merge")

    if active_merge_for_child(db, child_id):
        raise AlreadyMerged()

    if check_merge_cycle(db, child_id, parent_id):
        raise CycleDetected()

    row = PartyMerge(child_party_id=child_id, parent_party_id=parent_id, merged_by=actor.id)
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AlreadyMerged()
    db.refresh(row)
    logger.info(f"Party {child_id} merged into {parent_id} by user {actor.id}")
    return row


def demerge_party(db: Session, child_id: int, actor: User) -> PartyMerge:
    current = active_merge_for_child(db, child_id)
    if not current:
        raise NotMerged()

    if current.merged_by != actor.id and get_party_leader(db, child_id) != actor.id:
        raise Unauthorized.forbidden("Only the party leader can demerge")

    current.demerged_at = utcnow()
    current.demerged_by = actor.id
    db.commit()
    db.refresh(current)
    logger.info(f"Party {child_id} demerged from {current.parent_party_id} by user {actor.id}")
    return current


def merge_status(db: Session, party_id: int) -> dict:
    get_party_or_404(db, party_id)
    children: Iterable[PartyMerge] = (
        db.query(PartyMerge)
        .options(joinedload(PartyMerge.child_party))
        .filter(PartyMerge.parent_party_id == party_id, PartyMerge.demerged_at.is_(None))
        .order_by(PartyMerge.merged_at.asc(), PartyMerge.id.asc())
        .all()
    )
    current = (
        db.query(PartyMerge)
        .options(joinedload(PartyMerge.parent_party))
        .filter(PartyMerge.child_party_id == party_id, PartyMerge.demerged_at.is_(None))
        .first()
    )
    breakdown = member_breakdown(db, party_id)
    return {
        "current_merge": current,
        "children": list(children),
        "breakdown": breakdown,
        "total_members": sum(r["member_count"] for r in breakdown),
    }
