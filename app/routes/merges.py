# app/routes/merges.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.services.deps import get_db, get_current_user
from app.models.user import User
from app.schemas.merge import MergeIn, PartyMergeOut, MergeStatusOut, CycleCheckOut
from app.services.memberships import get_party_or_404
from app.services.merge_tree import check_merge_cycle, demerge_party, merge_party, merge_status

router = APIRouter(prefix="/api/parties", tags=["merges"])


@router.get("/{party_id}/merge", response_model=MergeStatusOut)
def get_merge_status(party_id: int, db: Session = Depends(get_db)):
    """
    Current parent (if merged), active children, and the member breakdown
    of this party's subtree.
    """
    return merge_status(db, party_id)


@router.get("/{party_id}/merge/check", response_model=CycleCheckOut)
def check_cycle(party_id: int, parent_party_id: int, db: Session = Depends(get_db)):
    get_party_or_404(db, party_id)
    return CycleCheckOut(
        child_party_id=party_id,
        parent_party_id=parent_party_id,
        would_cycle=check_merge_cycle(db, party_id, parent_party_id),
    )


@router.post("/{party_id}/merge", response_model=PartyMergeOut, status_code=201)
def merge(party_id: int, payload: MergeIn, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return merge_party(db, party_id, payload.parent_party_id, user)


@router.delete("/{party_id}/merge", response_model=PartyMergeOut)
def demerge(party_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return demerge_party(db, party_id, user)
