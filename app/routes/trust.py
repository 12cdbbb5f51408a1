# app/routes/trust.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.services.deps import get_db, get_current_user
from app.models.user import User
from app.schemas.trust import TrustVoteIn, TrustVoteOut, LeaderOut
from app.services.memberships import get_party_or_404
from app.services.trust import cast_vote, withdraw_vote, leader_with_tally

router = APIRouter(prefix="/api/parties", tags=["trust"])


@router.get("/{party_id}/leader", response_model=LeaderOut)
def get_leader(party_id: int, db: Session = Depends(get_db)):
    get_party_or_404(db, party_id)
    leader_id, tally = leader_with_tally(db, party_id)
    return LeaderOut(party_id=party_id, leader_id=leader_id, tally=tally)


@router.post("/{party_id}/trust", response_model=TrustVoteOut, status_code=201)
def give_trust_vote(
    party_id: int,
    payload: TrustVoteIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Replaces any earlier vote the caller gave in this party."""
    return cast_vote(db, party_id, user, payload.to_user_id)


@router.delete("/{party_id}/trust")
def withdraw_trust_vote(party_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    withdraw_vote(db, party_id, user)
    return {"success": True}
