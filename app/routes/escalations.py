# app/routes/escalations.py
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.services.deps import get_db, get_current_user
from app.models.user import User
from app.schemas.escalation import EscalationIn, EscalationOut, TrailNode
from app.services.escalations import escalate, escalation_trail

router = APIRouter(prefix="/api/parties", tags=["escalations"])


@router.get("/{party_id}/escalations", response_model=List[TrailNode])
def get_trail(party_id: int, db: Session = Depends(get_db)):
    return escalation_trail(db, party_id)


@router.post("/{party_id}/escalations", response_model=EscalationOut, status_code=201)
def escalate_issue(
    party_id: int,
    payload: EscalationIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return escalate(db, party_id, payload.target_party_id, user)
