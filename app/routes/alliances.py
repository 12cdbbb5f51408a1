# app/routes/alliances.py
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.services.deps import get_db, get_current_user
from app.models.user import User
from app.schemas.alliance import (
    AllianceCreate, AllianceMemberIn, AllianceOut, AllianceMemberOut,
    AllianceWithMembers, AllianceLeaveOut,
)
from app.services.alliances import (
    add_alliance_member, create_alliance, disband_alliance, leave_alliance, list_active_alliances,
)

router = APIRouter(prefix="/api/alliances", tags=["alliances"])


@router.get("", response_model=List[AllianceWithMembers])
def list_alliances(db: Session = Depends(get_db)):
    out = []
    for row in list_active_alliances(db):
        a = row["alliance"]
        out.append(AllianceWithMembers(
            **AllianceOut.model_validate(a).model_dump(),
            members=row["members"],
        ))
    return out


@router.post("", response_model=AllianceOut, status_code=201)
def create(payload: AllianceCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return create_alliance(db, payload.party_ids, user, payload.name)


@router.post("/{alliance_id}/members", response_model=AllianceMemberOut, status_code=201)
def add_member(
    alliance_id: int,
    payload: AllianceMemberIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return add_alliance_member(db, alliance_id, payload.party_id, user)


@router.delete("/{alliance_id}/members/{party_id}", response_model=AllianceLeaveOut)
def leave(alliance_id: int, party_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    disbanded = leave_alliance(db, alliance_id, party_id, user)
    if disbanded:
        return AllianceLeaveOut(disbanded=True, reason="Less than 2 members remaining")
    return AllianceLeaveOut(disbanded=False)


@router.delete("/{alliance_id}", response_model=AllianceLeaveOut)
def disband(alliance_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    disband_alliance(db, alliance_id, user)
    return AllianceLeaveOut(disbanded=True)
