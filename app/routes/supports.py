# app/routes/supports.py
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.services.deps import get_db, get_current_user
from app.models.user import User
from app.schemas.support import SupportIn, RevokeIn, SupportOut, SupportWithParty, RevocationOut
from app.services.supports import add_support, revoke_support, supports_for_party

router = APIRouter(prefix="/api/parties", tags=["supports"])


@router.get("/{party_id}/supports", response_model=List[SupportWithParty])
def list_supports(party_id: int, db: Session = Depends(get_db)):
    out = []
    for row in supports_for_party(db, party_id):
        s = row["support"]
        out.append(SupportWithParty(
            **SupportOut.model_validate(s).model_dump(),
            from_party=s.from_party,
            is_revoked=row["is_revoked"],
        ))
    return out


@router.post("/{party_id}/support", response_model=SupportOut, status_code=201)
def support(party_id: int, payload: SupportIn, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return add_support(
        db, payload.from_party_id, party_id, user,
        support_type=payload.support_type,
        target_type=payload.target_type,
        target_id=payload.target_id,
    )


@router.post("/{party_id}/revoke", response_model=RevocationOut, status_code=201)
def revoke(party_id: int, payload: RevokeIn, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return revoke_support(db, payload.from_party_id, party_id, user, payload.reason)
