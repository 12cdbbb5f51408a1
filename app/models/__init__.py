# app/models/__init__.py
from app.core.database import Base  # re-export for convenience

# Import all model modules so their tables attach to Base.metadata
from app.models.user import User
from app.models.party import Party, Membership, PartyLike
from app.models.trust_vote import TrustVote
from app.models.question import Question, Answer
from app.models.alliance import Alliance, AllianceMember
from app.models.support import PartySupport, Revocation
from app.models.escalation import Escalation
from app.models.party_merge import PartyMerge

__all__ = [
    "Base",
    "User",
    "Party",
    "Membership",
    "PartyLike",
    "TrustVote",
    "Question",
    "Answer",
    "Alliance",
    "AllianceMember",
    "PartySupport",
    "Revocation",
    "Escalation",
    "PartyMerge",
]
