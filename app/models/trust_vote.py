# app/models/trust_vote.py
from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint, Index
from app.core.database import Base


class TrustVote(Base):
    __tablename__ = "trust_votes"

    id = Column(Integer, primary_key=True)
    party_id = Column(Integer, ForeignKey("parties.id", ondelete="CASCADE"), nullable=False)
    from_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    to_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # Both set by the service: expires_at = created_at + TRUST_VOTE_TTL_DAYS
    created_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    # One vote per voter per party; recasting deletes the old row first
    __table_args__ = (
        UniqueConstraint("party_id", "from_user_id", name="uq_trust_votes_party_voter"),
        Index("ix_trust_votes_party_expires", "party_id", "expires_at"),
    )
