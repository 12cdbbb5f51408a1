# app/models/support.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class PartySupport(Base):
    __tablename__ = "party_supports"

    id = Column(Integer, primary_key=True)
    from_party_id = Column(Integer, ForeignKey("parties.id", ondelete="CASCADE"), nullable=False)
    to_party_id = Column(Integer, ForeignKey("parties.id", ondelete="CASCADE"), nullable=False)
    support_type = Column(String(16), nullable=False, server_default="explicit")  # explicit|implicit
    target_type = Column(String(16), nullable=False, server_default="issue")  # issue|question
    target_id = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    from_party = relationship("Party", foreign_keys=[from_party_id])

    __table_args__ = (
        CheckConstraint("support_type IN ('explicit', 'implicit')", name="ck_party_supports_type"),
        CheckConstraint("target_type IN ('issue', 'question')", name="ck_party_supports_target_type"),
        Index("ix_party_supports_to_party", "to_party_id"),
    )


class Revocation(Base):
    __tablename__ = "revocations"

    id = Column(Integer, primary_key=True)
    party_id = Column(Integer, ForeignKey("parties.id", ondelete="CASCADE"), nullable=False)  # party whose support is withdrawn
    revoking_party_id = Column(Integer, ForeignKey("parties.id", ondelete="CASCADE"), nullable=False)
    target_type = Column(String(16), nullable=False, server_default="issue")
    target_id = Column(Integer, nullable=False)
    reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_revocations_revoker_target", "revoking_party_id", "target_id"),
    )
