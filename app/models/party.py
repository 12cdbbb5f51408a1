# app/models/party.py
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey, JSON,
    UniqueConstraint, Index, text
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Party(Base):
    __tablename__ = "parties"

    id = Column(Integer, primary_key=True)
    issue_text = Column(String(280), nullable=False)
    pincodes = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)  # ["560001", ...]
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    creator = relationship("User", foreign_keys=[created_by])


class Membership(Base):
    __tablename__ = "memberships"

    id = Column(Integer, primary_key=True)
    party_id = Column(Integer, ForeignKey("parties.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    joined_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    left_at = Column(DateTime(timezone=True), nullable=True)
    leave_feedback = Column(Text, nullable=True)

    user = relationship("User", foreign_keys=[user_id])

    # A user belongs to at most one party at a time
    __table_args__ = (
        Index(
            "uq_memberships_active_user", "user_id", unique=True,
            postgresql_where=text("left_at IS NULL"),
            sqlite_where=text("left_at IS NULL"),
        ),
        Index("ix_memberships_party_active", "party_id", "left_at"),
    )


class PartyLike(Base):
    __tablename__ = "party_likes"

    id = Column(Integer, primary_key=True)
    party_id = Column(Integer, ForeignKey("parties.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("party_id", "user_id", name="uq_party_likes_party_user"),
    )
