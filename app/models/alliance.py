# app/models/alliance.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Alliance(Base):
    __tablename__ = "alliances"

    id = Column(Integer, primary_key=True)
    name = Column(String(120), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    disbanded_at = Column(DateTime(timezone=True), nullable=True)

    members = relationship("AllianceMember", back_populates="alliance", passive_deletes=True)


class AllianceMember(Base):
    __tablename__ = "alliance_members"

    id = Column(Integer, primary_key=True)
    alliance_id = Column(Integer, ForeignKey("alliances.id", ondelete="CASCADE"), nullable=False, index=True)
    party_id = Column(Integer, ForeignKey("parties.id", ondelete="CASCADE"), nullable=False)
    joined_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    left_at = Column(DateTime(timezone=True), nullable=True)

    alliance = relationship("Alliance", back_populates="members")
    party = relationship("Party")

    # A party sits in at most one alliance at a time
    __table_args__ = (
        Index(
            "uq_alliance_members_active_party", "party_id", unique=True,
            postgresql_where=text("left_at IS NULL"),
            sqlite_where=text("left_at IS NULL"),
        ),
    )
