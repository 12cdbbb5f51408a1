# app/models/party_merge.py
from sqlalchemy import Column, Integer, DateTime, ForeignKey, CheckConstraint, Index, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class PartyMerge(Base):
    __tablename__ = "party_merges"

    id = Column(Integer, primary_key=True)
    child_party_id = Column(Integer, ForeignKey("parties.id", ondelete="CASCADE"), nullable=False)
    parent_party_id = Column(Integer, ForeignKey("parties.id", ondelete="CASCADE"), nullable=False)
    merged_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    merged_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    demerged_at = Column(DateTime(timezone=True), nullable=True)
    demerged_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    parent_party = relationship("Party", foreign_keys=[parent_party_id])
    child_party = relationship("Party", foreign_keys=[child_party_id])

    __table_args__ = (
        CheckConstraint("child_party_id <> parent_party_id", name="ck_party_merges_not_self"),
        # A party merges into exactly one parent at a time
        Index(
            "uq_party_merges_active_child", "child_party_id", unique=True,
            postgresql_where=text("demerged_at IS NULL"),
            sqlite_where=text("demerged_at IS NULL"),
        ),
        Index("ix_party_merges_parent_active", "parent_party_id", "demerged_at"),
    )
