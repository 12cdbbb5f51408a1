"""Initial schema

Revision ID: 3f9c1a7b2d10
Revises:
Create Date: 2026-10-19 00:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3f9c1a7b2d10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ----- Users -----
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("display_name", sa.String(length=80), nullable=True),
        sa.Column("pincode", sa.String(length=6), nullable=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_id", "users", ["id"], unique=False)
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    # ----- Parties -----
    op.create_table(
        "parties",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("issue_text", sa.String(length=280), nullable=False),
        sa.Column("pincodes", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    # ----- Memberships -----
    op.create_table(
        "memberships",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("party_id", sa.Integer(), sa.ForeignKey("parties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("left_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("leave_feedback", sa.Text(), nullable=True),
    )
    op.create_index("ix_memberships_party_id", "memberships", ["party_id"])
    op.create_index("ix_memberships_user_id", "memberships", ["user_id"])
    op.create_index("ix_memberships_party_active", "memberships", ["party_id", "left_at"])
    op.create_index(
        "uq_memberships_active_user", "memberships", ["user_id"], unique=True,
        postgresql_where=sa.text("left_at IS NULL"),
    )

    # ----- Likes -----
    op.create_table(
        "party_likes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("party_id", sa.Integer(), sa.ForeignKey("parties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("party_id", "user_id", name="uq_party_likes_party_user"),
    )
    op.create_index("ix_party_likes_party_id", "party_likes", ["party_id"])

    # ----- Trust votes -----
    op.create_table(
        "trust_votes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("party_id", sa.Integer(), sa.ForeignKey("parties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("from_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("to_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("party_id", "from_user_id", name="uq_trust_votes_party_voter"),
    )
    op.create_index("ix_trust_votes_party_expires", "trust_votes", ["party_id", "expires_at"])

    # ----- Questions / answers -----
    op.create_table(
        "questions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("party_id", sa.Integer(), sa.ForeignKey("parties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("asked_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("question_text", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_questions_party_id", "questions", ["party_id"])

    op.create_table(
        "answers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("question_id", sa.Integer(), sa.ForeignKey("questions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("answered_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("answer_text", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_answers_question_id", "answers", ["question_id"])

    # ----- Alliances -----
    op.create_table(
        "alliances",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("disbanded_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_table(
        "alliance_members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("alliance_id", sa.Integer(), sa.ForeignKey("alliances.id", ondelete="CASCADE"), nullable=False),
        sa.Column("party_id", sa.Integer(), sa.ForeignKey("parties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("left_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_alliance_members_alliance_id", "alliance_members", ["alliance_id"])
    op.create_index(
        "uq_alliance_members_active_party", "alliance_members", ["party_id"], unique=True,
        postgresql_where=sa.text("left_at IS NULL"),
    )

    # ----- Supports / revocations -----
    op.create_table(
        "party_supports",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("from_party_id", sa.Integer(), sa.ForeignKey("parties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("to_party_id", sa.Integer(), sa.ForeignKey("parties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("support_type", sa.String(length=16), nullable=False, server_default="explicit"),
        sa.Column("target_type", sa.String(length=16), nullable=False, server_default="issue"),
        sa.Column("target_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("support_type IN ('explicit', 'implicit')", name="ck_party_supports_type"),
        sa.CheckConstraint("target_type IN ('issue', 'question')", name="ck_party_supports_target_type"),
    )
    op.create_index("ix_party_supports_to_party", "party_supports", ["to_party_id"])

    op.create_table(
        "revocations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("party_id", sa.Integer(), sa.ForeignKey("parties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("revoking_party_id", sa.Integer(), sa.ForeignKey("parties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("target_type", sa.String(length=16), nullable=False, server_default="issue"),
        sa.Column("target_id", sa.Integer(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_revocations_revoker_target", "revocations", ["revoking_party_id", "target_id"])

    # ----- Escalations -----
    op.create_table(
        "escalations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("source_party_id", sa.Integer(), sa.ForeignKey("parties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("target_party_id", sa.Integer(), sa.ForeignKey("parties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_escalations_source_party_id", "escalations", ["source_party_id"])

    # ----- Party merges -----
    op.create_table(
        "party_merges",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("child_party_id", sa.Integer(), sa.ForeignKey("parties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("parent_party_id", sa.Integer(), sa.ForeignKey("parties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("merged_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("merged_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("demerged_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("demerged_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.CheckConstraint("child_party_id <> parent_party_id", name="ck_party_merges_not_self"),
    )
    op.create_index("ix_party_merges_parent_active", "party_merges", ["parent_party_id", "demerged_at"])
    op.create_index(
        "uq_party_merges_active_child", "party_merges", ["child_party_id"], unique=True,
        postgresql_where=sa.text("demerged_at IS NULL"),
    )


def downgrade() -> None:
    op.drop_index("uq_party_merges_active_child", table_name="party_merges")
    op.drop_index("ix_party_merges_parent_active", table_name="party_merges")
    op.drop_table("party_merges")

    op.drop_index("ix_escalations_source_party_id", table_name="escalations")
    op.drop_table("escalations")

    op.drop_index("ix_revocations_revoker_target", table_name="revocations")
    op.drop_table("revocations")
    op.drop_index("ix_party_supports_to_party", table_name="party_supports")
    op.drop_table("party_supports")

    op.drop_index("uq_alliance_members_active_party", table_name="alliance_members")
    op.drop_index("ix_alliance_members_alliance_id", table_name="alliance_members")
    op.drop_table("alliance_members")
    op.drop_table("alliances")

    op.drop_index("ix_answers_question_id", table_name="answers")
    op.drop_table("answers")
    op.drop_index("ix_questions_party_id", table_name="questions")
    op.drop_table("questions")

    op.drop_index("ix_trust_votes_party_expires", table_name="trust_votes")
    op.drop_table("trust_votes")

    op.drop_index("ix_party_likes_party_id", table_name="party_likes")
    op.drop_table("party_likes")

    op.drop_index("uq_memberships_active_user", table_name="memberships")
    op.drop_index("ix_memberships_party_active", table_name="memberships")
    op.drop_index("ix_memberships_user_id", table_name="memberships")
    op.drop_index("ix_memberships_party_id", table_name="memberships")
    op.drop_table("memberships")

    op.drop_table("parties")

    op.drop_index("ix_users_username", table_name="users")
    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")
