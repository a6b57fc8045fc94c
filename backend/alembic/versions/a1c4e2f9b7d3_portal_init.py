"""Portal tables: Church, profiles, participants, portal_sessions.

- participants.participant_id is indexed but NOT unique; codes are allocated
  by a read-then-insert in the app
- profiles.church_id is indexed but NOT unique; one secretary per church is
  checked in the app

Revision ID: a1c4e2f9b7d3
Revises:
Create Date: 2025-09-14
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "a1c4e2f9b7d3"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "Church",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("church_name", sa.String(200), nullable=False),
        sa.Column("church_place", sa.String(200), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_Church_id", "Church", ["id"])

    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("church_id", sa.Integer(), sa.ForeignKey("Church.id", ondelete="SET NULL"), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="secretary"),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("church", sa.String(200), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_profiles_phone", "profiles", ["phone"])
    op.create_index("ix_profiles_church_id", "profiles", ["church_id"])

    op.create_table(
        "participants",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("participant_id", sa.String(8), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("section", sa.String(20), nullable=True),
        sa.Column("competitions", sa.JSON(), nullable=False),
        sa.Column("secretary_id", sa.Uuid(), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_participants_id", "participants", ["id"])
    op.create_index("ix_participants_participant_id", "participants", ["participant_id"])
    op.create_index("ix_participants_secretary_id", "participants", ["secretary_id"])

    op.create_table(
        "portal_sessions",
        sa.Column("token_hash", sa.String(64), primary_key=True),
        sa.Column("kind", sa.String(20), nullable=False),
        sa.Column("profile_id", sa.Uuid(), nullable=True),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_portal_sessions_kind", "portal_sessions", ["kind"])
    op.create_index("ix_portal_sessions_profile_id", "portal_sessions", ["profile_id"])


def downgrade() -> None:
    op.drop_index("ix_portal_sessions_profile_id", table_name="portal_sessions")
    op.drop_index("ix_portal_sessions_kind", table_name="portal_sessions")
    op.drop_table("portal_sessions")

    op.drop_index("ix_participants_secretary_id", table_name="participants")
    op.drop_index("ix_participants_participant_id", table_name="participants")
    op.drop_index("ix_participants_id", table_name="participants")
    op.drop_table("participants")

    op.drop_index("ix_profiles_church_id", table_name="profiles")
    op.drop_index("ix_profiles_phone", table_name="profiles")
    op.drop_table("profiles")

    op.drop_index("ix_Church_id", table_name="Church")
    op.drop_table("Church")
