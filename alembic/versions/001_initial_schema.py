"""Initial schema with all tables.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

This migration creates the complete Questlog database schema:
- Tables: users, user_sessions, subjects, sessions, goals, pips,
  user_templates, user_settings, kv_entries
- Indexes: session lookups by date and subject, goal lookups, KV expiry

Column types are portable: the same migration runs on SQLite and PostgreSQL.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # ==========================================================================
    # USERS TABLE
    # ==========================================================================
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("avatar_url", sa.String(1024), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("preferences", sa.JSON(), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # ==========================================================================
    # USER_SESSIONS TABLE (bearer-token logins)
    # ==========================================================================
    op.create_table(
        "user_sessions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("user_agent", sa.String(512), nullable=False, server_default=""),
        sa.Column("ip_address", sa.String(64), nullable=False, server_default="unknown"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_user_sessions_user_active", "user_sessions", ["user_id", "is_active"])

    # ==========================================================================
    # SUBJECTS TABLE (config + progress, keyed by user and subject id)
    # ==========================================================================
    op.create_table(
        "subjects",
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("emoji", sa.String(32), nullable=False),
        sa.Column("color", sa.String(7), nullable=False),
        sa.Column("quest_types", sa.JSON(), nullable=False),
        sa.Column("achievements", sa.JSON(), nullable=False),
        sa.Column("pip_amount", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("target_hours", sa.Float(), nullable=False, server_default="8"),
        sa.Column("resources", sa.JSON(), nullable=False),
        sa.Column("custom_fields", sa.JSON(), nullable=False),
        sa.Column("total_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("longest_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("achievement_level", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_study_date", sa.Date(), nullable=True),
        sa.Column("total_xp", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("user_id", "id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint("longest_streak >= current_streak", name="longest_ge_current"),
        sa.CheckConstraint("current_streak >= 0", name="current_streak_non_negative"),
    )

    # ==========================================================================
    # SESSIONS TABLE (append-only study log)
    # ==========================================================================
    op.create_table(
        "sessions",
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("subject_id", sa.String(64), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("quest_type", sa.String(64), nullable=False),
        sa.Column("xp_earned", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["user_id", "subject_id"], ["subjects.user_id", "subjects.id"], ondelete="CASCADE"
        ),
    )
    op.create_index("idx_sessions_user_date", "sessions", ["user_id", "date"])
    op.create_index("idx_sessions_user_subject", "sessions", ["user_id", "subject_id"])

    # ==========================================================================
    # GOALS TABLE
    # ==========================================================================
    op.create_table(
        "goals",
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("subject_id", sa.String(64), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("type", sa.String(16), nullable=False, server_default="minutes"),
        sa.Column("target", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("priority", sa.String(1), nullable=False, server_default="M"),
        sa.Column("done", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("user_id", "id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["user_id", "subject_id"], ["subjects.user_id", "subjects.id"], ondelete="CASCADE"
        ),
    )
    op.create_index("idx_goals_user_id", "goals", ["user_id"])

    # ==========================================================================
    # PIPS TABLE (quick-add counters per day and subject)
    # ==========================================================================
    op.create_table(
        "pips",
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("subject_id", sa.String(64), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "date", "subject_id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["user_id", "subject_id"], ["subjects.user_id", "subjects.id"], ondelete="CASCADE"
        ),
    )

    # ==========================================================================
    # USER_TEMPLATES TABLE
    # ==========================================================================
    op.create_table(
        "user_templates",
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("category", sa.String(64), nullable=False, server_default="custom"),
        sa.Column("author", sa.String(255), nullable=False, server_default="User"),
        sa.Column("version", sa.String(32), nullable=False, server_default="1.0.0"),
        sa.Column("subjects", sa.JSON(), nullable=False),
        sa.Column("default_goals", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("user_id", "id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )

    # ==========================================================================
    # USER_SETTINGS TABLE
    # ==========================================================================
    op.create_table(
        "user_settings",
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("theme_preference", sa.String(16), nullable=False, server_default="light"),
        sa.Column("language", sa.String(16), nullable=False, server_default="en"),
        sa.Column("study_reminders", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("reminder_times", sa.JSON(), nullable=False),
        sa.Column("break_reminders", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("achievement_notifications", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("weekly_reports", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("pip_notification_sound", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("quest_complete_sound", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("daily_goal_minutes", sa.Integer(), nullable=False, server_default="60"),
        sa.Column("weekly_goal_minutes", sa.Integer(), nullable=False, server_default="420"),
        sa.Column("auto_save_interval", sa.Integer(), nullable=False, server_default="300"),
        sa.Column("dashboard_layout", sa.String(16), nullable=False, server_default="grid"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("user_id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )

    # ==========================================================================
    # KV_ENTRIES TABLE (session blobs, rate-limit counters)
    # ==========================================================================
    op.create_table(
        "kv_entries",
        sa.Column("namespace", sa.String(64), nullable=False),
        sa.Column("key", sa.String(512), nullable=False),
        sa.Column("value", sa.JSON(), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("namespace", "key"),
    )
    op.create_index("idx_kv_entries_expires_at", "kv_entries", ["expires_at"])


def downgrade() -> None:
    op.drop_table("kv_entries")
    op.drop_table("user_settings")
    op.drop_table("user_templates")
    op.drop_table("pips")
    op.drop_table("goals")
    op.drop_table("sessions")
    op.drop_table("subjects")
    op.drop_table("user_sessions")
    op.drop_table("users")
