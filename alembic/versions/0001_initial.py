"""initial tables: users, activities, enrollments, answer_sets

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00

"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "activities",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column(
            "owner_id",
            sa.String(32),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("subject", sa.String(100), nullable=False),
        sa.Column("grade_level", sa.String(50), nullable=False),
        sa.Column("objective", sa.Text(), nullable=True),
        sa.Column("support_materials", sa.JSON(), nullable=False),
        sa.Column("content", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("finalized", sa.Boolean(), nullable=False),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_activities_owner_id", "activities", ["owner_id"])
    op.create_index("ix_activities_subject", "activities", ["subject"])
    op.create_index("ix_activities_grade_level", "activities", ["grade_level"])
    op.create_index("ix_activities_status", "activities", ["status"])
    op.create_index("ix_activities_is_public", "activities", ["is_public"])
    op.create_index("ix_activities_created_at", "activities", ["created_at"])

    op.create_table(
        "enrollments",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column(
            "activity_id",
            sa.String(32),
            sa.ForeignKey("activities.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("student_email", sa.String(255), nullable=False),
        sa.Column("enrolled_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "activity_id", "student_email", name="uq_enrollments_activity_email"
        ),
    )
    op.create_index("ix_enrollments_activity_id", "enrollments", ["activity_id"])
    op.create_index("ix_enrollments_student_email", "enrollments", ["student_email"])

    op.create_table(
        "answer_sets",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column(
            "activity_id",
            sa.String(32),
            sa.ForeignKey("activities.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "submitter_id",
            sa.String(32),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("submitted", sa.Boolean(), nullable=False),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "activity_id", "submitter_id", name="uq_answer_sets_activity_submitter"
        ),
    )
    op.create_index("ix_answer_sets_activity_id", "answer_sets", ["activity_id"])
    op.create_index("ix_answer_sets_submitter_id", "answer_sets", ["submitter_id"])


def downgrade() -> None:
    op.drop_table("answer_sets")
    op.drop_table("enrollments")
    op.drop_table("activities")
    op.drop_table("users")
