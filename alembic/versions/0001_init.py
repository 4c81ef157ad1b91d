"""init schema

Revision ID: 0001_init
Revises: 
Create Date: 2026-10-19
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    # enums
    role_create = postgresql.ENUM("Admin", "Editor", "Viewer", name="role")
    priority_create = postgresql.ENUM("Low", "Medium", "High", "Urgent", name="task_priority")

    role_create.create(op.get_bind(), checkfirst=True)
    priority_create.create(op.get_bind(), checkfirst=True)

    role = postgresql.ENUM("Admin", "Editor", "Viewer", name="role", create_type=False)
    priority = postgresql.ENUM("Low", "Medium", "High", "Urgent", name="task_priority", create_type=False)

    uuid_t = postgresql.UUID(as_uuid=True)
    json_t = postgresql.JSON()

    op.create_table(
        "users",
        sa.Column("id", uuid_t, primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "projects",
        sa.Column("id", uuid_t, primary_key=True, nullable=False),
        sa.Column("owner_id", uuid_t, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("statuses", json_t, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_projects_owner_id", "projects", ["owner_id"])

    op.create_table(
        "project_members",
        sa.Column("project_id", uuid_t, sa.ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("user_id", uuid_t, sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("role", role, nullable=False, server_default="Viewer"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_project_members_user_id", "project_members", ["user_id"])

    op.create_table(
        "user_badges",
        sa.Column("id", uuid_t, primary_key=True, nullable=False),
        sa.Column("user_id", uuid_t, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("project_id", uuid_t, sa.ForeignKey("projects.id", ondelete="SET NULL"), nullable=True),
        sa.Column("awarded_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("user_id", "name", name="uq_user_badge_name"),
    )
    op.create_index("ix_user_badges_user_id", "user_badges", ["user_id"])

    op.create_table(
        "tasks",
        sa.Column("id", uuid_t, primary_key=True, nullable=False),
        sa.Column("project_id", uuid_t, sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=100), nullable=False, server_default="To Do"),
        sa.Column("priority", priority, nullable=False, server_default="Medium"),
        sa.Column("tags", json_t, nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("created_by", uuid_t, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("assignee_id", uuid_t, sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_tasks_project_id", "tasks", ["project_id"])
    op.create_index("ix_tasks_due_date", "tasks", ["due_date"])

    op.create_table(
        "task_comments",
        sa.Column("id", uuid_t, primary_key=True, nullable=False),
        sa.Column("task_id", uuid_t, sa.ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("author_id", uuid_t, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_task_comments_task_id", "task_comments", ["task_id"])

    op.create_table(
        "automations",
        sa.Column("id", uuid_t, primary_key=True, nullable=False),
        sa.Column("project_id", uuid_t, sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("trigger_type", sa.String(length=50), nullable=False),
        sa.Column("trigger", json_t, nullable=False),
        sa.Column("actions", json_t, nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_by", uuid_t, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_automations_project_id", "automations", ["project_id"])
    op.create_index("ix_automations_trigger_type", "automations", ["trigger_type"])

    op.create_table(
        "notifications",
        sa.Column("id", uuid_t, primary_key=True, nullable=False),
        sa.Column("recipient_id", uuid_t, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("related_project_id", uuid_t, sa.ForeignKey("projects.id", ondelete="SET NULL"), nullable=True),
        sa.Column("related_task_id", uuid_t, sa.ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_notifications_recipient_id", "notifications", ["recipient_id"])

    op.create_table(
        "auth_magic_links",
        sa.Column("token_hash", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("user_id", uuid_t, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_auth_magic_links_user_id", "auth_magic_links", ["user_id"])

def downgrade() -> None:
    op.drop_index("ix_auth_magic_links_user_id", table_name="auth_magic_links")
    op.drop_table("auth_magic_links")

    op.drop_index("ix_notifications_recipient_id", table_name="notifications")
    op.drop_table("notifications")

    op.drop_index("ix_automations_trigger_type", table_name="automations")
    op.drop_index("ix_automations_project_id", table_name="automations")
    op.drop_table("automations")

    op.drop_index("ix_task_comments_task_id", table_name="task_comments")
    op.drop_table("task_comments")

    op.drop_index("ix_tasks_due_date", table_name="tasks")
    op.drop_index("ix_tasks_project_id", table_name="tasks")
    op.drop_table("tasks")

    op.drop_index("ix_user_badges_user_id", table_name="user_badges")
    op.drop_table("user_badges")

    op.drop_index("ix_project_members_user_id", table_name="project_members")
    op.drop_table("project_members")

    op.drop_index("ix_projects_owner_id", table_name="projects")
    op.drop_table("projects")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    postgresql.ENUM(name="task_priority").drop(op.get_bind(), checkfirst=True)
    postgresql.ENUM(name="role").drop(op.get_bind(), checkfirst=True)
