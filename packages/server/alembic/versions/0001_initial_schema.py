"""Initial schema: tenants, projects, contacts, tasks, dependencies, activity log.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-16 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# JSONB on PostgreSQL, JSON elsewhere
JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")
UUID = sa.Uuid()


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def _tenant_column() -> sa.Column:
    return sa.Column("tenant_id", UUID, sa.ForeignKey("tenants.id"), nullable=False)


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # tenants (not tenant-scoped)
    op.create_table(
        "tenants",
        sa.Column("id", UUID, primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("settings", JSON, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_tenants_slug", "tenants", ["slug"], unique=True)

    # projects
    op.create_table(
        "projects",
        sa.Column("id", UUID, primary_key=True),
        _tenant_column(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="new"),
        sa.Column("budget", sa.Numeric(12, 2), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("created_by", UUID, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_projects_tenant_id", "projects", ["tenant_id"])
    op.create_index("ix_projects_tenant_status", "projects", ["tenant_id", "status"])

    # contacts
    op.create_table(
        "contacts",
        sa.Column("id", UUID, primary_key=True),
        _tenant_column(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("contact_type", sa.String(), nullable=False),
        sa.Column("company", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_by", UUID, nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "email", name="uq_contact_email_per_tenant"),
    )
    op.create_index("ix_contacts_tenant_id", "contacts", ["tenant_id"])
    op.create_index("ix_contacts_name", "contacts", ["name"])

    # tasks
    op.create_table(
        "tasks",
        sa.Column("id", UUID, primary_key=True),
        _tenant_column(),
        sa.Column("project_id", UUID, sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("priority", sa.String(), nullable=False, server_default="medium"),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("assignee_id", UUID, sa.ForeignKey("contacts.id"), nullable=True),
        sa.Column("tags", JSON, nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("duration_days", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", UUID, nullable=True),
        *_timestamps(),
        sa.CheckConstraint("duration_days >= 1", name="positive_duration"),
    )
    op.create_index("ix_tasks_tenant_id", "tasks", ["tenant_id"])
    op.create_index("ix_tasks_project_id", "tasks", ["project_id"])
    op.create_index("ix_tasks_assignee_id", "tasks", ["assignee_id"])
    op.create_index("ix_tasks_project_position", "tasks", ["project_id", "position"])

    # task_dependencies: task_id depends on depends_on_task_id
    op.create_table(
        "task_dependencies",
        sa.Column("id", UUID, primary_key=True),
        _tenant_column(),
        sa.Column("task_id", UUID, sa.ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "depends_on_task_id", UUID, sa.ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("dependency_type", sa.String(), nullable=False, server_default="finish_to_start"),
        sa.Column("lag_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_by", UUID, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("task_id", "depends_on_task_id", name="uq_task_dependency_edge"),
        sa.CheckConstraint("task_id != depends_on_task_id", name="no_self_dependency"),
        sa.CheckConstraint("lag_days >= 0", name="non_negative_lag"),
    )
    op.create_index("ix_task_dependencies_tenant_id", "task_dependencies", ["tenant_id"])
    op.create_index("ix_task_dependencies_task_id", "task_dependencies", ["task_id"])
    op.create_index("ix_task_dependencies_depends_on_task_id", "task_dependencies", ["depends_on_task_id"])

    # activity_events (append-only)
    op.create_table(
        "activity_events",
        sa.Column("id", UUID, primary_key=True),
        _tenant_column(),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("actor_id", UUID, nullable=True),
        sa.Column("payload", JSON, nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_activity_events_tenant_id", "activity_events", ["tenant_id"])
    op.create_index("ix_activity_events_type", "activity_events", ["type"])
    op.create_index("ix_activity_events_timestamp", "activity_events", ["timestamp"])

    if op.get_bind().dialect.name == "postgresql":
        op.execute("""
            CREATE OR REPLACE FUNCTION prevent_activity_mutation()
            RETURNS TRIGGER AS $$
            BEGIN
                RAISE EXCEPTION 'Activity events are append-only. UPDATE is not permitted.';
            END;
            $$ LANGUAGE plpgsql
        """)
        op.execute("""
            CREATE TRIGGER activity_events_immutable
            BEFORE UPDATE ON activity_events
            FOR EACH ROW EXECUTE FUNCTION prevent_activity_mutation()
        """)


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    if op.get_bind().dialect.name == "postgresql":
        op.execute("DROP TRIGGER IF EXISTS activity_events_immutable ON activity_events")
        op.execute("DROP FUNCTION IF EXISTS prevent_activity_mutation()")

    # Reverse dependency order
    op.drop_table("activity_events")
    op.drop_table("task_dependencies")
    op.drop_table("tasks")
    op.drop_table("contacts")
    op.drop_table("projects")
    op.drop_table("tenants")
