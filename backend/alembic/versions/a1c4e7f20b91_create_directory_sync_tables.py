"""Create directory_sync_config and user tables.

Revision ID: a1c4e7f20b91
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision = "a1c4e7f20b91"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create the sync configuration and local user tables.

    Directory-provisioned users are recognised by an empty ``password``.
    """
    op.create_table(
        "directory_sync_config",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        # Connection
        sa.Column("host", sa.String(255), nullable=False),
        sa.Column("port", sa.Integer(), nullable=True),
        sa.Column("use_tls", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("base_dn", sa.String(1024), nullable=False),
        sa.Column("bind_dn", sa.String(1024), nullable=False),
        sa.Column("bind_secret", sa.String(1024), nullable=False),
        # Search
        sa.Column("user_search_base", sa.String(1024), nullable=True),
        sa.Column("user_search_filter", sa.Text(), nullable=True),
        # Schedule
        sa.Column("sync_interval_seconds", sa.Integer(), nullable=True),
        sa.Column("last_sync_at", sa.DateTime(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sync_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("modified_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_directory_sync_config_tenant_id", "directory_sync_config", ["tenant_id"]
    )
    op.create_index(
        "idx_directory_sync_config_eligible",
        "directory_sync_config",
        ["is_active", "sync_enabled"],
    )

    op.create_table(
        "user",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("password", sa.String(255), nullable=False, server_default=""),
        sa.Column("role", sa.String(50), nullable=False, server_default="USER"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("modified_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("tenant_id", "email", name="uq_user_tenant_email"),
    )
    op.create_index("ix_user_tenant_id", "user", ["tenant_id"])


def downgrade():
    """Drop the sync configuration and local user tables."""
    op.drop_index("ix_user_tenant_id", table_name="user")
    op.drop_table("user")
    op.drop_index("idx_directory_sync_config_eligible", table_name="directory_sync_config")
    op.drop_index("ix_directory_sync_config_tenant_id", table_name="directory_sync_config")
    op.drop_table("directory_sync_config")
