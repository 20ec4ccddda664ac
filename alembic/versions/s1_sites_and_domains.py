"""Create site and customdomain tables

Revision ID: s1_sites_and_domains
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

revision = "s1_sites_and_domains"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "site",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("subdomain", sa.String(63), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("primary_color", sa.String(32), nullable=False),
        sa.Column("secondary_color", sa.String(32), nullable=False),
        sa.Column("favicon_asset_id", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_site_id", "site", ["id"])
    op.create_index("ix_site_subdomain", "site", ["subdomain"], unique=True)

    op.create_table(
        "customdomain",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("site_id", sa.Uuid(), sa.ForeignKey("site.id", ondelete="CASCADE"), nullable=False),
        sa.Column("domain", sa.String(255), nullable=False),
        sa.Column("redirect_from_www", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("verification_type", sa.String(16), nullable=True),
        sa.Column("verification_name", sa.String(255), nullable=True),
        sa.Column("verification_value", sa.String(255), nullable=True),
        sa.Column("provider_domain_id", sa.String(255), nullable=True),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_customdomain_id", "customdomain", ["id"])
    op.create_index("ix_customdomain_site_id", "customdomain", ["site_id"])
    op.create_index("ix_customdomain_domain", "customdomain", ["domain"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_customdomain_domain", table_name="customdomain")
    op.drop_index("ix_customdomain_site_id", table_name="customdomain")
    op.drop_index("ix_customdomain_id", table_name="customdomain")
    op.drop_table("customdomain")
    op.drop_index("ix_site_subdomain", table_name="site")
    op.drop_index("ix_site_id", table_name="site")
    op.drop_table("site")
