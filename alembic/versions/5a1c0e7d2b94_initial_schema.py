"""initial schema (companies, communities, plans, price history)

Revision ID: 5a1c0e7d2b94
Revises:
Create Date: 2026-10-19 09:12:41.508133

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import mysql


# revision identifiers, used by Alembic.
revision: str = '5a1c0e7d2b94'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _tbl_kwargs():
    return dict(mysql_charset="utf8mb4", mysql_collate="utf8mb4_unicode_ci")


def _pk():
    return mysql.BIGINT(unsigned=True).with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    """Upgrade schema."""
    now = sa.text("CURRENT_TIMESTAMP")

    op.create_table(
        "companies",
        sa.Column("id", _pk(), primary_key=True, autoincrement=True),
        sa.Column("company_id", sa.String(50), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("website", sa.String(1024)),
        sa.Column("headquarters", sa.String(255)),
        sa.Column("founded", sa.String(16)),
        sa.Column("total_communities", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_plans", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.TIMESTAMP(), nullable=False, server_default=now),
        sa.Column("updated_at", sa.TIMESTAMP(), nullable=False, server_default=now),
        **_tbl_kwargs(),
    )
    op.create_index("ix_companies_company_id", "companies", ["company_id"], unique=True)
    op.create_index("ix_companies_name", "companies", ["name"], unique=True)

    op.create_table(
        "communities",
        sa.Column("id", _pk(), primary_key=True, autoincrement=True),
        sa.Column("community_id", sa.String(50), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("name_key", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("location", sa.String(255)),
        sa.Column("created_at", sa.TIMESTAMP(), nullable=False, server_default=now),
        sa.Column("updated_at", sa.TIMESTAMP(), nullable=False, server_default=now),
        **_tbl_kwargs(),
    )
    op.create_index("ix_communities_community_id", "communities", ["community_id"], unique=True)
    op.create_index("ix_communities_name_key", "communities", ["name_key"], unique=True)

    op.create_table(
        "community_companies",
        sa.Column("id", _pk(), primary_key=True, autoincrement=True),
        sa.Column(
            "community_id",
            sa.String(50),
            sa.ForeignKey("communities.community_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("company_ref", sa.String(255), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(), nullable=False, server_default=now),
        sa.UniqueConstraint("community_id", "company_ref", name="uq_community_company_ref"),
        **_tbl_kwargs(),
    )
    op.create_index("ix_community_companies_community_id", "community_companies", ["community_id"])

    op.create_table(
        "plans",
        sa.Column("id", _pk(), primary_key=True, autoincrement=True),
        sa.Column("plan_name", sa.String(255), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("sqft", sa.Integer()),
        sa.Column("stories", sa.String(32)),
        sa.Column("price_per_sqft", sa.Numeric(10, 2)),
        sa.Column("company", sa.String(255), nullable=False),
        sa.Column("community", sa.String(255), nullable=False),
        sa.Column("type", sa.String(8), nullable=False, server_default=sa.text("'plan'")),
        sa.Column("beds", sa.String(32)),
        sa.Column("baths", sa.String(32)),
        sa.Column("address", sa.String(512)),
        sa.Column("design_number", sa.String(64)),
        sa.Column("last_updated", sa.TIMESTAMP(), nullable=False, server_default=now),
        sa.Column("created_at", sa.TIMESTAMP(), nullable=False, server_default=now),
        sa.Column("updated_at", sa.TIMESTAMP(), nullable=False, server_default=now),
        sa.UniqueConstraint("plan_name", "company", "community", "type", name="uq_plan_natural_key"),
        **_tbl_kwargs(),
    )
    op.create_index("ix_plans_plan_name", "plans", ["plan_name"])
    op.create_index("ix_plans_company", "plans", ["company"])
    op.create_index("ix_plans_community", "plans", ["community"])
    op.create_index("ix_plans_type", "plans", ["type"])

    op.create_table(
        "price_history",
        sa.Column("id", _pk(), primary_key=True, autoincrement=True),
        sa.Column("plan_id", _pk(), sa.ForeignKey("plans.id", ondelete="CASCADE"), nullable=False),
        sa.Column("old_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("new_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("changed_at", sa.TIMESTAMP(), nullable=False, server_default=now),
        **_tbl_kwargs(),
    )
    op.create_index("ix_price_history_plan_id", "price_history", ["plan_id"])
    op.create_index("ix_price_history_changed_at", "price_history", ["changed_at"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("price_history")
    op.drop_table("plans")
    op.drop_table("community_companies")
    op.drop_table("communities")
    op.drop_table("companies")
