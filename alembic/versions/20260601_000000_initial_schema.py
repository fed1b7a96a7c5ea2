"""Initial schema for FauxDash

Revision ID: 20260601_000000
Revises: None
Create Date: 2026-06-01 00:00:00.000000

Creates every table used by the server:
- Accounts (users, password reset tokens)
- Content (bookmark and service categories, bookmarks, services)
- Key/value settings (global and per user)
- Analytics (pageviews, click events, daily rollups, GeoIP cache)

Revision format: YYYYMMDD_HHMMSS_description

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20260601_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _category_columns():
    return [
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("icon", sa.String(255), nullable=True),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("columns", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_visible", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("requires_auth", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("items_to_show", sa.Integer(), nullable=True, server_default="5"),
        sa.Column("show_item_count", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("auto_expanded", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("show_open_all", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sort_by", sa.String(32), nullable=False, server_default="order"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    ]


def _link_columns(category_table: str, category_nullable: bool):
    return [
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey(f"{category_table}.id"), nullable=category_nullable),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("icon", sa.Text(), nullable=True),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_visible", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("requires_auth", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("click_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    ]


def _click_columns(item_column: str, item_table: str):
    return [
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(item_column, sa.Integer(), sa.ForeignKey(f"{item_table}.id"), nullable=False),
        sa.Column("clicked_at", sa.DateTime(), nullable=False),
        sa.Column("hour_of_day", sa.Integer(), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("day_of_month", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    ]


def upgrade() -> None:
    """Create all tables."""

    # Create users table
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("username", sa.String(255), nullable=True),
        sa.Column("firstname", sa.String(255), nullable=True),
        sa.Column("lastname", sa.String(255), nullable=True),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("password_hash", sa.Text(), nullable=True),
        sa.Column("oidc_subject", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_users_email", "email", unique=True),
    )

    # Create password_reset_tokens table
    op.create_table(
        "password_reset_tokens",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("token", sa.String(64), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("used", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_password_reset_tokens_user_id", "user_id"),
        sa.Index("ix_password_reset_tokens_token", "token", unique=True),
    )

    # Create category tables
    op.create_table("categories", *_category_columns())
    op.create_table("service_categories", *_category_columns())

    # Create bookmarks and services tables
    op.create_table(
        "bookmarks",
        *_link_columns("categories", category_nullable=False),
        sa.Index("ix_bookmarks_category_id", "category_id"),
    )
    op.create_table(
        "services",
        *_link_columns("service_categories", category_nullable=True),
        sa.Index("ix_services_category_id", "category_id"),
    )

    # Create settings table
    op.create_table(
        "settings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("key", sa.String(128), nullable=False),
        sa.Column("value", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_settings_user_id", "user_id"),
        sa.Index("ix_settings_key", "key"),
    )

    # Create pageviews table
    op.create_table(
        "pageviews",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("path", sa.String(2048), nullable=False),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("ip_hash", sa.String(64), nullable=True),
        sa.Column("country", sa.String(2), nullable=True),
        sa.Column("country_name", sa.String(100), nullable=True),
        sa.Column("city", sa.String(255), nullable=True),
        sa.Column("region", sa.String(255), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("timezone", sa.String(64), nullable=True),
        sa.Column("geo_enriched", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_pageviews_ip_hash", "ip_hash"),
        sa.Index("ix_pageviews_country", "country"),
        sa.Index("ix_pageviews_timestamp", "timestamp"),
    )

    # Create click event tables
    op.create_table(
        "bookmark_clicks",
        *_click_columns("bookmark_id", "bookmarks"),
        sa.Index("ix_bookmark_clicks_bookmark_id", "bookmark_id"),
        sa.Index("ix_bookmark_clicks_clicked_at", "clicked_at"),
    )
    op.create_table(
        "service_clicks",
        *_click_columns("service_id", "services"),
        sa.Index("ix_service_clicks_service_id", "service_id"),
        sa.Index("ix_service_clicks_clicked_at", "clicked_at"),
    )

    # Create analytics_daily table
    op.create_table(
        "analytics_daily",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=True),
        sa.Column("country", sa.String(2), nullable=True),
        sa.Column("count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("unique_visitors", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_analytics_daily_date", "date"),
    )

    # Create geo_cache table
    op.create_table(
        "geo_cache",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("ip_hash", sa.String(64), nullable=False),
        sa.Column("country", sa.String(2), nullable=True),
        sa.Column("country_name", sa.String(100), nullable=True),
        sa.Column("city", sa.String(255), nullable=True),
        sa.Column("region", sa.String(255), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("timezone", sa.String(64), nullable=True),
        sa.Column("provider", sa.String(32), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_geo_cache_ip_hash", "ip_hash", unique=True),
        sa.Index("ix_geo_cache_expires_at", "expires_at"),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("geo_cache")
    op.drop_table("analytics_daily")
    op.drop_table("service_clicks")
    op.drop_table("bookmark_clicks")
    op.drop_table("pageviews")
    op.drop_table("settings")
    op.drop_table("services")
    op.drop_table("bookmarks")
    op.drop_table("service_categories")
    op.drop_table("categories")
    op.drop_table("password_reset_tokens")
    op.drop_table("users")
