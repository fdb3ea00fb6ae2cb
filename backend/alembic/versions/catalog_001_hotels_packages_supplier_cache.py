"""Catalog: hotels with supplier link, packages, package hotel stays, supplier hotel cache

Revision ID: catalog_001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision = "catalog_001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # --- hotels ---
    op.create_table(
        "hotels",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("star_rating", sa.Numeric(2, 1)),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("country_code", sa.String(2)),
        sa.Column("address", sa.String(500)),
        sa.Column("latitude", sa.Numeric(9, 6)),
        sa.Column("longitude", sa.Numeric(9, 6)),
        sa.Column("currency", sa.String(3), server_default="SAR"),
        sa.Column("base_price", sa.Numeric(10, 2), server_default="0"),
        sa.Column("amenities", JSONB, server_default="[]"),
        sa.Column("supplier_linked", sa.Boolean, server_default="false"),
        sa.Column("supplier_hotel_code", sa.String(50)),
        sa.Column("supplier_hotel_name", sa.String(300)),
        sa.Column("supplier_city_code", sa.String(50)),
        sa.Column("supplier_country_code", sa.String(2)),
        sa.Column("live_pricing_enabled", sa.Boolean, server_default="false"),
        sa.Column("sync_status", sa.String(20), server_default="not_linked"),
        sa.Column("last_sync_date", sa.DateTime(timezone=True)),
        sa.Column("synced_fields", JSONB, server_default="[]"),
        sa.Column("last_sync_error", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_hotels_city", "hotels", ["city"])
    op.create_index("ix_hotels_supplier_linked", "hotels", ["supplier_linked"])
    op.create_index("ix_hotels_supplier_hotel_code", "hotels", ["supplier_hotel_code"])
    op.create_index("ix_hotels_sync_status", "hotels", ["sync_status"])

    # --- packages ---
    op.create_table(
        "packages",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("currency", sa.String(3), server_default="SAR"),
        sa.Column("price_adult", sa.Numeric(10, 2), nullable=False),
        sa.Column("price_child", sa.Numeric(10, 2)),
        sa.Column("price_infant", sa.Numeric(10, 2)),
        sa.Column("discount_type", sa.String(20)),
        sa.Column("discount_value", sa.Numeric(10, 2)),
        sa.Column("duration", sa.Integer),
        sa.Column("average_hotel_price", sa.Numeric(10, 2)),
        sa.Column("total_hotel_nights", sa.Integer),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- package_hotels ---
    op.create_table(
        "package_hotels",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("package_id", UUID(as_uuid=True), sa.ForeignKey("packages.id", ondelete="CASCADE"), nullable=False),
        sa.Column("hotel_id", UUID(as_uuid=True), nullable=False),
        sa.Column("nights", sa.Integer, server_default="1"),
        sa.Column("check_in_day", sa.Integer, server_default="1"),
        sa.Column("price_per_night", sa.Numeric(10, 2)),
    )
    op.create_index("ix_package_hotels_package_id", "package_hotels", ["package_id"])

    # --- supplier_hotel_cache ---
    op.create_table(
        "supplier_hotel_cache",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("hotel_code", sa.String(50), nullable=False),
        sa.Column("hotel_data", JSONB, nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_supplier_hotel_cache_hotel_code", "supplier_hotel_cache", ["hotel_code"], unique=True)


def downgrade() -> None:
    op.drop_table("supplier_hotel_cache")
    op.drop_table("package_hotels")
    op.drop_table("packages")
    op.drop_table("hotels")
