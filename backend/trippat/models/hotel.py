"""Catalog hotel model with its supplier link."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, DateTime, Numeric, String, Text, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from trippat.database import Base

JSONType = JSON().with_variant(JSONB, "postgresql")


class Hotel(Base):
    __tablename__ = "hotels"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    star_rating: Mapped[Decimal | None] = mapped_column(Numeric(2, 1))
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    country_code: Mapped[str | None] = mapped_column(String(2))
    address: Mapped[str | None] = mapped_column(String(500))
    latitude: Mapped[Decimal | None] = mapped_column(Numeric(9, 6))
    longitude: Mapped[Decimal | None] = mapped_column(Numeric(9, 6))
    currency: Mapped[str] = mapped_column(String(3), default="SAR")
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    amenities: Mapped[list] = mapped_column(JSONType, default=list)

    # Supplier link
    supplier_linked: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    supplier_hotel_code: Mapped[str | None] = mapped_column(String(50), index=True)
    supplier_hotel_name: Mapped[str | None] = mapped_column(String(300))
    supplier_city_code: Mapped[str | None] = mapped_column(String(50))
    supplier_country_code: Mapped[str | None] = mapped_column(String(2))
    live_pricing_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    sync_status: Mapped[str] = mapped_column(String(20), default="not_linked", index=True)  # not_linked | pending | synced | failed
    last_sync_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    synced_fields: Mapped[list] = mapped_column(JSONType, default=list)
    last_sync_error: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
