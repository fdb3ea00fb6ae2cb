"""Cached supplier hotel snapshots, keyed by supplier hotel code."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from trippat.database import Base


class SupplierHotelCache(Base):
    __tablename__ = "supplier_hotel_cache"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    hotel_code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    hotel_data: Mapped[dict] = mapped_column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
