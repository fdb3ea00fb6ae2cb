"""Travel package model and its hotel stays."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from trippat.database import Base


class Package(Base):
    __tablename__ = "packages"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="SAR")
    price_adult: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    price_child: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    price_infant: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    discount_type: Mapped[str | None] = mapped_column(String(20))  # percentage | fixed
    discount_value: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    duration: Mapped[int | None] = mapped_column(Integer)
    average_hotel_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    total_hotel_nights: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    hotel_stays: Mapped[list["PackageHotel"]] = relationship(
        back_populates="package",
        order_by="PackageHotel.check_in_day",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class PackageHotel(Base):
    __tablename__ = "package_hotels"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    package_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("packages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    hotel_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    nights: Mapped[int] = mapped_column(Integer, default=1)
    check_in_day: Mapped[int] = mapped_column(Integer, default=1)
    price_per_night: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))

    package: Mapped[Package] = relationship(back_populates="hotel_stays")
