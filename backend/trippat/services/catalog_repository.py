"""Catalog repository — loads packages and hotels, persists supplier links and cache entries."""

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trippat.models import Hotel, Package, SupplierHotelCache
from trippat.services.catalog_models import (
    Coordinates,
    HotelLocation,
    InternalHotel,
    PackageDefinition,
    PackageHotelStay,
    SupplierLink,
)
from trippat.services.errors import NotFoundError
from trippat.services.supplier_client import SupplierHotelRecord

logger = logging.getLogger(__name__)


class CatalogRepository(Protocol):
    async def get_package(self, package_id: str) -> PackageDefinition | None: ...

    async def get_hotel(self, hotel_id: str) -> InternalHotel | None: ...

    async def save_hotel(self, hotel: InternalHotel) -> None: ...

    async def upsert_supplier_hotel(self, record: SupplierHotelRecord) -> None: ...

    async def get_supplier_hotel(self, hotel_code: str) -> dict | None: ...


def _to_uuid(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _float(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


def _decimal(value: float | None) -> Decimal | None:
    return Decimal(str(value)) if value is not None else None


def hotel_to_domain(row: Hotel) -> InternalHotel:
    coordinates = None
    if row.latitude is not None and row.longitude is not None:
        coordinates = Coordinates(latitude=float(row.latitude), longitude=float(row.longitude))

    return InternalHotel(
        id=str(row.id),
        name=row.name,
        star_rating=_float(row.star_rating),
        location=HotelLocation(
            city=row.city,
            country_code=row.country_code,
            address=row.address,
            coordinates=coordinates,
        ),
        currency=row.currency or "SAR",
        base_price=_float(row.base_price) or 0.0,
        description=row.description,
        amenities=list(row.amenities or []),
        supplier_link=SupplierLink(
            is_linked=bool(row.supplier_linked),
            supplier_hotel_code=row.supplier_hotel_code,
            supplier_hotel_name=row.supplier_hotel_name,
            supplier_city_code=row.supplier_city_code,
            supplier_country_code=row.supplier_country_code,
            live_pricing_enabled=bool(row.live_pricing_enabled),
            sync_status=row.sync_status or "not_linked",
            last_sync_date=row.last_sync_date,
            synced_fields=list(row.synced_fields or []),
            last_error=row.last_sync_error,
        ),
    )


def package_to_domain(row: Package) -> PackageDefinition:
    return PackageDefinition(
        id=str(row.id),
        title=row.title,
        currency=row.currency or "SAR",
        price_adult=_float(row.price_adult) or 0.0,
        price_child=_float(row.price_child),
        price_infant=_float(row.price_infant),
        discount_type=row.discount_type,
        discount_value=_float(row.discount_value),
        duration=row.duration,
        average_hotel_price=_float(row.average_hotel_price),
        total_hotel_nights=row.total_hotel_nights,
        hotel_stays=[
            PackageHotelStay(
                hotel_id=str(stay.hotel_id),
                nights=stay.nights or 1,
                check_in_day_offset=stay.check_in_day or 1,
                static_price_per_night=_float(stay.price_per_night),
            )
            for stay in row.hotel_stays
        ],
    )


class SqlCatalogRepository:
    """CatalogRepository backed by an async SQLAlchemy session."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def get_package(self, package_id: str) -> PackageDefinition | None:
        pk = _to_uuid(package_id)
        if pk is None:
            return None
        row = await self._db.get(Package, pk)
        return package_to_domain(row) if row else None

    async def get_hotel(self, hotel_id: str) -> InternalHotel | None:
        pk = _to_uuid(hotel_id)
        if pk is None:
            return None
        row = await self._db.get(Hotel, pk)
        return hotel_to_domain(row) if row else None

    async def save_hotel(self, hotel: InternalHotel) -> None:
        pk = _to_uuid(hotel.id)
        row = await self._db.get(Hotel, pk) if pk else None
        if row is None:
            raise NotFoundError(f"Hotel not found: {hotel.id}")

        row.name = hotel.name
        row.description = hotel.description
        row.star_rating = _decimal(hotel.star_rating)
        row.amenities = list(hotel.amenities)
        coords = hotel.location.coordinates
        row.latitude = _decimal(coords.latitude) if coords else None
        row.longitude = _decimal(coords.longitude) if coords else None

        link = hotel.supplier_link
        row.supplier_linked = link.is_linked
        row.supplier_hotel_code = link.supplier_hotel_code
        row.supplier_hotel_name = link.supplier_hotel_name
        row.supplier_city_code = link.supplier_city_code
        row.supplier_country_code = link.supplier_country_code
        row.live_pricing_enabled = link.live_pricing_enabled
        row.sync_status = link.sync_status
        row.last_sync_date = link.last_sync_date
        row.synced_fields = list(link.synced_fields)
        row.last_sync_error = link.last_error

        await self._db.commit()

    async def upsert_supplier_hotel(self, record: SupplierHotelRecord) -> None:
        result = await self._db.execute(
            select(SupplierHotelCache).where(SupplierHotelCache.hotel_code == record.supplier_code)
        )
        entry = result.scalar_one_or_none()
        if entry is None:
            self._db.add(SupplierHotelCache(hotel_code=record.supplier_code, hotel_data=record.to_dict()))
        else:
            entry.hotel_data = record.to_dict()
            entry.last_updated = datetime.now(timezone.utc)
        await self._db.commit()

    async def get_supplier_hotel(self, hotel_code: str) -> dict | None:
        result = await self._db.execute(
            select(SupplierHotelCache).where(SupplierHotelCache.hotel_code == hotel_code)
        )
        entry = result.scalar_one_or_none()
        return entry.hotel_data if entry else None
