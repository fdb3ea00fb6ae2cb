"""Hotel sync service — links catalog hotels to supplier hotels and keeps their data in sync."""

import logging
from datetime import datetime, timezone

from trippat.services.catalog_models import (
    SYNC_FAILED,
    SYNC_NOT_LINKED,
    SYNC_PENDING,
    SYNC_SYNCED,
    InternalHotel,
    SupplierLink,
)
from trippat.services.catalog_repository import CatalogRepository
from trippat.services.errors import NotFoundError, SupplierError, ValidationError
from trippat.services.supplier_client import SupplierClient, SupplierHotelRecord

logger = logging.getLogger(__name__)

DEFAULT_SYNC_FIELDS = ("description", "amenities", "star_rating")
SYNCABLE_FIELDS = frozenset({"description", "amenities", "star_rating", "coordinates"})


class HotelSyncService:
    """Manages the single supplier link of each catalog hotel."""

    def __init__(self, repository: CatalogRepository, supplier: SupplierClient):
        self._repo = repository
        self._supplier = supplier

    async def _load_hotel(self, hotel_id: str) -> InternalHotel:
        hotel = await self._repo.get_hotel(hotel_id)
        if hotel is None:
            raise NotFoundError(f"Hotel not found: {hotel_id}")
        return hotel

    async def _load_linked_hotel(self, hotel_id: str) -> InternalHotel:
        hotel = await self._load_hotel(hotel_id)
        if not hotel.supplier_link.is_linked:
            raise ValidationError(f"Hotel {hotel_id} is not linked to a supplier hotel")
        return hotel

    async def link_hotel(self, hotel_id: str, record: SupplierHotelRecord) -> InternalHotel:
        """Link a hotel to a supplier record, replacing any previous link."""
        hotel = await self._load_hotel(hotel_id)
        previous = hotel.supplier_link
        if previous.is_linked and previous.supplier_hotel_code != record.supplier_code:
            logger.info(
                f"Re-linking {hotel.name} from {previous.supplier_hotel_code} to {record.supplier_code}"
            )

        hotel.supplier_link = SupplierLink(
            is_linked=True,
            supplier_hotel_code=record.supplier_code,
            supplier_hotel_name=record.name,
            supplier_city_code=record.city_code,
            supplier_country_code=record.country_code,
            live_pricing_enabled=previous.live_pricing_enabled if previous.is_linked else False,
            sync_status=SYNC_PENDING,
            last_sync_date=datetime.now(timezone.utc),
        )
        await self._repo.save_hotel(hotel)
        await self.cache_supplier_hotel(record)

        logger.info(f"Hotel {hotel.name} linked to supplier hotel {record.supplier_code}")
        return hotel

    async def unlink_hotel(self, hotel_id: str) -> InternalHotel:
        hotel = await self._load_hotel(hotel_id)
        hotel.supplier_link = SupplierLink(sync_status=SYNC_NOT_LINKED)
        await self._repo.save_hotel(hotel)
        logger.info(f"Hotel {hotel.name} unlinked from supplier")
        return hotel

    async def set_live_pricing(self, hotel_id: str, enabled: bool) -> InternalHotel:
        hotel = await self._load_linked_hotel(hotel_id)
        hotel.supplier_link.live_pricing_enabled = enabled
        await self._repo.save_hotel(hotel)
        return hotel

    async def sync_hotel_data(self, hotel_id: str, fields: list[str] | None = None) -> dict:
        """Copy descriptive fields from the supplier's hotel details onto the catalog hotel."""
        hotel = await self._load_linked_hotel(hotel_id)
        requested = set(fields or DEFAULT_SYNC_FIELDS)
        unknown = requested - SYNCABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown sync fields: {', '.join(sorted(unknown))}")

        link = hotel.supplier_link
        try:
            details = await self._supplier.get_hotel_details(link.supplier_hotel_code)
            if details is None:
                raise NotFoundError(f"Supplier hotel {link.supplier_hotel_code} has no details")
        except (SupplierError, NotFoundError) as e:
            link.sync_status = SYNC_FAILED
            link.last_error = str(e)
            link.last_sync_date = datetime.now(timezone.utc)
            await self._repo.save_hotel(hotel)
            logger.error(f"Error syncing hotel {hotel.name}: {e}")
            raise

        synced: list[str] = []
        if "description" in requested and details.description:
            hotel.description = details.description
            synced.append("description")
        if "star_rating" in requested and details.star_rating:
            hotel.star_rating = details.star_rating
            synced.append("star_rating")
        if "amenities" in requested and details.amenities:
            hotel.amenities = list(details.amenities)
            synced.append("amenities")
        if "coordinates" in requested and details.coordinates:
            hotel.location.coordinates = details.coordinates
            synced.append("coordinates")

        link.sync_status = SYNC_SYNCED
        link.last_error = None
        link.last_sync_date = datetime.now(timezone.utc)
        if synced:
            link.synced_fields = synced
        await self._repo.save_hotel(hotel)

        return {"success": True, "synced_fields": synced, "updated_count": len(synced)}

    async def cache_supplier_hotel(self, record: SupplierHotelRecord) -> None:
        try:
            await self._repo.upsert_supplier_hotel(record)
        except Exception as e:
            logger.error(f"Error caching supplier hotel {record.supplier_code}: {e}")
