"""Supplier hotel admin router — search, match, link, sync, and live rate lookup."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from trippat.dependencies import (
    get_catalog_repository,
    get_hotel_matcher,
    get_hotel_sync_service,
    get_live_pricing_resolver,
    get_supplier_client,
    to_http_exception,
)
from trippat.schemas.supplier_hotel import (
    HotelPricingRequest,
    LinkHotelRequest,
    LivePricingToggle,
    SyncRequest,
)
from trippat.services.catalog_models import InternalHotel
from trippat.services.catalog_repository import CatalogRepository
from trippat.services.errors import NotFoundError, TrippatError
from trippat.services.hotel_matcher import HotelMatcher
from trippat.services.hotel_sync_service import HotelSyncService
from trippat.services.live_pricing import LivePricingRequest, LivePricingResolver, RoomOccupancy
from trippat.services.supplier_client import SupplierClient

logger = logging.getLogger(__name__)

router = APIRouter()


def _link_summary(hotel: InternalHotel) -> dict:
    link = hotel.supplier_link
    return {
        "hotel_id": hotel.id,
        "hotel_name": hotel.name,
        "is_linked": link.is_linked,
        "supplier_hotel_code": link.supplier_hotel_code,
        "supplier_hotel_name": link.supplier_hotel_name,
        "supplier_city_code": link.supplier_city_code,
        "supplier_country_code": link.supplier_country_code,
        "live_pricing_enabled": link.live_pricing_enabled,
        "sync_status": link.sync_status,
        "last_sync_date": link.last_sync_date.isoformat() if link.last_sync_date else None,
        "synced_fields": list(link.synced_fields),
        "last_error": link.last_error,
    }


async def _get_hotel(repository: CatalogRepository, hotel_id: str) -> InternalHotel:
    hotel = await repository.get_hotel(hotel_id)
    if hotel is None:
        raise NotFoundError(f"Hotel not found: {hotel_id}")
    return hotel


@router.get("/search")
async def search_supplier_hotels(
    city: str = Query(..., min_length=1),
    country: str | None = Query(None, min_length=2, max_length=2),
    matcher: HotelMatcher = Depends(get_hotel_matcher),
):
    """Supplier hotels for every supplier city the name resolves to."""
    try:
        hotels = await matcher.search_supplier_hotels(city, country)
    except TrippatError as e:
        raise to_http_exception(e)
    return {"city": city, "country": country, "count": len(hotels), "hotels": [h.to_dict() for h in hotels]}


@router.get("/countries")
async def list_countries(supplier: SupplierClient = Depends(get_supplier_client)):
    try:
        countries = await supplier.get_country_list()
    except TrippatError as e:
        raise to_http_exception(e)
    return {"count": len(countries), "countries": countries}


@router.get("/cached/{hotel_code}")
async def get_cached_supplier_hotel(
    hotel_code: str,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    """Last supplier snapshot stored when the hotel was linked."""
    cached = await repository.get_supplier_hotel(hotel_code)
    if cached is None:
        raise HTTPException(status_code=404, detail=f"Supplier hotel {hotel_code} is not cached")
    return cached


@router.get("/matches/{hotel_id}")
async def find_matches(
    hotel_id: str,
    city: str | None = None,
    country: str | None = None,
    repository: CatalogRepository = Depends(get_catalog_repository),
    matcher: HotelMatcher = Depends(get_hotel_matcher),
):
    """Ranked supplier candidates for a catalog hotel."""
    try:
        hotel = await _get_hotel(repository, hotel_id)
        candidates = await matcher.find_candidates(hotel, city, country)
    except TrippatError as e:
        raise to_http_exception(e)
    return {
        "hotel_id": hotel.id,
        "hotel_name": hotel.name,
        "count": len(candidates),
        "matches": [c.to_dict() for c in candidates],
    }


@router.post("/link")
async def link_hotel(
    req: LinkHotelRequest,
    sync: HotelSyncService = Depends(get_hotel_sync_service),
):
    try:
        hotel = await sync.link_hotel(req.hotel_id, req.supplier_hotel.to_record())
    except TrippatError as e:
        raise to_http_exception(e)
    return _link_summary(hotel)


@router.delete("/link/{hotel_id}")
async def unlink_hotel(
    hotel_id: str,
    sync: HotelSyncService = Depends(get_hotel_sync_service),
):
    try:
        hotel = await sync.unlink_hotel(hotel_id)
    except TrippatError as e:
        raise to_http_exception(e)
    return _link_summary(hotel)


@router.post("/live-pricing/{hotel_id}")
async def toggle_live_pricing(
    hotel_id: str,
    req: LivePricingToggle,
    sync: HotelSyncService = Depends(get_hotel_sync_service),
):
    try:
        hotel = await sync.set_live_pricing(hotel_id, req.enabled)
    except TrippatError as e:
        raise to_http_exception(e)
    return _link_summary(hotel)


@router.post("/sync/{hotel_id}")
async def sync_hotel(
    hotel_id: str,
    req: SyncRequest | None = None,
    sync: HotelSyncService = Depends(get_hotel_sync_service),
):
    """Copy supplier details onto the catalog hotel."""
    try:
        return await sync.sync_hotel_data(hotel_id, req.fields if req else None)
    except TrippatError as e:
        raise to_http_exception(e)


@router.post("/pricing/{hotel_id}")
async def live_hotel_pricing(
    hotel_id: str,
    req: HotelPricingRequest,
    repository: CatalogRepository = Depends(get_catalog_repository),
    resolver: LivePricingResolver = Depends(get_live_pricing_resolver),
):
    """Live supplier rates for a linked hotel and dates."""
    if req.check_in >= req.check_out:
        raise HTTPException(status_code=400, detail="check_in must be before check_out")

    request = LivePricingRequest(
        check_in=req.check_in,
        check_out=req.check_out,
        rooms=[
            RoomOccupancy(adults=r.adults, children=r.children, children_ages=list(r.children_ages))
            for r in req.rooms
        ],
    )
    try:
        hotel = await _get_hotel(repository, hotel_id)
        result = await resolver.get_live_pricing(hotel, request)
    except TrippatError as e:
        raise to_http_exception(e)
    return {"hotel_id": hotel.id, "hotel_name": hotel.name, **result.to_dict()}
