import pytest

from trippat.services.catalog_models import Coordinates, HotelLocation, InternalHotel
from trippat.services.errors import NotFoundError, SupplierError, ValidationError
from trippat.services.hotel_sync_service import HotelSyncService
from trippat.services.supplier_client import SupplierHotelDetails, SupplierHotelRecord

RECORD = SupplierHotelRecord(
    supplier_code="1001",
    name="Sala Phuket Mai Khao Beach Resort",
    city_code="101",
    country_code="TH",
    star_rating=4,
)


@pytest.fixture
def sync(catalog, supplier):
    catalog.add_hotel(
        InternalHotel(
            id="hotel-1",
            name="Sala Resort",
            star_rating=4,
            description="Old copy",
            location=HotelLocation(city="Phuket", country_code="TH"),
        )
    )
    return HotelSyncService(catalog, supplier)


@pytest.mark.asyncio
async def test_link_sets_pending_and_caches_record(sync, catalog):
    hotel = await sync.link_hotel("hotel-1", RECORD)

    assert hotel.supplier_link.is_linked
    assert hotel.supplier_link.sync_status == "pending"
    assert hotel.supplier_link.last_sync_date is not None
    assert catalog.hotels["hotel-1"].supplier_link.supplier_hotel_code == "1001"
    assert catalog.supplier_cache["1001"]["name"] == RECORD.name


@pytest.mark.asyncio
async def test_link_replaces_previous_link(sync, catalog):
    await sync.link_hotel("hotel-1", RECORD)
    other = SupplierHotelRecord(supplier_code="2002", name="Sala Two")

    await sync.link_hotel("hotel-1", other)

    assert catalog.hotels["hotel-1"].supplier_link.supplier_hotel_code == "2002"


@pytest.mark.asyncio
async def test_link_unknown_hotel(sync):
    with pytest.raises(NotFoundError):
        await sync.link_hotel("missing", RECORD)


@pytest.mark.asyncio
async def test_cache_failure_does_not_block_link(sync, catalog):
    catalog.fail_cache_writes = True

    hotel = await sync.link_hotel("hotel-1", RECORD)

    assert hotel.supplier_link.is_linked
    assert catalog.supplier_cache == {}


@pytest.mark.asyncio
async def test_unlink_resets_link(sync, catalog):
    await sync.link_hotel("hotel-1", RECORD)
    await sync.set_live_pricing("hotel-1", True)

    await sync.unlink_hotel("hotel-1")

    link = catalog.hotels["hotel-1"].supplier_link
    assert not link.is_linked
    assert not link.live_pricing_enabled
    assert link.supplier_hotel_code is None
    assert link.sync_status == "not_linked"


@pytest.mark.asyncio
async def test_live_pricing_requires_link(sync):
    with pytest.raises(ValidationError):
        await sync.set_live_pricing("hotel-1", True)


@pytest.mark.asyncio
async def test_sync_copies_supplier_details(sync, catalog, supplier):
    await sync.link_hotel("hotel-1", RECORD)
    supplier.get_hotel_details.return_value = SupplierHotelDetails(
        supplier_code="1001",
        description="Beachfront resort on Mai Khao",
        star_rating=5,
        amenities=["Pool", "Spa"],
        coordinates=Coordinates(latitude=8.15, longitude=98.298),
    )

    result = await sync.sync_hotel_data("hotel-1", ["description", "amenities", "coordinates"])

    assert result == {
        "success": True,
        "synced_fields": ["description", "amenities", "coordinates"],
        "updated_count": 3,
    }
    hotel = catalog.hotels["hotel-1"]
    assert hotel.description == "Beachfront resort on Mai Khao"
    assert hotel.amenities == ["Pool", "Spa"]
    assert hotel.star_rating == 4
    assert hotel.location.coordinates.latitude == 8.15
    assert hotel.supplier_link.sync_status == "synced"
    supplier.get_hotel_details.assert_awaited_once_with("1001")


@pytest.mark.asyncio
async def test_sync_failure_marks_hotel_failed(sync, catalog, supplier):
    await sync.link_hotel("hotel-1", RECORD)
    supplier.get_hotel_details.side_effect = SupplierError("Supplier server error", status_code=500)

    with pytest.raises(SupplierError):
        await sync.sync_hotel_data("hotel-1")

    link = catalog.hotels["hotel-1"].supplier_link
    assert link.sync_status == "failed"
    assert link.last_error == "Supplier server error"


@pytest.mark.asyncio
async def test_sync_rejects_unknown_fields(sync):
    await sync.link_hotel("hotel-1", RECORD)

    with pytest.raises(ValidationError):
        await sync.sync_hotel_data("hotel-1", ["name"])


@pytest.mark.asyncio
async def test_sync_requires_link(sync):
    with pytest.raises(ValidationError):
        await sync.sync_hotel_data("hotel-1")
