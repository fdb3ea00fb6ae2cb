from datetime import date

import pytest

from trippat.services.catalog_models import HotelLocation, InternalHotel, SupplierLink
from trippat.services.errors import SupplierError, ValidationError
from trippat.services.live_pricing import (
    LivePricingRequest,
    LivePricingResolver,
    RoomOccupancy,
    normalize_room,
)
from trippat.services.supplier_client import SupplierSearchResult

REQUEST = LivePricingRequest(
    check_in=date(2026, 12, 1),
    check_out=date(2026, 12, 4),
    rooms=[RoomOccupancy(adults=2, children=1, children_ages=[7])],
)


def linked_hotel(live_pricing_enabled: bool = True) -> InternalHotel:
    return InternalHotel(
        id="hotel-1",
        name="Sala Phuket",
        location=HotelLocation(city="Phuket"),
        supplier_link=SupplierLink(
            is_linked=True,
            supplier_hotel_code="1001",
            live_pricing_enabled=live_pricing_enabled,
        ),
    )


def test_normalize_room_adds_taxes_and_defaults():
    room = normalize_room({"TotalFare": "120.5", "TotalTax": 10, "BookingCode": "BC-1"}, "USD")

    assert room.price == pytest.approx(130.5)
    assert room.service_tax == 0
    assert room.room_type == "Standard Room"
    assert room.meal_plan == "Room Only"
    assert room.booking_code == "BC-1"


@pytest.mark.asyncio
async def test_hotel_without_live_pricing_is_rejected(supplier):
    resolver = LivePricingResolver(supplier)

    with pytest.raises(ValidationError):
        await resolver.get_live_pricing(linked_hotel(live_pricing_enabled=False), REQUEST)
    supplier.search_hotels.assert_not_awaited()


@pytest.mark.asyncio
async def test_no_hotels_means_unavailable(supplier):
    supplier.search_hotels.return_value = SupplierSearchResult(hotels=[])
    resolver = LivePricingResolver(supplier)

    result = await resolver.get_live_pricing(linked_hotel(), REQUEST)

    assert result.available is False
    assert result.to_dict() == {"available": False, "message": "No availability found for selected dates"}


@pytest.mark.asyncio
async def test_hotel_without_rooms_means_unavailable(supplier):
    supplier.search_hotels.return_value = SupplierSearchResult(hotels=[{"HotelCode": "1001", "Rooms": []}])
    resolver = LivePricingResolver(supplier)

    result = await resolver.get_live_pricing(linked_hotel(), REQUEST)

    assert result.available is False


@pytest.mark.asyncio
async def test_cheapest_room_sets_total(supplier):
    supplier.search_hotels.return_value = SupplierSearchResult(
        hotels=[
            {
                "HotelCode": "1001",
                "Currency": "THB",
                "Rooms": [
                    {"Name": ["Pool Villa"], "TotalFare": 9000, "TotalTax": 900, "MealType": "BB"},
                    {"Name": ["Garden Room"], "TotalFare": 4000, "TotalTax": 400, "IsRefundable": True},
                ],
            }
        ]
    )
    resolver = LivePricingResolver(supplier, guest_nationality="SA", response_time=15)

    result = await resolver.get_live_pricing(linked_hotel(), REQUEST)

    assert result.available is True
    assert result.total_price == 4400
    assert result.currency == "THB"
    assert result.cheapest_room.room_type == "Garden Room"
    assert result.cheapest_room.refundable is True
    assert result.search_id == "N/A"

    supplier.search_hotels.assert_awaited_once_with(
        check_in="2026-12-01",
        check_out="2026-12-04",
        hotel_codes="1001",
        pax_rooms=[{"Adults": 2, "Children": 1, "ChildrenAges": [7]}],
        guest_nationality="SA",
        response_time=15,
        is_detailed_response=True,
    )


@pytest.mark.asyncio
async def test_supplier_errors_propagate(supplier):
    supplier.search_hotels.side_effect = SupplierError("Supplier server error", status_code=500)
    resolver = LivePricingResolver(supplier)

    with pytest.raises(SupplierError):
        await resolver.get_live_pricing(linked_hotel(), REQUEST)


@pytest.mark.asyncio
async def test_rooms_without_fare_mean_unavailable(supplier):
    supplier.search_hotels.return_value = SupplierSearchResult(
        hotels=[{"HotelCode": "1001", "Currency": "USD", "Rooms": [{"Name": ["Std"]}]}]
    )
    resolver = LivePricingResolver(supplier)

    result = await resolver.get_live_pricing(linked_hotel(), REQUEST)

    assert result.available is False
    assert result.rooms == []
    assert result.message == "Supplier returned no priced rooms for selected dates"


@pytest.mark.asyncio
async def test_unpriced_rooms_are_skipped_when_choosing_cheapest(supplier):
    supplier.search_hotels.return_value = SupplierSearchResult(
        hotels=[
            {
                "HotelCode": "1001",
                "Currency": "USD",
                "Rooms": [{"Name": ["Std"]}, {"Name": ["Deluxe"], "TotalFare": 180}],
            }
        ]
    )
    resolver = LivePricingResolver(supplier)

    result = await resolver.get_live_pricing(linked_hotel(), REQUEST)

    assert result.available is True
    assert result.total_price == 180
    assert [room.room_type for room in result.rooms] == ["Deluxe"]
