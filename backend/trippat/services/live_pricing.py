"""Live pricing — one supplier rate search per linked hotel, normalized to tax-inclusive room prices."""

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import date

from trippat.config import settings
from trippat.services.catalog_models import InternalHotel
from trippat.services.errors import ValidationError
from trippat.services.supplier_client import SupplierClient

logger = logging.getLogger(__name__)

DEFAULT_ROOM_TYPE = "Standard Room"
DEFAULT_MEAL_PLAN = "Room Only"


@dataclass
class RoomOccupancy:
    adults: int
    children: int = 0
    children_ages: list[int] = field(default_factory=list)

    def to_pax_room(self) -> dict:
        return {
            "Adults": self.adults,
            "Children": self.children,
            "ChildrenAges": list(self.children_ages),
        }


@dataclass
class LivePricingRequest:
    check_in: date
    check_out: date
    rooms: list[RoomOccupancy]


@dataclass
class NormalizedRoom:
    room_type: str
    meal_plan: str
    base_fare: float
    total_tax: float
    service_tax: float
    price: float
    currency: str
    booking_code: str = ""
    cancellation_policy: str = ""
    refundable: bool = False
    inclusion: str = ""
    promotion: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class LivePricingResult:
    available: bool
    rooms: list[NormalizedRoom] = field(default_factory=list)
    total_price: float = 0.0
    currency: str = "USD"
    booking_code: str | None = None
    search_id: str | None = None
    message: str | None = None

    @property
    def cheapest_room(self) -> NormalizedRoom | None:
        if not self.rooms:
            return None
        return min(self.rooms, key=lambda r: r.price)

    def to_dict(self) -> dict:
        if not self.available:
            return {"available": False, "message": self.message}
        return {
            "available": True,
            "rooms": [r.to_dict() for r in self.rooms],
            "total_price": self.total_price,
            "currency": self.currency,
            "booking_code": self.booking_code,
            "search_id": self.search_id,
        }


def _amount(value) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def normalize_room(room: dict, currency: str) -> NormalizedRoom:
    """Map a supplier room rate to a NormalizedRoom with price = fare + taxes."""
    base_fare = _amount(room.get("TotalFare"))
    total_tax = _amount(room.get("TotalTax"))
    service_tax = _amount(room.get("ServiceTax"))

    names = room.get("Name")
    if isinstance(names, list):
        room_type = names[0] if names else DEFAULT_ROOM_TYPE
    else:
        room_type = names or DEFAULT_ROOM_TYPE

    cancel_policies = room.get("CancelPolicies")
    return NormalizedRoom(
        room_type=room_type,
        meal_plan=room.get("MealType") or DEFAULT_MEAL_PLAN,
        base_fare=base_fare,
        total_tax=total_tax,
        service_tax=service_tax,
        price=base_fare + total_tax + service_tax,
        currency=currency,
        booking_code=room.get("BookingCode") or "",
        cancellation_policy=json.dumps(cancel_policies) if cancel_policies else "",
        refundable=bool(room.get("IsRefundable", False)),
        inclusion=room.get("Inclusion") or "",
        promotion=", ".join(room.get("RoomPromotion") or []),
    )


class LivePricingResolver:
    """Fetches live room rates for a supplier-linked hotel."""

    def __init__(
        self,
        supplier: SupplierClient,
        guest_nationality: str | None = None,
        response_time: int | None = None,
    ):
        self._supplier = supplier
        self._guest_nationality = guest_nationality or settings.supplier_guest_nationality
        self._response_time = response_time or settings.supplier_response_time

    async def get_live_pricing(
        self, hotel: InternalHotel, request: LivePricingRequest
    ) -> LivePricingResult:
        """Search the supplier for the hotel's rates.

        No inventory is reported as ``available=False``. Supplier failures
        raise ``SupplierError`` and are not retried here.
        """
        link = hotel.supplier_link
        if not link.live_pricing_ready:
            raise ValidationError(f"Hotel {hotel.id} is not linked for live pricing")

        logger.info(
            f"Live pricing for {hotel.name} ({link.supplier_hotel_code}): "
            f"{request.check_in} → {request.check_out}, {len(request.rooms)} rooms"
        )

        result = await self._supplier.search_hotels(
            check_in=request.check_in.isoformat(),
            check_out=request.check_out.isoformat(),
            hotel_codes=link.supplier_hotel_code,
            pax_rooms=[room.to_pax_room() for room in request.rooms],
            guest_nationality=self._guest_nationality,
            response_time=self._response_time,
            is_detailed_response=True,
        )

        if not result.hotels:
            logger.info(f"No supplier availability for {hotel.name}")
            return LivePricingResult(
                available=False, message="No availability found for selected dates"
            )

        supplier_hotel = result.hotels[0]
        currency = supplier_hotel.get("Currency") or "USD"
        rooms = [normalize_room(room, currency) for room in supplier_hotel.get("Rooms") or []]
        if not rooms:
            logger.info(f"Supplier returned no rooms for {hotel.name}")
            return LivePricingResult(
                available=False, message="No rooms available for selected dates"
            )

        # A room without a fare cannot be sold
        priced = [room for room in rooms if room.price > 0]
        if not priced:
            logger.warning(f"Supplier returned {len(rooms)} rooms without a fare for {hotel.name}")
            return LivePricingResult(
                available=False, message="Supplier returned no priced rooms for selected dates"
            )
        rooms = priced

        cheapest = min(rooms, key=lambda r: r.price)
        return LivePricingResult(
            available=True,
            rooms=rooms,
            total_price=cheapest.price,
            currency=currency,
            booking_code=str(supplier_hotel.get("HotelCode") or link.supplier_hotel_code),
            search_id=result.search_id or "N/A",
        )
