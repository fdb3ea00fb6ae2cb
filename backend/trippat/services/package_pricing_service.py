"""Package pricing engine — base tiers, live/static hotel stays, currency normalization, discounts."""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta

from trippat.config import settings
from trippat.data.currency import FALLBACK_RATES_FROM_USD, cross_convert
from trippat.services.catalog_models import InternalHotel, PackageDefinition, PackageHotelStay
from trippat.services.catalog_repository import CatalogRepository
from trippat.services.currency_service import CurrencyService
from trippat.services.errors import (
    NotFoundError,
    PartialFailure,
    SupplierError,
    TrippatError,
    ValidationError,
)
from trippat.services.live_pricing import (
    LivePricingRequest,
    LivePricingResolver,
    LivePricingResult,
    NormalizedRoom,
    RoomOccupancy,
)

logger = logging.getLogger(__name__)

MAX_ADULTS_PER_ROOM = 2
MAX_CHILDREN_PER_ROOM = 2

MODE_LIVE = "live"
MODE_STATIC = "static"
PRICING_MODE_LIVE_HOTEL = "live_hotel"
PRICING_MODE_TRADITIONAL = "traditional"

DISCOUNT_PERCENTAGE = "percentage"
DISCOUNT_FIXED = "fixed"


# ─── Request types ───


@dataclass
class Travelers:
    adults: int = 2
    children: int = 0
    infants: int = 0

    @property
    def total(self) -> int:
        return self.adults + self.children + self.infants

    def to_dict(self) -> dict:
        return {"adults": self.adults, "children": self.children, "infants": self.infants}


@dataclass
class DateRange:
    start_date: date | None = None
    end_date: date | None = None

    @property
    def is_complete(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    def to_dict(self) -> dict:
        return {
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
        }


@dataclass
class PricingRequest:
    travelers: Travelers = field(default_factory=Travelers)
    date_range: DateRange = field(default_factory=DateRange)
    currency: str | None = None


# ─── Result types ───


@dataclass
class TierPrice:
    count: int
    price_per_person: float
    total: float

    def to_dict(self) -> dict:
        return {"count": self.count, "price_per_person": self.price_per_person, "total": self.total}


@dataclass
class BasePricing:
    adults: TierPrice
    children: TierPrice
    infants: TierPrice
    total: float
    currency: str

    def to_dict(self) -> dict:
        return {
            "adults": self.adults.to_dict(),
            "children": self.children.to_dict(),
            "infants": self.infants.to_dict(),
            "total": self.total,
            "currency": self.currency,
        }


@dataclass
class StayPricing:
    hotel_id: str
    hotel_name: str
    nights: int
    mode: str  # live | static
    price_per_night: float
    total_price: float
    currency: str
    rooms_count: int
    check_in: date
    check_out: date
    original_currency: str
    original_price: float
    room_details: NormalizedRoom | None = None
    live_error: str | None = None

    @property
    def is_live(self) -> bool:
        return self.mode == MODE_LIVE

    def to_dict(self) -> dict:
        return {
            "hotel_id": self.hotel_id,
            "hotel_name": self.hotel_name,
            "nights": self.nights,
            "mode": self.mode,
            "live_pricing": self.is_live,
            "available": True,
            "price_per_night": self.price_per_night,
            "total_price": self.total_price,
            "currency": self.currency,
            "rooms_count": self.rooms_count,
            "original_currency": self.original_currency,
            "original_price": self.original_price,
            "room_details": self.room_details.to_dict() if self.room_details else None,
            "live_error": self.live_error,
            "dates": {"check_in": self.check_in.isoformat(), "check_out": self.check_out.isoformat()},
        }


@dataclass
class StayOutcome:
    """Either a priced stay or the reason it could not be priced."""
    hotel_id: str
    pricing: StayPricing | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.pricing is not None


@dataclass
class HotelPricingResult:
    stays: list[StayPricing]
    errors: list[str]
    total_cost: float
    summary: dict


@dataclass
class DiscountResult:
    type: str
    value: float
    amount: float
    percentage: int

    def to_dict(self) -> dict:
        return {"type": self.type, "value": self.value, "amount": self.amount, "percentage": self.percentage}


@dataclass
class PricingQuote:
    package_id: str
    package_name: str
    currency: str
    travelers: Travelers
    date_range: DateRange
    base_pricing: BasePricing
    hotel_pricing: list[StayPricing]
    hotel_summary: dict
    package_cost: float
    hotel_cost: float
    grand_total: float
    final_total: float
    price_per_person: int
    pricing_mode: str
    discount: DiscountResult | None = None
    errors: list[str] = field(default_factory=list)

    def _breakdown(self) -> dict:
        if self.pricing_mode == PRICING_MODE_LIVE_HOTEL:
            tiers = {
                name: TierPrice(count=tier.count, price_per_person=0, total=0).to_dict()
                for name, tier in (
                    ("adults", self.base_pricing.adults),
                    ("children", self.base_pricing.children),
                    ("infants", self.base_pricing.infants),
                )
            }
        else:
            tiers = {
                "adults": self.base_pricing.adults.to_dict(),
                "children": self.base_pricing.children.to_dict(),
                "infants": self.base_pricing.infants.to_dict(),
            }
        return {**tiers, "hotels": self.hotel_cost}

    def to_dict(self) -> dict:
        return {
            "package_id": self.package_id,
            "package_name": self.package_name,
            "currency": self.currency,
            "date_range": self.date_range.to_dict(),
            "travelers": self.travelers.to_dict(),
            "pricing": {
                "base_pricing": self.base_pricing.to_dict(),
                "hotel_pricing": self.hotel_summary,
                "total_pricing": {
                    "package_cost": self.package_cost,
                    "hotel_cost": self.hotel_cost,
                    "grand_total": self.grand_total,
                    "currency": self.currency,
                    "price_per_person": self.price_per_person,
                    "pricing_mode": self.pricing_mode,
                    "breakdown": self._breakdown(),
                    "discount": self.discount.to_dict() if self.discount else None,
                    "final_total": self.final_total,
                },
            },
            "hotels": [stay.to_dict() for stay in self.hotel_pricing],
            "errors": list(self.errors),
        }


# ─── Pure helpers ───


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def allocate_rooms(adults: int, children: int) -> list[RoomOccupancy]:
    """Greedy allocation: each room takes up to 2 adults and up to 2 children."""
    rooms = []
    remaining_adults, remaining_children = adults, children
    while remaining_adults > 0 or remaining_children > 0:
        room = RoomOccupancy(
            adults=min(MAX_ADULTS_PER_ROOM, remaining_adults),
            children=min(MAX_CHILDREN_PER_ROOM, remaining_children),
        )
        rooms.append(room)
        remaining_adults -= room.adults
        remaining_children -= room.children
    return rooms


def stay_dates(package_start: date, day_offset: int, nights: int) -> tuple[date, date]:
    """Check-in on 1-based ``day_offset`` of the package, check-out ``nights`` later."""
    check_in = package_start + timedelta(days=day_offset - 1)
    return check_in, check_in + timedelta(days=nights)


def calculate_package_discount(grand_total: float, discount_type: str, discount_value: float) -> DiscountResult:
    """Discount amount, never negative and never above ``grand_total``."""
    amount: float = 0
    if discount_type == DISCOUNT_PERCENTAGE:
        amount = round_half_up(grand_total * (discount_value / 100))
    elif discount_type == DISCOUNT_FIXED:
        amount = min(discount_value, grand_total)
    else:
        logger.warning(f"Unknown discount type '{discount_type}' ignored")

    amount = min(max(amount, 0), max(grand_total, 0))
    percentage = round_half_up(amount / grand_total * 100) if grand_total > 0 else 0
    return DiscountResult(type=discount_type, value=discount_value, amount=amount, percentage=percentage)


def _validate_travelers(travelers: Travelers):
    if min(travelers.adults, travelers.children, travelers.infants) < 0:
        raise ValidationError("Traveler counts cannot be negative")
    if travelers.total == 0:
        raise ValidationError("At least one traveler is required")


class PackagePricingEngine:
    """Computes currency-normalized package quotes from catalog, supplier and rate services."""

    def __init__(
        self,
        repository: CatalogRepository,
        live_pricing: LivePricingResolver,
        currency: CurrencyService,
        child_price_ratio: float | None = None,
        infant_price_ratio: float | None = None,
        default_nightly_estimate: float | None = None,
        max_compare_configurations: int | None = None,
        fallback_rates: dict[str, float] | None = None,
    ):
        self._repo = repository
        self._live = live_pricing
        self._currency = currency
        self._child_ratio = child_price_ratio if child_price_ratio is not None else settings.child_price_ratio
        self._infant_ratio = infant_price_ratio if infant_price_ratio is not None else settings.infant_price_ratio
        self._default_nightly = default_nightly_estimate or settings.default_hotel_nightly_estimate
        self._max_configurations = max_compare_configurations or settings.max_compare_configurations
        self._fallback_rates = fallback_rates or {
            **FALLBACK_RATES_FROM_USD,
            "SAR": settings.fallback_usd_sar_rate,
        }

    async def _convert(self, amount: float, from_currency: str, to_currency: str) -> float:
        if from_currency == to_currency:
            return amount
        try:
            converted = await self._currency.convert(amount, from_currency, to_currency)
        except Exception as e:
            logger.error(f"Currency conversion error ({from_currency}→{to_currency}), using fallback rate: {e}")
            converted = cross_convert(amount, from_currency, to_currency, self._fallback_rates)
        logger.debug(f"Converted {amount} {from_currency} = {converted} {to_currency}")
        return converted

    async def _load_package(self, package_id: str) -> PackageDefinition:
        package = await self._repo.get_package(package_id)
        if package is None:
            raise NotFoundError("Package not found")
        return package

    # ─── Base pricing ───

    async def calculate_base_pricing(
        self, package: PackageDefinition, travelers: Travelers, target_currency: str
    ) -> BasePricing:
        """Per-tier prices; child and infant default to a share of the adult price."""
        adult_price = package.price_adult or 0
        child_price = package.price_child or adult_price * self._child_ratio
        infant_price = package.price_infant or adult_price * self._infant_ratio

        adult_price = await self._convert(adult_price, package.currency, target_currency)
        child_price = await self._convert(child_price, package.currency, target_currency)
        infant_price = await self._convert(infant_price, package.currency, target_currency)

        adults = TierPrice(travelers.adults, adult_price, travelers.adults * adult_price)
        children = TierPrice(travelers.children, child_price, travelers.children * child_price)
        infants = TierPrice(travelers.infants, infant_price, travelers.infants * infant_price)

        return BasePricing(
            adults=adults,
            children=children,
            infants=infants,
            total=round(adults.total + children.total + infants.total, 2),
            currency=target_currency,
        )

    # ─── Hotel pricing ───

    async def _live_stay_pricing(
        self,
        hotel: InternalHotel,
        stay: PackageHotelStay,
        live: LivePricingResult,
        rooms: list[RoomOccupancy],
        check_in: date,
        check_out: date,
        target_currency: str,
    ) -> StayPricing:
        cheapest = live.cheapest_room
        original_total = cheapest.price * len(rooms)
        total = round(await self._convert(original_total, live.currency, target_currency), 2)
        return StayPricing(
            hotel_id=hotel.id,
            hotel_name=hotel.name,
            nights=stay.nights,
            mode=MODE_LIVE,
            price_per_night=round(total / stay.nights / len(rooms), 2),
            total_price=total,
            currency=target_currency,
            rooms_count=len(rooms),
            check_in=check_in,
            check_out=check_out,
            original_currency=live.currency,
            original_price=original_total,
            room_details=cheapest,
        )

    async def _static_stay_pricing(
        self,
        hotel: InternalHotel,
        stay: PackageHotelStay,
        package_currency: str,
        rooms: list[RoomOccupancy],
        check_in: date,
        check_out: date,
        target_currency: str,
    ) -> StayPricing:
        if stay.static_price_per_night:
            price_per_night, source_currency = stay.static_price_per_night, package_currency
        else:
            price_per_night, source_currency = hotel.base_price or 0, hotel.currency

        original_total = price_per_night * stay.nights * len(rooms)
        total = round(await self._convert(original_total, source_currency, target_currency), 2)
        return StayPricing(
            hotel_id=hotel.id,
            hotel_name=hotel.name,
            nights=stay.nights,
            mode=MODE_STATIC,
            price_per_night=round(total / stay.nights / len(rooms), 2),
            total_price=total,
            currency=target_currency,
            rooms_count=len(rooms),
            check_in=check_in,
            check_out=check_out,
            original_currency=source_currency,
            original_price=original_total,
        )

    async def _price_stay(
        self,
        stay: PackageHotelStay,
        package_currency: str,
        start_date: date,
        rooms: list[RoomOccupancy],
        target_currency: str,
    ) -> StayPricing:
        """Price one stay live-first, falling back to the static rate."""
        if stay.nights < 1 or stay.check_in_day_offset < 1:
            raise PartialFailure(stay.hotel_id, f"Invalid stay for hotel {stay.hotel_id}: nights and day offset must be >= 1")

        hotel = await self._repo.get_hotel(stay.hotel_id)
        if hotel is None:
            raise PartialFailure(stay.hotel_id, f"Hotel not found: {stay.hotel_id}")

        check_in, check_out = stay_dates(start_date, stay.check_in_day_offset, stay.nights)

        live_error = None
        if hotel.supplier_link.live_pricing_ready:
            try:
                live = await self._live.get_live_pricing(
                    hotel, LivePricingRequest(check_in=check_in, check_out=check_out, rooms=rooms)
                )
                if live.available:
                    return await self._live_stay_pricing(
                        hotel, stay, live, rooms, check_in, check_out, target_currency
                    )
                live_error = live.message or "No availability from live pricing"
            except SupplierError as e:
                live_error = str(e)
            logger.warning(
                f"Live pricing failed for hotel {hotel.id}, falling back to static pricing: {live_error}"
            )

        pricing = await self._static_stay_pricing(
            hotel, stay, package_currency, rooms, check_in, check_out, target_currency
        )
        pricing.live_error = live_error
        return pricing

    async def calculate_hotel_pricing(
        self,
        stays: list[PackageHotelStay],
        package_currency: str,
        date_range: DateRange,
        travelers: Travelers,
        target_currency: str,
    ) -> HotelPricingResult:
        """Price every stay in order; a failing stay never aborts the others."""
        if not date_range.is_complete:
            raise ValidationError("Check-in and check-out dates are required for hotel pricing")
        if date_range.end_date < date_range.start_date:
            raise ValidationError("End date cannot be before start date")

        rooms = allocate_rooms(travelers.adults, travelers.children)

        outcomes: list[StayOutcome] = []
        for stay in stays:
            if not rooms:
                failure = PartialFailure(
                    stay.hotel_id,
                    f"No room can be allocated for hotel {stay.hotel_id}: at least one adult or child is required",
                )
                logger.warning(str(failure))
                outcomes.append(StayOutcome(hotel_id=stay.hotel_id, error=str(failure)))
                continue
            try:
                pricing = await self._price_stay(
                    stay, package_currency, date_range.start_date, rooms, target_currency
                )
                outcomes.append(StayOutcome(hotel_id=stay.hotel_id, pricing=pricing))
            except PartialFailure as e:
                logger.warning(str(e))
                outcomes.append(StayOutcome(hotel_id=stay.hotel_id, error=str(e)))
            except Exception as e:
                logger.error(f"Error pricing hotel {stay.hotel_id}: {e}")
                outcomes.append(StayOutcome(hotel_id=stay.hotel_id, error=f"Failed to price hotel: {e}"))

        priced = [o.pricing for o in outcomes if o.ok]
        errors = [o.error for o in outcomes if not o.ok]
        total_cost = round(sum(p.total_price for p in priced), 2)
        total_nights = sum(p.nights for p in priced)

        summary = {
            "total_hotels": len(stays),
            "priced_hotels": len(priced),
            "total_cost": total_cost,
            "average_price_per_night": round_half_up(total_cost / total_nights) if total_nights else 0,
            "live_pricing_count": sum(1 for p in priced if p.is_live),
            "static_pricing_count": sum(1 for p in priced if not p.is_live),
        }
        return HotelPricingResult(stays=priced, errors=errors, total_cost=total_cost, summary=summary)

    # ─── Quotes ───

    async def calculate_package_pricing(self, package_id: str, request: PricingRequest) -> PricingQuote:
        """Full quote for a package, travelers and dates."""
        travelers = request.travelers
        _validate_travelers(travelers)
        target_currency = request.currency or settings.default_currency

        package = await self._load_package(package_id)
        base = await self.calculate_base_pricing(package, travelers, target_currency)

        hotels = HotelPricingResult(stays=[], errors=[], total_cost=0, summary={})
        if package.hotel_stays:
            hotels = await self.calculate_hotel_pricing(
                package.hotel_stays, package.currency, request.date_range, travelers, target_currency
            )

        # Live hotel rates supersede the package's base price, but only when they price to something
        has_live = any(stay.is_live for stay in hotels.stays) and hotels.total_cost > 0
        if has_live:
            grand_total = hotels.total_cost
            pricing_mode = PRICING_MODE_LIVE_HOTEL
        else:
            grand_total = round(base.total + hotels.total_cost, 2)
            pricing_mode = PRICING_MODE_TRADITIONAL
        logger.info(f"Package {package_id}: {pricing_mode} pricing, grand total {grand_total} {target_currency}")

        discount = None
        final_total = grand_total
        if package.discount_type and package.discount_value:
            value = package.discount_value
            if package.discount_type == DISCOUNT_FIXED:
                value = await self._convert(value, package.currency, target_currency)
            discount = calculate_package_discount(grand_total, package.discount_type, value)
            final_total = round(grand_total - discount.amount, 2)

        return PricingQuote(
            package_id=package.id,
            package_name=package.title,
            currency=target_currency,
            travelers=travelers,
            date_range=request.date_range,
            base_pricing=base,
            hotel_pricing=hotels.stays,
            hotel_summary=hotels.summary,
            package_cost=0 if has_live else base.total,
            hotel_cost=hotels.total_cost,
            grand_total=grand_total,
            final_total=final_total,
            price_per_person=math.ceil(final_total / travelers.total),
            pricing_mode=pricing_mode,
            discount=discount,
            errors=hotels.errors,
        )

    async def get_quick_pricing_estimate(
        self, package_id: str, travelers: Travelers, currency: str | None = None
    ) -> dict:
        """Estimate without supplier calls, using the package's average nightly hotel price."""
        _validate_travelers(travelers)
        package = await self._load_package(package_id)
        target_currency = currency or package.currency

        base = await self.calculate_base_pricing(package, travelers, target_currency)

        estimated_hotel_cost = 0.0
        if package.hotel_stays:
            nightly = package.average_hotel_price or self._default_nightly
            nights = (
                package.total_hotel_nights
                or package.duration
                or sum(stay.nights for stay in package.hotel_stays)
            )
            rooms = allocate_rooms(travelers.adults, travelers.children)
            estimated_hotel_cost = await self._convert(
                nightly * nights * len(rooms), package.currency, target_currency
            )

        grand_total = round(base.total + estimated_hotel_cost, 2)
        return {
            "package_id": package.id,
            "estimate": True,
            "base_cost": base.total,
            "estimated_hotel_cost": round(estimated_hotel_cost, 2),
            "grand_total": grand_total,
            "price_per_person": math.ceil(grand_total / travelers.total),
            "currency": target_currency,
        }

    async def compare_configurations(
        self,
        package_id: str,
        configurations: list[Travelers],
        date_range: DateRange,
        currency: str | None = None,
    ) -> dict:
        """Price several traveler mixes and recommend the cheapest per person."""
        if not configurations:
            raise ValidationError("At least one traveler configuration is required")
        if len(configurations) > self._max_configurations:
            raise ValidationError(
                f"Maximum {self._max_configurations} configurations can be compared at once"
            )
        await self._load_package(package_id)

        comparisons = []
        for index, travelers in enumerate(configurations):
            try:
                if date_range.is_complete:
                    quote = await self.calculate_package_pricing(
                        package_id, PricingRequest(travelers=travelers, date_range=date_range, currency=currency)
                    )
                    pricing = {
                        "total": quote.final_total,
                        "per_person": quote.price_per_person,
                        "currency": quote.currency,
                    }
                else:
                    estimate = await self.get_quick_pricing_estimate(package_id, travelers, currency)
                    pricing = {
                        "total": estimate["grand_total"],
                        "per_person": estimate["price_per_person"],
                        "currency": estimate["currency"],
                    }
                comparisons.append({"config_index": index, "travelers": travelers.to_dict(), "pricing": pricing})
            except TrippatError as e:
                logger.warning(f"Configuration {index} for package {package_id} failed: {e}")
                comparisons.append({"config_index": index, "travelers": travelers.to_dict(), "error": str(e)})

        priced = [c for c in comparisons if "error" not in c]
        recommended = min(priced, key=lambda c: c["pricing"]["per_person"], default=None)
        return {"package_id": package_id, "comparisons": comparisons, "recommended_config": recommended}
