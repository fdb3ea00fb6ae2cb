"""Catalog domain types — hotels, supplier links, and package definitions."""

from dataclasses import dataclass, field
from datetime import datetime

SYNC_NOT_LINKED = "not_linked"
SYNC_PENDING = "pending"
SYNC_SYNCED = "synced"
SYNC_FAILED = "failed"


@dataclass
class Coordinates:
    latitude: float
    longitude: float


@dataclass
class HotelLocation:
    city: str
    country_code: str | None = None
    address: str | None = None
    coordinates: Coordinates | None = None


@dataclass
class SupplierLink:
    """Association between an internal hotel and one supplier hotel code."""
    is_linked: bool = False
    supplier_hotel_code: str | None = None
    supplier_hotel_name: str | None = None
    supplier_city_code: str | None = None
    supplier_country_code: str | None = None
    live_pricing_enabled: bool = False
    sync_status: str = SYNC_NOT_LINKED
    last_sync_date: datetime | None = None
    synced_fields: list[str] = field(default_factory=list)
    last_error: str | None = None

    @property
    def live_pricing_ready(self) -> bool:
        return self.is_linked and self.live_pricing_enabled and bool(self.supplier_hotel_code)


@dataclass
class InternalHotel:
    id: str
    name: str
    location: HotelLocation
    star_rating: float | None = None
    currency: str = "SAR"
    base_price: float = 0.0
    description: str | None = None
    amenities: list[str] = field(default_factory=list)
    supplier_link: SupplierLink = field(default_factory=SupplierLink)


@dataclass
class PackageHotelStay:
    hotel_id: str
    nights: int = 1
    check_in_day_offset: int = 1  # 1-based day of the package
    static_price_per_night: float | None = None


@dataclass
class PackageDefinition:
    id: str
    title: str
    price_adult: float
    currency: str = "SAR"
    price_child: float | None = None
    price_infant: float | None = None
    discount_type: str | None = None  # percentage | fixed
    discount_value: float | None = None
    hotel_stays: list[PackageHotelStay] = field(default_factory=list)
    duration: int | None = None
    average_hotel_price: float | None = None
    total_hotel_nights: int | None = None
