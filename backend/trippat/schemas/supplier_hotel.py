from datetime import date

from pydantic import BaseModel, Field

from trippat.services.catalog_models import Coordinates
from trippat.services.supplier_client import SupplierHotelRecord


class SupplierHotelIn(BaseModel):
    supplier_code: str
    name: str
    city_code: str | None = None
    country_code: str | None = None
    star_rating: float | None = None
    address: str | None = None
    description: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    amenities: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)

    def to_record(self) -> SupplierHotelRecord:
        coordinates = None
        if self.latitude is not None and self.longitude is not None:
            coordinates = Coordinates(latitude=self.latitude, longitude=self.longitude)
        return SupplierHotelRecord(
            supplier_code=self.supplier_code,
            name=self.name,
            city_code=self.city_code,
            country_code=self.country_code,
            star_rating=self.star_rating,
            address=self.address,
            description=self.description,
            coordinates=coordinates,
            amenities=list(self.amenities),
            images=list(self.images),
        )


class LinkHotelRequest(BaseModel):
    hotel_id: str
    supplier_hotel: SupplierHotelIn


class LivePricingToggle(BaseModel):
    enabled: bool


class SyncRequest(BaseModel):
    fields: list[str] | None = None


class RoomIn(BaseModel):
    adults: int = Field(2, ge=1)
    children: int = Field(0, ge=0)
    children_ages: list[int] = Field(default_factory=list)


class HotelPricingRequest(BaseModel):
    check_in: date
    check_out: date
    rooms: list[RoomIn] = Field(default_factory=lambda: [RoomIn()])
