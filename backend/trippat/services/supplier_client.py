"""Hotel supplier API client — adapter for city/hotel inventory and live rate search."""

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from trippat.config import settings
from trippat.services.catalog_models import Coordinates
from trippat.services.errors import (
    SupplierAuthError,
    SupplierError,
    SupplierRateLimitError,
    SupplierTransportError,
)

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    400: "Invalid request parameters",
    401: "Invalid supplier credentials",
    404: "Supplier endpoint not found",
    429: "Supplier rate limit exceeded",
    500: "Supplier server error",
}

# Search status the supplier uses for "no rooms for the given criteria"
STATUS_NO_AVAILABILITY = 201

STAR_WORDS = {"one": 1, "two": 2, "three": 3, "four": 4, "five": 5}


@dataclass
class SupplierCity:
    code: str
    name: str


@dataclass
class SupplierHotelRecord:
    """Read-only snapshot of a supplier hotel."""
    supplier_code: str
    name: str
    city_code: str | None = None
    country_code: str | None = None
    star_rating: float | None = None
    address: str | None = None
    description: str | None = None
    coordinates: Coordinates | None = None
    amenities: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "supplier_code": self.supplier_code,
            "name": self.name,
            "city_code": self.city_code,
            "country_code": self.country_code,
            "star_rating": self.star_rating,
            "address": self.address,
            "description": self.description,
            "coordinates": {
                "latitude": self.coordinates.latitude,
                "longitude": self.coordinates.longitude,
            } if self.coordinates else None,
            "amenities": list(self.amenities),
            "images": list(self.images),
        }


@dataclass
class SupplierHotelDetails:
    supplier_code: str
    description: str | None = None
    star_rating: float | None = None
    amenities: list[str] = field(default_factory=list)
    coordinates: Coordinates | None = None


@dataclass
class SupplierSearchResult:
    hotels: list[dict]
    search_id: str | None = None
    status: dict | None = None


def parse_star_rating(value: Any) -> float | None:
    """Parse supplier star ratings given as numbers, "4", "4.5" or "FourStar"."""
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return float(value) if value > 0 else None
    text = str(value).strip().lower()
    try:
        rating = float(text)
        return rating if rating > 0 else None
    except ValueError:
        pass
    for word, stars in STAR_WORDS.items():
        if text.startswith(word):
            return float(stars)
    return None


def parse_coordinates(raw: Any) -> Coordinates | None:
    """Parse ``{"Latitude": .., "Longitude": ..}`` or a ``"lat|lng"`` map string."""
    if not raw:
        return None
    try:
        if isinstance(raw, dict):
            lat = raw.get("Latitude", raw.get("latitude"))
            lng = raw.get("Longitude", raw.get("longitude"))
            if lat in (None, "") or lng in (None, ""):
                return None
            return Coordinates(latitude=float(lat), longitude=float(lng))
        if isinstance(raw, str) and "|" in raw:
            lat, lng = raw.split("|", 1)
            return Coordinates(latitude=float(lat), longitude=float(lng))
    except (TypeError, ValueError):
        logger.debug(f"Unparseable supplier coordinates: {raw!r}")
    return None


def parse_hotel_record(hotel: dict) -> SupplierHotelRecord:
    """Map a hotel-list entry into a SupplierHotelRecord."""
    return SupplierHotelRecord(
        supplier_code=str(hotel.get("HotelCode", "")),
        name=hotel.get("HotelName") or "",
        city_code=str(hotel["CityId"]) if hotel.get("CityId") is not None else None,
        country_code=hotel.get("CountryCode"),
        star_rating=parse_star_rating(hotel.get("StarRating", hotel.get("HotelRating"))),
        address=hotel.get("Address"),
        description=hotel.get("Description"),
        coordinates=parse_coordinates(hotel.get("GeoLocation") or hotel.get("Map")),
        amenities=list(hotel.get("Amenities") or hotel.get("HotelFacilities") or []),
        images=list(hotel.get("Images") or []),
    )


class SupplierClient:
    """Adapter for the supplier's hotel JSON API (basic auth, POST payloads)."""

    def __init__(
        self,
        base_url: str | None = None,
        username: str | None = None,
        password: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url or settings.supplier_base_url
        self._username = username if username is not None else settings.supplier_username
        self._password = password if password is not None else settings.supplier_password
        self._timeout = timeout or settings.supplier_timeout_seconds
        self._client = http_client

        if not self._username or not self._password:
            logger.warning("Supplier credentials not configured")

    @property
    def has_credentials(self) -> bool:
        return bool(self._username and self._password)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                auth=(self._username, self._password),
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def _request(self, method: str, endpoint: str, payload: dict | None = None) -> dict:
        client = await self._get_client()
        logger.debug(f"Supplier request: {method} {endpoint}")
        try:
            if method == "GET":
                resp = await client.get(endpoint)
            else:
                resp = await client.post(endpoint, json=payload or {})
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._map_status_error(e.response) from e
        except httpx.RequestError as e:
            logger.error(f"Supplier connection error on {endpoint}: {e}")
            raise SupplierTransportError(f"Supplier connection error: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            logger.error(f"Supplier returned a non-JSON body on {endpoint}: {e}")
            raise SupplierError(f"Invalid supplier response from {endpoint}: {e}") from e
        if not isinstance(data, dict):
            raise SupplierError(f"Unexpected supplier response type: {type(data).__name__}")
        return data

    @staticmethod
    def _map_status_error(response: httpx.Response) -> SupplierError:
        status = response.status_code
        description = None
        try:
            body = response.json()
            if isinstance(body, dict):
                description = body.get("Description") or (body.get("Status") or {}).get("Description")
        except ValueError:
            pass
        message = STATUS_MESSAGES.get(status) or description or "Supplier API error"
        logger.error(f"Supplier API error {status}: {message}")

        if status == 401:
            return SupplierAuthError(message, status_code=status)
        if status == 429:
            return SupplierRateLimitError(message, status_code=status)
        return SupplierError(message, status_code=status)

    def _require_credentials(self):
        if not self.has_credentials:
            raise SupplierAuthError("Supplier credentials not configured")

    async def search_hotels(
        self,
        check_in: str,
        check_out: str,
        hotel_codes: str,
        pax_rooms: list[dict],
        guest_nationality: str | None = None,
        response_time: int = 23,
        is_detailed_response: bool = False,
        filters: dict | None = None,
    ) -> SupplierSearchResult:
        """Search live rates for one or more supplier hotel codes."""
        filters = filters or {}
        payload = {
            "CheckIn": check_in,
            "CheckOut": check_out,
            "HotelCodes": hotel_codes,
            "GuestNationality": guest_nationality or settings.supplier_guest_nationality,
            "PaxRooms": pax_rooms,
            "ResponseTime": response_time,
            "IsDetailedResponse": is_detailed_response,
            "Filters": {
                "Refundable": filters.get("refundable", False),
                "NoOfRooms": filters.get("no_of_rooms", 0),
                "MealType": filters.get("meal_type", "All"),
            },
        }

        data = await self._request("POST", "/Search", payload)
        status = data.get("Status") or {}
        code = status.get("Code")
        if code == STATUS_NO_AVAILABILITY:
            return SupplierSearchResult(hotels=[], status=status)
        if code != 200:
            raise SupplierError(status.get("Description") or "Search failed", status_code=code)

        return SupplierSearchResult(
            hotels=data.get("HotelResult") or [],
            search_id=data.get("SearchId") or data.get("TraceId"),
            status=status,
        )

    async def get_country_list(self) -> list[dict]:
        data = await self._request("GET", "/CountryList")
        return data.get("CountryList") or []

    async def get_city_list(self, country_code: str) -> list[SupplierCity]:
        """List supplier cities for an ISO country code."""
        self._require_credentials()
        data = await self._request("POST", "/CityList", {"CountryCode": country_code})
        return [
            SupplierCity(code=str(c.get("Code", "")), name=c.get("Name") or "")
            for c in data.get("CityList") or []
        ]

    async def get_hotels_by_city(
        self, city_code: str, is_detailed_response: bool = False
    ) -> list[SupplierHotelRecord]:
        """List supplier hotels registered under one city code."""
        self._require_credentials()
        data = await self._request(
            "POST",
            "/TBOHotelCodeList",
            {"CityCode": str(city_code), "IsDetailedResponse": is_detailed_response},
        )
        return [parse_hotel_record(h) for h in data.get("Hotels") or []]

    async def get_hotel_details(
        self, hotel_code: str, language: str = "EN"
    ) -> SupplierHotelDetails | None:
        data = await self._request(
            "POST", "/HotelDetails", {"Hotelcodes": hotel_code, "Language": language}
        )
        details = data.get("HotelDetails") or []
        if not details:
            return None

        raw = details[0]
        return SupplierHotelDetails(
            supplier_code=str(raw.get("HotelCode", hotel_code)),
            description=raw.get("Description"),
            star_rating=parse_star_rating(raw.get("HotelRating", raw.get("StarRating"))),
            amenities=list(raw.get("HotelFacilities") or raw.get("Amenities") or []),
            coordinates=parse_coordinates(raw.get("GeoLocation") or raw.get("Map")),
        )

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None
