"""Hotel matcher — resolves supplier cities and scores supplier hotels against catalog hotels."""

import logging
import math
from dataclasses import dataclass

from trippat.config import settings
from trippat.data.city_clusters import cluster_aliases
from trippat.services.catalog_models import Coordinates, InternalHotel
from trippat.services.errors import NotFoundError, SupplierError
from trippat.services.supplier_client import SupplierCity, SupplierClient, SupplierHotelRecord

logger = logging.getLogger(__name__)

# Scoring weights
WEIGHT_NAME = 0.4
WEIGHT_STARS = 0.2
WEIGHT_GEO = 0.3
WEIGHT_ADDRESS = 0.1

EARTH_RADIUS_KM = 6371.0
MAX_SAMPLE_CITIES = 10


@dataclass
class MatchCandidate:
    supplier_record: SupplierHotelRecord
    match_score: float

    def to_dict(self) -> dict:
        return {**self.supplier_record.to_dict(), "match_score": round(self.match_score, 4)}


def levenshtein(a: str, b: str) -> int:
    """Edit distance with unit cost for insert, delete and substitute."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            if ca == cb:
                current.append(previous[j - 1])
            else:
                current.append(1 + min(previous[j - 1], previous[j], current[j - 1]))
        previous = current
    return previous[-1]


def string_similarity(a: str, b: str) -> float:
    """1 - levenshtein / longer length, over lower-cased text."""
    a, b = a.lower(), b.lower()
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein(a, b) / longest


def haversine_km(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance in kilometres."""
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.latitude))
        * math.cos(math.radians(b.latitude))
        * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def geo_proximity_score(distance_km: float, cutoff_km: float = 50.0) -> float:
    """1.0 at zero distance, decaying linearly to 0.0 at ``cutoff_km``."""
    return max(0.0, (cutoff_km - distance_km) / cutoff_km)


class HotelMatcher:
    """Finds supplier hotels that are likely the same property as a catalog hotel."""

    def __init__(
        self,
        supplier: SupplierClient,
        threshold: float | None = None,
        max_results: int | None = None,
        geo_cutoff_km: float | None = None,
        default_country_code: str | None = None,
    ):
        self._supplier = supplier
        self._threshold = threshold if threshold is not None else settings.match_threshold
        self._max_results = max_results or settings.max_match_results
        self._geo_cutoff_km = geo_cutoff_km or settings.geo_cutoff_km
        self._default_country = default_country_code or settings.default_country_code

    def resolve_cities(self, city_name: str, cities: list[SupplierCity]) -> list[SupplierCity]:
        """Pick the supplier cities a free-text city name refers to.

        Known clusters (a resort or metro split across many supplier codes)
        expand to every sub-area; otherwise an exact case-insensitive name
        match wins, then containment in either direction.
        """
        query = city_name.strip().lower()

        aliases = cluster_aliases(query)
        if aliases:
            clustered = [c for c in cities if any(alias in c.name.lower() for alias in aliases)]
            if clustered:
                logger.info(
                    f"Cluster '{city_name}' resolved to {len(clustered)} supplier cities: "
                    f"{', '.join(c.name for c in clustered)}"
                )
                return clustered

        exact = [c for c in cities if c.name.lower() == query]
        if exact:
            return exact[:1]

        return [
            c for c in cities
            if c.name and (query in c.name.lower() or c.name.lower() in query)
        ]

    async def search_supplier_hotels(
        self, city_name: str, country_code: str | None = None
    ) -> list[SupplierHotelRecord]:
        """Fetch supplier hotels for every city the name resolves to.

        Overlapping cities are not de-duplicated.
        """
        country_code = country_code or self._default_country
        logger.info(f"Searching supplier hotels in {city_name}, {country_code}")

        cities = await self._supplier.get_city_list(country_code)
        matching = self.resolve_cities(city_name, cities)
        if not matching:
            sample = ", ".join(c.name for c in cities[:MAX_SAMPLE_CITIES])
            raise NotFoundError(
                f'City "{city_name}" not found in supplier locations for country '
                f"{country_code}. Available cities: {sample}"
            )

        hotels: list[SupplierHotelRecord] = []
        for city in matching:
            try:
                hotels.extend(await self._supplier.get_hotels_by_city(city.code))
            except SupplierError as e:
                logger.warning(f"Failed to get hotels for city {city.name}: {e}")

        logger.info(f"Found {len(hotels)} supplier hotels across {len(matching)} cities")
        return hotels

    async def find_candidates(
        self,
        hotel: InternalHotel,
        city_name: str | None = None,
        country_code: str | None = None,
    ) -> list[MatchCandidate]:
        """Score supplier hotels near ``hotel`` and return the best matches above threshold."""
        supplier_hotels = await self.search_supplier_hotels(
            city_name or hotel.location.city,
            country_code or hotel.location.country_code,
        )

        candidates = [
            MatchCandidate(supplier_record=record, match_score=self.score_only(hotel, record))
            for record in supplier_hotels
        ]
        candidates = [c for c in candidates if c.match_score > self._threshold]
        candidates.sort(key=lambda c: c.match_score, reverse=True)
        return candidates[: self._max_results]

    def score_only(self, hotel: InternalHotel, supplier_hotel: SupplierHotelRecord) -> float:
        """Weighted similarity in [0, 1]; absent inputs drop out of the denominator."""
        score = 0.0
        weights = 0.0

        score += string_similarity(hotel.name or "", supplier_hotel.name or "") * WEIGHT_NAME
        weights += WEIGHT_NAME

        if hotel.star_rating is not None and supplier_hotel.star_rating is not None:
            diff = abs(hotel.star_rating - supplier_hotel.star_rating)
            if diff == 0:
                score += WEIGHT_STARS
            elif diff <= 1:
                score += WEIGHT_STARS / 2
            weights += WEIGHT_STARS

        if hotel.location.coordinates and supplier_hotel.coordinates:
            distance = haversine_km(hotel.location.coordinates, supplier_hotel.coordinates)
            score += geo_proximity_score(distance, self._geo_cutoff_km) * WEIGHT_GEO
            weights += WEIGHT_GEO

        if hotel.location.address and supplier_hotel.address:
            score += string_similarity(hotel.location.address, supplier_hotel.address) * WEIGHT_ADDRESS
            weights += WEIGHT_ADDRESS

        if weights == 0:
            return 0.0
        return min(1.0, max(0.0, score / weights))
