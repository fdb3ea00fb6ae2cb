import copy
import os
import sys
import tempfile
from pathlib import Path

import pytest

# 1. Put backend/ on sys.path so `trippat` imports without installation
BACKEND_DIR = Path(__file__).resolve().parents[1] / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

# 2. Test environment, set before settings are imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SUPPLIER_USERNAME"] = "test_user"
os.environ["SUPPLIER_PASSWORD"] = "test_pass"
os.environ["SUPPLIER_BASE_URL"] = "http://supplier.test"
os.environ["CURRENCY_API_URL"] = "http://rates.test/latest/USD"
os.environ["LOG_DIR"] = str(Path(tempfile.gettempdir()) / "trippat-test-logs")

from trippat.data.currency import FALLBACK_RATES_FROM_USD, cross_convert
from trippat.services.catalog_models import InternalHotel, PackageDefinition
from trippat.services.errors import NotFoundError
from trippat.services.live_pricing import LivePricingResolver
from trippat.services.package_pricing_service import PackagePricingEngine
from trippat.services.supplier_client import SupplierClient, SupplierHotelRecord


class InMemoryCatalog:
    """CatalogRepository keeping copies of domain objects, like a real store would."""

    def __init__(self):
        self.hotels: dict[str, InternalHotel] = {}
        self.packages: dict[str, PackageDefinition] = {}
        self.supplier_cache: dict[str, dict] = {}
        self.fail_cache_writes = False

    def add_hotel(self, hotel: InternalHotel) -> InternalHotel:
        self.hotels[hotel.id] = copy.deepcopy(hotel)
        return hotel

    def add_package(self, package: PackageDefinition) -> PackageDefinition:
        self.packages[package.id] = copy.deepcopy(package)
        return package

    async def get_package(self, package_id: str) -> PackageDefinition | None:
        package = self.packages.get(package_id)
        return copy.deepcopy(package) if package else None

    async def get_hotel(self, hotel_id: str) -> InternalHotel | None:
        hotel = self.hotels.get(hotel_id)
        return copy.deepcopy(hotel) if hotel else None

    async def save_hotel(self, hotel: InternalHotel) -> None:
        if hotel.id not in self.hotels:
            raise NotFoundError(f"Hotel not found: {hotel.id}")
        self.hotels[hotel.id] = copy.deepcopy(hotel)

    async def upsert_supplier_hotel(self, record: SupplierHotelRecord) -> None:
        if self.fail_cache_writes:
            raise RuntimeError("cache unavailable")
        self.supplier_cache[record.supplier_code] = record.to_dict()

    async def get_supplier_hotel(self, hotel_code: str) -> dict | None:
        return self.supplier_cache.get(hotel_code)


class FakeCurrency:
    """Converter over the static fallback table; records every call."""

    def __init__(self, rates: dict[str, float] | None = None):
        self.rates = rates or dict(FALLBACK_RATES_FROM_USD)
        self.calls: list[tuple[float, str, str]] = []

    async def convert(self, amount: float, from_currency: str, to_currency: str) -> float:
        self.calls.append((amount, from_currency, to_currency))
        return cross_convert(amount, from_currency, to_currency, self.rates)


@pytest.fixture
def catalog():
    return InMemoryCatalog()


@pytest.fixture
def supplier(mocker):
    return mocker.AsyncMock(spec=SupplierClient)


@pytest.fixture
def currency():
    return FakeCurrency()


@pytest.fixture
def engine(catalog, supplier, currency):
    return PackagePricingEngine(
        catalog,
        LivePricingResolver(supplier, guest_nationality="AE", response_time=20),
        currency,
        child_price_ratio=0.7,
        infant_price_ratio=0.1,
        default_nightly_estimate=200,
        max_compare_configurations=5,
    )
