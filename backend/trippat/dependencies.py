"""FastAPI dependency providers — wires repositories, supplier client and pricing services."""

from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from trippat.database import get_db
from trippat.services.catalog_repository import CatalogRepository, SqlCatalogRepository
from trippat.services.currency_service import CurrencyService
from trippat.services.errors import NotFoundError, SupplierError, TrippatError, ValidationError
from trippat.services.hotel_matcher import HotelMatcher
from trippat.services.hotel_sync_service import HotelSyncService
from trippat.services.live_pricing import LivePricingResolver
from trippat.services.package_pricing_service import PackagePricingEngine
from trippat.services.supplier_client import SupplierClient

# Process-wide; both hold an HTTP connection pool and the currency service holds the rate cache
supplier_client = SupplierClient()
currency_service = CurrencyService()


def get_supplier_client() -> SupplierClient:
    return supplier_client


def get_currency_service() -> CurrencyService:
    return currency_service


async def get_catalog_repository(db: AsyncSession = Depends(get_db)) -> CatalogRepository:
    return SqlCatalogRepository(db)


def get_hotel_matcher(supplier: SupplierClient = Depends(get_supplier_client)) -> HotelMatcher:
    return HotelMatcher(supplier)


def get_live_pricing_resolver(
    supplier: SupplierClient = Depends(get_supplier_client),
) -> LivePricingResolver:
    return LivePricingResolver(supplier)


def get_hotel_sync_service(
    repository: CatalogRepository = Depends(get_catalog_repository),
    supplier: SupplierClient = Depends(get_supplier_client),
) -> HotelSyncService:
    return HotelSyncService(repository, supplier)


def get_pricing_engine(
    repository: CatalogRepository = Depends(get_catalog_repository),
    resolver: LivePricingResolver = Depends(get_live_pricing_resolver),
    currency: CurrencyService = Depends(get_currency_service),
) -> PackagePricingEngine:
    return PackagePricingEngine(repository, resolver, currency)


def to_http_exception(error: TrippatError) -> HTTPException:
    """Map a service error onto the HTTP status routers return."""
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, ValidationError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, SupplierError):
        return HTTPException(status_code=502, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


async def close_shared_clients():
    await supplier_client.close()
    await currency_service.close()
